"""Prompt composition: system persona, domain gate, and knowledge augmentation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from healthyai.chat.models import Message

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from healthyai.knowledge.models import RetrievalResult

SYSTEM_PROMPT = """You are HealthyAI, a helpful and knowledgeable health assistant designed to \
provide concise information about health topics.

IMPORTANT INSTRUCTIONS:
1. Keep your responses brief and to the point - aim for 1-3 short paragraphs maximum.
2. Use simple, clear language that anyone can understand.
3. Avoid lengthy explanations - be direct and concise.
4. When providing health information, balance being helpful with being concise.
5. Prioritize clarity over comprehensiveness.
6. Break responses into short bullet points when appropriate.

When providing health information:
- Be clear that you're not a doctor or medical professional
- Encourage users to seek professional medical advice for specific health concerns
- Avoid making definitive diagnoses or prescribing treatments
- Focus on evidence-based information from reliable sources
- Acknowledge limitations of your knowledge and be transparent when you're unsure

Your purpose is to help users understand general health concepts, lifestyle improvements, \
and wellness strategies in a clear, concise, and friendly manner."""

OUT_OF_DOMAIN_REPLY = (
    "I'm designed to answer health-related questions only. Could you please ask something "
    "about health, wellness, nutrition, fitness, or medical information?"
)

HEALTH_KEYWORDS: tuple[str, ...] = (
    "health", "medical", "medicine", "doctor", "nurse", "hospital", "clinic",
    "symptom", "disease", "condition", "treatment", "therapy", "diagnosis",
    "diet", "nutrition", "exercise", "fitness", "workout", "calories",
    "protein", "carbs", "fat", "vitamin", "mineral", "supplement",
    "sleep", "stress", "anxiety", "depression", "mental health",
    "blood pressure", "heart rate", "glucose", "cholesterol", "bmi",
    "weight", "body mass", "metabolism", "cardio", "strength training",
)  # fmt: skip

CONTEXT_MARKER = "[CONTEXT INFORMATION: This is for you to consider, not to repeat verbatim to the user]"
CONTEXT_HEADER = "Here is some relevant health information to consider when answering:"
CONTEXT_FOOTER = (
    "Please use this information to provide an accurate and helpful response "
    "to the user's question."
)


def is_health_related(text: str) -> bool:
    """True if *text* mentions any health keyword (case-insensitive substring)."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in HEALTH_KEYWORDS)


def build_context_block(results: Sequence[RetrievalResult]) -> str:
    """Format retrieved entries for injection into the outgoing user message."""
    if not results:
        return ""
    lines = [CONTEXT_HEADER, ""]
    for result in results:
        entry = result.entry
        lines.append(f"--- {entry.title} ---\n{entry.content}\nSource: {entry.sources}\n")
    lines.append(CONTEXT_FOOTER)
    return "\n".join(lines)


def augment_message(content: str, results: Sequence[RetrievalResult]) -> str:
    """Append the delimited knowledge context to *content*, if there is any."""
    block = build_context_block(results)
    if not block:
        return content
    return f"{content}\n\n{CONTEXT_MARKER}\n{block}"


def compose_messages(
    history: Iterable[Message],
    user_content: str,
    results: Sequence[RetrievalResult] = (),
) -> list[Message]:
    """Build the message list sent to the model.

    The stored history is never modified: the augmented user turn is a new
    ``Message`` appended to a copy. ``SYSTEM_PROMPT`` leads the list unless
    the conversation already carries a system message.
    """
    messages = list(history)
    messages.append(Message(role="user", content=augment_message(user_content, results)))
    if not any(m.role == "system" for m in messages):
        messages.insert(0, Message(role="system", content=SYSTEM_PROMPT))
    return messages
