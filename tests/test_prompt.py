"""Tests for prompt composition and the health-domain gate."""

from healthyai.chat.models import Message
from healthyai.knowledge.models import KnowledgeEntry, RetrievalResult
from healthyai.llm.prompt import (
    CONTEXT_MARKER,
    SYSTEM_PROMPT,
    augment_message,
    build_context_block,
    compose_messages,
    is_health_related,
)


def _result(title: str = "Water", content: str = "Drink water.", sources: str = "CDC"):
    entry = KnowledgeEntry(
        id="w", title=title, content=content, category="hydration", sources=sources
    )
    return RetrievalResult(entry=entry, score=10)


class TestDomainGate:
    def test_weather_is_out_of_domain(self):
        assert not is_health_related("What's the weather tomorrow?")

    def test_blood_pressure_is_health(self):
        assert is_health_related("What is a healthy blood pressure range?")

    def test_case_insensitive(self):
        assert is_health_related("My BMI is 24")
        assert is_health_related("CHOLESTEROL levels")

    def test_multi_word_keyword(self):
        assert is_health_related("tips for strength training")


class TestAugmentation:
    def test_no_results_leaves_message(self):
        assert augment_message("How much water?", []) == "How much water?"
        assert build_context_block([]) == ""

    def test_context_block_contains_entry(self):
        text = augment_message("How much water?", [_result()])
        assert text.startswith("How much water?\n\n" + CONTEXT_MARKER)
        assert "--- Water ---\nDrink water.\nSource: CDC" in text
        assert text.rstrip().endswith("to the user's question.")

    def test_multiple_entries_in_order(self):
        block = build_context_block([_result("First"), _result("Second")])
        assert block.index("--- First ---") < block.index("--- Second ---")


class TestCompose:
    def test_injects_system_prompt_first(self):
        history = [Message(role="assistant", content="Hello!")]
        out = compose_messages(history, "sleep tips")
        assert out[0] == Message(role="system", content=SYSTEM_PROMPT)
        assert out[-1] == Message(role="user", content="sleep tips")
        assert len(out) == 3

    def test_existing_system_message_kept(self):
        history = [Message(role="system", content="Custom persona")]
        out = compose_messages(history, "sleep tips")
        assert [m.role for m in out] == ["system", "user"]
        assert out[0].content == "Custom persona"

    def test_history_not_mutated(self):
        history = [Message(role="user", content="earlier question")]
        out = compose_messages(history, "diet question", [_result()])
        assert history == [Message(role="user", content="earlier question")]
        assert CONTEXT_MARKER in out[-1].content
