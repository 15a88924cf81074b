"""ChatEngine — the send pipeline from user text to stored reply.

user text → domain gate → store user turn → retrieve knowledge → compose
prompt → model → store reply (or an assistant-authored error message).
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING

from healthyai.chat.models import Message
from healthyai.config import settings
from healthyai.errors import SendInProgressError, SessionNotFoundError
from healthyai.knowledge.retrieval import find_relevant
from healthyai.llm.prompt import OUT_OF_DOMAIN_REPLY, compose_messages, is_health_related

if TYPE_CHECKING:
    from healthyai.chat.store import SessionStore
    from healthyai.knowledge.models import RetrievalResult
    from healthyai.knowledge.store import KnowledgeStore
    from healthyai.llm.client import OllamaClient
    from healthyai.llm.models import GenerateFailure

logger = logging.getLogger(__name__)


class SendState(enum.StrEnum):
    IDLE = "idle"
    SENDING = "sending"
    SUCCESS = "success"
    FAILED = "failed"


class ChatEngine:
    """Drives one send per session at a time.

    A second ``send_message`` for a session whose previous send is still
    in flight raises ``SendInProgressError``; sends for different sessions
    run independently.
    """

    def __init__(
        self,
        sessions: SessionStore,
        knowledge: KnowledgeStore,
        client: OllamaClient,
        *,
        use_knowledge: bool | None = None,
        top_k: int | None = None,
    ) -> None:
        self.sessions = sessions
        self.knowledge = knowledge
        self.client = client
        self.use_knowledge = settings.knowledge_enabled if use_knowledge is None else use_knowledge
        self.top_k = top_k or settings.retrieval_top_k
        self._states: dict[str, SendState] = {}
        self._failures: dict[str, GenerateFailure] = {}

    async def start(self) -> None:
        """Load persisted state and discover models."""
        await self.sessions.load()
        await self.knowledge.load()
        await self.client.refresh_models()

    def send_state(self, session_id: str) -> SendState:
        self._forget_deleted()
        return self._states.get(session_id, SendState.IDLE)

    def last_failure(self, session_id: str) -> GenerateFailure | None:
        """The most recent classified failure for a session, raw body included."""
        self._forget_deleted()
        return self._failures.get(session_id)

    def _forget_deleted(self) -> None:
        """Drop send bookkeeping for sessions that no longer exist."""
        live = {s.id for s in self.sessions.list_sessions()}
        for session_id in self._states.keys() - live:
            del self._states[session_id]
        for session_id in self._failures.keys() - live:
            del self._failures[session_id]

    async def refresh_knowledge(self) -> int:
        await self.knowledge.load()
        return len(self.knowledge)

    def retrieve(self, query: str) -> list[RetrievalResult]:
        if not self.use_knowledge:
            return []
        return find_relevant(query, self.knowledge.snapshot(), max_results=self.top_k)

    async def send_message(self, session_id: str, content: str) -> Message | None:
        """Run the full pipeline and return the assistant message stored.

        Returns None for blank input. Out-of-domain questions get a canned
        redirect without contacting the model.
        """
        if not content.strip():
            return None
        session = self.sessions.get(session_id)
        if self.send_state(session_id) is SendState.SENDING:
            raise SendInProgressError(session_id)

        user_msg = Message(role="user", content=content)
        if not is_health_related(content):
            logger.info("Out-of-domain question in %s; skipping model", session_id)
            reply = Message(role="assistant", content=OUT_OF_DOMAIN_REPLY)
            await self.sessions.append_messages(session_id, [user_msg, reply])
            return reply

        self._states[session_id] = SendState.SENDING
        try:
            history = list(session.messages)
            await self.sessions.append_messages(session_id, [user_msg])

            results = self.retrieve(content)
            if results:
                logger.info(
                    "Augmenting with %d knowledge entries: %s",
                    len(results),
                    ", ".join(r.entry.title for r in results),
                )
            outgoing = compose_messages(history, content, results)
            result = await self.client.send(outgoing)

            if result.success:
                reply = Message(role="assistant", content=result.text)
                self._failures.pop(session_id, None)
                self._states[session_id] = SendState.SUCCESS
            else:
                reply = Message(role="assistant", content=result.user_message())
                self._failures[session_id] = result
                self._states[session_id] = SendState.FAILED
            try:
                await self.sessions.append_messages(session_id, [reply])
            except SessionNotFoundError:
                logger.info("Session %s was deleted mid-send; dropping reply", session_id)
                self._states.pop(session_id, None)
                self._failures.pop(session_id, None)
                return None
            return reply
        except BaseException:
            self._states[session_id] = SendState.FAILED
            raise
