"""Data models for chat sessions and folders."""

import uuid
from datetime import UTC, datetime
from typing import Literal

from pydantic import AwareDatetime, BaseModel, Field

Role = Literal["user", "assistant", "system"]

DEFAULT_TITLE = "New Chat"
WELCOME_MESSAGE = "Hello! I'm your health assistant. How can I help you today?"


def _now() -> datetime:
    return datetime.now(UTC)


class Message(BaseModel):
    """A single conversation turn."""

    role: Role
    content: str

    def to_api(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


def welcome_message() -> Message:
    return Message(role="assistant", content=WELCOME_MESSAGE)


class ChatFolder(BaseModel):
    """A named, flat grouping of sessions."""

    id: str = Field(default_factory=lambda: f"folder_{uuid.uuid4().hex}")
    name: str
    created_at: AwareDatetime = Field(default_factory=_now)


class ChatSession(BaseModel):
    """One conversation thread.

    Attributes:
        id: Unique identifier (``chat_`` + UUID hex).
        title: ``DEFAULT_TITLE`` until derived from the first user message.
        messages: Ordered history. Always starts with the welcome greeting.
        created_at: Creation time; drives the recency buckets.
        updated_at: Bumped on every append; drives active-session selection.
        folder_id: Owning folder, or None for the unfiled list.
    """

    id: str = Field(default_factory=lambda: f"chat_{uuid.uuid4().hex}")
    title: str = DEFAULT_TITLE
    messages: list[Message] = Field(default_factory=lambda: [welcome_message()])
    created_at: AwareDatetime = Field(default_factory=_now)
    updated_at: AwareDatetime = Field(default_factory=_now)
    folder_id: str | None = None

    @property
    def has_default_title(self) -> bool:
        return self.title == DEFAULT_TITLE

    def to_api_messages(self) -> list[dict[str, str]]:
        return [m.to_api() for m in self.messages]


class SessionSnapshot(BaseModel):
    """The unit persisted under the sessions storage key."""

    sessions: list[ChatSession] = Field(default_factory=list)
    folders: list[ChatFolder] = Field(default_factory=list)
