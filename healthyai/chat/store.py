"""SessionStore — source of truth for chat sessions and folders.

Every mutation writes the whole ``{sessions, folders}`` snapshot through the
storage port. Writes of an unchanged snapshot are skipped, so persisting the
same state twice has no observable effect.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from healthyai.chat.grouping import SessionGroup, group_for_display
from healthyai.chat.models import (
    DEFAULT_TITLE,
    ChatFolder,
    ChatSession,
    Message,
    SessionSnapshot,
    welcome_message,
)
from healthyai.config import settings
from healthyai.errors import FolderNotFoundError, SessionNotFoundError, ValidationError
from healthyai.storage import SESSIONS_KEY

if TYPE_CHECKING:
    from collections.abc import Iterable

    from healthyai.storage import StoragePort

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 30
TITLE_ELLIPSIS = "..."


def generate_title(messages: Iterable[Message]) -> str:
    """Derive a session title from the first user message.

    Titles longer than ``TITLE_MAX_LENGTH`` are cut and get an ellipsis.
    Without a user message the default title is kept.
    """
    first_user = next((m for m in messages if m.role == "user"), None)
    if first_user is None:
        return DEFAULT_TITLE
    content = first_user.content
    if len(content) > TITLE_MAX_LENGTH:
        return content[:TITLE_MAX_LENGTH] + TITLE_ELLIPSIS
    return content


class SessionStore:
    """Owns all sessions and folders plus the active-session pointer.

    Call ``await load()`` once before use; it guarantees at least one
    session exists and picks the most recently updated one as active.
    """

    def __init__(self, storage: StoragePort) -> None:
        self._storage = storage
        self._sessions: dict[str, ChatSession] = {}
        self._folders: dict[str, ChatFolder] = {}
        self._active_id: str | None = None
        self._last_saved: str | None = None

    # -- Loading / saving ------------------------------------------------------

    async def load(self) -> None:
        """Restore state from storage, falling back to empty on corrupt data.

        Sessions filed under a folder that no longer exists are dropped, the
        same way ``delete_folder`` cascades.
        """
        snapshot = await self._read_snapshot()
        self._folders = {f.id: f for f in snapshot.folders}
        self._sessions = {}
        for session in snapshot.sessions:
            if session.folder_id is not None and session.folder_id not in self._folders:
                logger.warning(
                    "Session %s references missing folder %s; dropping it",
                    session.id,
                    session.folder_id,
                )
                continue
            self._sessions[session.id] = session

        if not self._sessions:
            session = ChatSession()
            self._sessions[session.id] = session
            self._active_id = session.id
            await self._persist()
        else:
            self._active_id = self._most_recent().id
        logger.info(
            "Loaded %d session(s), %d folder(s); active=%s",
            len(self._sessions),
            len(self._folders),
            self._active_id,
        )

    async def _read_snapshot(self) -> SessionSnapshot:
        try:
            raw = await self._storage.get(SESSIONS_KEY)
        except Exception:
            logger.exception("Failed to read chat history from storage")
            return SessionSnapshot()
        if not raw:
            return SessionSnapshot()
        try:
            snapshot = SessionSnapshot.model_validate_json(raw)
        except ValueError:
            logger.warning("Stored chat history is corrupt; starting empty", exc_info=True)
            return SessionSnapshot()
        self._last_saved = raw
        return snapshot

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            sessions=[s.model_copy(deep=True) for s in self._sessions.values()],
            folders=[f.model_copy() for f in self._folders.values()],
        )

    async def _persist(self) -> None:
        payload = self.snapshot().model_dump_json()
        if payload == self._last_saved:
            return
        try:
            await self._storage.set(SESSIONS_KEY, payload)
        except Exception:
            logger.exception("Failed to save chat history")
            return
        self._last_saved = payload

    # -- Reads -----------------------------------------------------------------

    @property
    def active_id(self) -> str | None:
        return self._active_id

    @property
    def active(self) -> ChatSession:
        if self._active_id is None:
            msg = "SessionStore.load() has not been called"
            raise SessionNotFoundError(msg)
        return self.get(self._active_id)

    def get(self, session_id: str) -> ChatSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def get_folder(self, folder_id: str) -> ChatFolder:
        try:
            return self._folders[folder_id]
        except KeyError:
            raise FolderNotFoundError(folder_id) from None

    def list_sessions(self) -> list[ChatSession]:
        return list(self._sessions.values())

    def list_folders(self) -> list[ChatFolder]:
        """All folders, oldest first."""
        return sorted(self._folders.values(), key=lambda f: f.created_at)

    def sessions_in_folder(self, folder_id: str) -> list[ChatSession]:
        """Sessions filed under *folder_id*, most recently updated first."""
        self.get_folder(folder_id)
        members = [s for s in self._sessions.values() if s.folder_id == folder_id]
        return sorted(members, key=lambda s: s.updated_at, reverse=True)

    def group_for_display(self, now: datetime | None = None) -> list[SessionGroup]:
        """Recency buckets of unfiled sessions, anchored to the display timezone."""
        now = now or datetime.now(ZoneInfo(settings.display_timezone))
        return group_for_display(self._sessions.values(), now)

    def _most_recent(self) -> ChatSession:
        return max(self._sessions.values(), key=lambda s: s.updated_at)

    # -- Sessions --------------------------------------------------------------

    async def create_session(self, folder_id: str | None = None) -> ChatSession:
        """Create a session with the welcome greeting and make it active."""
        if folder_id is not None:
            self.get_folder(folder_id)
        session = ChatSession(folder_id=folder_id)
        self._sessions[session.id] = session
        self._active_id = session.id
        logger.info("Created session %s (folder=%s)", session.id, folder_id)
        await self._persist()
        return session

    def select(self, session_id: str) -> ChatSession:
        session = self.get(session_id)
        self._active_id = session_id
        return session

    async def rename_session(self, session_id: str, title: str) -> bool:
        """Rename a session. Blank titles are ignored and return False."""
        session = self.get(session_id)
        title = title.strip()
        if not title:
            return False
        session.title = title
        await self._persist()
        return True

    async def delete_session(self, session_id: str) -> None:
        """Delete a session, reselecting the active one if needed.

        When the active session goes away the most recently updated
        remaining session becomes active; if none remain a fresh session
        is created.
        """
        self.get(session_id)
        del self._sessions[session_id]
        logger.info("Deleted session %s", session_id)
        if self._active_id == session_id:
            self._ensure_active()
        await self._persist()

    async def move_session(self, session_id: str, folder_id: str | None) -> ChatSession:
        session = self.get(session_id)
        if folder_id is not None:
            self.get_folder(folder_id)
        session.folder_id = folder_id
        await self._persist()
        return session

    async def append_messages(self, session_id: str, messages: Iterable[Message]) -> ChatSession:
        """Append messages, derive the title if still default, bump updated_at."""
        session = self.get(session_id)
        session.messages.extend(messages)
        if session.has_default_title:
            session.title = generate_title(session.messages)
        session.updated_at = datetime.now(UTC)
        await self._persist()
        return session

    async def edit_message(self, session_id: str, index: int, content: str) -> bool:
        """Replace the text of a user message in place.

        Returns False for blank content. Raises ``ValueError`` when the
        message at *index* is not a user message.
        """
        session = self.get(session_id)
        message = session.messages[index]
        if message.role != "user":
            msg = f"Only user messages can be edited (got {message.role!r})"
            raise ValueError(msg)
        if not content.strip():
            return False
        session.messages[index] = Message(role="user", content=content)
        session.updated_at = datetime.now(UTC)
        await self._persist()
        return True

    async def reset_session(self, session_id: str) -> ChatSession:
        """Drop all history, leaving only the welcome greeting."""
        session = self.get(session_id)
        session.messages = [welcome_message()]
        session.updated_at = datetime.now(UTC)
        await self._persist()
        return session

    def _ensure_active(self) -> None:
        if self._sessions:
            self._active_id = self._most_recent().id
            return
        session = ChatSession()
        self._sessions[session.id] = session
        self._active_id = session.id

    # -- Folders ---------------------------------------------------------------

    async def create_folder(self, name: str) -> ChatFolder:
        name = name.strip()
        if not name:
            msg = "Folder name is required"
            raise ValidationError(msg)
        folder = ChatFolder(name=name)
        self._folders[folder.id] = folder
        logger.info("Created folder %s (%s)", folder.name, folder.id)
        await self._persist()
        return folder

    async def rename_folder(self, folder_id: str, name: str) -> bool:
        folder = self.get_folder(folder_id)
        name = name.strip()
        if not name:
            return False
        folder.name = name
        await self._persist()
        return True

    async def delete_folder(self, folder_id: str) -> int:
        """Delete a folder and every session filed in it.

        Returns the number of sessions removed.
        """
        self.get_folder(folder_id)
        del self._folders[folder_id]
        doomed = [sid for sid, s in self._sessions.items() if s.folder_id == folder_id]
        for sid in doomed:
            del self._sessions[sid]
        logger.info("Deleted folder %s with %d session(s)", folder_id, len(doomed))
        if self._active_id not in self._sessions:
            self._ensure_active()
        await self._persist()
        return len(doomed)
