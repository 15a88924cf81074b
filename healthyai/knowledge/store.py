"""KnowledgeStore — CRUD, browsing, and import/export of knowledge entries."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pydantic
from pydantic import TypeAdapter

from healthyai.errors import EntryNotFoundError, ValidationError
from healthyai.knowledge.models import KnowledgeEntry
from healthyai.knowledge.seed import default_entries
from healthyai.storage import KNOWLEDGE_KEY

if TYPE_CHECKING:
    from healthyai.storage import StoragePort

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"

_entry_list = TypeAdapter(list[KnowledgeEntry])


def _validate_fields(entry: KnowledgeEntry) -> None:
    if not entry.title.strip() or not entry.content.strip():
        msg = "Title and content are required."
        raise ValidationError(msg)


class KnowledgeStore:
    """Holds knowledge entries in insertion order, keyed by id.

    ``load()`` falls back to the built-in starter entries when nothing has
    been saved yet, and to an empty list when the saved data is corrupt.
    """

    def __init__(self, storage: StoragePort) -> None:
        self._storage = storage
        self._entries: dict[str, KnowledgeEntry] = {}

    async def load(self) -> None:
        try:
            raw = await self._storage.get(KNOWLEDGE_KEY)
        except Exception:
            logger.exception("Failed to read knowledge base from storage")
            raw = None

        if raw is None:
            entries = default_entries()
            logger.info("No saved knowledge base; using %d starter entries", len(entries))
        else:
            try:
                entries = _entry_list.validate_json(raw)
            except pydantic.ValidationError:
                logger.warning("Stored knowledge base is corrupt; starting empty", exc_info=True)
                entries = []
        self._entries = {e.id: e for e in entries}

    async def _persist(self) -> None:
        payload = _entry_list.dump_json(list(self._entries.values())).decode()
        try:
            await self._storage.set(KNOWLEDGE_KEY, payload)
        except Exception:
            logger.exception("Failed to save knowledge base")

    # -- Reads -----------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, entry_id: str) -> KnowledgeEntry:
        try:
            return self._entries[entry_id]
        except KeyError:
            raise EntryNotFoundError(entry_id) from None

    def list_entries(self) -> list[KnowledgeEntry]:
        return list(self._entries.values())

    def snapshot(self) -> tuple[KnowledgeEntry, ...]:
        """Point-in-time copy for retrieval; later edits do not affect it."""
        return tuple(e.model_copy() for e in self._entries.values())

    def categories(self) -> list[str]:
        """``"all"`` followed by each distinct category in first-seen order."""
        seen = dict.fromkeys(e.category for e in self._entries.values())
        return [ALL_CATEGORIES, *seen]

    def filter(self, search: str = "", category: str = ALL_CATEGORIES) -> list[KnowledgeEntry]:
        """Entries whose title or content contains *search*, within *category*."""
        needle = search.lower()
        return [
            e
            for e in self._entries.values()
            if (needle in e.title.lower() or needle in e.content.lower())
            and (category == ALL_CATEGORIES or e.category == category)
        ]

    # -- Writes ----------------------------------------------------------------

    async def add(self, entry: KnowledgeEntry) -> KnowledgeEntry:
        _validate_fields(entry)
        if entry.id in self._entries:
            msg = f"Knowledge entry {entry.id} already exists"
            raise ValidationError(msg)
        self._entries[entry.id] = entry
        logger.info("Added knowledge entry: %s (%s)", entry.title, entry.id)
        await self._persist()
        return entry

    async def update(self, entry: KnowledgeEntry) -> KnowledgeEntry:
        self.get(entry.id)
        _validate_fields(entry)
        self._entries[entry.id] = entry
        logger.info("Updated knowledge entry: %s", entry.id)
        await self._persist()
        return entry

    async def delete(self, entry_id: str) -> None:
        self.get(entry_id)
        del self._entries[entry_id]
        logger.info("Deleted knowledge entry: %s", entry_id)
        await self._persist()

    # -- Import / export -------------------------------------------------------

    def export_json(self) -> str:
        """Serialize all entries as a pretty-printed JSON array."""
        return json.dumps([e.model_dump() for e in self._entries.values()], indent=2)

    async def import_json(self, text: str) -> int:
        """Replace every entry with the contents of a JSON array.

        Raises ``ValidationError`` (and leaves the store untouched) when the
        text is not a JSON array of entries, or an entry lacks its title or
        content. Returns the number imported.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            msg = "Failed to import knowledge base. Invalid format."
            raise ValidationError(msg) from exc
        if not isinstance(data, list):
            msg = "Failed to import knowledge base. Expected a list of entries."
            raise ValidationError(msg)
        try:
            entries = _entry_list.validate_python(data)
        except pydantic.ValidationError as exc:
            msg = f"Failed to import knowledge base. Invalid entry: {exc.errors()[0]['msg']}"
            raise ValidationError(msg) from exc
        for entry in entries:
            _validate_fields(entry)
        ids = [e.id for e in entries]
        if len(set(ids)) != len(ids):
            msg = "Failed to import knowledge base. Duplicate entry ids."
            raise ValidationError(msg)

        self._entries = {e.id: e for e in entries}
        logger.info("Imported %d knowledge entries", len(entries))
        await self._persist()
        return len(entries)
