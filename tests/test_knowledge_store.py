"""Tests for KnowledgeStore."""

import json

import pytest

from healthyai.errors import EntryNotFoundError, ValidationError
from healthyai.knowledge.models import KnowledgeEntry
from healthyai.knowledge.store import KnowledgeStore
from healthyai.storage import KNOWLEDGE_KEY, MemoryStorage


def _entry(entry_id: str = "n1", **overrides) -> KnowledgeEntry:
    fields = {
        "title": "Protein Needs",
        "content": "Adults need about 0.8 g of protein per kg.",
        "category": "nutrition",
        "sources": "NIH",
    }
    fields.update(overrides)
    return KnowledgeEntry(id=entry_id, **fields)


# -- load ----------------------------------------------------------------------


async def test_load_without_saved_data_uses_seed(knowledge: KnowledgeStore) -> None:
    titles = [e.title for e in knowledge.list_entries()]
    assert titles == [
        "Blood Pressure Ranges",
        "Healthy BMI Range",
        "Recommended Daily Water Intake",
    ]


async def test_load_saved_empty_list_stays_empty() -> None:
    store = KnowledgeStore(MemoryStorage({KNOWLEDGE_KEY: "[]"}))
    await store.load()
    assert len(store) == 0


async def test_load_corrupt_falls_back_to_empty() -> None:
    store = KnowledgeStore(MemoryStorage({KNOWLEDGE_KEY: "{{broken"}))
    await store.load()
    assert store.list_entries() == []


# -- CRUD ----------------------------------------------------------------------


async def test_add_persists(knowledge: KnowledgeStore, storage: MemoryStorage) -> None:
    await knowledge.add(_entry())
    saved = json.loads(storage.data[KNOWLEDGE_KEY])
    assert saved[-1]["id"] == "n1"
    assert knowledge.get("n1").title == "Protein Needs"


@pytest.mark.parametrize("field", ["title", "content"])
async def test_add_requires_title_and_content(knowledge: KnowledgeStore, field: str) -> None:
    before = len(knowledge)
    with pytest.raises(ValidationError, match="required"):
        await knowledge.add(_entry(**{field: "  "}))
    assert len(knowledge) == before


async def test_add_duplicate_id_rejected(knowledge: KnowledgeStore) -> None:
    with pytest.raises(ValidationError):
        await knowledge.add(_entry("1"))


async def test_update_replaces_fields(knowledge: KnowledgeStore) -> None:
    await knowledge.update(_entry("2", title="BMI Explained"))
    assert knowledge.get("2").title == "BMI Explained"
    assert [e.id for e in knowledge.list_entries()] == ["1", "2", "3"]


async def test_update_unknown_raises(knowledge: KnowledgeStore) -> None:
    with pytest.raises(EntryNotFoundError):
        await knowledge.update(_entry("missing"))


async def test_update_blank_title_rejected(knowledge: KnowledgeStore) -> None:
    with pytest.raises(ValidationError):
        await knowledge.update(_entry("1", title=""))
    assert knowledge.get("1").title == "Blood Pressure Ranges"


async def test_delete(knowledge: KnowledgeStore) -> None:
    await knowledge.delete("1")
    with pytest.raises(EntryNotFoundError):
        knowledge.get("1")


async def test_snapshot_is_point_in_time(knowledge: KnowledgeStore) -> None:
    snap = knowledge.snapshot()
    await knowledge.update(_entry("1", title="Changed"))
    assert snap[0].title == "Blood Pressure Ranges"


# -- browse --------------------------------------------------------------------


async def test_categories(knowledge: KnowledgeStore) -> None:
    await knowledge.add(_entry("n2", category="weight"))
    assert knowledge.categories() == ["all", "cardiovascular", "weight", "hydration"]


async def test_filter_by_search_and_category(knowledge: KnowledgeStore) -> None:
    assert [e.id for e in knowledge.filter("hypertension")] == ["1"]
    assert [e.id for e in knowledge.filter("", "hydration")] == ["3"]
    assert [e.id for e in knowledge.filter("bmi", "hydration")] == []
    assert len(knowledge.filter()) == 3


# -- import / export -----------------------------------------------------------


async def test_export_is_pretty_printed(knowledge: KnowledgeStore) -> None:
    text = knowledge.export_json()
    assert text.startswith("[\n  {")
    assert json.loads(text)[0]["id"] == "1"


async def test_export_import_roundtrip(knowledge: KnowledgeStore) -> None:
    await knowledge.add(_entry())
    before = [e.model_dump() for e in knowledge.list_entries()]
    exported = knowledge.export_json()

    other = KnowledgeStore(MemoryStorage({KNOWLEDGE_KEY: "[]"}))
    await other.load()
    count = await other.import_json(exported)

    assert count == len(before)
    assert [e.model_dump() for e in other.list_entries()] == before


async def test_import_replaces_wholesale(knowledge: KnowledgeStore) -> None:
    payload = json.dumps([_entry("x").model_dump()])
    await knowledge.import_json(payload)
    assert [e.id for e in knowledge.list_entries()] == ["x"]


@pytest.mark.parametrize(
    "payload",
    [
        '{"id": "1"}',
        "not json",
        '[{"id": "1"}]',
        json.dumps([{"id": "b", "title": "  ", "content": "text"}]),
        json.dumps([{"id": "b", "title": "Title", "content": ""}]),
        json.dumps([_entry("d").model_dump(), _entry("d").model_dump()]),
    ],
)
async def test_import_invalid_leaves_store_untouched(
    knowledge: KnowledgeStore, payload: str
) -> None:
    with pytest.raises(ValidationError):
        await knowledge.import_json(payload)
    assert len(knowledge) == 3
