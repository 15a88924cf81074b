"""Data models for the curated health knowledge base."""

import uuid

from pydantic import BaseModel, Field


class KnowledgeEntry(BaseModel):
    """A markdown snippet used to augment prompts."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str
    content: str
    category: str = ""
    sources: str = ""


class RetrievalResult(BaseModel):
    """An entry paired with its relevance score for one query."""

    entry: KnowledgeEntry
    score: int
