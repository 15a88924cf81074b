"""Curated health knowledge base — storage, seed data, and lexical retrieval."""

from healthyai.knowledge.models import KnowledgeEntry, RetrievalResult
from healthyai.knowledge.retrieval import find_relevant
from healthyai.knowledge.store import KnowledgeStore

__all__ = [
    "KnowledgeEntry",
    "KnowledgeStore",
    "RetrievalResult",
    "find_relevant",
]
