"""Typed models for the semantic index."""

from memory.types.context import IndexStats, SemanticContext
from memory.types.records import RECORD_TYPES, IndexEntry, RecordType
from memory.types.search import ConversationalResponse, SearchFilters, SearchResult

__all__ = [
    "ConversationalResponse",
    "IndexEntry",
    "IndexStats",
    "RECORD_TYPES",
    "RecordType",
    "SearchFilters",
    "SearchResult",
    "SemanticContext",
]
