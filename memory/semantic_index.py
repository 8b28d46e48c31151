"""Semantic index over activity records ("second brain").

The index owns three pieces of in-memory state: the id -> entry map, the
knowledge graph and a rolling semantic context. Nothing is persisted; the
store rebuilds the index on reload by replaying records through
``index_new_data``. Writers must be serialized by the caller.

None of the public operations raise. Indexing failures are logged and
ignored, searches degrade to an empty list, questions to an apologetic
answer and summaries to a fixed message.
"""

from __future__ import annotations

import logging
import uuid
from collections import deque
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any

from pydantic import TypeAdapter

from core.errors import IndexingError, SearchError, SummaryError
from core.models import UtcDatetime, as_utc
from memory.answering import (
    ERROR_ANSWER,
    ERROR_FOLLOW_UPS,
    NO_DATA_ANSWER,
    NO_DATA_CONFIDENCE,
    compose_answer,
    data_insights,
    follow_up_questions,
)
from memory.classification import classify_intent, classify_topic
from memory.consolidation.pattern_miner import PatternMiner
from memory.embedding import Embedder, HashedBagOfWordsEmbedder
from memory.scoring import cosine_similarity, intent_affinity, recency_score, relevance, term_overlap
from memory.stores.graph_store import KnowledgeGraph
from memory.summary import SUMMARY_UNAVAILABLE, compose_summary
from memory.text_analysis import (
    as_mapping,
    extract_entities,
    extract_keywords,
    importance,
    pick,
    searchable_content,
    sentiment,
)
from memory.types import (
    RECORD_TYPES,
    ConversationalResponse,
    IndexEntry,
    IndexStats,
    SearchFilters,
    SearchResult,
    SemanticContext,
)
from memory.types.context import time_of_day

logger = logging.getLogger("planwise.memory")

_TIMESTAMP = TypeAdapter(UtcDatetime)


def temporal_label(timestamp: datetime, now: datetime) -> str:
    days = (now - timestamp).days
    if days <= 0:
        return "today"
    if days == 1:
        return "yesterday"
    if days < 7:
        return "this week"
    if days < 30:
        return "this month"
    return "older"


class SemanticIndex:
    """Index, search and question answering over activity records."""

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        embedder: Embedder | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        cfg = config or {}
        self.embedder = embedder or HashedBagOfWordsEmbedder(int(cfg.get("embedding_dimensions", 100)))
        self.clock = clock or (lambda: datetime.now(UTC))
        self.relevance_threshold = float(cfg.get("relevance_threshold", 0.3))
        self.answer_threshold = float(cfg.get("answer_threshold", 0.4))
        self.max_results = int(cfg.get("max_results", 20))
        self.graph_expansion = int(cfg.get("graph_expansion", 3))
        self.graph_discount = float(cfg.get("graph_discount", 0.7))
        self.recency_window_days = float(cfg.get("recency_window_days", 30))
        max_edges = cfg.get("max_edges")
        self.graph = KnowledgeGraph(max_edges=int(max_edges) if max_edges else None)
        self.context = SemanticContext()
        self.history: deque[str] = deque(maxlen=int(cfg.get("history_limit", 50)))
        self.miner = PatternMiner()
        self._entries: dict[str, IndexEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, entry_id: str) -> IndexEntry | None:
        return self._entries.get(entry_id)

    def _now(self) -> datetime:
        return as_utc(self.clock())

    # ── Indexing ─────────────────────────────────────────────────────

    def index_new_data(self, record: Any, record_type: str) -> IndexEntry | None:
        """Index or re-index one record; returns the stored entry, or None on failure."""
        try:
            entry = self._build_entry(record, record_type)
        except Exception as exc:
            logger.warning("Indexing %s record failed: %s", record_type, exc)
            return None

        previous = self._entries.get(entry.id)
        if previous is not None:
            self.graph.detach_entry(previous.id, previous.entities)
        self._entries[entry.id] = entry
        self.graph.add_entry(entry.id, entry.entities)
        self._update_context(entry)
        logger.debug("Indexed %s %s (%d entities)", entry.type, entry.id, len(entry.entities))
        return entry

    def _build_entry(self, record: Any, record_type: str) -> IndexEntry:
        if record_type not in RECORD_TYPES:
            raise IndexingError(f"Unsupported record type: {record_type}")
        data = as_mapping(record)
        now = self._now()
        content = searchable_content(data, record_type)
        stamp = pick(data, "created_at", "createdAt", "timestamp", "start_time", "startTime")
        timestamp = _TIMESTAMP.validate_python(stamp) if stamp is not None else now
        deadline_raw = pick(data, "deadline", "due_date", "dueDate")
        deadline = _TIMESTAMP.validate_python(deadline_raw) if deadline_raw is not None else None
        entry_id = str(pick(data, "id") or f"{record_type}_{uuid.uuid4().hex}")
        return IndexEntry(
            id=entry_id,
            type=record_type,  # type: ignore[arg-type]
            content=content,
            metadata={
                "type": record_type,
                "title": pick(data, "title", "name") or content[:50],
                "status": data.get("status"),
                "priority": data.get("priority"),
                "tags": list(data.get("tags") or []),
                "duration": pick(
                    data, "duration", "actual_minutes", "actualMinutes", "estimated_minutes", "estimatedMinutes"
                ),
                "consistency": data.get("consistency"),
                "completed_at": pick(data, "completed_at", "completedAt"),
                "created_at": timestamp.isoformat(),
            },
            embedding=self.embedder.embed(content),
            keywords=extract_keywords(content),
            entities=extract_entities(content),
            sentiment=sentiment(content),
            importance=importance(data, record_type, now, deadline),
            timestamp=timestamp,
        )

    def _update_context(self, entry: IndexEntry) -> None:
        if entry.type == "goal":
            if entry.status in ("completed", "archived"):
                self.context.active_goals.pop(entry.id, None)
            else:
                self.context.active_goals[entry.id] = str(entry.metadata.get("title") or entry.content)
        if entry.type == "session":
            slot = time_of_day(entry.timestamp.hour)
            self.context.working_patterns[slot] = self.context.working_patterns.get(slot, 0) + 1
        for tag in entry.metadata.get("tags") or []:
            self.context.tags[tag] = self.context.tags.get(tag, 0) + 1

    # ── Search ───────────────────────────────────────────────────────

    def semantic_search(self, query: str, filters: SearchFilters | None = None) -> list[SearchResult]:
        try:
            return self._search(query, filters or SearchFilters())
        except Exception as exc:
            logger.warning("Semantic search for %r failed: %s", query, exc)
            return []

    def _search(self, query: str, filters: SearchFilters) -> list[SearchResult]:
        if not query.strip():
            raise SearchError("Empty search query.")
        now = self._now()
        query_vector = self.embedder.embed(query)
        intent = classify_intent(query)
        query_terms = list(dict.fromkeys([*extract_entities(query), *extract_keywords(query)]))
        threshold = filters.relevance_threshold
        if threshold is None:
            threshold = self.relevance_threshold

        scored: list[tuple[float, IndexEntry]] = []
        for entry in self._entries.values():
            if not self._matches(entry, filters):
                continue
            score = relevance(
                cosine_similarity(entry.embedding, query_vector),
                term_overlap([*entry.keywords, *entry.entities], query_terms),
                recency_score(entry.timestamp, now, self.recency_window_days),
                entry.importance,
                intent_affinity(intent, entry.type),
            )
            if score > threshold:
                scored.append((score, entry))
        scored.sort(key=lambda item: item[0], reverse=True)
        candidates = scored[: self.max_results]

        expanded = self._expand(candidates, filters)
        logger.debug(
            "Search %r (%s): %d hits, %d via graph", query, intent, len(candidates), len(expanded) - len(candidates)
        )
        return [self._result(entry, score, intent, now) for score, entry in expanded]

    @staticmethod
    def _matches(entry: IndexEntry, filters: SearchFilters) -> bool:
        if filters.start is not None and entry.timestamp < filters.start:
            return False
        if filters.end is not None and entry.timestamp > filters.end:
            return False
        if filters.data_types and entry.type not in filters.data_types:
            return False
        return True

    def _expand(
        self, candidates: Sequence[tuple[float, IndexEntry]], filters: SearchFilters
    ) -> list[tuple[float, IndexEntry]]:
        """Append up to ``graph_expansion`` graph neighbors per candidate, discounted."""
        results = list(candidates)
        seen = {entry.id for _, entry in candidates}
        for score, entry in candidates:
            for other_id in self.graph.connected_entries(entry.id, entry.entities, self.graph_expansion):
                other = self._entries.get(other_id)
                if other is None or other_id in seen or not self._matches(other, filters):
                    continue
                seen.add(other_id)
                results.append((score * self.graph_discount, other))
        results.sort(key=lambda item: item[0], reverse=True)
        return results

    def _result(self, entry: IndexEntry, score: float, intent: str, now: datetime) -> SearchResult:
        return SearchResult(
            id=entry.id,
            type=entry.type,
            content=entry.content,
            relevance_score=score,
            context={
                **entry.metadata,
                "query_intent": intent,
                "connected_concepts": self.graph.connected_concepts(entry.entities),
                "temporal_context": temporal_label(entry.timestamp, now),
            },
            timestamp=entry.timestamp,
        )

    # ── Questions and summaries ──────────────────────────────────────

    def ask_question(
        self, question: str, context: Sequence[SearchResult] | None = None
    ) -> ConversationalResponse:
        try:
            self.history.append(question)
            topic = classify_topic(question)
            sources = self.semantic_search(question, SearchFilters(relevance_threshold=self.answer_threshold))
            known = {s.id for s in sources}
            sources.extend(s for s in context or [] if s.id not in known)
            if not sources:
                return ConversationalResponse(
                    answer=NO_DATA_ANSWER,
                    confidence=NO_DATA_CONFIDENCE,
                    follow_up_questions=follow_up_questions(topic),
                )
            answer, confidence = compose_answer(topic, sources, self.miner)
            response = ConversationalResponse(
                answer=answer,
                confidence=confidence,
                sources=sources,
                follow_up_questions=follow_up_questions(topic),
                data_insights=data_insights(sources, self._now()),
            )
        except Exception as exc:
            logger.warning("Answering %r failed: %s", question, exc)
            return ConversationalResponse(
                answer=ERROR_ANSWER, confidence=0.1, follow_up_questions=list(ERROR_FOLLOW_UPS)
            )
        logger.info("Answered %s question from %d sources (confidence %.2f)", topic, len(sources), confidence)
        return response

    def generate_summary(self, start: datetime, end: datetime) -> str:
        try:
            start, end = as_utc(start), as_utc(end)
            if end < start:
                raise SummaryError(f"Summary window ends before it starts: {start} > {end}")
            entries = [e for e in self._entries.values() if start <= e.timestamp <= end]
            return compose_summary(entries, start, end, self._now(), self.miner)
        except Exception as exc:
            logger.warning("Summary generation failed: %s", exc)
            return SUMMARY_UNAVAILABLE

    def stats(self) -> IndexStats:
        count = len(self._entries)
        return IndexStats(
            data_points=count,
            connections=len(self.graph.edges),
            nodes=len(self.graph.nodes),
            confidence=min(0.95, count / 100),
            coverage=min(1.0, count / 500),
        )

    def handle_mutation(self, payload: dict[str, Any]) -> None:
        """Event-bus handler for ``entity.mutated`` payloads."""
        self.index_new_data(payload.get("record"), str(payload.get("type", "")))
