"""Semantic index tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from core.models import Task
from memory.semantic_index import SemanticIndex, temporal_label
from memory.types import SearchFilters

NOW = datetime(2026, 3, 2, 15, 0, tzinfo=UTC)


def make_index(**config: object) -> SemanticIndex:
    return SemanticIndex(config=dict(config), clock=lambda: NOW)


def seeded_index() -> SemanticIndex:
    index = make_index()
    index.index_new_data({"id": "t1", "title": "Prepare Acme pitch deck", "priority": "high"}, "task")
    index.index_new_data({"id": "n1", "title": "Call with Acme about Budget"}, "note")
    index.index_new_data({"id": "g1", "title": "Run a marathon", "description": "Spring race"}, "goal")
    index.index_new_data({"id": "h1", "name": "Morning stretching", "consistency": 0.9}, "habit")
    return index


def test_indexed_record_is_found_by_its_own_content() -> None:
    index = seeded_index()
    entry = index.get("t1")
    assert entry is not None

    results = index.semantic_search(entry.content)

    assert "t1" in [r.id for r in results[:3]]
    assert results[0].id == "t1"
    assert results[0].relevance_score >= 0.3


def test_reindexing_same_id_replaces_entry() -> None:
    index = seeded_index()
    index.index_new_data({"id": "t1", "title": "Prepare Globex contract", "status": "completed"}, "task")

    assert len(index) == 4
    entry = index.get("t1")
    assert entry is not None
    assert entry.content == "Prepare Globex contract"
    assert entry.status == "completed"


def test_models_and_camel_case_records_are_accepted() -> None:
    index = make_index()
    task = Task(id="t9", title="Draft blog post", estimated_minutes=45)
    camel = {"id": "b1", "title": "Deep work", "type": "work", "startTime": "2026-03-01T09:00:00Z"}

    assert index.index_new_data(task, "task") is not None
    block = index.index_new_data(camel, "timeblock")
    assert block is not None
    assert block.timestamp == datetime(2026, 3, 1, 9, 0, tzinfo=UTC)
    assert block.content == "Deep work work"


def test_record_without_id_gets_generated_id() -> None:
    entry = make_index().index_new_data({"content": "Remember the offsite"}, "insight")
    assert entry is not None
    assert entry.id.startswith("insight_")


def test_indexing_failures_are_ignored() -> None:
    index = seeded_index()

    assert index.index_new_data("not a record", "task") is None
    assert index.index_new_data({"id": "x1", "title": "Mystery"}, "invoice") is None
    assert index.index_new_data({"id": "x2", "title": "Bad", "createdAt": "yesterday-ish"}, "task") is None
    assert len(index) == 4


def test_blank_dates_count_as_missing() -> None:
    index = make_index()
    entry = index.index_new_data({"id": "t1", "title": "Call Acme", "deadline": "", "timestamp": " "}, "task")

    assert entry is not None
    assert entry.timestamp == NOW
    assert entry.importance == 0.5
    session = index.index_new_data({"id": "s1", "notes": "Focus", "createdAt": "", "dueDate": ""}, "session")
    assert session is not None


def test_type_filter_restricts_results() -> None:
    index = seeded_index()
    results = index.semantic_search("Acme pitch deck", SearchFilters(data_types=["note"]))

    assert results
    assert {r.type for r in results} == {"note"}


def test_time_window_filter_excludes_entries() -> None:
    index = seeded_index()
    index.index_new_data({"id": "old", "title": "Acme kickoff", "createdAt": "2025-12-01T10:00:00Z"}, "task")

    window = SearchFilters(start=NOW - timedelta(days=7), end=NOW)
    assert "old" not in [r.id for r in index.semantic_search("Acme kickoff", window)]
    assert "old" in [r.id for r in index.semantic_search("Acme kickoff", SearchFilters(relevance_threshold=0.0))]


def test_graph_expansion_adds_connected_entries() -> None:
    index = seeded_index()
    results = index.semantic_search("pitch deck", SearchFilters(relevance_threshold=0.5))
    by_id = {r.id: r for r in results}

    assert results[0].id == "t1"
    assert "n1" in by_id
    assert by_id["n1"].relevance_score <= by_id["t1"].relevance_score
    assert "Call" in by_id["t1"].context["connected_concepts"]
    assert by_id["t1"].context["temporal_context"] == "today"
    assert by_id["t1"].context["query_intent"] == "general"


def test_empty_query_returns_nothing() -> None:
    assert seeded_index().semantic_search("   ") == []


def test_context_tracks_goals_sessions_and_tags() -> None:
    index = make_index()
    index.index_new_data({"id": "g1", "title": "Ship v2", "tags": ["work"]}, "goal")
    index.index_new_data({"id": "s1", "notes": "Focused", "timestamp": "2026-03-02T08:30:00Z"}, "session")
    assert index.context.active_goals == {"g1": "Ship v2"}
    assert index.context.dominant_working_time() == "morning"
    assert index.context.tags == {"work": 1}

    index.index_new_data({"id": "g1", "title": "Ship v2", "status": "completed"}, "goal")
    assert index.context.active_goals == {}


def test_stats_grow_with_data() -> None:
    empty = make_index().stats()
    assert empty.data_points == 0
    assert empty.nodes == 6

    stats = seeded_index().stats()
    assert stats.data_points == 4
    assert stats.connections > 0
    assert stats.confidence == pytest.approx(0.04)
    assert stats.coverage == pytest.approx(4 / 500)


def test_mutation_payload_is_indexed() -> None:
    index = make_index()
    index.handle_mutation({"record": {"id": "n5", "title": "Retro notes"}, "type": "note"})
    index.handle_mutation({"record": None, "type": "note"})
    assert len(index) == 1


@pytest.mark.parametrize(
    ("age", "label"),
    [
        (timedelta(hours=2), "today"),
        (timedelta(days=1, hours=1), "yesterday"),
        (timedelta(days=3), "this week"),
        (timedelta(days=12), "this month"),
        (timedelta(days=45), "older"),
    ],
)
def test_temporal_label(age: timedelta, label: str) -> None:
    assert temporal_label(NOW - age, NOW) == label
