"""Question answering and period summary tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from memory.answering import FOLLOW_UP_BANK, NO_DATA_ANSWER, compose_answer, data_insights
from memory.consolidation.pattern_miner import PatternMiner
from memory.semantic_index import SemanticIndex
from memory.summary import NO_ACTIVITY, SUMMARY_UNAVAILABLE
from memory.types import SearchResult

NOW = datetime(2026, 3, 4, 18, 0, tzinfo=UTC)


def make_index() -> SemanticIndex:
    return SemanticIndex(clock=lambda: NOW)


def result(
    result_id: str, record_type: str, days_ago: float = 0, score: float = 0.5, **context: object
) -> SearchResult:
    return SearchResult(
        id=result_id,
        type=record_type,
        content=result_id,
        relevance_score=score,
        context=dict(context),
        timestamp=NOW - timedelta(days=days_ago),
    )


def test_empty_index_apologizes_with_follow_ups() -> None:
    index = make_index()
    response = index.ask_question("How productive was I this week?")

    assert response.answer == NO_DATA_ANSWER
    assert response.confidence <= 0.2
    assert response.sources == []
    assert response.follow_up_questions == FOLLOW_UP_BANK["productivity"]
    assert list(index.history) == ["How productive was I this week?"]


def test_goal_question_uses_goal_records() -> None:
    index = make_index()
    index.index_new_data({"id": "g1", "title": "Complete marathon goal", "status": "completed"}, "goal")
    index.index_new_data({"id": "g2", "title": "Finish goal report", "status": "completed"}, "goal")

    response = index.ask_question("Which goals did I complete?")

    assert {s.id for s in response.sources} == {"g1", "g2"}
    assert response.answer.startswith("You have 2 goals in your system with a 100% completion rate.")
    assert response.confidence == 0.8
    assert response.follow_up_questions == FOLLOW_UP_BANK["goals"]
    assert "Most relevant data is from the past week" in response.data_insights


def test_caller_context_is_merged_into_sources() -> None:
    index = make_index()
    extra = result("s1", "session", duration=120)
    response = index.ask_question("How long is my usual time block?", context=[extra])

    assert [s.id for s in response.sources] == ["s1"]
    assert response.answer.startswith("Your average work session lasts 120 minutes.")


def test_many_sources_add_provenance_note() -> None:
    sources = [result(f"t{i}", "task", status="completed") for i in range(6)]
    answer, confidence = compose_answer("productivity", sources, PatternMiner())

    assert answer.startswith("Based on your recent activity, you're completing about 0.9 tasks per day")
    assert answer.endswith("This insight is based on analysis of 6 data points from your activity.")
    assert confidence == pytest.approx(0.9)


def test_patterns_answer_names_best_time_of_day() -> None:
    sources = [result("a", "session", days_ago=2), result("b", "session", days_ago=0)]
    answer, confidence = compose_answer("patterns", sources, PatternMiner())

    assert "most productive during the evening" in answer
    assert confidence == 0.8


def test_unknown_topic_answers_generally() -> None:
    sources = [result("a", "note"), result("b", "task")]
    answer, confidence = compose_answer("energy", sources, PatternMiner())

    assert answer.startswith("I found 2 relevant data points across note, task")
    assert confidence == 0.6


def test_data_insights_flag_strong_matches() -> None:
    sources = [result(f"x{i}", "note", days_ago=10, score=0.9) for i in range(4)]
    assert data_insights(sources, NOW) == ["4 highly relevant matches found"]


def test_summary_without_activity() -> None:
    index = make_index()
    assert index.generate_summary(NOW - timedelta(days=7), NOW) == NO_ACTIVITY


def test_summary_with_reversed_window_is_unavailable() -> None:
    index = make_index()
    index.index_new_data({"id": "t1", "title": "Anything"}, "task")
    assert index.generate_summary(NOW, NOW - timedelta(days=1)) == SUMMARY_UNAVAILABLE


def test_summary_sections() -> None:
    index = make_index()
    index.index_new_data({"id": "t1", "title": "Write intro", "status": "completed"}, "task")
    index.index_new_data(
        {"id": "t2", "title": "Fix build problem", "status": "todo", "createdAt": "2026-03-02T10:00:00Z"}, "task"
    )
    index.index_new_data({"id": "s1", "notes": "Deep focus", "timestamp": "2026-03-04T09:00:00Z"}, "session")
    index.index_new_data({"id": "g1", "title": "Ship the book"}, "goal")

    summary = index.generate_summary(datetime(2026, 3, 1, tzinfo=UTC), NOW)

    assert summary.startswith("## Period Summary (2026-03-01 - 2026-03-04)")
    assert "Completed 1/2 tasks across 1 focus sessions." in summary
    assert "0/1 goals completed" in summary
    assert "1 significant achievements" in summary
    assert "1 challenges identified" in summary
    assert "Identified 4 significant activities" in summary
    assert "goal completion rate is 0%" in summary


def test_summary_excludes_entries_outside_window() -> None:
    index = make_index()
    index.index_new_data({"id": "t1", "title": "Old work", "createdAt": "2026-01-10T10:00:00Z"}, "task")
    assert index.generate_summary(datetime(2026, 3, 1, tzinfo=UTC), NOW) == NO_ACTIVITY
