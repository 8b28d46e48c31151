"""Period summaries over indexed entries."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from memory.consolidation.pattern_miner import PatternMiner
from memory.types.records import IndexEntry

NO_ACTIVITY = "No significant activity found in this timeframe."
SUMMARY_UNAVAILABLE = "Unable to generate summary at this time."


def _completed(entries: Sequence[IndexEntry]) -> list[IndexEntry]:
    return [e for e in entries if e.status == "completed"]


def productivity_section(entries: Sequence[IndexEntry]) -> str:
    tasks = [e for e in entries if e.type == "task"]
    sessions = [e for e in entries if e.type == "session"]
    return f"Completed {len(_completed(tasks))}/{len(tasks)} tasks across {len(sessions)} focus sessions."


def goals_section(entries: Sequence[IndexEntry]) -> str:
    goals = [e for e in entries if e.type == "goal"]
    if not goals:
        return "No goals tracked in this period."
    return f"{len(_completed(goals))}/{len(goals)} goals completed with active progress on ongoing objectives."


def patterns_section(entries: Sequence[IndexEntry], miner: PatternMiner) -> str:
    stamps = [e.timestamp for e in entries]
    days = miner.working_days(stamps)
    return f"Worked {len(days)} days with the most activity in the {miner.best_time_of_day(stamps)}."


def achievements_section(entries: Sequence[IndexEntry]) -> str:
    wins = [e for e in entries if e.status == "completed" or e.sentiment > 0.5]
    if not wins:
        return "Focus on celebrating small wins to build momentum."
    return f"{len(wins)} significant achievements and positive outcomes recorded."


def challenges_section(entries: Sequence[IndexEntry]) -> str:
    hard = [
        e
        for e in entries
        if e.status == "failed"
        or e.sentiment < -0.2
        or any(word in e.content.lower() for word in ("problem", "difficult"))
    ]
    if not hard:
        return "No significant challenges detected; maintain current momentum."
    return f"{len(hard)} challenges identified with opportunities for process improvement."


def goal_completion_rate(entries: Sequence[IndexEntry]) -> int:
    goals = [e for e in entries if e.type == "goal"]
    if not goals:
        return 0
    return round(len(_completed(goals)) / len(goals) * 100)


def compose_summary(
    entries: Sequence[IndexEntry],
    start: datetime,
    end: datetime,
    now: datetime,
    miner: PatternMiner | None = None,
) -> str:
    """Markdown report for the entries of one period."""
    if not entries:
        return NO_ACTIVITY
    miner = miner or PatternMiner()
    trend = miner.activity_trend([e.timestamp for e in entries], now)
    sections = [
        f"## Period Summary ({start.date().isoformat()} - {end.date().isoformat()})",
        f"### Productivity Overview\n{productivity_section(entries)}",
        f"### Goals & Progress\n{goals_section(entries)}",
        f"### Key Patterns Detected\n{patterns_section(entries, miner)}",
        f"### Notable Achievements\n{achievements_section(entries)}",
        f"### Challenges & Areas for Improvement\n{challenges_section(entries)}",
        (
            "### Insights\n"
            f"Identified {len(entries)} significant activities. Your activity shows {trend}, "
            f"and your goal completion rate is {goal_completion_rate(entries)}%."
        ),
    ]
    return "\n\n".join(sections)
