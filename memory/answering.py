"""Templated answers, follow-up questions and insights for ``ask_question``."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from memory.consolidation.pattern_miner import PatternMiner
from memory.types.search import SearchResult

NO_DATA_ANSWER = (
    "I don't have enough data to answer that question yet. As you use the app more, "
    "I'll learn about your patterns and be able to provide better insights."
)
NO_DATA_CONFIDENCE = 0.2
ERROR_ANSWER = "I'm having trouble accessing your data right now. Please try again."
ERROR_FOLLOW_UPS = ["What would you like to know about your productivity?"]
PROVENANCE_SOURCE_COUNT = 5
MAX_FOLLOW_UPS = 3
MAX_INSIGHTS = 3

FOLLOW_UP_BANK: dict[str, list[str]] = {
    "productivity": [
        "What time of day are you most productive?",
        "Which types of tasks do you complete fastest?",
        "How has your productivity changed over time?",
    ],
    "goals": [
        "Which goals are at risk of missing their deadlines?",
        "What's blocking progress on your current goals?",
        "How can you improve your goal completion rate?",
    ],
    "patterns": [
        "What are your most consistent habits?",
        "When do you typically have energy dips?",
        "What patterns lead to your best performance?",
    ],
    "time_management": [
        "How long are your typical focus sessions?",
        "Which days have the most scheduled work?",
        "Where does unplanned time go each week?",
    ],
    "habits": [
        "Which habits have the longest streaks?",
        "Which habits slipped recently?",
        "What routine should you consolidate next?",
    ],
    "general": [
        "What would you like to know about your productivity patterns?",
        "How are you progressing on your current goals?",
        "What insights can I provide about your work habits?",
    ],
}

# Topics without a dedicated template answer generically at this confidence.
TEMPLATED_CONFIDENCE = 0.8
GENERIC_CONFIDENCE = 0.6


def _of_type(sources: Sequence[SearchResult], record_type: str) -> list[SearchResult]:
    return [s for s in sources if s.type == record_type]


def _duration(source: SearchResult, default: float = 0.0) -> float:
    value = source.context.get("duration")
    return float(value) if value is not None else default


def productivity_answer(sources: Sequence[SearchResult]) -> str:
    completed = [s for s in _of_type(sources, "task") if s.context.get("status") == "completed"]
    per_day = len(completed) / 7
    focus_hours = round(sum(_duration(s) for s in _of_type(sources, "session")) / 60)
    advice = (
        "You're maintaining good productivity momentum!"
        if per_day > 3
        else "Consider breaking down larger tasks into smaller, manageable chunks to increase your completion rate."
    )
    return (
        f"Based on your recent activity, you're completing about {per_day:.1f} tasks per day "
        f"with {focus_hours} hours of focused work time. {advice}"
    )


def goals_answer(sources: Sequence[SearchResult]) -> str:
    goals = _of_type(sources, "goal")
    completed = [g for g in goals if g.context.get("status") == "completed"]
    rate = len(completed) / len(goals) * 100 if goals else 0.0
    if rate > 70:
        advice = "Excellent goal achievement rate!"
    elif rate > 40:
        advice = (
            "You're making steady progress on your goals. "
            "Consider focusing on your top 2-3 priorities for better results."
        )
    else:
        advice = "Your goals might benefit from being broken down into smaller, more achievable milestones."
    return f"You have {len(goals)} goals in your system with a {rate:.0f}% completion rate. {advice}"


def patterns_answer(sources: Sequence[SearchResult], miner: PatternMiner) -> str:
    stamps = [s.timestamp for s in sources]
    days = miner.working_days(stamps)
    best = miner.best_time_of_day(stamps)
    advice = (
        "You maintain good consistency throughout the week."
        if "Monday" in days and "Friday" in days
        else "Consider establishing more consistent working patterns for better results."
    )
    return f"Your data shows you're most productive during the {best} and work on {len(days)} days per week. {advice}"


def time_answer(sources: Sequence[SearchResult]) -> str:
    timed = [s for s in sources if s.type == "session" or s.context.get("duration")]
    if not timed:
        return "None of the matching records carry session durations yet."
    average = sum(_duration(s, 60.0) for s in timed) / len(timed)
    if average > 90:
        advice = "You're good at maintaining focus for extended periods. Consider adding short breaks."
    elif average > 45:
        advice = "Your session length is well suited to sustained focus."
    else:
        advice = "Consider extending your focus sessions to 45-90 minutes for deeper work."
    return f"Your average work session lasts {round(average)} minutes. {advice}"


def habits_answer(sources: Sequence[SearchResult]) -> str:
    habits = _of_type(sources, "habit")
    consistent = [h for h in habits if float(h.context.get("consistency") or 0.0) > 0.8]
    advice = (
        "Great habit consistency! You're building strong routines."
        if habits and len(consistent) / len(habits) > 0.5
        else "Focus on consolidating your current habits before adding new ones."
    )
    return f"You're tracking {len(habits)} habits with {len(consistent)} showing strong consistency (>80%). {advice}"


def general_answer(sources: Sequence[SearchResult]) -> str:
    kinds = list(dict.fromkeys(s.type for s in sources))
    advice = (
        "There's a lot of relevant information in your data; would you like me to focus on a specific aspect?"
        if len(sources) > 10
        else "I can give more specific insights if you ask about productivity, goals, or patterns."
    )
    found = f"I found {len(sources)} relevant data points across {', '.join(kinds)}"
    return f"{found} to help answer your question. {advice}"


def compose_answer(topic: str, sources: Sequence[SearchResult], miner: PatternMiner) -> tuple[str, float]:
    """Answer text and confidence for a non-empty source list."""
    templated = {
        "productivity": productivity_answer,
        "goals": goals_answer,
        "time_management": time_answer,
        "habits": habits_answer,
    }
    if topic in templated:
        answer, confidence = templated[topic](sources), TEMPLATED_CONFIDENCE
    elif topic == "patterns":
        answer, confidence = patterns_answer(sources, miner), TEMPLATED_CONFIDENCE
    else:
        answer, confidence = general_answer(sources), GENERIC_CONFIDENCE
    if len(sources) > PROVENANCE_SOURCE_COUNT:
        answer += f"\n\nThis insight is based on analysis of {len(sources)} data points from your activity."
        confidence = min(confidence + 0.1, 0.95)
    return answer, confidence


def follow_up_questions(topic: str) -> list[str]:
    return list(FOLLOW_UP_BANK.get(topic, FOLLOW_UP_BANK["general"]))[:MAX_FOLLOW_UPS]


def data_insights(sources: Sequence[SearchResult], now: datetime) -> list[str]:
    insights: list[str] = []
    if len(sources) > 10:
        insights.append(f"Rich data available: {len(sources)} relevant entries found")
    week_ago = now - timedelta(days=7)
    recent = [s for s in sources if s.timestamp > week_ago]
    if sources and len(recent) > len(sources) * 0.7:
        insights.append("Most relevant data is from the past week")
    strong = [s for s in sources if s.relevance_score > 0.8]
    if len(strong) > 3:
        insights.append(f"{len(strong)} highly relevant matches found")
    return insights[:MAX_INSIGHTS]
