"""Pattern miner over activity timestamps."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from memory.types.context import TIME_OF_DAY, time_of_day


class PatternMiner:
    """Extracts working-day, time-of-day and activity-trend patterns."""

    def __init__(self, trend_window_days: int = 3) -> None:
        self.trend_window_days = trend_window_days

    def working_days(self, timestamps: Iterable[datetime]) -> list[str]:
        """Distinct weekday names in first-seen order."""
        seen: dict[str, None] = {}
        for stamp in timestamps:
            seen.setdefault(stamp.strftime("%A"), None)
        return list(seen)

    def time_distribution(self, timestamps: Iterable[datetime]) -> dict[str, int]:
        counts = {slot: 0 for slot in TIME_OF_DAY}
        for stamp in timestamps:
            counts[time_of_day(stamp.hour)] += 1
        return counts

    def best_time_of_day(self, timestamps: Iterable[datetime]) -> str:
        counts = self.time_distribution(timestamps)
        return max(TIME_OF_DAY, key=lambda slot: counts[slot])

    def activity_trend(self, timestamps: Sequence[datetime], now: datetime) -> str:
        cutoff = now - timedelta(days=self.trend_window_days)
        recent = sum(1 for stamp in timestamps if stamp > cutoff)
        older = len(timestamps) - recent
        if recent > older:
            return "increasing activity"
        if recent < older:
            return "decreasing activity"
        return "stable activity levels"
