"""Rolling-window statistics over one worker's submission history."""

from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional

from safetyfirst.scoring import is_safe_score
from safetyfirst.submissions import DailySubmission

# Fed into a numeric feature, so finite
NO_INCIDENT_SENTINEL = 999


def _as_day(value) -> dt.date:
    return value.date() if isinstance(value, dt.datetime) else value


class HistoricalAggregator:
    """
    Windowed statistics relative to a reference day.

    A submission belongs to the n-day window when 0 <= (today - date) <= n days,
    so the 7, 30 and 90 day windows overlap. Submissions dated after the
    reference day are outside every window.
    """

    def __init__(self, submissions: Iterable[DailySubmission], now):
        self.today = _as_day(now)
        self.submissions: List[DailySubmission] = sorted(submissions, key=lambda s: s.date, reverse=True)

    def days_ago(self, submission: DailySubmission) -> int:
        return (self.today - submission.date).days

    def windowed(self, days: int) -> List[DailySubmission]:
        return [s for s in self.submissions if 0 <= self.days_ago(s) <= days]

    def _scores(self, days: int) -> List[int]:
        return [s.risk_score for s in self.windowed(days) if s.risk_score is not None]

    def avg_risk(self, days: int, fallback: float) -> float:
        scores = self._scores(days)
        if not scores:
            return fallback
        return sum(scores) / len(scores)

    def max_risk(self, days: int, fallback: float) -> float:
        scores = self._scores(days)
        if not scores:
            return fallback
        return max(scores)

    def total_hazard_hours(self, days: int) -> float:
        return sum(s.total_hazard_exposure_hours for s in self.windowed(days))

    def avg_ppe_compliance(self, days: int, fallback: float) -> float:
        window = self.windowed(days)
        if not window:
            return fallback
        return sum(s.ppe_compliance_rate for s in window) / len(window)

    def incident_count(self, days: int) -> int:
        return sum(1 for s in self.windowed(days) if s.incident_reported)

    def last_incident(self) -> Optional[DailySubmission]:
        for submission in self.submissions:
            if submission.incident_reported and self.days_ago(submission) >= 0:
                return submission
        return None

    def days_since_last_incident(self) -> int:
        incident = self.last_incident()
        if incident is None:
            return NO_INCIDENT_SENTINEL
        return self.days_ago(incident)

    def consecutive_days_worked(self, start_offset: int = 0) -> int:
        """Length of the unbroken run of submission days ending at today - start_offset."""
        worked = {s.date for s in self.submissions}
        day = self.today - dt.timedelta(days=start_offset)
        streak = 0
        while day in worked:
            streak += 1
            day -= dt.timedelta(days=1)
        return streak

    def consecutive_safe_days(self) -> int:
        """
        Most recent submissions with a safe score, counted until the first unsafe one.
        Gaps between dates do not break the streak.
        """
        streak = 0
        for submission in self.submissions:
            if self.days_ago(submission) < 0:
                continue
            if submission.risk_score is None or not is_safe_score(submission.risk_score):
                break
            streak += 1
        return streak
