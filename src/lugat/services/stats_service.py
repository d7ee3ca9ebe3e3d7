"""Dashboard statistics folded over review states and study history."""
import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Iterable, Mapping, Optional, Set

from lugat.config import settings
from lugat.models.review_models import DashboardStats
from lugat.services.selection import select_due, select_new

logger = logging.getLogger(__name__)


def accuracy_percent(states: Iterable[Any]) -> int:
    """Share of correct answers over all answers, 0 when nothing was answered."""
    correct = 0
    total = 0
    for state in states:
        correct += state.correct_answers
        total += state.total_answers
    if total == 0:
        return 0
    return int(correct * 100 / total + 0.5)


def study_days(history: Iterable[Any], tz: tzinfo) -> Set[date]:
    """Local calendar days with at least one study session."""
    return {record.studied_at.astimezone(tz).date() for record in history}


def study_streak(days: Set[date], today: date, lookback: Optional[int] = None) -> int:
    """Consecutive study days ending today, stopping at the first gap."""
    if lookback is None:
        lookback = settings.stats.streak_lookback_days
    streak = 0
    day = today
    while streak < lookback and day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def compute_stats(
    words: Iterable[Any],
    states: Mapping[int, Any],
    history: Iterable[Any],
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> DashboardStats:
    """Summarise learning progress at ``now``.

    ``history`` is the study session log; only its local calendar days matter
    for the streak and only today's records for today's study time.
    """
    tz = tz or settings.tzinfo
    words = list(words)
    history = list(history)
    today = now.astimezone(tz).date()

    today_study_time = sum(
        record.duration for record in history
        if record.studied_at.astimezone(tz).date() == today
    )

    stats = DashboardStats(
        learned_words=sum(1 for state in states.values() if state.repetitions > 0),
        today_study_time=today_study_time,
        accuracy=accuracy_percent(states.values()),
        streak=study_streak(study_days(history, tz), today),
        pending_flashcards=len(select_new(words, states)),
        pending_reviews=len(select_due(words, states, now)),
        total_words=len(words),
    )
    logger.debug(f"Computed dashboard stats: {stats}")
    return stats
