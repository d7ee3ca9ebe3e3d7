"""Tests for dashboard statistics."""
from datetime import date, datetime, timedelta, UTC
from zoneinfo import ZoneInfo

import pytest

from lugat.models.models import ReviewState, StudySessionRecord, Word
from lugat.services.stats_service import accuracy_percent, compute_stats, study_streak


def word(word_id: int) -> Word:
    return Word(id=word_id, ottoman="lügat", pronunciation="lugat", turkish="sözlük")


def state(
    word_id: int,
    next_review_date: datetime,
    repetitions: int = 1,
    correct: int = 0,
    total: int = 0,
) -> ReviewState:
    return ReviewState(
        word_id=word_id,
        difficulty=1,
        repetitions=repetitions,
        interval=1,
        ease_factor=2.5,
        next_review_date=next_review_date,
        correct_answers=correct,
        total_answers=total,
    )


def record(when: datetime, duration: int = 10) -> StudySessionRecord:
    return StudySessionRecord(
        date=when,
        words_studied=5,
        correct_answers=4,
        total_answers=5,
        duration=duration,
    )


def test_empty_inputs_give_zero_stats(now: datetime) -> None:
    stats = compute_stats([], {}, [], now, UTC)

    assert stats.to_dict() == {
        "learnedWords": 0,
        "todayStudyTime": 0,
        "accuracy": 0,
        "streak": 0,
        "pendingFlashcards": 0,
        "pendingReviews": 0,
        "totalWords": 0,
    }


def test_accuracy_without_answers_is_zero() -> None:
    assert accuracy_percent([state(1, datetime.now(UTC))]) == 0


def test_accuracy_rounds_to_percent(now: datetime) -> None:
    states = [state(1, now, correct=1, total=3), state(2, now, correct=1, total=3)]
    assert accuracy_percent(states) == 33
    assert accuracy_percent([state(1, now, correct=1, total=8)]) == 13  # 12.5 rounds up


def test_full_dashboard(now: datetime) -> None:
    """Test every dashboard field on a mixed collection."""
    words = [word(word_id) for word_id in range(1, 11)]
    states = {
        1: state(1, now - timedelta(days=1), repetitions=2, correct=3, total=4),
        2: state(2, now + timedelta(days=5), repetitions=1, correct=1, total=1),
        3: state(3, now - timedelta(hours=1), repetitions=0, correct=0, total=3),
    }
    history = [
        record(now - timedelta(hours=2), duration=10),
        record(now - timedelta(hours=1), duration=5),
        record(now - timedelta(days=1), duration=20),
        record(now - timedelta(days=2), duration=20),
        record(now - timedelta(days=4), duration=20),
    ]

    stats = compute_stats(words, states, history, now, UTC)

    assert stats.learned_words == 2
    assert stats.accuracy == 50
    assert stats.today_study_time == 15
    assert stats.streak == 3
    assert stats.pending_reviews == 2
    assert stats.pending_flashcards == 7
    assert stats.total_words == 10


def test_streak_is_zero_without_study_today(now: datetime) -> None:
    history = [record(now - timedelta(days=1)), record(now - timedelta(days=2))]
    assert compute_stats([], {}, history, now, UTC).streak == 0


def test_streak_is_capped_by_lookback() -> None:
    today = date(2026, 3, 10)
    days = {today - timedelta(days=offset) for offset in range(45)}

    assert study_streak(days, today) == 30
    assert study_streak(days, today, lookback=7) == 7


def test_today_uses_local_calendar_day() -> None:
    """Test the day boundary follows the configured timezone, not UTC."""
    istanbul = ZoneInfo("Europe/Istanbul")  # UTC+3
    now = datetime(2026, 3, 10, 22, 30, tzinfo=UTC)  # 01:30 on the 11th locally
    history = [
        record(datetime(2026, 3, 10, 21, 30, tzinfo=UTC), duration=7),  # 00:30 local, today
        record(datetime(2026, 3, 10, 20, 30, tzinfo=UTC), duration=9),  # 23:30 local, yesterday
    ]

    stats = compute_stats([], {}, history, now, istanbul)

    assert stats.today_study_time == 7
    assert stats.streak == 2

    assert compute_stats([], {}, history, now, UTC).today_study_time == 16


if __name__ == "__main__":
    pytest.main([__file__])
