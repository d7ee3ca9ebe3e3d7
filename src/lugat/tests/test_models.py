"""Tests for database models."""
from datetime import datetime, timedelta, UTC

import pytest
from faker import Faker
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lugat.models.base import as_utc
from lugat.models.models import ReviewState, StudySessionRecord, Word
from lugat.models.review_models import DifficultyBand, Grade, WordWithProgress

fake = Faker()


@pytest.fixture
def word(db: Session) -> Word:
    word = Word(ottoman="سوز", pronunciation="söz", turkish="kelime", category="isim")
    db.add(word)
    db.commit()
    db.refresh(word)
    return word


def test_word_creation(word: Word) -> None:
    """Test word creation."""
    assert word.id is not None
    assert word.pronunciation == "söz"
    assert word.example is None
    assert word.created_at is not None


def test_review_state_defaults(db: Session, word: Word, now: datetime) -> None:
    """Test review state column defaults."""
    state = ReviewState(word_id=word.id, next_review_date=now)
    db.add(state)
    db.commit()
    db.refresh(state)

    assert state.difficulty_band is DifficultyBand.NEW
    assert state.repetitions == 0
    assert state.interval == 1
    assert state.ease_factor == 2.5
    assert state.correct_answers == 0
    assert state.total_answers == 0
    assert state.last_studied_at is None
    assert state.next_review_at == now
    assert state.next_review_at.tzinfo is not None
    assert word.review_state is state


@pytest.mark.parametrize(
    "overrides",
    [
        {"ease_factor": 1.2},
        {"interval": 0},
        {"correct_answers": 3, "total_answers": 2},
        {"repetitions": -1},
    ],
)
def test_review_state_invariants_enforced(
    db: Session, word: Word, now: datetime, overrides: dict
) -> None:
    """Test the database rejects states that break scheduling invariants."""
    values = {"word_id": word.id, "next_review_date": now}
    values.update(overrides)
    db.add(ReviewState(**values))

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_one_state_per_word(db: Session, word: Word, now: datetime) -> None:
    db.add(ReviewState(word_id=word.id, next_review_date=now))
    db.commit()
    db.add(ReviewState(word_id=word.id, next_review_date=now))

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_study_session_record(db: Session, now: datetime) -> None:
    record = StudySessionRecord(
        date=now, words_studied=10, correct_answers=8, total_answers=10, duration=12
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    assert record.id is not None
    assert record.studied_at == now


def test_is_due(now: datetime) -> None:
    state = ReviewState(word_id=1, next_review_date=now)
    assert state.is_due(now)
    assert not state.is_due(now - timedelta(seconds=1))


def test_as_utc() -> None:
    naive = datetime(2026, 1, 1, 8, 0)
    assert as_utc(naive) == datetime(2026, 1, 1, 8, 0, tzinfo=UTC)
    assert as_utc(None) is None


def test_grade_bands() -> None:
    assert Grade.EASY.band is DifficultyBand.EASY
    assert Grade.HARD.band is DifficultyBand.HARD
    assert Grade.MEDIUM.is_success
    assert not Grade.HARD.is_success


def test_word_with_progress_snapshot(db: Session, word: Word, now: datetime) -> None:
    """Test snapshots copy the state instead of referencing it."""
    state = ReviewState(
        word_id=word.id,
        difficulty=2,
        repetitions=2,
        interval=6,
        ease_factor=2.42,
        next_review_date=now,
        correct_answers=1,
        total_answers=2,
    )
    db.add(state)
    db.commit()

    snapshot = WordWithProgress.from_word(word, state)
    state.interval = 15
    db.commit()

    assert snapshot.progress.interval == 6
    assert snapshot.progress.difficulty is DifficultyBand.MEDIUM
    assert snapshot.next_review == now
    assert not snapshot.is_new

    data = snapshot.to_dict()
    assert data["progress"]["easeFactor"] == 2.42
    assert data["nextReview"] == now.isoformat()
    assert data["category"] == "isim"


if __name__ == "__main__":
    pytest.main([__file__])
