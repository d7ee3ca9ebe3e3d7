"""Database models for the vocabulary trainer."""
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import relationship

from lugat.config import INITIAL_EASE_FACTOR, MINIMUM_EASE_FACTOR
from lugat.models.base import Base, TimestampMixin, as_utc
from lugat.models.review_models import DifficultyBand


class Word(Base, TimestampMixin):
    """Vocabulary item. Content is owned by the word bank, never by the scheduler."""

    __tablename__ = "words"

    id = Column(Integer, primary_key=True, index=True)
    ottoman = Column(String, nullable=False)  # native-script term
    pronunciation = Column(String, nullable=False)  # transliteration
    turkish = Column(String, nullable=False)  # translation
    example = Column(String, nullable=True)
    category = Column(String, nullable=True)

    # Relationships
    review_state = relationship(
        "ReviewState",
        back_populates="word",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Word id={self.id} ottoman={self.ottoman!r}>"


class ReviewState(Base, TimestampMixin):
    """Per-word memory record, created lazily on the first graded review."""

    __tablename__ = "review_states"
    __table_args__ = (
        CheckConstraint(f"ease_factor >= {MINIMUM_EASE_FACTOR}", name="ck_review_states_ease_floor"),
        CheckConstraint("interval >= 1", name="ck_review_states_interval_positive"),
        CheckConstraint("repetitions >= 0", name="ck_review_states_repetitions"),
        CheckConstraint(
            "total_answers >= correct_answers AND correct_answers >= 0",
            name="ck_review_states_answers",
        ),
    )

    id = Column(Integer, primary_key=True)
    word_id = Column(Integer, ForeignKey("words.id"), unique=True, nullable=False, index=True)
    difficulty = Column(Integer, nullable=False, default=int(DifficultyBand.NEW))  # 0=new, 1=easy, 2=medium, 3=hard
    repetitions = Column(Integer, nullable=False, default=0)
    interval = Column(Integer, nullable=False, default=1)  # days
    ease_factor = Column(Float, nullable=False, default=INITIAL_EASE_FACTOR)
    next_review_date = Column(DateTime(timezone=True), nullable=False)
    last_studied = Column(DateTime(timezone=True), nullable=True)
    correct_answers = Column(Integer, nullable=False, default=0)
    total_answers = Column(Integer, nullable=False, default=0)

    # Relationships
    word = relationship("Word", back_populates="review_state")

    @property
    def difficulty_band(self) -> DifficultyBand:
        return DifficultyBand(self.difficulty or 0)

    @property
    def next_review_at(self) -> datetime:
        """Next due time as aware UTC."""
        return as_utc(self.next_review_date)

    @property
    def last_studied_at(self) -> Optional[datetime]:
        return as_utc(self.last_studied)

    def is_due(self, now: datetime) -> bool:
        """Whether the word should be reviewed at ``now``."""
        return self.next_review_at <= now

    def __repr__(self) -> str:
        return (
            f"<ReviewState word_id={self.word_id} interval={self.interval} "
            f"ease_factor={self.ease_factor} repetitions={self.repetitions}>"
        )


class StudySessionRecord(Base, TimestampMixin):
    """Historical study session. Append-only."""

    __tablename__ = "study_sessions"
    __table_args__ = (
        CheckConstraint(
            "total_answers >= correct_answers AND correct_answers >= 0",
            name="ck_study_sessions_answers",
        ),
    )

    id = Column(Integer, primary_key=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    words_studied = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    total_answers = Column(Integer, nullable=False)
    duration = Column(Integer, nullable=False)  # in minutes

    @property
    def studied_at(self) -> datetime:
        return as_utc(self.date)
