"""Models for review-related data structures."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Tuple

from lugat.exceptions import SessionExhaustedError


class DifficultyBand(IntEnum):
    """Last graded response stored on a review state."""
    NEW = 0
    EASY = 1
    MEDIUM = 2
    HARD = 3


class Grade(str, Enum):
    """Learner's self-reported recall difficulty for one review."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def band(self) -> DifficultyBand:
        return DifficultyBand[self.name]

    @property
    def is_success(self) -> bool:
        """Easy and medium count as a successful recall."""
        return self is not Grade.HARD


class SessionKind(str, Enum):
    """Which words a flashcard session is built from."""
    NEW = "new"  # never-studied words
    REVIEW = "review"  # words due for review


@dataclass(frozen=True)
class ReviewSchedule:
    """Scheduler output for one graded review."""
    interval: int
    ease_factor: float
    repetitions: int
    next_review_date: datetime


@dataclass(frozen=True)
class ProgressSnapshot:
    """Detached copy of a review state, safe to hold after the db session closes."""
    word_id: int
    difficulty: DifficultyBand
    repetitions: int
    interval: int
    ease_factor: float
    next_review_date: datetime
    last_studied: Optional[datetime]
    correct_answers: int
    total_answers: int

    @classmethod
    def from_state(cls, state: Any) -> "ProgressSnapshot":
        return cls(
            word_id=state.word_id,
            difficulty=state.difficulty_band,
            repetitions=state.repetitions,
            interval=state.interval,
            ease_factor=state.ease_factor,
            next_review_date=state.next_review_at,
            last_studied=state.last_studied_at,
            correct_answers=state.correct_answers,
            total_answers=state.total_answers,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wordId": self.word_id,
            "difficulty": int(self.difficulty),
            "repetitions": self.repetitions,
            "interval": self.interval,
            "easeFactor": self.ease_factor,
            "nextReviewDate": self.next_review_date.isoformat(),
            "lastStudied": self.last_studied.isoformat() if self.last_studied else None,
            "correctAnswers": self.correct_answers,
            "totalAnswers": self.total_answers,
        }


@dataclass(frozen=True)
class WordWithProgress:
    """A word paired with its review state as it was when selected."""
    id: int
    ottoman: str
    pronunciation: str
    turkish: str
    example: Optional[str] = None
    category: Optional[str] = None
    progress: Optional[ProgressSnapshot] = None
    is_new: bool = True

    @classmethod
    def from_word(cls, word: Any, state: Any = None) -> "WordWithProgress":
        return cls(
            id=word.id,
            ottoman=word.ottoman,
            pronunciation=word.pronunciation,
            turkish=word.turkish,
            example=word.example,
            category=word.category,
            progress=ProgressSnapshot.from_state(state) if state is not None else None,
            is_new=state is None,
        )

    @property
    def next_review(self) -> Optional[datetime]:
        return self.progress.next_review_date if self.progress else None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "ottoman": self.ottoman,
            "pronunciation": self.pronunciation,
            "turkish": self.turkish,
            "example": self.example,
            "category": self.category,
            "isNew": self.is_new,
        }
        if self.progress:
            data["progress"] = self.progress.to_dict()
            data["nextReview"] = self.progress.next_review_date.isoformat()
        return data


@dataclass
class FlashcardSession:
    """One bounded, ordered study run. The word list is fixed at creation."""
    session_id: str
    kind: SessionKind
    words: Tuple[WordWithProgress, ...]
    created_at: datetime
    cursor: int = 0

    @property
    def total_words(self) -> int:
        return len(self.words)

    @property
    def is_empty(self) -> bool:
        return not self.words

    @property
    def is_complete(self) -> bool:
        return self.cursor >= self.total_words

    @property
    def is_last_word(self) -> bool:
        """The cursor sits on the final word; answering it completes the run."""
        return self.total_words > 0 and self.cursor == self.total_words - 1

    @property
    def remaining(self) -> int:
        return max(self.total_words - self.cursor, 0)

    @property
    def current_word(self) -> Optional[WordWithProgress]:
        if self.cursor >= self.total_words:
            return None
        return self.words[self.cursor]

    def advance(self) -> "FlashcardSession":
        """Move the cursor past the current word."""
        if self.is_complete:
            raise SessionExhaustedError(self.session_id, self.total_words)
        self.cursor += 1
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "kind": self.kind.value,
            "words": [word.to_dict() for word in self.words],
            "currentIndex": self.cursor,
            "totalWords": self.total_words,
        }


@dataclass
class DashboardStats:
    """Learner-facing summary metrics."""
    learned_words: int = 0
    today_study_time: int = 0  # minutes
    accuracy: int = 0  # percent
    streak: int = 0  # days
    pending_flashcards: int = 0
    pending_reviews: int = 0
    total_words: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "learnedWords": self.learned_words,
            "todayStudyTime": self.today_study_time,
            "accuracy": self.accuracy,
            "streak": self.streak,
            "pendingFlashcards": self.pending_flashcards,
            "pendingReviews": self.pending_reviews,
            "totalWords": self.total_words,
        }
