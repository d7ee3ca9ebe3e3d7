"""Learning service: the entry point the application layer calls into."""
import logging
from datetime import datetime, timedelta, UTC
from typing import Callable, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from lugat.config import settings
from lugat.models.base import as_utc
from lugat.exceptions import (
    InvalidStudySessionError,
    LugatError,
    SessionNotFoundError,
    UnknownWordError,
)
from lugat.models.models import ReviewState, StudySessionRecord
from lugat.models.review_models import (
    DashboardStats,
    FlashcardSession,
    Grade,
    SessionKind,
    WordWithProgress,
)
from lugat.monitoring import error_count, progress_resets, reviews_graded, study_sessions_recorded
from lugat.services.selection import select_due, select_new
from lugat.services.session_service import SessionService, SessionStore
from lugat.services.spaced_repetition import calculate_next_review, parse_grade
from lugat.services.stats_service import compute_stats
from lugat.services.storage import Storage

logger = logging.getLogger(__name__)


class LearningService:
    """Service for grading words, selecting study material and reporting progress."""

    def __init__(
        self,
        storage: Storage,
        session_store: Optional[SessionStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the service with a storage backend and an optional clock."""
        self.storage = storage
        self.clock = clock or (lambda: datetime.now(UTC))
        self.sessions = SessionService(storage, session_store, self._now)

    def _now(self) -> datetime:
        # Naive clocks are read as UTC; stored timestamps are always UTC
        return as_utc(self.clock())

    def _fail(self, error: LugatError) -> LugatError:
        error_count.labels(error_type=type(error).__name__).inc()
        logger.warning(error.message)
        return error

    def grade(self, word_id: int, grade: Union[Grade, str, int]) -> ReviewState:
        """Record one graded review of a word and return its updated state."""
        try:
            grade = parse_grade(grade)
        except LugatError as e:
            raise self._fail(e)

        word = self.storage.get_word(word_id)
        if word is None:
            raise self._fail(UnknownWordError(word_id))

        now = self._now()
        state = self.storage.get_review_state(word_id)
        schedule = calculate_next_review(grade, state, now)

        if state is None:
            state = ReviewState(word_id=word_id, correct_answers=0, total_answers=0)

        state.difficulty = int(grade.band)
        state.repetitions = schedule.repetitions
        state.interval = schedule.interval
        state.ease_factor = schedule.ease_factor
        state.next_review_date = schedule.next_review_date
        state.last_studied = now
        # Only an easy recall counts as a correct answer
        if grade is Grade.EASY:
            state.correct_answers += 1
        state.total_answers += 1

        try:
            state = self.storage.save_review_state(state)
        except SQLAlchemyError:
            self.storage.rollback()
            error_count.labels(error_type="database").inc()
            logger.exception(f"Failed to save review state for word {word_id}")
            raise

        reviews_graded.labels(grade=grade.value).inc()
        logger.info(
            f"Graded word {word_id} as {grade.value}: interval={schedule.interval} "
            f"ease_factor={schedule.ease_factor} repetitions={schedule.repetitions}"
        )
        return state

    def select_due(self) -> List[WordWithProgress]:
        """Get words due for review, highest priority first."""
        return select_due(
            self.storage.list_words(),
            self.storage.list_review_states(),
            self._now(),
        )

    def select_new(self, limit: Optional[int] = None) -> List[WordWithProgress]:
        """Get never-studied words, newest first."""
        return select_new(
            self.storage.list_words(),
            self.storage.list_review_states(),
            limit,
        )

    def create_session(self, kind: Union[SessionKind, str]) -> FlashcardSession:
        """Create a flashcard session of new or due words."""
        try:
            return self.sessions.create_session(kind)
        except LugatError as e:
            raise self._fail(e)

    def get_session(self, session_id: str) -> Optional[FlashcardSession]:
        """Get a flashcard session by id."""
        return self.sessions.get_session(session_id)

    def advance_session(self, session_id: str) -> FlashcardSession:
        """Advance a flashcard session past its current word."""
        try:
            return self.sessions.advance_session(session_id)
        except LugatError as e:
            raise self._fail(e)

    def end_session(self, session_id: str) -> bool:
        """Discard a flashcard session."""
        return self.sessions.end_session(session_id)

    def complete_session(
        self, session_id: str, correct_answers: int, duration: int
    ) -> StudySessionRecord:
        """Log a finished flashcard session to the study history and discard it."""
        session = self.sessions.get_session(session_id)
        if session is None:
            raise self._fail(SessionNotFoundError(session_id))

        record = self.record_study_session(
            words_studied=session.total_words,
            correct_answers=correct_answers,
            total_answers=session.total_words,
            duration=duration,
        )
        self.sessions.end_session(session_id)
        return record

    def record_study_session(
        self,
        words_studied: int,
        correct_answers: int,
        total_answers: int,
        duration: int,
        date: Optional[datetime] = None,
    ) -> StudySessionRecord:
        """Append a study session to the history log."""
        counters = {
            "words_studied": words_studied,
            "correct_answers": correct_answers,
            "total_answers": total_answers,
            "duration": duration,
        }
        for name, value in counters.items():
            if value < 0:
                raise self._fail(InvalidStudySessionError(f"{name} cannot be negative", counters))
        if correct_answers > total_answers:
            raise self._fail(
                InvalidStudySessionError("correct_answers cannot exceed total_answers", counters)
            )

        if date is None:
            date = self._now()
        elif date.tzinfo is None:
            date = date.replace(tzinfo=UTC)

        record = StudySessionRecord(
            date=date.astimezone(UTC),
            words_studied=words_studied,
            correct_answers=correct_answers,
            total_answers=total_answers,
            duration=duration,
        )
        record = self.storage.add_study_session(record)
        study_sessions_recorded.inc()
        logger.info(
            f"Recorded study session: {words_studied} words, "
            f"{correct_answers}/{total_answers} correct, {duration} min"
        )
        return record

    def record_quiz_result(
        self, total_questions: int, correct_answers: int, time_spent_seconds: float
    ) -> StudySessionRecord:
        """Log a finished quiz; time spent is rounded to whole minutes."""
        return self.record_study_session(
            words_studied=total_questions,
            correct_answers=correct_answers,
            total_answers=total_questions,
            duration=int(time_spent_seconds / 60 + 0.5),
        )

    def recent_study_sessions(self, limit: int = 10) -> List[StudySessionRecord]:
        """Get the most recent study sessions, newest first."""
        return self.storage.recent_study_sessions(limit)

    def compute_stats(self) -> DashboardStats:
        """Compute the dashboard statistics at the current time."""
        now = self._now()
        # One extra day covers the gap between UTC and the local calendar
        since = now - timedelta(days=settings.stats.streak_lookback_days + 1)
        return compute_stats(
            self.storage.list_words(),
            self.storage.list_review_states(),
            self.storage.list_study_sessions(since=since),
            now,
        )

    def reset_progress(self) -> int:
        """Forget every review state. Study history is kept."""
        deleted = self.storage.delete_review_states()
        progress_resets.inc()
        logger.warning(f"Progress reset: {deleted} review states deleted")
        return deleted
