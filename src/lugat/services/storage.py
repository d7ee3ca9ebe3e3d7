"""Storage interface the learning core reads from and writes to."""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from lugat.models.models import ReviewState, StudySessionRecord, Word
from lugat.monitoring import db_operations

logger = logging.getLogger(__name__)


class Storage(ABC):
    """Keyed collections of words, review states and study session records."""

    # Words
    @abstractmethod
    def list_words(self) -> List[Word]:
        """Return every word."""

    @abstractmethod
    def get_word(self, word_id: int) -> Optional[Word]:
        """Return a word by id, or None."""

    @abstractmethod
    def add_word(
        self,
        ottoman: str,
        pronunciation: str,
        turkish: str,
        example: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Word:
        """Store a new word and return it with its id assigned."""

    # Review states
    @abstractmethod
    def get_review_state(self, word_id: int) -> Optional[ReviewState]:
        """Return the review state of a word, or None if it was never graded."""

    @abstractmethod
    def list_review_states(self) -> Dict[int, ReviewState]:
        """Return every review state keyed by word id."""

    @abstractmethod
    def save_review_state(self, state: ReviewState) -> ReviewState:
        """Insert or update a review state."""

    @abstractmethod
    def delete_review_states(self) -> int:
        """Delete every review state and return how many were removed."""

    # Study sessions
    @abstractmethod
    def add_study_session(self, record: StudySessionRecord) -> StudySessionRecord:
        """Append a study session record."""

    @abstractmethod
    def list_study_sessions(self, since: Optional[datetime] = None) -> List[StudySessionRecord]:
        """Return study session records, optionally only those at or after ``since``."""

    @abstractmethod
    def recent_study_sessions(self, limit: int = 10) -> List[StudySessionRecord]:
        """Return the newest study session records first."""

    def rollback(self) -> None:
        """Discard pending writes after a failed operation."""


class SqlStorage(Storage):
    """Storage backed by an SQLAlchemy session."""

    def __init__(self, db: Session):
        """Initialize the storage with a database session."""
        self.db = db

    def list_words(self) -> List[Word]:
        db_operations.labels(operation_type="select").inc()
        return self.db.query(Word).order_by(Word.id).all()

    def get_word(self, word_id: int) -> Optional[Word]:
        db_operations.labels(operation_type="select").inc()
        return self.db.query(Word).filter(Word.id == word_id).first()

    def add_word(
        self,
        ottoman: str,
        pronunciation: str,
        turkish: str,
        example: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Word:
        word = Word(
            ottoman=ottoman,
            pronunciation=pronunciation,
            turkish=turkish,
            example=example,
            category=category,
        )
        self.db.add(word)
        self.db.commit()
        self.db.refresh(word)
        db_operations.labels(operation_type="insert").inc()
        return word

    def get_review_state(self, word_id: int) -> Optional[ReviewState]:
        db_operations.labels(operation_type="select").inc()
        return self.db.query(ReviewState).filter(ReviewState.word_id == word_id).first()

    def list_review_states(self) -> Dict[int, ReviewState]:
        db_operations.labels(operation_type="select").inc()
        return {state.word_id: state for state in self.db.query(ReviewState).all()}

    def save_review_state(self, state: ReviewState) -> ReviewState:
        self.db.add(state)
        self.db.commit()
        self.db.refresh(state)
        db_operations.labels(operation_type="upsert").inc()
        return state

    def delete_review_states(self) -> int:
        deleted = self.db.query(ReviewState).delete(synchronize_session=False)
        self.db.commit()
        # Drop any stale identities still referenced by word relationships
        self.db.expire_all()
        db_operations.labels(operation_type="delete").inc()
        logger.info(f"Deleted {deleted} review states")
        return deleted

    def add_study_session(self, record: StudySessionRecord) -> StudySessionRecord:
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        db_operations.labels(operation_type="insert").inc()
        return record

    def list_study_sessions(self, since: Optional[datetime] = None) -> List[StudySessionRecord]:
        db_operations.labels(operation_type="select").inc()
        query = self.db.query(StudySessionRecord)
        if since is not None:
            query = query.filter(StudySessionRecord.date >= since)
        return query.order_by(StudySessionRecord.date).all()

    def recent_study_sessions(self, limit: int = 10) -> List[StudySessionRecord]:
        db_operations.labels(operation_type="select").inc()
        return (
            self.db.query(StudySessionRecord)
            .order_by(StudySessionRecord.date.desc(), StudySessionRecord.id.desc())
            .limit(limit)
            .all()
        )

    def rollback(self) -> None:
        self.db.rollback()
