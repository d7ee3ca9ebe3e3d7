"""Service for building flashcard sessions and tracking progress through them."""
import logging
import secrets
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Callable, Optional, Union

from lugat.config import settings
from lugat.exceptions import InvalidSessionKindError, SessionNotFoundError
from lugat.models.base import as_utc
from lugat.models.review_models import FlashcardSession, SessionKind
from lugat.monitoring import active_sessions, session_size, sessions_created, sessions_evicted
from lugat.services.selection import select_due, select_new
from lugat.services.storage import Storage

logger = logging.getLogger(__name__)


@dataclass
class _SessionEntry:
    expires_at: float
    session: FlashcardSession


class SessionStore:
    """In-memory session registry with a TTL and a size bound.

    Expired sessions are dropped lazily whenever the registry is touched.
    When full, the oldest session is evicted to make room.
    """

    def __init__(
        self,
        ttl_seconds: Optional[int] = None,
        max_sessions: Optional[int] = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds or settings.session.ttl_seconds
        self.max_sessions = max_sessions or settings.session.max_sessions
        self._timer = timer
        self._lock = threading.Lock()
        self._sessions: "OrderedDict[str, _SessionEntry]" = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired()
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return self.get(session_id) is not None

    def _evict_expired(self) -> None:
        now = self._timer()
        expired = [key for key, entry in self._sessions.items() if entry.expires_at <= now]
        for key in expired:
            del self._sessions[key]
            sessions_evicted.labels(reason="expired").inc()
            logger.debug(f"Session {key} expired")
        active_sessions.set(len(self._sessions))

    def put(self, session: FlashcardSession) -> None:
        with self._lock:
            self._evict_expired()
            self._sessions.pop(session.session_id, None)
            while len(self._sessions) >= self.max_sessions:
                oldest, _ = self._sessions.popitem(last=False)
                sessions_evicted.labels(reason="capacity").inc()
                logger.info(f"Session registry full, evicted session {oldest}")
            self._sessions[session.session_id] = _SessionEntry(
                expires_at=self._timer() + self.ttl_seconds,
                session=session,
            )
            active_sessions.set(len(self._sessions))

    def get(self, session_id: str) -> Optional[FlashcardSession]:
        with self._lock:
            self._evict_expired()
            entry = self._sessions.get(session_id)
            return entry.session if entry else None

    def touch(self, session_id: str) -> Optional[FlashcardSession]:
        """Return a session and restart its TTL."""
        with self._lock:
            self._evict_expired()
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            entry.expires_at = self._timer() + self.ttl_seconds
            return entry.session

    def discard(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
            active_sessions.set(len(self._sessions))
            return removed

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
            active_sessions.set(0)


def parse_session_kind(kind: Union[SessionKind, str]) -> SessionKind:
    """Validate a session kind coming from outside the core."""
    if isinstance(kind, SessionKind):
        return kind
    try:
        return SessionKind(str(kind).strip().lower())
    except ValueError:
        raise InvalidSessionKindError(
            f"Invalid session type: {kind!r}. Expected 'new' or 'review'",
            {"kind": kind},
        ) from None


class SessionService:
    """Service for managing flashcard sessions."""

    def __init__(
        self,
        storage: Storage,
        store: Optional[SessionStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the service with a storage backend and a session registry."""
        self.storage = storage
        self.store = store if store is not None else SessionStore()
        self.clock = clock or (lambda: datetime.now(UTC))

    def create_session(self, kind: Union[SessionKind, str]) -> FlashcardSession:
        """Package the current new or due words into a session.

        A session with no words is still valid; callers decide how to present
        "nothing to study".
        """
        kind = parse_session_kind(kind)
        now = as_utc(self.clock())
        words = self.storage.list_words()
        states = self.storage.list_review_states()

        if kind is SessionKind.NEW:
            selected = select_new(words, states)
        else:
            selected = select_due(words, states, now)

        session = FlashcardSession(
            session_id=secrets.token_urlsafe(12),
            kind=kind,
            words=tuple(selected),
            created_at=now,
        )
        self.store.put(session)

        sessions_created.labels(kind=kind.value).inc()
        session_size.labels(kind=kind.value).observe(session.total_words)
        if session.is_empty:
            logger.info(f"Created empty {kind.value} session {session.session_id}")
        else:
            logger.info(
                f"Created {kind.value} session {session.session_id} with {session.total_words} words"
            )
        return session

    def get_session(self, session_id: str) -> Optional[FlashcardSession]:
        """Get a session by id, or None if it is unknown or expired."""
        return self.store.get(session_id)

    def advance_session(self, session_id: str) -> FlashcardSession:
        """Move a session's cursor past its current word."""
        session = self.store.touch(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        session.advance()
        if session.is_complete:
            logger.info(f"Session {session_id} complete after {session.total_words} words")
        return session

    def end_session(self, session_id: str) -> bool:
        """Discard a session. Returns False when it was already gone."""
        removed = self.store.discard(session_id)
        if removed:
            logger.info(f"Session {session_id} ended")
        return removed
