"""Exception classes raised by the spaced-repetition core."""
from typing import Any, Dict, Optional


class LugatError(Exception):
    """Base exception for the package."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidGradeError(LugatError, ValueError):
    """Grade value outside easy/medium/hard."""
    pass


class InvalidSessionKindError(LugatError, ValueError):
    """Session kind outside new/review."""
    pass


class InvalidStudySessionError(LugatError, ValueError):
    """Study session record with inconsistent counters."""
    pass


class UnknownWordError(LugatError, LookupError):
    """Referenced word id has no corresponding word."""

    def __init__(self, word_id: int):
        super().__init__(f"Word {word_id} not found", {"word_id": word_id})
        self.word_id = word_id


class SessionNotFoundError(LugatError, LookupError):
    """Flashcard session id is unknown or has expired."""

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found", {"session_id": session_id})
        self.session_id = session_id


class SessionExhaustedError(LugatError):
    """Flashcard session has no words left to advance past."""

    def __init__(self, session_id: str, total_words: int):
        super().__init__(
            f"Session {session_id} is already complete",
            {"session_id": session_id, "total_words": total_words},
        )
        self.session_id = session_id
