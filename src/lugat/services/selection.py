"""Selection of words for review and for first-time study."""
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Iterable, List, Mapping, Optional

from lugat.config import settings
from lugat.models.review_models import WordWithProgress

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def days_overdue(state: Any, now: datetime) -> int:
    """Whole days past the due date, 0 for words that are not overdue."""
    overdue = (now - state.next_review_at) / ONE_DAY
    return max(0, math.floor(overdue))


def review_priority(state: Any, now: datetime) -> float:
    """Priority of a due word: overdue-ness dominates, harder words break ties."""
    return days_overdue(state, now) * settings.selection.overdue_weight + 1 / state.ease_factor


def select_due(
    words: Iterable[Any],
    states: Mapping[int, Any],
    now: datetime,
) -> List[WordWithProgress]:
    """Words whose review state is due at ``now``, highest priority first."""
    words_by_id = {word.id: word for word in words}
    due = []
    for word_id, state in states.items():
        if not state.is_due(now):
            continue
        word = words_by_id.get(word_id)
        if word is None:
            logger.warning(f"Review state for missing word {word_id} skipped")
            continue
        due.append((review_priority(state, now), word, state))

    due.sort(key=lambda entry: (-entry[0], entry[1].id))
    return [WordWithProgress.from_word(word, state) for _, word, state in due]


def select_new(
    words: Iterable[Any],
    states: Mapping[int, Any],
    limit: Optional[int] = None,
) -> List[WordWithProgress]:
    """Words without a review state, most recently added first.

    ``limit`` of None returns every unseen word.
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    unseen = sorted(
        (word for word in words if word.id not in states),
        key=lambda word: word.id,
        reverse=True,
    )
    if limit is not None:
        unseen = unseen[:limit]
    return [WordWithProgress.from_word(word) for word in unseen]
