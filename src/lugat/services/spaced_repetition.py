"""SM-2 style review scheduling.

Everything here is a pure function of its arguments: no database access and
no hidden state. Callers persist the returned schedule themselves.
"""
import math
from datetime import datetime, timedelta, UTC
from typing import Any, Optional, Union

from lugat.config import settings
from lugat.exceptions import InvalidGradeError
from lugat.models.review_models import DifficultyBand, Grade, ReviewSchedule


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_next_review(
    grade: Grade,
    current: Optional[Any] = None,
    now: Optional[datetime] = None,
) -> ReviewSchedule:
    """Compute the schedule that follows one graded review.

    Args:
        grade: The learner's recall grade.
        current: Anything exposing ``interval``, ``ease_factor`` and
            ``repetitions`` (a ``ReviewState`` or a ``ProgressSnapshot``).
            None means the word has never been reviewed.
        now: Review time. Defaults to the current UTC time.

    Returns:
        The new interval, ease factor, repetition count and due date. A hard
        grade resets repetitions to 0; a successful one increments them.
    """
    config = settings.scheduler
    grade = parse_grade(grade)
    if now is None:
        now = datetime.now(UTC)

    interval = 1
    ease_factor = config.initial_ease_factor
    repetitions = 0
    if current is not None:
        interval = current.interval
        ease_factor = current.ease_factor
        repetitions = current.repetitions

    first_interval, second_interval = config.graduating_intervals

    if grade is Grade.HARD:
        new_interval = 1
        new_ease_factor = max(config.minimum_ease_factor, ease_factor - config.hard_penalty)
        new_repetitions = 0
    else:
        if repetitions == 0:
            new_interval = first_interval
        elif repetitions == 1:
            new_interval = second_interval
        else:
            new_interval = _round_half_up(interval * ease_factor)

        if grade is Grade.EASY:
            new_ease_factor = ease_factor + config.easy_bonus
        else:
            new_ease_factor = max(config.minimum_ease_factor, ease_factor - config.medium_penalty)
        new_repetitions = repetitions + 1

    # Keep repeated float adjustments from drifting (2.5 - 0.08 must stay 2.42)
    new_ease_factor = max(config.minimum_ease_factor, round(new_ease_factor, 2))
    new_interval = max(1, new_interval)

    return ReviewSchedule(
        interval=new_interval,
        ease_factor=new_ease_factor,
        repetitions=new_repetitions,
        next_review_date=now + timedelta(days=new_interval),
    )


def grade_from_score(score: float) -> Grade:
    """Map a 0-5 quiz score onto a recall grade."""
    if score >= 4:
        return Grade.EASY
    if score >= 3:
        return Grade.MEDIUM
    return Grade.HARD


def parse_grade(value: Union[Grade, str, int]) -> Grade:
    """Validate a grade coming from outside the core.

    Accepts a ``Grade``, its name ("easy", "Medium", ...) or the stored
    difficulty band number (1, 2 or 3).
    """
    if isinstance(value, Grade):
        return value

    if isinstance(value, str):
        try:
            return Grade(value.strip().lower())
        except ValueError:
            pass
    elif isinstance(value, int) and not isinstance(value, bool):
        if value in (DifficultyBand.EASY, DifficultyBand.MEDIUM, DifficultyBand.HARD):
            return Grade[DifficultyBand(value).name]

    raise InvalidGradeError(
        f"Invalid grade: {value!r}. Expected one of: easy, medium, hard",
        {"grade": value},
    )
