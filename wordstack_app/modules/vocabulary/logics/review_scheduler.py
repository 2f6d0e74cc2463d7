"""
Review Scheduler - Pure Spaced Repetition Logic

Pure functions for the SM-2 interval / ease-factor update.
No storage access and no clock reads: "now" is always passed in.

This module provides:
- Quality validation
- SM-2 state transitions
- The initial state of a freshly tracked word
- The long-horizon "mastered" override date
"""

import datetime
import math

from wordstack_app.core.error_handlers import ValidationError

from ..config import SchedulingConstants
from ..schemas import ScheduleState


class ReviewScheduler:
    """
    Pure calculation engine for vocabulary reviews.
    All methods are static and use only provided inputs.
    """

    @staticmethod
    def validate_quality(quality) -> int:
        """
        Reject anything that is not an integer in 0-5.

        Callers map UI actions onto the scale themselves; out-of-range values
        are never clamped.
        """
        if isinstance(quality, bool) or not isinstance(quality, int):
            raise ValidationError(
                f"quality must be an integer between {SchedulingConstants.MIN_QUALITY} "
                f"and {SchedulingConstants.MAX_QUALITY}",
                errors={'quality': repr(quality)},
            )
        if not SchedulingConstants.MIN_QUALITY <= quality <= SchedulingConstants.MAX_QUALITY:
            raise ValidationError(
                f"quality {quality} is outside {SchedulingConstants.MIN_QUALITY}-"
                f"{SchedulingConstants.MAX_QUALITY}",
                errors={'quality': quality},
            )
        return quality

    @staticmethod
    def is_success(quality: int) -> bool:
        """Quality 3 and above counts as a successful recall."""
        return quality >= SchedulingConstants.PASSING_QUALITY

    @staticmethod
    def initial_state(now: datetime.datetime) -> ScheduleState:
        """State of a word seen for the first time: due one day later."""
        return ScheduleState(
            next_review_date=now + datetime.timedelta(days=SchedulingConstants.INITIAL_INTERVAL_DAYS),
            ease_factor=SchedulingConstants.DEFAULT_EASE_FACTOR,
            interval=SchedulingConstants.INITIAL_INTERVAL_DAYS,
            repetitions=0,
        )

    @staticmethod
    def compute_next(quality: int, current: ScheduleState, now: datetime.datetime) -> ScheduleState:
        """
        Calculate the next schedule state using SM-2.

        Args:
            quality: Recall quality (0-5)
                0: Complete blackout
                1: Incorrect response, correct one remembered
                2: Incorrect response, correct one seemed easy to recall
                3: Correct response, but required significant effort
                4: Correct response, after some hesitation
                5: Perfect response
            current: Schedule state before the review
            now: Moment of the review

        Returns:
            New ScheduleState; ``current`` is left untouched.
        """
        q = ReviewScheduler.validate_quality(quality)

        if not ReviewScheduler.is_success(q):
            # Failed - start over tomorrow
            repetitions = 0
            interval = SchedulingConstants.FIRST_INTERVAL_DAYS
            ease_factor = max(
                SchedulingConstants.MIN_EASE_FACTOR,
                current.ease_factor - SchedulingConstants.FAILURE_EASE_PENALTY,
            )
        else:
            # SM-2 EF formula: EF' = EF + (0.1 - (5-q) * (0.08 + (5-q)*0.02))
            ease_factor = max(
                SchedulingConstants.MIN_EASE_FACTOR,
                current.ease_factor + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)),
            )
            if current.repetitions == 0:
                interval = SchedulingConstants.FIRST_INTERVAL_DAYS
            elif current.repetitions == 1:
                interval = SchedulingConstants.SECOND_INTERVAL_DAYS
            else:
                interval = ReviewScheduler.round_interval(current.interval * ease_factor)
            repetitions = current.repetitions + 1

        return ScheduleState(
            next_review_date=now + datetime.timedelta(days=interval),
            ease_factor=ease_factor,
            interval=interval,
            repetitions=repetitions,
            last_quality=q,
        )

    @staticmethod
    def round_interval(days: float) -> int:
        """Round half up to whole days, between one day and MAX_INTERVAL_DAYS."""
        days = min(days, SchedulingConstants.MAX_INTERVAL_DAYS)
        return max(1, int(math.floor(days + 0.5)))

    @staticmethod
    def mastered_review_date(now: datetime.datetime) -> datetime.datetime:
        """Next review date for an item retired from active review."""
        return now + datetime.timedelta(days=SchedulingConstants.MASTERED_HORIZON_DAYS)
