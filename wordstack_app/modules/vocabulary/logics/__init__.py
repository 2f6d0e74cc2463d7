from .outcomes import OUTCOME_QUALITY, outcome_from_button
from .proficiency import classify
from .review_scheduler import ReviewScheduler

__all__ = ["OUTCOME_QUALITY", "ReviewScheduler", "classify", "outcome_from_button"]
