"""Coarse proficiency label derived from the repetition count."""

from ..config import ProficiencyThresholds
from ..schemas import ProficiencyLevel, ScheduleState


def classify(schedule: ScheduleState) -> ProficiencyLevel:
    """Map a (post-update) schedule state to the label shown to the learner."""
    repetitions = schedule.repetitions
    if repetitions == 0:
        return ProficiencyLevel.NEW
    if repetitions < ProficiencyThresholds.FAMILIAR_REPETITIONS:
        return ProficiencyLevel.LEARNING
    if repetitions < ProficiencyThresholds.MASTERED_REPETITIONS:
        return ProficiencyLevel.FAMILIAR
    return ProficiencyLevel.MASTERED
