# modules/vocabulary/config.py


class SchedulingConstants:
    """Fixed SM-2 contract used by the review scheduler."""
    DEFAULT_EASE_FACTOR = 2.5
    MIN_EASE_FACTOR = 1.3
    FAILURE_EASE_PENALTY = 0.2
    FIRST_INTERVAL_DAYS = 1
    SECOND_INTERVAL_DAYS = 6
    INITIAL_INTERVAL_DAYS = 1
    MIN_QUALITY = 0
    MAX_QUALITY = 5
    PASSING_QUALITY = 3
    MASTERED_HORIZON_DAYS = 365
    # Upper bound for a scheduled interval (about 100 years); keeps
    # next_review_date inside the datetime range.
    MAX_INTERVAL_DAYS = 36500


class ProficiencyThresholds:
    """Repetition counts at which an item moves to the next label."""
    FAMILIAR_REPETITIONS = 3
    MASTERED_REPETITIONS = 6


class VocabularyDefaultConfig:
    VOCABULARY_STORAGE_KEY = 'wordstackVocabulary'
    REVIEW_SESSION_LIMIT = 20
    MAX_REVIEW_SESSIONS = 20
