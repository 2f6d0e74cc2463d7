# File: wordstack_app/modules/vocabulary/schemas.py
"""
Data shapes for the vocabulary engine.

Items and schedule states are frozen dataclasses: every update produces a
new value through ``dataclasses.replace`` so the store can commit or discard
a change as a whole.
"""
from __future__ import annotations

import datetime
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from wordstack_app.utils.time_utils import parse_iso, to_iso

from .config import SchedulingConstants


class ProficiencyLevel(str, Enum):
    NEW = 'new'
    LEARNING = 'learning'
    FAMILIAR = 'familiar'
    MASTERED = 'mastered'


PROFICIENCY_ORDER = {
    ProficiencyLevel.NEW: 0,
    ProficiencyLevel.LEARNING: 1,
    ProficiencyLevel.FAMILIAR: 2,
    ProficiencyLevel.MASTERED: 3,
}


class Outcome(str, Enum):
    """Every way a graded review can end, independent of the button layout."""
    FAIL = 'fail'
    HARD = 'hard'
    GOOD = 'good'
    EASY = 'easy'
    MASTERED = 'mastered'


@dataclass(frozen=True)
class ScheduleState:
    """SM-2 scheduling state of one item."""
    next_review_date: datetime.datetime
    ease_factor: float = SchedulingConstants.DEFAULT_EASE_FACTOR
    interval: int = SchedulingConstants.INITIAL_INTERVAL_DAYS  # days
    repetitions: int = 0
    last_quality: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'easeFactor': self.ease_factor,
            'interval': self.interval,
            'repetitions': self.repetitions,
            'nextReviewDate': to_iso(self.next_review_date),
        }
        if self.last_quality is not None:
            data['lastQuality'] = self.last_quality
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ScheduleState':
        ease_factor = _finite(data['easeFactor'], 'easeFactor')
        interval = int(_finite(data['interval'], 'interval'))
        repetitions = int(data['repetitions'])
        last_quality = data.get('lastQuality')
        if ease_factor < SchedulingConstants.MIN_EASE_FACTOR:
            raise ValueError(f'easeFactor {ease_factor} below floor')
        if interval < 1:
            raise ValueError(f'interval {interval} is not a positive number of days')
        if repetitions < 0:
            raise ValueError(f'repetitions {repetitions} is negative')
        if last_quality is not None:
            last_quality = int(last_quality)
            if not SchedulingConstants.MIN_QUALITY <= last_quality <= SchedulingConstants.MAX_QUALITY:
                raise ValueError(f'lastQuality {last_quality} outside 0-5')
        return cls(
            next_review_date=parse_iso(data['nextReviewDate']),
            ease_factor=ease_factor,
            interval=interval,
            repetitions=repetitions,
            last_quality=last_quality,
        )


@dataclass(frozen=True)
class VocabularyCandidate:
    """A word produced by the extraction collaborator, not yet tracked."""
    word: str
    translation: str
    context: str = ''
    part_of_speech: Optional[str] = None


# Display-only fields a caller may edit through VocabularyStore.update_details.
EDITABLE_FIELDS = (
    'translation',
    'context',
    'part_of_speech',
    'topic_tags',
    'example_sentences',
    'cultural_notes',
    'related_words',
    'grammatical_forms',
)


@dataclass(frozen=True)
class VocabularyItem:
    id: str
    word: str
    translation: str
    context: str
    first_encountered: datetime.datetime
    last_practiced: datetime.datetime
    schedule: ScheduleState
    part_of_speech: Optional[str] = None
    practice_count: int = 1
    proficiency_level: ProficiencyLevel = ProficiencyLevel.NEW
    topic_tags: Tuple[str, ...] = ()
    example_sentences: Tuple[str, ...] = ()
    cultural_notes: Optional[str] = None
    related_words: Tuple[str, ...] = ()
    grammatical_forms: Dict[str, str] = field(default_factory=dict)

    @property
    def normalized_word(self) -> str:
        return normalize_word(self.word)

    def is_due(self, as_of: datetime.datetime) -> bool:
        return self.schedule.next_review_date <= as_of

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'id': self.id,
            'word': self.word,
            'translation': self.translation,
            'context': self.context,
            'firstEncountered': to_iso(self.first_encountered),
            'lastPracticed': to_iso(self.last_practiced),
            'practiceCount': self.practice_count,
            'proficiencyLevel': self.proficiency_level.value,
            'srsData': self.schedule.to_dict(),
        }
        if self.part_of_speech:
            data['partOfSpeech'] = self.part_of_speech
        if self.topic_tags:
            data['topicTags'] = list(self.topic_tags)
        if self.example_sentences:
            data['exampleSentences'] = list(self.example_sentences)
        if self.cultural_notes:
            data['culturalNotes'] = self.cultural_notes
        if self.related_words:
            data['relatedWords'] = list(self.related_words)
        if self.grammatical_forms:
            data['grammaticalForms'] = dict(self.grammatical_forms)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'VocabularyItem':
        """Rebuild an item from its persisted form.

        Accepts the legacy ``danishWord`` / ``englishTranslation`` keys.
        Raises ``KeyError``, ``TypeError`` or ``ValueError`` on malformed data.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f'vocabulary entry must be an object, got {type(data).__name__}')
        word = str(data.get('word') or data.get('danishWord') or '').strip()
        translation = str(data.get('translation') or data.get('englishTranslation') or '').strip()
        if not word:
            raise ValueError('vocabulary entry has an empty word')
        if not translation:
            raise ValueError(f'vocabulary entry {word!r} has an empty translation')
        practice_count = int(_finite(data.get('practiceCount', 0), 'practiceCount'))
        if practice_count < 0:
            raise ValueError(f'practiceCount {practice_count} is negative')
        forms = data.get('grammaticalForms') or {}
        if not isinstance(forms, Mapping):
            raise TypeError('grammaticalForms must be an object')
        return cls(
            id=str(data['id']),
            word=word,
            translation=translation,
            context=str(data.get('context') or ''),
            part_of_speech=data.get('partOfSpeech') or None,
            first_encountered=parse_iso(data['firstEncountered']),
            last_practiced=parse_iso(data['lastPracticed']),
            practice_count=practice_count,
            proficiency_level=ProficiencyLevel(data.get('proficiencyLevel', ProficiencyLevel.NEW.value)),
            schedule=ScheduleState.from_dict(data['srsData']),
            topic_tags=_str_tuple(data.get('topicTags')),
            example_sentences=_str_tuple(data.get('exampleSentences')),
            cultural_notes=data.get('culturalNotes') or None,
            related_words=_str_tuple(data.get('relatedWords')),
            grammatical_forms={str(k): str(v) for k, v in forms.items()},
        )


@dataclass(frozen=True)
class VocabularyStats:
    total: int
    due: int
    by_level: Dict[str, int]

    def to_dict(self) -> Dict[str, Any]:
        return {'total': self.total, 'due': self.due, 'by_level': dict(self.by_level)}


@dataclass(frozen=True)
class SessionStats:
    """Aggregate of one review sitting."""
    total_items: int
    total_reviewed: int
    skipped: int
    outcome_counts: Dict[str, int]
    accuracy: float
    elapsed_seconds: float

    @property
    def accuracy_percent(self) -> int:
        return round(self.accuracy * 100)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_items': self.total_items,
            'total_reviewed': self.total_reviewed,
            'skipped': self.skipped,
            'outcome_counts': dict(self.outcome_counts),
            'accuracy': self.accuracy,
            'accuracy_percent': self.accuracy_percent,
            'elapsed_seconds': self.elapsed_seconds,
        }


def normalize_word(word: str) -> str:
    """Dedup key for a surface form: trimmed and case-folded."""
    return word.strip().casefold()


def _finite(value: Any, name: str) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f'{name} {value!r} is not a finite number')
    return number


def _str_tuple(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise TypeError(f'expected a list of strings, got {type(value).__name__}')
    return tuple(str(v) for v in value)
