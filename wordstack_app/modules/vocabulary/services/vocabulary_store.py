# File: wordstack_app/modules/vocabulary/services/vocabulary_store.py
"""
Vocabulary Store
================
Authoritative collection of tracked words for one learner.

* One item per case-insensitive surface form; a repeated encounter
  reinforces the existing item.
* Every mutation builds a new collection, writes it to the key-value
  backend and only then replaces the in-memory copy. A failed write raises
  ``PersistenceError`` and leaves both sides at the last committed state.
* Unreadable or corrupt persisted data falls back to an empty collection;
  the failure is kept in ``load_error`` and announced on
  ``store_load_failed``.
"""
from __future__ import annotations

import dataclasses
import json
import logging
import re
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from wordstack_app.core.error_handlers import ValidationError
from wordstack_app.utils.time_utils import resolve_now

from .. import signals
from ..config import VocabularyDefaultConfig
from ..exceptions import PersistenceError, WordNotFoundError
from ..logics import vocabulary_query
from ..logics.proficiency import classify
from ..logics.review_scheduler import ReviewScheduler
from ..schemas import (
    EDITABLE_FIELDS,
    ProficiencyLevel,
    VocabularyCandidate,
    VocabularyItem,
    VocabularyStats,
    normalize_word,
)
from .key_value import KeyValueBackend

logger = logging.getLogger(__name__)

_TUPLE_FIELDS = ('topic_tags', 'example_sentences', 'related_words')


def generate_vocabulary_id(word: str, now: datetime) -> str:
    slug = re.sub(r'\s+', '_', normalize_word(word))
    return f"vocab_{slug}_{int(now.timestamp() * 1000)}"


class VocabularyStore:
    """Persisted, deduplicated collection of VocabularyItems."""

    def __init__(
        self,
        backend: KeyValueBackend,
        storage_key: str = VocabularyDefaultConfig.VOCABULARY_STORAGE_KEY,
        autoload: bool = True,
    ):
        self._backend = backend
        self.storage_key = storage_key
        self._items: Dict[str, VocabularyItem] = {}
        self.load_error: Optional[PersistenceError] = None
        if autoload:
            self.load()

    # ── Loading & committing ──────────────────────────────────────────

    def load(self) -> Optional[PersistenceError]:
        """
        (Re)read the collection from the backend.

        Returns the PersistenceError when the data could not be read, after
        falling back to an empty collection; None on success.
        """
        try:
            raw = self._backend.get(self.storage_key)
        except Exception as e:
            return self._fail_load(f"Could not read vocabulary from backend: {e}", e)

        if raw is None:
            self._items = {}
            self.load_error = None
            return None

        try:
            items = self._deserialize(raw)
        except (ValueError, TypeError, KeyError, OverflowError, RecursionError) as e:
            return self._fail_load(f"Stored vocabulary is corrupt: {e}", e)

        self._items = items
        self.load_error = None
        logger.debug("Loaded %d vocabulary items from %s", len(items), self.storage_key)
        return None

    def _fail_load(self, message: str, cause: Exception) -> PersistenceError:
        error = PersistenceError(message, operation='read', key=self.storage_key)
        error.__cause__ = cause
        self._items = {}
        self.load_error = error
        logger.warning("%s (key=%s); continuing with an empty collection", message, self.storage_key)
        self._announce(signals.store_load_failed, error=error)
        return error

    @staticmethod
    def _deserialize(raw: str) -> Dict[str, VocabularyItem]:
        payload = json.loads(raw)
        if not isinstance(payload, list):
            raise TypeError(f"expected a list of items, got {type(payload).__name__}")
        return VocabularyStore._build_collection(VocabularyItem.from_dict(entry) for entry in payload)

    @staticmethod
    def _build_collection(items: Iterable[VocabularyItem]) -> Dict[str, VocabularyItem]:
        collection: Dict[str, VocabularyItem] = {}
        seen_words = set()
        for item in items:
            if item.id in collection:
                raise ValueError(f"duplicate id {item.id!r}")
            if item.normalized_word in seen_words:
                raise ValueError(f"duplicate word {item.word!r}")
            seen_words.add(item.normalized_word)
            collection[item.id] = item
        return collection

    def _serialize(self, items: Dict[str, VocabularyItem]) -> str:
        return json.dumps(
            [item.to_dict() for item in items.values()],
            ensure_ascii=False,
            separators=(',', ':'),
        )

    def _commit(self, items: Dict[str, VocabularyItem]) -> None:
        """Write ``items`` to the backend, then adopt them in memory."""
        payload = self._serialize(items)
        try:
            written = self._backend.set(self.storage_key, payload)
        except Exception as e:
            logger.error("Writing vocabulary to %s raised: %s", self.storage_key, e)
            raise PersistenceError(
                f"Could not save vocabulary: {e}", operation='write', key=self.storage_key
            ) from e
        if not written:
            logger.error("Backend refused to write vocabulary to %s", self.storage_key)
            raise PersistenceError(
                "Could not save vocabulary; progress may not have been saved",
                operation='write',
                key=self.storage_key,
            )
        self._items = items

    def _replace_item(self, item: VocabularyItem) -> None:
        updated = dict(self._items)
        updated[item.id] = item
        self._commit(updated)

    def _announce(self, signal, **kwargs) -> None:
        """Send ``signal`` for a change that is already committed.

        A failing receiver cannot undo the commit, so its error is logged
        instead of reaching the caller.
        """
        try:
            signal.send(self, **kwargs)
        except Exception as e:
            logger.error("Error emitting %s signal: %s", signal.name, e)

    # ── Reads ─────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, word_id: str) -> bool:
        return word_id in self._items

    def items(self) -> List[VocabularyItem]:
        return list(self._items.values())

    def get(self, word_id: str) -> Optional[VocabularyItem]:
        return self._items.get(word_id)

    def require(self, word_id: str) -> VocabularyItem:
        item = self._items.get(word_id)
        if item is None:
            raise WordNotFoundError(word_id)
        return item

    def find_by_word(self, word: str) -> Optional[VocabularyItem]:
        key = normalize_word(word)
        for item in self._items.values():
            if item.normalized_word == key:
                return item
        return None

    def due_items(self, as_of: Optional[datetime] = None) -> List[VocabularyItem]:
        """Items due at ``as_of`` (default: now), ascending by next review date."""
        return vocabulary_query.filter_due_items(self._items.values(), resolve_now(as_of))

    def due_count(self, as_of: Optional[datetime] = None) -> int:
        return len(self.due_items(as_of))

    def query(
        self,
        search: Optional[str] = None,
        level_filter: str = 'all',
        sort_by: str = 'recent',
    ) -> List[VocabularyItem]:
        return vocabulary_query.query_items(self._items.values(), search, level_filter, sort_by)

    def stats(self, as_of: Optional[datetime] = None) -> VocabularyStats:
        return vocabulary_query.compute_stats(self._items.values(), resolve_now(as_of))

    # ── Mutations ─────────────────────────────────────────────────────

    def add_or_reinforce(self, candidate: VocabularyCandidate, now: Optional[datetime] = None) -> VocabularyItem:
        """Track a newly encountered word, or reinforce the one already tracked."""
        now = resolve_now(now)
        word = (candidate.word or '').strip()
        translation = (candidate.translation or '').strip()
        errors = {}
        if not word:
            errors['word'] = 'must not be empty'
        if not translation:
            errors['translation'] = 'must not be empty'
        if errors:
            raise ValidationError("Vocabulary candidate is incomplete", errors=errors)

        existing = self.find_by_word(word)
        if existing is not None:
            item = dataclasses.replace(
                existing,
                practice_count=existing.practice_count + 1,
                last_practiced=now,
            )
            self._replace_item(item)
            logger.debug("Reinforced %r (practice count %d)", item.word, item.practice_count)
            self._announce(signals.word_reinforced, item=item)
            return item

        word_id = generate_vocabulary_id(word, now)
        if word_id in self._items:
            word_id = f"{word_id}_{uuid.uuid4().hex[:6]}"
        schedule = ReviewScheduler.initial_state(now)
        item = VocabularyItem(
            id=word_id,
            word=word,
            translation=translation,
            context=candidate.context or '',
            part_of_speech=candidate.part_of_speech or None,
            first_encountered=now,
            last_practiced=now,
            practice_count=1,
            proficiency_level=classify(schedule),
            schedule=schedule,
        )
        self._replace_item(item)
        logger.info("Tracking new word %r (%s)", item.word, item.id)
        self._announce(signals.word_added, item=item)
        return item

    def apply_review(self, word_id: str, quality: int, now: Optional[datetime] = None) -> VocabularyItem:
        """Grade a recall and advance the item's schedule."""
        now = resolve_now(now)
        quality = ReviewScheduler.validate_quality(quality)
        current = self.require(word_id)
        schedule = ReviewScheduler.compute_next(quality, current.schedule, now)
        item = dataclasses.replace(
            current,
            schedule=schedule,
            proficiency_level=classify(schedule),
            practice_count=current.practice_count + 1,
            last_practiced=now,
        )
        self._replace_item(item)
        logger.debug(
            "Reviewed %r q=%d -> interval=%d reps=%d ef=%.2f",
            item.word, quality, schedule.interval, schedule.repetitions, schedule.ease_factor,
        )
        self._announce(signals.word_reviewed, item=item, quality=quality)
        return item

    def mark_mastered(self, word_id: str, now: Optional[datetime] = None) -> VocabularyItem:
        """Retire an item from active review for a long horizon."""
        now = resolve_now(now)
        current = self.require(word_id)
        schedule = dataclasses.replace(
            current.schedule,
            repetitions=current.schedule.repetitions + 1,
            next_review_date=ReviewScheduler.mastered_review_date(now),
        )
        item = dataclasses.replace(
            current,
            schedule=schedule,
            proficiency_level=ProficiencyLevel.MASTERED,
            practice_count=current.practice_count + 1,
            last_practiced=now,
        )
        self._replace_item(item)
        logger.info("Marked %r as mastered until %s", item.word, schedule.next_review_date.date())
        self._announce(signals.word_mastered, item=item)
        return item

    def update_details(self, word_id: str, **fields: Any) -> VocabularyItem:
        """Edit display-only fields; scheduling state cannot be touched here."""
        unknown = sorted(set(fields) - set(EDITABLE_FIELDS))
        if unknown:
            raise ValidationError(
                "These fields cannot be edited",
                errors={'fields': unknown, 'editable': list(EDITABLE_FIELDS)},
            )
        current = self.require(word_id)
        changes: Dict[str, Any] = {}
        for name, value in fields.items():
            if name == 'translation':
                value = (value or '').strip()
                if not value:
                    raise ValidationError("Translation must not be empty", errors={'translation': value})
            elif name == 'context':
                value = value or ''
            elif name in _TUPLE_FIELDS:
                if value is None:
                    value = ()
                elif isinstance(value, str) or not isinstance(value, (list, tuple)):
                    raise ValidationError(f"{name} must be a list of strings", errors={name: repr(value)})
                else:
                    value = tuple(str(v) for v in value)
            elif name == 'grammatical_forms':
                if value is None:
                    value = {}
                elif not isinstance(value, dict):
                    raise ValidationError("grammatical_forms must be an object", errors={name: repr(value)})
                else:
                    value = {str(k): str(v) for k, v in value.items()}
            else:
                value = value or None
            changes[name] = value
        if not changes:
            return current
        item = dataclasses.replace(current, **changes)
        self._replace_item(item)
        logger.debug("Updated %s on %r", ', '.join(sorted(changes)), item.word)
        return item

    def delete(self, word_id: str) -> bool:
        """Remove one item; returns False if it was not tracked."""
        item = self._items.get(word_id)
        if item is None:
            return False
        remaining = dict(self._items)
        del remaining[word_id]
        self._commit(remaining)
        logger.info("Deleted %r (%s)", item.word, word_id)
        self._announce(signals.word_deleted, item=item)
        return True

    def clear(self) -> int:
        """Remove every item and the persisted entry; returns the count removed."""
        count = len(self._items)
        try:
            self._backend.remove(self.storage_key)
        except Exception as e:
            logger.error("Removing %s raised: %s", self.storage_key, e)
            raise PersistenceError(
                f"Could not clear vocabulary: {e}", operation='write', key=self.storage_key
            ) from e
        self._items = {}
        self.load_error = None
        logger.info("Cleared %d vocabulary items", count)
        self._announce(signals.vocabulary_cleared, count=count)
        return count

    # ── Export / import ───────────────────────────────────────────────

    def export_data(self) -> str:
        return json.dumps(
            {self.storage_key: [item.to_dict() for item in self._items.values()]},
            ensure_ascii=False,
            indent=2,
        )

    def import_data(self, text: str) -> int:
        """Replace the collection with an exported document; returns the item count."""
        try:
            payload = json.loads(text)
        except (TypeError, json.JSONDecodeError, RecursionError) as e:
            raise ValidationError("Import data is not valid JSON", errors={'json': str(e)}) from e

        if isinstance(payload, dict):
            if self.storage_key not in payload:
                raise ValidationError(
                    "Import data has no vocabulary section",
                    errors={'expected_key': self.storage_key},
                )
            payload = payload[self.storage_key]
        if not isinstance(payload, list):
            raise ValidationError("Import data must contain a list of items")

        try:
            items = self._build_collection(VocabularyItem.from_dict(entry) for entry in payload)
        except (ValueError, TypeError, KeyError, OverflowError, RecursionError) as e:
            raise ValidationError("Import data contains an invalid item", errors={'item': str(e)}) from e

        self._commit(items)
        self.load_error = None
        logger.info("Imported %d vocabulary items", len(items))
        return len(items)
