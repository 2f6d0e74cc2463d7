# File: wordstack_app/modules/vocabulary/services/review_session.py
"""
Review Session
==============
One sitting over a fixed snapshot of items.

Lifecycle::

    session = ReviewSession.start(store.due_items(), store)
    while not session.is_complete():
        item = session.current_item
        session.review(Outcome.GOOD)      # or session.skip()
    stats = session.summary()

The snapshot never changes after ``start``. A "mastered" outcome retires
the item in the store but the walk still moves exactly one step, so the
following item is neither skipped nor repeated.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional, Sequence, Tuple

from wordstack_app.utils.time_utils import resolve_now

from .. import signals
from ..exceptions import EmptyInputError, SessionCompleteError
from ..logics import session_tally
from ..logics.outcomes import outcome_quality, parse_outcome
from ..schemas import Outcome, SessionStats, VocabularyItem
from .vocabulary_store import VocabularyStore

logger = logging.getLogger(__name__)


class ReviewSession:
    """Stateful walk over a snapshot of vocabulary items."""

    def __init__(
        self,
        items: Sequence[VocabularyItem],
        store: VocabularyStore,
        start_time: datetime,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self._items: Tuple[VocabularyItem, ...] = tuple(items)
        self._store = store
        self.start_time = start_time
        self.position = 0
        self._counts = session_tally.empty_counts()
        self._skipped = 0
        self._completed_announced = False

    @classmethod
    def start(
        cls,
        items: Sequence[VocabularyItem],
        store: VocabularyStore,
        now: Optional[datetime] = None,
    ) -> 'ReviewSession':
        """Snapshot ``items`` and begin at the first one."""
        snapshot = tuple(items or ())
        if not snapshot:
            raise EmptyInputError()
        session = cls(snapshot, store, start_time=resolve_now(now))
        logger.info("Review session %s started with %d items", session.session_id, len(snapshot))
        session._announce(signals.review_session_started)
        return session

    # ── State ─────────────────────────────────────────────────────────

    @property
    def items(self) -> Tuple[VocabularyItem, ...]:
        return self._items

    @property
    def total(self) -> int:
        return len(self._items)

    @property
    def remaining(self) -> int:
        return self.total - self.position

    @property
    def current_item(self) -> Optional[VocabularyItem]:
        """The item to present now, with its latest stored state."""
        if self.is_complete():
            return None
        snapshot_item = self._items[self.position]
        return self._store.get(snapshot_item.id) or snapshot_item

    def is_complete(self) -> bool:
        return self.position >= len(self._items)

    # ── Actions ───────────────────────────────────────────────────────

    def review(self, outcome: Outcome, now: Optional[datetime] = None) -> VocabularyItem:
        """
        Grade the current item and move on.

        Store errors propagate with the position unchanged so the caller can
        retry or skip explicitly.
        """
        if self.is_complete():
            raise SessionCompleteError()
        if not isinstance(outcome, Outcome):
            outcome = parse_outcome(outcome)
        now = resolve_now(now)
        word_id = self._items[self.position].id

        if outcome is Outcome.MASTERED:
            updated = self._store.mark_mastered(word_id, now=now)
        else:
            updated = self._store.apply_review(word_id, outcome_quality(outcome), now=now)

        self._counts = session_tally.tally(self._counts, outcome)
        self.position += 1
        self._announce_if_complete(now)
        return updated

    def skip(self, now: Optional[datetime] = None) -> None:
        """Move on without grading; counted as incomplete."""
        if self.is_complete():
            raise SessionCompleteError()
        self._skipped += 1
        self.position += 1
        self._announce_if_complete(resolve_now(now))

    def _announce_if_complete(self, now: datetime) -> None:
        if self.is_complete() and not self._completed_announced:
            self._completed_announced = True
            stats = self.summary(now)
            logger.info(
                "Review session %s complete: %d reviewed, %d skipped, accuracy %d%%",
                self.session_id, stats.total_reviewed, stats.skipped, stats.accuracy_percent,
            )
            self._announce(signals.review_session_completed, stats=stats)

    def _announce(self, signal, **kwargs) -> None:
        try:
            signal.send(self, **kwargs)
        except Exception as e:
            logger.error("Error emitting %s signal: %s", signal.name, e)

    # ── Statistics ────────────────────────────────────────────────────

    def summary(self, now: Optional[datetime] = None) -> SessionStats:
        now = resolve_now(now)
        return SessionStats(
            total_items=self.total,
            total_reviewed=session_tally.graded_total(self._counts),
            skipped=self._skipped,
            outcome_counts={outcome.value: n for outcome, n in self._counts.items()},
            accuracy=session_tally.accuracy(self._counts),
            elapsed_seconds=max(0.0, (now - self.start_time).total_seconds()),
        )

    def to_dict(self, now: Optional[datetime] = None) -> dict:
        current = self.current_item
        return {
            'session_id': self.session_id,
            'position': self.position,
            'total': self.total,
            'remaining': self.remaining,
            'is_complete': self.is_complete(),
            'current_item': current.to_dict() if current else None,
            'summary': self.summary(now).to_dict(),
        }
