"""
Tests for ReviewSession

Covers the walk over a snapshot, the mastered outcome, skipping,
store failures mid-session and the summary statistics.
"""
from datetime import timedelta

import pytest

from conftest import STORAGE_KEY, candidate
from wordstack_app.modules.vocabulary import signals
from wordstack_app.modules.vocabulary.exceptions import (
    EmptyInputError,
    PersistenceError,
    SessionCompleteError,
    WordNotFoundError,
)
from wordstack_app.modules.vocabulary.schemas import Outcome, ProficiencyLevel
from wordstack_app.modules.vocabulary.services import InMemoryKeyValueBackend, ReviewSession, VocabularyStore


class RefusingBackend(InMemoryKeyValueBackend):

    def __init__(self):
        super().__init__()
        self.refuse = False

    def set(self, key, value):
        if self.refuse:
            return False
        return super().set(key, value)


def seed(store, now, words=('en', 'to', 'tre')):
    return [store.add_or_reinforce(candidate(w, w.upper()), now=now) for w in words]


class TestStart:

    def test_empty_input_rejected(self, store, now):
        with pytest.raises(EmptyInputError):
            ReviewSession.start([], store, now=now)

    def test_initial_state(self, store, now):
        items = seed(store, now)
        session = ReviewSession.start(items, store, now=now)
        assert session.total == 3
        assert session.remaining == 3
        assert session.position == 0
        assert session.current_item.id == items[0].id
        assert not session.is_complete()

    def test_started_signal(self, store, now):
        started = []

        def on_started(sender):
            started.append(sender.session_id)

        signals.review_session_started.connect(on_started)
        try:
            session = ReviewSession.start(seed(store, now), store, now=now)
        finally:
            signals.review_session_started.disconnect(on_started)
        assert started == [session.session_id]


class TestWalk:

    def test_every_item_presented_once(self, store, now):
        items = seed(store, now, words=('a', 'b', 'c', 'd', 'e'))
        session = ReviewSession.start(items, store, now=now)
        outcomes = [Outcome.GOOD, Outcome.MASTERED, Outcome.FAIL, Outcome.MASTERED, Outcome.EASY]

        presented = []
        for outcome in outcomes:
            presented.append(session.current_item.id)
            session.review(outcome, now=now)

        assert presented == [i.id for i in items]
        assert session.is_complete()
        assert session.current_item is None
        assert session.remaining == 0

    def test_mastered_outcome_does_not_skip_next(self, store, now):
        first, second, third = seed(store, now)
        session = ReviewSession.start([first, second, third], store, now=now)

        session.review(Outcome.MASTERED, now=now)
        assert store.get(first.id).proficiency_level == ProficiencyLevel.MASTERED
        assert session.current_item.id == second.id
        assert session.remaining == 2

    def test_review_applies_quality(self, store, now):
        items = seed(store, now)
        session = ReviewSession.start(items, store, now=now)
        updated = session.review(Outcome.HARD, now=now)
        assert updated.schedule.last_quality == 3
        assert store.get(items[0].id).schedule.repetitions == 1

    def test_string_outcome_accepted(self, store, now):
        session = ReviewSession.start(seed(store, now), store, now=now)
        session.review('easy', now=now)
        assert session.summary(now).outcome_counts['easy'] == 1

    def test_current_item_reflects_store(self, store, now):
        items = seed(store, now)
        session = ReviewSession.start(items, store, now=now)
        store.update_details(items[0].id, translation='ONE')
        assert session.current_item.translation == 'ONE'

    def test_review_after_completion(self, store, now):
        session = ReviewSession.start(seed(store, now, words=('solo',)), store, now=now)
        session.review(Outcome.GOOD, now=now)
        with pytest.raises(SessionCompleteError):
            session.review(Outcome.GOOD, now=now)
        with pytest.raises(SessionCompleteError):
            session.skip(now=now)

    def test_snapshot_not_affected_by_new_words(self, store, now):
        items = seed(store, now)
        session = ReviewSession.start(items, store, now=now)
        store.add_or_reinforce(candidate('fire', 'FOUR'), now=now)
        assert session.total == 3


class TestSkip:

    def test_skip_moves_on_without_grading(self, store, now):
        items = seed(store, now)
        session = ReviewSession.start(items, store, now=now)
        session.skip(now=now)

        assert session.current_item.id == items[1].id
        assert store.get(items[0].id) == items[0]
        stats = session.summary(now)
        assert stats.skipped == 1
        assert stats.total_reviewed == 0


class TestStoreFailure:

    def test_failed_write_keeps_position(self, now):
        backend = RefusingBackend()
        store = VocabularyStore(backend, storage_key=STORAGE_KEY)
        items = seed(store, now)
        session = ReviewSession.start(items, store, now=now)

        backend.refuse = True
        with pytest.raises(PersistenceError):
            session.review(Outcome.GOOD, now=now)
        assert session.position == 0
        assert session.summary(now).total_reviewed == 0

        backend.refuse = False
        session.review(Outcome.GOOD, now=now)
        assert session.position == 1

    def test_deleted_word_can_be_skipped(self, store, now):
        items = seed(store, now)
        session = ReviewSession.start(items, store, now=now)
        store.delete(items[0].id)
        assert session.current_item.id == items[0].id
        with pytest.raises(WordNotFoundError):
            session.review(Outcome.GOOD, now=now)
        session.skip(now=now)
        assert session.current_item.id == items[1].id


class TestSummary:

    def test_accuracy_and_counts(self, store, now):
        items = seed(store, now, words=('a', 'b', 'c', 'd', 'e'))
        session = ReviewSession.start(items, store, now=now)
        for outcome in (Outcome.FAIL, Outcome.HARD, Outcome.GOOD, Outcome.MASTERED):
            session.review(outcome, now=now)
        session.skip(now=now)

        stats = session.summary(now + timedelta(minutes=2))
        assert stats.total_items == 5
        assert stats.total_reviewed == 4
        assert stats.skipped == 1
        assert stats.accuracy == pytest.approx(0.75)
        assert stats.accuracy_percent == 75
        assert stats.elapsed_seconds == 120.0
        assert stats.outcome_counts == {'fail': 1, 'hard': 1, 'good': 1, 'easy': 0, 'mastered': 1}

    def test_nothing_graded_means_zero_accuracy(self, store, now):
        session = ReviewSession.start(seed(store, now), store, now=now)
        assert session.summary(now).accuracy == 0.0

    def test_completion_announced_once(self, store, now):
        completed = []

        def on_completed(sender, stats):
            completed.append(stats.total_reviewed)

        session = ReviewSession.start(seed(store, now, words=('x', 'y')), store, now=now)
        signals.review_session_completed.connect(on_completed, sender=session)
        try:
            session.review(Outcome.GOOD, now=now)
            session.skip(now=now)
            session.summary(now)
        finally:
            signals.review_session_completed.disconnect(on_completed, sender=session)
        assert completed == [1]

    def test_to_dict(self, store, now):
        items = seed(store, now)
        session = ReviewSession.start(items, store, now=now)
        data = session.to_dict(now)
        assert data['session_id'] == session.session_id
        assert data['remaining'] == 3
        assert data['current_item']['id'] == items[0].id
        assert data['summary']['accuracy'] == 0.0


class TestFailingReceivers:

    def test_review_counted_once_when_receiver_raises(self, store, now):
        items = seed(store, now)
        session = ReviewSession.start(items, store, now=now)

        def broken_receiver(sender, **kwargs):
            raise RuntimeError('receiver failed')

        signals.word_reviewed.connect(broken_receiver, sender=store)
        try:
            session.review(Outcome.GOOD, now=now)
        finally:
            signals.word_reviewed.disconnect(broken_receiver, sender=store)

        assert session.position == 1
        assert session.summary(now).total_reviewed == 1
        assert store.get(items[0].id).schedule.repetitions == 1

    def test_completion_receiver_failure_is_contained(self, store, now):
        session = ReviewSession.start(seed(store, now, words=('solo',)), store, now=now)

        def broken_receiver(sender, **kwargs):
            raise RuntimeError('receiver failed')

        signals.review_session_completed.connect(broken_receiver, sender=session)
        try:
            session.review(Outcome.EASY, now=now)
        finally:
            signals.review_session_completed.disconnect(broken_receiver, sender=session)
        assert session.is_complete()
