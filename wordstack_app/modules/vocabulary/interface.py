# File: wordstack_app/modules/vocabulary/interface.py
"""
Vocabulary Interface
====================
Public API for the presentation layer. One VocabularyStore is kept per
application (single learner, single owner) together with the registry of
in-progress review sessions, which are never persisted.
"""
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from flask import current_app

from wordstack_app.core.error_handlers import NotFoundError

from .config import VocabularyDefaultConfig
from .logics import vocabulary_query
from .schemas import VocabularyItem
from .services.key_value import SqlKeyValueBackend
from .services.review_session import ReviewSession
from .services.vocabulary_store import VocabularyStore

_STORE_KEY = 'wordstack.vocabulary_store'
_SESSIONS_KEY = 'wordstack.review_sessions'


class VocabularyInterface:
    """Public interface for vocabulary module operations."""

    @staticmethod
    def get_store() -> VocabularyStore:
        """Return the application's store, loading it on first use."""
        store = current_app.extensions.get(_STORE_KEY)
        if store is None:
            storage_key = current_app.config.get(
                'VOCABULARY_STORAGE_KEY', VocabularyDefaultConfig.VOCABULARY_STORAGE_KEY
            )
            store = VocabularyStore(SqlKeyValueBackend(), storage_key=storage_key)
            current_app.extensions[_STORE_KEY] = store
            current_app.logger.info("Vocabulary store ready with %d items", len(store))
        return store

    @staticmethod
    def _sessions() -> Dict[str, ReviewSession]:
        return current_app.extensions.setdefault(_SESSIONS_KEY, {})

    @staticmethod
    def select_session_items(
        store: VocabularyStore,
        word_ids: Optional[Sequence[str]] = None,
        now: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[VocabularyItem]:
        """
        Items for a new session: the requested ids, else the due items,
        else every non-mastered item, capped at ``limit``.
        """
        if word_ids:
            items = [store.require(word_id) for word_id in word_ids]
        else:
            items = store.due_items(now) or vocabulary_query.unmastered_items(store.items())
        if limit is not None:
            items = items[:limit]
        return items

    @staticmethod
    def start_session(
        word_ids: Optional[Sequence[str]] = None,
        now: Optional[datetime] = None,
    ) -> ReviewSession:
        store = VocabularyInterface.get_store()
        limit = current_app.config.get('REVIEW_SESSION_LIMIT', VocabularyDefaultConfig.REVIEW_SESSION_LIMIT)
        items = VocabularyInterface.select_session_items(store, word_ids, now=now, limit=limit)
        session = ReviewSession.start(items, store, now=now)
        sessions = VocabularyInterface._sessions()
        sessions[session.session_id] = session
        VocabularyInterface._evict_sessions(
            sessions,
            current_app.config.get('MAX_REVIEW_SESSIONS', VocabularyDefaultConfig.MAX_REVIEW_SESSIONS),
        )
        return session

    @staticmethod
    def _evict_sessions(sessions: Dict[str, ReviewSession], max_sessions: int) -> None:
        """Drop sessions beyond ``max_sessions``: completed ones first, then the oldest."""
        while len(sessions) > max(1, max_sessions):
            completed = [sid for sid, s in sessions.items() if s.is_complete()]
            evicted = completed[0] if completed else next(iter(sessions))
            sessions.pop(evicted)
            current_app.logger.debug("Evicted review session %s", evicted)

    @staticmethod
    def get_session(session_id: str) -> ReviewSession:
        session = VocabularyInterface._sessions().get(session_id)
        if session is None:
            raise NotFoundError(f"Review session {session_id!r} not found", resource=session_id)
        return session

    @staticmethod
    def end_session(session_id: str) -> bool:
        return VocabularyInterface._sessions().pop(session_id, None) is not None
