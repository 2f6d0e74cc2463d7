# File: wordstack_app/modules/vocabulary/services/key_value.py
"""
Key-value backends for the vocabulary store.

The store only needs ``get`` / ``set`` / ``remove`` over serialized strings.
``set`` reports failure by returning False; ``get`` may raise when the
backend itself is unreachable.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from wordstack_app.core.extensions import db
from wordstack_app.models import KeyValueEntry

logger = logging.getLogger(__name__)


class KeyValueBackend(ABC):
    """Durable key-value contract consumed by VocabularyStore."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> bool:
        """Durably store ``value``; False means nothing was written."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; missing keys are ignored."""


class InMemoryKeyValueBackend(KeyValueBackend):
    """Dict-backed backend for tests and throwaway stores."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class SqlKeyValueBackend(KeyValueBackend):
    """Backend storing entries in the ``key_value_entries`` table.

    Needs an active Flask application context.
    """

    def get(self, key: str) -> Optional[str]:
        entry = db.session.get(KeyValueEntry, key)
        return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> bool:
        try:
            entry = db.session.get(KeyValueEntry, key)
            if entry is None:
                db.session.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            db.session.commit()
            return True
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Failed to write key %s: %s", key, e)
            return False

    def remove(self, key: str) -> None:
        try:
            entry = db.session.get(KeyValueEntry, key)
            if entry is not None:
                db.session.delete(entry)
                db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
