"""Durable key-value entries backing the vocabulary collection."""

from __future__ import annotations

from datetime import datetime, timezone

from wordstack_app.core.extensions import db


class KeyValueEntry(db.Model):
    """One serialized value stored under a string key.

    The vocabulary store keeps its whole collection as a single JSON document
    under ``Config.VOCABULARY_STORAGE_KEY``.
    """

    __tablename__ = 'key_value_entries'

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f'<KeyValueEntry {self.key} ({len(self.value or "")} chars)>'
