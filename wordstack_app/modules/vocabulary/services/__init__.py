from .key_value import InMemoryKeyValueBackend, KeyValueBackend, SqlKeyValueBackend
from .review_session import ReviewSession
from .vocabulary_store import VocabularyStore

__all__ = [
    "InMemoryKeyValueBackend",
    "KeyValueBackend",
    "ReviewSession",
    "SqlKeyValueBackend",
    "VocabularyStore",
]
