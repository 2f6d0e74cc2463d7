"""Feeding extraction results into the vocabulary store."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Protocol, Sequence

from wordstack_app.utils.time_utils import resolve_now

from ..schemas import VocabularyCandidate, VocabularyItem
from .vocabulary_store import VocabularyStore

logger = logging.getLogger(__name__)


class Extractor(Protocol):
    """Text-understanding collaborator that proposes words from a message."""

    def extract(self, text: str) -> Sequence[VocabularyCandidate]:
        ...


def ingest_candidates(
    store: VocabularyStore,
    candidates: Iterable[VocabularyCandidate],
    now: Optional[datetime] = None,
) -> List[VocabularyItem]:
    """Add or reinforce every candidate, all stamped with the same ``now``."""
    now = resolve_now(now)
    return [store.add_or_reinforce(candidate, now=now) for candidate in candidates]


def ingest_message(
    store: VocabularyStore,
    extractor: Extractor,
    message: str,
    now: Optional[datetime] = None,
) -> List[VocabularyItem]:
    """Run the extractor on one conversation message and track the result."""
    if not message or not message.strip():
        return []
    candidates = list(extractor.extract(message))
    logger.debug("Extractor proposed %d words", len(candidates))
    return ingest_candidates(store, candidates, now=now)
