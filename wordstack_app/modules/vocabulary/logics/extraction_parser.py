"""
Parsing of vocabulary-extraction replies from the language model.

The model is asked for ``{"words": [{"danishWord", "englishTranslation",
"partOfSpeech"}]}`` but frequently wraps the JSON in a fenced code block.
"""

import json
import logging
from typing import Any, List

from ..schemas import VocabularyCandidate

logger = logging.getLogger(__name__)

_FENCE = '```'


def strip_code_fence(text: str) -> str:
    """Return the body of the first ```json (or bare ```) block, else the text."""
    text = text.strip()
    if f'{_FENCE}json' in text:
        return text.split(f'{_FENCE}json', 1)[1].split(_FENCE, 1)[0].strip()
    if _FENCE in text:
        parts = text.split(_FENCE)
        if len(parts) >= 3:
            return parts[1].strip()
    return text


def _first_str(entry: dict, *keys: str) -> str:
    for key in keys:
        value = entry.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ''


def parse_extraction_response(text: str, message: str) -> List[VocabularyCandidate]:
    """
    Turn a model reply into candidates whose context is the source message.

    Malformed replies yield an empty list; entries without a word or a
    translation are dropped.
    """
    if not text or not text.strip():
        return []
    try:
        payload: Any = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as e:
        logger.warning("Could not parse vocabulary extraction reply: %s", e)
        return []

    if isinstance(payload, dict):
        entries = payload.get('words') or []
    elif isinstance(payload, list):
        entries = payload
    else:
        entries = []
    if not isinstance(entries, list):
        logger.warning("Vocabulary extraction reply has a non-list 'words' field")
        return []

    candidates = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        word = _first_str(entry, 'word', 'danishWord')
        translation = _first_str(entry, 'translation', 'englishTranslation')
        if not word or not translation:
            logger.debug("Dropping incomplete extraction entry: %r", entry)
            continue
        candidates.append(VocabularyCandidate(
            word=word,
            translation=translation,
            context=message or '',
            part_of_speech=_first_str(entry, 'partOfSpeech', 'part_of_speech') or None,
        ))
    return candidates
