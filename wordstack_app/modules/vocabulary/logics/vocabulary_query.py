"""
Vocabulary Query - Pure functions over item collections.

This module contains ONLY pure Python logic.
NO database, NO Flask dependencies.

Functions here handle:
- Filtering items that are due for review
- Sorting by due date, recency, word or proficiency
- Search and proficiency filters for list views
- Collection statistics
"""
from datetime import datetime
from typing import Iterable, List, Optional

from wordstack_app.core.error_handlers import ValidationError

from ..schemas import PROFICIENCY_ORDER, ProficiencyLevel, VocabularyItem, VocabularyStats

LEVEL_FILTERS = ('all', 'mastered', 'unmastered')
SORT_ORDERS = ('recent', 'alphabetical', 'proficiency')


def filter_due_items(items: Iterable[VocabularyItem], as_of: datetime) -> List[VocabularyItem]:
    """
    Items whose next review date is at or before ``as_of``, oldest due first.

    Ties keep their original (insertion) order.
    """
    due = [item for item in items if item.is_due(as_of)]
    return sort_by_due_date(due)


def sort_by_due_date(items: Iterable[VocabularyItem], ascending: bool = True) -> List[VocabularyItem]:
    return sorted(items, key=lambda item: item.schedule.next_review_date, reverse=not ascending)


def filter_by_level(items: Iterable[VocabularyItem], level_filter: str = 'all') -> List[VocabularyItem]:
    if level_filter not in LEVEL_FILTERS:
        raise ValidationError(f"Unknown filter {level_filter!r}", errors={'filter': list(LEVEL_FILTERS)})
    if level_filter == 'mastered':
        return [i for i in items if i.proficiency_level == ProficiencyLevel.MASTERED]
    if level_filter == 'unmastered':
        return [i for i in items if i.proficiency_level != ProficiencyLevel.MASTERED]
    return list(items)


def search(items: Iterable[VocabularyItem], term: Optional[str]) -> List[VocabularyItem]:
    """Case-insensitive substring match on the word or its translation."""
    if not term or not term.strip():
        return list(items)
    needle = term.strip().casefold()
    return [
        i for i in items
        if needle in i.word.casefold() or needle in i.translation.casefold()
    ]


def sort_items(items: Iterable[VocabularyItem], sort_by: str = 'recent') -> List[VocabularyItem]:
    if sort_by == 'recent':
        return sorted(items, key=lambda i: i.last_practiced, reverse=True)
    if sort_by == 'alphabetical':
        return sorted(items, key=lambda i: i.word.casefold())
    if sort_by == 'proficiency':
        return sorted(items, key=lambda i: PROFICIENCY_ORDER[i.proficiency_level])
    raise ValidationError(f"Unknown sort order {sort_by!r}", errors={'sort': list(SORT_ORDERS)})


def query_items(
    items: Iterable[VocabularyItem],
    search_term: Optional[str] = None,
    level_filter: str = 'all',
    sort_by: str = 'recent',
) -> List[VocabularyItem]:
    """Filter, search and sort in the order a list view applies them."""
    filtered = filter_by_level(items, level_filter)
    matched = search(filtered, search_term)
    return sort_items(matched, sort_by)


def unmastered_items(items: Iterable[VocabularyItem]) -> List[VocabularyItem]:
    return filter_by_level(items, 'unmastered')


def compute_stats(items: Iterable[VocabularyItem], as_of: datetime) -> VocabularyStats:
    by_level = {level.value: 0 for level in ProficiencyLevel}
    total = 0
    due = 0
    for item in items:
        total += 1
        by_level[item.proficiency_level.value] += 1
        if item.is_due(as_of):
            due += 1
    return VocabularyStats(total=total, due=due, by_level=by_level)
