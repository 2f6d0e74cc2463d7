"""
Session Tally - Pure functions for review-session bookkeeping.

Counters are a mapping keyed by ``Outcome`` and updated only through
``tally``; skips are counted separately because they are not graded.
"""
from types import MappingProxyType
from typing import Mapping

from ..schemas import Outcome
from .outcomes import is_success

OutcomeCounts = Mapping[Outcome, int]


def empty_counts() -> OutcomeCounts:
    return MappingProxyType({outcome: 0 for outcome in Outcome})


def tally(counts: OutcomeCounts, outcome: Outcome) -> OutcomeCounts:
    """Return new counts with ``outcome`` incremented by one."""
    updated = dict(counts)
    updated[outcome] = updated.get(outcome, 0) + 1
    return MappingProxyType(updated)


def graded_total(counts: OutcomeCounts) -> int:
    return sum(counts.values())


def accuracy(counts: OutcomeCounts) -> float:
    """Share of graded reviews that were successful; 0.0 when none were graded."""
    total = graded_total(counts)
    if total == 0:
        return 0.0
    successes = sum(n for outcome, n in counts.items() if is_success(outcome))
    return successes / total
