"""
Outcome mapping.

Review UIs offer different button layouts. Each layout is an adapter that
turns a button label into an ``Outcome``; there is exactly one mapping from
``Outcome`` to the 0-5 quality scale.
"""

from typing import Dict, Optional

from wordstack_app.core.error_handlers import ValidationError

from ..schemas import Outcome

OUTCOME_QUALITY: Dict[Outcome, int] = {
    Outcome.FAIL: 0,
    Outcome.HARD: 3,
    Outcome.GOOD: 4,
    Outcome.EASY: 5,
    Outcome.MASTERED: 5,
}

SUCCESS_OUTCOMES = frozenset({Outcome.HARD, Outcome.GOOD, Outcome.EASY, Outcome.MASTERED})

FOUR_BUTTON_SCHEME = 'four_button'
THREE_BUTTON_SCHEME = 'three_button'

BUTTON_SCHEMES: Dict[str, Dict[str, Outcome]] = {
    # again / hard / good / easy
    FOUR_BUTTON_SCHEME: {
        'again': Outcome.FAIL,
        'hard': Outcome.HARD,
        'good': Outcome.GOOD,
        'easy': Outcome.EASY,
    },
    # forgot / remembered / mastered ("remove from deck")
    THREE_BUTTON_SCHEME: {
        'forgot': Outcome.FAIL,
        'remembered': Outcome.HARD,
        'mastered': Outcome.MASTERED,
    },
}


def outcome_quality(outcome: Outcome) -> int:
    return OUTCOME_QUALITY[outcome]


def is_success(outcome: Outcome) -> bool:
    return outcome in SUCCESS_OUTCOMES


def outcome_from_button(label: str, scheme: str = FOUR_BUTTON_SCHEME) -> Outcome:
    """Translate a button label from the given layout into an Outcome."""
    buttons = BUTTON_SCHEMES.get(scheme)
    if buttons is None:
        raise ValidationError(
            f"Unknown button scheme {scheme!r}",
            errors={'scheme': sorted(BUTTON_SCHEMES)},
        )
    outcome = buttons.get(str(label).strip().lower())
    if outcome is None:
        raise ValidationError(
            f"Unknown rating {label!r} for scheme {scheme!r}",
            errors={'rating': sorted(buttons)},
        )
    return outcome


def parse_outcome(value: Optional[str]) -> Outcome:
    """Parse a canonical outcome name ('fail', 'hard', ...)."""
    try:
        return Outcome(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unknown outcome {value!r}",
            errors={'outcome': [o.value for o in Outcome]},
        ) from None
