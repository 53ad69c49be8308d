"""
Card effect resolution.
"""

from dataclasses import dataclass
from typing import Optional

from .constants import (
    DIRECTION_CHANGE, DIRECTION_KEEP, FACE_JACK, FACE_NINE, FACE_TEN, FACE_ZERO,
    SET_TOTAL_MAX, SET_TOTAL_MIN, signed_values,
)
from .errors import OPTION_REQUIRED, TARGET_OUT_OF_RANGE
from .models import Card


@dataclass
class Effect:
    """Outcome of a card before it is committed to the state."""
    new_total: int
    reverse: bool = False
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def valid(self) -> bool:
        return self.error_code is None

    @classmethod
    def error(cls, current: int, error_code: str, error_message: str) -> 'Effect':
        return cls(new_total=current, error_code=error_code, error_message=error_message)


def apply_plus_minus(card: Card, current: int, value: Optional[int]) -> Effect:
    """'9' and '10' specials: the player picks the sign."""
    allowed = signed_values(card.face)
    if value not in allowed:
        return Effect.error(
            current, OPTION_REQUIRED, f"Must select +{allowed[0]} or {allowed[1]}"
        )
    return Effect(new_total=current + value)


def apply_direction(current: int, direction: Optional[str]) -> Effect:
    """'0' special: total unchanged, optionally reverse turn order."""
    if direction not in (None, DIRECTION_KEEP, DIRECTION_CHANGE):
        return Effect.error(current, OPTION_REQUIRED, "Direction must be 'keep' or 'change'")
    return Effect(new_total=current, reverse=direction == DIRECTION_CHANGE)


def apply_set_total(
    current: int,
    value: Optional[int],
    low: int = SET_TOTAL_MIN,
    high: int = SET_TOTAL_MAX,
) -> Effect:
    """'J' special: set the total to a chosen value in range."""
    if value is None or not low <= value <= high:
        return Effect.error(
            current, TARGET_OUT_OF_RANGE, f"Must select value between {low} and {high}"
        )
    return Effect(new_total=value)


def resolve_effect(
    card: Card,
    current: int,
    value: Optional[int] = None,
    direction: Optional[str] = None,
    set_range: tuple = (SET_TOTAL_MIN, SET_TOTAL_MAX),
) -> Effect:
    """
    Compute what playing a card would do to the total.

    Args:
        card: Card being played
        current: Total before the play
        value: Chosen sign value ('9', '10') or target ('J')
        direction: 'keep' or 'change' for the '0' card
        set_range: Inclusive bounds for the 'J' target

    Returns:
        Effect with the uncommitted total, or an error for a missing or
        invalid option
    """
    if card.is_normal:
        return Effect(new_total=current + int(card.face))
    if card.face in (FACE_NINE, FACE_TEN):
        return apply_plus_minus(card, current, value)
    if card.face == FACE_ZERO:
        return apply_direction(current, direction)
    if card.face == FACE_JACK:
        return apply_set_total(current, value, *set_range)
    return Effect(new_total=current)
