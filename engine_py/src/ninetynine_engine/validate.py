"""
Play validation for card intents.
"""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from .constants import FACE_JACK, SET_TOTAL_MAX, SET_TOTAL_MIN, STATUS_PLAYING
from .effects import Effect, resolve_effect
from .errors import (
    CARD_NOT_IN_HAND, GAME_NOT_PLAYING, NOT_YOUR_TURN, OPTION_REQUIRED, SEAT_NOT_FOUND,
    TARGET_OUT_OF_RANGE,
)
from .models import Card, GameState


class PlayOptions(BaseModel):
    """Choices attached to a special card."""
    model_config = ConfigDict(extra='ignore')

    value: Optional[int] = None
    direction: Optional[str] = None


class PlayResult:
    """Result of a play intent."""

    def __init__(
        self,
        success: bool,
        code: Optional[str] = None,
        message: Optional[str] = None,
        eliminated: bool = False
    ):
        self.success = success
        self.code = code
        self.message = message
        self.eliminated = eliminated

    @classmethod
    def ok(cls, message: Optional[str] = None, eliminated: bool = False) -> 'PlayResult':
        return cls(success=True, message=message, eliminated=eliminated)

    @classmethod
    def error(cls, code: str, message: str) -> 'PlayResult':
        return cls(success=False, code=code, message=message)

    def to_dict(self) -> Dict[str, Any]:
        result = {"success": self.success}
        if self.message:
            result["message"] = self.message
        if self.code:
            result["code"] = self.code
        return result

    def __repr__(self):
        return f"PlayResult(success={self.success}, code={self.code!r}, message={self.message!r})"


class ValidationResult:
    """Result of validating a play against the current state."""

    def __init__(
        self,
        valid: bool,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        seat_index: int = -1,
        card: Optional[Card] = None,
        effect: Optional[Effect] = None
    ):
        self.valid = valid
        self.error_code = error_code
        self.error_message = error_message
        self.seat_index = seat_index
        self.card = card
        self.effect = effect

    @classmethod
    def success(cls, seat_index: int, card: Card, effect: Effect) -> 'ValidationResult':
        return cls(valid=True, seat_index=seat_index, card=card, effect=effect)

    @classmethod
    def error(cls, error_code: str, error_message: str) -> 'ValidationResult':
        return cls(valid=False, error_code=error_code, error_message=error_message)

    def to_play_result(self) -> PlayResult:
        return PlayResult.error(self.error_code, self.error_message)


def coerce_options(options: Union[None, Dict, PlayOptions]) -> PlayOptions:
    """Accept options as a model, a plain dict or nothing."""
    if options is None:
        return PlayOptions()
    if isinstance(options, PlayOptions):
        return options
    return PlayOptions(**options)


def validate_play(
    state: GameState,
    seat_id: str,
    card_id: str,
    options: Union[None, Dict, PlayOptions] = None,
    set_range: tuple = (SET_TOTAL_MIN, SET_TOTAL_MAX)
) -> ValidationResult:
    """
    Validate a play intent without touching the state.

    Checks run in a fixed order: the game is in progress, the seat
    exists, it is that seat's turn, the card is in its hand, and the
    card's required option is present and in range. Plain cards ignore
    whatever options arrive with them.
    """
    if state.status != STATUS_PLAYING:
        return ValidationResult.error(GAME_NOT_PLAYING, "Game not active")

    seat_index = state.seat_index(seat_id)
    if seat_index == -1:
        return ValidationResult.error(SEAT_NOT_FOUND, "Player not found")
    if seat_index != state.turn_index:
        return ValidationResult.error(NOT_YOUR_TURN, "Not your turn")

    card = state.seats[seat_index].find_card(card_id)
    if card is None:
        return ValidationResult.error(CARD_NOT_IN_HAND, "Card not in hand")

    if card.is_normal:
        effect = resolve_effect(card, state.current_total)
        return ValidationResult.success(seat_index, card, effect)

    try:
        opts = coerce_options(options)
    except (ValidationError, TypeError) as e:
        if card.face == FACE_JACK:
            low, high = set_range
            return ValidationResult.error(
                TARGET_OUT_OF_RANGE, f"Must select value between {low} and {high}"
            )
        return ValidationResult.error(OPTION_REQUIRED, f"Invalid options: {e}")

    effect = resolve_effect(
        card, state.current_total, opts.value, opts.direction, set_range
    )
    if not effect.valid:
        return ValidationResult.error(effect.error_code, effect.error_message)
    return ValidationResult.success(seat_index, card, effect)
