"""
Game rule configuration and bot tuning knobs.
"""

from typing import Dict, List, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import (
    CEILING, DECK_SIZE, DIFFICULTY_EASY, DIFFICULTY_HARD, DIFFICULTY_NORMAL,
    HAND_SIZE, MAX_SEATS, MIN_SEATS, SET_TOTAL_MAX, SET_TOTAL_MIN, STARTING_TOTALS,
)
from .errors import INVALID_RULES, GameError


class RuleConfig(BaseModel):
    """Configuration for game rules and settings."""

    min_seats: int = Field(
        default=MIN_SEATS,
        ge=2,
        le=4,
        description="Minimum number of seats required to start"
    )
    max_seats: int = Field(
        default=MAX_SEATS,
        ge=2,
        le=4,
        description="Maximum number of seats allowed"
    )
    hand_size: int = Field(
        default=HAND_SIZE,
        ge=1,
        le=8,
        description="Cards dealt to each seat"
    )
    ceiling: int = Field(
        default=CEILING,
        description="Highest total a seat may leave behind"
    )
    set_total_min: int = Field(default=SET_TOTAL_MIN, ge=0)
    set_total_max: int = Field(default=SET_TOTAL_MAX, ge=0)
    starting_totals: Dict[int, int] = Field(
        default_factory=lambda: dict(STARTING_TOTALS),
        description="Starting total keyed by seat count"
    )
    random_first_seat: bool = Field(
        default=True,
        description="Pick the opening seat at random instead of seat 0"
    )

    @field_validator('max_seats')
    @classmethod
    def validate_max_seats(cls, v, info):
        """Validate maximum seats doesn't fall below minimum."""
        min_seats = info.data.get('min_seats', MIN_SEATS)
        if v < min_seats:
            raise ValueError(f'max_seats ({v}) must be >= min_seats ({min_seats})')
        if v * HAND_SIZE >= DECK_SIZE:
            raise ValueError(f'max_seats ({v}) leaves no draw pile')
        return v

    @field_validator('set_total_max')
    @classmethod
    def validate_set_range(cls, v, info):
        """The set-total range must be ordered and stay under the ceiling."""
        low = info.data.get('set_total_min', SET_TOTAL_MIN)
        ceiling = info.data.get('ceiling', CEILING)
        if v < low:
            raise ValueError(f'set_total_max ({v}) must be >= set_total_min ({low})')
        if v > ceiling:
            raise ValueError(f'set_total_max ({v}) must be <= ceiling ({ceiling})')
        return v

    def validate_seat_count(self, seat_count: int) -> bool:
        """Check if a seat count can start a round under this configuration."""
        return self.min_seats <= seat_count <= self.max_seats

    def starting_total(self, seat_count: int) -> int:
        return self.starting_totals.get(seat_count, 0)


class BotTuning(BaseModel):
    """Thresholds and probabilities used by the bot policies."""

    set_targets: List[int] = Field(
        default_factory=lambda: [99, 60, 89],
        description="Set-total values a bot considers for the J card"
    )
    comfort_range: Tuple[int, int] = (30, 85)
    # hard bot bands
    build_below: int = 50
    build_cap: int = 85
    steady_below: int = 80
    steady_range: Tuple[int, int] = (50, 89)
    caution_below: int = 90
    caution_cap: int = 95
    escape_below: int = 90
    endgame_pressure_chance: float = Field(default=0.7, ge=0.0, le=1.0)
    early_pressure_below: int = 85
    early_pressure_chance: float = Field(default=0.4, ge=0.0, le=1.0)
    fallback_range: Tuple[int, int] = (60, 89)
    # thinking delays in seconds, keyed by difficulty
    think_time: Dict[str, Tuple[float, float]] = Field(
        default_factory=lambda: {
            DIFFICULTY_EASY: (1.2, 1.8),
            DIFFICULTY_NORMAL: (1.8, 2.6),
            DIFFICULTY_HARD: (2.5, 3.5),
        }
    )
    play_pause: float = Field(default=0.5, ge=0.0)
    delay_scale: float = Field(
        default=1.0,
        ge=0.0,
        description="Multiplier applied to every bot delay (0 plays instantly)"
    )

    @field_validator('set_targets')
    @classmethod
    def validate_set_targets(cls, v):
        if not v:
            raise ValueError('set_targets must not be empty')
        for target in v:
            if not SET_TOTAL_MIN <= target <= SET_TOTAL_MAX:
                raise ValueError(f'set target {target} outside {SET_TOTAL_MIN}-{SET_TOTAL_MAX}')
        return v


# Default configuration instances
default_rules = RuleConfig()
default_tuning = BotTuning()


def create_rules(**overrides) -> RuleConfig:
    """Create a RuleConfig with optional overrides."""
    config_dict = default_rules.model_dump()
    config_dict.update(overrides)
    try:
        return RuleConfig(**config_dict)
    except ValidationError as e:
        raise GameError(INVALID_RULES, str(e)) from e


def create_tuning(**overrides) -> BotTuning:
    """Create a BotTuning with optional overrides."""
    config_dict = default_tuning.model_dump()
    config_dict.update(overrides)
    try:
        return BotTuning(**config_dict)
    except ValidationError as e:
        raise GameError(INVALID_RULES, str(e)) from e
