"""
State projection and serialization utilities.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict

from .models import Card, GameState


class CardView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: str
    face: Union[int, str]
    label: str
    description: str = ''


class SeatView(BaseModel):
    """Public information about a seat. Never carries hand contents."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    seat: int
    hand_count: int
    is_alive: bool
    is_bot: bool
    difficulty: Optional[str] = None


class WinnerView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class ProjectedState(BaseModel):
    """Read-only snapshot of a game as seen by one viewer."""
    model_config = ConfigDict(frozen=True)

    id: str
    version: int
    status: str
    seats: List[SeatView]
    current_total: int
    turn_index: int
    turn_seat_id: Optional[str] = None
    direction: int
    draw_count: int
    last_card: Optional[CardView] = None
    winner: Optional[WinnerView] = None
    bot_state: str
    last_played_by: Optional[str] = None
    score_change: int = 0
    viewer_id: Optional[str] = None
    hand: List[CardView] = []


def serialize_card(card: Card) -> CardView:
    return CardView(
        id=card.id,
        kind=card.kind,
        face=card.face,
        label=card.label,
        description=card.description
    )


def project_state(state: GameState, viewer_id: Optional[str] = None) -> ProjectedState:
    """
    Project the game state for one viewer.

    Args:
        state: Authoritative game state
        viewer_id: Seat viewing the state; only this seat's hand is included

    Returns:
        Frozen snapshot safe to hand to any consumer
    """
    seats = [
        SeatView(
            id=seat.id,
            name=seat.name,
            seat=seat.seat,
            hand_count=len(seat.hand),
            is_alive=seat.is_alive,
            is_bot=seat.is_bot,
            difficulty=seat.difficulty
        )
        for seat in state.seats
    ]

    winner = None
    if state.winner_id:
        winner_seat = state.get_seat(state.winner_id)
        if winner_seat:
            winner = WinnerView(id=winner_seat.id, name=winner_seat.name)

    viewer = state.get_seat(viewer_id) if viewer_id else None
    current = state.current_seat

    return ProjectedState(
        id=state.id,
        version=state.version,
        status=state.status,
        seats=seats,
        current_total=state.current_total,
        turn_index=state.turn_index,
        turn_seat_id=current.id if current else None,
        direction=state.direction,
        draw_count=len(state.draw_pile),
        last_card=serialize_card(state.last_card) if state.last_card else None,
        winner=winner,
        bot_state=state.bot_state,
        last_played_by=state.last_played_by,
        score_change=state.score_change,
        viewer_id=viewer.id if viewer else None,
        hand=[serialize_card(c) for c in viewer.hand] if viewer else []
    )


def serialize_seat_for_list(seat) -> Dict[str, Any]:
    """Serialize seat for lobby seat list."""
    return {
        "id": seat.id,
        "name": seat.name,
        "seat": seat.seat,
        "is_bot": seat.is_bot,
        "difficulty": seat.difficulty
    }


def get_public_room_info(state: GameState, max_seats: int = 4) -> Dict[str, Any]:
    """Get public information about a room for listings."""
    return {
        "id": state.id,
        "status": state.status,
        "seat_count": len(state.seats),
        "max_seats": max_seats,
        "seats": [serialize_seat_for_list(seat) for seat in state.seats]
    }
