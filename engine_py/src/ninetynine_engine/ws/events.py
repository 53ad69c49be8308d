"""
WebSocket event models and validation.
"""

import time
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from ..constants import DIFFICULTY_NORMAL
from ..validate import PlayOptions


class EventType(str, Enum):
    """Inbound event types."""
    CREATE_ROOM = "create_room"
    CREATE_SINGLE_PLAYER = "create_single_player"
    JOIN_ROOM = "join_room"
    START = "start"
    RESTART = "restart"
    PLAY = "play"
    CHAT = "chat"
    REQUEST_STATE = "request_state"


class OutboundEventType(str, Enum):
    """Outbound event types."""
    ROOM_CREATED = "room_created"
    ROOM_JOINED = "room_joined"
    GAME_STATE = "game_state"
    HAND = "hand"
    CHAT_MESSAGE = "chat_message"
    LOG = "log"
    ERROR = "error"


class ErrorCode(str, Enum):
    """Error codes for client events."""
    INVALID_EVENT = "INVALID_EVENT"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    ROOM_FULL = "ROOM_FULL"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    ACTION_NOT_ALLOWED = "ACTION_NOT_ALLOWED"
    GAME_NOT_PLAYING = "GAME_NOT_PLAYING"
    SEAT_NOT_FOUND = "SEAT_NOT_FOUND"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    OPTION_REQUIRED = "OPTION_REQUIRED"
    TARGET_OUT_OF_RANGE = "TARGET_OUT_OF_RANGE"
    INTERNAL = "INTERNAL"


# Inbound event models
class BaseEvent(BaseModel):
    """Base event model."""
    type: EventType


class CreateRoomEvent(BaseEvent):
    """Create a multiplayer room and take the first seat."""
    type: EventType = EventType.CREATE_ROOM
    player_name: str = Field(..., min_length=1, max_length=30)


class CreateSinglePlayerEvent(BaseEvent):
    """Create a room filled with bots."""
    type: EventType = EventType.CREATE_SINGLE_PLAYER
    player_name: str = Field(..., min_length=1, max_length=30)
    bot_count: int = Field(default=1, ge=1, le=3)
    difficulty: str = Field(default=DIFFICULTY_NORMAL, pattern="^(easy|normal|hard)$")


class JoinRoomEvent(BaseEvent):
    """Join an existing room."""
    type: EventType = EventType.JOIN_ROOM
    room_id: str = Field(..., min_length=1, max_length=50)
    player_name: str = Field(..., min_length=1, max_length=30)


class StartEvent(BaseEvent):
    """Start game event (host only)."""
    type: EventType = EventType.START


class RestartEvent(BaseEvent):
    """Restart game event (host only)."""
    type: EventType = EventType.RESTART


class PlayEvent(BaseEvent):
    """Play a card event."""
    type: EventType = EventType.PLAY
    card_id: str = Field(..., min_length=1)
    options: Optional[PlayOptions] = None


class ChatEvent(BaseEvent):
    """Chat message event."""
    type: EventType = EventType.CHAT
    message: str = Field(..., min_length=1, max_length=200)


class RequestStateEvent(BaseEvent):
    """Request full state event."""
    type: EventType = EventType.REQUEST_STATE


# Union type for all inbound events
InboundEvent = Union[
    CreateRoomEvent,
    CreateSinglePlayerEvent,
    JoinRoomEvent,
    StartEvent,
    RestartEvent,
    PlayEvent,
    ChatEvent,
    RequestStateEvent
]


# Outbound event models
class RoomCreatedEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.ROOM_CREATED
    room_id: str
    player_id: str
    timestamp: float


class RoomJoinedEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.ROOM_JOINED
    room_id: str
    player_id: str
    timestamp: float


class GameStateEvent(BaseModel):
    """Per-viewer projected state."""
    type: OutboundEventType = OutboundEventType.GAME_STATE
    state: Dict[str, Any]
    timestamp: float


class HandEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.HAND
    cards: List[Dict[str, Any]]
    timestamp: float


class ChatMessageEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.CHAT_MESSAGE
    sender: str
    message: str
    timestamp: float


class LogEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.LOG
    message: str
    timestamp: float


class ErrorEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.ERROR
    code: ErrorCode
    message: str
    timestamp: float


OutboundEvent = Union[
    RoomCreatedEvent,
    RoomJoinedEvent,
    GameStateEvent,
    HandEvent,
    ChatMessageEvent,
    LogEvent,
    ErrorEvent
]


EVENT_MAP = {
    EventType.CREATE_ROOM: CreateRoomEvent,
    EventType.CREATE_SINGLE_PLAYER: CreateSinglePlayerEvent,
    EventType.JOIN_ROOM: JoinRoomEvent,
    EventType.START: StartEvent,
    EventType.RESTART: RestartEvent,
    EventType.PLAY: PlayEvent,
    EventType.CHAT: ChatEvent,
    EventType.REQUEST_STATE: RequestStateEvent,
}


def parse_inbound_event(data: Dict[str, Any]) -> InboundEvent:
    """
    Parse raw event data into appropriate event model.

    Args:
        data: Raw event data from WebSocket

    Returns:
        Parsed event model

    Raises:
        ValueError: If event type is invalid or data is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Event must be a JSON object")

    event_type = data.get("type")
    if not event_type:
        raise ValueError("Missing event type")

    try:
        event_type = EventType(event_type)
    except ValueError:
        raise ValueError(f"Invalid event type: {event_type}")

    try:
        return EVENT_MAP[event_type](**data)
    except ValidationError as e:
        raise ValueError(f"Invalid event data: {e}")


def error_code_for(code: Optional[str]) -> ErrorCode:
    """Map an engine reason code onto the wire enum."""
    try:
        return ErrorCode(code)
    except ValueError:
        return ErrorCode.INTERNAL


def create_error_event(code: ErrorCode, message: str) -> ErrorEvent:
    return ErrorEvent(code=code, message=message, timestamp=time.time())


def create_room_created_event(room_id: str, player_id: str) -> RoomCreatedEvent:
    return RoomCreatedEvent(room_id=room_id, player_id=player_id, timestamp=time.time())


def create_room_joined_event(room_id: str, player_id: str) -> RoomJoinedEvent:
    return RoomJoinedEvent(room_id=room_id, player_id=player_id, timestamp=time.time())


def create_game_state_event(state: Dict[str, Any]) -> GameStateEvent:
    return GameStateEvent(state=state, timestamp=time.time())


def create_hand_event(cards: List[Dict[str, Any]]) -> HandEvent:
    return HandEvent(cards=cards, timestamp=time.time())


def create_chat_event(sender: str, message: str) -> ChatMessageEvent:
    return ChatMessageEvent(sender=sender, message=message, timestamp=time.time())


def create_log_event(message: str) -> LogEvent:
    return LogEvent(message=message, timestamp=time.time())
