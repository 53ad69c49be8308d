"""
Tests for WebSocket event parsing and construction.
"""

import pytest

from ninetynine_engine import errors
from ninetynine_engine.ws.events import (
    CreateSinglePlayerEvent, ErrorCode, JoinRoomEvent, OutboundEventType, PlayEvent, StartEvent,
    create_chat_event, create_error_event, error_code_for, parse_inbound_event,
)


def test_parse_join_room():
    event = parse_inbound_event({"type": "join_room", "room_id": "ABC123", "player_name": "Alice"})
    assert isinstance(event, JoinRoomEvent)
    assert event.room_id == "ABC123"
    assert event.player_name == "Alice"


def test_parse_start_ignores_extra_fields():
    assert isinstance(parse_inbound_event({"type": "start", "extra": 1}), StartEvent)


def test_parse_play_with_options():
    """Play options carry the sign or target value and the 0 direction."""
    event = parse_inbound_event({
        "type": "play",
        "card_id": "card-42",
        "options": {"value": -10, "direction": None}
    })
    assert isinstance(event, PlayEvent)
    assert event.options.value == -10

    bare = parse_inbound_event({"type": "play", "card_id": "card-1"})
    assert bare.options is None


def test_parse_single_player_defaults():
    event = parse_inbound_event({"type": "create_single_player", "player_name": "Solo"})
    assert isinstance(event, CreateSinglePlayerEvent)
    assert event.bot_count == 1
    assert event.difficulty == "normal"


@pytest.mark.parametrize("data", [
    {"type": "create_single_player", "player_name": "Solo", "bot_count": 4},
    {"type": "create_single_player", "player_name": "Solo", "difficulty": "expert"},
    {"type": "create_room", "player_name": ""},
    {"type": "chat", "message": "x" * 201},
    {"type": "play"},
    {"type": "teleport"},
    {"room_id": "ABC123"},
    ["not", "an", "object"],
])
def test_parse_rejects_bad_events(data):
    with pytest.raises(ValueError):
        parse_inbound_event(data)


def test_error_code_mapping():
    assert error_code_for("NOT_YOUR_TURN") == ErrorCode.NOT_YOUR_TURN
    assert error_code_for("TARGET_OUT_OF_RANGE") == ErrorCode.TARGET_OUT_OF_RANGE
    assert error_code_for("SOMETHING_ELSE") == ErrorCode.INTERNAL
    assert error_code_for(None) == ErrorCode.INTERNAL


@pytest.mark.parametrize("code", [
    errors.GAME_NOT_PLAYING, errors.SEAT_NOT_FOUND, errors.NOT_YOUR_TURN, errors.CARD_NOT_IN_HAND,
    errors.OPTION_REQUIRED, errors.TARGET_OUT_OF_RANGE, errors.ROOM_NOT_FOUND, errors.ROOM_FULL,
    errors.GAME_ALREADY_STARTED,
])
def test_engine_codes_reach_the_wire(code):
    """Every code the engine or store rejects with has its own wire value."""
    assert error_code_for(code).value == code


def test_outbound_events_serialize():
    error = create_error_event(ErrorCode.ROOM_FULL, "Room full")
    dumped = error.model_dump(mode="json")
    assert dumped["type"] == "error"
    assert dumped["code"] == "ROOM_FULL"
    assert dumped["timestamp"] > 0

    chat = create_chat_event("System", "Game started!")
    assert chat.type == OutboundEventType.CHAT_MESSAGE
    assert chat.sender == "System"
