# engine_py/src/ninetynine_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

# Rejected intent codes
GAME_NOT_PLAYING = "GAME_NOT_PLAYING"
SEAT_NOT_FOUND = "SEAT_NOT_FOUND"
NOT_YOUR_TURN = "NOT_YOUR_TURN"
CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
OPTION_REQUIRED = "OPTION_REQUIRED"
TARGET_OUT_OF_RANGE = "TARGET_OUT_OF_RANGE"

# Room / lobby codes
ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
ROOM_FULL = "ROOM_FULL"
GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
INVALID_DIFFICULTY = "INVALID_DIFFICULTY"
INVALID_RULES = "INVALID_RULES"
