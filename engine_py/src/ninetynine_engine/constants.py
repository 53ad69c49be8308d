"""Game constants and card table"""

from typing import List, Tuple, Union

Face = Union[int, str]

# Statuses
STATUS_WAITING = 'waiting'
STATUS_PLAYING = 'playing'
STATUS_ENDED = 'ended'

# Card kinds
KIND_NORMAL = 'normal'
KIND_SPECIAL = 'special'

# Special faces
FACE_NINE = '9'
FACE_TEN = '10'
FACE_ZERO = '0'
FACE_JACK = 'J'

# Bot difficulty tiers
DIFFICULTY_EASY = 'easy'
DIFFICULTY_NORMAL = 'normal'
DIFFICULTY_HARD = 'hard'
DIFFICULTIES = [DIFFICULTY_EASY, DIFFICULTY_NORMAL, DIFFICULTY_HARD]

# Bot animation states
BOT_IDLE = 'idle'
BOT_THINKING = 'thinking'
BOT_PLAYING = 'playing'

# Direction choices for the '0' card
DIRECTION_KEEP = 'keep'
DIRECTION_CHANGE = 'change'

CEILING = 99
MIN_SEATS = 2
MAX_SEATS = 4
HAND_SIZE = 5
SET_TOTAL_MIN = 60
SET_TOTAL_MAX = 99

# (kind, face, label, description, copies)
DECK_TABLE: List[Tuple[str, Face, str, str, int]] = [
    (KIND_NORMAL, 1, 'A (+1)', '+1 to Total', 3),
    (KIND_NORMAL, 2, '2 (+2)', '+2 to Total', 3),
    (KIND_NORMAL, 3, '3 (+3)', '+3 to Total', 3),
    (KIND_NORMAL, 4, '4 (+4)', '+4 to Total', 3),
    (KIND_NORMAL, 5, '5 (+5)', '+5 to Total', 3),
    (KIND_NORMAL, 6, '6 (+6)', '+6 to Total', 3),
    (KIND_NORMAL, 7, '7 (+7)', '+7 to Total', 3),
    (KIND_NORMAL, 8, '8 (+8)', '+8 to Total', 3),
    (KIND_NORMAL, 10, '10 (+10)', '+10 to Total', 10),
    (KIND_SPECIAL, FACE_NINE, '9 (±9)', '+9 or -9', 5),
    (KIND_SPECIAL, FACE_TEN, '10 (±10)', '+10 or -10', 6),
    (KIND_SPECIAL, FACE_ZERO, '0 (Skip/Rev)', 'Keep Total, Skip or Reverse', 3),
    (KIND_SPECIAL, FACE_JACK, 'J (Set 60-99)', 'Set Total to 60-99', 1),
]

DECK_SIZE = sum(row[4] for row in DECK_TABLE)

# Starting total keyed by seat count
STARTING_TOTALS = {2: 40, 3: 20, 4: 0}


def signed_values(face: Face) -> Tuple[int, int]:
    """Return the (+n, -n) pair a plus-or-minus special card accepts."""
    n = int(face)
    return n, -n
