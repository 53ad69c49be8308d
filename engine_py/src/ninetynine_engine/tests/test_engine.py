"""
Tests for the 99 game engine: roster, rounds, plays and eliminations.
"""

import pytest

from ninetynine_engine.constants import (
    FACE_JACK, FACE_NINE, FACE_TEN, FACE_ZERO, KIND_NORMAL, KIND_SPECIAL, STATUS_ENDED,
    STATUS_PLAYING, STATUS_WAITING,
)
from ninetynine_engine.engine import NinetyNineEngine
from ninetynine_engine.errors import (
    CARD_NOT_IN_HAND, GAME_NOT_PLAYING, INVALID_RULES, NOT_YOUR_TURN, OPTION_REQUIRED,
    SEAT_NOT_FOUND, TARGET_OUT_OF_RANGE, GameError,
)
from ninetynine_engine.models import BotMove
from ninetynine_engine.rules import create_rules
from ninetynine_engine.shuffle import count_cards, validate_deck_integrity


def make_engine(seat_count=2, seed=42, start=True):
    engine = NinetyNineEngine(
        room_id="test-room",
        rules=create_rules(random_first_seat=False),
        seed=seed
    )
    for i in range(seat_count):
        assert engine.add_seat(f"p{i}", f"Player {i}")
    if start:
        assert engine.start_game()
    return engine


def plant(engine, seat_id, kind, face):
    """Put a card of the given kind and face into a seat's hand, swapping one out."""
    state = engine.state
    seat = state.get_seat(seat_id)
    match = lambda c: c.kind == kind and c.face == face  # noqa: E731
    existing = next((c for c in seat.hand if match(c)), None)
    if existing:
        return existing
    piles = [state.draw_pile, state.discard_pile] + [s.hand for s in state.seats if s.id != seat_id]
    for pile in piles:
        card = next((c for c in pile if match(c)), None)
        if card:
            pile.remove(card)
            pile.append(seat.hand.pop())
            seat.hand.append(card)
            return card
    raise AssertionError(f"no {kind} {face} card left")


def test_add_seat_limits():
    """At most four seats, unique ids, only while waiting."""
    engine = make_engine(seat_count=4, start=False)

    assert not engine.add_seat("p9", "Extra")
    assert not engine.add_seat("p0", "Duplicate")
    assert len(engine.state.seats) == 4

    engine = make_engine(seat_count=2)
    assert not engine.add_seat("late", "Late Player")


def test_add_bot_generates_identity():
    """Bots get a generated id and a name that shows their tier."""
    engine = make_engine(seat_count=1, start=False)
    bot_id = engine.add_bot("hard")

    assert bot_id.startswith("bot-")
    seat = engine.state.get_seat(bot_id)
    assert seat.is_bot
    assert seat.difficulty == "hard"
    assert seat.name == "Bot (hard)"
    assert engine.add_bot("impossible") is None


def test_start_requires_two_seats():
    """A single seat cannot start a round."""
    engine = make_engine(seat_count=1, start=False)
    assert not engine.start_game()
    assert engine.status == STATUS_WAITING


@pytest.mark.parametrize("seat_count,total", [(2, 40), (3, 20), (4, 0)])
def test_starting_total_by_seat_count(seat_count, total):
    """The opening total depends on how many seats play."""
    engine = make_engine(seat_count=seat_count)
    state = engine.state

    assert state.status == STATUS_PLAYING
    assert state.current_total == total
    assert state.direction == 1
    assert state.turn_index == 0
    assert all(len(s.hand) == 5 for s in state.seats)
    assert count_cards(state) == 49
    assert "Game started!" in state.game_log


def test_random_first_seat_is_seeded():
    """With random first seat on, the same seed picks the same opener."""
    openers = set()
    for _ in range(2):
        engine = NinetyNineEngine(rules=create_rules(random_first_seat=True), seed=11)
        for i in range(4):
            engine.add_seat(f"p{i}", f"Player {i}")
        engine.start_game()
        openers.add(engine.state.turn_index)
    assert len(openers) == 1


def test_start_ignored_while_playing():
    """Starting again mid-round changes nothing."""
    engine = make_engine()
    version = engine.version
    assert not engine.start_game()
    assert engine.version == version


def test_normal_card_adds_value():
    """90 plus an 8 makes 98 and the turn moves on."""
    engine = make_engine()
    state = engine.state
    state.current_total = 90
    card = plant(engine, "p0", KIND_NORMAL, 8)
    version = engine.version

    result = engine.play_card("p0", card.id)

    assert result.success
    assert not result.eliminated
    assert state.current_total == 98
    assert state.score_change == 8
    assert state.last_played_by == "p0"
    assert state.turn_index == 1
    assert state.last_card.id == card.id
    assert len(state.get_seat("p0").hand) == 5
    assert engine.version == version + 1
    assert validate_deck_integrity(state)


def test_play_out_of_turn_rejected():
    """Only the seat to act may play; nothing changes on rejection."""
    engine = make_engine()
    card = engine.state.get_seat("p1").hand[0]
    version = engine.version

    result = engine.play_card("p1", card.id)

    assert not result.success
    assert result.code == NOT_YOUR_TURN
    assert result.message == "Not your turn"
    assert engine.version == version


def test_play_rejections():
    """Unknown seat, missing card and inactive game are reported."""
    engine = make_engine()

    assert engine.play_card("ghost", "card-1").code == SEAT_NOT_FOUND
    assert engine.play_card("p0", "card-999").code == CARD_NOT_IN_HAND

    waiting = make_engine(start=False)
    result = waiting.play_card("p0", "card-1")
    assert result.code == GAME_NOT_PLAYING
    assert result.message == "Game not active"


@pytest.mark.parametrize("face", [FACE_NINE, FACE_TEN])
def test_plus_minus_requires_sign(face):
    """The 9 and 10 specials need a matching +n or -n value."""
    engine = make_engine()
    card = plant(engine, "p0", KIND_SPECIAL, face)
    n = int(face)

    missing = engine.play_card("p0", card.id)
    assert missing.code == OPTION_REQUIRED
    assert missing.message == f"Must select +{n} or -{n}"

    wrong = engine.play_card("p0", card.id, {"value": n + 1})
    assert wrong.code == OPTION_REQUIRED

    assert engine.play_card("p0", card.id, {"value": -n}).success
    assert engine.state.current_total == 40 - n


def test_negative_total_clamped_to_zero():
    """A minus play never leaves the total below zero."""
    engine = make_engine()
    engine.state.current_total = 5
    card = plant(engine, "p0", KIND_SPECIAL, FACE_NINE)

    assert engine.play_card("p0", card.id, {"value": -9}).success
    assert engine.state.current_total == 0
    assert engine.state.score_change == -5


def test_jack_sets_total_in_range():
    """The J accepts only targets between 60 and 99."""
    engine = make_engine()
    card = plant(engine, "p0", KIND_SPECIAL, FACE_JACK)

    low = engine.play_card("p0", card.id, {"value": 59})
    assert low.code == TARGET_OUT_OF_RANGE
    assert low.message == "Must select value between 60 and 99"
    assert engine.play_card("p0", card.id, {"value": 100}).code == TARGET_OUT_OF_RANGE
    assert engine.play_card("p0", card.id).code == TARGET_OUT_OF_RANGE

    assert engine.play_card("p0", card.id, {"value": 99}).success
    assert engine.state.current_total == 99


def test_zero_keep_direction():
    """The 0 keeps the total and, by default, the direction."""
    engine = make_engine(seat_count=3)
    engine.state.current_total = 77
    card = plant(engine, "p0", KIND_SPECIAL, FACE_ZERO)

    assert engine.play_card("p0", card.id).success
    assert engine.state.current_total == 77
    assert engine.state.direction == 1
    assert engine.state.turn_index == 1


def test_zero_explicit_keep():
    """An explicit keep behaves like the default."""
    engine = make_engine(seat_count=3)
    engine.state.current_total = 64
    card = plant(engine, "p0", KIND_SPECIAL, FACE_ZERO)
    version = engine.version

    assert engine.play_card("p0", card.id, {"direction": "keep"}).success
    assert engine.state.current_total == 64
    assert engine.state.score_change == 0
    assert engine.state.direction == 1
    assert engine.state.turn_index == 1
    assert engine.version == version + 1


def test_zero_change_direction():
    """Choosing change reverses play order."""
    engine = make_engine(seat_count=3)
    card = plant(engine, "p0", KIND_SPECIAL, FACE_ZERO)

    assert engine.play_card("p0", card.id, {"direction": "change"}).success
    assert engine.state.direction == -1
    assert engine.state.turn_index == 2
    assert "Player 0 reversed the direction" in engine.state.game_log


def test_plain_card_ignores_options():
    """Options sent with a plain card are not parsed."""
    engine = make_engine()
    engine.state.current_total = 30
    card = plant(engine, "p0", KIND_NORMAL, 4)

    result = engine.play_card("p0", card.id, {"value": "junk", "direction": 7})

    assert result.success
    assert engine.state.current_total == 34


def test_jack_with_non_integer_target():
    """A J target that is not a number is out of range, not a missing option."""
    engine = make_engine()
    card = plant(engine, "p0", KIND_SPECIAL, FACE_JACK)
    version = engine.version

    result = engine.play_card("p0", card.id, {"value": "high"})

    assert result.code == TARGET_OUT_OF_RANGE
    assert result.message == "Must select value between 60 and 99"
    assert engine.version == version


def test_zero_rejects_unknown_direction():
    engine = make_engine()
    card = plant(engine, "p0", KIND_SPECIAL, FACE_ZERO)
    assert engine.play_card("p0", card.id, {"direction": "sideways"}).code == OPTION_REQUIRED


def test_overflow_eliminates_and_declares_winner():
    """95 plus 9 goes over 99: the player is out and the last seat wins."""
    engine = make_engine()
    state = engine.state
    state.current_total = 95
    card = plant(engine, "p0", KIND_SPECIAL, FACE_NINE)

    result = engine.play_card("p0", card.id, {"value": 9})

    assert result.success
    assert result.eliminated
    loser = state.get_seat("p0")
    assert not loser.is_alive
    assert loser.hand == []
    assert state.current_total == 95
    assert state.status == STATUS_ENDED
    assert state.winner_id == "p1"
    assert "Player 0 eliminated!" in state.game_log
    assert "Player 1 wins the game!" in state.game_log
    assert count_cards(state) == 49


def test_elimination_skips_dead_seat():
    """With three seats the round goes on and the dead seat is skipped."""
    engine = make_engine(seat_count=3)
    state = engine.state
    state.current_total = 95
    card = plant(engine, "p0", KIND_NORMAL, 10)

    assert engine.play_card("p0", card.id).eliminated
    assert state.status == STATUS_PLAYING
    assert state.turn_index == 1
    assert card.id in {c.id for c in state.discard_pile}
    assert len(state.alive_seats()) == 2

    card = plant(engine, "p1", KIND_SPECIAL, FACE_ZERO)
    engine.play_card("p1", card.id)
    assert state.turn_index == 2

    card = plant(engine, "p2", KIND_SPECIAL, FACE_ZERO)
    engine.play_card("p2", card.id)
    assert state.turn_index == 1


def test_restart_keeps_roster_with_fresh_cards():
    """Restart after a finished round revives everyone and redeals."""
    engine = make_engine(seat_count=3)
    state = engine.state
    state.current_total = 95
    card = plant(engine, "p0", KIND_NORMAL, 10)
    engine.play_card("p0", card.id)

    assert engine.restart_game()

    assert [s.id for s in state.seats] == ["p0", "p1", "p2"]
    assert all(s.is_alive for s in state.seats)
    assert all(len(s.hand) == 5 for s in state.seats)
    assert state.status == STATUS_PLAYING
    assert state.winner_id is None
    assert state.current_total == 20
    assert state.discard_pile == []
    assert validate_deck_integrity(state)
    assert "Game restarted!" in state.game_log


def test_remove_current_seat_passes_turn():
    """Removing the seat to act hands the turn to the next seat."""
    engine = make_engine(seat_count=3)

    assert engine.remove_seat("p0")

    state = engine.state
    assert [s.id for s in state.seats] == ["p1", "p2"]
    assert state.current_seat.id == "p1"
    assert state.status == STATUS_PLAYING
    assert count_cards(state) == 49


def test_remove_seat_before_turn_keeps_turn_owner():
    engine = make_engine(seat_count=3)
    card = plant(engine, "p0", KIND_NORMAL, 1)
    engine.play_card("p0", card.id)
    assert engine.state.current_seat.id == "p1"

    engine.remove_seat("p0")
    assert engine.state.current_seat.id == "p1"


def test_remove_seat_ends_two_seat_round():
    """Losing one of two seats ends the round without a winner."""
    engine = make_engine()

    assert engine.remove_seat("p1")
    assert engine.status == STATUS_ENDED
    assert engine.state.winner_id is None
    assert not engine.remove_seat("p1")


def test_create_rules_rejects_bad_config():
    with pytest.raises(GameError) as exc:
        create_rules(min_seats=4, max_seats=2)
    assert exc.value.code == INVALID_RULES


def test_bot_game_keeps_invariants():
    """Bots play back to back without breaking totals or the deck."""
    engine = NinetyNineEngine(seed=5)
    engine.add_bot("easy")
    engine.add_bot("normal")
    engine.add_bot("hard")
    assert engine.start_game()

    for _ in range(200):
        if engine.run_bot_turns(limit=1) == 0:
            break
        state = engine.state
        assert 0 <= state.current_total <= 99
        assert count_cards(state) == 49
        assert validate_deck_integrity(state)

    assert engine.status in (STATUS_PLAYING, STATUS_ENDED)


def test_stale_bot_move_ignored():
    """A bot move for an old version is dropped."""
    engine = NinetyNineEngine(rules=create_rules(random_first_seat=False), seed=3)
    bot_id = engine.add_bot("normal")
    engine.add_seat("human", "Human")
    engine.start_game()
    version = engine.version

    assert engine.play_bot_turn(bot_id, expected_version=version - 1) is None
    assert engine.version == version
    assert engine.play_bot_turn(bot_id, expected_version=version).success


def test_subscribers_receive_snapshots_and_logs():
    states, logs = [], []
    engine = make_engine(start=False)
    engine.subscribe(on_state=states.append, on_log=logs.append)

    engine.start_game()

    assert states[-1].status == STATUS_PLAYING
    assert states[-1].hand == []
    assert logs == ["Game started!"]


def test_remove_seat_renumbers_seats():
    """Seat numbers stay contiguous after someone leaves the lobby."""
    engine = make_engine(seat_count=3, start=False)

    assert engine.remove_seat("p1")
    assert engine.add_seat("p3", "Player 3")

    seats = engine.state.seats
    assert [s.id for s in seats] == ["p0", "p2", "p3"]
    assert [s.seat for s in seats] == [0, 1, 2]


def test_bots_respect_lower_ceiling():
    """With a ceiling of 90 bots never leave the total above it."""
    engine = NinetyNineEngine(rules=create_rules(ceiling=90, set_total_max=90), seed=11)
    engine.add_bot("easy")
    engine.add_bot("normal")
    engine.add_bot("hard")
    assert engine.start_game()

    for _ in range(200):
        if engine.run_bot_turns(limit=1) == 0:
            break
        assert 0 <= engine.state.current_total <= 90


def test_run_bot_turns_stops_on_rejected_move():
    """A bot move the engine rejects ends the run instead of looping."""
    engine = NinetyNineEngine(rules=create_rules(random_first_seat=False), seed=2)
    bot_id = engine.add_bot("normal")
    engine.add_bot("easy")
    engine.start_game()
    version = engine.version
    engine.choose_bot_move = lambda seat_id: BotMove("card-999", 5, 45)

    assert engine.run_bot_turns() == 0
    assert engine.state.current_seat.id == bot_id
    assert engine.version == version
