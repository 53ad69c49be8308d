"""
Card shuffling, dealing and draw-pile recycling.
"""

import logging
import random
from typing import List, Optional

from .constants import DECK_TABLE
from .models import Card, GameState

logger = logging.getLogger(__name__)


def create_deck() -> List[Card]:
    """
    Build the fixed 49-card deck in table order.

    Card ids are numbered from 1 each time, so every call yields fresh
    cards that share nothing with a previous round.
    """
    deck = []
    counter = 1
    for kind, face, label, description, copies in DECK_TABLE:
        for _ in range(copies):
            deck.append(Card(
                id=f"card-{counter}",
                kind=kind,
                face=face,
                label=label,
                description=description,
            ))
            counter += 1
    return deck


def shuffle_deck(cards: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    Shuffle cards in place with Fisher-Yates.

    Args:
        cards: Pile to shuffle
        rng: Random source; a seeded ``random.Random`` gives repeatable order

    Returns:
        The same list, shuffled
    """
    rng = rng or random.Random()
    for i in range(len(cards) - 1, 0, -1):
        j = rng.randint(0, i)
        cards[i], cards[j] = cards[j], cards[i]
    return cards


def recycle_discard(state: GameState, rng: Optional[random.Random] = None) -> bool:
    """Turn the discard pile into a freshly shuffled draw pile."""
    if not state.discard_pile:
        return False
    state.draw_pile = state.discard_pile
    state.discard_pile = []
    shuffle_deck(state.draw_pile, rng)
    logger.debug(f"Room {state.id}: recycled {len(state.draw_pile)} cards into the draw pile")
    return True


def draw_card(state: GameState, rng: Optional[random.Random] = None) -> Optional[Card]:
    """
    Take the top card of the draw pile.

    An empty draw pile is refilled from the discard pile first. When both
    are empty nothing is drawn and None is returned.
    """
    if not state.draw_pile and not recycle_discard(state, rng):
        return None
    return state.draw_pile.pop()


def deal_cards(state: GameState, count: int, rng: Optional[random.Random] = None) -> List[Card]:
    """Draw up to ``count`` cards for an opening hand."""
    hand = []
    for _ in range(count):
        card = draw_card(state, rng)
        if card is None:
            break
        hand.append(card)
    return hand


def setup_round(state: GameState, hand_size: int, rng: Optional[random.Random] = None) -> GameState:
    """
    Rebuild and shuffle the deck, clear both piles and deal every seat a hand.

    Aliveness is restored for all seats; everything else about the round
    (total, direction, turn) is left to the caller.
    """
    state.discard_pile = []
    state.draw_pile = shuffle_deck(create_deck(), rng)
    for seat in state.seats:
        seat.hand = []
        seat.is_alive = True
    for seat in state.seats:
        seat.hand = deal_cards(state, hand_size, rng)
    return state


def count_cards(state: GameState) -> int:
    """Total cards across hands and both piles."""
    return (
        sum(len(seat.hand) for seat in state.seats)
        + len(state.draw_pile)
        + len(state.discard_pile)
    )


def validate_deck_integrity(state: GameState) -> bool:
    """
    Check every card of the deck is accounted for exactly once.

    Args:
        state: Game state to validate

    Returns:
        True if no card is missing or duplicated
    """
    all_ids = [card.id for seat in state.seats for card in seat.hand]
    all_ids.extend(card.id for card in state.draw_pile)
    all_ids.extend(card.id for card in state.discard_pile)
    expected = {card.id for card in create_deck()}
    return len(all_ids) == len(set(all_ids)) and set(all_ids) == expected
