"""
Deck - Building, shuffling and dealing.

This module handles:
- Creating the standard 52-card deck
- Shuffling with an injected random source for determinism
- Splitting a shuffled deck across the participants

Dealing gives the whole remainder of an uneven split to
the last participant instead of spreading it out.
"""

from __future__ import annotations
import random
from typing import Sequence

from .cards import Card, RANKS, SUITS

DECK_SIZE = len(RANKS) * len(SUITS)


def full_deck() -> tuple[Card, ...]:
    """The unshuffled deck, suit by suit."""
    return tuple(Card(rank=rank, suit=suit) for suit in SUITS for rank in RANKS)


def shuffle_deck(deck: Sequence[Card], rng: random.Random) -> tuple[Card, ...]:
    """
    Return a uniformly shuffled copy of the deck (Fisher-Yates).

    Every permutation is equally likely given an unbiased rng.
    """
    cards = list(deck)
    for i in range(len(cards) - 1, 0, -1):
        j = rng.randint(0, i)
        cards[i], cards[j] = cards[j], cards[i]
    return tuple(cards)


def build_deck(rng: random.Random | None = None) -> tuple[Card, ...]:
    """Create all 52 cards and shuffle them."""
    return shuffle_deck(full_deck(), rng or random.Random())


def deal(deck: Sequence[Card], player_count: int) -> list[tuple[Card, ...]]:
    """
    Split the deck into one hand per participant.

    The first N-1 hands get len(deck) // N cards each, in deck order.
    The last hand gets everything that is left.

    Args:
        deck: Shuffled deck
        player_count: Number of participants (>= 1)

    Returns:
        List of hands, in seat order
    """
    if player_count < 1:
        raise ValueError("Need at least one participant to deal to")

    per_hand = len(deck) // player_count
    hands = []
    for seat in range(player_count):
        start = seat * per_hand
        end = len(deck) if seat == player_count - 1 else start + per_hand
        hands.append(tuple(deck[start:end]))
    return hands
