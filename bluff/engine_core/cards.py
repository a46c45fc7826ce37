"""
Cards - Suits, ranks and the immutable card value.

A card's identity is its (rank, suit) pair. The card_id is derived
from both and is stable for the card's lifetime, so a single deck
can never hold two cards with the same id.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


class Suit(str, Enum):
    """The four French suits."""
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    @property
    def symbol(self) -> str:
        return SUIT_SYMBOLS[self]


class Rank(str, Enum):
    """
    The thirteen ranks.

    Declaration order is used for display only; ranks carry no
    strength ordering during play.
    """
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"

    @classmethod
    def parse(cls, value: Rank | str) -> Rank | None:
        """Coerce a rank or its string value; None if unrecognized."""
        if isinstance(value, Rank):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


SUIT_SYMBOLS = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}

SUITS: tuple[Suit, ...] = tuple(Suit)
RANKS: tuple[Rank, ...] = tuple(Rank)


@dataclass(frozen=True)
class Card:
    """A single playing card."""
    rank: Rank
    suit: Suit
    card_id: str = field(init=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "card_id", f"{self.rank.value}-{self.suit.value}")

    @classmethod
    def from_id(cls, card_id: str) -> Card:
        """
        Rebuild a card from its id, e.g. "10-hearts".

        Raises ValueError for malformed ids.
        """
        rank_part, sep, suit_part = card_id.partition("-")
        if not sep:
            raise ValueError(f"Malformed card id: {card_id!r}")
        return cls(rank=Rank(rank_part), suit=Suit(suit_part))

    @property
    def label(self) -> str:
        """Short display label, e.g. "10♥"."""
        return f"{self.rank.value}{self.suit.symbol}"

    def __str__(self) -> str:
        return self.label
