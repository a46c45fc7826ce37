"""
Pytest fixtures for Bluff tests.
"""

import random

import pytest

from ..engine_core.action import Action
from ..engine_core.cards import Card, Rank, Suit
from ..engine_core.reducer import Reducer
from ..engine_core.state import MatchPhase, MatchState, PlayerState
from ..session import SessionManager


def card(label: str) -> Card:
    """Shorthand: card("KH") -> King of hearts, card("10S") -> ten of spades."""
    suits = {"H": Suit.HEARTS, "D": Suit.DIAMONDS, "C": Suit.CLUBS, "S": Suit.SPADES}
    return Card(rank=Rank(label[:-1]), suit=suits[label[-1]])


def hand(*labels: str) -> tuple[Card, ...]:
    return tuple(card(label) for label in labels)


def playing_state(*hands: tuple[Card, ...], current: int = 0, human: bool = True) -> MatchState:
    """A match in progress with hand-picked hands (ids player-1, player-2, ...)."""
    players = tuple(
        PlayerState(
            player_id=f"player-{i + 1}",
            name=f"P{i + 1}",
            is_human=human,
            is_host=i == 0,
            hand=h,
            is_current_turn=i == current,
        )
        for i, h in enumerate(hands)
    )
    return MatchState(phase=MatchPhase.PLAYING, players=players, current_player_idx=current)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def reducer(rng) -> Reducer:
    """Reducer with a seeded shuffle and a fixed clock."""
    return Reducer(rng=rng, clock=lambda: 1000.0)


@pytest.fixture
def lobby_two(reducer) -> MatchState:
    """Lobby with Alice (host) and one computer."""
    state = MatchState()
    state = reducer.apply(state, Action.add_player("Alice")).new_state
    state = reducer.apply(state, Action.add_computer_player()).new_state
    return state


@pytest.fixture
def started_four(reducer) -> MatchState:
    """Four humans, dealt and playing."""
    state = MatchState()
    for name in ("Alice", "Bob", "Carol", "Dan"):
        state = reducer.apply(state, Action.add_player(name)).new_state
    return reducer.apply(state, Action.start_game()).new_state


@pytest.fixture
def manager() -> SessionManager:
    return SessionManager()


@pytest.fixture
def session(manager):
    """A seeded session in the lobby."""
    return manager.create_session(seed=42)
