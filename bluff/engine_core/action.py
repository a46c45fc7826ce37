"""
Action System - Actions, payloads, and results.

Actions represent:
1. Lobby actions (add participants, start, reset)
2. Player actions (play cards with a claim, pass, challenge)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence

from .cards import Card, Rank


class ActionType(Enum):
    """Types of actions in the system."""
    # Lobby actions
    ADD_PLAYER = "add_player"
    ADD_COMPUTER_PLAYER = "add_computer_player"
    START_GAME = "start_game"
    RESET_GAME = "reset_game"

    # Player actions
    PLAY_CARDS = "play_cards"
    PASS_TURN = "pass_turn"
    CHALLENGE_CLAIM = "challenge_claim"


@dataclass(frozen=True)
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    Validation happens in the reducer.
    """
    player_id: str | None = None
    name: str | None = None
    cards: tuple[Card, ...] = ()
    claimed_rank: Rank | str | None = None


@dataclass(frozen=True)
class Action:
    """A complete action to be applied to the match state."""
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def add_player(cls, name: str) -> Action:
        return cls(ActionType.ADD_PLAYER, ActionPayload(name=name))

    @classmethod
    def add_computer_player(cls) -> Action:
        return cls(ActionType.ADD_COMPUTER_PLAYER)

    @classmethod
    def start_game(cls) -> Action:
        return cls(ActionType.START_GAME)

    @classmethod
    def reset_game(cls) -> Action:
        return cls(ActionType.RESET_GAME)

    @classmethod
    def play_cards(
        cls,
        player_id: str,
        cards: Sequence[Card],
        claimed_rank: Rank | str,
    ) -> Action:
        """Factory for laying cards face down with a claim."""
        return cls(
            ActionType.PLAY_CARDS,
            ActionPayload(player_id=player_id, cards=tuple(cards), claimed_rank=claimed_rank),
        )

    @classmethod
    def pass_turn(cls, player_id: str) -> Action:
        return cls(ActionType.PASS_TURN, ActionPayload(player_id=player_id))

    @classmethod
    def challenge(cls, player_id: str) -> Action:
        """Factory for calling "bluff" on the standing claim."""
        return cls(ActionType.CHALLENGE_CLAIM, ActionPayload(player_id=player_id))


class RejectionCode(str, Enum):
    """Why the reducer refused an action."""
    GAME_STARTED = "GAME_STARTED"
    GAME_NOT_STARTED = "GAME_NOT_STARTED"
    GAME_OVER = "GAME_OVER"
    NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    INVALID_CARDS = "INVALID_CARDS"
    INVALID_RANK = "INVALID_RANK"
    INVALID_NAME = "INVALID_NAME"
    NO_CLAIM = "NO_CLAIM"
    OWN_CLAIM = "OWN_CLAIM"
    ALREADY_PASSED = "ALREADY_PASSED"
    UNKNOWN_PLAYER = "UNKNOWN_PLAYER"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"
    HANDLER_ERROR = "HANDLER_ERROR"


@dataclass
class ActionResult:
    """
    Result of applying an action.

    new_state is always set: a rejected action hands back the prior
    state untouched, so callers can treat the reducer as total.
    """
    success: bool
    new_state: Any  # MatchState
    error: str | None = None
    error_code: RejectionCode | None = None

    # Human-readable summary of what happened
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, state, error: str, error_code: RejectionCode) -> ActionResult:
        """Create a rejection result carrying the unchanged state."""
        return cls(success=False, new_state=state, error=error, error_code=error_code)

    @classmethod
    def success_with_state(cls, state, changes: list[str] | None = None) -> ActionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, state_changes=changes or [])
