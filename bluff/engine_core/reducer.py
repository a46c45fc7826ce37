"""
Reducer - Applies actions to match state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Pure function: (state, action) -> new_state
- Total: never raises; a rejected action returns the prior state
- Randomness and the clock are injected, so tests can replay exactly
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Callable
import logging
import random
import time

from .action import Action, ActionPayload, ActionResult, ActionType, RejectionCode
from .cards import Rank
from .deck import build_deck, deal
from .rules import (
    advance_turn,
    check_win,
    describe_entry,
    has_consensus,
    is_claim_honest,
    next_index,
    passed_since_claim,
    with_turn,
)
from .state import Claim, EntryKind, HistoryEntry, MatchPhase, MatchState, PlayerState

logger = logging.getLogger(__name__)

MIN_PLAYERS = 2
COMPUTER_NAME_PREFIX = "Computer"

_LOBBY_ACTIONS = {
    ActionType.ADD_PLAYER,
    ActionType.ADD_COMPUTER_PLAYER,
    ActionType.START_GAME,
}
_PLAYER_ACTIONS = {
    ActionType.PLAY_CARDS,
    ActionType.PASS_TURN,
    ActionType.CHALLENGE_CLAIM,
}


@dataclass
class Reducer:
    """
    Reducer applies actions to match state.

    Stateless apart from its random source and clock.
    """
    rng: random.Random = field(default_factory=random.Random)
    clock: Callable[[], float] = time.time

    def apply(self, state: MatchState, action: Action) -> ActionResult:
        """
        Apply an action to the match state.

        Returns ActionResult; on rejection new_state is `state` itself.
        """
        handler = self._get_handler(action)
        if handler is None:
            return self._reject(
                state,
                f"No handler for action: {action!r}",
                RejectionCode.UNKNOWN_ACTION,
            )
        if not isinstance(getattr(action, "payload", None), ActionPayload):
            return self._reject(
                state,
                f"Malformed payload for {action.action_type.value}",
                RejectionCode.UNKNOWN_ACTION,
            )

        rejection = self._validate_action(state, action)
        if rejection:
            message, code = rejection
            return self._reject(state, message, code)

        try:
            return handler(state, action)
        except Exception:
            logger.exception("Handler for %s failed", action.action_type.value)
            return self._reject(
                state,
                f"Could not apply {action.action_type.value}",
                RejectionCode.HANDLER_ERROR,
            )

    def _reject(self, state: MatchState, message: str, code: RejectionCode) -> ActionResult:
        logger.debug("Rejected action (%s): %s", code.value, message)
        return ActionResult.failure(state, message, code)

    def _validate_action(
        self, state: MatchState, action: Action
    ) -> tuple[str, RejectionCode] | None:
        """
        Validate lifecycle and actor before dispatching.

        Returns (message, code) if invalid, None if valid.
        """
        if action.action_type in _LOBBY_ACTIONS and state.started:
            return "Game already started", RejectionCode.GAME_STARTED

        if action.action_type in _PLAYER_ACTIONS:
            if state.phase is MatchPhase.LOBBY:
                return "Game not started", RejectionCode.GAME_NOT_STARTED
            if state.phase is MatchPhase.ENDED:
                return "Game is over", RejectionCode.GAME_OVER
            player_id = action.payload.player_id
            if player_id is None or state.get_player(player_id) is None:
                return f"Unknown player {player_id}", RejectionCode.UNKNOWN_PLAYER

        return None

    def _get_handler(self, action: Action):
        """Get the handler function for an action, None if unrecognized."""
        handlers = {
            ActionType.ADD_PLAYER: self._handle_add_player,
            ActionType.ADD_COMPUTER_PLAYER: self._handle_add_computer_player,
            ActionType.START_GAME: self._handle_start_game,
            ActionType.PLAY_CARDS: self._handle_play_cards,
            ActionType.PASS_TURN: self._handle_pass_turn,
            ActionType.CHALLENGE_CLAIM: self._handle_challenge,
            ActionType.RESET_GAME: self._handle_reset,
        }
        action_type = getattr(action, "action_type", None)
        if not isinstance(action_type, ActionType):
            return None
        return handlers.get(action_type)

    # -- Lobby ------------------------------------------------------------

    def _handle_add_player(self, state: MatchState, action: Action) -> ActionResult:
        name = (action.payload.name or "").strip()
        if not name:
            return self._reject(state, "Player name is required", RejectionCode.INVALID_NAME)

        player = PlayerState(
            player_id=f"player-{state.num_players + 1}",
            name=name,
            is_human=True,
            is_host=state.num_players == 0,
        )
        new_state = state._copy_with(players=state.players + (player,))
        return ActionResult.success_with_state(new_state, changes=[f"{name} joined"])

    def _handle_add_computer_player(self, state: MatchState, action: Action) -> ActionResult:
        number = 1 + sum(
            1 for p in state.players if p.name.startswith(COMPUTER_NAME_PREFIX)
        )
        player = PlayerState(
            player_id=f"computer-{state.num_players + 1}",
            name=f"{COMPUTER_NAME_PREFIX} {number}",
            is_human=False,
            is_host=state.num_players == 0,
        )
        new_state = state._copy_with(
            players=state.players + (player,),
            computer_player_ids=state.computer_player_ids + (player.player_id,),
        )
        return ActionResult.success_with_state(new_state, changes=[f"{player.name} joined"])

    def _handle_start_game(self, state: MatchState, action: Action) -> ActionResult:
        if state.num_players < MIN_PLAYERS:
            return self._reject(
                state,
                f"Need at least {MIN_PLAYERS} players to start",
                RejectionCode.NOT_ENOUGH_PLAYERS,
            )

        hands = deal(build_deck(self.rng), state.num_players)
        players = tuple(
            replace(p, hand=hand, is_current_turn=(idx == 0))
            for idx, (p, hand) in enumerate(zip(state.players, hands))
        )
        new_state = MatchState(
            phase=MatchPhase.PLAYING,
            players=players,
            current_player_idx=0,
            computer_player_ids=state.computer_player_ids,
        )
        new_state = check_win(new_state)
        return ActionResult.success_with_state(
            new_state,
            changes=[
                f"Dealt {', '.join(str(p.hand_size) for p in players)} cards",
                f"{players[0].name} goes first",
            ],
        )

    def _handle_reset(self, state: MatchState, action: Action) -> ActionResult:
        players = tuple(
            replace(p, hand=(), is_current_turn=False) for p in state.players
        )
        new_state = MatchState(
            players=players,
            computer_player_ids=state.computer_player_ids,
        )
        return ActionResult.success_with_state(new_state, changes=["Back to the lobby"])

    # -- Play -------------------------------------------------------------

    def _handle_play_cards(self, state: MatchState, action: Action) -> ActionResult:
        player_id = action.payload.player_id
        player = state.get_player(player_id)
        if state.player_index(player_id) != state.current_player_idx:
            return self._reject(state, f"Not {player.name}'s turn", RejectionCode.NOT_YOUR_TURN)

        played_ids = [c.card_id for c in action.payload.cards]
        if not played_ids:
            return self._reject(state, "No cards selected", RejectionCode.INVALID_CARDS)
        if len(set(played_ids)) != len(played_ids):
            return self._reject(state, "Same card played twice", RejectionCode.INVALID_CARDS)
        missing = [cid for cid in played_ids if not player.holds(cid)]
        if missing:
            return self._reject(
                state,
                f"Cards not in hand: {', '.join(missing)}",
                RejectionCode.INVALID_CARDS,
            )

        rank = Rank.parse(action.payload.claimed_rank)
        if rank is None:
            return self._reject(
                state,
                f"Invalid rank: {action.payload.claimed_rank!r}",
                RejectionCode.INVALID_RANK,
            )

        by_id = {c.card_id: c for c in player.hand}
        played = tuple(by_id[cid] for cid in played_ids)
        played_set = set(played_ids)
        remaining = tuple(c for c in player.hand if c.card_id not in played_set)

        entry = HistoryEntry(
            player_id=player_id,
            kind=EntryKind.CLAIM,
            timestamp=self.clock(),
            claimed_rank=rank,
            claimed_count=len(played),
        )
        new_state = state.with_player(player.with_hand(remaining))._copy_with(
            pile=state.pile + played,
            claim=Claim(rank=rank, count=len(played), owner_id=player_id),
            last_action=entry,
            action_history=state.action_history + (entry,),
        )
        new_state = check_win(advance_turn(new_state))
        return ActionResult.success_with_state(
            new_state, changes=[describe_entry(new_state, entry)]
        )

    def _handle_pass_turn(self, state: MatchState, action: Action) -> ActionResult:
        player_id = action.payload.player_id
        if state.claim is None or not state.pile:
            return self._reject(state, "Nothing to pass on", RejectionCode.NO_CLAIM)
        if player_id == state.claim.owner_id:
            return self._reject(state, "Cannot pass on your own claim", RejectionCode.OWN_CLAIM)
        if player_id in passed_since_claim(state):
            return self._reject(state, "Already passed on this claim", RejectionCode.ALREADY_PASSED)

        entry = HistoryEntry(
            player_id=player_id,
            kind=EntryKind.PASS,
            timestamp=self.clock(),
        )
        new_state = state._copy_with(
            last_action=entry,
            action_history=state.action_history + (entry,),
        )
        changes = [describe_entry(new_state, entry)]

        if has_consensus(new_state):
            owner_idx = state.player_index(state.claim.owner_id)
            new_state = new_state._copy_with(
                discard=state.discard + state.pile,
                pile=(),
                claim=None,
            )
            new_state = with_turn(new_state, next_index(owner_idx, state.num_players))
            changes.append(
                f"Everyone passed; {len(state.pile)} cards leave play. "
                f"{new_state.current_player.name} is up"
            )

        return ActionResult.success_with_state(new_state, changes=changes)

    def _handle_challenge(self, state: MatchState, action: Action) -> ActionResult:
        challenger_id = action.payload.player_id
        claim = state.claim
        if claim is None or not state.pile:
            return self._reject(state, "No claim to challenge", RejectionCode.NO_CLAIM)
        if challenger_id == claim.owner_id:
            return self._reject(state, "Cannot challenge your own claim", RejectionCode.OWN_CLAIM)

        honest = is_claim_honest(state.pile, claim.rank, claim.count)
        if honest:
            taker_id = challenger_id
            next_idx = next_index(state.current_player_idx, state.num_players)
        else:
            taker_id = claim.owner_id
            next_idx = state.player_index(challenger_id)

        taker = state.get_player(taker_id)
        entry = HistoryEntry(
            player_id=challenger_id,
            kind=EntryKind.CHALLENGE,
            timestamp=self.clock(),
            was_honest=honest,
            pile_taker_id=taker_id,
        )
        new_state = state.with_player(taker.with_hand(taker.hand + state.pile))._copy_with(
            pile=(),
            claim=None,
            last_action=entry,
            action_history=state.action_history + (entry,),
        )
        new_state = check_win(with_turn(new_state, next_idx))
        return ActionResult.success_with_state(
            new_state, changes=[describe_entry(new_state, entry)]
        )


def apply_action(
    state: MatchState,
    action: Action,
    rng: random.Random | None = None,
) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(rng=rng or random.Random())
    return reducer.apply(state, action)


def reduce(state: MatchState, action: Action, rng: random.Random | None = None) -> MatchState:
    """The bare transition function: (state, action) -> state."""
    return apply_action(state, action, rng).new_state
