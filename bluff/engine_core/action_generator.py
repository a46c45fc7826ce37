"""
Action Generator - Which actions a participant may take right now.

Used by:
1. The scripted-turn controller to find who should act
2. The API to tell the presentation layer which buttons to enable

Card plays are not enumerated (every subset of a hand is playable);
only the action types are listed.
"""

from __future__ import annotations

from .action import ActionType
from .rules import passed_since_claim
from .state import MatchPhase, MatchState


def can_play(state: MatchState, player_id: str) -> bool:
    """Current-turn participant with cards in hand."""
    current = state.current_player
    return (
        state.phase is MatchPhase.PLAYING
        and current is not None
        and current.player_id == player_id
        and current.hand_size > 0
    )


def can_respond(state: MatchState, player_id: str) -> bool:
    """Anyone but the claim owner who has not yet passed on the claim."""
    if state.phase is not MatchPhase.PLAYING or state.claim is None:
        return False
    if state.get_player(player_id) is None or player_id == state.claim.owner_id:
        return False
    return player_id not in passed_since_claim(state)


def legal_action_types(state: MatchState, player_id: str) -> list[ActionType]:
    """
    Player actions the reducer would currently accept from a participant.

    Lobby actions are not listed; they belong to whoever hosts the table.
    """
    actions = []
    if can_play(state, player_id):
        actions.append(ActionType.PLAY_CARDS)
    if can_respond(state, player_id):
        actions.append(ActionType.PASS_TURN)
    if (
        state.phase is MatchPhase.PLAYING
        and state.claim is not None
        and state.get_player(player_id) is not None
        and player_id != state.claim.owner_id
    ):
        actions.append(ActionType.CHALLENGE_CLAIM)
    return actions


def responders(state: MatchState) -> list[str]:
    """
    Ids of participants still expected to answer the standing claim.

    Ordered by seat, starting from the current-turn participant.
    """
    if state.claim is None or not state.players:
        return []
    n = state.num_players
    ordered = [state.players[(state.current_player_idx + k) % n] for k in range(n)]
    return [p.player_id for p in ordered if can_respond(state, p.player_id)]
