"""
Engine Core - Deterministic match state management.

The engine is the runtime that:
1. Builds and deals the deck
2. Holds the MatchState snapshot
3. Applies actions via the reducer
4. Resolves passes, challenges and wins
"""

from .cards import Card, Rank, Suit, RANKS, SUITS
from .deck import build_deck, deal, full_deck, shuffle_deck, DECK_SIZE
from .state import MatchState, MatchPhase, PlayerState, Claim, HistoryEntry, EntryKind
from .action import Action, ActionType, ActionPayload, ActionResult, RejectionCode
from .reducer import Reducer, apply_action, reduce
from .action_generator import legal_action_types, responders
from .rules import check_integrity, describe_entry

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "RANKS",
    "SUITS",
    "build_deck",
    "deal",
    "full_deck",
    "shuffle_deck",
    "DECK_SIZE",
    "MatchState",
    "MatchPhase",
    "PlayerState",
    "Claim",
    "HistoryEntry",
    "EntryKind",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "RejectionCode",
    "Reducer",
    "apply_action",
    "reduce",
    "legal_action_types",
    "responders",
    "check_integrity",
    "describe_entry",
]
