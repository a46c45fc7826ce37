"""
Match State - The single authoritative snapshot of a match.

Design principles:
- Immutable-friendly: all mutations return new state
- Tuples everywhere, so a snapshot can be shared with readers safely
- Only the reducer produces new MatchState values
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum

from .cards import Card, Rank


class MatchPhase(Enum):
    """Match lifecycle."""
    LOBBY = "lobby"
    PLAYING = "playing"
    ENDED = "ended"


class EntryKind(Enum):
    """Kinds of entries in the action history."""
    CLAIM = "claim"
    PASS = "pass"
    CHALLENGE = "challenge"


@dataclass(frozen=True)
class HistoryEntry:
    """
    One append-only entry of the match log.

    Claims carry the claimed rank and count. Challenges carry the
    revealed outcome and who picked up the pile.
    """
    player_id: str
    kind: EntryKind
    timestamp: float
    claimed_rank: Rank | None = None
    claimed_count: int | None = None
    was_honest: bool | None = None
    pile_taker_id: str | None = None


@dataclass(frozen=True)
class Claim:
    """The claim currently standing on the pile."""
    rank: Rank
    count: int
    owner_id: str


@dataclass(frozen=True)
class PlayerState:
    """A participant and the cards they hold."""
    player_id: str
    name: str
    is_human: bool = True
    is_host: bool = False
    hand: tuple[Card, ...] = ()
    is_current_turn: bool = False

    @property
    def hand_size(self) -> int:
        return len(self.hand)

    def holds(self, card_id: str) -> bool:
        return any(c.card_id == card_id for c in self.hand)

    def with_hand(self, hand: tuple[Card, ...]) -> PlayerState:
        return replace(self, hand=hand)


@dataclass(frozen=True)
class MatchState:
    """
    Complete match state at a point in time.

    All state changes go through the reducer.
    """
    phase: MatchPhase = MatchPhase.LOBBY
    players: tuple[PlayerState, ...] = ()
    current_player_idx: int = 0

    # Cards face down in the middle, oldest first
    pile: tuple[Card, ...] = ()
    claim: Claim | None = None

    # Cards cleared off the table by a consensus pass
    discard: tuple[Card, ...] = ()

    last_action: HistoryEntry | None = None
    action_history: tuple[HistoryEntry, ...] = ()

    winner_id: str | None = None

    # Ids of scripted participants, kept across resets
    computer_player_ids: tuple[str, ...] = field(default_factory=tuple)

    @property
    def started(self) -> bool:
        return self.phase is not MatchPhase.LOBBY

    @property
    def ended(self) -> bool:
        return self.phase is MatchPhase.ENDED

    @property
    def in_progress(self) -> bool:
        return self.phase is MatchPhase.PLAYING

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def current_player(self) -> PlayerState | None:
        """The participant whose turn it is (None in an empty lobby)."""
        if not self.players:
            return None
        return self.players[self.current_player_idx]

    @property
    def claim_owner(self) -> PlayerState | None:
        if self.claim is None:
            return None
        return self.get_player(self.claim.owner_id)

    def get_player(self, player_id: str) -> PlayerState | None:
        """Get participant by id."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def player_index(self, player_id: str) -> int | None:
        for idx, p in enumerate(self.players):
            if p.player_id == player_id:
                return idx
        return None

    def total_cards(self) -> int:
        """Cards in hands, pile and discard combined."""
        return sum(p.hand_size for p in self.players) + len(self.pile) + len(self.discard)

    def with_player(self, player: PlayerState) -> MatchState:
        """Return new state with one participant replaced."""
        new_players = tuple(
            player if p.player_id == player.player_id else p
            for p in self.players
        )
        return self._copy_with(players=new_players)

    def _copy_with(self, **kwargs) -> MatchState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)
