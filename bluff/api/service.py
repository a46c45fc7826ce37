"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to session calls
2. Manages sessions and their turn schedulers
3. Renders snapshots from a viewer's perspective

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Optional
import logging

from .. import config
from ..bots import PERSONALITIES
from ..engine_core.action_generator import legal_action_types
from ..engine_core.cards import Card
from ..engine_core.rules import describe_entry
from ..engine_core.state import HistoryEntry, MatchState
from ..session import (
    LoopState,
    Notice,
    Session,
    SessionManager,
    TurnScheduler,
    loop_state_for,
    run_scripted_turns,
)
from .schemas import (
    ActionResponse,
    CardInfo,
    ClaimInfo,
    CreateMatchRequest,
    HistoryEntryInfo,
    MatchStateResponse,
    MatchStatus,
    NoticeInfo,
    PlayCardsRequest,
    PlayerInfo,
)

logger = logging.getLogger(__name__)

_STATUS = {
    LoopState.LOBBY: MatchStatus.LOBBY,
    LoopState.RUNNING_SCRIPTED: MatchStatus.COMPUTER_THINKING,
    LoopState.WAITING_HUMAN_ACTION: MatchStatus.WAITING_HUMAN,
    LoopState.GAME_OVER: MatchStatus.GAME_OVER,
}


@dataclass
class APIService:
    """
    Main API service for the presentation layer.

    Usage:
        service = APIService(scripted_mode="inline")

        match = service.create_match(CreateMatchRequest(seed=7))
        service.add_player(match.match_id, "Alice")
        service.add_computer(match.match_id)
        response = service.start(match.match_id)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    scripted_mode: str = config.SCRIPTED_MODE
    bot_delay: float = config.BOT_DELAY_SECONDS

    # Turn schedulers per session (timer mode only)
    _schedulers: dict[str, TurnScheduler] = field(default_factory=dict)

    def __post_init__(self):
        if self.scripted_mode not in ("timer", "inline"):
            raise ValueError(f"Unknown scripted mode: {self.scripted_mode}")

    # =========================================================================
    # Matches
    # =========================================================================

    def create_match(self, request: CreateMatchRequest) -> MatchStateResponse:
        """
        Open a new lobby.

        Raises ValueError for an unknown personality.
        """
        personality = PERSONALITIES.get(request.personality.lower())
        if personality is None:
            raise ValueError(
                f"Unknown personality {request.personality!r}; "
                f"choose one of {', '.join(PERSONALITIES)}"
            )
        seed = request.seed if request.seed is not None else config.RANDOM_SEED
        session = self.session_manager.create_session(seed=seed, personality=personality)
        return self.snapshot(session)

    def get_match(self, match_id: str, viewer_id: Optional[str] = None) -> MatchStateResponse:
        """Raises SessionNotFoundError for unknown ids."""
        return self.snapshot(self.session_manager.require_session(match_id), viewer_id)

    def list_matches(self) -> list[str]:
        return self.session_manager.list_sessions()

    def end_match(self, match_id: str) -> bool:
        scheduler = self._schedulers.pop(match_id, None)
        if scheduler:
            scheduler.stop()
        return self.session_manager.end_session(match_id)

    def cleanup_stale_matches(self, max_age_seconds: int = 3600) -> int:
        """Drop finished matches older than max_age, stopping their schedulers."""
        stale = self.session_manager.stale_session_ids(max_age_seconds)
        for match_id in stale:
            self.end_match(match_id)
        if stale:
            logger.info("Cleaned up %d stale matches", len(stale))
        return len(stale)

    # =========================================================================
    # Actions
    # =========================================================================

    def add_player(self, match_id: str, name: str) -> ActionResponse:
        return self._run(match_id, lambda s: s.add_participant(name))

    def add_computer(self, match_id: str) -> ActionResponse:
        return self._run(match_id, lambda s: s.add_scripted_participant())

    def start(self, match_id: str, viewer_id: Optional[str] = None) -> ActionResponse:
        return self._run(match_id, lambda s: s.start_game(), viewer_id)

    def play(self, match_id: str, request: PlayCardsRequest) -> ActionResponse:
        def submit(session: Session) -> Notice | None:
            try:
                cards = [Card.from_id(card_id) for card_id in request.card_ids]
            except ValueError as e:
                return session.advise("Unknown card", str(e), "INVALID_CARDS")
            return session.play_cards(cards, request.claimed_rank, request.player_id)

        return self._run(match_id, submit, request.player_id)

    def pass_turn(self, match_id: str, player_id: str) -> ActionResponse:
        return self._run(match_id, lambda s: s.pass_turn(player_id), player_id)

    def challenge(self, match_id: str, player_id: str) -> ActionResponse:
        return self._run(match_id, lambda s: s.challenge_claim(player_id), player_id)

    def reset(self, match_id: str) -> ActionResponse:
        return self._run(match_id, lambda s: s.reset_game())

    def _run(
        self,
        match_id: str,
        submit: Callable[[Session], Optional[Notice]],
        viewer_id: Optional[str] = None,
    ) -> ActionResponse:
        session = self.session_manager.require_session(match_id)
        self._ensure_scheduler(session)

        notice = submit(session)
        session.get_notices()

        computer_actions: list[str] = []
        if notice is None and self.scripted_mode == "inline":
            result = run_scripted_turns(session)
            computer_actions = result.scripted_actions
            for error in result.errors:
                logger.warning("[%s] %s", match_id[:8], error)

        return ActionResponse(
            success=notice is None,
            notice=_notice_info(notice) if notice else None,
            computer_actions=computer_actions,
            state=self.snapshot(session, viewer_id),
        )

    def _ensure_scheduler(self, session: Session) -> None:
        """Attach a turn scheduler on first use (needs a running event loop)."""
        if self.scripted_mode != "timer" or session.session_id in self._schedulers:
            return
        scheduler = TurnScheduler(session, delay=self.bot_delay)
        scheduler.start()
        self._schedulers[session.session_id] = scheduler

    # =========================================================================
    # Snapshot rendering
    # =========================================================================

    def snapshot(self, session: Session, viewer_id: Optional[str] = None) -> MatchStateResponse:
        """
        Render a session's state.

        With a viewer, only the viewer's own hand is listed; everyone
        else (and the pile) is reported as a count.
        """
        state = session.state
        reveal_all = viewer_id is None

        players = [
            PlayerInfo(
                player_id=p.player_id,
                name=p.name,
                is_human=p.is_human,
                is_host=p.is_host,
                is_current_turn=p.is_current_turn,
                card_count=p.hand_size,
                hand=(
                    [_card_info(c) for c in p.hand]
                    if reveal_all or p.player_id == viewer_id else None
                ),
            )
            for p in state.players
        ]

        claim = None
        if state.claim:
            claim = ClaimInfo(
                rank=state.claim.rank.value,
                count=state.claim.count,
                owner_id=state.claim.owner_id,
            )

        current = state.current_player if state.in_progress else None
        available = []
        if viewer_id is not None:
            available = [a.value for a in legal_action_types(state, viewer_id)]

        return MatchStateResponse(
            match_id=session.session_id,
            version=session.version,
            phase=state.phase.value,
            status=_STATUS[loop_state_for(state)],
            started=state.started,
            ended=state.ended,
            players=players,
            current_player_id=current.player_id if current else None,
            pile_count=len(state.pile),
            pile=[_card_info(c) for c in state.pile] if reveal_all else None,
            discard_count=len(state.discard),
            claim=claim,
            last_action=_entry_info(state, state.last_action) if state.last_action else None,
            history=[_entry_info(state, e) for e in state.action_history],
            winner_id=state.winner_id,
            viewer_id=viewer_id,
            available_actions=available,
        )


def _card_info(card: Card) -> CardInfo:
    return CardInfo(
        card_id=card.card_id,
        rank=card.rank.value,
        suit=card.suit.value,
        label=card.label,
    )


def _entry_info(state: MatchState, entry: HistoryEntry) -> HistoryEntryInfo:
    return HistoryEntryInfo(
        player_id=entry.player_id,
        kind=entry.kind.value,
        timestamp=entry.timestamp,
        claimed_rank=entry.claimed_rank.value if entry.claimed_rank else None,
        claimed_count=entry.claimed_count,
        was_honest=entry.was_honest,
        pile_taker_id=entry.pile_taker_id,
        text=describe_entry(state, entry),
    )


def _notice_info(notice: Notice) -> NoticeInfo:
    return NoticeInfo(title=notice.title, description=notice.description, code=notice.code)
