"""
Session Manager - Creates and manages match sessions.

A session owns exactly one match:
- Holds the current MatchState snapshot and its reducer
- Guards the action API at the boundary and turns refusals into notices
- Notifies listeners (presentation, turn scheduler) of every new snapshot

Sessions are EPHEMERAL: in-memory only, gone when ended.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Sequence
import logging
import random
import time
import uuid

from ..bots import BotDecision, BotPolicy, Personality, ScriptedPolicy, CLASSIC
from ..engine_core.action import Action, ActionResult
from ..engine_core.cards import Card, Rank
from ..engine_core.reducer import MIN_PLAYERS, Reducer
from ..engine_core.state import MatchPhase, MatchState
from ..errors import SessionNotFoundError

logger = logging.getLogger(__name__)

StateListener = Callable[[MatchState], None]


@dataclass(frozen=True)
class Notice:
    """Advisory message for the presentation layer (shown as a toast)."""
    title: str
    description: str
    code: str = "ADVISORY"


@dataclass
class Session:
    """
    An ephemeral match session.

    Every public action method returns None when the action was
    applied, or a Notice explaining why it was not. Nothing raises.
    """
    session_id: str
    created_at: float
    reducer: Reducer
    rng: random.Random
    personality: Personality = CLASSIC

    state: MatchState = field(default_factory=MatchState)
    version: int = 0

    bots: dict[str, BotPolicy] = field(default_factory=dict)
    notices: list[Notice] = field(default_factory=list)
    _listeners: list[StateListener] = field(default_factory=list)

    # -- Snapshot & listeners ---------------------------------------------

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.state)
            except Exception:
                logger.exception("State listener failed in session %s", self.session_id)

    def is_active(self) -> bool:
        return self.state.phase is not MatchPhase.ENDED

    def get_notices(self) -> list[Notice]:
        """Drain pending notices."""
        notices = self.notices.copy()
        self.notices.clear()
        return notices

    # -- Dispatch -----------------------------------------------------------

    def dispatch(self, action: Action) -> ActionResult:
        """Run an action through the reducer and publish the new snapshot."""
        result = self.reducer.apply(self.state, action)
        if result.success:
            self.state = result.new_state
            self.version += 1
            for change in result.state_changes:
                logger.info("[%s] %s", self.session_id[:8], change)
            if self.state.ended:
                winner = self.state.get_player(self.state.winner_id)
                logger.info("[%s] %s wins", self.session_id[:8], winner.name if winner else "?")
            self._notify()
        return result

    def advise(self, title: str, description: str, code: str = "ADVISORY") -> Notice:
        notice = Notice(title=title, description=description, code=code)
        self.notices.append(notice)
        logger.debug("[%s] notice: %s - %s", self.session_id[:8], title, description)
        return notice

    def _submit(self, action: Action) -> Notice | None:
        result = self.dispatch(action)
        if result.success:
            return None
        code = result.error_code.value if result.error_code else "REJECTED"
        return self.advise("Action not allowed", result.error or "", code)

    def _guard_in_progress(self) -> Notice | None:
        if self.state.phase is MatchPhase.LOBBY:
            return self.advise("Game not in progress", "Start a game before playing", "GAME_NOT_STARTED")
        if self.state.phase is MatchPhase.ENDED:
            return self.advise("Game over", "Reset the game to play again", "GAME_OVER")
        return None

    # -- Action API -----------------------------------------------------------

    def add_participant(self, name: str) -> Notice | None:
        if self.state.started:
            return self.advise(
                "Game already started",
                "Cannot add new players once the game has started",
                "GAME_STARTED",
            )
        if not name or not name.strip():
            return self.advise("Name required", "Please enter a player name", "INVALID_NAME")
        return self._submit(Action.add_player(name))

    def add_scripted_participant(self) -> Notice | None:
        if self.state.started:
            return self.advise(
                "Game already started",
                "Cannot add computer players once the game has started",
                "GAME_STARTED",
            )
        notice = self._submit(Action.add_computer_player())
        if notice is None:
            self.policy_for(self.state.players[-1].player_id)
        return notice

    def start_game(self) -> Notice | None:
        if self.state.started:
            return self.advise(
                "Game already started",
                "Reset the game to start a new one",
                "GAME_STARTED",
            )
        if self.state.num_players < MIN_PLAYERS:
            return self.advise(
                "Not enough players",
                f"You need at least {MIN_PLAYERS} players to start the game",
                "NOT_ENOUGH_PLAYERS",
            )
        return self._submit(Action.start_game())

    def play_cards(
        self,
        cards: Sequence[Card],
        claimed_rank: Rank | str | None,
        actor_id: str,
    ) -> Notice | None:
        notice = self._guard_in_progress()
        if notice:
            return notice
        if not cards:
            return self.advise(
                "No cards selected",
                "Please select at least one card to play",
                "INVALID_CARDS",
            )
        if not claimed_rank:
            return self.advise("No rank claimed", "Please select a rank to claim", "INVALID_RANK")
        return self._submit(Action.play_cards(actor_id, cards, claimed_rank))

    def pass_turn(self, actor_id: str) -> Notice | None:
        notice = self._guard_in_progress()
        if notice:
            return notice
        if self.state.claim and self.state.claim.owner_id == actor_id:
            return self.advise(
                "Cannot pass your turn",
                "You can't pass on your own claim",
                "OWN_CLAIM",
            )
        return self._submit(Action.pass_turn(actor_id))

    def challenge_claim(self, challenger_id: str) -> Notice | None:
        notice = self._guard_in_progress()
        if notice:
            return notice
        if self.state.claim and self.state.claim.owner_id == challenger_id:
            return self.advise(
                "Cannot challenge yourself",
                "You can't challenge your own play",
                "OWN_CLAIM",
            )
        return self._submit(Action.challenge(challenger_id))

    def reset_game(self) -> Notice | None:
        return self._submit(Action.reset_game())

    # -- Scripted participants ------------------------------------------------

    def policy_for(self, player_id: str) -> BotPolicy:
        if player_id not in self.bots:
            self.bots[player_id] = ScriptedPolicy(personality=self.personality, rng=self.rng)
        return self.bots[player_id]

    def play_scripted_turn(self, player_id: str) -> tuple[BotDecision, ActionResult]:
        """Let a scripted participant decide and submit its action."""
        decision = self.policy_for(player_id).select_action(self.state, player_id)
        player = self.state.get_player(player_id)
        logger.debug("[%s] %s: %s", self.session_id[:8], player.name, decision.explanation)
        result = self.dispatch(decision.action)
        if not result.success:
            logger.warning(
                "[%s] scripted action by %s rejected: %s",
                self.session_id[:8], player_id, result.error,
            )
        return decision, result


class SessionManager:
    """
    Manages match sessions.

    Responsibilities:
    - Create sessions with their own random source
    - Track active sessions
    - Clean up finished ones

    No persistence - sessions are in-memory only.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        seed: int | None = None,
        personality: Personality = CLASSIC,
    ) -> Session:
        """
        Create a new session in the lobby phase.

        Args:
            seed: Seed for shuffles and scripted decisions
            personality: Play style for scripted participants
        """
        session_id = str(uuid.uuid4())
        rng = random.Random(seed)
        session = Session(
            session_id=session_id,
            created_at=time.time(),
            reducer=Reducer(rng=rng),
            rng=rng,
            personality=personality,
        )
        self._sessions[session_id] = session
        logger.info("Created session %s (seed=%s, bots=%s)", session_id, seed, personality.name)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def require_session(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def end_session(self, session_id: str) -> bool:
        """Drop a session. Returns False if it did not exist."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session._listeners.clear()
        logger.info("Ended session %s", session_id)
        return True

    def list_sessions(self) -> list[str]:
        return list(self._sessions)

    def list_active_sessions(self) -> list[str]:
        """List IDs of sessions whose match has not ended."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def stale_session_ids(self, max_age_seconds: int = 3600) -> list[str]:
        """Ids of finished sessions older than max_age."""
        now = time.time()
        return [
            sid for sid, session in self._sessions.items()
            if now - session.created_at > max_age_seconds and not session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Drop finished sessions older than max_age.

        Returns how many were removed.
        """
        stale = self.stale_session_ids(max_age_seconds)
        for session_id in stale:
            self.end_session(session_id)
        return len(stale)
