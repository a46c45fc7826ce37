"""
Game Loop - Drives scripted participants.

Two drivers share the same rule for who acts next:
- TurnScheduler: asyncio timer per pending scripted action, cancelled
  and re-armed on every new snapshot
- run_scripted_turns: synchronous loop for the CLI and tests

Only one action is ever in flight.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING
import asyncio
import logging

from .. import config
from ..engine_core.action_generator import responders
from ..engine_core.state import MatchPhase, MatchState
from ..errors import SchedulerError

if TYPE_CHECKING:
    from .manager import Session

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """Where the match is waiting."""
    LOBBY = "lobby"
    RUNNING_SCRIPTED = "running_scripted"
    WAITING_HUMAN_ACTION = "waiting_human_action"
    GAME_OVER = "game_over"


@dataclass
class TurnResult:
    """Result of a synchronous scripted run."""
    success: bool
    loop_state: LoopState
    steps: int = 0

    # Log lines for the scripted actions taken
    scripted_actions: list[str] = field(default_factory=list)

    errors: list[str] = field(default_factory=list)
    winner: str | None = None


def next_scripted_actor(state: MatchState) -> str | None:
    """
    Which scripted participant should act next, if any.

    With no claim standing, only the current-turn participant may act,
    and only if scripted. With a claim standing, the first scripted
    participant (seat order from the current turn) that may still
    answer it does so.
    """
    if state.phase is not MatchPhase.PLAYING:
        return None

    if state.claim is None:
        current = state.current_player
        if current is not None and not current.is_human and current.hand_size > 0:
            return current.player_id
        return None

    for player_id in responders(state):
        if not state.get_player(player_id).is_human:
            return player_id
    return None


def loop_state_for(state: MatchState) -> LoopState:
    if state.phase is MatchPhase.LOBBY:
        return LoopState.LOBBY
    if state.phase is MatchPhase.ENDED:
        return LoopState.GAME_OVER
    if next_scripted_actor(state) is not None:
        return LoopState.RUNNING_SCRIPTED
    return LoopState.WAITING_HUMAN_ACTION


def run_scripted_turns(session: Session, max_steps: int | None = None) -> TurnResult:
    """
    Play scripted actions back to back until a human must act.

    Stops at a human decision point, at match end, or after max_steps.
    """
    limit = config.MAX_SCRIPTED_STEPS if max_steps is None else max_steps
    actions: list[str] = []
    steps = 0

    while steps < limit:
        actor = next_scripted_actor(session.state)
        if actor is None:
            break
        name = session.state.get_player(actor).name
        decision, result = session.play_scripted_turn(actor)
        steps += 1
        if not result.success:
            return TurnResult(
                success=False,
                loop_state=loop_state_for(session.state),
                steps=steps,
                scripted_actions=actions,
                errors=[f"{name}: {result.error}"],
            )
        actions.extend(result.state_changes or [f"{name}: {decision.action.action_type.value}"])

    state = session.state
    return TurnResult(
        success=True,
        loop_state=loop_state_for(state),
        steps=steps,
        scripted_actions=actions,
        winner=state.winner_id,
    )


class TurnScheduler:
    """
    Fires scripted actions after a "thinking" delay.

    Every new snapshot cancels the pending timer and re-arms it for
    whoever should act next. A timer that fires after the session has
    moved on is dropped.

    Usage:
        scheduler = TurnScheduler(session, delay=1.5)
        scheduler.start()          # inside a running event loop
        ...
        await scheduler.wait_idle()
        scheduler.stop()
    """

    def __init__(
        self,
        session: Session,
        delay: float | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        self.session = session
        self.delay = config.BOT_DELAY_SECONDS if delay is None else delay
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._pending_actor: str | None = None
        self._unsubscribe = None
        self._idle: asyncio.Event | None = None

    @property
    def pending_actor(self) -> str | None:
        """Scripted participant whose action is currently scheduled."""
        return self._pending_actor

    @property
    def running(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        """Attach to the session and schedule the first action if due."""
        if self.running:
            return
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError as e:
                raise SchedulerError("TurnScheduler.start() needs a running event loop") from e
        self._idle = asyncio.Event()
        self._unsubscribe = self.session.subscribe(self._on_state_change)
        self._reschedule(self.session.state)

    def stop(self) -> None:
        """Cancel any pending action and detach from the session."""
        self._cancel()
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    async def wait_idle(self, timeout: float | None = None) -> None:
        """Wait until no scripted action is pending (human turn or match over)."""
        if self._idle is None:
            raise SchedulerError("Scheduler not started")
        await asyncio.wait_for(self._idle.wait(), timeout)

    def _on_state_change(self, state: MatchState) -> None:
        self._reschedule(state)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            logger.debug("Cancelled pending action for %s", self._pending_actor)
        self._handle = None
        self._pending_actor = None

    def _reschedule(self, state: MatchState) -> None:
        self._cancel()
        actor = next_scripted_actor(state)
        if actor is None:
            self._idle.set()
            return
        self._idle.clear()
        self._pending_actor = actor
        self._handle = self._loop.call_later(
            self.delay, self._fire, actor, self.session.version
        )

    def _fire(self, actor: str, version: int) -> None:
        if self.session.version != version:
            logger.debug("Dropping stale action for %s", actor)
            return
        self._handle = None
        self._pending_actor = None
        if next_scripted_actor(self.session.state) != actor:
            return

        _, result = self.session.play_scripted_turn(actor)
        if not result.success:
            # The session did not change, so nothing will re-arm us.
            self._idle.set()
