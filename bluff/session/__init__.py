"""
Session Module - Manages ephemeral match sessions.

A session represents one table:
- Created when the host opens a lobby
- Holds the current match state
- Runs scripted participants' turns
- Destroyed when the host leaves

Sessions are EPHEMERAL: no persistence of any kind.
"""

from .manager import SessionManager, Session, Notice
from .game_loop import (
    LoopState,
    TurnResult,
    TurnScheduler,
    loop_state_for,
    next_scripted_actor,
    run_scripted_turns,
)

__all__ = [
    "SessionManager",
    "Session",
    "Notice",
    "LoopState",
    "TurnResult",
    "TurnScheduler",
    "loop_state_for",
    "next_scripted_actor",
    "run_scripted_turns",
]
