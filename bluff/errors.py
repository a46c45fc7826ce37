"""Exceptions raised outside the transition function.

The reducer itself never raises; these cover programmer errors at the
session and scheduling layers.
"""


class BluffError(Exception):
    """Base exception for the package."""
    pass


class SessionNotFoundError(BluffError):
    """Raised when a session id does not resolve to a live session."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")


class SchedulerError(BluffError):
    """Raised when the turn scheduler is used without an event loop."""
    pass
