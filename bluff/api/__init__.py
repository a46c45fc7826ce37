"""
API Module - HTTP interface for a local presentation layer.

Exposes the session action API via REST:
1. Open a lobby and add participants
2. Start the match
3. Play, pass and challenge
4. Read the snapshot, optionally from one participant's seat

All state is session-scoped and in memory.
"""

from .schemas import (
    # Requests
    CreateMatchRequest,
    AddPlayerRequest,
    PlayCardsRequest,
    ActorRequest,
    # Responses
    ActionResponse,
    MatchStateResponse,
    MatchListResponse,
    ErrorResponse,
    # Shared
    PlayerInfo,
    CardInfo,
    ClaimInfo,
    NoticeInfo,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateMatchRequest",
    "AddPlayerRequest",
    "PlayCardsRequest",
    "ActorRequest",
    # Responses
    "ActionResponse",
    "MatchStateResponse",
    "MatchListResponse",
    "ErrorResponse",
    # Shared
    "PlayerInfo",
    "CardInfo",
    "ClaimInfo",
    "NoticeInfo",
    # Service
    "APIService",
    "create_app",
]
