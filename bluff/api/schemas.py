"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between the presentation layer and the
engine. Snapshots can be rendered from one participant's point of view,
in which case other hands and the pile are reported as counts only.

Error Codes:
- MATCH_NOT_FOUND: Match does not exist or has been ended
- ACTION_REJECTED: The engine or a boundary guard refused the action
- VALIDATION_ERROR: Request body could not be interpreted
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class MatchStatus(str, Enum):
    """Where the match is waiting."""
    LOBBY = "lobby"
    COMPUTER_THINKING = "computer_thinking"
    WAITING_HUMAN = "waiting_human"
    GAME_OVER = "game_over"


class ErrorCode(str, Enum):
    """Structured error codes."""
    MATCH_NOT_FOUND = "MATCH_NOT_FOUND"
    ACTION_REJECTED = "ACTION_REJECTED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Card information for display."""
    card_id: str = Field(..., description="Stable id, e.g. '10-hearts'")
    rank: str
    suit: str
    label: str = Field(..., description="Short label, e.g. '10♥'")


class PlayerInfo(BaseModel):
    """Participant information for display."""
    player_id: str
    name: str
    is_human: bool
    is_host: bool = False
    is_current_turn: bool = False
    card_count: int = 0
    hand: Optional[list[CardInfo]] = Field(
        None, description="Only present for the viewer (or for everyone without a viewer)"
    )


class ClaimInfo(BaseModel):
    """The claim standing on the pile."""
    rank: str
    count: int = Field(..., ge=1)
    owner_id: str


class HistoryEntryInfo(BaseModel):
    """One entry of the match log."""
    player_id: str
    kind: str = Field(..., description="claim, pass or challenge")
    timestamp: float
    claimed_rank: Optional[str] = None
    claimed_count: Optional[int] = None
    was_honest: Optional[bool] = None
    pile_taker_id: Optional[str] = None
    text: str = Field("", description="Human-readable summary of the entry")


class NoticeInfo(BaseModel):
    """Advisory message produced by a boundary guard."""
    title: str
    description: str
    code: str


class MatchStateResponse(BaseModel):
    """Complete match snapshot."""
    match_id: str
    version: int = Field(..., description="Increments on every applied action")
    phase: str = Field(..., description="lobby, playing or ended")
    status: MatchStatus
    started: bool
    ended: bool

    players: list[PlayerInfo] = Field(default_factory=list)
    current_player_id: Optional[str] = None

    pile_count: int = 0
    pile: Optional[list[CardInfo]] = Field(
        None, description="Only present when no viewer is given"
    )
    discard_count: int = 0
    claim: Optional[ClaimInfo] = None

    last_action: Optional[HistoryEntryInfo] = None
    history: list[HistoryEntryInfo] = Field(default_factory=list)
    winner_id: Optional[str] = None

    viewer_id: Optional[str] = None
    available_actions: list[str] = Field(
        default_factory=list, description="Action types the viewer may submit now"
    )

    api_version: str = "v1"


# =============================================================================
# Requests
# =============================================================================

class CreateMatchRequest(BaseModel):
    """Open a new lobby."""
    seed: Optional[int] = Field(None, description="Seed for shuffles and computer decisions")
    personality: str = Field("classic", description="classic, trusting or suspicious")


class AddPlayerRequest(BaseModel):
    """Add a human participant."""
    name: str = Field(..., min_length=1, max_length=40)


class PlayCardsRequest(BaseModel):
    """Lay cards face down with a claim."""
    player_id: str
    card_ids: list[str] = Field(..., description="Ids of cards from the player's hand")
    claimed_rank: str = Field(..., description="2-10, J, Q, K or A")


class ActorRequest(BaseModel):
    """Pass or challenge on behalf of a participant."""
    player_id: str


# =============================================================================
# Responses
# =============================================================================

class ActionResponse(BaseModel):
    """Result of submitting an action."""
    success: bool
    notice: Optional[NoticeInfo] = None
    computer_actions: list[str] = Field(
        default_factory=list, description="Computer moves played right after this action"
    )
    state: MatchStateResponse


class MatchListResponse(BaseModel):
    """Response listing matches."""
    matches: list[str]
    count: int


class EndMatchResponse(BaseModel):
    """Response after ending a match."""
    success: bool
    match_id: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    error_code: ErrorCode
    details: Optional[dict] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    environment: str
