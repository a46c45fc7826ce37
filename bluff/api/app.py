"""
FastAPI Application - REST API for the presentation layer.

Endpoints:
    GET    /health                                  Health check
    POST   /api/v1/matches                          Open a lobby
    GET    /api/v1/matches                          List matches
    GET    /api/v1/matches/{id}                     Get match snapshot
    DELETE /api/v1/matches/{id}                     End match
    POST   /api/v1/matches/{id}/players             Add a human participant
    POST   /api/v1/matches/{id}/computers           Add a computer participant
    POST   /api/v1/matches/{id}/start               Deal and start
    POST   /api/v1/matches/{id}/play                Play cards with a claim
    POST   /api/v1/matches/{id}/pass                Pass on the standing claim
    POST   /api/v1/matches/{id}/challenge           Challenge the standing claim
    POST   /api/v1/matches/{id}/reset               Back to the lobby

Computer Participants:
    In "timer" mode they act on the server's event loop after a short
    delay; poll GET /matches/{id} to watch them. In "inline" mode their
    moves are played before the response returns and listed in
    `computer_actions`.

All responses are JSON with explicit Pydantic schemas.
A refused action is not an HTTP error: it returns 200 with
success=false and a `notice` explaining why.
"""

from typing import Annotated, Optional, Union

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__, config
from ..errors import SessionNotFoundError
from .schemas import (
    # Request models
    CreateMatchRequest,
    AddPlayerRequest,
    PlayCardsRequest,
    ActorRequest,
    # Response models
    ActionResponse,
    MatchStateResponse,
    MatchListResponse,
    EndMatchResponse,
    ErrorResponse,
    HealthResponse,
    # Enums
    ErrorCode,
)
from .service import APIService


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Bluff Engine API",
        description="""
Rule engine for the bluffing card game Bluff (also called Cheat).

## Flow

1. `POST /matches` to open a lobby
2. Add participants with `/players` and `/computers` (at least two)
3. `POST /start` deals the deck
4. The current player plays cards with a claim; the others pass or challenge

## Error Codes

| Code | Description |
|------|-------------|
| `MATCH_NOT_FOUND` | Match does not exist or has been ended |
| `VALIDATION_ERROR` | Request parameters are invalid |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()
    app.state.service = api_service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found(request, exc: SessionNotFoundError) -> JSONResponse:
        return make_error_response(
            ErrorCode.MATCH_NOT_FOUND,
            f"Match {exc.session_id} not found",
            status_code=404,
        )

    not_found = {404: {"model": ErrorResponse, "description": "Match not found"}}

    # =========================================================================
    # Health
    # =========================================================================

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service="bluff-engine",
            version=__version__,
            environment=config.BLUFF_ENV,
        )

    # =========================================================================
    # Match Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/matches",
        response_model=MatchStateResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid parameters"}},
        tags=["Matches"],
        summary="Open a new lobby",
    )
    async def create_match(
        body: Optional[CreateMatchRequest] = None,
    ) -> Union[MatchStateResponse, JSONResponse]:
        """Create an empty lobby. Add participants before starting."""
        try:
            return api_service.create_match(body or CreateMatchRequest())
        except ValueError as e:
            return make_error_response(ErrorCode.VALIDATION_ERROR, str(e))

    @app.get(
        "/api/v1/matches",
        response_model=MatchListResponse,
        tags=["Matches"],
        summary="List matches",
    )
    async def list_matches() -> MatchListResponse:
        matches = api_service.list_matches()
        return MatchListResponse(matches=matches, count=len(matches))

    @app.get(
        "/api/v1/matches/{match_id}",
        response_model=MatchStateResponse,
        responses=not_found,
        tags=["Matches"],
        summary="Get the match snapshot",
    )
    async def get_match(
        match_id: str,
        viewer_id: Annotated[
            Optional[str],
            Query(description="Render from this participant's seat: other hands and the pile become counts"),
        ] = None,
    ) -> MatchStateResponse:
        return api_service.get_match(match_id, viewer_id)

    @app.delete(
        "/api/v1/matches/{match_id}",
        response_model=EndMatchResponse,
        tags=["Matches"],
        summary="End a match",
    )
    async def end_match(match_id: str) -> EndMatchResponse:
        """End a match and release its resources."""
        success = api_service.end_match(match_id)
        return EndMatchResponse(success=success, match_id=match_id)

    # =========================================================================
    # Lobby Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/matches/{match_id}/players",
        response_model=ActionResponse,
        responses=not_found,
        tags=["Lobby"],
        summary="Add a human participant",
    )
    async def add_player(match_id: str, body: AddPlayerRequest) -> ActionResponse:
        return api_service.add_player(match_id, body.name)

    @app.post(
        "/api/v1/matches/{match_id}/computers",
        response_model=ActionResponse,
        responses=not_found,
        tags=["Lobby"],
        summary="Add a computer participant",
    )
    async def add_computer(match_id: str) -> ActionResponse:
        return api_service.add_computer(match_id)

    @app.post(
        "/api/v1/matches/{match_id}/start",
        response_model=ActionResponse,
        responses=not_found,
        tags=["Lobby"],
        summary="Deal the deck and start",
    )
    async def start_match(
        match_id: str,
        viewer_id: Annotated[Optional[str], Query()] = None,
    ) -> ActionResponse:
        return api_service.start(match_id, viewer_id)

    @app.post(
        "/api/v1/matches/{match_id}/reset",
        response_model=ActionResponse,
        responses=not_found,
        tags=["Lobby"],
        summary="Return to the lobby, keeping the roster",
    )
    async def reset_match(match_id: str) -> ActionResponse:
        return api_service.reset(match_id)

    # =========================================================================
    # Play Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/matches/{match_id}/play",
        response_model=ActionResponse,
        responses=not_found,
        tags=["Play"],
        summary="Play cards face down with a claim",
    )
    async def play_cards(match_id: str, body: PlayCardsRequest) -> ActionResponse:
        """
        Lay cards from the player's hand and claim a rank.

        **Request Body:**
        ```json
        {"player_id": "player-1", "card_ids": ["K-hearts", "K-spades"], "claimed_rank": "K"}
        ```
        """
        return api_service.play(match_id, body)

    @app.post(
        "/api/v1/matches/{match_id}/pass",
        response_model=ActionResponse,
        responses=not_found,
        tags=["Play"],
        summary="Pass on the standing claim",
    )
    async def pass_turn(match_id: str, body: ActorRequest) -> ActionResponse:
        return api_service.pass_turn(match_id, body.player_id)

    @app.post(
        "/api/v1/matches/{match_id}/challenge",
        response_model=ActionResponse,
        responses=not_found,
        tags=["Play"],
        summary="Challenge the standing claim",
    )
    async def challenge(match_id: str, body: ActorRequest) -> ActionResponse:
        """Reveal the claimed cards. Whoever was wrong picks up the pile."""
        return api_service.challenge(match_id, body.player_id)

    return app


# For running directly: uvicorn bluff.api.app:app
app = create_app()
