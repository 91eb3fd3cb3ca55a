"""
FastAPI Application - REST API for a lane battle match.

Endpoints:
    POST   /api/v1/sessions                          Start a match
    GET    /api/v1/sessions                          List active sessions
    GET    /api/v1/sessions/{id}                     Session status and board
    DELETE /api/v1/sessions/{id}                     End session
    POST   /api/v1/sessions/{id}/place               Place a card
    POST   /api/v1/sessions/{id}/retract             Return a card placed this turn
    POST   /api/v1/sessions/{id}/move                Move a card with a move ability
    POST   /api/v1/sessions/{id}/end-turn            End the turn (bot plays, turn resolves)
    POST   /api/v1/sessions/{id}/retreat             Concede
    GET    /api/v1/sessions/{id}/lanes/{lane}/power  Lane totals
    GET    /api/v1/sessions/{id}/log                 Narration log

Turn Flow:
    1. Place / retract / move cards while the phase is player_turn
    2. POST /end-turn: the bot plays, every queued card reveals in
       priority order and the next turn begins (or the game ends)
    3. The response carries the new board; /log has the narration

All requests and responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import os

from ..engine_core.state import GameConfig

# Environment configuration
LANEWAR_ENV = os.getenv("LANEWAR_ENV", "development")
LANEWAR_BOT_DELAY_MS = int(os.getenv("LANEWAR_BOT_DELAY_MS", "1000"))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

API_VERSION = "0.1.0"


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import APIService
    from .schemas import (
        # Request models
        CreateSessionRequest,
        PlaceCardRequest,
        RetractCardRequest,
        MoveCardRequest,
        # Response models
        ActionResponse,
        SessionResponse,
        GameStateResponse,
        LanePowerResponse,
        LogResponse,
        ErrorResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    app = FastAPI(
        title="Lanewar Engine API",
        description="""
Lane battle card game engine - play a match against a bot opponent.

## Turn Flow

1. Place cards with `POST /place` (energy permitting); take back a card
   placed this turn with `POST /retract`
2. `POST /end-turn` runs the bot and resolves the reveal queue
3. Read the narration with `GET /log`

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_ACTION` | The engine refused the action |
| `GAME_OVER` | The match has already ended |
| `INVALID_REQUEST` | Request parameters are out of range |
        """,
        version=API_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Service instance
    api_service = service or APIService(config=GameConfig(bot_delay_ms=LANEWAR_BOT_DELAY_MS))

    # =========================================================================
    # Error helpers
    # =========================================================================

    status_codes = {
        ErrorCode.SESSION_NOT_FOUND: 404,
        ErrorCode.INVALID_ACTION: 409,
        ErrorCode.GAME_OVER: 409,
        ErrorCode.INVALID_REQUEST: 400,
    }

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_codes.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    def respond(response):
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    error_responses = {
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "Action refused or game over"},
    }

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid bot or deck"}},
        tags=["Sessions"],
        summary="Start a new match",
    )
    async def create_session(
        body: Optional[CreateSessionRequest] = None,
    ) -> Union[SessionResponse, JSONResponse]:
        """
        Start a new match against a bot.

        All fields are optional: the greedy bot and the starter decks are
        used by default.
        """
        return respond(api_service.create_session(body or CreateSessionRequest()))

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the current status and board of a match."""
        return respond(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a match",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        """End a match and release its resources."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Action Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/place",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Actions"],
        summary="Place a card from hand",
    )
    async def place_card(
        session_id: str,
        body: PlaceCardRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        """
        Place the card at `hand_index` on a slot of your side.

        **Request Body:**
        ```json
        {"hand_index": 0, "lane_index": 1, "slot_index": 0}
        ```
        """
        return respond(api_service.place_card(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/retract",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Actions"],
        summary="Return a card placed this turn",
    )
    async def retract_card(
        session_id: str,
        body: RetractCardRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        """Only cards placed this turn and not yet revealed can go back to hand."""
        return respond(api_service.retract_card(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/move",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Actions"],
        summary="Move a card with a move ability",
    )
    async def move_card(
        session_id: str,
        body: MoveCardRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.move_card(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/end-turn",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Actions"],
        summary="End your turn",
    )
    async def end_turn(session_id: str) -> Union[ActionResponse, JSONResponse]:
        """
        End your turn.

        The bot plays its cards, the reveal queue resolves and the next
        turn starts. After the last turn the response carries the result.
        """
        return respond(api_service.end_turn(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/retreat",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Actions"],
        summary="Concede the match",
    )
    async def retreat(session_id: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.retreat(session_id))

    # =========================================================================
    # Query Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get the board",
    )
    async def get_game_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.get_game_state(session_id))

    @app.get(
        "/api/v1/sessions/{session_id}/lanes/{lane_index}/power",
        response_model=LanePowerResponse,
        responses={
            400: {"model": ErrorResponse, "description": "No such lane"},
            404: {"model": ErrorResponse},
        },
        tags=["Game"],
        summary="Get both sides' totals for a lane",
    )
    async def get_lane_power(
        session_id: str,
        lane_index: int,
    ) -> Union[LanePowerResponse, JSONResponse]:
        return respond(api_service.get_lane_power(session_id, lane_index))

    @app.get(
        "/api/v1/sessions/{session_id}/log",
        response_model=LogResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get the narration log",
    )
    async def get_log(
        session_id: str,
        limit: Annotated[Optional[int], Query(description="Only the last N lines", ge=0)] = None,
    ) -> Union[LogResponse, JSONResponse]:
        return respond(api_service.get_log(session_id, limit))

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="lanewar-engine",
            version=API_VERSION,
            environment=LANEWAR_ENV,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Lanewar Engine API",
            "version": API_VERSION,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn lanewar.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
