"""
FastAPI Application - REST API over in-memory game sessions.

Endpoints:
    GET    /api/v1/health                           Health check
    GET    /api/v1/games                            List built-in games
    POST   /api/v1/sessions                         Create game session
    GET    /api/v1/sessions                         List sessions
    GET    /api/v1/sessions/{id}                    Get session view
    DELETE /api/v1/sessions/{id}                    End session
    POST   /api/v1/sessions/cleanup                 End idle sessions
    POST   /api/v1/sessions/{id}/input              Submit a move label
    POST   /api/v1/sessions/{id}/keys               Submit a raw key press
    POST   /api/v1/sessions/{id}/undo               Undo to the last choice
    GET    /api/v1/sessions/{id}/estimate/winner    Monte Carlo winner odds
    GET    /api/v1/sessions/{id}/estimate/options   Monte Carlo odds per move

Illegal moves are not errors: the response says applied=false.
Requests on one session are serialized by a per-session lock. Estimates run
in the threadpool so other sessions and /health stay responsive.
All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import logging

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Settings
from .service import APIService
from .schemas import (
    # Request models
    CreateSessionRequest,
    InputRequest,
    KeyRequest,
    # Response models
    GameListResponse,
    SessionResponse,
    TurnResponse,
    WinnerEstimateResponse,
    OptionEstimateResponse,
    ErrorResponse,
    SessionListResponse,
    EndSessionResponse,
    CleanupResponse,
    HealthResponse,
    # Enums
    ErrorCode,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    ErrorCode.SESSION_NOT_FOUND: 404,
    ErrorCode.UNKNOWN_GAME: 400,
    ErrorCode.ESTIMATE_UNAVAILABLE: 409,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.INTERNAL_ERROR: 500,
}


def create_app(service: Optional[APIService] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)
        settings: Optional settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    settings = settings or (service.settings if service else Settings.from_env())
    api_service = service or APIService(settings=settings)

    app = FastAPI(
        title="Turntree Engine API",
        description="""
Turn-based game engine with undo and Monte Carlo move estimates.

## Flow

1. `POST /sessions` with a `game_id` from `GET /games`
2. `POST /sessions/{id}/input` with one of the offered `options`
3. `POST /sessions/{id}/undo` to go back to the previous choice
4. `GET /sessions/{id}/estimate/winner` or `/estimate/options` for odds

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `UNKNOWN_GAME` | Game id not found |
| `ESTIMATE_UNAVAILABLE` | Game over, or no active player |
| `VALIDATION_ERROR` | Malformed request |
| `INTERNAL_ERROR` | Game logic raised; the session was rolled back |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=STATUS_BY_ERROR.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    def or_error(response):
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    async def call_session(session_id: str, method, *args, in_threadpool: bool = False):
        """
        Run a service method under the session lock.

        Exceptions raised by game logic become INTERNAL_ERROR responses; the
        engine has already rolled the session back when they reach here.
        """
        async with api_service.session_lock(session_id):
            try:
                if in_threadpool:
                    response = await run_in_threadpool(method, session_id, *args)
                else:
                    response = method(session_id, *args)
            except Exception as e:
                logger.error("Error in session %s: %s", session_id, e, exc_info=True)
                return make_error_response(
                    ErrorResponse(error=str(e), error_code=ErrorCode.INTERNAL_ERROR)
                )
        return or_error(response)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return make_error_response(
            ErrorResponse(
                error="Invalid request",
                error_code=ErrorCode.VALIDATION_ERROR,
                details={"errors": jsonable_encoder(exc.errors())},
            )
        )

    # =========================================================================
    # Meta Endpoints
    # =========================================================================

    @app.get("/api/v1/health", response_model=HealthResponse, tags=["Meta"])
    async def health() -> HealthResponse:
        return HealthResponse(
            status="ok",
            service="turntree",
            version=__version__,
            env=settings.env,
        )

    @app.get(
        "/api/v1/games",
        response_model=GameListResponse,
        tags=["Meta"],
        summary="List built-in games",
    )
    async def list_games() -> GameListResponse:
        return api_service.list_games()

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse, "description": "Unknown game"}},
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(
        request: CreateSessionRequest,
    ) -> Union[SessionResponse, JSONResponse]:
        """
        Create a new game session.

        Setup steps that need no input have already run when this returns.
        """
        try:
            return api_service.create_session(request)
        except ValueError as e:
            error_msg = str(e)
            logger.info("Rejected session request: %s", error_msg)
            if "game" in error_msg.lower():
                return make_error_response(
                    ErrorResponse(error=error_msg, error_code=ErrorCode.UNKNOWN_GAME)
                )
            raise HTTPException(status_code=400, detail=error_msg)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session view",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        return await call_session(session_id, api_service.get_session)

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        async with api_service.session_lock(session_id):
            success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    @app.post(
        "/api/v1/sessions/cleanup",
        response_model=CleanupResponse,
        tags=["Sessions"],
        summary="End idle sessions",
    )
    async def cleanup_sessions(
        max_idle_seconds: Annotated[int, Query(ge=0, description="Idle time before ending")] = 3600,
    ) -> CleanupResponse:
        return CleanupResponse(removed=api_service.cleanup_stale_sessions(max_idle_seconds))

    # =========================================================================
    # Game Loop Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/input",
        response_model=TurnResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Submit a move",
    )
    async def submit_input(
        session_id: str,
        request: InputRequest,
    ) -> Union[TurnResponse, JSONResponse]:
        return await call_session(session_id, api_service.submit_input, request.token)

    @app.post(
        "/api/v1/sessions/{session_id}/keys",
        response_model=TurnResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Submit a key press",
    )
    async def press_key(
        session_id: str,
        request: KeyRequest,
    ) -> Union[TurnResponse, JSONResponse]:
        return await call_session(session_id, api_service.press_key, request.key)

    @app.post(
        "/api/v1/sessions/{session_id}/undo",
        response_model=TurnResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Undo to the previous choice",
    )
    async def undo(session_id: str) -> Union[TurnResponse, JSONResponse]:
        return await call_session(session_id, api_service.undo)

    # =========================================================================
    # Estimate Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/estimate/winner",
        response_model=WinnerEstimateResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Estimates"],
        summary="Estimate win odds per player",
    )
    async def estimate_winner(
        session_id: str,
        iterations: Annotated[
            Optional[int], Query(ge=0, le=100_000, description="Number of rollouts")
        ] = None,
    ) -> Union[WinnerEstimateResponse, JSONResponse]:
        return await call_session(
            session_id, api_service.estimate_winner, iterations, in_threadpool=True,
        )

    @app.get(
        "/api/v1/sessions/{session_id}/estimate/options",
        response_model=OptionEstimateResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Estimates"],
        summary="Estimate the active player's odds per move",
    )
    async def estimate_options(
        session_id: str,
        iterations: Annotated[
            Optional[int], Query(ge=0, le=100_000, description="Rollouts per option")
        ] = None,
    ) -> Union[OptionEstimateResponse, JSONResponse]:
        return await call_session(
            session_id, api_service.estimate_options, iterations, in_threadpool=True,
        )

    return app


# For running directly: uvicorn turntree.api.app:app
app = create_app()
