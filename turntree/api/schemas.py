"""
Pydantic Schemas for API - Request/response models for OpenAPI.

Tokens always travel as strings. The service maps them back onto the
engine's option values by their text.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- UNKNOWN_GAME: Game id is not a built-in game
- ESTIMATE_UNAVAILABLE: No live game, or no active player for option estimates
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    ACTIVE = "active"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


class TurnActionType(str, Enum):
    """What an input, key or undo request did."""
    INPUT = "input"
    UNDO = "undo"
    IGNORED = "ignored"
    NONE = "none"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    UNKNOWN_GAME = "UNKNOWN_GAME"
    ESTIMATE_UNAVAILABLE = "ESTIMATE_UNAVAILABLE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to start a new game session."""
    game_id: str = Field("modulo", description="Built-in game id, see GET /games")


class InputRequest(BaseModel):
    """An explicit move label."""
    token: str = Field(..., description="One of the options currently offered")


class KeyRequest(BaseModel):
    """A raw key press. 'Backspace' undoes, anything else is an input token."""
    key: str


# =============================================================================
# Response Models
# =============================================================================

class GameInfo(BaseModel):
    """A built-in game."""
    game_id: str
    name: str
    min_players: int
    max_players: int

    model_config = {"from_attributes": True}


class GameListResponse(BaseModel):
    """Response listing built-in games."""
    games: list[GameInfo]


class SessionResponse(BaseModel):
    """Current view of a session."""
    session_id: str
    game_id: str
    game_name: str
    status: SessionStatus
    created_at: float

    options: list[str] = Field(
        default_factory=list,
        description="Inputs currently accepted; empty once the game is over",
    )
    active_player: Optional[int] = Field(None, description="None during setup and after the game")
    winner: Optional[int] = None
    lines: list[str] = Field(default_factory=list, description="Rendered transcript")

    api_version: str = "v1"


class TurnResponse(BaseModel):
    """Response to an input, key press or undo."""
    applied: bool = Field(..., description="False when the request had no effect")
    action: TurnActionType
    session: SessionResponse


class PlayerEstimate(BaseModel):
    """Estimated odds for one player."""
    player: int
    wins: int
    probability: float = Field(..., ge=0.0, le=1.0)


class WinnerEstimateResponse(BaseModel):
    """Who tends to win from the current position."""
    session_id: str
    iterations: int
    players: list[PlayerEstimate] = Field(
        default_factory=list,
        description="Only players that won at least one rollout, by player id",
    )


class OptionEstimate(BaseModel):
    """Estimated odds of the active player after one option."""
    option: str
    wins: int
    probability: float = Field(..., ge=0.0, le=1.0)


class OptionEstimateResponse(BaseModel):
    """Which move improves the active player's odds."""
    session_id: str
    player: int
    iterations_per_option: int
    options: list[OptionEstimate] = Field(
        default_factory=list, description="Best option first"
    )


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None


class SessionListResponse(BaseModel):
    """Response listing live sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class CleanupResponse(BaseModel):
    """Response after ending idle sessions."""
    removed: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    env: str
