"""
API Module - REST interface over game sessions.

Clients:
1. Pick a game and create a session
2. Submit moves or key presses
3. Undo
4. Ask for Monte Carlo estimates

All state is session-scoped and in memory.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    InputRequest,
    KeyRequest,
    # Responses
    GameInfo,
    GameListResponse,
    SessionResponse,
    TurnResponse,
    WinnerEstimateResponse,
    OptionEstimateResponse,
    ErrorResponse,
    # Enums
    ErrorCode,
    SessionStatus,
)
from .service import APIService

__all__ = [
    # Requests
    "CreateSessionRequest",
    "InputRequest",
    "KeyRequest",
    # Responses
    "GameInfo",
    "GameListResponse",
    "SessionResponse",
    "TurnResponse",
    "WinnerEstimateResponse",
    "OptionEstimateResponse",
    "ErrorResponse",
    # Enums
    "ErrorCode",
    "SessionStatus",
    # Service
    "APIService",
]
