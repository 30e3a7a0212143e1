"""
Session Module - Manages in-memory game sessions.

A session represents one play-through of a game:
- Created when a user starts a game
- Owns its engine and transcript
- Driven by key presses through a GameLoop
- Dropped when it ends

Sessions are EPHEMERAL: nothing is persisted.
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import (
    GameLoop,
    LoopState,
    TurnAction,
    TurnResult,
    WinnerEstimate,
    OptionEstimate,
    UNDO_KEY,
)

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameLoop",
    "LoopState",
    "TurnAction",
    "TurnResult",
    "WinnerEstimate",
    "OptionEstimate",
    "UNDO_KEY",
]
