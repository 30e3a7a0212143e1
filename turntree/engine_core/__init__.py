"""
Engine Core - History tree and state transition machinery.

The engine is the runtime that:
1. Holds the live cursor (current state + history head)
2. Validates inputs against the current option list
3. Applies transitions and drains auto-transitions
4. Undoes back to the last real choice
5. Brackets speculative play so it never leaks into the live game
"""

from .history import HistoryNode, NO_PLAYER
from .state import GameState, GameContext, Token
from .render import RenderSink, NullSink, TranscriptSink, LogLine, OutputHandle
from .engine import Engine, Cursor

__all__ = [
    "HistoryNode",
    "NO_PLAYER",
    "GameState",
    "GameContext",
    "Token",
    "RenderSink",
    "NullSink",
    "TranscriptSink",
    "LogLine",
    "OutputHandle",
    "Engine",
    "Cursor",
]
