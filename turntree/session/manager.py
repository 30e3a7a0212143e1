"""
Session Manager - Creates and manages game sessions.

A session is one play-through of one game:
- Its own Engine (no engine state is shared between sessions)
- Its own transcript of rendered lines
- Lives in memory only; ending it discards everything

Several sessions can run side by side in one process.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import logging
import time
import uuid

from ..engine_core.engine import Engine
from ..engine_core.render import TranscriptSink
from ..games.registry import GameDefinition

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Game in progress
    GAME_OVER = "game_over"  # Game reached a terminal state
    ABANDONED = "abandoned"  # Ended before completion


@dataclass
class Session:
    """
    An in-memory game session.

    The session state follows the engine: undoing out of a finished
    game makes the session active again.
    """
    session_id: str
    game: GameDefinition
    engine: Engine
    transcript: TranscriptSink
    created_at: float

    state: SessionState = SessionState.ACTIVE
    last_activity: float = 0.0

    def is_active(self) -> bool:
        """Check if session is still in play."""
        return self.state == SessionState.ACTIVE

    def is_ended(self) -> bool:
        return self.state in {SessionState.GAME_OVER, SessionState.ABANDONED}

    def sync_state(self):
        """Update state from the engine after an input or undo."""
        self.last_activity = time.time()
        if self.state == SessionState.ABANDONED:
            return
        if self.engine.is_over:
            self.state = SessionState.GAME_OVER
        elif self.engine.is_active:
            self.state = SessionState.ACTIVE


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions from game definitions
    - Track live sessions
    - Clean up ended and idle sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def create_session(self, game: GameDefinition) -> Session:
        """
        Create and initialize a new game session.

        Auto-transitions at the start of the game have already run when
        this returns, so the session is waiting for its first input.
        """
        session_id = str(uuid.uuid4())
        transcript = TranscriptSink()
        engine = Engine(sink=transcript)
        engine.initialize(game.create_initial_state(), intro=game.intro)

        now = time.time()
        session = Session(
            session_id=session_id,
            game=game,
            engine=engine,
            transcript=transcript,
            created_at=now,
            last_activity=now,
        )
        session.sync_state()

        self._sessions[session_id] = session
        logger.info("Created session %s for %s", session_id, game.game_id)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and drop it from memory.

        Returns False if the session does not exist.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False

        if reason == "completed" and session.engine.is_over:
            session.state = SessionState.GAME_OVER
        else:
            session.state = SessionState.ABANDONED

        session.transcript.clear()
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_sessions(self) -> list[str]:
        """List IDs of all live sessions, finished games included."""
        return list(self._sessions)

    def list_active_sessions(self) -> list[str]:
        """List IDs of sessions whose game is still in progress."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_idle_seconds: int = 3600) -> int:
        """
        End sessions idle for longer than max_idle_seconds.

        Returns the number of sessions removed.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.last_activity > max_idle_seconds
        ]

        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)
