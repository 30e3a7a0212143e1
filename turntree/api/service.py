"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to session / game loop calls
2. Manages sessions and their game loops
3. Formats responses

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import asyncio
import logging

from .schemas import (
    # Requests
    CreateSessionRequest,
    # Responses
    GameInfo,
    GameListResponse,
    SessionResponse,
    TurnResponse,
    PlayerEstimate,
    WinnerEstimateResponse,
    OptionEstimate,
    OptionEstimateResponse,
    ErrorResponse,
    # Enums
    ErrorCode,
    SessionStatus,
    TurnActionType,
)
from ..bots.policy import RolloutPolicy
from ..config import Settings
from ..engine_core.history import NO_PLAYER
from ..games.registry import get_game, list_games
from ..session import SessionManager, Session, GameLoop, TurnResult

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        session = service.create_session(CreateSessionRequest(game_id="modulo"))
        turn = service.submit_input(session.session_id, "2")
        estimate = service.estimate_winner(session.session_id)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    settings: Settings = field(default_factory=Settings.from_env)

    # Injected into every new game loop; None means a fresh RandomPolicy each
    policy: RolloutPolicy | None = None

    # Game loops and their locks, per session
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)
    _locks: dict[str, asyncio.Lock] = field(default_factory=dict)

    def list_games(self) -> GameListResponse:
        return GameListResponse(
            games=[GameInfo.model_validate(game) for game in list_games()]
        )

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """
        Create a new game session.

        Raises:
            ValueError: If the game id is unknown
        """
        game = get_game(request.game_id)
        session = self.session_manager.create_session(game)

        self._game_loops[session.session_id] = GameLoop(
            session,
            policy=self.policy,
            max_rollout_steps=self.settings.max_rollout_steps,
        )
        self._locks[session.session_id] = asyncio.Lock()
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        self._forget(session_id)
        return self.session_manager.end_session(session_id, reason)

    def cleanup_stale_sessions(self, max_idle_seconds: int = 3600) -> int:
        """End idle sessions and drop their game loops. Returns how many ended."""
        removed = self.session_manager.cleanup_stale_sessions(max_idle_seconds)
        for session_id in list(self._game_loops):
            if self.session_manager.get_session(session_id) is None:
                self._forget(session_id)
        return removed

    def session_lock(self, session_id: str) -> asyncio.Lock:
        """
        Lock serializing every request on one session.

        Unknown sessions get a fresh lock, so their requests never wait.
        """
        return self._locks.get(session_id) or asyncio.Lock()

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_sessions()

    def submit_input(self, session_id: str, token: str) -> TurnResponse | ErrorResponse:
        """Submit a move label. Illegal moves come back with applied=False."""
        loop = self._get_loop(session_id)
        if not loop:
            return _not_found(session_id)
        result = loop.submit(_resolve_token(loop.session, token))
        return self._turn_to_response(loop.session, result)

    def press_key(self, session_id: str, key: str) -> TurnResponse | ErrorResponse:
        loop = self._get_loop(session_id)
        if not loop:
            return _not_found(session_id)
        result = loop.handle_key(_resolve_token(loop.session, key))
        return self._turn_to_response(loop.session, result)

    def undo(self, session_id: str) -> TurnResponse | ErrorResponse:
        loop = self._get_loop(session_id)
        if not loop:
            return _not_found(session_id)
        return self._turn_to_response(loop.session, loop.undo())

    def estimate_winner(
        self,
        session_id: str,
        iterations: int | None = None,
    ) -> WinnerEstimateResponse | ErrorResponse:
        loop = self._get_loop(session_id)
        if not loop:
            return _not_found(session_id)

        iterations = self.settings.winner_simulations if iterations is None else iterations
        estimate = loop.estimate_winner(iterations)
        logger.debug("Winner estimate for %s: %s", session_id, estimate)
        if estimate is None:
            return ErrorResponse(
                error="Game inactive or over",
                error_code=ErrorCode.ESTIMATE_UNAVAILABLE,
            )

        return WinnerEstimateResponse(
            session_id=session_id,
            iterations=iterations,
            players=[
                PlayerEstimate(player=player, wins=wins, probability=probability)
                for player, wins, probability in estimate.ranked()
            ],
        )

    def estimate_options(
        self,
        session_id: str,
        iterations_per_option: int | None = None,
    ) -> OptionEstimateResponse | ErrorResponse:
        loop = self._get_loop(session_id)
        if not loop:
            return _not_found(session_id)

        if iterations_per_option is None:
            iterations_per_option = self.settings.option_simulations
        estimate = loop.estimate_options(iterations_per_option)
        if estimate is None:
            return ErrorResponse(
                error="Not available (setup phase or game over)",
                error_code=ErrorCode.ESTIMATE_UNAVAILABLE,
            )

        return OptionEstimateResponse(
            session_id=session_id,
            player=estimate.player,
            iterations_per_option=iterations_per_option,
            options=[
                OptionEstimate(option=str(option), wins=wins, probability=probability)
                for option, wins, probability in estimate.ranked()
            ],
        )

    def _get_loop(self, session_id: str) -> GameLoop | None:
        """The game loop of a live session. Loops of ended sessions are dropped."""
        if self.session_manager.get_session(session_id) is None:
            self._forget(session_id)
            return None
        return self._game_loops.get(session_id)

    def _forget(self, session_id: str):
        self._game_loops.pop(session_id, None)
        self._locks.pop(session_id, None)

    def _session_to_response(self, session: Session) -> SessionResponse:
        engine = session.engine

        return SessionResponse(
            session_id=session.session_id,
            game_id=session.game.game_id,
            game_name=session.game.name,
            status=SessionStatus(session.state.value),
            created_at=session.created_at,
            options=[str(option) for option in engine.waiting_options()],
            active_player=_player_or_none(engine.active_player()),
            winner=_player_or_none(engine.winner) if engine.is_over else None,
            lines=session.transcript.lines,
        )

    def _turn_to_response(self, session: Session, result: TurnResult) -> TurnResponse:
        return TurnResponse(
            applied=result.applied,
            action=TurnActionType(result.action.value),
            session=self._session_to_response(session),
        )


def _resolve_token(session: Session, text: str) -> Any:
    """Map request text onto the option with the same text, if any."""
    for option in session.engine.waiting_options():
        if str(option) == text:
            return option
    return text


def _player_or_none(player: int) -> int | None:
    return None if player == NO_PLAYER else player


def _not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Session {session_id} not found",
        error_code=ErrorCode.SESSION_NOT_FOUND,
    )
