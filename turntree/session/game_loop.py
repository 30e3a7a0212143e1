"""
Game Loop - The key-driven gameplay loop for one session.

The loop:
1. A key arrives (keyboard key name or explicit move label)
2. "Backspace" undoes to the last real choice
3. Any other key is submitted as an input token; illegal ones are ignored
4. The caller renders the transcript and the options now on offer

Estimates run the Monte Carlo simulator against the live session and
never change it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TYPE_CHECKING
import logging

from ..bots.monte_carlo import MonteCarloSimulator, DEFAULT_MAX_ROLLOUT_STEPS
from ..engine_core.history import NO_PLAYER
from .manager import SessionState

if TYPE_CHECKING:
    from .manager import Session
    from ..bots.policy import RolloutPolicy
    from ..engine_core.state import Token

logger = logging.getLogger(__name__)

UNDO_KEY = "Backspace"


class LoopState(Enum):
    """State of the game loop."""
    WAITING_INPUT = "waiting_input"
    GAME_OVER = "game_over"


class TurnAction(Enum):
    """What a key press did."""
    INPUT = "input"
    UNDO = "undo"
    IGNORED = "ignored"
    NONE = "none"


@dataclass
class TurnResult:
    """
    Result of processing a key.

    applied is False when the key had no effect (illegal input,
    nothing to undo, game over).
    """
    applied: bool
    action: TurnAction
    loop_state: LoopState

    options: list[Any] = field(default_factory=list)
    active_player: int = NO_PLAYER
    winner: int | None = None

    # Full transcript after the key was processed
    lines: list[str] = field(default_factory=list)


@dataclass
class WinnerEstimate:
    """Rollout wins per player from the current position."""
    iterations: int
    wins: dict[int, int] = field(default_factory=dict)

    def probability(self, player: int) -> float:
        if self.iterations == 0:
            return 0.0
        return self.wins.get(player, 0) / self.iterations

    def ranked(self) -> list[tuple[int, int, float]]:
        """(player, wins, probability) ordered by player id."""
        return [
            (player, self.wins[player], self.probability(player))
            for player in sorted(self.wins)
        ]


@dataclass
class OptionEstimate:
    """Rollout wins for one player, per option."""
    player: int
    iterations_per_option: int
    wins: dict[Any, int] = field(default_factory=dict)

    def probability(self, option: Token) -> float:
        if self.iterations_per_option == 0:
            return 0.0
        return self.wins.get(option, 0) / self.iterations_per_option

    def ranked(self) -> list[tuple[Any, int, float]]:
        """(option, wins, probability), most wins first, then by option."""
        order = sorted(
            self.wins,
            key=lambda option: (-self.wins[option], token_sort_key(option)),
        )
        return [(option, self.wins[option], self.probability(option)) for option in order]


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(session)

        result = loop.handle_key("2")
        result = loop.handle_key("Backspace")

        estimate = loop.estimate_winner(1000)
        if estimate is None:
            show("Game inactive or over.")
    """

    def __init__(
        self,
        session: Session,
        policy: RolloutPolicy | None = None,
        max_rollout_steps: int = DEFAULT_MAX_ROLLOUT_STEPS,
    ):
        self.session = session
        self.simulator = MonteCarloSimulator(
            session.engine,
            policy=policy,
            max_rollout_steps=max_rollout_steps,
        )

    @property
    def state(self) -> LoopState:
        if self.session.engine.is_over:
            return LoopState.GAME_OVER
        return LoopState.WAITING_INPUT

    def handle_key(self, key: str) -> TurnResult:
        """Undo on Backspace, otherwise treat the key as an input token."""
        logger.debug("Keypress: %r", key)
        if key == UNDO_KEY:
            return self.undo()
        return self.submit(key)

    def submit(self, token: Token) -> TurnResult:
        if self.session.state == SessionState.ABANDONED:
            return self._result(False, TurnAction.IGNORED)

        applied = self.session.engine.submit_input(token)
        self.session.sync_state()
        return self._result(applied, TurnAction.INPUT if applied else TurnAction.IGNORED)

    def undo(self) -> TurnResult:
        if self.session.state == SessionState.ABANDONED:
            return self._result(False, TurnAction.IGNORED)

        applied = self.session.engine.undo()
        self.session.sync_state()
        return self._result(applied, TurnAction.UNDO if applied else TurnAction.IGNORED)

    def snapshot(self) -> TurnResult:
        """Current view without processing anything."""
        return self._result(False, TurnAction.NONE)

    def estimate_winner(self, iterations: int) -> WinnerEstimate | None:
        """Who tends to win from here. None if the game is not running."""
        wins = self.simulator.estimate_outcomes(iterations)
        if wins is None:
            return None
        return WinnerEstimate(iterations=iterations, wins=wins)

    def estimate_options(self, iterations_per_option: int) -> OptionEstimate | None:
        """
        Which option improves the active player's odds.

        None during setup phases and after the game ended.
        """
        player = self.session.engine.active_player()
        wins = self.simulator.estimate_option_outcomes(iterations_per_option)
        if wins is None:
            return None
        return OptionEstimate(
            player=player,
            iterations_per_option=iterations_per_option,
            wins=wins,
        )

    def _result(self, applied: bool, action: TurnAction) -> TurnResult:
        engine = self.session.engine
        winner = engine.winner if engine.is_over and engine.winner != NO_PLAYER else None
        return TurnResult(
            applied=applied,
            action=action,
            loop_state=self.state,
            options=engine.waiting_options(),
            active_player=engine.active_player(),
            winner=winner,
            lines=self.session.transcript.lines,
        )


def token_sort_key(token: Any) -> tuple[int, Any]:
    """Sort numeric tokens numerically, everything else after, by text."""
    text = str(token)
    if text.lstrip("-").isdigit():
        return (0, int(text))
    return (1, text)
