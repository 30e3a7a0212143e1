"""
Monte Carlo Simulator - Estimates outcomes by random rollouts.

Answers two questions about the live game:
- Who tends to win from here? (estimate_outcomes)
- Which option improves the current player's odds? (estimate_option_outcomes)

Rollouts run through the engine's own transition primitives inside
Engine.simulation(), so the live cursor and the real sink are untouched
when a call returns, including when it raises.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import logging

from ..engine_core.history import NO_PLAYER
from .policy import RolloutPolicy, RandomPolicy

if TYPE_CHECKING:
    from ..engine_core.engine import Engine, Cursor
    from ..engine_core.state import Token

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROLLOUT_STEPS = 100_000


class MonteCarloSimulator:
    """
    Uniform random rollout evaluator.

    Usage:
        simulator = MonteCarloSimulator(engine, policy=RandomPolicy(seed=7))

        wins = simulator.estimate_outcomes(1000)            # {player: wins}
        by_move = simulator.estimate_option_outcomes(200)   # {option: wins}

    Both return None when the estimate is unavailable (no live game, or
    no active player for the option estimate).
    """

    def __init__(
        self,
        engine: Engine,
        policy: RolloutPolicy | None = None,
        max_rollout_steps: int = DEFAULT_MAX_ROLLOUT_STEPS,
    ):
        self.engine = engine
        self.policy = policy or RandomPolicy()
        self.max_rollout_steps = max_rollout_steps

    def estimate_outcomes(self, iterations: int) -> dict[int, int] | None:
        """
        Play iterations random games to the end from the live cursor.

        Returns winner id -> number of rollouts won. Rollouts without a
        declared winner are not counted, so the mapping may be empty.
        """
        _check_iterations(iterations)
        if not self.engine.is_active:
            return None

        with self.engine.simulation() as live:
            return self._tally(live, iterations)

    def estimate_option_outcomes(self, iterations_per_option: int) -> dict[Token, int] | None:
        """
        For each legal option, apply it and run estimate_outcomes from there.

        Returns option -> rollouts won by the player active at the live cursor.
        """
        _check_iterations(iterations_per_option)
        if not self.engine.is_active:
            return None

        player = self.engine.active_player()
        if player == NO_PLAYER:
            return None

        results: dict[Token, int] = {}
        with self.engine.simulation() as live:
            for option in self.engine.options():
                self.engine.restore(live)
                self.engine.step(option)
                wins = self._tally(self.engine.save_point(), iterations_per_option)
                results[option] = wins.get(player, 0)

        logger.debug("Option estimate for player %d: %s", player, results)
        return results

    def _tally(self, start: Cursor, iterations: int) -> dict[int, int]:
        wins: dict[int, int] = {}
        for _ in range(iterations):
            self.engine.restore(start)
            winner = self._rollout()
            if winner != NO_PLAYER:
                wins[winner] = wins.get(winner, 0) + 1
        return wins

    def _rollout(self) -> int:
        """Play to the end from the current cursor. Returns the winner id."""
        engine = self.engine
        steps = 0
        while engine.current_state is not None:
            if steps >= self.max_rollout_steps:
                logger.warning(
                    "Rollout abandoned after %d steps in %s",
                    steps, engine.current_state.get_name(),
                )
                return NO_PLAYER

            options = engine.options()
            if not options:
                token = None
            elif len(options) == 1:
                token = options[0]
            else:
                token = self.policy.select_option(options, engine.context())

            engine.step(token)
            steps += 1

        return engine.winner


def _check_iterations(iterations: int):
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")
