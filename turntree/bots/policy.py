"""
Rollout Policy - How a simulated player picks among legal options.

Policies only choose among options the engine reports as legal.
The Monte Carlo simulator uses RandomPolicy by default; tests can
inject a seeded RandomPolicy or FirstLegalPolicy for determinism.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Sequence, TYPE_CHECKING
import random

if TYPE_CHECKING:
    from ..engine_core.state import GameContext, Token


class RolloutPolicy(ABC):
    """
    Abstract base class for rollout policies.
    """

    @abstractmethod
    def select_option(self, options: Sequence[Token], context: GameContext) -> Token:
        """
        Select one option.

        Args:
            options: Legal options, at least two
            context: Context of the node the options were computed for

        Returns:
            One member of options
        """
        pass

    def get_name(self) -> str:
        """Get the policy's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(RolloutPolicy):
    """
    Random policy - selects options uniformly at random.

    Pass a seed (or a ready random.Random) for reproducible rollouts.
    """

    def __init__(self, seed: int | None = None, rng: random.Random | None = None):
        self.rng = rng or random.Random(seed)

    def select_option(self, options: Sequence[Token], context: GameContext) -> Token:
        if not options:
            raise ValueError("No options available")
        return self.rng.choice(options)


class FirstLegalPolicy(RolloutPolicy):
    """
    First-legal policy - always selects the first option.

    Used for deterministic testing.
    """

    def select_option(self, options: Sequence[Token], context: GameContext) -> Token:
        if not options:
            raise ValueError("No options available")
        return options[0]
