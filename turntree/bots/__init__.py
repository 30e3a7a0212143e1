"""
Bots module - Simulated play.

Provides:
- RolloutPolicy: Interface for picking an option during a rollout
- RandomPolicy / FirstLegalPolicy: Uniform and deterministic policies
- MonteCarloSimulator: Winner and per-option estimates by random rollout
"""

from .policy import RolloutPolicy, RandomPolicy, FirstLegalPolicy
from .monte_carlo import MonteCarloSimulator, DEFAULT_MAX_ROLLOUT_STEPS

__all__ = [
    "RolloutPolicy",
    "RandomPolicy",
    "FirstLegalPolicy",
    "MonteCarloSimulator",
    "DEFAULT_MAX_ROLLOUT_STEPS",
]
