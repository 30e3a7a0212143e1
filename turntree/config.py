"""Runtime settings, read from environment variables."""

from __future__ import annotations
from dataclasses import dataclass, field
import os

from .bots.monte_carlo import DEFAULT_MAX_ROLLOUT_STEPS


@dataclass
class Settings:
    """
    Settings shared by the API and the CLI.

    Attributes:
        env: Deployment environment name (TURNTREE_ENV).
        winner_simulations: Rollouts per winner estimate
            (TURNTREE_WINNER_SIMULATIONS).
        option_simulations: Rollouts per option for option estimates
            (TURNTREE_OPTION_SIMULATIONS).
        max_rollout_steps: Transitions after which a rollout is abandoned
            (TURNTREE_MAX_ROLLOUT_STEPS).
        log_level: Root log level name (TURNTREE_LOG_LEVEL).
        allowed_origins: CORS origins, comma separated (ALLOWED_ORIGINS).
    """

    env: str = "development"
    winner_simulations: int = 1000
    option_simulations: int = 200
    max_rollout_steps: int = DEFAULT_MAX_ROLLOUT_STEPS
    log_level: str = "INFO"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            env=os.getenv("TURNTREE_ENV", "development"),
            winner_simulations=int(os.getenv("TURNTREE_WINNER_SIMULATIONS", "1000")),
            option_simulations=int(os.getenv("TURNTREE_OPTION_SIMULATIONS", "200")),
            max_rollout_steps=int(
                os.getenv("TURNTREE_MAX_ROLLOUT_STEPS", str(DEFAULT_MAX_ROLLOUT_STEPS))
            ),
            log_level=os.getenv("TURNTREE_LOG_LEVEL", "INFO").upper(),
            allowed_origins=os.getenv("ALLOWED_ORIGINS", "*").split(","),
        )
