"""
Modulo Sum - A tiny arithmetic game.

Every player adds a number from 0 to 9 to a shared sum. After the last
player has played, the winner is (sum mod players) + 1.
"""

from ..registry import GameDefinition
from .states import GetPlayerCount, PlayerTurn, EndGame


def create_modulo_game() -> GameDefinition:
    """Create the Modulo Sum game definition."""
    return GameDefinition(
        game_id="modulo",
        name="Modulo Sum",
        initial_state=GetPlayerCount,
        intro=(
            "Welcome to the Modulo Sum Game.",
            "How many players? (1-9)",
        ),
        min_players=1,
        max_players=9,
    )


__all__ = [
    "create_modulo_game",
    "GetPlayerCount",
    "PlayerTurn",
    "EndGame",
]
