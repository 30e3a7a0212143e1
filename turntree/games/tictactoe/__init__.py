"""
Tic-Tac-Toe - Two players alternate marking a 3x3 grid.

Three marks in a row, column or diagonal win. A full board is a draw.
"""

from ..registry import GameDefinition
from .states import StartState, PlayerTurn, EndGame, check_win, WINS


def create_tictactoe_game() -> GameDefinition:
    """Create the Tic-Tac-Toe game definition."""
    return GameDefinition(
        game_id="tictactoe",
        name="Tic-Tac-Toe",
        initial_state=StartState,
        min_players=2,
        max_players=2,
    )


__all__ = [
    "create_tictactoe_game",
    "StartState",
    "PlayerTurn",
    "EndGame",
    "check_win",
    "WINS",
]
