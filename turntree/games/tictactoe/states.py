"""
Tic-Tac-Toe states.

Flow:
    StartState -> PlayerTurn (repeated) -> EndGame -> end

Cells are numbered 0-8, row by row. The board is stored as a tuple
(None = empty, 1 = X, 2 = O) and replaced, never mutated, on every move.
"""

from __future__ import annotations

from ...engine_core.state import GameState, GameContext, Token


WINS = [
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # Rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # Cols
    (0, 4, 8), (2, 4, 6),             # Diagonals
]

EMPTY_BOARD: tuple[int | None, ...] = (None,) * 9
MARKS = {1: "X", 2: "O"}


class StartState(GameState):
    """Set up the empty board. Applied automatically."""

    def list_options(self, context: GameContext) -> list[str]:
        return []

    def apply(self, token: Token | None, context: GameContext) -> GameState:
        context.set("board", EMPTY_BOARD)
        context.set_active_player(1)

        context.log("Welcome to Tic-Tac-Toe.")
        context.log("Player 1 is X. Player 2 is O.")
        context.log("----------------")
        context.log("Game Started.")
        print_board(context, EMPTY_BOARD)
        context.log("Player 1 (X), choose a position (0-8):")
        return PlayerTurn()


class PlayerTurn(GameState):
    """The active player marks a free cell."""

    def list_options(self, context: GameContext) -> list[str]:
        board = context.get("board")
        return [str(i) for i, cell in enumerate(board) if cell is None]

    def apply(self, token: Token | None, context: GameContext) -> GameState:
        if token is None:
            return self

        idx = int(token)
        player = context.get_last_active_player()

        board = list(context.get("board"))
        board[idx] = player
        board = tuple(board)
        context.set("board", board)

        context.log(f"> Player {player} chose {idx}")
        print_board(context, board)

        if check_win(board, player):
            context.set("winner_id", player)
            return EndGame()

        if all(cell is not None for cell in board):
            return EndGame()

        next_player = 2 if player == 1 else 1
        context.set_active_player(next_player)
        context.log(f"Player {next_player} ({MARKS[next_player]}), choose a position (0-8):")
        return PlayerTurn()


class EndGame(GameState):
    """Report the result and end the game."""

    def list_options(self, context: GameContext) -> list[str]:
        return []

    def apply(self, token: Token | None, context: GameContext) -> None:
        winner_id = context.get("winner_id")

        context.log("----------------")
        if winner_id is not None:
            context.set_winner(winner_id)
            context.log(f"Player {winner_id} wins!")
        else:
            context.log("It's a draw!")
        context.log("Game Over.")
        return None


def check_win(board: tuple[int | None, ...], player: int) -> bool:
    """Check if player holds any full line."""
    return any(all(board[idx] == player for idx in combo) for combo in WINS)


def print_board(context: GameContext, board: tuple[int | None, ...]):
    marks = [MARKS.get(cell, ".") for cell in board]
    context.log(f"{marks[0]} {marks[1]} {marks[2]}")
    context.log(f"{marks[3]} {marks[4]} {marks[5]}")
    context.log(f"{marks[6]} {marks[7]} {marks[8]}")
