"""
Modulo Sum Game states.

Flow:
    GetPlayerCount -> PlayerTurn (once per player) -> EndGame -> end

Scoped data:
    player_count: int, set once by GetPlayerCount
    current_sum: int, rewritten by every PlayerTurn
"""

from __future__ import annotations

from ...engine_core.state import GameState, GameContext, Token


PLAYER_COUNTS = ["1", "2", "3", "4", "5", "6", "7", "8", "9"]
NUMBERS = ["0", "1", "2", "3", "4", "5", "6", "7", "8", "9"]


class GetPlayerCount(GameState):
    """Ask how many players are playing."""

    def list_options(self, context: GameContext) -> list[str]:
        return PLAYER_COUNTS

    def apply(self, token: Token | None, context: GameContext) -> GameState:
        if token is None:
            return self

        count = int(token)
        context.set("player_count", count)
        context.set("current_sum", 0)

        # Player 1 acts next
        context.set_active_player(1)

        context.log(f"> {token}")
        context.log(f"Great. {count} players configured.")
        context.log("----------------")
        context.log("Player 1, enter a number (0-9):")
        return PlayerTurn()


class PlayerTurn(GameState):
    """One player adds a number to the running sum."""

    def list_options(self, context: GameContext) -> list[str]:
        return NUMBERS

    def apply(self, token: Token | None, context: GameContext) -> GameState:
        if token is None:
            return self

        value = int(token)
        current_sum = context.get("current_sum")
        total_players = context.get("player_count")
        current_player = context.get_last_active_player()

        context.log(f"> {value}")
        new_sum = current_sum + value
        context.set("current_sum", new_sum)

        if current_player < total_players:
            next_player = current_player + 1
            context.set_active_player(next_player)
            context.log(f"Player {next_player}, enter a number (0-9):")
            return PlayerTurn()

        # Last player done; nobody is active on the way to EndGame
        return EndGame()


class EndGame(GameState):
    """Compute the winner from the final sum."""

    def list_options(self, context: GameContext) -> list[str]:
        return []

    def apply(self, token: Token | None, context: GameContext) -> None:
        final_sum = context.get("current_sum")
        total_players = context.get("player_count")
        remainder = final_sum % total_players
        winner = remainder + 1

        context.set_winner(winner)

        context.log("----------------")
        context.log(f"Total Sum: {final_sum}")
        context.log(f"Calculation: {final_sum} % {total_players} = {remainder}")
        context.log(f"Player {winner} wins!")
        context.log("Game Over.")
        return None
