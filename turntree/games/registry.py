"""
Game Registry - Built-in games the session layer can start.

A GameDefinition is everything needed to start a session:
- A factory for the initial GameState
- Intro lines rendered once at the root
- Player count bounds (informational)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable

from ..engine_core.state import GameState


@dataclass(frozen=True)
class GameDefinition:
    """
    Definition of a playable game.
    """
    game_id: str
    name: str
    initial_state: Callable[[], GameState]
    intro: tuple[str, ...] = ()
    min_players: int = 1
    max_players: int = 2

    def create_initial_state(self) -> GameState:
        return self.initial_state()


def _builtin_games() -> dict[str, GameDefinition]:
    from .modulo import create_modulo_game
    from .tictactoe import create_tictactoe_game

    games = [create_modulo_game(), create_tictactoe_game()]
    return {game.game_id: game for game in games}


def list_games() -> list[GameDefinition]:
    """List built-in games, sorted by id."""
    games = _builtin_games()
    return [games[game_id] for game_id in sorted(games)]


def get_game(game_id: str) -> GameDefinition:
    """
    Look up a built-in game.

    Raises:
        ValueError: If no game has this id
    """
    games = _builtin_games()
    if game_id not in games:
        raise ValueError(f"Unknown game: {game_id}")
    return games[game_id]
