"""
Games module - Built-in game implementations.

Each game has its own subpackage with:
- GameState subclasses, one per situation
- A create_*_game() factory returning its GameDefinition
"""

from .registry import GameDefinition, get_game, list_games

__all__ = [
    "GameDefinition",
    "get_game",
    "list_games",
]
