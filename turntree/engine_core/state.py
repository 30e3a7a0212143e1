"""
Game State - The interface every game implements, and the context it sees.

A GameState is one unit of game logic:
- list_options(context): what inputs are legal right now
- apply(token, context): consume one input, return the next state

Option list sizes carry meaning:
- 0 options: the engine applies the state automatically with token None
- 1 option: the engine applies that option automatically
- 2+ options: the engine waits for external input

Returning None from apply() ends the game.

States must keep their options a pure function of the data visible
through the context. The engine re-asks for options during undo and
simulation and relies on getting the same answer.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Callable, Sequence, Union

from .history import HistoryNode


Token = Union[str, int]


class GameContext:
    """
    View of one history node handed to game logic.

    Reads see the whole ancestor chain; writes only touch the bound node.
    Every log() call is attributed to the bound node so undo can remove it.
    """

    __slots__ = ("node", "_log")

    def __init__(self, node: HistoryNode, log: Callable[[str], None]):
        self.node = node
        self._log = log

    def get(self, key: str) -> Any:
        return self.node.get(key)

    def has(self, key: str) -> bool:
        return self.node.has(key)

    def set(self, key: str, value: Any):
        self.node.set(key, value)

    def set_active_player(self, player_id: int):
        self.node.set_active_player(player_id)

    def set_winner(self, player_id: int):
        self.node.set_winner(player_id)

    def get_last_active_player(self) -> int:
        return self.node.last_active_player()

    def log(self, text: str):
        self._log(text)


class GameState(ABC):
    """
    Abstract base class for a state of a turn-based game.

    Concrete games subclass this once per situation (setup, turn, end...).
    """

    @abstractmethod
    def list_options(self, context: GameContext) -> Sequence[Token]:
        """
        Legal inputs for the current situation.

        Empty and single-element lists are consumed automatically and
        must not be used to ask the user for a confirmation.
        """
        pass

    @abstractmethod
    def apply(self, token: Token | None, context: GameContext) -> GameState | None:
        """
        Consume one input and return the next state, or None to end the game.

        token is None exactly when list_options() returned no options.
        """
        pass

    def get_name(self) -> str:
        return self.__class__.__name__

    def __repr__(self) -> str:
        return f"{self.get_name()}()"
