"""
History Node - One step of game history with a scoped key/value store.

Nodes form a tree through parent references:
- Each transition creates exactly one node
- A node only ever writes its own store
- Reads walk the ancestor chain, so a value is visible from the
  node that set it forward (copy-on-write without copying)

Children are never tracked. Undo simply moves the head back to the parent
and the abandoned branch is dropped.
"""

from __future__ import annotations
from typing import Any, Iterator, TYPE_CHECKING

if TYPE_CHECKING:
    from .state import GameState
    from .render import OutputHandle


NO_PLAYER = -1


class HistoryNode:
    """
    A single node in the game history.

    Anything not stored on this node is inherited from the parent chain.
    """

    __slots__ = (
        "parent",
        "producing_state",
        "store",
        "active_player",
        "winner",
        "rendered_outputs",
    )

    def __init__(
        self,
        parent: HistoryNode | None,
        producing_state: GameState | None,
    ):
        self.parent = parent
        self.producing_state = producing_state
        self.store: dict[str, Any] = {}
        self.active_player = NO_PLAYER
        self.winner = NO_PLAYER
        self.rendered_outputs: list[OutputHandle] = []

    def get(self, key: str) -> Any:
        """Return the nearest value for key on the path to the root, or None."""
        node: HistoryNode | None = self
        while node is not None:
            if key in node.store:
                return node.store[key]
            node = node.parent
        return None

    def has(self, key: str) -> bool:
        """Check whether any node on the path to the root holds key."""
        node: HistoryNode | None = self
        while node is not None:
            if key in node.store:
                return True
            node = node.parent
        return False

    def set(self, key: str, value: Any):
        self.store[key] = value

    def set_active_player(self, player_id: int):
        self.active_player = player_id

    def set_winner(self, player_id: int):
        self.winner = player_id

    def last_active_player(self) -> int:
        """Active player of the node this one was derived from."""
        if self.parent is None:
            return NO_PLAYER
        return self.parent.active_player

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def depth(self) -> int:
        """Number of ancestors (0 for the root)."""
        return sum(1 for _ in self.ancestors())

    def ancestors(self) -> Iterator[HistoryNode]:
        """Iterate parent, grandparent, ... up to and including the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def dispose_outputs(self):
        """Dispose everything rendered while this node was current."""
        for handle in self.rendered_outputs:
            handle.dispose()
        self.rendered_outputs.clear()

    def __repr__(self) -> str:
        return (
            f"HistoryNode(depth={self.depth}, keys={sorted(self.store)}, "
            f"active_player={self.active_player}, winner={self.winner})"
        )
