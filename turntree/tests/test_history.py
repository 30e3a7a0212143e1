"""
Tests for history nodes and the scoped store.

Tests:
- Ancestor-chain lookup
- Local-only writes
- Player / winner markers
- Rendered output disposal
"""

import pytest

from ..engine_core.history import HistoryNode, NO_PLAYER
from ..engine_core.render import TranscriptSink, NullSink


@pytest.fixture
def chain():
    """root -> middle -> leaf, each setting some keys."""
    root = HistoryNode(None, None)
    root.set("a", 1)
    root.set("b", 1)

    middle = HistoryNode(root, None)
    middle.set("b", 2)
    middle.set("c", 2)

    leaf = HistoryNode(middle, None)
    leaf.set("c", 3)
    return root, middle, leaf


class TestScopedStore:
    """Tests for get/set visibility."""

    def test_nearest_ancestor_wins(self, chain):
        """A read returns the value from the nearest node that set the key."""
        root, middle, leaf = chain

        assert leaf.get("a") == 1
        assert leaf.get("b") == 2
        assert leaf.get("c") == 3

        assert middle.get("a") == 1
        assert middle.get("b") == 2
        assert middle.get("c") == 2

    def test_missing_key_is_absent(self, chain):
        """Keys never set read as None, and has() says so."""
        _, _, leaf = chain

        assert leaf.get("nope") is None
        assert not leaf.has("nope")

    def test_stored_none_is_distinguishable(self, chain):
        """has() tells a stored None apart from absence."""
        _, middle, leaf = chain
        middle.set("cleared", None)

        assert leaf.get("cleared") is None
        assert leaf.has("cleared")

    def test_set_never_touches_ancestors(self, chain):
        """Writing on a node leaves every ancestor store as it was."""
        root, middle, leaf = chain
        leaf.set("a", 99)

        assert leaf.get("a") == 99
        assert middle.get("a") == 1
        assert root.get("a") == 1
        assert root.store == {"a": 1, "b": 1}

    def test_values_not_visible_to_ancestors(self, chain):
        """A value set on a child is invisible from its parent."""
        root, middle, leaf = chain
        leaf.set("only_leaf", True)

        assert middle.get("only_leaf") is None
        assert root.get("only_leaf") is None

    def test_siblings_are_isolated(self, chain):
        """Two branches from one parent do not see each other's writes."""
        _, middle, leaf = chain
        sibling = HistoryNode(middle, None)
        sibling.set("c", "sibling")

        assert leaf.get("c") == 3
        assert sibling.get("c") == "sibling"


class TestPlayers:
    """Tests for active player and winner markers."""

    def test_defaults(self):
        node = HistoryNode(None, None)

        assert node.active_player == NO_PLAYER
        assert node.winner == NO_PLAYER

    def test_last_active_player_reads_parent(self):
        root = HistoryNode(None, None)
        root.set_active_player(2)
        child = HistoryNode(root, None)
        child.set_active_player(1)

        assert child.last_active_player() == 2
        assert root.last_active_player() == NO_PLAYER

    def test_set_winner(self):
        node = HistoryNode(None, None)
        node.set_winner(3)

        assert node.winner == 3


class TestStructure:
    """Tests for depth and ancestors."""

    def test_depth(self, chain):
        root, middle, leaf = chain

        assert root.depth == 0
        assert middle.depth == 1
        assert leaf.depth == 2
        assert root.is_root
        assert not leaf.is_root

    def test_ancestors_in_order(self, chain):
        root, middle, leaf = chain

        assert list(leaf.ancestors()) == [middle, root]
        assert list(root.ancestors()) == []


class TestRenderedOutputs:
    """Tests for output disposal."""

    def test_dispose_outputs_removes_lines(self):
        sink = TranscriptSink()
        keep = HistoryNode(None, None)
        drop = HistoryNode(keep, None)

        keep.rendered_outputs.append(sink.emit("kept"))
        drop.rendered_outputs.append(sink.emit("dropped 1"))
        drop.rendered_outputs.append(sink.emit("dropped 2"))

        drop.dispose_outputs()

        assert sink.lines == ["kept"]
        assert drop.rendered_outputs == []

    def test_dispose_twice_is_harmless(self):
        sink = TranscriptSink()
        line = sink.emit("x")
        line.dispose()
        line.dispose()

        assert line.disposed
        assert len(sink) == 0

    def test_null_sink_renders_nothing(self):
        assert NullSink().emit("anything") is None

    def test_identical_text_lines_dispose_individually(self):
        sink = TranscriptSink()
        first = sink.emit("same")
        sink.emit("same")

        first.dispose()

        assert sink.lines == ["same"]

    def test_tail(self):
        sink = TranscriptSink()
        for i in range(5):
            sink.emit(str(i))

        assert sink.tail(2) == ["3", "4"]
        assert sink.tail(0) == []
