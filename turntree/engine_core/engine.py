"""
Engine - Owns the live cursor and drives every state transition.

The cursor is the pair (current_state, head):
- current_state is the GameState waiting for input (None once the game ended)
- head is the HistoryNode that current_state reads and writes through

Control flow for one external input:
1. Validate the token against the current option list
2. Apply one transition (new node, then GameState.apply)
3. Drain auto-transitions until a state offers 2+ options or the game ends

Undo walks back through auto-transitions so it always lands on a state
that actually offered a choice.

The simulator reuses the same transition primitives inside the
simulation() bracket, which restores the live cursor on every exit path.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator
import logging

from .history import HistoryNode, NO_PLAYER
from .render import RenderSink, NullSink
from .state import GameContext, GameState, Token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cursor:
    """Snapshot of the engine cursor. Nodes are shared, never copied."""
    state: GameState | None
    head: HistoryNode | None


class Engine:
    """
    Drives one game session.

    Usage:
        engine = Engine(sink=TranscriptSink())
        engine.initialize(StartState())

        engine.submit_input("2")   # ignored unless legal
        engine.undo()              # back to the last real choice
        engine.active_player()
    """

    def __init__(self, sink: RenderSink | None = None):
        self.sink: RenderSink = sink or NullSink()
        self.current_state: GameState | None = None
        self.head: HistoryNode | None = None

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def is_active(self) -> bool:
        """A session exists and the game has not ended."""
        return self.head is not None and self.current_state is not None

    @property
    def is_over(self) -> bool:
        return self.head is not None and self.current_state is None

    @property
    def winner(self) -> int:
        if self.head is None:
            return NO_PLAYER
        return self.head.winner

    def active_player(self) -> int:
        if self.head is None:
            return NO_PLAYER
        return self.head.active_player

    def context(self) -> GameContext:
        """Context bound to the current head."""
        if self.head is None:
            raise ValueError("No active session")
        return self._context(self.head)

    def options(self) -> list[Token]:
        """Raw option list of the current state (empty when no state)."""
        if self.current_state is None or self.head is None:
            return []
        return list(self.current_state.list_options(self._context(self.head)))

    def waiting_options(self) -> list[Token]:
        """Options the engine is waiting on, or [] if it is not waiting for input."""
        options = self.options()
        return options if len(options) > 1 else []

    def save_point(self) -> Cursor:
        return Cursor(state=self.current_state, head=self.head)

    def restore(self, cursor: Cursor):
        self.current_state = cursor.state
        self.head = cursor.head

    # =========================================================================
    # Session lifecycle
    # =========================================================================

    def initialize(self, initial_state: GameState, intro: Iterable[str] = ()):
        """
        Start a fresh session.

        Any output rendered by a previous session is disposed. Intro lines
        are attributed to the root node, which is never undone.

        If a state raises while the opening auto-transitions drain, all
        output of the new session is disposed, the engine is left without
        a session, and the exception propagates.
        """
        self._unwind_to(None)
        self.current_state = initial_state
        self.head = HistoryNode(None, initial_state)
        logger.debug("Initialized with %s", initial_state.get_name())

        try:
            for line in intro:
                self._print(self.head, line)
            self._auto_transition()
        except Exception:
            logger.debug("Initialization failed, discarding session")
            self._unwind_to(None)
            self.restore(Cursor(state=None, head=None))
            raise

    def submit_input(self, token: Token) -> bool:
        """
        Apply an external input.

        Returns False (and changes nothing) when there is no live game, the
        engine is not waiting for input, or token is not a legal option.
        """
        if self.current_state is None or self.head is None:
            return False

        options = self.options()
        logger.debug("Options: %s", options)
        if len(options) <= 1 or token not in options:
            return False

        with self._rollback_on_error():
            self._transition_once(token)
            self._auto_transition()
        return True

    def undo(self) -> bool:
        """
        Undo back to the nearest earlier state that offered a choice.

        Returns False when already at the root or when no earlier choice
        point exists (only auto-transitions lie between root and head).
        In that case the cursor stays where it is rather than landing on
        the root, so undo never parks the game on an automatic state that
        submit_input could not leave.
        """
        if self.head is None or self.head.parent is None:
            return False

        landing, state = self._find_undo_target()
        if landing is None:
            logger.debug("Undo ignored: no earlier choice point")
            return False

        self._unwind_to(landing)
        self.head = landing
        self.current_state = state
        logger.debug("Undo landed on %r", state)
        return True

    def step(self, token: Token | None):
        """
        Apply exactly one transition without draining auto-transitions.

        No legality check is made; callers pass an option from options()
        (or None when there are none). No-op if the game has ended.
        """
        with self._rollback_on_error():
            self._transition_once(token)

    @contextmanager
    def simulation(self) -> Iterator[Cursor]:
        """
        Bracket for speculative play.

        The sink is swapped for a NullSink and the cursor saved on entry.
        Both are restored on exit, whatever the exit path.
        """
        saved = self.save_point()
        sink = self.sink
        self.sink = NullSink()
        try:
            yield saved
        finally:
            self.sink = sink
            self.restore(saved)

    # =========================================================================
    # Internals
    # =========================================================================

    def _context(self, node: HistoryNode) -> GameContext:
        return GameContext(node, lambda text: self._print(node, text))

    def _print(self, node: HistoryNode, text: str):
        handle = self.sink.emit(text)
        if handle is not None:
            node.rendered_outputs.append(handle)

    def _transition_once(self, token: Token | None):
        if self.current_state is None or self.head is None:
            return

        logger.debug("Transition: %r via %s", token, self.current_state.get_name())
        node = HistoryNode(self.head, self.current_state)
        self.head = node
        self.current_state = self.current_state.apply(token, self._context(node))

    def _auto_transition(self):
        while self.current_state is not None:
            options = self.current_state.list_options(self._context(self.head))
            if len(options) == 0:
                self._transition_once(None)
            elif len(options) == 1:
                self._transition_once(options[0])
            else:
                break

    def _find_undo_target(self) -> tuple[HistoryNode | None, GameState | None]:
        """
        Walk parents until a restored state offers 2+ options.

        Returns (None, None) when the root is reached first; the root is only
        a landing point if its own state offers a choice.
        """
        node = self.head
        state = self.current_state
        while node.parent is not None:
            if node.producing_state is not None:
                state = node.producing_state
            node = node.parent
            if state is None:
                return node, None
            if len(state.list_options(self._context(node))) > 1:
                return node, state
        return None, None

    def _unwind_to(self, stop: HistoryNode | None):
        """Dispose outputs of head and its ancestors, stopping before stop."""
        node = self.head
        while node is not None and node is not stop:
            node.dispose_outputs()
            node = node.parent

    @contextmanager
    def _rollback_on_error(self) -> Iterator[None]:
        saved = self.save_point()
        try:
            yield
        except Exception:
            logger.debug("Rolling back failed transition")
            self._unwind_to(saved.head)
            self.restore(saved)
            raise
