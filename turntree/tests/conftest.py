"""
Pytest fixtures for Turntree tests.
"""

import pytest

from ..engine_core import Engine, GameState, TranscriptSink
from ..bots import RandomPolicy, MonteCarloSimulator
from ..games.modulo import GetPlayerCount
from ..games.tictactoe import StartState
from ..session import SessionManager, GameLoop
from ..games import get_game


# =============================================================================
# Scripted states for engine edge cases
# =============================================================================

class Choice(GameState):
    """Offers fixed options, records the pick under key, then moves on."""

    def __init__(self, key, options, then=None):
        self.key = key
        self.options = options
        self.then = then

    def list_options(self, context):
        return self.options

    def apply(self, token, context):
        context.set(self.key, token)
        context.log(f"{self.key}={token}")
        return self.then() if self.then else None


class Auto(GameState):
    """Zero-option state that logs once and moves on."""

    def __init__(self, label, then=None):
        self.label = label
        self.then = then

    def list_options(self, context):
        return []

    def apply(self, token, context):
        assert token is None
        context.log(self.label)
        return self.then() if self.then else None


class Forced(GameState):
    """Single-option state."""

    def __init__(self, option, then=None):
        self.option = option
        self.then = then

    def list_options(self, context):
        return [self.option]

    def apply(self, token, context):
        context.set("forced", token)
        context.log(f"forced {token}")
        return self.then() if self.then else None


class Exploding(GameState):
    """Offers two options; 'boom' raises after writing and logging."""

    def list_options(self, context):
        return ["ok", "boom"]

    def apply(self, token, context):
        context.set("exploded", True)
        context.log("about to fail")
        if token == "boom":
            raise RuntimeError("boom")
        return None


class Broken(GameState):
    """Automatic state whose apply always fails."""

    def list_options(self, context):
        return []

    def apply(self, token, context):
        raise ValueError("broken")


class Endless(GameState):
    """Two options that always lead back here; never terminates."""

    def list_options(self, context):
        return ["a", "b"]

    def apply(self, token, context):
        return self


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def transcript() -> TranscriptSink:
    return TranscriptSink()


@pytest.fixture
def engine(transcript) -> Engine:
    """Uninitialized engine rendering into transcript."""
    return Engine(sink=transcript)


@pytest.fixture
def modulo_engine(engine) -> Engine:
    """Modulo game waiting for the player count."""
    game = get_game("modulo")
    engine.initialize(GetPlayerCount(), intro=game.intro)
    return engine


@pytest.fixture
def ttt_engine(engine) -> Engine:
    """Tic-tac-toe waiting for player 1's first mark."""
    engine.initialize(StartState())
    return engine


@pytest.fixture
def seeded_policy() -> RandomPolicy:
    return RandomPolicy(seed=1234)


@pytest.fixture
def modulo_simulator(modulo_engine, seeded_policy) -> MonteCarloSimulator:
    return MonteCarloSimulator(modulo_engine, policy=seeded_policy)


@pytest.fixture
def session_manager() -> SessionManager:
    return SessionManager()


@pytest.fixture
def modulo_loop(session_manager) -> GameLoop:
    session = session_manager.create_session(get_game("modulo"))
    return GameLoop(session, policy=RandomPolicy(seed=7))


@pytest.fixture
def ttt_loop(session_manager) -> GameLoop:
    session = session_manager.create_session(get_game("tictactoe"))
    return GameLoop(session, policy=RandomPolicy(seed=7))
