"""
Rendering sinks - Where log lines emitted by game logic end up.

The engine does not know about visual placement. It only needs:
- An append-only emitter of text lines
- A handle per emitted line that can be disposed later (undo)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Protocol


class OutputHandle(Protocol):
    """Anything a sink returns for an emitted line."""

    def dispose(self) -> None: ...


class RenderSink(ABC):
    """Append-only text line emitter."""

    @abstractmethod
    def emit(self, text: str) -> OutputHandle | None:
        """Emit one line. Returns a disposable handle, or None if nothing was rendered."""
        pass


class NullSink(RenderSink):
    """Sink that renders nothing. Used while simulating."""

    def emit(self, text: str) -> None:
        return None


@dataclass(eq=False)
class LogLine:
    """A line held by a TranscriptSink."""
    text: str
    transcript: TranscriptSink | None = field(default=None, repr=False)

    @property
    def disposed(self) -> bool:
        return self.transcript is None

    def dispose(self):
        if self.transcript is not None:
            self.transcript._remove(self)
            self.transcript = None


class TranscriptSink(RenderSink):
    """
    In-memory transcript of rendered lines.

    Disposing a handle removes exactly that line, so the transcript
    always mirrors the history that is still current.
    """

    def __init__(self):
        self._lines: list[LogLine] = []

    def emit(self, text: str) -> LogLine:
        line = LogLine(text=text, transcript=self)
        self._lines.append(line)
        return line

    def _remove(self, line: LogLine):
        self._lines.remove(line)

    @property
    def lines(self) -> list[str]:
        return [line.text for line in self._lines]

    def tail(self, count: int) -> list[str]:
        if count <= 0:
            return []
        return self.lines[-count:]

    def clear(self):
        for line in list(self._lines):
            line.dispose()

    def __len__(self) -> int:
        return len(self._lines)
