"""Destinations for rendered event lines.

A sink only has to accept a pre-formatted line. Anything it raises is caught
by the Transaction and reported on the ``tasktrace`` logger, so a broken sink
never changes the outcome of the traced work.
"""

from __future__ import annotations

import logging
import sys
import threading
from typing import Protocol, TextIO, runtime_checkable

from tasktrace.events import LogEvent


@runtime_checkable
class LineSink(Protocol):
    """Accepts one formatted event line at a time."""

    def emit(self, line: str) -> None: ...


class LoggingSink:
    """Forwards event lines to a stdlib logger (default ``tasktrace.events``)."""

    def __init__(self, logger_name: str = "tasktrace.events", level: int = logging.INFO) -> None:
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def emit(self, line: str) -> None:
        self._logger.log(self._level, line)


class StreamSink:
    """Writes event lines to a text stream, stdout unless told otherwise."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def emit(self, line: str) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(line + "\n")
        stream.flush()


class MemorySink:
    """Keeps every line in arrival order. Thread-safe."""

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._lock = threading.Lock()

    def emit(self, line: str) -> None:
        with self._lock:
            self._lines.append(line)

    @property
    def lines(self) -> list[str]:
        with self._lock:
            return list(self._lines)

    @property
    def events(self) -> list[LogEvent]:
        return [LogEvent.parse(line) for line in self.lines]

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()
