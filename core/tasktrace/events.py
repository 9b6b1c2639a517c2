"""Begin/Finish log events and their one-line text format.

Line format::

    [<epoch-milliseconds>] <Begin|Finish> <qualifiedName>, transactionId=<id>

Finish lines may carry an ``, outcome=<ok|failed|cancelled>`` suffix when
outcome reporting is switched on.
"""

from __future__ import annotations

import re
import time
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from tasktrace.errors import LogLineError

_LINE_PATTERN = re.compile(
    r"^\[(?P<timestamp>\d+)\] (?P<phase>Begin|Finish) (?P<name>.+), "
    r"transactionId=(?P<transaction_id>\S+?)(?:, outcome=(?P<outcome>ok|failed|cancelled))?$"
)


def epoch_millis() -> int:
    """Wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


class Phase(StrEnum):
    BEGIN = "Begin"
    FINISH = "Finish"


class Outcome(StrEnum):
    """How the work behind a Finish event settled."""

    OK = "ok"
    FAILED = "failed"
    CANCELLED = "cancelled"


class LogEvent(BaseModel):
    """One Begin or Finish event of a bound Task."""

    model_config = ConfigDict(frozen=True)

    timestamp_ms: int
    phase: Phase
    qualified_name: str
    transaction_id: str
    outcome: Outcome | None = None  # Finish events only

    def render(self, include_outcome: bool = False) -> str:
        line = (
            f"[{self.timestamp_ms}] {self.phase.value} {self.qualified_name}, "
            f"transactionId={self.transaction_id}"
        )
        if include_outcome and self.phase is Phase.FINISH and self.outcome is not None:
            line += f", outcome={self.outcome.value}"
        return line

    @classmethod
    def parse(cls, line: str) -> LogEvent:
        """Parse a rendered line back into a LogEvent."""
        match = _LINE_PATTERN.match(line.rstrip("\n"))
        if match is None:
            raise LogLineError(f"Not an event log line: {line!r}")
        outcome = match.group("outcome")
        return cls(
            timestamp_ms=int(match.group("timestamp")),
            phase=Phase(match.group("phase")),
            qualified_name=match.group("name"),
            transaction_id=match.group("transaction_id"),
            outcome=Outcome(outcome) if outcome else None,
        )
