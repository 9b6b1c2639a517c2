"""Transaction: one identity shared by all work of a top-level invocation.

A Transaction wraps asynchronous work so that a Begin event is emitted
before the work starts and exactly one Finish event after it settles,
whatever the outcome. The result or exception is handed back untouched.

Usage::

    txn = Transaction(sink=StreamSink())
    total = await txn.execute(pipeline)   # binds the root Task

    # or, with a fresh transaction per call
    total = await run_transaction(pipeline)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, TypeVar

from tasktrace.config import TraceConfig, get_config
from tasktrace.errors import ConfigurationError
from tasktrace.events import LogEvent, Outcome, Phase, epoch_millis
from tasktrace.ids import next_transaction_id
from tasktrace.sinks import LineSink, LoggingSink

if TYPE_CHECKING:
    from tasktrace.task import Task

logger = logging.getLogger(__name__)

R = TypeVar("R")


class Transaction:
    """Identity-bearing context for one top-level request.

    Holds nothing mutable: the id, separator, sink and clock are fixed at
    construction, so one Transaction can be shared by any number of
    concurrently running Tasks.
    """

    def __init__(
        self,
        transaction_id: str | None = None,
        *,
        sink: LineSink | None = None,
        config: TraceConfig | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        if transaction_id is not None and not (isinstance(transaction_id, str) and transaction_id):
            raise ConfigurationError("transaction_id must be a non-empty string")
        self._config = config if config is not None else get_config()
        self._id = transaction_id if transaction_id is not None else next_transaction_id()
        self._sink = sink if sink is not None else LoggingSink()
        self._clock = clock if clock is not None else epoch_millis

    @property
    def id(self) -> str:
        return self._id

    @property
    def separator(self) -> str:
        return self._config.separator

    @property
    def config(self) -> TraceConfig:
        return self._config

    def __repr__(self) -> str:
        return f"Transaction(id={self._id!r})"

    async def run(self, qualified_name: str, work: Callable[[], Awaitable[R]]) -> R:
        """Run ``work`` between a Begin and a Finish event for ``qualified_name``."""
        with self._guard(qualified_name):
            return await work()

    async def execute(self, task: Task[R]) -> R:
        """Bind ``task`` as the root of this transaction and await its result."""
        return await task.bind(self)

    @contextmanager
    def _guard(self, qualified_name: str) -> Iterator[None]:
        self._emit(Phase.BEGIN, qualified_name)
        outcome = Outcome.FAILED
        try:
            yield
            outcome = Outcome.OK
        except asyncio.CancelledError:
            outcome = Outcome.CANCELLED
            raise
        finally:
            self._emit(Phase.FINISH, qualified_name, outcome)

    def _emit(self, phase: Phase, qualified_name: str, outcome: Outcome | None = None) -> None:
        try:
            event = LogEvent(
                timestamp_ms=self._clock(),
                phase=phase,
                qualified_name=qualified_name,
                transaction_id=self._id,
                outcome=outcome,
            )
            self._sink.emit(event.render(include_outcome=self._config.include_outcome))
        except Exception:
            logger.warning(
                "Could not emit %s event for %s",
                phase.value,
                qualified_name,
                exc_info=True,
                extra={"transaction_id": self._id, "qualified_name": qualified_name},
            )


async def run_transaction(
    task: Task[R],
    *,
    sink: LineSink | None = None,
    config: TraceConfig | None = None,
    clock: Callable[[], int] | None = None,
) -> R:
    """Create a fresh Transaction and execute ``task`` as its root."""
    txn = Transaction(sink=sink, config=config, clock=clock)
    logger.debug(
        "Starting transaction for %s",
        task.name,
        extra={"transaction_id": txn.id, "qualified_name": task.name},
    )
    return await txn.execute(task)
