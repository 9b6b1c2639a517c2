"""Task: a reusable, named descriptor of asynchronous work.

A Task does nothing until it is bound to a Transaction. Binding computes the
task's qualified name, hands its work a ``spawn`` capability and runs it
inside the Transaction's Begin/Finish guard. Whatever the work spawns is
bound to the same Transaction one level deeper, so the transaction id and
the name chain reach every descendant without being passed by hand::

    @task("compute")
    async def compute(spawn: Spawn) -> int:
        a, b = spawn(load_a), spawn(load_b)   # run concurrently
        total = await a + await b
        return await spawn(Task.leaf("store", save, total))   # runs afterwards

    await Transaction().execute(compute)
    # Begin compute / Begin compute → load A / Begin compute → load B / ...
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar

from tasktrace.errors import TaskDefinitionError

if TYPE_CHECKING:
    from tasktrace.transaction import Transaction

R = TypeVar("R")
T = TypeVar("T")


class Spawn(Protocol):
    """Capability handed to a Task's work for launching sub-Tasks.

    Calling it starts the sub-Task immediately and returns an
    ``asyncio.Task`` to await for its result.
    """

    def __call__(self, task: Task[T], /) -> asyncio.Task[T]: ...


WorkFn = Callable[[Spawn], Awaitable[R]]


@dataclass(frozen=True)
class Task(Generic[R]):
    """Immutable (name, work) pair. Safe to bind any number of times.

    The work function is kept private: it only ever runs through ``bind``,
    inside a Transaction.
    """

    name: str
    _work: WorkFn[R]

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise TaskDefinitionError("Task name must be a non-empty string")
        if not callable(self._work):
            raise TaskDefinitionError(f"Task {self.name!r}: work must be callable")

    async def bind(self, transaction: Transaction, prefix: str = "") -> R:
        """Run this task under ``transaction`` with ``prefix`` prepended to its name."""
        qualified_name = prefix + self.name
        spawn = ExecutionContext(transaction, qualified_name)
        return await transaction.run(qualified_name, lambda: self._work(spawn))

    @classmethod
    def leaf(
        cls, name: str, fn: Callable[..., Awaitable[R]], *args: Any, **kwargs: Any
    ) -> Task[R]:
        """Wrap an opaque async call as a Task that spawns nothing."""

        async def work(_spawn: Spawn) -> R:
            return await fn(*args, **kwargs)

        return cls(name, work)


def task(name: str | None = None) -> Callable[[WorkFn[R]], Task[R]]:
    """Decorator form: ``@task("name")`` over ``async def work(spawn)``."""

    def decorator(work: WorkFn[R]) -> Task[R]:
        return Task(name if name is not None else work.__name__, work)

    return decorator


@dataclass(frozen=True)
class ExecutionContext:
    """A bound task's transaction and qualified name; the concrete Spawn."""

    transaction: Transaction
    qualified_name: str

    def __call__(self, task: Task[T], /) -> asyncio.Task[T]:
        prefix = self.qualified_name + self.transaction.separator
        return asyncio.create_task(
            task.bind(self.transaction, prefix),
            name=prefix + task.name,
        )
