"""Sample workload: two loads in parallel, then a computation on their results.

::

    compute
    ├── load A     0.3 s ┐ parallel
    ├── load B     0.6 s ┘
    └── combine    1.0 s   after both loads

Total wall time is about 1.6 s (not 1.9 s) at ``scale=1.0``.
"""

from __future__ import annotations

import asyncio

from tasktrace.compose import parallel
from tasktrace.task import Spawn, Task

LOAD_A_SECONDS = 0.3
LOAD_B_SECONDS = 0.6
COMBINE_SECONDS = 1.0
STEP_NAMES = ("load A", "load B", "combine")


class WorkloadError(RuntimeError):
    """Raised by a demo workload asked to fail."""

    pass


async def _sleep_then(value: int, delay: float, fail: bool = False) -> int:
    await asyncio.sleep(delay)
    if fail:
        raise WorkloadError(f"workload failed after {delay:.3f}s")
    return value


def load(name: str, value: int, delay: float, fail: bool = False) -> Task[int]:
    """Leaf task standing in for a data load."""
    return Task.leaf(name, _sleep_then, value, delay, fail)


def build_pipeline(
    scale: float = 1.0,
    fail: str | None = None,
    a: int = 40,
    b: int = 2,
) -> Task[int]:
    """Root task ``compute``; ``fail`` names a step that should raise."""
    if scale < 0:
        raise ValueError("scale must not be negative")

    load_a = load("load A", a, LOAD_A_SECONDS * scale, fail == "load A")
    load_b = load("load B", b, LOAD_B_SECONDS * scale, fail == "load B")

    async def compute(spawn: Spawn) -> int:
        value_a, value_b = await parallel(spawn, load_a, load_b)
        combine = Task.leaf(
            "combine", _sleep_then, value_a + value_b, COMBINE_SECONDS * scale, fail == "combine"
        )
        return await spawn(combine)

    return Task("compute", compute)

