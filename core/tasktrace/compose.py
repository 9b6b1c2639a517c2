"""Sequential and parallel composition of sub-Tasks."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Literal

from tasktrace.task import Spawn, Task

logger = logging.getLogger(__name__)

FailurePolicy = Literal["raise_first", "raise_group"]


async def sequence(spawn: Spawn, *tasks: Task[Any]) -> list[Any]:
    """Run ``tasks`` one after another; the next starts only once the previous finished.

    The first failure propagates and the remaining tasks are never spawned.
    """
    results = []
    for t in tasks:
        results.append(await spawn(t))
    return results


async def parallel(
    spawn: Spawn, *tasks: Task[Any], on_failure: FailurePolicy = "raise_first"
) -> list[Any]:
    """Start all ``tasks`` at once and wait until every one has settled.

    Results come back in spawn order. Siblings of a failed task are still
    awaited to completion before anything is raised:

    - ``"raise_first"`` re-raises the first failure in spawn order
    - ``"raise_group"`` raises an exception group holding every failure
    """
    if on_failure not in ("raise_first", "raise_group"):
        raise ValueError(f"Unknown failure policy: {on_failure!r}")

    running = [spawn(t) for t in tasks]
    results = await asyncio.gather(*running, return_exceptions=True)

    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        failed_names = [t.name for t, r in zip(tasks, results) if isinstance(r, BaseException)]
        logger.debug("Parallel tasks failed: %s", failed_names)
        if on_failure == "raise_group":
            raise BaseExceptionGroup(f"{len(failures)} parallel task(s) failed", failures)
        raise failures[0]
    return results
