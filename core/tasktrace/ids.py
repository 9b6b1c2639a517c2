"""Transaction id generation.

Ids are ``<prefix><n>`` with a process-wide counter, so two top-level
requests started concurrently (even from different threads) never share one.
"""

from __future__ import annotations

import itertools
import threading

from tasktrace.config import get_config
from tasktrace.errors import ConfigurationError


class TransactionIdGenerator:
    """Hands out ``transaction1``, ``transaction2``, ... Thread-safe."""

    def __init__(self, prefix: str = "transaction", start: int = 1) -> None:
        if not isinstance(prefix, str) or not prefix:
            raise ConfigurationError("transaction id prefix must be a non-empty string")
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    @property
    def prefix(self) -> str:
        return self._prefix

    def next(self) -> str:
        with self._lock:
            n = next(self._counter)
        return f"{self._prefix}{n}"


_default_generator: TransactionIdGenerator | None = None
_default_lock = threading.Lock()


def next_transaction_id() -> str:
    """Draw an id from the process-wide generator, creating it on first use."""
    global _default_generator
    with _default_lock:
        if _default_generator is None:
            _default_generator = TransactionIdGenerator(prefix=get_config().id_prefix)
        generator = _default_generator
    return generator.next()


def reset_default_generator() -> None:
    """Forget the process-wide generator so numbering restarts (tests only)."""
    global _default_generator
    with _default_lock:
        _default_generator = None
