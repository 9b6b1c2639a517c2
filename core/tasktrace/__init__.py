"""
tasktrace - transaction-scoped Begin/Finish logging for nested async work.

Describe work as Tasks, spawn sub-Tasks through the ``spawn`` capability,
and bind the root to a Transaction. Every unit then logs::

    [1700000000000] Begin compute → load A, transactionId=transaction1
    [1700000000300] Finish compute → load A, transactionId=transaction1

without any id being passed around by hand.
"""

from tasktrace.compose import parallel, sequence
from tasktrace.config import TraceConfig, get_config, load_config
from tasktrace.errors import (
    ConfigurationError,
    LogLineError,
    TaskDefinitionError,
    TaskTraceError,
)
from tasktrace.events import LogEvent, Outcome, Phase
from tasktrace.ids import TransactionIdGenerator, next_transaction_id
from tasktrace.sinks import LineSink, LoggingSink, MemorySink, StreamSink
from tasktrace.task import Spawn, Task, task
from tasktrace.transaction import Transaction, run_transaction

__all__ = [
    # Core
    "Task",
    "task",
    "Spawn",
    "Transaction",
    "run_transaction",
    "sequence",
    "parallel",
    # Events and sinks
    "LogEvent",
    "Phase",
    "Outcome",
    "LineSink",
    "LoggingSink",
    "StreamSink",
    "MemorySink",
    # Ids and configuration
    "TransactionIdGenerator",
    "next_transaction_id",
    "TraceConfig",
    "get_config",
    "load_config",
    # Errors
    "TaskTraceError",
    "TaskDefinitionError",
    "ConfigurationError",
    "LogLineError",
]
