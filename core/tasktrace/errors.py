"""Exceptions raised by tasktrace itself.

Failures raised by the traced work are never wrapped: they propagate to the
awaiting caller exactly as raised.
"""


class TaskTraceError(Exception):
    """Base class for errors raised by the library."""

    pass


class TaskDefinitionError(TaskTraceError, ValueError):
    """Raised when a Task is constructed with an invalid name or work function."""

    pass


class ConfigurationError(TaskTraceError, ValueError):
    """Raised when configuration values are missing or malformed."""

    pass


class LogLineError(TaskTraceError, ValueError):
    """Raised when a line does not match the event log format."""

    pass
