"""Shared tasktrace configuration utilities.

Centralises reading of ~/.tasktrace/configuration.json so that the
transaction layer, the id generator and the CLI agree on one separator
and one id prefix for the whole process.
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from functools import lru_cache
from pathlib import Path
from typing import Any

from tasktrace.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = " → "
DEFAULT_ID_PREFIX = "transaction"
LOG_FORMATS = ("json", "human", "auto")

# ---------------------------------------------------------------------------
# Low-level config file access
# ---------------------------------------------------------------------------

CONFIG_FILE = Path.home() / ".tasktrace" / "configuration.json"


def get_tasktrace_config() -> dict[str, Any]:
    """Load raw configuration from ~/.tasktrace/configuration.json."""
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE, encoding="utf-8-sig") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# TraceConfig
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TraceConfig:
    """Process-wide tracing configuration."""

    separator: str = DEFAULT_SEPARATOR
    id_prefix: str = DEFAULT_ID_PREFIX
    include_outcome: bool = False  # append ", outcome=<ok|failed|cancelled>" to Finish lines
    log_level: str = "INFO"
    log_format: str = "auto"  # "json", "human", or "auto"

    def __post_init__(self) -> None:
        if not isinstance(self.separator, str) or not self.separator:
            raise ConfigurationError("separator must be a non-empty string")
        if not isinstance(self.id_prefix, str) or not self.id_prefix:
            raise ConfigurationError("id_prefix must be a non-empty string")
        if not isinstance(self.include_outcome, bool):
            raise ConfigurationError("include_outcome must be a boolean")
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"log_format must be one of {', '.join(LOG_FORMATS)}, got {self.log_format!r}"
            )


def load_config() -> TraceConfig:
    """Build a TraceConfig from the config file, then environment overrides.

    Environment variables:
        TASKTRACE_SEPARATOR, TASKTRACE_ID_PREFIX, TASKTRACE_INCLUDE_OUTCOME,
        TASKTRACE_LOG_LEVEL

    The generic LOG_FORMAT variable is left to configure_logging(); a
    log_format in the file that is not json, human or auto is ignored so
    that a logging setting never stops transactions from being created.
    """
    known = {f.name for f in fields(TraceConfig)}
    values: dict[str, Any] = {
        key: value for key, value in get_tasktrace_config().items() if key in known
    }

    if "TASKTRACE_SEPARATOR" in os.environ:
        values["separator"] = os.environ["TASKTRACE_SEPARATOR"]
    if "TASKTRACE_ID_PREFIX" in os.environ:
        values["id_prefix"] = os.environ["TASKTRACE_ID_PREFIX"]
    if "TASKTRACE_INCLUDE_OUTCOME" in os.environ:
        values["include_outcome"] = _env_flag(os.environ["TASKTRACE_INCLUDE_OUTCOME"])
    if "TASKTRACE_LOG_LEVEL" in os.environ:
        values["log_level"] = os.environ["TASKTRACE_LOG_LEVEL"].upper()
    if isinstance(values.get("include_outcome"), str):
        values["include_outcome"] = _env_flag(values["include_outcome"])
    if values.get("log_format") not in (None, *LOG_FORMATS):
        logger.warning(
            "Ignoring unknown log_format %r in %s", values.pop("log_format"), CONFIG_FILE
        )

    return TraceConfig(**values)


@lru_cache(maxsize=1)
def get_config() -> TraceConfig:
    """Return the process configuration, loaded once.

    Call ``get_config.cache_clear()`` to force a reload (tests only).
    """
    return load_config()
