"""Structured logging for the onboarding run, built on structlog.

Scheduled runs set LOG_JSON=true and get one JSON object per line; an
operator running the script by hand gets the console renderer. Every module
logs through get_logger(), and every event passes redact_secrets() before it
is rendered, so a password or token handed to a logger never reaches the
output.
"""

import logging
import sys
from typing import Any

import structlog

REDACTED = "***"

SECRET_KEYS = frozenset({
    "password",
    "client_secret",
    "azure_client_secret",
    "access_token",
    "token",
})


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: REDACTED if str(k).lower() in SECRET_KEYS else _redact(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_redact(v) for v in value)
    return value


def redact_secrets(logger: Any, method_name: str, event_dict: dict) -> dict:
    """structlog processor: mask secret-named keys, including nested ones."""
    return _redact(event_dict)


def setup_logging(json_output: bool = False, log_level: str = "INFO") -> None:
    """Configure structlog for the run.

    Args:
        json_output: If True, output JSON. If False, console format.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        redact_secrets,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if json_output:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # requests/urllib3 log through stdlib logging; send them to stdout too
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )
    logging.getLogger().handlers = []
    logging.getLogger().addHandler(logging.StreamHandler(sys.stdout))


def get_logger(name: str) -> structlog.BoundLogger:
    """Return the structlog logger for a module (pass __name__)."""
    return structlog.get_logger(name)
