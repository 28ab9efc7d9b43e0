"""Structured logging for spec-grep.

Library modules log through the standard ``logging`` module; this module
routes those records through structlog so the output is either a readable
console stream (interactive use) or JSON lines (CI runs).

Example usage:
    from specgrep.core.logging import configure_logging, bind_context

    configure_logging(level="DEBUG")

    logger = logging.getLogger(__name__)
    with bind_context(spec_file="cypress/e2e/login.cy.js"):
        logger.debug("extracting tags")  # includes spec_file
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from specgrep import __version__

# Context variable for additional bound context
_bound_context: ContextVar[dict[str, Any]] = ContextVar("bound_context", default={})


class bind_context:
    """Context manager to bind additional context to logs.

    Example:
        with bind_context(spec_file="login.spec.yaml"):
            logger.info("scanning")  # Includes spec_file
    """

    def __init__(self, **kwargs: Any) -> None:
        self.ctx = kwargs
        self._token: Any = None

    def __enter__(self) -> "bind_context":
        """Enter the context and bind the fields."""
        new_context = {**_bound_context.get(), **self.ctx}
        self._token = _bound_context.set(new_context)
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit the context and restore previous bindings."""
        _bound_context.reset(self._token)


def get_bound_context() -> dict[str, Any]:
    """Return a copy of the fields currently bound with ``bind_context``."""
    return dict(_bound_context.get())


# =============================================================================
# Structlog Processors
# =============================================================================


def add_bound_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add bound context variables to log events."""
    for key, value in _bound_context.get().items():
        event_dict.setdefault(key, value)
    return event_dict


def add_common_fields(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add the spec-grep version to every event."""
    event_dict.setdefault("specgrep_version", __version__)
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        add_bound_context,
        add_common_fields,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.format_exc_info,
    ]


# =============================================================================
# Logging Configuration
# =============================================================================


def configure_logging(
    level: str | int = logging.INFO,
    json_output: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Global log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Use JSON output format. If None, auto-detects:
                     True if stderr is not a TTY, False otherwise
        log_file: Optional file path for log output
    """
    if json_output is None:
        json_output = not sys.stderr.isatty()

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    shared_processors = _shared_processors()

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if json_output:
        formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=shared_processors,
        )
    else:
        formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=True),
            foreign_pre_chain=shared_processors,
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stdout carries the selection output of the CLI
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def reset_logging() -> None:
    """Reset logging configuration to defaults.

    Used by tests to get a clean state between cases.
    """
    _bound_context.set({})
    structlog.reset_defaults()

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
