"""Structured logging for the resolver.

Log entries go to stderr through structlog, rendered as JSON (key/value and
console output in test mode). stdout is left to the CLI, which prints its
results there. The ``georesolver`` logger does not propagate, so host
applications that configure the root logger do not get duplicate entries.
"""

import sys
from logging import (
    INFO,
    Handler,
    Logger,
    StreamHandler,
    getLevelNamesMapping,
    getLogger,
)
from typing import Any, cast

import structlog
from structlog import dev, processors, stdlib
from structlog.processors import JSONRenderer, TimeStamper, dict_tracebacks
from structlog.stdlib import BoundLogger

PACKAGE_LOGGER = "georesolver"


def resolve_level(level: str) -> int:
    """Map a level name such as ``"debug"`` to its numeric value, INFO if unknown."""
    return getLevelNamesMapping().get(level.upper(), INFO)


def configure_logging(testing: bool = False, level: str = "info") -> None:
    """Configure structured logging for the resolver.

    Args:
        testing: Whether the application is running in test mode
        level: Log level name (debug, info, warning, error, critical)
    """
    log_level = resolve_level(level)

    root_logger: Logger = getLogger()
    root_logger.setLevel(log_level)

    package_logger: Logger = getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(log_level)

    handler: Handler = StreamHandler(sys.stderr)
    handler.setLevel(log_level)

    shared_processors = [
        stdlib.add_logger_name,
        stdlib.add_log_level,
        stdlib.PositionalArgumentsFormatter(),
        TimeStamper(fmt="%Y-%m-%d %H:%M:%S.%f"),
        dict_tracebacks,
    ]

    structlog.configure(
        processors=[
            stdlib.filter_by_level,
            *shared_processors,
            processors.format_exc_info,
            JSONRenderer() if not testing else processors.KeyValueRenderer(),
        ],
        context_class=dict,
        logger_factory=stdlib.LoggerFactory(),
        wrapper_class=stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = stdlib.ProcessorFormatter(
        processor=processors.JSONRenderer() if not testing else dev.ConsoleRenderer(),
        foreign_pre_chain=shared_processors,
    )
    handler.setFormatter(formatter)

    # Repeated calls must not stack handlers
    root_logger.handlers = [handler]
    package_logger.handlers = [handler]
    package_logger.propagate = False


def get_logger(name: str | None = None, **initial_values: Any) -> BoundLogger:
    """Get a configured logger instance.

    Binding is deferred until the first log call, so module-level loggers
    pick up the configuration installed before their first use.

    Args:
        name: Optional stdlib logger name, usually ``__name__``
        **initial_values: Context bound to every entry, e.g. ``module``

    Returns:
        A structured logger instance.
    """
    return cast(BoundLogger, structlog.get_logger(name, **initial_values))


def redact_address(address: str, keep: int = 50) -> str:
    """Shorten a free-text address before it goes into a log line.

    Addresses are user input and may identify a person's home, so only the
    first ``keep`` characters are logged, followed by ``...`` when cut.

    Args:
        address: Sanitized address or destination name
        keep: Number of leading characters to retain

    Returns:
        The address itself when short enough, otherwise its truncated prefix.
    """
    if len(address) <= keep:
        return address
    return f"{address[:keep]}..."
