"""Logging configuration for tidydraws.

Library modules log through ``structlog.get_logger(__name__)`` at debug
level and never configure handlers themselves. Applications call
setup_logging() once to get human-readable console output and,
optionally, a JSON log file.
"""

import logging
import sys
from pathlib import Path

import structlog

from tidydraws.config.schema import LoggingConfig


def setup_logging(
    verbose: bool = False,
    log_file: Path | str | None = None,
) -> None:
    """Configure structlog on top of the standard logging module.

    Args:
        verbose: If True, console shows DEBUG level (expansion sizes, join
            keys, summary shapes). If False (default), INFO level.
        log_file: Optional path to a JSON log file, always at DEBUG level.

    Example:
        >>> setup_logging(verbose=True)
        >>> setup_logging(log_file="logs/tidydraws.log.json")

    Note:
        This reconfigures the root logger and structlog globally.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        )
    )
    root.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
            )
        )
        root.addHandler(file_handler)


def setup_logging_from_config(config: LoggingConfig) -> None:
    """setup_logging() driven by the ``logging`` section of EngineConfig."""
    setup_logging(verbose=config.verbose, log_file=config.log_file)
