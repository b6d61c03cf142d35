"""Logging for pacekit, built on loguru.

pacekit is a library, so its records are disabled until the embedding
application opts in with ``setup_logging`` (or ``logger.enable("pacekit")``).

Provides:
- Console and optional rotating file handlers
- Verbose/quiet overrides
- Interception of stdlib logging (asyncio reports errors raised by
  timer-fired executions through it)
- Context binding for controller name/key
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger, Record

    from pacekit.config import Settings

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{extra[name]}:{function}:{line} | {extra} | {message}"
)

_configured = False

logger.disable("pacekit")


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru, keeping the original caller."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so loguru reports the real call site
        frame = logging.currentframe()
        depth = 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _console_format(record: Record) -> str:
    # Pacer records carry a bound name; intercepted stdlib records do not
    source = "{extra[name]}" if "name" in record["extra"] else "{name}"
    return (
        "<dim>{time:HH:mm:ss.SSS}</dim> | <level>{level: <8}</level> | "
        f"<cyan>{source}</cyan> - <level>{{message}}</level>\n{{exception}}"
    )


def _effective_level(level: LogLevel, verbose: bool, quiet: bool) -> LogLevel:
    if verbose:
        return "DEBUG"
    if quiet:
        return "WARNING"
    return level


def setup_logging(
    level: LogLevel = "INFO",
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    serialize: bool = False,
) -> Logger:
    """Install pacekit's handlers and enable its records.

    Existing loguru handlers are replaced.

    Args:
        level: Console log level
        verbose: Force DEBUG (wins over quiet)
        quiet: Force WARNING
        log_file: Optional file receiving every record at DEBUG and above
        rotation: When to rotate the log file (e.g. "10 MB", "1 day")
        retention: How long to keep rotated files
        serialize: Write the file as JSON lines

    Returns:
        The configured logger
    """
    global _configured

    effective = _effective_level(level, verbose, quiet)

    logger.remove()
    logger.enable("pacekit")
    logger.add(
        sys.stderr,
        level=effective,
        format=_console_format,
        colorize=True,
        backtrace=True,
        diagnose=True,
    )

    if log_file:
        logger.add(
            log_file,
            level="DEBUG",
            format=FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            compression="gz",
            serialize=serialize,
            filter=lambda record: "name" in record["extra"],
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    # asyncio's own debug output is only wanted when tracing
    asyncio_level = logging.DEBUG if effective == "TRACE" else logging.WARNING
    logging.getLogger("asyncio").setLevel(asyncio_level)

    _configured = True
    return logger


def setup_logging_from_settings(settings: Settings | None = None, **overrides: Any) -> Logger:
    """Configure logging from Settings; keyword overrides win.

    Usage:
        setup_logging_from_settings(verbose=True)
    """
    from pacekit.config import get_settings

    settings = settings or get_settings()
    file_config = settings.logging

    kwargs: dict[str, Any] = {
        "log_file": file_config.log_file,
        "rotation": file_config.rotation,
        "retention": file_config.retention,
        "serialize": file_config.serialize,
        **overrides,
    }
    return setup_logging(settings.log_level, **kwargs)


def get_logger(name: str) -> Logger:
    """Logger with ``name`` bound as context."""
    return logger.bind(name=name)


def bind_pacer(pacer: str, key: str | None = None) -> Logger:
    """Logger bound to one controller.

    Args:
        pacer: Controller class name (e.g. "AsyncDebouncer")
        key: Optional identifier from the controller's options

    Returns:
        Logger whose records carry ``pacer`` and ``key``
    """
    return logger.bind(name=f"pacekit.{pacer}", pacer=pacer, key=key)


class LogContext:
    """Bind extra context to every record logged inside the block.

    Usage:
        with LogContext(request_id="abc"):
            await limiter.maybe_execute(url)
    """

    def __init__(self, **context: Any) -> None:
        self._context = context
        self._scope: Any = None

    def __enter__(self) -> Logger:
        self._scope = logger.contextualize(**self._context)
        self._scope.__enter__()
        return logger

    def __exit__(self, *exc_info: Any) -> None:
        if self._scope is not None:
            self._scope.__exit__(*exc_info)
            self._scope = None


def is_configured() -> bool:
    """Whether setup_logging has run since the last reset."""
    return _configured


def reset_logging() -> None:
    """Remove every handler and disable pacekit records again (for tests)."""
    global _configured
    logger.remove()
    logger.disable("pacekit")
    _configured = False
