"""Logging configuration, error reporting and progress helpers."""

from __future__ import annotations

from collections.abc import Callable
import logging
import time
from typing import Any, Optional, TypeVar

from regnet.errors import RegnetError

DEFAULT_LOGGER_NAME = "regnet"
DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

PROGRESS_STEPS = 40

_T = TypeVar("_T")


def configure_logging(
    level: int = DEFAULT_LOG_LEVEL,
    *,
    logger_name: str = DEFAULT_LOGGER_NAME,
    fmt: str = DEFAULT_LOG_FORMAT,
    force: bool = False,
) -> logging.Logger:
    logging.basicConfig(level=level, format=fmt, force=force)
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    return logger


def get_user_message(exc: BaseException) -> str:
    if isinstance(exc, RegnetError):
        return exc.user_message
    return f"Unexpected error: {exc}"


def log_exception(
    logger: logging.Logger,
    exc: BaseException,
    *,
    show_traceback: bool = False,
) -> str:
    user_message = get_user_message(exc)
    logger.error(user_message)
    if show_traceback:
        logger.error("Detailed traceback:", exc_info=exc)
    else:
        logger.debug("Detailed traceback:", exc_info=exc)
    return user_message


def run_with_error_handling(
    func: Callable[..., _T],
    *args: Any,
    logger: logging.Logger,
    show_traceback: bool = False,
    **kwargs: Any,
) -> _T:
    try:
        return func(*args, **kwargs)
    except Exception as exc:
        log_exception(logger, exc, show_traceback=show_traceback)
        raise


def format_duration(seconds: float) -> str:
    """Format a duration as ``"<h>h <m>min <s>s <ms>ms"``."""
    millis = max(0, int(round(seconds * 1000.0)))
    hours, millis = divmod(millis, 3_600_000)
    minutes, millis = divmod(millis, 60_000)
    secs, millis = divmod(millis, 1000)
    return f"{hours}h {minutes}min {secs}s {millis}ms"


class ProgressMonitor:
    """Log the progress of a long loop at roughly ``PROGRESS_STEPS`` checkpoints."""

    def __init__(
        self,
        total: int,
        *,
        label: str = "progress",
        logger: Optional[logging.Logger] = None,
        level: int = logging.DEBUG,
    ) -> None:
        self.total = max(0, int(total))
        self.label = label
        self.logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.level = level
        self.freq = max(1, self.total // PROGRESS_STEPS)
        self._start = time.perf_counter()

    def elapsed(self) -> float:
        return time.perf_counter() - self._start

    def iteration(self, index: int) -> None:
        done = index + 1
        if done % self.freq != 0 and done != self.total:
            return
        if not self.logger.isEnabledFor(self.level):
            return
        elapsed = self.elapsed()
        estimated = elapsed * self.total / done if done else 0.0
        self.logger.log(
            self.level,
            "%s: %d/%d (elapsed %s, estimated total %s)",
            self.label,
            done,
            self.total,
            format_duration(elapsed),
            format_duration(estimated),
        )

    def done(self) -> float:
        elapsed = self.elapsed()
        self.logger.log(self.level, "%s: done in %s", self.label, format_duration(elapsed))
        return elapsed


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_LOG_FORMAT",
    "ProgressMonitor",
    "configure_logging",
    "format_duration",
    "get_user_message",
    "log_exception",
    "run_with_error_handling",
]
