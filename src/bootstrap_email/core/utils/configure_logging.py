# src/bootstrap_email/core/utils/configure_logging.py
import logging
import sys
from typing import Dict, Optional, Union

from tqdm import tqdm

Level = Union[str, int]

DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"


class TqdmLogHandler(logging.Handler):
    """Writes records through `tqdm.write()` so warnings don't break the progress bar of a parallel run."""

    def emit(self, record):
        try:
            tqdm.write(self.format(record), file=sys.stderr)
        except Exception:
            self.handleError(record)


def to_level(level: Level, fallback: int = logging.INFO) -> int:
    """'warning' -> logging.WARNING; unknown names give `fallback`."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else fallback


def configure_logger(
        level: Level = "INFO",
        silenced_loggers: Optional[Dict[str, Level]] = None,
        fmt: str = DEFAULT_FORMAT,
) -> logging.Handler:
    """
    Routes all records through a single tqdm-aware handler on the root logger.
    `silenced_loggers` maps noisy loggers (cssutils logs as "CSSUTILS") to the level they still report.
    """
    handler = TqdmLogHandler()
    handler.setFormatter(logging.Formatter(fmt))

    root = logging.getLogger()
    root.setLevel(to_level(level))
    root.handlers[:] = [handler]

    for name, silenced_level in (silenced_loggers or {}).items():
        logging.getLogger(name).setLevel(to_level(silenced_level, logging.CRITICAL))
    return handler
