"""Logging utilities for DepBatcher."""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

LOG_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
    "critical": "red bold",
    "debug": "dim",
})


class DepBatcherLogger:
    """Logger with rich console formatting."""

    def __init__(self, name: str, level: Optional[int] = None) -> None:
        # Without an explicit level the "dep_batcher" parent logger decides
        self.logger = logging.getLogger(f"dep_batcher.{name}")
        if level is not None:
            self.logger.setLevel(level)
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Attach a single rich handler writing to stderr."""
        if any(isinstance(h, RichHandler) for h in self.logger.handlers):
            return

        handler = RichHandler(
            console=Console(theme=LOG_THEME, stderr=True),
            show_time=True,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter(fmt="%(name)s: %(message)s", datefmt="[%X]"))

        self.logger.addHandler(handler)
        self.logger.propagate = False

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log info message."""
        self.logger.info(msg, extra=kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log warning message."""
        self.logger.warning(msg, extra=kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log error message."""
        self.logger.error(msg, extra=kwargs)

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log debug message."""
        self.logger.debug(msg, extra=kwargs)


def setup_logging(
    level: int = logging.WARNING,
    log_file: Optional[Path] = None,
    verbose: bool = False
) -> None:
    """Setup logging configuration for DepBatcher.

    Args:
        level: Logging level for DepBatcher loggers
        log_file: Optional log file path
        verbose: Enable debug logging
    """
    if verbose:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
            *([logging.FileHandler(log_file)] if log_file else [])
        ]
    )

    # Component loggers are children of this one and inherit its level
    logging.getLogger("dep_batcher").setLevel(level)


def get_logger(name: str, level: Optional[int] = None) -> DepBatcherLogger:
    """Get a DepBatcher logger instance.

    Args:
        name: Component name
        level: Optional level overriding the inherited "dep_batcher" level

    Returns:
        Configured logger instance
    """
    return DepBatcherLogger(name, level)
