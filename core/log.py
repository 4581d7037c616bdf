"""
Logging setup on loguru. Modules log through ``from loguru import logger``;
this module only decides where the records go.
"""

from __future__ import annotations

import os
import sys
from functools import wraps
from pathlib import Path
from time import perf_counter
from typing import Callable, Optional

from loguru import logger

_CONFIGURED = False

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} | {message}"


def configure_logging(
    level: Optional[str] = None,
    *,
    log_file: Optional[str | Path] = None,
    rotation: str = "1 day",
    retention: str = "30 days",
    force: bool = False,
) -> None:
    """
    Install a stderr sink (and optionally a rotating file sink). Runs once unless ``force``.

    Level defaults to $MORTGAGE_LOG_LEVEL, then INFO.
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    level = (level or os.environ.get("MORTGAGE_LOG_LEVEL") or "INFO").upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level=level,
            format=LOG_FORMAT,
            rotation=rotation,
            retention=retention,
            backtrace=True,
            diagnose=False,
        )
    _CONFIGURED = True
    logger.debug("Logging configured (level={})", level)


def log_timing(label: str) -> Callable:
    """Log how long the wrapped call took; failures are logged and re-raised."""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            start = perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                logger.error("[{}] failed after {:.3f}s: {!r}", label, perf_counter() - start, exc)
                raise
            logger.info("[{}] done in {:.3f}s", label, perf_counter() - start)
            return result

        return wrapper

    return decorator
