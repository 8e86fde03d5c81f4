"""Logging and timing helpers for the FileScope pipeline."""

from __future__ import annotations

from contextlib import contextmanager
import logging
import sys
import time
from typing import Dict, Iterator, Optional

from config import Settings

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(settings: Settings, *, force: bool = False) -> None:
    """Attach a stdout handler to the root logger at the configured level."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        handlers=[logging.StreamHandler(sys.stdout)],
        format=_LOG_FORMAT,
        force=force,
    )
    if settings.debug:
        logging.getLogger().setLevel(logging.DEBUG)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger, falling back to INFO on stdout when nothing is configured."""
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.INFO,
            handlers=[logging.StreamHandler(sys.stdout)],
            format=_LOG_FORMAT,
        )
    return logging.getLogger(name or "filescope")


@contextmanager
def stage_timer(timings: Dict[str, float], stage: str) -> Iterator[None]:
    """Record the wall time of a pipeline stage into ``timings``."""
    start = time.perf_counter()
    try:
        yield
    finally:
        timings[stage] = timings.get(stage, 0.0) + time.perf_counter() - start
