"""
LS-8 Emulator — Logging Setup

Console output goes through rich's RichHandler; an optional log directory
adds a timestamped file handler that captures everything at DEBUG.
Log files: ``<log_dir>/<name>_YYYYMMDD_HHMMSS.log``
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from rich.console import Console as RichConsole
from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    name: str = "ls8_emulator",
    level: int = logging.DEBUG,
    console_level: int = logging.WARNING,
    log_dir: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """Configure and return the package logger.

    Calling it again replaces the handlers, so the CLI can be invoked
    several times in one process (tests) without duplicating output.
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)

    # ── Console handler: stderr, so PRN output on stdout stays clean ──
    ch = RichHandler(
        level=console_level,
        console=RichConsole(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    logger.addHandler(ch)

    # ── File handler: captures everything (DEBUG+) ──
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"{name}_{ts}.log"
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(fh)
        logger.info("Log file: %s", log_file)

    return logger
