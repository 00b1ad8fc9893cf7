"""
Logging setup shared by the API, the analytics service and the snapshot CLI.

Every logger writes ``time | level | name | message`` lines to stdout. Set
LOG_TO_FILE=true to also append to ``logs/<YYYYMMDD>_revenue_pulse.log``.
LOG_LEVEL picks the threshold (INFO when unset).

Usage:
    from scripts.lib.logger import setup_logger
    logger = setup_logger("revenue_analytics")
"""
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOG_DIR = PROJECT_ROOT / "logs"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _daily_log_file(log_dir: Path) -> Path:
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"{datetime.now():%Y%m%d}_revenue_pulse.log"


def setup_logger(
    name: str,
    level: str = None,
    log_to_file: bool = None,
    log_dir: Path = None,
) -> logging.Logger:
    """
    Return the named logger, attaching handlers on first use only.

    Args:
        name: Logger name, usually the module's short name.
        level: Threshold name. Falls back to LOG_LEVEL, then INFO.
        log_to_file: Add the daily file handler. Falls back to LOG_TO_FILE.
        log_dir: Where daily files go (default: <project>/logs).
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logger.setLevel(getattr(logging, level, logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler(sys.stdout)]
    if _env_flag("LOG_TO_FILE") if log_to_file is None else log_to_file:
        log_file = _daily_log_file(Path(log_dir) if log_dir else LOG_DIR)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
