# infra/logging_config.py
from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from infra.path import logs_dir
from infra.operational_support import (
    OperationalSupport,
    TraceIdLogFilter,
    get_operational_support,
)

_HANDLER_TAG = "_cpl_handler"


def setup_logging(
    log_dir: Path | None = None,
    *,
    level: int = logging.INFO,
    console: bool = True,
    support: OperationalSupport | None = None,
) -> Path:
    """
    Configure application logging.
    Logs go to the per-user data directory unless log_dir is given.
    Returns the path of the active log file.
    """
    target_dir = Path(log_dir) if log_dir is not None else logs_dir()
    target_dir.mkdir(parents=True, exist_ok=True)
    log_file = target_dir / "analysis.log"

    logger = logging.getLogger()
    logger.setLevel(level)

    # Replace only handlers installed by a previous call; host handlers stay.
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            logger.removeHandler(handler)
            handler.close()

    trace_filter = TraceIdLogFilter()

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=1_000_000,  # 1 MB per file
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.addFilter(trace_filter)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] trace=%(trace_id)s %(name)s - %(message)s")
    )
    setattr(file_handler, _HANDLER_TAG, True)
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.addFilter(trace_filter)
        console_handler.setFormatter(logging.Formatter("%(levelname)s [trace=%(trace_id)s]: %(message)s"))
        setattr(console_handler, _HANDLER_TAG, True)
        logger.addHandler(console_handler)

    logger.info("Logging initialized. Log file at %s", log_file)
    (support or get_operational_support()).emit_event(
        event_type="app.logging.initialized",
        message=f"Logging initialized at {log_file}",
        data={"log_file": str(log_file)},
    )
    return log_file
