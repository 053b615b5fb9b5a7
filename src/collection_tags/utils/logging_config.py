"""
Logging configuration for collection tags.

The CLI configures the root logger once: console output always, plus a
dated rotating log file when file logging is requested. Modules log through
``logging.getLogger(__name__)``.
"""

from datetime import datetime
import logging
import logging.handlers
from pathlib import Path
import sys
import time
from typing import Any

# -------------------- Configuration --------------------


LOG_DIR = Path.home() / ".cache" / "collection-tags" / "logs"

LOG_RETENTION_DAYS = 3

CONSOLE_FORMAT = "%(name)s %(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level(level_name: str | None = None, debug: bool = False) -> int:
    """
    Resolve a configured level name to a logging constant.

    An explicit level name wins; otherwise ``debug`` selects DEBUG, and
    INFO is the fallback.
    """
    level = LEVELS.get((level_name or "").strip().upper())
    if level is not None:
        return level
    return logging.DEBUG if debug else logging.INFO


# -------------------- Log Files --------------------


def get_log_file_path() -> Path:
    """Get today's log file path, creating the log directory if needed."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    today = datetime.now().strftime("%Y-%m-%d")
    return LOG_DIR / f"collection-tags-{today}.log"


def cleanup_old_logs() -> None:
    """Remove log files older than LOG_RETENTION_DAYS."""
    if not LOG_DIR.exists():
        return

    cutoff = time.time() - (LOG_RETENTION_DAYS * 24 * 60 * 60)

    try:
        for log_file in LOG_DIR.glob("collection-tags-*.log"):
            if log_file.stat().st_mtime < cutoff:
                log_file.unlink()
                logging.getLogger(__name__).info(f"Removed old log file: {log_file}")
    except OSError as e:
        logging.getLogger(__name__).warning(f"Failed to cleanup old logs: {e}")


# -------------------- Task Logging --------------------


def log_task_start(logger: logging.Logger, task_name: str, **metadata: Any) -> None:
    """
    Log task start with structured metadata.

    Args:
        logger: Logger instance
        task_name: Name of the task
        **metadata: Additional task metadata
    """
    logger.info("=" * 60)
    logger.info(f"Task Started: {task_name}")
    logger.info(f"Start Time: {datetime.now().strftime(DATE_FORMAT)}")

    if metadata:
        logger.info("Task Metadata:")
        for key, value in metadata.items():
            logger.info(f"  {key}: {value}")

    logger.info("=" * 60)


def log_task_end(
    logger: logging.Logger,
    task_name: str,
    items_processed: int = 0,
    errors: list[str] | None = None,
    **metadata: Any,
) -> None:
    """
    Log task completion with summary statistics.

    Only the first ten errors are listed.
    """
    logger.info("=" * 60)
    logger.info(f"Task Completed: {task_name}")
    logger.info(f"Items Processed: {items_processed}")

    if errors:
        logger.warning(f"Errors Encountered: {len(errors)}")
        for i, error in enumerate(errors[:10], 1):
            logger.warning(f"  {i}. {error}")
        if len(errors) > 10:
            logger.warning(f"  ... and {len(errors) - 10} more errors")

    for key, value in metadata.items():
        logger.info(f"  {key}: {value}")

    logger.info("=" * 60)


def log_operation(
    logger: logging.Logger,
    operation: str,
    item_id: str,
    status: str,
    **details: Any,
) -> None:
    """
    Log an individual item operation with consistent format.

    ``success`` is logged at INFO, ``error`` at ERROR, anything else at DEBUG.
    """
    msg = f"[{operation.upper()}] {item_id} - {status}"

    if details:
        detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
        msg = f"{msg} ({detail_str})"

    if status == "success":
        logger.info(msg)
    elif status == "error":
        logger.error(msg)
    else:
        logger.debug(msg)


# -------------------- Initialization --------------------


def initialize_logging(level: int = logging.INFO, log_file: bool = False) -> Path | None:
    """
    Configure the root logger. Called once at application startup.

    Args:
        level: Root log level
        log_file: Also write to a rotating file under LOG_DIR and prune
            files older than LOG_RETENTION_DAYS

    Returns:
        The log file path when file logging is enabled
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    path = None
    if log_file:
        cleanup_old_logs()
        path = get_log_file_path()
        file_handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
        root_logger.addHandler(file_handler)

    logging.getLogger(__name__).debug(
        f"Logging initialized. Level: {logging.getLevelName(level)}, file: {path}"
    )
    return path
