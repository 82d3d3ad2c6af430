# src/config/logging_config.py

"""Per-run logging for gold_watch.

Every monitor run writes to its own file under ``logs/`` named after the
start time (``logs/run_20260128_123000.log``). The extraction core only
uses ``gold_watch.*`` child loggers, so attaching handlers to the
``gold_watch`` logger here captures the whole run.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    logs_dir: Path | None = None,
    verbose: bool = False,
) -> Path:
    """Attach file and console handlers to the ``gold_watch`` logger.

    Args:
        logs_dir: Directory for the run log. Defaults to
            ``Settings.LOGS_DIR``.
        verbose: Lower the console threshold from WARNING to INFO.

    Returns:
        Path of the log file for this run.
    """
    target_dir = logs_dir or Settings.LOGS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = target_dir / f"run_{stamp}.log"

    project_logger = logging.getLogger("gold_watch")
    project_logger.setLevel(logging.DEBUG)

    # Already configured in this process (tests, repeated runs)
    if project_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(
        logging.INFO if verbose else logging.WARNING
    )
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    project_logger.addHandler(file_handler)
    project_logger.addHandler(console_handler)

    project_logger.info("Run log: %s", log_file)
    return log_file
