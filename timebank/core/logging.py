import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", log_dir: Optional[str] = None, app_name: str = "timebank") -> None:
    """Configure application logging

    Args:
        level: Root log level name
        log_dir: Directory for rotating log files, console only when None
        app_name: Name to use for log files

    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    # Repeated calls (reloads, tests) must not stack handlers
    for handler in list(root_logger.handlers):
        if getattr(handler, "_timebank", False):
            root_logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler._timebank = True
    root_logger.addHandler(console_handler)

    if not log_dir:
        return

    path = Path(log_dir)
    os.makedirs(path, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        filename=path / f"{app_name}.log",
        maxBytes=10_000_000,  # 10MB
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler._timebank = True
    root_logger.addHandler(file_handler)

    error_handler = logging.handlers.RotatingFileHandler(
        filename=path / f"{app_name}-error.log",
        maxBytes=10_000_000,  # 10MB
        backupCount=5,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)
    error_handler._timebank = True
    root_logger.addHandler(error_handler)
