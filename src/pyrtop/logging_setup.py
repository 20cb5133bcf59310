"""Log file setup. The terminal belongs to the UI, so logs go to a file."""

import logging
import logging.handlers
import os
from pathlib import Path

_LOGGER_NAME = "pyrtop"


def default_log_file() -> Path:
    base = Path(os.environ.get("XDG_CACHE_HOME") or Path.home() / ".cache")
    return base / "pyrtop" / "pyrtop.log"


def configure_logging(level: int = logging.INFO, log_file: Path | None = None) -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    if logger.handlers:
        return logger

    path = log_file or default_log_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        filename=str(path),
        maxBytes=1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    # paramiko logs transport chatter under its own name
    logging.getLogger("paramiko").addHandler(handler)
    logging.getLogger("paramiko").setLevel(logging.WARNING)

    logger.debug("logging to %s", path)
    return logger
