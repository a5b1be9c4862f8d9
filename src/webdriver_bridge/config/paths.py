"""Path utilities for driver output and CLI logs."""

import os
import tempfile
from pathlib import Path


def get_log_dir() -> str:
    """
    Get the log directory path.

    Uses WDB_LOG_DIR env var if set, otherwise <tempdir>/webdriver_bridge_logs.
    The directory is created if it doesn't exist.
    """
    log_dir = os.getenv("WDB_LOG_DIR") or str(Path(tempfile.gettempdir()) / "webdriver_bridge_logs")
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    return log_dir


def driver_log_path(binary: str, port: int) -> str:
    """Get the path of the output file for a driver process on ``port``."""
    name = Path(binary).stem or "driver"
    return os.path.join(get_log_dir(), f"{name}_{port}_{os.getpid()}.log")


def cli_log_path() -> str:
    return os.path.join(get_log_dir(), "webdriver_bridge.log")


__all__ = [
    "get_log_dir",
    "driver_log_path",
    "cli_log_path",
]
