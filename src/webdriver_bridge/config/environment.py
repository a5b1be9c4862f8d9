"""Environment configuration and validation."""

import os
from typing import Optional

from dotenv import load_dotenv, find_dotenv

import logging
logger = logging.getLogger(__name__)


_TRUTHY = ("1", "true", "True", "yes", "Yes")


def _env_path(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def _env_flag(name: str, default: str = "0") -> bool:
    return (os.getenv(name, default) or "").strip() in _TRUTHY


def get_env_config(load_env_file: bool = True) -> dict:
    """
    Read driver locations and toggles from the environment.

    A ``.env`` file found from the current working directory upwards is loaded
    first; variables already present in the environment win.

    Optional:   CHROMEDRIVER_PATH
                GECKODRIVER_PATH
                SELENIUM_JAR_PATH       (Selenium standalone server JAR)
                HTMLUNIT_JAR_PATH       (HTMLUnit driver JAR for the standalone server)
                JAVA_PATH               (defaults to "java" on PATH)
                CHROME_BINARY
                FIREFOX_BINARY
                WDB_FRAME_BUFFER        (1 to wrap drivers in Xvfb)
                WDB_DRIVER_LOG          (file receiving driver output)
                WDB_DEBUG               (1 for debug logging in the CLI)

    Nothing is required: callers decide what to skip when a path is missing.
    """
    if load_env_file:
        load_dotenv(find_dotenv(filename=".env", usecwd=True), override=False)

    return {
        "chromedriver_path": _env_path("CHROMEDRIVER_PATH"),
        "geckodriver_path": _env_path("GECKODRIVER_PATH"),
        "selenium_jar_path": _env_path("SELENIUM_JAR_PATH"),
        "htmlunit_jar_path": _env_path("HTMLUNIT_JAR_PATH"),
        "java_path": _env_path("JAVA_PATH"),
        "chrome_binary": _env_path("CHROME_BINARY"),
        "firefox_binary": _env_path("FIREFOX_BINARY"),
        "frame_buffer": _env_flag("WDB_FRAME_BUFFER"),
        "driver_log": _env_path("WDB_DRIVER_LOG"),
        "debug": _env_flag("WDB_DEBUG"),
    }


__all__ = [
    "get_env_config",
]
