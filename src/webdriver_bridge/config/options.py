"""Explicit configuration for driver services."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..constants import (
    DEFAULT_HOST,
    DEFAULT_SCREEN_SIZE,
    READINESS_POLL_SECS,
    READINESS_TIMEOUT_SECS,
    STOP_GRACE_SECS,
)
from .environment import get_env_config


@dataclass
class ServiceConfig:
    """
    Every option a driver service understands.

    Attributes:
        output: Where process stdout/stderr go. None writes to a per-port log
            file under the log dir; a path opens (appends to) that file; an
            object with ``fileno()`` or a ``subprocess`` constant is passed through.
        frame_buffer: Start an Xvfb display and run the driver inside it.
        frame_buffer_screen: Xvfb screen geometry, e.g. "1280x1024x24".
        display: Reuse an existing X display (e.g. ":99") instead of starting one.
        xauth_path: XAUTHORITY file for ``display``.
        extra_args: Appended verbatim to the driver command line.
        gecko_driver_path: geckodriver binary for the Selenium standalone server.
        chrome_driver_path: ChromeDriver binary for the Selenium standalone server.
        java_path: Java executable for the Selenium standalone server.
        htmlunit_path: HTMLUnit driver JAR added to the standalone server classpath.
        host: Interface the readiness check connects to.
        readiness_timeout: Overall deadline for the port to accept connections.
        poll_interval: First backoff step between readiness checks.
        stop_grace_period: Seconds between the soft interrupt and the kill.
        environment: Extra environment variables for the child.
    """

    output: Any = None
    frame_buffer: bool = False
    frame_buffer_screen: str = DEFAULT_SCREEN_SIZE
    display: Optional[str] = None
    xauth_path: Optional[str] = None
    extra_args: List[str] = field(default_factory=list)
    gecko_driver_path: Optional[str] = None
    chrome_driver_path: Optional[str] = None
    java_path: Optional[str] = None
    htmlunit_path: Optional[str] = None
    host: str = DEFAULT_HOST
    readiness_timeout: float = READINESS_TIMEOUT_SECS
    poll_interval: float = READINESS_POLL_SECS
    stop_grace_period: float = STOP_GRACE_SECS
    environment: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, config: Optional[dict] = None, **overrides) -> "ServiceConfig":
        """Build a config from ``get_env_config()`` (or the given mapping) plus overrides."""
        if config is None:
            config = get_env_config()
        values = {
            "frame_buffer": bool(config.get("frame_buffer")),
            "output": config.get("driver_log"),
            "gecko_driver_path": config.get("geckodriver_path"),
            "chrome_driver_path": config.get("chromedriver_path"),
            "java_path": config.get("java_path"),
            "htmlunit_path": config.get("htmlunit_jar_path"),
        }
        values.update(overrides)
        return cls(**values)


__all__ = [
    "ServiceConfig",
]
