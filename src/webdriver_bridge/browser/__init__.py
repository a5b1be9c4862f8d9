"""Process service manager: spawning and stopping local driver processes."""

from .executable import resolve_binary, get_binary_version
from .framebuffer import FrameBuffer
from .process import ensure_port_free, get_free_port, wait_for_port, terminate_process
from .service import (
    Service,
    start_service,
    chromedriver_service,
    geckodriver_service,
    selenium_service,
    build_selenium_command,
)

__all__ = [
    "resolve_binary",
    "get_binary_version",
    "FrameBuffer",
    "ensure_port_free",
    "get_free_port",
    "wait_for_port",
    "terminate_process",
    "Service",
    "start_service",
    "chromedriver_service",
    "geckodriver_service",
    "selenium_service",
    "build_selenium_command",
]
