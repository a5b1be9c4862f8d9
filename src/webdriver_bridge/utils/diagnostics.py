"""Diagnostics and debugging information utility functions."""

import sys
import platform
from typing import Optional

import psutil
import selenium

from ..browser.executable import get_binary_version


def collect_diagnostics(
    service=None,
    session=None,
    exc: Optional[BaseException] = None,
) -> str:
    """
    Collect diagnostic information about the environment, the driver service
    and the session.

    Args:
        service: Service instance (can be None)
        session: Session instance (can be None)
        exc: Exception that occurred (can be None)

    Returns:
        str: Formatted diagnostic information
    """
    parts = [
        f"OS                : {platform.system()} {platform.release()}",
        f"Python            : {sys.version.split()[0]}",
        f"Selenium          : {getattr(selenium, '__version__', '?')}",
        f"psutil            : {psutil.__version__}",
    ]

    if service is not None:
        parts += [
            f"Driver binary     : {service.binary}",
            f"Driver version    : {get_binary_version(service.binary) or '<unknown>'}",
            f"Service URL       : {service.url}",
            f"Driver pid        : {service.pid or '<none>'}",
            f"Driver running    : {service.is_running()}",
            f"Driver output     : {service.output_path or '<caller sink>'}",
        ]
        if service.frame_buffer is not None:
            parts.append(f"Display           : :{service.frame_buffer.display}")

    if session is not None:
        parts += [
            f"Session id        : {session.id or '<none>'}",
            f"Session state     : {session.state.value}",
            f"Dialect           : {session.dialect.value if session.dialect else '<undetected>'}",
        ]
        caps = session.capabilities or {}
        browser = caps.get("browserName", "<unknown>")
        version = caps.get("browserVersion") or caps.get("version") or "<unknown>"
        parts.append(f"Browser           : {browser} {version}")

    if exc is not None:
        parts += [
            "---- ERROR ----",
            f"Error type        : {type(exc).__name__}",
            f"Error phase       : {getattr(exc, 'phase', None) or '<unknown>'}",
            f"Error message     : {exc}",
        ]

    return "\n".join(parts)


__all__ = ["collect_diagnostics"]
