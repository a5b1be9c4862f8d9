"""
Global constants and configuration defaults.
No dependencies - safe to import from anywhere.
"""

import os

# ============================================================================
# Service Startup Configuration
# ============================================================================

DEFAULT_HOST = os.getenv("WDB_HOST", "127.0.0.1")
"""Host the driver processes listen on and readiness checks connect to."""

READINESS_TIMEOUT_SECS = float(os.getenv("WDB_READINESS_TIMEOUT", "5"))
"""Overall deadline for a spawned driver to accept TCP connections."""

READINESS_POLL_SECS = float(os.getenv("WDB_READINESS_POLL", "0.05"))
"""Initial sleep between readiness checks; grows up to READINESS_POLL_MAX_SECS."""

READINESS_POLL_MAX_SECS = 0.5
"""Upper bound of the readiness backoff."""

CONNECT_CHECK_TIMEOUT_SECS = 0.25
"""Timeout of a single readiness TCP connect."""


# ============================================================================
# Service Shutdown Configuration
# ============================================================================

STOP_GRACE_SECS = float(os.getenv("WDB_STOP_GRACE", "5"))
"""How long to wait after the soft interrupt before killing the process tree."""

KILL_WAIT_SECS = 3.0
"""How long to wait for the process tree to exit after a kill."""


# ============================================================================
# Frame Buffer Configuration
# ============================================================================

FRAME_BUFFER_START_SECS = 10.0
"""How long to wait for Xvfb to report its display number."""

DEFAULT_SCREEN_SIZE = os.getenv("WDB_SCREEN_SIZE", "1280x1024x24")


# ============================================================================
# Session Protocol Configuration
# ============================================================================

OPEN_RETRIES = int(os.getenv("WDB_OPEN_RETRIES", "3"))
"""Extra session-creation attempts on connection refused."""

OPEN_RETRY_DELAY_SECS = float(os.getenv("WDB_OPEN_RETRY_DELAY", "0.25"))
"""Base delay between session-creation attempts."""

HTTP_TIMEOUT_SECS = float(os.getenv("WDB_HTTP_TIMEOUT", "60"))
"""Default per-request timeout for wire commands."""

W3C_ELEMENT_KEY = "element-6066-11e4-a52e-4f735466cecf"
"""Key of a W3C web element reference."""

LEGACY_ELEMENT_KEY = "ELEMENT"
"""Key of a JSON Wire Protocol web element reference."""


__all__ = [
    "DEFAULT_HOST",
    "READINESS_TIMEOUT_SECS",
    "READINESS_POLL_SECS",
    "READINESS_POLL_MAX_SECS",
    "CONNECT_CHECK_TIMEOUT_SECS",
    "STOP_GRACE_SECS",
    "KILL_WAIT_SECS",
    "FRAME_BUFFER_START_SECS",
    "DEFAULT_SCREEN_SIZE",
    "OPEN_RETRIES",
    "OPEN_RETRY_DELAY_SECS",
    "HTTP_TIMEOUT_SECS",
    "W3C_ELEMENT_KEY",
    "LEGACY_ELEMENT_KEY",
]
