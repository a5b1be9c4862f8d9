"""Session protocol client for legacy (JSON Wire) and W3C WebDriver servers."""

from .dialect import Dialect, detect_dialect, session_request_body
from .transport import HttpTransport
from .session import Session, SessionState
from .element import ElementHandle
from .client import RemoteClient

__all__ = [
    "Dialect",
    "detect_dialect",
    "session_request_body",
    "HttpTransport",
    "Session",
    "SessionState",
    "ElementHandle",
    "RemoteClient",
]
