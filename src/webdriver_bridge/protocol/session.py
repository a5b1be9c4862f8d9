"""
Session state.

A Session is created in ``OPENING`` by ``RemoteClient.open`` and becomes
``ACTIVE`` only once the server returned a well-formed session response. It
ends ``CLOSED`` after ``quit``, after a lost connection, or when the service
it was opened against is stopped; every command on a closed session fails
immediately with SessionClosedError.

Thread Safety:
    Commands on one session are serialised by ``_lock`` so they complete in
    the order they were issued. Separate sessions never share a lock.
"""

import enum
import threading
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from selenium.webdriver.common.by import By

from .dialect import Dialect

if TYPE_CHECKING:
    from ..capabilities import Capabilities
    from .client import RemoteClient
    from .element import ElementHandle

import logging
logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    OPENING = "opening"
    ACTIVE = "active"
    CLOSED = "closed"


class Session:
    """
    One conversation with a WebDriver endpoint.

    Attributes:
        base_url: Endpoint the session was opened against (no trailing slash)
        id: Server-assigned session id (None until ACTIVE)
        dialect: Protocol dialect detected from the creation response
        capabilities: Capabilities the server echoed back
        requested: Snapshot of the capabilities that were sent
        state: Current SessionState
        closed_reason: Why the session ended, once CLOSED
    """

    def __init__(self, client: "RemoteClient", base_url: str, requested: Optional["Capabilities"] = None):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.requested = requested
        self.id: Optional[str] = None
        self.dialect: Optional[Dialect] = None
        self.capabilities: Dict[str, Any] = {}
        self.state = SessionState.OPENING
        self.closed_reason: Optional[str] = None
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        dialect = self.dialect.value if self.dialect else None
        return f"Session(id={self.id!r}, dialect={dialect!r}, state={self.state.value!r}, url={self.base_url!r})"

    @property
    def url(self) -> str:
        return f"{self.base_url}/session/{self.id}"

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    @property
    def is_w3c(self) -> bool:
        return self.dialect is Dialect.W3C

    def _activate(self, session_id: str, dialect: Dialect, capabilities: Dict[str, Any]) -> None:
        with self._lock:
            self.id = session_id
            self.dialect = dialect
            self.capabilities = capabilities
            self.state = SessionState.ACTIVE

    def _mark_closed(self, reason: str) -> None:
        # Not taking _lock: a stopping service must not wait behind a blocked command.
        if self.state is not SessionState.CLOSED:
            logger.debug(f"Session {self.id} closed: {reason}")
            self.closed_reason = reason
            self.state = SessionState.CLOSED

    # Convenience wrappers around the client.

    def command(self, method: str, path: str, body: Any = None, timeout: Optional[float] = None) -> Any:
        return self.client.command(self, method, path, body, timeout=timeout)

    def get(self, url: str) -> None:
        self.client.get(self, url)

    def current_url(self) -> str:
        return self.client.current_url(self)

    def title(self) -> str:
        return self.client.title(self)

    def find_element(self, by: str = By.CSS_SELECTOR, value: str = "") -> "ElementHandle":
        return self.client.find_element(self, by, value)

    def find_elements(self, by: str = By.CSS_SELECTOR, value: str = "") -> List["ElementHandle"]:
        return self.client.find_elements(self, by, value)

    def quit(self) -> None:
        self.client.quit(self)

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.quit()


__all__ = [
    "SessionState",
    "Session",
]
