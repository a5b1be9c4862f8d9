"""Session protocol client: open, command, find, read, quit."""

from typing import Any, List, Mapping, Optional, Union
from urllib.parse import quote

from selenium.webdriver.common.by import By

from ..capabilities import Capabilities
from ..constants import HTTP_TIMEOUT_SECS, OPEN_RETRIES, OPEN_RETRY_DELAY_SECS
from ..decorators import in_phase
from ..errors import (
    PHASE_COMMAND,
    PHASE_QUIT,
    PHASE_SESSION_OPEN,
    BridgeError,
    ConnectionRefusedTransportError,
    ConnectionResetTransportError,
    InvalidSessionIdError,
    ProtocolError,
    SessionClosedError,
)
from ..utils.retry import retry_op
from .dialect import (
    Dialect,
    decode_value,
    detect_dialect,
    element_id_from,
    locator,
    raise_for_error,
    session_request_body,
)
from .element import ElementHandle
from .session import Session, SessionState
from .transport import HttpTransport

import logging
logger = logging.getLogger(__name__)


class RemoteClient:
    """
    Speaks the WebDriver wire protocol to one or more endpoints.

    The client holds no per-session state, so one instance can drive any
    number of sessions, against one service or many.

    Args:
        transport: Object with ``request(method, url, body, timeout)``;
            defaults to HttpTransport.
        dialect: Force a dialect for session creation; None sends both
            capability shapes and detects the dialect from the reply.
        open_retries: Extra session-creation attempts on connection refused.
        retry_delay: Base delay between those attempts.
        timeout: Default per-request timeout in seconds.
    """

    def __init__(
        self,
        transport: Optional[HttpTransport] = None,
        dialect: Optional[Dialect] = None,
        open_retries: int = OPEN_RETRIES,
        retry_delay: float = OPEN_RETRY_DELAY_SECS,
        timeout: float = HTTP_TIMEOUT_SECS,
    ):
        self.transport = transport or HttpTransport(timeout=timeout)
        self.dialect = dialect
        self.open_retries = open_retries
        self.retry_delay = retry_delay

    # -- sessions -----------------------------------------------------------

    @in_phase(PHASE_SESSION_OPEN)
    def open(
        self,
        endpoint: Union[str, Any],
        capabilities: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Session:
        """
        Create a session at ``endpoint`` (a base URL or a Service).

        The capabilities are snapshotted before anything is sent. Connection
        refused is retried ``open_retries`` times; every other failure is
        final and leaves the session CLOSED.
        """
        service = None
        if isinstance(endpoint, str):
            base_url = endpoint
        else:
            service, base_url = endpoint, endpoint.url
        base_url = base_url.rstrip("/")

        if isinstance(capabilities, Capabilities):
            snapshot = capabilities.copy()
        else:
            snapshot = Capabilities(capabilities or {})
        body = session_request_body(snapshot, self.dialect)

        session = Session(self, base_url, requested=snapshot)
        url = f"{base_url}/session"
        try:
            status, reply = retry_op(
                lambda: self.transport.request("POST", url, body, timeout),
                retries=self.open_retries,
                base_delay=self.retry_delay,
                retry_on=(ConnectionRefusedTransportError,),
            )
            raise_for_error(status, reply, url)
            dialect, session_id, negotiated = detect_dialect(reply, url)
        except BridgeError:
            session._mark_closed("session creation failed")
            raise

        if self.dialect is not None and dialect is not self.dialect:
            logger.warning(f"Requested {self.dialect.value} dialect but {url} answered in {dialect.value}")
        session._activate(session_id, dialect, negotiated)
        if service is not None:
            service.register_session(session)
        logger.info(f"Opened {dialect.value} session {session_id} at {base_url}")
        return session

    @in_phase(PHASE_QUIT)
    def quit(self, session: Session, timeout: Optional[float] = None) -> None:
        """
        Delete the session on the server. A server that no longer knows the
        session counts as success; the session is CLOSED afterwards either way.
        """
        with session._lock:
            if session.state is not SessionState.ACTIVE:
                logger.debug(f"Quit on {session.state.value} session {session.id}: nothing to do")
                session._mark_closed("quit")
                return
            url = session.url
            try:
                status, reply = self.transport.request("DELETE", url, None, timeout)
                raise_for_error(status, reply, url)
                logger.info(f"Quit session {session.id}")
            except InvalidSessionIdError:
                logger.info(f"Session {session.id} was already gone on the server")
            finally:
                session._mark_closed("quit")

    @in_phase(PHASE_COMMAND)
    def status(self, endpoint: Union[str, Any], timeout: Optional[float] = None) -> Any:
        """``GET /status`` on an endpoint; returns the decoded value."""
        base_url = endpoint if isinstance(endpoint, str) else endpoint.url
        url = f"{base_url.rstrip('/')}/status"
        status, reply = self.transport.request("GET", url, None, timeout)
        raise_for_error(status, reply, url)
        if not isinstance(reply, Mapping) or "value" not in reply:
            raise ProtocolError(f"status response from {url} has no 'value': {reply!r}")
        return reply["value"]

    # -- commands -----------------------------------------------------------

    def _execute(
        self,
        session: Session,
        method: str,
        path: str,
        body: Any = None,
        timeout: Optional[float] = None,
    ) -> Any:
        with session._lock:
            if session.state is not SessionState.ACTIVE:
                raise SessionClosedError(session.id, session.closed_reason)
            if path and not path.startswith("/"):
                path = "/" + path
            url = session.url + path
            try:
                status, reply = self.transport.request(method, url, body, timeout)
                return decode_value(session.dialect, status, reply, url)
            except (ConnectionRefusedTransportError, ConnectionResetTransportError):
                session._mark_closed("connection lost")
                raise
            except InvalidSessionIdError:
                session._mark_closed("session unknown to the server")
                raise

    @in_phase(PHASE_COMMAND)
    def command(
        self,
        session: Session,
        method: str,
        path: str,
        body: Any = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        One request scoped to the session, e.g. ``command(s, "GET", "/title")``.
        Returns the decoded ``value`` or raises the typed WebDriver error.
        """
        return self._execute(session, method, path, body, timeout)

    @in_phase(PHASE_COMMAND)
    def get(self, session: Session, url: str) -> None:
        self._execute(session, "POST", "/url", {"url": url})

    @in_phase(PHASE_COMMAND)
    def current_url(self, session: Session) -> str:
        return self._execute(session, "GET", "/url")

    @in_phase(PHASE_COMMAND)
    def title(self, session: Session) -> str:
        return self._execute(session, "GET", "/title")

    def _find_path(self, parent: Optional[ElementHandle], suffix: str) -> str:
        if parent is None:
            return f"/{suffix}"
        return f"/element/{quote(parent.id, safe='')}/{suffix}"

    @in_phase(PHASE_COMMAND)
    def find_element(
        self,
        session: Session,
        by: str = By.CSS_SELECTOR,
        value: str = "",
        parent: Optional[ElementHandle] = None,
    ) -> ElementHandle:
        """
        Locate one element. Raises NoSuchElementError when nothing matches;
        there is no implicit polling.
        """
        path = self._find_path(parent, "element")
        result = self._execute(session, "POST", path, locator(session.dialect, by, value))
        return ElementHandle(element_id_from(result, session.url + path), session)

    @in_phase(PHASE_COMMAND)
    def find_elements(
        self,
        session: Session,
        by: str = By.CSS_SELECTOR,
        value: str = "",
        parent: Optional[ElementHandle] = None,
    ) -> List[ElementHandle]:
        path = self._find_path(parent, "elements")
        result = self._execute(session, "POST", path, locator(session.dialect, by, value))
        if not isinstance(result, list):
            raise ProtocolError(f"expected a list of elements from {session.url + path}, got {result!r}")
        return [ElementHandle(element_id_from(item, session.url + path), session) for item in result]

    def _element_path(self, element: ElementHandle, suffix: str) -> str:
        return f"/element/{quote(element.id, safe='')}/{suffix}"

    @in_phase(PHASE_COMMAND)
    def element_property(self, session: Session, element: ElementHandle, name: str) -> str:
        """Computed CSS value of ``name`` (e.g. "background-color") for the element."""
        return self._execute(session, "GET", self._element_path(element, f"css/{quote(name, safe='')}"))

    @in_phase(PHASE_COMMAND)
    def element_attribute(self, session: Session, element: ElementHandle, name: str) -> Optional[str]:
        return self._execute(session, "GET", self._element_path(element, f"attribute/{quote(name, safe='')}"))

    @in_phase(PHASE_COMMAND)
    def element_text(self, session: Session, element: ElementHandle) -> str:
        return self._execute(session, "GET", self._element_path(element, "text"))

    @in_phase(PHASE_COMMAND)
    def click_element(self, session: Session, element: ElementHandle) -> None:
        self._execute(session, "POST", self._element_path(element, "click"), {})


__all__ = [
    "RemoteClient",
]
