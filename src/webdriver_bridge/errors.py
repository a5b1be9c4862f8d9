"""
Error taxonomy shared by every layer.

Every error carries the ``phase`` that produced it (capabilities build, service
start, session open, command, quit, service stop) so callers can decide
whether to skip, retry or abort.

WebDriver errors reported by a server subclass both ``WebDriverError`` and the
matching ``selenium.common.exceptions`` class, so code written against
Selenium's exceptions keeps working.
"""

from typing import Optional

from selenium.common.exceptions import (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    InvalidArgumentException,
    InvalidElementStateException,
    InvalidSelectorException,
    InvalidSessionIdException,
    JavascriptException,
    NoSuchElementException,
    NoSuchFrameException,
    NoSuchWindowException,
    SessionNotCreatedException,
    StaleElementReferenceException,
    TimeoutException,
    UnknownMethodException,
    WebDriverException,
)
from selenium.webdriver.remote.errorhandler import ErrorCode


PHASE_CAPABILITIES = "capabilities"
PHASE_SERVICE_START = "service start"
PHASE_SERVICE_STOP = "service stop"
PHASE_SESSION_OPEN = "session open"
PHASE_COMMAND = "command"
PHASE_QUIT = "quit"


class BridgeError(Exception):
    """Base class for all errors raised by webdriver_bridge."""

    phase: Optional[str] = None

    def __init__(self, message: str = "", phase: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if phase is not None:
            self.phase = phase

    def __str__(self) -> str:
        if self.phase:
            return f"[{self.phase}] {self.message}"
        return self.message


# ============================================================================
# Configuration
# ============================================================================

class ConfigurationError(BridgeError, ValueError):
    """Caller-fixable problem detected before any process or network activity."""

    phase = PHASE_CAPABILITIES


# ============================================================================
# Process
# ============================================================================

class ProcessError(BridgeError):
    phase = PHASE_SERVICE_START


class BinaryNotFoundError(ProcessError, FileNotFoundError):
    """The driver executable could not be found. Callers may skip instead of fail."""

    def __init__(self, binary: str, phase: Optional[str] = None):
        super().__init__(f"driver binary {binary!r} not found (not a file and not on PATH)", phase)
        self.binary = binary


class PortUnavailableError(ProcessError):
    def __init__(self, host: str, port: int, reason: str = "", phase: Optional[str] = None):
        msg = f"port {port} on {host} is unavailable"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, phase)
        self.host = host
        self.port = port


class SpawnError(ProcessError):
    pass


class ProcessExitedError(ProcessError):
    def __init__(self, binary: str, returncode: int, phase: Optional[str] = None):
        super().__init__(f"driver process {binary!r} exited early with code {returncode}", phase)
        self.binary = binary
        self.returncode = returncode


class ReadinessTimeoutError(ProcessError, TimeoutError):
    def __init__(self, host: str, port: int, timeout: float, phase: Optional[str] = None):
        super().__init__(f"port {port} on {host} did not accept connections within {timeout:.1f}s", phase)
        self.host = host
        self.port = port
        self.timeout = timeout


class FrameBufferError(ProcessError):
    pass


# ============================================================================
# Transport / protocol
# ============================================================================

class TransportError(BridgeError, ConnectionError):
    """No usable connection: refused, dropped, timed out, or the session is already closed."""


class ConnectionRefusedTransportError(TransportError):
    """Nothing accepted the connection; the request never reached a server."""


class ConnectionResetTransportError(TransportError):
    """The connection dropped after the request may have been received. Never retried."""


class TransportTimeoutError(TransportError):
    pass


class SessionClosedError(TransportError):
    """
    The session is CLOSED (quit, lost connection, or its service stopped);
    the command was not sent.
    """

    def __init__(self, session_id: Optional[str], reason: Optional[str] = None, phase: Optional[str] = None):
        msg = f"session {session_id} is closed"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg, phase)
        self.session_id = session_id
        self.reason = reason


class ProtocolError(BridgeError):
    """Malformed response or unknown dialect. Never coerced."""


# ============================================================================
# Server-reported WebDriver errors
# ============================================================================

class WebDriverError(BridgeError, WebDriverException):
    """
    Error reported by the server. ``code`` is the W3C error string
    (legacy numeric statuses are translated to it) and ``status`` the raw
    value the server sent.
    """

    def __init__(
        self,
        code: str,
        message: str = "",
        stacktrace: Optional[str] = None,
        status=None,
        phase: Optional[str] = None,
    ):
        lines = stacktrace.splitlines() if isinstance(stacktrace, str) else stacktrace
        WebDriverException.__init__(self, message, None, lines)
        self.code = code
        self.status = code if status is None else status
        self.message = f"{code}: {message}" if message else code
        self.server_message = message
        self.raw_stacktrace = stacktrace
        if phase is not None:
            self.phase = phase

    def __str__(self) -> str:
        return BridgeError.__str__(self)


class NoSuchElementError(WebDriverError, NoSuchElementException):
    pass


class StaleElementReferenceError(WebDriverError, StaleElementReferenceException):
    pass


class InvalidSessionIdError(WebDriverError, InvalidSessionIdException):
    pass


class SessionNotCreatedError(WebDriverError, SessionNotCreatedException):
    pass


class InvalidSelectorError(WebDriverError, InvalidSelectorException):
    pass


class InvalidArgumentError(WebDriverError, InvalidArgumentException):
    pass


class NoSuchWindowError(WebDriverError, NoSuchWindowException):
    pass


class NoSuchFrameError(WebDriverError, NoSuchFrameException):
    pass


class ElementNotInteractableError(WebDriverError, ElementNotInteractableException):
    pass


class ElementClickInterceptedError(WebDriverError, ElementClickInterceptedException):
    pass


class InvalidElementStateError(WebDriverError, InvalidElementStateException):
    pass


class JavascriptError(WebDriverError, JavascriptException):
    pass


class CommandTimeoutError(WebDriverError, TimeoutException):
    pass


class UnknownCommandError(WebDriverError, UnknownMethodException):
    pass


def _code(entry) -> str:
    """W3C error string of a selenium ``ErrorCode`` entry ([status, code] or [code])."""
    return entry[-1]


W3C_ERRORS = {
    _code(ErrorCode.NO_SUCH_ELEMENT): NoSuchElementError,
    _code(ErrorCode.STALE_ELEMENT_REFERENCE): StaleElementReferenceError,
    _code(ErrorCode.INVALID_SESSION_ID): InvalidSessionIdError,
    _code(ErrorCode.SESSION_NOT_CREATED): SessionNotCreatedError,
    _code(ErrorCode.INVALID_SELECTOR): InvalidSelectorError,
    _code(ErrorCode.INVALID_ARGUMENT): InvalidArgumentError,
    _code(ErrorCode.NO_SUCH_WINDOW): NoSuchWindowError,
    _code(ErrorCode.NO_SUCH_FRAME): NoSuchFrameError,
    _code(ErrorCode.ELEMENT_NOT_INTERACTABLE): ElementNotInteractableError,
    _code(ErrorCode.ELEMENT_NOT_VISIBLE): ElementNotInteractableError,
    _code(ErrorCode.ELEMENT_CLICK_INTERCEPTED): ElementClickInterceptedError,
    _code(ErrorCode.INVALID_ELEMENT_STATE): InvalidElementStateError,
    _code(ErrorCode.JAVASCRIPT_ERROR): JavascriptError,
    _code(ErrorCode.TIMEOUT): CommandTimeoutError,
    _code(ErrorCode.SCRIPT_TIMEOUT): CommandTimeoutError,
    _code(ErrorCode.UNKNOWN_COMMAND): UnknownCommandError,
    _code(ErrorCode.UNKNOWN_METHOD): UnknownCommandError,
    # Not in selenium's table: the JSON Wire name for an unknown session
    # and the spelling W3C servers send for an unsupported method.
    "no such session": InvalidSessionIdError,
    "unknown method": UnknownCommandError,
}


def _legacy_status_codes() -> dict:
    """JSON Wire Protocol numeric status -> W3C error string, from selenium's ErrorCode."""
    # Selenium dropped the numeric status of "no such session".
    codes = {6: "no such session"}
    for name, entry in vars(ErrorCode).items():
        if name.startswith("_") or not isinstance(entry, list) or len(entry) != 2:
            continue
        status, code = entry
        if isinstance(status, int):
            codes.setdefault(status, code)
    return codes


LEGACY_STATUS_CODES = _legacy_status_codes()


def webdriver_error(code: str, message: str = "", stacktrace=None, status=None, phase=None) -> WebDriverError:
    """Build the typed error for a W3C error string."""
    cls = W3C_ERRORS.get(code, WebDriverError)
    return cls(code, message, stacktrace=stacktrace, status=status, phase=phase)


def legacy_webdriver_error(status: int, message: str = "", stacktrace=None, phase=None) -> WebDriverError:
    """Build the typed error for a JSON Wire Protocol numeric status."""
    code = LEGACY_STATUS_CODES.get(status, "unknown error")
    return webdriver_error(code, message, stacktrace=stacktrace, status=status, phase=phase)


__all__ = [
    "PHASE_CAPABILITIES",
    "PHASE_SERVICE_START",
    "PHASE_SERVICE_STOP",
    "PHASE_SESSION_OPEN",
    "PHASE_COMMAND",
    "PHASE_QUIT",
    "BridgeError",
    "ConfigurationError",
    "ProcessError",
    "BinaryNotFoundError",
    "PortUnavailableError",
    "SpawnError",
    "ProcessExitedError",
    "ReadinessTimeoutError",
    "FrameBufferError",
    "TransportError",
    "ConnectionRefusedTransportError",
    "ConnectionResetTransportError",
    "TransportTimeoutError",
    "SessionClosedError",
    "ProtocolError",
    "WebDriverError",
    "NoSuchElementError",
    "StaleElementReferenceError",
    "InvalidSessionIdError",
    "SessionNotCreatedError",
    "InvalidSelectorError",
    "InvalidArgumentError",
    "NoSuchWindowError",
    "NoSuchFrameError",
    "ElementNotInteractableError",
    "ElementClickInterceptedError",
    "InvalidElementStateError",
    "JavascriptError",
    "CommandTimeoutError",
    "UnknownCommandError",
    "W3C_ERRORS",
    "LEGACY_STATUS_CODES",
    "webdriver_error",
    "legacy_webdriver_error",
]
