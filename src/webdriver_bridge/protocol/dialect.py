"""
Wire-level differences between the JSON Wire Protocol and W3C WebDriver.

Everything that depends on the dialect lives here: the session-creation
body, dialect detection, response decoding, element references and locator
translation.
"""

import enum
from typing import Any, Dict, Mapping, Optional, Tuple

from selenium.webdriver.common.by import By

from ..capabilities import Capabilities
from ..constants import LEGACY_ELEMENT_KEY, W3C_ELEMENT_KEY
from ..errors import ProtocolError, legacy_webdriver_error, webdriver_error


class Dialect(enum.Enum):
    LEGACY = "legacy"
    W3C = "w3c"


def session_request_body(capabilities: Capabilities, dialect: Optional[Dialect] = None) -> Dict[str, Any]:
    """
    Body of ``POST /session``. With no configured dialect both shapes are
    sent so either kind of server can answer.
    """
    body: Dict[str, Any] = {}
    if dialect in (None, Dialect.LEGACY):
        body["desiredCapabilities"] = capabilities.to_legacy_payload()
    if dialect in (None, Dialect.W3C):
        body["capabilities"] = capabilities.to_w3c_payload()
    return body


def _w3c_error(body: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(body, Mapping):
        value = body.get("value")
        if isinstance(value, Mapping) and isinstance(value.get("error"), str):
            return value
    return None


def raise_for_error(http_status: int, body: Any, url: str) -> None:
    """Raise the typed error a response carries, in either dialect."""
    err = _w3c_error(body)
    if err is not None:
        raise webdriver_error(err["error"], err.get("message", ""), err.get("stacktrace"))

    if isinstance(body, Mapping) and isinstance(body.get("status"), int) and body["status"] != 0:
        value = body.get("value")
        message = value.get("message", "") if isinstance(value, Mapping) else str(value or "")
        raise legacy_webdriver_error(body["status"], message)

    if not 200 <= http_status < 300:
        raise ProtocolError(f"HTTP {http_status} from {url} without a WebDriver error body: {body!r}")


def detect_dialect(body: Any, url: str = "") -> Tuple[Dialect, str, Dict[str, Any]]:
    """
    Classify a successful session-creation response.

    W3C:    {"value": {"sessionId": ..., "capabilities": {...}}}
    Legacy: {"sessionId": ..., "status": 0, "value": {...}}

    Returns (dialect, session_id, negotiated_capabilities).
    """
    if not isinstance(body, Mapping):
        raise ProtocolError(f"session response from {url} is not a JSON object: {body!r}")

    value = body.get("value")
    if isinstance(value, Mapping) and value.get("sessionId") and isinstance(value.get("capabilities"), Mapping):
        return Dialect.W3C, str(value["sessionId"]), dict(value["capabilities"])

    if body.get("sessionId") and isinstance(value, Mapping):
        return Dialect.LEGACY, str(body["sessionId"]), dict(value)

    raise ProtocolError(f"unrecognised session response from {url}: {body!r}")


def decode_value(dialect: Dialect, http_status: int, body: Any, url: str) -> Any:
    """Return the ``value`` of a command response or raise its error."""
    raise_for_error(http_status, body, url)
    if body is None:
        return None
    if not isinstance(body, Mapping) or "value" not in body:
        if dialect is Dialect.LEGACY and isinstance(body, Mapping) and "status" in body:
            return None
        raise ProtocolError(f"response from {url} has no 'value': {body!r}")
    return body["value"]


def element_reference(dialect: Dialect, element_id: str) -> Dict[str, str]:
    key = W3C_ELEMENT_KEY if dialect is Dialect.W3C else LEGACY_ELEMENT_KEY
    return {key: element_id}


def element_id_from(value: Any, url: str = "") -> str:
    """Extract the element id from a W3C or legacy element reference."""
    if isinstance(value, Mapping):
        for key in (W3C_ELEMENT_KEY, LEGACY_ELEMENT_KEY):
            if key in value:
                return str(value[key])
    raise ProtocolError(f"expected an element reference from {url}, got {value!r}")


def _css_escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def locator(dialect: Dialect, by: str, value: str) -> Dict[str, str]:
    """
    ``{"using", "value"}`` for a find request. W3C dropped the id, name and
    class name strategies; those are rewritten to CSS selectors.
    """
    if dialect is Dialect.W3C:
        if by == By.ID:
            by, value = By.CSS_SELECTOR, f'[id="{_css_escape(value)}"]'
        elif by == By.NAME:
            by, value = By.CSS_SELECTOR, f'[name="{_css_escape(value)}"]'
        elif by == By.CLASS_NAME:
            by, value = By.CSS_SELECTOR, f".{value}"
    return {"using": by, "value": value}


__all__ = [
    "Dialect",
    "session_request_body",
    "raise_for_error",
    "detect_dialect",
    "decode_value",
    "element_reference",
    "element_id_from",
    "locator",
]
