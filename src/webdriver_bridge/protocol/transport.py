"""HTTP+JSON round trips to a WebDriver endpoint."""

import json
import errno
import socket
import http.client
import urllib.error
import urllib.request
from typing import Any, Optional, Tuple

from ..constants import HTTP_TIMEOUT_SECS
from ..errors import (
    ConnectionRefusedTransportError,
    ConnectionResetTransportError,
    ProtocolError,
    TransportError,
    TransportTimeoutError,
)

import logging
logger = logging.getLogger(__name__)


_RESET_ERRNOS = (errno.ECONNRESET, errno.ECONNABORTED, errno.EPIPE)


def _transport_error(url: str, reason: Any) -> TransportError:
    """
    Classify a socket failure. Only a refused connection proves the request
    never reached the server; a reset may come after the server read it.
    """
    if isinstance(reason, (socket.timeout, TimeoutError)):
        return TransportTimeoutError(f"request to {url} timed out")
    if isinstance(reason, ConnectionRefusedError) or getattr(reason, "errno", None) == errno.ECONNREFUSED:
        return ConnectionRefusedTransportError(f"connection to {url} refused: {reason}")
    # RemoteDisconnected is a ConnectionResetError.
    if isinstance(reason, (ConnectionResetError, ConnectionAbortedError, BrokenPipeError)):
        return ConnectionResetTransportError(f"connection to {url} dropped: {reason}")
    if isinstance(reason, OSError) and reason.errno in _RESET_ERRNOS:
        return ConnectionResetTransportError(f"connection to {url} dropped: {reason}")
    return TransportError(f"request to {url} failed: {reason}")


def decode_body(url: str, status: int, raw: bytes) -> Any:
    """Decode a JSON response body; an empty body decodes to None."""
    if not raw.strip():
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        snippet = raw[:200].decode("utf-8", "replace")
        raise ProtocolError(f"non-JSON response from {url} (HTTP {status}): {snippet!r}") from e


class HttpTransport:
    """
    Thin urllib wrapper.

    Returns ``(http_status, decoded_json)`` for every HTTP response,
    including non-2xx ones: W3C servers report errors in the body of those.
    Socket-level failures become TransportError subclasses.
    """

    def __init__(self, timeout: float = HTTP_TIMEOUT_SECS):
        self.timeout = timeout

    def request(
        self,
        method: str,
        url: str,
        body: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> Tuple[int, Any]:
        data = None
        headers = {"Accept": "application/json"}
        if body is not None or method == "POST":
            data = json.dumps({} if body is None else body).encode("utf-8")
            headers["Content-Type"] = "application/json;charset=UTF-8"

        req = urllib.request.Request(url, data=data, headers=headers, method=method)
        logger.debug(f"-> {method} {url}")
        try:
            with urllib.request.urlopen(req, timeout=timeout or self.timeout) as resp:
                status, raw = resp.status, resp.read()
        except urllib.error.HTTPError as e:
            status, raw = e.code, e.read()
        except urllib.error.URLError as e:
            raise _transport_error(url, e.reason) from e
        except OSError as e:
            raise _transport_error(url, e) from e
        except http.client.HTTPException as e:
            raise ProtocolError(f"malformed HTTP response from {url}: {e!r}") from e
        logger.debug(f"<- {status} {method} {url}")
        return status, decode_body(url, status, raw)


__all__ = [
    "HttpTransport",
    "decode_body",
]
