"""Tests for the error taxonomy, phase stamping and retry helper."""

from unittest.mock import MagicMock, patch

import pytest
from selenium.common.exceptions import (
    NoSuchElementException,
    StaleElementReferenceException,
    WebDriverException,
)
from selenium.webdriver.remote.errorhandler import ErrorCode

from webdriver_bridge.decorators import in_phase
from webdriver_bridge.errors import (
    PHASE_COMMAND,
    PHASE_SERVICE_START,
    LEGACY_STATUS_CODES,
    BinaryNotFoundError,
    BridgeError,
    ConfigurationError,
    ConnectionRefusedTransportError,
    ConnectionResetTransportError,
    InvalidSelectorError,
    InvalidSessionIdError,
    NoSuchElementError,
    ProtocolError,
    ReadinessTimeoutError,
    SessionClosedError,
    SessionNotCreatedError,
    StaleElementReferenceError,
    TransportError,
    TransportTimeoutError,
    UnknownCommandError,
    WebDriverError,
    legacy_webdriver_error,
    webdriver_error,
)
from webdriver_bridge.utils.retry import retry_op


class TestWebDriverErrors:
    def test_w3c_code_maps_to_typed_error(self):
        err = webdriver_error("no such element", "Unable to locate element: #missing")
        assert isinstance(err, NoSuchElementError)
        assert isinstance(err, NoSuchElementException)
        assert isinstance(err, WebDriverException)
        assert err.code == "no such element"
        assert err.server_message == "Unable to locate element: #missing"
        assert "no such element" in str(err)

    def test_legacy_status_maps_through_code(self):
        err = legacy_webdriver_error(10, "element is not attached")
        assert isinstance(err, StaleElementReferenceError)
        assert isinstance(err, StaleElementReferenceException)
        assert err.code == "stale element reference"
        assert err.status == 10

    def test_no_such_session_and_invalid_session_id_are_one_type(self):
        assert isinstance(webdriver_error("no such session"), InvalidSessionIdError)
        assert isinstance(webdriver_error("invalid session id"), InvalidSessionIdError)
        assert isinstance(legacy_webdriver_error(6), InvalidSessionIdError)

    def test_legacy_statuses_follow_selenium_error_codes(self):
        assert LEGACY_STATUS_CODES[ErrorCode.NO_SUCH_ELEMENT[0]] == "no such element"
        assert LEGACY_STATUS_CODES[ErrorCode.ELEMENT_CLICK_INTERCEPTED[0]] == "element click intercepted"
        # XPath lookup failures are reported under several statuses.
        for status in (19, 32, 51, 52):
            assert isinstance(legacy_webdriver_error(status), InvalidSelectorError)
        assert LEGACY_STATUS_CODES[6] == "no such session"

    def test_selenium_unknown_method_spelling(self):
        assert isinstance(webdriver_error(ErrorCode.UNKNOWN_METHOD[-1]), UnknownCommandError)
        assert isinstance(webdriver_error("unknown method"), UnknownCommandError)
        assert isinstance(webdriver_error("unknown command"), UnknownCommandError)

    def test_session_not_created(self):
        assert isinstance(legacy_webdriver_error(33, "no browser"), SessionNotCreatedError)

    def test_unknown_code_falls_back_to_base(self):
        err = webdriver_error("unsupported operation", "nope")
        assert type(err) is WebDriverError
        assert legacy_webdriver_error(999).code == "unknown error"

    def test_stacktrace_is_kept(self):
        err = webdriver_error("javascript error", "boom", stacktrace="at a\nat b")
        assert err.raw_stacktrace == "at a\nat b"
        assert err.stacktrace == ["at a", "at b"]


class TestErrorTaxonomy:
    def test_phase_is_rendered(self):
        assert str(BridgeError("bad", phase="quit")) == "[quit] bad"
        assert str(BridgeError("bad")) == "bad"

    def test_class_default_phases(self):
        assert ConfigurationError("x").phase == "capabilities"
        assert BinaryNotFoundError("chromedriver").phase == PHASE_SERVICE_START

    def test_builtin_bases_for_generic_handlers(self):
        assert isinstance(ConfigurationError("x"), ValueError)
        assert isinstance(BinaryNotFoundError("x"), FileNotFoundError)
        assert isinstance(ReadinessTimeoutError("127.0.0.1", 1, 2.0), TimeoutError)
        assert isinstance(TransportTimeoutError("x"), ConnectionError)

    def test_connection_failures_are_connection_errors(self):
        closed = SessionClosedError("s1", "service stopped")
        assert isinstance(closed, TransportError)
        assert isinstance(closed, ConnectionError)
        assert not isinstance(closed, ProtocolError)
        assert "service stopped" in str(closed)
        dropped = ConnectionResetTransportError("dropped")
        assert isinstance(dropped, ConnectionError)
        assert not isinstance(dropped, ConnectionRefusedTransportError)

    def test_binary_name_in_message(self):
        err = BinaryNotFoundError("geckodriver")
        assert err.binary == "geckodriver"
        assert "geckodriver" in str(err)


class TestInPhase:
    def test_stamps_phase_on_unphased_errors(self):
        @in_phase(PHASE_COMMAND)
        def fail():
            raise ProtocolError("garbled")

        with pytest.raises(ProtocolError) as exc:
            fail()
        assert exc.value.phase == PHASE_COMMAND

    def test_keeps_phase_from_lower_layer(self):
        @in_phase(PHASE_COMMAND)
        def fail():
            raise BinaryNotFoundError("x")

        with pytest.raises(BinaryNotFoundError) as exc:
            fail()
        assert exc.value.phase == PHASE_SERVICE_START

    def test_non_bridge_errors_pass_through(self):
        @in_phase(PHASE_COMMAND)
        def fail():
            raise KeyError("k")

        with pytest.raises(KeyError):
            fail()

    def test_preserves_metadata(self):
        @in_phase(PHASE_COMMAND)
        def documented():
            """Doc."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Doc."


class TestRetryOp:
    def test_returns_after_transient_failures(self):
        fn = MagicMock(side_effect=[ConnectionRefusedTransportError("no"), ConnectionRefusedTransportError("no"), "ok"])
        with patch("webdriver_bridge.utils.retry.time.sleep") as sleep:
            assert retry_op(fn, retries=2, base_delay=0.01) == "ok"
        assert fn.call_count == 3
        assert sleep.call_count == 2

    def test_raises_last_error_when_exhausted(self):
        fn = MagicMock(side_effect=ConnectionRefusedTransportError("no"))
        with patch("webdriver_bridge.utils.retry.time.sleep"):
            with pytest.raises(ConnectionRefusedTransportError):
                retry_op(fn, retries=1, base_delay=0.01)
        assert fn.call_count == 2

    def test_other_errors_are_not_retried(self):
        fn = MagicMock(side_effect=ProtocolError("bad"))
        with pytest.raises(ProtocolError):
            retry_op(fn, retries=3, base_delay=0.01)
        assert fn.call_count == 1

    def test_dropped_connection_is_not_retried_by_default(self):
        fn = MagicMock(side_effect=ConnectionResetTransportError("dropped"))
        with pytest.raises(ConnectionResetTransportError):
            retry_op(fn, retries=3, base_delay=0.01)
        assert fn.call_count == 1
