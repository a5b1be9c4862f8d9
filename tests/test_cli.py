"""Tests for the smoke-run command line and diagnostics."""

import logging
from types import SimpleNamespace

import pytest

from webdriver_bridge import __main__ as cli
from webdriver_bridge.capabilities import ChromeOptions, FirefoxOptions
from webdriver_bridge.errors import ProtocolError
from webdriver_bridge.protocol import RemoteClient
from webdriver_bridge.utils.diagnostics import collect_diagnostics


@pytest.fixture(autouse=True)
def no_env_file(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in (
        "CHROMEDRIVER_PATH",
        "GECKODRIVER_PATH",
        "SELENIUM_JAR_PATH",
        "HTMLUNIT_JAR_PATH",
        "CHROME_BINARY",
        "FIREFOX_BINARY",
        "WDB_FRAME_BUFFER",
        "WDB_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    # _configure_logging replaces the root handlers.
    for handler in list(root.handlers):
        if handler not in saved_handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(saved_level)


def _args(*argv):
    return cli.build_parser().parse_args(list(argv))


def test_missing_driver_exits_2(tmp_path):
    assert cli.main(["--driver", "chromedriver", "--binary", str(tmp_path / "missing")]) == 2


def test_missing_selenium_jar_exits_2():
    assert cli.main(["--driver", "selenium"]) == 2


def test_htmlunit_without_jar_is_a_failure(tmp_path):
    jar = tmp_path / "selenium.jar"
    jar.write_bytes(b"PK")
    assert cli.main(["--driver", "htmlunit", "--binary", str(jar)]) == 1


def test_remote_protocol_failure_exits_1(stub_server, capsys):
    stub_server.routes[("POST", "/session")] = (200, {"unexpected": True})
    assert cli.main(["--remote", stub_server.url, "--browser", "firefox"]) == 1
    assert "Error phase       : session open" in capsys.readouterr().err


def test_remote_smoke_run(stub_server, capsys):
    stub_server.w3c_session("s1", {"browserName": "firefox"})
    stub_server.routes[("POST", "/session/s1/url")] = (200, {"value": None})
    stub_server.routes[("GET", "/session/s1/url")] = (200, {"value": "about:blank"})
    stub_server.routes[("GET", "/session/s1/title")] = (200, {"value": ""})
    stub_server.routes[("DELETE", "/session/s1")] = (200, {"value": None})

    assert cli.main(["--remote", stub_server.url, "--browser", "firefox", "--headless"]) == 0
    out = capsys.readouterr().out
    assert "dialect : w3c" in out
    assert stub_server.paths("DELETE") == ["/session/s1"]
    _, _, body = stub_server.requests[0]
    assert body["capabilities"]["alwaysMatch"]["moz:firefoxOptions"] == {"args": ["-headless"]}


def test_build_capabilities_for_chrome():
    caps = cli.build_capabilities(_args("--headless", "--browser-binary", "/opt/chrome"), {})
    opts = caps[ChromeOptions.KEY]
    assert caps["browserName"] == "chrome"
    assert opts.args == ["--headless=new"]
    assert opts.binary == "/opt/chrome"


def test_build_capabilities_uses_env_binary():
    caps = cli.build_capabilities(_args("--driver", "geckodriver"), {"firefox_binary": "/opt/firefox"})
    assert caps[FirefoxOptions.KEY].binary == "/opt/firefox"


def test_diagnostics_report(stub_server):
    stub_server.w3c_session("d1", {"browserName": "firefox", "browserVersion": "121.0"})
    session = RemoteClient().open(stub_server.url)
    service = SimpleNamespace(
        binary="/nonexistent/geckodriver",
        url="http://127.0.0.1:4444",
        pid=None,
        is_running=lambda: False,
        output_path=None,
        frame_buffer=None,
    )
    report = collect_diagnostics(service, session, ProtocolError("bad body", phase="command"))
    assert "Session id        : d1" in report
    assert "Dialect           : w3c" in report
    assert "Browser           : firefox 121.0" in report
    assert "Driver version    : <unknown>" in report
    assert "Error phase       : command" in report
