import os
import socket

import pytest

from _utils import StubWebDriver, write_stub_driver


@pytest.fixture
def stub_server():
    server = StubWebDriver().start()
    yield server
    server.stop()


@pytest.fixture
def stub_driver(tmp_path):
    if os.name == "nt":
        pytest.skip("stub driver relies on a POSIX shebang")
    return write_stub_driver(tmp_path)


@pytest.fixture
def free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture(autouse=True)
def isolated_log_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("WDB_LOG_DIR", str(tmp_path / "logs"))
