"""Tests for port probing and process termination helpers."""

import os
import socket
import subprocess
import sys
import time

import psutil
import pytest

from webdriver_bridge.browser.executable import get_binary_version, resolve_binary
from webdriver_bridge.browser.process import ensure_port_free, terminate_process, wait_for_port
from webdriver_bridge.errors import BinaryNotFoundError, PortUnavailableError, ProcessExitedError, ReadinessTimeoutError


def test_port_out_of_range():
    with pytest.raises(PortUnavailableError, match="out of range"):
        ensure_port_free("127.0.0.1", 70000)


def test_free_port_passes(free_port):
    ensure_port_free("127.0.0.1", free_port)


def test_wait_for_listening_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        s.listen(1)
        wait_for_port("127.0.0.1", s.getsockname()[1], timeout=1)


def test_wait_for_port_deadline(free_port):
    started = time.monotonic()
    with pytest.raises(ReadinessTimeoutError):
        wait_for_port("127.0.0.1", free_port, timeout=0.3)
    assert time.monotonic() - started < 1.5


def test_wait_for_port_notices_exit(free_port):
    proc = subprocess.Popen([sys.executable, "-c", "import sys; sys.exit(4)"])
    with pytest.raises(ProcessExitedError) as exc:
        wait_for_port("127.0.0.1", free_port, timeout=10, proc=proc, binary="fake")
    assert exc.value.returncode == 4


@pytest.mark.skipif(os.name == "nt", reason="POSIX signals")
def test_terminate_kills_orphaned_children():
    script = (
        "import subprocess, sys, time\n"
        "child = subprocess.Popen([sys.executable, '-c', 'import signal, time; "
        "signal.signal(signal.SIGINT, signal.SIG_IGN); time.sleep(60)'])\n"
        "print(child.pid, flush=True)\n"
        "try:\n"
        "    time.sleep(60)\n"
        "except KeyboardInterrupt:\n"
        "    pass\n"
    )
    proc = subprocess.Popen([sys.executable, "-c", script], stdout=subprocess.PIPE)
    child_pid = int(proc.stdout.readline())
    try:
        assert terminate_process(proc, grace=5) == 0
        child = psutil.Process(child_pid)
        assert not child.is_running() or child.status() == psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        pass
    finally:
        proc.stdout.close()
        if proc.poll() is None:
            proc.kill()


def test_terminate_already_exited():
    proc = subprocess.Popen([sys.executable, "-c", "pass"])
    proc.wait()
    assert terminate_process(proc, grace=1) == 0


def test_resolve_binary_from_path():
    assert resolve_binary(sys.executable) == os.path.abspath(sys.executable)
    with pytest.raises(BinaryNotFoundError):
        resolve_binary("definitely-not-a-driver-binary")
    with pytest.raises(BinaryNotFoundError):
        resolve_binary("")


def test_resolve_jar_does_not_need_exec_bit(tmp_path):
    jar = tmp_path / "server.jar"
    jar.write_bytes(b"PK")
    assert resolve_binary(str(jar), executable=False) == str(jar)


def test_binary_version():
    assert get_binary_version(sys.executable).startswith("Python")
    assert get_binary_version("/nonexistent/driver") is None
