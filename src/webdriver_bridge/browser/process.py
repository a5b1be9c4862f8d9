"""Process and port management."""

import os
import time
import signal
import socket
import subprocess
from typing import Optional

import psutil

from ..constants import (
    CONNECT_CHECK_TIMEOUT_SECS,
    KILL_WAIT_SECS,
    READINESS_POLL_MAX_SECS,
)
from ..errors import PortUnavailableError, ProcessExitedError, ReadinessTimeoutError

import logging
logger = logging.getLogger(__name__)


def _is_port_open(host: str, port: int, timeout: float = CONNECT_CHECK_TIMEOUT_SECS) -> bool:
    """Check if something accepts TCP connections on host:port."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def get_free_port(host: str = "127.0.0.1") -> int:
    """Get a free port by binding to port 0."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((host, 0))
        return s.getsockname()[1]


def ensure_port_free(host: str, port: int) -> None:
    """
    Raise PortUnavailableError unless ``port`` can be bound on ``host``.

    Something already accepting connections is refused outright. The bind
    check uses SO_REUSEADDR on POSIX so that TIME_WAIT leftovers of a
    previous driver on the same port do not count as occupied; on Windows
    that option would allow stealing a live port, so it is left off there.
    """
    if not 0 < port < 65536:
        raise PortUnavailableError(host, port, "port out of range")
    if _is_port_open(host, port):
        raise PortUnavailableError(host, port, "another process is listening")
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        if os.name != "nt":
            s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            s.bind((host, port))
        except OSError as e:
            raise PortUnavailableError(host, port, e.strerror or str(e)) from e


def wait_for_port(
    host: str,
    port: int,
    timeout: float,
    proc: Optional[subprocess.Popen] = None,
    poll_interval: float = 0.05,
    binary: str = "",
) -> None:
    """
    Block until host:port accepts a TCP connection.

    A bare connect is enough: some drivers accept connections before their
    HTTP handler is live, and session creation retries on refusal.

    Raises:
        ProcessExitedError: ``proc`` exited while we were waiting.
        ReadinessTimeoutError: the deadline elapsed.
    """
    deadline = time.monotonic() + timeout
    delay = poll_interval
    attempts = 0
    while True:
        attempts += 1
        if _is_port_open(host, port, timeout=min(CONNECT_CHECK_TIMEOUT_SECS, max(timeout, 0.01))):
            logger.debug(f"Port {port} accepting after {attempts} attempt(s)")
            return
        if proc is not None and proc.poll() is not None:
            raise ProcessExitedError(binary or str(proc.args), proc.returncode)
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise ReadinessTimeoutError(host, port, timeout)
        time.sleep(min(delay, remaining))
        delay = min(delay * 1.5, READINESS_POLL_MAX_SECS)


def _kill_tree(proc: subprocess.Popen, wait: float = KILL_WAIT_SECS) -> None:
    """Kill ``proc`` and every descendant; wait up to ``wait`` seconds for them."""
    try:
        parent = psutil.Process(proc.pid)
        procs = parent.children(recursive=True) + [parent]
    except psutil.NoSuchProcess:
        procs = []
    for p in procs:
        try:
            p.kill()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    psutil.wait_procs(procs, timeout=wait)
    try:
        proc.wait(timeout=wait)
    except subprocess.TimeoutExpired:
        logger.warning(f"Process {proc.pid} still alive {wait}s after kill")


def terminate_process(proc: subprocess.Popen, grace: float) -> Optional[int]:
    """
    Stop ``proc``: soft interrupt first, then kill the whole tree after ``grace``.

    Returns the exit code (None if the process could not be reaped).
    Bounded by ``grace`` + 2 * KILL_WAIT_SECS.
    """
    if proc.poll() is not None:
        return proc.returncode

    try:
        children = psutil.Process(proc.pid).children(recursive=True)
    except psutil.NoSuchProcess:
        children = []

    try:
        if os.name == "nt":
            proc.terminate()
        else:
            proc.send_signal(signal.SIGINT)
    except ProcessLookupError:
        return proc.poll()

    try:
        proc.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        logger.info(f"Process {proc.pid} ignored interrupt for {grace}s; killing")
        _kill_tree(proc)
    else:
        # Browsers started by the driver may outlive it.
        alive = [c for c in children if c.is_running()]
        for c in alive:
            try:
                c.kill()
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
        if alive:
            psutil.wait_procs(alive, timeout=KILL_WAIT_SECS)
    return proc.poll()


__all__ = [
    "_is_port_open",
    "get_free_port",
    "ensure_port_free",
    "wait_for_port",
    "terminate_process",
]
