"""Driver service lifecycle: spawn, readiness, orderly shutdown."""

import io
import os
import platform
import subprocess
import threading
import weakref
from typing import List, Optional, Sequence

from ..config.options import ServiceConfig
from ..config.paths import driver_log_path
from ..decorators import in_phase
from ..errors import (
    PHASE_SERVICE_START,
    PHASE_SERVICE_STOP,
    BridgeError,
    ConfigurationError,
    ProcessError,
    ProcessExitedError,
    SpawnError,
)
from .executable import resolve_binary
from .framebuffer import FrameBuffer
from .process import ensure_port_free, terminate_process, wait_for_port

import logging
logger = logging.getLogger(__name__)


class Service:
    """
    One spawned driver process owning one listening port.

    Created by ``start_service`` and the family constructors below; the
    returned object is already accepting connections. ``stop`` is idempotent
    and bounded by the grace period plus the kill wait.
    """

    def __init__(
        self,
        binary: str,
        port: int,
        cmd: List[str],
        config: Optional[ServiceConfig] = None,
        url_prefix: str = "",
    ):
        self.binary = binary
        self.port = port
        self.cmd = cmd
        self.config = config or ServiceConfig()
        self.host = self.config.host
        self.url_prefix = url_prefix
        self.proc: Optional[subprocess.Popen] = None
        self.frame_buffer: Optional[FrameBuffer] = None
        self.output_path: Optional[str] = None
        self._output_handle = None
        self._lock = threading.Lock()
        self._stopped = False
        self._stop_error: Optional[BaseException] = None
        self._sessions = weakref.WeakSet()

    def __repr__(self) -> str:
        return f"Service(binary={self.binary!r}, url={self.url!r}, pid={self.pid})"

    @property
    def url(self) -> str:
        """Base URL sessions should be opened against."""
        return f"http://{self.host}:{self.port}{self.url_prefix}"

    @property
    def pid(self) -> Optional[int]:
        return self.proc.pid if self.proc is not None else None

    @property
    def stopped(self) -> bool:
        return self._stopped

    def is_running(self) -> bool:
        return self.proc is not None and self.proc.poll() is None

    def register_session(self, session) -> None:
        """Sessions registered here are marked closed when the service stops."""
        self._sessions.add(session)

    def __enter__(self) -> "Service":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # -- start --------------------------------------------------------------

    def _child_env(self) -> dict:
        env = dict(os.environ)
        env.update(self.config.environment)
        if self.config.display:
            env["DISPLAY"] = self.config.display
            if self.config.xauth_path:
                env["XAUTHORITY"] = self.config.xauth_path
        elif self.config.frame_buffer:
            self.frame_buffer = FrameBuffer.start(self.config.frame_buffer_screen)
            env.update(self.frame_buffer.env)
        return env

    def _open_output(self):
        out = self.config.output
        if out is None or isinstance(out, (str, os.PathLike)):
            self.output_path = os.fspath(out) if out is not None else driver_log_path(self.binary, self.port)
            self._output_handle = open(self.output_path, "ab")
            return self._output_handle
        if isinstance(out, int):
            return out
        try:
            out.fileno()
        except (AttributeError, OSError, io.UnsupportedOperation) as e:
            raise ConfigurationError(
                f"output sink {out!r} has no file descriptor; pass a path or a real file",
                phase=PHASE_SERVICE_START,
            ) from e
        return out

    def _close_output(self) -> None:
        if self._output_handle is not None:
            try:
                self._output_handle.close()
            finally:
                self._output_handle = None

    def _cleanup_failed_start(self) -> None:
        self._stopped = True
        try:
            if self.proc is not None and self.proc.poll() is None:
                logger.info(f"Terminating {self.binary} pid={self.proc.pid} after failed start")
                terminate_process(self.proc, grace=self.config.stop_grace_period)
        finally:
            try:
                if self.frame_buffer is not None:
                    self.frame_buffer.stop()
            finally:
                self._close_output()

    def start(self) -> "Service":
        """
        Verify the port is free, optionally start a frame buffer, spawn the
        driver and block until its port accepts connections.

        Every failure terminates whatever was started before re-raising.
        """
        ensure_port_free(self.host, self.port)
        try:
            env = self._child_env()
            stdout = self._open_output()
            kwargs = {}
            if platform.system() == "Windows":
                kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW
            try:
                self.proc = subprocess.Popen(
                    self.cmd,
                    env=env,
                    stdin=subprocess.DEVNULL,
                    stdout=stdout,
                    stderr=subprocess.STDOUT,
                    **kwargs,
                )
            except OSError as e:
                raise SpawnError(f"failed to spawn {self.cmd!r}: {e}") from e

            logger.info(f"Spawned {self.binary} pid={self.proc.pid} on port {self.port}")
            wait_for_port(
                self.host,
                self.port,
                timeout=self.config.readiness_timeout,
                proc=self.proc,
                poll_interval=self.config.poll_interval,
                binary=self.binary,
            )
        except BaseException:
            self._cleanup_failed_start()
            raise

        logger.info(f"Service ready at {self.url}")
        return self

    # -- stop ---------------------------------------------------------------

    def stop(self) -> None:
        """
        Interrupt the driver, kill its process tree after the grace period,
        stop the frame buffer and release the output sink.

        Cleanup always runs to completion; the first error is raised
        afterwards. Later calls return the same outcome.
        """
        with self._lock:
            if self._stopped:
                if self._stop_error is not None:
                    raise self._stop_error
                return
            self._stopped = True

            for session in list(self._sessions):
                session._mark_closed("service stopped")

            errors: List[BaseException] = []
            if self.proc is not None:
                exited_early = self.proc.poll()
                try:
                    code = terminate_process(self.proc, grace=self.config.stop_grace_period)
                    if code is None:
                        errors.append(ProcessError(f"driver pid={self.proc.pid} could not be reaped", PHASE_SERVICE_STOP))
                    elif exited_early is not None and exited_early != 0:
                        errors.append(ProcessExitedError(self.binary, exited_early, PHASE_SERVICE_STOP))
                    else:
                        logger.info(f"Stopped {self.binary} pid={self.proc.pid} (exit {code})")
                except Exception as e:
                    errors.append(e)

            if self.frame_buffer is not None:
                try:
                    self.frame_buffer.stop()
                except Exception as e:
                    errors.append(e)

            try:
                self._close_output()
            except OSError as e:
                errors.append(e)

            if errors:
                err = errors[0]
                if not isinstance(err, BridgeError):
                    wrapped = ProcessError(f"error stopping {self.binary}: {err}", PHASE_SERVICE_STOP)
                    wrapped.__cause__ = err
                    err = wrapped
                else:
                    err.phase = PHASE_SERVICE_STOP
                self._stop_error = err
                logger.error(f"Stopping {self.binary} failed: {err}")
                raise err


def _format_args(args: Sequence[str], port: int) -> List[str]:
    return [a.replace("{port}", str(port)) for a in args]


@in_phase(PHASE_SERVICE_START)
def start_service(
    binary_path: str,
    port: int,
    config: Optional[ServiceConfig] = None,
    args: Sequence[str] = ("--port={port}",),
    url_prefix: str = "",
) -> Service:
    """
    Start an arbitrary WebDriver-compatible binary.

    ``args`` may contain ``{port}`` placeholders; ``config.extra_args`` are
    appended verbatim.
    """
    config = config or ServiceConfig()
    binary = resolve_binary(binary_path)
    cmd = [binary] + _format_args(args, port) + list(config.extra_args)
    return Service(binary, port, cmd, config, url_prefix).start()


@in_phase(PHASE_SERVICE_START)
def chromedriver_service(path: str, port: int, config: Optional[ServiceConfig] = None) -> Service:
    """ChromeDriver serving under /wd/hub."""
    return start_service(path, port, config, args=("--port={port}", "--url-base=wd/hub"), url_prefix="/wd/hub")


@in_phase(PHASE_SERVICE_START)
def geckodriver_service(path: str, port: int, config: Optional[ServiceConfig] = None) -> Service:
    """geckodriver serving at the root path."""
    return start_service(path, port, config, args=("--port", "{port}"))


def build_selenium_command(java: str, jar: str, port: int, config: ServiceConfig) -> List[str]:
    """
    Command line for the Selenium standalone server.

    Secondary driver binaries are passed as -D system properties; an HTMLUnit
    driver JAR switches to an explicit classpath and launcher class.
    """
    cmd = [java]
    if config.gecko_driver_path:
        cmd.append(f"-Dwebdriver.gecko.driver={resolve_binary(config.gecko_driver_path)}")
    if config.chrome_driver_path:
        cmd.append(f"-Dwebdriver.chrome.driver={resolve_binary(config.chrome_driver_path)}")
    if config.htmlunit_path:
        htmlunit = resolve_binary(config.htmlunit_path, executable=False)
        cmd += ["-cp", os.pathsep.join([jar, htmlunit]), "org.openqa.grid.selenium.GridLauncherV3"]
    else:
        cmd += ["-jar", jar]
    cmd += ["-port", str(port)]
    return cmd + list(config.extra_args)


@in_phase(PHASE_SERVICE_START)
def selenium_service(jar_path: str, port: int, config: Optional[ServiceConfig] = None) -> Service:
    """Selenium standalone server (java -jar) serving under /wd/hub."""
    config = config or ServiceConfig()
    jar = resolve_binary(jar_path, executable=False)
    java = resolve_binary(config.java_path or "java")
    cmd = build_selenium_command(java, jar, port, config)
    return Service(jar, port, cmd, config, url_prefix="/wd/hub").start()


__all__ = [
    "Service",
    "start_service",
    "chromedriver_service",
    "geckodriver_service",
    "selenium_service",
    "build_selenium_command",
]
