"""Virtual X display (Xvfb) for running browsers in headless environments."""

import os
import time
import select
import shutil
import tempfile
import subprocess
from typing import Dict, Optional

from ..constants import DEFAULT_SCREEN_SIZE, FRAME_BUFFER_START_SECS
from ..errors import FrameBufferError
from .executable import resolve_binary
from .process import terminate_process

import logging
logger = logging.getLogger(__name__)


def _read_display(fd: int, proc: subprocess.Popen, timeout: float) -> str:
    """Read the display number Xvfb writes to ``fd`` followed by a newline."""
    deadline = time.monotonic() + timeout
    buf = b""
    while b"\n" not in buf:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise FrameBufferError(f"Xvfb did not report a display within {timeout:.1f}s")
        ready, _, _ = select.select([fd], [], [], min(remaining, 0.25))
        if not ready:
            continue
        chunk = os.read(fd, 64)
        if not chunk:
            code = proc.poll()
            raise FrameBufferError(f"Xvfb exited before reporting a display (code {code})")
        buf += chunk
    display = buf.decode().strip()
    if not display.isdigit():
        raise FrameBufferError(f"Xvfb reported an invalid display {display!r}")
    return display


class FrameBuffer:
    """
    A running Xvfb server.

    ``env`` holds the variables a child process needs to render into it.
    """

    def __init__(self, display: str, auth_path: Optional[str], proc: Optional[subprocess.Popen]):
        self.display = display
        self.auth_path = auth_path
        self.proc = proc
        self._stopped = False

    @property
    def env(self) -> Dict[str, str]:
        env = {"DISPLAY": f":{self.display}"}
        if self.auth_path:
            env["XAUTHORITY"] = self.auth_path
        return env

    @classmethod
    def start(cls, screen: str = DEFAULT_SCREEN_SIZE, timeout: float = FRAME_BUFFER_START_SECS) -> "FrameBuffer":
        """
        Start Xvfb on the first free display and, when ``xauth`` is installed,
        generate a trusted cookie in a private XAUTHORITY file.

        Raises:
            BinaryNotFoundError: Xvfb is not installed
            FrameBufferError: Xvfb or xauth failed
        """
        xvfb = resolve_binary("Xvfb")
        r, w = os.pipe()
        cmd = [xvfb, "-displayfd", str(w), "-nolisten", "tcp"]
        if screen:
            cmd += ["-screen", "0", screen]
        try:
            proc = subprocess.Popen(
                cmd,
                pass_fds=(w,),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            os.close(r)
            os.close(w)
            raise FrameBufferError(f"failed to spawn Xvfb: {e}") from e
        os.close(w)

        fb = cls("", None, proc)
        try:
            try:
                fb.display = _read_display(r, proc, timeout)
            finally:
                os.close(r)
            fb._authorize()
        except Exception:
            fb.stop()
            raise

        logger.info(f"Started Xvfb on display :{fb.display}, pid={proc.pid}")
        return fb

    def _authorize(self) -> None:
        xauth = shutil.which("xauth")
        if not xauth:
            logger.debug("xauth not installed; running the display without an auth cookie")
            return
        fd, path = tempfile.mkstemp(prefix="webdriver-bridge-xvfb-")
        os.close(fd)
        self.auth_path = path
        env = dict(os.environ, XAUTHORITY=path)
        try:
            result = subprocess.run(
                [xauth, "generate", f":{self.display}", ".", "trusted"],
                env=env,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                timeout=FRAME_BUFFER_START_SECS,
            )
        except subprocess.TimeoutExpired as e:
            raise FrameBufferError(f"xauth generate timed out for :{self.display}") from e
        if result.returncode != 0:
            raise FrameBufferError(
                f"xauth generate failed for :{self.display}: {result.stderr.decode(errors='replace').strip()}"
            )

    def stop(self) -> None:
        """Stop Xvfb and remove the auth file. Safe to call more than once."""
        if self._stopped:
            return
        self._stopped = True
        if self.proc is not None:
            terminate_process(self.proc, grace=1.0)
            logger.info(f"Stopped Xvfb on display :{self.display}")
        if self.auth_path:
            try:
                os.remove(self.auth_path)
            except FileNotFoundError:
                pass


__all__ = [
    "FrameBuffer",
]
