"""Driver executable resolution and version detection."""

import os
import shutil
import subprocess
from typing import Optional

from ..errors import BinaryNotFoundError

import logging
logger = logging.getLogger(__name__)


def resolve_binary(name_or_path: Optional[str], executable: bool = True) -> str:
    """
    Resolve a driver binary.

    An existing file path is used as-is (made absolute); anything else is
    looked up on PATH.

    Args:
        name_or_path: Exact path or bare command name.
        executable: Require the execute bit (False for JAR files).

    Returns:
        str: Absolute path to the binary

    Raises:
        BinaryNotFoundError: If the binary cannot be found
    """
    if not name_or_path:
        raise BinaryNotFoundError(str(name_or_path))

    if os.path.isfile(name_or_path):
        if executable and not os.access(name_or_path, os.X_OK):
            raise BinaryNotFoundError(name_or_path)
        return os.path.abspath(name_or_path)

    if executable:
        found = shutil.which(name_or_path)
        if found:
            return found

    raise BinaryNotFoundError(name_or_path)


def get_binary_version(path: str, timeout: float = 10.0) -> Optional[str]:
    """
    Best effort ``<binary> --version`` output, e.g. "ChromeDriver 120.0.6099.109".
    Returns None when the binary cannot be run.
    """
    try:
        out = subprocess.check_output([path, "--version"], stderr=subprocess.STDOUT, timeout=timeout)
        return out.decode(errors="replace").strip().splitlines()[0]
    except (OSError, subprocess.SubprocessError, IndexError) as e:
        logger.debug(f"Could not read version of {path}: {e}")
        return None


__all__ = [
    "resolve_binary",
    "get_binary_version",
]
