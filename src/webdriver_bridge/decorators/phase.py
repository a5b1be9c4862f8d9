# webdriver_bridge/decorators/phase.py

import functools
from typing import Callable

from ..errors import BridgeError


__all__ = [
    "in_phase",
]


def in_phase(phase: str) -> Callable:
    """
    Decorator for public operations:
      - Any BridgeError escaping without a phase gets ``phase`` stamped on it.
      - Errors that already carry a phase (raised by a lower layer) keep theirs.
      - Non-bridge exceptions propagate untouched.
    """

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except BridgeError as e:
                if not e.phase:
                    e.phase = phase
                raise
        return wrapper

    return decorator
