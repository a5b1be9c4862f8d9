"""Bounded retry for transient transport failures."""

import time
import random
from typing import Callable, Tuple, Type

from ..errors import ConnectionRefusedTransportError

import logging
logger = logging.getLogger(__name__)


def retry_op(
    fn: Callable,
    retries: int = 2,
    base_delay: float = 0.15,
    retry_on: Tuple[Type[BaseException], ...] = (ConnectionRefusedTransportError,),
):
    """
    Retry a function call that may fail with a transient error.

    Args:
        fn: The function to call
        retries: Number of retry attempts after the first call (default: 2)
        base_delay: Base delay between retries in seconds (default: 0.15);
            each attempt waits base_delay * attempt * (1 + jitter)
        retry_on: Exception types worth another attempt; anything else
            propagates immediately

    Returns:
        The result of the function call

    Raises:
        The last exception if all retries fail
    """
    for attempt in range(retries + 1):
        try:
            return fn()
        except retry_on as e:
            if attempt == retries:
                raise
            delay = base_delay * (attempt + 1) * (1.0 + random.random())
            logger.debug(f"Attempt {attempt + 1}/{retries + 1} failed ({e}); retrying in {delay:.2f}s")
            time.sleep(delay)
