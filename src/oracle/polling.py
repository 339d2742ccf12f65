"""
Bounded wait for a decryption result.
"""
import logging
import time
from typing import Callable

from mockfhe import DecryptionTimeoutError


logger = logging.getLogger(__name__)


def wait_for_decryption(
    is_available: Callable[[], bool],
    retries: int = 30,
    interval_s: float = 0.5,
    backoff: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Poll until a clear value is available.

    Args:
        is_available: Returns True once the value can be read.
        retries: Maximum number of sleeps.
        interval_s: First sleep duration.
        backoff: Multiplier applied to the sleep after every attempt.
        sleep: Sleep function.

    Returns:
        Number of sleeps performed.

    Raises:
        DecryptionTimeoutError: If the value is still unavailable after
            `retries` sleeps.
    """
    delay = interval_s
    for attempt in range(retries + 1):
        if is_available():
            return attempt
        if attempt == retries:
            break
        logger.debug("Decryption not available, retry %d in %.2fs", attempt + 1, delay)
        sleep(delay)
        delay *= backoff

    raise DecryptionTimeoutError(
        f"Decryption not available after {retries} retries"
    )
