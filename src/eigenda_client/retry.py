"""Retry with exponential backoff, and bounded status polling."""

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from eigenda_client.errors import (
    PollCancelledError,
    PollTimeoutError,
    TransportError,
)
from eigenda_client.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

async def exponential_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 5,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    jitter: bool = True,
    retryable_exceptions: tuple = (TransportError,)
) -> T:
    """
    Retry a function with exponential backoff.

    Args:
        func: Async function to retry
        max_retries: Maximum number of retry attempts
        base_delay: Base delay in seconds
        max_delay: Maximum delay in seconds
        jitter: Whether to add random jitter
        retryable_exceptions: Tuple of exception types to retry on

    Returns:
        Result of the function call

    Raises:
        Last exception if all retries fail
    """
    for attempt in range(max_retries + 1):
        try:
            return await func()
        except retryable_exceptions as e:
            if attempt == max_retries:
                if max_retries:
                    logger.error("All retries exhausted", retries=max_retries, error=str(e))
                raise

            delay = min(base_delay * (2 ** attempt), max_delay)

            # +/- 10% so concurrent clients do not retry in lockstep
            if jitter:
                delay += delay * 0.1 * (2 * random.random() - 1)

            logger.warning("Retrying after failure", attempt=attempt + 1, retries=max_retries,
                           delay=round(delay, 2), error=str(e))
            await asyncio.sleep(delay)


@dataclass(frozen=True)
class PollPolicy:
    """Bounds for a status polling loop.

    At least one of ``max_attempts`` and ``timeout`` must be set.
    """
    interval: float = 30.0
    max_attempts: Optional[int] = 120
    timeout: Optional[float] = None

    def __post_init__(self):
        if self.interval < 0:
            raise ValueError("interval must be >= 0")
        if self.max_attempts is None and self.timeout is None:
            raise ValueError("a poll policy needs max_attempts or timeout")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")


async def _wait(interval: float, cancel: Optional[asyncio.Event]) -> None:
    if cancel is None:
        await asyncio.sleep(interval)
        return
    try:
        await asyncio.wait_for(cancel.wait(), timeout=interval)
    except asyncio.TimeoutError:
        return
    raise PollCancelledError("Status polling cancelled")


async def poll_until_terminal(
    poll: Callable[[], Awaitable],
    policy: PollPolicy,
    cancel: Optional[asyncio.Event] = None,
):
    """
    Poll until a terminal blob status is observed.

    Polls are issued one at a time; the next poll starts only after the
    previous one returned and the interval elapsed.

    Args:
        poll: Async callable returning a BlobStatus
        policy: Interval and bounds of the loop
        cancel: Event that stops the loop when set

    Returns:
        The first terminal BlobStatus

    Raises:
        PollTimeoutError: if the attempt or time budget runs out
        PollCancelledError: if ``cancel`` is set
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + policy.timeout if policy.timeout is not None else None
    attempts = 0
    status = None

    while True:
        if cancel is not None and cancel.is_set():
            raise PollCancelledError("Status polling cancelled")

        status = await poll()
        attempts += 1
        if status.is_terminal:
            return status

        if policy.max_attempts is not None and attempts >= policy.max_attempts:
            raise PollTimeoutError(attempts, status)

        interval = policy.interval
        if deadline is not None:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise PollTimeoutError(attempts, status)
            interval = min(interval, remaining)

        logger.debug("Blob not terminal yet", state=str(status.status), attempt=attempts, wait=interval)
        await _wait(interval, cancel)

        if deadline is not None and loop.time() >= deadline:
            raise PollTimeoutError(attempts, status)
