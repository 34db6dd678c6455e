"""Model-facing protocols and the shared retry helper."""

import asyncio
import logging
from typing import Awaitable, Callable, Protocol, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class ContinuationGenerator(Protocol):
    """Writes one continuation of the given text."""

    async def generate(self, prompt: str) -> str:
        ...


class Assistant(Protocol):
    """Instruction-following model used to judge continuations."""

    async def complete(self, system_prompt: str, user_message: str) -> str:
        ...


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    retry_on: tuple,
    max_retries: int = 3,
    base_delay: float = 1.0,
) -> T:
    """
    Await fn(), retrying on `retry_on` errors with exponential backoff.
    The last error is re-raised once retries are exhausted.
    """
    attempt = 0
    while True:
        try:
            return await fn()
        except retry_on as exc:
            if attempt >= max_retries:
                raise
            delay = base_delay * (2 ** attempt)
            attempt += 1
            logger.debug("Retry attempt %d/%d after %.1fs: %s", attempt, max_retries, delay, exc)
            await asyncio.sleep(delay)
