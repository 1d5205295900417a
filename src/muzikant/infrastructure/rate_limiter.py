"""
Outbound call governor for the Spotify Web API.

Hey future me - this is the ONE place that decides when a Web API request may
start. Two knobs:

- a global backoff deadline (epoch ms). SpotifyClient moves it forward when
  Spotify answers 429; every new request sleeps until it has passed.
- a permit pool (asyncio.Semaphore) of capacity N. N=1 means strict
  serialization: Spotify never sees two of our requests at the same time.

Token refresh calls to accounts.spotify.com do NOT go through here.

USAGE:
    governor = SpotifyRateGovernor(max_concurrent_calls=1)

    async with governor.gated():
        response = await client.get(url)

    # On 429:
    governor.defer_until(now_ms + retry_after * 1000)
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from muzikant.domain.exceptions import (
    SPOTIFY_UNAVAILABLE_MESSAGE,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)


def _epoch_ms_now() -> int:
    return int(time.time() * 1000)


def _format_epoch_ms(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=UTC).isoformat()


class SpotifyRateGovernor:
    """Global backoff deadline plus bounded concurrency permit.

    Attributes:
        max_concurrent_calls: Permit pool capacity (clamped to >= 1)
        permit_timeout: Seconds to wait for a permit, None waits forever
    """

    def __init__(
        self,
        max_concurrent_calls: int = 1,
        permit_timeout: float | None = None,
        clock: Callable[[], int] = _epoch_ms_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.max_concurrent_calls = max(1, max_concurrent_calls)
        self.permit_timeout = permit_timeout
        self._clock = clock
        self._sleep = sleep
        self._retry_after_epoch_ms = 0
        self._permits = asyncio.Semaphore(self.max_concurrent_calls)
        self._in_use = 0

    @property
    def retry_after_epoch_ms(self) -> int:
        """Earliest wall-clock ms at which a new request may begin (0 = now)."""
        return self._retry_after_epoch_ms

    @property
    def available_permits(self) -> int:
        """Free permits right now (for diagnostics and tests)."""
        return self.max_concurrent_calls - self._in_use

    def now_ms(self) -> int:
        """Current wall-clock time in epoch milliseconds."""
        return self._clock()

    # Hey future me - a later 429 with a SHORTER Retry-After moves the deadline
    # earlier. That's fine: the deadline is advisory, Spotify's own header on the
    # next response is what really counts.
    def defer_until(self, epoch_ms: int) -> None:
        """Set the global backoff deadline."""
        self._retry_after_epoch_ms = epoch_ms
        logger.info(
            "Spotify requests deferred until %s", _format_epoch_ms(epoch_ms)
        )

    async def wait_if_needed(self) -> None:
        """Sleep until the backoff deadline has passed (no-op when unrestricted)."""
        retry_until = self._retry_after_epoch_ms
        now = self._clock()
        if now < retry_until:
            wait_ms = retry_until - now
            logger.info(
                "Waiting %d ms before Spotify request (rate limited until %s).",
                wait_ms,
                _format_epoch_ms(retry_until),
            )
            await self._sleep(wait_ms / 1000)

    async def _acquire(self) -> None:
        # asyncio.Semaphore.acquire() never keeps a permit when it is cancelled
        # or timed out, so nothing to undo here.
        if self.permit_timeout is None:
            await self._permits.acquire()
        else:
            try:
                await asyncio.wait_for(
                    self._permits.acquire(), timeout=self.permit_timeout
                )
            except TimeoutError as exc:
                logger.warning(
                    "No Spotify permit within %.1fs (%d in use)",
                    self.permit_timeout,
                    self._in_use,
                )
                raise ServiceUnavailableError(SPOTIFY_UNAVAILABLE_MESSAGE) from exc
        self._in_use += 1

    def _release(self) -> None:
        self._in_use -= 1
        self._permits.release()

    @asynccontextmanager
    async def gated(self) -> AsyncIterator[None]:
        """Wait out the backoff deadline, then hold one permit for the block.

        Usage:
            async with governor.gated():
                response = await client.get(url)

        Raises:
            ServiceUnavailableError: If no permit is free within permit_timeout
        """
        await self.wait_if_needed()
        await self._acquire()
        try:
            yield
        finally:
            self._release()


__all__ = ["SpotifyRateGovernor"]
