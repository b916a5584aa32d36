from __future__ import annotations

import asyncio
import logging
import time
from datetime import timedelta
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple, Union

if TYPE_CHECKING:
    from .base import Sample, SampleSink

logger = logging.getLogger(__name__)


class ReplayCache:
    """Per-group TTL cache of the samples emitted by the last good refresh.

    ``try_replay`` takes the group lock. On a miss the lock stays held until
    the refresh started with ``begin_refresh`` is completed, so at most one
    refresh per group is in flight and nobody replays a half-filled cache.
    """

    def __init__(
        self,
        enabled: bool = False,
        ttl: Union[timedelta, float] = timedelta(seconds=20),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.enabled = enabled
        self.ttl = ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)
        self.clock = clock
        self.last_refresh: Optional[float] = None
        self.samples: List[Sample] = []
        self._lock = asyncio.Lock()

    def is_fresh(self) -> bool:
        if self.last_refresh is None:
            return False
        return self.clock() < self.last_refresh + self.ttl

    async def try_replay(self, out: SampleSink) -> bool:
        if not self.enabled:
            return False

        await self._lock.acquire()
        try:
            if self.is_fresh():
                for sample in self.samples:
                    await out.send(sample)
                self._lock.release()
                return True
        except BaseException:
            self._lock.release()
            raise

        # Stale: keep the lock for the refresh that follows.
        self.samples.clear()
        return False

    def begin_refresh(self, out: SampleSink) -> Tuple[_RefreshSink, RefreshHandle]:
        return _RefreshSink(self, out), RefreshHandle(self)

    def _finish(self, ok: bool) -> None:
        if ok:
            self.last_refresh = self.clock()
        else:
            self.samples.clear()
        if self.enabled and self._lock.locked():
            self._lock.release()


class _RefreshSink:
    """Forwards samples to the scrape output and records them in the cache."""

    def __init__(self, cache: ReplayCache, out: SampleSink) -> None:
        self._cache = cache
        self._out = out

    async def send(self, sample: Sample) -> None:
        await self._out.send(sample)
        if self._cache.enabled:
            self._cache.samples.append(sample)


class RefreshHandle:
    def __init__(self, cache: ReplayCache) -> None:
        self._cache = cache
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def complete(self, ok: bool) -> None:
        """Mark the refresh finished; only a successful one makes the cache fresh."""
        if self._done:
            return
        self._done = True
        self._cache._finish(ok)
        if not ok:
            logger.debug("Refresh failed, cache left empty and stale")
