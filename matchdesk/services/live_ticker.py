"""
Periodic re-evaluation of a live match.

Every tick recomputes the clock from the cached snapshot and hands it to a
clock handler; independently a background revalidation refreshes the match
views. A slow or failing revalidation never delays the clock.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import suppress

from matchdesk.schemas import ClockResponse

logger = logging.getLogger(__name__)


class LiveTicker:
    def __init__(
        self,
        compute_clock: Callable[[], Awaitable[ClockResponse]],
        clock_handler: Callable[[ClockResponse], Awaitable[None]],
        *,
        revalidate: Callable[[], Awaitable[object]] | None = None,
        interval_seconds: float = 10.0,
    ):
        self.compute_clock = compute_clock
        self.clock_handler = clock_handler
        self.revalidate = revalidate
        self.interval_seconds = interval_seconds
        self._revalidation: asyncio.Task | None = None

    async def tick(self) -> ClockResponse:
        """One evaluation: deliver the clock, kick off revalidation."""
        self._start_revalidation()
        clock = await self.compute_clock()
        await self.clock_handler(clock)
        return clock

    def _start_revalidation(self) -> None:
        if self.revalidate is None:
            return
        if self._revalidation is not None and not self._revalidation.done():
            # Previous one still running; skip rather than pile up
            return
        self._revalidation = asyncio.create_task(self._run_revalidation())

    async def _run_revalidation(self) -> None:
        try:
            await self.revalidate()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Background revalidation failed")

    async def run(self, *, stop_event: asyncio.Event) -> None:
        """Tick until stop_event is set."""
        logger.info("Live ticker started (every %ss)", self.interval_seconds)
        try:
            while not stop_event.is_set():
                try:
                    await self.tick()
                except asyncio.CancelledError:
                    raise
                except Exception:
                    logger.exception("Live tick failed")

                with suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(stop_event.wait(), timeout=self.interval_seconds)
        finally:
            await self.close()
            logger.info("Live ticker stopped")

    async def close(self) -> None:
        task, self._revalidation = self._revalidation, None
        if task is not None and not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
