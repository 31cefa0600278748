"""Recurring marketplace polling."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum

import structlog

from ofertasya.offers.service import IngestionService
from ofertasya.sources.base import OfferSource

logger = structlog.get_logger()

DEFAULT_INTERVAL_SECONDS = 60.0


class PollerState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    STOPPED = "stopped"


class Poller:
    """Fetch a batch immediately, then every ``interval_seconds``.

    At most one schedule per instance. ``stop`` cancels a pending wait but lets
    an in-flight fetch finish. Failures never end the schedule: the next tick
    simply tries again.
    """

    def __init__(
        self,
        service: IngestionService,
        source: OfferSource,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._service = service
        self._source = source
        self.interval_seconds = interval_seconds
        self._sleep = sleep
        self._state = PollerState.IDLE
        self._task: asyncio.Task[None] | None = None
        self._waiting = False

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    def start(self, interval_seconds: float | None = None) -> None:
        """Schedule polling on the running loop. No-op if already scheduled."""
        if self._state is PollerState.SCHEDULED:
            return
        if interval_seconds is not None:
            self.interval_seconds = interval_seconds

        self._state = PollerState.SCHEDULED
        logger.info("Starting polling", source=self._source.name, interval_seconds=self.interval_seconds)
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        """Stop future ticks. Idempotent."""
        if self._state is not PollerState.SCHEDULED:
            return
        self._state = PollerState.STOPPED
        logger.info("Stopping polling", source=self._source.name)
        if self._task is not None and self._waiting:
            self._task.cancel()

    def _is_current(self, task: asyncio.Task[object] | None) -> bool:
        return self._state is PollerState.SCHEDULED and self._task is task

    async def _run(self) -> None:
        me = asyncio.current_task()
        while self._is_current(me):
            await self.poll_once()
            if not self._is_current(me):
                break
            self._waiting = True
            try:
                await self._sleep(self.interval_seconds)
            except asyncio.CancelledError:
                break
            finally:
                self._waiting = False

    async def poll_once(self) -> dict[str, int | str]:
        """Run one fetch cycle and submit every record sequentially.

        Returns:
            dict with counts: {fetched, new, duplicates, errors}, plus ``error``
            when the source itself failed.
        """
        try:
            records = await self._source.fetch()
        except Exception as e:
            logger.error("Error fetching offers", source=self._source.name, error=str(e))
            return {"fetched": 0, "new": 0, "duplicates": 0, "errors": 0, "error": str(e)}

        new = duplicates = errors = 0
        for record in records:
            try:
                result = await self._service.ingest(self._source.normalize(record))
            except Exception:
                logger.exception("Failed to ingest polled record", source=self._source.name)
                errors += 1
                continue

            if result.created:
                new += 1
            else:
                duplicates += 1

        stats: dict[str, int | str] = {"fetched": len(records), "new": new, "duplicates": duplicates, "errors": errors}
        logger.info("Poll cycle complete", source=self._source.name, **stats)
        return stats
