"""Synthetic offers for running without a marketplace credential."""

from __future__ import annotations

import random
import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import structlog

from ofertasya.offers.normalize import normalize_demo
from ofertasya.offers.schemas import DemoRecord, OfferDraft

logger = structlog.get_logger()

DEMO_CITIES = [
    "Madrid",
    "Barcelona",
    "Valencia",
    "Sevilla",
    "Bilbao",
    "Málaga",
    "Zaragoza",
    "Alicante",
]
DEMO_VEHICLES = [
    "Renault Clio",
    "Fiat 500",
    "Peugeot 208",
    "Volkswagen Polo",
    "Citroen C3",
    "Ford Fiesta",
]
DROPOFF_AFTER = timedelta(days=2)


class DemoSource:
    """Generates 1-3 random offers per fetch."""

    def __init__(
        self,
        rng: random.Random | None = None,
        now_fn: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._rng = rng or random.Random()
        self._now_fn = now_fn

    @property
    def name(self) -> str:
        return "demo"

    async def fetch(self) -> list[DemoRecord]:
        count = self._rng.randint(1, 3)
        logger.info("Running in demo mode, generating mock offers", count=count)
        return [self._make_record() for _ in range(count)]

    def normalize(self, record: DemoRecord) -> OfferDraft:
        return normalize_demo(record)

    def _make_record(self) -> DemoRecord:
        from_city, to_city = self._rng.sample(DEMO_CITIES, 2)
        now = self._now_fn()
        return DemoRecord(
            demo_id=self._rng.randrange(100_000),
            from_city=from_city,
            to_city=to_city,
            vehicle_model=self._rng.choice(DEMO_VEHICLES),
            pickup_date=now,
            dropoff_date=now + DROPOFF_AFTER,
            distance=float(self._rng.randint(100, 599)),
            generated_at_ms=int(time.time() * 1000),
        )
