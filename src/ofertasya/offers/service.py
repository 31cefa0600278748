"""Offer ingestion: the single entry point for webhook, poller and demo offers."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog

from ofertasya.offers.normalize import normalize_payload
from ofertasya.offers.schemas import OfferDraft, OfferRecord
from ofertasya.offers.store import DEFAULT_RECENT_LIMIT, OfferStore
from ofertasya.outbound.broadcast import NEW_OFFER_EVENT, Broadcaster

logger = structlog.get_logger()


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class IngestResult:
    offer: OfferRecord
    created: bool


class IngestionService:
    """Dedup, persist and broadcast offers.

    Store and broadcaster are injected. Persistence failures propagate to the
    caller; broadcasting is best-effort because the store is the source of
    truth and clients can always re-fetch the recent list.
    """

    def __init__(
        self,
        store: OfferStore,
        broadcaster: Broadcaster,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._broadcaster = broadcaster
        self._clock = clock

    async def submit(self, draft: OfferDraft) -> OfferRecord:
        """Return the stored offer for the draft's external id, creating it on first sight."""
        result = await self.ingest(draft)
        return result.offer

    async def ingest(self, draft: OfferDraft) -> IngestResult:
        # Store I/O is blocking; keep it off the event loop.
        offer, created = await asyncio.to_thread(self._store.insert_if_absent, draft, self._clock())

        if not created:
            logger.info("Skipping duplicate offer", external_id=draft.external_id)
            return IngestResult(offer=offer, created=False)

        logger.info(
            "New offer detected",
            external_id=offer.external_id,
            title=offer.title,
            route=f"{offer.from_city} -> {offer.to_city}",
        )
        await self._broadcast(offer)
        return IngestResult(offer=offer, created=True)

    async def ingest_payload(self, payload: Any) -> OfferRecord:
        """Normalize a raw payload and submit it."""
        return await self.submit(normalize_payload(payload))

    def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[OfferRecord]:
        return self._store.list_recent(limit)

    async def _broadcast(self, offer: OfferRecord) -> None:
        try:
            delivered = await self._broadcaster.publish(NEW_OFFER_EVENT, offer.to_wire())
        except Exception:
            logger.exception("Broadcast failed; offer remains stored", external_id=offer.external_id)
            return
        logger.debug("Offer broadcast", external_id=offer.external_id, delivered=delivered)
