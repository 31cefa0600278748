"""Offer source contract for the poller."""

from __future__ import annotations

from typing import Any, Protocol

from ofertasya.offers.schemas import OfferDraft


class OfferSource(Protocol):
    @property
    def name(self) -> str: ...

    async def fetch(self) -> list[Any]:
        """Return one batch of raw candidate records."""

    def normalize(self, record: Any) -> OfferDraft:
        """Map one raw record from this source to an OfferDraft."""
