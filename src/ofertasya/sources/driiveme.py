"""Driiveme marketplace listing client."""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from ofertasya.errors import UpstreamError
from ofertasya.offers.normalize import normalize_transport
from ofertasya.offers.schemas import OfferDraft, TransportListResponse, TransportRecord

logger = structlog.get_logger()

USER_AGENT = "OfertasYA/0.1 (+relocation offer watcher)"
AVAILABLE_STATUS = 0


class DriivemeSource:
    """Lists available transports from the marketplace API.

    No retries here: a failed call surfaces as ``UpstreamError`` and the poller
    tries again on its next tick.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://www.driiveme.com/api/transport/list",
        *,
        timeout_seconds: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_url = api_url
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def name(self) -> str:
        return "driiveme"

    async def fetch(self) -> list[dict[str, Any]]:
        logger.info("Polling Driiveme API", url=self._api_url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds,
                headers={"User-Agent": USER_AGENT},
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self._api_url,
                    params={"key": self._api_key},
                    json={"status": [AVAILABLE_STATUS]},
                )
        except httpx.RequestError as e:
            raise UpstreamError(f"Request to Driiveme failed: {e}") from e

        if response.status_code >= 400:
            raise UpstreamError(f"Driiveme responded HTTP {response.status_code}")

        try:
            listing = TransportListResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamError(f"Invalid Driiveme response: {e}") from e

        logger.info("Fetched transports", count=len(listing.transports))
        return listing.transports

    def normalize(self, record: dict[str, Any]) -> OfferDraft:
        return normalize_transport(TransportRecord.model_validate(record), raw=record)
