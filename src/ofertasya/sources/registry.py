"""Pick the offer source for the configured credential."""

from __future__ import annotations

import structlog

from ofertasya.config import Settings
from ofertasya.sources.base import OfferSource
from ofertasya.sources.demo import DemoSource
from ofertasya.sources.driiveme import DriivemeSource

logger = structlog.get_logger()


def build_source(settings: Settings) -> OfferSource:
    """Demo source when no credential (or the DEMO sentinel) is configured."""
    if settings.demo_mode:
        logger.warning("DRIIVEME_API_KEY not set or DEMO, polling synthetic offers")
        return DemoSource()

    assert settings.driiveme_api_key is not None
    return DriivemeSource(
        settings.driiveme_api_key.get_secret_value().strip(),
        settings.driiveme_api_url,
        timeout_seconds=settings.http_timeout_seconds,
    )
