"""Offer normalization: map source payloads into a canonical OfferDraft."""

from __future__ import annotations

import math
import secrets
import time
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from ofertasya.errors import MalformedPayloadError
from ofertasya.offers.schemas import DemoRecord, OfferDraft, TransportRecord

TRANSPORT_BASE_URL = "https://www.driiveme.com/transport"
FALLBACK_LINK = "https://www.driiveme.es"

DEFAULT_TITLE = "Driiveme Offer"
DEFAULT_ORIGIN = "Unknown Origin"
DEFAULT_DESTINATION = "Unknown Destination"
DEFAULT_VEHICLE = "Sedan"
DEFAULT_PRICE = 1.0


def generate_external_id(now_ms: int | None = None) -> str:
    """Fallback id for payloads that carry no identifier.

    Example:
        gen-1734567890123-9f2c01ab
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"gen-{now_ms}-{secrets.token_hex(4)}"


def transport_link(source_id: Any) -> str:
    return f"{TRANSPORT_BASE_URL}/{source_id}"


def _first_text(*values: Any) -> str | None:
    """Return the first value that renders as a non-empty string."""
    for value in values:
        if value is None or isinstance(value, (bool, dict, list)):
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _coerce_number(value: Any) -> float | None:
    """Numeric coercion; falsy, non-numeric and non-finite values count as absent."""
    if not value or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp. Never guesses: unparseable input is unset."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def normalize_webhook(body: Mapping[str, Any]) -> OfferDraft:
    """Normalize a freeform webhook body.

    Fallback priority (first non-empty wins):
    - external_id: externalId -> id -> generated
    - from/to: from/to -> origin/destination -> placeholder
    - title: title -> "<vehicle> from <from> to <to>" -> placeholder
    - link: link -> transport URL built from id -> site root
    """
    source_id = _first_text(body.get("id"))
    external_id = _first_text(body.get("externalId"), source_id) or generate_external_id()

    explicit_from = _first_text(body.get("from"), body.get("origin"))
    explicit_to = _first_text(body.get("to"), body.get("destination"))
    explicit_vehicle = _first_text(body.get("vehicle"))

    title = _first_text(body.get("title"))
    if not title and explicit_vehicle and explicit_from and explicit_to:
        title = f"{explicit_vehicle} from {explicit_from} to {explicit_to}"

    link = _first_text(body.get("link"))
    if not link and source_id:
        link = transport_link(source_id)

    price = _coerce_number(body.get("price"))

    return OfferDraft(
        external_id=external_id,
        title=title or DEFAULT_TITLE,
        from_city=explicit_from or DEFAULT_ORIGIN,
        to_city=explicit_to or DEFAULT_DESTINATION,
        vehicle=explicit_vehicle or DEFAULT_VEHICLE,
        link=link or FALLBACK_LINK,
        price=DEFAULT_PRICE if price is None else price,
        pickup_date=_parse_datetime(body.get("pickupDate")),
        dropoff_date=_parse_datetime(body.get("dropoffDate")),
        distance=_coerce_number(body.get("distance")),
        raw=dict(body),
    )


def normalize_transport(transport: TransportRecord, raw: Mapping[str, Any] | None = None) -> OfferDraft:
    """Normalize a marketplace transport record.

    Schedule dates are left unset: the listing does not say when the car must
    be picked up, and the reservation creation date is not a pickup date.
    """
    from_city = _first_text(transport.departure.city) or DEFAULT_ORIGIN
    to_city = _first_text(transport.destination.city) or DEFAULT_DESTINATION
    model = _first_text(transport.vehicle.model) or DEFAULT_VEHICLE
    category = _first_text(transport.vehicle.category)

    return OfferDraft(
        external_id=f"driiveme-{transport.id}",
        title=f"{model} from {from_city} to {to_city}",
        from_city=from_city,
        to_city=to_city,
        vehicle=f"{model} ({category})" if category else model,
        link=transport_link(transport.id),
        # Most relocation jobs are priced at a token 1 EUR
        price=DEFAULT_PRICE if transport.price is None else transport.price,
        distance=_coerce_number(transport.distance),
        raw=dict(raw) if raw is not None else transport.model_dump(mode="json", by_alias=True),
    )


def normalize_demo(record: DemoRecord) -> OfferDraft:
    return OfferDraft(
        external_id=f"demo-{record.demo_id}-{record.generated_at_ms}",
        title=f"{record.vehicle_model} from {record.from_city} to {record.to_city}",
        from_city=record.from_city,
        to_city=record.to_city,
        vehicle=f"{record.vehicle_model} (Demo)",
        link=record.link,
        price=record.price,
        pickup_date=record.pickup_date,
        dropoff_date=record.dropoff_date,
        distance=record.distance,
        raw={"demo": True},
    )


def normalize_payload(payload: Any) -> OfferDraft:
    """Normalize any inbound payload.

    A body with an explicit externalId is always a webhook offer. Otherwise the
    structured marketplace transport shape is tried first, falling back to the
    generic webhook key-value bag. Only non-object payloads are rejected.
    """
    if isinstance(payload, DemoRecord):
        return normalize_demo(payload)
    if isinstance(payload, TransportRecord):
        return normalize_transport(payload)
    if not isinstance(payload, Mapping):
        raise MalformedPayloadError(f"Expected a JSON object, got {type(payload).__name__}")
    if _first_text(payload.get("externalId")):
        return normalize_webhook(payload)

    try:
        transport = TransportRecord.model_validate(payload)
    except ValidationError:
        return normalize_webhook(payload)
    return normalize_transport(transport, raw=payload)
