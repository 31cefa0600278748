"""Offer shapes: canonical pre-offer, wire record, and upstream payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


@dataclass(frozen=True)
class OfferDraft:
    """Canonical pre-offer produced by the normalizer, before persistence."""

    external_id: str
    title: str
    from_city: str
    to_city: str
    vehicle: str
    link: str
    price: float | None = None
    pickup_date: datetime | None = None
    dropoff_date: datetime | None = None
    distance: float | None = None
    raw: Any = field(default_factory=dict)


class OfferRecord(BaseModel):
    """A persisted offer as returned by the API and broadcast to clients."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: UUID
    external_id: str
    title: str
    from_city: str
    to_city: str
    vehicle: str
    price: float | None = None
    pickup_date: datetime | None = None
    dropoff_date: datetime | None = None
    link: str
    distance: float | None = None
    raw_json: str = "{}"
    detected_at: datetime

    @field_validator("pickup_date", "dropoff_date", "detected_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        # SQLite hands back naive datetimes
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# Driiveme marketplace transport payloads


class TransportLocation(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int | None = None
    name: str | None = None
    city: str
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class TransportVehicle(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int | None = None
    category: str | None = None
    model: str
    registration: str | None = None
    vin: str | None = None


class TransportReservation(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int | None = None
    creation_date: str | None = Field(None, alias="creationDate")


class TransportRecord(BaseModel):
    """One transport from the marketplace listing endpoint."""

    model_config = ConfigDict(extra="allow")

    id: int | str
    status: int | None = None
    departure: TransportLocation
    destination: TransportLocation
    vehicle: TransportVehicle
    reservation: TransportReservation | None = None
    distance: float | None = None
    price: float | None = None


class TransportListResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    transports: list[dict[str, Any]] = Field(default_factory=list)


@dataclass(frozen=True)
class DemoRecord:
    """Synthetic offer produced in demo mode."""

    demo_id: int
    from_city: str
    to_city: str
    vehicle_model: str
    pickup_date: datetime
    dropoff_date: datetime
    distance: float
    generated_at_ms: int
    price: float = 1.0
    link: str = "https://www.driiveme.es/ofertas-alquiler-coches-1.html"
