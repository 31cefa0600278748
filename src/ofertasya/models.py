"""SQLAlchemy ORM models."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Float, Index, String, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Offer(Base):
    """A detected vehicle-relocation offer. Written once, never updated."""

    __tablename__ = "offers"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    external_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)  # Dedup key
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    from_city: Mapped[str] = mapped_column(String(255), nullable=False)
    to_city: Mapped[str] = mapped_column(String(255), nullable=False)
    vehicle: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[float | None] = mapped_column(Float)
    pickup_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    dropoff_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    link: Mapped[str] = mapped_column(String(1000), nullable=False)
    distance: Mapped[float | None] = mapped_column(Float)
    raw_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    detected_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_offers_detected_at", "detected_at"),)
