"""Offer persistence with atomic insert-if-absent."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Protocol

import structlog
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ofertasya.db import get_db
from ofertasya.models import Offer
from ofertasya.offers.schemas import OfferDraft, OfferRecord

logger = structlog.get_logger()

DEFAULT_RECENT_LIMIT = 50

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class OfferStore(Protocol):
    def insert_if_absent(self, draft: OfferDraft, detected_at: datetime) -> tuple[OfferRecord, bool]:
        """Persist the draft unless its external id exists; return (record, created)."""

    def get_by_external_id(self, external_id: str) -> OfferRecord | None: ...

    def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[OfferRecord]: ...


def serialize_raw(raw: Any) -> str:
    """Serialize the source payload for audit; never interpreted downstream."""
    return json.dumps(raw if raw is not None else {}, ensure_ascii=False, default=str)


def _offer_values(draft: OfferDraft, detected_at: datetime) -> dict[str, Any]:
    return {
        "external_id": draft.external_id,
        "title": draft.title,
        "from_city": draft.from_city,
        "to_city": draft.to_city,
        "vehicle": draft.vehicle,
        "price": draft.price,
        "pickup_date": draft.pickup_date,
        "dropoff_date": draft.dropoff_date,
        "link": draft.link,
        "distance": draft.distance,
        "raw_json": serialize_raw(draft.raw),
        "detected_at": detected_at,
    }


class SqlOfferStore:
    """Offer store backed by SQLAlchemy.

    Uniqueness is enforced by the ``offers.external_id`` unique constraint, so
    two racing submissions of the same id create exactly one row.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory

    def insert_if_absent(self, draft: OfferDraft, detected_at: datetime) -> tuple[OfferRecord, bool]:
        values = _offer_values(draft, detected_at)

        with get_db(self._session_factory) as session:
            insert_fn = _UPSERT_INSERTS.get(session.get_bind().dialect.name)
            if insert_fn is not None:
                stmt = insert_fn(Offer.__table__).values(**values)
                stmt = stmt.on_conflict_do_nothing(index_elements=["external_id"])
                created = session.execute(stmt).rowcount == 1
            else:
                created = self._insert_or_conflict(session, values)

            row = session.scalars(select(Offer).filter_by(external_id=draft.external_id)).one()
            return OfferRecord.model_validate(row), created

    @staticmethod
    def _insert_or_conflict(session: Session, values: dict[str, Any]) -> bool:
        try:
            with session.begin_nested():
                session.add(Offer(**values))
        except IntegrityError:
            logger.debug("Insert hit unique constraint", external_id=values["external_id"])
            return False
        return True

    def get_by_external_id(self, external_id: str) -> OfferRecord | None:
        with get_db(self._session_factory) as session:
            row = session.scalars(select(Offer).filter_by(external_id=external_id)).first()
            return OfferRecord.model_validate(row) if row else None

    def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[OfferRecord]:
        with get_db(self._session_factory) as session:
            rows = session.scalars(select(Offer).order_by(Offer.detected_at.desc()).limit(limit)).all()
            return [OfferRecord.model_validate(row) for row in rows]
