"""Pytest fixtures for Ofertas YA tests."""

from collections.abc import Generator
from typing import Any

import pytest
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from ofertasya.db import build_engine, build_sessionmaker
from ofertasya.models import Base
from ofertasya.offers.service import IngestionService
from ofertasya.offers.store import SqlOfferStore

from .fakes import RecordingBroadcaster


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine shared across threads."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return build_sessionmaker(engine)


@pytest.fixture
def store(session_factory: sessionmaker[Session]) -> SqlOfferStore:
    return SqlOfferStore(session_factory)


@pytest.fixture
def broadcaster() -> RecordingBroadcaster:
    return RecordingBroadcaster()


@pytest.fixture
def service(store: SqlOfferStore, broadcaster: RecordingBroadcaster) -> IngestionService:
    return IngestionService(store, broadcaster)


@pytest.fixture
def sample_transport() -> dict[str, Any]:
    """Transport record as returned by the marketplace listing endpoint."""
    return {
        "id": 48213,
        "status": 0,
        "departure": {
            "id": 11,
            "name": "Agencia Atocha",
            "city": "Madrid",
            "country": "ES",
            "latitude": 40.4065,
            "longitude": -3.6895,
        },
        "destination": {
            "id": 27,
            "name": "Aeropuerto Manises",
            "city": "Valencia",
            "country": "ES",
            "latitude": 39.4893,
            "longitude": -0.4816,
        },
        "vehicle": {
            "id": 903,
            "category": "Compact",
            "model": "Renault Clio",
            "registration": "1234-KLM",
            "vin": "VF1RJA00000000000",
        },
        "reservation": {"id": 5, "creationDate": "2026-10-18T09:00:00Z"},
        "distance": 355,
    }
