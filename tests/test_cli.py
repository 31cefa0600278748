"""Tests for CLI commands (database and source patched)."""

import json
from datetime import UTC, datetime
from unittest.mock import patch

from typer.testing import CliRunner

from ofertasya.cli import _build_service, app
from ofertasya.offers.schemas import OfferDraft
from ofertasya.offers.service import IngestionService

from .fakes import StaticSource

runner = CliRunner()


def test_ingest_file(tmp_path, service, store):
    path = tmp_path / "offers.json"
    path.write_text(json.dumps([{"externalId": "cli-1", "from": "Alicante"}, {"externalId": "cli-2"}]))

    with patch("ofertasya.cli._build_service", return_value=service):
        result = runner.invoke(app, ["ingest", str(path)])

    assert result.exit_code == 0
    assert "cli-1" in result.output
    assert store.get_by_external_id("cli-1").from_city == "Alicante"
    assert store.get_by_external_id("cli-2") is not None


def test_ingest_missing_file(tmp_path):
    result = runner.invoke(app, ["ingest", str(tmp_path / "nope.json")])
    assert result.exit_code == 1


def test_ingest_rejects_non_object(tmp_path, service):
    path = tmp_path / "offers.json"
    path.write_text(json.dumps(["not an offer"]))

    with patch("ofertasya.cli._build_service", return_value=service):
        result = runner.invoke(app, ["ingest", str(path)])

    assert result.exit_code == 1


def test_poll_once_prints_stats(service):
    source = StaticSource([{"externalId": "p1"}, {"externalId": "p2"}])

    with (
        patch("ofertasya.cli._build_service", return_value=service),
        patch("ofertasya.sources.registry.build_source", return_value=source),
    ):
        result = runner.invoke(app, ["poll-once"])

    assert result.exit_code == 0
    assert "Poll Results" in result.output
    assert source.calls == 1


def test_recent_lists_offers(store):
    with patch("ofertasya.offers.store.SqlOfferStore", return_value=store):
        empty = runner.invoke(app, ["recent"])
    assert "No offers detected yet" in empty.output

    draft = OfferDraft(
        external_id="r1",
        title="Citroen C3 from Madrid to Bilbao",
        from_city="Madrid",
        to_city="Bilbao",
        vehicle="Citroen C3",
        link="https://www.driiveme.es",
    )
    store.insert_if_absent(draft, datetime(2026, 10, 19, 9, 0, tzinfo=UTC))

    with patch("ofertasya.offers.store.SqlOfferStore", return_value=store):
        result = runner.invoke(app, ["recent"])

    assert result.exit_code == 0
    assert "Recent Offers" in result.output
    assert "Madrid" in result.output


def test_build_service_wires_ingestion_service():
    with patch("ofertasya.db.init_db") as init_db:
        service = _build_service()

    init_db.assert_called_once_with()
    assert isinstance(service, IngestionService)
