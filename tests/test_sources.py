"""Tests for offer sources and source selection (no network calls)."""

import json
import random
from datetime import UTC, datetime

import httpx
import pytest
from pydantic import ValidationError

from ofertasya.config import Settings
from ofertasya.errors import UpstreamError
from ofertasya.sources.demo import DEMO_VEHICLES, DROPOFF_AFTER, DemoSource
from ofertasya.sources.driiveme import DriivemeSource
from ofertasya.sources.registry import build_source

API_URL = "https://www.driiveme.com/api/transport/list"


def _source(handler) -> DriivemeSource:
    return DriivemeSource("secret-key", API_URL, transport=httpx.MockTransport(handler))


class TestDriivemeSource:
    @pytest.mark.asyncio
    async def test_requests_available_transports(self, sample_transport):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"transports": [sample_transport]})

        transports = await _source(handler).fetch()

        assert transports == [sample_transport]
        request = requests[0]
        assert request.method == "POST"
        assert request.url.params["key"] == "secret-key"
        assert json.loads(request.content) == {"status": [0]}

    @pytest.mark.asyncio
    async def test_missing_transports_is_empty_batch(self):
        transports = await _source(lambda request: httpx.Response(200, json={})).fetch()
        assert transports == []

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        with pytest.raises(UpstreamError, match="HTTP 503"):
            await _source(lambda request: httpx.Response(503)).fetch()

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        with pytest.raises(UpstreamError):
            await _source(lambda request: httpx.Response(200, text="<html>maintenance</html>")).fetch()

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamError, match="connection refused"):
            await _source(handler).fetch()

    def test_normalize_maps_transport(self, sample_transport):
        draft = _source(lambda request: httpx.Response(200)).normalize(sample_transport)
        assert draft.external_id == "driiveme-48213"
        assert draft.raw == sample_transport

    def test_normalize_rejects_incomplete_transport(self):
        with pytest.raises(ValidationError):
            _source(lambda request: httpx.Response(200)).normalize({"id": 1})


class TestDemoSource:
    @pytest.mark.asyncio
    async def test_generates_plausible_records(self):
        now = datetime(2026, 10, 19, 10, 0, tzinfo=UTC)
        source = DemoSource(rng=random.Random(7), now_fn=lambda: now)

        records = await source.fetch()

        assert 1 <= len(records) <= 3
        for record in records:
            assert record.from_city != record.to_city
            assert record.vehicle_model in DEMO_VEHICLES
            assert record.price == 1.0
            assert record.pickup_date == now
            assert record.dropoff_date == now + DROPOFF_AFTER
            assert 100 <= record.distance < 600

    @pytest.mark.asyncio
    async def test_normalize_marks_demo(self):
        source = DemoSource(rng=random.Random(1))
        draft = source.normalize((await source.fetch())[0])
        assert draft.external_id.startswith("demo-")
        assert draft.vehicle.endswith("(Demo)")


class TestBuildSource:
    def test_no_key_means_demo(self):
        assert isinstance(build_source(Settings(_env_file=None, driiveme_api_key=None)), DemoSource)

    @pytest.mark.parametrize("key", ["DEMO", "demo", "", "   "])
    def test_sentinel_or_blank_key_means_demo(self, key):
        assert isinstance(build_source(Settings(_env_file=None, driiveme_api_key=key)), DemoSource)

    def test_real_key_uses_marketplace(self):
        source = build_source(Settings(_env_file=None, driiveme_api_key="abc123"))
        assert isinstance(source, DriivemeSource)
        assert source.name == "driiveme"
