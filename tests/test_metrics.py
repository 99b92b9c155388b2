"""Tests for client metrics."""

import pytest

from eigenda_client.cache import LruResponseCache
from eigenda_client.client import DisperserClient
from eigenda_client.errors import TransportError
from eigenda_client.metrics import REGISTRY
from eigenda_client.parser import ResponseParser
from eigenda_client.status import BlobResponse

from conftest import FakeTransport, fail, ok


def sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestMetrics:

    @pytest.mark.asyncio
    async def test_request_outcomes(self):
        method = "disperser.Disperser/GetBlobStatus"
        successes = sample("eigenda_client_requests_total", method=method, status="success")
        failures = sample("eigenda_client_requests_total", method=method, status="failure")
        client = DisperserClient(transport=FakeTransport([ok({"status": "PROCESSING"}), fail("down")]))

        await client.get_blob_status("abc")
        with pytest.raises(TransportError):
            await client.get_blob_status("abc")

        assert sample("eigenda_client_requests_total", method=method, status="success") == successes + 1
        assert sample("eigenda_client_requests_total", method=method, status="failure") == failures + 1

    def test_parse_failures(self):
        before = sample("eigenda_client_parse_failures_total", kind="status")
        ResponseParser().parse_status("garbage")
        assert sample("eigenda_client_parse_failures_total", kind="status") == before + 1

    def test_cache_metrics(self):
        evictions = sample("eigenda_client_cache_evictions_total")
        hits = sample("eigenda_client_cache_lookups_total", result="hit")
        cache = LruResponseCache(capacity=1)

        cache.put(BlobResponse(request_id="a"))
        cache.put(BlobResponse(request_id="b"))
        cache.get("b")

        assert sample("eigenda_client_cache_evictions_total") == evictions + 1
        assert sample("eigenda_client_cache_lookups_total", result="hit") == hits + 1
        assert sample("eigenda_client_cache_size") == 1
