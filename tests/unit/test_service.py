"""Tests for cotation.api.service (QuoteServer pipeline)."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

import httpx
import pytest

from cotation.api.service import QuoteServer
from cotation.core.config import CotationConfig, StorageConfig
from cotation.core.exceptions import (
    DeadlineExceededError,
    QuoteDecodeError,
    QuoteTransportError,
    StorageError,
)
from cotation.core.models import Quote
from cotation.provider.client import ProviderClient
from cotation.storage.store import SqliteStore


# --- Fixtures ---


@pytest.fixture
def make_server(config: CotationConfig):
    """Factory: QuoteServer over a mock provider transport and a given store."""

    def _make(handler, store) -> QuoteServer:
        provider = ProviderClient(config.provider, transport=httpx.MockTransport(handler))
        return QuoteServer(config=config, provider=provider, store=store)

    return _make


@pytest.fixture
async def store(config: CotationConfig) -> SqliteStore:
    s = SqliteStore(config.storage)
    await s.initialize()
    return s


class _FailingStore:
    """Ledger that always fails, like an unreachable database."""

    def __init__(self) -> None:
        self.calls = 0

    async def initialize(self) -> None:
        pass

    async def append(self, quote: Quote, timeout: float | None = None) -> int | None:
        self.calls += 1
        raise StorageError("unable to open database file", context={"operation": "insert"})


class _RecordingStore:
    """Ledger that records the order of events."""

    def __init__(self, events: list[str]) -> None:
        self.events = events
        self.timeouts: list[float | None] = []

    async def initialize(self) -> None:
        pass

    async def append(self, quote: Quote, timeout: float | None = None) -> int | None:
        self.events.append(f"persist:{quote.bid}")
        self.timeouts.append(timeout)
        return 1


# --- handle ---


class TestHandle:
    async def test_returns_bid(self, make_server, store, upstream_payload):
        server = make_server(lambda r: httpx.Response(200, json=upstream_payload), store)

        quote = await server.handle()
        assert quote == Quote(bid="5.43")
        await server.close()

    async def test_persists_each_request(self, make_server, store, make_upstream_payload):
        bids = iter(["5.40", "5.41", "5.42"])
        server = make_server(
            lambda r: httpx.Response(200, json=make_upstream_payload(bid=next(bids))), store
        )

        for _ in range(3):
            await server.handle()
        await server.close()

        records = await store.list_records()
        assert [r.bid for r in records] == ["5.40", "5.41", "5.42"]

    async def test_one_upstream_fetch_per_request(self, make_server, store, upstream_payload):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=upstream_payload)

        server = make_server(handler, store)
        await server.handle()
        await server.handle()
        await server.close()
        assert len(calls) == 2

    async def test_persist_before_return(self, make_server, upstream_payload):
        events: list[str] = []

        def handler(request):
            events.append("fetch")
            return httpx.Response(200, json=upstream_payload)

        recording = _RecordingStore(events)
        server = make_server(handler, recording)
        await server.handle()
        events.append("returned")
        await server.close()

        assert events == ["fetch", "persist:5.43", "returned"]

    async def test_storage_deadline_from_config(self, make_server, config, upstream_payload):
        recording = _RecordingStore([])
        server = make_server(lambda r: httpx.Response(200, json=upstream_payload), recording)
        await server.handle()
        await server.close()
        assert recording.timeouts == [config.storage.timeout]

    async def test_upstream_deadline(self, make_server, store, upstream_payload):
        async def slow(request):
            await asyncio.sleep(2)
            return httpx.Response(200, json=upstream_payload)

        server = make_server(slow, store)
        start = time.monotonic()
        with pytest.raises(DeadlineExceededError, match="200ms"):
            await server.handle()
        elapsed = time.monotonic() - start
        await server.close()

        assert elapsed < 1.0
        assert await store.count_records() == 0

    async def test_decode_failure_skips_persistence(self, make_server, upstream_payload):
        events: list[str] = []
        server = make_server(lambda r: httpx.Response(200, text="oops"), _RecordingStore(events))

        with pytest.raises(QuoteDecodeError):
            await server.handle()
        await server.close()
        assert events == []

    async def test_transport_failure_logged(self, make_server, store, caplog):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        server = make_server(handler, store)
        with caplog.at_level(logging.ERROR, logger="cotation.api.service"):
            with pytest.raises(QuoteTransportError):
                await server.handle()
        await server.close()
        assert "Upstream quote fetch failed" in caplog.text


# --- persistence isolation ---


class TestPersistenceIsolation:
    async def test_storage_failure_still_returns_quote(self, make_server, upstream_payload, caplog):
        failing = _FailingStore()
        server = make_server(lambda r: httpx.Response(200, json=upstream_payload), failing)

        with caplog.at_level(logging.WARNING, logger="cotation.api.service"):
            quote = await server.handle()
        await server.close()

        assert quote.bid == "5.43"
        assert failing.calls == 1
        assert "Error inserting quote into ledger" in caplog.text

    async def test_unreachable_database(self, make_server, tmp_path: Path, upstream_payload):
        store = SqliteStore(StorageConfig(sqlite_path=str(tmp_path / "missing" / "x.db")))
        server = make_server(lambda r: httpx.Response(200, json=upstream_payload), store)

        quote = await server.handle()
        await server.close()
        assert quote.bid == "5.43"

    async def test_persist_result_success(self, make_server, store):
        server = make_server(lambda r: httpx.Response(500), store)
        result = await server.persist(Quote(bid="5.43"))
        await server.close()
        assert result.ok is True
        assert result.record_id == 1

    async def test_persist_result_failure(self, make_server):
        server = make_server(lambda r: httpx.Response(500), _FailingStore())
        result = await server.persist(Quote(bid="5.43"))
        await server.close()
        assert result.ok is False
        assert "unable to open database file" in result.error
