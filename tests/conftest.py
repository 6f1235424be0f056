"""Shared pytest fixtures for cotation."""

from pathlib import Path

import pytest

from cotation.core.config import (
    ClientConfig,
    CotationConfig,
    ProviderConfig,
    StorageConfig,
)

PROVIDER_URL = "https://economia.awesomeapi.com.br/json/last/USD-BRL"
SERVER_URL = "http://localhost:8080/cotacao"


@pytest.fixture
def make_upstream_payload():
    """Factory for provider responses in the shape AwesomeAPI returns for USD-BRL."""

    def _make(bid: str = "5.43", **overrides) -> dict:
        entry = {
            "code": "USD",
            "codein": "BRL",
            "name": "Dólar Americano/Real Brasileiro",
            "high": "5.4620",
            "low": "5.4012",
            "varBid": "0.0231",
            "pctChange": "0.43",
            "bid": bid,
            "ask": "5.4310",
            "timestamp": "1717171717",
            "create_date": "2024-05-31 15:08:37",
        }
        entry.update(overrides)
        return {"USDBRL": entry}

    return _make


@pytest.fixture
def upstream_payload(make_upstream_payload) -> dict:
    return make_upstream_payload()


@pytest.fixture
def ledger_path(tmp_path: Path) -> Path:
    return tmp_path / "storage" / "cotation.db"


@pytest.fixture
def storage_config(ledger_path: Path) -> StorageConfig:
    # Generous deadline so ledger assertions do not depend on disk speed
    return StorageConfig(sqlite_path=str(ledger_path), timeout_ms=1000)


@pytest.fixture
def client_config(tmp_path: Path) -> ClientConfig:
    return ClientConfig(
        server_url=SERVER_URL,
        output_path=str(tmp_path / "cotation.txt"),
    )


@pytest.fixture
def config(storage_config: StorageConfig, client_config: ClientConfig) -> CotationConfig:
    return CotationConfig(
        provider=ProviderConfig(url=PROVIDER_URL),
        storage=storage_config,
        client=client_config,
    )
