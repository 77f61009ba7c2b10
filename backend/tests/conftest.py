"""
Pytest fixtures for the HTTP API.

The app is served in-process through httpx.ASGITransport, with the exchange
replaced by a call-recording fake.
"""
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from backend.app.main import create_app
from rebalancer.container import Container
from tests.unit.mock_adapters import FakeExchangeAdapter


@pytest.fixture
def fake_exchange() -> FakeExchangeAdapter:
    """BTCUSDT at 50000 with a 0.0001 lot step."""
    return FakeExchangeAdapter()


@pytest.fixture
def make_container(fake_exchange):
    """Factory for a container wired to the fake exchange."""
    def _make(dev_mode: bool = False, max_trade_value_usd: str = "100") -> Container:
        return Container(
            exchange_port=fake_exchange,
            max_trade_value_usd=Decimal(max_trade_value_usd),
            settlement_delay_seconds=0,
            dev_mode=dev_mode,
            serialize_pairs=True,
        )
    return _make


@pytest.fixture
def container(make_container) -> Container:
    return make_container()


@pytest.fixture
async def client(container) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client for the API.
    """
    app = create_app(container)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def dev_client(make_container) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for an app running in the development environment."""
    app = create_app(make_container(dev_mode=True))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def small_sell_body() -> dict:
    """0.001 BTC and no USDT: sell 0.0005 BTC (25 USDT)."""
    return {
        "base_asset": "BTC",
        "quote_asset": "USDT",
        "base_asset_qty": 0.001,
        "quote_asset_qty": 0,
    }
