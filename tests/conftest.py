"""
pytest shared fixtures
"""
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from rebalancer.application.ports.outbound.exchange_port import ExchangePort
from rebalancer.domain.entities.rebalance import (
    FillReport,
    OrderSide,
    RebalanceRequest,
    RedeemReceipt,
)
from tests.unit.mock_adapters import FakeExchangeAdapter


@pytest.fixture
def mock_exchange_port():
    """ExchangePort mock pricing BTCUSDT at 50000 with a 0.0001 lot step."""
    mock = MagicMock(spec=ExchangePort)
    mock.get_price = AsyncMock(return_value=Decimal("50000"))
    mock.get_lot_step_size = AsyncMock(return_value=Decimal("0.0001"))
    mock.redeem_flexible = AsyncMock(return_value=RedeemReceipt(
        asset="BTC",
        amount=Decimal("0.1"),
        product_id="BTC001",
    ))
    mock.market_sell = AsyncMock(return_value=FillReport(
        order_id="order-456",
        symbol="BTCUSDT",
        side=OrderSide.SELL,
        status="FILLED",
        executed_qty=Decimal("0.1"),
        cumulative_quote_qty=Decimal("4999.5"),
    ))
    mock.market_buy = AsyncMock(return_value=FillReport(
        order_id="order-123",
        symbol="BTCUSDT",
        side=OrderSide.BUY,
        status="FILLED",
        executed_qty=Decimal("0.01"),
        cumulative_quote_qty=Decimal("500.1"),
    ))
    return mock


@pytest.fixture
def fake_exchange():
    """Call-recording fake exchange."""
    return FakeExchangeAdapter()


@pytest.fixture
def make_request():
    """Factory for RebalanceRequest with BTC/USDT defaults."""
    def _make(
        base_asset_qty="1",
        quote_asset_qty="40000",
        simulate=False,
        max_trade_value_usd="100000",
        base_asset="BTC",
        quote_asset="USDT",
    ) -> RebalanceRequest:
        return RebalanceRequest(
            base_asset=base_asset,
            quote_asset=quote_asset,
            base_asset_qty=Decimal(base_asset_qty),
            quote_asset_qty=Decimal(quote_asset_qty),
            simulate=simulate,
            max_trade_value_usd=Decimal(max_trade_value_usd),
        )
    return _make
