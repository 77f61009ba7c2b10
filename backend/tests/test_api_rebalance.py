"""
Rebalance API tests
"""
import pytest
from decimal import Decimal
from httpx import AsyncClient

from rebalancer.exceptions import GatewayError

RESPONSE_KEYS = {
    "symbol", "price", "base_asset", "quote_asset", "base_asset_qty", "quote_asset_qty",
    "base_value", "quote_value", "total_value", "target_each", "action", "trade_amount",
    "trade_value", "trade_over_limit", "trade_limit_usd", "dev_mode", "trade_result",
}


@pytest.mark.asyncio
class TestRebalanceValidation:

    async def test_missing_parameters(self, client: AsyncClient, fake_exchange):
        response = await client.post("/rebalance", json={"base_asset": "BTC"})

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Missing required parameters."
        assert fake_exchange.calls == []

    async def test_non_numeric_quantity(self, client: AsyncClient):
        response = await client.post("/rebalance", json={
            "base_asset": "BTC",
            "quote_asset": "USDT",
            "base_asset_qty": "lots",
            "quote_asset_qty": 0,
        })

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request parameters."

    async def test_negative_quantity(self, client: AsyncClient):
        response = await client.post("/rebalance", json={
            "base_asset": "BTC",
            "quote_asset": "USDT",
            "base_asset_qty": -1,
            "quote_asset_qty": 0,
        })

        assert response.status_code == 400
        assert response.json()["error"] == "base_asset_qty must not be negative"

    async def test_invalid_pair(self, client: AsyncClient, fake_exchange):
        response = await client.post("/rebalance", json={
            "base_asset": "XXX",
            "quote_asset": "USDT",
            "base_asset_qty": 1,
            "quote_asset_qty": 0,
        })

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid trading pair: XXXUSDT"
        assert fake_exchange.side_effect_calls == []


@pytest.mark.asyncio
class TestRebalanceSkips:

    async def test_over_limit(self, client: AsyncClient, fake_exchange):
        """
        Given: 1 BTC + 40000 USDT at 50000 and a 100 USD limit
        When: POST /rebalance
        Then: the 5000 USD trade is skipped
        """
        response = await client.post("/rebalance", json={
            "base_asset": "BTC",
            "quote_asset": "USDT",
            "base_asset_qty": 1,
            "quote_asset_qty": 40000,
        })

        assert response.status_code == 200
        data = response.json()
        assert set(data) == RESPONSE_KEYS
        assert data["action"] == "SELL_BASE_BUY_QUOTE"
        assert data["trade_amount"] == 0.1
        assert data["trade_value"] == 5000.0
        assert data["trade_over_limit"] is True
        assert data["trade_limit_usd"] == 100.0
        assert data["dev_mode"] is False
        assert data["trade_result"]["status"] == "skipped"
        assert data["trade_result"]["message"] == "Skipped (over limit)"
        assert fake_exchange.side_effect_calls == []

    async def test_balanced(self, client: AsyncClient, fake_exchange):
        response = await client.post("/rebalance", json={
            "base_asset": "BTC",
            "quote_asset": "USDT",
            "base_asset_qty": 1,
            "quote_asset_qty": 50000,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["action"] == "BALANCED"
        assert data["trade_amount"] == 0
        assert data["trade_result"] == {
            "status": "skipped",
            "reason": "balanced",
            "message": "No trade needed (balanced)",
        }
        assert fake_exchange.side_effect_calls == []


@pytest.mark.asyncio
class TestRebalanceDevMode:

    async def test_dev_flag_in_body(self, client: AsyncClient, fake_exchange, small_sell_body):
        response = await client.post("/rebalance", json={**small_sell_body, "dev": True})

        assert response.status_code == 200
        data = response.json()
        assert data["dev_mode"] is True
        assert data["trade_result"]["status"] == "simulated"
        assert data["trade_result"]["side"] == "SELL"
        assert data["trade_result"]["quantity"] == 0.0005
        assert fake_exchange.side_effect_calls == []

    @pytest.mark.parametrize("dev", [1, "1", "t", "y", "on", "true"])
    async def test_truthy_dev_flag_simulates(self, client: AsyncClient, fake_exchange, small_sell_body, dev):
        """
        Given: a dev flag the body schema reads as True
        When: POST /rebalance
        Then: the trade is simulated and no funds move
        """
        response = await client.post("/rebalance", json={**small_sell_body, "dev": dev})

        assert response.status_code == 200
        assert response.json()["dev_mode"] is True
        assert response.json()["trade_result"]["status"] == "simulated"
        assert fake_exchange.side_effect_calls == []

    async def test_unreadable_dev_flag_is_rejected(self, client: AsyncClient, fake_exchange, small_sell_body):
        response = await client.post("/rebalance", json={**small_sell_body, "dev": "maybe"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request parameters."
        assert fake_exchange.calls == []

    async def test_falsy_dev_flag_trades(self, client: AsyncClient, fake_exchange, small_sell_body):
        response = await client.post("/rebalance", json={**small_sell_body, "dev": 0})

        assert response.json()["dev_mode"] is False
        assert response.json()["trade_result"]["status"] == "executed"

    async def test_development_environment(self, dev_client: AsyncClient, fake_exchange, small_sell_body):
        response = await dev_client.post("/rebalance", json=small_sell_body)

        assert response.status_code == 200
        assert response.json()["dev_mode"] is True
        assert response.json()["trade_result"]["status"] == "simulated"
        assert fake_exchange.side_effect_calls == []

    async def test_over_limit_reported_in_dev_mode(self, dev_client: AsyncClient):
        response = await dev_client.post("/rebalance", json={
            "base_asset": "BTC",
            "quote_asset": "USDT",
            "base_asset_qty": 1,
            "quote_asset_qty": 40000,
        })

        assert response.json()["trade_result"]["status"] == "skipped"


@pytest.mark.asyncio
class TestRebalanceExecution:

    async def test_sell_executes(self, client: AsyncClient, fake_exchange, small_sell_body):
        response = await client.post("/rebalance", json=small_sell_body)

        assert response.status_code == 200
        data = response.json()
        assert data["base_value"] == 50.0
        assert data["target_each"] == 25.0
        assert data["trade_amount"] == 0.0005
        assert data["trade_result"]["status"] == "executed"
        assert data["trade_result"]["order"]["side"] == "SELL"
        assert Decimal(data["trade_result"]["order"]["average_price"]) == Decimal("50000")
        assert data["trade_result"]["redeem"]["asset"] == "BTC"
        assert fake_exchange.side_effect_calls == [
            ("redeem_flexible", "BTC", Decimal("0.0005")),
            ("market_sell", "BTCUSDT", Decimal("0.0005")),
        ]

    async def test_buy_redeems_quote(self, client: AsyncClient, fake_exchange):
        response = await client.post("/rebalance", json={
            "base_asset": "BTC",
            "quote_asset": "USDT",
            "base_asset_qty": 0,
            "quote_asset_qty": 50,
        })

        assert response.status_code == 200
        assert response.json()["action"] == "BUY_BASE_SELL_QUOTE"
        assert fake_exchange.side_effect_calls == [
            ("redeem_flexible", "USDT", Decimal("27.5")),
            ("market_buy", "BTCUSDT", Decimal("0.0005")),
        ]

    async def test_order_failure_after_redeem(self, client: AsyncClient, fake_exchange, small_sell_body):
        fake_exchange.fail(
            "market_sell",
            GatewayError("Account has insufficient balance", details={"code": -2010}, exchange_code=-2010),
        )

        response = await client.post("/rebalance", json=small_sell_body)

        assert response.status_code == 500
        data = response.json()
        assert data["success"] is False
        assert data["stage"] == "order"
        assert data["funds_redeemed"] is True
        assert data["details"] == {"code": -2010}
        assert "insufficient balance" in data["error"]

    async def test_redeem_failure(self, client: AsyncClient, fake_exchange, small_sell_body):
        fake_exchange.fail("redeem_flexible", GatewayError("Product ID not found for BTC"))

        response = await client.post("/rebalance", json=small_sell_body)

        assert response.status_code == 500
        assert response.json()["stage"] == "redeem"
        assert response.json()["funds_redeemed"] is False
        assert [call[0] for call in fake_exchange.side_effect_calls] == ["redeem_flexible"]

    async def test_pair_in_progress(self, client: AsyncClient, container, fake_exchange, small_sell_body):
        await container.get_lock_port().acquire("rebalance:BTCUSDT")

        response = await client.post("/rebalance", json=small_sell_body)

        assert response.status_code == 409
        assert response.json()["error"] == "Rebalance already in progress for BTCUSDT"
        assert fake_exchange.calls == []


@pytest.mark.asyncio
class TestRedeemAPI:

    async def test_redeem(self, client: AsyncClient, fake_exchange):
        response = await client.post("/rebalance/test-redeem", json={"asset": "usdt", "amount": 10})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["asset"] == "USDT"
        assert data["result"]["product_id"] == "USDT001"
        assert fake_exchange.side_effect_calls == [("redeem_flexible", "USDT", Decimal("10"))]

    async def test_redeem_dev(self, client: AsyncClient, fake_exchange):
        response = await client.post("/rebalance/test-redeem", json={"asset": "BTC", "amount": 0.1, "dev": True})

        assert response.status_code == 200
        assert response.json()["message"] == "Test mode - no actual redemption"
        assert fake_exchange.side_effect_calls == []

    @pytest.mark.parametrize("dev", [1, "t", "yes"])
    async def test_redeem_truthy_dev_flag(self, client: AsyncClient, fake_exchange, dev):
        response = await client.post("/rebalance/test-redeem", json={"asset": "BTC", "amount": 0.1, "dev": dev})

        assert response.status_code == 200
        assert response.json()["message"] == "Test mode - no actual redemption"
        assert fake_exchange.side_effect_calls == []

    async def test_redeem_missing_parameters(self, client: AsyncClient):
        response = await client.post("/rebalance/test-redeem", json={"asset": "BTC"})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required parameters. Please provide asset and amount."
