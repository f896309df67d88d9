"""Tests for the unified KorbitClient."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from korbit_sdk import ConsoleLogger, KorbitClient, LogLevel, Token
from korbit_sdk.auth import TOKEN_PATH
from korbit_sdk.client import TRANSACTIONS_PATH, WALLET_PATH

LOGIN_RESPONSE = {
    "token_type": "Bearer",
    "access_token": "fresh",
    "expires_in": 3600,
    "refresh_token": "refresh-2",
}


@pytest.fixture
def stale_token():
    """Token with five minutes left."""
    return Token(
        access_token="stale",
        token_type="Bearer",
        expires_in=3600,
        refresh_token="refresh-1",
        issued_at=datetime.now(timezone.utc) - timedelta(minutes=55),
    )


class TestKorbitClient:
    """Test client wiring and convenience methods."""

    def test_requires_base_url(self):
        """Test configuration validation."""
        with pytest.raises(ValueError):
            KorbitClient("id", "secret", "user", "pass", base_url="")

    def test_default_logger(self):
        """Test that a console logger is created from log_level."""
        client = KorbitClient("id", "secret", "user", "pass", log_level=LogLevel.WARN)

        assert isinstance(client.logger, ConsoleLogger)
        assert client.logger.get_level() == LogLevel.WARN

    @pytest.mark.asyncio
    async def test_context_manager_logs_in(self, client, fake):
        """Test that entering the client logs in."""
        fake.add("POST", TOKEN_PATH, json=LOGIN_RESPONSE)

        async with client as entered:
            assert entered is client
            assert client.session.authorization() == "Bearer fresh"

    @pytest.mark.asyncio
    async def test_refresh_if_needed_fresh(self, authed_client, fake):
        """Test that a fresh token is left alone."""
        assert not authed_client.needs_refresh()
        assert await authed_client.refresh_if_needed() is False
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_refresh_if_needed_stale(self, client, fake, stale_token):
        """Test that a token close to expiry is refreshed."""
        client.session.use_token(stale_token)
        fake.add("POST", TOKEN_PATH, json=LOGIN_RESPONSE)

        assert client.needs_refresh()
        assert await client.refresh_if_needed() is True
        assert fake.form()["refresh_token"] == ["refresh-1"]
        assert client.session.authorization() == "Bearer fresh"
        assert not client.needs_refresh()

    @pytest.mark.asyncio
    async def test_operations_do_not_refresh(self, client, fake, stale_token):
        """Test that endpoint calls never refresh on their own."""
        client.session.use_token(stale_token)
        fake.add("GET", TRANSACTIONS_PATH, json=[])

        await client.get_transaction_history("btc_krw", "fills")

        assert [r.url.path for r in fake.requests] == [TRANSACTIONS_PATH]
        assert fake.requests[0].headers["Authorization"] == "Bearer stale"

    @pytest.mark.asyncio
    async def test_get_coin_balance(self, authed_client, fake, primary_wallet_payload, secondary_wallet_payload):
        """Test fetching wallets and reading one balance."""

        def balances(request):
            if request.url.params["currency_pair"] == "btc_krw":
                return httpx.Response(200, json=primary_wallet_payload)
            return httpx.Response(200, json=secondary_wallet_payload)

        fake.add_handler("GET", WALLET_PATH, balances)

        balance = await authed_client.get_coin_balance("eth_krw")

        assert balance["coins"] == 3.0
        assert balance["krw"] == 500000.0
        assert len(fake.requests) == 3

    @pytest.mark.asyncio
    async def test_get_trade_totals(self, authed_client, fake, make_fill):
        """Test totals over fetched fills."""
        fake.add(
            "GET",
            TRANSACTIONS_PATH,
            json=[make_fill("1", "buy", "1", "1000000"), make_fill("2", "sell", "1", "1100000")],
        )

        totals = await authed_client.get_trade_totals("btc_krw", limit=50)

        params = fake.requests[-1].url.params
        assert params["category"] == "fills"
        assert params["limit"] == "50"
        assert totals == {"buys": 1000000.0, "sells": 1100000.0, "trades": 2}
