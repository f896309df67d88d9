"""Shared fixtures: a fake Korbit API behind httpx.MockTransport."""

from datetime import datetime, timezone
from typing import Any, Callable, Optional
from urllib.parse import parse_qs

import httpx
import pytest

from korbit_sdk import KorbitClient, NoopLogger, Token

Handler = Callable[[httpx.Request], httpx.Response]


class FakeKorbit:
    """Answers requests from registered routes and records every request."""

    def __init__(self):
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        json: Any = None,
        status_code: int = 200,
        content: Optional[bytes] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """Register a canned response."""

        def handler(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status_code, content=content, headers=headers)
            return httpx.Response(status_code, json=json, headers=headers)

        self.routes[(method, path)] = handler

    def add_handler(self, method: str, path: str, handler: Handler) -> None:
        """Register a custom handler, e.g. one that depends on the query."""
        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"error": "no route"})
        return handler(request)

    def form(self, index: int = -1) -> dict[str, list[str]]:
        """Decoded form body of a recorded request."""
        return parse_qs(self.requests[index].content.decode())


@pytest.fixture
def fake():
    """Create an empty fake API."""
    return FakeKorbit()


@pytest.fixture
def token():
    """A freshly issued token."""
    return Token(
        access_token="access-1",
        token_type="Bearer",
        expires_in=3600,
        refresh_token="refresh-1",
        issued_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def client(fake):
    """Client wired to the fake API, not logged in."""
    return KorbitClient(
        client_id="client-id",
        client_secret="client-secret",
        username="trader@example.com",
        password="hunter2",
        base_url="https://api.korbit.test",
        logger=NoopLogger(),
        transport=httpx.MockTransport(fake),
    )


@pytest.fixture
def authed_client(client, token):
    """Client holding a valid token."""
    client.session.use_token(token)
    return client


@pytest.fixture
def primary_wallet_payload():
    """BTC/KRW wallet as returned by /v1/user/balances."""
    return {
        "in": [
            {
                "currency": "krw",
                "status": "registered",
                "registeredOwner": "Kim",
                "address": {"bank": "Shinhan", "account": "110-123-456789", "owner": "Kim"},
            }
        ],
        "out": [
            {
                "currency": "btc",
                "status": "registered",
                "address": {"address": "1anjg6B2XbpjHx8LFw8mXHATH54vrxs2F"},
            }
        ],
        "balance": [{"currency": "krw", "value": "1000000"}, {"currency": "btc", "value": "0.5"}],
        "pendingOut": [{"currency": "krw", "value": "0"}, {"currency": "btc", "value": "0.1"}],
        "pendingOrders": [{"currency": "krw", "value": "20000"}, {"currency": "btc", "value": "0.2"}],
        "available": [{"currency": "krw", "value": "980000"}, {"currency": "btc", "value": "0.2"}],
    }


@pytest.fixture
def secondary_wallet_payload():
    """ETH/KRW wallet as returned by /v1/user/balances."""
    return {
        "balance": [{"currency": "krw", "value": "500000"}, {"currency": "eth", "value": "3"}],
        "tradable": [{"currency": "krw", "value": "450000"}, {"currency": "eth", "value": "2"}],
        "tradeInUse": [{"currency": "krw", "value": "50000"}, {"currency": "eth", "value": "1"}],
    }


def _fill(record_id: Any, side: str, amount: str, native: str, timestamp: int = 1389173297000) -> dict:
    return {
        "timestamp": timestamp,
        "completedAt": timestamp,
        "id": record_id,
        "type": side,
        "fee": {"currency": "krw", "value": "500"},
        "balances": [{"currency": "krw", "value": "1000000"}, {"currency": "btc", "value": "1"}],
        "fillsDetail": {
            "price": {"currency": "krw", "value": "1000000"},
            "amount": {"currency": "btc", "value": amount},
            "native_amount": {"currency": "krw", "value": native},
            "orderId": "1001",
        },
    }


@pytest.fixture
def make_fill():
    """Factory for transaction history fill entries."""
    return _fill
