"""Main Korbit SDK client with a unified interface."""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Union

import httpx

from .auth import Session
from .client import DEFAULT_BASE_URL, RestClient
from .logger import ConsoleLogger, Logger, LogLevel
from .summary import CoinBalance, TradeTotals, coin_balance, total_buy_sell_history
from .types import (
    ACTIVE_CURRENCY_PAIRS,
    CancelResult,
    Credentials,
    CurrencyPair,
    OpenOrder,
    OrderArgs,
    Orderbook,
    OrderResult,
    OrderType,
    Ticker,
    Token,
    TransactionCategory,
    TransactionRecord,
    Wallets,
    parse_currency_pair,
    parse_order_type,
)

Amount = Union[str, int, float, Decimal]


class KorbitClient:
    """
    Main Korbit SDK client: authentication, trading, market data and wallets.

    Tokens are not refreshed automatically. Call ``refresh_if_needed()`` (or
    check ``needs_refresh()`` and call ``refresh_token()``) between operations.

    Example:
        ```python
        async with KorbitClient(client_id, client_secret, username, password) as client:
            orderbook = await client.get_orderbook("btc_krw")
            await client.refresh_if_needed()
            result = await client.buy("btc_krw", "limit", price=3000000, coin_amount="0.001")
        ```
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        username: str,
        password: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        currency_pairs: Iterable[Union[str, CurrencyPair]] = ACTIVE_CURRENCY_PAIRS,
        log_level: LogLevel = LogLevel.INFO,
        logger: Optional[Logger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Korbit SDK.

        Args:
            client_id: API client id
            client_secret: API client secret
            username: Account e-mail
            password: Account password
            base_url: Base URL for the REST API
            timeout: Request timeout in seconds
            currency_pairs: Pairs whose wallets get_wallets() fetches
            log_level: Minimum log level
            logger: Custom logger instance
            transport: Custom httpx transport, e.g. ``httpx.MockTransport`` in tests
        """
        if not base_url:
            raise ValueError("base_url is required")

        self.logger = logger or ConsoleLogger(level=log_level)
        credentials = Credentials(
            client_id=client_id,
            client_secret=client_secret,
            username=username,
            password=password,
        )

        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self.session = Session(credentials, self._http, self.logger)
        self.rest = RestClient(self._http, self.session, self.logger, currency_pairs=currency_pairs)

    async def __aenter__(self):
        """Async context manager entry, logs in."""
        await self.login()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP connection pool."""
        await self.rest.close()

    # ========================================================================
    # Authentication
    # ========================================================================

    async def login(self) -> Token:
        """Log in with the account password."""
        return await self.session.login()

    async def refresh_token(self) -> Token:
        """Exchange the refresh token for a new access token."""
        return await self.session.refresh()

    def needs_refresh(self, now: Optional[datetime] = None) -> bool:
        """True when fewer than ten minutes of token validity remain."""
        return self.session.needs_refresh(now)

    async def refresh_if_needed(self) -> bool:
        """
        Refresh the token if it is close to expiry.

        Returns:
            True if a refresh happened
        """
        if not self.session.needs_refresh():
            return False
        await self.session.refresh()
        return True

    # ========================================================================
    # Orders
    # ========================================================================

    async def buy(
        self,
        currency_pair: Union[str, CurrencyPair],
        order_type: Union[str, OrderType],
        price: Optional[int] = None,
        coin_amount: Optional[Amount] = None,
        fiat_amount: Optional[Amount] = None,
    ) -> OrderResult:
        """Place a bid order."""
        order = self._order_args(currency_pair, order_type, price, coin_amount, fiat_amount)
        return await self.rest.buy(order)

    async def sell(
        self,
        currency_pair: Union[str, CurrencyPair],
        order_type: Union[str, OrderType],
        price: Optional[int] = None,
        coin_amount: Optional[Amount] = None,
        fiat_amount: Optional[Amount] = None,
    ) -> OrderResult:
        """Place an ask order."""
        order = self._order_args(currency_pair, order_type, price, coin_amount, fiat_amount)
        return await self.rest.sell(order)

    @staticmethod
    def _order_args(currency_pair, order_type, price, coin_amount, fiat_amount) -> OrderArgs:
        # Parse enums first so bad input surfaces as the SDK's own errors.
        return OrderArgs(
            currency_pair=parse_currency_pair(currency_pair),
            order_type=parse_order_type(order_type),
            price=price,
            coin_amount=coin_amount,
            fiat_amount=fiat_amount,
        )

    async def cancel_open_orders(
        self, order_ids: Iterable[int], currency_pair: Union[str, CurrencyPair]
    ) -> list[CancelResult]:
        """Cancel open orders, one result per id."""
        return await self.rest.cancel_open_orders(order_ids, currency_pair)

    async def list_open_orders(self, currency_pair: Union[str, CurrencyPair]) -> list[OpenOrder]:
        """List open orders for a market."""
        return await self.rest.list_open_orders(currency_pair)

    async def get_transaction_history(
        self,
        currency_pair: Union[str, CurrencyPair],
        category: Union[str, TransactionCategory],
        offset: Optional[Union[str, int]] = None,
        limit: Optional[Union[str, int]] = None,
        order_id: Optional[Union[str, int]] = None,
    ) -> list[TransactionRecord]:
        """Get transaction history for a market."""
        return await self.rest.get_transaction_history(currency_pair, category, offset, limit, order_id)

    async def get_trade_totals(
        self,
        currency_pair: Union[str, CurrencyPair],
        order_size: float = 0.0,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[Union[str, int]] = None,
    ) -> TradeTotals:
        """Fetch fills for a market and total the KRW value of buys and sells."""
        records = await self.rest.get_transaction_history(currency_pair, TransactionCategory.FILLS, limit=limit)
        return total_buy_sell_history(records, order_size, start, end)

    # ========================================================================
    # Market data
    # ========================================================================

    async def get_ticker(self, currency_pair: Union[str, CurrencyPair]) -> Ticker:
        """Get the detailed ticker for a market."""
        return await self.rest.get_ticker(currency_pair)

    async def get_orderbook(self, currency_pair: Union[str, CurrencyPair]) -> Orderbook:
        """Get the orderbook for a market."""
        return await self.rest.get_orderbook(currency_pair)

    # ========================================================================
    # Wallets
    # ========================================================================

    async def get_wallets(self) -> Wallets:
        """Get wallets for every configured currency pair."""
        return await self.rest.get_wallets()

    async def get_coin_balance(
        self, currency_pair: Union[str, CurrencyPair], wallets: Optional[Wallets] = None
    ) -> CoinBalance:
        """
        Get the coin and KRW balance of one market's wallet.

        Fetches wallets first unless an earlier ``get_wallets()`` result is passed.
        """
        if wallets is None:
            wallets = await self.get_wallets()
        return coin_balance(wallets, currency_pair)
