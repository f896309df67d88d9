"""REST client for the Korbit API."""

from typing import Any, Iterable, Optional, TypeVar, Union

import httpx
from pydantic import TypeAdapter, ValidationError

from .auth import Session
from .exceptions import (
    APIError,
    DecodeError,
    InvalidOrderError,
    InvalidRequestError,
    OrderbookFormatError,
    OrderRejectedError,
    TransportError,
)
from .format import describe_order
from .logger import Logger
from .normalize import parse_wire_int
from .types import (
    ACTIVE_CURRENCY_PAIRS,
    WALLET_SHAPES,
    CancelResult,
    CurrencyPair,
    OpenOrder,
    OrderAck,
    OrderArgs,
    Orderbook,
    OrderResult,
    OrderType,
    RawOrderbook,
    Side,
    Ticker,
    TransactionCategory,
    TransactionRecord,
    Wallets,
    parse_currency_pair,
    parse_order_type,
)

T = TypeVar("T")

DEFAULT_BASE_URL = "https://api.korbit.co.kr"

PLACE_BID_PATH = "/v1/user/orders/buy"
PLACE_ASK_PATH = "/v1/user/orders/sell"
CANCEL_ORDERS_PATH = "/v1/user/orders/cancel"
OPEN_ORDERS_PATH = "/v1/user/orders/open"
TRANSACTIONS_PATH = "/v1/user/transactions"
WALLET_PATH = "/v1/user/balances"
TICKER_PATH = "/v1/ticker/detailed"
ORDERBOOK_PATH = "/v1/orderbook"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

_ORDER_ACK = TypeAdapter(OrderAck)
_CANCEL_RESULTS = TypeAdapter(list[CancelResult])
_OPEN_ORDERS = TypeAdapter(list[OpenOrder])
_TRANSACTIONS = TypeAdapter(list[TransactionRecord])
_TICKER = TypeAdapter(Ticker)
_RAW_ORDERBOOK = TypeAdapter(RawOrderbook)
_WALLETS = {pair: TypeAdapter(shape) for pair, shape in WALLET_SHAPES.items()}


def _order_id_text(order_id: Any) -> str:
    try:
        return str(parse_wire_int(order_id))
    except ValueError:
        raise InvalidRequestError(f"order ids must be integers, got {order_id!r}") from None


class RestClient:
    """
    Korbit REST API client.

    Every operation is a single request/response round trip: build the request,
    send it, check the status and decode the body. Nothing is retried, and the
    token is never refreshed behind the caller's back.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        session: Session,
        logger: Logger,
        currency_pairs: Iterable[Union[str, CurrencyPair]] = ACTIVE_CURRENCY_PAIRS,
    ):
        """
        Initialize REST client.

        Args:
            http: HTTP client whose base URL points at the Korbit API
            session: Session providing the token and nonces
            logger: Logger instance
            currency_pairs: Pairs whose wallets get_wallets() fetches
        """
        self._http = http
        self._session = session
        self._logger = logger
        self.currency_pairs = tuple(currency_pairs)

    async def close(self) -> None:
        await self._http.aclose()

    # ========================================================================
    # Request plumbing
    # ========================================================================

    def build_request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> httpx.Request:
        """
        Build a request carrying the bearer token.

        POST requests are form encoded and get a fresh nonce in their body.

        Raises:
            NotAuthenticatedError: If an authenticated request is built before login
        """
        headers: dict[str, str] = {}
        if authenticated:
            headers["Authorization"] = self._session.authorization()

        if method == "POST":
            headers["Content-Type"] = FORM_CONTENT_TYPE
            if authenticated:
                data = {**(data or {}), "nonce": str(self._session.next_nonce())}

        return self._http.build_request(method, path, params=params, data=data, headers=headers)

    async def _call(
        self,
        operation: str,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        request = self.build_request(method, path, params=params, data=data, authenticated=authenticated)
        self._logger.debug("%s %s", method, request.url)

        try:
            response = await self._http.send(request)
        except httpx.HTTPError as exc:
            self._logger.error("%s failed: %s", operation, exc)
            raise TransportError(operation, str(exc)) from exc

        if not response.is_success:
            self._logger.error("%s failed with status %d", operation, response.status_code)
            raise APIError(operation, response.status_code, response.headers)

        return response

    @staticmethod
    def _decode(operation: str, response: httpx.Response, adapter: TypeAdapter[T]) -> T:
        try:
            return adapter.validate_json(response.content)
        except ValidationError as exc:
            raise DecodeError(operation, response.status_code, str(exc)) from exc

    # ========================================================================
    # Orders
    # ========================================================================

    async def buy(self, order: OrderArgs) -> OrderResult:
        """
        Place a bid order.

        Raises:
            InvalidOrderError: If the order is rejected locally
            OrderRejectedError: If Korbit reports a non-success status
        """
        return await self._place_order(Side.BUY, PLACE_BID_PATH, order)

    async def sell(self, order: OrderArgs) -> OrderResult:
        """
        Place an ask order.

        Raises:
            InvalidOrderError: If the order is rejected locally
            OrderRejectedError: If Korbit reports a non-success status
        """
        return await self._place_order(Side.SELL, PLACE_ASK_PATH, order)

    async def _place_order(self, side: Side, path: str, order: OrderArgs) -> OrderResult:
        body = self._order_body(order)
        operation = f"place {side.value} order"
        self._logger.info("Placing %s order: %s", side.value, describe_order(order))

        response = await self._call(operation, "POST", path, data=body)
        ack = self._decode(operation, response, _ORDER_ACK)

        # Korbit does not echo these reliably, the request is authoritative.
        result = OrderResult(
            order_id=ack.order_id,
            status=ack.status,
            currency_pair=parse_currency_pair(order.currency_pair),
            side=side,
            price=order.price,
            order_type=parse_order_type(order.order_type),
        )

        if not result.succeeded:
            self._logger.warn("%s rejected: %s", operation, result.status)
            raise OrderRejectedError(result)

        self._logger.info("Order %s placed", result.order_id)
        return result

    @staticmethod
    def _order_body(order: OrderArgs) -> dict[str, Any]:
        order_type = parse_order_type(order.order_type)
        pair = parse_currency_pair(order.currency_pair)

        if order_type is OrderType.LIMIT and (order.price is None or order.coin_amount is None):
            raise InvalidOrderError("limit orders need a price and a coin amount")
        if order_type is OrderType.MARKET and order.coin_amount is None and order.fiat_amount is None:
            raise InvalidOrderError("market orders need a coin amount or a fiat amount")

        body: dict[str, Any] = {"currency_pair": pair.value, "type": order_type.value}
        if order.price is not None:
            body["price"] = str(order.price)
        if order.coin_amount is not None:
            body["coin_amount"] = order.coin_amount
        if order.fiat_amount is not None:
            body["fiat_amount"] = order.fiat_amount
        return body

    async def cancel_open_orders(
        self, order_ids: Iterable[int], currency_pair: Union[str, CurrencyPair]
    ) -> list[CancelResult]:
        """
        Cancel open orders in one request.

        Returns one result per id. Failed cancellations are logged and returned,
        not raised; check ``succeeded`` on each result.
        """
        pair = parse_currency_pair(currency_pair)
        ids = [_order_id_text(order_id) for order_id in order_ids]
        if not ids:
            raise InvalidRequestError("no order ids to cancel")

        operation = "cancel orders"
        response = await self._call(
            operation, "POST", CANCEL_ORDERS_PATH, data={"currency_pair": pair.value, "id": ids}
        )
        results = self._decode(operation, response, _CANCEL_RESULTS)

        for result in results:
            if not result.succeeded:
                self._logger.warn("Cancel of order %s failed: %s", result.order_id, result.status)
        return results

    async def list_open_orders(self, currency_pair: Union[str, CurrencyPair]) -> list[OpenOrder]:
        """List the account's open orders for a market."""
        pair = parse_currency_pair(currency_pair)
        operation = f"list open orders for {pair.value}"
        response = await self._call(operation, "GET", OPEN_ORDERS_PATH, params={"currency_pair": pair.value})
        return self._decode(operation, response, _OPEN_ORDERS)

    async def get_transaction_history(
        self,
        currency_pair: Union[str, CurrencyPair],
        category: Union[str, TransactionCategory],
        offset: Optional[Union[str, int]] = None,
        limit: Optional[Union[str, int]] = None,
        order_id: Optional[Union[str, int]] = None,
    ) -> list[TransactionRecord]:
        """
        Get the account's transaction history.

        Args:
            currency_pair: Market to query
            category: ``fills``, ``fiats`` or ``coins``
            offset: Optional pagination offset
            limit: Optional maximum number of records
            order_id: Optional order to restrict fills to

        Returns:
            Transaction records, ids decoded the same way for every market
        """
        if not currency_pair:
            raise InvalidRequestError("coin must be specified")
        if not category:
            raise InvalidRequestError("category must be one of 'fills', 'fiats' or 'coins'")

        pair = parse_currency_pair(currency_pair)
        try:
            category = TransactionCategory(category)
        except ValueError:
            raise InvalidRequestError(f"unknown transaction category: {category!r}") from None

        params: dict[str, Any] = {"currency_pair": pair.value, "category": category.value}
        for key, value in (("offset", offset), ("limit", limit), ("order_id", order_id)):
            if value is not None and value != "":
                params[key] = str(value)

        operation = f"transaction history for {pair.value}"
        response = await self._call(operation, "GET", TRANSACTIONS_PATH, params=params)
        return self._decode(operation, response, _TRANSACTIONS)

    # ========================================================================
    # Market data (public)
    # ========================================================================

    async def get_ticker(self, currency_pair: Union[str, CurrencyPair]) -> Ticker:
        """Get the detailed ticker for a market."""
        pair = parse_currency_pair(currency_pair)
        operation = f"ticker for {pair.value}"
        response = await self._call(
            operation, "GET", TICKER_PATH, params={"currency_pair": pair.value}, authenticated=False
        )
        return self._decode(operation, response, _TICKER)

    async def get_orderbook(self, currency_pair: Union[str, CurrencyPair]) -> Orderbook:
        """Get the orderbook for a market with typed price levels."""
        pair = parse_currency_pair(currency_pair)
        operation = f"orderbook for {pair.value}"
        response = await self._call(
            operation, "GET", ORDERBOOK_PATH, params={"currency_pair": pair.value}, authenticated=False
        )
        raw = self._decode(operation, response, _RAW_ORDERBOOK)
        try:
            return raw.transform()
        except OrderbookFormatError as exc:
            raise DecodeError(operation, response.status_code, str(exc)) from exc

    # ========================================================================
    # Wallets
    # ========================================================================

    async def get_wallets(self) -> Wallets:
        """
        Get the wallet of every configured currency pair, one request per pair.

        Raises:
            UnknownCurrencyPairError: If a configured pair is not a Korbit market
        """
        wallets = {}
        for value in self.currency_pairs:
            pair = parse_currency_pair(value)
            adapter = _WALLETS[pair]

            operation = f"wallet for {pair.value}"
            response = await self._call(operation, "GET", WALLET_PATH, params={"currency_pair": pair.value})
            wallets[pair] = self._decode(operation, response, adapter)

        return Wallets(wallets=wallets)
