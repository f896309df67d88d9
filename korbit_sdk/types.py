"""Type definitions for the Korbit SDK."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AfterValidator, AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, SecretStr

from .exceptions import InvalidOrderError, UnknownCurrencyPairError
from .normalize import WireFloat, WireInt, parse_book_level

SUCCESS_STATUS = "success"


# ============================================================================
# Enums
# ============================================================================


class Side(str, Enum):
    """Order side."""

    BUY = "buy"
    SELL = "sell"


class OrderType(str, Enum):
    """Order type."""

    LIMIT = "limit"
    MARKET = "market"


class BookSide(str, Enum):
    """Side of the book an open order rests on."""

    BID = "bid"
    ASK = "ask"


class Currency(str, Enum):
    """Currency codes used by Korbit."""

    KRW = "krw"
    BTC = "btc"
    ETH = "eth"
    ETC = "etc"
    XRP = "xrp"


class CurrencyPair(str, Enum):
    """Markets, named the way Korbit names them."""

    BTC_KRW = "btc_krw"
    ETH_KRW = "eth_krw"
    ETC_KRW = "etc_krw"
    XRP_KRW = "xrp_krw"

    @property
    def base(self) -> Currency:
        """Traded coin, e.g. ``btc`` for ``btc_krw``."""
        return Currency(self.value.split("_")[0])

    @property
    def quote(self) -> Currency:
        """Pricing currency, always ``krw`` for now."""
        return Currency(self.value.split("_")[1])


class TransactionCategory(str, Enum):
    """Transaction history categories."""

    FILLS = "fills"
    FIATS = "fiats"
    COINS = "coins"


class TransactionType(str, Enum):
    """Kind of entry in the transaction history."""

    BUY = "buy"
    SELL = "sell"
    FIAT_IN = "fiat_in"
    FIAT_OUT = "fiat_out"
    COIN_IN = "coin_in"
    COIN_OUT = "coin_out"


# Pairs queried by get_wallets() unless the caller configures its own set.
ACTIVE_CURRENCY_PAIRS: tuple[CurrencyPair, ...] = (
    CurrencyPair.BTC_KRW,
    CurrencyPair.ETH_KRW,
    CurrencyPair.ETC_KRW,
)


def parse_currency_pair(value: Union[str, CurrencyPair]) -> CurrencyPair:
    """
    Parse a currency pair such as ``"btc_krw"``.

    Raises:
        UnknownCurrencyPairError: If Korbit has no such market
    """
    if isinstance(value, CurrencyPair):
        return value
    try:
        return CurrencyPair(str(value).strip().lower())
    except ValueError:
        raise UnknownCurrencyPairError(value) from None


def parse_order_type(value: Union[str, OrderType]) -> OrderType:
    """
    Parse an order type.

    Raises:
        InvalidOrderError: Unless the value is ``limit`` or ``market``
    """
    if isinstance(value, OrderType):
        return value
    try:
        return OrderType(str(value).strip().lower())
    except ValueError:
        raise InvalidOrderError(f"unrecognized order type: {value!r}") from None


def _ms_to_datetime(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime, leave aware ones untouched."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ============================================================================
# Authentication
# ============================================================================


class Credentials(BaseModel):
    """Application and account credentials used for the password grant."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: SecretStr
    username: str
    password: SecretStr


class Token(BaseModel):
    """OAuth2 access token as issued by Korbit, stamped with the local issue time."""

    model_config = ConfigDict(frozen=True)

    access_token: SecretStr
    token_type: str
    expires_in: WireInt
    refresh_token: SecretStr
    issued_at: Annotated[datetime, AfterValidator(as_utc)]

    @property
    def expires_at(self) -> datetime:
        return self.issued_at + timedelta(seconds=self.expires_in)

    @property
    def authorization(self) -> str:
        """Value for the ``Authorization`` header."""
        return f"{self.token_type} {self.access_token.get_secret_value()}"

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = as_utc(now) if now else datetime.now(timezone.utc)
        return now >= self.expires_at


# ============================================================================
# Shared value types
# ============================================================================


class CurrencyAmount(BaseModel):
    """Amount of one currency, e.g. ``{"currency": "krw", "value": "1000.5"}``."""

    currency: Currency
    value: WireFloat


def _amount_of(amounts: list[CurrencyAmount], currency: Currency) -> float:
    for amount in amounts:
        if amount.currency == currency:
            return amount.value
    return 0.0


# ============================================================================
# Orders
# ============================================================================


def _amount_text(value: Any) -> Any:
    # Korbit expects plain decimal notation, never exponents like 1e-08.
    if isinstance(value, float):
        return format(Decimal(str(value)), "f")
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


AmountText = Annotated[str, BeforeValidator(_amount_text)]


class OrderArgs(BaseModel):
    """Arguments for a buy or sell order."""

    currency_pair: CurrencyPair
    order_type: OrderType
    price: Optional[int] = None  # KRW, limit orders only
    coin_amount: Optional[AmountText] = None
    fiat_amount: Optional[AmountText] = None  # market buys only


class OrderAck(BaseModel):
    """
    Body of a buy or sell response, reduced to the fields Korbit sends reliably.

    Anything else Korbit echoes back (side, type, price, pair) is ignored, so
    an odd echo can never fail decoding.
    """

    model_config = ConfigDict(populate_by_name=True)

    order_id: Optional[WireInt] = Field(default=None, alias="orderId")
    status: str


class OrderResult(BaseModel):
    """
    Result of placing an order.

    Only the id and status come from Korbit. Pair, price, side and order type
    are filled in from the request that produced the result.
    """

    model_config = ConfigDict(populate_by_name=True)

    order_id: Optional[WireInt] = Field(default=None, alias="orderId")
    status: str
    currency_pair: Optional[CurrencyPair] = None
    side: Optional[Side] = None
    price: Optional[int] = None
    order_type: Optional[OrderType] = Field(default=None, alias="type")

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS_STATUS


class CancelResult(BaseModel):
    """Outcome of cancelling one order. Each id in a cancel call gets its own."""

    model_config = ConfigDict(populate_by_name=True)

    order_id: WireInt = Field(alias="orderId")
    status: str
    currency_pair: Optional[CurrencyPair] = None

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS_STATUS


class OpenOrder(BaseModel):
    """An order resting on the book."""

    timestamp: int
    id: WireInt
    type: BookSide
    price: CurrencyAmount
    total: CurrencyAmount
    open: CurrencyAmount

    @property
    def time(self) -> datetime:
        return _ms_to_datetime(self.timestamp)


# ============================================================================
# Transactions
# ============================================================================


class FillDetail(BaseModel):
    """Details of an order fill."""

    model_config = ConfigDict(populate_by_name=True)

    price: CurrencyAmount
    amount: CurrencyAmount
    native_amount: CurrencyAmount
    order_id: WireInt = Field(validation_alias=AliasChoices("orderId", "orderID", "order_id"))


class TransactionRecord(BaseModel):
    """One entry of the transaction history."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: int
    completed_at: Optional[int] = Field(default=None, alias="completedAt")
    id: WireInt
    type: TransactionType
    fee: Optional[CurrencyAmount] = None
    balances: list[CurrencyAmount] = Field(default_factory=list)
    fills_detail: Optional[FillDetail] = Field(default=None, alias="fillsDetail")

    @property
    def time(self) -> datetime:
        return _ms_to_datetime(self.timestamp)


# ============================================================================
# Market data
# ============================================================================


class Ticker(BaseModel):
    """Detailed ticker for one market. Prices are in KRW."""

    timestamp: int
    last: WireInt
    bid: WireInt
    ask: WireInt
    low: WireInt
    high: WireInt
    volume: WireFloat

    @property
    def time(self) -> datetime:
        return _ms_to_datetime(self.timestamp)


class OrderbookEntry(BaseModel):
    """One price level of the orderbook."""

    price: int
    quantity: float


class Orderbook(BaseModel):
    """Orderbook snapshot, best price first on both sides."""

    timestamp: int
    bids: list[OrderbookEntry] = Field(default_factory=list)
    asks: list[OrderbookEntry] = Field(default_factory=list)


class RawOrderbook(BaseModel):
    """Orderbook as sent by Korbit: levels are ``[price, quantity]`` string pairs."""

    timestamp: int
    bids: list[list[Any]] = Field(default_factory=list)
    asks: list[list[Any]] = Field(default_factory=list)

    def transform(self) -> Orderbook:
        """
        Convert the string pairs into typed entries, keeping their order.

        Raises:
            OrderbookFormatError: If any level fails to parse
        """
        return Orderbook(
            timestamp=self.timestamp,
            bids=[_book_entry(level, BookSide.BID) for level in self.bids],
            asks=[_book_entry(level, BookSide.ASK) for level in self.asks],
        )


def _book_entry(level: list[Any], side: BookSide) -> OrderbookEntry:
    price, quantity = parse_book_level(level, side.value)
    return OrderbookEntry(price=price, quantity=quantity)


# ============================================================================
# Wallets
# ============================================================================


class AccountAddress(BaseModel):
    """Bank account or coin address attached to a wallet."""

    bank: Optional[str] = None
    account: Optional[str] = None
    owner: Optional[str] = None
    address: Optional[str] = None


class ConnectedAccount(BaseModel):
    """Deposit or withdrawal account registered for the primary wallet."""

    model_config = ConfigDict(populate_by_name=True)

    currency: Currency
    status: str = ""
    registered_owner: str = Field(default="", alias="registeredOwner")
    address: AccountAddress = Field(default_factory=AccountAddress)


class PrimaryWallet(BaseModel):
    """Wallet shape returned for BTC/KRW, with connected accounts and withdrawals."""

    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["primary"] = "primary"
    deposit_accounts: list[ConnectedAccount] = Field(default_factory=list, alias="in")
    withdrawal_accounts: list[ConnectedAccount] = Field(default_factory=list, alias="out")
    balance: list[CurrencyAmount] = Field(default_factory=list)
    pending_out: list[CurrencyAmount] = Field(default_factory=list, alias="pendingOut")
    pending_orders: list[CurrencyAmount] = Field(default_factory=list, alias="pendingOrders")
    available: list[CurrencyAmount] = Field(default_factory=list)

    def total(self, currency: Currency) -> float:
        return _amount_of(self.balance, currency)

    def available_amount(self, currency: Currency) -> float:
        return _amount_of(self.available, currency)

    def in_trades(self, currency: Currency) -> float:
        return _amount_of(self.pending_orders, currency)

    def pending_withdrawal(self, currency: Currency) -> float:
        return _amount_of(self.pending_out, currency)


class SecondaryWallet(BaseModel):
    """Wallet shape returned for every pair other than BTC/KRW."""

    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["secondary"] = "secondary"
    balance: list[CurrencyAmount] = Field(default_factory=list)
    tradable: list[CurrencyAmount] = Field(default_factory=list)
    trade_in_use: list[CurrencyAmount] = Field(default_factory=list, alias="tradeInUse")

    def total(self, currency: Currency) -> float:
        return _amount_of(self.balance, currency)

    def available_amount(self, currency: Currency) -> float:
        return _amount_of(self.tradable, currency)

    def in_trades(self, currency: Currency) -> float:
        return _amount_of(self.trade_in_use, currency)

    def pending_withdrawal(self, currency: Currency) -> float:
        return 0.0


WalletBalance = Annotated[Union[PrimaryWallet, SecondaryWallet], Field(discriminator="kind")]

# Response shape of /v1/user/balances for each pair.
WALLET_SHAPES: dict[CurrencyPair, type[BaseModel]] = {
    CurrencyPair.BTC_KRW: PrimaryWallet,
    CurrencyPair.ETH_KRW: SecondaryWallet,
    CurrencyPair.ETC_KRW: SecondaryWallet,
    CurrencyPair.XRP_KRW: SecondaryWallet,
}


class Wallets(BaseModel):
    """Wallets of the account, keyed by currency pair."""

    wallets: dict[CurrencyPair, WalletBalance] = Field(default_factory=dict)

    def __getitem__(self, pair: CurrencyPair) -> Union[PrimaryWallet, SecondaryWallet]:
        return self.wallets[pair]

    def __contains__(self, pair: object) -> bool:
        return pair in self.wallets

    def get(self, pair: CurrencyPair) -> Optional[Union[PrimaryWallet, SecondaryWallet]]:
        return self.wallets.get(pair)

    def pairs(self) -> list[CurrencyPair]:
        return list(self.wallets)
