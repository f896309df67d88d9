"""Korbit exchange SDK for Python."""

# Main unified client
from .sdk import KorbitClient

# Building blocks
from .client import RestClient, DEFAULT_BASE_URL
from .auth import Session, needs_refresh, REFRESH_MARGIN

from .logger import Logger, ConsoleLogger, NoopLogger, LogLevel
from .format import format_number, format_krw, format_coin, describe_order
from .summary import CoinBalance, TradeTotals, coin_balance, total_buy_sell_history

# Types
from .types import (
    ACTIVE_CURRENCY_PAIRS,
    SUCCESS_STATUS,
    Side,
    OrderType,
    BookSide,
    Currency,
    CurrencyPair,
    TransactionCategory,
    TransactionType,
    Credentials,
    Token,
    CurrencyAmount,
    OrderAck,
    OrderArgs,
    OrderResult,
    CancelResult,
    OpenOrder,
    FillDetail,
    TransactionRecord,
    Ticker,
    OrderbookEntry,
    Orderbook,
    RawOrderbook,
    ConnectedAccount,
    PrimaryWallet,
    SecondaryWallet,
    Wallets,
    parse_currency_pair,
    as_utc,
    parse_order_type,
)

# Exceptions
from .exceptions import (
    KorbitError,
    TransportError,
    APIError,
    DecodeError,
    OrderbookFormatError,
    OrderRejectedError,
    AuthError,
    NotAuthenticatedError,
    InvalidRequestError,
    InvalidOrderError,
    UnknownCurrencyPairError,
)

__all__ = [
    # Main client
    "KorbitClient",
    # Building blocks
    "RestClient",
    "DEFAULT_BASE_URL",
    "Session",
    "needs_refresh",
    "REFRESH_MARGIN",
    # Logging
    "Logger",
    "ConsoleLogger",
    "NoopLogger",
    "LogLevel",
    # Formatting and summaries
    "format_number",
    "format_krw",
    "format_coin",
    "describe_order",
    "CoinBalance",
    "TradeTotals",
    "coin_balance",
    "total_buy_sell_history",
    # Domain types
    "ACTIVE_CURRENCY_PAIRS",
    "SUCCESS_STATUS",
    "Side",
    "OrderType",
    "BookSide",
    "Currency",
    "CurrencyPair",
    "TransactionCategory",
    "TransactionType",
    "Credentials",
    "Token",
    "CurrencyAmount",
    "OrderAck",
    "OrderArgs",
    "OrderResult",
    "CancelResult",
    "OpenOrder",
    "FillDetail",
    "TransactionRecord",
    "Ticker",
    "OrderbookEntry",
    "Orderbook",
    "RawOrderbook",
    "ConnectedAccount",
    "PrimaryWallet",
    "SecondaryWallet",
    "Wallets",
    "parse_currency_pair",
    "as_utc",
    "parse_order_type",
    # Exceptions
    "KorbitError",
    "TransportError",
    "APIError",
    "DecodeError",
    "OrderbookFormatError",
    "OrderRejectedError",
    "AuthError",
    "NotAuthenticatedError",
    "InvalidRequestError",
    "InvalidOrderError",
    "UnknownCurrencyPairError",
]

__version__ = "0.1.0"
