"""Summaries computed from decoded wallets and transaction history."""

from datetime import datetime
from typing import Iterable, Optional, TypedDict, Union

from .exceptions import InvalidRequestError
from .types import (
    Currency,
    CurrencyPair,
    TransactionRecord,
    TransactionType,
    Wallets,
    as_utc,
    parse_currency_pair,
)


class CoinBalance(TypedDict):
    """Balance of one market's coin and of KRW."""

    currency_pair: CurrencyPair
    coins: float
    krw: float


class TradeTotals(TypedDict):
    """Aggregated fills."""

    buys: float  # KRW spent
    sells: float  # KRW received
    trades: int


def coin_balance(wallets: Wallets, currency_pair: Union[str, CurrencyPair]) -> CoinBalance:
    """
    Look up the coin and KRW balance held in one market's wallet.

    Args:
        wallets: Result of ``get_wallets()``
        currency_pair: Market whose wallet to read

    Returns:
        Coin and KRW balances, zero where the wallet lists no entry

    Raises:
        InvalidRequestError: If ``wallets`` has no wallet for the pair
    """
    pair = parse_currency_pair(currency_pair)
    wallet = wallets.get(pair)
    if wallet is None:
        raise InvalidRequestError(f"no wallet fetched for {pair.value}")

    return CoinBalance(
        currency_pair=pair,
        coins=wallet.total(pair.base),
        krw=wallet.total(Currency.KRW),
    )


def _keep(record: TransactionRecord, order_size: float, start: Optional[datetime], end: Optional[datetime]) -> bool:
    if order_size and (record.fills_detail is None or record.fills_detail.amount.value != order_size):
        return False
    if start is not None and record.time < as_utc(start):
        return False
    if end is not None and record.time > as_utc(end):
        return False
    return True


def total_buy_sell_history(
    records: Iterable[TransactionRecord],
    order_size: float = 0.0,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> TradeTotals:
    """
    Sum the KRW value of buy and sell fills.

    Args:
        records: Transaction history, usually the ``fills`` category
        order_size: Only count fills of exactly this coin amount (0 counts all)
        start: Ignore records before this time (naive values are taken as UTC)
        end: Ignore records after this time (naive values are taken as UTC)

    Returns:
        Totals for the records that pass the filters
    """
    kept = [record for record in records if _keep(record, order_size, start, end)]

    totals = TradeTotals(buys=0.0, sells=0.0, trades=0)
    for record in kept:
        if record.fills_detail is None:
            continue
        if record.type is TransactionType.BUY:
            totals["buys"] += record.fills_detail.native_amount.value
            totals["trades"] += 1
        elif record.type is TransactionType.SELL:
            totals["sells"] += record.fills_detail.native_amount.value
            totals["trades"] += 1
    return totals
