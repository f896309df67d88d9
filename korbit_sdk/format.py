"""Display formatting for KRW prices and coin amounts.

Used when the SDK describes orders and balances in log messages.
"""

from decimal import Decimal, InvalidOperation
from typing import Union

from .types import Currency, OrderArgs

Number = Union[str, int, float, Decimal]


def format_number(value: Number, max_decimals: int = 8) -> str:
    """
    Format a number with thousands separators and no trailing zeros.

    Args:
        value: Number or decimal string
        max_decimals: Maximum number of decimal places kept

    Returns:
        Formatted string, e.g. ``"3,000,000"`` or ``"0.0015"``
    """
    try:
        dec = Decimal(str(value))
    except InvalidOperation:
        return str(value)

    quantum = Decimal(1).scaleb(-max_decimals)
    text = f"{dec.quantize(quantum):,f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_krw(value: Number) -> str:
    """Format a KRW amount, e.g. ``"3,000,000 KRW"``."""
    return f"{format_number(value, 0)} KRW"


def format_coin(value: Number, currency: Currency) -> str:
    """Format a coin amount, e.g. ``"0.001 BTC"``."""
    return f"{format_number(value, 8)} {currency.value.upper()}"


def describe_order(order: OrderArgs) -> str:
    """One-line summary of an order for logs."""
    pair = order.currency_pair
    parts = [order.order_type.value, pair.value]
    if order.coin_amount is not None:
        parts.append(format_coin(order.coin_amount, pair.base))
    if order.fiat_amount is not None:
        parts.append(f"for {format_krw(order.fiat_amount)}")
    if order.price is not None:
        parts.append(f"@ {format_krw(order.price)}")
    return " ".join(parts)
