"""Conversions from Korbit's wire encoding to Python values.

Korbit sends prices, amounts and balances as decimal strings, and some integer
ids are quoted for one currency pair but bare for another. The helpers here
accept either form so a single model field can decode both.
"""

import re
from typing import Annotated, Any, Sequence

from pydantic import BeforeValidator

from .exceptions import OrderbookFormatError

_INTEGER = re.compile(r"-?[0-9]+")
_NON_NEGATIVE_INTEGER = re.compile(r"[0-9]+")


def parse_wire_int(value: Any) -> int:
    """
    Parse an integer that may arrive quoted (``"42"``) or bare (``42``).

    Args:
        value: Raw JSON value

    Returns:
        The integer value

    Raises:
        ValueError: If the value is not a base-10 integer
    """
    if isinstance(value, bool):
        raise ValueError(f"expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if _INTEGER.fullmatch(text):
            return int(text, 10)
    raise ValueError(f"expected an integer, got {value!r}")


def parse_wire_float(value: Any) -> float:
    """
    Parse a decimal amount sent as a string (``"0.5"``) or a JSON number.

    Raises:
        ValueError: If the value is not numeric
    """
    if isinstance(value, bool):
        raise ValueError(f"expected a decimal amount, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    raise ValueError(f"expected a decimal amount, got {value!r}")


WireInt = Annotated[int, BeforeValidator(parse_wire_int)]
WireFloat = Annotated[float, BeforeValidator(parse_wire_float)]


def parse_book_level(level: Sequence[Any], side: str) -> tuple[int, float]:
    """
    Convert one ``[price, quantity]`` orderbook level.

    Args:
        level: Two-element sequence as sent by Korbit, e.g. ``["3000000", "0.5"]``
        side: ``"bid"`` or ``"ask"``, used in error messages

    Returns:
        Tuple of (price in KRW, quantity)

    Raises:
        OrderbookFormatError: Naming the side and the field that failed
    """
    if isinstance(level, (str, bytes)) or len(level) < 2:
        raise OrderbookFormatError(side, "level", level)

    raw_price, raw_qty = level[0], level[1]

    if isinstance(raw_price, int) and not isinstance(raw_price, bool) and raw_price >= 0:
        price = raw_price
    elif isinstance(raw_price, str) and _NON_NEGATIVE_INTEGER.fullmatch(raw_price.strip()):
        price = int(raw_price.strip(), 10)
    else:
        raise OrderbookFormatError(side, "price", raw_price)

    try:
        qty = parse_wire_float(raw_qty)
    except ValueError as exc:
        raise OrderbookFormatError(side, "quantity", raw_qty) from exc

    return price, qty
