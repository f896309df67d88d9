"""Exceptions raised by the Korbit SDK."""

from typing import TYPE_CHECKING, Any, Mapping, Optional

if TYPE_CHECKING:
    from .types import OrderResult


class KorbitError(Exception):
    """Base class for every error raised by the SDK."""


class TransportError(KorbitError):
    """The request never produced an HTTP response (DNS, TLS, connection, timeout)."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation}: {message}")
        self.operation = operation


class APIError(KorbitError):
    """Korbit answered with a non-success HTTP status."""

    def __init__(self, operation: str, status_code: int, headers: Optional[Mapping[str, str]] = None):
        self.operation = operation
        self.status_code = status_code
        self.headers = dict(headers or {})
        super().__init__(f"{operation}: status {status_code}, headers {self.headers}")


class DecodeError(KorbitError):
    """The response body did not have the expected shape."""

    def __init__(self, operation: str, status_code: Optional[int], message: str):
        self.operation = operation
        self.status_code = status_code
        super().__init__(f"{operation}: could not decode response (status {status_code}): {message}")


class OrderbookFormatError(KorbitError, ValueError):
    """An orderbook level could not be converted to a price/quantity pair."""

    def __init__(self, side: str, field: str, value: Any):
        self.side = side
        self.field = field
        self.value = value
        super().__init__(f"cannot parse {side} {field} from {value!r}")


class OrderRejectedError(KorbitError):
    """
    The exchange accepted the request but reported a non-success status.

    The decoded result is kept on the exception so callers can inspect it.
    """

    def __init__(self, result: "OrderResult"):
        self.result = result
        super().__init__(f"order not successful: {result.status}")


class AuthError(KorbitError):
    """Login or token refresh failed."""


class NotAuthenticatedError(KorbitError):
    """An authenticated call was attempted before login."""


class InvalidRequestError(KorbitError, ValueError):
    """Arguments were rejected locally, before any network call."""


class InvalidOrderError(InvalidRequestError):
    """Order arguments are incomplete or use an unknown order type."""


class UnknownCurrencyPairError(InvalidRequestError):
    """A currency pair the SDK does not know about."""

    def __init__(self, pair: Any):
        self.pair = pair
        super().__init__(f"unknown currency pair: {pair!r}")
