"""Application-level exceptions."""

from datetime import date
from decimal import Decimal


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when transaction or request input is malformed."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class InsufficientLotsError(AppError):
    """Raised when a withdrawal asks for more than a position still holds."""

    def __init__(self, investment_id: str, requested: Decimal, available: Decimal):
        self.investment_id = investment_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient lots in position {investment_id}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_LOTS",
        )


class PositionNotFoundError(AppError):
    """Raised when a withdrawal references an unknown or closed position."""

    def __init__(self, investment_id: str, closed: bool = False):
        self.investment_id = investment_id
        state = "closed" if closed else "not found"
        super().__init__(
            f"Investment position {state}: {investment_id}",
            code="POSITION_NOT_FOUND",
        )


class PriceUnavailableError(AppError):
    """Raised when no price can be resolved for a symbol on a date."""

    def __init__(self, symbol: str, currency: str, on: date):
        self.symbol = symbol
        self.currency = currency
        self.on = on
        super().__init__(
            f"No {currency} price for {symbol} on {on.isoformat()}",
            code="PRICE_UNAVAILABLE",
        )


class InconsistentAtomicityError(AppError):
    """Raised when a paired stake/unstake write could not complete as a unit."""

    def __init__(self, message: str):
        super().__init__(message, code="INCONSISTENT_ATOMICITY")
