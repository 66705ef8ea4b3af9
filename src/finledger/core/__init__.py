"""Core utilities and exceptions."""

from finledger.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    InsufficientLotsError,
    PositionNotFoundError,
    PriceUnavailableError,
    InconsistentAtomicityError,
)

__all__ = [
    "AppError",
    "ValidationError",
    "NotFoundError",
    "InsufficientLotsError",
    "PositionNotFoundError",
    "PriceUnavailableError",
    "InconsistentAtomicityError",
]
