"""User-facing messages for search failures."""

from __future__ import annotations

from walkreach.domain.errors import (
    GEOCODING_SERVICE,
    InvalidInput,
    NetworkError,
    NoRegion,
    NotFound,
    ServiceError,
)

GENERIC_MESSAGE = "An unexpected error occurred. Please try again."


def user_message(exc: BaseException) -> str:
    """Map a failure to a message safe to show the user (no internal detail)."""
    if isinstance(exc, InvalidInput):
        return "Please enter an address to search."
    if isinstance(exc, NotFound):
        return "Address not found. Please try a more specific address."
    if isinstance(exc, NoRegion):
        return "Could not calculate walking distance from this location. Try a different address."
    if isinstance(exc, ServiceError):
        if exc.service == GEOCODING_SERVICE:
            return "Could not look up that address. Please check your input and try again."
        return "The routing service is unavailable right now. Please try again later."
    if isinstance(exc, NetworkError):
        return "Network error. Please check your internet connection."
    return GENERIC_MESSAGE
