"""Exception hierarchy for search failures."""

from __future__ import annotations

GEOCODING_SERVICE = "Geocoding"
ISOCHRONE_SERVICE = "Isochrone"


class SearchError(Exception):
    """Base exception for every failure the search pipeline reports."""


class InvalidInput(SearchError):
    """The query was empty or whitespace only; no request was made."""

    def __init__(self, query: str = ""):
        self.query = query
        super().__init__("Search query must not be blank")


class NotFound(SearchError):
    """The geocoder returned zero matches."""

    def __init__(self, query: str):
        self.query = query
        super().__init__(f"No geocoding match for {query!r}")


class NoRegion(SearchError):
    """The isochrone service returned no usable polygon for the origin."""

    def __init__(self, detail: str = "no polygon features returned"):
        self.detail = detail
        super().__init__(f"No reachable region: {detail}")


class ServiceError(SearchError):
    """An upstream service answered with a non-success status (or an unreadable body)."""

    def __init__(self, service: str, status_code: int | None):
        self.service = service
        self.status_code = status_code
        if status_code is None:
            super().__init__(f"{service} returned a malformed response")
        else:
            super().__init__(f"{service} failed (HTTP {status_code})")


class NetworkError(SearchError):
    """The request never completed (connectivity, DNS, timeout)."""

    def __init__(self, service: str, detail: str = ""):
        self.service = service
        self.detail = detail
        super().__init__(f"{service} unreachable: {detail}" if detail else f"{service} unreachable")
