"""
HTTP helpers.

This module centralizes the minimal HTTP client logic used by the Mapbox clients.

Design goals:
- Small surface area (async GET JSON).
- Deterministic defaults (timeout + User-Agent).
- Raise on non-2xx so callers can translate failures into the search error taxonomy.
"""

from __future__ import annotations

from typing import Any

import httpx


DEFAULT_USER_AGENT = "walkreach/0.1.0 (+https://local)"


def build_async_client(
    *,
    timeout_seconds: float = 15,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the shared `AsyncClient` one search session uses for all its requests."""
    return httpx.AsyncClient(
        headers={"User-Agent": DEFAULT_USER_AGENT},
        timeout=timeout_seconds,
        transport=transport,
        follow_redirects=True,
    )


async def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 15,
    client: httpx.AsyncClient | None = None,
) -> Any:
    """GET `url` and return the decoded JSON response.

    When `client` is None a one-shot client is opened and closed around the request.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If the response body is not valid JSON.
    """
    request_headers = {"User-Agent": DEFAULT_USER_AGENT}
    if headers:
        request_headers.update(headers)

    if client is None:
        async with build_async_client(timeout_seconds=timeout_seconds) as one_shot:
            resp = await one_shot.get(url, params=params, headers=request_headers)
            resp.raise_for_status()
            return resp.json()

    resp = await client.get(url, params=params, headers=request_headers, timeout=timeout_seconds)
    resp.raise_for_status()
    return resp.json()
