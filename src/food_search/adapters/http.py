"""Shared helpers for httpx-backed source clients."""

import httpx

from food_search.domain.errors import ApiError, NetworkError


async def request_json(
    http_client: httpx.AsyncClient,
    source: str,
    method: str,
    url: str,
    **kwargs: object,
) -> dict[str, object]:
    """Send a request and decode its JSON body, mapping failures to domain errors."""
    try:
        response = await http_client.request(method, url, **kwargs)  # type: ignore[arg-type]
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ApiError(source, exc.response.status_code) from exc
    except httpx.TransportError as exc:
        raise NetworkError(source, str(exc) or type(exc).__name__) from exc
    try:
        payload = response.json()
    except ValueError as exc:
        raise NetworkError(source, "response body is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise NetworkError(source, "unexpected response shape")
    return payload
