"""
Shared JSON-over-HTTPS GET used by every feed.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from dogewatch.domain.errors import NetworkError, SchemaError


async def request_json(
    url: str,
    *,
    source: str,
    params: Optional[dict] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 10.0,
) -> Any:
    """
    GET url and decode the JSON body.

    Raises:
        NetworkError: transport failure or non-200 status
        SchemaError: body is not JSON
    """
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(url, params=params, headers=headers)
    except httpx.HTTPError as exc:
        raise NetworkError(f"request to {url} failed: {exc}", source=source) from exc

    if response.status_code != 200:
        raise NetworkError(
            f"{url} returned HTTP {response.status_code}: {response.text[:200]}",
            source=source,
        )
    try:
        return response.json()
    except ValueError as exc:
        raise SchemaError(f"{url} returned non-JSON body", source=source) from exc
