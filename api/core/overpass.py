"""
OpenStreetMap Overpass HTTP client helpers.

Used endpoint:
- POST /api/interpreter  (form field `data` = Overpass QL)
    -> {"elements": [{"type": "node", "id": ..., "lat": ..., "lon": ..., "tags": {...}}, ...]}
"""

from __future__ import annotations

from typing import Any

import httpx

# Overpass failures are explicit and separable from other runtime errors.
class OverpassError(RuntimeError):
    pass


def _normalize_url(url: str) -> str:
    url = (url or "").strip()
    if not url:
        raise OverpassError("OVERPASS_API_URL is empty.")
    return url


def restaurants_around_query(*, latitude: float, longitude: float, radius_m: int) -> str:
    around = f"(around:{int(radius_m)},{latitude},{longitude})"
    return (
        "[out:json][timeout:25];\n"
        "(\n"
        f'  node["amenity"="restaurant"]{around};\n'
        f'  way["amenity"="restaurant"]{around};\n'
        f'  relation["amenity"="restaurant"]{around};\n'
        ");\n"
        "out body;\n"
        ">;\n"
        "out skel qt;\n"
    )


async def query_elements(
    *,
    api_url: str,
    query: str,
    timeout_s: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[dict[str, Any]]:
    """
    Run an Overpass QL query and return the raw `elements` list.
    """
    api_url = _normalize_url(api_url)

    try:
        async with httpx.AsyncClient(timeout=timeout_s, transport=transport) as client:
            resp = await client.post(api_url, data={"data": query})
    except httpx.HTTPError as e:
        raise OverpassError(f"Overpass request failed: {e}") from e

    if resp.status_code != 200:
        # Avoid dumping huge bodies; include a small snippet.
        body = resp.text[:500]
        raise OverpassError(f"Overpass request failed: {resp.status_code} {body}")

    try:
        data: dict[str, Any] = resp.json()
    except ValueError as e:
        raise OverpassError("Overpass returned a non-JSON body.") from e

    elements = data.get("elements") if isinstance(data, dict) else None
    if not isinstance(elements, list):
        raise OverpassError("Overpass returned no elements list.")
    return [e for e in elements if isinstance(e, dict)]
