"""
Restaurant lookups backed by the OpenStreetMap Overpass API.

The upstream is treated as unreliable: any failure is logged and yields an
empty result.
"""

from __future__ import annotations

import logging
from typing import Any

from core import config, overpass

from .schemas import Restaurant

DEFAULT_RADIUS_M = 1000
UNNAMED = "Unnamed Restaurant"

logger = logging.getLogger(__name__)


def format_address(tags: dict[str, Any]) -> str | None:
    housenumber = tags.get("addr:housenumber")
    street = tags.get("addr:street")
    if not (housenumber and street):
        return None

    address = f"{housenumber} {street}"
    if tags.get("addr:city"):
        address += f", {tags['addr:city']}"
    if tags.get("addr:state"):
        address += f", {tags['addr:state']}"
    if tags.get("addr:postcode"):
        address += f" {tags['addr:postcode']}"
    return address


def to_restaurant(node: dict[str, Any]) -> Restaurant:
    tags = node.get("tags") or {}
    return Restaurant(
        id=str(node["id"]),
        name=tags.get("name") or UNNAMED,
        latitude=float(node["lat"]),
        longitude=float(node["lon"]),
        address=format_address(tags),
        cuisine=tags.get("cuisine"),
        phone=tags.get("phone"),
        website=tags.get("website"),
        opening_hours=tags.get("opening_hours"),
    )


def to_restaurants(elements: list[dict[str, Any]]) -> list[Restaurant]:
    # Ways and relations have no coordinates of their own; keep named nodes only.
    return [
        to_restaurant(e)
        for e in elements
        if e.get("type") == "node" and isinstance(e.get("tags"), dict) and e["tags"].get("name")
    ]


async def find_nearby(
    latitude: float,
    longitude: float,
    radius_m: int = DEFAULT_RADIUS_M,
) -> list[Restaurant]:
    query = overpass.restaurants_around_query(
        latitude=latitude,
        longitude=longitude,
        radius_m=radius_m,
    )
    try:
        elements = await overpass.query_elements(
            api_url=config.overpass_api_url(),
            query=query,
            timeout_s=config.overpass_timeout_s(),
        )
        restaurants = to_restaurants(elements)
    except Exception:
        logger.exception(
            "restaurant_fetch_failed lat=%s lon=%s radius=%s",
            latitude,
            longitude,
            radius_m,
        )
        return []

    logger.info(
        "restaurant_fetch lat=%s lon=%s radius=%s found=%s",
        latitude,
        longitude,
        radius_m,
        len(restaurants),
    )
    return restaurants
