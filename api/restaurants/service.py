"""
Restaurant search orchestration.

Coordinates take precedence; a city name is resolved through a small built-in
geocoding table.
"""

from __future__ import annotations

from fastapi import HTTPException, status

from . import repository
from .schemas import Restaurant

KNOWN_CITIES: dict[str, tuple[float, float]] = {
    "new york": (40.7128, -74.0060),
}


def geocode_city(city: str) -> tuple[float, float] | None:
    name = (city or "").strip().lower()
    for known, coordinates in KNOWN_CITIES.items():
        if known in name:
            return coordinates
    return None


async def find_nearby_restaurants(
    *,
    lat: float | None = None,
    lon: float | None = None,
    city: str | None = None,
    radius: int = repository.DEFAULT_RADIUS_M,
) -> list[Restaurant]:
    if lat is not None and lon is not None:
        return await repository.find_nearby(lat, lon, radius)

    if city:
        coordinates = geocode_city(city)
        if coordinates is None:
            raise HTTPException(
                status_code=status.HTTP_501_NOT_IMPLEMENTED,
                detail=f"Geocoding not implemented for city: {city}. Please use coordinates instead.",
            )
        return await repository.find_nearby(coordinates[0], coordinates[1], radius)

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Either city or coordinates (lat/lon) must be provided",
    )
