"""
Restaurant search endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from core.schemas import ApiResponse

from . import service

router = APIRouter()


@router.get("/restaurants")
async def find_nearby_restaurants(
    lat: float | None = Query(default=None, ge=-90.0, le=90.0),
    lon: float | None = Query(default=None, ge=-180.0, le=180.0),
    city: str | None = Query(default=None, max_length=200),
    radius: int = Query(default=1000, ge=100, le=5000),
    _: dict = Depends(auth_dependencies.get_current_user),
) -> ApiResponse:
    restaurants = await service.find_nearby_restaurants(lat=lat, lon=lon, city=city, radius=radius)
    return ApiResponse.ok(
        "Restaurants found successfully",
        [r.model_dump(mode="json", by_alias=True) for r in restaurants],
    )
