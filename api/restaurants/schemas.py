"""
Restaurant search schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Restaurant(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    latitude: float
    longitude: float
    address: str | None = None
    cuisine: str | None = None
    phone: str | None = None
    website: str | None = None
    opening_hours: str | None = Field(default=None, serialization_alias="openingHours")
