"""
User lookup endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from auth import service as auth_service
from core.schemas import ApiResponse

router = APIRouter(prefix="/users")


@router.get("/me")
async def get_me(
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> ApiResponse:
    user = await auth_service.get_user(str(current_user["id"]))
    return ApiResponse.ok("User profile retrieved successfully", user.model_dump(mode="json", by_alias=True))


@router.get("/{user_id}")
async def get_user_by_id(
    user_id: str,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> ApiResponse:
    user = await auth_service.get_user(user_id)
    return ApiResponse.ok("User retrieved successfully", user.model_dump(mode="json", by_alias=True))
