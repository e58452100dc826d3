"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from core.schemas import ApiResponse

from . import dependencies, schemas, service

router = APIRouter(prefix="/auth")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: schemas.RegisterRequest) -> ApiResponse:
    user = await service.register(payload)
    return ApiResponse.ok("User registered successfully", user.model_dump(mode="json", by_alias=True))


@router.post("/login")
async def login(payload: schemas.LoginRequest) -> ApiResponse:
    result = await service.authenticate(payload)
    return ApiResponse.ok("Login successful", result.model_dump(mode="json", by_alias=True))


@router.post("/logout")
async def logout(
    access_token: str = Depends(dependencies.get_bearer_token),
    _: dict = Depends(dependencies.get_current_user),
) -> ApiResponse:
    service.logout(access_token)
    return ApiResponse.ok("Logout successful")


@router.get("/profile")
async def profile(
    current_user: dict = Depends(dependencies.get_current_user),
) -> ApiResponse:
    return ApiResponse.ok(
        "Profile retrieved successfully",
        schemas.ProfileResponse(**current_user).model_dump(mode="json"),
    )
