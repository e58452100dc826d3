"""
Transaction history endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.schemas import ApiResponse

from . import service
from .schemas import TransactionResponse

router = APIRouter()


@router.get("/transactions")
async def list_transactions(
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> ApiResponse:
    records = await service.list_for_user(str(current_user["id"]))
    return ApiResponse.ok(
        "Transactions retrieved successfully",
        [TransactionResponse.from_record(r).model_dump(mode="json", by_alias=True) for r in records],
    )
