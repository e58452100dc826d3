"""
Activity (transaction) records.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class TransactionType(StrEnum):
    AUTH = "AUTH"
    SEARCH = "SEARCH"
    TRANSACTION = "TRANSACTION"


@dataclass(frozen=True)
class ActivityRecord:
    id: str
    user_id: str
    type: TransactionType
    endpoint: str
    params: str
    description: str
    created_at: datetime


class TransactionResponse(BaseModel):
    id: str
    user_id: str = Field(..., serialization_alias="userId")
    type: TransactionType
    endpoint: str
    params: str
    description: str
    created_at: datetime = Field(..., serialization_alias="createdAt")

    @classmethod
    def from_record(cls, record: ActivityRecord) -> "TransactionResponse":
        return cls(
            id=record.id,
            user_id=record.user_id,
            type=record.type,
            endpoint=record.endpoint,
            params=record.params,
            description=record.description,
            created_at=record.created_at,
        )
