"""
Response envelope shared by every endpoint.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ApiResponse(BaseModel):
    success: bool
    message: str
    data: Any = None
    error: Any = None

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "ApiResponse":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, error: Any = None) -> "ApiResponse":
        return cls(success=False, message=message, error=error)
