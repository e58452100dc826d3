"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
_PASSWORD_STRENGTH = re.compile(r"((?=.*\d)|(?=.*\W+))(?![.\n])(?=.*[A-Z])(?=.*[a-z]).*$")
# bcrypt refuses secrets longer than 72 bytes; multi-byte characters count per byte.
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")
    return value


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=3, max_length=320, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8, max_length=MAX_PASSWORD_BYTES)
    password_confirmation: str = Field(
        ..., alias="passwordConfirmation", min_length=1, max_length=MAX_PASSWORD_BYTES
    )

    @field_validator("password", "password_confirmation")
    @classmethod
    def _password_bytes(cls, value: str) -> str:
        return _check_password_bytes(value)

    @field_validator("password")
    @classmethod
    def _password_strength(cls, value: str) -> str:
        if not _PASSWORD_STRENGTH.match(value):
            raise ValueError(
                "Password must contain at least 1 uppercase letter, 1 lowercase letter, "
                "and 1 number or special character"
            )
        return value

    @model_validator(mode="after")
    def _passwords_match(self) -> "RegisterRequest":
        if self.password != self.password_confirmation:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=72)


class UserResponse(BaseModel):
    """
    Public credential shape. Never carries the password hash.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    created_at: datetime = Field(..., serialization_alias="createdAt")
    updated_at: datetime = Field(..., serialization_alias="updatedAt")


class ProfileResponse(BaseModel):
    id: str
    email: str


class LoginResult(BaseModel):
    token: str
    user: UserResponse
