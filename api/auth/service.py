"""
Auth business logic (credential service).

Raises `core.errors` types; HTTP mapping happens in `main.py`.
"""

from __future__ import annotations

import logging
import uuid

from core.errors import Conflict, InvalidCredentials, NotFound

from . import repository, schemas, security, tokens

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"

logger = logging.getLogger(__name__)


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=str(user_row["id"]),
        email=str(user_row["email"]),
        created_at=user_row["created_at"],
        updated_at=user_row["updated_at"],
    )


async def register(payload: schemas.RegisterRequest) -> schemas.UserResponse:
    existing = await repository.get_user_by_email(payload.email)
    if existing is not None:
        raise Conflict("User with this email already exists")

    password_hash = security.hash_password(payload.password)
    user_row = await repository.create_user(
        user_id=str(uuid.uuid4()),
        email=payload.email,
        password_hash=password_hash,
    )
    logger.info("user_registered user_id=%s", user_row["id"])
    return _to_user_response(user_row)


async def authenticate(payload: schemas.LoginRequest) -> schemas.LoginResult:
    user_row = await repository.get_user_by_email(payload.email)
    if user_row is None:
        security.burn_password_check(payload.password)
        raise InvalidCredentials(INVALID_CREDENTIALS_MESSAGE)

    is_valid = security.verify_password(payload.password, str(user_row.get("password_hash") or ""))
    if not is_valid:
        raise InvalidCredentials(INVALID_CREDENTIALS_MESSAGE)

    user = _to_user_response(user_row)
    token = tokens.issue(subject=user.id, email=user.email)
    return schemas.LoginResult(token=token, user=user)


def logout(token: str) -> None:
    tokens.revoke(token)


async def get_user(user_id: str) -> schemas.UserResponse:
    user_row = await repository.get_user_by_id(user_id)
    if user_row is None:
        raise NotFound("User not found")
    return _to_user_response(user_row)
