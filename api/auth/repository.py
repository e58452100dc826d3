"""
User persistence helpers.
"""

from __future__ import annotations

import uuid

import asyncpg

from core import db
from core.errors import Conflict


def _as_uuid(user_id: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(user_id))
    except ValueError:
        return None


async def create_user(*, user_id: str, email: str, password_hash: str) -> dict:
    try:
        row = await db.fetch_one(
            """
            INSERT INTO users (id, email, password_hash)
            VALUES ($1, $2, $3)
            RETURNING id, email, password_hash, created_at, updated_at
            """,
            uuid.UUID(user_id),
            email,
            password_hash,
        )
    except asyncpg.UniqueViolationError as exc:
        raise Conflict("User with this email already exists") from exc
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_email(email: str) -> dict | None:
    # Emails are compared exactly; uniqueness is case-sensitive.
    return await db.fetch_one(
        """
        SELECT id, email, password_hash, created_at, updated_at
        FROM users
        WHERE email = $1
        """,
        email,
    )


async def get_user_by_id(user_id: str) -> dict | None:
    key = _as_uuid(user_id)
    if key is None:
        return None
    return await db.fetch_one(
        """
        SELECT id, email, password_hash, created_at, updated_at
        FROM users
        WHERE id = $1
        """,
        key,
    )
