"""
Activity record persistence (raw SQL).
"""

from __future__ import annotations

import uuid
from datetime import datetime

from core import db


async def insert_transaction(
    *,
    transaction_id: str,
    user_id: str,
    type: str,
    endpoint: str,
    params: str,
    description: str,
    created_at: datetime,
) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO transactions (id, user_id, type, endpoint, params, description, created_at)
        VALUES ($1, $2, $3, $4, $5, $6, $7)
        RETURNING id, user_id, type, endpoint, params, description, created_at
        """,
        uuid.UUID(transaction_id),
        uuid.UUID(user_id),
        type,
        endpoint,
        params,
        description,
        created_at,
    )
    if row is None:
        raise RuntimeError("Failed to insert transaction.")
    return row


async def list_transactions_for_user(user_id: str) -> list[dict]:
    """
    Newest first.
    """
    return await db.fetch_all(
        """
        SELECT id, user_id, type, endpoint, params, description, created_at
        FROM transactions
        WHERE user_id = $1
        ORDER BY created_at DESC, id DESC
        """,
        uuid.UUID(user_id),
    )
