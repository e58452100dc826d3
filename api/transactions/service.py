"""
Activity recorder.

`record()` propagates `StorageError` so callers can decide; `list_for_user()`
degrades to an empty history because the read path must stay non-fatal.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from core.errors import StorageError

from . import repository
from .schemas import ActivityRecord, TransactionType

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_record(row: dict) -> ActivityRecord:
    return ActivityRecord(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        type=TransactionType(str(row["type"])),
        endpoint=str(row["endpoint"]),
        params=str(row["params"]),
        description=str(row["description"]),
        created_at=row["created_at"],
    )


async def record(
    *,
    user_id: str,
    type: TransactionType,
    endpoint: str,
    params: str,
    description: str,
) -> ActivityRecord:
    row = await repository.insert_transaction(
        transaction_id=str(uuid.uuid4()),
        user_id=str(user_id),
        type=TransactionType(type).value,
        endpoint=endpoint,
        params=params,
        description=description,
        created_at=_utc_now(),
    )
    activity = _to_record(row)
    logger.debug(
        "transaction_recorded id=%s user_id=%s type=%s endpoint=%s",
        activity.id,
        activity.user_id,
        activity.type,
        activity.endpoint,
    )
    return activity


async def list_for_user(user_id: str) -> list[ActivityRecord]:
    try:
        rows = await repository.list_transactions_for_user(str(user_id))
    except StorageError:
        logger.exception("transaction_list_failed user_id=%s", user_id)
        return []
    logger.debug("transaction_list user_id=%s count=%s", user_id, len(rows))
    return [_to_record(row) for row in rows]
