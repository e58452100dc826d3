"""
Bearer token issuing, verification and revocation.

`verify()` is the only function that may back an authorization decision.
`decode()` skips signature and expiry checks and exists for request
attribution in the activity log.
"""

from __future__ import annotations

import threading
import time
import uuid
from typing import Any

import jwt

from core import config


class TokenError(RuntimeError):
    pass


def now_epoch_s() -> int:
    return int(time.time())


class RevocationSet:
    """
    Process-wide set of logged-out tokens, safe for concurrent use.

    Entries map the opaque token string to its `exp` claim (or None when the
    token carried none) so tokens past their natural expiry can be dropped.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, int | None] = {}

    def add(self, token: str, *, expires_at: int | None = None) -> None:
        with self._lock:
            self._entries[token] = expires_at

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def prune_expired(self, *, now: int | None = None) -> int:
        cutoff = now_epoch_s() if now is None else now
        with self._lock:
            expired = [t for t, exp in self._entries.items() if exp is not None and exp <= cutoff]
            for token in expired:
                del self._entries[token]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


revocations = RevocationSet()


def issue(*, subject: str, email: str) -> str:
    issued_at = now_epoch_s()
    expires_at = issued_at + (config.jwt_expire_minutes() * 60)

    payload = {
        "sub": str(subject),
        "email": email,
        "iat": issued_at,
        "exp": expires_at,
        # Unique per token so a re-login never reproduces a revoked token.
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, config.jwt_secret(), algorithm=config.jwt_algorithm())


def verify(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise TokenError("Access token is empty.")

    try:
        return jwt.decode(raw, config.jwt_secret(), algorithms=[config.jwt_algorithm()])
    except jwt.InvalidTokenError as exc:
        raise TokenError("Invalid access token.") from exc


def decode(token: str) -> dict[str, Any] | None:
    raw = (token or "").strip()
    if not raw:
        return None
    try:
        payload = jwt.decode(raw, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None
    return payload if isinstance(payload, dict) else None


def revoke(token: str) -> None:
    payload = decode(token) or {}
    exp = payload.get("exp")
    revocations.add(token, expires_at=exp if isinstance(exp, int) else None)
    # Expired tokens fail verify() anyway, so their entries carry no information.
    revocations.prune_expired()


def is_valid(token: str) -> bool:
    return token not in revocations
