"""
Password hashing helpers.
"""

from __future__ import annotations

from functools import lru_cache

import bcrypt

from core import config


class AuthSecurityError(RuntimeError):
    pass


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=config.bcrypt_rounds())).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        # checkpw compares in constant time against the stored hash.
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


@lru_cache(maxsize=1)
def _placeholder_hash() -> str:
    return hash_password("placeholder-for-unknown-accounts")


def burn_password_check(plain_password: str) -> None:
    """
    Spend the same bcrypt work as a real check so unknown emails answer as
    slowly as wrong passwords.
    """
    verify_password(plain_password, _placeholder_hash())
