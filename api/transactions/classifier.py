"""
Request classification for the activity log.

Pure functions: the same request shape always yields the same result.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from .schemas import TransactionType

REDACTED = "[REDACTED]"
SENSITIVE_BODY_FIELDS = ("password", "passwordConfirmation", "currentPassword", "newPassword")

# Checked in order; the first matching path fragment wins.
_AUTH_DESCRIPTIONS = (
    ("/auth/login", "User login"),
    ("/auth/register", "User registration"),
    ("/auth/logout", "User logout"),
    ("/auth/profile", "Accessed user profile"),
)


@dataclass(frozen=True)
class RequestShape:
    method: str
    path: str
    query: Mapping[str, Any] = field(default_factory=dict)
    body: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class Classification:
    type: TransactionType
    description: str
    params: str


def _format_coordinate(value: Any) -> str:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    text = repr(number)
    return text[:-2] if text.endswith(".0") else text


def describe(method: str, path: str, query: Mapping[str, Any]) -> tuple[TransactionType, str]:
    for fragment, description in _AUTH_DESCRIPTIONS:
        if fragment in path:
            return TransactionType.AUTH, description

    if "/restaurants" in path:
        lat, lon, city = query.get("lat"), query.get("lon"), query.get("city")
        if lat and lon:
            return (
                TransactionType.SEARCH,
                "Searched for restaurants near coordinates "
                f"({_format_coordinate(lat)}, {_format_coordinate(lon)})",
            )
        if city:
            return TransactionType.SEARCH, f"Searched for restaurants in city: {city}"
        return TransactionType.SEARCH, "Searched for restaurants"

    return TransactionType.TRANSACTION, f"{method.upper()} request to {path}"


def redact_body(body: Mapping[str, Any]) -> dict[str, Any]:
    sanitized = dict(body)
    for key in SENSITIVE_BODY_FIELDS:
        if key in sanitized:
            sanitized[key] = REDACTED
    return sanitized


def sanitize_params(method: str, query: Mapping[str, Any], body: Mapping[str, Any] | None) -> str:
    params: dict[str, Any] = {"query": dict(query)}
    if method.upper() != "GET":
        params["body"] = redact_body(body or {})
    return json.dumps(params, default=str)


def classify(request: RequestShape) -> Classification:
    type_, description = describe(request.method, request.path, request.query)
    return Classification(
        type=type_,
        description=description,
        params=sanitize_params(request.method, request.query, request.body),
    )
