"""
Activity-logging middleware.

Every request passes through `ActivityLoggingMiddleware.dispatch`, which picks
one of four paths:

- skip:           `/users/me` lookups (outside `/transactions`) are never recorded.
- login capture:  `/auth/login` is recorded only after the handler answered
                  200/201 with a token; the user id comes from that token.
- history view:   `/transactions` is recorded *before* the handler runs and the
                  write is awaited, so the listing already contains it.
- standard:       everything else carrying a bearer token is classified and
                  recorded after the response has been sent.

Recording runs in a response background task on the login and standard paths,
so it never adds latency. Nothing raised while resolving identity, classifying
or recording reaches the client. Errors from the downstream handlers are not
touched.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from starlette.background import BackgroundTask, BackgroundTasks
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from auth import tokens
from core.errors import ClassificationSkip

from . import classifier, service
from .schemas import TransactionType

HISTORY_PREFIX = "/transactions"
LOGIN_FRAGMENT = "/auth/login"
PROFILE_LOOKUP_FRAGMENT = "/users/me"
LOGIN_SUCCESS_STATUSES = (200, 201)

logger = logging.getLogger(__name__)


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization") or ""
    if not header.startswith("Bearer "):
        return None
    token = header.split(" ", 1)[1].strip()
    return token or None


def resolve_subject(request: Request) -> str:
    """
    Attribute the request to a user id without verifying the token signature.

    Only used for logging; authorization stays on `auth.dependencies`.
    """
    token = _bearer_token(request)
    if token is None:
        raise ClassificationSkip("no bearer token")
    if not tokens.is_valid(token):
        raise ClassificationSkip("token revoked")
    payload = tokens.decode(token)
    subject = str((payload or {}).get("sub") or "").strip()
    if not subject:
        raise ClassificationSkip("token has no subject")
    return subject


def query_snapshot(request: Request) -> dict[str, Any]:
    """
    Query parameters as recorded: a repeated key keeps every value as a list.
    """
    grouped: dict[str, list[str]] = {}
    for key, value in request.query_params.multi_items():
        grouped.setdefault(key, []).append(value)
    return {key: values[0] if len(values) == 1 else values for key, values in grouped.items()}


async def _json_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _token_from_login_body(raw: bytes) -> str | None:
    try:
        parsed = json.loads(raw)
    except ValueError:
        return None
    data = parsed.get("data") if isinstance(parsed, dict) else None
    token = data.get("token") if isinstance(data, dict) else None
    return token if isinstance(token, str) and token else None


def _add_background(response: Response, task: BackgroundTask) -> None:
    if response.background is None:
        response.background = task
        return
    tasks = BackgroundTasks()
    tasks.add_task(response.background)
    tasks.add_task(task)
    response.background = tasks


async def record_quietly(
    *,
    user_id: str,
    type: TransactionType,
    endpoint: str,
    params: str,
    description: str,
) -> None:
    try:
        await service.record(
            user_id=user_id,
            type=type,
            endpoint=endpoint,
            params=params,
            description=description,
        )
    except Exception:
        logger.exception(
            "transaction_record_failed user_id=%s type=%s endpoint=%s",
            user_id,
            type,
            endpoint,
        )


class ActivityLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        logger.debug("activity_request method=%s path=%s", request.method, path)

        is_history = path.startswith(HISTORY_PREFIX)
        if PROFILE_LOOKUP_FRAGMENT in path and not is_history:
            logger.debug("activity_skip path=%s reason=profile_lookup", path)
            return await call_next(request)

        if LOGIN_FRAGMENT in path:
            return await self._capture_login(request, call_next)

        if is_history:
            await self._record_history_view(request)
            return await call_next(request)

        task = await self._prepare_standard(request)
        response = await call_next(request)
        if task is not None:
            _add_background(response, task)
        return response

    async def _capture_login(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        try:
            body = await _json_body(request)
        except Exception:
            logger.exception("login_body_read_failed path=%s", path)
            body = {}

        response = await call_next(request)
        if response.status_code not in LOGIN_SUCCESS_STATUSES:
            return response

        # The streamed body can only be consumed once, so hand back a copy.
        raw = b"".join([chunk async for chunk in response.body_iterator])
        captured = Response(
            content=raw,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )

        try:
            token = _token_from_login_body(raw)
            payload = tokens.decode(token) if token else None
            subject = str((payload or {}).get("sub") or "").strip()
            if not subject:
                logger.debug("login_capture_skip path=%s reason=no_subject", path)
                return captured

            email = body.get("email") or "unknown"
            _add_background(
                captured,
                BackgroundTask(
                    record_quietly,
                    user_id=subject,
                    type=TransactionType.AUTH,
                    endpoint=path,
                    params=classifier.sanitize_params(request.method, query_snapshot(request), body),
                    description=f"User login: {email}",
                ),
            )
        except Exception:
            logger.exception("login_capture_failed path=%s", path)
        return captured

    async def _record_history_view(self, request: Request) -> None:
        path = request.url.path
        try:
            subject = resolve_subject(request)
            await service.record(
                user_id=subject,
                type=TransactionType.TRANSACTION,
                endpoint=path,
                params="{}",
                description="Viewed transaction history",
            )
            logger.debug("history_view_recorded user_id=%s", subject)
        except ClassificationSkip as skip:
            logger.debug("activity_skip path=%s reason=%s", path, skip)
        except Exception:
            logger.exception("history_view_record_failed path=%s", path)

    async def _prepare_standard(self, request: Request) -> BackgroundTask | None:
        path = request.url.path
        try:
            subject = resolve_subject(request)
            body = await _json_body(request) if request.method.upper() != "GET" else None
            result = classifier.classify(
                classifier.RequestShape(
                    method=request.method,
                    path=path,
                    query=query_snapshot(request),
                    body=body,
                )
            )
        except ClassificationSkip as skip:
            logger.debug("activity_skip path=%s reason=%s", path, skip)
            return None
        except Exception:
            logger.exception("activity_classify_failed path=%s", path)
            return None

        logger.debug(
            "activity_classified user_id=%s type=%s description=%s",
            subject,
            result.type,
            result.description,
        )
        return BackgroundTask(
            record_quietly,
            user_id=subject,
            type=result.type,
            endpoint=path,
            params=result.params,
            description=result.description,
        )
