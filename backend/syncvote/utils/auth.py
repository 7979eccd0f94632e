from __future__ import annotations

from flask import Request

from ..errors import Unauthenticated


USER_HEADERS = ("X-SyncVote-User", "X-User-Id")


def get_user_id(request: Request) -> str | None:
    for header in USER_HEADERS:
        value = request.headers.get(header)
        if value and value.strip():
            return value.strip()

    value = request.args.get("userId")
    if value and value.strip():
        return value.strip()

    return None


def require_user_id(request: Request) -> str:
    user_id = get_user_id(request)
    if not user_id:
        raise Unauthenticated()
    return user_id
