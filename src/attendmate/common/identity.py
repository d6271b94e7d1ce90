from __future__ import annotations

from functools import wraps

from flask import current_app, request

from ..core.exceptions import AuthenticationError

DEFAULT_IDENTITY_HEADER = "X-User-Id"


def current_user_id() -> str:
    """User id supplied by the authenticating gateway in a request header."""
    header = current_app.config.get("IDENTITY_HEADER") or DEFAULT_IDENTITY_HEADER
    user_id = (request.headers.get(header) or "").strip()
    if not user_id:
        raise AuthenticationError("Missing user identity")
    return user_id


def user_required(view):
    """Pass the caller's user id into the view as ``user_id``."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        return view(*args, user_id=current_user_id(), **kwargs)

    return wrapper
