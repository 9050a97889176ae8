from __future__ import annotations

import hmac
import os

from fastapi import Request


class StaffUnauthorizedError(Exception):
    pass


def _configured_tokens() -> list[str]:
    raw_value = os.getenv("STAFF_API_TOKENS", "")
    return [token.strip() for token in raw_value.split(",") if token.strip()]


def require_staff(request: Request) -> None:
    """Bearer-token gate for ``/v1/admin`` routes.

    With no tokens configured every staff request is refused.
    """
    header = request.headers.get("Authorization") or ""
    scheme, _, provided = header.partition(" ")
    provided = provided.strip()
    if scheme.lower() != "bearer" or not provided:
        raise StaffUnauthorizedError("staff bearer token required")

    tokens = _configured_tokens()
    if not tokens:
        raise StaffUnauthorizedError("staff access is not configured")
    if not any(hmac.compare_digest(provided, token) for token in tokens):
        raise StaffUnauthorizedError("invalid staff token")
