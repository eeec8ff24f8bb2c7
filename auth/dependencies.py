"""
auth/dependencies.py -- FastAPI Depends() helper that gates protected routes.

get_current_identity() is the single auth gate. Every route that reads or
mutates per-user data depends on it (router-level dependency in
api/routes/todos.py and api/routes/profile.py).

Contract:
  - Authorization header missing, not "Bearer <token>", or token empty -> 401
  - Token present but verify_access_token() raises any TokenError       -> 401
  - Token valid -> Identity(user_id, username) on request.state and returned

Every rejection carries the same message ("Invalid JWT Token") so clients
and handlers never need to branch on why. The specific TokenError kind is
logged at debug level only.

Ownership is NOT checked here -- each store query filters by the identity's
user_id.

Layer rule: no imports from api/ or todos/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.models import Identity
from auth.tokens import TokenError, verify_access_token
from core.errors import AuthError

logger = logging.getLogger("todoapi.auth")

INVALID_TOKEN_MESSAGE = "Invalid JWT Token"


def extract_bearer_token(auth_header: str | None) -> str | None:
    """Return the token from an "Authorization: Bearer <token>" value, or None.

    The scheme is matched case-insensitively. Anything other than exactly a
    scheme and a non-empty token is treated as absent.
    """
    if not auth_header:
        return None
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def get_current_identity(request: Request) -> Identity:
    """Require a valid bearer token. Raises AuthError (HTTP 401) otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: Identity = Depends(get_current_identity)): ...
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        logger.debug("Rejected %s %s: no bearer token", request.method, request.url.path)
        raise AuthError(INVALID_TOKEN_MESSAGE, code="invalid_token")

    try:
        claims = verify_access_token(token)
    except TokenError as exc:
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.code)
        raise AuthError(INVALID_TOKEN_MESSAGE, code="invalid_token") from exc

    identity = Identity(user_id=claims.user_id, username=claims.username)
    request.state.identity = identity
    return identity
