"""
api/routes/auth.py -- Registration and login endpoints.

Routes:
  POST /register/   -- create an account; 200 "User created successfully"
  POST /login/      -- exchange email + password for a JWT

Both routes are public. Everything else in the API sits behind the auth gate
in auth/dependencies.py.

Security:
  Both routes are rate-limited per client IP (LOGIN_RATE_LIMIT,
  REGISTER_RATE_LIMIT) to slow down credential stuffing and account spam.
  Cache-Control: no-store on login responses so tokens are never cached.
  Passwords are hashed with bcrypt before they reach the store.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from api.limiter import limiter
from api.models import LoginRequest, LoginResponse, MessageResponse, RegisterRequest
from auth.models import User
from auth.passwords import authenticate_user, hash_password
from auth.store import UserStore
from auth.tokens import create_access_token
from core.config import get_settings
from core.errors import ConflictError, ValidationError

logger = logging.getLogger("todoapi.api")

_settings = get_settings()

router = APIRouter()

# @router.post stays outermost so the route registers the rate-limited wrapper.


@router.post("/register/", response_model=MessageResponse)
@limiter.limit(_settings.register_rate_limit)
def register(request: Request, body: RegisterRequest) -> MessageResponse:
    """Create a user account.

    Checks run in a fixed order: an existing email is reported before a
    short password. A duplicate id, or a concurrent registration that wins
    the race for the same email, surfaces as IntegrityError from the store
    and is reported the same way as a known duplicate.
    """
    user_store: UserStore = request.app.state.user_store

    if user_store.get_by_email(body.email) is not None:
        raise ConflictError("User already exists", code="user_exists")
    if len(body.password) < _settings.min_password_length:
        raise ValidationError("Password is too short", code="password_too_short")

    user = User(
        id=body.id,
        name=body.username,
        email=body.email,
        password_hash=hash_password(body.password),
    )
    try:
        user_store.create_user(user)
    except IntegrityError as exc:
        raise ConflictError("User already exists", code="user_exists") from exc

    logger.info("Registered user %s (%s)", user.name, user.id)
    return MessageResponse(message="User created successfully")


@router.post("/login/", response_model=LoginResponse)
@limiter.limit(_settings.login_rate_limit)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a signed JWT.

    Unknown email -> 400 "Invalid user"; wrong password -> 400
    "Invalid password" (raised by authenticate_user).
    """
    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, body.email, body.password)

    token = create_access_token(user.id, user.name)
    logger.info("Login: %s (%s)", user.name, user.id)

    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            jwt_token=token,
            expires_in=_settings.token_expire_seconds,
        ).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
