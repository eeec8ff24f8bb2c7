"""
api/routes/profile.py -- The caller's own account.

Routes:
  GET    /profile/   -- {id, name, email}
  PUT    /profile/   -- update name/email, and the password if one is given
  DELETE /profile/   -- delete the account and all of its todos

There is no user id in any path or body: the target row is always the
token's user_id.
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError

from api.models import MessageResponse, ProfileResponse, ProfileUpdate
from auth.dependencies import get_current_identity
from auth.models import Identity
from auth.passwords import hash_password
from auth.store import UserStore
from core.config import get_settings
from core.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger("todoapi.api")

router = APIRouter(dependencies=[Depends(get_current_identity)])

_USER_NOT_FOUND = "User Not Found"


@router.get("/profile/", response_model=ProfileResponse)
def get_profile(request: Request, identity: Identity = Depends(get_current_identity)) -> ProfileResponse:
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(identity.user_id)
    if user is None:
        raise NotFoundError(_USER_NOT_FOUND)
    return ProfileResponse(id=user.id, name=user.name, email=user.email)


@router.put("/profile/", response_model=MessageResponse)
def update_profile(
    request: Request,
    body: ProfileUpdate,
    identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    """Update the caller's name and email; re-hash the password only if supplied.

    The token's username claim is not refreshed -- a renamed user keeps the
    old name in the token until they log in again.
    """
    user_store: UserStore = request.app.state.user_store

    password_hash = None
    if body.password:
        if len(body.password) < get_settings().min_password_length:
            raise ValidationError("Password is too short", code="password_too_short")
        password_hash = hash_password(body.password)

    try:
        updated = user_store.update_profile(identity.user_id, body.name, body.email, password_hash)
    except IntegrityError as exc:
        raise ConflictError("Email already in use", code="email_exists") from exc

    if not updated:
        raise NotFoundError(_USER_NOT_FOUND)
    return MessageResponse(message="Profile Updated Successfully")


@router.delete("/profile/", response_model=MessageResponse)
def delete_profile(request: Request, identity: Identity = Depends(get_current_identity)) -> MessageResponse:
    """Delete the caller's account together with every todo they own.

    Existing tokens for the account stay cryptographically valid until they
    expire, but every store query they reach finds nothing.
    """
    user_store: UserStore = request.app.state.user_store
    if not user_store.delete_user(identity.user_id):
        raise NotFoundError(_USER_NOT_FOUND)
    logger.info("Deleted user %s", identity.user_id)
    return MessageResponse(message="User Profile Deleted Successfully")
