"""
auth/passwords.py -- Credential hashing (bcrypt, direct usage).

The cost factor is BCRYPT_ROUNDS (2^rounds iterations). gensalt() gives
every digest its own random salt.

bcrypt only accepts 72 bytes of input. The API layer rejects longer
passwords (see api/models.py) so hash_password() is never handed one.

Layer rule: no imports from api/ or todos/. Import from core/ is allowed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import bcrypt

from core.config import get_settings
from core.errors import InvalidCredentialsError

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

# bcrypt's hard input limit, in bytes.
MAX_PASSWORD_BYTES = 72


def hash_password(plain: str) -> str:
    """Return a salted bcrypt digest of the given plaintext password."""
    rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt digest.

    A malformed stored digest (or an input bcrypt refuses) is a non-match,
    never an exception.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, email: str, password: str) -> User:
    """Return the user owning email if password matches.

    Unknown email and wrong password are reported separately ("Invalid user"
    and "Invalid password"), both as 400.
    """
    user = store.get_by_email(email)
    if user is None:
        raise InvalidCredentialsError("Invalid user", code="invalid_user")
    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError("Invalid password", code="invalid_password")
    return user
