"""
auth/tokens.py -- JWT issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       sub (username), user_id, iat and exp. A single server holds the key,
       so a symmetric scheme is sufficient.

  Verification raises a distinct TokenError subclass per failure kind so
       callers (and logs) can tell a tampered token from an expired one. The
       auth gate collapses all of them into one uniform 401.

  Statelessness: there is no revocation list and no server-side session.
       Logout is the client discarding its token; a leaked token is valid
       until exp. TOKEN_EXPIRE_SECONDS bounds that window.

  SECRET_KEY: sourced from core.config.get_settings(), never a literal.

Layer rule: no imports from api/ or todos/. Import from core/ is allowed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError

from core.config import get_settings
from core.errors import AuthError


# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TokenError(AuthError):
    """Base class for every token verification failure."""

    code = "invalid_token"


class MalformedTokenError(TokenError):
    """Not a parseable JWT, or a JWT missing the identity claims."""

    code = "malformed_token"


class InvalidSignatureError(TokenError):
    """Well-formed token whose signature does not verify under SECRET_KEY."""

    code = "invalid_signature"


class ExpiredTokenError(TokenError):
    """Signature is valid but exp is past, beyond the configured leeway."""

    code = "expired_token"


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    username: str
    issued_at: datetime
    expires_at: datetime


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: str, username: str, expire_seconds: int = 0) -> str:
    """Encode a signed JWT carrying the caller's identity.

    Args:
        user_id:        The user's id, stored in the user_id claim.
        username:       Display name, stored as the JWT subject claim.
        expire_seconds: Token lifetime in seconds. If 0 (default), uses
                        Settings.token_expire_seconds.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    now = datetime.now(timezone.utc)
    payload = {
        "sub": username,
        "user_id": user_id,
        "iat": now,
        "exp": now + timedelta(seconds=duration),
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def verify_access_token(token: str) -> TokenClaims:
    """Verify a JWT and return its claims.

    Structure is checked before the signature so a garbled token is reported
    as malformed rather than as a signature failure.

    Raises:
        MalformedTokenError:   token does not parse, or claims are missing.
        InvalidSignatureError: signature (or algorithm) does not verify.
        ExpiredTokenError:     exp is in the past beyond the leeway.
    """
    try:
        jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise MalformedTokenError("Malformed token.") from exc

    try:
        payload = jwt.decode(
            token,
            _settings.secret_key,
            algorithms=[_ALGORITHM],
            options={"leeway": _settings.token_leeway_seconds},
        )
    except ExpiredSignatureError as exc:
        raise ExpiredTokenError("Token has expired.") from exc
    except JWTClaimsError as exc:
        raise MalformedTokenError(f"Invalid token claims: {exc}") from exc
    except JWTError as exc:
        raise InvalidSignatureError("Token signature verification failed.") from exc

    user_id = payload.get("user_id")
    username = payload.get("sub")
    if not isinstance(user_id, str) or not isinstance(username, str):
        raise MalformedTokenError("Token is missing identity claims.")
    if "exp" not in payload or "iat" not in payload:
        raise MalformedTokenError("Token is missing iat/exp claims.")

    return TokenClaims(
        user_id=user_id,
        username=username,
        issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
