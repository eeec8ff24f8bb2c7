"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in todos/models.py -- dataclasses own domain shape; stores and routes do the
work.

Layer rule: no imports from api/ or todos/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    id is supplied by the client at registration and must be unique.
    email is unique across all users and is the login identifier; name is
    the display name that ends up as the token's username claim.
    """

    id: str
    name: str
    email: str
    password_hash: str
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as established by the auth gate.

    Built purely from verified token claims -- no database lookup backs it,
    so a user deleted after the token was issued still has an Identity until
    the token expires. Ownership-scoped store queries return nothing for such
    a caller.
    """

    user_id: str
    username: str
