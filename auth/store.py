"""
auth/store.py -- SQLAlchemy Core persistence layer for users.

Pattern: Repository + Data Mapper (same as todos/store.py).
UserStore is the repository; _row_to_user is the mapper.
Route and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Profile writes are keyed on the caller's own id, taken from the verified
  token, never from the request body -- one user cannot address another's row.

Cascade: delete_user() removes the user's todos and the user row in one
transaction, so no orphaned todos are left behind.

Layer rule: no imports from api/ or todos/. Import from core/ is allowed.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.engine import Engine

from auth.models import User
from core.database import todos as _todos
from core.database import users as _users

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore(create_db_engine("sqlite:///todo.db"))
        store.create_user(User(id="u1", name="alice", email="a@x.com", password_hash=hash_password("secret")))
        user = store.get_by_email("a@x.com")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> None:
        """Insert a new user.

        Raises sqlalchemy.exc.IntegrityError if the id or email already
        exists. Callers treat that as a conflict -- it also covers the race
        where two registrations for one email both pass the pre-check.
        """
        with self.engine.connect() as conn:
            conn.execute(
                _users.insert().values(
                    id=user.id,
                    name=user.name,
                    email=user.email,
                    password_hash=user.password_hash,
                    created_at=_now_iso(),
                )
            )
            conn.commit()

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def update_profile(self, user_id: str, name: str, email: str, password_hash: str | None = None) -> bool:
        """Overwrite name and email; replace the password hash only if one is given.

        COALESCE keeps the stored hash when password_hash is None, so the
        whole update is one statement.

        Returns True if a row was updated, False if user_id was not found.
        Raises sqlalchemy.exc.IntegrityError if email belongs to another user.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update()
                .where(_users.c.id == user_id)
                .values(
                    name=name,
                    email=email,
                    password_hash=func.coalesce(password_hash, _users.c.password_hash),
                )
            )
            conn.commit()
        return result.rowcount > 0

    def delete_user(self, user_id: str) -> bool:
        """Delete a user and every todo they own. Returns True if the user existed.

        Both deletes run inside engine.begin(), so either both commit or
        neither does.
        """
        with self.engine.begin() as conn:
            conn.execute(_todos.delete().where(_todos.c.user_id == user_id))
            result = conn.execute(_users.delete().where(_users.c.id == user_id))
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        password_hash=row.password_hash,
        created_at=row.created_at,
    )
