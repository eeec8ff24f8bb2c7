"""
todos/store.py -- SQLAlchemy-backed persistence layer for todo items.

Uses SQLAlchemy Core (not ORM) so the Todo dataclass in todos/models.py
remains the authoritative domain representation.

Pattern: Repository + Data Mapper. TodoStore is the repository; _row_to_todo
is the mapper. Route handlers never touch SQL directly.

Ownership:
  Every read and write filters on user_id in the same statement that does
  the work. There is no "SELECT then UPDATE" anywhere, so there is no window
  between the ownership check and the mutation. A todo owned by someone else
  is indistinguishable from a missing one (rowcount 0 -> False).

  create_todo() checks that the owner exists inside the INSERT itself
  (INSERT ... SELECT ... WHERE EXISTS), so a token that outlived its user
  cannot create orphaned rows.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = TodoStore(engine)
    store.create_todo(Todo(id="t1", user_id="u1", title="buy milk", priority="HIGH",
                           status="TODO", category="SHOPPING"))
    todos = store.list_for_user("u1")
    store.update_status("t1", "u1", "DONE")
"""

from datetime import datetime, timezone

from sqlalchemy import exists, literal, select
from sqlalchemy.engine import Engine

from core.database import todos as _todos
from core.database import users as _users
from todos.models import Todo

# Column order shared by create_todo()'s INSERT ... SELECT.
_INSERT_COLUMNS = ("id", "user_id", "title", "priority", "status", "category", "created_at", "updated_at")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class TodoStore:
    """Repository for Todo entities, always scoped to one owner."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def list_for_user(self, user_id: str) -> list[Todo]:
        """Return every todo owned by user_id, oldest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _todos.select().where(_todos.c.user_id == user_id).order_by(_todos.c.created_at, _todos.c.id)
            ).fetchall()
        return [_row_to_todo(r) for r in rows]

    def create_todo(self, todo: Todo) -> bool:
        """Insert a todo if its owner exists.

        Returns True if inserted, False if todo.user_id does not name an
        existing user. Raises sqlalchemy.exc.IntegrityError if todo.id is
        already taken.
        """
        now = _now_iso()
        values = (todo.id, todo.user_id, todo.title, todo.priority, todo.status, todo.category, now, now)
        owner_exists = exists().where(_users.c.id == todo.user_id)
        stmt = _todos.insert().from_select(
            list(_INSERT_COLUMNS),
            select(*[literal(v) for v in values]).where(owner_exists),
        )
        with self.engine.connect() as conn:
            result = conn.execute(stmt)
            conn.commit()
        return result.rowcount > 0

    def update_todo(self, todo_id: str, user_id: str, title: str, priority: str, status: str, category: str) -> bool:
        """Replace the editable fields of a todo owned by user_id.

        Returns True if a row was updated, False if not found or wrong owner.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _todos.update()
                .where((_todos.c.id == todo_id) & (_todos.c.user_id == user_id))
                .values(title=title, priority=priority, status=status, category=category, updated_at=_now_iso())
            )
            conn.commit()
        return result.rowcount > 0

    def update_status(self, todo_id: str, user_id: str, status: str) -> bool:
        """Set the status of a todo owned by user_id. False if not found or wrong owner."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _todos.update()
                .where((_todos.c.id == todo_id) & (_todos.c.user_id == user_id))
                .values(status=status, updated_at=_now_iso())
            )
            conn.commit()
        return result.rowcount > 0

    def delete_todo(self, todo_id: str, user_id: str) -> bool:
        """Delete a todo owned by user_id. False if not found or wrong owner."""
        with self.engine.connect() as conn:
            result = conn.execute(_todos.delete().where((_todos.c.id == todo_id) & (_todos.c.user_id == user_id)))
            conn.commit()
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_todo(row) -> Todo:
    return Todo(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        priority=row.priority,
        status=row.status,
        category=row.category,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
