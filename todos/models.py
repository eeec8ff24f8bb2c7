"""
todos/models.py -- Domain dataclass for todo items.

Pure data container with zero logic. Ownership rules live in todos/store.py,
where every query is scoped by user_id.
"""

from dataclasses import dataclass


@dataclass
class Todo:
    """A single todo item owned by exactly one user.

    id is supplied by the client and must be unique across all users.
    priority, status and category are free-form labels (e.g. "HIGH", "TODO",
    "SHOPPING"); the API bounds their length but not their vocabulary.
    """

    id: str
    user_id: str
    title: str
    priority: str
    status: str
    category: str
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, refreshed on every write
