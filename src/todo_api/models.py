from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, TypedDict

TODOS_COLLECTION = "todos"
USERS_COLLECTION = "users"


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A Todo document as stored in the ``todos`` collection (the id lives outside the document).

    Fields:
    - userId: uid of the owner; the only authorization predicate
    - title: non-empty title
    - description: detailed description, '' when not given
    - dueDate: ISO8601 date/datetime string or None
    - completed: completion flag, False at creation
    - createdAt: UTC creation timestamp
    - updatedAt: UTC timestamp of the last write
    """

    userId: str
    title: str
    description: str
    dueDate: Optional[str]
    completed: Any
    createdAt: datetime
    updatedAt: datetime


class UserMirror(TypedDict):
    """Document written to ``users/<uid>`` at signup."""

    email: str
    name: str
