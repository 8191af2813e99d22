from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class TodoStatus(str, Enum):
    """Lifecycle states of a todo. DONE is terminal."""

    PENDING = "PENDING"
    REMINDER_DUE = "REMINDER_DUE"
    DONE = "DONE"


# PUBLIC_INTERFACE
class UserEntity(TypedDict):
    """
    A user as held by the in-memory user store.

    Fields:
    - id: Opaque unique identifier (UUID4 string)
    - email: Contact email, not checked for uniqueness
    - name: Display name
    - created_at: UTC creation timestamp, immutable
    """

    id: str
    email: str
    name: str
    created_at: datetime


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A todo item as held by the in-memory todo store.

    Fields:
    - id: Opaque unique identifier (UUID4 string)
    - user_id: Owning user, checked only at creation time
    - title: Non-empty title
    - description: Optional detailed description
    - status: One of TodoStatus
    - remind_at: Optional UTC reminder timestamp
    - created_at: UTC creation timestamp, immutable
    - updated_at: UTC last update timestamp, strictly increasing per update
    """

    id: str
    user_id: str
    title: str
    description: Optional[str]
    status: TodoStatus
    remind_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class NewTodo(TypedDict):
    """Input accepted by TodoRepository.create (store assigns id and timestamps)."""

    user_id: str
    title: str
    description: Optional[str]
    status: TodoStatus
    remind_at: Optional[datetime]


class NewUser(TypedDict):
    """Input accepted by UserRepository.create."""

    email: str
    name: str
