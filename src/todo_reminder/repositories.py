from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from threading import RLock
from typing import Any, Callable, List, Mapping, Optional

from .models import NewTodo, NewUser, TodoEntity, TodoStatus, UserEntity
from .utils import CLOCK_TICK, clone, ensure_utc, utcnow

logger = logging.getLogger(__name__)

# Fields a caller may change through TodoRepository.update
MUTABLE_TODO_FIELDS = frozenset({"title", "description", "status", "remind_at", "updated_at"})
IMMUTABLE_TODO_FIELDS = frozenset({"id", "user_id", "created_at"})


# PUBLIC_INTERFACE
class TodoRepository(ABC):
    """
    Abstract contract for todo storage.

    Every entity passed in or returned is a deep copy; implementations must be
    safe under concurrent calls from request handlers and the reminder sweep.
    """

    @abstractmethod
    def create(self, data: NewTodo) -> TodoEntity:
        """Store a new todo with a fresh id and created_at == updated_at == now."""

    @abstractmethod
    def update(
        self,
        todo_id: str,
        fields: Mapping[str, Any],
        *,
        expected_status: Optional[TodoStatus] = None,
    ) -> Optional[TodoEntity]:
        """
        Merge the provided mutable fields into an existing todo.

        Returns the updated entity, or None if no todo matched todo_id (and
        expected_status, when given).
        """

    @abstractmethod
    def find_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        """Return a todo by id, or None if not found."""

    @abstractmethod
    def find_by_user_id(self, user_id: str) -> List[TodoEntity]:
        """Return all todos of a user in insertion order, any status."""

    @abstractmethod
    def find_due_reminders(self, now: datetime) -> List[TodoEntity]:
        """Return PENDING todos whose remind_at is set and <= now."""


# PUBLIC_INTERFACE
class UserRepository(ABC):
    """Abstract contract for user storage, same copy isolation as TodoRepository."""

    @abstractmethod
    def create(self, data: NewUser) -> UserEntity:
        """Store a new user with a fresh id and created_at == now."""

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[UserEntity]:
        """Return a user by id, or None if not found."""

    @abstractmethod
    def find_all(self) -> List[UserEntity]:
        """Return all users in insertion order."""


class InMemoryTodoRepository(TodoRepository):
    """
    Thread-safe in-memory todo store.

    All reads and writes go through a single re-entrant lock, and nothing
    outside the lock ever holds a reference to a stored dict.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._lock = RLock()
        self._items: dict[str, TodoEntity] = {}
        self._clock = clock or utcnow

    def _now(self) -> datetime:
        return ensure_utc(self._clock())

    def create(self, data: NewTodo) -> TodoEntity:
        incoming = clone(data)
        remind_at = incoming.get("remind_at")
        now = self._now()
        entity: TodoEntity = {
            "id": str(uuid.uuid4()),
            "user_id": incoming["user_id"],
            "title": incoming["title"],
            "description": incoming.get("description"),
            "status": TodoStatus(incoming.get("status", TodoStatus.PENDING)),
            "remind_at": ensure_utc(remind_at) if remind_at is not None else None,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
            return clone(entity)

    def update(
        self,
        todo_id: str,
        fields: Mapping[str, Any],
        *,
        expected_status: Optional[TodoStatus] = None,
    ) -> Optional[TodoEntity]:
        changes = clone(dict(fields))
        for key in set(changes) - MUTABLE_TODO_FIELDS:
            if key in IMMUTABLE_TODO_FIELDS:
                logger.debug("Ignoring immutable field %r in update of todo %s", key, todo_id)
            else:
                logger.warning("Ignoring unknown field %r in update of todo %s", key, todo_id)
            changes.pop(key)

        supplied_updated_at = changes.pop("updated_at", None)
        if "status" in changes:
            changes["status"] = TodoStatus(changes["status"])
        if changes.get("remind_at") is not None:
            changes["remind_at"] = ensure_utc(changes["remind_at"])

        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                return None
            if expected_status is not None and existing["status"] != TodoStatus(expected_status):
                return None

            candidate = ensure_utc(supplied_updated_at) if supplied_updated_at is not None else self._now()
            # Strictly increasing regardless of clock resolution or caller-supplied values
            updated_at = max(candidate, existing["updated_at"] + CLOCK_TICK)

            updated = existing.copy()
            updated.update(changes)  # type: ignore[typeddict-item]
            updated["updated_at"] = updated_at

            self._items[todo_id] = updated
            return clone(updated)

    def find_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        with self._lock:
            item = self._items.get(todo_id)
            return None if item is None else clone(item)

    def find_by_user_id(self, user_id: str) -> List[TodoEntity]:
        with self._lock:
            return [clone(t) for t in self._items.values() if t["user_id"] == user_id]

    def find_due_reminders(self, now: datetime) -> List[TodoEntity]:
        cutoff = ensure_utc(now)
        with self._lock:
            return [
                clone(t)
                for t in self._items.values()
                if t["status"] == TodoStatus.PENDING
                and t["remind_at"] is not None
                and t["remind_at"] <= cutoff
            ]


class InMemoryUserRepository(UserRepository):
    """Thread-safe in-memory user store."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._lock = RLock()
        self._items: dict[str, UserEntity] = {}
        self._clock = clock or utcnow

    def create(self, data: NewUser) -> UserEntity:
        incoming = clone(data)
        entity: UserEntity = {
            "id": str(uuid.uuid4()),
            "email": incoming["email"],
            "name": incoming["name"],
            "created_at": ensure_utc(self._clock()),
        }
        with self._lock:
            self._items[entity["id"]] = entity
            return clone(entity)

    def find_by_id(self, user_id: str) -> Optional[UserEntity]:
        with self._lock:
            item = self._items.get(user_id)
            return None if item is None else clone(item)

    def find_all(self) -> List[UserEntity]:
        with self._lock:
            return [clone(u) for u in self._items.values()]
