"""
Domain orchestration for todos and reminders.

TodoService owns input validation, the user-existence check on creation, the
idempotent completion transition and the reminder sweep. It is the only
component the HTTP layer and the scheduler talk to.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from .errors import InternalConsistencyError, NotFoundError, ValidationError
from .models import TodoEntity, TodoStatus, UserEntity
from .repositories import TodoRepository, UserRepository
from .utils import TimestampInput, ensure_utc, parse_timestamp, utcnow

logger = logging.getLogger(__name__)

# A todo's status can change at most twice (PENDING -> REMINDER_DUE -> DONE),
# so completion needs at most three compare-and-set attempts.
_COMPLETE_ATTEMPTS = 3


# PUBLIC_INTERFACE
class TodoService:
    """Service-level API over the todo and user stores."""

    def __init__(
        self,
        todo_repo: TodoRepository,
        user_repo: UserRepository,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._todos = todo_repo
        self._users = user_repo
        self._clock = clock or utcnow

    # Users

    def create_user(self, email: str, name: str) -> UserEntity:
        """Create a user. Both fields must be non-blank."""
        if not email or not email.strip() or not name or not name.strip():
            raise ValidationError("Email and name are required")
        return self._users.create({"email": email, "name": name})

    def get_user(self, user_id: str) -> UserEntity:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def list_users(self) -> List[UserEntity]:
        return self._users.find_all()

    # Todos

    def create_todo(
        self,
        user_id: str,
        title: str,
        description: Optional[str] = None,
        remind_at: Optional[TimestampInput] = None,
    ) -> TodoEntity:
        """
        Create a PENDING todo for an existing user.

        Raises:
            ValidationError: title is empty/whitespace or remind_at is not date-like.
            NotFoundError: user_id does not resolve.
        """
        if not title or not title.strip():
            raise ValidationError("Title must be a non-empty string")

        try:
            parsed_remind_at = parse_timestamp(remind_at)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        if self._users.find_by_id(user_id) is None:
            raise NotFoundError("User not found")

        return self._todos.create(
            {
                "user_id": user_id,
                "title": title,
                "description": description,
                "status": TodoStatus.PENDING,
                "remind_at": parsed_remind_at,
            }
        )

    def get_todo(self, todo_id: str) -> TodoEntity:
        todo = self._todos.find_by_id(todo_id)
        if todo is None:
            raise NotFoundError("Todo not found")
        return todo

    def complete_todo(self, todo_id: str) -> TodoEntity:
        """
        Mark a todo DONE. Completing a DONE todo returns it unchanged.

        The transition is applied only if the status is still the one just
        read, so a concurrent sweep or completion cannot bump updated_at on a
        todo that is already DONE.
        """
        todo = self._todos.find_by_id(todo_id)
        if todo is None:
            raise NotFoundError("Todo not found")

        for _ in range(_COMPLETE_ATTEMPTS):
            if todo["status"] == TodoStatus.DONE:
                return todo

            updated = self._todos.update(
                todo_id, {"status": TodoStatus.DONE}, expected_status=todo["status"]
            )
            if updated is not None:
                return updated

            current = self._todos.find_by_id(todo_id)
            if current is None:
                raise InternalConsistencyError(f"Todo {todo_id} disappeared during update")
            logger.debug(
                "Todo %s changed from %s to %s during completion; retrying",
                todo_id, todo["status"].value, current["status"].value,
            )
            todo = current

        raise InternalConsistencyError(f"Todo {todo_id} could not be completed")

    def get_todos_by_user(self, user_id: str) -> List[TodoEntity]:
        return self._todos.find_by_user_id(user_id)

    # Reminders

    def process_reminders(self) -> List[TodoEntity]:
        """
        Promote every due PENDING todo to REMINDER_DUE.

        The clock is read once; a failure on one todo is logged and the sweep
        moves on. Returns the todos that were promoted by this sweep.
        """
        now = ensure_utc(self._clock())
        due = self._todos.find_due_reminders(now)
        promoted: List[TodoEntity] = []

        for todo in due:
            try:
                updated = self._todos.update(
                    todo["id"],
                    {"status": TodoStatus.REMINDER_DUE},
                    expected_status=TodoStatus.PENDING,
                )
            except Exception:
                logger.exception("Failed to promote reminder for todo %s", todo["id"])
                continue

            if updated is None:
                logger.debug("Todo %s left PENDING before it could be promoted", todo["id"])
                continue
            promoted.append(updated)

        if promoted:
            logger.info("Promoted %d due reminder(s)", len(promoted))
        return promoted
