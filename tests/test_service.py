from datetime import date, datetime, timedelta, timezone

import pytest

from src.todo_reminder.errors import InternalConsistencyError, NotFoundError, ValidationError
from src.todo_reminder.models import TodoStatus
from src.todo_reminder.repositories import InMemoryTodoRepository, InMemoryUserRepository
from src.todo_reminder.service import TodoService
from src.todo_reminder.utils import utcnow


class TestCreateTodo:
    def test_creates_pending_todo(self, service, user):
        todo = service.create_todo(user["id"], "Buy milk", description="2 litres")
        assert todo["status"] == TodoStatus.PENDING
        assert todo["created_at"] == todo["updated_at"]
        assert todo["user_id"] == user["id"]
        assert todo["description"] == "2 litres"
        assert todo["remind_at"] is None

    def test_ids_are_fresh(self, service, user):
        ids = [service.create_todo(user["id"], f"t{i}")["id"] for i in range(20)]
        assert len(set(ids)) == 20

    @pytest.mark.parametrize("title", ["", " ", "   ", "\t\n"])
    def test_blank_title_fails_for_valid_user(self, service, user, title):
        with pytest.raises(ValidationError):
            service.create_todo(user["id"], title)

    @pytest.mark.parametrize("title", ["", "  "])
    def test_blank_title_fails_for_unknown_user(self, service, title):
        with pytest.raises(ValidationError):
            service.create_todo("no-such-user", title)

    @pytest.mark.parametrize("title", ["x", "Buy milk", "  padded  "])
    def test_unknown_user_fails(self, service, title):
        with pytest.raises(NotFoundError, match="User not found"):
            service.create_todo("no-such-user", title)

    @pytest.mark.parametrize(
        "remind_at, expected",
        [
            ("2030-05-01T08:30:00Z", datetime(2030, 5, 1, 8, 30, tzinfo=timezone.utc)),
            ("2030-05-01", datetime(2030, 5, 1, tzinfo=timezone.utc)),
            (date(2030, 5, 1), datetime(2030, 5, 1, tzinfo=timezone.utc)),
            (datetime(2030, 5, 1, 8, 30), datetime(2030, 5, 1, 8, 30, tzinfo=timezone.utc)),
            (0, datetime(1970, 1, 1, tzinfo=timezone.utc)),
        ],
    )
    def test_remind_at_is_parsed(self, service, user, remind_at, expected):
        todo = service.create_todo(user["id"], "Remind me", remind_at=remind_at)
        assert todo["remind_at"] == expected

    def test_unparseable_remind_at_fails(self, service, user):
        with pytest.raises(ValidationError):
            service.create_todo(user["id"], "Remind me", remind_at="next tuesday")


class TestCompleteTodo:
    def test_pending_becomes_done(self, service, user):
        todo = service.create_todo(user["id"], "Task")
        done = service.complete_todo(todo["id"])
        assert done["status"] == TodoStatus.DONE
        assert done["updated_at"] > todo["updated_at"]

    def test_reminder_due_becomes_done(self, service, user, todo_repo):
        todo = service.create_todo(user["id"], "Task", remind_at=utcnow() - timedelta(seconds=1))
        service.process_reminders()
        due = todo_repo.find_by_id(todo["id"])
        assert due["status"] == TodoStatus.REMINDER_DUE

        done = service.complete_todo(todo["id"])
        assert done["status"] == TodoStatus.DONE
        assert done["updated_at"] > due["updated_at"]

    def test_completing_done_todo_is_idempotent(self, service, user):
        todo = service.create_todo(user["id"], "Task")
        first = service.complete_todo(todo["id"])
        second = service.complete_todo(todo["id"])
        assert second["status"] == TodoStatus.DONE
        assert second["updated_at"] == first["updated_at"]

    def test_unknown_id_fails(self, service):
        with pytest.raises(NotFoundError, match="Todo not found"):
            service.complete_todo("missing")

    def test_retries_when_sweep_promotes_concurrently(self, user_repo):
        class RacingRepo(InMemoryTodoRepository):
            raced = False

            def update(self, todo_id, fields, *, expected_status=None):
                if not self.raced and fields.get("status") == TodoStatus.DONE:
                    self.raced = True
                    super().update(todo_id, {"status": TodoStatus.REMINDER_DUE})
                return super().update(todo_id, fields, expected_status=expected_status)

        repo = RacingRepo()
        svc = TodoService(repo, user_repo)
        user = svc.create_user("a@example.com", "A")
        todo = svc.create_todo(user["id"], "Task")

        done = svc.complete_todo(todo["id"])
        assert repo.raced
        assert done["status"] == TodoStatus.DONE

    def test_concurrent_completion_does_not_bump_done_todo(self, user_repo):
        class RacingRepo(InMemoryTodoRepository):
            raced = False

            def update(self, todo_id, fields, *, expected_status=None):
                if not self.raced:
                    self.raced = True
                    super().update(todo_id, {"status": TodoStatus.DONE})
                return super().update(todo_id, fields, expected_status=expected_status)

        repo = RacingRepo()
        svc = TodoService(repo, user_repo)
        user = svc.create_user("a@example.com", "A")
        todo = svc.create_todo(user["id"], "Task")

        result = svc.complete_todo(todo["id"])
        stored = repo.find_by_id(todo["id"])
        assert result["status"] == TodoStatus.DONE
        assert result["updated_at"] == stored["updated_at"]

    def test_update_failing_on_existing_id_is_consistency_error(self, user_repo):
        class StuckRepo(InMemoryTodoRepository):
            def update(self, todo_id, fields, *, expected_status=None):
                return None

        svc = TodoService(StuckRepo(), user_repo)
        user = svc.create_user("a@example.com", "A")
        todo = svc.create_todo(user["id"], "Task")
        with pytest.raises(InternalConsistencyError):
            svc.complete_todo(todo["id"])

    def test_vanishing_todo_is_consistency_error(self, user_repo):
        class VanishingRepo(InMemoryTodoRepository):
            lookups = 0

            def find_by_id(self, todo_id):
                self.lookups += 1
                return super().find_by_id(todo_id) if self.lookups == 1 else None

            def update(self, todo_id, fields, *, expected_status=None):
                return None

        svc = TodoService(VanishingRepo(), user_repo)
        user = svc.create_user("a@example.com", "A")
        todo = svc.create_todo(user["id"], "Task")
        with pytest.raises(InternalConsistencyError):
            svc.complete_todo(todo["id"])


class TestGetTodosByUser:
    def test_returns_todos_in_creation_order(self, service, user):
        a = service.create_todo(user["id"], "a")
        b = service.create_todo(user["id"], "b")
        service.complete_todo(a["id"])
        assert [t["id"] for t in service.get_todos_by_user(user["id"])] == [a["id"], b["id"]]

    def test_unknown_user_gets_empty_list(self, service):
        assert service.get_todos_by_user("nobody") == []


class TestProcessReminders:
    def test_promotes_only_due_pending_todos(self, clock, user_repo):
        repo = InMemoryTodoRepository(clock=clock)
        svc = TodoService(repo, user_repo, clock=clock)
        user = svc.create_user("a@example.com", "A")

        due = svc.create_todo(user["id"], "due", remind_at=clock.now - timedelta(seconds=1))
        boundary = svc.create_todo(user["id"], "boundary", remind_at=clock.now)
        future = svc.create_todo(user["id"], "future", remind_at=clock.now + timedelta(seconds=1))
        plain = svc.create_todo(user["id"], "no reminder")
        done = svc.create_todo(user["id"], "done", remind_at=clock.now - timedelta(days=1))
        svc.complete_todo(done["id"])

        promoted = svc.process_reminders()

        assert sorted(t["id"] for t in promoted) == sorted([due["id"], boundary["id"]])
        assert repo.find_by_id(due["id"])["status"] == TodoStatus.REMINDER_DUE
        assert repo.find_by_id(boundary["id"])["status"] == TodoStatus.REMINDER_DUE
        assert repo.find_by_id(future["id"])["status"] == TodoStatus.PENDING
        assert repo.find_by_id(plain["id"])["status"] == TodoStatus.PENDING
        assert repo.find_by_id(done["id"])["status"] == TodoStatus.DONE

    def test_each_todo_promoted_once(self, service, user, todo_repo):
        todo = service.create_todo(user["id"], "Task", remind_at=utcnow() - timedelta(seconds=1))
        assert [t["id"] for t in service.process_reminders()] == [todo["id"]]
        after_first = todo_repo.find_by_id(todo["id"])

        assert service.process_reminders() == []
        assert todo_repo.find_by_id(todo["id"])["updated_at"] == after_first["updated_at"]

    def test_no_due_todos_is_fine(self, service):
        assert service.process_reminders() == []

    def test_failure_on_one_todo_does_not_stop_sweep(self, user_repo):
        class FlakyRepo(InMemoryTodoRepository):
            broken_id = None

            def update(self, todo_id, fields, *, expected_status=None):
                if todo_id == self.broken_id:
                    raise RuntimeError("boom")
                return super().update(todo_id, fields, expected_status=expected_status)

        repo = FlakyRepo()
        svc = TodoService(repo, user_repo)
        user = svc.create_user("a@example.com", "A")
        past = utcnow() - timedelta(minutes=1)
        first = svc.create_todo(user["id"], "first", remind_at=past)
        second = svc.create_todo(user["id"], "second", remind_at=past)
        third = svc.create_todo(user["id"], "third", remind_at=past)
        repo.broken_id = second["id"]

        promoted = svc.process_reminders()

        assert sorted(t["id"] for t in promoted) == sorted([first["id"], third["id"]])
        assert repo.find_by_id(second["id"])["status"] == TodoStatus.PENDING

    def test_completed_between_scan_and_update_stays_done(self, user_repo):
        class RacingRepo(InMemoryTodoRepository):
            def find_due_reminders(self, now):
                due = super().find_due_reminders(now)
                for t in due:
                    super().update(t["id"], {"status": TodoStatus.DONE})
                return due

        repo = RacingRepo()
        svc = TodoService(repo, user_repo)
        user = svc.create_user("a@example.com", "A")
        todo = svc.create_todo(user["id"], "Task", remind_at=utcnow() - timedelta(seconds=1))

        assert svc.process_reminders() == []
        assert repo.find_by_id(todo["id"])["status"] == TodoStatus.DONE


class TestUsers:
    def test_create_and_get_user(self, service):
        user = service.create_user("ada@example.com", "Ada")
        assert service.get_user(user["id"]) == user
        assert service.list_users() == [user]

    @pytest.mark.parametrize("email, name", [("", "Ada"), ("ada@example.com", ""), ("  ", "Ada")])
    def test_blank_fields_fail(self, service, email, name):
        with pytest.raises(ValidationError):
            service.create_user(email, name)

    def test_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            service.get_user("missing")


def test_reminder_lifecycle_scenario():
    svc = TodoService(InMemoryTodoRepository(), InMemoryUserRepository())
    user = svc.create_user("u@example.com", "U")
    todo = svc.create_todo(user["id"], "T", remind_at=utcnow() - timedelta(seconds=1))
    assert todo["status"] == TodoStatus.PENDING

    svc.process_reminders()
    assert svc.get_todo(todo["id"])["status"] == TodoStatus.REMINDER_DUE
    before_complete = svc.get_todo(todo["id"])

    done = svc.complete_todo(todo["id"])
    assert done["status"] == TodoStatus.DONE
    assert done["updated_at"] > before_complete["updated_at"]

    again = svc.complete_todo(todo["id"])
    assert again["status"] == TodoStatus.DONE
    assert again["updated_at"] == done["updated_at"]
