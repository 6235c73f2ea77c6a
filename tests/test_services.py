import pytest

from task_tracker.auth import AuthContext
from task_tracker.errors import Forbidden, InvalidInput, NotFound
from task_tracker.repositories import InMemoryTaskRepository, InMemoryUserRepository
from task_tracker.schemas import ProfileUpdate
from task_tracker.services import ProfileService, TaskService

ADA = AuthContext(user_id="ada")
BOB = AuthContext(user_id="bob")


@pytest.fixture()
def repo():
    return InMemoryTaskRepository()


@pytest.fixture()
def service(repo):
    return TaskService(repo)


class TestTaskService:
    def test_create_uses_caller_as_owner(self, service):
        task = service.create_task(ADA, "Write report")
        assert task["owner_id"] == "ada"
        assert task["completed"] is False

    @pytest.mark.parametrize("title", ["", "   ", "\t\n"])
    def test_blank_title_stores_nothing(self, service, repo, title):
        with pytest.raises(InvalidInput):
            service.create_task(ADA, title)
        assert repo.list_by_owner("ada") == []

    def test_lists_are_isolated(self, service):
        service.create_task(ADA, "a1")
        service.create_task(BOB, "b1")
        service.create_task(ADA, "a2")
        assert [t["title"] for t in service.list_tasks(ADA)] == ["a2", "a1"]
        assert [t["title"] for t in service.list_tasks(BOB)] == ["b1"]

    def test_toggle_twice_restores(self, service):
        task = service.create_task(ADA, "Buy milk")
        once = service.toggle_task(ADA, task["id"])
        twice = service.toggle_task(ADA, task["id"])
        assert once["completed"] is True
        assert twice["completed"] is False

    def test_foreign_task_is_forbidden_not_missing(self, service):
        task = service.create_task(ADA, "Private")
        with pytest.raises(Forbidden):
            service.toggle_task(BOB, task["id"])
        with pytest.raises(Forbidden):
            service.delete_task(BOB, task["id"])
        # still there and unchanged
        assert service.list_tasks(ADA)[0]["completed"] is False

    def test_unknown_task_is_not_found(self, service):
        with pytest.raises(NotFound):
            service.toggle_task(ADA, "missing")
        with pytest.raises(NotFound):
            service.delete_task(ADA, "missing")

    def test_everything_fails_after_delete(self, service):
        task = service.create_task(ADA, "Gone soon")
        service.delete_task(ADA, task["id"])
        with pytest.raises(NotFound):
            service.toggle_task(ADA, task["id"])
        with pytest.raises(NotFound):
            service.delete_task(ADA, task["id"])
        # another user sees NotFound too, not Forbidden
        with pytest.raises(NotFound):
            service.delete_task(BOB, task["id"])


class TestProfileService:
    @pytest.fixture()
    def users(self):
        return InMemoryUserRepository()

    def test_partial_update(self, users):
        user = users.create("Ada", "ada@example.com", "h", "s")
        ctx = AuthContext(user_id=user["id"])
        profiles = ProfileService(users)

        updated = profiles.update_profile(ctx, ProfileUpdate(name="  ", email="Lovelace@Example.com"))
        assert updated["name"] == "Ada"
        assert updated["email"] == "lovelace@example.com"

        updated = profiles.update_profile(ctx, ProfileUpdate(name="Countess"))
        assert updated["name"] == "Countess"
        assert updated["email"] == "lovelace@example.com"
        assert profiles.get_profile(ctx)["name"] == "Countess"
