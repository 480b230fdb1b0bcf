"""
Unit Tests for the role allow-list
"""
import pytest

from app.models.user import UserRole
from app.modules.auth.permissions import (
    ALLOWED_ROLES,
    Action,
    OWNER_OR_ADMIN,
    can_modify_owned,
    is_allowed,
)

STAFF_ACTIONS = [
    Action.CREATE_ANNOUNCEMENT,
    Action.DELETE_ANNOUNCEMENT,
    Action.CREATE_ASSIGNMENT,
    Action.DELETE_ASSIGNMENT,
    Action.CREATE_MATERIAL,
    Action.DELETE_MATERIAL,
    Action.CREATE_EVENT,
    Action.DELETE_EVENT,
]


class TestAllowList:

    def test_every_action_has_an_entry(self):
        assert set(ALLOWED_ROLES) == set(Action)

    def test_entries_only_name_known_roles(self):
        for roles in ALLOWED_ROLES.values():
            assert roles <= set(UserRole)
            assert roles, "an action nobody may perform is a bug"

    @pytest.mark.parametrize("role", list(UserRole))
    def test_everyone_reads_content(self, role):
        assert is_allowed(role, Action.READ_CONTENT)

    @pytest.mark.parametrize("action", STAFF_ACTIONS)
    def test_staff_actions(self, action):
        assert is_allowed(UserRole.TEACHER, action)
        assert is_allowed(UserRole.ADMIN, action)
        assert not is_allowed(UserRole.STUDENT, action)

    def test_user_management_is_admin_only(self):
        assert is_allowed(UserRole.ADMIN, Action.MANAGE_USERS)
        assert not is_allowed(UserRole.TEACHER, Action.MANAGE_USERS)
        assert not is_allowed(UserRole.STUDENT, Action.MANAGE_USERS)


class TestOwnership:

    def test_owner_scoped_actions(self):
        assert OWNER_OR_ADMIN == {Action.DELETE_ASSIGNMENT, Action.DELETE_MATERIAL}

    @pytest.mark.parametrize("action", sorted(OWNER_OR_ADMIN))
    def test_teacher_may_modify_own(self, action):
        assert can_modify_owned(UserRole.TEACHER, 2, 2, action)

    @pytest.mark.parametrize("action", sorted(OWNER_OR_ADMIN))
    def test_teacher_may_not_modify_others(self, action):
        assert not can_modify_owned(UserRole.TEACHER, 2, 7, action)

    @pytest.mark.parametrize("action", sorted(OWNER_OR_ADMIN))
    def test_admin_bypasses_ownership(self, action):
        assert can_modify_owned(UserRole.ADMIN, 1, 7, action)

    def test_student_never_passes_even_as_owner(self):
        assert not can_modify_owned(UserRole.STUDENT, 3, 3, Action.DELETE_MATERIAL)

    def test_unscoped_action_ignores_owner(self):
        assert can_modify_owned(UserRole.TEACHER, 2, 7, Action.DELETE_EVENT)
