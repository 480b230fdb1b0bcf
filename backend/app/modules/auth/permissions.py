"""
Role allow-list per operation.

Every guarded route names an Action; the roles allowed to perform it are
listed once here. The table must cover every Action: a missing entry fails
at import instead of silently denying (or allowing) at request time.
"""
import enum
from typing import Dict, FrozenSet

from app.models.user import UserRole


class Action(str, enum.Enum):
    READ_CONTENT = "read_content"
    CREATE_ANNOUNCEMENT = "create_announcement"
    DELETE_ANNOUNCEMENT = "delete_announcement"
    CREATE_ASSIGNMENT = "create_assignment"
    DELETE_ASSIGNMENT = "delete_assignment"
    CREATE_MATERIAL = "create_material"
    DELETE_MATERIAL = "delete_material"
    CREATE_EVENT = "create_event"
    DELETE_EVENT = "delete_event"
    MANAGE_USERS = "manage_users"
    READ_UPLOADS = "read_uploads"


ALL_ROLES: FrozenSet[UserRole] = frozenset(UserRole)
STAFF_ROLES: FrozenSet[UserRole] = frozenset({UserRole.TEACHER, UserRole.ADMIN})
ADMIN_ONLY: FrozenSet[UserRole] = frozenset({UserRole.ADMIN})

ALLOWED_ROLES: Dict[Action, FrozenSet[UserRole]] = {
    Action.READ_CONTENT: ALL_ROLES,
    Action.CREATE_ANNOUNCEMENT: STAFF_ROLES,
    Action.DELETE_ANNOUNCEMENT: STAFF_ROLES,
    Action.CREATE_ASSIGNMENT: STAFF_ROLES,
    Action.DELETE_ASSIGNMENT: STAFF_ROLES,
    Action.CREATE_MATERIAL: STAFF_ROLES,
    Action.DELETE_MATERIAL: STAFF_ROLES,
    Action.CREATE_EVENT: STAFF_ROLES,
    Action.DELETE_EVENT: STAFF_ROLES,
    Action.MANAGE_USERS: ADMIN_ONLY,
    Action.READ_UPLOADS: ALL_ROLES,
}

# Ownership is checked on top of the role gate for these
OWNER_OR_ADMIN: FrozenSet[Action] = frozenset({
    Action.DELETE_ASSIGNMENT,
    Action.DELETE_MATERIAL,
})


def _check_table() -> None:
    missing = set(Action) - set(ALLOWED_ROLES)
    if missing:
        raise RuntimeError(f"No role allow-list for actions: {sorted(a.value for a in missing)}")


_check_table()


def is_allowed(role: UserRole, action: Action) -> bool:
    return role in ALLOWED_ROLES[action]


def can_modify_owned(role: UserRole, user_id: int, owner_id: int, action: Action) -> bool:
    """Role gate plus, for owner-scoped actions, ownership (admins bypass)"""
    if not is_allowed(role, action):
        return False
    if action not in OWNER_OR_ADMIN or role == UserRole.ADMIN:
        return True
    return user_id == owner_id
