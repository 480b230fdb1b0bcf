# Authentication module

from app.modules.auth.dependencies import (
    get_storage,
    get_session_store,
    get_upload_handler,
    get_identity,
    get_current_user,
    get_current_admin,
    require_action,
)

from app.modules.auth.permissions import (
    Action,
    ALLOWED_ROLES,
    is_allowed,
    can_modify_owned,
)

from app.modules.auth.session_store import (
    SessionStore,
    MemorySessionStore,
    DatabaseSessionStore,
    build_session_store,
)

__all__ = [
    # Request dependencies
    "get_storage",
    "get_session_store",
    "get_upload_handler",
    "get_identity",
    "get_current_user",
    "get_current_admin",
    "require_action",
    # Role table
    "Action",
    "ALLOWED_ROLES",
    "is_allowed",
    "can_modify_owned",
    # Sessions
    "SessionStore",
    "MemorySessionStore",
    "DatabaseSessionStore",
    "build_session_store",
]
