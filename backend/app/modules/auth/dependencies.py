from fastapi import Depends, Request
from typing import Callable, Optional

from app.core.config import settings
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.logging_config import set_user_id
from app.core.security import unsign_session_id
from app.modules.auth.permissions import Action, is_allowed
from app.modules.auth.session_store import SessionStore
from app.modules.storage import Storage
from app.schemas.user import UserRecord
from app.services.file_upload import FileUploadHandler


# ==================== Application services ====================

def get_storage(request: Request) -> Storage:
    """Storage backend chosen at startup"""
    return request.app.state.storage


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_upload_handler(request: Request) -> FileUploadHandler:
    return request.app.state.upload_handler


# ==================== Identity ====================

def get_session_id(request: Request) -> Optional[str]:
    """Session id from a correctly signed cookie, else None"""
    return unsign_session_id(request.cookies.get(settings.SESSION_COOKIE_NAME))


async def get_identity(
    request: Request,
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_session_store),
) -> Optional[UserRecord]:
    """
    Resolve the session cookie to the caller's current user record.

    The record is re-read from storage on every request so role or profile
    edits made by an admin apply to sessions that are already open. Returns
    None when there is no valid session.
    """
    sid = get_session_id(request)
    if not sid:
        return None

    user_id = await sessions.get(sid)
    if user_id is None:
        return None

    user = await storage.get_user(user_id)
    if user is None:
        # account deleted while logged in
        await sessions.destroy(sid)
        return None

    set_user_id(str(user.id))
    return user


async def get_current_user(
    identity: Optional[UserRecord] = Depends(get_identity)
) -> UserRecord:
    """Get current authenticated user"""
    if identity is None:
        raise AuthenticationError()
    return identity


def require_action(action: Action) -> Callable:
    """
    Dependency factory: authenticated caller whose role may perform ``action``.

    Usage:
        @router.post("")
        async def create(user: UserRecord = Depends(require_action(Action.CREATE_EVENT))):
            ...
    """
    async def checker(current_user: UserRecord = Depends(get_current_user)) -> UserRecord:
        if not is_allowed(current_user.role, action):
            raise AuthorizationError()
        return current_user

    return checker


async def get_current_admin(
    current_user: UserRecord = Depends(require_action(Action.MANAGE_USERS))
) -> UserRecord:
    """Get current admin user"""
    return current_user
