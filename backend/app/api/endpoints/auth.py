from fastapi import APIRouter, Depends, Request, Response, status

from app.core.config import settings
from app.core.exceptions import (
    FormatError,
    InvalidCredentialsError,
    UsernameTakenError,
    ValidationError,
)
from app.core.logging_config import logger, set_user_id
from app.core.rate_limiter import login_rate_limit, register_rate_limit
from app.core.security import check_credentials, hash_password, sign_session_id
from app.modules.auth.dependencies import (
    get_current_user,
    get_session_id,
    get_session_store,
    get_storage,
)
from app.modules.auth.session_store import SessionStore
from app.modules.storage import Storage
from app.schemas.auth import MessageResponse, UserLogin, UserRegister
from app.schemas.user import UserRecord, UserResponse

router = APIRouter()


def to_user_response(user: UserRecord) -> UserResponse:
    """Public view of a user: everything but the password"""
    return UserResponse.model_validate(user.model_dump(exclude={"password"}))


def set_session_cookie(response: Response, sid: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=sign_session_id(sid),
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


async def start_session(
    request: Request, response: Response, sessions: SessionStore, user: UserRecord
) -> None:
    """Replace any session the client already holds with a fresh one for ``user``"""
    previous = get_session_id(request)
    if previous:
        await sessions.destroy(previous)
    sid = await sessions.create(user.id)
    set_session_cookie(response, sid)
    set_user_id(str(user.id))


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@register_rate_limit()
async def register(
    request: Request,
    response: Response,
    user_data: UserRegister,
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_session_store),
):
    """Create an account and log it in"""
    client_ip = request.client.host if request.client else "unknown"

    if user_data.role.value not in settings.SELF_REGISTRATION_ROLES:
        logger.log_auth_event(
            event="register",
            success=False,
            username=user_data.username,
            reason=f"Role {user_data.role.value} not open for self-registration",
            client_ip=client_ip,
        )
        raise ValidationError(
            "Invalid data",
            errors=[{"field": "role", "message": "This role cannot be chosen at registration"}],
        )

    if await storage.get_user_by_username(user_data.username):
        logger.log_auth_event(
            event="register",
            success=False,
            username=user_data.username,
            reason="Username already exists",
            client_ip=client_ip,
        )
        raise UsernameTakenError(user_data.username)

    user = await storage.create_user(
        user_data.model_copy(update={"password": hash_password(user_data.password)})
    )

    await start_session(request, response, sessions, user)

    logger.log_auth_event(
        event="register",
        success=True,
        username=user.username,
        client_ip=client_ip,
        user_role=user.role.value,
    )
    return to_user_response(user)


@router.post("/login", response_model=UserResponse)
@login_rate_limit()
async def login(
    request: Request,
    response: Response,
    credentials: UserLogin,
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_session_store),
):
    """Check username/password and open a session"""
    client_ip = request.client.host if request.client else "unknown"

    user = await storage.get_user_by_username(credentials.username)
    if user is None:
        logger.log_auth_event(
            event="login",
            success=False,
            username=credentials.username,
            reason="Unknown username",
            client_ip=client_ip,
        )
        raise InvalidCredentialsError()

    try:
        valid = check_credentials(user.id, credentials.password, user.password)
    except FormatError:
        logger.error(f"[Auth] Stored password for user {user.id} is malformed")
        valid = False

    if not valid:
        logger.log_auth_event(
            event="login",
            success=False,
            username=credentials.username,
            reason="Wrong password",
            client_ip=client_ip,
        )
        raise InvalidCredentialsError()

    await start_session(request, response, sessions, user)

    logger.log_auth_event(
        event="login",
        success=True,
        username=user.username,
        client_ip=client_ip,
        user_role=user.role.value,
    )
    return to_user_response(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    current_user: UserRecord = Depends(get_current_user),
    sessions: SessionStore = Depends(get_session_store),
):
    """Destroy the caller's session and clear the cookie"""
    sid = get_session_id(request)
    if sid:
        await sessions.destroy(sid)
    clear_session_cookie(response)

    logger.log_auth_event(event="logout", success=True, username=current_user.username)
    return MessageResponse(message="Logged out successfully")


@router.get("/user", response_model=UserResponse)
async def get_me(current_user: UserRecord = Depends(get_current_user)):
    """Get current user information"""
    return to_user_response(current_user)
