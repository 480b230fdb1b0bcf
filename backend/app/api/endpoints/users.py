"""
User administration (admin only)
"""
from fastapi import APIRouter, Depends, status
from typing import List

from app.api.endpoints.auth import to_user_response
from app.core.exceptions import ResourceNotFoundError, SelfDeletionError
from app.core.logging_config import logger
from app.core.security import hash_password
from app.modules.auth.dependencies import get_current_admin, get_storage
from app.modules.storage import Storage
from app.schemas.auth import MessageResponse
from app.schemas.user import UserCreate, UserRecord, UserResponse, UserUpdate

router = APIRouter()


@router.get("", response_model=List[UserResponse])
async def list_users(
    current_user: UserRecord = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    return [to_user_response(user) for user in await storage.list_users()]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    current_user: UserRecord = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    user = await storage.get_user(user_id)
    if user is None:
        raise ResourceNotFoundError("User", user_id)
    return to_user_response(user)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    current_user: UserRecord = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    """Create an account with any role"""
    user = await storage.create_user(
        data.model_copy(update={"password": hash_password(data.password)})
    )
    logger.info(f"[Users] {current_user.username} created user {user.id} ({user.role.value})")
    return to_user_response(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    data: UserUpdate,
    current_user: UserRecord = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    """
    Change username, name, role or password.

    Only the fields sent are touched. A new password is hashed before it
    is stored, which also retires the plaintext password of a demo account.
    """
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "password" in changes:
        changes["password"] = hash_password(changes["password"])

    if changes:
        user = await storage.update_user(user_id, changes)
    else:
        user = await storage.get_user(user_id)
    if user is None:
        raise ResourceNotFoundError("User", user_id)

    logger.info(f"[Users] {current_user.username} updated user {user_id}: {sorted(changes)}")
    return to_user_response(user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    current_user: UserRecord = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    if user_id == current_user.id:
        raise SelfDeletionError()

    if not await storage.delete_user(user_id):
        raise ResourceNotFoundError("User", user_id)

    logger.info(f"[Users] {current_user.username} deleted user {user_id}")
    return MessageResponse(message="User deleted successfully")
