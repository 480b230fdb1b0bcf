from fastapi import APIRouter, Depends, Response, status
from typing import List

from app.core.exceptions import ResourceNotFoundError
from app.core.logging_config import logger
from app.modules.auth.dependencies import get_storage, require_action
from app.modules.auth.permissions import Action
from app.modules.storage import Storage
from app.schemas.announcement import AnnouncementCreate, AnnouncementResponse
from app.schemas.user import UserRecord

router = APIRouter()


@router.get("", response_model=List[AnnouncementResponse])
async def list_announcements(
    current_user: UserRecord = Depends(require_action(Action.READ_CONTENT)),
    storage: Storage = Depends(get_storage),
):
    return await storage.list_announcements()


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
async def get_announcement(
    announcement_id: int,
    current_user: UserRecord = Depends(require_action(Action.READ_CONTENT)),
    storage: Storage = Depends(get_storage),
):
    announcement = await storage.get_announcement(announcement_id)
    if announcement is None:
        raise ResourceNotFoundError("Announcement", announcement_id)
    return announcement


@router.post("", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    data: AnnouncementCreate,
    current_user: UserRecord = Depends(require_action(Action.CREATE_ANNOUNCEMENT)),
    storage: Storage = Depends(get_storage),
):
    """Post an announcement; the caller is recorded as author"""
    announcement = await storage.create_announcement(data, author_id=current_user.id)
    logger.log_content_event("created", "announcement", announcement.id, current_user.username)
    return announcement


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(
    announcement_id: int,
    current_user: UserRecord = Depends(require_action(Action.DELETE_ANNOUNCEMENT)),
    storage: Storage = Depends(get_storage),
):
    if not await storage.delete_announcement(announcement_id):
        raise ResourceNotFoundError("Announcement", announcement_id)
    logger.log_content_event("deleted", "announcement", announcement_id, current_user.username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
