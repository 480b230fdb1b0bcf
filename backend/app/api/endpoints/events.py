from fastapi import APIRouter, Depends, Response, status
from typing import List

from app.core.exceptions import ResourceNotFoundError
from app.core.logging_config import logger
from app.modules.auth.dependencies import get_storage, require_action
from app.modules.auth.permissions import Action
from app.modules.storage import Storage
from app.schemas.event import EventCreate, EventResponse
from app.schemas.user import UserRecord

router = APIRouter()


@router.get("", response_model=List[EventResponse])
async def list_events(
    current_user: UserRecord = Depends(require_action(Action.READ_CONTENT)),
    storage: Storage = Depends(get_storage),
):
    return await storage.list_events()


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: int,
    current_user: UserRecord = Depends(require_action(Action.READ_CONTENT)),
    storage: Storage = Depends(get_storage),
):
    event = await storage.get_event(event_id)
    if event is None:
        raise ResourceNotFoundError("Event", event_id)
    return event


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    data: EventCreate,
    current_user: UserRecord = Depends(require_action(Action.CREATE_EVENT)),
    storage: Storage = Depends(get_storage),
):
    """Add a calendar event; end date must not precede start date"""
    event = await storage.create_event(data, created_by=current_user.id)
    logger.log_content_event("created", "event", event.id, current_user.username)
    return event


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: int,
    current_user: UserRecord = Depends(require_action(Action.DELETE_EVENT)),
    storage: Storage = Depends(get_storage),
):
    if not await storage.delete_event(event_id):
        raise ResourceNotFoundError("Event", event_id)
    logger.log_content_event("deleted", "event", event_id, current_user.username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
