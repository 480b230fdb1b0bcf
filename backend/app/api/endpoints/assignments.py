from fastapi import APIRouter, Depends, Response, status
from typing import List

from app.core.exceptions import AuthorizationError, ResourceNotFoundError
from app.core.logging_config import logger
from app.modules.auth.dependencies import get_storage, require_action
from app.modules.auth.permissions import Action, can_modify_owned
from app.modules.storage import Storage
from app.schemas.assignment import AssignmentCreate, AssignmentResponse
from app.schemas.user import UserRecord

router = APIRouter()


@router.get("", response_model=List[AssignmentResponse])
async def list_assignments(
    current_user: UserRecord = Depends(require_action(Action.READ_CONTENT)),
    storage: Storage = Depends(get_storage),
):
    return await storage.list_assignments()


@router.get("/teacher/{teacher_id}", response_model=List[AssignmentResponse])
async def list_teacher_assignments(
    teacher_id: int,
    current_user: UserRecord = Depends(require_action(Action.READ_CONTENT)),
    storage: Storage = Depends(get_storage),
):
    """Assignments set by one teacher"""
    return await storage.list_assignments_by_teacher(teacher_id)


@router.get("/{assignment_id}", response_model=AssignmentResponse)
async def get_assignment(
    assignment_id: int,
    current_user: UserRecord = Depends(require_action(Action.READ_CONTENT)),
    storage: Storage = Depends(get_storage),
):
    assignment = await storage.get_assignment(assignment_id)
    if assignment is None:
        raise ResourceNotFoundError("Assignment", assignment_id)
    return assignment


@router.post("", response_model=AssignmentResponse, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    data: AssignmentCreate,
    current_user: UserRecord = Depends(require_action(Action.CREATE_ASSIGNMENT)),
    storage: Storage = Depends(get_storage),
):
    """Set an assignment; the caller is recorded as its teacher"""
    assignment = await storage.create_assignment(data, teacher_id=current_user.id)
    logger.log_content_event("created", "assignment", assignment.id, current_user.username)
    return assignment


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assignment(
    assignment_id: int,
    current_user: UserRecord = Depends(require_action(Action.DELETE_ASSIGNMENT)),
    storage: Storage = Depends(get_storage),
):
    """
    Delete an assignment.

    Teachers may only delete assignments they set; admins may delete any.
    """
    assignment = await storage.get_assignment(assignment_id)
    if assignment is None:
        raise ResourceNotFoundError("Assignment", assignment_id)

    if not can_modify_owned(current_user.role, current_user.id, assignment.teacher_id, Action.DELETE_ASSIGNMENT):
        logger.warning(
            f"[Assignments] {current_user.username} tried to delete assignment {assignment_id} "
            f"owned by teacher {assignment.teacher_id}"
        )
        raise AuthorizationError("You can only delete your own assignments")

    if not await storage.delete_assignment(assignment_id):
        raise ResourceNotFoundError("Assignment", assignment_id)

    logger.log_content_event("deleted", "assignment", assignment_id, current_user.username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
