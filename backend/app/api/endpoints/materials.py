from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from pydantic import ValidationError as PydanticValidationError
from typing import List, Optional

from app.core.exceptions import (
    AuthorizationError,
    ResourceNotFoundError,
    ValidationError,
    validation_error_from_pydantic,
)
from app.core.logging_config import logger
from app.modules.auth.dependencies import (
    get_storage,
    get_upload_handler,
    require_action,
)
from app.modules.auth.permissions import Action, can_modify_owned
from app.modules.storage import Storage
from app.schemas.material import MaterialCreate, MaterialResponse
from app.schemas.user import UserRecord
from app.services.file_upload import FileUploadHandler, StoredFile

router = APIRouter()


@router.get("", response_model=List[MaterialResponse])
async def list_materials(
    current_user: UserRecord = Depends(require_action(Action.READ_CONTENT)),
    storage: Storage = Depends(get_storage),
):
    return await storage.list_materials()


@router.get("/teacher/{teacher_id}", response_model=List[MaterialResponse])
async def list_teacher_materials(
    teacher_id: int,
    current_user: UserRecord = Depends(require_action(Action.READ_CONTENT)),
    storage: Storage = Depends(get_storage),
):
    """Materials uploaded by one teacher"""
    return await storage.list_materials_by_teacher(teacher_id)


@router.get("/{material_id}", response_model=MaterialResponse)
async def get_material(
    material_id: int,
    current_user: UserRecord = Depends(require_action(Action.READ_CONTENT)),
    storage: Storage = Depends(get_storage),
):
    material = await storage.get_material(material_id)
    if material is None:
        raise ResourceNotFoundError("Material", material_id)
    return material


@router.post("", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
async def create_material(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    class_id: Optional[str] = Form(None, alias="classId"),
    category: Optional[str] = Form(None),
    file_url: Optional[str] = Form(None, alias="fileUrl"),
    file: Optional[UploadFile] = File(None),
    current_user: UserRecord = Depends(require_action(Action.CREATE_MATERIAL)),
    storage: Storage = Depends(get_storage),
    uploads: FileUploadHandler = Depends(get_upload_handler),
):
    """
    Create a material from a multipart form.

    An attached ``file`` is written first and its URL becomes fileUrl;
    otherwise the ``fileUrl`` field must link the resource. A linked
    fileUrl may not point under the upload prefix: those URLs are only
    minted for attached files. If the rest of the form is invalid, or the
    row cannot be saved, the written file is removed again.
    """
    if uploads.is_upload_url(file_url) and not (file is not None and file.filename):
        raise ValidationError(
            "Invalid data",
            errors=[{
                "field": "fileUrl",
                "message": "fileUrl may not point at an uploaded file; attach the file instead",
            }],
        )

    stored: Optional[StoredFile] = None
    if file is not None and file.filename:
        stored = await uploads.save(file)

    try:
        form = {
            "title": title,
            "description": description,
            "classId": class_id,
            "category": category,
            "fileUrl": stored.url if stored else file_url,
        }
        # wire names, so error locations match what the client sent
        data = MaterialCreate.model_validate({k: v for k, v in form.items() if v is not None})
    except PydanticValidationError as e:
        if stored:
            await uploads.discard(stored.path)
        raise validation_error_from_pydantic(e.errors()) from e

    try:
        material = await storage.create_material(data, teacher_id=current_user.id)
    except Exception:
        if stored:
            await uploads.discard(stored.path)
        raise

    logger.log_content_event(
        "created", "material", material.id, current_user.username,
        stored_file=stored.name if stored else None,
    )
    return material


@router.delete("/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_material(
    material_id: int,
    current_user: UserRecord = Depends(require_action(Action.DELETE_MATERIAL)),
    storage: Storage = Depends(get_storage),
    uploads: FileUploadHandler = Depends(get_upload_handler),
):
    """
    Delete a material and its uploaded file.

    Teachers may only delete their own materials. The row goes first;
    removing the file afterwards is best-effort, so a failed delete never
    leaves a material pointing at a missing file.
    """
    material = await storage.get_material(material_id)
    if material is None:
        raise ResourceNotFoundError("Material", material_id)

    if not can_modify_owned(current_user.role, current_user.id, material.teacher_id, Action.DELETE_MATERIAL):
        logger.warning(
            f"[Materials] {current_user.username} tried to delete material {material_id} "
            f"owned by teacher {material.teacher_id}"
        )
        raise AuthorizationError("You can only delete your own materials")

    if not await storage.delete_material(material_id):
        raise ResourceNotFoundError("Material", material_id)

    await uploads.remove_by_url(material.file_url)

    logger.log_content_event("deleted", "material", material_id, current_user.username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
