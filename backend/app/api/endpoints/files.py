"""
Serves uploaded material files back to clients.

Only names directly inside UPLOAD_DIR resolve; anything else is a 404.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from typing import Optional

from app.core.config import settings
from app.core.exceptions import AuthenticationError, AuthorizationError, UploadedFileNotFoundError
from app.modules.auth.dependencies import get_identity, get_upload_handler
from app.modules.auth.permissions import Action, is_allowed
from app.schemas.user import UserRecord
from app.services.file_upload import FileUploadHandler

router = APIRouter()


@router.get(settings.UPLOAD_URL_PREFIX.rstrip("/") + "/{name}", include_in_schema=False)
async def get_uploaded_file(
    name: str,
    identity: Optional[UserRecord] = Depends(get_identity),
    uploads: FileUploadHandler = Depends(get_upload_handler),
):
    if not settings.SERVE_UPLOADS_PUBLIC:
        if identity is None:
            raise AuthenticationError()
        if not is_allowed(identity.role, Action.READ_UPLOADS):
            raise AuthorizationError()

    path = uploads.resolve(name)
    if not path.is_file():
        raise UploadedFileNotFoundError(name)
    return FileResponse(path)
