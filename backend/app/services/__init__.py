from app.services.file_upload import FileUploadHandler, StoredFile, build_upload_handler

__all__ = [
    "FileUploadHandler",
    "StoredFile",
    "build_upload_handler",
]
