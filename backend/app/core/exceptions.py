"""
Custom Exceptions for the School Noticeboard
============================================

Every error the API reports on purpose derives from NoticeboardError. The
handlers registered in app.main turn them into JSON bodies that always carry
a human-readable ``message``; validation errors also list the offending
fields under ``errors``.

Usage:
    from app.core.exceptions import ResourceNotFoundError, AuthorizationError

    if not material:
        raise ResourceNotFoundError("Material", material_id)

    if identity.role not in allowed:
        raise AuthorizationError("Unauthorized role")
"""

from typing import Optional, Any, Dict, List


class NoticeboardError(Exception):
    """Base exception for all noticeboard errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "message": self.message,
            "code": self.code,
        }
        if self.details:
            body["details"] = self.details
        return body


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(NoticeboardError):
    """No session, or the session no longer maps to a user"""

    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, code="UNAUTHENTICATED")


class InvalidCredentialsError(AuthenticationError):
    """Username/password pair rejected at login"""

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)
        self.code = "INVALID_CREDENTIALS"


class AuthorizationError(NoticeboardError):
    """Caller's role (or ownership) does not permit the action"""

    status_code = 403

    def __init__(self, message: str = "Unauthorized role"):
        super().__init__(message, code="FORBIDDEN")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(NoticeboardError):
    """Entity id absent"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any = None):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class UploadedFileNotFoundError(ResourceNotFoundError):
    """Requested upload does not exist inside the upload directory"""

    def __init__(self, name: str):
        super().__init__("File", name)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(NoticeboardError):
    """Payload failed schema or business-rule checks"""

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid data",
        errors: Optional[List[Dict[str, Any]]] = None,
        field: Optional[str] = None
    ):
        super().__init__(message, code="VALIDATION_ERROR")
        self.errors = list(errors or [])
        if field and not self.errors:
            self.errors.append({"field": field, "message": message})

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class SelfDeletionError(ValidationError):
    """An admin tried to delete their own account"""

    def __init__(self):
        super().__init__("Cannot delete your own account", field="id")
        self.code = "SELF_DELETION"


class InvalidFileTypeError(ValidationError):
    """File type not allowed"""

    def __init__(self, file_type: str, allowed_types: list):
        super().__init__(
            f"File type '{file_type}' not allowed. Allowed: {', '.join(allowed_types)}",
            field="file"
        )
        self.code = "INVALID_FILE_TYPE"
        self.details = {"file_type": file_type, "allowed_types": allowed_types}


class FileTooLargeError(ValidationError):
    """Upload exceeded MAX_UPLOAD_SIZE"""

    def __init__(self, max_size: int):
        super().__init__(f"File exceeds the maximum size of {max_size} bytes", field="file")
        self.code = "FILE_TOO_LARGE"
        self.details = {"max_size": max_size}


# ============================================
# Conflict Errors (409-type)
# ============================================

class ConflictError(NoticeboardError):
    """Uniqueness constraint would be violated"""

    status_code = 409

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="CONFLICT", details=details)


class UsernameTakenError(ConflictError):
    def __init__(self, username: str):
        super().__init__("Username already exists", field="username")
        self.details["username"] = username


# ============================================
# Storage Errors
# ============================================

class StorageError(NoticeboardError):
    """File write/delete failed"""

    status_code = 500

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, code="STORAGE_ERROR")
        if path:
            self.details["path"] = path


# ============================================
# Credential Store Errors
# ============================================

class CredentialError(NoticeboardError):
    """Base for password hashing/verification failures"""


class HashingError(CredentialError):
    """Key derivation failed"""

    def __init__(self, message: str = "Password hashing failed"):
        super().__init__(message, code="HASHING_FAILED")


class FormatError(CredentialError):
    """Stored password lacks the hash.salt structure"""

    def __init__(self, message: str = "Invalid stored password format"):
        super().__init__(message, code="INVALID_PASSWORD_FORMAT")


# ============================================
# Helper function for API responses
# ============================================

def validation_error_from_pydantic(errors: List[Dict[str, Any]]) -> ValidationError:
    """Build a ValidationError from pydantic's ``errors()`` output.

    Location prefixes added by FastAPI (``body``, ``query``, ``form``...) are
    dropped so ``field`` names the payload key the client sent.
    """
    items = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        items.append({
            "field": ".".join(loc),
            "message": message,
            "type": err.get("type"),
        })
    return ValidationError("Invalid data", errors=items)
