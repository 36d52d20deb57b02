from typing import Any, Optional

from fastapi import HTTPException


class DomainError(HTTPException):
    status_code = 400
    code = "DOMAIN_ERROR"

    def __init__(self, detail: str, details: Optional[dict[str, Any]] = None):
        super().__init__(status_code=self.status_code, detail=detail)
        self.details = details or {}

    def as_dict(self) -> dict:
        return {
            "success": False,
            "error": self.detail,
            "code": self.code,
            "details": self.details,
        }


class ValidationError(DomainError):
    status_code = 400
    code = "VALIDATION_ERROR"


class VerificationGateError(DomainError):
    status_code = 403
    code = "VERIFICATION_REQUIRED"


class PermissionDeniedError(DomainError):
    status_code = 403
    code = "PERMISSION_DENIED"


class NotFoundError(DomainError):
    status_code = 404
    code = "NOT_FOUND"


class ReferentialIntegrityError(DomainError):
    status_code = 409
    code = "PROPERTY_DELETE_BLOCKED"


class DuplicateProfileError(DomainError):
    status_code = 409
    code = "DUPLICATE_PROFILE"


class PersistenceError(DomainError):
    status_code = 503
    code = "PERSISTENCE_ERROR"
