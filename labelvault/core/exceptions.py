"""Typed service errors and their HTTP status mapping."""

from typing import Optional


class ServiceError(Exception):
    """Base exception for all service errors surfaced to API callers."""

    status_code = 500
    code = "SERVICE_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class Unauthorized(ServiceError):
    """Missing or unusable credentials."""

    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized", code: Optional[str] = None):
        super().__init__(message, code)


class AuthError(Unauthorized):
    """Raised when a bearer token cannot be trusted."""

    code = "INVALID_TOKEN"


class MalformedToken(AuthError):
    code = "MALFORMED_TOKEN"


class InvalidSignature(AuthError):
    code = "INVALID_SIGNATURE"


class Forbidden(ServiceError):
    """Valid principal, insufficient scope or permission."""

    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Forbidden", code: Optional[str] = None):
        super().__init__(message, code)


class NotFound(ServiceError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "Not Found", code: Optional[str] = None):
        super().__init__(message, code)


class ValidationError(ServiceError):
    """Malformed payload or a business rule violated by the request."""

    status_code = 400
    code = "VALIDATION_ERROR"


class InvalidTransition(ValidationError):
    """Release status change along an edge the lifecycle does not allow."""

    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: str):
        super().__init__(f"Invalid status transition from {from_status} to {to_status}")
        self.from_status = from_status
        self.to_status = to_status


class IncompleteSubmission(ValidationError):
    """Release is missing something required before review."""

    code = "INCOMPLETE_SUBMISSION"

    def __init__(self, step: str, message: str):
        super().__init__(message)
        self.step = step

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["step"] = self.step
        return body


class ReleaseLocked(ValidationError):
    code = "RELEASE_LOCKED"


class ReferentialIntegrityError(ValidationError):
    code = "REFERENTIAL_INTEGRITY"


class DependencyFailure(ServiceError):
    """A collaborator (storage, email, captcha) failed on the primary path."""

    status_code = 500
    code = "DEPENDENCY_FAILURE"
