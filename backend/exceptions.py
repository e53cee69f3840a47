"""
CISS Workforce Exception Hierarchy
Provides structured error handling across the application.

Error codes follow the callable-function taxonomy the frontend already
understands (permission-denied, invalid-argument, ...).
"""
from typing import Optional, Dict, Any


class WorkforceException(Exception):
    """
    Base exception for all workforce errors.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "internal",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details
            }
        }


# ============================================================================
# Caller-facing errors
# ============================================================================

class UnauthenticatedError(WorkforceException):
    """Raised when an operation needs a signed-in caller"""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, "unauthenticated")


class PermissionDeniedError(WorkforceException):
    """Raised when the caller lacks a required claim"""

    status_code = 403

    def __init__(
        self,
        message: str = "Insufficient permissions",
        required_claim: Optional[str] = None
    ):
        super().__init__(message, "permission-denied")
        if required_claim:
            self.details["required_claim"] = required_claim


class InvalidArgumentError(WorkforceException):
    """Raised when a required input is missing or malformed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "invalid-argument")
        if field:
            self.details["field"] = field


class NotFoundError(WorkforceException):
    """Raised when the target resource does not exist"""

    status_code = 404

    def __init__(self, message: str, resource: Optional[str] = None):
        super().__init__(message, "not-found")
        if resource:
            self.details["resource"] = resource


class AlreadyExistsError(WorkforceException):
    """Raised when a uniqueness or bootstrap precondition is violated"""

    status_code = 409

    def __init__(self, message: str):
        super().__init__(message, "already-exists")


class InternalError(WorkforceException):
    """Raised for unexpected failures"""

    status_code = 500

    def __init__(self, message: str = "An internal error occurred"):
        super().__init__(message, "internal")


# ============================================================================
# Export Pipeline Exceptions
# ============================================================================

class NoEmployeesMatchedError(InternalError):
    """Raised when an export's filters select zero employees"""

    def __init__(self, filters: Optional[Dict[str, Any]] = None):
        super().__init__("No employees found matching the selected filters.")
        self.details["filters"] = filters or {}


# ============================================================================
# Document Verification Exceptions
# ============================================================================

class DocumentVerificationError(WorkforceException):
    """Raised when the AI classifier returns no usable structured output"""

    status_code = 502

    def __init__(
        self,
        message: str = "The AI model did not return a valid response.",
        raw_response: Optional[str] = None
    ):
        super().__init__(message, "classifier-failure")
        self.details["raw_response"] = raw_response[:500] if raw_response else None
