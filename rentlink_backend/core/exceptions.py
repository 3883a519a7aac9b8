"""
Custom exception classes for consistent error handling across all modules.

Every exception carries an HTTP ``status_code`` used by the global handler in
``main.py`` to build the ``{"success": false, "error": ...}`` envelope.
"""

from typing import Any


class RentLinkException(Exception):
    """Base exception for all RentLink related errors."""

    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(RentLinkException):
    """Raised when there is no valid session or credentials are wrong."""

    status_code = 401

    def __init__(
        self,
        message: str = "Authentication failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)


class PermissionDeniedError(RentLinkException):
    """Raised when the caller's role does not allow an action."""

    status_code = 403

    def __init__(
        self, action: str, resource_type: str, details: dict[str, Any] | None = None
    ):
        message = f"Permission denied: cannot {action} {resource_type}"
        super().__init__(message, details)
        self.action = action
        self.resource_type = resource_type


class NotFoundError(RentLinkException):
    """Raised when a resource is missing or not owned by the caller."""

    status_code = 404

    def __init__(
        self, message: str = "Resource not found", details: dict[str, Any] | None = None
    ):
        super().__init__(message, details)


class ValidationError(RentLinkException):
    """Raised when data validation fails."""

    status_code = 422

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ):
        if field:
            full_message = f"Validation error for field '{field}': {message}"
        else:
            full_message = message
        super().__init__(full_message, details)
        self.field = field
        self.value = value


class BusinessLogicError(RentLinkException):
    """Raised when business logic constraints are violated."""

    pass


class NotApprovedError(BusinessLogicError):
    """Raised when listing a property that has not been approved."""

    def __init__(
        self,
        message: str = "Property must be approved before it can be listed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)


class AlreadyInStateError(RentLinkException):
    """Raised when an entity is already in the requested state."""

    status_code = 409


class AlreadyApprovedError(AlreadyInStateError):
    def __init__(self, resource_type: str, details: dict[str, Any] | None = None):
        super().__init__(f"{resource_type} is already approved", details)


class AlreadyPendingError(AlreadyInStateError):
    def __init__(self, resource_type: str, details: dict[str, Any] | None = None):
        super().__init__(f"{resource_type} is already pending approval", details)


class InvalidLeaseTransition(RentLinkException):
    """Raised when a lease action is not allowed from its current status."""

    status_code = 409

    def __init__(
        self, current_status: str, action: str, details: dict[str, Any] | None = None
    ):
        message = f"Cannot {action.replace('_', ' ')} lease in '{current_status}' status"
        super().__init__(message, details)
        self.current_status = current_status
        self.action = action


class MissingAttachmentError(RentLinkException):
    """Raised when a required signature or document is missing."""

    pass


class MissingSignatureError(MissingAttachmentError):
    def __init__(
        self,
        message: str = "A signature is required",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)


class MissingDocumentsError(MissingAttachmentError):
    def __init__(self, missing: list[str], details: dict[str, Any] | None = None):
        message = f"Missing required documents: {', '.join(missing)}"
        super().__init__(message, details)
        self.missing = missing


class DuplicateResourceError(RentLinkException):
    """Raised when trying to create a resource that already exists."""

    status_code = 409


class DepositAlreadyExistsError(DuplicateResourceError):
    def __init__(self, lease_id: int, details: dict[str, Any] | None = None):
        super().__init__(f"Deposit already exists for lease {lease_id}", details)
        self.lease_id = lease_id


class DuplicatePendingRequestError(DuplicateResourceError):
    def __init__(
        self,
        message: str = "You already have a pending verification request",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)


class PersistenceError(RentLinkException):
    """Raised when database operations fail."""

    status_code = 500


class ExternalServiceError(RentLinkException):
    """Raised when external service integration fails."""

    status_code = 502

    def __init__(
        self,
        service_name: str,
        operation: str,
        details: dict[str, Any] | None = None,
    ):
        message = f"External service '{service_name}' failed during '{operation}'"
        super().__init__(message, details)
        self.service_name = service_name
        self.operation = operation
