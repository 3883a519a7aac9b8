"""Core infrastructure for the RentLink backend."""

from .exceptions import (
    AlreadyApprovedError,
    AlreadyInStateError,
    AlreadyPendingError,
    AuthenticationError,
    BusinessLogicError,
    DepositAlreadyExistsError,
    DuplicatePendingRequestError,
    DuplicateResourceError,
    ExternalServiceError,
    InvalidLeaseTransition,
    MissingAttachmentError,
    MissingDocumentsError,
    MissingSignatureError,
    NotApprovedError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    RentLinkException,
    ValidationError,
)

__all__ = [
    "RentLinkException",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "ValidationError",
    "BusinessLogicError",
    "NotApprovedError",
    "AlreadyInStateError",
    "AlreadyApprovedError",
    "AlreadyPendingError",
    "InvalidLeaseTransition",
    "MissingAttachmentError",
    "MissingSignatureError",
    "MissingDocumentsError",
    "DuplicateResourceError",
    "DepositAlreadyExistsError",
    "DuplicatePendingRequestError",
    "PersistenceError",
    "ExternalServiceError",
]
