"""Error taxonomy for the fitness service.

Read paths never raise for denied rows; they return nothing. Only explicit
mutations surface ``AuthorizationError``.
"""

from fastapi import status
from libs.common.error_handler import ServiceError


class FitnessError(ServiceError):
    """Base for every error raised by fitness service logic."""


class ValidationError(FitnessError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class ConflictError(FitnessError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflicting record already exists"


class AuthorizationError(FitnessError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not allowed to modify this record"


class AtomicityError(FitnessError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Operation could not be completed; no changes were saved"


class PolicyDefinitionError(RuntimeError):
    """A table policy was declared in a way that could make evaluation recurse."""


class PolicyReentryError(RuntimeError):
    """Policy evaluation re-entered a table that is already being evaluated."""
