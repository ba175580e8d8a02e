"""
Domain errors raised by the service layer.

Every error carries the HTTP status code the endpoints translate it
to.  The classes derive from ``ValueError`` so callers that only care
about "the operation was refused" can keep catching that.
"""

from fastapi import status


class ServiceError(ValueError):
    """Base class for refusals raised by services."""

    status_code: int = status.HTTP_400_BAD_REQUEST


class ValidationFailed(ServiceError):
    """Input passed schema validation but is unusable for the operation."""


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class InvalidStateError(ServiceError):
    """The record's lifecycle state does not allow the operation."""


class InvalidTargetError(ServiceError):
    """A rating names someone other than the swap counterpart."""


class ConflictError(ServiceError):
    """A uniqueness rule would be violated."""
