"""
Core Exceptions
================

Error taxonomy shared by the complaints, SLA and reporting modules.

Services raise these; the API layer maps each family onto one HTTP status
(see ``src.shared.api.middleware``).
"""

from typing import Any, Optional


class ApplicationException(Exception):
    """Root of the taxonomy. ``details`` is echoed in error responses."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """A business rule refused the operation."""


class RepositoryException(ApplicationException):
    """A backing store failed."""


class ValidationException(ApplicationException):
    """Caller input could not be accepted."""


class ResourceNotFoundException(ApplicationException):
    """Lookup by id found nothing."""

    def __init__(self, resource_type: str, resource_id: Optional[str] = None, details: Optional[dict] = None):
        self.resource_type = resource_type
        self.resource_id = resource_id
        target = f"{resource_type} '{resource_id}'" if resource_id else resource_type
        super().__init__(f"{target} not found", details)


class InvalidTransitionException(DomainException):
    """Requested status is not reachable from the complaint's current status."""

    def __init__(
        self,
        complaint_id: str,
        from_status: Any,
        to_status: Any,
        reason: Optional[str] = None
    ):
        self.complaint_id = complaint_id
        self.from_status = getattr(from_status, "value", from_status)
        self.to_status = getattr(to_status, "value", to_status)
        message = (
            f"Complaint {complaint_id} cannot move from "
            f"{self.from_status} to {self.to_status}"
        )
        if reason:
            message += f": {reason}"
        super().__init__(
            message,
            {
                "complaint_id": complaint_id,
                "from_status": self.from_status,
                "to_status": self.to_status,
            }
        )


class MalformedFilterException(ValidationException):
    """A caller-supplied report filter value could not be normalized."""

    def __init__(self, field: str, value: Any, reason: Optional[str] = None):
        self.field = field
        self.value = value
        message = f"Invalid value for filter '{field}': {value!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message, {"field": field, "value": str(value)})


class ConfigUnavailableException(RepositoryException):
    """The live configuration store could not be reached."""

    def __init__(self, message: str = "Configuration store unavailable", details: Optional[dict] = None):
        super().__init__(message, details)
