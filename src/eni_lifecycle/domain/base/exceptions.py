"""Domain exception hierarchy for network interface reconciliation."""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """Classification of a provider failure."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    TRANSIENT = "transient"
    FATAL = "fatal"


class ConflictReason(str, Enum):
    """Why the provider refused a mutation on an existing entity."""

    PRIMARY_DETACH_FORBIDDEN = "primary_detach_forbidden"
    INVALID_INTERFACE_TYPE = "invalid_interface_type"
    INTERFACE_STATE = "interface_state"
    INSTANCE_STATE = "instance_state"


class DomainException(Exception):
    """Base exception for all domain errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainException):
    """Raised when a request, identifier or model invariant is invalid."""


class ConfigurationError(DomainException):
    """Raised when settings cannot be loaded or fail validation."""


class ProviderError(DomainException):
    """A provider failure that has already been classified.

    Subclasses fix the category; callers branch on the exception type and
    never on the raw provider code.
    """

    category: ErrorCategory = ErrorCategory.FATAL

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, error_code=code, details=details)
        self.code = code
        self.entity_id = entity_id

    def __str__(self) -> str:
        prefix = f"[{self.code}] " if self.code else ""
        suffix = f" (entity: {self.entity_id})" if self.entity_id else ""
        return f"{prefix}{self.message}{suffix}"


class EntityNotFoundError(ProviderError):
    """The referenced entity does not exist."""

    category = ErrorCategory.NOT_FOUND


class ConflictError(ProviderError):
    """The entity exists but cannot accept the mutation in its current state."""

    category = ErrorCategory.CONFLICT

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        entity_id: Optional[str] = None,
        reason: Optional[ConflictReason] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, entity_id=entity_id, details=details)
        self.reason = reason


class TransientError(ProviderError):
    """Network or service failure; the same request may be retried unchanged."""

    category = ErrorCategory.TRANSIENT


class FatalProviderError(ProviderError):
    """Malformed request, permission failure or anything unclassified."""

    category = ErrorCategory.FATAL


class ReconciliationError(DomainException):
    """The provider reached a state the requested transition cannot accept."""

    def __init__(self, message: str, entity_id: Optional[str] = None) -> None:
        super().__init__(message, details={"entity_id": entity_id} if entity_id else None)
        self.entity_id = entity_id


class PollTimeoutError(DomainException):
    """A polling deadline elapsed before the target state was observed.

    No rollback is performed; the entity stays in whatever state the
    provider last reported.
    """

    def __init__(
        self,
        operation: str,
        entity_id: str,
        timeout: float,
        last_error: Optional[BaseException] = None,
        last_observation: Optional[str] = None,
    ) -> None:
        message = f"Timed out after {timeout:g}s waiting for {operation} of {entity_id}"
        if last_observation:
            message += f"; last observed: {last_observation}"
        if last_error is not None:
            message += f"; last provider error: {last_error}"
        super().__init__(
            message,
            details={
                "operation": operation,
                "entity_id": entity_id,
                "timeout": timeout,
            },
        )
        self.operation = operation
        self.entity_id = entity_id
        self.timeout = timeout
        self.last_error = last_error
        self.last_observation = last_observation
