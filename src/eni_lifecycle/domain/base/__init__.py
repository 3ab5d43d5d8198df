from eni_lifecycle.domain.base.exceptions import (
    ConfigurationError,
    ConflictError,
    ConflictReason,
    DomainException,
    EntityNotFoundError,
    ErrorCategory,
    FatalProviderError,
    PollTimeoutError,
    ProviderError,
    ReconciliationError,
    TransientError,
    ValidationError,
)

__all__: list[str] = [
    "ConfigurationError",
    "ConflictError",
    "ConflictReason",
    "DomainException",
    "EntityNotFoundError",
    "ErrorCategory",
    "FatalProviderError",
    "PollTimeoutError",
    "ProviderError",
    "ReconciliationError",
    "TransientError",
    "ValidationError",
]
