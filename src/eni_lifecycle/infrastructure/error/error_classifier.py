"""Maps provider error codes onto the reconciliation error taxonomy."""

from dataclasses import dataclass
from typing import Optional

from eni_lifecycle.domain.base.exceptions import (
    ConflictError,
    ConflictReason,
    EntityNotFoundError,
    ErrorCategory,
    FatalProviderError,
    ProviderError,
    TransientError,
)

NOT_FOUND_CODES = frozenset(
    {
        "InvalidNetworkInterfaceID.NotFound",
        "InvalidInstanceID.NotFound",
        "InvalidAttachmentID.NotFound",
        "InvalidEniId.NotFound",
        "InvalidInstanceId.NotFound",
        "InvalidEcsId.NotFound",
        "EntityNotExist",
    }
)

CONFLICT_CODES: dict[str, ConflictReason] = {
    "DetachPrimaryEniNotAllowed": ConflictReason.PRIMARY_DETACH_FORBIDDEN,
    "OperationNotPermitted.DetachPrimaryEni": ConflictReason.PRIMARY_DETACH_FORBIDDEN,
    "InvalidEniType": ConflictReason.INVALID_INTERFACE_TYPE,
    "InvalidOperation.InvalidEniType": ConflictReason.INVALID_INTERFACE_TYPE,
    "InvalidEniState": ConflictReason.INTERFACE_STATE,
    "InvalidNetworkInterface.InUse": ConflictReason.INTERFACE_STATE,
    "IncorrectState": ConflictReason.INTERFACE_STATE,
    "InvalidEcsState": ConflictReason.INSTANCE_STATE,
    "IncorrectInstanceState": ConflictReason.INSTANCE_STATE,
    "IncorrectInstanceStatus": ConflictReason.INSTANCE_STATE,
}

TRANSIENT_CODES = frozenset(
    {
        "RequestLimitExceeded",
        "Throttling",
        "ThrottlingException",
        "ServiceUnavailable",
        "Unavailable",
        "InternalError",
        "InternalFailure",
        "RequestTimeout",
    }
)

_EXCEPTION_TYPES: dict[ErrorCategory, type[ProviderError]] = {
    ErrorCategory.NOT_FOUND: EntityNotFoundError,
    ErrorCategory.TRANSIENT: TransientError,
    ErrorCategory.FATAL: FatalProviderError,
}


@dataclass(frozen=True)
class Classification:
    category: ErrorCategory
    reason: Optional[ConflictReason] = None


class ErrorClassifier:
    """
    Explicit allowlist classifier for provider error codes.

    Codes are matched exactly. Anything that is not on one of the lists is
    Fatal, so a new or unexpected provider error is never retried by accident.
    """

    def __init__(
        self,
        not_found_codes: frozenset[str] = NOT_FOUND_CODES,
        conflict_codes: Optional[dict[str, ConflictReason]] = None,
        transient_codes: frozenset[str] = TRANSIENT_CODES,
    ) -> None:
        self._not_found_codes = not_found_codes
        self._conflict_codes = dict(CONFLICT_CODES if conflict_codes is None else conflict_codes)
        self._transient_codes = transient_codes

    def classify(self, code: Optional[str]) -> Classification:
        if code in self._not_found_codes:
            return Classification(ErrorCategory.NOT_FOUND)
        if code in self._conflict_codes:
            return Classification(ErrorCategory.CONFLICT, self._conflict_codes[code])
        if code in self._transient_codes:
            return Classification(ErrorCategory.TRANSIENT)
        return Classification(ErrorCategory.FATAL)

    def to_exception(
        self, code: Optional[str], message: str, entity_id: Optional[str] = None
    ) -> ProviderError:
        """Build the classified exception for a provider error."""
        classification = self.classify(code)
        if classification.category == ErrorCategory.CONFLICT:
            return ConflictError(
                message, code=code, entity_id=entity_id, reason=classification.reason
            )
        return _EXCEPTION_TYPES[classification.category](message, code=code, entity_id=entity_id)

