"""Tests for provider error classification."""

import pytest

from eni_lifecycle.domain.base.exceptions import (
    ConflictError,
    ConflictReason,
    EntityNotFoundError,
    ErrorCategory,
    FatalProviderError,
    TransientError,
)
from eni_lifecycle.infrastructure.error.error_classifier import ErrorClassifier


@pytest.mark.unit
class TestErrorClassifier:
    """Allowlist classification of provider error codes."""

    def setup_method(self):
        self.classifier = ErrorClassifier()

    @pytest.mark.parametrize(
        "code",
        ["InvalidNetworkInterfaceID.NotFound", "InvalidInstanceID.NotFound", "EntityNotExist"],
    )
    def test_not_found_codes(self, code):
        assert self.classifier.classify(code).category == ErrorCategory.NOT_FOUND

    @pytest.mark.parametrize(
        "code, reason",
        [
            ("DetachPrimaryEniNotAllowed", ConflictReason.PRIMARY_DETACH_FORBIDDEN),
            ("InvalidEniType", ConflictReason.INVALID_INTERFACE_TYPE),
            ("InvalidEniState", ConflictReason.INTERFACE_STATE),
            ("InvalidEcsState", ConflictReason.INSTANCE_STATE),
            ("IncorrectInstanceState", ConflictReason.INSTANCE_STATE),
        ],
    )
    def test_conflict_codes_carry_reason(self, code, reason):
        classification = self.classifier.classify(code)

        assert classification.category == ErrorCategory.CONFLICT
        assert classification.reason == reason

    @pytest.mark.parametrize("code", ["RequestLimitExceeded", "Throttling", "ServiceUnavailable"])
    def test_transient_codes(self, code):
        assert self.classifier.classify(code).category == ErrorCategory.TRANSIENT

    @pytest.mark.parametrize("code", ["UnauthorizedOperation", "InvalidParameterValue", "", None])
    def test_unknown_codes_are_fatal(self, code):
        assert self.classifier.classify(code).category == ErrorCategory.FATAL

    def test_matching_is_exact(self):
        assert self.classifier.classify("invalideniState").category == ErrorCategory.FATAL

    def test_to_exception_builds_typed_errors(self):
        not_found = self.classifier.to_exception("InvalidInstanceID.NotFound", "gone", "i-1")
        conflict = self.classifier.to_exception("InvalidEniType", "wrong type", "eni-1")
        transient = self.classifier.to_exception("Throttling", "slow", "eni-1")
        fatal = self.classifier.to_exception("AccessDenied", "no", "eni-1")

        assert isinstance(not_found, EntityNotFoundError)
        assert not_found.entity_id == "i-1"
        assert isinstance(conflict, ConflictError)
        assert conflict.reason == ConflictReason.INVALID_INTERFACE_TYPE
        assert isinstance(transient, TransientError)
        assert isinstance(fatal, FatalProviderError)
        assert fatal.code == "AccessDenied"

    def test_custom_lists_override_defaults(self):
        classifier = ErrorClassifier(
            not_found_codes=frozenset(),
            conflict_codes={"Busy": ConflictReason.INTERFACE_STATE},
            transient_codes=frozenset({"Flaky"}),
        )

        assert classifier.classify("EntityNotExist").category == ErrorCategory.FATAL
        assert classifier.classify("Busy").reason == ConflictReason.INTERFACE_STATE
        assert classifier.classify("Flaky").category == ErrorCategory.TRANSIENT

    def test_instances_do_not_share_code_lists(self):
        custom = ErrorClassifier(transient_codes=frozenset({"Flaky"}))

        assert custom.classify("Flaky").category == ErrorCategory.TRANSIENT
        assert self.classifier.classify("Flaky").category == ErrorCategory.FATAL
