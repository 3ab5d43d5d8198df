"""Tests for the network interface reconciler."""

import pytest

from eni_lifecycle.application.services.network_interface_reconciler import (
    NetworkInterfaceReconciler,
)
from eni_lifecycle.config.settings import ReconcilerConfig
from eni_lifecycle.domain.base.exceptions import (
    ConflictError,
    ConflictReason,
    EntityNotFoundError,
    FatalProviderError,
    PollTimeoutError,
    ReconciliationError,
    TransientError,
)
from eni_lifecycle.domain.network_interface.models import (
    CreateInterfaceSpec,
    InterfaceAttributes,
    InterfaceFilter,
    InterfaceStatus,
)

CREATING = InterfaceStatus.CREATING
AVAILABLE = InterfaceStatus.AVAILABLE
DELETING = InterfaceStatus.DELETING


def conflict(code: str, reason: ConflictReason) -> ConflictError:
    return ConflictError(f"{code} rejected", code=code, entity_id="eni-001", reason=reason)


@pytest.fixture
def spec() -> CreateInterfaceSpec:
    return CreateInterfaceSpec(
        subnet_id="subnet-1", security_group_ids=["sg-1"], name="web", description="frontend"
    )


@pytest.fixture
def reconciler(fake_client, poller, reconciler_config):
    return NetworkInterfaceReconciler(fake_client, poller=poller, config=reconciler_config)


@pytest.mark.unit
class TestCreate:
    """Create issues one call and polls until Available."""

    def test_polls_until_available(self, reconciler, fake_client, clock, spec):
        fake_client.script_statuses("eni-001", CREATING, CREATING, AVAILABLE)

        interface = reconciler.create(spec)

        assert interface.interface_id == "eni-001"
        assert interface.status == AVAILABLE
        assert interface.name == "web"
        assert fake_client.call_count("create_interface") == 1
        assert fake_client.call_count("describe_interface") == 3
        assert clock.sleeps == [5.0, 5.0]

    def test_not_yet_visible_keeps_polling(self, reconciler, fake_client, spec):
        not_found = EntityNotFoundError("missing", entity_id="eni-001")
        fake_client.script_statuses("eni-001", not_found, AVAILABLE)

        interface = reconciler.create(spec)

        assert interface.status == AVAILABLE
        assert fake_client.call_count("describe_interface") == 2

    def test_unexpected_status_fails(self, reconciler, fake_client, spec):
        fake_client.script_statuses("eni-001", CREATING, DELETING)

        with pytest.raises(ReconciliationError) as exc_info:
            reconciler.create(spec)

        assert exc_info.value.entity_id == "eni-001"

    def test_timeout_reports_entity_and_last_status(self, fake_client, poller, spec):
        config = ReconcilerConfig(create_timeout=20)
        reconciler = NetworkInterfaceReconciler(fake_client, poller=poller, config=config)

        with pytest.raises(PollTimeoutError) as exc_info:
            reconciler.create(spec)

        error = exc_info.value
        assert error.entity_id == "eni-001"
        assert error.operation == "create"
        assert "Creating" in str(error)
        assert fake_client.call_count("describe_interface") == 5
        assert fake_client.call_count("create_interface") == 1

    def test_create_failure_is_not_retried(self, reconciler, fake_client, spec):
        fake_client.fail("create_interface", TransientError("throttled", code="Throttling"))

        with pytest.raises(TransientError):
            reconciler.create(spec)

        assert fake_client.call_count("create_interface") == 1
        assert fake_client.call_count("describe_interface") == 0


@pytest.mark.unit
class TestRead:
    def test_missing_interface_returns_none(self, reconciler):
        assert reconciler.read("eni-missing") is None

    def test_returns_snapshot(self, reconciler, fake_client):
        fake_client.add_interface("eni-001", name="web")

        assert reconciler.read("eni-001").name == "web"

    def test_fatal_error_propagates(self, reconciler, fake_client):
        fake_client.fail("describe_interface", FatalProviderError("denied", code="AccessDenied"))

        with pytest.raises(FatalProviderError):
            reconciler.read("eni-001")


@pytest.mark.unit
class TestUpdate:
    """Update sends only the fields that differ."""

    def test_sends_only_changed_fields(self, reconciler, fake_client):
        fake_client.add_interface("eni-001", name="web", description="old")

        updated = reconciler.update(
            "eni-001", InterfaceAttributes(name="web", description="new")
        )

        modify_calls = [args for name, args in fake_client.calls if name == "modify_interface_attributes"]
        assert modify_calls == [("eni-001", InterfaceAttributes(description="new"))]
        assert updated.description == "new"

    def test_no_difference_makes_no_call(self, reconciler, fake_client):
        fake_client.add_interface("eni-001", name="web", security_group_ids=("sg-1", "sg-2"))

        reconciler.update(
            "eni-001", InterfaceAttributes(name="web", security_group_ids=["sg-1", "sg-2"])
        )

        assert fake_client.call_count("modify_interface_attributes") == 0

    def test_conflict_is_not_retried(self, reconciler, fake_client):
        fake_client.add_interface("eni-001")
        fake_client.fail(
            "modify_interface_attributes",
            conflict("InvalidEniState", ConflictReason.INTERFACE_STATE),
        )

        with pytest.raises(ConflictError):
            reconciler.update("eni-001", InterfaceAttributes(description="new"))

        assert fake_client.call_count("modify_interface_attributes") == 1


@pytest.mark.unit
class TestDelete:
    """Delete retries allowlisted conflicts, then waits for absence."""

    def test_retries_primary_detach_conflict_then_disappears(self, reconciler, fake_client):
        fake_client.add_interface("eni-001")
        primary = conflict("DetachPrimaryEniNotAllowed", ConflictReason.PRIMARY_DETACH_FORBIDDEN)
        fake_client.fail("delete_interface", primary, primary)

        reconciler.delete("eni-001")

        assert fake_client.call_count("delete_interface") == 3
        assert reconciler.read("eni-001") is None

    def test_retries_transient_errors(self, reconciler, fake_client):
        fake_client.add_interface("eni-001")
        fake_client.fail("delete_interface", TransientError("busy", code="ServiceUnavailable"))

        reconciler.delete("eni-001")

        assert fake_client.call_count("delete_interface") == 2

    def test_conflict_outside_retry_set_propagates(self, reconciler, fake_client):
        fake_client.add_interface("eni-001")
        fake_client.fail(
            "delete_interface", conflict("InvalidEcsState", ConflictReason.INSTANCE_STATE)
        )

        with pytest.raises(ConflictError):
            reconciler.delete("eni-001")

        assert fake_client.call_count("delete_interface") == 1

    def test_fatal_error_propagates(self, reconciler, fake_client):
        fake_client.add_interface("eni-001")
        fake_client.fail("delete_interface", FatalProviderError("denied", code="AccessDenied"))

        with pytest.raises(FatalProviderError):
            reconciler.delete("eni-001")

    def test_already_deleted_succeeds(self, reconciler, fake_client):
        reconciler.delete("eni-gone")

        assert fake_client.call_count("delete_interface") == 1

    def test_still_visible_mid_poll_is_not_a_failure(self, reconciler, fake_client, clock):
        fake_client.add_interface("eni-001")
        fake_client.script_statuses("eni-001", DELETING, DELETING)

        reconciler.delete("eni-001")

        assert fake_client.call_count("describe_interface") == 3
        assert clock.sleeps == [5.0, 5.0]

    def test_persistent_conflict_times_out(self, fake_client, poller):
        config = ReconcilerConfig(delete_timeout=10)
        reconciler = NetworkInterfaceReconciler(fake_client, poller=poller, config=config)
        fake_client.add_interface("eni-001")
        state = conflict("InvalidEniState", ConflictReason.INTERFACE_STATE)
        fake_client.fail("delete_interface", state, state, state, state)

        with pytest.raises(PollTimeoutError) as exc_info:
            reconciler.delete("eni-001")

        assert exc_info.value.last_error is state
        assert "InvalidEniState" in str(exc_info.value)
        assert fake_client.call_count("delete_interface") == 3
        assert "eni-001" in fake_client.interfaces


@pytest.mark.unit
class TestListInterfaces:
    """Listing walks pages until a short page and removes duplicates."""

    def test_deduplicates_in_first_seen_order(self, reconciler, fake_client):
        a, b, c, d, e, f = (
            fake_client.add_interface(f"eni-{letter}") for letter in "abcdef"
        )
        fake_client.pages = [[a, b, c, d, e], [d, e, f]]

        result = reconciler.list_interfaces(InterfaceFilter(subnet_id="subnet-1"))

        assert [i.interface_id for i in result] == [
            "eni-a",
            "eni-b",
            "eni-c",
            "eni-d",
            "eni-e",
            "eni-f",
        ]
        assert fake_client.call_count("list_interfaces") == 2

    def test_full_last_page_requests_one_more(self, reconciler, fake_client):
        for n in range(10):
            fake_client.add_interface(f"eni-{n:02d}")

        result = reconciler.list_interfaces()

        assert len(result) == 10
        pages_requested = [args[1] for name, args in fake_client.calls if name == "list_interfaces"]
        assert pages_requested == [1, 2, 3]

    def test_empty_result_is_empty_list(self, reconciler, fake_client):
        assert reconciler.list_interfaces(InterfaceFilter(vpc_id="vpc-none")) == []
        assert fake_client.call_count("list_interfaces") == 1

    def test_passes_filter_and_page_size(self, reconciler, fake_client):
        interface_filter = InterfaceFilter(name="web")

        reconciler.list_interfaces(interface_filter)

        assert fake_client.calls[0] == ("list_interfaces", (interface_filter, 1, 5))
