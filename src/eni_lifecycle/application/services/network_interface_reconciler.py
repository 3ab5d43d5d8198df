"""Lifecycle reconciliation of network interfaces."""

from typing import Optional

from eni_lifecycle.config.settings import ReconcilerConfig
from eni_lifecycle.domain.base.exceptions import (
    ConflictError,
    ConflictReason,
    EntityNotFoundError,
    ProviderError,
    ReconciliationError,
)
from eni_lifecycle.domain.network_interface.models import (
    CreateInterfaceSpec,
    InterfaceAttributes,
    InterfaceFilter,
    InterfaceStatus,
    NetworkInterface,
)
from eni_lifecycle.domain.ports.network_interface_client import NetworkInterfaceClient
from eni_lifecycle.infrastructure.logging.logger import get_logger
from eni_lifecycle.infrastructure.resilience.poller import Poller, PollResult

# Conflicts that clear on their own while a detach or state change settles
DELETE_RETRYABLE_REASONS = frozenset(
    {
        ConflictReason.PRIMARY_DETACH_FORBIDDEN,
        ConflictReason.INVALID_INTERFACE_TYPE,
        ConflictReason.INTERFACE_STATE,
    }
)


class NetworkInterfaceReconciler:
    """
    Drive a network interface through create, update and delete.

    Each mutating call is followed by polling until the provider reflects
    the transition, or the operation's deadline passes.
    """

    def __init__(
        self,
        client: NetworkInterfaceClient,
        poller: Optional[Poller] = None,
        config: Optional[ReconcilerConfig] = None,
    ) -> None:
        self._client = client
        self._config = config or ReconcilerConfig()
        self._poller = poller or Poller(self._config.poll_interval)
        self._logger = get_logger(__name__)

    def create(self, spec: CreateInterfaceSpec) -> NetworkInterface:
        """
        Create a network interface and wait until it is Available.

        The create call itself is not retried; a ``client_token`` on ``spec``
        makes a caller-driven re-invocation idempotent.

        Args:
            spec: Desired interface

        Returns:
            NetworkInterface: Snapshot in Available status

        Raises:
            ProviderError: If the create call fails
            ReconciliationError: If the interface settles in an unexpected status
            PollTimeoutError: If it is not Available within ``create_timeout``
        """
        interface_id = self._client.create_interface(spec)
        self._logger.info(
            "Created network interface %s, waiting for Available",
            interface_id,
            extra={"network_interface_id": interface_id},
        )

        def check() -> PollResult[NetworkInterface]:
            try:
                snapshot = self._client.describe_interface(interface_id)
            except EntityNotFoundError as e:
                # Reads lag behind the create response
                return PollResult.keep_polling(observation="not yet visible", error=e)
            if snapshot.status == InterfaceStatus.AVAILABLE:
                return PollResult.done(snapshot)
            if snapshot.status == InterfaceStatus.CREATING:
                return PollResult.keep_polling(observation=f"status {snapshot.status}")
            return PollResult.failed(
                ReconciliationError(
                    f"Network interface {interface_id} reached status {snapshot.status} "
                    f"while waiting for {InterfaceStatus.AVAILABLE}",
                    entity_id=interface_id,
                )
            )

        snapshot = self._poller.poll(
            check,
            timeout=self._config.create_timeout,
            operation="create",
            entity_id=interface_id,
        )
        self._logger.info("Network interface %s is available", interface_id)
        return snapshot

    def read(self, interface_id: str) -> Optional[NetworkInterface]:
        """Return the current snapshot, or None if the interface does not exist."""
        try:
            return self._client.describe_interface(interface_id)
        except EntityNotFoundError:
            self._logger.debug("Network interface %s not found", interface_id)
            return None

    def update(self, interface_id: str, attributes: InterfaceAttributes) -> NetworkInterface:
        """
        Apply the attributes that differ from the current snapshot.

        Conflicts are not retried here; the caller decides whether to re-run.

        Args:
            interface_id: Interface to modify
            attributes: Desired values; None fields are left unchanged

        Returns:
            NetworkInterface: Fresh snapshot after the modification
        """
        current = self._client.describe_interface(interface_id)
        changes = attributes.changes_from(current)
        if changes.is_empty():
            self._logger.debug("Network interface %s already up to date", interface_id)
            return current

        self._client.modify_interface_attributes(interface_id, changes)
        self._logger.info(
            "Updated network interface %s",
            interface_id,
            extra={
                "network_interface_id": interface_id,
                "changed": [name for name, value in vars(changes).items() if value is not None],
            },
        )
        return self._client.describe_interface(interface_id)

    def delete(self, interface_id: str) -> None:
        """
        Delete a network interface and wait until it can no longer be read.

        The delete call is retried while the provider reports a retryable
        conflict (e.g. a detach still settling) or a transient failure. An
        interface that is already gone counts as deleted.

        Raises:
            ProviderError: For conflicts outside the retryable set and fatal errors
            PollTimeoutError: If the interface is still visible at ``delete_timeout``
        """
        self._poller.retry(
            lambda: self._client.delete_interface(interface_id),
            is_retryable=_is_delete_retryable,
            timeout=self._config.delete_timeout,
            operation="delete",
            entity_id=interface_id,
            not_found_is_done=True,
        )

        def check() -> PollResult[None]:
            snapshot = self._client.describe_interface(interface_id)
            return PollResult.keep_polling(observation=f"status {snapshot.status}")

        self._poller.poll(
            check,
            timeout=self._config.delete_timeout,
            operation="delete",
            entity_id=interface_id,
            not_found_is_done=True,
        )
        self._logger.info("Deleted network interface %s", interface_id)

    def list_interfaces(
        self, interface_filter: Optional[InterfaceFilter] = None
    ) -> list[NetworkInterface]:
        """
        Collect every interface matching the filter across all pages.

        Pages are requested in order until one comes back shorter than the
        page size. Interfaces seen on more than one page are kept once, in
        first-seen order.
        """
        interface_filter = interface_filter or InterfaceFilter()
        page_size = self._config.page_size
        seen: dict[str, NetworkInterface] = {}
        page_number = 1

        while True:
            page = self._client.list_interfaces(interface_filter, page_number, page_size)
            for interface in page:
                seen.setdefault(interface.interface_id, interface)
            if len(page) < page_size:
                break
            page_number += 1

        self._logger.debug(
            "Listed %d network interfaces over %d page(s)", len(seen), page_number
        )
        return list(seen.values())


def _is_delete_retryable(error: ProviderError) -> bool:
    return isinstance(error, ConflictError) and error.reason in DELETE_RETRYABLE_REASONS
