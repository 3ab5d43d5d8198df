"""Lifecycle reconciliation of interface-to-instance attachments."""

from typing import Optional

from eni_lifecycle.config.settings import ReconcilerConfig
from eni_lifecycle.domain.attachment.models import Attachment
from eni_lifecycle.domain.base.exceptions import (
    ConflictError,
    ConflictReason,
    EntityNotFoundError,
    ProviderError,
)
from eni_lifecycle.domain.ports.network_interface_client import NetworkInterfaceClient
from eni_lifecycle.infrastructure.logging.logger import get_logger
from eni_lifecycle.infrastructure.resilience.poller import Poller, PollResult


class AttachmentReconciler:
    """
    Attach and detach a network interface, judging progress by instance membership.

    The provider keeps no attachment record of its own: an attachment exists
    iff the instance lists the interface among its network interfaces.
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

    def attach(self, interface_id: str, instance_id: str) -> Attachment:
        """
        Attach an interface to an instance and wait until the instance lists it.

        Args:
            interface_id: Interface to attach
            instance_id: Target instance

        Returns:
            Attachment: The established attachment

        Raises:
            ValidationError: If either id is empty
            EntityNotFoundError: If the instance does not exist
            ProviderError: If the attach call fails; it is never retried
            PollTimeoutError: If membership is not observed within ``attach_timeout``
        """
        attachment = Attachment(interface_id, instance_id)

        instance = self._client.describe_instance(attachment.instance_id)
        if instance.has_interface(attachment.interface_id):
            self._logger.info("Attachment %s already present", attachment)
            return attachment

        self._client.attach_interface(attachment.interface_id, attachment.instance_id)
        self._logger.info(
            "Attaching %s to %s",
            attachment.interface_id,
            attachment.instance_id,
            extra={"attachment_id": attachment.id},
        )

        def check() -> PollResult[Attachment]:
            current = self._client.describe_instance(attachment.instance_id)
            if current.has_interface(attachment.interface_id):
                return PollResult.done(attachment)
            return PollResult.keep_polling(
                observation=f"instance lists {sorted(current.network_interface_ids)}"
            )

        self._poller.poll(
            check,
            timeout=self._config.attach_timeout,
            operation="attach",
            entity_id=attachment.id,
        )
        self._logger.info("Attachment %s established", attachment)
        return attachment

    def read(self, attachment_id: str) -> Optional[Attachment]:
        """Return the attachment if the instance still lists the interface."""
        attachment = Attachment.parse(attachment_id)
        try:
            instance = self._client.describe_instance(attachment.instance_id)
        except EntityNotFoundError:
            return None
        if not instance.has_interface(attachment.interface_id):
            return None
        return attachment

    def detach(self, attachment_id: str) -> None:
        """
        Detach an interface and wait until the instance no longer lists it.

        The detach call is retried while the instance is in a state that
        rejects it, and on transient failures. Any other failure is checked
        against the instance once: if the interface is already gone the
        detach is complete, otherwise the failure is raised.

        Raises:
            ValidationError: If the attachment id is malformed
            ProviderError: If detach fails and the interface is still attached
            PollTimeoutError: If the interface is still listed at ``detach_timeout``
        """
        attachment = Attachment.parse(attachment_id)

        try:
            self._poller.retry(
                lambda: self._client.detach_interface(
                    attachment.interface_id, attachment.instance_id
                ),
                is_retryable=_is_detach_retryable,
                timeout=self._config.detach_timeout,
                operation="detach",
                entity_id=attachment.id,
                not_found_is_done=True,
            )
        except ProviderError as e:
            try:
                still_attached = self.read(attachment.id) is not None
            except ProviderError as read_error:
                self._logger.warning(
                    "Could not re-check attachment %s after detach error: %s",
                    attachment,
                    read_error,
                )
                raise e
            if still_attached:
                raise
            self._logger.info("Attachment %s already gone after detach error: %s", attachment, e)
            return

        def check() -> PollResult[None]:
            instance = self._client.describe_instance(attachment.instance_id)
            if instance.has_interface(attachment.interface_id):
                return PollResult.keep_polling(observation="interface still listed")
            return PollResult.done()

        self._poller.poll(
            check,
            timeout=self._config.detach_timeout,
            operation="detach",
            entity_id=attachment.id,
            not_found_is_done=True,
        )
        self._logger.info("Attachment %s removed", attachment)


def _is_detach_retryable(error: ProviderError) -> bool:
    return isinstance(error, ConflictError) and error.reason == ConflictReason.INSTANCE_STATE
