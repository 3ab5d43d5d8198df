"""Attachment relationship and the instance view it is inferred from."""

from dataclasses import dataclass
from typing import Optional

from eni_lifecycle.domain.base.exceptions import ValidationError

ATTACHMENT_ID_SEPARATOR = ":"


@dataclass(frozen=True)
class Attachment:
    """
    A network interface plugged into an instance.

    The provider does not store this relationship; it exists iff the
    instance's interface membership contains the interface id. Its identity
    is the composite ``"<interface_id>:<instance_id>"`` key.
    """

    interface_id: str
    instance_id: str

    def __post_init__(self) -> None:
        interface_id = (self.interface_id or "").strip()
        instance_id = (self.instance_id or "").strip()
        if not interface_id or not instance_id:
            raise ValidationError(
                "Attachment requires both a network interface id and an instance id"
            )
        object.__setattr__(self, "interface_id", interface_id)
        object.__setattr__(self, "instance_id", instance_id)

    @property
    def id(self) -> str:
        return f"{self.interface_id}{ATTACHMENT_ID_SEPARATOR}{self.instance_id}"

    @classmethod
    def parse(cls, attachment_id: str) -> "Attachment":
        """
        Rebuild an attachment from its composite id.

        Args:
            attachment_id: Value produced by ``Attachment.id``

        Returns:
            The attachment key

        Raises:
            ValidationError: If the id is not exactly two non-empty parts
        """
        parts = (attachment_id or "").split(ATTACHMENT_ID_SEPARATOR)
        if len(parts) != 2 or not all(part.strip() for part in parts):
            raise ValidationError(
                f"Invalid attachment id {attachment_id!r}, expected "
                f"'<network_interface_id>{ATTACHMENT_ID_SEPARATOR}<instance_id>'"
            )
        return cls(interface_id=parts[0], instance_id=parts[1])

    def __str__(self) -> str:
        return self.id


@dataclass(frozen=True)
class Instance:
    """Instance snapshot reduced to what attachment reconciliation needs."""

    instance_id: str
    network_interface_ids: frozenset[str] = frozenset()
    state: Optional[str] = None

    def has_interface(self, interface_id: str) -> bool:
        return interface_id in self.network_interface_ids
