"""Network interface entity and its request shapes."""

from dataclasses import dataclass, field, fields
from typing import Any, Optional, Union

from eni_lifecycle.domain.base.enums import BaseEnumModel
from eni_lifecycle.domain.base.exceptions import ValidationError


class InterfaceStatus(BaseEnumModel):
    """Provider-reported lifecycle status of a network interface."""

    CREATING = "Creating"
    AVAILABLE = "Available"
    IN_USE = "InUse"
    DELETING = "Deleting"


@dataclass(frozen=True)
class PublicIpAssociation:
    """Public address bound to a private address."""

    allocation_id: Optional[str] = None
    public_ip: Optional[str] = None


@dataclass(frozen=True)
class PrivateIpAddress:
    """One private address of an interface."""

    address: str
    primary: bool = False
    association: Optional[PublicIpAssociation] = None


@dataclass(frozen=True)
class NetworkInterface:
    """
    Snapshot of a network interface as last read from the provider.

    Attributes:
        interface_id: Provider-assigned id, immutable once created.
        subnet_id: Subnet the interface lives in.
        vpc_id: Virtual network of the subnet.
        availability_zone: Zone of the subnet.
        status: Derived from provider reads, never set directly.
        primary_ip_address: Primary private address, assigned at creation.
        security_group_ids: Ordered security group ids.
        private_ip_addresses: All private addresses, primary included.
        association: Public association of the primary address, if any.
        attached_instance_id: Instance id, present iff status is InUse.
        attachment_owner_id: Account or service owning the attachment. A
            requester-managed interface can carry an owner without an instance.
        attach_time: When the current instance attachment was made.
    """

    interface_id: str
    subnet_id: str
    status: InterfaceStatus
    primary_ip_address: Optional[str] = None
    vpc_id: Optional[str] = None
    availability_zone: Optional[str] = None
    security_group_ids: tuple[str, ...] = ()
    private_ip_addresses: tuple[PrivateIpAddress, ...] = ()
    association: Optional[PublicIpAssociation] = None
    name: Optional[str] = None
    description: Optional[str] = None
    client_token: Optional[str] = None
    attached_instance_id: Optional[str] = None
    interface_type: Optional[str] = None
    mac_address: Optional[str] = None
    requester_managed: bool = False
    attachment_owner_id: Optional[str] = None
    attach_time: Optional[str] = None
    tags: dict[str, str] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if self.private_ip_addresses:
            primaries = [ip for ip in self.private_ip_addresses if ip.primary]
            if len(primaries) != 1:
                raise ValidationError(
                    f"Network interface {self.interface_id} must have exactly one "
                    f"primary address, found {len(primaries)}"
                )
            if self.primary_ip_address and primaries[0].address != self.primary_ip_address:
                raise ValidationError(
                    f"Network interface {self.interface_id} primary address mismatch: "
                    f"{self.primary_ip_address} != {primaries[0].address}"
                )

        if self.status == InterfaceStatus.IN_USE and not self.attached_instance_id:
            raise ValidationError(
                f"Network interface {self.interface_id} is InUse without an attached instance"
            )
        if self.status != InterfaceStatus.IN_USE and self.attached_instance_id:
            raise ValidationError(
                f"Network interface {self.interface_id} is {self.status} but reports "
                f"attached instance {self.attached_instance_id}"
            )

    @property
    def secondary_ip_addresses(self) -> tuple[PrivateIpAddress, ...]:
        return tuple(ip for ip in self.private_ip_addresses if not ip.primary)

    @property
    def is_attached(self) -> bool:
        return self.status == InterfaceStatus.IN_USE

    def to_dict(self) -> dict[str, Any]:
        """Flatten the snapshot for callers that persist plain state."""
        return {
            "id": self.interface_id,
            "subnet_id": self.subnet_id,
            "vpc_id": self.vpc_id,
            "availability_zone": self.availability_zone,
            "status": self.status.to_dict(),
            "primary_ip_address": self.primary_ip_address,
            "security_group_ids": list(self.security_group_ids),
            "private_ip_set": [
                {
                    "private_ip_address": ip.address,
                    "primary": ip.primary,
                    "associated_public_ip": _association_dict(ip.association),
                }
                for ip in self.private_ip_addresses
            ],
            "associated_public_ip": _association_dict(self.association),
            "name": self.name,
            "description": self.description,
            "client_token": self.client_token,
            "instance_id": self.attached_instance_id,
            "type": self.interface_type,
            "mac_address": self.mac_address,
            "requester_managed": self.requester_managed,
            "attachment_owner_id": self.attachment_owner_id,
            "attach_time": self.attach_time,
        }


def _association_dict(association: Optional[PublicIpAssociation]) -> dict[str, Optional[str]]:
    if association is None:
        return {"allocation_id": None, "public_ip_address": None}
    return {
        "allocation_id": association.allocation_id,
        "public_ip_address": association.public_ip,
    }


@dataclass(frozen=True)
class CreateInterfaceSpec:
    """Desired shape of a network interface to be created."""

    subnet_id: str
    security_group_ids: tuple[str, ...]
    primary_ip_address: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    client_token: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.subnet_id:
            raise ValidationError("subnet_id is required to create a network interface")
        # Accept any iterable but store an immutable tuple
        object.__setattr__(self, "security_group_ids", tuple(self.security_group_ids or ()))
        if not self.security_group_ids:
            raise ValidationError("At least one security group is required")


@dataclass(frozen=True)
class InterfaceAttributes:
    """Partial update of the mutable interface attributes; None means unchanged."""

    name: Optional[str] = None
    description: Optional[str] = None
    security_group_ids: Optional[tuple[str, ...]] = None

    def __post_init__(self) -> None:
        if self.security_group_ids is not None:
            object.__setattr__(self, "security_group_ids", tuple(self.security_group_ids))
            if not self.security_group_ids:
                raise ValidationError("security_group_ids cannot be emptied by an update")

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def changes_from(self, snapshot: NetworkInterface) -> "InterfaceAttributes":
        """Keep only the fields whose desired value differs from the snapshot."""
        changes = {}
        if self.name is not None and self.name != (snapshot.name or ""):
            changes["name"] = self.name
        if self.description is not None and self.description != (snapshot.description or ""):
            changes["description"] = self.description
        if (
            self.security_group_ids is not None
            and self.security_group_ids != snapshot.security_group_ids
        ):
            changes["security_group_ids"] = self.security_group_ids
        return InterfaceAttributes(**changes)


@dataclass(frozen=True)
class InterfaceFilter:
    """Criteria for listing network interfaces; unset fields do not filter."""

    subnet_id: Optional[str] = None
    vpc_id: Optional[str] = None
    primary_ip_address: Optional[str] = None
    security_group_id: Optional[str] = None
    name: Optional[str] = None
    interface_type: Optional[str] = None
    instance_id: Optional[str] = None
    # Accepts the enum or its value, e.g. "Available"
    status: Optional[Union[InterfaceStatus, str]] = None
    interface_ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.status is not None:
            try:
                object.__setattr__(self, "status", InterfaceStatus.from_value(self.status))
            except ValueError as e:
                raise ValidationError(str(e)) from e
        object.__setattr__(
            self, "interface_ids", tuple(i.strip() for i in self.interface_ids if i.strip())
        )
