"""EC2 implementation of the network interface provider client."""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from botocore.exceptions import ClientError, HTTPClientError
from botocore.exceptions import ConnectionError as BotoConnectionError

from eni_lifecycle.domain.attachment.models import Instance
from eni_lifecycle.domain.base.exceptions import (
    EntityNotFoundError,
    FatalProviderError,
    ProviderError,
    TransientError,
)
from eni_lifecycle.domain.network_interface.models import (
    CreateInterfaceSpec,
    InterfaceAttributes,
    InterfaceFilter,
    InterfaceStatus,
    NetworkInterface,
    PrivateIpAddress,
    PublicIpAssociation,
)
from eni_lifecycle.domain.ports.network_interface_client import NetworkInterfaceClient
from eni_lifecycle.infrastructure.error.error_classifier import ErrorClassifier
from eni_lifecycle.infrastructure.logging.logger import get_logger
from eni_lifecycle.providers.aws.infrastructure.aws_client import AWSClient

NAME_TAG = "Name"

_STATUS_MAP = {
    "pending": InterfaceStatus.CREATING,
    "available": InterfaceStatus.AVAILABLE,
    "in-use": InterfaceStatus.IN_USE,
    "attaching": InterfaceStatus.IN_USE,
    "detaching": InterfaceStatus.IN_USE,
    "associated": InterfaceStatus.IN_USE,
    "deleting": InterfaceStatus.DELETING,
}

_TERMINAL_INSTANCE_STATES = {"terminated"}


@dataclass
class _ListingCursor:
    """Position of a numbered-page listing on top of EC2 NextToken pagination."""

    next_page: int = 1
    next_token: Optional[str] = None
    exhausted: bool = False
    buffer: list[dict[str, Any]] = field(default_factory=list)


class EC2NetworkInterfaceClient(NetworkInterfaceClient):
    """
    Provider client backed by the EC2 API.

    Every botocore failure is classified here, once, and re-raised as a domain
    ``ProviderError`` subclass. Connection-level failures carry no error code
    and are treated as transient.
    """

    def __init__(
        self,
        aws_client: AWSClient,
        classifier: Optional[ErrorClassifier] = None,
    ) -> None:
        self.aws_client = aws_client
        self._classifier = classifier or ErrorClassifier()
        self._logger = get_logger(__name__)
        self._cursors: dict[tuple[InterfaceFilter, int], _ListingCursor] = {}

    @property
    def ec2(self):
        return self.aws_client.ec2_client

    # Provider operations

    def create_interface(self, spec: CreateInterfaceSpec) -> str:
        params: dict[str, Any] = {
            "SubnetId": spec.subnet_id,
            "Groups": list(spec.security_group_ids),
        }
        if spec.primary_ip_address:
            params["PrivateIpAddress"] = spec.primary_ip_address
        if spec.description:
            params["Description"] = spec.description
        if spec.client_token:
            params["ClientToken"] = spec.client_token
        if spec.name:
            params["TagSpecifications"] = [
                {
                    "ResourceType": "network-interface",
                    "Tags": [{"Key": NAME_TAG, "Value": spec.name}],
                }
            ]

        response = self._call(self.ec2.create_network_interface, entity_id=spec.subnet_id, **params)
        interface_id = response["NetworkInterface"]["NetworkInterfaceId"]
        self._logger.info(
            "Requested network interface %s in subnet %s",
            interface_id,
            spec.subnet_id,
            extra={"network_interface_id": interface_id, "subnet_id": spec.subnet_id},
        )
        return interface_id

    def describe_interface(self, interface_id: str) -> NetworkInterface:
        return self._to_network_interface(self._describe_interface_payload(interface_id))

    def modify_interface_attributes(
        self, interface_id: str, attributes: InterfaceAttributes
    ) -> None:
        # EC2 accepts one attribute per modify call
        if attributes.description is not None:
            self._call(
                self.ec2.modify_network_interface_attribute,
                entity_id=interface_id,
                NetworkInterfaceId=interface_id,
                Description={"Value": attributes.description},
            )
        if attributes.security_group_ids is not None:
            self._call(
                self.ec2.modify_network_interface_attribute,
                entity_id=interface_id,
                NetworkInterfaceId=interface_id,
                Groups=list(attributes.security_group_ids),
            )
        if attributes.name is not None:
            self._call(
                self.ec2.create_tags,
                entity_id=interface_id,
                Resources=[interface_id],
                Tags=[{"Key": NAME_TAG, "Value": attributes.name}],
            )
        self._logger.info(
            "Modified network interface %s attributes",
            interface_id,
            extra={"network_interface_id": interface_id},
        )

    def delete_interface(self, interface_id: str) -> None:
        self._call(
            self.ec2.delete_network_interface,
            entity_id=interface_id,
            NetworkInterfaceId=interface_id,
        )

    def attach_interface(self, interface_id: str, instance_id: str) -> None:
        instance = self._describe_instance_payload(instance_id)
        device_index = _next_device_index(instance)
        response = self._call(
            self.ec2.attach_network_interface,
            entity_id=f"{interface_id}:{instance_id}",
            NetworkInterfaceId=interface_id,
            InstanceId=instance_id,
            DeviceIndex=device_index,
        )
        self._logger.info(
            "Requested attachment of %s to %s at device index %d (attachment %s)",
            interface_id,
            instance_id,
            device_index,
            response.get("AttachmentId"),
        )

    def detach_interface(self, interface_id: str, instance_id: str) -> None:
        payload = self._describe_interface_payload(interface_id)
        attachment = payload.get("Attachment") or {}
        if not attachment.get("AttachmentId") or attachment.get("InstanceId") != instance_id:
            raise EntityNotFoundError(
                f"Network interface {interface_id} is not attached to {instance_id}",
                code="InvalidAttachmentID.NotFound",
                entity_id=f"{interface_id}:{instance_id}",
            )
        self._call(
            self.ec2.detach_network_interface,
            entity_id=f"{interface_id}:{instance_id}",
            AttachmentId=attachment["AttachmentId"],
        )
        self._logger.info(
            "Requested detachment of %s from %s (attachment %s)",
            interface_id,
            instance_id,
            attachment["AttachmentId"],
        )

    def describe_instance(self, instance_id: str) -> Instance:
        payload = self._describe_instance_payload(instance_id)
        return Instance(
            instance_id=payload["InstanceId"],
            network_interface_ids=frozenset(
                eni["NetworkInterfaceId"] for eni in payload.get("NetworkInterfaces", [])
            ),
            state=(payload.get("State") or {}).get("Name"),
        )

    def list_interfaces(
        self, interface_filter: InterfaceFilter, page_number: int, page_size: int
    ) -> list[NetworkInterface]:
        if page_number < 1:
            raise ValueError("page_number starts at 1")

        filters = _build_filters(interface_filter)

        key = (interface_filter, page_size)
        cursor = self._cursors.get(key)
        if page_number == 1 or cursor is None or page_number < cursor.next_page:
            cursor = self._cursors[key] = _ListingCursor()
        while cursor.next_page < page_number:
            self._next_page(cursor, filters, page_size, interface_filter.status)
        page = self._next_page(cursor, filters, page_size, interface_filter.status)
        if cursor.exhausted and not cursor.buffer:
            self._cursors.pop(key, None)
        return [self._to_network_interface(item) for item in page]

    # Helpers

    def _next_page(
        self,
        cursor: _ListingCursor,
        filters: list[dict[str, Any]],
        page_size: int,
        status: Optional[InterfaceStatus] = None,
    ) -> list[dict[str, Any]]:
        """Fill one full page from NextToken pages; EC2 may return short pages mid-listing."""
        while len(cursor.buffer) < page_size and not cursor.exhausted:
            kwargs: dict[str, Any] = {"MaxResults": page_size}
            if filters:
                kwargs["Filters"] = filters
            if cursor.next_token:
                kwargs["NextToken"] = cursor.next_token
            response = self._call(self.ec2.describe_network_interfaces, **kwargs)
            cursor.buffer.extend(
                item
                for item in response.get("NetworkInterfaces", [])
                if status is None or _effective_status(item) == status
            )
            cursor.next_token = response.get("NextToken")
            cursor.exhausted = not cursor.next_token
        page, cursor.buffer = cursor.buffer[:page_size], cursor.buffer[page_size:]
        cursor.next_page += 1
        return page

    def _describe_interface_payload(self, interface_id: str) -> dict[str, Any]:
        response = self._call(
            self.ec2.describe_network_interfaces,
            entity_id=interface_id,
            NetworkInterfaceIds=[interface_id],
        )
        interfaces = response.get("NetworkInterfaces", [])
        if not interfaces:
            raise EntityNotFoundError(
                f"Network interface {interface_id} not found",
                code="InvalidNetworkInterfaceID.NotFound",
                entity_id=interface_id,
            )
        return interfaces[0]

    def _describe_instance_payload(self, instance_id: str) -> dict[str, Any]:
        response = self._call(
            self.ec2.describe_instances, entity_id=instance_id, InstanceIds=[instance_id]
        )
        for reservation in response.get("Reservations", []):
            for instance in reservation.get("Instances", []):
                if (instance.get("State") or {}).get("Name") in _TERMINAL_INSTANCE_STATES:
                    break
                return instance
        raise EntityNotFoundError(
            f"EC2 instance {instance_id} not found",
            code="InvalidInstanceID.NotFound",
            entity_id=instance_id,
        )

    def _call(self, method: Callable[..., Any], entity_id: Optional[str] = None, **kwargs) -> Any:
        operation_name = getattr(method, "__name__", "ec2_operation")
        self._logger.debug(
            "Calling EC2 operation %s with payload:\n%s",
            operation_name,
            json.dumps(kwargs, default=str, indent=2, sort_keys=True),
        )
        try:
            return method(**kwargs)
        except ClientError as e:
            raise self._convert_client_error(e, operation_name, entity_id) from e
        except (BotoConnectionError, HTTPClientError) as e:
            raise TransientError(
                f"EC2 {operation_name} connection failure: {e}", entity_id=entity_id
            ) from e

    def _convert_client_error(
        self, error: ClientError, operation_name: str, entity_id: Optional[str]
    ) -> ProviderError:
        """Convert AWS ClientError to a classified domain exception."""
        error_code = error.response.get("Error", {}).get("Code")
        error_message = error.response.get("Error", {}).get("Message", str(error))
        converted = self._classifier.to_exception(
            error_code, f"EC2 {operation_name} failed: {error_message}", entity_id=entity_id
        )
        log = self._logger.error if isinstance(converted, FatalProviderError) else self._logger.debug
        log(
            "EC2 %s failed: %s - %s",
            operation_name,
            error_code,
            error_message,
            extra={"error_code": error_code, "category": converted.category.value},
        )
        return converted

    def _to_network_interface(self, payload: dict[str, Any]) -> NetworkInterface:
        status = _effective_status(payload)
        attachment = payload.get("Attachment") or {}
        instance_id = attachment.get("InstanceId") if status == InterfaceStatus.IN_USE else None
        attach_time = attachment.get("AttachTime") if instance_id else None
        if attach_time is not None and hasattr(attach_time, "isoformat"):
            attach_time = attach_time.isoformat()

        tags = {tag["Key"]: tag["Value"] for tag in payload.get("TagSet", [])}

        return NetworkInterface(
            interface_id=payload["NetworkInterfaceId"],
            subnet_id=payload.get("SubnetId", ""),
            status=status,
            primary_ip_address=payload.get("PrivateIpAddress"),
            vpc_id=payload.get("VpcId"),
            availability_zone=payload.get("AvailabilityZone"),
            security_group_ids=tuple(group["GroupId"] for group in payload.get("Groups", [])),
            private_ip_addresses=tuple(
                PrivateIpAddress(
                    address=ip["PrivateIpAddress"],
                    primary=bool(ip.get("Primary")),
                    association=_to_association(ip.get("Association")),
                )
                for ip in payload.get("PrivateIpAddresses", [])
            ),
            association=_to_association(payload.get("Association")),
            name=tags.get(NAME_TAG),
            description=payload.get("Description"),
            attached_instance_id=instance_id,
            interface_type=payload.get("InterfaceType"),
            mac_address=payload.get("MacAddress"),
            requester_managed=bool(payload.get("RequesterManaged")),
            attachment_owner_id=attachment.get("InstanceOwnerId"),
            attach_time=attach_time,
            tags=tags,
        )


def _effective_status(payload: dict[str, Any]) -> InterfaceStatus:
    raw_status = (payload.get("Status") or "").lower()
    status = _STATUS_MAP.get(raw_status)
    if status is None:
        raise FatalProviderError(
            f"Unrecognized network interface status {raw_status!r}",
            entity_id=payload.get("NetworkInterfaceId"),
        )
    # Interfaces attached to a service (load balancer, NAT gateway) have an
    # owner but no instance; they are not plugged into any instance.
    attachment = payload.get("Attachment") or {}
    if status == InterfaceStatus.IN_USE and not attachment.get("InstanceId"):
        return InterfaceStatus.AVAILABLE
    return status


def _to_association(payload: Optional[dict[str, Any]]) -> Optional[PublicIpAssociation]:
    if not payload or not payload.get("PublicIp"):
        return None
    return PublicIpAssociation(
        allocation_id=payload.get("AllocationId"),
        public_ip=payload.get("PublicIp"),
    )


def _next_device_index(instance: dict[str, Any]) -> int:
    indexes = [
        eni.get("Attachment", {}).get("DeviceIndex", 0)
        for eni in instance.get("NetworkInterfaces", [])
    ]
    return max(indexes, default=0) + 1


def _build_filters(interface_filter: InterfaceFilter) -> list[dict[str, Any]]:
    candidates = [
        ("subnet-id", interface_filter.subnet_id),
        ("vpc-id", interface_filter.vpc_id),
        ("private-ip-address", interface_filter.primary_ip_address),
        ("group-id", interface_filter.security_group_id),
        (f"tag:{NAME_TAG}", interface_filter.name),
        ("interface-type", interface_filter.interface_type),
        ("attachment.instance-id", interface_filter.instance_id),
    ]
    filters = [
        {"Name": name, "Values": [value.strip()]} for name, value in candidates if value
    ]
    # A filter rather than NetworkInterfaceIds: unknown ids are skipped instead of failing
    if interface_filter.interface_ids:
        filters.append(
            {"Name": "network-interface-id", "Values": list(interface_filter.interface_ids)}
        )
    if interface_filter.status is not None:
        values = [raw for raw, status in _STATUS_MAP.items() if status == interface_filter.status]
        # in-use interfaces with no instance are reported as Available
        if interface_filter.status == InterfaceStatus.AVAILABLE:
            values.append("in-use")
        filters.append({"Name": "status", "Values": values})
    return filters
