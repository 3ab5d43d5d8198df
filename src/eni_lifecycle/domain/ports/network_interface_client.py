"""Port for the provider client consumed by the reconcilers."""

from abc import ABC, abstractmethod

from eni_lifecycle.domain.attachment.models import Instance
from eni_lifecycle.domain.network_interface.models import (
    CreateInterfaceSpec,
    InterfaceAttributes,
    InterfaceFilter,
    NetworkInterface,
)


class NetworkInterfaceClient(ABC):
    """
    Synchronous provider operations on network interfaces and instances.

    Every method performs exactly one logical provider request and raises a
    classified ``ProviderError`` subclass on failure, so callers never see raw
    SDK exceptions.
    """

    @abstractmethod
    def create_interface(self, spec: CreateInterfaceSpec) -> str:
        """
        Request creation of a network interface.

        Args:
            spec: Desired placement, security groups and descriptive fields

        Returns:
            str: Provider-assigned interface id
        """

    @abstractmethod
    def describe_interface(self, interface_id: str) -> NetworkInterface:
        """
        Read one network interface.

        Raises:
            EntityNotFoundError: If the provider does not know the id
        """

    @abstractmethod
    def modify_interface_attributes(
        self, interface_id: str, attributes: InterfaceAttributes
    ) -> None:
        """Apply the non-None fields of ``attributes``."""

    @abstractmethod
    def delete_interface(self, interface_id: str) -> None:
        """Request deletion of a network interface."""

    @abstractmethod
    def attach_interface(self, interface_id: str, instance_id: str) -> None:
        """Request attachment of an interface to an instance."""

    @abstractmethod
    def detach_interface(self, interface_id: str, instance_id: str) -> None:
        """Request detachment of an interface from an instance."""

    @abstractmethod
    def describe_instance(self, instance_id: str) -> Instance:
        """
        Read an instance and its interface membership.

        Raises:
            EntityNotFoundError: If the provider does not know the instance
        """

    @abstractmethod
    def list_interfaces(
        self, interface_filter: InterfaceFilter, page_number: int, page_size: int
    ) -> list[NetworkInterface]:
        """
        Return one page of interfaces matching the filter.

        Args:
            interface_filter: Listing criteria
            page_number: 1-based page cursor
            page_size: Maximum number of entries per page

        Returns:
            A page; a page shorter than ``page_size`` is the last one
        """
