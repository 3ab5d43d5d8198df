from eni_lifecycle.domain.network_interface.models import (
    CreateInterfaceSpec,
    InterfaceAttributes,
    InterfaceFilter,
    InterfaceStatus,
    NetworkInterface,
    PrivateIpAddress,
    PublicIpAssociation,
)

__all__: list[str] = [
    "CreateInterfaceSpec",
    "InterfaceAttributes",
    "InterfaceFilter",
    "InterfaceStatus",
    "NetworkInterface",
    "PrivateIpAddress",
    "PublicIpAssociation",
]
