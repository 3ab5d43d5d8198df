from eni_lifecycle.domain.ports.network_interface_client import NetworkInterfaceClient

__all__: list[str] = ["NetworkInterfaceClient"]
