from eni_lifecycle.providers.aws.infrastructure.aws_client import AWSClient
from eni_lifecycle.providers.aws.infrastructure.ec2_network_interface_client import (
    EC2NetworkInterfaceClient,
)

__all__: list[str] = ["AWSClient", "EC2NetworkInterfaceClient"]
