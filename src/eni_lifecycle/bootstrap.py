"""Wire configuration, the EC2 client, the poller and both reconcilers."""

from typing import Any, NamedTuple, Optional

from eni_lifecycle.application.services.attachment_reconciler import AttachmentReconciler
from eni_lifecycle.application.services.network_interface_reconciler import (
    NetworkInterfaceReconciler,
)
from eni_lifecycle.config.settings import ReconcilerConfig, load_config
from eni_lifecycle.infrastructure.error.error_classifier import ErrorClassifier
from eni_lifecycle.infrastructure.logging.logger import setup_logging
from eni_lifecycle.infrastructure.resilience.poller import Poller
from eni_lifecycle.providers.aws.infrastructure.aws_client import AWSClient
from eni_lifecycle.providers.aws.infrastructure.ec2_network_interface_client import (
    EC2NetworkInterfaceClient,
)


class Reconcilers(NamedTuple):
    network_interfaces: NetworkInterfaceReconciler
    attachments: AttachmentReconciler


def build_reconcilers(
    config: Optional[ReconcilerConfig] = None, session: Optional[Any] = None
) -> Reconcilers:
    """
    Build both reconcilers against EC2.

    Args:
        config: Settings; loaded from files and environment when omitted
        session: Pre-built boto3 session

    Returns:
        Reconcilers: The interface and attachment reconcilers sharing one client
    """
    config = config or load_config()
    setup_logging(
        log_level=config.log_level,
        log_destination=config.log_destination,
        log_dir=config.log_dir,
        log_filename=config.log_filename,
    )

    client = EC2NetworkInterfaceClient(
        AWSClient(config, session=session), classifier=ErrorClassifier()
    )
    poller = Poller(config.poll_interval)
    return Reconcilers(
        network_interfaces=NetworkInterfaceReconciler(client, poller=poller, config=config),
        attachments=AttachmentReconciler(client, poller=poller, config=config),
    )
