from eni_lifecycle.application.services.attachment_reconciler import AttachmentReconciler
from eni_lifecycle.application.services.network_interface_reconciler import (
    NetworkInterfaceReconciler,
)

__all__: list[str] = ["AttachmentReconciler", "NetworkInterfaceReconciler"]
