"""Lifecycle reconciliation of network interfaces and their instance attachments."""

from eni_lifecycle.application.services import AttachmentReconciler, NetworkInterfaceReconciler
from eni_lifecycle.bootstrap import Reconcilers, build_reconcilers
from eni_lifecycle.config.settings import ReconcilerConfig, load_config

__version__ = "0.1.0"

__all__: list[str] = [
    "AttachmentReconciler",
    "NetworkInterfaceReconciler",
    "ReconcilerConfig",
    "Reconcilers",
    "build_reconcilers",
    "load_config",
]
