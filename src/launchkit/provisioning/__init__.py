"""
Resource provisioning.

This package handles:
1. Filtering declared resources against the environment
2. Marking which resources must be downloaded and where they go
3. Downloading, verifying and retrying within each request's budget
"""

from .manager import DownloadPlan, DownloadStatus, ProvisioningManager, ResourceKind
from .provisioner import Provisioner

__all__ = [
    "DownloadPlan",
    "DownloadStatus",
    "ProvisioningManager",
    "ResourceKind",
    "Provisioner",
]
