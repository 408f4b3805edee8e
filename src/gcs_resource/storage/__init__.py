"""
Object storage backends for gcs-resource.

- interfaces: the StorageClient capability interface
- gcs: Google Cloud Storage implementation
"""

from .gcs import GCSClient, gcs_url
from .interfaces import StorageClient

__all__ = [
    "StorageClient",
    "GCSClient",
    "gcs_url",
]
