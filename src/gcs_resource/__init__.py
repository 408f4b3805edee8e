"""gcs-resource: version resolution and transfer for Google Cloud Storage artifacts."""

__version__ = "0.1.0"
