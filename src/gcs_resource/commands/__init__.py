"""
Resource operations run against a StorageClient.

- check: report new versions
- in: fetch a version into a destination directory
- out: publish a file and report the version it became
"""

from .check import CheckCommand
from .in_command import InCommand
from .out_command import OutCommand

__all__ = [
    "CheckCommand",
    "InCommand",
    "OutCommand",
]
