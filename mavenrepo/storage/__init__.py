"""Backing stores the repository engine can read artifacts from and write them to."""

from mavenrepo.storage.base import StorageBackend
from mavenrepo.storage.filesystem import FileSystemStorage
from mavenrepo.storage.memory import MemoryStorage

__all__ = ["StorageBackend", "FileSystemStorage", "MemoryStorage"]
