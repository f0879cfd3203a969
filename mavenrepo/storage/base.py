from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import BinaryIO, Iterator, Optional


def join_path(*parts: str) -> str:
    """Join relative storage paths with '/' and drop empty components."""
    segments = []
    for part in parts:
        segments.extend(s for s in part.split("/") if s)
    return "/".join(segments)


def parent_path(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ""


def base_name(path: str) -> str:
    return path.rsplit("/", 1)[-1]


class StorageBackend(ABC):
    """
    Abstract base class for the hierarchical store holding the artifacts.

    Resources are addressed by relative POSIX paths; ``""`` is the root
    container. The path string is also the identity of a resource, which is
    what the repository index is keyed on.
    """

    read_only: bool = False

    @abstractmethod
    def iter_children(self, path: str = "") -> Iterator[str]:
        """Yield the paths of the direct children of a container."""
        pass

    @abstractmethod
    def is_container(self, path: str) -> bool:
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def open_read(self, path: str) -> BinaryIO:
        """Open a leaf resource for reading. Every call returns a fresh stream."""
        pass

    @abstractmethod
    def write(self, path: str, stream: BinaryIO) -> None:
        """
        Create or overwrite a leaf resource with the content of ``stream``.
        Missing parent containers are created.
        """
        pass

    def last_modified(self, path: str) -> Optional[datetime]:
        """Modification time of a resource, or None if the store does not track it."""
        return None

    def describe(self, path: str) -> str:
        """Human readable location, used in log messages."""
        return path or "/"
