from __future__ import annotations

import io
import threading
from typing import BinaryIO, Dict, Iterator

from mavenrepo.storage.base import StorageBackend, join_path, parent_path


class MemoryStorage(StorageBackend):
    """
    Dictionary-backed store.

    Does not track modification times, so artifacts read from it report the
    moment they were loaded into the index.
    """

    def __init__(self, files: Dict[str, bytes] | None = None, read_only: bool = False):
        self._files: Dict[str, bytes] = {}
        self._lock = threading.Lock()
        self.read_only = read_only
        for path, data in (files or {}).items():
            self._files[join_path(path)] = bytes(data)

    def _containers(self) -> set:
        containers = {""}
        for path in self._files:
            parent = parent_path(path)
            while parent:
                containers.add(parent)
                parent = parent_path(parent)
        return containers

    def iter_children(self, path: str = "") -> Iterator[str]:
        path = join_path(path)
        with self._lock:
            names = set(self._files) | self._containers()
        children = sorted(p for p in names if p and parent_path(p) == path)
        return iter(children)

    def is_container(self, path: str) -> bool:
        with self._lock:
            return join_path(path) in self._containers()

    def exists(self, path: str) -> bool:
        path = join_path(path)
        with self._lock:
            return path in self._files or path in self._containers()

    def open_read(self, path: str) -> BinaryIO:
        with self._lock:
            try:
                data = self._files[join_path(path)]
            except KeyError:
                raise FileNotFoundError(path) from None
        return io.BytesIO(data)

    def write(self, path: str, stream: BinaryIO) -> None:
        data = stream.read()
        with self._lock:
            self._files[join_path(path)] = data
