from __future__ import annotations

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from mavenrepo.storage.base import StorageBackend, join_path

logger = logging.getLogger(__name__)


class FileSystemStorage(StorageBackend):
    """Artifacts stored as plain files below a root directory."""

    def __init__(self, root_dir: Path, read_only: bool = False):
        self._root_dir = Path(root_dir)
        self.read_only = read_only

        # Ensure root directory exists
        if not self._root_dir.exists() and not read_only:
            self._root_dir.mkdir(parents=True, exist_ok=True)

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    def _resolve(self, path: str) -> Path:
        relative = join_path(path)
        if any(part == ".." for part in relative.split("/")):
            raise ValueError(f"Path escapes the storage root: {path}")
        return self._root_dir / relative if relative else self._root_dir

    def iter_children(self, path: str = "") -> Iterator[str]:
        directory = self._resolve(path)
        if not directory.is_dir():
            return
        # Directory order is platform dependent; sort for a stable encounter order.
        for child in sorted(directory.iterdir(), key=lambda p: p.name):
            yield join_path(path, child.name)

    def is_container(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def open_read(self, path: str) -> BinaryIO:
        return self._resolve(path).open("rb")

    def write(self, path: str, stream: BinaryIO) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("wb") as fh:
            shutil.copyfileobj(stream, fh, 65536)
        logger.debug("Wrote %s", target)

    def last_modified(self, path: str) -> Optional[datetime]:
        try:
            mtime = self._resolve(path).stat().st_mtime
        except FileNotFoundError:
            return None
        return datetime.fromtimestamp(mtime, tz=timezone.utc)

    def describe(self, path: str) -> str:
        return str(self._resolve(path))
