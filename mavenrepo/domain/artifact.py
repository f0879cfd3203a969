from __future__ import annotations

import io
import logging
from datetime import datetime, timezone
from typing import BinaryIO, Optional

from mavenrepo.domain.descriptor import POM_EXTENSION, coordinate_from_file, read_archive_pom
from mavenrepo.domain.models import Coordinate
from mavenrepo.storage.base import StorageBackend, base_name, join_path, parent_path

logger = logging.getLogger(__name__)


class Artifact:
    """
    A coordinate materialized by a resource on the backing store.

    The coordinate is read from the resource once, at construction; content
    and descriptor streams are re-opened on every call so callers can consume
    them independently. Instances are never mutated: replacing an artifact
    means building a new one.
    """

    __slots__ = ("_storage", "_resource_id", "_coordinate", "_created_at")

    def __init__(self, storage: StorageBackend, resource_id: str, coordinate: Optional[Coordinate] = None):
        self._storage = storage
        self._resource_id = join_path(resource_id)
        self._created_at = datetime.now(timezone.utc)
        if coordinate is None:
            with storage.open_read(self._resource_id) as stream:
                coordinate = coordinate_from_file(self.file_name, stream)
        self._coordinate = coordinate

    @property
    def resource_id(self) -> str:
        return self._resource_id

    @property
    def file_name(self) -> str:
        return base_name(self._resource_id)

    @property
    def coordinate(self) -> Coordinate:
        return self._coordinate

    @property
    def group_id(self) -> str:
        return self._coordinate.group_id

    @property
    def artifact_id(self) -> str:
        return self._coordinate.artifact_id

    @property
    def version(self) -> str:
        return self._coordinate.version

    @property
    def packaging(self) -> str:
        return self._coordinate.packaging

    @property
    def is_test(self) -> bool:
        return self._coordinate.is_test

    @property
    def artifact_name(self) -> str:
        return self._coordinate.file_name

    @property
    def descriptor_name(self) -> str:
        return self._coordinate.descriptor_name

    @property
    def last_modified(self) -> datetime:
        return self._storage.last_modified(self._resource_id) or self._created_at

    def content(self) -> BinaryIO:
        return self._storage.open_read(self._resource_id)

    def descriptor(self) -> Optional[BinaryIO]:
        """
        Open the pom describing this artifact, or return None if there is none.

        A pom-packaged artifact is its own descriptor. Otherwise a stored
        ``<artifactId>-<version>.pom`` next to the file wins over the pom.xml
        Maven embeds in the archive.
        """
        if self.packaging == POM_EXTENSION:
            return self.content()
        sibling = join_path(parent_path(self._resource_id), self.descriptor_name)
        if sibling != self._resource_id and self._storage.exists(sibling):
            return self._storage.open_read(sibling)
        with self.content() as stream:
            embedded = read_archive_pom(stream, self.artifact_id)
        if embedded is None:
            logger.debug("No pom available for %s", self)
            return None
        return io.BytesIO(embedded)

    def __repr__(self) -> str:
        return f"Artifact({self._coordinate}, resource={self._resource_id!r})"

    def __str__(self) -> str:
        return self._storage.describe(self._resource_id)
