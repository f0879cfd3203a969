from __future__ import annotations

import logging
import threading
from typing import BinaryIO, Dict, List, Optional, Set

from mavenrepo.data.events import (
    ArtifactCreatedEvent,
    ArtifactDeletedEvent,
    EventSink,
    NullEventSink,
)
from mavenrepo.data.metadata import build_group_metadata, build_version_metadata
from mavenrepo.domain.artifact import Artifact
from mavenrepo.domain.descriptor import (
    ARTIFACT_EXTENSIONS,
    BINARY_EXTENSIONS,
    POM_EXTENSION,
    packaging_from_name,
    sibling_name,
)
from mavenrepo.domain.errors import (
    DescriptorParseError,
    RepositoryReadOnlyError,
    StorageFailureError,
)
from mavenrepo.domain.models import Coordinate, RepositoryConfig
from mavenrepo.storage.base import StorageBackend, base_name, join_path

logger = logging.getLogger(__name__)


class ArtifactRepository:
    """
    In-memory index of the artifacts found on a backing store.

    The index maps the storage path of every jar, war and standalone pom to
    its :class:`Artifact`, in the order the files were encountered. ``scan``
    only ever adds entries; stale entries for files removed behind the
    server's back stay until :meth:`rebuild`. Files superseded by an upload
    of the same coordinate to its canonical path are never indexed again.

    A single re-entrant lock guards scanning and the read-modify-write-notify
    sequence of :meth:`create`. Readers copy the index under the same lock, so
    they may see a slightly old index but never a half-updated one.
    """

    def __init__(
        self,
        storage: StorageBackend,
        config: Optional[RepositoryConfig] = None,
        event_sink: Optional[EventSink] = None,
    ):
        self.storage = storage
        self.config = config or RepositoryConfig()
        self.event_sink = event_sink or NullEventSink()
        self._artifacts: Dict[str, Artifact] = {}
        # files at other paths whose coordinate was later uploaded again
        self._superseded: Set[str] = set()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def scan(self, recursive: bool = True) -> int:
        """
        Index every artifact on the store that is not indexed yet.

        Returns the number of new entries.
        """
        with self._lock:
            try:
                added = self._scan_container("", recursive)
            except OSError as exc:
                raise StorageFailureError(f"Failed to scan the repository: {exc}") from exc
        if added:
            logger.debug("Scan indexed %d new artifact(s), %d in total", added, len(self._artifacts))
        return added

    def rebuild(self) -> int:
        """Drop the whole index and scan from scratch, still skipping superseded files."""
        with self._lock:
            self._artifacts.clear()
            return self.scan(recursive=True)

    def _scan_container(self, container: str, recursive: bool) -> int:
        added = 0
        for child in self.storage.iter_children(container):
            name = base_name(child)
            extension = packaging_from_name(name)
            if extension in ARTIFACT_EXTENSIONS and not self.storage.is_container(child):
                if child in self._artifacts or child in self._superseded:
                    continue
                try:
                    artifact = Artifact(self.storage, child)
                except DescriptorParseError as exc:
                    logger.warning("Skipping %s: %s", self.storage.describe(child), exc)
                    continue
                if extension == POM_EXTENSION and not self._is_standalone_pom(artifact, container):
                    continue
                self._artifacts[child] = artifact
                added += 1
            elif recursive and self.storage.is_container(child):
                added += self._scan_container(child, recursive)
        return added

    def _is_standalone_pom(self, artifact: Artifact, container: str) -> bool:
        # A pom that describes a jar or war is decoration, not an artifact.
        if artifact.packaging != POM_EXTENSION:
            return False
        for extension in BINARY_EXTENSIONS:
            if self.storage.exists(join_path(container, sibling_name(artifact.file_name, extension))):
                return False
        return True

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_artifacts(self) -> List[Artifact]:
        with self._lock:
            return list(self._artifacts.values())

    def list_groups(self) -> List[str]:
        groups: List[str] = []
        for artifact in self.get_artifacts():
            if artifact.group_id not in groups:
                groups.append(artifact.group_id)
        return groups

    def list_artifacts(self, group_id: str) -> List[str]:
        names: List[str] = []
        for artifact in self.get_artifacts():
            if artifact.group_id == group_id and artifact.artifact_id not in names:
                names.append(artifact.artifact_id)
        return names

    def list_versions(self, group_id: str, artifact_id: str) -> List[str]:
        versions: List[str] = []
        for artifact in self.get_artifacts():
            if (
                artifact.group_id == group_id
                and artifact.artifact_id == artifact_id
                and artifact.version not in versions
            ):
                versions.append(artifact.version)
        return versions

    def get_artifact(self, group_id: str, artifact_id: str, version: str, is_test: bool = False) -> Optional[Artifact]:
        """
        The artifact at a coordinate.

        When several files carry the same coordinate, the one at the
        canonical Maven 2 location wins, otherwise the first encountered.
        """
        found = None
        for artifact in self.get_artifacts():
            if (
                artifact.group_id == group_id
                and artifact.artifact_id == artifact_id
                and artifact.version == version
                and artifact.is_test == is_test
            ):
                if artifact.resource_id == artifact.coordinate.storage_path:
                    return artifact
                if found is None:
                    found = artifact
        return found

    def has_version(self, group_id: str, artifact_id: str, version: str) -> bool:
        return any(
            a.group_id == group_id and a.artifact_id == artifact_id and a.version == version
            for a in self.get_artifacts()
        )

    def has_artifact(self, group_id: str, artifact_id: str) -> bool:
        return any(a.group_id == group_id and a.artifact_id == artifact_id for a in self.get_artifacts())

    def get_metadata(self, group_id: str, artifact_id: str) -> Optional[bytes]:
        """maven-metadata.xml listing every indexed version of group:artifact."""
        return build_group_metadata(group_id, artifact_id, self.get_artifacts())

    def get_artifact_metadata(self, artifact: Artifact) -> bytes:
        """maven-metadata.xml of a single version directory."""
        return build_version_metadata(artifact)

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    @property
    def is_writable(self) -> bool:
        return not (self.config.read_only or self.storage.read_only)

    def create(
        self,
        group_id: str,
        artifact_id: str,
        version: str,
        packaging: str,
        content: BinaryIO,
        is_test: bool = False,
    ) -> Artifact:
        """
        Store ``content`` as the artifact at the given coordinate.

        An artifact already present at the coordinate is reported to the
        event sink as deleted and then overwritten; the last writer wins.
        """
        if not self.is_writable:
            raise RepositoryReadOnlyError("The repository does not support creation of new artifacts")

        coordinate = Coordinate(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            packaging=packaging,
            is_test=is_test,
        )
        is_internal = self.config.is_internal_group(group_id)
        path = coordinate.storage_path

        with self._lock:
            current = self.get_artifact(group_id, artifact_id, version, is_test)
            if current is not None:
                logger.info("Replacing %s", current.coordinate)
                self.event_sink.publish(ArtifactDeletedEvent(current, is_internal))

            try:
                self.storage.write(path, content)
            except OSError as exc:
                raise StorageFailureError(f"Could not write {path}: {exc}") from exc

            artifact = Artifact(self.storage, path, coordinate)
            kept: Dict[str, Artifact] = {}
            for key, value in self._artifacts.items():
                if key == path:
                    continue
                if self._same_slot(value, coordinate):
                    self._superseded.add(key)
                    continue
                kept[key] = value
            kept[path] = artifact
            self._artifacts = kept
            self._superseded.discard(path)

            logger.info("Created %s at %s", coordinate, self.storage.describe(path))
            self.event_sink.publish(ArtifactCreatedEvent(artifact, is_internal))
        return artifact

    @staticmethod
    def _same_slot(artifact: Artifact, coordinate: Coordinate) -> bool:
        return (
            artifact.group_id == coordinate.group_id
            and artifact.artifact_id == coordinate.artifact_id
            and artifact.version == coordinate.version
            and artifact.is_test == coordinate.is_test
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._artifacts)

    def __repr__(self) -> str:
        return f"ArtifactRepository(storage={self.storage!r}, artifacts={len(self)})"
