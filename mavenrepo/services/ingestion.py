"""
Handling of the uploads issued by ``mvn deploy``.

The deploy plugin sends one plain PUT per file, without any grouping:

1. the artifact itself (jar or war, possibly a ``-tests`` variant) and its
   checksums,
2. the pom and its checksums,
3. the version-level maven-metadata.xml and its checksums,
4. the artifact-level maven-metadata.xml and its checksums.

Only the artifact matters. Checksums and metadata are regenerated on read, and
a pom is only stored when the release consists of nothing but that pom
(``<packaging>pom</packaging>``, e.g. a parent or a BOM).
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Optional

from mavenrepo.data.repository import ArtifactRepository
from mavenrepo.domain.artifact import Artifact
from mavenrepo.domain.descriptor import (
    METADATA_FILE_NAME,
    POM_EXTENSION,
    coordinate_from_file,
    declared_packaging,
    is_checksum_name,
    is_test_file,
    packaging_from_name,
)
from mavenrepo.domain.errors import BadUploadError, RepositoryReadOnlyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    stored: bool
    artifact: Optional[Artifact] = None
    reason: Optional[str] = None


class UploadHandler:
    """Turns a single uploaded file into at most one repository artifact."""

    def __init__(self, repository: ArtifactRepository):
        self.repository = repository

    def handle_upload(self, target_path: str, body: Optional[bytes]) -> UploadResult:
        if not self.repository.is_writable:
            raise RepositoryReadOnlyError("The repository does not support creation of new artifacts")

        name = target_path.rstrip("/").rsplit("/", 1)[-1]
        if not name:
            raise BadUploadError("The upload target does not name a file")

        if name == METADATA_FILE_NAME or is_checksum_name(name):
            logger.debug("Ignoring generated file %s", target_path)
            return UploadResult(stored=False, reason="generated by the repository")

        if not body:
            raise BadUploadError("Expecting a content part")

        if packaging_from_name(name) == POM_EXTENSION:
            packaging = declared_packaging(body) or "jar"
            if packaging != POM_EXTENSION:
                logger.info("Ignoring companion pom %s (packaging %s)", target_path, packaging)
                return UploadResult(stored=False, reason=f"descriptor of a {packaging} artifact")

        # Raises DescriptorParseError (a BadUploadError) when the fields can't be found.
        coordinate = coordinate_from_file(name, body)

        artifact = self.repository.create(
            coordinate.group_id,
            coordinate.artifact_id,
            coordinate.version,
            packaging_from_name(name),
            io.BytesIO(body),
            is_test_file(name),
        )
        return UploadResult(stored=True, artifact=artifact)
