"""
Translation of request paths into repository coordinates.

Maven addresses ``com.example:app:2.1`` as ``com/example/app/2.1/...`` while
the HTML pages of this server (and some older clients) use the dotted form
``com.example/app/2.1/...``. Both are normalized here into one
:class:`RepositoryRequest` whose canonical path always uses the dotted group.

Normalization is a single pass: the number of group segments is the path
length minus 3 for files and minus 2 for an artifact-level
maven-metadata.xml, so no request is ever re-dispatched.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, List, Optional

from mavenrepo.domain.descriptor import METADATA_FILE_NAME, is_test_file

STYLESHEET_NAME = "style.css"
METADATA_NAMES = (METADATA_FILE_NAME, METADATA_FILE_NAME + ".md5", METADATA_FILE_NAME + ".sha1")

VersionOracle = Callable[[str, str, str], bool]


class RequestKind(str, enum.Enum):
    LIST_GROUPS = "list_groups"
    STYLESHEET = "stylesheet"
    LIST_ARTIFACTS = "list_artifacts"
    LIST_VERSIONS = "list_versions"
    GROUP_METADATA = "group_metadata"
    SHOW_VERSION = "show_version"
    FILE = "file"


@dataclass(frozen=True)
class RepositoryRequest:
    kind: RequestKind
    group_id: Optional[str] = None
    artifact_id: Optional[str] = None
    version: Optional[str] = None
    file_name: Optional[str] = None

    @property
    def is_test(self) -> bool:
        return bool(self.file_name) and is_test_file(self.file_name)

    @property
    def directory(self) -> str:
        """Canonical path of the container the request points into."""
        parts = [self.group_id, self.artifact_id, self.version]
        if self.kind is RequestKind.STYLESHEET:
            parts = []
        return "/".join(p for p in parts if p)

    @property
    def path(self) -> str:
        """Canonical path of the request, group in dotted form."""
        if self.kind is RequestKind.STYLESHEET:
            return STYLESHEET_NAME
        if self.file_name:
            return f"{self.directory}/{self.file_name}" if self.directory else self.file_name
        return self.directory


def split_path(path: Optional[str]) -> List[str]:
    """Split a request path into segments, ignoring leading, trailing and doubled slashes."""
    if not path:
        return []
    return [segment for segment in path.split("/") if segment]


def is_metadata_name(name: str) -> bool:
    return name in METADATA_NAMES


def resolve_path(path: Optional[str], knows_version: Optional[VersionOracle] = None) -> RepositoryRequest:
    """
    Resolve ``path`` (relative to the mount point) into a repository request.

    ``<a>/<b>/<c>/<d>/maven-metadata.xml`` is ambiguous: it is either the
    version-level metadata of ``a.b:c:d`` or the artifact-level metadata of
    ``a.b.c:d``. When ``knows_version`` is supplied it decides: the
    version-level reading is used only for a version the index knows. Without
    it, four segments are read as version-level and five or more as
    artifact-level.
    """
    segments = split_path(path)
    count = len(segments)

    if count == 0:
        return RepositoryRequest(RequestKind.LIST_GROUPS)
    if count == 1:
        if segments[0] == STYLESHEET_NAME:
            return RepositoryRequest(RequestKind.STYLESHEET)
        return RepositoryRequest(RequestKind.LIST_ARTIFACTS, group_id=segments[0])
    if count == 2:
        return RepositoryRequest(RequestKind.LIST_VERSIONS, group_id=segments[0], artifact_id=segments[1])
    if count == 3:
        group_id, artifact_id, last = segments
        if is_metadata_name(last):
            return RepositoryRequest(
                RequestKind.GROUP_METADATA, group_id=group_id, artifact_id=artifact_id, file_name=last
            )
        return RepositoryRequest(
            RequestKind.SHOW_VERSION, group_id=group_id, artifact_id=artifact_id, version=last
        )

    file_request = RepositoryRequest(
        RequestKind.FILE,
        group_id=".".join(segments[:-3]),
        artifact_id=segments[-3],
        version=segments[-2],
        file_name=segments[-1],
    )
    if not is_metadata_name(segments[-1]):
        return file_request

    metadata_request = RepositoryRequest(
        RequestKind.GROUP_METADATA,
        group_id=".".join(segments[:-2]),
        artifact_id=segments[-2],
        file_name=segments[-1],
    )
    # Deep groups make even five or more segments ambiguous
    # (com/example/app/2.1/maven-metadata.xml is version level), so the index
    # decides whenever it is available instead of the segment count.
    if knows_version is not None:
        if knows_version(file_request.group_id, file_request.artifact_id, file_request.version):
            return file_request
        return metadata_request
    return file_request if count == 4 else metadata_request
