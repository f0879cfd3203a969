"""
Generated repository data: maven-metadata.xml documents and checksum lines.

None of this is ever persisted; it is rebuilt from the index on every request.
"""

from __future__ import annotations

import enum
import hashlib
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import BinaryIO, Iterable, List, Optional

from mavenrepo.domain.artifact import Artifact

CHUNK_SIZE = 65536
SNAPSHOT_SUFFIX = "-SNAPSHOT"


class HashAlgorithm(str, enum.Enum):
    MD5 = "md5"
    SHA1 = "sha1"

    @classmethod
    def from_extension(cls, extension: str) -> Optional["HashAlgorithm"]:
        try:
            return cls(extension.lower())
        except ValueError:
            return None


# ---------------------------------------------------------------------------
# Checksums
# ---------------------------------------------------------------------------


def hash_stream(stream: BinaryIO, algorithm: HashAlgorithm) -> str:
    """Consume ``stream`` in chunks and return the lower-case hex digest."""
    hasher = hashlib.new(algorithm.value)
    for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
        hasher.update(chunk)
    return hasher.hexdigest()


def checksum_line(stream: BinaryIO, algorithm: HashAlgorithm, path: str, name: str) -> str:
    """
    Render ``<hex digest> <path>/<name>``, the format of .md5/.sha1 files.

    Clients only read the first token; the second documents what was hashed.
    """
    try:
        digest = hash_stream(stream, algorithm)
    finally:
        stream.close()
    path = path.strip("/")
    target = f"{path}/{name}" if path else name
    return f"{digest} {target}"


# ---------------------------------------------------------------------------
# maven-metadata.xml
# ---------------------------------------------------------------------------


def format_timestamp(value: datetime) -> str:
    """Maven's ``lastUpdated`` format: yyyyMMddHHmmss in UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y%m%d%H%M%S")


def _sub(parent: ET.Element, tag: str, text: Optional[str] = None) -> ET.Element:
    element = ET.SubElement(parent, tag)
    if text is not None:
        element.text = text
    return element


def _serialize(root: ET.Element) -> bytes:
    ET.indent(root)
    return ET.tostring(root, encoding="UTF-8", xml_declaration=True) + b"\n"


def build_group_metadata(group_id: str, artifact_id: str, artifacts: Iterable[Artifact]) -> Optional[bytes]:
    """
    Version listing for one group/artifact pair, or None if nothing matches.

    Versions keep the order in which the index encountered them. ``latest``
    and ``release`` are the versions of the most recently modified artifact,
    the latter ignoring snapshots.
    """
    matching: List[Artifact] = [
        a for a in artifacts if a.group_id == group_id and a.artifact_id == artifact_id
    ]
    if not matching:
        return None

    versions: List[str] = []
    for artifact in matching:
        if artifact.version not in versions:
            versions.append(artifact.version)

    by_age = sorted(matching, key=lambda a: a.last_modified)
    latest = by_age[-1].version
    releases = [a for a in by_age if not a.version.endswith(SNAPSHOT_SUFFIX)]

    root = ET.Element("metadata")
    _sub(root, "groupId", group_id)
    _sub(root, "artifactId", artifact_id)
    versioning = _sub(root, "versioning")
    _sub(versioning, "latest", latest)
    if releases:
        _sub(versioning, "release", releases[-1].version)
    versions_element = _sub(versioning, "versions")
    for version in versions:
        _sub(versions_element, "version", version)
    _sub(versioning, "lastUpdated", format_timestamp(by_age[-1].last_modified))
    return _serialize(root)


def build_version_metadata(artifact: Artifact) -> bytes:
    """Metadata for a single version directory."""
    root = ET.Element("metadata")
    _sub(root, "groupId", artifact.group_id)
    _sub(root, "artifactId", artifact.artifact_id)
    _sub(root, "version", artifact.version)
    versioning = _sub(root, "versioning")
    _sub(versioning, "lastUpdated", format_timestamp(artifact.last_modified))
    return _serialize(root)
