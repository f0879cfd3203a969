"""
Parsers for the descriptor formats embedded in Maven artifacts.

Three sources of coordinates are understood:

* a ``pom.xml`` body (standalone ``.pom`` files),
* the ``META-INF/maven/<groupId>/<artifactId>/pom.properties`` entry that
  Maven writes into every jar and war it builds,
* file names following the ``<artifactId>-<version>[-tests].<ext>`` convention,
  which only ever contribute the packaging and the test flag.

Everything here works on bytes or binary streams and raises
:class:`DescriptorParseError` when a required field is missing.
"""

from __future__ import annotations

import io
import xml.etree.ElementTree as ET
import zipfile
import zlib
from dataclasses import dataclass
from typing import BinaryIO, Dict, List, Optional, Tuple, Union

from mavenrepo.domain.errors import DescriptorParseError
from mavenrepo.domain.models import Coordinate

POM_EXTENSION = "pom"
BINARY_EXTENSIONS = ("jar", "war")
ARTIFACT_EXTENSIONS = BINARY_EXTENSIONS + (POM_EXTENSION,)
CHECKSUM_EXTENSIONS = ("md5", "sha1", "sha256", "sha512")
METADATA_FILE_NAME = "maven-metadata.xml"
TEST_SUFFIX = "-tests"

_MAVEN_META_PREFIX = "META-INF/maven/"

ArchiveSource = Union[bytes, BinaryIO]

# What ZipFile.read raises for damaged, encrypted or unsupported entries.
_ENTRY_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, RuntimeError, NotImplementedError)


@dataclass(frozen=True)
class PomInfo:
    group_id: str
    artifact_id: str
    version: str
    packaging: str


# ---------------------------------------------------------------------------
# File names
# ---------------------------------------------------------------------------


def split_extension(name: str) -> Tuple[str, str]:
    """
    Split ``name`` into (base, extension) on the last dot.

    The extension is returned without the dot; a name without a dot, or with
    only a leading dot, has an empty extension.
    """
    name = name.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    if dot <= 0:
        return name, ""
    return name[:dot], name[dot + 1:]


def packaging_from_name(name: str) -> str:
    return split_extension(name)[1].lower()


def strip_checksum_extension(name: str) -> str:
    base, ext = split_extension(name)
    if ext.lower() in CHECKSUM_EXTENSIONS:
        return base
    return name


def is_checksum_name(name: str) -> bool:
    return split_extension(name)[1].lower() in CHECKSUM_EXTENSIONS


def is_test_file(name: str) -> bool:
    """
    True for ``<anything>-tests.<ext>``, also when a checksum extension follows.

    >>> is_test_file("app-1.0-tests.jar.sha1")
    True
    """
    base, ext = split_extension(strip_checksum_extension(name))
    return bool(ext) and base.endswith(TEST_SUFFIX) and len(base) > len(TEST_SUFFIX)


def sibling_name(name: str, extension: str) -> str:
    """``app-1.0.pom`` -> ``app-1.0.jar`` for extension ``jar``."""
    base, _ = split_extension(name)
    return f"{base}.{extension}"


# ---------------------------------------------------------------------------
# pom.xml
# ---------------------------------------------------------------------------


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> Optional[str]:
    for child in element:
        if _local_name(child.tag) == name:
            text = (child.text or "").strip()
            return text or None
    return None


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def _parse_pom_root(data: bytes) -> ET.Element:
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise DescriptorParseError(f"Malformed pom: {exc}") from exc
    if _local_name(root.tag) != "project":
        raise DescriptorParseError("Malformed pom: root element is not <project>")
    return root


def declared_packaging(data: bytes) -> Optional[str]:
    """Return the ``<packaging>`` value of a pom, or None when it is not declared."""
    packaging = _child_text(_parse_pom_root(data), "packaging")
    return packaging.lower() if packaging else None


def parse_pom(data: bytes) -> PomInfo:
    """
    Extract the coordinate fields from a pom body.

    ``groupId`` and ``version`` are inherited from ``<parent>`` when the
    project does not declare them; packaging defaults to ``jar`` like Maven.
    """
    root = _parse_pom_root(data)
    parent = _child(root, "parent")

    group_id = _child_text(root, "groupId")
    version = _child_text(root, "version")
    if parent is not None:
        group_id = group_id or _child_text(parent, "groupId")
        version = version or _child_text(parent, "version")
    artifact_id = _child_text(root, "artifactId")
    packaging = (_child_text(root, "packaging") or "jar").lower()

    missing = [
        field
        for field, value in (("groupId", group_id), ("artifactId", artifact_id), ("version", version))
        if not value
    ]
    if missing:
        raise DescriptorParseError(f"The pom does not declare {', '.join(missing)}")
    return PomInfo(group_id=group_id, artifact_id=artifact_id, version=version, packaging=packaging)


# ---------------------------------------------------------------------------
# pom.properties
# ---------------------------------------------------------------------------


def parse_properties(text: str) -> Dict[str, str]:
    """
    Parse a Java ``.properties`` document.

    Supports ``key=value``, ``key: value`` and ``key value`` lines, ``#`` and
    ``!`` comments and blank lines. Line continuations and unicode escapes are
    not needed for pom.properties and are not interpreted.
    """
    result: Dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line[0] in "#!":
            continue
        key_end = len(line)
        for index, char in enumerate(line):
            if char in "=: \t":
                key_end = index
                break
        key = line[:key_end]
        rest = line[key_end:].lstrip(" \t")
        if rest[:1] in ("=", ":"):
            rest = rest[1:].lstrip(" \t")
        result[key] = rest
    return result


def _open_archive(source: ArchiveSource) -> Optional[zipfile.ZipFile]:
    stream = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    try:
        return zipfile.ZipFile(stream)
    except (zipfile.BadZipFile, OSError, ValueError):
        return None


def _maven_entries(archive: zipfile.ZipFile, file_name: str) -> List[Tuple[str, str]]:
    """(artifactId, entry name) for every META-INF/maven/<g>/<a>/<file_name> entry."""
    entries = []
    for entry in archive.namelist():
        if not entry.startswith(_MAVEN_META_PREFIX):
            continue
        parts = entry.split("/")
        if len(parts) == 5 and parts[4] == file_name:
            entries.append((parts[3], entry))
    return entries


def _pick_entry(entries: List[Tuple[str, str]], artifact_hint: Optional[str]) -> Optional[str]:
    if not entries:
        return None
    if artifact_hint:
        for artifact_id, entry in entries:
            if artifact_hint == artifact_id or artifact_hint.startswith(artifact_id + "-"):
                return entry
    return entries[0][1]


def read_archive_properties(source: ArchiveSource, artifact_hint: Optional[str] = None) -> Optional[Dict[str, str]]:
    """
    Return the embedded pom.properties of a jar/war as a dict.

    Shaded archives may carry several; the one whose artifactId prefixes
    ``artifact_hint`` (usually the file name) wins. Returns None when the
    source is not a zip archive or has no such entry, and raises
    :class:`DescriptorParseError` when the entry itself is damaged.
    """
    archive = _open_archive(source)
    if archive is None:
        return None
    with archive:
        entry = _pick_entry(_maven_entries(archive, "pom.properties"), artifact_hint)
        if entry is None:
            return None
        try:
            text = archive.read(entry).decode("iso-8859-1")
        except _ENTRY_ERRORS as exc:
            raise DescriptorParseError(f"Unreadable archive entry {entry}: {exc}") from exc
    return parse_properties(text)


def read_archive_pom(source: ArchiveSource, artifact_id: Optional[str] = None) -> Optional[bytes]:
    """Return the embedded pom.xml of a jar/war, or None when it is missing or unreadable."""
    archive = _open_archive(source)
    if archive is None:
        return None
    with archive:
        entry = _pick_entry(_maven_entries(archive, "pom.xml"), artifact_id)
        if entry is None:
            return None
        try:
            return archive.read(entry)
        except _ENTRY_ERRORS:
            return None


# ---------------------------------------------------------------------------
# Coordinates
# ---------------------------------------------------------------------------


def coordinate_from_properties(properties: Dict[str, str], packaging: str, is_test: bool) -> Coordinate:
    values = {key: (properties.get(key) or "").strip() for key in ("groupId", "artifactId", "version")}
    missing = [key for key, value in values.items() if not value]
    if missing:
        raise DescriptorParseError(f"pom.properties does not declare {', '.join(missing)}")
    return Coordinate(
        group_id=values["groupId"],
        artifact_id=values["artifactId"],
        version=values["version"],
        packaging=packaging,
        is_test=is_test,
    )


def coordinate_from_pom(data: bytes, is_test: bool = False) -> Coordinate:
    info = parse_pom(data)
    return Coordinate(
        group_id=info.group_id,
        artifact_id=info.artifact_id,
        version=info.version,
        packaging=info.packaging,
        is_test=is_test,
    )


def coordinate_from_file(name: str, source: ArchiveSource) -> Coordinate:
    """
    Derive the coordinate of a stored or uploaded file.

    ``.pom`` files are parsed as XML and carry their declared packaging;
    anything else must be an archive with an embedded pom.properties, and its
    packaging is the file extension.
    """
    packaging = packaging_from_name(name)
    is_test = is_test_file(name)
    if packaging == POM_EXTENSION:
        data = source if isinstance(source, (bytes, bytearray)) else source.read()
        return coordinate_from_pom(bytes(data), is_test=is_test)
    properties = read_archive_properties(source, artifact_hint=split_extension(name)[0])
    if properties is None:
        raise DescriptorParseError(f"Could not find the pom.properties file in {name}")
    return coordinate_from_properties(properties, packaging, is_test)
