import hashlib
import io
import os
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone

import pytest

from builders import build_archive
from mavenrepo.data.metadata import (
    HashAlgorithm,
    build_group_metadata,
    build_version_metadata,
    checksum_line,
    format_timestamp,
    hash_stream,
)
from mavenrepo.domain.artifact import Artifact


class _TrackingStream(io.BytesIO):
    closed_by_caller = False

    def close(self):
        self.closed_by_caller = True
        super().close()


@pytest.fixture
def dated(storage, put_file):
    """Store an archive and force its modification time."""

    def _dated(group_id, artifact_id, version, when):
        path = f"{group_id.replace('.', '/')}/{artifact_id}/{version}/{artifact_id}-{version}.jar"
        put_file(path, build_archive(group_id, artifact_id, version))
        os.utime(storage.root_dir / path, (when.timestamp(), when.timestamp()))
        return Artifact(storage, path)

    return _dated


def _text(root, path):
    return [element.text for element in root.findall(path)]


def test_hash_algorithm_from_extension():
    assert HashAlgorithm.from_extension("SHA1") is HashAlgorithm.SHA1
    assert HashAlgorithm.from_extension("md5") is HashAlgorithm.MD5
    assert HashAlgorithm.from_extension("sha256") is None


def test_hash_stream_handles_large_input():
    data = os.urandom(200_000)

    assert hash_stream(io.BytesIO(data), HashAlgorithm.SHA1) == hashlib.sha1(data).hexdigest()


@pytest.mark.parametrize("algorithm, length", [(HashAlgorithm.MD5, 32), (HashAlgorithm.SHA1, 40)])
def test_checksum_line_format(algorithm, length):
    line = checksum_line(io.BytesIO(b"payload"), algorithm, "com.example/app/2.1", "app-2.1.war")

    digest, target = line.split(" ")
    assert len(digest) == length
    assert digest == hashlib.new(algorithm.value, b"payload").hexdigest()
    assert target == "com.example/app/2.1/app-2.1.war"


def test_checksum_line_closes_the_stream():
    stream = _TrackingStream(b"x")

    checksum_line(stream, HashAlgorithm.MD5, "", "maven-metadata.xml")

    assert stream.closed_by_caller


def test_checksum_line_without_directory():
    line = checksum_line(io.BytesIO(b""), HashAlgorithm.MD5, "/", "style.css")

    assert line == "d41d8cd98f00b204e9800998ecf8427e style.css"


def test_format_timestamp_converts_to_utc():
    value = datetime(2024, 3, 1, 1, 30, 5, tzinfo=timezone(timedelta(hours=2)))

    assert format_timestamp(value) == "20240229233005"


def test_group_metadata_lists_versions(dated):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    artifacts = [
        dated("com.example", "app", "1.0", base),
        dated("com.example", "app", "2.0", base + timedelta(days=2)),
        dated("com.example", "app", "2.1-SNAPSHOT", base + timedelta(days=3)),
        dated("com.example", "other", "9.9", base + timedelta(days=9)),
    ]

    data = build_group_metadata("com.example", "app", artifacts)

    assert data.startswith(b"<?xml")
    root = ET.fromstring(data)
    assert root.tag == "metadata"
    assert _text(root, "groupId") == ["com.example"]
    assert _text(root, "artifactId") == ["app"]
    assert _text(root, "versioning/versions/version") == ["1.0", "2.0", "2.1-SNAPSHOT"]
    assert _text(root, "versioning/latest") == ["2.1-SNAPSHOT"]
    assert _text(root, "versioning/release") == ["2.0"]
    assert _text(root, "versioning/lastUpdated") == ["20240104000000"]


def test_group_metadata_latest_follows_modification_time(dated):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    artifacts = [
        dated("g", "a", "2.0", base),
        dated("g", "a", "1.5", base + timedelta(hours=1)),
    ]

    root = ET.fromstring(build_group_metadata("g", "a", artifacts))

    # versions keep encounter order; latest is the freshest upload
    assert _text(root, "versioning/versions/version") == ["2.0", "1.5"]
    assert _text(root, "versioning/latest") == ["1.5"]


def test_group_metadata_only_snapshots_has_no_release(dated):
    artifacts = [dated("g", "a", "1.0-SNAPSHOT", datetime(2024, 1, 1, tzinfo=timezone.utc))]

    root = ET.fromstring(build_group_metadata("g", "a", artifacts))

    assert root.find("versioning/release") is None


def test_group_metadata_for_unknown_artifact(dated):
    artifacts = [dated("g", "a", "1", datetime(2024, 1, 1, tzinfo=timezone.utc))]

    assert build_group_metadata("g", "missing", artifacts) is None
    assert build_group_metadata("g", "a", []) is None


def test_version_metadata(dated):
    artifact = dated("com.example", "app", "2.1", datetime(2023, 12, 31, 23, 59, 59, tzinfo=timezone.utc))

    root = ET.fromstring(build_version_metadata(artifact))

    assert _text(root, "groupId") == ["com.example"]
    assert _text(root, "artifactId") == ["app"]
    assert _text(root, "version") == ["2.1"]
    assert _text(root, "versioning/lastUpdated") == ["20231231235959"]
