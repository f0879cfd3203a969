from __future__ import annotations

import io

import pytest
from fastapi.testclient import TestClient

from mavenrepo.data.events import RecordingEventSink
from mavenrepo.data.repository import ArtifactRepository
from mavenrepo.domain.models import RepositoryConfig
from mavenrepo.factory import create_app
from mavenrepo.storage import FileSystemStorage


@pytest.fixture
def storage(tmp_path):
    return FileSystemStorage(tmp_path / "artifacts")


@pytest.fixture
def sink():
    return RecordingEventSink()


@pytest.fixture
def config():
    return RepositoryConfig(internal_groups=["com.example"])


@pytest.fixture
def repository(storage, config, sink):
    return ArtifactRepository(storage, config, sink)


@pytest.fixture
def client(repository):
    return TestClient(create_app(repository=repository))


@pytest.fixture
def put_file(storage):
    """Drop a file into the backing store behind the repository's back."""

    def _put(path: str, data: bytes) -> None:
        storage.write(path, io.BytesIO(data))

    return _put
