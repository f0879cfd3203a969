import json
import logging

import pytest

from mavenrepo.core.dependencies import (
    DATA_ROOT_ENV_VAR,
    get_data_dir,
    load_repository_config,
    resolve_storage_dir,
)
from mavenrepo.domain.models import Coordinate, RepositoryConfig
from mavenrepo.factory import build_repository, create_app
from mavenrepo.logging_config import configure_logging


def test_defaults_are_written_back(tmp_path):
    config = load_repository_config(tmp_path)

    assert config.mount_path == "/maven"
    assert config.storage_dir == "artifacts"
    assert not config.read_only
    saved = json.loads((tmp_path / "repository.json").read_text(encoding="utf-8"))
    assert saved["mount_path"] == "/maven"
    assert "created_at" in saved


def test_overrides_are_kept_and_missing_fields_filled(tmp_path):
    (tmp_path / "repository.json").write_text(
        json.dumps({"read_only": True, "internal_groups": ["com.example"]}), encoding="utf-8"
    )

    config = load_repository_config(tmp_path)

    assert config.read_only
    assert config.internal_groups == ["com.example"]
    saved = json.loads((tmp_path / "repository.json").read_text(encoding="utf-8"))
    assert saved["legacy_binary_checksums"] is False


def test_broken_file_falls_back_to_defaults(tmp_path, caplog):
    (tmp_path / "repository.json").write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        config = load_repository_config(tmp_path)

    assert config == RepositoryConfig(created_at=config.created_at)
    assert "repository.json" in caplog.text


def test_invalid_values_fall_back_to_defaults(tmp_path):
    (tmp_path / "repository.json").write_text(json.dumps({"read_only": "maybe"}), encoding="utf-8")

    assert load_repository_config(tmp_path).read_only is False


def test_data_dir_from_environment(tmp_path, monkeypatch):
    target = tmp_path / "nested" / "data"
    monkeypatch.setenv(DATA_ROOT_ENV_VAR, str(target))

    assert get_data_dir() == target
    assert target.is_dir()


def test_storage_dir_resolution(tmp_path):
    relative = RepositoryConfig(storage_dir="files")
    absolute = RepositoryConfig(storage_dir=str(tmp_path / "elsewhere"))

    assert resolve_storage_dir(tmp_path / "data", relative) == tmp_path / "data" / "files"
    assert resolve_storage_dir(tmp_path / "data", absolute) == tmp_path / "elsewhere"


@pytest.mark.parametrize(
    "value, expected",
    [("/maven", "/maven"), ("maven/", "/maven"), ("/repo/releases/", "/repo/releases"), ("/", ""), ("", "")],
)
def test_mount_path_normalization(value, expected):
    assert RepositoryConfig(mount_path=value).mount_path == expected


def test_internal_groups_match_prefixes():
    config = RepositoryConfig(internal_groups=["com.example", " org.acme. "])

    assert config.is_internal_group("com.example")
    assert config.is_internal_group("com.example.tools")
    assert config.is_internal_group("org.acme.build")
    assert not config.is_internal_group("com.examples")
    assert not config.is_internal_group("org")


def test_coordinate_paths():
    coordinate = Coordinate(group_id="com.example", artifact_id="app", version="2.1", packaging="WAR", is_test=True)

    assert coordinate.packaging == "war"
    assert coordinate.group_path == "com/example"
    assert coordinate.file_name == "app-2.1-tests.war"
    assert coordinate.descriptor_name == "app-2.1.pom"
    assert coordinate.storage_path == "com/example/app/2.1/app-2.1-tests.war"
    assert str(coordinate) == "com.example:app:war:tests:2.1"


def test_build_repository_honours_read_only(tmp_path):
    repository = build_repository(RepositoryConfig(read_only=True), tmp_path)

    assert not repository.is_writable
    assert repository.storage.read_only


def test_create_app_from_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv(DATA_ROOT_ENV_VAR, str(tmp_path))
    (tmp_path / "repository.json").write_text(
        json.dumps({"mount_path": "/repo", "display_name": "Releases"}), encoding="utf-8"
    )

    app = create_app()

    assert app.title == "Releases"
    assert (tmp_path / "artifacts").is_dir()
    assert any(getattr(route, "path", "").startswith("/repo/") for route in app.routes)


def test_configure_logging_accepts_names():
    configure_logging("debug")

    assert logging.getLogger("uvicorn.access").level == logging.WARNING
