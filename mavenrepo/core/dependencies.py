from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from mavenrepo.data.repository import ArtifactRepository
from mavenrepo.domain.models import RepositoryConfig

logger = logging.getLogger(__name__)

DATA_ROOT_ENV_VAR = "MAVEN_REPO_DATA_DIR"
_REPO_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_DATA_DIR = _REPO_ROOT / "data"
_PACKAGE_DIR = Path(__file__).resolve().parents[1]

TEMPLATES_DIR = _PACKAGE_DIR / "templates"
STATIC_DIR = _PACKAGE_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def get_data_dir() -> Path:
    """
    Determine the data directory path.

    Priority:
    1. Environment variable MAVEN_REPO_DATA_DIR
    2. '<project root>/data'
    """
    env_path = os.environ.get(DATA_ROOT_ENV_VAR)
    if env_path:
        d = Path(env_path).expanduser()
    else:
        d = _DEFAULT_DATA_DIR
    d.mkdir(parents=True, exist_ok=True)
    return d


def load_repository_config(data_dir: Path) -> RepositoryConfig:
    """
    Load repository.json, merging with defaults for any missing fields,
    and write it back so any new fields are persisted.
    """
    path = data_dir / "repository.json"
    if path.exists():
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            config = RepositoryConfig(**raw)
        except (ValueError, TypeError) as exc:
            # pydantic's ValidationError is a ValueError
            logger.warning("Ignoring unreadable %s: %s", path, exc)
            config = RepositoryConfig()
    else:
        config = RepositoryConfig()

    path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
    return config


def resolve_storage_dir(data_dir: Path, config: RepositoryConfig) -> Path:
    storage_dir = Path(config.storage_dir).expanduser()
    if not storage_dir.is_absolute():
        storage_dir = data_dir / storage_dir
    return storage_dir


def get_repository(request: Request) -> ArtifactRepository:
    return request.app.state.repository


def get_config(request: Request) -> RepositoryConfig:
    return request.app.state.repository.config


def get_mount_root(request: Request) -> str:
    """Mount path with a trailing slash, used to build links on HTML pages."""
    return get_config(request).mount_path + "/"
