"""FastAPI application factory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from mavenrepo import __version__
from mavenrepo.api.maven import router as maven_router
from mavenrepo.core.dependencies import get_data_dir, load_repository_config, resolve_storage_dir
from mavenrepo.data.events import EventSink, LoggingEventSink
from mavenrepo.data.repository import ArtifactRepository
from mavenrepo.domain.models import RepositoryConfig
from mavenrepo.logging_config import configure_logging
from mavenrepo.storage import FileSystemStorage

logger = logging.getLogger(__name__)


def build_repository(
    config: RepositoryConfig,
    data_dir: Path,
    event_sink: Optional[EventSink] = None,
) -> ArtifactRepository:
    storage = FileSystemStorage(resolve_storage_dir(data_dir, config), read_only=config.read_only)
    return ArtifactRepository(storage, config, event_sink or LoggingEventSink())


def create_app(
    repository: Optional[ArtifactRepository] = None,
    config: Optional[RepositoryConfig] = None,
) -> FastAPI:
    """
    Build the application.

    Without arguments the configuration is read from
    ``<data dir>/repository.json`` and artifacts are served from the
    configured storage directory. Tests pass a ready repository instead.
    """
    if repository is None:
        data_dir = get_data_dir()
        config = config or load_repository_config(data_dir)
        configure_logging(config.log_level)
        repository = build_repository(config, data_dir)
    else:
        config = config or repository.config

    app = FastAPI(
        title=config.display_name,
        version=__version__,
        description="Minimal FastAPI-based implementation of a Maven 2 repository.",
    )
    app.state.repository = repository

    @app.on_event("startup")
    async def _initial_scan() -> None:  # pragma: no cover - invoked by FastAPI
        count = repository.scan()
        logger.info("Indexed %d artifact(s) from %s", count, repository.storage.describe(""))

    @app.get("/health")
    async def health() -> dict:
        """
        Lightweight health check endpoint.
        """
        return {"status": "ok", "artifacts": len(repository)}

    app.include_router(maven_router, prefix=config.mount_path, tags=["maven"])
    logger.info("Serving the repository under %s/", config.mount_path)
    return app
