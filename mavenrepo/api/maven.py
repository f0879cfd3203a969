"""
HTTP surface of the repository, as used by ``mvn`` and by browsers.

Every request first rescans the backing store, so files copied into the
storage directory by hand are visible without a restart.

* ``GET``/``HEAD`` resolve the path (see :mod:`mavenrepo.api.resolver`) and
  return an HTML listing, a stored file, generated metadata or a checksum.
* ``PUT`` is one step of ``mvn deploy`` and goes to the upload handler.
* Anything else is answered with 405.
"""

from __future__ import annotations

import io
import logging
from email.utils import format_datetime
from functools import lru_cache
from typing import BinaryIO, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.concurrency import run_in_threadpool

from mavenrepo.api.resolver import RepositoryRequest, RequestKind, resolve_path
from mavenrepo.core.dependencies import STATIC_DIR, get_mount_root, get_repository, templates
from mavenrepo.data.metadata import HashAlgorithm, checksum_line
from mavenrepo.data.repository import ArtifactRepository
from mavenrepo.domain.artifact import Artifact
from mavenrepo.domain.descriptor import (
    BINARY_EXTENSIONS,
    METADATA_FILE_NAME,
    POM_EXTENSION,
    packaging_from_name,
    split_extension,
    strip_checksum_extension,
)
from mavenrepo.domain.errors import ArtifactNotFoundError, RepositoryError
from mavenrepo.services.ingestion import UploadHandler

logger = logging.getLogger(__name__)
router = APIRouter()

XML_MEDIA_TYPE = "application/xml"
TEXT_MEDIA_TYPE = "text/plain"
BINARY_MEDIA_TYPE = "application/octet-stream"


def _raise_http(exc: RepositoryError) -> NoReturn:
    if exc.status_code >= 500:
        logger.error("Repository failure: %s", exc, exc_info=True)
    raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


def _not_found(detail: str = "Not Found") -> NoReturn:
    raise ArtifactNotFoundError(detail)


@lru_cache(maxsize=1)
def _load_stylesheet() -> Optional[str]:
    path = STATIC_DIR / "style.css"
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


def _http_date(artifact: Artifact) -> str:
    return format_datetime(artifact.last_modified, usegmt=True)


def _content_response(
    data: bytes,
    media_type: str,
    artifact: Optional[Artifact] = None,
) -> Response:
    headers = {}
    if artifact is not None:
        headers["Last-Modified"] = _http_date(artifact)
    return Response(content=data, media_type=media_type, headers=headers)


def _stream_response(stream: Optional[BinaryIO], media_type: str, artifact: Artifact) -> Response:
    if stream is None:
        _not_found()
    with stream:
        data = stream.read()
    return _content_response(data, media_type, artifact)


def _checksum_response(
    stream: Optional[BinaryIO],
    algorithm: HashAlgorithm,
    directory: str,
    name: str,
    artifact: Optional[Artifact] = None,
) -> Response:
    if stream is None:
        _not_found()
    line = checksum_line(stream, algorithm, directory, name)
    return _content_response(line.encode("utf-8"), TEXT_MEDIA_TYPE, artifact)


# ---------------------------------------------------------------------------
# HTML pages
# ---------------------------------------------------------------------------


def _render(request: Request, template: str, **context) -> Response:
    context.setdefault("root", get_mount_root(request))
    context.setdefault("title", request.app.title)
    return templates.TemplateResponse(request, template, context)


def _list_groups(request: Request, repo: ArtifactRepository) -> Response:
    return _render(request, "groups.html", groups=repo.list_groups())


def _list_artifacts(request: Request, repo: ArtifactRepository, req: RepositoryRequest) -> Response:
    artifacts = repo.list_artifacts(req.group_id)
    if not artifacts:
        _not_found(f"Can not find the group {req.group_id}")
    return _render(request, "artifacts.html", group_id=req.group_id, artifacts=artifacts, path=req.path)


def _list_versions(request: Request, repo: ArtifactRepository, req: RepositoryRequest) -> Response:
    versions = repo.list_versions(req.group_id, req.artifact_id)
    if not versions:
        _not_found(f"Can not find the artifact {req.group_id}-{req.artifact_id}")
    return _render(
        request,
        "versions.html",
        group_id=req.group_id,
        artifact_id=req.artifact_id,
        versions=versions,
        path=req.path,
        metadata_name=METADATA_FILE_NAME,
    )


def _show_version(request: Request, repo: ArtifactRepository, req: RepositoryRequest) -> Response:
    artifact = repo.get_artifact(req.group_id, req.artifact_id, req.version, False)
    if artifact is None:
        _not_found(f"Can not find the artifact {req.group_id}-{req.artifact_id}-{req.version}")
    test_artifact = repo.get_artifact(req.group_id, req.artifact_id, req.version, True)

    resources = [artifact.artifact_name]
    if artifact.packaging != POM_EXTENSION:
        resources.append(artifact.descriptor_name)
    if test_artifact is not None:
        resources.append(test_artifact.artifact_name)
    hashes = [f"{name}.{algorithm.value}" for name in resources for algorithm in HashAlgorithm]
    hashes += [f"{METADATA_FILE_NAME}.{algorithm.value}" for algorithm in HashAlgorithm]

    return _render(
        request,
        "version.html",
        artifact=artifact,
        path=req.path,
        resources=resources + [METADATA_FILE_NAME],
        hashes=hashes,
    )


# ---------------------------------------------------------------------------
# Generated and stored files
# ---------------------------------------------------------------------------


def _group_metadata(repo: ArtifactRepository, req: RepositoryRequest) -> Response:
    data = repo.get_metadata(req.group_id, req.artifact_id)
    if data is None:
        _not_found(f"Can not find the artifact {req.group_id}-{req.artifact_id}")
    if req.file_name == METADATA_FILE_NAME:
        return _content_response(data, XML_MEDIA_TYPE)
    algorithm = HashAlgorithm.from_extension(split_extension(req.file_name)[1])
    return _checksum_response(io.BytesIO(data), algorithm, req.directory, METADATA_FILE_NAME)


def _download(repo: ArtifactRepository, req: RepositoryRequest) -> Response:
    artifact = repo.get_artifact(req.group_id, req.artifact_id, req.version, req.is_test)
    if artifact is None:
        _not_found(f"Can not find the artifact {req.group_id}-{req.artifact_id}-{req.version}")

    fragment = req.file_name
    target = strip_checksum_extension(fragment)
    algorithm = None
    if target != fragment:
        algorithm = HashAlgorithm.from_extension(split_extension(fragment)[1])
        if algorithm is None:
            _not_found()

    if target == METADATA_FILE_NAME:
        data = repo.get_artifact_metadata(artifact)
        if algorithm is None:
            return _content_response(data, XML_MEDIA_TYPE, artifact)
        return _checksum_response(io.BytesIO(data), algorithm, req.directory, METADATA_FILE_NAME, artifact)

    extension = packaging_from_name(target)
    if extension == POM_EXTENSION:
        if algorithm is None:
            return _stream_response(artifact.descriptor(), XML_MEDIA_TYPE, artifact)
        return _checksum_response(artifact.descriptor(), algorithm, req.directory, artifact.descriptor_name, artifact)

    if extension in BINARY_EXTENSIONS and extension == artifact.packaging:
        if algorithm is None:
            return _stream_response(artifact.content(), BINARY_MEDIA_TYPE, artifact)
        if repo.config.legacy_binary_checksums:
            stream = artifact.descriptor()
        else:
            stream = artifact.content()
        return _checksum_response(stream, algorithm, req.directory, artifact.artifact_name, artifact)

    _not_found()


def _stylesheet() -> Response:
    style = _load_stylesheet()
    if style is None:
        _not_found("Could not find stylesheet")
    return Response(content=style, media_type="text/css")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.api_route("/{path:path}", methods=["GET", "HEAD"])
def get_resource(
    path: str,
    request: Request,
    repo: ArtifactRepository = Depends(get_repository),
) -> Response:
    """
    Browse the repository or fetch a file from it.

    Runs in the threadpool: scanning and hashing are blocking I/O.
    """
    try:
        repo.scan()
        req = resolve_path(path, knows_version=repo.has_version)
        logger.debug("GET %s resolved to %s", path, req)

        if req.kind is RequestKind.LIST_GROUPS:
            return _list_groups(request, repo)
        if req.kind is RequestKind.STYLESHEET:
            return _stylesheet()
        if req.kind is RequestKind.LIST_ARTIFACTS:
            return _list_artifacts(request, repo, req)
        if req.kind is RequestKind.LIST_VERSIONS:
            return _list_versions(request, repo, req)
        if req.kind is RequestKind.GROUP_METADATA:
            return _group_metadata(repo, req)
        if req.kind is RequestKind.SHOW_VERSION:
            return _show_version(request, repo, req)
        return _download(repo, req)
    except RepositoryError as exc:
        _raise_http(exc)
    except FileNotFoundError as exc:
        # indexed, then removed from the store behind the server's back
        logger.warning("Indexed file for %s is gone: %s", path, exc)
        _raise_http(ArtifactNotFoundError(f"Can not find the file for {path}"))
    except OSError as exc:
        logger.error("I/O failure while serving %s", path, exc_info=True)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.put("/{path:path}")
async def put_resource(
    path: str,
    request: Request,
    repo: ArtifactRepository = Depends(get_repository),
) -> Response:
    """
    Accept one file of a ``mvn deploy`` run.

    Generated files (checksums, maven-metadata.xml) and companion poms are
    acknowledged without being stored.
    """
    body = await request.body()
    handler = UploadHandler(repo)
    try:
        await run_in_threadpool(repo.scan)
        result = await run_in_threadpool(handler.handle_upload, path, body)
    except RepositoryError as exc:
        _raise_http(exc)

    if not result.stored:
        logger.debug("PUT %s acknowledged without storing: %s", path, result.reason)
    return Response(status_code=status.HTTP_200_OK)


@router.api_route("/{path:path}", methods=["POST", "DELETE", "PATCH", "OPTIONS"])
async def unsupported_method(path: str, request: Request) -> Response:
    raise HTTPException(status_code=status.HTTP_405_METHOD_NOT_ALLOWED, detail="Method not allowed")
