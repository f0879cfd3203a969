"""
Exception taxonomy of the repository engine.

The API layer translates these into HTTP status codes; the engine itself never
imports anything from FastAPI.
"""

from __future__ import annotations


class RepositoryError(Exception):
    """Base class for all repository failures."""

    status_code = 500


class ArtifactNotFoundError(RepositoryError):
    """Unknown coordinate, missing file or absent descriptor."""

    status_code = 404


class BadUploadError(RepositoryError):
    """The uploaded body can not be turned into an artifact."""

    status_code = 400


class DescriptorParseError(BadUploadError):
    """A pom or pom.properties lacks one of the required coordinate fields."""


class RepositoryReadOnlyError(RepositoryError):
    """A write was attempted against a repository that does not accept them."""

    status_code = 403


class StorageFailureError(RepositoryError):
    """I/O failure while reading or writing the backing store."""

    status_code = 500
