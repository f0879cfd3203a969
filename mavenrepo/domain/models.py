"""
Pydantic models for the Maven repository.

This module defines the data models used throughout the application:
- Repository configuration and settings
- Artifact coordinates (the identity of a stored artifact)

All models use Pydantic for validation, serialization, and type safety.
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Coordinate Models
# ---------------------------------------------------------------------------


class Coordinate(BaseModel):
    """
    Identity of a single artifact inside the repository.

    Two artifacts are the same artifact when all five fields are equal. The
    model is frozen so coordinates can be used as dictionary keys and shared
    between threads without copying.
    """

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(
        description="Dotted group identifier, e.g. 'com.example'.",
    )
    artifact_id: str = Field(
        description="Artifact identifier, e.g. 'app'.",
    )
    version: str = Field(
        description="Version string, e.g. '2.1' or '1.0-SNAPSHOT'.",
    )
    packaging: str = Field(
        default="jar",
        description="Packaging type, lower-cased (jar, war, pom).",
    )
    is_test: bool = Field(
        default=False,
        description="True for the '-tests' variant carrying reusable test classes.",
    )

    @field_validator("packaging")
    @classmethod
    def _lower_packaging(cls, value: str) -> str:
        return value.lower()

    @property
    def group_path(self) -> str:
        """Group with every dot replaced by a path separator."""
        return self.group_id.replace(".", "/")

    @property
    def file_name(self) -> str:
        suffix = "-tests" if self.is_test else ""
        return f"{self.artifact_id}-{self.version}{suffix}.{self.packaging}"

    @property
    def descriptor_name(self) -> str:
        return f"{self.artifact_id}-{self.version}.pom"

    @property
    def storage_path(self) -> str:
        """Relative location of the artifact file in the Maven 2 layout."""
        return "/".join([self.group_path, self.artifact_id, self.version, self.file_name])

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.packaging]
        if self.is_test:
            parts.append("tests")
        parts.append(self.version)
        return ":".join(parts)


# ---------------------------------------------------------------------------
# Repository Configuration Models
# ---------------------------------------------------------------------------


class RepositoryConfig(BaseModel):
    """
    Top-level configuration for the Maven repository.

    Persisted at: <DATA_DIR>/repository.json
    """

    display_name: str = Field(
        default="Python Maven repository",
        description="Human-friendly name shown on the HTML browse pages.",
    )
    mount_path: str = Field(
        default="/maven",
        description="URL prefix under which the repository is served.",
    )
    storage_dir: str = Field(
        default="artifacts",
        description="Directory holding the artifacts, relative to the data directory unless absolute.",
    )
    read_only: bool = Field(
        default=False,
        description="If True, uploads are refused with 403.",
    )
    internal_groups: List[str] = Field(
        default_factory=list,
        description="Group prefixes owned by this organisation (flag carried on repository events).",
    )
    legacy_binary_checksums: bool = Field(
        default=False,
        description=(
            "If True, .md5/.sha1 of a jar or war are computed from the pom stream, "
            "reproducing the behaviour of older repository servers."
        ),
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level.",
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Timestamp when this repository configuration was first created.",
    )

    @field_validator("mount_path")
    @classmethod
    def _normalize_mount_path(cls, value: str) -> str:
        value = "/" + value.strip().strip("/")
        return "" if value == "/" else value

    def is_internal_group(self, group_id: str) -> bool:
        """A group is internal when it equals, or is nested under, a configured prefix."""
        for prefix in self.internal_groups:
            prefix = prefix.strip().strip(".")
            if prefix and (group_id == prefix or group_id.startswith(prefix + ".")):
                return True
        return False
