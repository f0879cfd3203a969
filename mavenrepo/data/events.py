"""
Repository events and the sinks they are published to.

Sinks are handed to :class:`~mavenrepo.data.repository.ArtifactRepository` at
construction; the default sink drops every event.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import List, Union

from mavenrepo.domain.artifact import Artifact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactCreatedEvent:
    artifact: Artifact
    is_internal: bool


@dataclass(frozen=True)
class ArtifactDeletedEvent:
    """Published when an upload supersedes an artifact at the same coordinate."""

    artifact: Artifact
    is_internal: bool


RepositoryEvent = Union[ArtifactCreatedEvent, ArtifactDeletedEvent]


class EventSink:
    """Receives repository events, synchronously, on the thread that caused them."""

    def publish(self, event: RepositoryEvent) -> None:
        raise NotImplementedError


class NullEventSink(EventSink):
    def publish(self, event: RepositoryEvent) -> None:
        pass


class LoggingEventSink(EventSink):
    def publish(self, event: RepositoryEvent) -> None:
        action = "created" if isinstance(event, ArtifactCreatedEvent) else "deleted"
        logger.info(
            "Artifact %s %s (internal=%s) at %s",
            event.artifact.coordinate,
            action,
            event.is_internal,
            event.artifact.resource_id,
        )


class RecordingEventSink(EventSink):
    """Keeps every event in order; handy for tests and for in-process subscribers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: List[RepositoryEvent] = []

    def publish(self, event: RepositoryEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[RepositoryEvent]:
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
