from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

import docker
import requests
from docker.errors import DockerException

from .models import ContainerDescriptor
from .naming import remove_tag
from .settings import settings


class ImageNotTagged(Exception):
    """The event's image does not match the container's image (untagged build)."""


@dataclass(frozen=True)
class Event:
    container_id: str
    status: str
    image: str = ""

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> "Event":
        # Newer daemons nest the fields under Actor; older ones use id/status/from.
        actor = raw.get("Actor") or {}
        return cls(
            container_id=raw.get("id") or actor.get("ID") or "",
            status=raw.get("status") or raw.get("Action") or "",
            image=raw.get("from") or (actor.get("Attributes") or {}).get("image") or "",
        )


class DockerOps:
    """Thin wrapper over the docker SDK returning container descriptors."""

    def __init__(self, client: docker.DockerClient | None = None, base_url: str | None = None):
        self._client = client
        self._base_url = base_url or settings.docker_url

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            self._client = docker.DockerClient(base_url=self._base_url)
        return self._client

    def available(self) -> bool:
        try:
            self.client.ping()
            return True
        except (DockerException, requests.exceptions.RequestException):
            return False

    def fetch_container(self, name: str, image: str = "") -> ContainerDescriptor:
        """Inspect a container.

        When `image` is given it must match the container's configured image
        (ignoring tags), otherwise ImageNotTagged is raised.
        """
        attrs = self.client.api.inspect_container(name)
        configured = (attrs.get("Config") or {}).get("Image") or ""
        if image and remove_tag(image) != remove_tag(configured):
            raise ImageNotTagged(f"image {image!r} does not match container image {configured!r}")
        return ContainerDescriptor.from_inspect(attrs, image=image or None)

    def fetch_all_containers(self) -> list[dict[str, Any]]:
        """Running containers as returned by /containers/json (Id, Image, ...)."""
        return self.client.api.containers()

    def events(self) -> Iterator[Event]:
        for raw in self.client.api.events(decode=True, filters={"type": "container"}):
            yield Event.from_raw(raw)


def docker_available() -> bool:
    return DockerOps().available()
