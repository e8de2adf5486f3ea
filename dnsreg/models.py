from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class MissingFieldError(ValueError):
    """A container payload lacks a field that has no default (e.g. its address)."""


@dataclass(frozen=True)
class Defaults:
    environment: str
    ttl: int
    port: int = 80

    def __post_init__(self) -> None:
        if not self.environment:
            raise ValueError("Default environment must not be empty.")
        if self.ttl <= 0:
            raise ValueError("Default TTL must be a positive number of seconds.")
        if not 1 <= self.port <= 65535:
            raise ValueError("Default port must be between 1 and 65535.")


@dataclass(frozen=True)
class PortBinding:
    host_ip: str = ""
    host_port: str = ""


@dataclass(frozen=True)
class ContainerDescriptor:
    image: str
    name: str
    network_address: str
    exposed_ports: dict[str, list[PortBinding] | None] = field(default_factory=dict)
    env: list[str] = field(default_factory=list)
    id: str = ""
    running: bool = True

    @classmethod
    def from_inspect(cls, attrs: dict[str, Any], image: str | None = None) -> "ContainerDescriptor":
        """Build a descriptor from a docker inspect payload.

        `image` overrides Config.Image (events carry the image the container
        was started from, including the tag).
        """
        config = attrs.get("Config") or {}
        net = attrs.get("NetworkSettings") or {}
        state = attrs.get("State") or {}

        address = net.get("IPAddress") or ""
        if not address:
            # User-defined networks leave the top-level address empty.
            for network in (net.get("Networks") or {}).values():
                if network and network.get("IPAddress"):
                    address = network["IPAddress"]
                    break
        if not address:
            raise MissingFieldError(f"container {attrs.get('Id', '?')[:10]} has no network address")

        ports: dict[str, list[PortBinding] | None] = {}
        for key, bindings in (net.get("Ports") or {}).items():
            if not bindings:
                ports[key] = None
                continue
            ports[key] = [PortBinding(host_ip=b.get("HostIp") or "", host_port=b.get("HostPort") or "") for b in bindings]

        return cls(
            image=image or config.get("Image") or "",
            name=attrs.get("Name") or "",
            network_address=address,
            exposed_ports=ports,
            env=list(config.get("Env") or []),
            id=attrs.get("Id") or "",
            running=bool(state.get("Running", True)),
        )


@dataclass(frozen=True)
class ServiceRecord:
    port: int
    environment: str
    ttl: int | str
    service: str
    instance: str
    host: str

    def has_valid_ttl(self) -> bool:
        try:
            return int(self.ttl) > 0
        except (TypeError, ValueError):
            return False

    def ttl_seconds(self, default: int) -> int:
        """TTL as an int; string TTLs from container env are coerced, bad ones fall back."""
        if not self.has_valid_ttl():
            return default
        return int(self.ttl)

    def dns_name(self, domain: str = "") -> str:
        parts = [self.instance, self.service, self.environment]
        if domain:
            parts.append(domain.strip("."))
        return ".".join(parts)
