"""Strategies that turn a container descriptor into a SkyDNS service record.

Exactly one builder is active per deployment, picked by `get_builder` from
the configured name:

  - static       fixed port, defaults for environment/TTL
  - environment  DNS_* variables in the container env override the defaults
  - ports        like static, but the port is detected from exposed ports

A `module:attribute` name loads a user-provided builder instead.
"""
from __future__ import annotations

import importlib
from dataclasses import replace
from typing import Protocol

from .models import ContainerDescriptor, Defaults, PortBinding, ServiceRecord
from .naming import clean_image_name, remove_slash

ENV_PREFIX = "DNS_"
MAX_PORT = 65535


class UnknownBuilder(Exception):
    pass


class ServiceBuilder(Protocol):
    def build(self, container: ContainerDescriptor, defaults: Defaults) -> ServiceRecord:
        ...


class StaticBuilder:
    name = "static"

    def build(self, container: ContainerDescriptor, defaults: Defaults) -> ServiceRecord:
        return ServiceRecord(
            port=defaults.port,
            environment=defaults.environment,
            ttl=defaults.ttl,
            service=clean_image_name(container.image),
            instance=remove_slash(container.name),
            host=container.network_address,
        )


def parse_environment(entries: list[str]) -> dict[str, str]:
    """Collect DNS_* variables from docker's KEY=VALUE env list.

    Splits on the first '=' only, so values may contain '='. An entry with
    no '=' maps its key to an empty string.
    """
    out: dict[str, str] = {}
    for entry in entries:
        key, _, value = entry.partition("=")
        if key.startswith(ENV_PREFIX):
            out[key] = value
    return out


class EnvironmentBuilder:
    name = "environment"

    def build(self, container: ContainerDescriptor, defaults: Defaults) -> ServiceRecord:
        env = parse_environment(container.env)
        return ServiceRecord(
            port=80,
            environment=env.get("DNS_ENVIRONMENT") or defaults.environment,
            # Kept as the literal string; see ServiceRecord.ttl_seconds.
            ttl=env.get("DNS_TTL") or defaults.ttl,
            service=env.get("DNS_SERVICE") or clean_image_name(container.image),
            instance=env.get("DNS_INSTANCE") or remove_slash(container.name),
            host=container.network_address,
        )


def _parse_port(raw: str) -> int:
    """Return the port number, or 0 when `raw` is not a usable port."""
    try:
        port = int(raw)
    except (TypeError, ValueError):
        return 0
    if port < 1 or port > MAX_PORT:
        return 0
    return port


def select_port(exposed_ports: dict[str, list[PortBinding] | None], default: int = 80) -> int:
    """Pick the port to publish from docker's exposed-port map.

    The smallest bound host port wins. A declared but unbound port
    ("9000/tcp": None) is only taken while nothing has been selected yet,
    and a smaller host port found later still replaces it, so the result
    follows the map's iteration order when bound and unbound entries mix.
    """
    port = 0
    for key, bindings in exposed_ports.items():
        if bindings:
            for binding in bindings:
                candidate = _parse_port(binding.host_port)
                if candidate and (port == 0 or candidate < port):
                    port = candidate
        elif port == 0:
            port = _parse_port(key.split("/", 1)[0])
    return port or default


class PortDetectBuilder:
    name = "ports"

    def build(self, container: ContainerDescriptor, defaults: Defaults) -> ServiceRecord:
        record = StaticBuilder().build(container, defaults)
        return replace(record, port=select_port(container.exposed_ports, defaults.port))


BUILDERS: dict[str, type] = {
    StaticBuilder.name: StaticBuilder,
    EnvironmentBuilder.name: EnvironmentBuilder,
    PortDetectBuilder.name: PortDetectBuilder,
}


def get_builder(name: str) -> ServiceBuilder:
    """Resolve a builder by registered name or by 'module:attribute' path."""
    if name in BUILDERS:
        return BUILDERS[name]()
    if ":" not in name:
        raise UnknownBuilder(f"Unknown builder '{name}'. Use one of {sorted(BUILDERS)} or 'module:attribute'.")

    module_name, _, attr = name.partition(":")
    try:
        module = importlib.import_module(module_name)
        obj = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise UnknownBuilder(f"Cannot load builder '{name}': {e}") from e

    if isinstance(obj, type):
        obj = obj()
    if not callable(getattr(obj, "build", None)):
        raise UnknownBuilder(f"'{name}' has no build(container, defaults) method.")
    return obj
