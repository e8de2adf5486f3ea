from __future__ import annotations

import os
from dataclasses import dataclass

from .models import Defaults


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _default_skydns_url() -> str:
    # Linked skydns container (docker --link skydns:skydns).
    return "http://" + os.getenv("SKYDNS_PORT_8080_TCP_ADDR", "127.0.0.1") + ":8080"


@dataclass(frozen=True)
class Settings:
    # Service record defaults
    environment: str = os.getenv("DNSREG_ENVIRONMENT", "dev")
    ttl: int = _env_int("DNSREG_TTL", 60)
    port: int = _env_int("DNSREG_PORT", 80)
    builder: str = os.getenv("DNSREG_BUILDER", "static")

    # SkyDNS
    domain: str = os.getenv("DNSREG_DOMAIN", "skydns.local")
    skydns_url: str = os.getenv("DNSREG_SKYDNS_URL") or _default_skydns_url()
    skydns_secret: str = os.getenv("DNSREG_SKYDNS_SECRET", "")
    http_timeout_s: int = _env_int("DNSREG_HTTP_TIMEOUT_S", 10)
    beat: int = _env_int("DNSREG_BEAT", 0)

    # Core
    docker_url: str = os.getenv("DNSREG_DOCKER_URL", "unix://var/run/docker.sock")
    db_path: str = os.getenv("DNSREG_DB_PATH", "dnsreg.db")
    enable_registrar: bool = _env_bool("DNSREG_ENABLE_REGISTRAR", False)

    @property
    def heartbeat_s(self) -> int:
        """Seconds between TTL refreshes; defaults to three quarters of the TTL."""
        if self.beat >= 1:
            return self.beat
        return max(1, self.ttl - (self.ttl // 4))

    def defaults(self) -> Defaults:
        return Defaults(environment=self.environment, ttl=self.ttl, port=self.port)


settings = Settings()
