from __future__ import annotations

from typing import Any

import httpx

from .models import ServiceRecord


class SkyDNSError(Exception):
    pass


class ConflictingUUID(SkyDNSError):
    pass


class ServiceNotFound(SkyDNSError):
    pass


def service_payload(record: ServiceRecord, ttl: int) -> dict[str, Any]:
    """SkyDNS service JSON. SkyDNS calls the instance a 'Version'."""
    return {
        "Name": record.service,
        "Version": record.instance,
        "Environment": record.environment,
        "Host": record.host,
        "Port": int(record.port),
        "TTL": int(ttl),
    }


class SkyDNSClient:
    """Client for the SkyDNS HTTP registration API (/skydns/services/<uuid>)."""

    def __init__(
        self,
        base_url: str,
        secret: str = "",
        timeout_s: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        headers = {"Authorization": secret} if secret else {}
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout_s,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def _request(self, method: str, uuid: str, json: dict[str, Any] | None = None) -> httpx.Response:
        try:
            resp = self._http.request(method, f"/skydns/services/{uuid}", json=json)
        except httpx.HTTPError as e:
            raise SkyDNSError(f"{method} {uuid}: {type(e).__name__}: {e}") from e
        if resp.status_code == 409:
            raise ConflictingUUID(f"Conflicting uuid {uuid}")
        if resp.status_code == 404:
            raise ServiceNotFound(f"Service {uuid} not found")
        if resp.status_code >= 400:
            raise SkyDNSError(f"{method} {uuid}: HTTP {resp.status_code} {resp.text.strip()}")
        return resp

    def add(self, uuid: str, record: ServiceRecord, ttl: int) -> None:
        self._request("PUT", uuid, json=service_payload(record, ttl))

    def update(self, uuid: str, ttl: int) -> None:
        self._request("PATCH", uuid, json={"TTL": int(ttl)})

    def delete(self, uuid: str) -> None:
        self._request("DELETE", uuid)
