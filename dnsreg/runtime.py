from __future__ import annotations

from threading import Lock

from .models import ServiceRecord


class RuntimeState:
    """In-memory state shared by the event loop and heartbeat threads."""

    def __init__(self) -> None:
        self.lock = Lock()
        self.records: dict[str, ServiceRecord] = {}  # uuid -> registered record
        self.ttls: dict[str, int] = {}  # uuid -> ttl sent to skydns
        self.heartbeats: set[str] = set()  # uuids with a running heartbeat

    def set_record(self, uuid: str, record: ServiceRecord, ttl: int) -> None:
        with self.lock:
            self.records[uuid] = record
            self.ttls[uuid] = ttl

    def get_record(self, uuid: str) -> ServiceRecord | None:
        with self.lock:
            return self.records.get(uuid)

    def get_ttl(self, uuid: str, default: int) -> int:
        with self.lock:
            return self.ttls.get(uuid, default)

    def pop_record(self, uuid: str) -> ServiceRecord | None:
        with self.lock:
            self.ttls.pop(uuid, None)
            return self.records.pop(uuid, None)

    def claim_heartbeat(self, uuid: str) -> bool:
        """Mark a heartbeat as running. False if one is already running for uuid."""
        with self.lock:
            if uuid in self.heartbeats:
                return False
            self.heartbeats.add(uuid)
            return True

    def release_heartbeat(self, uuid: str) -> None:
        with self.lock:
            self.heartbeats.discard(uuid)
