from __future__ import annotations

from threading import Event as StopFlag
from threading import Thread

from . import db
from .builders import ServiceBuilder
from .docker_ops import DockerOps, Event, ImageNotTagged
from .models import Defaults
from .naming import truncate
from .runtime import RuntimeState
from .skydns import ConflictingUUID, SkyDNSClient, SkyDNSError

ADD_STATUSES = {"start", "restart", "unpause"}
REMOVE_STATUSES = {"die", "stop", "kill", "pause"}


class Registrar:
    """Keeps SkyDNS in sync with the containers running on this docker host."""

    def __init__(
        self,
        docker_ops: DockerOps,
        skydns: SkyDNSClient,
        builder: ServiceBuilder,
        defaults: Defaults,
        runtime: RuntimeState | None = None,
        beat_s: float = 45,
        max_errors: int = 10,
    ):
        self.docker = docker_ops
        self.skydns = skydns
        self.builder = builder
        self.defaults = defaults
        self.runtime = runtime or RuntimeState()
        self.beat_s = beat_s
        self.max_errors = max(1, int(max_errors))
        self._stop = StopFlag()
        self._thr: Thread | None = None

    def start(self) -> None:
        if self._thr and self._thr.is_alive():
            return
        self._stop.clear()
        self._thr = Thread(target=self.run, daemon=True)
        self._thr.start()

    def stop(self) -> None:
        self._stop.set()

    def run(self) -> None:
        db.log_event("INFO", "Starting restore of running containers")
        try:
            self.restore()
        except Exception as e:
            db.log_event("ERROR", f"Restore failed: {type(e).__name__}: {e}")

        db.log_event("INFO", "Starting run loop")
        try:
            for event in self.docker.events():
                if self._stop.is_set():
                    break
                self.handle_event(event)
        except Exception as e:
            db.log_event("ERROR", f"Event stream failed: {type(e).__name__}: {e}")
        db.log_event("INFO", "Event stream closed, registrar stopped")

    def restore(self) -> int:
        """Register every running container. Returns how many were added."""
        added = 0
        for c in self.docker.fetch_all_containers():
            uuid = truncate(c.get("Id") or "")
            try:
                self.add_service(uuid, c.get("Image") or "")
                added += 1
            except ImageNotTagged:
                continue
            except Exception as e:
                db.log_event("ERROR", f"Failed to restore {uuid}: {type(e).__name__}: {e}")
        return added

    def handle_event(self, event: Event) -> None:
        uuid = truncate(event.container_id)
        if not uuid:
            return

        if event.status in REMOVE_STATUSES:
            try:
                self.remove_service(uuid)
            except SkyDNSError as e:
                db.log_event("ERROR", f"Error deleting {uuid}: {e}")
        elif event.status in ADD_STATUSES:
            try:
                self.add_service(uuid, event.image)
            except ImageNotTagged:
                return
            except Exception as e:
                db.log_event("ERROR", f"Error adding {uuid} for {event.image}: {type(e).__name__}: {e}")

    def add_service(self, uuid: str, image: str = "") -> None:
        container = self.docker.fetch_container(uuid, image)
        record = self.builder.build(container, self.defaults)
        ttl = record.ttl_seconds(self.defaults.ttl)
        if not record.has_valid_ttl():
            db.log_event("WARN", f"Invalid TTL {record.ttl!r} for {uuid}, using {ttl}", record.service, record.instance)

        try:
            self.skydns.add(uuid, record, ttl)
        except ConflictingUUID:
            # Already registered (e.g. restart without die); refresh it instead.
            self.skydns.update(uuid, ttl)

        self.runtime.set_record(uuid, record, ttl)
        db.upsert_registration(uuid, record, ttl)
        db.log_event("INFO", f"Added {uuid} as {record.dns_name()} ({record.host}:{record.port})", record.service, record.instance)
        self.start_heartbeat(uuid)

    def remove_service(self, uuid: str) -> None:
        record = self.runtime.pop_record(uuid)
        db.delete_registration(uuid)
        self.skydns.delete(uuid)
        service = record.service if record else None
        instance = record.instance if record else None
        db.log_event("INFO", f"Removed {uuid} from skydns", service, instance)

    def start_heartbeat(self, uuid: str) -> None:
        if self.beat_s <= 0:
            return
        Thread(target=self.heartbeat, args=(uuid,), daemon=True).start()

    def heartbeat(self, uuid: str) -> None:
        """Refresh the TTL of uuid until its container stops or errors pile up."""
        if not self.runtime.claim_heartbeat(uuid):
            return
        errors = 0
        try:
            while not self._stop.wait(self.beat_s):
                if errors >= self.max_errors:
                    db.log_event("ERROR", f"Aborting heartbeat for {uuid} after {errors} errors")
                    return
                try:
                    if not self.beat(uuid):
                        return
                except Exception as e:
                    errors += 1
                    db.log_event("ERROR", f"Heartbeat for {uuid} failed: {type(e).__name__}: {e}")
        finally:
            self.runtime.release_heartbeat(uuid)

    def beat(self, uuid: str) -> bool:
        """One heartbeat. Returns False once the heartbeat should end."""
        if self.runtime.get_record(uuid) is None:
            # Removed by an event since the last beat.
            return False

        container = self.docker.fetch_container(uuid)
        if not container.running:
            self.remove_service(uuid)
            return False

        ttl = self.runtime.get_ttl(uuid, self.defaults.ttl)
        self.skydns.update(uuid, ttl)
        db.touch_registration(uuid)
        # Low beats would flood the event log.
        if self.beat_s >= 30:
            db.log_event("INFO", f"Updated ttl for {uuid}")
        return True
