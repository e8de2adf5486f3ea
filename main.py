from __future__ import annotations

from dataclasses import asdict

from fastapi import FastAPI, HTTPException

from dnsreg import db
from dnsreg.api_models import PreviewRequest, ServiceRecordOut
from dnsreg.builders import UnknownBuilder, get_builder
from dnsreg.docker_ops import DockerOps, docker_available
from dnsreg.registrar import Registrar
from dnsreg.settings import settings
from dnsreg.skydns import SkyDNSClient

app = FastAPI(title="dnsreg")

registrar: Registrar | None = None


def build_registrar() -> Registrar:
    return Registrar(
        docker_ops=DockerOps(base_url=settings.docker_url),
        skydns=SkyDNSClient(settings.skydns_url, settings.skydns_secret, timeout_s=settings.http_timeout_s),
        builder=get_builder(settings.builder),
        defaults=settings.defaults(),
        beat_s=settings.heartbeat_s,
    )


@app.on_event("startup")
def startup() -> None:
    global registrar
    db.init_db()
    # Fail fast on a bad builder name rather than on the first container.
    get_builder(settings.builder)
    db.log_event("INFO", f"dnsreg started (builder={settings.builder}, environment={settings.environment})")
    if settings.enable_registrar:
        registrar = build_registrar()
        registrar.start()


@app.on_event("shutdown")
def shutdown() -> None:
    if registrar is not None:
        registrar.stop()
        registrar.skydns.close()


@app.get("/health")
def health() -> dict:
    return {"status": "healthy", "builder": settings.builder, "docker": docker_available()}


@app.get("/services")
def services() -> list[dict]:
    return [asdict(r) for r in db.list_registrations()]


@app.get("/events")
def events(limit: int = 100) -> list[dict]:
    return db.latest_events(max(1, min(1000, limit)))


@app.post("/preview", response_model=ServiceRecordOut)
def preview(req: PreviewRequest) -> ServiceRecordOut:
    try:
        builder = get_builder(req.builder or settings.builder)
    except UnknownBuilder as e:
        raise HTTPException(status_code=400, detail=str(e))
    record = builder.build(req.to_descriptor(), settings.defaults())
    return ServiceRecordOut.from_record(record, settings.domain)
