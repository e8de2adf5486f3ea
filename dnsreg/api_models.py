from __future__ import annotations

from pydantic import BaseModel, Field

from .models import ContainerDescriptor, PortBinding, ServiceRecord


class PortBindingIn(BaseModel):
    host_ip: str = ""
    host_port: str = ""


class PreviewRequest(BaseModel):
    image: str = Field(..., description="Image reference, e.g. registry/name:tag")
    name: str = Field("", description="Container name, leading '/' allowed")
    network_address: str = Field(..., min_length=1, description="Container IP address")
    exposed_ports: dict[str, list[PortBindingIn] | None] = Field(
        default_factory=dict, description='Map of "port/proto" to host bindings'
    )
    env: list[str] = Field(default_factory=list, description="KEY=VALUE entries")
    builder: str | None = Field(None, description="Builder name; defaults to the configured one")

    def to_descriptor(self) -> ContainerDescriptor:
        ports: dict[str, list[PortBinding] | None] = {}
        for key, bindings in self.exposed_ports.items():
            if not bindings:
                ports[key] = None
                continue
            ports[key] = [PortBinding(host_ip=b.host_ip, host_port=b.host_port) for b in bindings]
        return ContainerDescriptor(
            image=self.image,
            name=self.name,
            network_address=self.network_address,
            exposed_ports=ports,
            env=list(self.env),
        )


class ServiceRecordOut(BaseModel):
    port: int = Field(..., ge=1, le=65535)
    environment: str
    ttl: int | str
    service: str
    instance: str
    host: str
    dns_name: str

    @classmethod
    def from_record(cls, record: ServiceRecord, domain: str = "") -> "ServiceRecordOut":
        return cls(
            port=record.port,
            environment=record.environment,
            ttl=record.ttl,
            service=record.service,
            instance=record.instance,
            host=record.host,
            dns_name=record.dns_name(domain),
        )
