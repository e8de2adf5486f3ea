"""Docker to SkyDNS registrar.

Watches the docker event stream and keeps a SkyDNS record per running
container:
 - a pluggable builder turns each container into a service record
   (port, environment, TTL, service, instance, host)
 - records are refreshed by a heartbeat and removed when containers stop
 - a small HTTP API exposes registrations, the event log and a preview

The builders are pure functions of the container and the configured defaults.
"""
