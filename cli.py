from __future__ import annotations

import argparse
import json
import sys

import requests


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def _parse_port(raw: str) -> tuple[str, list[dict[str, str]] | None]:
    """'80/tcp=8080' -> bound to host port 8080, '9000/tcp' -> declared only."""
    key, sep, host_port = raw.partition("=")
    if not sep:
        return key, None
    return key, [{"host_ip": "", "host_port": host_port}]


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="dnsreg CLI")
    p.add_argument("--api", default="http://localhost:8000", help="API base URL")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("services", help="List registered containers")

    s_ev = sub.add_parser("events", help="Show events")
    s_ev.add_argument("--limit", type=int, default=20)

    s_pre = sub.add_parser("preview", help="Show the service record a container would get")
    s_pre.add_argument("--image", required=True)
    s_pre.add_argument("--name", default="")
    s_pre.add_argument("--address", required=True, help="Container IP address")
    s_pre.add_argument("--env", action="append", default=[], help="KEY=VALUE (repeatable)")
    s_pre.add_argument("--port", action="append", default=[], help="port/proto[=hostport] (repeatable)")
    s_pre.add_argument("--builder", default=None)

    args = p.parse_args(argv)

    base = args.api.rstrip("/")

    if args.cmd == "services":
        _print(requests.get(f"{base}/services", timeout=10).json())
        return 0

    if args.cmd == "events":
        _print(requests.get(f"{base}/events", params={"limit": args.limit}, timeout=10).json())
        return 0

    if args.cmd == "preview":
        payload = {
            "image": args.image,
            "name": args.name,
            "network_address": args.address,
            "exposed_ports": dict(_parse_port(x) for x in args.port),
            "env": args.env,
            "builder": args.builder,
        }
        r = requests.post(f"{base}/preview", json=payload, timeout=10)
        _print(r.json())
        return 0 if r.ok else 1

    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
