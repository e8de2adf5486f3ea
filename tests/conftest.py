import os
import sys
from dataclasses import replace

import pytest

# Ensure project root is importable (so `import main` / `import cli` work without installing)
_project_root = os.path.dirname(os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from dnsreg import db  # noqa: E402
from dnsreg import settings as settings_mod  # noqa: E402
from dnsreg.models import ContainerDescriptor, Defaults, PortBinding  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_db(tmp_path, monkeypatch):
    """Point the sqlite event log at a per-test file."""
    monkeypatch.setattr(settings_mod, "settings", replace(settings_mod.settings, db_path=str(tmp_path / "test.db")))
    db.init_db()
    return tmp_path / "test.db"


@pytest.fixture
def defaults():
    return Defaults(environment="dev", ttl=60, port=80)


@pytest.fixture
def redis_container():
    return ContainerDescriptor(
        image="crosbymichael/redis:latest",
        name="/redis1",
        network_address="192.168.1.10",
        exposed_ports={"6379/tcp": [PortBinding(host_ip="0.0.0.0", host_port="49153")]},
        env=["PATH=/usr/bin", "DNS_SERVICE=cache"],
        id="3f2a9c81d0e4aa",
    )
