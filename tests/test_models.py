import pytest

from dnsreg.models import ContainerDescriptor, Defaults, MissingFieldError, PortBinding, ServiceRecord


def _inspect(**overrides):
    attrs = {
        "Id": "3f2a9c81d0e4aa77",
        "Name": "/web_1",
        "Config": {"Image": "myrepo/myapp:latest", "Env": ["DNS_SERVICE=api", "PATH=/bin"]},
        "NetworkSettings": {
            "IPAddress": "172.17.0.4",
            "Ports": {
                "80/tcp": [{"HostIp": "0.0.0.0", "HostPort": "8080"}],
                "9000/tcp": None,
            },
        },
        "State": {"Running": True},
    }
    attrs.update(overrides)
    return attrs


def test_from_inspect():
    c = ContainerDescriptor.from_inspect(_inspect())

    assert c.image == "myrepo/myapp:latest"
    assert c.name == "/web_1"
    assert c.network_address == "172.17.0.4"
    assert c.exposed_ports == {"80/tcp": [PortBinding(host_ip="0.0.0.0", host_port="8080")], "9000/tcp": None}
    assert c.env == ["DNS_SERVICE=api", "PATH=/bin"]
    assert c.running is True


def test_from_inspect_event_image_overrides_config():
    c = ContainerDescriptor.from_inspect(_inspect(), image="myrepo/myapp:2.0")
    assert c.image == "myrepo/myapp:2.0"


def test_from_inspect_uses_network_address_from_user_network():
    attrs = _inspect(NetworkSettings={"IPAddress": "", "Networks": {"app": {"IPAddress": "10.1.0.7"}}})
    c = ContainerDescriptor.from_inspect(attrs)
    assert c.network_address == "10.1.0.7"
    assert c.exposed_ports == {}


def test_from_inspect_without_address_fails():
    with pytest.raises(MissingFieldError):
        ContainerDescriptor.from_inspect(_inspect(NetworkSettings={"IPAddress": ""}))


def test_from_inspect_stopped_container():
    c = ContainerDescriptor.from_inspect(_inspect(State={"Running": False}))
    assert c.running is False


@pytest.mark.parametrize("ttl,expected", [(30, 30), ("45", 45), ("abc", 60), ("0", 60), ("-5", 60)])
def test_ttl_seconds(ttl, expected):
    record = ServiceRecord(port=80, environment="dev", ttl=ttl, service="api", instance="web_1", host="10.0.0.1")
    assert record.ttl_seconds(60) == expected


def test_dns_name():
    record = ServiceRecord(port=80, environment="dev", ttl=60, service="api", instance="web_1", host="10.0.0.1")
    assert record.dns_name() == "web_1.api.dev"
    assert record.dns_name("skydns.local.") == "web_1.api.dev.skydns.local"


@pytest.mark.parametrize(
    "kwargs",
    [{"environment": "", "ttl": 60}, {"environment": "dev", "ttl": 0}, {"environment": "dev", "ttl": 60, "port": 0}],
)
def test_defaults_validation(kwargs):
    with pytest.raises(ValueError):
        Defaults(**kwargs)


@pytest.mark.parametrize("ttl,valid", [(30, True), ("030", True), ("abc", False), ("0", False), ("", False)])
def test_has_valid_ttl(ttl, valid):
    record = ServiceRecord(port=80, environment="dev", ttl=ttl, service="api", instance="web_1", host="10.0.0.1")
    assert record.has_valid_ttl() is valid
