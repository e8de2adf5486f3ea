import json

import httpx
import pytest

from dnsreg.models import ServiceRecord
from dnsreg.skydns import ConflictingUUID, ServiceNotFound, SkyDNSClient, SkyDNSError

RECORD = ServiceRecord(port=6379, environment="production", ttl="30", service="redis", instance="redis1", host="192.168.1.10")


def _client(handler, secret="s3cret"):
    return SkyDNSClient("http://skydns:8080/", secret=secret, transport=httpx.MockTransport(handler))


def test_add_puts_service_json():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(201)

    _client(handler).add("3f2a9c81d0", RECORD, 30)

    assert seen["method"] == "PUT"
    assert seen["path"] == "/skydns/services/3f2a9c81d0"
    assert seen["auth"] == "s3cret"
    assert seen["body"] == {
        "Name": "redis",
        "Version": "redis1",
        "Environment": "production",
        "Host": "192.168.1.10",
        "Port": 6379,
        "TTL": 30,
    }


def test_update_patches_ttl():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(200)

    _client(handler).update("abc", 45)
    assert seen == {"method": "PATCH", "body": {"TTL": 45}}


def test_no_secret_sends_no_authorization():
    def handler(request):
        assert "Authorization" not in request.headers
        return httpx.Response(200)

    _client(handler, secret="").delete("abc")


@pytest.mark.parametrize("status,exc", [(409, ConflictingUUID), (404, ServiceNotFound), (500, SkyDNSError)])
def test_http_errors(status, exc):
    client = _client(lambda request: httpx.Response(status, text="nope"))
    with pytest.raises(exc):
        client.add("abc", RECORD, 30)


def test_transport_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SkyDNSError):
        _client(handler).delete("abc")
