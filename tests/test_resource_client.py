"""
tests.test_resource_client

Authenticated request issuer and resource URL resolution.
"""

from __future__ import annotations

import httpx
import pytest

from jwt_bearer_flow.clients.resource import ResourceClient, resolve_resource_url
from jwt_bearer_flow.errors import RequestError
from jwt_bearer_flow.orchestrator.stages import FlowStage

URL = "https://inst.example.com/services/data/v37.0/sobjects/Account/"


def _client(handler) -> ResourceClient:
    return ResourceClient(http=httpx.Client(transport=httpx.MockTransport(handler)))


def test_sends_bearer_header_and_returns_raw_body() -> None:
    seen: list[httpx.Request] = []
    raw = '{"objectDescribe": {"name": "Account"},  "recentItems": []}'

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=raw)

    body = _client(handler).get(URL, access_token="AT1")

    assert body == raw
    (request,) = seen
    assert request.method == "GET"
    assert request.headers["authorization"] == "Bearer AT1"


@pytest.mark.parametrize("status", [401, 404, 500])
def test_non_2xx_raises(status: int) -> None:
    handler = lambda request: httpx.Response(status, text='[{"errorCode":"INVALID_SESSION_ID"}]')  # noqa: E731
    with pytest.raises(RequestError) as exc:
        _client(handler).get(URL, access_token="AT1")
    assert exc.value.status_code == status
    assert "INVALID_SESSION_ID" in exc.value.body
    assert exc.value.stage is FlowStage.ISSUE_REQUEST


def test_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RequestError) as exc:
        _client(handler).get(URL, access_token="AT1")
    assert exc.value.status_code is None


@pytest.mark.parametrize(
    ("resource_url", "base_url", "expected"),
    [
        ("/services/data/v37.0/sobjects/Account/", "https://inst.example.com", URL),
        ("services/data/v37.0/sobjects/Account/", "https://inst.example.com/", URL),
        (URL, "https://elsewhere.example.com", URL),
    ],
)
def test_resolve_resource_url(resource_url: str, base_url: str, expected: str) -> None:
    assert resolve_resource_url(resource_url, base_url) == expected
