"""Tests for the control API client."""

import asyncio
import json

import httpx
import pytest

from sandbox_mcp import __version__
from sandbox_mcp.exceptions import ProtocolError, TransferIOError
from sandbox_mcp.services import ControlClient

BASE_URL = "https://api.example.test/v0.1"


def make_client(handler, token: str = "secret-token") -> ControlClient:
    """Create a ControlClient backed by a mock transport."""
    return ControlClient(
        base_url=BASE_URL,
        token=token,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_begin_upload_returns_ticket() -> None:
    """start_upload is POSTed and the ticket parsed."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200, json={"uploadId": "up-1", "signedUrl": "https://store.test/put?sig=1"}
        )

    ticket = await make_client(handler).begin_upload("m-1")

    assert ticket.upload_id == "up-1"
    assert ticket.signed_url == "https://store.test/put?sig=1"
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == f"{BASE_URL}/platform/me/machines/m-1/start_upload"


@pytest.mark.asyncio
async def test_headers_sent() -> None:
    """Every request carries auth, JSON and user agent headers."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    await make_client(handler).call_api("POST", "/anything")

    headers = seen[0].headers
    assert headers["Authorization"] == "secret-token"
    assert headers["Accept"] == "application/json"
    assert headers["Content-Type"] == "application/json"
    assert headers["User-Agent"] == f"sandbox-mcp/{__version__}"


@pytest.mark.asyncio
async def test_complete_upload_body() -> None:
    """complete_upload sends the upload id and destination."""
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/platform/me/machines/m-1/complete_upload")
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={})

    await make_client(handler).complete_upload("m-1", "up-1", "/Users/vagrant")

    assert bodies == [{"uploadId": "up-1", "destinationParentFolder": "/Users/vagrant"}]


@pytest.mark.asyncio
async def test_request_download_body_and_url() -> None:
    """download sends the source path and the contents-only flag."""
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/platform/me/machines/m-1/download")
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"signedUrl": "https://store.test/get?sig=2"})

    url = await make_client(handler).request_download("m-1", "/Users/vagrant/out", True)

    assert url == "https://store.test/get?sig=2"
    assert bodies == [{"sourcePath": "/Users/vagrant/out", "onlyContentsOfFolder": True}]


@pytest.mark.asyncio
async def test_non_success_status_raises_protocol_error() -> None:
    """A non-2xx status raises ProtocolError with status and body."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="machine not found")

    with pytest.raises(ProtocolError) as exc_info:
        await make_client(handler).begin_upload("m-1")

    assert exc_info.value.status_code == 404
    assert exc_info.value.body == "machine not found"
    assert "Unexpected status code 404" in str(exc_info.value)
    assert "machine not found" in str(exc_info.value)


@pytest.mark.asyncio
async def test_redirect_status_is_not_success() -> None:
    """3xx responses are failures, not successes."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(302, headers={"Location": "https://elsewhere.test"})

    with pytest.raises(ProtocolError):
        await make_client(handler).call_api("POST", "/x")


@pytest.mark.asyncio
async def test_long_error_body_truncated_in_message() -> None:
    """Huge error bodies are truncated in the message but kept on the error."""
    body = "x" * 5000

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text=body)

    with pytest.raises(ProtocolError) as exc_info:
        await make_client(handler).call_api("POST", "/x")

    assert "[truncated]" in str(exc_info.value)
    assert exc_info.value.body == body


@pytest.mark.asyncio
async def test_missing_fields_raise_protocol_error() -> None:
    """start_upload without uploadId or signedUrl is a protocol error."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"uploadId": "up-1"})

    with pytest.raises(ProtocolError, match="signedUrl"):
        await make_client(handler).begin_upload("m-1")


@pytest.mark.asyncio
async def test_download_without_signed_url_raises() -> None:
    """download without signedUrl is a protocol error."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    with pytest.raises(ProtocolError):
        await make_client(handler).request_download("m-1", "/tmp/x")


@pytest.mark.asyncio
async def test_unparsable_json_raises_protocol_error() -> None:
    """A 2xx response with invalid JSON is a protocol error."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="{not json")

    with pytest.raises(ProtocolError, match="Unparsable"):
        await make_client(handler).call_api("POST", "/x")


@pytest.mark.asyncio
async def test_non_object_json_raises_protocol_error() -> None:
    """A JSON array is not an acceptable response."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[1, 2])

    with pytest.raises(ProtocolError, match="JSON object"):
        await make_client(handler).call_api("POST", "/x")


@pytest.mark.asyncio
async def test_empty_body_returns_empty_dict() -> None:
    """An empty 2xx body parses as an empty object."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(204)

    assert await make_client(handler).call_api("POST", "/x") == {}


@pytest.mark.asyncio
async def test_network_error_raises_transfer_io_error() -> None:
    """Connection failures become TransferIOError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransferIOError, match="failed"):
        await make_client(handler).call_api("POST", "/x")


@pytest.mark.asyncio
async def test_timeout_raises_transfer_io_error() -> None:
    """Timeouts become TransferIOError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(TransferIOError, match="timed out"):
        await make_client(handler).call_api("POST", "/x")


@pytest.mark.asyncio
async def test_missing_token_fails_before_request() -> None:
    """Without a token no request is sent."""
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    with pytest.raises(ProtocolError, match="SANDBOX_API_TOKEN"):
        await make_client(handler, token="").begin_upload("m-1")
    assert calls == []


def test_base_url_trailing_slash_stripped() -> None:
    """Trailing slashes on the base URL are dropped."""
    client = ControlClient(base_url=BASE_URL + "/", token="t")
    assert client.base_url == BASE_URL


@pytest.mark.asyncio
async def test_slow_response_bounded_by_total_time() -> None:
    """A control API that stalls is cut off at the overall deadline."""

    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json={})

    client = ControlClient(
        base_url=BASE_URL,
        token="t",
        timeout=0.1,
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(TransferIOError, match="timed out after 0.1s"):
        await client.call_api("POST", "/x")
