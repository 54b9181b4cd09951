import json

import httpx
import pytest

from crcbot.discord.rest import DiscordResponse, DiscordRestClient


def make_client(handler) -> tuple[DiscordRestClient, list]:
    requests = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(record))
    return DiscordRestClient("secret", "https://discord.test/api/v10/", client=http), requests


@pytest.mark.asyncio
async def test_post_message_returns_message_id():
    client, requests = make_client(lambda request: httpx.Response(200, json={"id": 1234567890}))

    response = await client.post_message("100", {"content": "hi"})

    assert response.ok
    assert response.message_id == "1234567890"
    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://discord.test/api/v10/channels/100/messages"
    assert request.headers["Authorization"] == "Bot secret"
    assert json.loads(request.content) == {"content": "hi"}


@pytest.mark.asyncio
async def test_post_message_http_error_is_returned():
    client, _ = make_client(lambda request: httpx.Response(403, json={"message": "Missing Access"}))

    response = await client.post_message("100", {"content": "hi"})

    assert not response.ok
    assert response.status_code == 403
    assert response.message_id is None


@pytest.mark.asyncio
async def test_network_error_has_no_status():
    def fail(request):
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = make_client(fail)

    response = await client.post_message("100", {"content": "hi"})

    assert not response.ok
    assert response.status_code is None
    assert "connection refused" in response.error


@pytest.mark.asyncio
async def test_pin_message():
    client, requests = make_client(lambda request: httpx.Response(204))

    assert await client.pin_message("100", "200") is True
    assert requests[0].method == "PUT"
    assert requests[0].url.path == "/api/v10/channels/100/pins/200"


@pytest.mark.asyncio
async def test_close_keeps_injected_client_open():
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(204)))
    client = DiscordRestClient("secret", client=http)

    await client.close()

    assert not http.is_closed
    await http.aclose()


def test_response_ok_range():
    assert DiscordResponse(status_code=204).ok
    assert not DiscordResponse(status_code=302).ok
    assert not DiscordResponse(status_code=None).ok
