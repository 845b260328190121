import json

import httpx
import pytest

from grocer_client.core.types import RequestDescriptor
from grocer_client.transport import HttpTransport
from tests.helpers import BASE_URL


class RecordingBackend:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(
            200,
            json={"code": 1000, "result": None},
            headers={"set-cookie": "refreshToken=abc; Path=/"},
        )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_send_resolves_path_and_encodes_json_body():
    backend = RecordingBackend()
    async with HttpTransport(BASE_URL, mock=httpx.MockTransport(backend)) as transport:
        await transport.send(
            RequestDescriptor(
                "/cart/items",
                "POST",
                data={"productId": 4, "quantity": 2},
                params={"store": "north"},
                headers={"X-Trace": "t-1"},
            )
        )

    sent = backend.requests[0]
    assert str(sent.url) == f"{BASE_URL}/cart/items?store=north"
    assert sent.method == "POST"
    assert json.loads(sent.content) == {"productId": 4, "quantity": 2}
    assert sent.headers["content-type"] == "application/json"
    assert sent.headers["x-trace"] == "t-1"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_error_statuses_are_returned_not_raised():
    mock = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
    async with HttpTransport(BASE_URL, mock=mock) as transport:
        response = await transport.send(RequestDescriptor("/products"))

    assert response.status_code == 500


@pytest.mark.unit
@pytest.mark.asyncio
async def test_session_cookie_is_kept_and_reset_clears_it():
    backend = RecordingBackend()
    async with HttpTransport(BASE_URL, mock=httpx.MockTransport(backend)) as transport:
        await transport.send(RequestDescriptor("/auth/refresh", "POST"))
        assert transport.cookies.get("refreshToken") == "abc"

        await transport.send(RequestDescriptor("/products"))
        assert "refreshToken=abc" in backend.requests[1].headers["cookie"]

        transport.reset()

    assert len(transport.cookies) == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_borrowed_client_is_not_closed():
    client = httpx.AsyncClient(
        base_url=BASE_URL, transport=httpx.MockTransport(RecordingBackend())
    )
    transport = HttpTransport(client=client)

    await transport.aclose()

    assert not client.is_closed
    await client.aclose()
