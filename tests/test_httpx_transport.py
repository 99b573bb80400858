import httpx

from ask_gemini.clients.httpx_transport import HttpxTransport
from ask_gemini.models.outcome import Answer, ApiError, Exit, StderrChunk, StdoutChunk
from ask_gemini.resolver import ResponseResolver

from conftest import ANSWER_BODY, ERROR_BODY

URL = "https://generativelanguage.googleapis.com/v1beta/models/m:generateContent?key=k"


def make_transport(handler):
    return HttpxTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


async def collect(transport, body=b'{"contents": []}'):
    return [outcome async for outcome in transport.run(URL, body)]


async def test_body_streams_as_stdout():
    seen = {}

    def handler(request):
        seen["body"] = request.content
        seen["content_type"] = request.headers["Content-Type"]
        seen["key"] = request.url.params["key"]
        return httpx.Response(200, text=ANSWER_BODY)

    outcomes = await collect(make_transport(handler))
    assert outcomes[-1] == Exit(0)
    assert "".join(o.text for o in outcomes if isinstance(o, StdoutChunk)) == ANSWER_BODY
    assert seen == {"body": b'{"contents": []}', "content_type": "application/json", "key": "k"}
    assert ResponseResolver().feed_all(outcomes) == Answer("hello")


async def test_http_error_status_still_exits_cleanly():
    outcomes = await collect(make_transport(lambda request: httpx.Response(429, text=ERROR_BODY)))
    assert outcomes[-1] == Exit(0)
    assert ResponseResolver().feed_all(outcomes) == ApiError("quota exceeded", ERROR_BODY)


async def test_connection_failure_becomes_stderr_and_exit_code():
    def handler(request):
        raise httpx.ConnectError("Name or service not known", request=request)

    outcomes = await collect(make_transport(handler))
    assert outcomes == [StderrChunk("Name or service not known"), Exit(1)]


async def test_shared_client_is_left_open():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))
    await collect(HttpxTransport(client=client))
    assert not client.is_closed
    await client.aclose()
