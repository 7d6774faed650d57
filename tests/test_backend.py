"""Tests for the HTTP analysis backend client."""

import json

import httpx
import pytest

from clipbatch.errors import BackendError
from clipbatch.services import HttpAnalysisBackend


@pytest.mark.asyncio
async def test_invoke_posts_params():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"scenes": [0.0, 3.5]})

    backend = HttpAnalysisBackend("http://backend.test/", transport=httpx.MockTransport(handler))
    result = await backend.invoke("ffmpeg_detect_scenes", {"filePath": "/a.mp4", "threshold": 0.3})
    await backend.aclose()

    assert result == {"scenes": [0.0, 3.5]}
    assert seen["path"] == "/commands/ffmpeg_detect_scenes"
    assert seen["body"] == {"filePath": "/a.mp4", "threshold": 0.3}


@pytest.mark.asyncio
async def test_invoke_http_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="ffmpeg exited with code 1")

    backend = HttpAnalysisBackend("http://backend.test", transport=httpx.MockTransport(handler))

    with pytest.raises(BackendError, match="ffmpeg_quick_analysis failed: HTTP 500"):
        await backend.invoke("ffmpeg_quick_analysis", {"filePath": "/a.mp4"})
    await backend.aclose()


@pytest.mark.asyncio
async def test_invoke_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    backend = HttpAnalysisBackend("http://backend.test", transport=httpx.MockTransport(handler))

    with pytest.raises(BackendError, match="connection refused"):
        await backend.invoke("ffmpeg_quick_analysis", {"filePath": "/a.mp4"})
    await backend.aclose()
