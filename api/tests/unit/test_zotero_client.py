"""
Tests unitarios para ZoteroClient (httpx.MockTransport, sin red).
"""
from __future__ import annotations

import json

import httpx
import pytest

from app.infrastructure.concurrency import RateLimiter
from app.infrastructure.external.zotero.zotero_client import ZoteroApiError, ZoteroClient


def _client(handler) -> ZoteroClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ZoteroClient("secret", "groups/2764885", RateLimiter(0, name="test"), http_client=http)


@pytest.mark.asyncio
async def test_get_template_sends_headers_and_item_type() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        return httpx.Response(200, json={"itemType": "videoRecording", "title": ""})

    template = await _client(handler).get_template()

    assert template["itemType"] == "videoRecording"
    assert seen["url"] == "https://api.zotero.org/items/new?itemType=videoRecording"
    assert seen["headers"]["Authorization"] == "Bearer secret"
    assert seen["headers"]["Zotero-API-Version"] == "3"


@pytest.mark.asyncio
async def test_post_items_targets_library() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"successful": {}, "unchanged": {}, "failed": {}})

    await _client(handler).post_items([{"title": "Video 1"}])

    assert seen["method"] == "POST"
    assert seen["url"] == "https://api.zotero.org/groups/2764885/items"
    assert seen["body"] == [{"title": "Video 1"}]


@pytest.mark.asyncio
async def test_error_status_raises_with_upstream_status() -> None:
    client = _client(lambda request: httpx.Response(403, text="Forbidden"))

    with pytest.raises(ZoteroApiError) as exc_info:
        await client.post_collections([{"name": "Serie", "parentCollection": "HYQEFRGR"}])

    assert exc_info.value.upstream_status == 403
    assert exc_info.value.details["service"] == "zotero"


@pytest.mark.asyncio
async def test_network_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("sin red", request=request)

    with pytest.raises(ZoteroApiError):
        await _client(handler).get_template()


@pytest.mark.asyncio
async def test_empty_template_raises() -> None:
    with pytest.raises(ZoteroApiError):
        await _client(lambda request: httpx.Response(200, json={})).get_template()
