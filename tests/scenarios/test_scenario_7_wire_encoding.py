"""Scenario 7: What Reaches the Wire

This module tests the request as the backend receives it:
- Nested query params use bracket keys, arrays repeat their key
- Form-urlencoded bodies use the same encoding as the query string
- Redirects are followed and the final response is interpreted
"""

from urllib.parse import parse_qs

import httpx
import pytest


class WireHandler:
    """MockTransport handler recording requests, with one redirecting route."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/api/old":
            return httpx.Response(302, headers={"Location": "/api/new"})
        return httpx.Response(200, json={"code": 200, "msg": "ok", "data": request.url.path})


@pytest.fixture
def handler() -> WireHandler:
    return WireHandler()


@pytest.fixture
def api(make_pipeline, handler: WireHandler):
    return make_pipeline(handler)


@pytest.mark.asyncio
async def test_nested_params_use_bracket_keys(api, handler):
    await api.get("/api/search", {"filter": {"name": "a"}, "page": 1})

    sent = handler.requests[0].url.params
    assert sent.multi_items() == [("filter[name]", "a"), ("page", "1")]
    assert "{" not in str(handler.requests[0].url)


@pytest.mark.asyncio
async def test_array_params_repeat_key(api, handler):
    await api.delete("/api/users", {"ids": [3, 1], "hard": True})

    sent = handler.requests[0].url.params
    assert sent.get_list("ids") == ["3", "1"]
    assert sent["hard"] == "true"


@pytest.mark.asyncio
async def test_string_params_pass_through(api, handler):
    await api.get("/api/search", "q=raw")

    assert handler.requests[0].url.params["q"] == "raw"


@pytest.mark.asyncio
async def test_nested_form_body(api, handler):
    await api.post(
        "/api/profile",
        {"user": {"name": "张"}, "tags": ["a", "b"]},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    request = handler.requests[0]
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    assert parse_qs(request.content.decode()) == {"tags": ["a", "b"], "user[name]": ["张"]}


@pytest.mark.asyncio
async def test_redirect_is_followed(api, handler, notifier, registry, loading):
    result = await api.get("/api/old")

    assert result == {"code": 200, "msg": "ok", "data": "/api/new"}
    assert [r.url.path for r in handler.requests] == ["/api/old", "/api/new"]
    assert notifier.messages == []
    assert registry.count() == 0
    assert loading.count == 0
