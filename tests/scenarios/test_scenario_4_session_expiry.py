"""Scenario 4: Business Envelope and Session Expiry

This module tests interpretation of 2xx response bodies:
- The session-expired code clears the token, redirects to login once,
  notifies once and rejects with category Unauthorized
- Session expiry never re-dispatches the request
- Other non-success codes reject with BusinessError and the body message
- Success codes and bodies without a code resolve with the raw body
- Falsy codes (0, "") count as absent
- Envelope field names and codes follow the configuration
"""

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

from request_pipeline.exceptions import BusinessError, SessionExpiredError
from request_pipeline.models import ErrorCategory


class Backend:
    """Backend returning canned envelopes and counting calls."""

    def __init__(self) -> None:
        self.calls = 0
        self.app = FastAPI()

        @self.app.get("/api/profile")
        async def profile():
            self.calls += 1
            return {"code": 401, "msg": "登录已过期", "data": None}

        @self.app.get("/api/profile-silent")
        async def profile_silent():
            self.calls += 1
            return {"code": 401}

        @self.app.post("/api/orders")
        async def create_order(data: dict):
            self.calls += 1
            return {"code": 500, "msg": "库存不足", "data": data}

        @self.app.get("/api/ok")
        async def ok():
            return {"code": 200, "msg": "成功", "data": {"id": 1}}

        @self.app.get("/api/text")
        async def text():
            return PlainTextResponse("pong")

        @self.app.get("/api/empty")
        async def empty():
            return Response(status_code=204)

        @self.app.get("/api/custom")
        async def custom():
            return {"status": 0, "message": "done", "result": [1]}

        @self.app.get("/api/custom-fail")
        async def custom_fail():
            return {"status": 7, "message": "配额不足"}

        @self.app.get("/api/zero")
        async def zero():
            return {"code": 0, "msg": "", "data": [1]}

        @self.app.get("/api/blank")
        async def blank():
            return {"code": "", "msg": "", "data": [2]}


@pytest.fixture
def backend() -> Backend:
    return Backend()


@pytest.fixture
def api(make_pipeline, backend: Backend):
    return make_pipeline(transport=httpx.ASGITransport(app=backend.app))


def assert_released(registry, loading) -> None:
    assert registry.count() == 0
    assert loading.count == 0


@pytest.mark.asyncio
async def test_session_expired(api, backend, session, navigator, notifier, registry, loading):
    with pytest.raises(SessionExpiredError) as exc_info:
        await api.get("/api/profile")

    error = exc_info.value
    assert error.category == ErrorCategory.UNAUTHORIZED
    assert error.classified.category == ErrorCategory.UNAUTHORIZED
    assert error.message == "登录已过期"
    assert error.payload["code"] == 401

    assert session.get_token() == ""
    assert navigator.history == ["/login"]
    assert notifier.messages == ["登录已过期"]
    assert backend.calls == 1
    assert_released(registry, loading)


@pytest.mark.asyncio
async def test_session_expired_without_message(api, notifier):
    with pytest.raises(SessionExpiredError) as exc_info:
        await api.get("/api/profile-silent")

    assert exc_info.value.message == "登录失效！请您重新登录"
    assert notifier.messages == ["登录失效！请您重新登录"]


@pytest.mark.asyncio
async def test_custom_login_path(make_pipeline, backend, navigator):
    api = make_pipeline(transport=httpx.ASGITransport(app=backend.app), login_path="/auth/sign-in")

    with pytest.raises(SessionExpiredError):
        await api.get("/api/profile")

    assert navigator.history == ["/auth/sign-in"]


@pytest.mark.asyncio
async def test_after_expiry_token_is_not_sent(api, backend):
    seen: list[str | None] = []

    @backend.app.get("/api/echo")
    async def echo(request: Request):
        seen.append(request.headers.get("x-access-token"))
        return {"code": 200}

    await api.get("/api/echo")
    with pytest.raises(SessionExpiredError):
        await api.get("/api/profile")
    await api.get("/api/echo")

    assert seen == ["token-abc", None]


@pytest.mark.asyncio
async def test_business_error(api, backend, notifier, navigator, session, registry, loading):
    with pytest.raises(BusinessError) as exc_info:
        await api.post("/api/orders", {"sku": "A1", "qty": 3})

    error = exc_info.value
    assert error.category == ErrorCategory.BUSINESS_ERROR
    assert error.message == "库存不足"
    assert error.original_status == 500
    assert error.payload["data"] == {"sku": "A1", "qty": 3}

    assert notifier.messages == ["库存不足"]
    assert navigator.history == []
    assert session.get_token() == "token-abc"
    assert_released(registry, loading)


@pytest.mark.asyncio
async def test_success_envelope_resolves_raw(api, notifier):
    result = await api.get("/api/ok")
    assert result == {"code": 200, "msg": "成功", "data": {"id": 1}}
    assert notifier.messages == []


@pytest.mark.asyncio
async def test_text_body_resolves_raw(api):
    assert await api.get("/api/text") == "pong"


@pytest.mark.asyncio
async def test_empty_body_resolves_none(api):
    assert await api.get("/api/empty") is None


@pytest.mark.asyncio
async def test_configured_envelope_fields(make_pipeline, backend, notifier):
    api = make_pipeline(
        transport=httpx.ASGITransport(app=backend.app),
        code_field="status",
        message_field="message",
        success_code=0,
    )

    assert (await api.get("/api/custom"))["result"] == [1]

    with pytest.raises(BusinessError) as exc_info:
        await api.get("/api/custom-fail")
    assert exc_info.value.message == "配额不足"
    assert notifier.messages == ["配额不足"]


@pytest.mark.asyncio
@pytest.mark.parametrize(("path", "code"), [("/api/zero", 0), ("/api/blank", "")])
async def test_falsy_code_resolves_raw(api, notifier, navigator, path, code):
    result = await api.get(path)

    assert result["code"] == code
    assert notifier.messages == []
    assert navigator.history == []
