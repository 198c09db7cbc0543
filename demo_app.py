"""Demo backend and client for the request pipeline.

The FastAPI app answers with the ``{code, msg, data}`` envelope the pipeline
expects. Run the server with ``python demo_app.py`` or walk through the client
side without a socket using ``python demo_app.py --walkthrough``.
"""

import asyncio
import sys
from datetime import UTC, datetime
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from request_pipeline import PipelineConfig, RequestPipeline
from request_pipeline.collaborators import HistoryNavigator, MemorySessionStore
from request_pipeline.exceptions import (
    BusinessError,
    CancellationError,
    HttpStatusError,
    SessionExpiredError,
)
from request_pipeline.observability import configure_logging

app = FastAPI(
    title="Request Pipeline Demo",
    description="Demo API answering with the {code, msg, data} envelope",
    version="0.1.0",
)

VALID_TOKEN = "demo-token"


class LoginRequest(BaseModel):
    username: str
    password: str


class OrderRequest(BaseModel):
    product_id: str
    quantity: int


def envelope(data=None, code: int = 200, msg: str = "ok") -> dict:
    return {"code": code, "msg": msg, "data": data}


@app.get("/")
async def root():
    """Root endpoint - returns API info."""
    return envelope(
        {
            "name": "Request Pipeline Demo",
            "endpoints": {
                "POST /api/login": "Obtain an access token",
                "GET /api/orders": "List orders (slow, cancellable)",
                "POST /api/orders": "Create an order",
                "GET /api/expired": "Always reports an expired session",
                "GET /api/missing": "Always answers 404",
                "POST /api/export": "Download a CSV file",
            },
        }
    )


@app.post("/api/login")
async def login(credentials: LoginRequest):
    if credentials.password != "secret":
        return envelope(code=500, msg="用户名或密码错误")
    return envelope({"token": VALID_TOKEN})


@app.get("/api/orders")
async def list_orders(
    page: int = 1,
    x_access_token: Optional[str] = Header(None),
):
    """List orders after a short delay so repeated calls overlap."""
    if x_access_token != VALID_TOKEN:
        return envelope(code=401, msg="登录已过期，请重新登录")
    await asyncio.sleep(0.2)
    return envelope({"page": page, "orders": [{"id": f"ord_{page}_1"}]})


@app.post("/api/orders")
async def create_order(order: OrderRequest, x_access_token: Optional[str] = Header(None)):
    if x_access_token != VALID_TOKEN:
        return envelope(code=401, msg="登录已过期，请重新登录")
    return envelope(
        {
            "order_id": f"ord_{order.product_id}",
            "quantity": order.quantity,
            "created_at": datetime.now(UTC).isoformat(),
        }
    )


@app.get("/api/expired")
async def expired():
    return envelope(code=401, msg="登录已过期，请重新登录")


@app.get("/api/missing")
async def missing(request: Request):
    return JSONResponse(status_code=404, content={"detail": f"{request.url.path} not found"})


@app.post("/api/export")
async def export_orders():
    return Response(
        content=b"id,quantity\nord_1,2\n",
        media_type="text/csv",
    )


async def walkthrough() -> None:
    """Exercise every pipeline behaviour against the in-process app."""
    session = MemorySessionStore()
    navigator = HistoryNavigator(initial="/orders")
    config = PipelineConfig(base_url="http://demo")
    transport = httpx.ASGITransport(app=app)

    async with RequestPipeline(
        config, session=session, navigator=navigator, transport=transport
    ) as api:
        login_data = await api.post("/api/login", {"username": "demo", "password": "secret"})
        session.set_token(login_data["token"])
        print("logged in:", login_data)

        print("created:", await api.post("/api/orders", {"product_id": "p1", "quantity": 2}))

        # The second identical call supersedes the first.
        first = asyncio.create_task(api.get("/api/orders", {"page": 1}))
        await asyncio.sleep(0.05)
        second = asyncio.create_task(api.get("/api/orders", {"page": 1}))
        try:
            await first
        except CancellationError as exc:
            print("first call:", exc.reason)
        print("second call:", await second)

        try:
            await api.get("/api/missing")
        except HttpStatusError as exc:
            print("http error:", exc.original_status, exc.classified.message)

        print("export:", await api.download("/api/export"))

        try:
            await api.post("/api/login", {"username": "demo", "password": "wrong"})
        except BusinessError as exc:
            print("business error:", exc.original_status, exc.message)

        try:
            await api.get("/api/expired")
        except SessionExpiredError as exc:
            print("session expired:", exc.message, "->", navigator.current)


if __name__ == "__main__":
    configure_logging(level="INFO", json_output=False)

    if "--walkthrough" in sys.argv:
        asyncio.run(walkthrough())
        sys.exit(0)

    print("=" * 60)
    print("Request Pipeline Demo Server")
    print("=" * 60)
    print("\nStarting server at http://localhost:8000")
    print("\nTry these commands:")
    print("  curl http://localhost:8000")
    print("  python demo_app.py --walkthrough")
    print("\nPress Ctrl+C to stop")
    print("=" * 60)
    print()

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
