"""End-to-end scenario tests for the request pipeline.

Each scenario drives a RequestPipeline against an in-process backend
(a FastAPI app behind httpx.ASGITransport, or an httpx.MockTransport
handler) and checks one aspect of the request discipline.
"""
