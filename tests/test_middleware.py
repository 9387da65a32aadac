"""Tests for application middleware (body size limit, security headers)."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_security_headers_present(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.headers["strict-transport-security"] == "max-age=63072000; includeSubDomains"
    assert resp.headers["x-content-type-options"] == "nosniff"
    assert resp.headers["x-frame-options"] == "DENY"
    assert resp.headers["x-xss-protection"] == "1; mode=block"
    assert resp.headers["referrer-policy"] == "strict-origin-when-cross-origin"


@pytest.mark.asyncio
async def test_security_headers_on_error_response(client: AsyncClient) -> None:
    """Headers are set even when auth fails."""
    resp = await client.get("/api/explorer/blocking-status")
    assert resp.status_code == 401
    assert resp.headers["x-content-type-options"] == "nosniff"
    assert resp.headers["x-frame-options"] == "DENY"


@pytest.mark.asyncio
async def test_body_size_limit_exceeded(client: AsyncClient) -> None:
    """POST with Content-Length > 1MB is rejected with 413."""
    resp = await client.post(
        "/api/explorer/reviews",
        content=b"x",
        headers={"Content-Length": "2000000", "Content-Type": "application/json"},
    )
    assert resp.status_code == 413


@pytest.mark.asyncio
async def test_body_size_limit_put_checked(client: AsyncClient) -> None:
    resp = await client.put(
        "/api/explorer/reviews/00000000-0000-0000-0000-000000000000",
        content=b"x",
        headers={"Content-Length": "2000000", "Content-Type": "application/json"},
    )
    assert resp.status_code == 413


@pytest.mark.asyncio
async def test_body_size_limit_exact_boundary(client: AsyncClient) -> None:
    """Exactly 1MB passes the size check (and fails later for other reasons)."""
    resp = await client.post(
        "/api/explorer/reviews",
        content=b"x",
        headers={"Content-Length": "1048576", "Content-Type": "application/json"},
    )
    assert resp.status_code != 413


@pytest.mark.asyncio
async def test_api_responses_not_cached(client: AsyncClient) -> None:
    resp = await client.get("/api/explorer/review-obligations")
    assert resp.headers["cache-control"] == "no-store"
    health = await client.get("/health")
    assert "cache-control" not in health.headers


@pytest.mark.asyncio
async def test_non_numeric_content_length(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/explorer/reviews",
        content=b"{}",
        headers={"Content-Length": "lots", "Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid Content-Length header"
