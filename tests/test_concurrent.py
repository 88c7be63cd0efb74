"""Tests that the server handles multiple concurrent connections correctly.

The store serializes every mutation behind one lock, so simultaneous
redirects must each be counted and simultaneous shortens must never hand
out the same code twice.
"""

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from shortlinks_web import create_app
from config import Config


@pytest.fixture
def app(service):
    """Create test FastAPI app (same as test_api)."""
    config = Config(
        storage_backend="memory",
        base_url="http://testserver",
    )
    return create_app(service, config)


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.mark.asyncio
class TestConcurrentConnections:
    """Prove the server handles many simultaneous requests."""

    async def test_concurrent_shorten_requests(self, client):
        """Many concurrent POST /api/shorten with different URLs; all succeed and short_codes are unique."""
        concurrency = 30
        urls = [f"https://example.com/page_{i}" for i in range(concurrency)]
        tasks = [
            client.post("/api/shorten", json={"url": url})
            for url in urls
        ]
        responses = await asyncio.gather(*tasks, return_exceptions=True)

        short_codes = []
        for i, r in enumerate(responses):
            if isinstance(r, Exception):
                pytest.fail(f"Request {i} raised: {r}")
            assert r.status_code == 200, f"Request {i}: status {r.status_code} body={r.text}"
            data = r.json()
            assert data["original_url"] == urls[i]
            short_codes.append(data["short_code"])

        assert len(short_codes) == len(set(short_codes)), "All short_codes must be unique under concurrency"

        stats = (await client.get("/api/stats")).json()
        assert stats["total_urls"] == concurrency

    async def test_concurrent_same_custom_code(self, client):
        """Exactly one of many requests for the same custom code wins."""
        tasks = [
            client.post("/api/shorten", json={"url": f"https://example.com/{i}", "custom_code": "race01"})
            for i in range(20)
        ]
        responses = await asyncio.gather(*tasks)

        codes = sorted(r.status_code for r in responses)
        assert codes == [200] + [409] * 19

    async def test_concurrent_redirect_requests(self, client):
        """Many concurrent redirects all succeed and every click is counted."""
        create_resp = await client.post(
            "/api/shorten",
            json={"url": "https://example.com/redirect-target"},
        )
        assert create_resp.status_code == 200
        short_code = create_resp.json()["short_code"]

        concurrency = 40
        tasks = [
            client.get(f"/{short_code}", follow_redirects=False)
            for _ in range(concurrency)
        ]
        responses = await asyncio.gather(*tasks, return_exceptions=True)

        for i, r in enumerate(responses):
            if isinstance(r, Exception):
                pytest.fail(f"Request {i} raised: {r}")
            assert r.status_code == 302, f"Request {i}: status {r.status_code}"
            assert r.headers.get("location") == "https://example.com/redirect-target"

        stats = (await client.get(f"/api/urls/{short_code}")).json()
        assert stats["clicks"] == concurrency
        assert len(stats["click_details"]) == concurrency

    async def test_concurrent_mixed_read_after_write(self, client):
        """Create one short URL, then many concurrent reads (url info + health) all succeed."""
        create_resp = await client.post(
            "/api/shorten",
            json={"url": "https://example.com/concurrent-target"},
        )
        assert create_resp.status_code == 200
        short_code = create_resp.json()["short_code"]

        async def get_info():
            return await client.get(f"/api/urls/{short_code}")

        async def get_health():
            return await client.get("/api/health")

        tasks = (
            [get_info() for _ in range(25)]
            + [get_health() for _ in range(25)]
        )
        responses = await asyncio.gather(*tasks, return_exceptions=True)

        for i, r in enumerate(responses):
            if isinstance(r, Exception):
                pytest.fail(f"Request {i} raised: {r}")
            assert r.status_code == 200, f"Request {i}: status {r.status_code}"
            if "urls" in str(r.request.url):
                data = r.json()
                assert data["short_code"] == short_code
                assert data["long_url"] == "https://example.com/concurrent-target"
