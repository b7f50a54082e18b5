"""
ChurchFinder Backend — Google Proxy Tests
=========================================

What:  /api/maps/* and /api/churches/photos/* against a fake Google upstream
       (httpx.MockTransport). No network calls.

What we test:
    ✅ Map credential endpoint returns the configured key
    ✅ Photo proxy passes bytes and content type through, with cache header
    ✅ Upstream error status is passed through with a generic body
    ✅ Transport failure becomes 502
    ✅ Custom Search: first link, "No photos found" on empty results
"""

import httpx
import pytest

from conftest import CHURCH_IMAGE_URL, TEST_PNG


class TestMapCredential:

    @pytest.mark.asyncio
    async def test_script_returns_api_key(self, test_client):
        response = await test_client.get("/api/maps/script")

        assert response.status_code == 200
        assert response.json() == {"apiKey": "test-maps-key"}


class TestPhotoProxy:

    @pytest.mark.asyncio
    async def test_streams_image(self, test_client, fake_google):
        response = await test_client.get("/api/maps/photo/abc123")

        assert response.status_code == 200
        assert response.content == TEST_PNG
        assert response.headers["content-type"] == "image/png"
        assert response.headers["cache-control"] == "public, max-age=3600"

        upstream = fake_google.requests[0]
        assert upstream.url.params["photo_reference"] == "abc123"
        assert upstream.url.params["maxwidth"] == "400"
        assert upstream.url.params["key"] == "test-maps-key"

    @pytest.mark.asyncio
    async def test_maxwidth_is_forwarded(self, test_client, fake_google):
        await test_client.get("/api/maps/photo/abc123", params={"maxwidth": 800})
        assert fake_google.requests[0].url.params["maxwidth"] == "800"

    @pytest.mark.asyncio
    async def test_missing_content_type_defaults_to_jpeg(self, test_client, fake_google):
        fake_google.photo = lambda request: httpx.Response(200, content=b"\xff\xd8\xff\xd9")

        response = await test_client.get("/api/maps/photo/abc123")

        assert response.headers["content-type"] == "image/jpeg"

    @pytest.mark.asyncio
    async def test_upstream_status_passed_through(self, test_client, fake_google):
        fake_google.photo = lambda request: httpx.Response(403, text="The provided API key is invalid.")

        response = await test_client.get("/api/maps/photo/abc123")

        assert response.status_code == 403
        body = response.json()
        assert body["error"] == "Failed to fetch photo"
        assert "API key" not in response.text

    @pytest.mark.asyncio
    async def test_transport_failure_is_502(self, test_client, fake_google):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        fake_google.photo = refuse

        response = await test_client.get("/api/maps/photo/abc123")

        assert response.status_code == 502
        assert response.json()["code"] == "upstream_error"


class TestChurchPhotoSearch:

    @pytest.mark.asyncio
    async def test_returns_first_image_link(self, test_client, fake_google):
        response = await test_client.get("/api/churches/photos/St.%20Marys")

        assert response.status_code == 200
        assert response.json() == {"imageUrl": CHURCH_IMAGE_URL}

        params = fake_google.requests[0].url.params
        assert params["q"] == "St. Marys church building exterior"
        assert params["searchType"] == "image"
        assert params["num"] == "1"
        assert params["cx"] == "test-cx"

    @pytest.mark.asyncio
    async def test_no_results_is_404(self, test_client, fake_google):
        fake_google.search = lambda request: httpx.Response(200, json={"kind": "customsearch#search"})

        response = await test_client.get("/api/churches/photos/St.%20Marys")

        assert response.status_code == 404
        assert response.json()["error"] == "No photos found"

    @pytest.mark.asyncio
    async def test_search_failure_passes_status(self, test_client, fake_google):
        fake_google.search = lambda request: httpx.Response(429, json={"error": {"message": "quota"}})

        response = await test_client.get("/api/churches/photos/Trinity")

        assert response.status_code == 429
        assert response.json()["error"] == "Failed to search for photos"

    @pytest.mark.asyncio
    async def test_name_with_slash_reaches_search(self, test_client, fake_google):
        response = await test_client.get("/api/churches/photos/St.%20Mary%2FSt.%20Joseph")

        assert response.status_code == 200
        assert response.json() == {"imageUrl": CHURCH_IMAGE_URL}
        assert fake_google.requests[0].url.params["q"] == "St. Mary/St. Joseph church building exterior"
