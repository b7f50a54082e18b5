"""
ChurchFinder Client — REST API Client
=====================================

Async wrapper around the /api endpoints. Responses are returned as the JSON
the server sends (dicts/lists); non-2xx responses raise ApiError carrying the
server's `error` message.
"""

import logging
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

Payload = Union[BaseModel, Dict[str, Any]]


class ApiError(Exception):
    """A non-2xx response from the ChurchFinder API."""

    def __init__(self, status_code: int, message: str, code: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.code = code
        super().__init__(f"{status_code}: {message}")


def _body(payload: Payload) -> Dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", exclude_unset=True)
    return payload


class ChurchFinderClient:
    """
    One coroutine per endpoint.

    Usage:
        async with ChurchFinderClient("http://localhost:8000") as api:
            church = await api.get_church(place_id, seed={...})

    Tests pass an `http_client` built on httpx.ASGITransport so requests go
    straight to the app.
    """

    def __init__(self, base_url: str = "", http_client: Optional[httpx.AsyncClient] = None):
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(base_url=base_url)

    async def __aenter__(self) -> "ChurchFinderClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._http.request(method, path, **kwargs)
        if response.is_success:
            return response.json()

        message = response.reason_phrase or "Request failed"
        code = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            message = str(body["error"])
            code = body.get("code")
        elif response.text:
            message = response.text
        logger.debug("%s %s -> %d %s", method, path, response.status_code, message)
        raise ApiError(response.status_code, message, code)

    # ── Maps ──────────────────────────────────────────────────────────────

    async def get_map_credential(self) -> str:
        """API key for loading the mapping SDK."""
        data = await self._request("GET", "/api/maps/script")
        return data["apiKey"]

    @staticmethod
    def place_photo_url(photo_reference: str, maxwidth: Optional[int] = None) -> str:
        """Path of the photo proxy for a place photo reference (no request made)."""
        url = f"/api/maps/photo/{quote(photo_reference, safe='')}"
        if maxwidth is not None:
            url += f"?maxwidth={maxwidth}"
        return url

    # ── Churches ──────────────────────────────────────────────────────────

    async def list_churches(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/churches")

    async def list_denominations(self) -> List[str]:
        return await self._request("GET", "/api/churches/denominations")

    async def get_church(self, place_id: str, seed: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Find-or-create by place id.

        `seed` (name, vicinity, lat, lng, rating) is sent as query parameters
        and only used by the server when the place id is new.
        """
        params = {k: str(v) for k, v in (seed or {}).items() if v is not None}
        return await self._request(
            "GET", f"/api/churches/{quote(place_id, safe='')}", params=params
        )

    async def create_church(self, payload: Payload) -> Dict[str, Any]:
        return await self._request("POST", "/api/churches", json=_body(payload))

    async def update_church(self, church_id: int, changes: Payload) -> Dict[str, Any]:
        return await self._request("PATCH", f"/api/churches/{church_id}", json=_body(changes))

    async def add_service_time(self, church_id: int, payload: Payload) -> Dict[str, Any]:
        return await self._request(
            "POST", f"/api/churches/{church_id}/service-times", json=_body(payload)
        )

    async def add_review(self, church_id: int, payload: Payload) -> Dict[str, Any]:
        return await self._request(
            "POST", f"/api/churches/{church_id}/reviews", json=_body(payload)
        )

    async def search_church_photo(self, church_name: str) -> Optional[str]:
        """Image URL for a church by name, or None when the search found nothing."""
        try:
            data = await self._request(
                "GET", f"/api/churches/photos/{quote(church_name, safe='')}"
            )
        except ApiError as e:
            if e.status_code == 404:
                return None
            raise
        return data.get("imageUrl")
