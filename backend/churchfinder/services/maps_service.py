"""
ChurchFinder Backend — Google Maps Proxy Service
=================================================

What:  Hands the browser its Maps SDK key and proxies place photos.
How:   Photos are streamed from the Places photo endpoint through the shared
       httpx client; the upstream content type is passed through and the
       upstream status is preserved on failure.
Who:   GET /api/maps/script and GET /api/maps/photo/{reference}.

No retries and no timeout policy beyond the httpx client defaults: a failed
upstream call fails the request.
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx

from churchfinder.config import Settings
from churchfinder.exceptions import UpstreamError
from churchfinder.schemas.church import MapCredentialResponse

logger = logging.getLogger(__name__)

PHOTO_ERROR_MESSAGE = "Failed to fetch photo"


@dataclass
class PlacePhoto:
    """An open upstream photo response. `close()` must run after streaming."""

    content_type: str
    response: httpx.Response

    def iter_bytes(self) -> AsyncIterator[bytes]:
        return self.response.aiter_bytes()

    async def close(self) -> None:
        await self.response.aclose()


class MapsService:
    DEFAULT_CONTENT_TYPE = "image/jpeg"

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self.settings = settings
        self.http_client = http_client

    def get_map_credential(self) -> MapCredentialResponse:
        """The server-held key the browser needs to load the Maps SDK."""
        return MapCredentialResponse(api_key=self.settings.google_maps_api_key)

    async def get_place_photo(self, reference: str, maxwidth: Optional[int] = None) -> PlacePhoto:
        """
        Open a streaming request for a place photo.

        Args:
            reference: photo_reference from a places result
            maxwidth: requested width in pixels (default from settings, 400)

        Raises:
            UpstreamError: upstream answered 4xx/5xx (status passed through),
                or the request failed in transport (502)
        """
        width = maxwidth or self.settings.photo_default_max_width
        request = self.http_client.build_request(
            "GET",
            self.settings.maps_photo_url,
            params={
                "maxwidth": width,
                "photo_reference": reference,
                "key": self.settings.google_maps_api_key,
            },
        )

        try:
            # The photo endpoint answers with a redirect to the image bytes
            response = await self.http_client.send(request, stream=True, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.error("Photo request for %s failed: %s", reference, str(e))
            raise UpstreamError(
                message=PHOTO_ERROR_MESSAGE,
                status_code=502,
                context={"reference": reference, "error_type": type(e).__name__},
            )

        if response.is_error:
            body = await response.aread()
            await response.aclose()
            logger.error(
                "Photo upstream returned %d for %s: %s",
                response.status_code,
                reference,
                body[:200].decode("utf-8", errors="replace"),
            )
            raise UpstreamError(
                message=PHOTO_ERROR_MESSAGE,
                status_code=response.status_code,
                context={"reference": reference},
            )

        content_type = response.headers.get("content-type") or self.DEFAULT_CONTENT_TYPE
        return PlacePhoto(content_type=content_type, response=response)
