"""
ChurchFinder Backend — Church Photo Search Service
===================================================

What:  Finds an exterior photo of a church through Google Custom Search.
How:   One image search for "<name> church building exterior"; the first
       result's link is the answer. No results is a 404, not an error.
Who:   GET /api/churches/photos/{church_name}. The client falls back to
       placeholder imagery on 404.
"""

import logging

import httpx

from churchfinder.config import Settings
from churchfinder.exceptions import NotFoundError, UpstreamError
from churchfinder.schemas.church import ChurchPhotoResponse

logger = logging.getLogger(__name__)

SEARCH_ERROR_MESSAGE = "Failed to search for photos"


class PhotoSearchService:
    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self.settings = settings
        self.http_client = http_client

    @staticmethod
    def build_query(church_name: str) -> str:
        return f"{church_name.strip()} church building exterior"

    async def search_church_photo(self, church_name: str) -> ChurchPhotoResponse:
        """
        Raises:
            NotFoundError: the search returned no images ("No photos found")
            UpstreamError: Custom Search failed (status passed through)
        """
        params = {
            "key": self.settings.google_search_api_key,
            "cx": self.settings.google_search_engine_id,
            "q": self.build_query(church_name),
            "searchType": "image",
            "num": 1,
        }

        try:
            response = await self.http_client.get(self.settings.custom_search_url, params=params)
        except httpx.HTTPError as e:
            logger.error("Custom search for %r failed: %s", church_name, str(e))
            raise UpstreamError(
                message=SEARCH_ERROR_MESSAGE,
                status_code=502,
                context={"church_name": church_name, "error_type": type(e).__name__},
            )

        if response.is_error:
            logger.error(
                "Custom search returned %d for %r: %s",
                response.status_code,
                church_name,
                response.text[:200],
            )
            raise UpstreamError(
                message=SEARCH_ERROR_MESSAGE,
                status_code=response.status_code,
                context={"church_name": church_name},
            )

        try:
            data = response.json()
        except ValueError:
            logger.error("Custom search returned a non-JSON body for %r", church_name)
            raise UpstreamError(message=SEARCH_ERROR_MESSAGE, status_code=502)

        items = data.get("items") if isinstance(data, dict) else None
        items = items or []
        link = items[0].get("link") if items else None
        if not link:
            logger.info("No photos found for %r", church_name)
            raise NotFoundError(
                resource="photo",
                message="No photos found",
                context={"church_name": church_name},
            )
        return ChurchPhotoResponse(image_url=link)
