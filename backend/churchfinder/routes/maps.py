"""
ChurchFinder Backend — Maps Proxy Route Handlers
=================================================

What:  GET /api/maps/script (SDK key) and GET /api/maps/photo/{reference}
       (place photo passthrough with a one-hour cache header).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from churchfinder.config import Settings
from churchfinder.dependencies import get_maps_service, get_settings
from churchfinder.schemas.church import ErrorResponse, MapCredentialResponse
from churchfinder.services.maps_service import MapsService

router = APIRouter(prefix="/api/maps", tags=["Maps"])


@router.get(
    "/script",
    response_model=MapCredentialResponse,
    summary="Maps SDK key for the browser",
)
async def get_map_script(
    maps: MapsService = Depends(get_maps_service),
) -> MapCredentialResponse:
    return maps.get_map_credential()


@router.get(
    "/photo/{reference}",
    response_class=StreamingResponse,
    responses={
        200: {"description": "Image bytes", "content": {"image/jpeg": {}}},
        502: {"description": "Upstream failure", "model": ErrorResponse},
    },
    summary="Proxy a place photo",
)
async def get_place_photo(
    reference: str,
    maxwidth: Optional[int] = Query(default=None, ge=1, le=1600),
    maps: MapsService = Depends(get_maps_service),
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    photo = await maps.get_place_photo(reference, maxwidth)
    return StreamingResponse(
        photo.iter_bytes(),
        media_type=photo.content_type,
        headers={"Cache-Control": f"public, max-age={settings.photo_cache_seconds}"},
        background=BackgroundTask(photo.close),
    )
