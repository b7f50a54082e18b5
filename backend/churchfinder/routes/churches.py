"""
ChurchFinder Backend — Church Route Handlers
=============================================

What:  The /api/churches resource: listing, denominations, photo search,
       find-or-create by place id, creation, partial update, and the
       service-time / review sub-resources.

Route order matters: the fixed paths (/denominations, /photos/...) are
registered before /{place_id} so they are not captured as place ids.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from churchfinder.database import get_db_session
from churchfinder.dependencies import (
    get_church_service,
    get_photo_search_service,
    get_review_service,
    get_service_time_service,
)
from churchfinder.schemas.church import (
    ChurchCreate,
    ChurchDetailResponse,
    ChurchPhotoResponse,
    ChurchResponse,
    ChurchSeed,
    ChurchUpdate,
    ChurchWithServiceTimes,
    ErrorResponse,
    ReviewCreate,
    ReviewResponse,
    ServiceTimeCreate,
    ServiceTimeResponse,
    parse_payload,
)
from churchfinder.services.church_service import ChurchService
from churchfinder.services.photo_search_service import PhotoSearchService
from churchfinder.services.review_service import ReviewService
from churchfinder.services.service_time_service import ServiceTimeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/churches", tags=["Churches"])

ERRORS_400 = {400: {"description": "Invalid data", "model": ErrorResponse}}
ERRORS_404 = {404: {"description": "Church not found", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[ChurchWithServiceTimes],
    summary="List churches with their service times",
)
async def list_churches(
    db: AsyncSession = Depends(get_db_session),
    churches: ChurchService = Depends(get_church_service),
) -> List[ChurchWithServiceTimes]:
    return await churches.list_churches(db)


@router.get(
    "/denominations",
    response_model=List[str],
    summary="Distinct denominations for the filter control",
)
async def list_denominations(
    db: AsyncSession = Depends(get_db_session),
    churches: ChurchService = Depends(get_church_service),
) -> List[str]:
    return await churches.list_denominations(db)


@router.get(
    "/photos/{church_name:path}",
    response_model=ChurchPhotoResponse,
    responses={404: {"description": "No photos found", "model": ErrorResponse}},
    summary="Find an exterior photo of a church by name",
)
async def search_church_photo(
    church_name: str,
    photos: PhotoSearchService = Depends(get_photo_search_service),
) -> ChurchPhotoResponse:
    return await photos.search_church_photo(church_name)


@router.get(
    "/{place_id}",
    response_model=ChurchDetailResponse,
    responses=ERRORS_400,
    summary="Get a church by place id, creating it on first lookup",
    description=(
        "Returns the church with its service times and reviews (newest first). "
        "If the place id is unknown, a church is created from the name, vicinity, "
        "lat, lng and rating query parameters and returned with empty lists."
    ),
)
async def get_or_create_church(
    place_id: str,
    name: Optional[str] = Query(default=None),
    vicinity: Optional[str] = Query(default=None),
    lat: Optional[str] = Query(default=None),
    lng: Optional[str] = Query(default=None),
    rating: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
    churches: ChurchService = Depends(get_church_service),
) -> ChurchDetailResponse:
    raw_seed = {"name": name, "vicinity": vicinity, "lat": lat, "lng": lng, "rating": rating}
    seed = None
    if any(value is not None for key, value in raw_seed.items() if key != "rating"):
        seed = parse_payload(
            ChurchSeed,
            {key: value for key, value in raw_seed.items() if value is not None},
            "church",
        )
    return await churches.find_or_create(db, place_id, seed)


@router.post(
    "",
    response_model=ChurchResponse,
    status_code=201,
    responses={**ERRORS_400, 409: {"description": "Place id already exists", "model": ErrorResponse}},
    summary="Create a church",
)
async def create_church(
    payload: Any = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
    churches: ChurchService = Depends(get_church_service),
) -> ChurchResponse:
    data = parse_payload(ChurchCreate, payload, "church")
    return await churches.create(db, data)


@router.patch(
    "/{church_id}",
    response_model=ChurchResponse,
    responses={**ERRORS_400, **ERRORS_404},
    summary="Update a church's phone, website, denomination or description",
)
async def update_church(
    church_id: int,
    payload: Any = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
    churches: ChurchService = Depends(get_church_service),
) -> ChurchResponse:
    changes = parse_payload(ChurchUpdate, payload, "church")
    return await churches.update(db, church_id, changes)


@router.post(
    "/{church_id}/service-times",
    response_model=ServiceTimeResponse,
    status_code=201,
    responses={**ERRORS_400, **ERRORS_404},
    summary="Add a weekly service time",
)
async def add_service_time(
    church_id: int,
    payload: Any = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
    service_times: ServiceTimeService = Depends(get_service_time_service),
) -> ServiceTimeResponse:
    data = parse_payload(ServiceTimeCreate, payload, "service time")
    return await service_times.add(db, church_id, data)


@router.post(
    "/{church_id}/reviews",
    response_model=ReviewResponse,
    status_code=201,
    responses={**ERRORS_400, **ERRORS_404},
    summary="Add a review",
)
async def add_review(
    church_id: int,
    payload: Any = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
    reviews: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    data = parse_payload(ReviewCreate, payload, "review")
    return await reviews.add(db, church_id, data)
