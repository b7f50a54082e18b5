"""
ChurchFinder Backend — Route Dependencies
==========================================

Accessors for the objects the app factory stores on `app.state`, so route
handlers receive them through FastAPI's Depends() instead of module globals.
"""

from fastapi import Request

from churchfinder.config import Settings
from churchfinder.services.church_service import ChurchService
from churchfinder.services.maps_service import MapsService
from churchfinder.services.photo_search_service import PhotoSearchService
from churchfinder.services.review_service import ReviewService
from churchfinder.services.service_time_service import ServiceTimeService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_church_service(request: Request) -> ChurchService:
    return request.app.state.church_service


def get_service_time_service(request: Request) -> ServiceTimeService:
    return request.app.state.service_time_service


def get_review_service(request: Request) -> ReviewService:
    return request.app.state.review_service


def get_maps_service(request: Request) -> MapsService:
    return request.app.state.maps_service


def get_photo_search_service(request: Request) -> PhotoSearchService:
    return request.app.state.photo_search_service
