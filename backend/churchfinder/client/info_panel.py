"""
ChurchFinder Client — Church Info Panel
=======================================

Shows the selected church's aggregate and hosts the three forms (service
time, review, details). Every successful submission refetches the aggregate
so the panel never shows stale lists.

States:
    empty ──select()──▶ loading ──ok──▶ loaded
                               └─fail─▶ error
"""

import logging
from datetime import time
from typing import Any, Dict, Optional, Tuple, Union

import httpx

from churchfinder.client.api import ApiError, ChurchFinderClient
from churchfinder.client.forms import validate_form
from churchfinder.client.map_view import Notify, PlaceResult
from churchfinder.models.church import DEFAULT_SERVICE_LANGUAGE
from churchfinder.schemas.church import ChurchUpdate, ReviewCreate, ServiceTimeCreate

logger = logging.getLogger(__name__)

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
PHOTO_UNAVAILABLE = "Photo unavailable"

EMPTY = "empty"
LOADING = "loading"
LOADED = "loaded"
ERROR = "error"


def _clock(value: Union[str, time]) -> str:
    """'14:05:00' -> '2:05 PM'"""
    if isinstance(value, str):
        value = time.fromisoformat(value)
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def describe_service_time(service: Dict[str, Any]) -> Tuple[str, str]:
    """
    Two display lines for a service time.

    >>> describe_service_time({"day_of_week": 0, "service_type": "Mass",
    ...     "start_time": "09:00:00", "end_time": "10:30:00", "language": "Spanish"})
    ('Sunday - Mass', '9:00 AM - 10:30 AM (Spanish)')
    """
    title = DAY_NAMES[service["day_of_week"]]
    if service.get("service_type"):
        title += f" - {service['service_type']}"

    detail = f"{_clock(service['start_time'])} - {_clock(service['end_time'])}"
    language = service.get("language") or DEFAULT_SERVICE_LANGUAGE
    if language != DEFAULT_SERVICE_LANGUAGE:
        detail += f" ({language})"
    return title, detail


class ChurchInfoPanel:
    def __init__(self, api: ChurchFinderClient, notify: Notify):
        self.api = api
        self.notify = notify
        self.state = EMPTY
        self.place: Optional[PlaceResult] = None
        self.church: Optional[Dict[str, Any]] = None
        self.error: Optional[str] = None

    async def select(self, place: PlaceResult) -> None:
        """Show `place`; fetches its aggregate by place id."""
        self.place = place
        self.church = None
        await self.refresh()

    async def refresh(self) -> None:
        if self.place is None:
            self.state = EMPTY
            return

        self.state = LOADING
        self.error = None
        try:
            self.church = await self.api.get_church(self.place.place_id, seed=self.place.seed())
        except (ApiError, httpx.HTTPError) as e:
            self.state = ERROR
            self.error = e.message if isinstance(e, ApiError) else "Could not reach the server"
            logger.warning("Loading church %s failed: %s", self.place.place_id, e)
            return
        self.state = LOADED

    def _church_id(self) -> int:
        if self.state != LOADED or self.church is None:
            raise RuntimeError("No church is loaded")
        return self.church["id"]

    async def _submit(self, call, success: str) -> Dict[str, Any]:
        try:
            result = await call
        except ApiError as e:
            self.notify("Error", e.message)
            raise
        self.notify("Success", success)
        await self.refresh()
        return result

    async def add_service_time(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate, post, refetch.

        Raises:
            FormValidationError: invalid input; nothing was sent
            ApiError: the server rejected the request (also notified)
        """
        church_id = self._church_id()
        payload = validate_form(ServiceTimeCreate, data)
        return await self._submit(
            self.api.add_service_time(church_id, payload), "Service time added successfully"
        )

    async def add_review(self, data: Dict[str, Any]) -> Dict[str, Any]:
        church_id = self._church_id()
        payload = validate_form(ReviewCreate, data)
        return await self._submit(
            self.api.add_review(church_id, payload), "Review submitted successfully"
        )

    async def edit_details(self, data: Dict[str, Any]) -> Dict[str, Any]:
        church_id = self._church_id()
        payload = validate_form(ChurchUpdate, data)
        return await self._submit(
            self.api.update_church(church_id, payload), "Church details updated"
        )

    async def photo_url(self, place: Optional[PlaceResult] = None) -> Optional[str]:
        """
        Image for the panel: the place's own photo through the proxy, else a
        custom-search result, else None (render PHOTO_UNAVAILABLE).
        """
        place = place or self.place
        if place is None:
            return None
        if place.photo_reference:
            return self.api.place_photo_url(place.photo_reference)
        try:
            return await self.api.search_church_photo(place.name)
        except (ApiError, httpx.HTTPError) as e:
            logger.info("Photo search for %s failed: %s", place.name, e)
            return None
