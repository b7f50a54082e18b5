"""
ChurchFinder Client — Map View
==============================

What:  Drives the map: loads the SDK credential, searches nearby churches
       whenever the map goes idle, resolves every result through the
       find-or-create endpoint and places one marker per resolved church.
How:   The mapping SDK is reached only through MapCapability, so any SDK
       binding (or a fake in tests) can be plugged in.

Idle flow:
    get_bounds() → search_nearby(bounds, "church") → remove old markers
        → for each place, in order:
              api.get_church(place_id, seed) ─ ok ──▶ place_marker()
                                             └ fail ─▶ notify(), skip
Resolutions run one after another; nothing is cached between idle events.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from churchfinder.client.api import ApiError, ChurchFinderClient

logger = logging.getLogger(__name__)

Notify = Callable[[str, str], None]


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float


@dataclass(frozen=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float


@dataclass
class PlaceResult:
    """A nearby-search hit as the places provider reports it."""

    place_id: str
    name: str
    vicinity: str
    location: LatLng
    rating: Optional[float] = None
    photo_reference: Optional[str] = None

    def seed(self) -> Dict[str, Any]:
        """Fields sent along with find-or-create for a place seen for the first time."""
        return {
            "name": self.name,
            "vicinity": self.vicinity,
            "lat": self.location.lat,
            "lng": self.location.lng,
            "rating": self.rating,
        }


DEFAULT_CENTER = LatLng(40.7128, -74.0060)  # New York
DEFAULT_ZOOM = 13
CHURCH_PLACE_TYPE = "church"


class MapCapability(ABC):
    """The operations MapView needs from a mapping SDK."""

    @abstractmethod
    def create_map(self, center: LatLng, zoom: int) -> None:
        """Create the map centred on `center`."""

    @abstractmethod
    def place_marker(self, position: LatLng, title: str, on_click: Callable[[], None]) -> Any:
        """Place a marker and return an opaque handle for remove_marker()."""

    @abstractmethod
    def remove_marker(self, handle: Any) -> None:
        ...

    @abstractmethod
    async def search_nearby(self, bounds: Bounds, place_type: str) -> List[PlaceResult]:
        ...

    @abstractmethod
    def get_bounds(self) -> Optional[Bounds]:
        """Current viewport, or None before the map has rendered."""


class MapView:
    """
    Map controller.

    Args:
        api: REST client
        capability: mapping SDK binding
        on_select: called with the PlaceResult whose marker was clicked
        notify: toast-style callback, notify(title, description)
    """

    def __init__(
        self,
        api: ChurchFinderClient,
        capability: MapCapability,
        on_select: Callable[[PlaceResult], None],
        notify: Notify,
        center: LatLng = DEFAULT_CENTER,
        zoom: int = DEFAULT_ZOOM,
    ):
        self.api = api
        self.capability = capability
        self.on_select = on_select
        self.notify = notify
        self.center = center
        self.zoom = zoom

        self.api_key: Optional[str] = None
        self.denomination: Optional[str] = None
        self._results: List[Tuple[PlaceResult, Dict[str, Any]]] = []
        self._markers: List[Any] = []

    @property
    def marker_count(self) -> int:
        return len(self._markers)

    @property
    def results(self) -> List[Tuple[PlaceResult, Dict[str, Any]]]:
        """(place, church aggregate) pairs from the last idle search."""
        return list(self._results)

    async def open(self) -> None:
        """
        Fetch the SDK credential, then create the map.

        Raises:
            ApiError / httpx.HTTPError: credential could not be fetched
                (reported through notify first).
        """
        try:
            self.api_key = await self.api.get_map_credential()
        except (ApiError, httpx.HTTPError) as e:
            self.notify("Error", "Could not load the map")
            logger.error("Map credential fetch failed: %s", e)
            raise
        self.capability.create_map(self.center, self.zoom)

    async def on_idle(self) -> None:
        """Search the current viewport and re-place all markers."""
        bounds = self.capability.get_bounds()
        if bounds is None:
            return

        try:
            places = await self.capability.search_nearby(bounds, CHURCH_PLACE_TYPE)
        except Exception as e:
            logger.warning("Nearby search failed: %s", e)
            self.notify("Error", "Could not search for nearby churches")
            return

        self._clear_markers()
        self._results = []
        for place in places:
            try:
                church = await self.api.get_church(place.place_id, seed=place.seed())
            except (ApiError, httpx.HTTPError) as e:
                logger.warning("Could not resolve place %s: %s", place.place_id, e)
                self.notify("Error", f"Could not load details for {place.name}")
                continue
            self._results.append((place, church))
            if self._matches_filter(church):
                self._place(place)

    def set_denomination_filter(self, denomination: Optional[str]) -> None:
        """Show only churches of `denomination` (None shows all). No refetch."""
        self.denomination = denomination
        self._clear_markers()
        for place, church in self._results:
            if self._matches_filter(church):
                self._place(place)

    def _matches_filter(self, church: Dict[str, Any]) -> bool:
        return self.denomination is None or church.get("denomination") == self.denomination

    def _place(self, place: PlaceResult) -> None:
        handle = self.capability.place_marker(
            place.location, place.name, on_click=lambda: self.on_select(place)
        )
        self._markers.append(handle)

    def _clear_markers(self) -> None:
        for handle in self._markers:
            self.capability.remove_marker(handle)
        self._markers = []
