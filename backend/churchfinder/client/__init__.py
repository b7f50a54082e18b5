"""
ChurchFinder Client
===================

Python counterpart of the browser client:

    api.py         — ChurchFinderClient: one coroutine per REST endpoint
    forms.py       — validate_form(): client-side checks before any POST/PATCH
    map_view.py    — MapView over an abstract MapCapability (the mapping SDK)
    info_panel.py  — ChurchInfoPanel: selected church, forms, refetch

The mapping SDK itself is not part of this package; MapCapability is the seam
a real SDK binding (or a test fake) plugs into.
"""

from churchfinder.client.api import ApiError, ChurchFinderClient
from churchfinder.client.forms import FormValidationError, validate_form
from churchfinder.client.info_panel import ChurchInfoPanel, describe_service_time
from churchfinder.client.map_view import (
    DEFAULT_CENTER,
    DEFAULT_ZOOM,
    Bounds,
    LatLng,
    MapCapability,
    MapView,
    PlaceResult,
)

__all__ = [
    "ApiError",
    "Bounds",
    "ChurchFinderClient",
    "ChurchInfoPanel",
    "DEFAULT_CENTER",
    "DEFAULT_ZOOM",
    "FormValidationError",
    "LatLng",
    "MapCapability",
    "MapView",
    "PlaceResult",
    "describe_service_time",
    "validate_form",
]
