"""
ChurchFinder Backend — Pydantic Request/Response Schemas
=========================================================

What:  The API contract: request bodies, seed parameters and response shapes.
How:   Write paths call `parse_payload()` with one of the *Create/*Update
       models before touching the database; routes declare the response
       models so FastAPI serializes ORM rows through them.

Wire format:
    Stored fields travel in snake_case (day_of_week, user_name, ...), the way
    the browser client reads them. Request bodies also accept the camelCase
    spelling (dayOfWeek, userName, ...). The aggregate arrays are named
    `serviceTimes` and `reviews`; the proxy responses use `apiKey`/`imageUrl`.
"""

import math
from datetime import datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
)

from churchfinder.exceptions import ValidationError
from churchfinder.models.church import DEFAULT_SERVICE_LANGUAGE

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def parse_payload(schema: Type[SchemaT], payload: Any, label: str) -> SchemaT:
    """
    Validate `payload` against `schema`.

    Raises:
        ValidationError: "Invalid <label> data". The pydantic error list is
            attached as context for the server log only.
    """
    if not isinstance(payload, dict):
        raise ValidationError(
            message=f"Invalid {label} data",
            context={"errors": [f"expected an object, got {type(payload).__name__}"]},
        )
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(
            message=f"Invalid {label} data",
            context={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


def _decimal_text(value: Any) -> str:
    """Normalize a coordinate/rating to text that parses as a finite decimal."""
    if isinstance(value, bool) or value is None:
        raise ValueError("must be a number")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError("must be a finite number")
    text = str(value).strip()
    try:
        number = Decimal(text)
    except InvalidOperation:
        raise ValueError("must be a number")
    if not number.is_finite():
        raise ValueError("must be a finite number")
    return text


def _reject_bool(value: Any) -> Any:
    # bool is an int subclass; true/false must not become 1/0
    if isinstance(value, bool):
        raise ValueError("must be a number, not a boolean")
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ChurchSeed(BaseModel):
    """
    Fields a places-provider result contributes when a church is first seen.

    Sent as query parameters on GET /api/churches/{place_id}.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    vicinity: str = Field(min_length=1)
    lat: str
    lng: str
    rating: Optional[str] = None

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def validate_coordinate(cls, v: Any) -> str:
        return _decimal_text(v)

    @field_validator("lat")
    @classmethod
    def validate_latitude_range(cls, v: str) -> str:
        if not -90 <= Decimal(v) <= 90:
            raise ValueError("latitude must be between -90 and 90")
        return v

    @field_validator("lng")
    @classmethod
    def validate_longitude_range(cls, v: str) -> str:
        if not -180 <= Decimal(v) <= 180:
            raise ValueError("longitude must be between -180 and 180")
        return v

    @field_validator("rating", mode="before")
    @classmethod
    def validate_rating(cls, v: Any) -> Optional[str]:
        v = _blank_to_none(v)
        if v is None:
            return None
        text = _decimal_text(v)
        if not 0 <= Decimal(text) <= 5:
            raise ValueError("rating must be between 0 and 5")
        return text


class ChurchCreate(ChurchSeed):
    """Body of POST /api/churches."""

    place_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("place_id", "placeId"),
    )
    phone: Optional[str] = None
    website: Optional[str] = None
    denomination: Optional[str] = None
    description: Optional[str] = None

    @field_validator("phone", "website", "denomination", "description", mode="before")
    @classmethod
    def blank_is_null(cls, v: Any) -> Any:
        return _blank_to_none(v)


class ChurchUpdate(BaseModel):
    """
    Body of PATCH /api/churches/{id}.

    Only business fields are accepted. Unknown keys (including place_id,
    which never changes) are rejected. A blank string clears a field.
    """

    model_config = ConfigDict(extra="forbid")

    phone: Optional[str] = None
    website: Optional[str] = None
    denomination: Optional[str] = None
    description: Optional[str] = None

    @field_validator("phone", "website", "denomination", "description", mode="before")
    @classmethod
    def blank_is_null(cls, v: Any) -> Any:
        return _blank_to_none(v)


class ServiceTimeCreate(BaseModel):
    """Body of POST /api/churches/{church_id}/service-times."""

    model_config = ConfigDict(populate_by_name=True)

    day_of_week: int = Field(
        ge=0, le=6,
        validation_alias=AliasChoices("day_of_week", "dayOfWeek"),
        description="0 = Sunday .. 6 = Saturday",
    )
    start_time: time = Field(validation_alias=AliasChoices("start_time", "startTime"))
    end_time: time = Field(validation_alias=AliasChoices("end_time", "endTime"))
    service_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("service_type", "serviceType"),
    )
    language: str = DEFAULT_SERVICE_LANGUAGE

    @field_validator("day_of_week", mode="before")
    @classmethod
    def day_not_bool(cls, v: Any) -> Any:
        return _reject_bool(v)

    @field_validator("service_type", mode="before")
    @classmethod
    def blank_service_type(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("language", mode="before")
    @classmethod
    def default_language(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        return DEFAULT_SERVICE_LANGUAGE if v is None else v


class ReviewCreate(BaseModel):
    """Body of POST /api/churches/{church_id}/reviews."""

    model_config = ConfigDict(populate_by_name=True)

    user_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("user_name", "userName"),
    )
    rating: float = Field(ge=1, le=5)
    comment: Optional[str] = None

    @field_validator("user_name", mode="before")
    @classmethod
    def strip_user_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("rating", mode="before")
    @classmethod
    def rating_not_bool(cls, v: Any) -> Any:
        return _reject_bool(v)

    @field_validator("rating")
    @classmethod
    def one_decimal(cls, v: float) -> float:
        return round(v, 1)

    @field_validator("comment", mode="before")
    @classmethod
    def blank_comment(cls, v: Any) -> Any:
        return _blank_to_none(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ServiceTimeResponse(BaseModel):
    id: int
    church_id: int
    day_of_week: int
    start_time: time
    end_time: time
    service_type: Optional[str] = None
    language: str

    model_config = ConfigDict(from_attributes=True)


class ReviewResponse(BaseModel):
    id: int
    church_id: int
    user_name: str
    rating: float
    comment: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ChurchResponse(BaseModel):
    """A church row without its relations."""

    id: int
    place_id: str
    name: str
    vicinity: str
    lat: str
    lng: str
    rating: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    denomination: Optional[str] = None
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ChurchWithServiceTimes(ChurchResponse):
    """Item of GET /api/churches."""

    service_times: List[ServiceTimeResponse] = Field(default_factory=list, alias="serviceTimes")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ChurchDetailResponse(ChurchWithServiceTimes):
    """
    Aggregate returned by GET /api/churches/{place_id}.

    `serviceTimes` and `reviews` are always present, empty for a church that
    was just created. Reviews are newest first.
    """

    reviews: List[ReviewResponse] = Field(default_factory=list)


class MapCredentialResponse(BaseModel):
    api_key: str = Field(alias="apiKey")

    model_config = ConfigDict(populate_by_name=True)


class ChurchPhotoResponse(BaseModel):
    image_url: str = Field(alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    """
    Error body for every non-2xx response.

    Example:
        {"error": "No photos found", "code": "not_found", "request_id": "a1b2c3d4"}
    """

    error: str = Field(description="Human-readable error message")
    code: str = Field(description="Machine-readable error code")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float


def church_detail(church: Any, service_times: List[Any], reviews: List[Any]) -> ChurchDetailResponse:
    """Build the aggregate from a church row and already-loaded children."""
    base: Dict[str, Any] = ChurchResponse.model_validate(church).model_dump()
    return ChurchDetailResponse(
        **base,
        service_times=[ServiceTimeResponse.model_validate(s) for s in service_times],
        reviews=[ReviewResponse.model_validate(r) for r in reviews],
    )
