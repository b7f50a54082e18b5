"""
Client-side form validation.

The forms validate against the same pydantic models the server uses, so a
submission that passes here is accepted by the API. Errors are reported per
field before any request is sent.
"""

from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)

FIELD_LABELS = {
    "user_name": "Name",
    "rating": "Rating",
    "day_of_week": "Day",
    "start_time": "Start time",
    "end_time": "End time",
}

REQUIRED_ERRORS = {"missing", "string_too_short"}


class FormValidationError(Exception):
    """Raised by validate_form(); `errors` maps field name to message."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in errors.items()))


def validate_form(schema: Type[SchemaT], data: Dict[str, Any]) -> SchemaT:
    """
    Validate form input.

    Returns:
        The validated model, ready to be sent with ChurchFinderClient.

    Raises:
        FormValidationError: one message per invalid field (first error wins).
    """
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        errors: Dict[str, str] = {}
        for error in e.errors(include_url=False):
            field = str(error["loc"][0]) if error["loc"] else "__all__"
            if field in errors:
                continue
            if error["type"] in REQUIRED_ERRORS:
                errors[field] = f"{FIELD_LABELS.get(field, field.replace('_', ' ').capitalize())} is required"
            else:
                errors[field] = error["msg"]
        raise FormValidationError(errors) from e
