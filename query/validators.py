"""
Input Validators

Parse-or-fail step for tool arguments. Pydantic does the shape checks; this
module turns its errors into a single ValidationError message the caller can
act on ("Missing required parameter: password", "Invalid parameter: ...").
"""

from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from utils.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

# pydantic error type -> human wording of the expected shape
EXPECTED_TYPES = {
    "dict_type": "an object",
    "list_type": "an array",
    "string_type": "a string",
    "int_type": "an integer",
    "int_parsing": "an integer",
    "int_from_float": "an integer",
    "bool_type": "a boolean",
    "bool_parsing": "a boolean",
}


def _format_error(error: dict) -> str:
    """Render one pydantic error dict as a caller-facing message."""
    loc = [str(part) for part in error.get("loc", ())]
    field = loc[0] if loc else "arguments"
    error_type = error.get("type", "")

    if error_type == "missing":
        return f"Missing required parameter: {field}"

    if error_type == "extra_forbidden":
        return f"Unknown parameter: {field}"

    if error_type == "value_error":
        message = error.get("msg", "")
        prefix = "Value error, "
        if message.startswith(prefix):
            message = message[len(prefix):]
        return f"Invalid parameter: {message}"

    if error_type == "string_too_short":
        return f"Invalid parameter: {field} cannot be empty"

    expected = EXPECTED_TYPES.get(error_type)
    if expected:
        if len(loc) > 1:
            return f"Invalid parameter: {field} items must each be {expected}"
        return f"Invalid parameter: {field} must be {expected}"

    return f"Invalid parameter: {field}: {error.get('msg', 'invalid value')}"


def parse_arguments(model: Type[ModelT], arguments: Optional[Any]) -> ModelT:
    """
    Validate raw tool arguments against `model`.

    Returns the parsed model, or raises ValidationError describing the first
    problem found.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise ValidationError("Invalid arguments: expected an object")

    try:
        return model.model_validate(arguments)
    except PydanticValidationError as e:
        errors = e.errors()
        message = _format_error(errors[0]) if errors else str(e)
        raise ValidationError(message) from e
