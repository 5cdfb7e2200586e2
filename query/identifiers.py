"""
Identifier validation and quoting.

Every table, column and database name that ends up inside generated SQL text
passes through here. Values never do; they travel as bound parameters.
"""

import re

from utils.errors import ValidationError

IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def validate_identifier(raw, field: str) -> str:
    """
    Return `raw` unchanged if it is a safe identifier.

    Full-string match only: no whitespace, dots, quotes or backticks, and the
    first character may not be a digit.
    """
    if not isinstance(raw, str) or not IDENTIFIER_PATTERN.fullmatch(raw):
        raise ValidationError(
            f"Invalid parameter: {field} must contain only letters, numbers, and underscore"
        )
    return raw


def quote_identifier(raw, field: str) -> str:
    """Validate then wrap in backticks for interpolation into SQL."""
    return f"`{validate_identifier(raw, field)}`"
