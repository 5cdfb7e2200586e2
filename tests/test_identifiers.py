"""
Tests for identifier validation and quoting
"""

import pytest

from query.identifiers import quote_identifier, validate_identifier
from utils.errors import ValidationError


class TestValidateIdentifier:
    """Names that may be interpolated into SQL text"""

    @pytest.mark.parametrize("name", ["orders", "_tmp", "Order_Items2", "a", "_", "T1_x_9"])
    def test_accepts_safe_names(self, name):
        """Letters, digits and underscore, not starting with a digit."""
        assert validate_identifier(name, "table") == name

    @pytest.mark.parametrize("name", [
        "1orders",
        "order items",
        "shop.orders",
        "ord`ers",
        "orders;",
        " orders",
        "orders ",
        "orders\n",
        "ordérs",
        "",
        "o-rders",
        "o'rders",
    ])
    def test_rejects_unsafe_names(self, name):
        """Anything outside the allow-list is rejected outright, never escaped."""
        with pytest.raises(ValidationError):
            validate_identifier(name, "table")

    @pytest.mark.parametrize("value", [None, 42, ["orders"]])
    def test_rejects_non_strings(self, value):
        with pytest.raises(ValidationError):
            validate_identifier(value, "table")

    def test_error_names_the_field(self):
        """The message points at the offending field."""
        with pytest.raises(ValidationError) as exc_info:
            validate_identifier("bad name", "where.bad name")

        assert exc_info.value.message == (
            "Invalid parameter: where.bad name must contain only letters, numbers, and underscore"
        )
        assert exc_info.value.kind == "ValidationError"


class TestQuoteIdentifier:

    @pytest.mark.parametrize("name", ["orders", "_x", "Col_9"])
    def test_wraps_in_backticks_only(self, name):
        """Quoting only adds the delimiters."""
        quoted = quote_identifier(name, "column")
        assert quoted == f"`{name}`"
        assert quoted[1:-1] == name

    def test_validates_before_quoting(self):
        with pytest.raises(ValidationError):
            quote_identifier("x`; DROP TABLE users; --", "column")
