"""
Safe SQL construction for MySQL MCP Server

Identifier validation/quoting, parameterized clause building and the
argument parse-or-fail step.
"""

from .identifiers import IDENTIFIER_PATTERN, validate_identifier, quote_identifier
from .builder import QueryBuilder, split_order_by
from .validators import parse_arguments

__all__ = [
    'IDENTIFIER_PATTERN',
    'validate_identifier',
    'quote_identifier',
    'QueryBuilder',
    'split_order_by',
    'parse_arguments',
]
