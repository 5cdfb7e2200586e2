"""
Error Message Utilities

Provides human-readable explanations for MySQL server errors while keeping
the server's original message intact.
"""

import re
from typing import Optional

# MySQL server / client error codes worth explaining
ERROR_HINTS = {
    1045: "Access denied. Check the user name, password and host the account is allowed from.",
    1048: "Required field missing.",
    1049: "Unknown database. Call list_databases to see available schemas.",
    1054: "Unknown column. Call describe_table to see the table's columns.",
    1062: "Duplicate entry: a row with this key already exists.",
    1064: "SQL syntax error.",
    1146: "Table does not exist. Call list_tables to see available tables.",
    1451: "Foreign key violation: other rows still reference this row.",
    1452: "Foreign key violation: the referenced row does not exist.",
    2003: "Cannot connect to the MySQL server. Check host, port and that the server is running.",
}

_NOT_NULL_RE = re.compile(r"Column '(\w+)' cannot be null")
_DUPLICATE_RE = re.compile(r"Duplicate entry '(.*)' for key '([\w.]+)'")


def split_driver_error(error: Exception) -> tuple[Optional[int], str]:
    """
    Pull (code, message) out of a PyMySQL/aiomysql error.

    Driver errors carry args like (1146, "Table 'shop.x' doesn't exist").
    """
    args = getattr(error, "args", ())
    if len(args) >= 2 and isinstance(args[0], int):
        return args[0], str(args[1])
    return None, str(error)


def enhance_error_message(error: Exception) -> str:
    """
    Enhance MySQL error messages with human-readable explanations.

    Handles:
    - Known server/client error codes (adds an explanation)
    - Not-null violations (names the column)
    - Duplicate entries (names the value and key)

    The original message is always part of the returned string.
    """
    code, message = split_driver_error(error)

    if code is None:
        return message

    null_match = _NOT_NULL_RE.search(message)
    if code == 1048 and null_match:
        return f"Required field missing: '{null_match.group(1)}' cannot be null. ({message})"

    dup_match = _DUPLICATE_RE.search(message)
    if code == 1062 and dup_match:
        return (
            f"Duplicate entry: value '{dup_match.group(1)}' already exists "
            f"for key '{dup_match.group(2)}'. ({message})"
        )

    hint = ERROR_HINTS.get(code)
    if hint:
        return f"{hint} MySQL error {code}: {message}"

    return f"MySQL error {code}: {message}"
