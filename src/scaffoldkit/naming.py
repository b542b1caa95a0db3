"""Identifier derivation for generated Go code."""

from __future__ import annotations

import re

from .exceptions import InvalidIdentifierError

_GO_IDENTIFIER = re.compile(r"^[A-Za-z][A-Za-z0-9]*$")


def capitalize_first(value: str) -> str:
    """Uppercase the first character and leave the rest untouched."""
    if not value:
        return value
    return value[0].upper() + value[1:]


def to_identifier(name: str) -> str:
    """Convert a snake_case name into a capitalized Go identifier.

    ``order_item`` becomes ``OrderItem``. Applying the conversion to its own
    output returns the same value, so repeated runs name things identically.

    Raises:
        InvalidIdentifierError: If the name yields an empty or non-alphanumeric
            identifier
    """
    identifier = "".join(capitalize_first(part) for part in name.strip().split("_"))
    if not _GO_IDENTIFIER.match(identifier):
        msg = f"Cannot derive an identifier from {name!r}"
        raise InvalidIdentifierError(msg, details={"name": name})
    return identifier


def route_segment(table_name: str) -> str:
    """URL segment and view directory for a table (``order_item`` -> ``order_items``)."""
    return f"{table_name.strip().lower()}s"


def lower_camel(identifier: str) -> str:
    """Lower camel form of an identifier (``OrderItem`` -> ``orderItem``)."""
    return identifier[:1].lower() + identifier[1:]
