"""Parsing and formatting of solution identifiers (GUIDs)."""

from __future__ import annotations

import uuid
from typing import Callable

IdentifierSource = Callable[[], uuid.UUID]


def new_identifier() -> uuid.UUID:
    return uuid.uuid4()


def parse_identifier(value: str) -> uuid.UUID:
    """Parse a GUID string in any of the usual spellings.

    Accepts bare hex digits, the hyphenated form, and the brace or
    parenthesis wrapped forms. Raises ValueError on anything else.
    """
    text = value.strip()
    if len(text) >= 2 and (text[0], text[-1]) in (("{", "}"), ("(", ")")):
        text = text[1:-1]
    if not text or "{" in text or "}" in text:
        raise ValueError(f"Invalid identifier: {value!r}")
    return uuid.UUID(text)


def try_parse_identifier(value: str | None) -> uuid.UUID | None:
    if not value:
        return None
    try:
        return parse_identifier(value)
    except ValueError:
        return None


def format_identifier(identifier: uuid.UUID) -> str:
    """Render an identifier the way solution files spell them: {UPPER-CASE}."""
    return "{" + str(identifier).upper() + "}"
