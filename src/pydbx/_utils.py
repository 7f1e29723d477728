"""Small string helpers shared by the mapping and rendering code."""

from __future__ import annotations

import re

_CAMEL_BOUNDARY_RE = re.compile(r"([^A-Z_])([A-Z])")


def default_field_map(name: str) -> str:
    """Convert a CamelCase field name into a snake_case column name.

    A separator is inserted only where a capital letter follows a
    character that is neither uppercase nor an underscore, so acronyms
    stay together: ``UserID`` becomes ``user_id`` and ``URLPath``
    becomes ``urlpath``.
    """
    return _CAMEL_BOUNDARY_RE.sub(r"\1_\2", name).lower()


def concat(*parts: str) -> str:
    """Join non-empty parts with a dot."""
    return ".".join(p for p in parts if p)
