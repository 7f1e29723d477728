"""Ordered parameter bindings for one render pass."""

from __future__ import annotations

from typing import Any


class Params(dict[str, Any]):
    """Placeholder name to value bindings.

    Generated names are derived from the current size of the set, so the
    names handed out depend on the order in which fragments are built.
    """

    def add(self, value: Any) -> str:
        """Bind a value under the next generated name and return the name."""
        name = f"p{len(self)}"
        self[name] = value
        return name

    def copy(self) -> Params:
        return Params(self)
