"""Coding paths: where in the tree a value or error came from."""

from __future__ import annotations

from typing import Union

PathKey = Union[str, int]
CodingPath = tuple[PathKey, ...]

ROOT: CodingPath = ()


def render_path(path: CodingPath) -> str:
    """Render *path* as dotted text, e.g. ``("user", "tags", 0)`` -> ``user.tags.0``."""
    if not path:
        return "<root>"
    return ".".join(str(k) for k in path)
