"""Serializer: a form tree back to ``key=value&...`` text."""

from __future__ import annotations

from urllib.parse import quote_plus

from .model import FormData, FormDict, FormList, FormText


def _segment(key: str) -> str:
    """Percent-encode one mapping key for use inside bracket notation."""
    if not key or "[" in key or "]" in key:
        # The parser reads literal and encoded brackets alike as nesting.
        raise ValueError(f"Mapping key {key!r} cannot be written in bracket notation")
    return quote_plus(key)


def _pairs(prefix: str, data: FormData) -> list[str]:
    if isinstance(data, FormText):
        return [f"{prefix}={quote_plus(data.value)}"]
    if isinstance(data, FormList):
        out: list[str] = []
        for item in data.items:
            out.extend(_pairs(f"{prefix}[]", item))
        return out
    out = []
    for key, value in data.entries.items():
        out.extend(_pairs(f"{prefix}[{_segment(key)}]", value))
    return out


def serialize(data: FormDict) -> str:
    """Render *data* using bracket notation for nesting.

    Reparsing the text gives back *data* except in these cases:

    - empty sequences and mappings write nothing;
    - each ``a[][]`` pair starts a new inner sequence;
    - ``a[][x]`` pairs fill the last mapping in ``a`` until it already holds
      ``x``.  A sequence of mappings therefore survives only when every
      element after the first starts with a scalar entry whose key the
      element before it also holds, as a list of same-shaped records does.
      ``[{a: 1}, {b: 2}]`` reparses as ``[{a: 1, b: 2}]``.

    Raises ``ValueError`` for empty keys and keys containing ``[`` or ``]``.
    """
    parts: list[str] = []
    for key, value in data.entries.items():
        parts.extend(_pairs(_segment(key), value))
    return "&".join(parts)
