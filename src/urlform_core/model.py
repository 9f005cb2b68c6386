"""Data model for urlform: the parsed form tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Union


# ---------------------------------------------------------------------------
# Tree values
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class FormText:
    """A single percent-decoded string."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class FormList:
    """Ordered values produced by ``key[]=...`` pairs."""

    items: tuple[FormData, ...] = ()

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True, slots=True, eq=False)
class FormDict:
    """Named values.  Key order is kept for display only.

    ``entries`` is a read-only view over a private copy of the mapping.
    """

    entries: Mapping[str, FormData] = field(default_factory=dict)

    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if not isinstance(self.entries, MappingProxyType):
            object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FormDict):
            return NotImplemented
        return dict(self.entries) == dict(other.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def get(self, key: str) -> FormData | None:
        return self.entries.get(key)


FormData = Union[FormText, FormList, FormDict]


def kind_name(data: FormData) -> str:
    """Human-readable shape name used in error messages."""
    if isinstance(data, FormText):
        return "scalar"
    if isinstance(data, FormList):
        return "sequence"
    return "mapping"


def to_python(data: FormData):
    """Convert a tree into plain ``str`` / ``list`` / ``dict`` values."""
    if isinstance(data, FormText):
        return data.value
    if isinstance(data, FormList):
        return [to_python(v) for v in data.items]
    return {k: to_python(v) for k, v in data.entries.items()}
