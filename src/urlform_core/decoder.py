"""Decoding engine: containers over a parsed form tree.

Usage::

    @dataclass
    class User:
        name: str
        age: int

    user = FormDecoder().decode(User, "name=Vapor&age=3")

A destination type asks a ``Decoder`` for the container matching its own
shape (keyed, unkeyed or single value) and pulls values out of it.  Each
pull that reaches a nested node recurses through a fresh ``Decoder`` whose
coding path is extended by the key or index just consumed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, TypeVar

from .convertible import leaf_converter
from .decodable import build
from .errors import (
    IndexOutOfRangeError,
    MissingFieldError,
    ShapeMismatchError,
    ValueNotConvertibleError,
)
from .model import FormData, FormDict, FormList, FormText, kind_name
from .parser import FormParser
from .path import CodingPath, ROOT

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EMPTY_INFO: Mapping[str, Any] = MappingProxyType({})


def _decode_value(tp: Any, data: FormData, path: CodingPath, user_info: Mapping[str, Any]) -> Any:
    """Convert *data* through a leaf converter, or recurse structurally."""
    convert = leaf_converter(tp)
    if convert is not None:
        return convert(data, path)
    return build(tp, Decoder(data, path, user_info))


# ---------------------------------------------------------------------------
# Decoder
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Decoder:
    """One recursion level: a tree node plus the path that led to it."""

    data: FormData
    coding_path: CodingPath = ROOT
    user_info: Mapping[str, Any] = field(default_factory=lambda: _EMPTY_INFO)

    def keyed_container(self) -> KeyedContainer:
        if isinstance(self.data, FormDict):
            return KeyedContainer(self.data, self.coding_path, self.user_info)
        raise ShapeMismatchError("mapping", kind_name(self.data), self.coding_path)

    def unkeyed_container(self) -> UnkeyedContainer:
        if isinstance(self.data, FormList):
            return UnkeyedContainer(self.data, self.coding_path, self.user_info)
        raise ShapeMismatchError("sequence", kind_name(self.data), self.coding_path)

    def single_value_container(self) -> SingleValueContainer:
        return SingleValueContainer(self.data, self.coding_path, self.user_info)

    def decode(self, tp: type[T]) -> T:
        """Build *tp* from this node."""
        return build(tp, self)


# ---------------------------------------------------------------------------
# Keyed container
# ---------------------------------------------------------------------------

class KeyedContainer:
    """Field access over a mapping node."""

    __slots__ = ("_entries", "coding_path", "user_info")

    def __init__(
        self,
        data: FormDict,
        coding_path: CodingPath = ROOT,
        user_info: Mapping[str, Any] = _EMPTY_INFO,
    ) -> None:
        self._entries = data.entries
        self.coding_path = coding_path
        self.user_info = user_info

    def __repr__(self) -> str:
        return f"KeyedContainer(keys={list(self._entries)!r}, coding_path={self.coding_path!r})"

    def _lookup(self, key: str) -> FormData:
        data = self._entries.get(key)
        if data is None:
            raise MissingFieldError(key, self.coding_path + (key,))
        return data

    def contains(self, key: str) -> bool:
        return key in self._entries

    def decode_nil(self, key: str) -> bool:
        """True when *key* is absent; the tree has no explicit null."""
        return key not in self._entries

    def decode(self, tp: type[T], key: str) -> T:
        data = self._lookup(key)
        return _decode_value(tp, data, self.coding_path + (key,), self.user_info)

    def decode_if_present(self, tp: type[T], key: str, default: Any = None) -> T | Any:
        if key not in self._entries:
            return default
        return self.decode(tp, key)

    def nested_keyed_container(self, key: str) -> KeyedContainer:
        data = self._lookup(key)
        path = self.coding_path + (key,)
        if not isinstance(data, FormDict):
            raise ShapeMismatchError("mapping", kind_name(data), path)
        return KeyedContainer(data, path, self.user_info)

    def nested_unkeyed_container(self, key: str) -> UnkeyedContainer:
        data = self._lookup(key)
        path = self.coding_path + (key,)
        if not isinstance(data, FormList):
            raise ShapeMismatchError("sequence", kind_name(data), path)
        return UnkeyedContainer(data, path, self.user_info)

    def key_map(self, key_type: Any = str) -> dict[Any, str]:
        """Map each key convertible to *key_type* onto the raw key it came from.

        Keys that *key_type* rejects are left out.  When several raw keys
        convert to the same value (``"1"`` and ``"01"`` as ``int``) the last
        one in the mapping wins.
        """
        if key_type is str:
            return {k: k for k in self._entries}
        convert = leaf_converter(key_type)
        if convert is None:
            raise TypeError(f"{key_type!r} cannot be used as a mapping key")
        keys: dict[Any, str] = {}
        for raw in self._entries:
            try:
                key = convert(FormText(raw), self.coding_path + (raw,))
            except ValueNotConvertibleError:
                continue
            if key in keys:
                logger.debug("Keys %r and %r both convert to %r; using %r", keys[key], raw, key, raw)
            keys[key] = raw
        return keys

    def all_keys(self, key_type: Any = str) -> list[Any]:
        return list(self.key_map(key_type))

    def super_decoder(self, key: str | None = None) -> Decoder:
        """A decoder over the value at *key*, or over this whole mapping."""
        if key is None:
            return Decoder(FormDict(self._entries), self.coding_path, self.user_info)
        return Decoder(self._lookup(key), self.coding_path + (key,), self.user_info)


# ---------------------------------------------------------------------------
# Unkeyed container
# ---------------------------------------------------------------------------

class UnkeyedContainer:
    """Forward-only cursor over a sequence node.

    Every successful pull advances the cursor by one.
    """

    __slots__ = ("_items", "coding_path", "user_info", "current_index")

    def __init__(
        self,
        data: FormList,
        coding_path: CodingPath = ROOT,
        user_info: Mapping[str, Any] = _EMPTY_INFO,
    ) -> None:
        self._items = data.items
        self.coding_path = coding_path
        self.user_info = user_info
        self.current_index = 0

    def __repr__(self) -> str:
        return (
            f"UnkeyedContainer(count={self.count}, current_index={self.current_index}, "
            f"coding_path={self.coding_path!r})"
        )

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def is_at_end(self) -> bool:
        return self.current_index >= len(self._items)

    def has_more(self) -> bool:
        return not self.is_at_end

    def _current(self) -> tuple[FormData, CodingPath]:
        index = self.current_index
        path = self.coding_path + (index,)
        if index >= len(self._items):
            raise IndexOutOfRangeError(index, len(self._items), path)
        return self._items[index], path

    def decode_nil(self) -> bool:
        return False

    def decode(self, tp: type[T]) -> T:
        data, path = self._current()
        value = _decode_value(tp, data, path, self.user_info)
        self.current_index += 1
        return value

    def nested_keyed_container(self) -> KeyedContainer:
        data, path = self._current()
        if not isinstance(data, FormDict):
            raise ShapeMismatchError("mapping", kind_name(data), path)
        self.current_index += 1
        return KeyedContainer(data, path, self.user_info)

    def nested_unkeyed_container(self) -> UnkeyedContainer:
        data, path = self._current()
        if not isinstance(data, FormList):
            raise ShapeMismatchError("sequence", kind_name(data), path)
        self.current_index += 1
        return UnkeyedContainer(data, path, self.user_info)

    def super_decoder(self) -> Decoder:
        data, path = self._current()
        self.current_index += 1
        return Decoder(data, path, self.user_info)


# ---------------------------------------------------------------------------
# Single value container
# ---------------------------------------------------------------------------

class SingleValueContainer:
    """The whole remaining tree at a path, read as one value."""

    __slots__ = ("data", "coding_path", "user_info")

    def __init__(
        self,
        data: FormData,
        coding_path: CodingPath = ROOT,
        user_info: Mapping[str, Any] = _EMPTY_INFO,
    ) -> None:
        self.data = data
        self.coding_path = coding_path
        self.user_info = user_info

    def __repr__(self) -> str:
        return f"SingleValueContainer(data={self.data!r}, coding_path={self.coding_path!r})"

    def decode_nil(self) -> bool:
        return False

    def decode(self, tp: type[T]) -> T:
        return _decode_value(tp, self.data, self.coding_path, self.user_info)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

@dataclass
class FormDecoder:
    """Decodes typed values from ``application/x-www-form-urlencoded`` text.

    ``omit_empty_values`` drops keys with nothing after ``=`` (``age=``).
    ``omit_flags`` drops keys with no ``=`` at all (``isAdmin``).
    ``user_info`` is handed, read-only, to every ``Decoder``.
    """

    omit_empty_values: bool = False
    omit_flags: bool = False
    user_info: dict[str, Any] = field(default_factory=dict)

    @property
    def parser(self) -> FormParser:
        return FormParser(
            omit_empty_values=self.omit_empty_values, omit_flags=self.omit_flags
        )

    def decode(self, tp: type[T], text: str | bytes) -> T:
        """Parse *text* and build a *tp* from it."""
        data = self.parser.parse(text)
        return self.decode_data(tp, data)

    def decode_data(self, tp: type[T], data: FormData) -> T:
        """Build a *tp* from an already parsed tree."""
        logger.debug("Decoding %r from %s", tp, kind_name(data))
        return build(tp, Decoder(data, ROOT, MappingProxyType(dict(self.user_info))))


def decode(
    tp: type[T],
    text: str | bytes,
    *,
    omit_empty_values: bool = False,
    omit_flags: bool = False,
) -> T:
    """Shortcut for ``FormDecoder(...).decode(tp, text)``."""
    decoder = FormDecoder(omit_empty_values=omit_empty_values, omit_flags=omit_flags)
    return decoder.decode(tp, text)
