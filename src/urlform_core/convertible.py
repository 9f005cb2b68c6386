"""Leaf conversions: building a value directly from one tree node.

Types whose wire form is a single scalar (numbers, booleans, dates, enums)
opt out of structural decoding by providing a leaf converter.  A class can
supply its own by defining::

    @classmethod
    def convert_from_form_data(cls, data: FormData) -> Self: ...

Converters receive the node and the path it was found at, and raise
``ValueNotConvertibleError`` on bad input.
"""

from __future__ import annotations

import datetime
import decimal
import enum
import re
import uuid
from functools import lru_cache
from typing import Annotated, Any, Callable, Protocol, get_args, get_origin, runtime_checkable

from .errors import URLFormError, ValueNotConvertibleError
from .model import FormData, FormText, kind_name
from .path import CodingPath

LeafConverter = Callable[[FormData, CodingPath], Any]


@runtime_checkable
class FormDataConvertible(Protocol):
    """A type that converts itself from a single tree node."""

    @classmethod
    def convert_from_form_data(cls, data: FormData) -> Any: ...


# ASCII digits only: int() and float() also take "1_000" and non-Latin digits.
_INT_RE = re.compile(r"[+-]?[0-9]+")
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


# ---------------------------------------------------------------------------
# Scalar parsers
# ---------------------------------------------------------------------------

def _parse_int(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"not a base-10 integer: {text!r}")
    return int(text, 10)


def _parse_float(text: str) -> float:
    if not _FLOAT_RE.fullmatch(text):
        raise ValueError(f"not a decimal number: {text!r}")
    return float(text)


def _parse_decimal(text: str) -> decimal.Decimal:
    if not _DECIMAL_RE.fullmatch(text):
        raise ValueError(f"not a finite decimal: {text!r}")
    return decimal.Decimal(text)


def _parse_bool(text: str) -> bool:
    lowered = text.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"not a boolean: {text!r}")


_SCALAR_PARSERS: dict[type, Callable[[str], Any]] = {
    str: str,
    int: _parse_int,
    float: _parse_float,
    bool: _parse_bool,
    decimal.Decimal: _parse_decimal,
    datetime.datetime: datetime.datetime.fromisoformat,
    datetime.date: datetime.date.fromisoformat,
    datetime.time: datetime.time.fromisoformat,
    uuid.UUID: uuid.UUID,
}


def _enum_parser(tp: type[enum.Enum]) -> Callable[[str], Any]:
    def parse(text: str) -> enum.Enum:
        for member in tp:
            if str(member.value) == text:
                return member
        try:
            return tp[text]
        except KeyError:
            raise ValueError(f"not a member of {tp.__name__}") from None

    return parse


# ---------------------------------------------------------------------------
# Converter lookup
# ---------------------------------------------------------------------------

def _text_of(data: FormData, target: str, path: CodingPath) -> str:
    if not isinstance(data, FormText):
        raise ValueNotConvertibleError(target, f"<{kind_name(data)}>", path)
    return data.value


def _scalar_converter(tp: type, parse: Callable[[str], Any]) -> LeafConverter:
    target = getattr(tp, "__name__", repr(tp))

    def convert(data: FormData, path: CodingPath) -> Any:
        text = _text_of(data, target, path)
        try:
            return parse(text)
        except (ValueError, TypeError) as exc:
            raise ValueNotConvertibleError(target, text, path) from exc

    return convert


def _custom_converter(tp: type) -> LeafConverter:
    target = tp.__name__

    def convert(data: FormData, path: CodingPath) -> Any:
        try:
            return tp.convert_from_form_data(data)
        except URLFormError:
            raise
        except (ValueError, TypeError) as exc:
            raise ValueNotConvertibleError(
                target, str(data) if isinstance(data, FormText) else f"<{kind_name(data)}>", path
            ) from exc

    return convert


def strip_annotated(tp: Any) -> Any:
    """``Annotated[T, ...]`` -> ``T``."""
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp


def is_hashable(tp: Any) -> bool:
    try:
        hash(tp)
    except TypeError:
        return False
    return True


def leaf_converter(tp: Any) -> LeafConverter | None:
    """Return the leaf converter for *tp*, or ``None`` if it decodes structurally."""
    tp = strip_annotated(tp)
    if not is_hashable(tp):
        # Classes are always hashable; this is a generic with unhashable metadata.
        return None
    return _cached_leaf_converter(tp)


@lru_cache(maxsize=None)
def _cached_leaf_converter(tp: Any) -> LeafConverter | None:
    if not isinstance(tp, type) or get_origin(tp) is not None:
        return None
    if callable(getattr(tp, "convert_from_form_data", None)):
        return _custom_converter(tp)
    if issubclass(tp, enum.Enum):
        return _scalar_converter(tp, _enum_parser(tp))
    # Exact match first: bool is an int and datetime is a date.
    parse = _SCALAR_PARSERS.get(tp)
    if parse is not None:
        return _scalar_converter(tp, parse)
    for base, parse in _SCALAR_PARSERS.items():
        if issubclass(tp, base):
            return _scalar_converter(tp, lambda text, tp=tp, parse=parse: tp(parse(text)))
    return None


def is_leaf_convertible(tp: Any) -> bool:
    return leaf_converter(tp) is not None
