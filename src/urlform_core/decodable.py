"""Building destination types from a ``Decoder``.

``build(tp, decoder)`` looks up a builder for *tp* once and caches it.
Supported out of the box:

- leaf-convertible types (see ``convertible``)
- classes with ``from_form_decoder(decoder)`` (``FormDecodable``)
- dataclasses, field by field
- ``list`` / ``set`` / ``frozenset`` / ``tuple`` and ``dict``
- ``Optional[T]`` and ``typing.Any``
"""

from __future__ import annotations

import collections.abc
import dataclasses
import logging
import types
from functools import lru_cache
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Protocol,
    Union,
    get_args,
    get_origin,
    get_type_hints,
    runtime_checkable,
)

from .convertible import is_hashable, leaf_converter, strip_annotated
from .model import to_python

if TYPE_CHECKING:
    from .decoder import Decoder

logger = logging.getLogger(__name__)

Builder = Callable[["Decoder"], Any]

FORM_KEY = "form_key"

_SEQUENCES = (list, collections.abc.Sequence, collections.abc.MutableSequence, collections.abc.Iterable)
_SETS = (set, frozenset, collections.abc.Set, collections.abc.MutableSet)
_MAPPINGS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


@runtime_checkable
class FormDecodable(Protocol):
    """A type that builds itself from a ``Decoder``."""

    @classmethod
    def from_form_decoder(cls, decoder: Decoder) -> Any: ...


def build(tp: Any, decoder: Decoder) -> Any:
    return builder_for(tp)(decoder)


# ---------------------------------------------------------------------------
# Type inspection helpers
# ---------------------------------------------------------------------------

def _is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def is_optional(tp: Any) -> bool:
    tp = strip_annotated(tp)
    return _is_union(tp) and type(None) in get_args(tp)


def _unwrap_optional(tp: Any) -> Any:
    inner = [a for a in get_args(tp) if a is not type(None)]
    if len(inner) != 1:
        raise TypeError(f"Only Optional[T] unions can be decoded, not {tp!r}")
    return inner[0]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def _leaf_builder(tp: Any) -> Builder:
    def build_leaf(decoder: Decoder) -> Any:
        return decoder.single_value_container().decode(tp)

    return build_leaf


def _any_builder(decoder: Decoder) -> Any:
    return to_python(decoder.data)


def _collection_builder(factory: Callable[[list], Any], elem: Any) -> Builder:
    def build_collection(decoder: Decoder) -> Any:
        container = decoder.unkeyed_container()
        items = []
        while not container.is_at_end:
            items.append(container.decode(elem))
        return factory(items)

    return build_collection


def _tuple_builder(elems: tuple) -> Builder:
    def build_tuple(decoder: Decoder) -> tuple:
        container = decoder.unkeyed_container()
        return tuple([container.decode(t) for t in elems])

    return build_tuple


def _mapping_builder(key_type: Any, value_type: Any) -> Builder:
    def build_mapping(decoder: Decoder) -> dict:
        container = decoder.keyed_container()
        return {
            key: container.decode(value_type, raw)
            for key, raw in container.key_map(key_type).items()
        }

    return build_mapping


@dataclasses.dataclass(frozen=True, slots=True)
class _FieldSpec:
    name: str
    key: str
    tp: Any
    optional: bool
    has_default: bool


def _dataclass_builder(cls: type) -> Builder:
    hints = get_type_hints(cls, include_extras=True)
    specs: list[_FieldSpec] = []
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        has_default = (
            f.default is not dataclasses.MISSING
            or f.default_factory is not dataclasses.MISSING
        )
        tp = hints[f.name]
        specs.append(
            _FieldSpec(
                name=f.name,
                key=f.metadata.get(FORM_KEY, f.name),
                tp=tp,
                optional=is_optional(tp),
                has_default=has_default,
            )
        )

    def build_dataclass(decoder: Decoder) -> Any:
        container = decoder.keyed_container()
        kwargs: dict[str, Any] = {}
        for spec in specs:
            if not container.contains(spec.key):
                if spec.has_default:
                    continue
                if spec.optional:
                    kwargs[spec.name] = None
                    continue
            kwargs[spec.name] = container.decode(spec.tp, spec.key)
        return cls(**kwargs)

    return build_dataclass


def builder_for(tp: Any) -> Builder:
    """Resolve how *tp* is built.  Raises ``TypeError`` for unsupported types.

    Resolutions are cached per type.  Types that cannot be hashed, such as
    ``list[Annotated[int, {...}]]``, are resolved on every call.
    """
    tp = strip_annotated(tp)
    if not is_hashable(tp):
        return _resolve_builder(tp)
    return _cached_builder(tp)


@lru_cache(maxsize=None)
def _cached_builder(tp: Any) -> Builder:
    return _resolve_builder(tp)


def _resolve_builder(tp: Any) -> Builder:
    logger.debug("Resolving form builder for %r", tp)

    if leaf_converter(tp) is not None:
        return _leaf_builder(tp)
    if isinstance(tp, type) and callable(getattr(tp, "from_form_decoder", None)):
        return tp.from_form_decoder
    if tp is Any or tp is object:
        return _any_builder

    origin = get_origin(tp)
    args = get_args(tp)

    if _is_union(tp):
        return builder_for(_unwrap_optional(tp))
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return _dataclass_builder(tp)

    container = origin if origin is not None else tp
    if container is tuple:
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            return _collection_builder(tuple, args[0] if args else Any)
        return _tuple_builder(args)
    if container in _SEQUENCES:
        return _collection_builder(list, args[0] if args else Any)
    if container in _SETS:
        factory = frozenset if container is frozenset else set
        return _collection_builder(factory, args[0] if args else Any)
    if container in _MAPPINGS:
        key_type, value_type = args if args else (str, Any)
        return _mapping_builder(key_type, value_type)

    raise TypeError(f"{tp!r} cannot be decoded from form data")
