"""urlform core — typed decoding of application/x-www-form-urlencoded data."""

from .model import FormData, FormDict, FormList, FormText
from .path import CodingPath, render_path
from .errors import (
    IndexOutOfRangeError,
    MalformedInputError,
    MissingFieldError,
    ShapeMismatchError,
    URLFormError,
    ValueNotConvertibleError,
)
from .convertible import FormDataConvertible, leaf_converter
from .decodable import FORM_KEY, FormDecodable, build
from .decoder import (
    Decoder,
    FormDecoder,
    KeyedContainer,
    SingleValueContainer,
    UnkeyedContainer,
    decode,
)
from .parser import FormParser, parse
from .serializer import serialize

__all__ = [
    "decode",
    "parse",
    "serialize",
    "FormDecoder",
    "FormParser",
    "Decoder",
    "KeyedContainer",
    "UnkeyedContainer",
    "SingleValueContainer",
    "FormData",
    "FormDict",
    "FormList",
    "FormText",
    "CodingPath",
    "render_path",
    "FormDataConvertible",
    "FormDecodable",
    "FORM_KEY",
    "build",
    "leaf_converter",
    "URLFormError",
    "MalformedInputError",
    "ShapeMismatchError",
    "MissingFieldError",
    "IndexOutOfRangeError",
    "ValueNotConvertibleError",
]
