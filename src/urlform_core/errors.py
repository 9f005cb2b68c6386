"""Exception hierarchy for urlform."""

from __future__ import annotations

from .path import CodingPath, ROOT, render_path


class URLFormError(Exception):
    """Base class for every error raised while parsing or decoding a form."""

    def __init__(self, message: str, path: CodingPath = ROOT) -> None:
        self.message = message
        self.path: CodingPath = tuple(path)
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if not self.path:
            return self.message
        return f"{self.message} at path {render_path(self.path)}"


class MalformedInputError(URLFormError, ValueError):
    """The text does not follow the ``key=value&...`` grammar."""


class ShapeMismatchError(URLFormError, ValueError):
    """A mapping or sequence was requested but the node has another shape."""

    def __init__(self, expected: str, actual: str, path: CodingPath) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected a {expected} but found a {actual}", path)


class MissingFieldError(URLFormError, ValueError):
    """A required key is absent."""

    def __init__(self, key: str, path: CodingPath) -> None:
        self.key = key
        super().__init__(f"No value found for key {key!r}", path)


class IndexOutOfRangeError(URLFormError, ValueError):
    """A sequence was read past its last element."""

    def __init__(self, index: int, count: int, path: CodingPath) -> None:
        self.index = index
        self.count = count
        super().__init__(
            f"Index {index} out of range for sequence of {count} element(s)", path
        )


class ValueNotConvertibleError(URLFormError, ValueError):
    """A leaf conversion rejected the node."""

    def __init__(self, target: str, text: str, path: CodingPath) -> None:
        self.target = target
        self.text = text
        super().__init__(f"Cannot convert {text!r} to {target}", path)
