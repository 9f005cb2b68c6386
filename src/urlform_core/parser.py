"""Parser: ``application/x-www-form-urlencoded`` text to a form tree.

Keys use bracket notation for nesting::

    user[name]=Vapor&user[tags][]=a&user[tags][]=b

parses to ``{"user": {"name": "Vapor", "tags": ["a", "b"]}}``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import unquote_plus

from .errors import MalformedInputError
from .model import FormData, FormDict, FormList, FormText

logger = logging.getLogger(__name__)

FLAG_VALUE = "true"

_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SUBKEY_RE = re.compile(r"\[([^\[\]]*)\]")


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def unescape(text: str) -> str:
    """Strictly percent-decode *text*; ``+`` becomes a space."""
    bad = _BAD_ESCAPE_RE.search(text)
    if bad is not None:
        raise MalformedInputError(
            f"Invalid percent escape at offset {bad.start()} in {text!r}"
        )
    try:
        return unquote_plus(text, errors="strict")
    except UnicodeDecodeError as exc:
        raise MalformedInputError(f"Percent escapes in {text!r} are not UTF-8") from exc


def split_key(key: str) -> list[str]:
    """Split ``a[b][]`` into ``["a", "b", ""]``."""
    m = _KEY_RE.match(key)
    if m is None:
        raise MalformedInputError(f"Malformed key {key!r}")
    return [m.group(1), *_SUBKEY_RE.findall(m.group(2))]


# ---------------------------------------------------------------------------
# Tree building
# ---------------------------------------------------------------------------

def _insert(entries: dict, keys: list[str], value: str) -> None:
    key, rest = keys[0], keys[1:]
    if not rest:
        entries[key] = value
        return
    if rest[0] == "":
        seq = entries.get(key)
        if not isinstance(seq, list):
            seq = []
            entries[key] = seq
        _append(seq, rest[1:], value)
        return
    child = entries.get(key)
    if not isinstance(child, dict):
        child = {}
        entries[key] = child
    _insert(child, rest, value)


def _holds(node: dict, keys: list[str]) -> bool:
    """True when *node* already has a value at *keys*."""
    for key in keys:
        if key == "" or not isinstance(node, dict) or key not in node:
            return False
        node = node[key]
    return True


def _append(seq: list, keys: list[str], value: str) -> None:
    if not keys:
        seq.append(value)
    elif keys[0] == "":
        nested: list = []
        seq.append(nested)
        _append(nested, keys[1:], value)
    elif seq and isinstance(seq[-1], dict) and not _holds(seq[-1], keys):
        # items[][sku]=A&items[][qty]=1 fills one element
        _insert(seq[-1], keys, value)
    else:
        child: dict = {}
        seq.append(child)
        _insert(child, keys, value)


def _freeze(node) -> FormData:
    if isinstance(node, str):
        return FormText(node)
    if isinstance(node, list):
        return FormList(tuple(_freeze(v) for v in node))
    return FormDict({k: _freeze(v) for k, v in node.items()})


# ---------------------------------------------------------------------------
# FormParser
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FormParser:
    """Turns form text into a ``FormDict``.

    A pair with nothing after ``=`` is an *empty value*; a pair with no
    ``=`` at all is a *flag* and parses to ``"true"``.
    """

    omit_empty_values: bool = False
    omit_flags: bool = False

    def parse(self, text: str | bytes) -> FormDict:
        if isinstance(text, (bytes, bytearray)):
            try:
                text = bytes(text).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise MalformedInputError("Form data is not valid UTF-8") from exc

        root: dict = {}
        pairs = dropped = 0
        for segment in text.split("&"):
            if not segment:
                continue
            pairs += 1
            raw_key, sep, raw_value = segment.partition("=")
            if not sep:
                if self.omit_flags:
                    dropped += 1
                    continue
                value = FLAG_VALUE
            elif not raw_value:
                if self.omit_empty_values:
                    dropped += 1
                    continue
                value = ""
            else:
                value = unescape(raw_value)
            _insert(root, split_key(unescape(raw_key)), value)

        logger.debug("Parsed %d pair(s), dropped %d", pairs, dropped)
        return _freeze(root)


def parse(text: str | bytes, *, omit_empty_values: bool = False, omit_flags: bool = False) -> FormDict:
    return FormParser(omit_empty_values=omit_empty_values, omit_flags=omit_flags).parse(text)
