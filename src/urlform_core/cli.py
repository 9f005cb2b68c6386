"""``urlform-inspect``: parse form text and pretty-print the tree.

Usage::

    urlform-inspect 'user[name]=Vapor&user[tags][]=a'
    echo 'a=1&b=2' | urlform-inspect --omit-empty-values
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import IO

from .errors import MalformedInputError
from .model import FormData, FormDict, FormList, FormText
from .parser import FormParser


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def _fmt_inline(data: FormData) -> str:
    """Format a node for compact one-line display."""
    if isinstance(data, FormText):
        return f'"{data.value}"'
    if isinstance(data, FormList):
        return "[" + ", ".join(_fmt_inline(v) for v in data.items) + "]"
    return "{" + ", ".join(f"{k}: {_fmt_inline(v)}" for k, v in data.entries.items()) + "}"


def _fmt_inspect(data: FormData, indent: int = 0) -> str:
    """Pretty-print a node, one entry per line."""
    pad = "  " * indent
    if isinstance(data, FormDict):
        if not data.entries:
            return "FormDict {}"
        width = max(len(k) for k in data.entries)
        lines = ["FormDict {"]
        for k, v in data.entries.items():
            lines.append(f"{pad}  {k:<{width}}: {_fmt_inspect(v, indent + 1)}")
        lines.append(f"{pad}}}")
        return "\n".join(lines)

    if isinstance(data, FormList):
        if not data.items:
            return "FormList []"
        lines = ["FormList ["]
        for i, v in enumerate(data.items):
            lines.append(f"{pad}  {i}: {_fmt_inspect(v, indent + 1)}")
        lines.append(f"{pad}]")
        return "\n".join(lines)

    return _fmt_inline(data)


def _inspect_text(parser: FormParser, text: str, dest: IO[str]) -> int:
    """Parse *text* and print it to *dest*.  Returns the exit code."""
    try:
        tree = parser.parse(text.strip())
    except MalformedInputError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(_fmt_inspect(tree), file=dest)
    return 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def _build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="urlform-inspect",
        description="Parse application/x-www-form-urlencoded text and show its tree.",
    )
    ap.add_argument("text", nargs="?", help="form text (read from stdin when omitted)")
    ap.add_argument("--omit-empty-values", action="store_true", help="drop keys like 'age='")
    ap.add_argument("--omit-flags", action="store_true", help="drop keys with no '='")
    ap.add_argument("-v", "--verbose", action="store_true", help="log parser activity")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    parser = FormParser(omit_empty_values=args.omit_empty_values, omit_flags=args.omit_flags)
    text = args.text if args.text is not None else sys.stdin.read()
    return _inspect_text(parser, text, sys.stdout)


if __name__ == "__main__":
    sys.exit(main())
