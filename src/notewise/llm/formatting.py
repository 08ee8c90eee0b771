"""Whitespace normalization for free-text model output.

``normalize_explanation`` is idempotent: feeding its output back in returns
the same string, so cached text can be re-rendered safely.
"""

import re
from typing import Literal, Optional

LineKind = Literal["header", "list", "text", "fence"]

_HEADER = re.compile(r"^#{1,6}\s+\S")
_LIST_ITEM = re.compile(r"^\s*(?:[-*+]|\d{1,3}[.)])\s+\S")
_FENCE = re.compile(r"^\s*(?:```|~~~)")
_SENTENCE_END = re.compile(r"[.!?][\"')\]*_]*$")
_SENTENCE_START = re.compile(r"^[\"'(*_]*[A-Z]")


def _classify(line: str, prev_kind: Optional[LineKind]) -> LineKind:
    if _HEADER.match(line):
        return "header"
    if _LIST_ITEM.match(line):
        return "list"
    # Indented continuation of a list item
    if prev_kind == "list" and line[:1] in (" ", "\t"):
        return "list"
    return "text"


def _needs_break(prev_kind: Optional[LineKind], prev_line: str, kind: LineKind, line: str) -> bool:
    if prev_kind is None or prev_kind == "fence":
        return False
    if kind == "header" or prev_kind == "header":
        return True
    if kind == "list":
        return prev_kind != "list"
    if prev_kind == "list":
        return True
    return bool(_SENTENCE_END.search(prev_line) and _SENTENCE_START.match(line))


def normalize_explanation(text: Optional[str]) -> str:
    """Give free text consistent paragraph and list spacing.

    - runs of blank lines collapse to a single blank line
    - headers and list blocks are separated from surrounding text
    - a line ending a sentence followed by a line starting a new capitalized
      sentence becomes a paragraph break
    - fenced code blocks are left alone apart from blank-line collapsing
    """
    if not text:
        return ""

    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    out: list[str] = []
    prev_kind: Optional[LineKind] = None
    prev_line = ""
    in_fence = False

    for raw_line in lines:
        line = raw_line.rstrip()

        if not line:
            if out and out[-1] != "":
                out.append("")
            continue

        if _FENCE.match(line):
            in_fence = not in_fence
            out.append(line)
            prev_kind, prev_line = "fence", line
            continue

        if in_fence:
            out.append(line)
            continue

        kind = _classify(line, prev_kind)
        if out and out[-1] != "" and _needs_break(prev_kind, prev_line, kind, line):
            out.append("")
        out.append(line)
        prev_kind, prev_line = kind, line

    while out and out[-1] == "":
        out.pop()

    return "\n".join(out)
