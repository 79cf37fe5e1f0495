"""Whitespace collapsing for literal text."""

import re

_LINE_BREAK = re.compile(r"\r\n|\n|\r")
_NON_BLANK = re.compile(r"[^ \t]")


def clean_string_for_html(raw: str) -> str:
    """
    Collapse whitespace in JSX text the way markup parsers render it.

    Lines are joined by a single space; whitespace touching a line break is
    dropped and lines that end up empty disappear. The compiled template and
    the runtime markup parser must agree on this byte for byte, otherwise
    node indices point at the wrong node.
    """
    lines = _LINE_BREAK.split(raw)

    last_non_empty_line = 0
    for i, line in enumerate(lines):
        if _NON_BLANK.search(line):
            last_non_empty_line = i

    parts = []
    for i, line in enumerate(lines):
        trimmed = line.replace("\t", " ")

        if i != 0:
            trimmed = trimmed.lstrip(" ")
        if i != len(lines) - 1:
            trimmed = trimmed.rstrip(" ")

        if trimmed:
            if i != last_non_empty_line:
                trimmed += " "
            parts.append(trimmed)

    return "".join(parts)
