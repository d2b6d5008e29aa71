"""
Line primitives for the template subset written by sam-smith.

The template is 2-space indented YAML. A block starts at a line and runs
until the next non-blank line indented at or below it (the indentation
fence). Everything else in the package is built on block_end().
"""

import re
from collections import namedtuple
from typing import List, Optional, Sequence, Tuple

INDENT = 2

RESOURCE_HEADER = re.compile(r"^  ([A-Za-z0-9]+):\s*$")
SECTION_HEADER = re.compile(r"^([A-Za-z][A-Za-z0-9]*):")

Span = namedtuple("Span", ["start", "end"])


def indent_of(line: str) -> int:
    """Number of leading spaces."""
    return len(line) - len(line.lstrip(" "))


def is_blank(line: str) -> bool:
    return not line.strip()


def block_end(lines: Sequence[str], start: int, limit: Optional[int] = None) -> int:
    """
    Find the end (exclusive) of the block opened at lines[start].

    Blank lines never close a block, so trailing blank lines belong to it.

    Args:
        lines: Document lines
        start: Index of the block's opening line
        limit: Scan no further than this index (defaults to len(lines))

    Returns:
        Index of the first line at or below the opening indentation, or limit
    """
    if limit is None:
        limit = len(lines)
    level = indent_of(lines[start])
    for i in range(start + 1, limit):
        line = lines[i]
        if not is_blank(line) and indent_of(line) <= level:
            return i
    return limit


def section_span(lines: Sequence[str], name: str) -> Optional[Span]:
    """Locate a top-level section such as Resources or Outputs."""
    for i, line in enumerate(lines):
        match = SECTION_HEADER.match(line)
        if match and match.group(1) == name:
            return Span(i, block_end(lines, i))
    return None


def resource_spans(lines: Sequence[str]) -> List[Tuple[str, Span]]:
    """
    List every resource in the Resources section with its line range.

    A resource runs from its header to the next resource header, or to the
    end of the section.
    """
    section = section_span(lines, "Resources")
    if section is None:
        return []

    headers = []
    for i in range(section.start + 1, section.end):
        match = RESOURCE_HEADER.match(lines[i])
        if match:
            headers.append((match.group(1), i))

    spans = []
    for idx, (name, start) in enumerate(headers):
        end = headers[idx + 1][1] if idx + 1 < len(headers) else section.end
        spans.append((name, Span(start, end)))
    return spans


def locate_resource(lines: Sequence[str], name: str) -> Optional[Span]:
    """Find a resource by name. Returns None when it is not in Resources."""
    for resource_name, span in resource_spans(lines):
        if resource_name == name:
            return span
    return None


def locate_sub_block(lines: Sequence[str], start: int, end: int, key: str) -> Optional[Span]:
    """
    Find a nested key (Events, Environment, Layers, Policies, Auth...)
    inside [start, end).

    Returns:
        Span of the key's block, or None
    """
    pattern = re.compile(r"^\s+" + re.escape(key) + r":(\s|$)")
    for i in range(start, end):
        if pattern.match(lines[i]):
            return Span(i, block_end(lines, i, end))
    return None


def value_of(line: str) -> str:
    """Inline value of a `Key: value` line, with surrounding quotes removed."""
    _, _, value = line.partition(":")
    return value.strip().strip("'\"")
