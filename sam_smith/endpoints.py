"""
API Gateway endpoint index.

Scans Resources once and maps every Api resource to the functions bound to
it through `Type: Api` events:

    {api_name: {function_name: [EventBinding(event, method, path), ...]}}

Only `RestApiId: !Ref <Api>` bindings are indexed.
"""

import logging
import re
from collections import namedtuple
from typing import Dict, List, Optional, Sequence

from .scanner import INDENT, block_end, indent_of, is_blank, locate_sub_block, resource_spans, value_of
from .template import API, FUNCTION

logger = logging.getLogger(__name__)

EventBinding = namedtuple("EventBinding", ["event", "method", "path"])
Endpoint = namedtuple("Endpoint", ["api", "function", "event", "method", "path"])

REST_API_REF = re.compile(r"^!Ref\s+([A-Za-z0-9]+)$")

EndpointIndex = Dict[str, Dict[str, List[EventBinding]]]


def _resource_type(lines: Sequence[str], start: int, end: int) -> Optional[str]:
    level = indent_of(lines[start]) + INDENT
    for i in range(start + 1, end):
        line = lines[i]
        if indent_of(line) == level and line.strip().startswith("Type:"):
            return value_of(line)
    return None


def _event_fields(lines: Sequence[str], start: int, end: int) -> Dict[str, str]:
    fields = {}
    for i in range(start, end):
        key = lines[i].strip().split(":", 1)[0]
        if key in ("Type", "RestApiId", "Path", "Method") and key not in fields:
            fields[key] = value_of(lines[i])
    return fields


def build_endpoint_index(lines: Sequence[str]) -> EndpointIndex:
    """
    Build the endpoint index for a template.

    Args:
        lines: Template lines

    Returns:
        Mapping of Api name to function name to event bindings, with methods
        lowercased. Every Api appears, even with no bindings.
    """
    spans = resource_spans(lines)
    index: EndpointIndex = {}
    for name, span in spans:
        if _resource_type(lines, span.start, span.end) == API:
            index[name] = {}

    for name, span in spans:
        if _resource_type(lines, span.start, span.end) != FUNCTION:
            continue
        events = locate_sub_block(lines, span.start, span.end, "Events")
        if events is None:
            continue

        level = indent_of(lines[events.start]) + INDENT
        i = events.start + 1
        while i < events.end:
            line = lines[i]
            if is_blank(line) or indent_of(line) != level:
                i += 1
                continue
            end = block_end(lines, i, events.end)
            event_name = line.strip().rstrip(":")
            fields = _event_fields(lines, i + 1, end)
            match = REST_API_REF.match(fields.get("RestApiId", ""))
            if fields.get("Type") == "Api" and match and match.group(1) in index:
                binding = EventBinding(event_name, fields.get("Method", "").lower(), fields.get("Path", ""))
                index[match.group(1)].setdefault(name, []).append(binding)
            elif match is None:
                logger.debug("Skipping event %s on %s: RestApiId is not a !Ref", event_name, name)
            i = end
    return index


def list_endpoints(index: EndpointIndex) -> List[Endpoint]:
    """Flatten the index into rows for display."""
    rows = []
    for api, functions in index.items():
        for function, bindings in functions.items():
            for binding in bindings:
                rows.append(Endpoint(api, function, binding.event, binding.method, binding.path))
    return rows


def find_triple(index: EndpointIndex, method: str, path: str, function: str) -> Optional[Endpoint]:
    """An existing (method, path, function) binding on any gateway."""
    method = method.lower()
    for row in list_endpoints(index):
        if row.method == method and row.path == path and row.function == function:
            return row
    return None


def find_pair(index: EndpointIndex, api: str, method: str, path: str,
              ignore: Optional[Endpoint] = None) -> Optional[Endpoint]:
    """An existing (method, path) binding on one gateway, skipping ignore."""
    method = method.lower()
    for row in list_endpoints(index):
        if row.api == api and row.method == method and row.path == path and row != ignore:
            return row
    return None
