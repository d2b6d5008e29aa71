"""
API Gateway operations: gateways and their endpoints.
"""

import logging
import re
from typing import List, Optional, Tuple

from .. import resources
from ..document import Node
from ..endpoints import Endpoint, build_endpoint_index, find_pair, find_triple, list_endpoints
from ..errors import ConflictError, ResourceNotFoundError, SamSmithError
from ..project import SamProject, safe_name
from ..template import API, Template
from .auth import release_basic_authorizer

logger = logging.getLogger(__name__)

METHODS = ("get", "post", "put", "delete", "patch", "options", "head", "any")

EVENT_NAME = re.compile(r"^event(\d+)$")


def normalize_method(method: str) -> str:
    method = method.strip().lower()
    if method not in METHODS:
        raise SamSmithError(f"Unsupported HTTP method: {method}")
    return method


def normalize_path(path: str) -> str:
    path = path.strip()
    return path if path.startswith("/") else f"/{path}"


def gateway_name(name: str) -> str:
    api = safe_name(name)
    if not api:
        raise SamSmithError(f"Invalid API Gateway name '{name}'")
    return api


def _event_fields(event: Node) -> dict:
    props = event.child("Properties")
    if props is None:
        return {}
    return {node.key: node.value for node in props.entries()}


def find_event(template: Template, function: Node, api: str, method: str, path: str) -> Optional[Node]:
    """The event on function binding method and path on api."""
    events = template.property_block(function, "Events")
    if events is None:
        return None
    for event in events.entries():
        fields = _event_fields(event)
        if (fields.get("RestApiId") == f"!Ref {api}"
                and (fields.get("Method") or "").lower() == method
                and fields.get("Path") == path):
            return event
    return None


def next_event_name(template: Template, function: Node) -> str:
    """event<N> with N one above the highest number in use."""
    events = template.property_block(function, "Events")
    highest = 0
    if events is not None:
        for event in events.entries():
            match = EVENT_NAME.match(event.key or "")
            if match:
                highest = max(highest, int(match.group(1)))
    return f"event{highest + 1}"


def add_event(template: Template, function: Node, api: str, method: str, path: str) -> str:
    events = template.property_block(function, "Events")
    if events is None:
        events = template.insert_property(function, resources.EVENTS_BLOCK)
    event_name = next_event_name(template, function)
    template.append_entry(events, resources.API_EVENT.format(
        event_name=event_name,
        api_name=api,
        path=path,
        method=method,
    ))
    return event_name


def _reject_duplicate_triple(template: Template, method: str, path: str, function: Node):
    existing = find_triple(build_endpoint_index(template.lines()), method, path, function.key)
    if existing is not None:
        raise ConflictError(
            f"{method.upper()} {path} is already bound to {function.key} on {existing.api}"
        )


def create_api_gateway(project: SamProject, name: str,
                       endpoint: Optional[Tuple[str, str, str]] = None) -> str:
    """
    Add an Api resource and its Url output.

    Args:
        project: Target project
        name: Gateway name; non-alphanumerics are dropped
        endpoint: Optional (method, path, lambda) bound in the same edit

    Returns:
        The gateway's resource name
    """
    api = gateway_name(name)
    with project.transaction() as template:
        if template.resource(api) is not None:
            raise ConflictError(f"Resource {api} already exists")

        function = None
        if endpoint is not None:
            method, path = normalize_method(endpoint[0]), normalize_path(endpoint[1])
            function = project.function_resource(template, endpoint[2])
            _reject_duplicate_triple(template, method, path, function)

        template.add_resource(resources.API_GATEWAY.format(api_name=api))
        template.add_output(resources.API_URL_OUTPUT.format(api_name=api))
        if function is not None:
            add_event(template, function, api, method, path)

    logger.info("Created API Gateway %s", api)
    return api


def delete_api_gateway(project: SamProject, name: str) -> int:
    """
    Delete a gateway with every event bound to it and every output naming it.

    Returns:
        Number of event bindings removed
    """
    api = gateway_name(name)
    removed = 0
    with project.transaction() as template:
        template.require(api, API, "API Gateway")
        for ref in template.references(api):
            if ref.kind != "event":
                continue
            event = template.entry_under(ref.node, "Events")
            if event is not None and event.parent is not None:
                template.prune(event)
                removed += 1
        template.remove_resource(api)
        template.remove_outputs_referencing(api)
        release_authorizer = release_basic_authorizer(template)

    if release_authorizer:
        project.sources.remove_authorizer()
    logger.info("Deleted API Gateway %s and %d endpoint(s)", api, removed)
    return removed


def add_endpoint(project: SamProject, gateway: str, method: str, path: str, lambda_name: str) -> str:
    """
    Bind method and path on a gateway to a Lambda.

    Rejected when the same (method, path, lambda) already exists on any gateway.

    Returns:
        The new event name
    """
    api = gateway_name(gateway)
    method, path = normalize_method(method), normalize_path(path)
    with project.transaction() as template:
        template.require(api, API, "API Gateway")
        function = project.function_resource(template, lambda_name)
        _reject_duplicate_triple(template, method, path, function)
        event_name = add_event(template, function, api, method, path)

    logger.info("Added %s %s on %s -> %s", method.upper(), path, api, function.key)
    return event_name


def update_endpoint(project: SamProject, gateway: str, method: str, path: str, lambda_name: str,
                    new_method: Optional[str] = None, new_path: Optional[str] = None,
                    new_lambda: Optional[str] = None):
    """
    Change an endpoint's method, path or target Lambda.

    Same Lambda: Path and Method are rewritten in place. Different Lambda: the
    event moves to the new function. Rejected when the new (method, path)
    is already used on the same gateway.
    """
    api = gateway_name(gateway)
    method, path = normalize_method(method), normalize_path(path)
    new_method = normalize_method(new_method) if new_method else method
    new_path = normalize_path(new_path) if new_path else path

    with project.transaction() as template:
        template.require(api, API, "API Gateway")
        function = project.function_resource(template, lambda_name)
        event = find_event(template, function, api, method, path)
        if event is None:
            raise ResourceNotFoundError(f"Endpoint {method.upper()} {path} on {api} not found for {function.key}")
        target = project.function_resource(template, new_lambda) if new_lambda else function

        index = build_endpoint_index(template.lines())
        current = None
        for row in list_endpoints(index):
            if row.api == api and row.function == function.key and row.event == event.key:
                current = row
        if find_pair(index, api, new_method, new_path, ignore=current) is not None:
            raise ConflictError(f"{new_method.upper()} {new_path} already exists on {api}")

        if target is function:
            props = event.child("Properties")
            props.child("Path").set_value(new_path)
            props.child("Method").set_value(new_method)
        else:
            template.prune(event)
            add_event(template, target, api, new_method, new_path)

    logger.info("Updated %s %s on %s to %s %s -> %s", method.upper(), path, api,
                new_method.upper(), new_path, target.key)


def delete_endpoint(project: SamProject, gateway: str, method: str, path: str, lambda_name: str):
    api = gateway_name(gateway)
    method, path = normalize_method(method), normalize_path(path)
    with project.transaction() as template:
        function = project.function_resource(template, lambda_name)
        event = find_event(template, function, api, method, path)
        if event is None:
            raise ResourceNotFoundError(f"Endpoint {method.upper()} {path} on {api} not found for {function.key}")
        template.prune(event)
    logger.info("Deleted %s %s on %s", method.upper(), path, api)


def list_gateway_endpoints(project: SamProject) -> List[Endpoint]:
    return list_endpoints(build_endpoint_index(project.load_template().lines()))
