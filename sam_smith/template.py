"""
SAM template model.

Wraps the document tree with lookups by resource name and type, ordered
insertion of sections and properties, list editing, wrapper cleanup and
reference queries between resources.
"""

import logging
import os
import re
from collections import namedtuple
from typing import Dict, Iterable, List, Optional

from . import document
from .document import Node
from .errors import ResourceNotFoundError, TemplateIOError, TemplateStructureError
from .scanner import locate_resource

logger = logging.getLogger(__name__)

FUNCTION = "AWS::Serverless::Function"
API = "AWS::Serverless::Api"
LAYER = "AWS::Serverless::LayerVersion"
TABLE = "AWS::DynamoDB::Table"
LOG_GROUP = "AWS::Logs::LogGroup"
SSM_PARAMETER = "AWS::SSM::Parameter"
MANAGED_POLICY = "AWS::IAM::ManagedPolicy"
USER_POOL = "AWS::Cognito::UserPool"
USER_POOL_CLIENT = "AWS::Cognito::UserPoolClient"

SECTION_ORDER = [
    "AWSTemplateFormatVersion",
    "Transform",
    "Description",
    "Globals",
    "Parameters",
    "Conditions",
    "Resources",
    "Outputs",
]

PROPERTY_ORDER = {
    FUNCTION: [
        "FunctionName",
        "CodeUri",
        "Handler",
        "Runtime",
        "Timeout",
        "MemorySize",
        "Architectures",
        "Environment",
        "Layers",
        "Policies",
        "Events",
    ],
    API: ["Name", "StageName", "Auth", "Cors"],
}

# Keys removed automatically once their last entry is gone
WRAPPERS = ("Events", "Layers", "Policies", "Variables", "Environment", "Outputs", "Parameters")

# Block key under which a reference sits -> kind of edge
EDGE_KINDS = {
    "Events": "event",
    "Layers": "layer",
    "Policies": "policy",
    "Variables": "environment",
    "Auth": "auth",
}

HANDLER_FOLDER = re.compile(r"^([^/\s]+)/handler\.")

Reference = namedtuple("Reference", ["source", "kind", "node"])


def quote(value: str) -> str:
    """Single-quoted YAML scalar."""
    return "'" + value.replace("'", "''") + "'"


def unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1].replace("''", "'")
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _reference_pattern(name: str):
    name = re.escape(name)
    return re.compile(
        r"!Ref\s+" + name + r"(?![A-Za-z0-9_])"
        r"|!GetAtt\s+" + name + r"\."
        r"|\$\{" + name + r"[}.]"
    )


class Template:
    """
    In-memory SAM template.

    Usage:
        template = Template.load("template.yaml")
        fn = template.require("lambda2Function", FUNCTION)
        template.add_list_item(fn, "Layers", "!Ref shared")
        template.save("template.yaml")
    """

    def __init__(self, text: str):
        self.root = document.parse(text)

    @classmethod
    def load(cls, path: str) -> "Template":
        if not os.path.isfile(path):
            raise TemplateIOError(f"Template not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls(f.read())

    def save(self, path: str):
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.render())

    def render(self) -> str:
        return document.render(self.root)

    def lines(self) -> List[str]:
        return self.render().split("\n")

    def check(self):
        """
        Re-scan the rendered text and make sure every resource in the tree is
        still locatable as its own block.
        """
        lines = self.lines()
        for node in self.resources():
            if locate_resource(lines, node.key) is None:
                raise TemplateStructureError(f"Resource {node.key} cannot be located after the edit")

    # Sections

    def section(self, name: str) -> Optional[Node]:
        return self.root.child(name)

    def ensure_section(self, name: str) -> Node:
        node = self.section(name)
        if node is None:
            node = Node(f"{name}:")
            self._insert_ordered(self.root, node, SECTION_ORDER, separated=True)
            logger.debug("Created %s section", name)
        return node

    def resources_section(self) -> Node:
        node = self.section("Resources")
        if node is None:
            raise TemplateStructureError("Template has no Resources section")
        return node

    # Resources

    def resources(self) -> List[Node]:
        node = self.section("Resources")
        return node.entries() if node is not None else []

    def resource(self, name: str) -> Optional[Node]:
        for node in self.resources():
            if node.key == name:
                return node
        return None

    @staticmethod
    def resource_type(node: Node) -> Optional[str]:
        type_node = node.child("Type")
        return type_node.value if type_node is not None else None

    def resources_of_type(self, kind: str) -> List[Node]:
        return [node for node in self.resources() if self.resource_type(node) == kind]

    def functions(self) -> List[Node]:
        return self.resources_of_type(FUNCTION)

    def lambdas(self) -> List[Node]:
        """Functions scaffolded as src/<folder>/handler.ts (the authorizer is not one)."""
        return [fn for fn in self.functions() if self.handler_folder(fn)]

    def apis(self) -> List[Node]:
        return self.resources_of_type(API)

    def layers(self) -> List[Node]:
        return self.resources_of_type(LAYER)

    def tables(self) -> List[Node]:
        return self.resources_of_type(TABLE)

    def require(self, name: str, kind: Optional[str] = None, label: str = "Resource") -> Node:
        node = self.resource(name)
        if node is None or (kind is not None and self.resource_type(node) != kind):
            raise ResourceNotFoundError(f"{label} {name} not found in template")
        return node

    def handler_folder(self, function: Node) -> Optional[str]:
        handler = self.property_value(function, "Handler")
        if not handler:
            return None
        match = HANDLER_FOLDER.match(handler)
        return match.group(1) if match else None

    def add_resource(self, text: str, index: Optional[int] = None) -> List[Node]:
        """
        Add one or more resource blocks to Resources.

        Args:
            text: Resource snippet at 2-space resource indentation
            index: Position among Resources children (default: after the last)

        Returns:
            The inserted nodes
        """
        section = self.resources_section()
        nodes = document.parse_block(text)
        position = self._end_index(section) if index is None else index
        for node in nodes:
            document.insert(section, position, node, separated=True)
            position = section.children.index(node) + 1
            logger.debug("Added resource %s", node.key)
        return nodes

    def remove_resource(self, name: str) -> bool:
        node = self.resource(name)
        if node is None:
            return False
        document.remove(node)
        logger.debug("Removed resource %s", name)
        return True

    # Properties

    @staticmethod
    def properties(resource: Node) -> Optional[Node]:
        return resource.child("Properties")

    def property_block(self, resource: Node, key: str) -> Optional[Node]:
        props = self.properties(resource)
        return props.child(key) if props is not None else None

    def property_value(self, resource: Node, key: str) -> Optional[str]:
        node = self.property_block(resource, key)
        return node.value if node is not None else None

    def insert_property(self, resource: Node, text: str) -> Node:
        """Insert a property block into Properties at its ordered position."""
        props = self.properties(resource)
        if props is None:
            raise TemplateStructureError(f"Resource {resource.key} has no Properties")
        node = document.parse_block(text)[0]
        order = PROPERTY_ORDER.get(self.resource_type(resource), [])
        self._insert_ordered(props, node, order)
        return node

    def set_property(self, resource: Node, key: str, value: str):
        node = self.property_block(resource, key)
        if node is not None:
            node.set_value(value)
            return
        indent = " " * (self.properties(resource).indent + 2)
        self.insert_property(resource, f"{indent}{key}: {value}")

    # Lists

    def list_items(self, resource: Node, key: str) -> List[str]:
        block = self.property_block(resource, key)
        if block is None:
            return []
        return [node.item for node in block.entries() if node.item is not None]

    def add_list_item(self, resource: Node, key: str, value: str):
        block = self.property_block(resource, key)
        if block is None:
            indent = " " * (self.properties(resource).indent + 2)
            block = self.insert_property(resource, f"{indent}{key}:")
        item = Node(f"{' ' * (block.indent + 2)}- {value}")
        document.insert(block, self._end_index(block), item)

    def remove_list_item(self, resource: Node, key: str, value: str) -> bool:
        block = self.property_block(resource, key)
        if block is None:
            return False
        for node in block.entries():
            if node.item == value:
                self.prune(node)
                return True
        return False

    # Outputs

    def outputs(self) -> List[Node]:
        node = self.section("Outputs")
        return node.entries() if node is not None else []

    def add_output(self, text: str) -> List[Node]:
        section = self.ensure_section("Outputs")
        nodes = document.parse_block(text)
        for node in nodes:
            document.insert(section, self._end_index(section), node)
        return nodes

    def remove_outputs_referencing(self, name: str) -> List[str]:
        """Remove every output whose value mentions name via !Ref, !GetAtt or ${...}."""
        removed = []
        for ref in self.references(name):
            if ref.kind == "output" and ref.source not in removed:
                output = self.section("Outputs").child(ref.source)
                self.prune(output)
                removed.append(ref.source)
        return removed

    # Parameters

    def parameters(self) -> List[Node]:
        node = self.section("Parameters")
        return node.entries() if node is not None else []

    def env_parameters(self) -> Dict[str, str]:
        """Env<Name> parameters as {Name: default value}."""
        values = {}
        for node in self.parameters():
            if node.key and node.key.startswith("Env") and len(node.key) > 3:
                default = node.child("Default")
                raw = default.text.split(":", 1)[1] if default is not None else ""
                values[node.key[3:]] = unquote(raw)
        return values

    def add_parameter(self, text: str) -> Node:
        """Add a parameter after the last Env<Name> parameter, creating the section if needed."""
        section = self.ensure_section("Parameters")
        node = document.parse_block(text)[0]
        env_nodes = [n for n in section.entries() if n.key and n.key.startswith("Env")]
        if env_nodes:
            index = section.children.index(env_nodes[-1]) + 1
        else:
            index = self._end_index(section)
        document.insert(section, index, node)
        return node

    # References

    def references(self, name: str) -> List[Reference]:
        """
        Every place another resource or output points at name.

        The kind of each reference comes from the block it sits in: event,
        layer, policy, environment, auth, output or other.
        """
        pattern = _reference_pattern(name)
        refs = []
        for section_name in ("Resources", "Outputs"):
            section = self.section(section_name)
            if section is None:
                continue
            for entry in section.entries():
                if entry.key == name:
                    continue
                for node in entry.walk():
                    if node is entry or node.blank or not pattern.search(node.text):
                        continue
                    if section_name == "Outputs":
                        kind = "output"
                    else:
                        kind = self._edge_kind(node, entry)
                    refs.append(Reference(entry.key, kind, node))
        return refs

    def referrers(self, name: str, kind: Optional[str] = None) -> List[str]:
        """Names of resources referencing name, optionally by one kind of edge."""
        names = []
        for ref in self.references(name):
            if (kind is None or ref.kind == kind) and ref.source not in names:
                names.append(ref.source)
        return names

    @staticmethod
    def _edge_kind(node: Node, entry: Node) -> str:
        current = node
        while current is not None and current is not entry:
            if current.key in EDGE_KINDS:
                return EDGE_KINDS[current.key]
            current = current.parent
        return "other"

    @staticmethod
    def entry_under(node: Node, key: str) -> Optional[Node]:
        """The ancestor of node that sits directly under a `key:` block."""
        current = node
        while current.parent is not None:
            if current.parent.key == key:
                return current
            current = current.parent
        return None

    # Structural helpers

    def append_entry(self, parent: Node, text: str) -> Node:
        """Parse a block and add it after parent's last entry."""
        node = document.parse_block(text)[0]
        document.insert(parent, self._end_index(parent), node)
        return node

    def prune(self, node: Node):
        """Remove node, then any wrapper block the removal left empty."""
        parent = node.parent
        document.remove(node)
        while parent is not None and not parent.is_root and parent.key in WRAPPERS and not parent.entries():
            grandparent = parent.parent
            document.remove(parent)
            logger.debug("Removed empty %s block", parent.key)
            parent = grandparent

    @staticmethod
    def _end_index(parent: Node) -> int:
        for i in range(len(parent.children) - 1, -1, -1):
            if not parent.children[i].blank:
                return i + 1
        return 0

    def _insert_ordered(self, parent: Node, node: Node, order: Iterable[str], separated: bool = False):
        order = list(order)
        index = self._end_index(parent)
        if node.key in order:
            rank = order.index(node.key)
            for i, child in enumerate(parent.children):
                if child.blank or child.key not in order:
                    continue
                if order.index(child.key) > rank:
                    index = i
                    break
        document.insert(parent, index, node, separated)
