"""
Lossless indentation tree for template text.

Each non-blank line becomes a Node whose children are the lines of its block
(see scanner.block_end). Blank lines are kept as leaf nodes attached to the
innermost open block, so a block carries its own trailing blank lines and
rendering the tree in pre-order reproduces the original text.

Rendering normalizes blank lines: runs collapse to one, leading and trailing
blank lines are dropped, and the output ends with a single newline.
"""

import re
from typing import Iterator, List, Optional

from .scanner import INDENT, block_end, indent_of, is_blank

KEY_LINE = re.compile(r"^\s*([A-Za-z0-9_.\-]+):(?:\s+(.*?))?\s*$")
ITEM_LINE = re.compile(r"^\s*-\s+(.*?)\s*$")


class Node:
    """One line of the document and the block it opens."""

    def __init__(self, text: Optional[str], parent: Optional["Node"] = None):
        self.text = text
        self.parent = parent
        self.children: List[Node] = []

    def __repr__(self):
        return f"Node({self.text!r}, children={len(self.children)})"

    @property
    def is_root(self) -> bool:
        return self.text is None

    @property
    def blank(self) -> bool:
        return self.text is not None and is_blank(self.text)

    @property
    def indent(self) -> int:
        if self.text is None:
            return -INDENT
        return indent_of(self.text)

    @property
    def key(self) -> Optional[str]:
        if self.text is None:
            return None
        match = KEY_LINE.match(self.text)
        return match.group(1) if match else None

    @property
    def value(self) -> Optional[str]:
        """Inline scalar after `Key:` with quotes stripped."""
        if self.text is None:
            return None
        match = KEY_LINE.match(self.text)
        if not match or match.group(2) is None:
            return None
        return match.group(2).strip("'\"")

    @property
    def item(self) -> Optional[str]:
        """Content of a `- item` line."""
        if self.text is None:
            return None
        match = ITEM_LINE.match(self.text)
        return match.group(1) if match else None

    def entries(self) -> List["Node"]:
        """Non-blank children."""
        return [child for child in self.children if not child.blank]

    def child(self, key: str) -> Optional["Node"]:
        for node in self.children:
            if node.key == key:
                return node
        return None

    def walk(self) -> Iterator["Node"]:
        """Pre-order traversal of the subtree, self included."""
        yield self
        for node in self.children:
            yield from node.walk()

    def ancestors(self) -> Iterator["Node"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def set_value(self, value: str):
        self.text = f"{' ' * self.indent}{self.key}: {value}"


def _build(parent: Node, lines: List[str], start: int, end: int):
    i = start
    while i < end:
        line = lines[i]
        if is_blank(line):
            parent.children.append(Node("", parent))
            i += 1
            continue
        stop = block_end(lines, i, end)
        node = Node(line, parent)
        parent.children.append(node)
        _build(node, lines, i + 1, stop)
        i = stop


def parse(text: str) -> Node:
    """Parse template text into a root Node."""
    lines = text.split("\n")
    root = Node(None)
    _build(root, lines, 0, len(lines))
    return root


def parse_block(text: str) -> List[Node]:
    """Parse a snippet into its top-level nodes, blank lines dropped."""
    root = parse(text.strip("\n"))
    nodes = root.entries()
    for node in nodes:
        node.parent = None
    return nodes


def lines_of(node: Node) -> List[str]:
    return [n.text for n in node.walk() if n.text is not None]


def render(root: Node) -> str:
    out: List[str] = []
    for line in lines_of(root):
        if is_blank(line):
            if out and out[-1] != "":
                out.append("")
            continue
        out.append(line.rstrip())
    while out and out[-1] == "":
        out.pop()
    return "\n".join(out) + "\n"


def _has_tail(node: Node) -> bool:
    while node.children:
        last = node.children[-1]
        if last.blank:
            return True
        node = last
    return False


def take_tail(node: Node) -> List[Node]:
    """Detach the blank lines that end node's block."""
    taken = []
    while node.children:
        last = node.children[-1]
        if last.blank:
            taken.append(node.children.pop())
        else:
            node = last
    return taken


def give_tail(node: Node, blanks: List[Node]):
    for blank in blanks:
        blank.parent = node
        node.children.append(blank)


def previous_entry(node: Node) -> Optional[Node]:
    siblings = node.parent.children
    for sibling in reversed(siblings[:siblings.index(node)]):
        if not sibling.blank:
            return sibling
    return None


def insert(parent: Node, index: int, node: Node, separated: bool = False):
    """
    Insert node as parent.children[index].

    A plain insert after a sibling inherits that sibling's trailing blank
    lines, so the blank stays at the end of the run. A separated insert
    (top-level resources) keeps a blank line on both sides of the new block.
    """
    node.parent = parent
    previous = None
    for sibling in reversed(parent.children[:index]):
        if not sibling.blank:
            previous = sibling
            break

    if separated:
        if previous is not None and not _has_tail(previous):
            give_tail(previous, [Node("")])
        if not _has_tail(node):
            give_tail(node, [Node("")])
    elif previous is not None:
        give_tail(node, take_tail(previous))

    parent.children.insert(index, node)


def append(parent: Node, node: Node, separated: bool = False):
    insert(parent, len(parent.children), node, separated)


def remove(node: Node):
    """
    Detach node from its parent.

    Its trailing blank lines move to the previous sibling when that sibling
    has none, so removing the last entry of a run keeps the separator that
    followed it.
    """
    parent = node.parent
    blanks = take_tail(node)
    if blanks:
        previous = previous_entry(node)
        if previous is not None:
            if not _has_tail(previous):
                give_tail(previous, blanks)
        elif not parent.is_root and len(parent.entries()) == 1:
            give_tail(parent, blanks)
    parent.children.remove(node)
    node.parent = None
