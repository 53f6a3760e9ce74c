"""Pre-order search over the design document tree."""

from __future__ import annotations

import re
from typing import Callable, Iterable, Iterator, List, Pattern

from .models import DesignFile, Node

NodePredicate = Callable[[Node], bool]


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield ``root`` and its descendants in pre-order, children in document order."""
    stack: List[Node] = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def find_nodes(root: Node, predicate: NodePredicate) -> List[Node]:
    """Return every node under ``root`` (inclusive) matching ``predicate``."""
    return [node for node in iter_nodes(root) if predicate(node)]


def find_by_kind(root: Node, kind: str) -> List[Node]:
    return find_nodes(root, lambda node: node.kind == kind)


def find_by_name_pattern(root: Node, pattern: str) -> List[Node]:
    """Case-insensitive search of node names; matches anywhere in the name."""
    regex = compile_name_pattern(pattern)
    return find_nodes(root, lambda node: regex.search(node.name) is not None)


def find_in_pages(design: DesignFile, predicate: NodePredicate) -> List[Node]:
    """Search every page of ``design``; the document node itself is not a candidate."""
    return _collect(design.pages, predicate)


def compile_name_pattern(pattern: str) -> Pattern[str]:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error:
        return re.compile(re.escape(pattern), re.IGNORECASE)


def _collect(roots: Iterable[Node], predicate: NodePredicate) -> List[Node]:
    result: List[Node] = []
    for root in roots:
        result.extend(find_nodes(root, predicate))
    return result


__all__ = [
    "compile_name_pattern",
    "find_by_kind",
    "find_by_name_pattern",
    "find_in_pages",
    "find_nodes",
    "iter_nodes",
]
