"""Locate icon nodes and pair them with rendered image locators."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Awaitable, Callable, Dict, List, Mapping, Sequence, Set

from ..errors import ExtractionError, TransportError
from ..events import ICON_DUPLICATE, ICON_FALLBACK, EventSink, PullEvent, null_sink
from ..models import DesignFile, IconCandidate, Node
from ..naming import to_snake_case, to_variable_name
from ..tree import compile_name_pattern, find_by_kind, find_in_pages

COMPONENT = "COMPONENT"
INSTANCE = "INSTANCE"
DEFAULT_CONTAINER_PATTERN = "Icons"
DEFAULT_FORMAT = "svg"

LocatorLookup = Callable[[Sequence[str], str, float], Awaitable[Mapping[str, str]]]


@dataclass
class IconCollection:
    """Icons that survived locator resolution and deduplication."""

    icons: List[IconCandidate] = field(default_factory=list)
    skipped: List[IconCandidate] = field(default_factory=list)
    used_fallback: bool = False

    @property
    def node_ids(self) -> List[str]:
        return [icon.node_id for icon in self.icons]


async def collect_icons(
    design: DesignFile,
    locate: LocatorLookup,
    *,
    container_pattern: str = DEFAULT_CONTAINER_PATTERN,
    format: str = DEFAULT_FORMAT,
    scale: float = 1.0,
    sink: EventSink = null_sink,
) -> IconCollection:
    """Find icon candidates, resolve their locators in one batch and drop duplicates.

    ``locate`` receives the candidate node ids, the export format and scale and
    returns a mapping of node id to image URL. Transport failures during the
    lookup fail the whole call with :class:`ExtractionError`.
    """
    regex = compile_name_pattern(container_pattern)
    containers = find_in_pages(design, lambda node: regex.search(node.name) is not None)

    collection = IconCollection()
    if containers:
        nodes = _icon_nodes(containers)
    else:
        sink(
            PullEvent(
                ICON_FALLBACK,
                container_pattern,
                "no matching container; treating every component as an icon",
            )
        )
        collection.used_fallback = True
        nodes = find_in_pages(design, lambda node: node.kind == COMPONENT)

    # Nested or self-matching containers reach the same node more than once.
    nodes = _unique_by_id(nodes)
    if not nodes:
        return collection

    node_ids = [node.id for node in nodes]
    try:
        locators = await locate(node_ids, format, scale)
    except TransportError as exc:
        raise ExtractionError(f"Failed to get icon URLs: {exc}") from exc

    seen: Dict[str, IconCandidate] = {}
    taken_names: Set[str] = set()
    for node in nodes:
        locator = locators.get(node.id)
        if not locator:
            continue
        candidate = IconCandidate(
            node_id=node.id,
            name=to_variable_name(node.name),
            original_name=node.name,
            file_name=f"{to_snake_case(node.name)}.{format}",
            remote_locator=locator,
            format=format,
        )
        kept = seen.get(candidate.file_name)
        if kept is not None:
            collection.skipped.append(candidate)
            sink(PullEvent(ICON_DUPLICATE, candidate.file_name, f"kept node {kept.node_id}"))
            continue
        name = _unique_name(candidate.name, taken_names)
        if name != candidate.name:
            candidate = replace(candidate, name=name)
        taken_names.add(name)
        seen[candidate.file_name] = candidate
        collection.icons.append(candidate)
    return collection


async def extract_icons(
    design: DesignFile,
    locate: LocatorLookup,
    *,
    container_pattern: str = DEFAULT_CONTAINER_PATTERN,
    format: str = DEFAULT_FORMAT,
    scale: float = 1.0,
    sink: EventSink = null_sink,
) -> List[IconCandidate]:
    collection = await collect_icons(
        design,
        locate,
        container_pattern=container_pattern,
        format=format,
        scale=scale,
        sink=sink,
    )
    return collection.icons


def _icon_nodes(containers: Sequence[Node]) -> List[Node]:
    nodes: List[Node] = []
    for container in containers:
        nodes.extend(find_by_kind(container, COMPONENT))
        nodes.extend(find_by_kind(container, INSTANCE))
    return nodes


def _unique_by_id(nodes: Sequence[Node]) -> List[Node]:
    seen: Set[str] = set()
    unique: List[Node] = []
    for node in nodes:
        if node.id not in seen:
            seen.add(node.id)
            unique.append(node)
    return unique


def _unique_name(name: str, taken: Set[str]) -> str:
    """Suffix ``name`` with a counter when another icon already uses it."""
    if name not in taken:
        return name
    counter = 2
    while f"{name}{counter}" in taken:
        counter += 1
    return f"{name}{counter}"


__all__ = [
    "IconCollection",
    "LocatorLookup",
    "collect_icons",
    "extract_icons",
]
