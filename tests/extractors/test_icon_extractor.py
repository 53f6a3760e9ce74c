"""Tests for icon discovery and locator resolution."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Mapping, Optional, Sequence

import pytest

from figpull.errors import ExtractionError, TransportError
from figpull.events import ICON_DUPLICATE, ICON_FALLBACK, PullEvent
from figpull.extractors import collect_icons, extract_icons
from figpull.models import DesignFile
from tests._fixtures.design_builder import design, node, page


class FakeLookup:
    def __init__(
        self,
        locators: Optional[Mapping[str, str]] = None,
        *,
        error: Exception | None = None,
    ) -> None:
        self.locators = locators
        self.error = error
        self.calls: List[tuple] = []

    async def __call__(self, node_ids: Sequence[str], format: str, scale: float) -> Dict[str, str]:
        self.calls.append((list(node_ids), format, scale))
        if self.error is not None:
            raise self.error
        if self.locators is None:
            return {node_id: f"https://cdn.example/{node_id}.{format}" for node_id in node_ids}
        return dict(self.locators)


def test_collect_icons_dedups_by_file_name_first_wins(sample_design: DesignFile) -> None:
    events: List[PullEvent] = []
    lookup = FakeLookup()

    collection = asyncio.run(collect_icons(sample_design, lookup, sink=events.append))

    assert [icon.node_id for icon in collection.icons] == ["1:11", "1:12"]
    assert [icon.file_name for icon in collection.icons] == [
        "icon_arrow_right.svg",
        "icon_close.svg",
    ]
    assert collection.icons[0].name == "iconArrowRight"
    assert collection.icons[0].remote_locator == "https://cdn.example/1:11.svg"
    assert [icon.node_id for icon in collection.skipped] == ["1:13"]
    assert [event.kind for event in events] == [ICON_DUPLICATE]
    assert lookup.calls == [(["1:11", "1:12", "1:13"], "svg", 1.0)]


def test_collect_icons_falls_back_to_all_components() -> None:
    sample = design(
        page(
            "1:0",
            "Page",
            node("1:1", "Buttons", "FRAME", node("1:2", "Search", "COMPONENT")),
            node("1:3", "Card", "INSTANCE"),
        )
    )
    events: List[PullEvent] = []

    collection = asyncio.run(
        collect_icons(sample, FakeLookup(), container_pattern="Icons", format="png", sink=events.append)
    )

    assert collection.used_fallback
    assert [icon.file_name for icon in collection.icons] == ["search.png"]
    assert [event.kind for event in events] == [ICON_FALLBACK]


def test_collect_icons_drops_missing_and_empty_locators(sample_design: DesignFile) -> None:
    lookup = FakeLookup({"1:11": "", "1:13": "https://cdn.example/arrow.svg"})

    icons = asyncio.run(extract_icons(sample_design, lookup))

    assert [icon.node_id for icon in icons] == ["1:13"]


def test_collect_icons_wraps_transport_failures(sample_design: DesignFile) -> None:
    lookup = FakeLookup(error=TransportError("status 403"))

    with pytest.raises(ExtractionError) as excinfo:
        asyncio.run(collect_icons(sample_design, lookup))

    assert isinstance(excinfo.value.__cause__, TransportError)


def test_collect_icons_on_empty_document_skips_lookup() -> None:
    lookup = FakeLookup()

    assert asyncio.run(extract_icons(design(), lookup)) == []
    assert lookup.calls == []


def test_self_matching_container_does_not_duplicate_nodes() -> None:
    sample = design(
        page(
            "1:0",
            "Page",
            node("1:1", "Icons", "FRAME", node("1:2", "icons/home", "COMPONENT")),
        )
    )
    events: List[PullEvent] = []
    lookup = FakeLookup()

    collection = asyncio.run(collect_icons(sample, lookup, sink=events.append))

    assert [icon.node_id for icon in collection.icons] == ["1:2"]
    assert collection.skipped == []
    assert events == []
    assert lookup.calls == [(["1:2"], "svg", 1.0)]


def test_colliding_identifiers_get_numbered_suffix() -> None:
    sample = design(
        page(
            "1:0",
            "Page",
            node(
                "1:1",
                "Icons",
                "FRAME",
                node("1:2", "arrow left", "COMPONENT"),
                node("1:3", "arrow+left", "COMPONENT"),
            ),
        )
    )

    icons = asyncio.run(extract_icons(sample, FakeLookup()))

    assert [icon.file_name for icon in icons] == ["arrow_left.svg", "arrow+left.svg"]
    assert [icon.name for icon in icons] == ["arrowLeft", "arrowLeft2"]
