from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterator

import pytest

from figpull.models import DesignFile
from figpull.stores.ledger import Ledger
from tests._fixtures.design_builder import design_payload, fill_style, node, page, solid


@pytest.fixture(autouse=True)
def _reset_figpull_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("figpull")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def sample_payload() -> Dict[str, Any]:
    """A small file with one fill style, one unstyled swatch and an Icons frame."""
    return design_payload(
        page(
            "1:0",
            "Foundations",
            node("1:1", "Primary Swatch", "RECTANGLE", fills=[solid(1, 0, 0)], fill_style="S:red"),
            node("1:2", "Surface/Light", "RECTANGLE", fills=[solid(1, 1, 1)]),
            node(
                "1:10",
                "Icons",
                "FRAME",
                node("1:11", "Icon/Arrow Right", "COMPONENT"),
                node("1:12", "Icon/Close", "COMPONENT"),
                node("1:13", "Icon/Arrow Right", "INSTANCE"),
            ),
        ),
        styles={"S:red": fill_style("Primary/Red", "Brand red")},
    )


@pytest.fixture
def sample_design(sample_payload: Dict[str, Any]) -> DesignFile:
    return DesignFile.from_dict(sample_payload)


@pytest.fixture
def ledger_path(tmp_path: Path) -> Path:
    return tmp_path / "generated" / ".figma_manifest.json"


@pytest.fixture
def ledger(ledger_path: Path) -> Ledger:
    counter = iter(range(1, 10_000))
    return Ledger(ledger_path, clock=lambda: f"2026-01-01T00:00:{next(counter):02d}Z")
