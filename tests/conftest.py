"""Shared fixtures and helpers for tests."""

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import pytest

from kendo_grid.config import get_settings

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@dataclass
class Basic:
    Id: int
    Name: str
    SoftDelete: bool = False


@pytest.fixture
def two_animals() -> list[Basic]:
    return [Basic(Id=1, Name="Cat"), Basic(Id=2, Name="Dog")]


@pytest.fixture
def five_animals() -> list[Basic]:
    return [
        Basic(Id=1, Name="Cat"),
        Basic(Id=2, Name="Dog"),
        Basic(Id=3, Name="Apple"),
        Basic(Id=4, Name="Fish"),
        Basic(Id=5, Name="Cake"),
    ]


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Re-read environment settings for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
