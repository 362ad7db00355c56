"""Shared fixtures for caribbean_almanac tests."""

from collections.abc import Generator
from typing import Any, Callable

import pytest

from caribbean_almanac.template_loader import TemplateCatalog, build_catalog


def pytest_configure(config: Any) -> None:
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "smoke: Basic smoke tests")


@pytest.fixture
def make_record() -> Callable[..., dict[str, Any]]:
    """Factory for raw event records as they appear in the data file.

    Defaults describe a cultural fixed-date event in Jamaica; override any
    field by keyword. Recurrence fields default to null, so pass exactly one
    of fixed_date, rrule or relative_to for a valid record.
    """

    def _make(**overrides: Any) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": "jm-test",
            "country_code": "JM",
            "country_name": "Jamaica",
            "title": "Test Event",
            "category": "cultural",
            "tags": [],
            "description": "",
            "location": "Kingston",
            "fixed_date": None,
            "rrule": None,
            "relative_to": None,
            "offset_days": 0,
            "sources": [],
        }
        record.update(overrides)
        return record

    return _make


@pytest.fixture
def make_catalog() -> Callable[..., TemplateCatalog]:
    """Build a TemplateCatalog from raw record dicts."""

    def _make(*records: dict[str, Any]) -> TemplateCatalog:
        return build_catalog(records)

    return _make


@pytest.fixture(autouse=True)
def reset_default_catalog() -> Generator[None, Any, None]:
    """Reset the lazily loaded bundled catalog between tests."""
    yield
    import caribbean_almanac.event_expander

    caribbean_almanac.event_expander._default_catalog = None


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Clear almanac environment overrides so host settings cannot leak in."""
    for name in ("ALMANAC_DEBUG", "ALMANAC_LOG_LEVEL", "ALMANAC_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    yield
