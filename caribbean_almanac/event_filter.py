"""Occurrence filtering and calendar helpers for expanded almanac events."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from .almanac_models import Occurrence

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"


class OccurrenceFilters(BaseModel):
    """User-chosen filter criteria.

    Groups are AND-ed together: category, then tags (any match), then search.
    """

    category: str = Field(default=ALL_CATEGORIES, description="historical, cultural or all")
    tags: list[str] = Field(default_factory=list, description="Keep events sharing any tag")
    search: str = Field(default="", description="Case-insensitive text match")

    @property
    def is_empty(self) -> bool:
        return (
            (not self.category or self.category == ALL_CATEGORIES)
            and not self.tags
            and not self.search.strip()
        )


FilterCriteria = Union[OccurrenceFilters, Mapping[str, Any], None]


def _coerce_criteria(criteria: FilterCriteria) -> OccurrenceFilters:
    if criteria is None:
        return OccurrenceFilters()
    if isinstance(criteria, OccurrenceFilters):
        return criteria
    # Unset criteria may arrive as None from JSON or UI state
    return OccurrenceFilters.model_validate({k: v for k, v in criteria.items() if v is not None})


def _matches_search(occurrence: Occurrence, needle: str) -> bool:
    return (
        needle in occurrence.title.lower()
        or needle in occurrence.description.lower()
        or any(needle in tag.lower() for tag in occurrence.tags)
    )


def filter_occurrences(
    occurrences: Iterable[Occurrence],
    criteria: FilterCriteria = None,
) -> list[Occurrence]:
    """Narrow occurrences by category, tags and free-text search.

    Args:
        occurrences: Expanded occurrences
        criteria: OccurrenceFilters or an equivalent mapping; None keeps everything

    Returns:
        New list of matching occurrences in input order
    """
    filters = _coerce_criteria(criteria)
    filtered = list(occurrences)

    if filters.category and filters.category != ALL_CATEGORIES:
        filtered = [o for o in filtered if o.category == filters.category]

    if filters.tags:
        wanted = set(filters.tags)
        filtered = [o for o in filtered if wanted.intersection(o.tags)]

    needle = filters.search.strip().lower()
    if needle:
        filtered = [o for o in filtered if _matches_search(o, needle)]

    logger.debug("Filter %s kept %d occurrences", filters.model_dump(), len(filtered))
    return filtered


def available_tags(occurrences: Iterable[Occurrence]) -> list[str]:
    """Sorted union of tags across occurrences, for building filter choices."""
    tags: set[str] = set()
    for occurrence in occurrences:
        tags.update(occurrence.tags)
    return sorted(tags)


def _as_date(day: Union[datetime.date, str]) -> datetime.date:
    if isinstance(day, datetime.datetime):
        return day.date()
    if isinstance(day, datetime.date):
        return day
    return datetime.date.fromisoformat(day.strip())


def events_for_date(
    occurrences: Iterable[Occurrence],
    day: Union[datetime.date, str],
) -> list[Occurrence]:
    """Occurrences falling on one date (a date or YYYY-MM-DD string).

    Raises:
        ValueError: If ``day`` is a string that is not an ISO date
    """
    target = _as_date(day)
    return [o for o in occurrences if o.date == target]


def group_by_date(
    occurrences: Iterable[Occurrence],
    month: Optional[int] = None,
) -> dict[datetime.date, list[Occurrence]]:
    """Group occurrences into calendar cells, optionally for a single month."""
    grouped: dict[datetime.date, list[Occurrence]] = {}
    for occurrence in occurrences:
        if month is not None and occurrence.date.month != month:
            continue
        grouped.setdefault(occurrence.date, []).append(occurrence)
    return grouped
