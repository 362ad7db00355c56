"""Yearly expansion of almanac event templates into dated occurrences."""

from __future__ import annotations

import datetime
import logging
import threading
from typing import Optional

from .almanac_models import Diagnostic, DiagnosticCode, EventTemplate, ExpansionResult, Occurrence
from .exceptions import InvalidYearError, TemplateDataError
from .occurrence_cache import OccurrenceCache
from .template_loader import TemplateCatalog, diagnostic_code_for, load_templates

logger = logging.getLogger(__name__)


def _validate_year(year: int) -> int:
    if isinstance(year, bool) or not isinstance(year, int):
        raise InvalidYearError(year)
    if not datetime.MINYEAR <= year <= datetime.MAXYEAR:
        raise InvalidYearError(year)
    return year


def _occurrence_sort_key(occurrence: Occurrence) -> tuple[datetime.date, str]:
    # Same-date ties are ordered by template id so output never depends on catalog order
    return occurrence.date, occurrence.id


class AlmanacExpander:
    """Expands a template catalog for a (country, year) pair.

    Templates that cannot be expanded are skipped; each skip is logged and
    returned as a Diagnostic on the result rather than raised.
    """

    def __init__(self, catalog: TemplateCatalog, cache: Optional[OccurrenceCache] = None):
        """Initialize the expander.

        Args:
            catalog: Templates to expand
            cache: Optional cache for results keyed by (country_code, year)
        """
        self.catalog = catalog
        self.cache = cache

    def expand_events_for_year(self, country_code: str, year: int) -> ExpansionResult:
        """Expand every template of a country into occurrences for one year.

        Args:
            country_code: Country code, matched case-insensitively
            year: Calendar year

        Returns:
            ExpansionResult with occurrences sorted by (date, template id) and
            diagnostics for skipped templates

        Raises:
            InvalidYearError: If year is outside 1..9999
        """
        year = _validate_year(year)
        code = country_code.strip().upper()

        if self.cache is None:
            return self._expand(code, year)
        return self.cache.get_or_compute((code, year), lambda: self._expand(code, year))

    def _expand(self, country_code: str, year: int) -> ExpansionResult:
        templates = self.catalog.for_country(country_code)
        occurrences: list[Occurrence] = []
        diagnostics: list[Diagnostic] = list(self.catalog.diagnostics_for(country_code))

        for template in templates:
            try:
                dates = self.expand_template(template, year)
            except TemplateDataError as e:
                logger.warning("Skipping template %s for %d: %s", template.id, year, e)
                diagnostics.append(
                    Diagnostic(
                        template_id=template.id,
                        country_code=country_code,
                        code=diagnostic_code_for(e),
                        message=str(e),
                    )
                )
                continue
            except OverflowError as e:
                # Anchor offsets near year 1 or 9999 can leave the date range
                logger.warning("Skipping template %s for %d: %s", template.id, year, e)
                diagnostics.append(
                    Diagnostic(
                        template_id=template.id,
                        country_code=country_code,
                        code=DiagnosticCode.DATE_OUT_OF_RANGE,
                        message=f"Occurrence of {template.id!r} in {year} is out of range: {e}",
                    )
                )
                continue

            occurrences.extend(Occurrence.from_template(template, day) for day in dates)

        occurrences.sort(key=_occurrence_sort_key)
        logger.debug(
            "Expanded %d templates for %s %d -> %d occurrences, %d diagnostics",
            len(templates),
            country_code,
            year,
            len(occurrences),
            len(diagnostics),
        )
        return ExpansionResult(
            country_code=country_code,
            year=year,
            occurrences=tuple(occurrences),
            diagnostics=tuple(diagnostics),
        )

    @staticmethod
    def expand_template(template: EventTemplate, year: int) -> list[datetime.date]:
        """Dates on which one template occurs in ``year``.

        Raises:
            TemplateDataError: If the template's recurrence cannot be evaluated
        """
        return template.recurrence.dates_in(year)


# Default catalog (bundled data, loaded on first use)
_default_catalog: Optional[TemplateCatalog] = None
_default_catalog_lock = threading.Lock()


def get_default_catalog() -> TemplateCatalog:
    """Get or load the catalog bundled with the package."""
    global _default_catalog
    with _default_catalog_lock:
        if _default_catalog is None:
            _default_catalog = load_templates()
        return _default_catalog


def expand_events_for_year(
    country_code: str,
    year: int,
    catalog: Optional[TemplateCatalog] = None,
) -> ExpansionResult:
    """Expand a country's templates for one year.

    Args:
        country_code: Country code, e.g. "JM"
        year: Calendar year
        catalog: Templates to use; defaults to the bundled catalog

    Returns:
        ExpansionResult with sorted occurrences and diagnostics
    """
    expander = AlmanacExpander(catalog if catalog is not None else get_default_catalog())
    return expander.expand_events_for_year(country_code, year)
