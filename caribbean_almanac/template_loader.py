"""Loading of almanac event templates from JSON or YAML data files.

The bundled data file ships inside the package. Records that fail validation
are skipped and kept as diagnostics on the catalog so the expander can report
them next to the country they belong to.
"""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml
from pydantic import ValidationError

from .almanac_models import Diagnostic, DiagnosticCode, EventRecord, EventTemplate
from .exceptions import (
    AmbiguousTemplateError,
    InvalidFixedDateError,
    RuleParseError,
    TemplateDataError,
    TemplateLoadError,
    UnknownAnchorError,
)

logger = logging.getLogger(__name__)

BUNDLED_DATA_FILE = "events.json"

_ERROR_CODES: dict[type[TemplateDataError], DiagnosticCode] = {
    RuleParseError: DiagnosticCode.RULE_PARSE_ERROR,
    AmbiguousTemplateError: DiagnosticCode.AMBIGUOUS_TEMPLATE,
    InvalidFixedDateError: DiagnosticCode.INVALID_FIXED_DATE,
    UnknownAnchorError: DiagnosticCode.UNKNOWN_ANCHOR,
}


def diagnostic_code_for(error: TemplateDataError) -> DiagnosticCode:
    """Map a template data error to its diagnostic code."""
    for error_type, code in _ERROR_CODES.items():
        if isinstance(error, error_type):
            return code
    return DiagnosticCode.INVALID_RECORD


class TemplateCatalog:
    """Read-only collection of validated event templates.

    Example:
        catalog = load_templates()
        for template in catalog.for_country("JM"):
            ...
    """

    def __init__(
        self,
        templates: Iterable[EventTemplate],
        diagnostics: Iterable[Diagnostic] = (),
    ):
        self.templates: tuple[EventTemplate, ...] = tuple(templates)
        self.diagnostics: tuple[Diagnostic, ...] = tuple(diagnostics)

    def __len__(self) -> int:
        return len(self.templates)

    def for_country(self, country_code: str) -> list[EventTemplate]:
        """Templates for one country, in catalog order."""
        code = country_code.strip().upper()
        return [t for t in self.templates if t.country_code == code]

    def diagnostics_for(self, country_code: str) -> list[Diagnostic]:
        """Load diagnostics recorded for one country."""
        code = country_code.strip().upper()
        return [d for d in self.diagnostics if d.country_code == code]

    def country_name(self, country_code: str) -> Optional[str]:
        code = country_code.strip().upper()
        for template in self.templates:
            if template.country_code == code and template.country_name:
                return template.country_name
        return None

    def available_countries(self) -> list[tuple[str, str]]:
        """(code, name) pairs for every country with templates, sorted by name."""
        countries: dict[str, str] = {}
        for template in self.templates:
            if template.country_name or template.country_code not in countries:
                countries[template.country_code] = template.country_name or template.country_code
        return sorted(countries.items(), key=lambda item: item[1].lower())


def _read_records(path: Path) -> list[Any]:
    """Read the raw record list from a JSON or YAML file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TemplateLoadError(str(path), str(e)) from e

    try:
        # JSON is a subset of YAML, so one parser covers both formats
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise TemplateLoadError(str(path), f"unparseable data file: {e}") from e

    if isinstance(loaded, dict) and isinstance(loaded.get("events"), list):
        loaded = loaded["events"]
    if not isinstance(loaded, list):
        raise TemplateLoadError(str(path), "expected a list of event records")
    return loaded


def build_catalog(records: Iterable[Any]) -> TemplateCatalog:
    """Validate raw records into a catalog, skipping bad ones with diagnostics."""
    templates: list[EventTemplate] = []
    diagnostics: list[Diagnostic] = []

    for index, raw in enumerate(records):
        raw_id = raw.get("id") if isinstance(raw, dict) else None
        raw_country = raw.get("country_code") if isinstance(raw, dict) else None
        country = str(raw_country).strip().upper() if raw_country else None

        try:
            record = EventRecord.model_validate(raw)
        except ValidationError as e:
            message = f"Record #{index} ({raw_id!r}) failed validation: {e.error_count()} error(s)"
            logger.warning("%s", message)
            diagnostics.append(
                Diagnostic(
                    template_id=str(raw_id) if raw_id is not None else None,
                    country_code=country,
                    code=DiagnosticCode.INVALID_RECORD,
                    message=message,
                )
            )
            continue

        try:
            templates.append(record.to_template())
        except TemplateDataError as e:
            logger.warning("Skipping template %s: %s", record.id, e)
            diagnostics.append(
                Diagnostic(
                    template_id=record.id,
                    country_code=record.country_code.strip().upper(),
                    code=diagnostic_code_for(e),
                    message=str(e),
                )
            )

    logger.debug(
        "Built template catalog: %d templates, %d diagnostics", len(templates), len(diagnostics)
    )
    return TemplateCatalog(templates, diagnostics)


def load_templates(path: str | Path | None = None) -> TemplateCatalog:
    """Load event templates from a data file.

    Args:
        path: JSON or YAML file path. Defaults to the data file bundled with
              the package.

    Returns:
        TemplateCatalog with valid templates and per-record diagnostics

    Raises:
        TemplateLoadError: If the file is missing, unparseable, or not a list
    """
    if path is None:
        with resources.as_file(resources.files(__package__) / "data" / BUNDLED_DATA_FILE) as p:
            records = _read_records(p)
        source = f"bundled {BUNDLED_DATA_FILE}"
    else:
        p = Path(path)
        if not p.exists():
            raise TemplateLoadError(str(p), "file not found")
        records = _read_records(p)
        source = str(p)

    catalog = build_catalog(records)
    logger.info("Loaded %d event templates from %s", len(catalog), source)
    return catalog
