"""caribbean_almanac - yearly event-date expansion for the Caribbean almanac.

Expands recurring event templates (fixed dates, RRULE patterns and offsets
from movable feasts such as Ash Wednesday) into dated occurrences for a
country and year, and filters the result by category, tags and text.
"""

__version__ = "0.1.0"

from .almanac_models import (
    Diagnostic,
    DiagnosticCode,
    EventCategory,
    EventRecord,
    EventTemplate,
    ExpansionResult,
    FixedDate,
    Occurrence,
    RelativeAnchor,
    RuleRecurrence,
)
from .event_expander import AlmanacExpander, expand_events_for_year, get_default_catalog
from .event_filter import (
    OccurrenceFilters,
    available_tags,
    events_for_date,
    filter_occurrences,
    group_by_date,
)
from .exceptions import (
    AlmanacError,
    AmbiguousTemplateError,
    InvalidFixedDateError,
    InvalidYearError,
    RuleParseError,
    TemplateDataError,
    TemplateLoadError,
    UnknownAnchorError,
)
from .feast_calculator import ANCHOR_OFFSETS, compute_ash_wednesday, compute_easter, resolve_anchor
from .occurrence_cache import OccurrenceCache
from .rrule_evaluator import expand_rule
from .template_loader import TemplateCatalog, load_templates

__all__ = [
    "ANCHOR_OFFSETS",
    "AlmanacError",
    "AlmanacExpander",
    "AmbiguousTemplateError",
    "Diagnostic",
    "DiagnosticCode",
    "EventCategory",
    "EventRecord",
    "EventTemplate",
    "ExpansionResult",
    "FixedDate",
    "InvalidFixedDateError",
    "InvalidYearError",
    "Occurrence",
    "OccurrenceCache",
    "OccurrenceFilters",
    "RelativeAnchor",
    "RuleParseError",
    "RuleRecurrence",
    "TemplateCatalog",
    "TemplateDataError",
    "TemplateLoadError",
    "UnknownAnchorError",
    "available_tags",
    "compute_ash_wednesday",
    "compute_easter",
    "events_for_date",
    "expand_events_for_year",
    "expand_rule",
    "filter_occurrences",
    "get_default_catalog",
    "group_by_date",
    "load_templates",
    "resolve_anchor",
]
