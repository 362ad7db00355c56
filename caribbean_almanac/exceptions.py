"""Exception hierarchy for the almanac expansion engine.

Per-template data problems derive from TemplateDataError. The expander catches
those, skips the template and records a diagnostic instead of failing the
whole calendar. Load failures and caller mistakes are raised normally.
"""

from __future__ import annotations

from typing import Optional, Sequence


class AlmanacError(Exception):
    """Base exception for all almanac errors."""


class TemplateDataError(AlmanacError):
    """A single event template cannot be expanded.

    Raised when:
    - The recurrence rule text cannot be parsed
    - A template has zero or several recurrence modes
    - A fixed date does not exist in the requested year
    - A relative anchor name is not known

    The expander turns these into diagnostics for that template only.
    """


class RuleParseError(TemplateDataError):
    """Recurrence rule text could not be interpreted."""

    def __init__(self, rule: Optional[str], reason: str = "") -> None:
        self.rule = rule
        self.reason = reason
        message = f"Invalid recurrence rule {rule!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class AmbiguousTemplateError(TemplateDataError):
    """Template has no recurrence mode, or more than one."""

    def __init__(self, template_id: str, modes: Sequence[str]) -> None:
        self.template_id = template_id
        self.modes = tuple(modes)
        if self.modes:
            detail = "multiple recurrence modes set: " + ", ".join(self.modes)
        else:
            detail = "no recurrence mode set"
        super().__init__(f"Template {template_id!r} has {detail}")


class InvalidFixedDateError(TemplateDataError):
    """Fixed month/day is malformed or does not exist in a given year."""

    def __init__(self, value: str, reason: str = "") -> None:
        self.value = value
        self.reason = reason
        message = f"Invalid fixed date {value!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnknownAnchorError(TemplateDataError):
    """Relative anchor is not a known movable feast."""

    def __init__(self, anchor: Optional[str]) -> None:
        self.anchor = anchor
        super().__init__(f"Unknown movable feast anchor {anchor!r}")


class TemplateLoadError(AlmanacError):
    """Template data file is missing or cannot be parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load event templates from {path}: {reason}")


class InvalidYearError(AlmanacError, ValueError):
    """Requested year is outside the supported calendar range."""

    def __init__(self, year: object) -> None:
        self.year = year
        super().__init__(f"Year {year!r} is outside the supported range 1..9999")
