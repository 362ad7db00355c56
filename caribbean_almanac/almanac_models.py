"""Data models for almanac event templates and their yearly occurrences."""

import datetime
import re
from calendar import monthrange
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, model_validator

from .exceptions import AmbiguousTemplateError, InvalidFixedDateError, UnknownAnchorError
from .feast_calculator import is_known_anchor, resolve_anchor
from .rrule_evaluator import expand_rule, validate_rule

_FIXED_DATE_PATTERN = re.compile(r"^\s*(\d{1,2})-(\d{1,2})\s*$")

# Any leap year works here; it only decides whether 02-29 is acceptable data.
_LEAP_REFERENCE_YEAR = 2000


class EventCategory(str, Enum):
    """Almanac event categories."""

    HISTORICAL = "historical"
    CULTURAL = "cultural"


class DiagnosticCode(str, Enum):
    """Reasons a template contributed no occurrences."""

    RULE_PARSE_ERROR = "rule_parse_error"
    AMBIGUOUS_TEMPLATE = "ambiguous_template"
    INVALID_FIXED_DATE = "invalid_fixed_date"
    UNKNOWN_ANCHOR = "unknown_anchor"
    INVALID_RECORD = "invalid_record"
    DATE_OUT_OF_RANGE = "date_out_of_range"


# Recurrence variants


class FixedDate(BaseModel):
    """Same month and day every year."""

    kind: Literal["fixed_date"] = "fixed_date"
    month: int = Field(..., ge=1, le=12)
    day: int = Field(..., ge=1, le=31)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_day_exists(self) -> "FixedDate":
        if self.day > monthrange(_LEAP_REFERENCE_YEAR, self.month)[1]:
            raise ValueError(f"day {self.day} does not exist in month {self.month}")
        return self

    @classmethod
    def parse(cls, value: str) -> "FixedDate":
        """Parse an "MM-DD" string, rejecting days no year can contain.

        Raises:
            InvalidFixedDateError: If the text is malformed or the day does not
                exist in that month even in a leap year
        """
        match = _FIXED_DATE_PATTERN.match(value or "")
        if not match:
            raise InvalidFixedDateError(value, "expected MM-DD")

        month, day = int(match.group(1)), int(match.group(2))
        if not 1 <= month <= 12:
            raise InvalidFixedDateError(value, f"month {month} out of range")
        if not 1 <= day <= monthrange(_LEAP_REFERENCE_YEAR, month)[1]:
            raise InvalidFixedDateError(value, f"day {day} does not exist in month {month}")
        return cls(month=month, day=day)

    def dates_in(self, year: int) -> list[datetime.date]:
        try:
            return [datetime.date(year, self.month, self.day)]
        except ValueError as e:
            # Construction rejects days no year has, so only 02-29 gets here
            raise InvalidFixedDateError(
                f"{self.month:02d}-{self.day:02d}", f"not a valid date in {year}"
            ) from e


class RuleRecurrence(BaseModel):
    """RRULE text evaluated independently for each year."""

    kind: Literal["rule"] = "rule"
    rule: str = Field(..., min_length=1, description="RFC 5545 RRULE text")

    model_config = ConfigDict(frozen=True)

    def dates_in(self, year: int) -> list[datetime.date]:
        return expand_rule(self.rule, year)


class RelativeAnchor(BaseModel):
    """Signed day offset from a named movable feast."""

    kind: Literal["relative_anchor"] = "relative_anchor"
    anchor: str = Field(..., description="Movable feast name, e.g. ash_wednesday")
    offset_days: int = Field(default=0, description="Signed day offset from the anchor")

    model_config = ConfigDict(frozen=True)

    def dates_in(self, year: int) -> list[datetime.date]:
        return [resolve_anchor(self.anchor, year) + datetime.timedelta(days=self.offset_days)]


RecurrenceSpec = Annotated[
    Union[FixedDate, RuleRecurrence, RelativeAnchor],
    Field(discriminator="kind"),
]


# Templates and occurrences


class EventTemplate(BaseModel):
    """A yearly recurring almanac event with exactly one recurrence mode."""

    id: str = Field(..., description="Stable template identifier")
    country_code: str = Field(..., description="Region the event belongs to")
    country_name: str = Field(default="", description="Display name of the region")
    title: str
    description: str = ""
    location: str = ""
    category: EventCategory
    tags: tuple[str, ...] = ()
    sources: tuple[str, ...] = ()
    recurrence: RecurrenceSpec

    model_config = ConfigDict(frozen=True, use_enum_values=True)


class Occurrence(BaseModel):
    """An event template materialized onto one calendar date."""

    id: str
    country_code: str
    country_name: str = ""
    title: str
    description: str = ""
    location: str = ""
    category: EventCategory
    tags: tuple[str, ...] = ()
    sources: tuple[str, ...] = ()
    date: datetime.date

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    @classmethod
    def from_template(cls, template: EventTemplate, on_date: datetime.date) -> "Occurrence":
        return cls(
            id=template.id,
            country_code=template.country_code,
            country_name=template.country_name,
            title=template.title,
            description=template.description,
            location=template.location,
            category=template.category,
            tags=template.tags,
            sources=template.sources,
            date=on_date,
        )

    @property
    def iso_date(self) -> str:
        """Occurrence date as YYYY-MM-DD."""
        return self.date.isoformat()

    @field_serializer("date")
    def serialize_date(self, value: datetime.date) -> str:
        return value.isoformat()


class Diagnostic(BaseModel):
    """Why a template was skipped during loading or expansion."""

    template_id: Optional[str] = None
    country_code: Optional[str] = None
    code: DiagnosticCode
    message: str

    model_config = ConfigDict(frozen=True, use_enum_values=True)


class ExpansionResult(BaseModel):
    """Occurrences for one (country, year) pair plus skipped-template diagnostics."""

    country_code: str
    year: int
    occurrences: tuple[Occurrence, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def has_diagnostics(self) -> bool:
        return bool(self.diagnostics)


# Raw data-file records


class EventRecord(BaseModel):
    """Flat event record as stored in the template data file.

    Recurrence is spread over three nullable fields; ``to_template`` folds
    them into a single recurrence variant.
    """

    id: str = Field(..., min_length=1)
    country_code: str = Field(..., min_length=1)
    country_name: str = ""
    title: str
    category: EventCategory
    tags: list[str] = Field(default_factory=list)
    description: str = ""
    location: str = ""
    fixed_date: Optional[str] = None
    rrule: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("rrule", "recurrence_rule")
    )
    relative_to: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("relative_to", "relative_anchor")
    )
    offset_days: int = 0
    sources: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    def populated_modes(self) -> list[str]:
        """Names of the recurrence fields that carry a value."""
        candidates = {
            "fixed_date": self.fixed_date,
            "rrule": self.rrule,
            "relative_to": self.relative_to,
        }
        return [name for name, value in candidates.items() if value and value.strip()]

    def to_template(self) -> EventTemplate:
        """Build an EventTemplate with exactly one recurrence variant.

        Raises:
            AmbiguousTemplateError: If zero or several recurrence fields are set
            InvalidFixedDateError: If fixed_date is malformed or impossible
            UnknownAnchorError: If relative_to names an unknown feast
            RuleParseError: If rrule text cannot be parsed
        """
        modes = self.populated_modes()
        if len(modes) != 1:
            raise AmbiguousTemplateError(self.id, modes)

        recurrence: Union[FixedDate, RuleRecurrence, RelativeAnchor]
        if modes[0] == "fixed_date":
            recurrence = FixedDate.parse(self.fixed_date or "")
        elif modes[0] == "rrule":
            rule_text = (self.rrule or "").strip()
            validate_rule(rule_text)
            recurrence = RuleRecurrence(rule=rule_text)
        else:
            anchor = (self.relative_to or "").strip().lower()
            if not is_known_anchor(anchor):
                raise UnknownAnchorError(self.relative_to)
            recurrence = RelativeAnchor(anchor=anchor, offset_days=self.offset_days)

        return EventTemplate(
            id=self.id,
            country_code=self.country_code.strip().upper(),
            country_name=self.country_name,
            title=self.title,
            description=self.description,
            location=self.location,
            category=self.category,
            tags=tuple(self.tags),
            sources=tuple(self.sources),
            recurrence=recurrence,
        )
