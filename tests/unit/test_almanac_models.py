"""Tests for caribbean_almanac.almanac_models validation and conversion."""

from datetime import date

import pytest
from pydantic import ValidationError

from caribbean_almanac.almanac_models import (
    EventRecord,
    EventTemplate,
    FixedDate,
    Occurrence,
    RelativeAnchor,
    RuleRecurrence,
)
from caribbean_almanac.exceptions import (
    AmbiguousTemplateError,
    InvalidFixedDateError,
    RuleParseError,
    UnknownAnchorError,
)

pytestmark = pytest.mark.unit


class TestFixedDateParse:
    """Tests for FixedDate.parse and dates_in."""

    @pytest.mark.parametrize("value,month,day", [("07-04", 7, 4), ("7-4", 7, 4), ("02-29", 2, 29), ("12-31", 12, 31)])
    def test_parse_valid(self, value: str, month: int, day: int) -> None:
        fixed = FixedDate.parse(value)
        assert (fixed.month, fixed.day) == (month, day)

    @pytest.mark.parametrize("value", ["", "0704", "07/04", "July 4", "13-01", "00-10", "02-30", "04-31", "06-00"])
    def test_parse_invalid(self, value: str) -> None:
        with pytest.raises(InvalidFixedDateError):
            FixedDate.parse(value)

    def test_dates_in_regular_year(self) -> None:
        assert FixedDate(month=7, day=4).dates_in(2025) == [date(2025, 7, 4)]

    def test_leap_day_in_non_leap_year_raises(self) -> None:
        leap_day = FixedDate.parse("02-29")
        assert leap_day.dates_in(2024) == [date(2024, 2, 29)]
        with pytest.raises(InvalidFixedDateError) as excinfo:
            leap_day.dates_in(2025)
        assert "2025" in str(excinfo.value)

    def test_direct_construction_validates_ranges(self) -> None:
        with pytest.raises(ValidationError):
            FixedDate(month=13, day=1)

    @pytest.mark.parametrize("month,day", [(2, 30), (2, 31), (4, 31), (11, 31)])
    def test_direct_construction_rejects_missing_day(self, month: int, day: int) -> None:
        with pytest.raises(ValidationError):
            FixedDate(month=month, day=day)

    def test_direct_construction_keeps_leap_day(self) -> None:
        assert FixedDate(month=2, day=29).dates_in(2028) == [date(2028, 2, 29)]


class TestRecurrenceVariants:
    """Tests for rule and anchor variants."""

    def test_rule_recurrence_dates(self) -> None:
        rule = RuleRecurrence(rule="FREQ=YEARLY;BYMONTH=8;BYDAY=1MO")
        assert rule.dates_in(2024) == [date(2024, 8, 5)]

    def test_relative_anchor_dates(self) -> None:
        anchor = RelativeAnchor(anchor="ash_wednesday", offset_days=-3)
        assert anchor.dates_in(2026) == [date(2026, 2, 15)]

    def test_template_recurrence_is_discriminated(self) -> None:
        template = EventTemplate.model_validate(
            {
                "id": "x",
                "country_code": "JM",
                "title": "X",
                "category": "cultural",
                "recurrence": {"kind": "relative_anchor", "anchor": "easter", "offset_days": 1},
            }
        )
        assert isinstance(template.recurrence, RelativeAnchor)

    def test_template_rejects_unknown_kind(self) -> None:
        with pytest.raises(ValidationError):
            EventTemplate.model_validate(
                {
                    "id": "x",
                    "country_code": "JM",
                    "title": "X",
                    "category": "cultural",
                    "recurrence": {"kind": "lunar", "day": 1},
                }
            )

    def test_template_is_immutable(self) -> None:
        template = EventTemplate(
            id="x",
            country_code="JM",
            title="X",
            category="cultural",
            recurrence=FixedDate(month=1, day=1),
        )
        with pytest.raises(ValidationError):
            template.title = "changed"


class TestEventRecordToTemplate:
    """Tests for folding flat records into a single recurrence variant."""

    def test_fixed_date_record(self, make_record) -> None:
        template = EventRecord.model_validate(make_record(fixed_date="08-06")).to_template()
        assert template.recurrence == FixedDate(month=8, day=6)
        assert template.country_code == "JM"

    def test_rrule_record_via_alias(self, make_record) -> None:
        raw = make_record()
        del raw["rrule"]
        raw["recurrence_rule"] = "FREQ=YEARLY;BYMONTH=10;BYDAY=3MO"
        template = EventRecord.model_validate(raw).to_template()
        assert isinstance(template.recurrence, RuleRecurrence)

    def test_relative_record(self, make_record) -> None:
        template = EventRecord.model_validate(
            make_record(relative_to="Ash_Wednesday", offset_days=-1)
        ).to_template()
        assert template.recurrence == RelativeAnchor(anchor="ash_wednesday", offset_days=-1)

    def test_no_recurrence_is_ambiguous(self, make_record) -> None:
        with pytest.raises(AmbiguousTemplateError) as excinfo:
            EventRecord.model_validate(make_record()).to_template()
        assert excinfo.value.modes == ()
        assert "no recurrence mode" in str(excinfo.value)

    def test_multiple_recurrences_are_ambiguous(self, make_record) -> None:
        record = EventRecord.model_validate(
            make_record(fixed_date="08-06", rrule="FREQ=YEARLY;BYMONTH=8;BYDAY=1MO")
        )
        with pytest.raises(AmbiguousTemplateError) as excinfo:
            record.to_template()
        assert excinfo.value.modes == ("fixed_date", "rrule")

    def test_blank_fields_do_not_count_as_modes(self, make_record) -> None:
        record = EventRecord.model_validate(make_record(fixed_date="08-06", rrule="  "))
        assert record.populated_modes() == ["fixed_date"]

    def test_unknown_anchor(self, make_record) -> None:
        with pytest.raises(UnknownAnchorError):
            EventRecord.model_validate(make_record(relative_to="lammas")).to_template()

    def test_bad_rule_rejected_at_conversion(self, make_record) -> None:
        with pytest.raises(RuleParseError):
            EventRecord.model_validate(make_record(rrule="FREQ=SOMETIMES")).to_template()

    def test_impossible_fixed_date(self, make_record) -> None:
        with pytest.raises(InvalidFixedDateError):
            EventRecord.model_validate(make_record(fixed_date="02-30")).to_template()

    def test_invalid_category_fails_validation(self, make_record) -> None:
        with pytest.raises(ValidationError):
            EventRecord.model_validate(make_record(category="sporting", fixed_date="01-01"))


def test_occurrence_copies_template_fields() -> None:
    template = EventTemplate(
        id="jm-independence",
        country_code="JM",
        country_name="Jamaica",
        title="Independence Day",
        description="desc",
        location="Kingston",
        category="historical",
        tags=("independence",),
        sources=("https://example.org",),
        recurrence=FixedDate(month=8, day=6),
    )
    occurrence = Occurrence.from_template(template, date(2026, 8, 6))

    assert occurrence.id == template.id
    assert occurrence.title == "Independence Day"
    assert occurrence.category == "historical"
    assert occurrence.tags == ("independence",)
    assert occurrence.iso_date == "2026-08-06"
    assert occurrence.model_dump(mode="json")["date"] == "2026-08-06"
