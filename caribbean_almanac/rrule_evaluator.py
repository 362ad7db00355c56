"""RRULE evaluation restricted to a single calendar year.

Rules start on January 1 of the year being evaluated, so yearly rules are
re-evaluated independently for each year and INTERVAL counts from that date.

dateutil keeps searching for the next match after the requested window until
it finds one or runs out of years, and an UNTIL bound is only checked against
produced dates. Two things keep that search short:

- Rules are evaluated in the equivalent year of a late 400-year Gregorian
  cycle. The calendar repeats exactly every 400 years, so the dates match
  the requested year, and the search cannot run past year 9999.
- ``validate_rule`` rejects rules with no match in a full cycle, so a loaded
  rule always finds its next match within 400 years.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import NamedTuple, Optional

from dateutil import parser as date_parser
from dateutil.rrule import rrule, rrulestr

from .exceptions import RuleParseError

logger = logging.getLogger(__name__)

# 146097 days, a whole number of weeks
GREGORIAN_CYCLE_YEARS = 400

# Evaluation years fall in 9200..9599, leaving at least one full cycle for
# dateutil's look-ahead before it reaches the end of the date range
_LAST_EVALUATION_YEAR = 9599

_CYCLE_CHECK_START = datetime(9600, 1, 1)
_CYCLE_CHECK_END = datetime(9999, 12, 31, 23, 59, 59)

_RRULE_PREFIX = "RRULE:"


class _CompiledRule(NamedTuple):
    body: str
    until: Optional[datetime]
    has_count: bool


def _split_parts(text: str) -> list[tuple[str, str, str]]:
    parts = []
    for item in text.split(";"):
        name, sep, value = item.partition("=")
        parts.append((item, name.strip().upper() if sep else "", value.strip()))
    return parts


def _build_rule(body: str, rule_text: str, dtstart: datetime) -> rrule:
    """Parse RRULE text with dateutil, mapping parser failures to RuleParseError."""
    try:
        parsed = rrulestr(body, dtstart=dtstart)
    except (ValueError, TypeError, KeyError) as e:
        # dateutil raises TypeError when FREQ is missing
        raise RuleParseError(rule_text, str(e)) from e
    if not isinstance(parsed, rrule):
        raise RuleParseError(rule_text, "expected a single RRULE line")
    return parsed


def _compile_rule(rule_text: str) -> _CompiledRule:
    """Check rule text and split off its UNTIL bound."""
    if not rule_text or not rule_text.strip():
        raise RuleParseError(rule_text, "empty rule")

    text = rule_text.strip()
    if "\n" in text or text.upper().startswith("DTSTART"):
        raise RuleParseError(rule_text, "expected a single RRULE line")
    if text.upper().startswith(_RRULE_PREFIX):
        text = text[len(_RRULE_PREFIX):]

    parts = _split_parts(text)
    values = {name: value for _, name, value in parts if name}
    body = ";".join(item for item, name, _ in parts if name != "UNTIL")

    _build_rule(body, rule_text, _CYCLE_CHECK_START)

    if "BYEASTER" in values:
        raise RuleParseError(rule_text, "BYEASTER is not supported; anchor the event to a feast instead")
    if values.get("FREQ", "").upper() == "YEARLY" and int(values.get("INTERVAL", "1")) > 1:
        raise RuleParseError(
            rule_text, "INTERVAL above 1 is not supported for YEARLY rules; each year is evaluated on its own"
        )

    until = None
    if "UNTIL" in values:
        if "COUNT" in values:
            raise RuleParseError(rule_text, "COUNT and UNTIL must not both be set")
        try:
            until = date_parser.parse(values["UNTIL"], ignoretz=True)
        except (ValueError, OverflowError) as e:
            raise RuleParseError(rule_text, f"invalid UNTIL value: {e}") from e

    return _CompiledRule(body=body, until=until, has_count="COUNT" in values)


def _cycle_shift(year: int) -> int:
    """Years to add to ``year`` to reach its evaluation year."""
    return GREGORIAN_CYCLE_YEARS * ((_LAST_EVALUATION_YEAR - year) // GREGORIAN_CYCLE_YEARS)


def validate_rule(rule_text: str) -> None:
    """Check that rule text parses and matches at least one date.

    The match check ignores COUNT and UNTIL and covers one full Gregorian
    cycle, so a rule that fails it can never match in any year.

    Raises:
        RuleParseError: If the rule cannot be parsed, uses an unsupported
            part, or never matches
    """
    compiled = _compile_rule(rule_text)
    check = _build_rule(compiled.body, rule_text, _CYCLE_CHECK_START).replace(
        count=None, until=_CYCLE_CHECK_END
    )
    try:
        first = next(iter(check), None)
    except (ValueError, OverflowError):
        # Look-ahead ran past the last representable date
        first = None
    if first is None:
        raise RuleParseError(rule_text, f"no date matches in a {GREGORIAN_CYCLE_YEARS}-year calendar cycle")


def expand_rule(rule_text: str, year: int) -> list[date]:
    """Enumerate every date in ``year`` that matches a recurrence rule.

    The enumeration window is January 1 to December 31 of ``year`` inclusive,
    and the rule's start is January 1 of that year.

    Args:
        rule_text: RFC 5545 RRULE text, e.g. "FREQ=YEARLY;BYMONTH=8;BYDAY=1MO"
        year: Calendar year to evaluate

    Returns:
        Sorted list of unique matching dates; empty if nothing matches

    Raises:
        RuleParseError: If the rule text cannot be parsed
    """
    compiled = _compile_rule(rule_text)

    window_start = datetime(year, 1, 1)
    window_end = datetime(year, 12, 31, 23, 59, 59)
    until = window_end
    if compiled.until is not None:
        if compiled.until < window_start:
            return []
        until = min(until, compiled.until)

    shift = _cycle_shift(year)
    start = window_start.replace(year=year + shift)
    end = window_end.replace(year=year + shift)

    parsed = _build_rule(compiled.body, rule_text, start)
    if not compiled.has_count:
        parsed = parsed.replace(until=until.replace(year=until.year + shift))

    try:
        matches = parsed.between(start, end, inc=True)
    except (ValueError, OverflowError) as e:
        raise RuleParseError(rule_text, str(e)) from e

    dates = sorted({m.date().replace(year=m.year - shift) for m in matches})
    logger.debug("Rule %r matched %d dates in %d", rule_text, len(dates), year)
    return dates
