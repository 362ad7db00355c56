"""Movable feast calculation for the Western (Gregorian) church calendar.

Easter Sunday is computed with the anonymous Gregorian algorithm
(Meeus/Jones/Butcher). Every other movable feast is a fixed day offset from
Easter, listed in ANCHOR_OFFSETS.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from .exceptions import UnknownAnchorError

logger = logging.getLogger(__name__)

# Days relative to Easter Sunday. Adding an anchor only needs a new entry here.
ANCHOR_OFFSETS: dict[str, int] = {
    "ash_wednesday": -46,
    "good_friday": -2,
    "easter": 0,
    "easter_monday": 1,
    "ascension": 39,
    "pentecost": 49,
    "whit_monday": 50,
    "corpus_christi": 60,
}


def compute_easter(year: int) -> date:
    """Compute the date of Easter Sunday for a Gregorian year.

    Valid for any year a ``date`` can represent; only meaningful
    ecclesiastically from 1583 onwards.

    Args:
        year: Gregorian calendar year

    Returns:
        Date of Easter Sunday
    """
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def compute_ash_wednesday(year: int) -> date:
    """Ash Wednesday: 46 days before Easter (40 fast days plus 6 Sundays)."""
    return resolve_anchor("ash_wednesday", year)


def is_known_anchor(name: str | None) -> bool:
    """Check whether a movable feast name can be resolved."""
    return name in ANCHOR_OFFSETS


def resolve_anchor(name: str, year: int) -> date:
    """Resolve a named movable feast to its date in a given year.

    Args:
        name: Anchor name, a key of ANCHOR_OFFSETS
        year: Gregorian calendar year

    Returns:
        Date of the feast

    Raises:
        UnknownAnchorError: If the anchor name is not known
    """
    try:
        offset = ANCHOR_OFFSETS[name]
    except KeyError:
        raise UnknownAnchorError(name) from None

    anchor_date = compute_easter(year) + timedelta(days=offset)
    logger.debug("Resolved anchor %s for %d -> %s", name, year, anchor_date)
    return anchor_date
