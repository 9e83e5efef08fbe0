"""Due-date arithmetic for inspection cadences.

Month and year steps clamp the day to the end of the target month, so a
requirement anchored on Jan 31 is next due on the last day of February rather
than rolling over into March.
"""

import calendar
from collections.abc import Callable
from datetime import date, timedelta

from compliance_api.domain.enums import Frequency

DEFAULT_FREQUENCY = Frequency.MONTHLY


def add_months(anchor: date, months: int) -> date:
    """Return *anchor* moved by *months* calendar months, clamping the day."""
    index = anchor.month - 1 + months
    year = anchor.year + index // 12
    month = index % 12 + 1
    day = min(anchor.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


_STEPS: dict[Frequency, Callable[[date], date]] = {
    Frequency.DAILY: lambda d: d + timedelta(days=1),
    Frequency.WEEKLY: lambda d: d + timedelta(days=7),
    Frequency.MONTHLY: lambda d: add_months(d, 1),
    Frequency.QUARTERLY: lambda d: add_months(d, 3),
    Frequency.ANNUALLY: lambda d: add_months(d, 12),
}

_missing = set(Frequency) - set(_STEPS)
if _missing:
    raise RuntimeError(f"No due-date step for frequencies: {sorted(f.value for f in _missing)}")


def parse_frequency(value: Frequency | str | None) -> Frequency:
    """Coerce *value* to a Frequency; unknown or empty values mean monthly."""
    if isinstance(value, Frequency):
        return value
    try:
        return Frequency(value)
    except ValueError:
        return DEFAULT_FREQUENCY


def next_due_date(frequency: Frequency | str | None, anchor: date) -> date:
    """Next inspection date for a requirement with *frequency*, counted from *anchor*."""
    return _STEPS[parse_frequency(frequency)](anchor)
