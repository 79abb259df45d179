import re
from datetime import date, datetime, timedelta

from dateutil import parser as dateutil_parser
from dateutil.parser import ParserError

from growth.core.errors import ValidationError

from . import clock

_WEEKDAYS = {"mon": 0, "tue": 1, "wed": 2, "thu": 3, "fri": 4, "sat": 5, "sun": 6}
_DAY_ALIASES = {
    "monday": "mon",
    "tuesday": "tue",
    "wednesday": "wed",
    "thursday": "thu",
    "friday": "fri",
    "saturday": "sat",
    "sunday": "sun",
}
_OFFSET_RE = re.compile(r"^\+(\d+)([dw])$")


def parse_day(text: str, today: date | None = None) -> date:
    """Parse a calendar day: 'today', 'tomorrow', 'fri', '+2w', 'YYYY-MM-DD', '3 march'."""
    today = today or clock.today()
    lowered = text.strip().lower()

    if lowered == "today":
        return today
    if lowered == "yesterday":
        return today - timedelta(days=1)
    if lowered == "tomorrow":
        return today + timedelta(days=1)

    offset = _OFFSET_RE.match(lowered)
    if offset:
        amount = int(offset.group(1))
        return today + timedelta(days=amount * (7 if offset.group(2) == "w" else 1))

    weekday = _WEEKDAYS.get(_DAY_ALIASES.get(lowered, lowered))
    if weekday is not None:
        days_ahead = (weekday - today.weekday()) % 7 or 7
        return today + timedelta(days=days_ahead)

    try:
        return dateutil_parser.parse(
            text, default=datetime(today.year, today.month, today.day)
        ).date()
    except (ParserError, ValueError, OverflowError):
        raise ValidationError(f"Invalid date '{text}'") from None
