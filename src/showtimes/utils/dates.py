"""Date normalisation for theatre listing pages.

Every theatre site prints its dates differently. The helpers here turn each
representation into a plain ``datetime.date`` for the theatre's local
calendar day, returning None instead of raising when a token can't be read.

Dates are always built from explicit (year, month, day) components. A
"YYYY-MM-DD" string must never go through a parser that treats it as UTC
midnight: in Portland that moves every showing back by one day.
"""

import logging
import re
from datetime import date, datetime, tzinfo
from zoneinfo import ZoneInfo

from showtimes.config import settings

logger = logging.getLogger(__name__)

PACIFIC_TZ = ZoneInfo(settings.timezone)

MONTH_MAP = {
    "january": 1, "february": 2, "march": 3, "april": 4,
    "may": 5, "june": 6, "july": 7, "august": 8,
    "september": 9, "october": 10, "november": 11, "december": 12,
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "jun": 6, "jul": 7,
    "aug": 8, "sep": 9, "sept": 9, "oct": 10, "nov": 11, "dec": 12,
}

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# Listing pages with "<Weekday> | <Month> <Day>" headings keep showing dates
# from the last few weeks, so those only roll to next year after a month.
PIPE_ROLLOVER_DAYS = 30
DEFAULT_ROLLOVER_DAYS = 1

_WEEKDAY_PATTERN = "|".join(WEEKDAYS)
_AT_DATETIME_RE = re.compile(
    rf"({_WEEKDAY_PATTERN}),\s+([A-Za-z]+)\.?\s+(\d{{1,2}})\s+@\s+(\d{{1,2}}:\d{{2}}\s*(?:AM|PM))",
    re.IGNORECASE,
)
_CLOCK_RE = re.compile(r"(\d{1,2}):(\d{2})\s*([ap])?\.?(?:m\.?)?", re.IGNORECASE)


def today_local(tz: tzinfo = PACIFIC_TZ) -> date:
    """Today's calendar date in the theatres' timezone."""
    return datetime.now(tz).date()


def month_number(name: str) -> int | None:
    """Look up a month by full name or abbreviation ("August", "Aug", "Sept")."""
    return MONTH_MAP.get(name.strip().rstrip(".").lower())


def make_date(year: int, month: int, day: int) -> date | None:
    """Build a date from components, returning None for impossible dates."""
    try:
        return date(year, month, day)
    except (TypeError, ValueError):
        return None


def resolve_year(
    month: int,
    day: int,
    today: date | None = None,
    grace_days: int = DEFAULT_ROLLOVER_DAYS,
) -> date | None:
    """Pick the year for a month/day that was printed without one.

    Prefers the nearest future occurrence: if this year's date is more than
    ``grace_days`` in the past, the listing must be for next year.
    """
    today = today or today_local()
    candidate = make_date(today.year, month, day)
    if candidate is None:
        # Feb 29 outside a leap year can still be valid next year
        return make_date(today.year + 1, month, day)
    if (today - candidate).days > grace_days:
        return make_date(today.year + 1, month, day)
    return candidate


def parse_compact_date(value: object) -> date | None:
    """Parse an 8-digit ``YYYYMMDD`` key such as ``"20251118"``."""
    text = str(value).strip() if value is not None else ""
    if not re.fullmatch(r"\d{8}", text):
        return None
    return make_date(int(text[:4]), int(text[4:6]), int(text[6:8]))


def parse_iso_date(value: object) -> date | None:
    """Parse ``YYYY-MM-DD`` (optionally followed by a time) by its components."""
    text = str(value).strip() if value is not None else ""
    match = re.match(r"^(\d{4})-(\d{1,2})-(\d{1,2})", text)
    if not match:
        return None
    return make_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))


def parse_unix_timestamp(value: object, tz: tzinfo | None = None) -> date | None:
    """Calendar date of a Unix timestamp in seconds.

    With ``tz=None`` the process's local timezone is used, exactly like
    ``datetime.fromtimestamp(value).date()``.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None

    try:
        if tz is None:
            return datetime.fromtimestamp(seconds).date()
        return datetime.fromtimestamp(seconds, tz).date()
    except (OverflowError, OSError, ValueError):
        return None


def parse_pipe_date(text: str, today: date | None = None) -> date | None:
    """Parse ``"Today | August 02"``, ``"Saturday | August 02"`` or ``"Today"``."""
    if not text:
        return None
    today = today or today_local()

    parts = [part.strip() for part in text.split("|")]
    if "today" in parts[0].lower():
        return today
    if len(parts) != 2:
        return None

    match = re.match(r"([A-Za-z]+)\.?\s+(\d{1,2})\b", parts[1])
    if not match:
        return None
    month = month_number(match.group(1))
    if not month:
        return None
    return resolve_year(month, int(match.group(2)), today, PIPE_ROLLOVER_DAYS)


def parse_at_datetime(text: str, today: date | None = None) -> tuple[date, str] | None:
    """Parse ``"Sunday, September 28 @ 3:00 PM"`` into ``(date, "3:00 PM")``."""
    if not text:
        return None
    match = _AT_DATETIME_RE.search(text)
    if not match:
        return None

    month = month_number(match.group(2))
    if not month:
        return None
    showing_date = resolve_year(month, int(match.group(3)), today)
    if showing_date is None:
        return None

    time_text = re.sub(r"\s+", " ", match.group(4)).strip()
    return showing_date, time_text


def parse_abbrev_date(text: str, today: date | None = None) -> date | None:
    """Parse ``"Thu 4Sep"`` or ``"Wed 3 Sep"`` (weekday optional)."""
    if not text:
        return None
    match = re.match(
        r"^\s*(?:([A-Za-z]{3,9})\.?,?\s+)?(\d{1,2})\s*([A-Za-z]{3,9})\.?\s*$", text
    )
    if not match:
        return None
    month = month_number(match.group(3))
    if not month:
        return None
    return resolve_year(month, int(match.group(2)), today)


def parse_month_day(text: str, today: date | None = None) -> date | None:
    """Parse ``"Sep 06"`` or ``"August 2"``."""
    if not text:
        return None
    match = re.match(r"^\s*([A-Za-z]+)\.?\s+(\d{1,2})(?:st|nd|rd|th)?\b", text)
    if not match:
        return None
    month = month_number(match.group(1))
    if not month:
        return None
    return resolve_year(month, int(match.group(2)), today)


def parse_weekday_month_day(text: str, today: date | None = None) -> date | None:
    """Parse ``"Wednesday, September 3"`` and ``"Today,  Aug 3"``."""
    if not text:
        return None
    match = re.search(r"([A-Za-z]+),\s+([A-Za-z]+)\.?\s+(\d{1,2})(?:st|nd|rd|th)?\b", text)
    if not match:
        return None
    month = month_number(match.group(2))
    if not month:
        return None
    return resolve_year(month, int(match.group(3)), today)


def parse_date_token(
    token: object,
    today: date | None = None,
    tz: tzinfo | None = None,
) -> date | None:
    """Resolve any supported site-native date token to a calendar date.

    Accepts ``date`` objects, Unix timestamps (int/float or 9-11 digit
    strings), ``YYYYMMDD`` and ``YYYY-MM-DD`` strings, and the textual
    formats handled by the parsers above.
    """
    if token is None or isinstance(token, bool):
        return None
    if isinstance(token, datetime):
        if token.tzinfo is not None and tz is not None:
            return token.astimezone(tz).date()
        return token.date()
    if isinstance(token, date):
        return token
    if isinstance(token, (int, float)):
        return parse_unix_timestamp(token, tz)

    text = str(token).strip()
    if not text:
        return None
    if re.fullmatch(r"\d{8}", text):
        return parse_compact_date(text)
    if re.fullmatch(r"\d{9,11}", text):
        return parse_unix_timestamp(text, tz)
    if re.match(r"^\d{4}-\d{1,2}-\d{1,2}", text):
        return parse_iso_date(text)
    if "|" in text or text.lower() == "today":
        return parse_pipe_date(text, today)
    if "@" in text:
        parsed = parse_at_datetime(text, today)
        return parsed[0] if parsed else None

    for parser in (parse_weekday_month_day, parse_abbrev_date, parse_month_day):
        parsed_date = parser(text, today)
        if parsed_date:
            return parsed_date

    logger.debug(f"Unrecognised date token: {text!r}")
    return None


def parse_clock(text: str) -> tuple[int, int] | None:
    """Parse a showtime like ``"7:00p"``, ``"3:00 PM"`` or ``"19:30"`` to (hour, minute)."""
    if not text:
        return None
    match = _CLOCK_RE.search(text)
    if not match:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2))
    meridiem = (match.group(3) or "").lower()
    if minute > 59:
        return None
    if meridiem:
        if not 1 <= hour <= 12:
            return None
        if meridiem == "p" and hour != 12:
            hour += 12
        elif meridiem == "a" and hour == 12:
            hour = 0
    elif hour > 23:
        return None
    return hour, minute


def is_showtime(text: str, require_meridiem: bool = False) -> bool:
    """True when the text reads as a clock time (optionally requiring am/pm)."""
    if parse_clock(text) is None:
        return False
    if require_meridiem:
        return re.search(r"\d{1,2}:\d{2}\s*[ap]", text, re.IGNORECASE) is not None
    return True
