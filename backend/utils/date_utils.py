import math
import re
from datetime import date, datetime
from typing import Any, Optional, Tuple, Union
import pytz
from dateutil import parser

from .config import config

ARABIC_DIGITS = str.maketrans("0123456789", "٠١٢٣٤٥٦٧٨٩")

ARABIC_WEEKDAYS = ["الاثنين", "الثلاثاء", "الأربعاء", "الخميس", "الجمعة", "السبت", "الأحد"]

ARABIC_MONTHS = [
    "يناير", "فبراير", "مارس", "أبريل", "مايو", "يونيو",
    "يوليو", "أغسطس", "سبتمبر", "أكتوبر", "نوفمبر", "ديسمبر",
]

# "08:00", "8:00 PM", "12:15am"
_DOSE_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{1,2})\s*([AaPp][Mm])?\s*$")


def get_clinic_timezone(tz_name: Optional[str] = None):
    """Get the clinic timezone"""
    return pytz.timezone(tz_name or config.CLINIC_TIMEZONE)


def get_current_local(tz_name: Optional[str] = None) -> datetime:
    """Get current datetime in the clinic timezone"""
    return datetime.now(get_clinic_timezone(tz_name))


def localize(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    """Attach the clinic timezone to naive datetimes, convert aware ones"""
    tz = get_clinic_timezone(tz_name)
    if dt.tzinfo is None:
        return tz.localize(dt)
    return dt.astimezone(tz)


def parse_instant(value: Any, tz_name: Optional[str] = None) -> datetime:
    """
    Parse a stored instant into a timezone-aware datetime.
    Accepts datetimes, ISO strings, epoch seconds and {"seconds": ...} timestamp mappings.
    Raises ValueError for anything else.
    """
    if isinstance(value, datetime):
        return localize(value, tz_name)
    if isinstance(value, bool):
        raise ValueError(f"Not a datetime: {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=pytz.utc).astimezone(get_clinic_timezone(tz_name))
    if isinstance(value, dict) and "seconds" in value:
        return parse_instant(float(value["seconds"]), tz_name)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            dt = parser.isoparse(text)
        except ValueError:
            dt = parser.parse(text)
        return localize(dt, tz_name)
    raise ValueError(f"Not a datetime: {value!r}")


def parse_schedule_bound(value: Any, tz_name: Optional[str] = None) -> Union[date, datetime]:
    """
    Parse a stored medication start/end value.
    Bare YYYY-MM-DD values stay calendar dates; anything with a time of day
    becomes a timezone-aware instant.
    """
    if isinstance(value, datetime):
        return localize(value, tz_name)
    if isinstance(value, date):
        return value
    if isinstance(value, str) and re.match(r"^\d{4}-\d{2}-\d{2}$", value.strip()):
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    return parse_instant(value, tz_name)


def to_local_date(value: Union[date, datetime], tz_name: Optional[str] = None) -> date:
    """Clinic-local calendar date of a date or instant"""
    if isinstance(value, datetime):
        return localize(value, tz_name).date()
    return value


def parse_dose_time(value: str) -> Tuple[int, int]:
    """
    Parse a dose time like '08:00' or '8:00 PM' into 24-hour (hour, minute).
    12 AM is midnight, 12 PM stays noon, other PM hours add 12.
    """
    match = _DOSE_TIME_RE.match(str(value or ""))
    if not match:
        raise ValueError(f"Invalid dose time: {value!r}")

    hour = int(match.group(1))
    minute = int(match.group(2))
    marker = (match.group(3) or "").upper()

    if marker:
        if not 1 <= hour <= 12:
            raise ValueError(f"Invalid 12-hour dose time: {value!r}")
        if marker == "PM" and hour != 12:
            hour += 12
        elif marker == "AM" and hour == 12:
            hour = 0

    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid dose time: {value!r}")
    return hour, minute


def minute_of_day(hour: int, minute: int) -> int:
    return hour * 60 + minute


def minutes_apart(now: datetime, hour: int, minute: int) -> int:
    """Absolute minute-of-day distance between now and a dose time (no midnight wrap)"""
    return abs(minute_of_day(now.hour, now.minute) - minute_of_day(hour, minute))


def hours_until(target: datetime, now: datetime) -> float:
    return (target - now).total_seconds() / 3600


def date_key(dt: datetime) -> str:
    """YYYY-MM-DD calendar key"""
    return dt.strftime("%Y-%m-%d")


def to_arabic_digits(text: str) -> str:
    return str(text).translate(ARABIC_DIGITS)


def format_date_ar(d: date, with_weekday: bool = True) -> str:
    """Format a date like 'الاثنين، ١٩ أكتوبر ٢٠٢٦'"""
    text = f"{d.day} {ARABIC_MONTHS[d.month - 1]} {d.year}"
    if with_weekday:
        text = f"{ARABIC_WEEKDAYS[d.weekday()]}، {text}"
    return to_arabic_digits(text)


def format_time_ar(dt: datetime) -> str:
    """Format a time like '٠٨:٣٠ م' (12-hour clock)"""
    hour = dt.hour % 12 or 12
    suffix = "ص" if dt.hour < 12 else "م"
    return to_arabic_digits(f"{hour:02d}:{dt.minute:02d}") + f" {suffix}"


def format_datetime_ar(dt: datetime, tz_name: Optional[str] = None) -> Tuple[str, str]:
    """Localized (date, time) strings for an instant, in the clinic timezone"""
    local = localize(dt, tz_name)
    return format_date_ar(local.date()), format_time_ar(local)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
