"""Timezone and date parsing utilities."""

from datetime import date, datetime, timedelta
from typing import Optional, Union

import pytz
from dateutil import parser as date_parser

EASTERN_TZ = pytz.timezone("US/Eastern")

# Day zero of the Excel 1900 date system (accounts for the 1900 leap-year bug)
_EXCEL_EPOCH = date(1899, 12, 30)


def now_eastern() -> datetime:
    """Return current time in US/Eastern timezone."""
    return datetime.now(EASTERN_TZ)


def today_eastern() -> date:
    """Return today's date in US/Eastern timezone."""
    return now_eastern().date()


def to_eastern(dt: datetime) -> datetime:
    """Convert a datetime to US/Eastern timezone."""
    if dt.tzinfo is None:
        # Assume naive datetime is already Eastern
        return EASTERN_TZ.localize(dt)
    return dt.astimezone(EASTERN_TZ)


def parse_datetime_eastern(value: str, default_tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """
    Parse a datetime string and return it in US/Eastern timezone.

    If no timezone is provided in the string, assumes US/Eastern.
    """
    dt = date_parser.parse(value)
    if dt.tzinfo is None:
        tz = default_tz or EASTERN_TZ
        dt = tz.localize(dt)
    return to_eastern(dt)


def excel_serial_to_date(serial: Union[int, float]) -> date:
    """Convert an Excel serial day number to a date."""
    return _EXCEL_EPOCH + timedelta(days=int(serial))


def parse_trade_date(value: object) -> Optional[date]:
    """
    Parse a spreadsheet/CSV date cell into a date.

    Accepts date/datetime objects, Excel serial numbers and strings such as
    "2025-12-31 12:00:00 AM". Returns None for empty cells.

    Raises:
        ValueError: if the value cannot be interpreted as a date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return excel_serial_to_date(value)

    text = str(value).strip()
    if not text:
        return None
    if text.replace(".", "", 1).isdigit():
        return excel_serial_to_date(float(text))
    return date_parser.parse(text).date()
