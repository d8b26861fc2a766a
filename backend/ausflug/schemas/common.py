"""
Shared schema helpers
"""

import re
from datetime import datetime
from typing import Any, Optional

from dateutil import parser as date_parser

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_naive_datetime(value: Any) -> Any:
    """Parse ISO strings (with or without timezone) into naive datetimes"""
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            dt = date_parser.parse(value)
        return dt.replace(tzinfo=None)
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


def validate_time_of_day(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    if not TIME_PATTERN.match(value):
        raise ValueError("Zeit muss im Format HH:MM angegeben werden")
    return value
