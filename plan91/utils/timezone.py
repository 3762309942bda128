"""
Timezone Utilities - Centralized timezone handling

The domain works on plain dates already normalized to the practitioner's
local calendar; this is where that normalization happens.
"""
from datetime import date, datetime
from typing import Optional

import pytz

from plan91.core.config import settings


def get_local_tz(tz_name: Optional[str] = None):
    """
    Get the timezone object for a practitioner

    Args:
        tz_name: IANA timezone name, defaults to the configured APP_TIMEZONE

    Returns:
        pytz timezone
    """
    return pytz.timezone(tz_name or settings.APP_TIMEZONE)


def get_local_now(tz_name: Optional[str] = None) -> datetime:
    """
    Get current datetime in the practitioner's timezone

    Returns:
        Timezone-aware datetime object
    """
    return datetime.now(get_local_tz(tz_name))


def get_local_today_date(tz_name: Optional[str] = None) -> date:
    """
    Get today's date in the practitioner's timezone

    Returns:
        date object for today
    """
    return get_local_now(tz_name).date()


def to_local_date(moment: datetime, tz_name: Optional[str] = None) -> date:
    """
    Convert an aware datetime to the practitioner's calendar date

    Naive datetimes are assumed to be UTC.
    """
    if moment.tzinfo is None:
        moment = pytz.utc.localize(moment)
    return moment.astimezone(get_local_tz(tz_name)).date()
