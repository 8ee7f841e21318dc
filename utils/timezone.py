from datetime import datetime
from typing import Optional

import pytz

from config import get_settings

# Centralized Timezone Configuration
HOTEL_TIMEZONE_STR = get_settings().hotel_timezone
HOTEL_TZ = pytz.timezone(HOTEL_TIMEZONE_STR)


def get_hotel_now(timezone_name: Optional[str] = None) -> datetime:
    """Returns current time in Hotel Timezone (or the given one)"""
    tz = pytz.timezone(timezone_name) if timezone_name else HOTEL_TZ
    return datetime.now(tz)


def get_local_now(timezone_name: Optional[str] = None) -> datetime:
    """Naive wall-clock time at the hotel, comparable with stored stay dates"""
    return get_hotel_now(timezone_name).replace(tzinfo=None, second=0, microsecond=0)
