"""
Julian Day Conversion - Visual FoxPro DateTime support
Converts Julian day numbers to Gregorian calendar timestamps.
"""

import datetime
from typing import Optional, Tuple


def julian_day_to_date(day: int) -> Tuple[int, int, int]:
    """
    Convert a Julian day number to a proleptic Gregorian (year, month, day)

    Fliegel & Van Flandern (1968). Integer arithmetic only; every division
    is floor division on non-negative operands for day >= 0.
    """
    l = day + 68569
    n = (4 * l) // 146097
    l = l - (146097 * n + 3) // 4
    i = (4000 * (l + 1)) // 1461001
    l = l - (1461 * i) // 4 + 31
    j = (80 * l) // 2447
    d = l - (2447 * j) // 80
    l = j // 11
    m = j + 2 - 12 * l
    y = 100 * (n - 49) + i + l
    return y, m, d


def julian_day_to_timestamp(day: int, millis: int) -> Optional[datetime.datetime]:
    """
    Convert a Julian day plus milliseconds-of-day to a timestamp

    Args:
        day: Julian day number
        millis: Milliseconds since midnight (sub-second part is discarded)

    Returns:
        Timestamp, or None when both components are zero (no value)

    Raises:
        ValueError: If the date is outside the representable calendar
    """
    if day == 0 and millis == 0:
        return None

    year, month, dom = julian_day_to_date(day)
    midnight = datetime.datetime(year, month, dom)
    return midnight + datetime.timedelta(seconds=millis // 1000)
