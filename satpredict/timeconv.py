"""
Time Conversion

Gregorian calendar <-> Julian date arithmetic used by the propagator and the
pass finder.

Civil timestamps are timezone-aware datetimes in UTC; naive datetimes are
interpreted as UTC. Julian dates are plain floats (days).

References:
    Meeus, J. (1988). Astronomical Formulae for Calculators, 4th ed., pp. 23-25.
"""

import math
from datetime import datetime, timedelta, timezone

from config import SECONDS_PER_DAY

# Julian date of the Unix epoch, 1970-01-01T00:00:00Z
JD_UNIX_EPOCH = 2440587.5

# Julian date of 2000-01-01T12:00:00Z
JD_J2000 = 2451545.0

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def julian_date_of_year(year: int) -> float:
    """
    Julian date of 0.0 January of the given year (Meeus).

    Parameters
    ----------
    year : int
        Four-digit Gregorian year

    Returns
    -------
    float
        Julian date of the instant just before 1 January 00:00 UTC
    """
    y = year - 1
    a = math.trunc(y / 100.0)
    b = math.trunc(2.0 - a + math.trunc(a / 4.0))
    return math.trunc(365.25 * y) + math.trunc(30.6001 * 14.0) + 1720994.5 + b


def day_of_year(year: int, month: int, day: int) -> int:
    """Day number within the year, 1 January being day 1."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {month}")
    doy = sum(_DAYS_IN_MONTH[:month - 1]) + day
    if month > 2 and is_leap_year(year):
        doy += 1
    return doy


def fraction_of_day(hour: int, minute: int, second: float) -> float:
    return (hour + (minute + second / 60.0) / 60.0) / 24.0


def as_utc(dt: datetime) -> datetime:
    """Return dt as an aware UTC datetime, taking naive values as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def julian_date_of(dt: datetime) -> float:
    """
    Convert a civil timestamp to a Julian date.

    Parameters
    ----------
    dt : datetime
        Timestamp; naive values are taken as UTC

    Returns
    -------
    float
        Julian date
    """
    dt = as_utc(dt)
    return (
        julian_date_of_year(dt.year)
        + day_of_year(dt.year, dt.month, dt.day)
        + fraction_of_day(dt.hour, dt.minute, dt.second)
        + dt.microsecond / 1e6 / SECONDS_PER_DAY
    )


def civil_time_of(julian_date: float) -> datetime:
    """
    Convert a Julian date to a UTC datetime via the Unix epoch offset.

    Parameters
    ----------
    julian_date : float
        Julian date

    Returns
    -------
    datetime
        Timezone-aware UTC timestamp, microsecond resolution
    """
    seconds = (julian_date - JD_UNIX_EPOCH) * SECONDS_PER_DAY
    return _UNIX_EPOCH + timedelta(seconds=seconds)


def now_julian() -> float:
    """Current UTC time as a Julian date."""
    return julian_date_of(datetime.now(timezone.utc))


def epoch_to_julian(epoch_year: int, epoch_day: float) -> float:
    """
    Convert a TLE epoch to a Julian date.

    Parameters
    ----------
    epoch_year : int
        Four-digit year
    epoch_day : float
        Day of year with fractional part, 1.0 being 1 January 00:00 UTC
    """
    return julian_date_of_year(epoch_year) + epoch_day


def epoch_to_datetime(epoch_year: int, epoch_day: float) -> datetime:
    """Convert a TLE epoch to a UTC datetime."""
    start = datetime(epoch_year, 1, 1, tzinfo=timezone.utc)
    return start + timedelta(days=epoch_day - 1.0)


def gmst(julian_date: float) -> float:
    """
    Greenwich mean sidereal angle (IAU-82 model).

    Parameters
    ----------
    julian_date : float
        Julian date (UT1, UTC is used as an approximation)

    Returns
    -------
    float
        Sidereal angle in radians, normalised to [0, 2π)
    """
    tut1 = (julian_date - JD_J2000) / 36525.0
    seconds = (
        -6.2e-6 * tut1 * tut1 * tut1
        + 0.093104 * tut1 * tut1
        + (876600.0 * 3600.0 + 8640184.812866) * tut1
        + 67310.54841
    )
    # 360 degrees per 86400 seconds of sidereal time
    return math.radians(seconds / 240.0) % (2.0 * math.pi)
