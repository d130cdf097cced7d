"""
Orbit Tools

Quick checks on orbital elements that do not need a propagation:
orbit classification, decay estimate and the geometric AOS test.
"""

import enum
import math
from typing import Optional

from config import EARTH_RADIUS_KM, MINUTES_PER_DAY, TWO_PI
from satpredict.observer import ObserverLocation
from satpredict.timeconv import now_julian
from satpredict.tle_parser import OrbitalElements

# Mean motion of a geostationary satellite (rev/day)
GEO_MEAN_MOTION = 1.0027
GEO_TOLERANCE = 0.0002
GSO_TOLERANCE = 0.01

# Semi-major axis in km is 331.25 * (minutes per rev) ** (2/3)
SMA_COEFFICIENT = 331.25


class OrbitType(enum.Enum):
    UNKNOWN = "unknown"
    LEO = "leo"
    ICO = "ico"
    GEO = "geo"
    GSO = "gso"
    MOLNIYA = "molniya"
    TUNDRA = "tundra"
    POLAR = "polar"
    SUNSYNC = "sunsync"
    DECAYED = "decayed"


def ndot_rev_per_day2(elements: OrbitalElements) -> float:
    """First derivative of mean motion as printed in the TLE (rev/day²)."""
    return elements.ndot * MINUTES_PER_DAY * MINUTES_PER_DAY / TWO_PI


def is_geostationary(elements: OrbitalElements) -> bool:
    return abs(elements.mean_motion_rev_per_day - GEO_MEAN_MOTION) < GEO_TOLERANCE


def is_decayed(elements: OrbitalElements, julian_date: Optional[float] = None) -> bool:
    """
    Estimate whether the satellite has re-entered by the given time.

    Drag raises the mean motion at the rate printed in the TLE; once it
    would exceed 16.666666 rev/day the orbit is considered gone.

    Parameters
    ----------
    elements : OrbitalElements
        TLE elements
    julian_date : float, optional
        Time of interest, defaults to now
    """
    if julian_date is None:
        julian_date = now_julian()
    ndot = abs(ndot_rev_per_day2(elements))
    margin = 16.666666 - elements.mean_motion_rev_per_day
    if ndot == 0.0:
        return margin < 0.0
    return elements.epoch_jd + margin / (10.0 * ndot) < julian_date


def classify_orbit(elements: OrbitalElements, julian_date: Optional[float] = None) -> OrbitType:
    """
    Classify an orbit from its mean motion, eccentricity and inclination.

    Geostationary and decayed objects are recognised first since they
    short-circuit pass prediction.
    """
    n = elements.mean_motion_rev_per_day
    e = elements.eccentricity
    incl = elements.inclination_deg

    if is_geostationary(elements):
        return OrbitType.GEO
    if is_decayed(elements, julian_date):
        return OrbitType.DECAYED
    if abs(n - 2.006) < 0.1 and e > 0.5 and 60.0 < incl < 66.0:
        return OrbitType.MOLNIYA
    if abs(n - GEO_MEAN_MOTION) < 0.05 and e > 0.2 and 60.0 < incl < 66.0:
        return OrbitType.TUNDRA
    if abs(n - GEO_MEAN_MOTION) < GSO_TOLERANCE:
        return OrbitType.GSO
    if n >= 11.25:
        if 96.0 <= incl <= 102.0:
            return OrbitType.SUNSYNC
        if 80.0 <= incl <= 100.0:
            return OrbitType.POLAR
        return OrbitType.LEO
    if 2.5 <= n < 11.25 and e < 0.1:
        return OrbitType.ICO
    return OrbitType.UNKNOWN


def has_aos(elements: OrbitalElements, observer: ObserverLocation) -> bool:
    """
    Geometric test whether the satellite can ever rise for this observer.

    Compares the observer's latitude against the orbit inclination widened
    by the Earth-central angle visible from apogee.
    """
    n = elements.mean_motion_rev_per_day
    if n <= 0.0:
        return False

    lin = elements.inclination
    if lin >= math.pi / 2.0:
        lin = math.pi - lin

    sma = SMA_COEFFICIENT * math.exp(math.log(MINUTES_PER_DAY / n) * (2.0 / 3.0))
    apogee = sma * (1.0 + elements.eccentricity) - EARTH_RADIUS_KM
    if apogee <= 0.0:
        return False
    return math.acos(EARTH_RADIUS_KM / (apogee + EARTH_RADIUS_KM)) + lin > abs(observer.latitude_rad)
