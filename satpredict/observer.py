"""
Observer Geometry

Relates a propagated satellite state to a fixed ground observer:
- Observer position and velocity in the inertial frame at a Julian date
- Topocentric azimuth, elevation, range and range-rate (SEZ frame)
- Sub-satellite point (geodetic latitude, longitude, altitude)
- Visibility footprint

The Earth is modelled as the WGS-72 oblate spheroid (equatorial radius
6378.135 km, flattening 1/298.26) rotating at the sidereal rate. Longitudes
are east-positive. Azimuth is measured clockwise from true north.

References:
    Kelso, T.S. "Orbital Coordinate Systems, Part III", Satellite Times (1996).
    Vallado, D. A. (2013). Fundamentals of Astrodynamics and Applications, 4th ed.
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Tuple

import numpy as np

from config import EARTH_FLATTENING, EARTH_RADIUS_KM, EARTH_ROTATION_RATE, TWO_PI
from satpredict.timeconv import gmst

# Sub-satellite latitude iteration
LATITUDE_TOLERANCE = 1.0e-10
MAX_LATITUDE_ITERATIONS = 20

# Diameter of the Earth used for the visibility circle (km)
FOOTPRINT_SCALE_KM = 12756.33


@dataclass(frozen=True)
class ObserverLocation:
    """
    Fixed ground observer.

    Attributes
    ----------
    latitude_deg : float
        Geodetic latitude, north positive, in [-90, 90]
    longitude_deg : float
        Longitude, east positive, in [-180, 180]
    altitude_m : float
        Height above the ellipsoid in metres
    name : str
        Optional label, e.g. a station callsign
    """

    latitude_deg: float
    longitude_deg: float
    altitude_m: float = 0.0
    name: str = ""

    def __post_init__(self):
        if not -90.0 <= self.latitude_deg <= 90.0:
            raise ValueError(f"Latitude out of range [-90, 90]: {self.latitude_deg}")
        if not -180.0 <= self.longitude_deg <= 180.0:
            raise ValueError(f"Longitude out of range [-180, 180]: {self.longitude_deg}")
        if not math.isfinite(self.altitude_m):
            raise ValueError(f"Altitude must be finite: {self.altitude_m}")

    @property
    def latitude_rad(self) -> float:
        return math.radians(self.latitude_deg)

    @property
    def longitude_rad(self) -> float:
        return math.radians(self.longitude_deg)

    @property
    def altitude_km(self) -> float:
        return self.altitude_m / 1000.0


class Topocentric(NamedTuple):
    """Look angles and range from observer to satellite."""

    azimuth_deg: float
    elevation_deg: float
    range_km: float
    range_rate_km_s: float


def local_sidereal_time(observer: ObserverLocation, julian_date: float) -> float:
    """Local mean sidereal angle of the observer in radians."""
    return (gmst(julian_date) + observer.longitude_rad) % TWO_PI


def observer_eci(observer: ObserverLocation, julian_date: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Observer position and velocity in the inertial frame.

    Parameters
    ----------
    observer : ObserverLocation
        Ground station
    julian_date : float
        Time of interest

    Returns
    -------
    tuple
        (position_km, velocity_km_s) numpy arrays; the velocity is due to
        Earth rotation only
    """
    lat = observer.latitude_rad
    theta = local_sidereal_time(observer, julian_date)
    f = EARTH_FLATTENING
    c = 1.0 / math.sqrt(1.0 + f * (f - 2.0) * math.sin(lat) ** 2)
    sq = (1.0 - f) ** 2 * c
    achcp = (EARTH_RADIUS_KM * c + observer.altitude_km) * math.cos(lat)

    position = np.array([
        achcp * math.cos(theta),
        achcp * math.sin(theta),
        (EARTH_RADIUS_KM * sq + observer.altitude_km) * math.sin(lat),
    ])
    velocity = np.array([
        -EARTH_ROTATION_RATE * position[1],
        EARTH_ROTATION_RATE * position[0],
        0.0,
    ])
    return position, velocity


def to_topocentric(position: np.ndarray, velocity: np.ndarray,
                   observer: ObserverLocation, julian_date: float) -> Topocentric:
    """
    Project a satellite state onto the observer's horizon frame.

    Parameters
    ----------
    position : np.ndarray
        Satellite position in km, inertial frame
    velocity : np.ndarray
        Satellite velocity in km/s, inertial frame
    observer : ObserverLocation
        Ground station
    julian_date : float
        Time of the satellite state

    Returns
    -------
    Topocentric
        Azimuth in [0, 360), elevation in [-90, 90], range in km and range
        rate in km/s (negative while approaching)
    """
    obs_pos, obs_vel = observer_eci(observer, julian_date)
    range_vec = np.asarray(position, dtype=float) - obs_pos
    range_vel = np.asarray(velocity, dtype=float) - obs_vel
    range_km = float(np.linalg.norm(range_vec))

    lat = observer.latitude_rad
    theta = local_sidereal_time(observer, julian_date)
    sin_lat, cos_lat = math.sin(lat), math.cos(lat)
    sin_theta, cos_theta = math.sin(theta), math.cos(theta)

    # South-East-Zenith components
    top_s = (sin_lat * cos_theta * range_vec[0]
             + sin_lat * sin_theta * range_vec[1]
             - cos_lat * range_vec[2])
    top_e = -sin_theta * range_vec[0] + cos_theta * range_vec[1]
    top_z = (cos_lat * cos_theta * range_vec[0]
             + cos_lat * sin_theta * range_vec[1]
             + sin_lat * range_vec[2])

    azimuth = math.atan2(top_e, -top_s) % TWO_PI
    elevation = math.asin(max(-1.0, min(1.0, top_z / range_km)))
    range_rate = float(np.dot(range_vec, range_vel)) / range_km

    return Topocentric(
        azimuth_deg=math.degrees(azimuth),
        elevation_deg=math.degrees(elevation),
        range_km=range_km,
        range_rate_km_s=range_rate,
    )


def sub_satellite_point(position: np.ndarray, julian_date: float) -> Tuple[float, float, float]:
    """
    Geodetic coordinates of the point directly below the satellite.

    Parameters
    ----------
    position : np.ndarray
        Satellite position in km, inertial frame
    julian_date : float
        Time of the position

    Returns
    -------
    tuple
        (latitude_deg, longitude_deg, altitude_km); longitude east-positive
        in (-180, 180]
    """
    x, y, z = (float(v) for v in position)
    theta = math.atan2(y, x)
    lon = (theta - gmst(julian_date)) % TWO_PI
    r = math.hypot(x, y)
    e2 = EARTH_FLATTENING * (2.0 - EARTH_FLATTENING)

    lat = math.atan2(z, r)
    c = 1.0
    for _ in range(MAX_LATITUDE_ITERATIONS):
        phi = lat
        c = 1.0 / math.sqrt(1.0 - e2 * math.sin(phi) ** 2)
        lat = math.atan2(z + EARTH_RADIUS_KM * c * e2 * math.sin(phi), r)
        if abs(lat - phi) < LATITUDE_TOLERANCE:
            break

    c = 1.0 / math.sqrt(1.0 - e2 * math.sin(lat) ** 2)
    if abs(math.cos(lat)) > 1.0e-12:
        alt = r / math.cos(lat) - EARTH_RADIUS_KM * c
    else:
        # Over a pole
        alt = abs(z) - EARTH_RADIUS_KM * c * (1.0 - e2)

    lon_deg = math.degrees(lon)
    if lon_deg > 180.0:
        lon_deg -= 360.0
    return math.degrees(lat), lon_deg, alt


def footprint_km(altitude_km: float) -> float:
    """Diameter of the circle on the ground from which the satellite is above the horizon."""
    if altitude_km <= 0.0:
        return 0.0
    return FOOTPRINT_SCALE_KM * math.acos(EARTH_RADIUS_KM / (EARTH_RADIUS_KM + altitude_km))
