"""
Prediction Session

Ties one satellite to one observer. Each update() propagates the orbit to
the requested time, computes look angles and the sub-satellite point,
searches for the next AOS and LOS, and publishes the result as a new
SatelliteSnapshot.

The snapshot is replaced as a whole, and only after every step has
succeeded: if propagation fails the previous snapshot stays in place and
the error propagates to the caller.

A session holds mutable propagator state and is not thread-safe; use one
session per thread or synchronise externally.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import numpy as np

from config import DEFAULT_HORIZON_DAYS, MINUTES_PER_DAY, TWO_PI
from satpredict.observer import ObserverLocation, footprint_km, sub_satellite_point, to_topocentric
from satpredict.orbit_tools import OrbitType, classify_orbit, is_decayed
from satpredict.pass_finder import PassFinder
from satpredict.sgp4_propagator import SGP4Propagator
from satpredict.timeconv import as_utc, julian_date_of
from satpredict.tle_parser import OrbitalElements, parse_tle

logger = logging.getLogger(__name__)

__all__ = [
    "OrbitType",
    "PredictionSession",
    "SatelliteSnapshot",
    "classify_orbit",
    "is_decayed",
    "orbit_number",
]


@dataclass(frozen=True)
class SatelliteSnapshot:
    """Satellite state as seen from the observer at one instant."""

    timestamp: datetime
    aos: Optional[datetime]
    los: Optional[datetime]
    azimuth_deg: float
    elevation_deg: float
    range_km: float
    range_rate_km_s: float
    latitude_deg: float
    longitude_deg: float
    altitude_km: float
    velocity_km_s: float
    orbit_number: int
    footprint_km: float = 0.0
    mean_anomaly_deg: float = 0.0
    phase_deg: float = 0.0

    @property
    def is_visible(self) -> bool:
        return self.elevation_deg > 0.0


def orbit_number(elements: OrbitalElements, julian_date: float) -> int:
    """
    Revolution number at a Julian date.

    Counts whole revolutions since the epoch from the mean motion, its drag
    drift (B*) and the mean anomaly at epoch, offset by the revolution number
    printed in the TLE. The drift is quadratic in time; past its turning
    point the count is held so that it never decreases as time advances.

    Parameters
    ----------
    elements : OrbitalElements
        TLE elements
    julian_date : float
        Time of interest

    Returns
    -------
    int
        Orbit number
    """
    n = elements.mean_motion_rev_per_day
    bstar = elements.bstar
    age = julian_date - elements.epoch_jd

    if bstar != 0.0:
        turning_point = -n / (2.0 * bstar)
        if bstar > 0.0 and age < turning_point:
            age = turning_point
        elif bstar < 0.0 and age > turning_point:
            age = turning_point

    revolutions = (n + age * bstar) * age + elements.mean_anomaly / TWO_PI
    return int(math.floor(revolutions)) + elements.revolution_number - 1


class PredictionSession:
    """
    Prediction facade for one satellite and one observer.

    Args:
        elements: Parsed TLE elements
        observer: Ground station
        horizon_days: How far ahead to search for AOS and LOS

    Raises:
        DecayedError: The elements cannot be propagated at epoch
    """

    def __init__(
        self,
        elements: OrbitalElements,
        observer: ObserverLocation,
        horizon_days: float = DEFAULT_HORIZON_DAYS,
    ):
        if horizon_days <= 0.0:
            raise ValueError(f"Search horizon must be positive: {horizon_days}")

        self.elements = elements
        self.observer = observer
        self.horizon_days = horizon_days
        self.propagator = SGP4Propagator(elements)
        self.pass_finder = PassFinder(self.propagator, observer)
        self.orbit_type = classify_orbit(elements, elements.epoch_jd)
        self.snapshot: Optional[SatelliteSnapshot] = None

        logger.info(
            f"Tracking {elements.name} ({elements.catalog_number}) from "
            f"{observer.name or 'observer'} at {observer.latitude_deg:.4f}, "
            f"{observer.longitude_deg:.4f}: {self.orbit_type.value} orbit, "
            f"{'deep-space' if self.propagator.is_deep_space else 'near-Earth'}"
        )

    @classmethod
    def from_tle(cls, name: str, line1: str, line2: str, observer: ObserverLocation,
                 horizon_days: float = DEFAULT_HORIZON_DAYS) -> "PredictionSession":
        """Parse a TLE and start a session for it."""
        return cls(parse_tle(name, line1, line2), observer, horizon_days)

    def update(self, at: Optional[datetime] = None) -> SatelliteSnapshot:
        """
        Refresh the snapshot for a time.

        Parameters
        ----------
        at : datetime, optional
            Time of interest, defaults to now; naive values are taken as UTC

        Returns
        -------
        SatelliteSnapshot
            The new snapshot, also stored as self.snapshot

        Raises
        ------
        PropagationError
            The orbit could not be propagated; self.snapshot is unchanged
        """
        timestamp = as_utc(at) if at is not None else datetime.now(timezone.utc)
        jd = julian_date_of(timestamp)
        tsince = (jd - self.elements.epoch_jd) * MINUTES_PER_DAY

        position, velocity = self.propagator.propagate(tsince)
        mean = self.propagator.last_mean
        look = to_topocentric(position, velocity, self.observer, jd)
        lat, lon, alt = sub_satellite_point(position, jd)

        aos = self.pass_finder.find_aos(jd, self.horizon_days)
        los = self.pass_finder.find_los(jd, self.horizon_days)

        snapshot = SatelliteSnapshot(
            timestamp=timestamp,
            aos=aos,
            los=los,
            azimuth_deg=look.azimuth_deg,
            elevation_deg=look.elevation_deg,
            range_km=look.range_km,
            range_rate_km_s=look.range_rate_km_s,
            latitude_deg=lat,
            longitude_deg=lon,
            altitude_km=alt,
            velocity_km_s=float(np.linalg.norm(velocity)),
            orbit_number=orbit_number(self.elements, jd),
            footprint_km=footprint_km(alt),
            mean_anomaly_deg=math.degrees(mean.mean_anomaly),
            phase_deg=math.degrees(mean.phase),
        )
        self.snapshot = snapshot
        return snapshot
