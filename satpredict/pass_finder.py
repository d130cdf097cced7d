"""
Pass Finder

Searches forward in time for the next acquisition of signal (AOS, the
satellite rising through the observer's horizon) and loss of signal (LOS,
setting below it).

The search scans elevation at a coarse step of about one degree of mean
anomaly, looks for a sign change, and refines the crossing by bisection
until the elevation is within a tolerance of the horizon. Satellites that
can never rise for the observer, geostationary and decayed objects are
rejected before scanning. "No pass within the horizon" is reported as None.
"""

import logging
from datetime import datetime
from typing import Optional, Tuple

from config import (
    DEFAULT_HORIZON_DAYS,
    ELEVATION_TOLERANCE_DEG,
    MAX_BISECTION_ITERATIONS,
    MAX_SCAN_STEP_MINUTES,
    MIN_SCAN_STEP_MINUTES,
    MINUTES_PER_DAY,
)
from satpredict.observer import ObserverLocation, to_topocentric
from satpredict.orbit_tools import has_aos, is_decayed, is_geostationary
from satpredict.sgp4_propagator import SGP4Propagator
from satpredict.timeconv import civil_time_of

logger = logging.getLogger(__name__)


class PassFinder:
    """
    Rise/set search for one satellite and one observer.

    Args:
        propagator: Initialised propagator for the satellite
        observer: Ground station
        step_minutes: Coarse scan step; defaults to period/360 clamped to
            [0.05, 5] minutes
        tolerance_deg: Elevation tolerance of the refined crossing
        max_iterations: Bisection iteration cap
    """

    def __init__(
        self,
        propagator: SGP4Propagator,
        observer: ObserverLocation,
        step_minutes: Optional[float] = None,
        tolerance_deg: float = ELEVATION_TOLERANCE_DEG,
        max_iterations: int = MAX_BISECTION_ITERATIONS,
    ):
        if step_minutes is None:
            step_minutes = propagator.period_minutes / 360.0
            step_minutes = min(MAX_SCAN_STEP_MINUTES, max(MIN_SCAN_STEP_MINUTES, step_minutes))
        if step_minutes <= 0.0:
            raise ValueError(f"Scan step must be positive: {step_minutes}")
        if tolerance_deg <= 0.0:
            raise ValueError(f"Elevation tolerance must be positive: {tolerance_deg}")

        self.propagator = propagator
        self.observer = observer
        self.step_days = step_minutes / MINUTES_PER_DAY
        self.tolerance_deg = tolerance_deg
        self.max_iterations = max_iterations

    def elevation_at(self, julian_date: float) -> float:
        """Elevation of the satellite in degrees at a Julian date."""
        elements = self.propagator.elements
        tsince = (julian_date - elements.epoch_jd) * MINUTES_PER_DAY
        position, velocity = self.propagator.propagate(tsince)
        return to_topocentric(position, velocity, self.observer, julian_date).elevation_deg

    def can_rise(self, julian_date: float) -> bool:
        """False when no pass is possible: geometry, geostationary or decayed."""
        elements = self.propagator.elements
        if is_geostationary(elements):
            logger.debug(f"Satellite {elements.catalog_number} is geostationary, no passes")
            return False
        if is_decayed(elements, julian_date):
            logger.debug(f"Satellite {elements.catalog_number} has decayed, no passes")
            return False
        if not has_aos(elements, self.observer):
            logger.debug(
                f"Satellite {elements.catalog_number} never rises at latitude "
                f"{self.observer.latitude_deg:.2f}"
            )
            return False
        return True

    def _refine(self, below_jd: float, above_jd: float) -> float:
        """Bisect between a time below and a time above the horizon."""
        mid = 0.5 * (below_jd + above_jd)
        for _ in range(self.max_iterations):
            mid = 0.5 * (below_jd + above_jd)
            elevation = self.elevation_at(mid)
            if abs(elevation) < self.tolerance_deg:
                break
            if elevation > 0.0:
                above_jd = mid
            else:
                below_jd = mid
        return mid

    def _find_crossing(self, start_jd: float, horizon_days: float, rising: bool) -> Optional[float]:
        end_jd = start_jd + horizon_days
        t_prev = start_jd
        el_prev = self.elevation_at(t_prev)

        while t_prev < end_jd:
            t = min(t_prev + self.step_days, end_jd)
            el = self.elevation_at(t)
            if rising and el_prev <= 0.0 < el:
                return self._refine(t_prev, t)
            if not rising and el_prev > 0.0 >= el:
                return self._refine(t, t_prev)
            t_prev, el_prev = t, el
        return None

    def find_aos_jd(self, start_jd: float, horizon_days: float = DEFAULT_HORIZON_DAYS) -> Optional[float]:
        """
        Julian date of the next rise after start_jd.

        A pass already in progress at start_jd is skipped: the scan looks for
        a below-to-above transition, which only happens after the current
        pass has set.
        """
        if not self.can_rise(start_jd):
            return None
        aos = self._find_crossing(start_jd, horizon_days, rising=True)
        logger.debug(f"AOS search from JD {start_jd:.6f}: {aos}")
        return aos

    def find_los_jd(self, start_jd: float, horizon_days: float = DEFAULT_HORIZON_DAYS) -> Optional[float]:
        """Julian date of the next set after start_jd."""
        if not self.can_rise(start_jd):
            return None
        los = self._find_crossing(start_jd, horizon_days, rising=False)
        logger.debug(f"LOS search from JD {start_jd:.6f}: {los}")
        return los

    def find_aos(self, start_jd: float, horizon_days: float = DEFAULT_HORIZON_DAYS) -> Optional[datetime]:
        """
        Find the next acquisition of signal.

        Parameters
        ----------
        start_jd : float
            Julian date to search from
        horizon_days : float
            How far ahead to search

        Returns
        -------
        datetime or None
            UTC time of the rise, or None if there is none within the horizon

        Raises
        ------
        PropagationError
            Propagation failed during the scan
        """
        aos = self.find_aos_jd(start_jd, horizon_days)
        return None if aos is None else civil_time_of(aos)

    def find_los(self, start_jd: float, horizon_days: float = DEFAULT_HORIZON_DAYS) -> Optional[datetime]:
        """
        Find the next loss of signal.

        Returns
        -------
        datetime or None
            UTC time of the set, or None if there is none within the horizon
        """
        los = self.find_los_jd(start_jd, horizon_days)
        return None if los is None else civil_time_of(los)

    def next_pass(
        self, start_jd: float, horizon_days: float = DEFAULT_HORIZON_DAYS
    ) -> Tuple[Optional[datetime], Optional[datetime]]:
        """
        Next complete pass as an (aos, los) pair.

        The LOS is searched from the AOS, so it always belongs to the same
        pass.
        """
        aos = self.find_aos_jd(start_jd, horizon_days)
        if aos is None:
            return None, None
        los = self.find_los_jd(aos, horizon_days)
        return civil_time_of(aos), None if los is None else civil_time_of(los)
