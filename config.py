"""
Satellite Pass Prediction Configuration and Constants

This module contains the physical constants, search defaults and example data
used throughout the project.

Constants:
    WGS-72 gravitational constants as specified by Vallado et al. (2006, AAS 06-675)
    for use with SGP4/SDP4 orbital propagation. The observer ellipsoid uses the
    same equatorial radius with the WGS-72 flattening, as in NORAD's predict.

Example Data:
    GRIFEX TLE and a ground station in Estonia, used by demo.py.

    IMPORTANT: The example TLE is from 2015 and only suitable for demonstrations
    with an explicit query time near its epoch.
    - Low Earth Orbit (LEO) satellites: Update weekly
    - Medium Earth Orbit (MEO): Update monthly
    - Geostationary (GEO): Update quarterly

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

import math
from typing import Dict, Any

# WGS-72 Gravitational Constants (per Vallado et al. 2006, AAS 06-675)
EARTH_RADIUS_KM: float = 6378.135  # Earth equatorial radius (km)
GRAVITATIONAL_PARAMETER: float = 398600.8  # Earth gravitational parameter (km³/s²)
J2: float = 0.001082616  # Second zonal harmonic coefficient
J3: float = -0.00000253881  # Third zonal harmonic coefficient
J4: float = -0.00000165597  # Fourth zonal harmonic coefficient

# Observer ellipsoid and Earth rotation
EARTH_FLATTENING: float = 1.0 / 298.26
EARTH_ROTATION_RATE: float = 7.292115e-5  # rad/s (sidereal)

# Time
MINUTES_PER_DAY: float = 1440.0
SECONDS_PER_DAY: float = 86400.0
TWO_PI: float = 2.0 * math.pi

# Orbits with a period at or above this use the deep-space (SDP4) branch
DEEP_SPACE_PERIOD_MINUTES: float = 225.0

# Pass search defaults
DEFAULT_HORIZON_DAYS: float = 1.0
ELEVATION_TOLERANCE_DEG: float = 0.001
MAX_BISECTION_ITERATIONS: int = 60
MIN_SCAN_STEP_MINUTES: float = 0.05
MAX_SCAN_STEP_MINUTES: float = 5.0

# Example satellite and ground station for demonstrations and tests
EXAMPLE_TLE: Dict[str, Any] = {
    'name': 'GRIFEX',
    'norad_id': 40379,
    'line1': '1 40379U 15003D   15243.42702278  .00003367  00000-0  17130-3 0  9993',
    'line2': '2 40379  99.1124 290.6779 0157088   8.9691 351.4280 15.07659299 31889',
    'epoch': '2015-08-31T10:14:54Z',
}

EXAMPLE_OBSERVER: Dict[str, Any] = {
    'name': 'ES5PC',
    'latitude_deg': 58.64560,
    'longitude_deg': 23.15163,
    'altitude_m': 8.0,
}
