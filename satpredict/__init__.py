"""
Satellite Pass Prediction Package

This package predicts where a satellite appears to a fixed ground observer
and when it next rises and sets, from a NORAD two-line element set.

Modules:
    tle_parser: TLE parsing and validation
    sgp4_propagator: Native SGP4 propagator (near-Earth branch)
    deep_space: SDP4 lunar-solar and resonance terms
    observer: Observer geometry, look angles and sub-satellite point
    orbit_tools: Orbit classification and decay estimate
    pass_finder: AOS/LOS search
    session: Prediction session and satellite snapshots
    timeconv: Julian date conversions
    errors: Exception hierarchy

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

from satpredict.errors import (
    DecayedError,
    NonConvergentError,
    PropagationError,
    SatPredictError,
    TLEError,
)
from satpredict.observer import ObserverLocation
from satpredict.pass_finder import PassFinder
from satpredict.session import PredictionSession, SatelliteSnapshot
from satpredict.sgp4_propagator import SGP4Propagator
from satpredict.tle_parser import OrbitalElements, parse_tle, parse_tle_text

__version__ = "1.0.0"

__all__ = [
    "DecayedError",
    "NonConvergentError",
    "ObserverLocation",
    "OrbitalElements",
    "PassFinder",
    "PredictionSession",
    "PropagationError",
    "SGP4Propagator",
    "SatPredictError",
    "SatelliteSnapshot",
    "TLEError",
    "parse_tle",
    "parse_tle_text",
]
