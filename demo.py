"""
Satellite Pass Prediction Demonstration

Tracks one satellite from one ground station and logs where it is and when
it next rises and sets, refreshing once per second:
- TLE parsing and validation
- SGP4 propagation to the current (or a fixed) time
- Look angles, range and range-rate from the observer
- Sub-satellite point, altitude and orbit number
- Next AOS and LOS within one day

The example GRIFEX elements are from 2015; run with --time near their epoch
(e.g. --time 2015-08-31T12:00:00) to see meaningful output, or pass fresh
elements with --tle-file.

Usage:
    python demo.py [--once] [--time ISO8601] [--tle-file PATH] [--verbose]

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

import argparse
import logging
import time
from datetime import datetime, timedelta
from typing import Optional

from config import EXAMPLE_OBSERVER, EXAMPLE_TLE
from logging_config import configure_logging, get_logger
from satpredict import ObserverLocation, PredictionSession, PropagationError, SatelliteSnapshot
from satpredict.timeconv import as_utc
from satpredict.tle_parser import parse_tle, parse_tle_text

logger = get_logger(__name__)


def _format_time(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S UTC") if value else "none within 1 day"


def log_snapshot(name: str, snapshot: SatelliteSnapshot) -> None:
    """
    Log one snapshot.

    Parameters
    ----------
    name : str
        Satellite name
    snapshot : SatelliteSnapshot
        Snapshot to log
    """
    logger.info(f"{name} at {snapshot.timestamp:%Y-%m-%d %H:%M:%S} UTC")
    logger.info(
        f"  Az/El: {snapshot.azimuth_deg:7.2f}° / {snapshot.elevation_deg:6.2f}°  "
        f"range {snapshot.range_km:9.1f} km, range-rate {snapshot.range_rate_km_s:+7.3f} km/s"
    )
    logger.info(
        f"  SSP: {snapshot.latitude_deg:7.3f}°, {snapshot.longitude_deg:8.3f}°  "
        f"alt {snapshot.altitude_km:7.1f} km, vel {snapshot.velocity_km_s:6.3f} km/s"
    )
    logger.info(f"  Orbit #{snapshot.orbit_number}, footprint {snapshot.footprint_km:.0f} km")
    logger.info(f"  AOS: {_format_time(snapshot.aos)}")
    logger.info(f"  LOS: {_format_time(snapshot.los)}")


def main() -> None:
    """Main demonstration entry point."""
    parser = argparse.ArgumentParser(
        description="Satellite Pass Prediction Demonstration"
    )
    parser.add_argument("--once", action="store_true", help="Print one snapshot and exit")
    parser.add_argument(
        "--time", type=datetime.fromisoformat,
        help="Start time (ISO 8601, UTC if no offset given) instead of now",
    )
    parser.add_argument("--tle-file", help="File holding a 2- or 3-line TLE block")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    # Configure logging
    if args.verbose:
        configure_logging(level=logging.DEBUG)

    logger.info("Satellite Pass Prediction Demonstration")
    logger.info("=" * 60)

    if args.tle_file:
        with open(args.tle_file) as f:
            elements = parse_tle_text(f.read())
    else:
        elements = parse_tle(EXAMPLE_TLE["name"], EXAMPLE_TLE["line1"], EXAMPLE_TLE["line2"])

    observer = ObserverLocation(
        latitude_deg=EXAMPLE_OBSERVER["latitude_deg"],
        longitude_deg=EXAMPLE_OBSERVER["longitude_deg"],
        altitude_m=EXAMPLE_OBSERVER["altitude_m"],
        name=EXAMPLE_OBSERVER["name"],
    )
    session = PredictionSession(elements, observer)

    start = as_utc(args.time) if args.time else None
    started = time.monotonic()

    try:
        while True:
            at = start + timedelta(seconds=time.monotonic() - started) if start else None
            try:
                snapshot = session.update(at)
            except PropagationError as e:
                logger.error(f"Cannot propagate {elements.name}: {e}")
                break
            log_snapshot(elements.name, snapshot)
            if args.once:
                break
            time.sleep(1.0)
    except KeyboardInterrupt:
        logger.info("Stopped")

    logger.info("=" * 60)
    logger.info("Demonstration complete")


if __name__ == "__main__":
    main()
