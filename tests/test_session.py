"""
Tests for the Prediction Session

Run with:
    python -m pytest tests/test_session.py -v
"""

import dataclasses
import unittest
from datetime import timedelta
from unittest import mock

from config import EXAMPLE_OBSERVER, EXAMPLE_TLE
from satpredict.errors import DecayedError
from satpredict.observer import ObserverLocation
from satpredict.session import OrbitType, PredictionSession, orbit_number
from satpredict.timeconv import civil_time_of
from satpredict.tle_parser import parse_tle
from tests.tle_factory import make_tle


def example_observer():
    return ObserverLocation(
        EXAMPLE_OBSERVER["latitude_deg"],
        EXAMPLE_OBSERVER["longitude_deg"],
        EXAMPLE_OBSERVER["altitude_m"],
        EXAMPLE_OBSERVER["name"],
    )


class TestPredictionSession(unittest.TestCase):

    def setUp(self):
        self.session = PredictionSession.from_tle(
            EXAMPLE_TLE["name"], EXAMPLE_TLE["line1"], EXAMPLE_TLE["line2"], example_observer()
        )
        self.at = civil_time_of(self.session.elements.epoch_jd) + timedelta(hours=1)

    def test_initial_state(self):
        self.assertIsNone(self.session.snapshot)
        self.assertEqual(self.session.orbit_type, OrbitType.SUNSYNC)
        self.assertFalse(self.session.propagator.is_deep_space)

    def test_horizon_must_be_positive(self):
        with self.assertRaises(ValueError):
            PredictionSession(self.session.elements, example_observer(), horizon_days=0.0)

    def test_update_publishes_snapshot(self):
        snapshot = self.session.update(self.at)
        self.assertIs(self.session.snapshot, snapshot)
        self.assertEqual(snapshot.timestamp, self.at)

        self.assertTrue(0.0 <= snapshot.azimuth_deg < 360.0)
        self.assertTrue(-90.0 <= snapshot.elevation_deg <= 90.0)
        self.assertEqual(snapshot.is_visible, snapshot.elevation_deg > 0.0)
        self.assertTrue(300.0 < snapshot.altitude_km < 800.0)
        self.assertTrue(7.0 < snapshot.velocity_km_s < 8.0)
        self.assertLessEqual(abs(snapshot.latitude_deg), 99.2)
        self.assertTrue(-180.0 < snapshot.longitude_deg <= 180.0)
        self.assertGreater(snapshot.footprint_km, 0.0)
        self.assertTrue(0.0 <= snapshot.mean_anomaly_deg < 360.0)
        self.assertTrue(0.0 <= snapshot.phase_deg < 360.0)

    def test_aos_and_los_follow_timestamp(self):
        snapshot = self.session.update(self.at)
        self.assertIsNotNone(snapshot.aos)
        self.assertIsNotNone(snapshot.los)
        self.assertGreater(snapshot.aos, snapshot.timestamp)
        self.assertGreater(snapshot.los, snapshot.timestamp)
        if not snapshot.is_visible:
            # Below the horizon the next set belongs to the next pass
            self.assertGreater(snapshot.los, snapshot.aos)

    def test_naive_time_is_utc(self):
        naive = self.at.replace(tzinfo=None)
        snapshot = self.session.update(naive)
        self.assertEqual(snapshot.timestamp, self.at)

    def test_snapshot_is_immutable(self):
        snapshot = self.session.update(self.at)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            snapshot.elevation_deg = 45.0

    def test_failed_update_keeps_previous_snapshot(self):
        previous = self.session.update(self.at)
        failure = DecayedError(6, 120.0, "satellite has decayed")
        with mock.patch.object(self.session.propagator, "propagate", side_effect=failure):
            with self.assertRaises(DecayedError):
                self.session.update(self.at + timedelta(minutes=1))
        self.assertIs(self.session.snapshot, previous)

    def test_orbit_number_advances(self):
        first = self.session.update(self.at).orbit_number
        period = timedelta(minutes=self.session.propagator.period_minutes)
        second = self.session.update(self.at + period).orbit_number
        self.assertEqual(second, first + 1)


class TestOrbitNumber(unittest.TestCase):

    def test_at_epoch(self):
        elements = parse_tle(EXAMPLE_TLE["name"], EXAMPLE_TLE["line1"], EXAMPLE_TLE["line2"])
        # Mean anomaly 351.4280 deg, revolution 3188
        self.assertEqual(orbit_number(elements, elements.epoch_jd), 3187)
        one_rev = 1.0 / elements.mean_motion_rev_per_day
        self.assertEqual(orbit_number(elements, elements.epoch_jd + one_rev), 3188)

    def test_never_decreases(self):
        for bstar in (0.0, 0.001, -0.001):
            elements = parse_tle("SAT", *make_tle(mean_motion=15.0, bstar=bstar, revolution=100))
            numbers = [orbit_number(elements, elements.epoch_jd + day) for day in range(0, 20000, 500)]
            self.assertEqual(numbers, sorted(numbers), f"bstar={bstar}")

    def test_held_past_turning_point(self):
        elements = parse_tle("SAT", *make_tle(mean_motion=15.0, bstar=-0.001))
        # Turning point at -n / (2 B*) = 7500 days
        self.assertEqual(
            orbit_number(elements, elements.epoch_jd + 8000.0),
            orbit_number(elements, elements.epoch_jd + 9000.0),
        )


class TestLogging(unittest.TestCase):

    def test_session_start_is_logged(self):
        elements = parse_tle(EXAMPLE_TLE["name"], EXAMPLE_TLE["line1"], EXAMPLE_TLE["line2"])
        with self.assertLogs("satpredict.session", level="INFO") as logs:
            PredictionSession(elements, example_observer())
        self.assertIn("GRIFEX", logs.output[0])


if __name__ == "__main__":
    unittest.main()
