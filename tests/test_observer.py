"""
Unit Tests for Observer Geometry

Run with:
    python -m pytest tests/test_observer.py -v
"""

import math
import unittest

import numpy as np

from config import EARTH_RADIUS_KM, EARTH_ROTATION_RATE
from satpredict.observer import (
    ObserverLocation,
    footprint_km,
    gmst,
    observer_eci,
    sub_satellite_point,
    to_topocentric,
)

JD = 2457265.92702278  # 2015-08-31T10:14:54Z


class TestObserverLocation(unittest.TestCase):

    def test_valid_location(self):
        observer = ObserverLocation(58.6456, 23.15163, 8.0, name="ES5PC")
        self.assertAlmostEqual(observer.altitude_km, 0.008)
        self.assertAlmostEqual(observer.latitude_rad, math.radians(58.6456))

    def test_out_of_range(self):
        with self.assertRaises(ValueError):
            ObserverLocation(91.0, 0.0)
        with self.assertRaises(ValueError):
            ObserverLocation(0.0, 180.5)
        with self.assertRaises(ValueError):
            ObserverLocation(0.0, 0.0, float("nan"))

    def test_immutable(self):
        observer = ObserverLocation(10.0, 20.0)
        with self.assertRaises(AttributeError):
            observer.latitude_deg = 11.0


class TestObserverECI(unittest.TestCase):

    def test_equator_greenwich_at_sea_level(self):
        observer = ObserverLocation(0.0, 0.0, 0.0)
        position, velocity = observer_eci(observer, JD)
        theta = gmst(JD)
        np.testing.assert_allclose(
            position, [EARTH_RADIUS_KM * math.cos(theta), EARTH_RADIUS_KM * math.sin(theta), 0.0],
            atol=1e-9,
        )
        self.assertAlmostEqual(np.linalg.norm(velocity), EARTH_RADIUS_KM * EARTH_ROTATION_RATE)
        self.assertAlmostEqual(float(np.dot(position, velocity)), 0.0, places=9)

    def test_pole_is_on_polar_radius(self):
        position, velocity = observer_eci(ObserverLocation(90.0, 0.0, 0.0), JD)
        polar_radius = EARTH_RADIUS_KM * (1.0 - 1.0 / 298.26)
        self.assertAlmostEqual(position[2], polar_radius, places=6)
        self.assertAlmostEqual(np.linalg.norm(velocity), 0.0, places=9)


class TestSubSatellitePoint(unittest.TestCase):
    """Geodetic inversion agrees with the observer ellipsoid."""

    def test_inverts_observer_position(self):
        for lat, lon, alt_km in [(0.0, 0.0, 400.0), (58.6456, 23.15163, 550.0),
                                 (-33.9, -70.7, 20000.0), (89.0, 179.0, 800.0)]:
            position, _ = observer_eci(ObserverLocation(lat, lon, alt_km * 1000.0), JD)
            ssp_lat, ssp_lon, ssp_alt = sub_satellite_point(position, JD)
            self.assertAlmostEqual(ssp_lat, lat, places=6)
            self.assertAlmostEqual(ssp_lon, lon, places=6)
            self.assertAlmostEqual(ssp_alt, alt_km, places=4)

    def test_longitude_range(self):
        for angle in np.linspace(0.0, 2.0 * math.pi, 37):
            position = 7000.0 * np.array([math.cos(angle), math.sin(angle), 0.1])
            _, lon, _ = sub_satellite_point(position, JD)
            self.assertGreater(lon, -180.0)
            self.assertLessEqual(lon, 180.0)


class TestTopocentric(unittest.TestCase):

    def setUp(self):
        self.observer = ObserverLocation(58.6456, 23.15163, 8.0)

    def _satellite_above(self, lat, lon, alt_km):
        position, velocity = observer_eci(ObserverLocation(lat, lon, alt_km * 1000.0), JD)
        return position, velocity

    def test_zenith(self):
        position, velocity = self._satellite_above(58.6456, 23.15163, 500.008)
        look = to_topocentric(position, velocity, self.observer, JD)
        self.assertAlmostEqual(look.elevation_deg, 90.0, places=4)
        self.assertAlmostEqual(look.range_km, 500.0, places=6)
        # Co-rotating point: no relative motion
        self.assertAlmostEqual(look.range_rate_km_s, 0.0, places=9)

    def test_azimuth_north_and_east(self):
        position, velocity = self._satellite_above(65.0, 23.15163, 500.0)
        north = to_topocentric(position, velocity, self.observer, JD)
        self.assertTrue(north.azimuth_deg < 1.0 or north.azimuth_deg > 359.0)
        self.assertGreater(north.elevation_deg, 0.0)

        position, velocity = self._satellite_above(58.6456, 30.0, 500.0)
        east = to_topocentric(position, velocity, self.observer, JD)
        self.assertTrue(80.0 < east.azimuth_deg < 100.0, east.azimuth_deg)

    def test_below_horizon_on_far_side(self):
        position, velocity = self._satellite_above(-58.6456, -156.85, 500.0)
        look = to_topocentric(position, velocity, self.observer, JD)
        self.assertLess(look.elevation_deg, -80.0)
        self.assertGreaterEqual(look.azimuth_deg, 0.0)
        self.assertLess(look.azimuth_deg, 360.0)

    def test_range_rate_sign(self):
        position, _ = self._satellite_above(58.6456, 23.15163, 500.0)
        _, obs_velocity = observer_eci(self.observer, JD)
        up = position / np.linalg.norm(position)
        receding = to_topocentric(position, obs_velocity + 1.0 * up, self.observer, JD)
        approaching = to_topocentric(position, obs_velocity - 1.0 * up, self.observer, JD)
        self.assertAlmostEqual(receding.range_rate_km_s, 1.0, places=3)
        self.assertAlmostEqual(approaching.range_rate_km_s, -1.0, places=3)


class TestFootprint(unittest.TestCase):

    def test_footprint(self):
        self.assertEqual(footprint_km(0.0), 0.0)
        expected = 12756.33 * math.acos(EARTH_RADIUS_KM / (EARTH_RADIUS_KM + 500.0))
        self.assertAlmostEqual(footprint_km(500.0), expected)
        self.assertGreater(footprint_km(35786.0), footprint_km(500.0))


if __name__ == "__main__":
    unittest.main()
