"""
Validation Tests for the SGP4/SDP4 Propagator

Compares the native propagator against the reference sgp4 library (Vallado's
implementation, WGS-72, improved mode) for near-Earth, synchronous and
half-day resonant orbits, and checks error handling for decaying orbits.

Run with:
    python -m pytest tests/test_propagator.py -v
"""

import math
import unittest

import numpy as np
from sgp4.api import WGS72, Satrec

from satpredict.errors import DecayedError, NonConvergentError, PropagationError
from satpredict.sgp4_propagator import SGP4Propagator
from satpredict.tle_parser import OrbitalElements, parse_tle
from tests.tle_factory import (
    ISS,
    SAT_00005,
    SAT_06251,
    SAT_14128,
    SAT_21897,
    SAT_28057,
    make_tle,
)


def reference_state(line1, line2, tsince):
    """Propagate with the sgp4 library; returns (error, r, v)."""
    sat = Satrec.twoline2rv(line1, line2, WGS72)
    error, r, v = sat.sgp4(sat.jdsatepoch, sat.jdsatepochF + tsince / 1440.0)
    return error, np.array(r), np.array(v)


class CrossValidationMixin:
    """Shared comparison against the reference library."""

    position_tolerance_km = 1e-4
    velocity_tolerance_km_s = 1e-7

    def assert_matches_reference(self, lines, times):
        propagator = SGP4Propagator(parse_tle("TEST", *lines))
        for tsince in times:
            error, r_ref, v_ref = reference_state(lines[0], lines[1], tsince)
            self.assertEqual(error, 0, f"reference failed at t={tsince}")
            r, v = propagator.propagate(tsince)
            self.assertLess(
                np.linalg.norm(r - r_ref), self.position_tolerance_km,
                f"position mismatch at t={tsince} min: {r} vs {r_ref}",
            )
            self.assertLess(
                np.linalg.norm(v - v_ref), self.velocity_tolerance_km_s,
                f"velocity mismatch at t={tsince} min: {v} vs {v_ref}",
            )


class TestNearEarth(CrossValidationMixin, unittest.TestCase):
    """Near-Earth (SGP4) branch."""

    def test_known_state_vector_at_epoch(self):
        propagator = SGP4Propagator(parse_tle("00005", *SAT_00005))
        r, v = propagator.propagate(0.0)
        np.testing.assert_allclose(r, [7022.46529266, -1400.08296755, 0.03995155], atol=1e-5)
        np.testing.assert_allclose(v, [1.893841015, 6.405893759, 4.534807250], atol=1e-8)

    def test_eccentric_orbit(self):
        self.assert_matches_reference(SAT_00005, [0.0, 360.0, 720.0, 1440.0, 4320.0, -1440.0])

    def test_iss(self):
        self.assert_matches_reference(ISS, [0.0, 1.0, 60.0, 120.0, 1440.0])

    def test_low_orbit_with_drag(self):
        self.assert_matches_reference(SAT_06251, [0.0, 120.0, 1440.0, 2880.0])

    def test_sun_synchronous(self):
        self.assert_matches_reference(SAT_28057, [0.0, 720.0, 1440.0, -720.0])

    def test_low_perigee_uses_simplified_drag(self):
        lines = make_tle(mean_motion=16.0, eccentricity=0.02, bstar=1.0e-4)
        propagator = SGP4Propagator(parse_tle("LOW", *lines))
        self.assertEqual(propagator.isimp, 1)
        self.assert_matches_reference(lines, [0.0, 10.0, 90.0])

    def test_method_and_period(self):
        propagator = SGP4Propagator(parse_tle("ISS", *ISS))
        self.assertEqual(propagator.method, "n")
        self.assertFalse(propagator.is_deep_space)
        self.assertEqual(propagator.resonance, 0)
        self.assertAlmostEqual(propagator.period_minutes, 1440.0 / 15.4954, delta=0.5)

    def test_radius_is_physical(self):
        propagator = SGP4Propagator(parse_tle("ISS", *ISS))
        for tsince in np.linspace(0.0, 1440.0, 25):
            r, v = propagator.propagate(tsince)
            self.assertTrue(6600.0 < np.linalg.norm(r) < 6850.0)
            self.assertTrue(7.4 < np.linalg.norm(v) < 7.9)


class TestDeepSpace(CrossValidationMixin, unittest.TestCase):
    """Deep-space (SDP4) branch with resonance integration."""

    position_tolerance_km = 1e-3
    velocity_tolerance_km_s = 1e-6

    def test_synchronous_resonance(self):
        propagator = SGP4Propagator(parse_tle("14128", *SAT_14128))
        self.assertEqual(propagator.method, "d")
        self.assertEqual(propagator.resonance, 1)
        self.assert_matches_reference(SAT_14128, [0.0, 120.0, 1440.0, 2880.0, 4320.0])

    def test_half_day_resonance(self):
        propagator = SGP4Propagator(parse_tle("21897", *SAT_21897))
        self.assertTrue(propagator.is_deep_space)
        self.assertEqual(propagator.resonance, 2)
        self.assert_matches_reference(SAT_21897, [0.0, 360.0, 1440.0, 2880.0])

    def test_backwards_in_time(self):
        self.assert_matches_reference(SAT_14128, [-720.0, -1440.0, -2880.0])

    def test_integrator_restarts_when_time_reverses(self):
        """A propagator that has integrated forward gives the same answer as a fresh one."""
        used = SGP4Propagator(parse_tle("21897", *SAT_21897))
        used.propagate(5000.0)
        used.propagate(-3000.0)
        r_used, v_used = used.propagate(1500.0)

        fresh = SGP4Propagator(parse_tle("21897", *SAT_21897))
        r_fresh, v_fresh = fresh.propagate(1500.0)

        np.testing.assert_allclose(r_used, r_fresh, atol=1e-6)
        np.testing.assert_allclose(v_used, v_fresh, atol=1e-9)

    def test_non_resonant_deep_space(self):
        lines = make_tle(mean_motion=4.0, eccentricity=0.01, inclination=55.0)
        propagator = SGP4Propagator(parse_tle("MEO", *lines))
        self.assertTrue(propagator.is_deep_space)
        self.assertEqual(propagator.resonance, 0)
        self.assert_matches_reference(lines, [0.0, 720.0, 2880.0])

    def test_period_threshold(self):
        # 225 minutes is 6.4 rev/day
        near = SGP4Propagator(parse_tle("N", *make_tle(mean_motion=6.5)))
        deep = SGP4Propagator(parse_tle("D", *make_tle(mean_motion=6.3)))
        self.assertEqual(near.method, "n")
        self.assertEqual(deep.method, "d")


class TestContinuity(unittest.TestCase):
    """Successive propagations are smooth."""

    def test_position_follows_velocity(self):
        propagator = SGP4Propagator(parse_tle("ISS", *ISS))
        dt_min = 1.0 / 60.0
        for tsince in (0.0, 300.0, 1000.0):
            r0, v0 = propagator.propagate(tsince)
            r1, _ = propagator.propagate(tsince + dt_min)
            predicted = r0 + v0 * 1.0
            self.assertLess(np.linalg.norm(r1 - predicted), 0.01)

    def test_mean_elements_recorded(self):
        propagator = SGP4Propagator(parse_tle("ISS", *ISS))
        propagator.propagate(30.0)
        mean = propagator.last_mean
        self.assertGreaterEqual(mean.mean_anomaly, 0.0)
        self.assertLess(mean.mean_anomaly, 2.0 * math.pi)
        self.assertGreaterEqual(mean.phase, 0.0)
        self.assertLess(mean.phase, 2.0 * math.pi)


class TestPropagationErrors(unittest.TestCase):
    """Non-physical orbits raise instead of returning garbage."""

    def test_heavy_drag_decays(self):
        lines = make_tle(mean_motion=16.2, eccentricity=0.001, bstar=0.5)
        propagator = SGP4Propagator(parse_tle("DECAY", *lines))
        with self.assertRaises(DecayedError) as ctx:
            propagator.propagate(30.0 * 1440.0)
        self.assertIn(ctx.exception.code, (1, 2, 4, 6))
        self.assertEqual(ctx.exception.tsince, 30.0 * 1440.0)

        error, _, _ = reference_state(lines[0], lines[1], 30.0 * 1440.0)
        self.assertNotEqual(error, 0)

    def test_decay_is_a_propagation_error(self):
        self.assertTrue(issubclass(DecayedError, PropagationError))
        self.assertTrue(issubclass(NonConvergentError, PropagationError))
        self.assertEqual(NonConvergentError(12.0).code, 5)

    def test_invalid_elements_rejected_at_construction(self):
        elements = parse_tle("ISS", *ISS)
        fields = {name: getattr(elements, name) for name in OrbitalElements.__dataclass_fields__}
        fields["mean_motion"] = 0.0
        with self.assertRaises(DecayedError) as ctx:
            SGP4Propagator(OrbitalElements(**fields))
        self.assertEqual(ctx.exception.code, 2)

        fields["mean_motion"] = elements.mean_motion
        fields["eccentricity"] = 1.2
        with self.assertRaises(DecayedError) as ctx:
            SGP4Propagator(OrbitalElements(**fields))
        self.assertEqual(ctx.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
