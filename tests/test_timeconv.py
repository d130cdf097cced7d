"""
Unit Tests for Time Conversion

Run with:
    python -m pytest tests/test_timeconv.py -v
"""

import unittest
from datetime import datetime, timedelta, timezone

from satpredict.timeconv import (
    civil_time_of,
    day_of_year,
    epoch_to_datetime,
    epoch_to_julian,
    fraction_of_day,
    gmst,
    is_leap_year,
    julian_date_of,
    julian_date_of_year,
)


class TestJulianDates(unittest.TestCase):
    """Calendar to Julian date conversions."""

    def test_j2000(self):
        t = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.assertEqual(julian_date_of(t), 2451545.0)

    def test_unix_epoch(self):
        t = datetime(1970, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        self.assertEqual(julian_date_of(t), 2440587.5)

    def test_naive_datetime_is_utc(self):
        naive = datetime(2015, 8, 31, 10, 14, 54)
        aware = naive.replace(tzinfo=timezone.utc)
        self.assertEqual(julian_date_of(naive), julian_date_of(aware))

    def test_offset_datetime_converted_to_utc(self):
        local = datetime(2000, 1, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        self.assertEqual(julian_date_of(local), 2451545.0)

    def test_microseconds_contribute(self):
        base = datetime(2020, 5, 17, 3, 4, 5, tzinfo=timezone.utc)
        later = base.replace(microsecond=500000)
        self.assertAlmostEqual(
            (julian_date_of(later) - julian_date_of(base)) * 86400.0, 0.5, places=3
        )

    def test_julian_date_of_year(self):
        # 0.0 January 2000 is 1999-12-31T00:00Z
        self.assertEqual(julian_date_of_year(2000), 2451543.5)

    def test_day_of_year_leap_rules(self):
        self.assertEqual(day_of_year(2000, 3, 1), 61)
        self.assertEqual(day_of_year(1900, 3, 1), 60)
        self.assertEqual(day_of_year(2024, 12, 31), 366)
        self.assertEqual(day_of_year(2023, 12, 31), 365)
        self.assertTrue(is_leap_year(2000))
        self.assertFalse(is_leap_year(2100))

    def test_day_of_year_rejects_bad_month(self):
        with self.assertRaises(ValueError):
            day_of_year(2020, 13, 1)

    def test_fraction_of_day(self):
        self.assertEqual(fraction_of_day(12, 0, 0), 0.5)
        self.assertAlmostEqual(fraction_of_day(6, 30, 0), 6.5 / 24.0)


class TestCivilTime(unittest.TestCase):
    """Julian date to civil time conversions."""

    def test_civil_time_of_j2000(self):
        t = civil_time_of(2451545.0)
        self.assertEqual(t, datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc))
        self.assertEqual(t.tzinfo, timezone.utc)

    def test_round_trip_within_one_second(self):
        for year in (1957, 1970, 1999, 2000, 2024, 2038, 2100):
            t = datetime(year, 7, 14, 21, 33, 17, 250000, tzinfo=timezone.utc)
            back = civil_time_of(julian_date_of(t))
            self.assertLess(abs((back - t).total_seconds()), 1.0, f"year {year}")

    def test_tle_epoch(self):
        # GRIFEX epoch 15243.42702278
        epoch = epoch_to_datetime(2015, 243.42702278)
        self.assertEqual(epoch.date(), datetime(2015, 8, 31).date())
        self.assertEqual((epoch.hour, epoch.minute, epoch.second), (10, 14, 54))
        self.assertAlmostEqual(
            epoch_to_julian(2015, 243.42702278), julian_date_of(epoch), places=8
        )


class TestSiderealTime(unittest.TestCase):

    def test_gmst_at_j2000(self):
        # 18h 41m 50.54841s
        expected = (18.0 + 41.0 / 60.0 + 50.54841 / 3600.0) * 15.0
        self.assertAlmostEqual(gmst(2451545.0) * 180.0 / 3.141592653589793, expected, places=6)

    def test_gmst_range(self):
        for jd in (2440587.5, 2451545.0, 2457265.9, 2460000.25):
            angle = gmst(jd)
            self.assertGreaterEqual(angle, 0.0)
            self.assertLess(angle, 2.0 * 3.141592653589793)


if __name__ == "__main__":
    unittest.main()
