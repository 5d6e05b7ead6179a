import unittest
import numpy as np

from tracksim.core.solar import (
    declination, equation_of_time, solar_noon, solar_position
)


class TestSolarPosition(unittest.TestCase):
    def test_declination_extremes(self):
        self.assertAlmostEqual(declination(81), 0.0, places=6)
        self.assertAlmostEqual(declination(172), 23.45, delta=0.01)
        self.assertAlmostEqual(declination(355), -23.45, delta=0.05)

    def test_equation_of_time_range(self):
        eot = [equation_of_time(d) for d in range(1, 366)]
        self.assertLess(max(eot), 17.0)
        self.assertGreater(min(eot), -15.0)

    def test_noon_is_daily_maximum(self):
        """Elevation at solar noon is the day's peak within 0.5 deg."""
        hours = np.arange(0.0, 24.0, 0.05)
        for lat in np.arange(-66.5, 66.6, 13.3):
            for doy in range(1, 366, 23):
                noon_el = solar_position(doy, solar_noon(doy), lat).elevation
                peak = max(solar_position(doy, h, lat).elevation for h in hours)
                self.assertGreaterEqual(noon_el, peak - 0.5, f"lat={lat}, doy={doy}")

    def test_noon_elevation_value(self):
        # 90 - |lat - dec|
        doy = 172
        el = solar_position(doy, solar_noon(doy), 43.66).elevation
        self.assertAlmostEqual(el, 90.0 - (43.66 - declination(doy)), places=6)

    def test_east_in_morning_west_in_afternoon(self):
        for lat in (-35.0, 0.0, 43.66):
            for doy in (20, 172, 300):
                morning = solar_position(doy, 8, lat)
                afternoon = solar_position(doy, 16, lat)
                self.assertLess(morning.azimuth, 180.0)
                self.assertGreater(afternoon.azimuth, 180.0)

    def test_northern_summer_noon_sun_south(self):
        pos = solar_position(172, 12, 43.66)
        self.assertAlmostEqual(pos.azimuth, 180.0, delta=5.0)

    def test_night_is_negative(self):
        self.assertLess(solar_position(172, 0, 43.66).elevation, 0.0)
        self.assertLess(solar_position(355, 22, 43.66).elevation, 0.0)

    def test_ranges_and_no_errors(self):
        """Total over the whole domain, including the poles."""
        for lat in (-90.0, -66.5, 0.0, 66.5, 90.0):
            for doy in (1, 81, 172, 265, 365):
                for h in range(0, 25, 3):
                    pos = solar_position(doy, h, lat)
                    self.assertTrue(np.isfinite(pos.elevation))
                    self.assertTrue(np.isfinite(pos.azimuth))
                    self.assertGreaterEqual(pos.elevation, -90.0)
                    self.assertLessEqual(pos.elevation, 90.0)
                    self.assertGreaterEqual(pos.azimuth, 0.0)
                    self.assertLessEqual(pos.azimuth, 360.0)


if __name__ == '__main__':
    unittest.main()
