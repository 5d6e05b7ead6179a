import math
import unittest
import numpy as np

from tracksim.core.config import TrackerConfig
from tracksim.simulation import (
    SimulationRunner, clear_sky_irradiance, get_instantaneous_state, simulate_year
)


class TestClearSky(unittest.TestCase):
    def test_overhead_value(self):
        self.assertAlmostEqual(clear_sky_irradiance(90.0), 947.0, delta=3.0)

    def test_increases_with_elevation(self):
        values = [clear_sky_irradiance(el) for el in (1.0, 5.0, 15.0, 30.0, 60.0, 90.0)]
        self.assertEqual(values, sorted(values))
        self.assertGreater(values[0], 0.0)


class TestAnnualSimulation(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        # Portland ME reference array
        cls.cfg = TrackerConfig(
            latitude=43.66, panel_chord=2.0, row_spacing=5.0, tracker_length=20.0,
            hub_height=1.5, backtracking=False, max_rotation=60.0, number_of_rows=5,
            start_time=10, end_time=15
        )
        cls.result = simulate_year(cls.cfg)

    def test_reference_scenario(self):
        loss = self.result.shading_loss_percent
        self.assertTrue(math.isfinite(loss))
        self.assertGreaterEqual(loss, 0.0)
        self.assertLess(loss, 50.0)

        g = self.result.ground_heatmap
        array_width = (5 - 1) * 5.0 + 2.0
        self.assertEqual(g.width, math.ceil((array_width + 20) / 0.1))
        self.assertEqual(g.height, math.ceil((20 + 20) / 0.1))

    def test_sample_counts(self):
        # 12 months x 6 sampled days x 5 hours, all in daylight at this latitude
        self.assertEqual(self.result.daylight_samples, 360)
        self.assertEqual(len(self.result.hourly_heatmap), 360)
        days = sorted({p.day for p in self.result.hourly_heatmap})
        self.assertEqual(days, list(range(0, 360, 5)))
        hours = sorted({p.hour for p in self.result.hourly_heatmap})
        self.assertEqual(hours, [10, 11, 12, 13, 14])

    def test_monthly_records(self):
        monthly = self.result.monthly_data
        self.assertEqual([m.month for m in monthly][:3], ["Jan", "Feb", "Mar"])
        self.assertEqual(len(monthly), 12)
        for m in monthly:
            self.assertGreaterEqual(m.avg_shading, 0.0)
            self.assertLessEqual(m.avg_shading, 1.0)
            self.assertGreater(m.total_irradiance, 0.0)

        total_irr = sum(m.total_irradiance for m in monthly)
        self.assertAlmostEqual(self.result.shading_loss_percent,
                               self.result.total_aswa / total_irr * 100.0, places=9)

    def test_ground_grid_normalized(self):
        grid = self.result.ground_heatmap.grid
        self.assertGreaterEqual(float(grid.min()), 0.0)
        self.assertLessEqual(float(grid.max()), 1.0)
        self.assertGreater(float(grid.max()), 0.0)
        # The ground right below the middle row's hub is shaded part of the time
        g = self.result.ground_heatmap
        self.assertGreater(grid[g.height // 2, g.width // 2], 0.0)

    def test_frames(self):
        monthly = self.result.monthly_frame()
        hourly = self.result.hourly_frame()
        self.assertEqual(list(monthly.columns), ["month", "avg_shading", "total_irradiance"])
        self.assertEqual(len(monthly), 12)
        self.assertEqual(len(hourly), 360)
        self.assertAlmostEqual(float((hourly["shading"] * hourly["irradiance"]).sum()),
                               self.result.total_aswa, places=6)
        self.assertEqual(self.result.summary()["daylight_samples"], 360)

    def test_deterministic(self):
        again = simulate_year(self.cfg)
        self.assertEqual(again.total_aswa, self.result.total_aswa)
        self.assertEqual(again.shading_loss_percent, self.result.shading_loss_percent)
        self.assertEqual(again.monthly_data, self.result.monthly_data)
        self.assertEqual(again.hourly_heatmap, self.result.hourly_heatmap)
        self.assertTrue(np.array_equal(again.ground_heatmap.grid, self.result.ground_heatmap.grid))


class TestScenarios(unittest.TestCase):
    def test_single_row_never_shaded(self):
        for lat in (0.0, 43.66, 60.0):
            cfg = TrackerConfig(latitude=lat, number_of_rows=1, row_spacing=2.2, start_time=6, end_time=19)
            self.assertEqual(simulate_year(cfg).shading_loss_percent, 0.0)

    def test_backtracking_never_shaded(self):
        for pitch in (2.5, 4.0, 8.0):
            cfg = TrackerConfig(backtracking=True, row_spacing=pitch, number_of_rows=3, start_time=6, end_time=19)
            result = simulate_year(cfg)
            self.assertEqual(result.shading_loss_percent, 0.0)
            self.assertEqual(result.total_aswa, 0.0)

    def test_long_day_window_is_shaded(self):
        # Low morning and evening profile angles reach the neighbouring row
        cfg = TrackerConfig(start_time=6, end_time=19, number_of_rows=3)
        result = simulate_year(cfg)
        self.assertTrue(math.isfinite(result.shading_loss_percent))
        self.assertGreater(result.shading_loss_percent, 0.0)
        self.assertLess(result.shading_loss_percent, 50.0)
        self.assertGreater(max(p.shading for p in result.hourly_heatmap), 0.0)

    def test_wider_pitch_loses_less(self):
        losses = [simulate_year(TrackerConfig(row_spacing=p, number_of_rows=2, start_time=7, end_time=18))
                  .shading_loss_percent for p in (3.0, 4.0, 5.0, 7.0)]
        for a, b in zip(losses, losses[1:]):
            self.assertGreaterEqual(a, b)
        self.assertGreater(losses[0], losses[-1])

    def test_inverted_window_samples_one_hour(self):
        cfg = TrackerConfig(start_time=12, end_time=12)
        result = simulate_year(cfg)
        self.assertEqual(result.daylight_samples, 72)
        self.assertTrue({p.hour for p in result.hourly_heatmap} == {12})

    def test_polar_night_falls_back_to_zero(self):
        # Only midnight sampled near the equator: no daylight at all
        cfg = TrackerConfig(latitude=0.0, start_time=0, end_time=1, number_of_rows=2)
        result = simulate_year(cfg)
        self.assertEqual(result.daylight_samples, 0)
        self.assertEqual(result.shading_loss_percent, 0.0)
        self.assertEqual(result.hourly_heatmap, [])
        self.assertTrue(all(m.avg_shading == 0.0 for m in result.monthly_data))
        self.assertFalse(result.ground_heatmap.grid.any())

    def test_progress_callback(self):
        calls = []
        SimulationRunner(TrackerConfig(number_of_rows=1, start_time=12, end_time=13),
                         progress=lambda done, total: calls.append((done, total))).run()
        self.assertEqual(len(calls), 72)
        self.assertEqual(calls[-1], (72, 72))


class TestInstantaneousState(unittest.TestCase):
    def setUp(self):
        self.cfg = TrackerConfig()

    def test_night(self):
        state = get_instantaneous_state(172, 0.0, self.cfg)
        self.assertFalse(state.is_valid)
        self.assertEqual(state.tracker_angle, 0.0)

    def test_morning_and_afternoon(self):
        morning = get_instantaneous_state(172, 8.0, self.cfg)
        afternoon = get_instantaneous_state(172, 16.0, self.cfg)
        self.assertTrue(morning.is_valid)
        self.assertLess(morning.tracker_angle, 0.0)
        self.assertGreater(afternoon.tracker_angle, 0.0)
        # Profile angle is measured from the west horizon
        self.assertGreater(morning.profile_angle_rad, math.pi / 2)
        self.assertLess(afternoon.profile_angle_rad, math.pi / 2)
        self.assertGreater(afternoon.profile_angle_rad, 0.0)

    def test_matches_solar_model(self):
        from tracksim.core.solar import solar_position
        state = get_instantaneous_state(100, 9.5, self.cfg)
        pos = solar_position(100, 9.5, self.cfg.latitude)
        self.assertEqual(state.sun_elevation, pos.elevation)
        self.assertEqual(state.sun_azimuth, pos.azimuth)


if __name__ == '__main__':
    unittest.main()
