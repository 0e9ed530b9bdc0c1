import unittest
from unittest import mock
from main import OrreryApp
from solarsystem import DisplayOptions

class TestOrreryAppHeadless(unittest.TestCase):

    def test_headless_run_advances_bodies(self):
        app = OrreryApp(DisplayOptions(seed=5), time_scale=0.5, headless=True)
        self.assertIsNone(app.visualization)
        app.run_headless(frames=11, frame_seconds=0.1)
        earth = app.simulation.solar_system.get(app.simulation.find('earth'))
        self.assertAlmostEqual(earth.clock.accumulated_time, 1.0 * 0.5)
        self.assertEqual(app.simulation.frame_count, 11)
        app.close()

    def test_memory_check_warns_above_threshold(self):
        app = OrreryApp(DisplayOptions(seed=5), time_scale=1.0, headless=True)
        fake_info = mock.Mock(rss=10 * 1024 ** 3)
        with mock.patch.object(app.process, 'memory_info', return_value=fake_info):
            with self.assertLogs(level='WARNING') as logs:
                app.check_memory(600)
        self.assertTrue(any('High memory usage' in line for line in logs.output))

if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
