import unittest
from dataclasses import fields
import numpy as np
from simulation import OrrerySimulation, SimulationContext, FrameSnapshot
from solarsystem import DisplayOptions

class SimulationTestCase(unittest.TestCase):

    def setUp(self):
        self.sim = OrrerySimulation(options=DisplayOptions(seed=3))
        self.earth = self.sim.find('earth')

    def accumulated(self, ref='earth'):
        return self.sim.solar_system.get(self.sim.find(ref)).clock.accumulated_time

class TestTick(SimulationTestCase):

    def test_tick_returns_snapshot(self):
        snapshot = self.sim.tick(0.0)
        self.assertIsInstance(snapshot, FrameSnapshot)
        self.assertFalse(snapshot.paused)
        self.assertEqual(snapshot.time_scale, 1.0)
        self.assertEqual(len(snapshot.transforms), len(self.sim.solar_system.bodies()))
        self.assertIn(self.earth, snapshot.label_opacity)
        self.assertEqual(self.sim.frame_count, 1)

    def test_first_tick_does_not_move_bodies(self):
        before = self.sim.solar_system.world_position(self.earth)
        self.sim.tick(1234.5)
        np.testing.assert_array_equal(self.sim.solar_system.world_position(self.earth), before)
        self.assertEqual(self.accumulated(), 0.0)

    def test_time_scale_read_at_tick(self):
        self.sim.tick(0.0)
        self.sim.set_time_scale(0.5)
        self.sim.tick(1.0)
        self.assertAlmostEqual(self.accumulated(), 0.5)

    def test_time_scale_clamped(self):
        self.assertEqual(self.sim.set_time_scale(3.0), 1.0)
        self.assertEqual(self.sim.set_time_scale(0.0), 0.001)

    def test_pause_resume_after_long_gap_keeps_accumulated_time(self):
        self.sim.tick(0.0)
        self.sim.tick(1.0)
        self.assertAlmostEqual(self.accumulated(), 1.0)

        self.sim.set_paused(True)
        position = self.sim.solar_system.world_position(self.earth)
        self.sim.tick(2.0)
        self.sim.tick(10000.0)
        self.assertAlmostEqual(self.accumulated(), 1.0)
        np.testing.assert_array_equal(self.sim.solar_system.world_position(self.earth), position)

        self.sim.set_paused(False)
        self.sim.tick(10001.0)
        self.assertAlmostEqual(self.accumulated(), 1.0)
        self.assertAlmostEqual(self.accumulated('moon'), 1.0)
        self.sim.tick(10001.25)
        self.assertAlmostEqual(self.accumulated(), 1.25)

    def test_toggle_pause(self):
        self.assertTrue(self.sim.toggle_pause())
        self.assertTrue(self.sim.tick(0.0).paused)
        self.assertFalse(self.sim.toggle_pause())

    def test_labels_fade_while_paused(self):
        self.sim.tick(0.0)
        self.sim.follow('earth')
        self.sim.set_paused(True)
        self.sim.tick(0.1)
        self.assertEqual(self.sim.tick(0.1).label_opacity[self.earth], 0.0)
        snapshot = self.sim.tick(2.0)
        self.assertGreater(snapshot.label_opacity[self.earth], 0.0)

    def test_tick_never_raises(self):
        def broken(*args, **kwargs):
            raise RuntimeError("renderer gone")
        self.sim.solar_system.advance_labels = broken
        with self.assertLogs(level='ERROR'):
            snapshot = self.sim.tick(0.0)
        self.assertIsInstance(snapshot, FrameSnapshot)

class TestFollowThroughTicks(SimulationTestCase):

    def test_follow_moves_camera_by_body_delta(self):
        self.sim.follow('earth')
        camera_start = self.sim.camera.position.copy()
        self.sim.tick(0.0)
        np.testing.assert_array_equal(self.sim.camera.position, camera_start)

        earth_before = self.sim.solar_system.world_position(self.earth)
        self.sim.tick(0.1)
        earth_delta = self.sim.solar_system.world_position(self.earth) - earth_before
        self.assertGreater(np.linalg.norm(earth_delta), 0.0)
        np.testing.assert_array_almost_equal(self.sim.camera.position, camera_start + earth_delta)

    def test_select_by_name_follows_and_reports(self):
        self.sim.select_body('Mars')
        snapshot = self.sim.tick(0.0)
        mars = self.sim.find('mars')
        self.assertEqual(snapshot.selected, mars)
        self.assertEqual(snapshot.following, mars)
        np.testing.assert_array_almost_equal(snapshot.camera_target, self.sim.solar_system.world_position(mars))

    def test_select_moon_by_name(self):
        self.sim.select_moon('Io', 'Jupiter')
        self.assertEqual(self.sim.tick(0.0).selected, self.sim.find('io'))

    def test_unknown_name_is_noop(self):
        self.sim.select_body('Vulcan')
        self.assertIsNone(self.sim.tick(0.0).selected)

class TestRebuild(SimulationTestCase):

    def test_rebuild_clears_selection_and_invalidates_handles(self):
        self.sim.select_body('earth')
        self.sim.tick(0.0)
        self.sim.tick(1.0)
        self.sim.rebuild_hierarchy(DisplayOptions(realistic_scale=True, seed=3))
        snapshot = self.sim.tick(2.0)
        self.assertIsNone(snapshot.selected)
        self.assertIsNone(snapshot.following)
        self.assertIsNone(self.sim.body_info(self.earth))
        self.assertEqual(self.accumulated(), 0.0)

        # A late event carrying the old handle is ignored
        self.sim.select_body(self.earth)
        self.assertIsNone(self.sim.tick(3.0).selected)

    def test_disabling_moons_releases_selected_moon(self):
        self.sim.select_moon('moon')
        self.sim.set_moons_enabled(False)
        snapshot = self.sim.tick(0.0)
        self.assertIsNone(snapshot.selected)
        self.assertIsNone(snapshot.following)
        self.assertNotIn(self.sim.find('moon'), [t.handle for t in snapshot.transforms])

class TestContextIsolation(unittest.TestCase):

    def test_context_carries_engine_and_its_clock(self):
        context = SimulationContext.create(time_scale=0.1)
        self.assertIs(context.mechanics.clock, context.clock)
        self.assertEqual([f.name for f in fields(context)], ['clock', 'mechanics'])
        sim = OrrerySimulation(context=context)
        self.assertIs(sim.solar_system.mechanics, context.mechanics)

    def test_two_simulations_do_not_share_time_scale(self):
        first = OrrerySimulation(context=SimulationContext.create(time_scale=0.25))
        second = OrrerySimulation()
        self.assertEqual(first.clock.time_scale, 0.25)
        self.assertEqual(second.clock.time_scale, 1.0)
        first.set_time_scale(0.5)
        self.assertEqual(second.clock.time_scale, 1.0)

    def test_export_and_info(self):
        sim = OrrerySimulation(options=DisplayOptions(seed=0))
        self.assertEqual(sim.body_info('saturn').moons[-1], 'Iapetus')
        self.assertEqual(len(sim.export_system_data()['planets']), 8)

if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
