import copy
import math
import unittest
import numpy as np
from config import config, ConfigurationError
from orbital_mechanics import OrbitalMechanics, SimulationClock
from solarsystem import SolarSystem, DisplayOptions, BodyHandle, STAR, PLANET, MOON

class SolarSystemTestCase(unittest.TestCase):

    def setUp(self):
        self.clock = SimulationClock()
        self.system = SolarSystem(OrbitalMechanics(clock=self.clock))
        self.system.build(options=DisplayOptions(seed=42))
        self.earth = self.system.find('earth')
        self.moon = self.system.find('moon')

    def body(self, handle):
        return self.system.get(handle)

class TestBuild(SolarSystemTestCase):

    def test_hierarchy_shape(self):
        self.assertEqual(self.body(self.system.star).kind, STAR)
        self.assertEqual(len(self.system.planets()), 8)
        self.assertEqual([self.body(h).key for h in self.system.moons_of(self.system.find('jupiter'))],
                         ['io', 'europa', 'ganymede', 'callisto'])
        moon = self.body(self.moon)
        self.assertEqual(moon.kind, MOON)
        self.assertEqual(moon.parent, self.earth)
        self.assertIn(self.moon, self.body(self.earth).children)

    def test_find_by_key_or_name(self):
        self.assertEqual(self.system.find('Earth'), self.earth)
        self.assertEqual(self.system.find('TRITON'), self.system.find('triton'))
        self.assertIsNone(self.system.find('pluto'))

    def test_asset_passed_through(self):
        self.assertEqual(self.body(self.earth).asset, 'earth.png')

    def test_display_sizes(self):
        self.assertAlmostEqual(self.body(self.earth).display_size, 0.1)
        self.assertAlmostEqual(self.body(self.system.find('mercury')).display_size, 0.05)
        self.assertAlmostEqual(self.body(self.system.find('jupiter')).display_size, 1.0)

    def test_realistic_display_sizes(self):
        self.system.build(options=DisplayOptions(realistic_scale=True, size_scale=2.0, seed=1))
        self.assertAlmostEqual(self.body(self.system.find('jupiter')).display_size, 11.21 * 0.05 * 2.0)

    def test_initial_planet_at_periapsis(self):
        earth = self.body(self.earth)
        np.testing.assert_array_almost_equal(earth.world_position, np.array([0.983 * 20.0, 0.0, 0.0]), decimal=3)
        self.assertAlmostEqual(earth.current_distance_au, 0.983, places=3)

    def test_moon_distances(self):
        moon = self.body(self.moon)
        self.assertAlmostEqual(moon.orbit_radius, 0.00257 * 400 * 0.75)
        np.testing.assert_almost_equal(np.linalg.norm(moon.world_position - self.body(self.earth).world_position),
                                       moon.orbit_radius)

        titan = self.body(self.system.find('titan'))
        saturn = self.body(self.system.find('saturn'))
        self.assertAlmostEqual(titan.orbit_radius, 8.5 * saturn.display_size)

    def test_moon_clearance_from_planet(self):
        mars = self.body(self.system.find('mars'))
        for handle in self.system.moons_of(mars.handle):
            moon = self.body(handle)
            self.assertGreaterEqual(moon.orbit_radius, mars.display_size * 1.1 + moon.display_size - 1e-12)

    def test_retrograde_moon_direction(self):
        triton = self.body(self.system.find('triton'))
        io = self.body(self.system.find('io'))
        self.assertEqual(math.copysign(1, io.angular_speed), config.Orbit.MOON_ORBIT_DIRECTION)
        self.assertEqual(math.copysign(1, triton.angular_speed), -math.copysign(1, io.angular_speed))
        self.assertAlmostEqual(abs(io.angular_speed), 2 * math.pi / (1.77 * 0.001))

    def test_orbit_lines(self):
        lines = self.system.orbit_lines()
        earth_line = lines[self.earth]
        self.assertEqual(earth_line.segments, 128)
        np.testing.assert_array_equal(earth_line.points[0], earth_line.points[-1])
        self.assertEqual(lines[self.moon].segments, 64)

    def test_invalid_catalog_builds_nothing(self):
        planets = copy.deepcopy(config.SolarSystem.PLANET_DATA)
        planets['earth']['eccentricity'] = 1.2
        system = SolarSystem()
        with self.assertRaises(ConfigurationError):
            system.build(planet_data=planets)
        self.assertEqual(system.bodies(), [])

    def test_seed_makes_moon_phases_reproducible(self):
        other = SolarSystem()
        other.build(options=DisplayOptions(seed=42))
        self.assertEqual(other.get(other.find('io')).orbit_angle, self.body(self.system.find('io')).orbit_angle)

class TestUpdate(SolarSystemTestCase):

    def test_first_update_only_records_time(self):
        before = self.body(self.earth).world_position.copy()
        self.system.update(100.0, 1.0)
        earth = self.body(self.earth)
        self.assertTrue(earth.clock.initialized)
        self.assertEqual(earth.clock.accumulated_time, 0.0)
        self.assertEqual(earth.clock.last_tick_time, 100.0)
        np.testing.assert_array_equal(earth.world_position, before)
        self.assertEqual(earth.rotation_angle, 0.0)

    def test_accumulated_time_scaled(self):
        self.system.update(10.0, 0.5)
        self.system.update(10.2, 0.5)
        self.system.update(10.6, 0.25)
        self.assertAlmostEqual(self.body(self.earth).clock.accumulated_time, 0.2 * 0.5 + 0.4 * 0.25)

    def test_negative_delta_clamped(self):
        self.system.update(10.0, 1.0)
        self.system.update(10.5, 1.0)
        self.system.update(9.0, 1.0)
        self.assertAlmostEqual(self.body(self.earth).clock.accumulated_time, 0.5)
        self.system.update(9.25, 1.0)
        self.assertAlmostEqual(self.body(self.earth).clock.accumulated_time, 0.75)

    def test_planet_position_follows_engine(self):
        self.system.update(0.0, 1.0)
        self.system.update(0.3, 1.0)
        earth = self.body(self.earth)
        expected = self.system.mechanics.orbital_position(earth.elements, 0.3, direction=config.Orbit.PLANET_ORBIT_DIRECTION,
                                                          distance_scale=config.Orbit.DISPLAY_AU_SCALE)
        np.testing.assert_array_almost_equal(earth.world_position, expected)
        self.assertAlmostEqual(earth.current_distance_au, np.linalg.norm(expected) / 20.0)
        self.assertAlmostEqual(earth.temperature_k, self.system.mechanics.planet_temperature(earth.current_distance_au))

    def test_spin_increment(self):
        self.system.update(0.0, 1.0)
        self.system.update(0.016, 1.0)
        step = 2 * math.pi / (24.0 * 3600.0) * 200000.0
        self.assertAlmostEqual(self.body(self.earth).rotation_angle, step)
        self.system.update(0.032, 0.5)
        self.assertAlmostEqual(self.body(self.earth).rotation_angle, step * 1.5)
        venus = self.body(self.system.find('venus'))
        self.assertLess(venus.rotation_angle, 0.0)

    def test_moon_angle_and_parent_composition(self):
        self.system.update(0.0, 1.0)
        moon = self.body(self.moon)
        start_angle = moon.orbit_angle
        self.system.update(0.01, 0.5)
        self.assertAlmostEqual(moon.orbit_angle - start_angle, moon.angular_speed * 0.01 * 0.5)
        earth = self.body(self.earth)
        np.testing.assert_array_almost_equal(moon.world_position, earth.world_position + moon.local_position)
        self.assertAlmostEqual(moon.rotation_angle, moon.orbit_angle)
        # The Moon orbits in a frame tilted by its ecliptic inclination about Z
        tilt = math.radians(5.1)
        expected_y = math.sin(tilt) * math.cos(moon.orbit_angle) * moon.orbit_radius
        self.assertAlmostEqual(moon.local_position[1], expected_y)

    def test_resume_prevents_time_jump(self):
        self.system.update(0.0, 1.0)
        self.system.update(1.0, 1.0)
        self.system.resume()
        self.system.update(5000.0, 1.0)
        self.assertAlmostEqual(self.body(self.earth).clock.accumulated_time, 1.0)
        self.assertAlmostEqual(self.body(self.moon).clock.accumulated_time, 1.0)

    def test_disabled_moons_excluded(self):
        self.system.set_moons_enabled(False)
        self.assertEqual(self.system.moons_of(self.earth), [])
        self.assertIsNone(self.system.world_position(self.moon))
        self.assertNotIn(self.moon, [t.handle for t in self.system.transforms()])
        self.assertNotIn(self.moon, self.system.orbit_lines())
        angle = self.body(self.moon).orbit_angle
        self.system.update(0.0, 1.0)
        self.system.update(1.0, 1.0)
        self.assertEqual(self.body(self.moon).orbit_angle, angle)

        self.system.set_moons_enabled(True)
        self.assertEqual(self.system.moons_of(self.earth), [self.moon])
        self.assertIsNotNone(self.system.world_position(self.moon))

    def test_failure_in_one_planet_does_not_stop_others(self):
        real_position = self.system.mechanics.orbital_position

        def failing_for_mars(elements, *args, **kwargs):
            if elements.semi_major_axis_au == 1.524:
                raise RuntimeError("boom")
            return real_position(elements, *args, **kwargs)

        self.system.mechanics.orbital_position = failing_for_mars
        self.system.update(0.0, 1.0)
        with self.assertLogs(level='ERROR') as logs:
            self.system.update(0.5, 1.0)
        self.assertTrue(any('Mars' in line for line in logs.output))
        self.assertAlmostEqual(self.body(self.system.find('jupiter')).clock.accumulated_time, 0.5)

    def test_trails_bounded(self):
        self.system.set_show_trails(True)
        for step in range(150):
            self.system.update(step * 0.01, 1.0)
        self.assertEqual(len(self.body(self.earth).trail), config.Trails.MAX_TRAIL_POINTS)
        self.system.set_show_trails(False)
        self.assertEqual(len(self.body(self.earth).trail), 0)

class TestHandles(SolarSystemTestCase):

    def test_rebuild_invalidates_handles(self):
        self.system.rebuild()
        self.assertIsNone(self.system.get(self.earth))
        self.assertIsNone(self.system.body_info(self.earth))
        self.assertIsNone(self.system.world_position(self.earth))
        self.assertEqual(self.system.moons_of(self.earth), [])
        self.assertIsNotNone(self.system.get(self.system.find('earth')))

    def test_unknown_handle(self):
        self.assertIsNone(self.system.get(BodyHandle(self.system.generation, 999)))
        self.assertIsNone(self.system.get(None))

    def test_hover_and_selection_flags(self):
        self.system.set_hovered(self.earth)
        self.assertTrue(self.body(self.earth).is_hovered)
        self.system.set_hovered(self.moon)
        self.assertFalse(self.body(self.earth).is_hovered)
        self.assertTrue(self.body(self.moon).is_hovered)
        self.system.set_selected(self.earth)
        self.assertTrue(self.body(self.earth).is_selected)
        self.system.set_selected(None)
        self.assertFalse(self.body(self.earth).is_selected)

class TestInfoAndExport(SolarSystemTestCase):

    def test_planet_info(self):
        info = self.system.body_info(self.earth)
        self.assertEqual(info.name, 'Earth')
        self.assertEqual(info.kind, PLANET)
        self.assertEqual(info.parent_name, 'Sun')
        self.assertEqual(info.temperature_range, '184-331 K')
        self.assertEqual(info.average_temperature_k, 288)
        self.assertAlmostEqual(info.temperature_c, info.temperature_k - 273.15)
        self.assertEqual(info.moons, ['Moon'])
        self.assertTrue(info.in_habitable_zone)
        self.assertAlmostEqual(info.escape_velocity_km_s, 11.2)
        self.assertAlmostEqual(info.periapsis_au, 0.983)

    def test_moon_info(self):
        info = self.system.body_info(self.system.find('titan'))
        self.assertEqual(info.kind, MOON)
        self.assertEqual(info.parent_name, 'Saturn')
        self.assertIsNone(info.distance_au)
        self.assertIsNone(info.eccentricity)
        self.assertEqual(info.orbital_period_days, 15.95)

    def test_export_system_data(self):
        self.clock.time_scale = 0.5
        data = self.system.export_system_data()
        self.assertEqual(data['time_scale'], 0.5)
        self.assertEqual(len(data['planets']), 8)
        first = data['planets'][0]
        self.assertEqual(first['name'], 'Mercury')
        self.assertEqual(len(first['position']), 3)
        self.assertEqual(first['info']['name'], 'Mercury')
        self.assertIn('timestamp', data)

class TestLabels(SolarSystemTestCase):

    def test_transition_hides_then_fades_in(self):
        earth = self.body(self.earth)
        self.system.begin_label_transition()
        self.system.advance_labels(0.1)
        self.assertEqual(earth.label_opacity, 0.0)
        self.system.advance_labels(0.45)  # halfway through the fade
        self.assertAlmostEqual(earth.label_opacity, 0.5)
        self.system.advance_labels(1.0)
        self.assertEqual(earth.label_opacity, 1.0)
        self.assertIsNone(earth.label_elapsed)

    def test_new_transition_overwrites_old(self):
        earth = self.body(self.earth)
        self.system.begin_label_transition()
        self.system.advance_labels(0.7)
        self.assertGreater(earth.label_opacity, 0.0)
        self.system.begin_label_transition()
        self.system.advance_labels(0.0)
        self.assertEqual(earth.label_opacity, 0.0)

    def test_distance_fade(self):
        earth = self.body(self.earth)
        self.system.advance_labels(0.0, earth.world_position + np.array([50.0, 0.0, 0.0]))
        self.assertEqual(earth.label_opacity, 1.0)
        self.system.advance_labels(0.0, earth.world_position + np.array([125.0, 0.0, 0.0]))
        self.assertAlmostEqual(earth.label_opacity, 0.5)
        self.system.advance_labels(0.0, earth.world_position + np.array([151.0, 0.0, 0.0]))
        self.assertEqual(earth.label_opacity, 0.0)

    def test_hidden_labels(self):
        self.system.set_show_labels(False)
        self.system.advance_labels(0.1)
        self.assertEqual(self.body(self.earth).label_opacity, 0.0)

if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
