import math
import unittest
import numpy as np
from physics_utils import safe_divide, normalize_vector, rotate_about_x, rotate_about_z, smoothstep

class TestSafeDivide(unittest.TestCase):

    def test_typical_division_scalar(self):
        self.assertAlmostEqual(safe_divide(10, 2), 5.0)
        self.assertAlmostEqual(safe_divide(-10, 4), -2.5)
        self.assertAlmostEqual(safe_divide(0, 5), 0.0)

    def test_division_by_zero_scalar(self):
        self.assertAlmostEqual(safe_divide(5, 0), 0.0)
        self.assertAlmostEqual(safe_divide(5, 1e-13), 0.0) # Below default epsilon
        self.assertAlmostEqual(safe_divide(5, 0, default_on_zero_denom=99.0), 99.0)

    def test_division_by_zero_scalar_signed_inf(self):
        self.assertEqual(safe_divide(5, 0, default_on_zero_denom=float('inf')), float('inf'))
        self.assertEqual(safe_divide(-5, 0, default_on_zero_denom=float('inf')), float('-inf'))
        self.assertEqual(safe_divide(0, 0, default_on_zero_denom=float('-inf')), 0.0)

class TestNormalizeVector(unittest.TestCase):

    def test_normalize_typical_vector(self):
        np.testing.assert_array_almost_equal(normalize_vector(np.array([3.0, 4.0, 0.0])), np.array([0.6, 0.8, 0.0]))

    def test_normalize_zero_vector(self):
        np.testing.assert_array_almost_equal(normalize_vector(np.zeros(3)), np.zeros(3))

    def test_normalize_list_input(self):
        np.testing.assert_array_almost_equal(normalize_vector([0, -2, 0]), np.array([0.0, -1.0, 0.0]))

    def test_normalize_custom_epsilon(self):
        vector = np.array([1e-5, 1e-5])
        np.testing.assert_array_almost_equal(normalize_vector(vector, epsilon=1e-4), np.zeros(2))

class TestRotations(unittest.TestCase):

    def test_rotate_about_x_quarter_turn(self):
        # +Z goes to -Y under a +90 degree rotation about X
        rotated = rotate_about_x(np.array([0.0, 0.0, 1.0]), math.pi / 2)
        np.testing.assert_array_almost_equal(rotated, np.array([0.0, -1.0, 0.0]))

    def test_rotate_about_x_leaves_x_axis(self):
        rotated = rotate_about_x(np.array([2.0, 0.0, 0.0]), 1.234)
        np.testing.assert_array_almost_equal(rotated, np.array([2.0, 0.0, 0.0]))

    def test_rotate_about_z_quarter_turn(self):
        rotated = rotate_about_z(np.array([1.0, 0.0, 0.0]), math.pi / 2)
        np.testing.assert_array_almost_equal(rotated, np.array([0.0, 1.0, 0.0]))

    def test_rotation_of_point_array_preserves_norms(self):
        points = np.array([[1.0, 2.0, 3.0], [-4.0, 0.5, 2.0]])
        rotated = rotate_about_z(rotate_about_x(points, 0.7), -1.1)
        self.assertEqual(rotated.shape, (2, 3))
        np.testing.assert_array_almost_equal(np.linalg.norm(rotated, axis=1), np.linalg.norm(points, axis=1))

class TestSmoothstep(unittest.TestCase):

    def test_endpoints_and_midpoint(self):
        self.assertEqual(smoothstep(0.0), 0.0)
        self.assertEqual(smoothstep(1.0), 1.0)
        self.assertAlmostEqual(smoothstep(0.5), 0.5)

    def test_clamped_outside_unit_interval(self):
        self.assertEqual(smoothstep(-3.0), 0.0)
        self.assertEqual(smoothstep(7.0), 1.0)

    def test_monotonic(self):
        values = [smoothstep(x / 20.0) for x in range(21)]
        self.assertEqual(values, sorted(values))

if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
