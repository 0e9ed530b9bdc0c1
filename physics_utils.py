# physics_utils.py

import numpy as np

class PhysicsError(Exception):
    """Custom exception for physics-related errors, including invalid orbital elements."""
    pass

def safe_divide(numerator, denominator, epsilon=1e-12, default_on_zero_denom=0.0):
    """
    Divides two scalars, returning a fallback when the denominator is effectively zero.

    Args:
        numerator (float): The number to be divided.
        denominator (float): The number to divide by.
        epsilon (float): Threshold below which the denominator is considered zero.
        default_on_zero_denom (float): Value returned when the denominator is effectively zero.
                                       float('inf') yields a signed infinity following the
                                       numerator (0/0 stays 0.0).

    Returns:
        float: The quotient, or the fallback when the denominator is near zero.
    """
    if abs(denominator) < epsilon:
        if default_on_zero_denom in (float('inf'), float('-inf')):
            if abs(numerator) < epsilon:
                return 0.0
            return float('inf') if numerator > 0 else float('-inf')
        return default_on_zero_denom
    return numerator / denominator

def normalize_vector(vector, epsilon=1e-12):
    """
    Normalizes a vector to unit length.

    Returns a zero vector of the same shape if the magnitude is below `epsilon`.
    """
    if not isinstance(vector, np.ndarray):
        vector = np.array(vector, dtype=float)

    norm = np.linalg.norm(vector)
    if norm < epsilon:
        return np.zeros_like(vector, dtype=float)
    return vector / norm

def rotate_about_x(vector, angle_rad):
    """Rotates a 3D vector (or an (N, 3) array of points) about the +X axis."""
    c, s = np.cos(angle_rad), np.sin(angle_rad)
    rotation = np.array([[1.0, 0.0, 0.0],
                         [0.0, c, -s],
                         [0.0, s, c]])
    return np.asarray(vector, dtype=np.float64) @ rotation.T

def rotate_about_z(vector, angle_rad):
    """Rotates a 3D vector (or an (N, 3) array of points) about the +Z axis."""
    c, s = np.cos(angle_rad), np.sin(angle_rad)
    rotation = np.array([[c, -s, 0.0],
                         [s, c, 0.0],
                         [0.0, 0.0, 1.0]])
    return np.asarray(vector, dtype=np.float64) @ rotation.T

def smoothstep(x):
    """Hermite ease on [0, 1]: 0 at 0, 1 at 1, monotonic in between. Input is clamped."""
    x = min(1.0, max(0.0, float(x)))
    return x * x * (3.0 - 2.0 * x)
