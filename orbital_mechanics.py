# orbital_mechanics.py
import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from config import config, TWO_PI, SOLAR_CONSTANT_W_M2, STEFAN_BOLTZMANN, \
    SUN_EFFECTIVE_TEMPERATURE_K, EARTH_ESCAPE_VELOCITY_KM_S
from physics_utils import PhysicsError, safe_divide, rotate_about_x


@dataclass(frozen=True)
class OrbitalElements:
    """Keplerian elements of a body around its parent.

    Attributes:
        semi_major_axis_au (float): Semi-major axis in AU, must be > 0.
        eccentricity (float): Must satisfy 0 <= e < 1.
        inclination_deg (float): Tilt of the orbital plane about the reference X axis.
        start_angle_rad (float): Mean anomaly at t = 0.
        axial_tilt_deg (float): Spin-axis tilt, also the frame moons orbit in.
        rotation_period_hours (float): Sidereal day; a negative value is retrograde spin.
    """
    semi_major_axis_au: float
    eccentricity: float = 0.0
    inclination_deg: float = 0.0
    start_angle_rad: float = 0.0
    axial_tilt_deg: float = 0.0
    rotation_period_hours: float = 24.0

    def __post_init__(self):
        if not self.semi_major_axis_au > 0:
            raise PhysicsError(f"Semi-major axis must be positive, got {self.semi_major_axis_au}.")
        if not (0.0 <= self.eccentricity < 1.0):
            raise PhysicsError(f"Eccentricity e={self.eccentricity} is out of bounds [0, 1).")

    @property
    def periapsis_au(self) -> float:
        return self.semi_major_axis_au * (1.0 - self.eccentricity)

    @property
    def apoapsis_au(self) -> float:
        return self.semi_major_axis_au * (1.0 + self.eccentricity)


@dataclass(frozen=True)
class OrbitLine:
    """Closed orbit polyline. `points` is a read-only (segments + 1, 3) array."""
    points: np.ndarray
    semi_major_axis: float
    eccentricity: float
    inclination_deg: float = 0.0

    @property
    def segments(self) -> int:
        return len(self.points) - 1


class SimulationClock:
    """Global time-scale and pause state shared by every body of one simulation.

    The time scale is clamped silently into
    [config.Time.MIN_TIME_SCALE, config.Time.MAX_TIME_SCALE] on every set.
    """

    def __init__(self, time_scale: Optional[float] = None, paused: bool = False):
        self.time_scale = config.Time.DEFAULT_TIME_SCALE if time_scale is None else time_scale
        self.paused = paused

    @property
    def time_scale(self) -> float:
        return self._time_scale

    @time_scale.setter
    def time_scale(self, value: float):
        self._time_scale = min(config.Time.MAX_TIME_SCALE, max(config.Time.MIN_TIME_SCALE, float(value)))


class KeplerSolver:
    """Newton-Raphson solver for Kepler's equation M = E - e*sin(E).

    Seeded at E0 = M and stopped once a step is smaller than `tolerance`. If the
    iteration cap is reached first, the last iterate is returned and
    `non_convergence_count` is incremented; the solver never raises for
    0 <= e < 1.
    """

    def __init__(self, tolerance: Optional[float] = None, max_iterations: Optional[int] = None):
        self.tolerance = config.Kepler.TOLERANCE if tolerance is None else tolerance
        self.max_iterations = config.Kepler.MAX_ITERATIONS if max_iterations is None else max_iterations
        self.non_convergence_count = 0

    def solve(self, mean_anomaly: float, eccentricity: float) -> float:
        """Returns the eccentric anomaly E (radians) for mean anomaly M and eccentricity e.

        Raises:
            PhysicsError: If eccentricity is outside [0, 1).
        """
        if not (0.0 <= eccentricity < 1.0):
            raise PhysicsError(f"Eccentricity e={eccentricity} is out of bounds [0, 1) for Kepler's equation solver.")

        E_rad = mean_anomaly
        for _ in range(self.max_iterations):
            f_E = E_rad - eccentricity * math.sin(E_rad) - mean_anomaly
            f_prime_E = 1.0 - eccentricity * math.cos(E_rad)  # >= 1 - e > 0
            delta_E = f_E / f_prime_E
            E_rad -= delta_E
            if abs(delta_E) < self.tolerance:
                return E_rad

        self.non_convergence_count += 1
        if config.Debug.KEPLER_SOLVER:
            residual = E_rad - eccentricity * math.sin(E_rad) - mean_anomaly
            logging.debug(f"Kepler solver did not converge after {self.max_iterations} iterations "
                          f"for M={mean_anomaly}, e={eccentricity}. Last E={E_rad}, residual={residual}")
        return E_rad


class OrbitalMechanics:
    """Analytic two-body orbit engine.

    Bodies never perturb one another: every position is a closed-form function of
    the body's own elements and its accumulated simulation time. The only state is
    the Kepler solver's diagnostic counter and the shared `SimulationClock`.
    """

    def __init__(self, solver: Optional[KeplerSolver] = None, clock: Optional[SimulationClock] = None):
        self.solver = solver if solver is not None else KeplerSolver()
        self.clock = clock if clock is not None else SimulationClock()

    # --- Time scale ---
    @property
    def time_scale(self) -> float:
        return self.clock.time_scale

    def set_time_scale(self, scale: float) -> float:
        """Sets the shared time scale, clamped silently. Returns the value actually stored."""
        self.clock.time_scale = scale
        return self.clock.time_scale

    # --- Kepler orbits ---
    @staticmethod
    def orbital_speed(semi_major_axis_au: float, central_mass: float = 1.0) -> float:
        """Mean motion in radians per simulation time unit: 2*pi / sqrt(a^3 / M).

        With `central_mass` in solar masses, a 1 AU orbit completes in one time unit.

        Raises:
            PhysicsError: If a <= 0 or M <= 0.
        """
        if semi_major_axis_au <= 0:
            raise PhysicsError(f"Semi-major axis must be positive, got {semi_major_axis_au}.")
        if central_mass <= 0:
            raise PhysicsError(f"Central mass must be positive, got {central_mass}.")
        return TWO_PI / math.sqrt(semi_major_axis_au ** 3 / central_mass)

    def orbital_position(self, elements: OrbitalElements, t: float, direction: int = 1,
                         central_mass: float = 1.0, distance_scale: float = 1.0) -> np.ndarray:
        """
        Position of a body on its Keplerian ellipse at simulation time `t`.

        The focus sits at the origin, so at t = 0 with a zero start angle the body is
        at periapsis. The planar orbit lies in the XZ plane and is rotated about the
        X axis by the inclination.

        Args:
            elements (OrbitalElements): Orbit of the body.
            t (float): Accumulated simulation time.
            direction (int): +1 or -1, sign applied to the mean motion.
            central_mass (float): Mass of the focus body in solar masses.
            distance_scale (float): Simulation units per AU of the returned vector.

        Returns:
            np.ndarray: 3-vector [x, y, z].
        """
        a = elements.semi_major_axis_au
        e = elements.eccentricity
        speed = self.orbital_speed(a, central_mass) * direction

        mean_anomaly = (speed * t + elements.start_angle_rad) % TWO_PI
        E_rad = self.solver.solve(mean_anomaly, e)

        true_anomaly = 2.0 * math.atan2(math.sqrt(1.0 + e) * math.sin(E_rad / 2.0),
                                        math.sqrt(1.0 - e) * math.cos(E_rad / 2.0))
        radius = a * (1.0 - e * math.cos(E_rad)) * distance_scale

        position = np.array([radius * math.cos(true_anomaly), 0.0, radius * math.sin(true_anomaly)], dtype=np.float64)
        if elements.inclination_deg != 0:
            position = rotate_about_x(position, math.radians(elements.inclination_deg))
        return position

    @staticmethod
    def orbit_line_points(semi_major_axis: float, eccentricity: float, inclination_deg: float = 0.0,
                          segments: Optional[int] = None) -> np.ndarray:
        """
        Samples a closed orbit polyline uniformly in true anomaly.

        The shape is exact but the spacing is not uniform in time. The last point is
        the first point repeated, so the line closes exactly.

        Returns:
            np.ndarray: Read-only array of shape (segments + 1, 3).
        """
        if segments is None:
            segments = config.Orbit.ORBIT_LINE_SEGMENTS
        if segments < 3:
            raise PhysicsError(f"An orbit line needs at least 3 segments, got {segments}.")
        if semi_major_axis <= 0 or not (0.0 <= eccentricity < 1.0):
            raise PhysicsError(f"Invalid orbit shape a={semi_major_axis}, e={eccentricity}.")

        theta = np.linspace(0.0, TWO_PI, segments + 1)
        radius = semi_major_axis * (1.0 - eccentricity ** 2) / (1.0 + eccentricity * np.cos(theta))
        points = np.column_stack((radius * np.cos(theta), np.zeros_like(theta), radius * np.sin(theta)))
        if inclination_deg != 0:
            points = rotate_about_x(points, math.radians(inclination_deg))
        points[-1] = points[0]
        points.setflags(write=False)
        return points

    def create_orbit_line(self, semi_major_axis: float, eccentricity: float, inclination_deg: float = 0.0,
                          segments: Optional[int] = None) -> OrbitLine:
        points = self.orbit_line_points(semi_major_axis, eccentricity, inclination_deg, segments)
        return OrbitLine(points=points, semi_major_axis=semi_major_axis,
                         eccentricity=eccentricity, inclination_deg=inclination_deg)

    # --- Physical properties ---
    @staticmethod
    def planet_temperature(distance_au: float, star_temperature_k: float = SUN_EFFECTIVE_TEMPERATURE_K,
                           star_radius: float = 1.0, albedo: float = 0.3) -> float:
        """
        Equilibrium temperature (Kelvin) of a fast-rotating body with no atmosphere.

        flux = 1361 * R^2 / d^2; effective flux = flux * (1 - albedo) / 4;
        T = (effective flux / sigma)^0.25. The solar constant already fixes the
        star's output, so `star_temperature_k` does not enter the result.
        """
        if distance_au <= 0:
            raise PhysicsError(f"Distance from star must be positive, got {distance_au}.")
        flux = SOLAR_CONSTANT_W_M2 * star_radius ** 2 / distance_au ** 2
        effective_flux = flux * (1.0 - albedo) / 4.0
        return (effective_flux / STEFAN_BOLTZMANN) ** 0.25

    @staticmethod
    def kelvin_to_celsius(temperature_k: float) -> float:
        return temperature_k - 273.15

    @staticmethod
    def is_in_habitable_zone(distance_au: float, star_mass: float = 1.0) -> bool:
        """True if `distance_au` lies within [0.95*sqrt(M), 1.37*sqrt(M)] (inclusive)."""
        root_mass = math.sqrt(star_mass)
        return 0.95 * root_mass <= distance_au <= 1.37 * root_mass

    @staticmethod
    def escape_velocity(mass: float, radius: float) -> float:
        """Escape velocity in km/s from mass and radius relative to Earth. 0.0 for radius <= 0."""
        if radius <= 0:
            return 0.0
        if mass < 0:
            raise PhysicsError(f"Mass cannot be negative, got {mass}.")
        return EARTH_ESCAPE_VELOCITY_KM_S * math.sqrt(mass / radius)

    @staticmethod
    def tidal_force(moon_mass: float, planet_size: float, distance: float) -> float:
        """Relative tidal strength: moon_mass * planet_size / distance^3."""
        return safe_divide(moon_mass * planet_size, distance ** 3)

    # --- Unit conversions ---
    @staticmethod
    def au_to_simulation_units(au: float, scale: float = 10.0) -> float:
        return au * scale

    @staticmethod
    def days_to_simulation_time(days: float, scale: float = 0.001) -> float:
        return days * scale
