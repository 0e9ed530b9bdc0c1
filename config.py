# config.py
import logging
import math

# Configure basic logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(module)s - %(message)s')

# Fundamental constants shared by the orbit engine
SECONDS_PER_HOUR = 3600.0
TWO_PI = 2.0 * math.pi
SOLAR_CONSTANT_W_M2 = 1361.0  # Flux at 1 AU from the Sun
STEFAN_BOLTZMANN = 5.67e-8  # W m^-2 K^-4
SUN_EFFECTIVE_TEMPERATURE_K = 5778.0
EARTH_ESCAPE_VELOCITY_KM_S = 11.2

class ConfigurationError(Exception):
    """Custom exception for simulation configuration errors.

    Raised by `SimulationConfig.validate()` and `SimulationConfig.validate_catalog()`
    when settings or catalog entries are invalid (for example a non-positive
    semi-major axis or an eccentricity outside [0, 1)). Surfaced once at startup
    or at hierarchy build time, never from a per-frame tick.
    """
    pass

class SimulationConfig:
    """Centralized, hierarchical configuration for the orrery simulation.

    Parameters are grouped into nested static classes (`Time`, `Kepler`, `Orbit`,
    `Spin`, `Moons`, `Camera`, `Labels`, `Trails`, `Star`, `Visualization`, `Monitoring`,
    `Debug`, `SolarSystem`). A module-level instance named `config` is created at
    import time and validated immediately, so a broken catalog is reported before
    any hierarchy is constructed.

    Only static settings live here. Runtime-mutable state (the time scale and the
    paused flag) is carried by `orbital_mechanics.SimulationClock` inside the
    simulation context.

    Example Usage:
        >>> from config import config
        >>> config.Orbit.DISPLAY_AU_SCALE
        20.0
    """

    # --- Time Configuration ---
    class Time:
        """Bounds and defaults for the global time scale.

        Attributes:
            DEFAULT_TIME_SCALE (float): Time scale applied to a fresh simulation clock.
            MIN_TIME_SCALE (float): Lower clamp applied on every set.
            MAX_TIME_SCALE (float): Upper clamp applied on every set.
        """
        DEFAULT_TIME_SCALE = 1.0
        MIN_TIME_SCALE = 0.001
        MAX_TIME_SCALE = 1.0

    # --- Kepler Solver Configuration ---
    class Kepler:
        """Newton-Raphson settings for Kepler's equation.

        Attributes:
            TOLERANCE (float): Step size below which the iteration is considered converged.
            MAX_ITERATIONS (int): Iteration cap; the best iterate is used when reached.
        """
        TOLERANCE = 1e-8
        MAX_ITERATIONS = 10

    # --- Orbit Configuration ---
    class Orbit:
        """Scaling and direction of planetary orbits.

        Attributes:
            DISPLAY_AU_SCALE (float): Simulation units per AU for planetary positions.
            ORBIT_LINE_SEGMENTS (int): Segments of a planetary orbit line.
            PLANET_ORBIT_DIRECTION (int): Sign applied to planetary mean motion.
            MOON_ORBIT_DIRECTION (int): Sign applied to prograde moon angular speed.
                Retrograde moons (negative orbital period) run opposite to it.
        """
        DISPLAY_AU_SCALE = 20.0
        ORBIT_LINE_SEGMENTS = 128
        PLANET_ORBIT_DIRECTION = -1
        MOON_ORBIT_DIRECTION = -1

    # --- Spin Configuration ---
    class Spin:
        """Axial rotation of bodies.

        Spin is advanced once per tick by
        `2*pi / (|P| * 3600) * sign(P) * time_scale * SPIN_ACCELERATION_FACTOR`.
        Literal rotation rates are imperceptible next to the accelerated orbits,
        so the factor decouples visible spin from physical timescales.

        Attributes:
            SPIN_ACCELERATION_FACTOR (float): Display multiplier on the physical spin rate.
            COUPLE_TO_TIME_SCALE (bool): If True the global time scale also slows spin.
        """
        SPIN_ACCELERATION_FACTOR = 200000.0
        COUPLE_TO_TIME_SCALE = True

    # --- Moon Configuration ---
    class Moons:
        """Simplified circular moon model.

        Attributes:
            TIME_CONVERSION_FACTOR (float): Simulation time units per Earth day of period.
            DISTANCE_SCALE (float): Simulation units per AU of moon distance.
            SIZE_FACTOR (float): Moon display size relative to (moon size * planet size).
            MIN_SIZE (float): Smallest moon display size.
            MIN_CLEARANCE_FACTOR (float): Moons sit at least planet size times this
                (plus the moon size) away from the planet centre.
            ORBIT_SEGMENTS (int): Segments of a moon orbit circle.
        """
        TIME_CONVERSION_FACTOR = 0.001
        DISTANCE_SCALE = 400.0
        SIZE_FACTOR = 0.175
        MIN_SIZE = 0.0025
        MIN_CLEARANCE_FACTOR = 1.1
        ORBIT_SEGMENTS = 64

    # --- Camera Configuration ---
    class Camera:
        """Camera defaults and follow distances.

        Attributes:
            DEFAULT_POSITION (Tuple[float, float, float]): Camera pose on reset.
            DEFAULT_TARGET (Tuple[float, float, float]): Orbit target on reset.
            DEFAULT_MIN_DISTANCE (float): Minimum zoom distance when nothing is followed.
            MAX_DISTANCE (float): Maximum zoom distance.
            FOLLOW_SIZE_FACTOR (float): Follow distance as a multiple of body size.
            FOLLOW_MIN_DISTANCE_FLOOR (float): Lower bound of the size-based follow distance.
            FOLLOW_DISTANCE_OVERRIDES (Dict[str, float]): Per-body minimum follow distance
                for close-orbit bodies, keyed by body key.
            FRAMING_SIZE_FACTOR (float): Camera distance on reframe, as a multiple of size.
            FRAMING_MIN_DISTANCE_FACTOR (float): Reframe distance is at least the min
                follow distance times this.
            DEFAULT_VIEW_DIRECTION (Tuple[float, float, float]): Offset direction used
                when the camera sits exactly on its target.
        """
        DEFAULT_POSITION = (0.0, 5.0, 15.0)
        DEFAULT_TARGET = (0.0, 0.0, 0.0)
        DEFAULT_MIN_DISTANCE = 2.0
        MAX_DISTANCE = 300.0
        FOLLOW_SIZE_FACTOR = 1.5
        FOLLOW_MIN_DISTANCE_FLOOR = 0.5
        FOLLOW_DISTANCE_OVERRIDES = {
            'mercury': 0.3,
            'mars': 0.3,
            'moon': 0.15,
            'phobos': 0.05,
            'deimos': 0.05,
        }
        FRAMING_SIZE_FACTOR = 6.0
        FRAMING_MIN_DISTANCE_FACTOR = 2.0
        DEFAULT_VIEW_DIRECTION = (0.0, 0.5, 1.0)

    # --- Label Configuration ---
    class Labels:
        """Label visibility during follow transitions and by camera distance.

        Attributes:
            TRANSITION_DELAY_SECONDS (float): Labels stay hidden this long after a follow starts.
            FADE_DURATION_SECONDS (float): Duration of the fade-in after the delay.
            FADE_START_DISTANCE (float): Camera distance where distance fading begins.
            MAX_DISTANCE (float): Camera distance beyond which labels are hidden.
        """
        TRANSITION_DELAY_SECONDS = 0.3
        FADE_DURATION_SECONDS = 0.5
        FADE_START_DISTANCE = 100.0
        MAX_DISTANCE = 150.0

    # --- Trail Configuration ---
    class Trails:
        MAX_TRAIL_POINTS = 100

    # --- Star Configuration ---
    class Star:
        """Central star parameters used by the temperature and habitable-zone models.

        Attributes:
            TEMPERATURE_K (float): Effective temperature.
            RADIUS_SOLAR (float): Radius relative to the Sun.
            MASS_SOLAR (float): Mass relative to the Sun (central mass for orbital speed).
            DEFAULT_ALBEDO (float): Bond albedo assumed for equilibrium temperatures.
            DISPLAY_SIZE (float): Display radius of the star.
        """
        TEMPERATURE_K = SUN_EFFECTIVE_TEMPERATURE_K
        RADIUS_SOLAR = 1.0
        MASS_SOLAR = 1.0
        DEFAULT_ALBEDO = 0.3
        DISPLAY_SIZE = 2.0

    # --- Visualization Configuration ---
    class Visualization:
        """Settings for the pygame demo driver.

        Attributes:
            SCREEN_WIDTH_PX (int): Window width.
            SCREEN_HEIGHT_PX (int): Window height.
            FPS (int): Target frames per second.
            PIXELS_PER_UNIT (float): Top-down projection scale at the default camera distance.
            MIN_BODY_RADIUS_PX (int): Smallest drawn body radius.
            ZOOM_STEP (float): Camera distance multiplier per zoom key press.
            TIME_SCALE_STEP (float): Time scale multiplier per speed key press.
            BACKGROUND_COLOR, ORBIT_COLOR, MOON_ORBIT_COLOR, LABEL_COLOR,
            SELECTION_COLOR, TRAIL_COLOR (Tuple[int, int, int]): RGB colors.
        """
        SCREEN_WIDTH_PX = 1400
        SCREEN_HEIGHT_PX = 900
        FPS = 60
        PIXELS_PER_UNIT = 12.0
        MIN_BODY_RADIUS_PX = 2
        ZOOM_STEP = 1.15
        TIME_SCALE_STEP = 2.0
        BACKGROUND_COLOR = (5, 5, 15)
        ORBIT_COLOR = (90, 90, 110)
        MOON_ORBIT_COLOR = (60, 60, 70)
        LABEL_COLOR = (230, 230, 230)
        SELECTION_COLOR = (255, 255, 0)
        TRAIL_COLOR = (120, 160, 220)

    # --- Monitoring Configuration ---
    class Monitoring:
        """Resource monitoring of the frame loop.

        Attributes:
            MEMORY_USAGE_WARN_MB (int): A warning is logged above this resident set size.
            MEMORY_CHECK_INTERVAL_FRAMES (int): Frames between memory checks.
        """
        MEMORY_USAGE_WARN_MB = 512
        MEMORY_CHECK_INTERVAL_FRAMES = 600

    # --- Debug Configuration ---
    class Debug:
        """Debugging toggles.

        Attributes:
            ORBITAL_MECHANICS (bool): Verbose logging from hierarchy builds and updates.
            KEPLER_SOLVER (bool): Log every non-converged Kepler solve.
            SELECTION (bool): Log ignored selection/follow events (stale references).
            CONFIG_VALIDATION (bool): Log a line when validation succeeds.
        """
        ORBITAL_MECHANICS = False
        KEPLER_SOLVER = False
        SELECTION = False
        CONFIG_VALIDATION = True

    # --- Solar System Catalog ---
    class SolarSystem:
        """Static body catalog.

        `SUN_DATA` describes the root star. `PLANET_DATA` is keyed by planet id; each
        entry carries orbital elements (AU, degrees, days, hours), physical data relative
        to Earth, an opaque `asset` reference that is passed through untouched, and an
        ordered `moons` list.

        Moon entries use `distance` in AU unless `distance_unit` is 'planet_radii'.
        Optional tuning keys: `distance_multiplier`, `size_multiplier`,
        `ecliptic_inclination` (degrees; orbit in the system plane instead of the
        planet's equatorial plane). Planets may carry `moon_distance_multiplier`.
        A negative moon `orbital_period` marks a retrograde orbit; a negative
        `rotation_period` marks retrograde spin.
        """
        SUN_DATA = {
            'key': 'sun', 'name': 'Sun', 'size': 109.2, 'mass': 333000.0,
            'temperature': SUN_EFFECTIVE_TEMPERATURE_K, 'color': (255, 255, 0), 'asset': 'sun.png',
        }

        PLANET_DATA = {
            'mercury': {
                'name': 'Mercury', 'size': 0.353, 'mass': 0.055,
                'distance': 0.387, 'periapsis': 0.307, 'apoapsis': 0.467,
                'eccentricity': 0.206, 'inclination': 7.0, 'axial_tilt': 0.034,
                'orbital_period': 87.97, 'rotation_period': 1407.6,
                'temperature': {'min': 100, 'max': 700, 'average': 440},
                'asset': 'mercury.png', 'color': (153, 153, 153),
                'has_atmosphere': False, 'has_rings': False,
                'moons': [],
            },
            'venus': {
                'name': 'Venus', 'size': 0.949, 'mass': 0.815,
                'distance': 0.723, 'periapsis': 0.718, 'apoapsis': 0.728,
                'eccentricity': 0.007, 'inclination': 3.4, 'axial_tilt': 177.4,
                'orbital_period': 224.7, 'rotation_period': -5832.5,
                'temperature': {'min': 735, 'max': 737, 'average': 736},
                'asset': 'venus.png', 'color': (255, 198, 73),
                'has_atmosphere': True, 'has_rings': False,
                'moons': [],
            },
            'earth': {
                'name': 'Earth', 'size': 1.0, 'mass': 1.0,
                'distance': 1.0, 'periapsis': 0.983, 'apoapsis': 1.017,
                'eccentricity': 0.017, 'inclination': 0.0, 'axial_tilt': 23.4,
                'orbital_period': 365.25, 'rotation_period': 24.0,
                'temperature': {'min': 184, 'max': 331, 'average': 288},
                'asset': 'earth.png', 'color': (107, 147, 214),
                'has_atmosphere': True, 'has_rings': False,
                'moon_distance_multiplier': 0.75,
                'moons': [
                    {'key': 'moon', 'name': 'Moon', 'size': 0.15, 'distance': 0.00257,
                     'orbital_period': 27.32, 'asset': 'moon.png', 'color': (192, 192, 192),
                     'ecliptic_inclination': 5.1},
                ],
            },
            'mars': {
                'name': 'Mars', 'size': 0.532, 'mass': 0.107,
                'distance': 1.524, 'periapsis': 1.381, 'apoapsis': 1.666,
                'eccentricity': 0.094, 'inclination': 1.9, 'axial_tilt': 25.2,
                'orbital_period': 686.98, 'rotation_period': 24.6,
                'temperature': {'min': 130, 'max': 308, 'average': 210},
                'asset': 'mars.png', 'color': (255, 107, 53),
                'has_atmosphere': True, 'has_rings': False,
                'moons': [
                    {'key': 'phobos', 'name': 'Phobos', 'size': 0.008, 'distance': 0.000063,
                     'orbital_period': 0.32, 'color': (139, 115, 85),
                     'size_multiplier': 0.08, 'distance_multiplier': 1.5},
                    {'key': 'deimos', 'name': 'Deimos', 'size': 0.005, 'distance': 0.000157,
                     'orbital_period': 1.26, 'color': (139, 115, 85),
                     'size_multiplier': 0.08, 'distance_multiplier': 2.5},
                ],
            },
            'jupiter': {
                'name': 'Jupiter', 'size': 11.21, 'mass': 317.8,
                'distance': 5.204, 'periapsis': 4.950, 'apoapsis': 5.458,
                'eccentricity': 0.049, 'inclination': 1.3, 'axial_tilt': 3.1,
                'orbital_period': 4332.59, 'rotation_period': 9.9,
                'temperature': {'min': 110, 'max': 20000, 'average': 165},
                'asset': 'jupiter.png', 'color': (216, 202, 157),
                'has_atmosphere': True, 'has_rings': False,
                'moon_distance_multiplier': 1.5,
                'moons': [
                    {'key': 'io', 'name': 'Io', 'size': 0.13, 'distance': 0.00282,
                     'orbital_period': 1.77, 'color': (255, 255, 153)},
                    {'key': 'europa', 'name': 'Europa', 'size': 0.11, 'distance': 0.00449,
                     'orbital_period': 3.55, 'color': (176, 224, 230)},
                    {'key': 'ganymede', 'name': 'Ganymede', 'size': 0.19, 'distance': 0.00716,
                     'orbital_period': 7.15, 'color': (139, 125, 107)},
                    {'key': 'callisto', 'name': 'Callisto', 'size': 0.16, 'distance': 0.01259,
                     'orbital_period': 16.69, 'color': (105, 105, 105)},
                ],
            },
            'saturn': {
                'name': 'Saturn', 'size': 9.45, 'mass': 95.2,
                'distance': 9.573, 'periapsis': 9.041, 'apoapsis': 10.124,
                'eccentricity': 0.057, 'inclination': 2.5, 'axial_tilt': 26.7,
                'orbital_period': 10759.22, 'rotation_period': 10.7,
                'temperature': {'min': 82, 'max': 11700, 'average': 134},
                'asset': 'saturn.png', 'color': (250, 213, 165),
                'has_atmosphere': True, 'has_rings': True,
                'moons': [
                    {'key': 'enceladus', 'name': 'Enceladus', 'size': 0.05, 'distance': 2.8,
                     'distance_unit': 'planet_radii', 'orbital_period': 1.37, 'color': (240, 248, 255)},
                    {'key': 'tethys', 'name': 'Tethys', 'size': 0.08, 'distance': 3.2,
                     'distance_unit': 'planet_radii', 'orbital_period': 1.89, 'color': (230, 230, 250)},
                    {'key': 'dione', 'name': 'Dione', 'size': 0.08, 'distance': 3.8,
                     'distance_unit': 'planet_radii', 'orbital_period': 2.74, 'color': (220, 220, 220)},
                    {'key': 'rhea', 'name': 'Rhea', 'size': 0.11, 'distance': 4.5,
                     'distance_unit': 'planet_radii', 'orbital_period': 4.52, 'color': (192, 192, 192)},
                    {'key': 'titan', 'name': 'Titan', 'size': 0.18, 'distance': 8.5,
                     'distance_unit': 'planet_radii', 'orbital_period': 15.95, 'color': (222, 184, 135)},
                    {'key': 'iapetus', 'name': 'Iapetus', 'size': 0.10, 'distance': 15.0,
                     'distance_unit': 'planet_radii', 'orbital_period': 79.33, 'color': (139, 115, 85)},
                ],
            },
            'uranus': {
                'name': 'Uranus', 'size': 4.01, 'mass': 14.5,
                'distance': 19.165, 'periapsis': 18.324, 'apoapsis': 20.006,
                'eccentricity': 0.046, 'inclination': 0.8, 'axial_tilt': 97.8,
                'orbital_period': 30688.5, 'rotation_period': -17.2,
                'temperature': {'min': 49, 'max': 5000, 'average': 59},
                'asset': 'uranus.png', 'color': (79, 208, 231),
                'has_atmosphere': True, 'has_rings': True,
                'moons': [
                    {'key': 'miranda', 'name': 'Miranda', 'size': 0.03, 'distance': 0.000866,
                     'orbital_period': 1.41, 'color': (139, 125, 107)},
                    {'key': 'ariel', 'name': 'Ariel', 'size': 0.07, 'distance': 0.001278,
                     'orbital_period': 2.52, 'color': (192, 192, 192)},
                ],
            },
            'neptune': {
                'name': 'Neptune', 'size': 3.88, 'mass': 17.1,
                'distance': 30.178, 'periapsis': 29.810, 'apoapsis': 30.546,
                'eccentricity': 0.009, 'inclination': 1.8, 'axial_tilt': 28.3,
                'orbital_period': 60182.0, 'rotation_period': 16.1,
                'temperature': {'min': 55, 'max': 5400, 'average': 72},
                'asset': 'neptune.png', 'color': (107, 182, 255),
                'has_atmosphere': True, 'has_rings': True,
                'moons': [
                    {'key': 'triton', 'name': 'Triton', 'size': 0.12, 'distance': 0.00237,
                     'orbital_period': -5.88, 'color': (240, 248, 255)},
                ],
            },
        }

    REQUIRED_PLANET_FIELDS = ('name', 'size', 'mass', 'distance', 'eccentricity', 'inclination',
                              'axial_tilt', 'orbital_period', 'rotation_period')
    REQUIRED_MOON_FIELDS = ('key', 'name', 'size', 'distance', 'orbital_period')
    MOON_DISTANCE_UNITS = ('au', 'planet_radii')

    def __init__(self):
        """Initializes the configuration and validates it.

        Raises:
            ConfigurationError: If any setting or catalog entry is invalid.
        """
        self.validate()

    @classmethod
    def validate_catalog(cls, sun_data, planet_data):
        """Validates a body catalog before any body is constructed.

        Checks, for the star and every planet and moon: required fields are present,
        sizes are positive, masses non-negative, semi-major axes positive,
        eccentricities in [0, 1), inclinations in [0, 180] degrees, periods non-zero,
        moon distance units known, and body keys unique across the whole catalog.

        Args:
            sun_data (dict): Root star entry (see `SolarSystem.SUN_DATA`).
            planet_data (dict): Planet entries keyed by id (see `SolarSystem.PLANET_DATA`).

        Raises:
            ConfigurationError: Naming the first offending body and field.
        """
        if not isinstance(sun_data, dict) or 'name' not in sun_data:
            raise ConfigurationError("Star entry is missing or has no 'name'.")
        if sun_data.get('size', 0.0) <= 0:
            raise ConfigurationError(f"Star '{sun_data['name']}' must have a positive size.")
        if not isinstance(planet_data, dict) or not planet_data:
            raise ConfigurationError("Planet catalog must be a non-empty mapping keyed by planet id.")

        seen_keys = {sun_data.get('key', 'sun')}
        for key, data in planet_data.items():
            missing = [f for f in cls.REQUIRED_PLANET_FIELDS if f not in data]
            if missing:
                raise ConfigurationError(f"Planet '{key}' is missing required fields: {missing}.")
            if key in seen_keys:
                raise ConfigurationError(f"Duplicate body key '{key}' in catalog.")
            seen_keys.add(key)

            if data['size'] <= 0:
                raise ConfigurationError(f"Size of planet '{key}' must be positive.")
            if data['mass'] < 0:
                raise ConfigurationError(f"Mass of planet '{key}' cannot be negative.")
            if data['distance'] <= 0:
                raise ConfigurationError(f"Semi-major axis of planet '{key}' ({data['distance']}) must be positive.")
            if not (0.0 <= data['eccentricity'] < 1.0):
                raise ConfigurationError(f"Eccentricity of planet '{key}' ({data['eccentricity']}) must be >= 0 and < 1.")
            if not (0.0 <= data['inclination'] <= 180.0):
                raise ConfigurationError(f"Inclination of planet '{key}' ({data['inclination']}) must be between 0 and 180 degrees inclusive.")
            if data['orbital_period'] <= 0:
                raise ConfigurationError(f"Orbital period of planet '{key}' must be positive.")
            if data['rotation_period'] == 0:
                raise ConfigurationError(f"Rotation period of planet '{key}' cannot be zero.")
            if data.get('moon_distance_multiplier', 1.0) <= 0:
                raise ConfigurationError(f"moon_distance_multiplier of planet '{key}' must be positive.")

            for moon in data.get('moons', []):
                missing = [f for f in cls.REQUIRED_MOON_FIELDS if f not in moon]
                if missing:
                    raise ConfigurationError(f"A moon of '{key}' is missing required fields: {missing}.")
                moon_key = moon['key']
                if moon_key in seen_keys:
                    raise ConfigurationError(f"Duplicate body key '{moon_key}' in catalog.")
                seen_keys.add(moon_key)
                if moon['size'] <= 0:
                    raise ConfigurationError(f"Size of moon '{moon_key}' must be positive.")
                if moon['distance'] <= 0:
                    raise ConfigurationError(f"Distance of moon '{moon_key}' ({moon['distance']}) must be positive.")
                if moon['orbital_period'] == 0:
                    raise ConfigurationError(f"Orbital period of moon '{moon_key}' cannot be zero.")
                if moon.get('distance_unit', 'au') not in cls.MOON_DISTANCE_UNITS:
                    raise ConfigurationError(
                        f"Moon '{moon_key}' has unknown distance_unit '{moon.get('distance_unit')}'. "
                        f"Expected one of {cls.MOON_DISTANCE_UNITS}."
                    )
                for multiplier in ('distance_multiplier', 'size_multiplier'):
                    if moon.get(multiplier, 1.0) <= 0:
                        raise ConfigurationError(f"{multiplier} of moon '{moon_key}' must be positive.")

    def validate(self):
        """Performs validation of all configuration settings.

        -   **Time**: 0 < MIN_TIME_SCALE <= DEFAULT_TIME_SCALE <= MAX_TIME_SCALE.
        -   **Kepler**: positive tolerance and iteration cap.
        -   **Orbit/Moons**: positive scales, directions of +1 or -1, enough segments.
        -   **Camera/Labels**: positive distances and durations, ordered fade distances.
        -   **SolarSystem**: the full catalog via `validate_catalog`.

        Raises:
            ConfigurationError: If any configuration setting is found to be invalid.
        """
        if not (0 < self.Time.MIN_TIME_SCALE <= self.Time.DEFAULT_TIME_SCALE <= self.Time.MAX_TIME_SCALE):
            raise ConfigurationError(
                f"Time scale bounds invalid: MIN ({self.Time.MIN_TIME_SCALE}) <= DEFAULT "
                f"({self.Time.DEFAULT_TIME_SCALE}) <= MAX ({self.Time.MAX_TIME_SCALE}) with MIN > 0 is required."
            )

        if self.Kepler.TOLERANCE <= 0:
            raise ConfigurationError("Kepler.TOLERANCE must be positive.")
        if self.Kepler.MAX_ITERATIONS <= 0:
            raise ConfigurationError("Kepler.MAX_ITERATIONS must be positive.")

        if self.Orbit.DISPLAY_AU_SCALE <= 0:
            raise ConfigurationError("Orbit.DISPLAY_AU_SCALE must be positive.")
        if self.Orbit.ORBIT_LINE_SEGMENTS < 3 or self.Moons.ORBIT_SEGMENTS < 3:
            raise ConfigurationError("Orbit line segment counts must be at least 3.")
        if self.Orbit.PLANET_ORBIT_DIRECTION not in (1, -1) or self.Orbit.MOON_ORBIT_DIRECTION not in (1, -1):
            raise ConfigurationError("Orbit directions must be +1 or -1.")

        if self.Spin.SPIN_ACCELERATION_FACTOR < 0:
            raise ConfigurationError("Spin.SPIN_ACCELERATION_FACTOR cannot be negative.")

        if self.Moons.TIME_CONVERSION_FACTOR <= 0 or self.Moons.DISTANCE_SCALE <= 0:
            raise ConfigurationError("Moons.TIME_CONVERSION_FACTOR and Moons.DISTANCE_SCALE must be positive.")
        if self.Moons.SIZE_FACTOR <= 0 or self.Moons.MIN_SIZE <= 0:
            raise ConfigurationError("Moons.SIZE_FACTOR and Moons.MIN_SIZE must be positive.")

        if not (0 < self.Camera.DEFAULT_MIN_DISTANCE < self.Camera.MAX_DISTANCE):
            raise ConfigurationError("Camera distances must satisfy 0 < DEFAULT_MIN_DISTANCE < MAX_DISTANCE.")
        if self.Camera.FOLLOW_SIZE_FACTOR <= 0 or self.Camera.FOLLOW_MIN_DISTANCE_FLOOR <= 0:
            raise ConfigurationError("Camera follow distance factors must be positive.")
        if any(d <= 0 for d in self.Camera.FOLLOW_DISTANCE_OVERRIDES.values()):
            raise ConfigurationError("Camera.FOLLOW_DISTANCE_OVERRIDES values must be positive.")

        if self.Labels.TRANSITION_DELAY_SECONDS < 0 or self.Labels.FADE_DURATION_SECONDS <= 0:
            raise ConfigurationError("Label transition delay must be >= 0 and fade duration > 0.")
        if not (0 < self.Labels.FADE_START_DISTANCE < self.Labels.MAX_DISTANCE):
            raise ConfigurationError(
                f"Label fade distances must satisfy 0 < FADE_START_DISTANCE ({self.Labels.FADE_START_DISTANCE}) "
                f"< MAX_DISTANCE ({self.Labels.MAX_DISTANCE})."
            )

        if self.Trails.MAX_TRAIL_POINTS <= 0:
            raise ConfigurationError("Trails.MAX_TRAIL_POINTS must be positive.")

        if self.Star.TEMPERATURE_K <= 0 or self.Star.RADIUS_SOLAR <= 0 or self.Star.MASS_SOLAR <= 0:
            raise ConfigurationError("Star temperature, radius and mass must be positive.")
        if not (0.0 <= self.Star.DEFAULT_ALBEDO < 1.0):
            raise ConfigurationError("Star.DEFAULT_ALBEDO must be in [0, 1).")

        if self.Visualization.SCREEN_WIDTH_PX <= 0 or self.Visualization.SCREEN_HEIGHT_PX <= 0:
            raise ConfigurationError("Visualization screen dimensions must be positive.")
        if self.Visualization.FPS <= 0:
            raise ConfigurationError("Visualization.FPS must be positive.")
        if self.Monitoring.MEMORY_CHECK_INTERVAL_FRAMES <= 0:
            raise ConfigurationError("Monitoring.MEMORY_CHECK_INTERVAL_FRAMES must be positive.")

        self.validate_catalog(self.SolarSystem.SUN_DATA, self.SolarSystem.PLANET_DATA)

        if self.Debug.CONFIG_VALIDATION:
            logging.info("Configuration validated successfully.")


# --- Instantiate the configuration ---
# e.g., from config import config
try:
    config = SimulationConfig()
except ConfigurationError as e:
    logging.error(f"FATAL CONFIGURATION ERROR: {e}", exc_info=True)
    raise
