# solarsystem.py
import logging
import math
from collections import deque
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Deque, Dict, List, Optional, Tuple

import numpy as np

from config import config, SimulationConfig, SECONDS_PER_HOUR, TWO_PI
from orbital_mechanics import OrbitalMechanics, OrbitalElements, OrbitLine
from physics_utils import rotate_about_z, smoothstep

STAR = 'star'
PLANET = 'planet'
MOON = 'moon'


@dataclass(frozen=True)
class BodyHandle:
    """Arena address of a body. Handles from an earlier build generation resolve to nothing."""
    generation: int
    index: int


@dataclass
class DisplayOptions:
    """Options that shape a hierarchy build.

    Attributes:
        realistic_scale (bool): Size bodies proportionally instead of the clamped display sizes.
        size_scale (float): Global multiplier on body display sizes.
        moons_enabled (bool): Whether moons take part in updates and output.
        seed (Optional[int]): Seed for moon start angles; None draws fresh entropy.
    """
    realistic_scale: bool = False
    size_scale: float = 1.0
    moons_enabled: bool = True
    seed: Optional[int] = None


@dataclass
class BodyClock:
    accumulated_time: float = 0.0
    last_tick_time: float = 0.0
    initialized: bool = False


@dataclass
class BodyTransform:
    handle: BodyHandle
    key: str
    position: np.ndarray
    rotation: np.ndarray  # Euler angles (x, y, z); y is spin, z is axial tilt
    scale: float


@dataclass
class BodyInfo:
    """Display-panel snapshot covering stars, planets and moons.

    Orbital and climate fields are None where they do not apply to the body kind.
    """
    key: str
    name: str
    kind: str
    size: float
    mass: float
    asset: Any = None
    parent_name: Optional[str] = None
    distance_au: Optional[float] = None
    current_distance_au: Optional[float] = None
    periapsis_au: Optional[float] = None
    apoapsis_au: Optional[float] = None
    eccentricity: Optional[float] = None
    inclination_deg: Optional[float] = None
    axial_tilt_deg: Optional[float] = None
    orbital_period_days: Optional[float] = None
    rotation_period_hours: Optional[float] = None
    temperature_k: Optional[float] = None
    temperature_c: Optional[float] = None
    average_temperature_k: Optional[float] = None
    temperature_range: Optional[str] = None
    in_habitable_zone: Optional[bool] = None
    escape_velocity_km_s: Optional[float] = None
    has_atmosphere: bool = False
    has_rings: bool = False
    moons: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CelestialBody:
    handle: BodyHandle
    key: str
    name: str
    kind: str
    data: Dict[str, Any]  # Catalog entry this body was built from
    display_size: float
    mass: float
    elements: Optional[OrbitalElements] = None
    parent: Optional[BodyHandle] = None
    children: List[BodyHandle] = field(default_factory=list)
    clock: BodyClock = field(default_factory=BodyClock)
    asset: Any = None
    color: Tuple[int, int, int] = (255, 255, 255)

    # State in simulation units
    local_position: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    world_position: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    rotation_angle: float = 0.0
    current_distance_au: float = 0.0
    temperature_k: float = 0.0

    # Moon circular-orbit state
    orbit_radius: float = 0.0
    orbit_angle: float = 0.0
    angular_speed: float = 0.0  # Signed, radians per simulation time unit
    frame_tilt_deg: float = 0.0
    orbit_line: Optional[OrbitLine] = None

    is_selected: bool = False
    is_hovered: bool = False
    show_orbit: bool = True
    show_label: bool = True
    show_trail: bool = False
    enabled: bool = True

    trail: Deque[np.ndarray] = field(default_factory=deque)
    label_elapsed: Optional[float] = None  # Seconds since the last label transition began
    label_opacity: float = 1.0

    def __post_init__(self):
        if not isinstance(self.local_position, np.ndarray):
            self.local_position = np.array(self.local_position, dtype=np.float64)
        if not isinstance(self.world_position, np.ndarray):
            self.world_position = np.array(self.world_position, dtype=np.float64)
        self.trail = deque(self.trail, maxlen=config.Trails.MAX_TRAIL_POINTS)

    def add_to_trail(self, position: np.ndarray):
        """Adds a position to the trail; the oldest point drops off past MAX_TRAIL_POINTS."""
        self.trail.append(position.copy())


class SolarSystem:
    """
    Arena of the star, its planets and their moons.

    Bodies live in a flat list addressed by `BodyHandle`. A planet owns the ordered
    handles of its moons; a moon keeps a non-owning handle back to its planet.
    Rebuilding replaces the arena wholesale and bumps the generation, so handles
    from before the rebuild stop resolving.
    """

    def __init__(self, mechanics: Optional[OrbitalMechanics] = None):
        self.mechanics = mechanics if mechanics is not None else OrbitalMechanics()
        self.generation = 0
        self.options = DisplayOptions()
        self._bodies: List[CelestialBody] = []
        self._star: Optional[BodyHandle] = None
        self._sun_data: Optional[Dict[str, Any]] = None
        self._planet_data: Optional[Dict[str, Dict[str, Any]]] = None
        self.show_orbits = True
        self.show_labels = True
        self.show_trails = False

    # --- Construction ---
    def build(self, sun_data: Optional[Dict[str, Any]] = None,
              planet_data: Optional[Dict[str, Dict[str, Any]]] = None,
              options: Optional[DisplayOptions] = None):
        """
        Validates the catalog and builds the hierarchy from it.

        Nothing is constructed when validation fails.

        Raises:
            ConfigurationError: If the catalog is invalid.
        """
        sun_data = sun_data if sun_data is not None else config.SolarSystem.SUN_DATA
        planet_data = planet_data if planet_data is not None else config.SolarSystem.PLANET_DATA
        SimulationConfig.validate_catalog(sun_data, planet_data)

        self._sun_data = sun_data
        self._planet_data = planet_data
        self.options = options if options is not None else DisplayOptions()
        self.generation += 1
        self._bodies = []

        rng = np.random.default_rng(self.options.seed)
        self._star = self._add_body(key=sun_data.get('key', 'sun'), name=sun_data['name'], kind=STAR,
                                    data=sun_data, display_size=config.Star.DISPLAY_SIZE,
                                    mass=sun_data.get('mass', 0.0))
        for key, data in planet_data.items():
            planet_handle = self._build_planet(key, data)
            for moon_data in data.get('moons', []):
                self._build_moon(planet_handle, moon_data, rng)

        if config.Debug.ORBITAL_MECHANICS:
            logging.info(f"Built solar system generation {self.generation}: {len(self._bodies)} bodies "
                         f"(realistic_scale={self.options.realistic_scale}, moons_enabled={self.options.moons_enabled}).")

    def rebuild(self, options: Optional[DisplayOptions] = None):
        """Tears down and rebuilds the hierarchy from the last catalog. Orbital phase is discarded."""
        if self._sun_data is None:
            raise RuntimeError("SolarSystem.rebuild() called before build().")
        self.build(self._sun_data, self._planet_data, options if options is not None else self.options)

    def calculate_display_size(self, size: float) -> float:
        scale = self.options.size_scale
        if self.options.realistic_scale:
            return size * 0.05 * scale
        return min(max(0.05, size * 0.1) * scale, 1.0)

    def _add_body(self, **kwargs) -> BodyHandle:
        handle = BodyHandle(self.generation, len(self._bodies))
        body = CelestialBody(handle=handle, asset=kwargs['data'].get('asset'),
                             color=tuple(kwargs['data'].get('color', (255, 255, 255))), **kwargs)
        body.show_orbit = self.show_orbits
        body.show_label = self.show_labels
        body.show_trail = self.show_trails
        self._bodies.append(body)
        return handle

    def _build_planet(self, key: str, data: Dict[str, Any]) -> BodyHandle:
        elements = OrbitalElements(
            semi_major_axis_au=data['distance'],
            eccentricity=data['eccentricity'],
            inclination_deg=data['inclination'],
            start_angle_rad=0.0,
            axial_tilt_deg=data['axial_tilt'],
            rotation_period_hours=data['rotation_period'],
        )
        handle = self._add_body(key=key, name=data['name'], kind=PLANET, data=data,
                                display_size=self.calculate_display_size(data['size']),
                                mass=data['mass'], elements=elements, parent=self._star)
        planet = self._bodies[handle.index]
        self._bodies[self._star.index].children.append(handle)

        planet.orbit_line = self.mechanics.create_orbit_line(
            elements.semi_major_axis_au * config.Orbit.DISPLAY_AU_SCALE,
            elements.eccentricity,
            elements.inclination_deg,
        )
        # Place the planet at its t = 0 position so it is drawable before the first tick
        planet.local_position = self._planet_position(planet)
        planet.world_position = planet.local_position.copy()
        planet.current_distance_au = float(np.linalg.norm(planet.local_position)) / config.Orbit.DISPLAY_AU_SCALE
        planet.temperature_k = self._equilibrium_temperature(planet.current_distance_au)
        return handle

    def _build_moon(self, planet_handle: BodyHandle, moon_data: Dict[str, Any], rng: np.random.Generator) -> BodyHandle:
        planet = self._bodies[planet_handle.index]
        planet_size = planet.display_size

        moon_size = max(config.Moons.MIN_SIZE, moon_data['size'] * planet_size * config.Moons.SIZE_FACTOR)
        moon_size *= moon_data.get('size_multiplier', 1.0)

        if moon_data.get('distance_unit', 'au') == 'planet_radii':
            orbit_radius = moon_data['distance'] * planet_size
        else:
            orbit_radius = self.mechanics.au_to_simulation_units(moon_data['distance'], config.Moons.DISTANCE_SCALE)
            orbit_radius *= planet.data.get('moon_distance_multiplier', 1.0)
            orbit_radius *= moon_data.get('distance_multiplier', 1.0)
        # Keep the moon outside the planet
        orbit_radius = max(planet_size * config.Moons.MIN_CLEARANCE_FACTOR + moon_size, orbit_radius)

        period = moon_data['orbital_period']
        period_sim = self.mechanics.days_to_simulation_time(abs(period), config.Moons.TIME_CONVERSION_FACTOR)
        direction = config.Orbit.MOON_ORBIT_DIRECTION * (-1 if period < 0 else 1)

        if 'ecliptic_inclination' in moon_data:
            frame_tilt_deg = moon_data['ecliptic_inclination']
        else:
            frame_tilt_deg = planet.elements.axial_tilt_deg

        handle = self._add_body(key=moon_data['key'], name=moon_data['name'], kind=MOON, data=moon_data,
                                display_size=moon_size, mass=moon_data.get('mass', 0.0), parent=planet_handle)
        moon = self._bodies[handle.index]
        moon.orbit_radius = orbit_radius
        moon.orbit_angle = float(rng.uniform(0.0, TWO_PI))
        moon.angular_speed = TWO_PI / period_sim * direction
        moon.frame_tilt_deg = frame_tilt_deg
        moon.enabled = self.options.moons_enabled
        moon.orbit_line = self._moon_orbit_line(orbit_radius, frame_tilt_deg)
        self._place_moon(moon, planet)
        planet.children.append(handle)
        return handle

    def _moon_orbit_line(self, orbit_radius: float, frame_tilt_deg: float) -> OrbitLine:
        points = self.mechanics.orbit_line_points(orbit_radius, 0.0, segments=config.Moons.ORBIT_SEGMENTS)
        points = rotate_about_z(points, math.radians(frame_tilt_deg))
        points.setflags(write=False)
        return OrbitLine(points=points, semi_major_axis=orbit_radius, eccentricity=0.0, inclination_deg=frame_tilt_deg)

    # --- Per-tick update ---
    def update(self, now: float, time_scale: float):
        """
        Advances every enabled body to wall time `now`.

        A body whose clock is uninitialized only records `now` on this call. A failure
        in one planet or moon is logged and its siblings still update.
        """
        for planet_handle in self._star_body().children:
            planet = self._bodies[planet_handle.index]
            try:
                self._update_planet(planet, now, time_scale)
            except Exception as e:
                logging.error(f"Failed to update planet {planet.name}: {e}", exc_info=True)
                continue

            for moon_handle in planet.children:
                moon = self._bodies[moon_handle.index]
                if not moon.enabled:
                    continue
                try:
                    self._update_moon(moon, planet, now, time_scale)
                except Exception as e:
                    logging.error(f"Failed to update moon {moon.name} of {planet.name}: {e}", exc_info=True)

    def _advance_clock(self, body: CelestialBody, now: float, time_scale: float) -> Optional[float]:
        """Returns the clamped wall-time delta, or None when this call only initializes the clock."""
        clock = body.clock
        if not clock.initialized:
            clock.last_tick_time = now
            clock.initialized = True
            return None
        delta = max(0.0, now - clock.last_tick_time)
        clock.accumulated_time += delta * time_scale
        clock.last_tick_time = now
        return delta

    def _update_planet(self, planet: CelestialBody, now: float, time_scale: float):
        if self._advance_clock(planet, now, time_scale) is None:
            return

        planet.local_position = self._planet_position(planet)
        planet.world_position = planet.local_position.copy()
        planet.current_distance_au = float(np.linalg.norm(planet.local_position)) / config.Orbit.DISPLAY_AU_SCALE
        planet.temperature_k = self._equilibrium_temperature(planet.current_distance_au)
        planet.rotation_angle += self._spin_increment(planet.elements.rotation_period_hours, time_scale)

        if planet.show_trail:
            planet.add_to_trail(planet.world_position)

        if config.Debug.ORBITAL_MECHANICS:
            logging.debug(f"{planet.name}: t={planet.clock.accumulated_time:.6f}, pos={planet.world_position}, "
                          f"r={planet.current_distance_au:.4f} AU, T={planet.temperature_k:.1f} K")

    def _update_moon(self, moon: CelestialBody, planet: CelestialBody, now: float, time_scale: float):
        delta = self._advance_clock(moon, now, time_scale)
        if delta is not None:
            moon.orbit_angle += moon.angular_speed * delta * time_scale
        self._place_moon(moon, planet)
        if delta is not None and moon.show_trail:
            moon.add_to_trail(moon.world_position)

    def _place_moon(self, moon: CelestialBody, planet: CelestialBody):
        local = np.array([math.cos(moon.orbit_angle) * moon.orbit_radius, 0.0,
                          math.sin(moon.orbit_angle) * moon.orbit_radius], dtype=np.float64)
        moon.local_position = rotate_about_z(local, math.radians(moon.frame_tilt_deg))
        moon.world_position = planet.world_position + moon.local_position
        moon.rotation_angle = moon.orbit_angle  # Synchronous rotation

    def _planet_position(self, planet: CelestialBody) -> np.ndarray:
        return self.mechanics.orbital_position(
            planet.elements,
            planet.clock.accumulated_time,
            direction=config.Orbit.PLANET_ORBIT_DIRECTION,
            central_mass=config.Star.MASS_SOLAR,
            distance_scale=config.Orbit.DISPLAY_AU_SCALE,
        )

    def _equilibrium_temperature(self, distance_au: float) -> float:
        return self.mechanics.planet_temperature(distance_au, config.Star.TEMPERATURE_K,
                                                 config.Star.RADIUS_SOLAR, config.Star.DEFAULT_ALBEDO)

    @staticmethod
    def _spin_increment(rotation_period_hours: float, time_scale: float) -> float:
        rate = TWO_PI / (abs(rotation_period_hours) * SECONDS_PER_HOUR)
        direction = -1.0 if rotation_period_hours < 0 else 1.0
        coupling = time_scale if config.Spin.COUPLE_TO_TIME_SCALE else 1.0
        return rate * direction * coupling * config.Spin.SPIN_ACCELERATION_FACTOR

    def resume(self):
        """Marks every clock uninitialized so the next update records time without moving anything."""
        for body in self._bodies:
            body.clock.initialized = False

    # --- Lookup ---
    def get(self, handle: Optional[BodyHandle]) -> Optional[CelestialBody]:
        if handle is None or handle.generation != self.generation:
            return None
        if not 0 <= handle.index < len(self._bodies):
            return None
        return self._bodies[handle.index]

    def find(self, name_or_key: str) -> Optional[BodyHandle]:
        """Looks a body up by catalog key or display name, case-insensitively."""
        wanted = name_or_key.strip().lower()
        for body in self._bodies:
            if body.key.lower() == wanted or body.name.lower() == wanted:
                return body.handle
        return None

    @property
    def star(self) -> Optional[BodyHandle]:
        return self._star

    def _star_body(self) -> CelestialBody:
        if self._star is None:
            raise RuntimeError("SolarSystem has not been built.")
        return self._bodies[self._star.index]

    def bodies(self) -> List[CelestialBody]:
        """Enabled bodies in arena order."""
        return [body for body in self._bodies if body.enabled]

    def planets(self) -> List[BodyHandle]:
        return list(self._star_body().children)

    def moons_of(self, handle: BodyHandle) -> List[BodyHandle]:
        body = self.get(handle)
        if body is None:
            return []
        return [h for h in body.children if self._bodies[h.index].kind == MOON and self._bodies[h.index].enabled]

    def world_position(self, handle: BodyHandle) -> Optional[np.ndarray]:
        body = self.get(handle)
        if body is None or not body.enabled:
            return None
        return body.world_position.copy()

    def transforms(self) -> List[BodyTransform]:
        result = []
        for body in self.bodies():
            tilt = 0.0
            if body.kind == PLANET:
                tilt = math.radians(body.elements.axial_tilt_deg)
            result.append(BodyTransform(
                handle=body.handle,
                key=body.key,
                position=body.world_position.copy(),
                rotation=np.array([0.0, body.rotation_angle, tilt]),
                scale=body.display_size,
            ))
        return result

    def orbit_lines(self) -> Dict[BodyHandle, OrbitLine]:
        """Orbit lines of enabled bodies with orbits shown, in their parent's frame."""
        return {body.handle: body.orbit_line for body in self.bodies()
                if body.orbit_line is not None and body.show_orbit}

    def body_info(self, handle: BodyHandle) -> Optional[BodyInfo]:
        body = self.get(handle)
        if body is None:
            return None
        data = body.data
        info = BodyInfo(key=body.key, name=body.name, kind=body.kind, size=data['size'],
                        mass=data.get('mass', 0.0), asset=body.asset)

        if body.kind == STAR:
            info.temperature_k = data.get('temperature')
            info.moons = [self._bodies[h.index].name for h in body.children]
        elif body.kind == PLANET:
            temperature = data.get('temperature', {})
            info.parent_name = self._bodies[body.parent.index].name
            info.distance_au = data['distance']
            info.current_distance_au = body.current_distance_au
            info.periapsis_au = data.get('periapsis', body.elements.periapsis_au)
            info.apoapsis_au = data.get('apoapsis', body.elements.apoapsis_au)
            info.eccentricity = body.elements.eccentricity
            info.inclination_deg = body.elements.inclination_deg
            info.axial_tilt_deg = body.elements.axial_tilt_deg
            info.orbital_period_days = data['orbital_period']
            info.rotation_period_hours = body.elements.rotation_period_hours
            info.temperature_k = body.temperature_k
            info.temperature_c = self.mechanics.kelvin_to_celsius(body.temperature_k)
            info.average_temperature_k = temperature.get('average')
            if 'min' in temperature and 'max' in temperature:
                info.temperature_range = f"{temperature['min']}-{temperature['max']} K"
            info.in_habitable_zone = self.mechanics.is_in_habitable_zone(body.current_distance_au, config.Star.MASS_SOLAR)
            info.escape_velocity_km_s = self.mechanics.escape_velocity(data['mass'], data['size'])
            info.has_atmosphere = data.get('has_atmosphere', False)
            info.has_rings = data.get('has_rings', False)
            info.moons = [self._bodies[h.index].name for h in self.moons_of(handle)]
        else:
            info.parent_name = self._bodies[body.parent.index].name
            info.distance_au = data['distance'] if data.get('distance_unit', 'au') == 'au' else None
            info.orbital_period_days = data['orbital_period']
        return info

    # --- Display toggles ---
    def set_show_orbits(self, show: bool):
        self.show_orbits = show
        for body in self._bodies:
            body.show_orbit = show

    def set_show_labels(self, show: bool):
        self.show_labels = show
        for body in self._bodies:
            body.show_label = show

    def set_show_trails(self, show: bool):
        self.show_trails = show
        for body in self._bodies:
            body.show_trail = show
            if not show:
                body.trail.clear()

    def set_moons_enabled(self, enabled: bool):
        """Enables or disables every moon. Re-enabled moons resume without a phase jump."""
        self.options.moons_enabled = enabled
        for body in self._bodies:
            if body.kind != MOON or body.enabled == enabled:
                continue
            body.enabled = enabled
            body.clock.initialized = False
            if not enabled:
                body.is_hovered = False
                body.trail.clear()

    def set_hovered(self, handle: Optional[BodyHandle]):
        hovered = self.get(handle)
        for body in self._bodies:
            body.is_hovered = body is hovered

    def set_selected(self, handle: Optional[BodyHandle]):
        selected = self.get(handle)
        for body in self._bodies:
            body.is_selected = body is selected

    # --- Labels ---
    def begin_label_transition(self):
        """Restarts the hide-then-fade-in cycle of every label, replacing any transition in progress."""
        for body in self._bodies:
            body.label_elapsed = 0.0

    def advance_labels(self, real_delta: float, camera_position: Optional[np.ndarray] = None):
        """
        Advances label transitions by `real_delta` wall seconds and recomputes opacities.

        Opacity is the product of the transition factor (0 during the delay, then a
        smoothstep fade) and the camera-distance factor (1 up to FADE_START_DISTANCE,
        linear to 0 at MAX_DISTANCE).
        """
        delay = config.Labels.TRANSITION_DELAY_SECONDS
        duration = config.Labels.FADE_DURATION_SECONDS
        real_delta = max(0.0, real_delta)

        for body in self._bodies:
            transition = 1.0
            if body.label_elapsed is not None:
                body.label_elapsed += real_delta
                if body.label_elapsed >= delay + duration:
                    body.label_elapsed = None
                elif body.label_elapsed < delay:
                    transition = 0.0
                else:
                    transition = smoothstep((body.label_elapsed - delay) / duration)

            if not body.show_label or not body.enabled:
                body.label_opacity = 0.0
                continue
            body.label_opacity = transition * self._label_distance_factor(body, camera_position)

    @staticmethod
    def _label_distance_factor(body: CelestialBody, camera_position: Optional[np.ndarray]) -> float:
        if camera_position is None:
            return 1.0
        distance = float(np.linalg.norm(np.asarray(camera_position, dtype=np.float64) - body.world_position))
        if distance > config.Labels.MAX_DISTANCE:
            return 0.0
        if distance > config.Labels.FADE_START_DISTANCE:
            span = config.Labels.MAX_DISTANCE - config.Labels.FADE_START_DISTANCE
            return max(0.0, 1.0 - (distance - config.Labels.FADE_START_DISTANCE) / span)
        return 1.0

    # --- Export ---
    def export_system_data(self) -> Dict[str, Any]:
        """Plain-dict snapshot of every planet's position and info. No file I/O."""
        planets = []
        for handle in self.planets():
            body = self._bodies[handle.index]
            planets.append({
                'name': body.name,
                'position': body.world_position.tolist(),
                'info': self.body_info(handle).to_dict(),
            })
        return {
            'timestamp': datetime.now().isoformat(),
            'time_scale': self.mechanics.time_scale,
            'planets': planets,
        }
