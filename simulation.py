# simulation.py
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import numpy as np

from config import config, ConfigurationError
from orbital_mechanics import KeplerSolver, OrbitalMechanics, SimulationClock
from solarsystem import SolarSystem, BodyHandle, BodyInfo, BodyTransform, DisplayOptions, MOON
from camera_follow import SelectionAndFollowController, CameraState

BodyRef = Union[BodyHandle, str, None]


@dataclass
class SimulationContext:
    """Runtime state one simulation shares: the orbit engine and its clock.

    Passed explicitly instead of living in module globals, so several simulations
    can run side by side (for example in tests).
    """
    clock: SimulationClock
    mechanics: OrbitalMechanics

    @classmethod
    def create(cls, time_scale: Optional[float] = None) -> "SimulationContext":
        clock = SimulationClock(time_scale=time_scale)
        return cls(clock=clock, mechanics=OrbitalMechanics(KeplerSolver(), clock))


@dataclass
class FrameSnapshot:
    """What a render driver needs for one frame."""
    time: float
    paused: bool
    time_scale: float
    transforms: List[BodyTransform]
    camera_position: np.ndarray
    camera_target: np.ndarray
    label_opacity: Dict[BodyHandle, float]
    selected: Optional[BodyHandle] = None
    following: Optional[BodyHandle] = None


class OrrerySimulation:
    """Facade over the body hierarchy and the selection/follow controller.

    A driver calls `tick(now_seconds)` once per frame. Input events are plain method
    calls made between ticks. Pause and time-scale changes are read at the start of
    the next tick.

    Attributes:
        context (SimulationContext): Engine and clock of this simulation.
        solar_system (SolarSystem): Body arena.
        controller (SelectionAndFollowController): Selection and camera follow.
        frame_count (int): Number of ticks processed.
    """

    def __init__(self, options: Optional[DisplayOptions] = None, context: Optional[SimulationContext] = None,
                 sun_data: Optional[Dict[str, Any]] = None, planet_data: Optional[Dict[str, Any]] = None,
                 camera: Optional[CameraState] = None):
        """
        Raises:
            ConfigurationError: If the body catalog fails validation.
        """
        self.context = context if context is not None else SimulationContext.create()
        try:
            self.solar_system = SolarSystem(self.context.mechanics)
            self.solar_system.build(sun_data, planet_data, options)
        except ConfigurationError as e:
            logging.critical(f"Failed to build the solar system due to ConfigurationError: {e}", exc_info=True)
            raise
        self.controller = SelectionAndFollowController(self.solar_system, camera)
        self._last_real_time: Optional[float] = None
        self._was_paused = self.context.clock.paused
        self.frame_count = 0
        logging.info(f"OrrerySimulation initialized with {len(self.solar_system.bodies())} bodies.")

    @property
    def clock(self) -> SimulationClock:
        return self.context.clock

    @property
    def camera(self) -> CameraState:
        return self.controller.camera

    # --- Per-frame tick ---
    def tick(self, now_seconds: float, camera_position: Optional[np.ndarray] = None) -> FrameSnapshot:
        """
        Advances the simulation to wall time `now_seconds` and returns the frame state.

        Order: bodies, then camera follow, then labels. While paused, bodies and camera
        follow stand still but label fades keep running on wall time. The first tick
        after a resume only re-anchors the body clocks, so paused time never turns into
        orbital motion. Exceptions are logged and never leave this method.
        """
        paused = self.context.clock.paused
        time_scale = self.context.clock.time_scale
        if self._last_real_time is None:
            real_delta = 0.0
        else:
            real_delta = max(0.0, now_seconds - self._last_real_time)
        self._last_real_time = now_seconds

        try:
            if not paused:
                if self._was_paused:
                    self.solar_system.resume()
                self.solar_system.update(now_seconds, time_scale)
            self.controller.camera_tick(paused)
            label_camera = camera_position if camera_position is not None else self.controller.camera.position
            self.solar_system.advance_labels(real_delta, label_camera)
        except Exception as e:
            logging.error(f"Simulation tick failed at t={now_seconds}: {e}", exc_info=True)

        self._was_paused = paused
        self.frame_count += 1
        return self._snapshot(now_seconds, paused, time_scale)

    def _snapshot(self, now_seconds: float, paused: bool, time_scale: float) -> FrameSnapshot:
        bodies = self.solar_system.bodies()
        return FrameSnapshot(
            time=now_seconds,
            paused=paused,
            time_scale=time_scale,
            transforms=self.solar_system.transforms(),
            camera_position=self.controller.camera.position.copy(),
            camera_target=self.controller.camera.target.copy(),
            label_opacity={body.handle: body.label_opacity for body in bodies},
            selected=self.controller.selection.selected,
            following=self.controller.follow_state.target,
        )

    # --- Input events ---
    def _handle(self, ref: BodyRef) -> Optional[BodyHandle]:
        if isinstance(ref, str):
            handle = self.solar_system.find(ref)
            if handle is None and config.Debug.SELECTION:
                logging.debug(f"No body named '{ref}'.")
            return handle
        return ref

    def select_body(self, ref: BodyRef):
        self.controller.select(self._handle(ref))

    def select_moon(self, moon: BodyRef, parent: BodyRef = None):
        self.controller.select_moon(self._handle(moon), self._handle(parent))

    def deselect(self):
        self.controller.deselect()

    def follow(self, ref: BodyRef):
        self.controller.follow(self._handle(ref))

    def stop_following(self):
        self.controller.stop_following()

    def hover_body(self, ref: BodyRef):
        self.controller.hover(self._handle(ref))

    def reset_camera(self):
        self.controller.reset_camera()

    def set_time_scale(self, scale: float) -> float:
        """Sets the time scale (clamped silently) and returns the stored value."""
        return self.context.mechanics.set_time_scale(scale)

    def set_paused(self, paused: bool):
        self.context.clock.paused = bool(paused)

    def toggle_pause(self) -> bool:
        self.context.clock.paused = not self.context.clock.paused
        return self.context.clock.paused

    def set_show_orbits(self, show: bool):
        self.solar_system.set_show_orbits(show)

    def set_show_labels(self, show: bool):
        self.solar_system.set_show_labels(show)

    def set_show_trails(self, show: bool):
        self.solar_system.set_show_trails(show)

    def set_moons_enabled(self, enabled: bool):
        """Enables or disables moons. A selected or followed moon is released first."""
        if not enabled and self.controller.selection.moon is not None:
            self.controller.deselect()
        followed = self.solar_system.get(self.controller.follow_state.target)
        if not enabled and followed is not None and followed.kind == MOON:
            self.controller.stop_following()
        self.solar_system.set_moons_enabled(enabled)

    def rebuild_hierarchy(self, options: Optional[DisplayOptions] = None):
        """Rebuilds every body and clears selection and follow state in the same call."""
        self.solar_system.rebuild(options)
        self.controller.reset()
        logging.info(f"Hierarchy rebuilt (generation {self.solar_system.generation}).")

    # --- Queries ---
    def find(self, name_or_key: str) -> Optional[BodyHandle]:
        return self.solar_system.find(name_or_key)

    def body_info(self, ref: BodyRef) -> Optional[BodyInfo]:
        return self.solar_system.body_info(self._handle(ref))

    def export_system_data(self) -> Dict[str, Any]:
        return self.solar_system.export_system_data()
