# camera_follow.py
import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from config import config
from physics_utils import normalize_vector
from solarsystem import SolarSystem, BodyHandle, CelestialBody, MOON

IDLE = 'idle'
PLANET_SELECTED = 'planet'
MOON_SELECTED = 'moon'


def _vector(values) -> np.ndarray:
    return np.array(values, dtype=np.float64)


@dataclass
class CameraState:
    """Orbit-style camera: a position looking at a target, with zoom limits."""
    position: np.ndarray = field(default_factory=lambda: _vector(config.Camera.DEFAULT_POSITION))
    target: np.ndarray = field(default_factory=lambda: _vector(config.Camera.DEFAULT_TARGET))
    min_distance: float = config.Camera.DEFAULT_MIN_DISTANCE
    max_distance: float = config.Camera.MAX_DISTANCE

    def __post_init__(self):
        self.position = _vector(self.position)
        self.target = _vector(self.target)

    @property
    def distance(self) -> float:
        return float(np.linalg.norm(self.position - self.target))

    def reset(self):
        self.position = _vector(config.Camera.DEFAULT_POSITION)
        self.target = _vector(config.Camera.DEFAULT_TARGET)
        self.min_distance = config.Camera.DEFAULT_MIN_DISTANCE

    def zoom(self, factor: float):
        """Scales the camera-to-target distance by `factor`, clamped to the zoom limits."""
        offset = self.position - self.target
        distance = np.linalg.norm(offset)
        if distance < 1e-12:
            return
        new_distance = float(np.clip(distance * factor, self.min_distance, self.max_distance))
        self.position = self.target + offset / distance * new_distance


@dataclass
class FollowSnapshot:
    target_position: np.ndarray
    camera_position: np.ndarray
    camera_target: np.ndarray


@dataclass
class FollowState:
    target: Optional[BodyHandle] = None
    last_target_position: Optional[np.ndarray] = None
    initialized: bool = False
    min_distance: float = config.Camera.DEFAULT_MIN_DISTANCE
    snapshot: Optional[FollowSnapshot] = None
    reframe: bool = False


@dataclass
class SelectionState:
    """At most one selected planet-level body, or at most one moon with its parent planet."""
    body: Optional[BodyHandle] = None
    moon: Optional[BodyHandle] = None
    moon_parent: Optional[BodyHandle] = None

    @property
    def mode(self) -> str:
        if self.moon is not None:
            return MOON_SELECTED
        if self.body is not None:
            return PLANET_SELECTED
        return IDLE

    @property
    def selected(self) -> Optional[BodyHandle]:
        return self.moon if self.moon is not None else self.body


class SelectionAndFollowController:
    """
    Selection and camera-follow state machine.

    States are {idle, planet, moon} x {not following, following}. Selecting a body
    also starts following it, with a reframe on the first camera tick. A bare
    `follow` only records the body position on its first tick, then translates the
    camera and its target by the body's per-tick displacement so the user's viewing
    angle is preserved.

    Events naming unknown or stale handles are ignored: input can arrive after a
    hierarchy rebuild has invalidated the handle it carries.
    """

    def __init__(self, solar_system: SolarSystem, camera: Optional[CameraState] = None):
        self.solar_system = solar_system
        self.camera = camera if camera is not None else CameraState()
        self.selection = SelectionState()
        self.follow_state = FollowState()

    @property
    def mode(self) -> str:
        return self.selection.mode

    @property
    def is_following(self) -> bool:
        return self.follow_state.target is not None

    def _resolve(self, handle: Optional[BodyHandle], event: str) -> Optional[CelestialBody]:
        body = self.solar_system.get(handle)
        if body is None or not body.enabled:
            if config.Debug.SELECTION:
                logging.debug(f"Ignoring {event} for unknown or stale body handle {handle}.")
            return None
        return body

    # --- Selection ---
    def select(self, handle: Optional[BodyHandle]):
        """Selects a planet-level body and follows it. A moon handle is routed to `select_moon`.

        Does nothing when the body is already both selected and followed.
        """
        if handle is None:
            self.deselect()
            return
        body = self._resolve(handle, 'select')
        if body is None:
            return
        if body.kind == MOON:
            self.select_moon(handle)
            return
        if self.selection.moon is None and self.selection.body == handle and self.follow_state.target == handle:
            return

        self.selection = SelectionState(body=handle)
        self.solar_system.set_selected(handle)
        self._start_follow(body, reframe=True)

    def select_moon(self, moon_handle: Optional[BodyHandle], parent_handle: Optional[BodyHandle] = None):
        """Selects a moon, replacing any planet or moon selection, and follows it."""
        moon = self._resolve(moon_handle, 'select_moon')
        if moon is None:
            return
        if moon.kind != MOON:
            if config.Debug.SELECTION:
                logging.debug(f"select_moon called with non-moon body {moon.name}; ignoring.")
            return
        if parent_handle is not None and parent_handle != moon.parent:
            if config.Debug.SELECTION:
                logging.debug(f"Parent handle {parent_handle} does not own moon {moon.name}; using its own parent.")
        if self.selection.moon == moon_handle and self.follow_state.target == moon_handle:
            return

        self.selection = SelectionState(moon=moon_handle, moon_parent=moon.parent)
        self.solar_system.set_selected(moon_handle)
        self._start_follow(moon, reframe=True)

    def deselect(self):
        self.selection = SelectionState()
        self.solar_system.set_selected(None)
        self.stop_following()

    def hover(self, handle: Optional[BodyHandle]):
        if handle is not None and self._resolve(handle, 'hover') is None:
            handle = None
        self.solar_system.set_hovered(handle)

    # --- Following ---
    def min_follow_distance(self, body: CelestialBody) -> float:
        override = config.Camera.FOLLOW_DISTANCE_OVERRIDES.get(body.key)
        if override is not None:
            return override
        return max(body.display_size * config.Camera.FOLLOW_SIZE_FACTOR, config.Camera.FOLLOW_MIN_DISTANCE_FLOOR)

    def follow(self, handle: Optional[BodyHandle]):
        """Follows a body without reframing; the first camera tick only records its position."""
        body = self._resolve(handle, 'follow')
        if body is None:
            return
        self._start_follow(body, reframe=False)

    def _start_follow(self, body: CelestialBody, reframe: bool):
        min_distance = self.min_follow_distance(body)
        self.follow_state = FollowState(
            target=body.handle,
            min_distance=min_distance,
            snapshot=FollowSnapshot(
                target_position=body.world_position.copy(),
                camera_position=self.camera.position.copy(),
                camera_target=self.camera.target.copy(),
            ),
            reframe=reframe,
        )
        self.camera.min_distance = min_distance
        self.solar_system.begin_label_transition()

    def stop_following(self):
        self.follow_state = FollowState()
        self.camera.min_distance = config.Camera.DEFAULT_MIN_DISTANCE

    def camera_tick(self, paused: bool = False):
        """Moves the camera with the followed body. Does nothing while paused or not following."""
        state = self.follow_state
        if state.target is None or paused:
            return
        body = self._resolve(state.target, 'camera_tick')
        if body is None:
            self.stop_following()
            return

        position = body.world_position.copy()
        if not state.initialized:
            if state.reframe:
                self._frame(body, position)
                state.reframe = False
            state.last_target_position = position
            state.initialized = True
            return

        delta = position - state.last_target_position
        self.camera.position = self.camera.position + delta
        self.camera.target = self.camera.target + delta
        state.last_target_position = position

    def _frame(self, body: CelestialBody, position: np.ndarray):
        """Places the camera at a size-based distance from the body and aims it at the body."""
        direction = normalize_vector(self.camera.position - self.camera.target)
        if body.kind == MOON:
            parent = self.solar_system.get(body.parent)
            if parent is not None:
                # Look back across the moon towards its planet
                outward = normalize_vector(position - parent.world_position)
                direction = normalize_vector(outward + _vector(config.Camera.DEFAULT_VIEW_DIRECTION) * 0.5)
        if not np.any(direction):
            direction = normalize_vector(_vector(config.Camera.DEFAULT_VIEW_DIRECTION))

        distance = max(body.display_size * config.Camera.FRAMING_SIZE_FACTOR,
                       self.follow_state.min_distance * config.Camera.FRAMING_MIN_DISTANCE_FACTOR)
        self.camera.target = position.copy()
        self.camera.position = position + direction * distance

    # --- Resets ---
    def reset(self):
        """Clears selection, hover and follow state. Called when the hierarchy is rebuilt."""
        self.selection = SelectionState()
        self.follow_state = FollowState()
        self.camera.min_distance = config.Camera.DEFAULT_MIN_DISTANCE

    def reset_camera(self):
        """Stops following and restores the default camera pose. Selection is kept."""
        self.stop_following()
        self.camera.reset()
