# visualization.py
import pygame
import numpy as np
from typing import Optional, Tuple
import logging
from config import config, ConfigurationError
from simulation import OrrerySimulation, FrameSnapshot
from solarsystem import BodyHandle, DisplayOptions, PLANET, MOON

class Visualization:
    """Top-down pygame view of an `OrrerySimulation`.

    This class is a consumer of the simulation core. It:
    - Initializes Pygame, the window, fonts and the frame clock.
    - Projects world positions onto the XZ plane around the camera target, scaled
      by the camera distance (zooming moves the camera, not the projection).
    - Draws orbit lines, trails, bodies, fading labels and a small HUD.
    - Maps keyboard and mouse input to simulation input events.

    Keys:
        Space pause, R reset camera, O/L/T toggle orbits/labels/trails,
        F follow the hovered or selected body, Esc stop following, M toggle moons,
        S toggle realistic scale, +/- zoom, [/] slower/faster.
    """

    def __init__(self, simulation: OrrerySimulation):
        """
        Raises:
            ConfigurationError: If the configured window size is invalid.
        """
        self.simulation = simulation
        self.visualization_enabled = False
        try:
            pygame.init()
            screen_w = config.Visualization.SCREEN_WIDTH_PX
            screen_h = config.Visualization.SCREEN_HEIGHT_PX
            if not (isinstance(screen_w, int) and screen_w > 0 and isinstance(screen_h, int) and screen_h > 0):
                raise ConfigurationError("SCREEN_WIDTH_PX and SCREEN_HEIGHT_PX must be positive integers.")
            self.screen = pygame.display.set_mode((screen_w, screen_h))
            pygame.display.set_caption("Orrery")
            self.clock = pygame.time.Clock()
            self.screen_center = np.array([screen_w / 2, screen_h / 2], dtype=np.float64)
            self.visualization_enabled = True
        except ConfigurationError as e_config:
            logging.critical(f"Visualization initialization failed due to ConfigurationError: {e_config}", exc_info=True)
            raise
        except pygame.error as e_pygame:
            logging.critical(f"Pygame error during Visualization init: {e_pygame}. Visualization disabled.", exc_info=True)
            self.screen = None
            return

        try:
            self.font = pygame.font.Font(None, 24)
            self.small_font = pygame.font.Font(None, 18)
        except pygame.error as e_font:
            logging.error(f"Pygame error initializing fonts: {e_font}. Text rendering disabled.", exc_info=True)
            self.font = self.small_font = None

        default_offset = np.array(config.Camera.DEFAULT_POSITION) - np.array(config.Camera.DEFAULT_TARGET)
        self.reference_distance = float(np.linalg.norm(default_offset))
        self.hovered: Optional[BodyHandle] = None
        self.realistic_scale = simulation.solar_system.options.realistic_scale
        logging.info("Visualization initialized.")

    # --- Projection ---
    def pixels_per_unit(self) -> float:
        distance = max(self.simulation.camera.distance, 1e-6)
        return config.Visualization.PIXELS_PER_UNIT * self.reference_distance / distance

    def world_to_screen(self, world_pos: np.ndarray) -> Tuple[int, int]:
        """Projects a world position onto the screen, looking down the Y axis at the camera target."""
        relative = np.asarray(world_pos, dtype=np.float64) - self.simulation.camera.target
        scale = self.pixels_per_unit()
        screen = self.screen_center + np.array([relative[0], relative[2]]) * scale
        return int(screen[0]), int(screen[1])

    def pick_body(self, screen_pos: Tuple[int, int]) -> Optional[BodyHandle]:
        """Nearest enabled body whose drawn disc (at least 6 px) contains `screen_pos`."""
        best, best_distance = None, float('inf')
        scale = self.pixels_per_unit()
        for body in self.simulation.solar_system.bodies():
            sx, sy = self.world_to_screen(body.world_position)
            radius = max(6, int(body.display_size * scale))
            distance = np.hypot(sx - screen_pos[0], sy - screen_pos[1])
            if distance <= radius and distance < best_distance:
                best, best_distance = body.handle, distance
        return best

    # --- Rendering ---
    def render(self, snapshot: FrameSnapshot):
        if not self.visualization_enabled:
            return
        try:
            self.screen.fill(config.Visualization.BACKGROUND_COLOR)
            self._draw_orbits()
            self._draw_trails()
            self._draw_bodies()
            self._draw_labels(snapshot)
            self._draw_hud(snapshot)
            pygame.display.flip()
        except pygame.error as e_render:
            logging.error(f"Pygame error during render: {e_render}", exc_info=True)

    def _draw_orbits(self):
        system = self.simulation.solar_system
        for handle, line in system.orbit_lines().items():
            body = system.get(handle)
            parent = system.get(body.parent)
            origin = parent.world_position if parent is not None else np.zeros(3)
            points = [self.world_to_screen(origin + p) for p in line.points]
            color = config.Visualization.MOON_ORBIT_COLOR if body.kind == MOON else config.Visualization.ORBIT_COLOR
            if len(points) > 1:
                pygame.draw.lines(self.screen, color, False, points, 1)

    def _draw_trails(self):
        for body in self.simulation.solar_system.bodies():
            if len(body.trail) > 1:
                points = [self.world_to_screen(p) for p in body.trail]
                pygame.draw.lines(self.screen, config.Visualization.TRAIL_COLOR, False, points, 1)

    def _draw_bodies(self):
        scale = self.pixels_per_unit()
        for body in self.simulation.solar_system.bodies():
            position = self.world_to_screen(body.world_position)
            radius = max(config.Visualization.MIN_BODY_RADIUS_PX, int(body.display_size * scale))
            pygame.draw.circle(self.screen, body.color, position, radius)
            if body.is_selected:
                pygame.draw.circle(self.screen, config.Visualization.SELECTION_COLOR, position, radius + 4, 1)
            elif body.is_hovered:
                pygame.draw.circle(self.screen, config.Visualization.LABEL_COLOR, position, radius + 3, 1)

    def _draw_labels(self, snapshot: FrameSnapshot):
        if not self.small_font:
            return
        scale = self.pixels_per_unit()
        for body in self.simulation.solar_system.bodies():
            opacity = snapshot.label_opacity.get(body.handle, 0.0)
            if opacity <= 0.0:
                continue
            # Moon labels only when zoomed in far enough to separate them from the planet
            if body.kind == MOON and body.orbit_radius * scale < 12:
                continue
            text = self.small_font.render(body.name, True, config.Visualization.LABEL_COLOR)
            text.set_alpha(int(255 * opacity))
            sx, sy = self.world_to_screen(body.world_position)
            radius = max(config.Visualization.MIN_BODY_RADIUS_PX, int(body.display_size * scale))
            self.screen.blit(text, (sx - text.get_width() // 2, sy - radius - text.get_height() - 2))

    def _draw_hud(self, snapshot: FrameSnapshot):
        if not self.font:
            return
        status = "PAUSED" if snapshot.paused else f"time scale {snapshot.time_scale:.3f}"
        lines = [status]
        info = self.simulation.body_info(snapshot.selected) if snapshot.selected is not None else None
        if info is not None:
            lines.append(info.name)
            if info.kind == PLANET:
                lines.append(f"r = {info.current_distance_au:.3f} AU   e = {info.eccentricity:.3f}   i = {info.inclination_deg:.1f} deg")
                lines.append(f"T = {info.temperature_k:.0f} K ({info.temperature_c:.0f} C, {info.temperature_range})   v_esc = {info.escape_velocity_km_s:.1f} km/s")
                if info.moons:
                    lines.append("moons: " + ", ".join(info.moons))
            elif info.kind == MOON:
                lines.append(f"orbits {info.parent_name}, period {info.orbital_period_days} d")
        for row, line in enumerate(lines):
            surface = self.font.render(line, True, config.Visualization.LABEL_COLOR)
            self.screen.blit(surface, (12, 12 + row * 22))

    # --- Input ---
    def handle_events(self) -> bool:
        """Processes the Pygame event queue. Returns False when the window is closed."""
        if not self.visualization_enabled:
            return True
        sim = self.simulation
        try:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    logging.info("QUIT event received via Pygame window. Signaling shutdown.")
                    return False
                if event.type == pygame.MOUSEMOTION:
                    self.hovered = self.pick_body(event.pos)
                    sim.hover_body(self.hovered)
                elif event.type == pygame.MOUSEBUTTONDOWN:
                    if event.button == 1:
                        sim.select_body(self.pick_body(event.pos))
                    elif event.button == 4:
                        sim.camera.zoom(1 / config.Visualization.ZOOM_STEP)
                    elif event.button == 5:
                        sim.camera.zoom(config.Visualization.ZOOM_STEP)
                elif event.type == pygame.KEYDOWN:
                    self._handle_key(event.key)
            return True
        except pygame.error as e_event:
            logging.error(f"Pygame error during event handling: {e_event}. Attempting to continue.", exc_info=True)
            return True

    def _handle_key(self, key: int):
        sim = self.simulation
        system = sim.solar_system
        if key == pygame.K_SPACE:
            sim.toggle_pause()
        elif key == pygame.K_r:
            sim.reset_camera()
        elif key == pygame.K_o:
            sim.set_show_orbits(not system.show_orbits)
        elif key == pygame.K_l:
            sim.set_show_labels(not system.show_labels)
        elif key == pygame.K_t:
            sim.set_show_trails(not system.show_trails)
        elif key == pygame.K_f:
            target = self.hovered if self.hovered is not None else sim.controller.selection.selected
            sim.follow(target)
        elif key == pygame.K_ESCAPE:
            sim.stop_following()
        elif key == pygame.K_m:
            sim.set_moons_enabled(not system.options.moons_enabled)
        elif key == pygame.K_s:
            self.realistic_scale = not self.realistic_scale
            options = DisplayOptions(realistic_scale=self.realistic_scale, size_scale=system.options.size_scale,
                                     moons_enabled=system.options.moons_enabled, seed=system.options.seed)
            sim.rebuild_hierarchy(options)
            self.hovered = None
        elif key in (pygame.K_PLUS, pygame.K_EQUALS):
            sim.camera.zoom(1 / config.Visualization.ZOOM_STEP)
        elif key == pygame.K_MINUS:
            sim.camera.zoom(config.Visualization.ZOOM_STEP)
        elif key == pygame.K_RIGHTBRACKET:
            sim.set_time_scale(sim.clock.time_scale * config.Visualization.TIME_SCALE_STEP)
        elif key == pygame.K_LEFTBRACKET:
            sim.set_time_scale(sim.clock.time_scale / config.Visualization.TIME_SCALE_STEP)

    def tick_clock(self) -> float:
        """Limits the frame rate. Returns the milliseconds since the previous call."""
        if not self.visualization_enabled:
            return 0.0
        return self.clock.tick(config.Visualization.FPS)

    def close(self):
        pygame.quit()
        logging.info("Visualization closed.")
