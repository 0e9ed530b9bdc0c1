# main.py
import os
import json
import time
import logging
import cProfile
import argparse # For command line options
from typing import Optional

import psutil # For memory monitoring

from config import config, ConfigurationError # Use the global config instance
from simulation import OrrerySimulation, SimulationContext
from solarsystem import DisplayOptions
from visualization import Visualization

class OrreryApp:
    """Runs an `OrrerySimulation` frame by frame, with or without a window.

    Attributes:
        simulation (OrrerySimulation): The simulation core.
        visualization (Optional[Visualization]): The pygame view, None when headless.
        running (bool): Cleared when the window is closed or a fatal error occurs.
        process (psutil.Process): Current process, used for memory monitoring.
    """
    def __init__(self, options: DisplayOptions, time_scale: float, headless: bool = False):
        """
        Raises:
            ConfigurationError: If the catalog or visualization settings are invalid.
        """
        try:
            self.simulation = OrrerySimulation(options=options, context=SimulationContext.create(time_scale))
            self.visualization = None
            if not headless:
                self.visualization = Visualization(self.simulation)
        except ConfigurationError as e:
            logging.critical(f"Failed to initialize OrreryApp due to ConfigurationError: {e}", exc_info=True)
            raise
        except Exception as e:
            logging.critical(f"An unexpected error occurred during OrreryApp initialization: {e}", exc_info=True)
            raise

        self.running = True
        self.process = psutil.Process(os.getpid())
        logging.info("OrreryApp initialized successfully.")

    def check_memory(self, frame: int):
        if frame == 0 or frame % config.Monitoring.MEMORY_CHECK_INTERVAL_FRAMES != 0:
            return
        try:
            memory_mb = self.process.memory_info().rss / (1024 * 1024)
            if memory_mb > config.Monitoring.MEMORY_USAGE_WARN_MB:
                logging.warning(f"High memory usage: {memory_mb:.2f} MB at frame {frame}")
            else:
                logging.debug(f"Memory usage: {memory_mb:.2f} MB at frame {frame}")
        except psutil.Error as e_psutil:
            logging.error(f"Could not retrieve memory usage: {e_psutil}", exc_info=True)

    def run(self, max_frames: Optional[int] = None):
        """Interactive loop: events, tick on wall time, render, frame-rate limit."""
        frame = 0
        while self.running and (max_frames is None or frame < max_frames):
            if self.visualization is not None and not self.visualization.handle_events():
                self.running = False
                break
            snapshot = self.simulation.tick(time.perf_counter())
            if self.visualization is not None:
                self.visualization.render(snapshot)
                self.visualization.tick_clock()
            self.check_memory(frame)
            frame += 1
        logging.info(f"Frame loop finished after {frame} frames.")

    def run_headless(self, frames: int, frame_seconds: float):
        """Ticks the simulation on a synthetic clock, `frame_seconds` apart."""
        for frame in range(frames):
            self.simulation.tick(frame * frame_seconds)
            self.check_memory(frame)
        logging.info(f"Headless run finished: {frames} frames, {frames * frame_seconds:.2f} simulated wall seconds.")

    def close(self):
        if self.visualization is not None:
            self.visualization.close()


def main():
    """Parses the command line and runs the orrery.

    Options select the display scale, time scale, moons and seed. `--headless N`
    runs N frames on a synthetic clock without opening a window and prints the
    final system snapshot as JSON. `--follow NAME` selects and follows a body at
    startup. `--profile` writes cProfile statistics to `simulation_profile.prof`.
    """
    parser = argparse.ArgumentParser(description="Run the Kepler orrery simulation.")
    parser.add_argument("--realistic-scale", action="store_true", help="Size bodies proportionally to their real radii.")
    parser.add_argument("--size-scale", type=float, default=1.0, help="Global multiplier on body display sizes.")
    parser.add_argument("--time-scale", type=float, default=config.Time.DEFAULT_TIME_SCALE,
                        help=f"Initial time scale, clamped to [{config.Time.MIN_TIME_SCALE}, {config.Time.MAX_TIME_SCALE}].")
    parser.add_argument("--no-moons", action="store_true", help="Start with moons disabled.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for moon start angles.")
    parser.add_argument("--follow", type=str, default=None, help="Select and follow this body (key or name) at startup.")
    parser.add_argument("--headless", type=int, default=None, metavar="FRAMES",
                        help="Run this many frames without a window and print the final snapshot.")
    parser.add_argument("--frame-seconds", type=float, default=1.0 / config.Visualization.FPS,
                        help="Wall seconds between headless frames.")
    parser.add_argument("--profile", action="store_true",
                        help="Enable profiling. Statistics will be saved to 'simulation_profile.prof'.")
    args = parser.parse_args()

    profiler = None
    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        logging.info("cProfile profiling enabled. Output will be saved to simulation_profile.prof upon completion.")

    app = None
    try:
        options = DisplayOptions(realistic_scale=args.realistic_scale, size_scale=args.size_scale,
                                 moons_enabled=not args.no_moons, seed=args.seed)
        app = OrreryApp(options, args.time_scale, headless=args.headless is not None)
        if args.follow:
            app.simulation.select_body(args.follow)
            if app.simulation.controller.selection.selected is None:
                logging.warning(f"No body named '{args.follow}'; starting without a selection.")

        if args.headless is not None:
            app.run_headless(args.headless, args.frame_seconds)
            print(json.dumps(app.simulation.export_system_data(), indent=2))
        else:
            app.run()
    except ConfigurationError as e_config_main:
        logging.critical(f"Orrery could not be initialized or run due to a ConfigurationError: {e_config_main}", exc_info=True)
        print(f"FATAL CONFIGURATION ERROR: {e_config_main}. Simulation cannot start. Check logs for details.")
    except Exception as e_main:
        logging.critical(f"An unexpected critical error occurred in the main execution block: {e_main}", exc_info=True)
        print(f"FATAL UNEXPECTED ERROR: {e_main}. Simulation terminated. Check logs for details.")
    finally:
        if app is not None:
            app.close()
        if profiler:
            profiler.disable()
            stats_file = "simulation_profile.prof"
            try:
                profiler.dump_stats(stats_file)
                logging.info(f"Profiling data successfully saved to {stats_file}")
            except Exception as e_profile_dump:
                logging.error(f"Failed to save profiling data to {stats_file}: {e_profile_dump}", exc_info=True)


if __name__ == "__main__":
    main()
