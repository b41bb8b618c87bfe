# main.py

import argparse
import json
import logging
import os
import sys

import numpy as np
import pygame

import constants
import logger_setup
import renderer
from config import load_config
from entity_system import EntitySystem

# Get the application's dedicated logger
logger = logging.getLogger(logger_setup.LOGGER_NAME)


def run_simulation_loop(system, screen, clock, max_ticks=None):
    """
    The main loop: poll events, step the simulation by the measured frame time,
    query neighbors for every entity, then draw.
    """
    running = True
    tick = 0

    while running and (max_ticks is None or tick < max_ticks):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False

        # clock.tick() paces the frame and returns the elapsed time in ms.
        dt = clock.tick(constants.FPS) / 1000.0

        # Integration and grid rebuild complete inside step() before any query.
        system.step(dt)
        neighbor_lists = system.query_all()

        renderer.draw_frame(screen, system, neighbor_lists)
        pygame.display.flip()
        tick += 1

    return tick


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Spatial hashing k-nearest-neighbor visualization")
    parser.add_argument('--config', default='config.json', help="Path to the JSON run configuration")
    parser.add_argument('--headless', action='store_true', help="Run without a visible window")
    parser.add_argument('--ticks', type=int, default=None, help="Stop after this many ticks")
    return parser.parse_args(argv)


def main(argv=None):
    """
    Main function to initialize and run the simulation.
    """
    args = parse_args(argv)

    # --- Setup ---
    try:
        config = load_config(args.config)
        logger_setup.setup_logging(config)
    except (OSError, json.JSONDecodeError, ValueError) as e:
        print(f"Failed to load configuration from {args.config}: {e}", file=sys.stderr)
        return 1
    sim_config = config['simulation']

    logger.info("Application starting...")
    logger.info(f"Loaded configuration: {config}")

    # Initialize the master random number generator (RNG)
    rng = np.random.default_rng(config['master_seed'])
    logger.info(f"Master RNG initialized with seed: {config['master_seed']}")

    if args.headless:
        os.environ["SDL_VIDEODRIVER"] = "dummy"

    # --- Initialization ---
    bounds = (sim_config['world_width'], sim_config['world_height'])
    pygame.init()
    screen = pygame.display.set_mode((int(bounds[0]), int(bounds[1])))
    pygame.display.set_caption(constants.TITLE)
    clock = pygame.time.Clock()

    system = EntitySystem(
        num_entities=sim_config['entity_count'],
        config=sim_config,
        rng=rng,
        bounds=bounds
    )

    ticks = run_simulation_loop(system, screen, clock, max_ticks=args.ticks)

    stats = system.get_tick_stats()
    logger.info(
        f"Ran {ticks} ticks. Average tick {stats['avg_tick_time_ms']:.3f} ms "
        f"(integrate {stats['avg_integrate_time_ms']:.3f} ms, rebuild {stats['avg_rebuild_time_ms']:.3f} ms)."
    )
    logger.info("Application shutting down.")
    pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
