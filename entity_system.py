# entity_system.py

import time
import logging

import numpy as np

from config import validate_simulation_config
from entity import Entity
from integrator import advance_all
from logger_setup import LOGGER_NAME
from neighbor_query import find_k_nearest
from spatial_grid import UniformGrid

logger = logging.getLogger(LOGGER_NAME)

TICK_TIME_WINDOW = 100  # Number of ticks in the rolling average


class EntitySystem:
    """
    Owns the state of all moving entities and drives the per-tick pipeline:
    integrate every entity, rebuild the grid, then answer neighbor queries.

    Data Contract:
    - Inputs:
        - num_entities (int): The number of entities to simulate.
        - config (dict): The 'simulation' section of the config file.
        - rng (np.random.Generator): The master seeded random number generator.
        - bounds (tuple): Optional (width, height) of the world. Defaults to the
          config's world_width and world_height and must agree with them.
    - Outputs: None. This class modifies its internal state.
    - Side Effects: Mutates positions and velocities in place every step.
    - Invariants:
        - The number of entities is constant throughout the simulation.
        - Between steps, the grid holds exactly the current positions.
        - All integration for a tick finishes before the grid is rebuilt, and
          the rebuild finishes before any query for that tick.
    """
    def __init__(self, num_entities: int, config: dict, rng: np.random.Generator, bounds: tuple = None):
        config = validate_simulation_config(dict(config, entity_count=num_entities))
        configured = (float(config['world_width']), float(config['world_height']))
        if bounds is None:
            bounds = configured
        width, height = bounds
        if width <= 0 or height <= 0:
            raise ValueError(f"World bounds must be positive, got {bounds}")
        if (float(width), float(height)) != configured:
            raise ValueError(f"World bounds {bounds} disagree with configured world size {configured}")

        self.num_entities = num_entities
        self.bounds = (float(width), float(height))
        self.cell_size = float(config['cell_size'])
        self.k = config['k']
        self.log_interval = config['log_interval']
        max_speed = float(config['max_speed'])

        # --- Structure of Arrays, seeded from the injected generator ---
        self.positions = rng.random((num_entities, 2)) * np.array(self.bounds)
        self.velocities = rng.uniform(-max_speed, max_speed, (num_entities, 2))
        self.colors = rng.integers(0, 256, (num_entities, 3))

        # Entity objects are row views, so they share storage with the arrays.
        self.entities = [
            Entity(i, self.positions[i], self.velocities[i]) for i in range(num_entities)
        ]

        self.grid = UniformGrid(self.cell_size)
        self.grid.rebuild(self.positions)

        # --- Tick bookkeeping ---
        self.tick_count = 0
        self._tick_times = []
        self._integrate_times = []
        self._rebuild_times = []

        logger.info(f"EntitySystem created for {num_entities} entities in a {width}x{height} world.")
        logger.info(
            f"Uniform grid initialized with cell size {self.cell_size} "
            f"({self.grid.occupied_cells} occupied cells), k={self.k}."
        )

    def step(self, dt: float):
        """
        Advances the simulation by dt seconds.

        1. Every entity is integrated and reflected off the world edges.
        2. The grid is cleared and rebuilt from the new positions.
        Queries issued after this returns see only the rebuilt grid.
        """
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")

        tick_start = time.perf_counter()

        advance_all(self.positions, self.velocities, dt, self.bounds)
        integrated = time.perf_counter()

        self.grid.rebuild(self.positions)
        rebuilt = time.perf_counter()

        self._record(self._integrate_times, (integrated - tick_start) * 1000.0)
        self._record(self._rebuild_times, (rebuilt - integrated) * 1000.0)
        self._record(self._tick_times, (rebuilt - tick_start) * 1000.0)
        self.tick_count += 1

        if self.tick_count % self.log_interval == 0:
            stats = self.get_tick_stats()
            logger.debug(
                f"Tick={self.tick_count}, "
                f"dt={dt:.4f}, "
                f"OccupiedCells={stats['occupied_cells']}, "
                f"AvgTick={stats['avg_tick_time_ms']:.3f}ms, "
                f"AvgIntegrate={stats['avg_integrate_time_ms']:.3f}ms, "
                f"AvgRebuild={stats['avg_rebuild_time_ms']:.3f}ms"
            )

    @staticmethod
    def _record(window: list, value: float):
        window.append(value)
        if len(window) > TICK_TIME_WINDOW:
            window.pop(0)

    def neighbors_of(self, index: int, exhaustive_fallback: bool = False):
        """Returns up to k neighbor positions of entity `index`, nearest first."""
        return find_k_nearest(
            self.entities[index].point, self.grid, self.k, self.cell_size,
            exhaustive_fallback=exhaustive_fallback
        )

    def query_all(self, exhaustive_fallback: bool = False):
        """
        Neighbor lists for every entity, in entity order. Read-only against the
        current grid.
        """
        results = [self.neighbors_of(i, exhaustive_fallback) for i in range(self.num_entities)]
        short = sum(1 for r in results if len(r) < min(self.k, self.num_entities - 1))
        if short:
            logger.debug(f"Tick={self.tick_count}: {short} entities returned fewer than k={self.k} neighbors.")
        return results

    def get_snapshot(self) -> dict:
        return {
            'tick_count': self.tick_count,
            'entity_count': self.num_entities,
            'entities': [e.to_dict() for e in self.entities],
        }

    def get_tick_stats(self) -> dict:
        def _avg(values):
            return sum(values) / len(values) if values else 0.0

        return {
            'tick_count': self.tick_count,
            'occupied_cells': self.grid.occupied_cells,
            'avg_tick_time_ms': _avg(self._tick_times),
            'last_tick_time_ms': self._tick_times[-1] if self._tick_times else 0.0,
            'avg_integrate_time_ms': _avg(self._integrate_times),
            'avg_rebuild_time_ms': _avg(self._rebuild_times),
        }
