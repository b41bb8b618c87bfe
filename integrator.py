# integrator.py

import numba
import numpy as np

from entity import Entity

# --- JIT-Compiled Motion Functions ---
# Kept outside any class and operating only on NumPy arrays and scalars,
# as required by Numba's nopython mode.

@numba.jit(nopython=True)
def _advance_jit(position, velocity, dt, width, height):
    """
    Forward-Euler step for one entity followed by per-axis wall reflection.

    A coordinate outside [0, bound] has its velocity component negated and is
    clamped to the nearest bound. The exact crossing time is not computed, so a
    fast entity can sit on the wall for one tick.
    """
    position[0] += velocity[0] * dt
    position[1] += velocity[1] * dt

    if position[0] < 0.0 or position[0] > width:
        velocity[0] = -velocity[0]
        position[0] = min(max(position[0], 0.0), width)
    if position[1] < 0.0 or position[1] > height:
        velocity[1] = -velocity[1]
        position[1] = min(max(position[1], 0.0), height)


@numba.jit(nopython=True)
def _advance_all_jit(positions, velocities, dt, width, height):
    for i in range(positions.shape[0]):
        _advance_jit(positions[i], velocities[i], dt, width, height)


def _check_step_args(dt: float, bounds: tuple):
    if dt < 0:
        raise ValueError(f"dt must be non-negative, got {dt}")
    width, height = bounds
    if width <= 0 or height <= 0:
        raise ValueError(f"World bounds must be positive, got {bounds}")
    return float(dt), float(width), float(height)


def advance(entity: Entity, dt: float, bounds: tuple):
    """
    Moves a single entity by velocity * dt and reflects it off the world edges.

    - Inputs:
        - entity (Entity): Mutated in place.
        - dt (float): Elapsed time in seconds, must be >= 0.
        - bounds (tuple): (width, height) of the world, both > 0.
    """
    dt, width, height = _check_step_args(dt, bounds)
    _advance_jit(entity.position, entity.velocity, dt, width, height)


def advance_all(positions: np.ndarray, velocities: np.ndarray, dt: float, bounds: tuple):
    """
    Vectorized form of advance() over (N, 2) position and velocity arrays.
    Both arrays are updated in place.
    """
    dt, width, height = _check_step_args(dt, bounds)
    if positions.shape != velocities.shape:
        raise ValueError(
            f"positions {positions.shape} and velocities {velocities.shape} must have the same shape"
        )
    _advance_all_jit(positions, velocities, dt, width, height)
