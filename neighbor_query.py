# neighbor_query.py

import math

import numpy as np

from spatial_grid import CellCoord, UniformGrid, cell_of


def distance(a, b) -> float:
    """Euclidean distance between two 2D points."""
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return math.sqrt(dx * dx + dy * dy)


def _ring_cells(center: CellCoord, s: int):
    """
    Yields the cells newly exposed when the search square grows to radius s.

    For s == 1 this is the full 3x3 block including the center cell; for larger
    s it is only the outer shell of the (2s+1) x (2s+1) square.
    """
    if s == 1:
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                yield CellCoord(center.x + dx, center.y + dy)
        return

    for dx in range(-s, s + 1):
        yield CellCoord(center.x + dx, center.y - s)
        yield CellCoord(center.x + dx, center.y + s)
    for dy in range(-s + 1, s):
        yield CellCoord(center.x - s, center.y + dy)
        yield CellCoord(center.x + s, center.y + dy)


def find_k_nearest(point, grid: UniformGrid, k: int, cell_size: float, exhaustive_fallback: bool = False):
    """
    Approximate k-nearest-neighbor search over a uniform grid by expanding rings.

    The search square grows one ring at a time around the query cell until it
    holds at least k candidates or its radius passes sqrt(occupied cells). The
    cap is a heuristic: sparse or clustered worlds can stop short of k even when
    more entities exist, and a short list is a valid result.

    Data Contract:
    - Inputs:
        - point: (x, y) query position. Any bucketed position equal to it is skipped.
        - grid (UniformGrid): Index rebuilt for the current tick. Never mutated.
        - k (int): Maximum number of neighbors, must be >= 0.
        - cell_size (float): Cell size the grid was built with, must be > 0.
        - exhaustive_fallback (bool): When the cap is reached with fewer than k
          candidates, keep expanding until the square covers every occupied cell.
    - Outputs: List of at most k (x, y) tuples in ascending distance to point.
    - Side Effects: None.
    """
    if cell_size <= 0:
        raise ValueError(f"cell_size must be positive, got {cell_size}")
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")
    if k == 0 or grid.entity_count == 0:
        return []

    query = (float(point[0]), float(point[1]))
    center = cell_of(query, cell_size)

    # Largest integer s with s <= sqrt(occupied cells).
    max_radius = math.isqrt(grid.occupied_cells)
    if exhaustive_fallback:
        lo, hi = grid.extent()
        max_radius = max(
            max_radius,
            center.x - lo.x, hi.x - center.x,
            center.y - lo.y, hi.y - center.y,
        )

    candidates = []
    s = 1
    while s <= max_radius:
        for cell in _ring_cells(center, s):
            for neighbor in grid.lookup(cell):
                if neighbor != query:
                    candidates.append(neighbor)
        if len(candidates) >= k:
            break
        s += 1

    if not candidates:
        return []

    coords = np.asarray(candidates, dtype=np.float64)
    diffs = coords - np.asarray(query)
    dists = np.sqrt(np.sum(diffs**2, axis=1))
    order = np.argsort(dists, kind='stable')[:k]
    return [candidates[i] for i in order]
