# spatial_grid.py

import math
from collections import namedtuple

import numba
import numpy as np

# Large odd multiplier applied to the x axis before combining it with y.
_HASH_MULT = 73856093
# Shifts the combined value away from -1, which CPython folds into -2.
_HASH_OFFSET = 1 << 40


class CellCoord(namedtuple('CellCoord', ['x', 'y'])):
    """
    Integer (x, y) pair identifying one square of the uniform grid.

    Equality is plain tuple equality. The hash scales x by a large odd constant
    before adding y, so (x, y) and (y, x) land in different slots.
    """
    __slots__ = ()

    def __hash__(self):
        return hash(self.x * _HASH_MULT + self.y + _HASH_OFFSET)


def cell_of(position, cell_size: float) -> CellCoord:
    """
    Maps a 2D position to the cell containing it.

    Uses floor division, so (-0.5, -0.5) with a cell size of 1 maps to (-1, -1).
    """
    if cell_size <= 0:
        raise ValueError(f"cell_size must be positive, got {cell_size}")
    return CellCoord(math.floor(position[0] / cell_size), math.floor(position[1] / cell_size))


@numba.jit(nopython=True)
def _cell_coords_jit(positions, cell_size, out):
    """Floor-divides every row of positions by cell_size into out (int64, Nx2)."""
    for i in range(positions.shape[0]):
        out[i, 0] = np.int64(np.floor(positions[i, 0] / cell_size))
        out[i, 1] = np.int64(np.floor(positions[i, 1] / cell_size))


class UniformGrid:
    """
    Spatial hash of entity positions bucketed into fixed-size square cells.

    Data Contract:
    - Inputs: cell_size (float) - Edge length of one cell, must be > 0.
    - Outputs: Buckets of (x, y) position tuples keyed by CellCoord.
    - Side Effects: Only clear/insert/rebuild mutate the buckets.
    - Invariants: After rebuild(), every position appears in exactly one bucket,
      the bucket of its own cell, and no position from a previous rebuild remains.
    """
    def __init__(self, cell_size: float):
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.cell_size = float(cell_size)
        self._buckets = {}
        self._entity_count = 0
        self._coords = np.empty((0, 2), dtype=np.int64)

    def clear(self):
        self._buckets.clear()
        self._entity_count = 0

    def insert(self, cell, position):
        """Appends a position to the bucket for cell, creating the bucket if needed."""
        if not isinstance(cell, CellCoord):
            cell = CellCoord(int(cell[0]), int(cell[1]))
        bucket = self._buckets.get(cell)
        if bucket is None:
            bucket = []
            self._buckets[cell] = bucket
        bucket.append((float(position[0]), float(position[1])))
        self._entity_count += 1

    def lookup(self, cell):
        """Returns the positions in cell, or an empty tuple for an unoccupied cell."""
        if not isinstance(cell, CellCoord):
            cell = CellCoord(int(cell[0]), int(cell[1]))
        return self._buckets.get(cell, ())

    def rebuild(self, positions: np.ndarray):
        """
        Clears the grid and repopulates it from an (N, 2) array of positions.
        """
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 2)
        num_entities = len(positions)
        self.clear()
        if num_entities == 0:
            return

        # Reuse the coordinate buffer between ticks while the entity count is stable.
        if self._coords.shape[0] != num_entities:
            self._coords = np.empty((num_entities, 2), dtype=np.int64)
        _cell_coords_jit(np.ascontiguousarray(positions), self.cell_size, self._coords)

        for (cx, cy), pos in zip(self._coords.tolist(), positions.tolist()):
            self.insert(CellCoord(cx, cy), pos)

    @property
    def occupied_cells(self) -> int:
        return len(self._buckets)

    @property
    def entity_count(self) -> int:
        return self._entity_count

    def cells(self):
        return iter(self._buckets)

    def extent(self):
        """
        Returns (min_cell, max_cell) spanning all occupied cells, or None if empty.
        """
        if not self._buckets:
            return None
        xs = [c.x for c in self._buckets]
        ys = [c.y for c in self._buckets]
        return CellCoord(min(xs), min(ys)), CellCoord(max(xs), max(ys))

    def __len__(self):
        return len(self._buckets)

    def __contains__(self, cell):
        return CellCoord(int(cell[0]), int(cell[1])) in self._buckets
