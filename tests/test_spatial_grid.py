import numpy as np
import pytest

from spatial_grid import CellCoord, UniformGrid, cell_of


def _membership(grid):
    return {cell: sorted(grid.lookup(cell)) for cell in grid.cells()}


def test_cell_of_uses_floor_for_negative_coordinates():
    assert cell_of((-0.5, -0.5), 1.0) == (-1, -1)
    assert cell_of((0.5, 0.5), 1.0) == (0, 0)
    assert cell_of((-50.0, 49.9), 50.0) == (-1, 0)
    assert cell_of((100.0, 0.0), 50.0) == (2, 0)


def test_cell_of_rejects_non_positive_cell_size():
    with pytest.raises(ValueError):
        cell_of((1.0, 1.0), 0.0)
    with pytest.raises(ValueError):
        cell_of((1.0, 1.0), -5.0)


def test_cell_hash_is_order_sensitive():
    for x in range(-20, 21):
        for y in range(-20, 21):
            if x != y:
                assert hash(CellCoord(x, y)) != hash(CellCoord(y, x))


def test_cell_hash_has_no_collisions_in_a_small_window():
    hashes = {hash(CellCoord(x, y)) for x in range(-50, 51) for y in range(-50, 51)}
    assert len(hashes) == 101 * 101


def test_cell_hash_separates_cells_next_to_the_origin():
    # A combined value of -1 would be folded into -2 by the interpreter.
    assert hash(CellCoord(0, -1)) != hash(CellCoord(0, -2))
    assert hash(CellCoord(-1, 73856092)) != hash(CellCoord(0, -2))


def test_grid_rejects_non_positive_cell_size():
    with pytest.raises(ValueError):
        UniformGrid(0.0)


def test_lookup_miss_returns_empty_without_creating_bucket():
    grid = UniformGrid(10.0)
    assert len(grid.lookup((3, 4))) == 0
    assert grid.occupied_cells == 0
    assert (3, 4) not in grid


def test_insert_and_lookup_accept_plain_tuples():
    grid = UniformGrid(10.0)
    grid.insert((1, 2), (15.0, 25.0))
    grid.insert(CellCoord(1, 2), (12.0, 21.0))
    assert grid.lookup((1, 2)) == [(15.0, 25.0), (12.0, 21.0)]
    assert grid.lookup(CellCoord(1, 2)) == grid.lookup((1, 2))
    assert grid.occupied_cells == 1
    assert grid.entity_count == 2


def test_clear_is_a_noop_on_empty_grid():
    grid = UniformGrid(10.0)
    grid.clear()
    assert len(grid) == 0
    grid.insert((0, 0), (1.0, 1.0))
    grid.clear()
    assert len(grid) == 0
    assert grid.entity_count == 0


def test_rebuild_places_each_position_in_exactly_its_own_cell():
    rng = np.random.default_rng(7)
    positions = rng.random((300, 2)) * np.array([800.0, 600.0])
    grid = UniformGrid(50.0)
    grid.rebuild(positions)

    assert grid.entity_count == 300
    assert sum(len(grid.lookup(c)) for c in grid.cells()) == 300
    for pos in positions:
        point = (float(pos[0]), float(pos[1]))
        owner = [c for c in grid.cells() if point in grid.lookup(c)]
        assert owner == [cell_of(point, 50.0)]


def test_rebuild_handles_negative_positions_with_floor():
    grid = UniformGrid(1.0)
    grid.rebuild(np.array([[-0.5, -0.5], [0.5, 0.5]]))
    assert grid.lookup((-1, -1)) == [(-0.5, -0.5)]
    assert grid.lookup((0, 0)) == [(0.5, 0.5)]


def test_rebuild_is_deterministic_and_drops_stale_positions():
    rng = np.random.default_rng(3)
    positions = rng.random((100, 2)) * 500.0

    grid = UniformGrid(25.0)
    grid.rebuild(positions)
    first = _membership(grid)
    grid.rebuild(positions)
    assert _membership(grid) == first

    other = UniformGrid(25.0)
    other.rebuild(positions.copy())
    assert _membership(other) == first

    grid.rebuild(positions[:10] + 1000.0)
    assert grid.entity_count == 10
    for pos in positions:
        assert (float(pos[0]), float(pos[1])) not in grid.lookup(cell_of(pos, 25.0))


def test_rebuild_with_no_positions_empties_grid():
    grid = UniformGrid(10.0)
    grid.insert((0, 0), (1.0, 1.0))
    grid.rebuild(np.empty((0, 2)))
    assert grid.occupied_cells == 0
    assert grid.extent() is None


def test_extent_spans_occupied_cells():
    grid = UniformGrid(10.0)
    grid.rebuild(np.array([[5.0, 5.0], [-15.0, 42.0], [88.0, -3.0]]))
    lo, hi = grid.extent()
    assert lo == (-2, -1)
    assert hi == (8, 4)
