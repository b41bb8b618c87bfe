# renderer.py

import pygame

import constants
from entity_system import EntitySystem


def draw_grid(screen: pygame.Surface, cell_size: float, bounds: tuple):
    """Draws vertical and horizontal lines at every cell boundary."""
    width, height = bounds
    x = 0.0
    while x < width:
        pygame.draw.line(screen, constants.GRID_LINE_COLOR, (int(x), 0), (int(x), int(height)))
        x += cell_size
    y = 0.0
    while y < height:
        pygame.draw.line(screen, constants.GRID_LINE_COLOR, (0, int(y)), (int(width), int(y)))
        y += cell_size


def draw_frame(screen: pygame.Surface, system: EntitySystem, neighbor_lists: list):
    """
    Draws the grid, every entity, and a line from each entity to its neighbors
    in the entity's own color. Consumes state only; never mutates the system.
    """
    screen.fill(constants.BLACK)
    draw_grid(screen, system.cell_size, system.bounds)

    for i in range(system.num_entities):
        color = tuple(int(c) for c in system.colors[i])
        pos = (int(system.positions[i, 0]), int(system.positions[i, 1]))
        pygame.draw.circle(screen, color, pos, constants.ENTITY_RADIUS)

        for neighbor in neighbor_lists[i]:
            pygame.draw.line(screen, color, pos, (int(neighbor[0]), int(neighbor[1])))
