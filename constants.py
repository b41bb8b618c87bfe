# constants.py

"""
Application Constants

This module defines static values for the viewer. Simulation parameters
(entity count, cell size, k, speeds, world size) live in config.json instead.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable.
"""

# Framerate
FPS = 60  # Frames per second

# Colors (RGB)
BLACK = (0, 0, 0)
GRID_LINE_COLOR = (50, 50, 50)

# Window Title
TITLE = "Spatial Hashing Visualization"

# Entity rendering
ENTITY_RADIUS = 5  # Pixels
