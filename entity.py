# entity.py

import numpy as np


class Entity:
    """
    A single moving point in the simulation.

    The position and velocity are float64 2-vectors. When created by an
    EntitySystem they are row views into the system's arrays, so in-place
    updates here are seen by the system and vice versa.
    """
    def __init__(self, entity_id: int, position: np.ndarray, velocity: np.ndarray):
        self.entity_id = entity_id
        self.position = self._as_vector(position)
        self.velocity = self._as_vector(velocity)

    @staticmethod
    def _as_vector(value) -> np.ndarray:
        # Keep existing float64 arrays (and views) as-is so mutation stays shared.
        if isinstance(value, np.ndarray) and value.dtype == np.float64 and value.shape == (2,):
            return value
        return np.array(value, dtype=np.float64).reshape(2)

    @property
    def point(self):
        """The position as a plain (x, y) tuple, matching grid bucket entries."""
        return (float(self.position[0]), float(self.position[1]))

    def to_dict(self) -> dict:
        return {
            'entity_id': self.entity_id,
            'position': self.position.tolist(),
            'velocity': self.velocity.tolist(),
        }

    def __repr__(self):
        return f"Entity(id={self.entity_id}, pos={self.position.tolist()}, vel={self.velocity.tolist()})"
