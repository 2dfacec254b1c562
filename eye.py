"""
Eye (vision sensor) for ForageSim.

The eye splits its field of view into `cells` equal angular sectors. Every
food item inside the view range adds energy to the sector it falls in:
    energy = (fov_range - distance) / fov_range
so nearby food counts more and several items in one sector add up. The
result is the brain's input vector; it is not normalised.
"""

import numpy as np

from neural_network import DTYPE


def wrap_angle(angle):
    """Wrap radians into (-π, π]. Works on scalars and arrays."""
    return np.pi - np.mod(np.pi - angle, 2.0 * np.pi)


class Eye:

    __slots__ = ("fov_range", "fov_angle", "cells")

    def __init__(self, fov_range: float, fov_angle: float, cells: int):
        if not fov_range > 0:
            raise ValueError(f"fov_range must be positive, got {fov_range}")
        if not fov_angle > 0:
            raise ValueError(f"fov_angle must be positive, got {fov_angle}")
        if cells < 1:
            raise ValueError(f"cells must be >= 1, got {cells}")
        self.fov_range = float(fov_range)
        self.fov_angle = float(fov_angle)
        self.cells     = int(cells)

    @classmethod
    def from_config(cls, config) -> "Eye":
        return cls(config.eye_range, config.eye_fov, config.eye_cells)

    def process_vision(self, position, heading: float, food_positions) -> np.ndarray:
        """
        Args:
            position:       (x, y) of the animal
            heading:        animal heading (radians)
            food_positions: array-like of shape (N, 2); N may be 0

        Returns:
            float64 array of shape (cells,)
        """
        vision = np.zeros(self.cells, dtype=DTYPE)
        food = np.asarray(food_positions, dtype=DTYPE).reshape(-1, 2)
        if len(food) == 0:
            return vision

        rel  = food - np.asarray(position, dtype=DTYPE)
        dist = np.hypot(rel[:, 0], rel[:, 1])

        angle = wrap_angle(np.arctan2(rel[:, 1], rel[:, 0]) - heading)
        half  = self.fov_angle / 2.0

        seen = (dist < self.fov_range) & (angle >= -half) & (angle <= half)
        if not seen.any():
            return vision

        cell = ((angle[seen] + half) / self.fov_angle * self.cells).astype(np.int64)
        # angle == +half lands one past the last sector
        cell = np.minimum(cell, self.cells - 1)

        energy = (self.fov_range - dist[seen]) / self.fov_range
        np.add.at(vision, cell, energy)
        return vision
