"""
1D structured grid for the flow domain.
"""

import numpy as np
from dataclasses import dataclass

from .errors import InvalidGrid


@dataclass
class GridState:
    """
    Strictly increasing axial grid.

    - z: Point locations (n_points)
    - dz: Cell widths z[j+1] - z[j] (n_points - 1)
    """
    z: np.ndarray

    def __post_init__(self):
        self.z = np.array(self.z, dtype=float).ravel()
        if self.z.size < 2:
            raise InvalidGrid("grid must contain at least two points")
        self.dz = np.diff(self.z)
        if np.any(self.dz <= 0.0):
            raise InvalidGrid("grid points must be monotonically increasing")
        self.n_points = self.z.size

    def normalized(self) -> np.ndarray:
        """Point locations mapped onto [0, 1]."""
        return (self.z - self.z[0]) / (self.z[-1] - self.z[0])

    def remap(self, old_z: np.ndarray, values: np.ndarray) -> np.ndarray:
        """
        Linearly interpolate values defined on old_z onto this grid.

        Points outside the old grid take the nearest end value.
        """
        return np.interp(self.z, old_z, values)
