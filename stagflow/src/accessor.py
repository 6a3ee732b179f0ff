"""
Named access to the solution buffer of one flow domain.

The outer solver owns a flat buffer holding every domain's block. Within a
block the components of one grid point are contiguous:

    x[loc + j * n_components + n]  ->  component n at point j

PointStateAccessor wraps the block as a (n_components, n_points) view so
that rows can be read and written as arrays:

    acc.u, acc.V, acc.T, acc.lam   - (n_points,)
    acc.Y                          - (n_species, n_points)
"""

import numpy as np

from .constants import OFFSET_U, OFFSET_V, OFFSET_T, OFFSET_L, OFFSET_E, OFFSET_Y


def block_view(x: np.ndarray, loc: int, n_components: int, n_points: int) -> np.ndarray:
    """Writable (n_components, n_points) view of a domain block in x."""
    block = x[loc:loc + n_components * n_points]
    return block.reshape(n_points, n_components).T


def upwind_derivative(f: np.ndarray, u: np.ndarray, dz: np.ndarray, j: int):
    """
    Convective first derivative of f at interior point j. f may carry
    leading axes (e.g. species); the last axis is the grid.

    Positive velocity differences point j against its successor; zero or
    negative velocity differences the predecessor against point j.
    """
    jloc = j + 1 if u[j] > 0.0 else j
    return (f[..., jloc] - f[..., jloc - 1]) / dz[jloc - 1]


class PointStateAccessor:
    """
    Read/write view of the current solution and read-only view of the
    previous time level for one domain.
    """

    def __init__(self, x: np.ndarray, n_components: int, n_points: int,
                 loc: int = 0, x_prev: np.ndarray = None):
        self.n_components = n_components
        self.n_points = n_points
        self.n_species = n_components - OFFSET_Y
        self.loc = loc
        self.values = block_view(x, loc, n_components, n_points)
        if x_prev is None:
            self.prev = np.zeros((n_components, n_points))
        else:
            self.prev = block_view(np.asarray(x_prev), loc, n_components, n_points)

    # --- current solution ---

    @property
    def u(self) -> np.ndarray:
        return self.values[OFFSET_U]

    @property
    def V(self) -> np.ndarray:
        return self.values[OFFSET_V]

    @property
    def T(self) -> np.ndarray:
        return self.values[OFFSET_T]

    @property
    def lam(self) -> np.ndarray:
        return self.values[OFFSET_L]

    @property
    def eField(self) -> np.ndarray:
        return self.values[OFFSET_E]

    @property
    def Y(self) -> np.ndarray:
        return self.values[OFFSET_Y:]

    def point_Y(self, j: int) -> np.ndarray:
        return self.values[OFFSET_Y:, j]

    def mole_fractions(self, wtm: np.ndarray, wt: np.ndarray) -> np.ndarray:
        """X_k = W_mix Y_k / W_k at every point, shape (n_species, n_points)."""
        return self.Y * wtm[np.newaxis, :] / wt[:, np.newaxis]

    # --- previous time level ---

    @property
    def V_prev(self) -> np.ndarray:
        return self.prev[OFFSET_V]

    @property
    def T_prev(self) -> np.ndarray:
        return self.prev[OFFSET_T]

    @property
    def Y_prev(self) -> np.ndarray:
        return self.prev[OFFSET_Y:]
