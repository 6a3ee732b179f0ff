"""
Species diffusive mass flux closures.

Fluxes live at faces: flux[k, j] is the mass flux of species k between
points j and j+1 [kg/(m²·s)]. All schemes are vectorized over the faces in
the requested range.
"""

import numpy as np
from abc import ABC, abstractmethod

from .accessor import PointStateAccessor
from .grid import GridState
from .properties import PropertyUpdater
from .thermo import TransportClosure


class DiffusiveFluxModel(ABC):
    """Abstract base class for diffusive flux closures."""

    @abstractmethod
    def compute_fluxes(self, acc: PointStateAccessor, props: PropertyUpdater,
                       grid: GridState, j0: int, j1: int, flux: np.ndarray):
        """
        Fill flux[:, j] for faces j0..j1-1.

        Args:
            acc: Solution accessor
            props: Property caches, already updated over the range
            grid: Domain grid
            j0, j1: Point range; faces j0 through j1-1 are computed
            flux: Flux cache (n_species, n_points), modified in place
        """
        pass

    def apply_soret(self, acc: PointStateAccessor, props: PropertyUpdater,
                    grid: GridState, j0: int, j1: int, flux: np.ndarray):
        """Subtract the thermal diffusion flux driven by d(ln T)/dz."""
        if j1 <= j0:
            return
        faces = slice(j0, j1)
        T = acc.T
        grad_log_T = (2.0 * (T[j0 + 1:j1 + 1] - T[j0:j1])
                      / ((T[j0 + 1:j1 + 1] + T[j0:j1]) * grid.dz[faces]))
        flux[:, faces] -= props.dthermal[:, faces] * grad_log_T


class MixtureAveragedFlux(DiffusiveFluxModel):
    """
    Fickian flux with mixture-averaged coefficients and a correction
    velocity so that the species fluxes sum to zero at every face.
    """

    def compute_fluxes(self, acc, props, grid, j0, j1, flux):
        if j1 <= j0:
            return
        faces = slice(j0, j1)
        X = acc.mole_fractions(props.wtm, props.wt)
        dz = grid.dz[faces]

        fick = (props.wt[:, np.newaxis] * props.rho[faces] * props.diff[:, faces]
                / props.wtm[faces])
        fick *= (X[:, j0:j1] - X[:, j0 + 1:j1 + 1]) / dz

        # correction flux so that sum_k Y_k V_k = 0
        Y = acc.Y[:, faces]
        Ysum = Y.sum(axis=0)
        Ysum[Ysum == 0.0] = 1.0
        correction = fick.sum(axis=0) * Y / Ysum
        flux[:, faces] = fick - correction


class MulticomponentFlux(DiffusiveFluxModel):
    """
    Full multicomponent flux:

        j_k = (W_k rho / W_mix²) sum_m W_m D_km (X_m[j+1] - X_m[j]) / dz

    The prefactor is cached per face in props.diff.
    """

    def compute_fluxes(self, acc, props, grid, j0, j1, flux):
        if j1 <= j0:
            return
        X = acc.mole_fractions(props.wtm, props.wt)
        for j in range(j0, j1):
            dX = props.wt * (X[:, j + 1] - X[:, j])
            flux[:, j] = props.multidiff[:, :, j] @ dX * props.diff[:, j] / grid.dz[j]


def flux_model_for(closure: TransportClosure) -> DiffusiveFluxModel:
    """Flux closure matching the transport model's configured closure."""
    if closure == TransportClosure.MULTICOMPONENT:
        return MulticomponentFlux()
    return MixtureAveragedFlux()
