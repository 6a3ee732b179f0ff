"""
Per-point and per-face property caches.

Thermodynamic properties are cached at grid points; transport properties
are cached at faces (the midpoint between j and j+1, stored at index j).
Caches are only valid over the range most recently updated.
"""

import numpy as np

from .accessor import PointStateAccessor
from .thermo import PhaseModel, KineticsModel, TransportModel, TransportClosure


class PropertyUpdater:
    """
    Pushes the solution into the collaborators and caches the results.

    Cached arrays:
        rho, wtm, cp : (n_points,) density, mean molecular weight, cp_mass
        visc, tcon   : (n_points,) face viscosity and thermal conductivity
        diff         : (n_species, n_points) mixture-averaged coefficients, or
                       the multicomponent prefactor W_k rho / W_mix² per face
        multidiff    : (n_species, n_species, n_points) multicomponent D[k, m]
        dthermal     : (n_species, n_points) thermal diffusion coefficients
        wdot         : (n_species, n_points) net production rates
    """

    def __init__(self, phase: PhaseModel, n_points: int):
        self.phase = phase
        self.kinetics: KineticsModel = None
        self.transport: TransportModel = None
        self.wt = np.asarray(phase.molecular_weights, dtype=float)
        self.n_species = len(self.wt)
        self.viscous = True
        self.resize(n_points)

    @property
    def multicomponent(self) -> bool:
        return (self.transport is not None
                and self.transport.closure == TransportClosure.MULTICOMPONENT)

    def resize(self, n_points: int):
        """Reallocate every cache for a new point count."""
        nsp = self.n_species
        self.n_points = n_points
        self.rho = np.zeros(n_points)
        self.wtm = np.zeros(n_points)
        self.cp = np.zeros(n_points)
        self.visc = np.zeros(n_points)
        self.tcon = np.zeros(n_points)
        self.diff = np.zeros((nsp, n_points))
        self.wdot = np.zeros((nsp, n_points))
        if self.multicomponent:
            self.multidiff = np.zeros((nsp, nsp, n_points))
            self.dthermal = np.zeros((nsp, n_points))
        else:
            self.multidiff = np.zeros((0, 0, n_points))
            self.dthermal = np.zeros((nsp, n_points))

    def set_transport(self, transport: TransportModel):
        self.transport = transport
        self.resize(self.n_points)

    # --- thermodynamic properties at points ---

    def update_thermo(self, acc: PointStateAccessor, pressure: float, j0: int, j1: int):
        """Update rho, wtm and cp at points j0..j1 (inclusive)."""
        T = acc.T
        for j in range(j0, j1 + 1):
            state = self.phase.thermo_state(T[j], pressure, acc.point_Y(j))
            self.rho[j] = state.density
            self.wtm[j] = state.mean_molecular_weight
            self.cp[j] = state.cp_mass

    def midpoint_state(self, acc: PointStateAccessor, j: int):
        """Arithmetic mean of temperature and mass fractions across face j."""
        T = 0.5 * (acc.T[j] + acc.T[j + 1])
        Y = 0.5 * (acc.point_Y(j) + acc.point_Y(j + 1))
        return T, Y

    # --- transport properties at faces ---

    def update_transport(self, acc: PointStateAccessor, pressure: float,
                         j0: int, j1: int, with_soret: bool = False):
        """Update transport properties at faces j0..j1-1."""
        if self.transport is None:
            raise RuntimeError("transport model must be set before evaluating")

        for j in range(j0, j1):
            T, Y = self.midpoint_state(acc, j)
            self.visc[j] = (self.transport.viscosity(T, pressure, Y)
                            if self.viscous else 0.0)
            self.tcon[j] = self.transport.thermal_conductivity(T, pressure, Y)

            if self.multicomponent:
                state = self.phase.thermo_state(T, pressure, Y)
                wtm = state.mean_molecular_weight
                self.multidiff[:, :, j] = self.transport.multi_diff_coeffs(T, pressure, Y)
                # factor outside the summation in the multicomponent flux
                self.diff[:, j] = self.wt * state.density / (wtm * wtm)
                if with_soret:
                    self.dthermal[:, j] = self.transport.thermal_diff_coeffs(T, pressure, Y)
            else:
                self.diff[:, j] = self.transport.mix_diff_coeffs(T, pressure, Y)

    # --- chemistry ---

    def update_production_rates(self, acc: PointStateAccessor, pressure: float, j: int):
        if self.kinetics is None:
            self.wdot[:, j] = 0.0
            return
        self.wdot[:, j] = self.kinetics.net_production_rates(
            acc.T[j], pressure, acc.point_Y(j))

    # --- excess species ---

    @staticmethod
    def excess_species(acc: PointStateAccessor, j: int) -> int:
        """Species with the largest mass fraction at point j."""
        return int(np.argmax(acc.point_Y(j)))
