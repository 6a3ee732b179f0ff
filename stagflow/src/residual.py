"""
Residual assembly for the flow domain.

Evaluation is a two-phase pipeline:
    1. refresh caches - thermo at points, transport at faces, diffusive
       fluxes, radiative loss and (porous only) the solid sub-state
    2. assemble       - residual rows for every point in the range

Full evaluation covers every point. Windowed evaluation covers the
3-point stencil around one global point and is used to build numerical
Jacobians; it runs with rdt = 0 and reuses cached transport properties
unless the domain forces a full update.
"""

import numpy as np
from typing import Tuple

from .accessor import PointStateAccessor, block_view, upwind_derivative
from .constants import (OFFSET_U, OFFSET_V, OFFSET_T, OFFSET_L, OFFSET_E,
                        OFFSET_Y, GAS_CONSTANT)
from .errors import IncompatibleTransportClosure


class ResidualEvaluator:
    """
    Evaluates the discretized governing equations of one flow domain.

    During assembly the evaluator exposes:
        acc   - solution accessor
        props - property caches of the domain
        flux  - diffusive flux cache (n_species, n_points)
        grid  - domain grid
        R, D  - (n_components, n_points) views of the residual and mask blocks
    """

    def __init__(self, domain):
        self.domain = domain
        self.acc = None
        self.R = None
        self.D = None

    @property
    def props(self):
        return self.domain.props

    @property
    def flux(self) -> np.ndarray:
        return self.domain.flux

    @property
    def grid(self):
        return self.domain.grid

    def rho_u(self, j: int) -> float:
        """Axial mass flux at point j."""
        return self.props.rho[j] * self.acc.u[j]

    # --- public operations ---

    def evaluate_full(self, x: np.ndarray, rdt: float = 0.0,
                      rsd: np.ndarray = None,
                      diag: np.ndarray = None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Evaluate the residual at every point of the domain.

        Args:
            x: Global solution buffer
            rdt: Reciprocal of the pseudo time step (0 for steady state)
            rsd: Global residual buffer (allocated if None)
            diag: Global mask buffer, 1 for differential rows (allocated if None)

        Returns:
            (rsd, diag)
        """
        rsd, diag = self._allocate(x, rsd, diag)
        n = self.domain.n_points
        self._evaluate(x, rsd, diag, rdt, 0, n - 1, full=True)
        return rsd, diag

    def evaluate_window(self, x: np.ndarray, jg: int,
                        rsd: np.ndarray = None,
                        diag: np.ndarray = None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Evaluate the residual only at the points whose stencil contains the
        global point jg. Nothing is written when jg lies outside the domain's
        range of influence.
        """
        rsd, diag = self._allocate(x, rsd, diag)
        domain = self.domain
        if jg + 1 < domain.first_point or jg > domain.last_point + 1:
            return rsd, diag

        jpt = jg - domain.first_point
        jmin = max(jpt, 1) - 1
        jmax = min(jpt + 1, domain.n_points - 1)
        self._evaluate(x, rsd, diag, 0.0, jmin, jmax, full=False)
        return rsd, diag

    # --- pipeline ---

    @staticmethod
    def _allocate(x, rsd, diag):
        if rsd is None:
            rsd = np.zeros_like(x, dtype=float)
        if diag is None:
            diag = np.zeros(x.shape, dtype=int)
        return rsd, diag

    def _evaluate(self, x, rsd, diag, rdt, jmin, jmax, full):
        domain = self.domain
        if domain.soret_enabled and not self.props.multicomponent:
            raise IncompatibleTransportClosure(
                "Thermal diffusion (the Soret effect) is enabled, and requires "
                "using a multicomponent transport model.")

        nc = domain.n_components
        n = domain.n_points
        self.acc = PointStateAccessor(x, nc, n, loc=domain.loc, x_prev=domain.prev_soln)
        self.R = block_view(rsd, domain.loc, nc, n)
        self.D = block_view(diag, domain.loc, nc, n)

        self.update_properties(jmin, jmax, full)
        if domain.radiation_enabled:
            self.update_radiation(jmin, jmax)
        if domain.solid is not None:
            self.update_solid(jmin, jmax, rdt)
        self.assemble(rdt, jmin, jmax)

    def update_properties(self, jmin: int, jmax: int, full: bool):
        """Refresh thermo, transport and flux caches around [jmin, jmax]."""
        domain = self.domain
        props = self.props
        acc = self.acc
        P = domain.pressure
        n = domain.n_points

        j0 = max(jmin, 1) - 1
        j1 = min(jmax + 1, n - 1)

        props.update_thermo(acc, P, j0, j1)
        if full or domain.force_full_update:
            props.update_transport(acc, P, j0, j1, with_soret=domain.soret_enabled)
        if full:
            domain.left_excess_species = props.excess_species(acc, jmin)
            domain.right_excess_species = props.excess_species(acc, jmax)

        domain.flux_model.compute_fluxes(acc, props, self.grid, j0, j1, self.flux)
        if domain.soret_enabled:
            domain.flux_model.apply_soret(acc, props, self.grid, j0, j1, self.flux)

    def update_radiation(self, jmin: int, jmax: int):
        props = self.props
        X = self.acc.mole_fractions(props.wtm, props.wt)
        self.domain.radiation.compute(self.acc.T, X, self.domain.pressure,
                                      jmin, jmax, self.domain.qdot_radiation)

    def update_solid(self, jmin: int, jmax: int, rdt: float):
        """Refresh the porous layout and convective coupling; run a pending solid solve."""
        domain = self.domain
        solid = domain.solid
        z = self.grid.z
        solid.update_layout(z)
        mass_flux = self.props.rho * self.acc.u
        solid.update_convection(mass_flux, self.props.visc, self.props.tcon, jmin, jmax)
        if domain.consume_solid_update():
            solid.solve(z, self.acc.T, rdt)

    # --- assembly ---

    def assemble(self, rdt: float, jmin: int, jmax: int):
        n = self.domain.n_points
        for j in range(jmin, jmax + 1):
            self.D[:, j] = 0
            if j == 0:
                self.left_boundary_rows()
            elif j == n - 1:
                self.domain.strategy.right_boundary_row(self, j)
            else:
                self.domain.strategy.continuity_row(self, j)
                self.momentum_row(j, rdt)
                self.species_rows(j, rdt)
                self.energy_row(j, rdt)
                self.R[OFFSET_L, j] = self.acc.lam[j] - self.acc.lam[j - 1]
                self.D[OFFSET_L, j] = 0
            # reserved electric-field slot
            self.R[OFFSET_E, j] = self.acc.eField[j]

    def left_boundary_rows(self):
        """
        Default inlet rows. A boundary object attached to the left may
        subtract its own values for V, T and mdot from these.
        """
        acc = self.acc
        rho = self.props.rho
        domain = self.domain
        R = self.R

        # right-to-left: rho_u at point 0 depends on point 1, not on the inlet mdot
        R[OFFSET_U, 0] = (-(self.rho_u(1) - self.rho_u(0)) / self.grid.dz[0]
                          - (rho[1] * acc.V[1] + rho[0] * acc.V[0]))
        R[OFFSET_V, 0] = acc.V[0]
        if domain.do_energy(0):
            R[OFFSET_T, 0] = acc.T[0]
        else:
            R[OFFSET_T, 0] = acc.T[0] - domain.T_fixed(0)
        R[OFFSET_L, 0] = -self.rho_u(0)

        # zero diffusive flux; the excess species closes sum_k Y_k = 1
        R[OFFSET_Y:, 0] = -(self.flux[:, 0] + self.rho_u(0) * acc.Y[:, 0])
        R[OFFSET_Y + domain.left_excess_species, 0] = 1.0 - acc.Y[:, 0].sum()

    def shear(self, j: int) -> float:
        visc = self.props.visc
        V = self.acc.V
        z = self.grid.z
        c1 = visc[j - 1] * (V[j] - V[j - 1])
        c2 = visc[j] * (V[j + 1] - V[j])
        return 2.0 * (c2 / (z[j + 1] - z[j]) - c1 / (z[j] - z[j - 1])) / (z[j + 1] - z[j - 1])

    def div_heat_flux(self, j: int) -> float:
        tcon = self.props.tcon
        T = self.acc.T
        z = self.grid.z
        c1 = tcon[j - 1] * (T[j] - T[j - 1])
        c2 = tcon[j] * (T[j + 1] - T[j])
        return -2.0 * (c2 / (z[j + 1] - z[j]) - c1 / (z[j] - z[j - 1])) / (z[j + 1] - z[j - 1])

    def momentum_row(self, j: int, rdt: float):
        """rho dV/dt + rho u dV/dz + rho V² = d(mu dV/dz)/dz - lambda"""
        acc = self.acc
        rho = self.props.rho[j]
        V = acc.V
        dVdz = upwind_derivative(V, acc.u, self.grid.dz, j)
        self.R[OFFSET_V, j] = ((self.shear(j) - acc.lam[j] - self.rho_u(j) * dVdz
                                - rho * V[j] * V[j]) / rho
                               - rdt * (V[j] - acc.V_prev[j]))
        self.D[OFFSET_V, j] = 1

    def species_rows(self, j: int, rdt: float):
        """rho dY_k/dt + rho u dY_k/dz + dJ_k/dz = W_k omega_k"""
        acc = self.acc
        props = self.props
        domain = self.domain
        props.update_production_rates(acc, domain.pressure, j)

        Y = acc.Y
        z = self.grid.z
        dYdz = upwind_derivative(Y, acc.u, self.grid.dz, j)
        wdot = props.wdot[:, j]
        flux = self.flux
        span = z[j + 1] - z[j - 1]

        if domain.solid is None:
            convec = self.rho_u(j) * dYdz
            diffus = 2.0 * (flux[:, j] - flux[:, j - 1]) / span
            self.R[OFFSET_Y:, j] = ((props.wt * wdot - convec - diffus) / props.rho[j]
                                    - rdt * (Y[:, j] - acc.Y_prev[:, j]))
        else:
            pore = domain.solid.state.pore
            convec = self.rho_u(j) * dYdz * pore[j]
            diffus = 2.0 * (flux[:, j] * pore[j] - flux[:, j - 1] * pore[j - 1]) / span
            self.R[OFFSET_Y:, j] = ((props.wt * wdot * pore[j] - convec - diffus)
                                    / (props.rho[j] * pore[j])
                                    - rdt * (Y[:, j] - acc.Y_prev[:, j]))
        self.D[OFFSET_Y:, j] = 1

    def energy_row(self, j: int, rdt: float):
        """
        rho cp dT/dt + rho cp u dT/dz = d(k dT/dz)/dz
            - sum_k(omega_k h_k_ref) - sum_k(J_k cp_k / W_k) dT/dz
        """
        acc = self.acc
        domain = self.domain
        T = acc.T
        if not domain.do_energy(j):
            self.R[OFFSET_T, j] = T[j] - domain.T_fixed(j)
            self.D[OFFSET_T, j] = 0
            return

        props = self.props
        phase = domain.phase
        h_RT = phase.enthalpy_RT_ref(T[j])
        cp_R = phase.cp_R_ref(T[j])
        flux_mid = 0.5 * (self.flux[:, j - 1] + self.flux[:, j])

        chemical = GAS_CONSTANT * T[j] * np.dot(props.wdot[:, j], h_RT)
        dTdz = upwind_derivative(T, acc.u, self.grid.dz, j)
        enthalpy_flux = GAS_CONSTANT * dTdz * np.dot(flux_mid, cp_R / props.wt)

        rho_cp = props.rho[j] * props.cp[j]
        res = (-props.cp[j] * self.rho_u(j) * dTdz
               - self.div_heat_flux(j) - chemical - enthalpy_flux)
        if domain.solid is not None:
            s = domain.solid.state
            res -= s.hconv[j] * (T[j] - s.Tw[j]) / s.pore[j]
        res /= rho_cp
        res -= rdt * (T[j] - acc.T_prev[j])
        res -= domain.qdot_radiation[j] / rho_cp
        self.R[OFFSET_T, j] = res
        self.D[OFFSET_T, j] = 1
