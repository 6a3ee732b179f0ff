"""
Solid-phase sub-solver for flow through a porous burner.

The solid matrix exchanges heat with the gas by convection and with
itself by conduction and radiation. Radiation inside the matrix uses the
two-flux (S2) approximation. The sub-solve is a nested fixed point:

    outer: tridiagonal solve for the solid temperature Tw given the
           current radiative divergence dq
    inner: forward/backward S2 sweeps for the hemispherical fluxes q+, q-
    relax: dq <- a dq_new + (1 - a) dq

Default burner: two-zone partially stabilized zirconia with a linear
porosity/pore-diameter transition around zmid. Extinction coefficient
3(1 - phi)/d after Hsu and Howell (1992).
"""

import logging

import numpy as np
from dataclasses import dataclass, asdict
from scipy.linalg import solve_banded

from .constants import STEFAN_BOLTZMANN
from .grid import GridState

logger = logging.getLogger(__name__)


@dataclass
class SolidProperties:
    """Two-zone porous matrix description."""
    pore1: float = 0.835        # upstream porosity
    pore2: float = 0.87         # downstream porosity
    diam1: float = 0.00029      # upstream pore diameter [m]
    diam2: float = 0.00152      # downstream pore diameter [m]
    scond1: float = 1.3         # upstream solid conductivity [W/(m·K)]
    scond2: float = 1.771       # downstream solid conductivity [W/(m·K)]
    omega1: float = 0.8         # upstream scattering albedo
    omega2: float = 0.8         # downstream scattering albedo
    srho: float = 510.0         # solid density [kg/m³]
    sCp: float = 824.0          # solid heat capacity [J/(kg·K)]
    zmid: float = 0.035         # zone interface [m]
    dzmid: float = 0.002        # half-width of the linear transition [m]
    initial_temperature: float = 300.0  # [K]
    # Nusselt correlation Nu = C Re^m, C = c_slope d + c_intercept,
    # m = m_slope d + m_intercept
    nusselt_c_slope: float = -400.0
    nusselt_c_intercept: float = 0.687
    nusselt_m_slope: float = 443.7
    nusselt_m_intercept: float = 0.361
    extinction_factor: float = 3.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SolidSolverConfig:
    relaxation: float = 0.1
    # relative to the local black-body emission scale
    outer_tolerance: float = 1e-6
    inner_tolerance: float = 1e-6
    max_outer_iterations: int = 400
    max_inner_iterations: int = 100
    sigma: float = STEFAN_BOLTZMANN


class SolidState:
    """Per-point solid fields; persistent across evaluations."""

    def __init__(self, n_points: int, initial_temperature: float):
        self.Tw = np.full(n_points, initial_temperature)
        self.dq = np.zeros(n_points)
        self.hconv = np.zeros(n_points)
        self.pore = np.ones(n_points)
        self.diam = np.ones(n_points)
        self.scond = np.zeros(n_points)
        self.omega = np.zeros(n_points)
        self.RK = np.zeros(n_points)
        self.nusselt_c = np.zeros(n_points)
        self.nusselt_m = np.zeros(n_points)

    @property
    def n_points(self) -> int:
        return self.Tw.size

    def remap(self, old_z: np.ndarray, new_grid: GridState):
        """Carry the solved fields onto a new grid by linear interpolation."""
        n = new_grid.n_points
        if old_z.size == self.n_points:
            self.Tw = new_grid.remap(old_z, self.Tw)
            self.dq = new_grid.remap(old_z, self.dq)
            self.hconv = new_grid.remap(old_z, self.hconv)
        else:
            self.Tw = np.full(n, self.Tw[0] if self.n_points else 0.0)
            self.dq = np.zeros(n)
            self.hconv = np.zeros(n)


class PorousSolidSolver:
    """
    Computes the solid temperature and radiative divergence for a porous
    flow domain.
    """

    def __init__(self, n_points: int, properties: SolidProperties = None,
                 config: SolidSolverConfig = None):
        self.properties = properties if properties is not None else SolidProperties()
        self.config = config if config is not None else SolidSolverConfig()
        self.state = SolidState(n_points, self.properties.initial_temperature)

    def remap(self, old_z: np.ndarray, new_grid: GridState):
        """Move the solid onto a new grid; the layout is rebuilt at the new points."""
        self.state.remap(old_z, new_grid)
        self.update_layout(new_grid.z)

    def update_layout(self, z: np.ndarray):
        """Porosity, pore diameter and derived optical/convective fits at each point."""
        p = self.properties
        s = self.state
        lo = p.zmid - p.dzmid
        hi = p.zmid + p.dzmid

        ramp = (z - lo) / (2.0 * p.dzmid)
        s.pore = np.where(z < lo, p.pore1,
                          np.where(z > hi, p.pore2, p.pore1 + (p.pore2 - p.pore1) * ramp))
        s.diam = np.where(z < lo, p.diam1,
                          np.where(z > hi, p.diam2, p.diam1 + (p.diam2 - p.diam1) * ramp))

        s.RK = p.extinction_factor * (1.0 - s.pore) / s.diam
        s.nusselt_c = p.nusselt_c_slope * s.diam + p.nusselt_c_intercept
        s.nusselt_m = p.nusselt_m_slope * s.diam + p.nusselt_m_intercept

        upstream = z < p.zmid
        s.omega = np.where(upstream, p.omega1, p.omega2)
        s.scond = np.where(upstream, p.scond1, p.scond2)

    def update_convection(self, mass_flux: np.ndarray, visc: np.ndarray,
                          tcon: np.ndarray, jmin: int, jmax: int):
        """
        Gas-solid convective coefficient h = k Nu / d² at points jmin..jmax.

        Faces without a viscosity (the last point) get h = 0.
        """
        s = self.state
        for j in range(jmin, jmax + 1):
            if visc[j] <= 0.0:
                s.hconv[j] = 0.0
                continue
            Re = abs(mass_flux[j]) * s.pore[j] * s.diam[j] / visc[j]
            nusselt = s.nusselt_c[j] * Re ** s.nusselt_m[j]
            s.hconv[j] = tcon[j] * nusselt / s.diam[j] ** 2

    def _solid_temperature(self, z: np.ndarray, T_gas: np.ndarray,
                           Tw_prev: np.ndarray, rdt: float) -> np.ndarray:
        """Tridiagonal conduction/convection solve with zero-gradient ends."""
        s = self.state
        p = self.properties
        n = z.size
        lower = np.zeros(n)     # coefficient of Tw[i-1]
        diag = np.ones(n)
        upper = np.zeros(n)     # coefficient of Tw[i+1]
        rhs = np.zeros(n)

        diag[0], upper[0] = 1.0, -1.0
        lower[-1], diag[-1] = -1.0, 1.0

        zi = z[1:-1]
        zm = z[:-2]
        zp = z[2:]
        k = s.scond[1:-1]
        lower[1:-1] = 2.0 * k / ((zi - zm) * (zp - zm))
        upper[1:-1] = 2.0 * k / ((zp - zi) * (zp - zm))
        storage = p.srho * p.sCp * rdt
        diag[1:-1] = -lower[1:-1] - upper[1:-1] - s.hconv[1:-1] - storage
        rhs[1:-1] = (-s.hconv[1:-1] * T_gas[1:-1] + s.dq[1:-1]
                     - storage * Tw_prev[1:-1])

        ab = np.zeros((3, n))
        ab[0, 1:] = upper[:-1]
        ab[1] = diag
        ab[2, :-1] = lower[1:]
        return solve_banded((1, 1), ab, rhs)

    def _two_flux(self, z: np.ndarray, Tw: np.ndarray, T_inlet: float):
        """
        S2 sweeps for the forward (q+) and backward (q-) fluxes.

        Returns (q_plus, q_minus, converged).
        """
        s = self.state
        cfg = self.config
        n = z.size
        sigma = cfg.sigma
        emission = sigma * Tw ** 4
        boundary = sigma * T_inlet ** 4

        q_plus = np.zeros(n)
        q_minus = np.zeros(n)
        q_plus[0] = boundary
        q_minus[-1] = boundary
        qp_new = q_plus.copy()
        qm_new = q_minus.copy()

        RK = s.RK
        omega = s.omega
        # tolerance is relative to the black-body flux of the matrix
        scale = max(1.0, np.linalg.norm(emission), np.sqrt(n) * boundary)
        count = 0
        while True:
            count += 1
            for i in range(1, n):
                h = z[i] - z[i - 1]
                qp_new[i] = ((qp_new[i - 1] + RK[i] * h * omega[i] * q_minus[i]
                              + 2.0 * RK[i] * h * (1.0 - omega[i]) * emission[i])
                             / (1.0 + h * RK[i] * (2.0 - omega[i])))
            for i in range(n - 2, -1, -1):
                h = z[i + 1] - z[i]
                qm_new[i] = ((qm_new[i + 1] + RK[i] * h * omega[i] * qp_new[i]
                              + 2.0 * RK[i] * h * (1.0 - omega[i]) * emission[i])
                             / (1.0 + h * RK[i] * (2.0 - omega[i])))

            change = max(np.linalg.norm(qp_new - q_plus), np.linalg.norm(qm_new - q_minus))
            q_plus[:] = qp_new
            q_minus[:] = qm_new
            if count > cfg.max_inner_iterations:
                return q_plus, q_minus, False
            if change <= cfg.inner_tolerance * scale:
                return q_plus, q_minus, True

    def solve(self, z: np.ndarray, T_gas: np.ndarray, rdt: float) -> bool:
        """
        Solve for the solid temperature and radiative divergence.

        On an outer-iteration stall the solid temperature reverts to its
        value on entry. Returns True if the outer iteration converged.
        """
        s = self.state
        cfg = self.config
        n = z.size
        Tw_prev = s.Tw.copy()
        s.dq = np.zeros(n)

        count = 0
        while True:
            count += 1
            s.Tw = self._solid_temperature(z, T_gas, Tw_prev, rdt)

            q_plus, q_minus, converged = self._two_flux(z, s.Tw, T_gas[0])
            if converged:
                dq_new = 4.0 * s.RK * (1.0 - s.omega) * (
                    cfg.sigma * s.Tw ** 4 - 0.5 * q_plus - 0.5 * q_minus)
            else:
                logger.warning("Solid radiation sweep stalled (outer iteration %d); "
                               "keeping previous radiative divergence", count)
                dq_new = s.dq.copy()

            change = np.linalg.norm(dq_new - s.dq)
            s.dq = cfg.relaxation * dq_new + (1.0 - cfg.relaxation) * s.dq
            # relative to the emission term, which dq_new nearly cancels at equilibrium
            scale = max(1.0, np.linalg.norm(
                4.0 * s.RK * (1.0 - s.omega) * cfg.sigma * s.Tw ** 4))

            if count > cfg.max_outer_iterations:
                s.Tw = Tw_prev
                logger.warning("Solid temperature not converged after %d iterations; "
                               "reverting to previous field", count)
                return False
            if change <= cfg.outer_tolerance * scale:
                logger.debug("Solid solve converged in %d iterations", count)
                return True
