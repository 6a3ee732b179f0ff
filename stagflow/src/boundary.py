"""
Flow-variant strategies: continuity rows and right-boundary rows.

The left boundary and the remaining interior equations are shared by all
variants and live in the residual evaluator. Each strategy writes into the
evaluator's residual/mask views:

    ev.R[n, j], ev.D[n, j]  - residual and differential flag of component n at point j
"""

import numpy as np
from abc import ABC, abstractmethod
from enum import Enum

from .constants import OFFSET_U, OFFSET_V, OFFSET_T, OFFSET_L, OFFSET_Y
from .errors import UnknownFlowType


class FlowVariant(Enum):
    FREE_FLOW = 'free'
    AXISYMMETRIC_STAGNATION = 'axisymmetric'
    POROUS_MEDIA = 'porous'


_DESCRIPTIONS = {
    FlowVariant.FREE_FLOW: 'Free Flame',
    FlowVariant.AXISYMMETRIC_STAGNATION: 'Axisymmetric Stagnation',
    FlowVariant.POROUS_MEDIA: 'Porous Flow',
}


def describe_variant(variant) -> str:
    """Descriptive name of a flow variant tag."""
    try:
        return _DESCRIPTIONS[variant]
    except (KeyError, TypeError):
        raise UnknownFlowType(f"Unknown flow type: {variant!r}")


def variant_from_description(name: str) -> FlowVariant:
    for variant, description in _DESCRIPTIONS.items():
        if description == name or variant.value == name:
            return variant
    raise UnknownFlowType(f"Unknown flow type: {name!r}")


class FlowStrategy(ABC):
    """Abstract base class for variant-specific residual rows."""

    variant: FlowVariant = None

    @abstractmethod
    def continuity_row(self, ev, j: int):
        """
        Continuity residual d(rho u)/dz + 2 rho V = 0 at interior point j.

        Args:
            ev: Residual evaluator in the middle of an assembly pass
            j: Interior point index
        """
        pass

    def right_boundary_row(self, ev, j: int):
        """
        Right boundary rows: zero strain rate, uniform eigenvalue and zero
        diffusive flux with the excess species closing the mass fractions.
        Subclasses add the velocity and temperature rows.
        """
        acc = ev.acc
        ev.R[OFFSET_V, j] = acc.V[j]
        ev.R[OFFSET_L, j] = acc.lam[j] - acc.lam[j - 1]
        ev.D[OFFSET_L, j] = 0

        rho_u = ev.rho_u(j)
        ev.R[OFFSET_Y:, j] = ev.flux[:, j - 1] + rho_u * acc.Y[:, j]
        k = ev.domain.right_excess_species
        ev.R[OFFSET_Y + k, j] = 1.0 - acc.Y[:, j].sum()
        ev.D[OFFSET_Y + k, j] = 0

    @staticmethod
    def _upstream_continuity(ev, j: int) -> float:
        """Continuity anchored on the right neighbour (j+1 -> j)."""
        rho = ev.props.rho
        V = ev.acc.V
        return (-(ev.rho_u(j + 1) - ev.rho_u(j)) / ev.grid.dz[j]
                - (rho[j + 1] * V[j + 1] + rho[j] * V[j]))

    @staticmethod
    def _downstream_continuity(ev, j: int) -> float:
        """Continuity anchored on the left neighbour (j-1 -> j)."""
        rho = ev.props.rho
        V = ev.acc.V
        return (-(ev.rho_u(j) - ev.rho_u(j - 1)) / ev.grid.dz[j - 1]
                - (rho[j - 1] * V[j - 1] + rho[j] * V[j]))


class StagnationFlowStrategy(FlowStrategy):
    """
    Axisymmetric counterflow or burner-stabilized flames with specified
    inlet mass fluxes. Mass flux information propagates right to left.
    """

    variant = FlowVariant.AXISYMMETRIC_STAGNATION

    def continuity_row(self, ev, j):
        ev.R[OFFSET_U, j] = self._upstream_continuity(ev, j)
        ev.D[OFFSET_U, j] = 0

    def right_boundary_row(self, ev, j):
        super().right_boundary_row(ev, j)
        ev.R[OFFSET_U, j] = ev.rho_u(j)
        T = ev.acc.T[j]
        if ev.domain.do_energy(j):
            ev.R[OFFSET_T, j] = T
        else:
            ev.R[OFFSET_T, j] = T - ev.domain.T_fixed(j)


class FreeFlowStrategy(FlowStrategy):
    """
    Freely propagating flames. An interior fixed point anchors the inlet
    mass flux; continuity propagates away from it in both directions.
    """

    variant = FlowVariant.FREE_FLOW

    def continuity_row(self, ev, j):
        domain = ev.domain
        z = ev.grid.z[j]
        # without a fixed point everything lies downstream of it
        z_fixed = domain.z_fixed if domain.z_fixed is not None else -np.inf
        if z > z_fixed:
            ev.R[OFFSET_U, j] = self._downstream_continuity(ev, j)
        elif z == z_fixed:
            if domain.do_energy(j):
                ev.R[OFFSET_U, j] = ev.acc.T[j] - domain.t_fixed
            else:
                ev.R[OFFSET_U, j] = (ev.rho_u(j)
                                     - ev.props.rho[0] * domain.fixed_point_velocity)
        else:
            ev.R[OFFSET_U, j] = self._upstream_continuity(ev, j)
        ev.D[OFFSET_U, j] = 0

    def right_boundary_row(self, ev, j):
        super().right_boundary_row(ev, j)
        ev.R[OFFSET_U, j] = ev.rho_u(j) - ev.rho_u(j - 1)
        ev.R[OFFSET_T, j] = ev.acc.T[j] - ev.acc.T[j - 1]


class PorousFlowStrategy(StagnationFlowStrategy):
    """Stagnation flow through a porous matrix; convective flux weighted by porosity."""

    variant = FlowVariant.POROUS_MEDIA

    def continuity_row(self, ev, j):
        pore = ev.domain.solid.state.pore
        rho = ev.props.rho
        V = ev.acc.V
        ev.R[OFFSET_U, j] = (
            -(ev.rho_u(j + 1) * pore[j + 1] - ev.rho_u(j) * pore[j]) / ev.grid.dz[j]
            - (rho[j + 1] * V[j + 1] + rho[j] * V[j]))
        ev.D[OFFSET_U, j] = 0


_STRATEGIES = {
    FlowVariant.FREE_FLOW: FreeFlowStrategy,
    FlowVariant.AXISYMMETRIC_STAGNATION: StagnationFlowStrategy,
    FlowVariant.POROUS_MEDIA: PorousFlowStrategy,
}


def strategy_for(variant: FlowVariant) -> FlowStrategy:
    try:
        return _STRATEGIES[variant]()
    except (KeyError, TypeError):
        raise UnknownFlowType(f"Unknown flow type: {variant!r}")
