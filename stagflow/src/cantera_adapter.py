"""
Collaborator models backed by a Cantera Solution.

Cantera objects keep a current state; each call here sets the full point
state before reading, so the adapters can be shared by one domain without
carrying state between calls. Not thread safe: give each thread its own
Solution.

Example:
    phase, kinetics, transport = cantera_models('h2o2.yaml', 'mixture-averaged')
    domain = FlowDomain(phase, n_points=21)
    domain.set_kinetics(kinetics)
    domain.set_transport(transport)
"""

from typing import Tuple

import cantera as ct
import numpy as np

from .thermo import (KineticsModel, PhaseModel, ThermoState, TransportClosure,
                     TransportModel)

_IDEAL_GAS_MODELS = ('ideal-gas', 'IdealGas')
_MULTICOMPONENT_MODELS = ('multicomponent', 'Multi', 'multicomponent-CK')


class _CanteraBacked:

    def __init__(self, gas: ct.Solution):
        self.gas = gas

    def _set_state(self, T: float, P: float, Y: np.ndarray):
        self.gas.set_unnormalized_mass_fractions(Y)
        self.gas.TP = T, P


class CanteraPhase(_CanteraBacked, PhaseModel):

    @property
    def species_names(self):
        return list(self.gas.species_names)

    @property
    def molecular_weights(self) -> np.ndarray:
        return np.array(self.gas.molecular_weights)

    @property
    def max_temp(self) -> float:
        return self.gas.max_temp

    @property
    def is_ideal_gas(self) -> bool:
        return self.gas.thermo_model in _IDEAL_GAS_MODELS

    def thermo_state(self, T, P, Y) -> ThermoState:
        self._set_state(T, P, Y)
        return ThermoState(density=self.gas.density,
                           mean_molecular_weight=self.gas.mean_molecular_weight,
                           cp_mass=self.gas.cp_mass)

    def enthalpy_RT_ref(self, T) -> np.ndarray:
        self.gas.TP = T, self.gas.P
        return np.array(self.gas.standard_enthalpies_RT)

    def cp_R_ref(self, T) -> np.ndarray:
        self.gas.TP = T, self.gas.P
        return np.array(self.gas.standard_cp_R)

    def normalize(self, Y) -> np.ndarray:
        self.gas.Y = np.maximum(np.asarray(Y, dtype=float), 0.0)
        return np.array(self.gas.Y)


class CanteraKinetics(_CanteraBacked, KineticsModel):

    def net_production_rates(self, T, P, Y) -> np.ndarray:
        self._set_state(T, P, Y)
        return np.array(self.gas.net_production_rates)


class CanteraTransport(_CanteraBacked, TransportModel):

    @property
    def closure(self) -> TransportClosure:
        if self.gas.transport_model in _MULTICOMPONENT_MODELS:
            return TransportClosure.MULTICOMPONENT
        return TransportClosure.MIXTURE_AVERAGED

    def viscosity(self, T, P, Y) -> float:
        self._set_state(T, P, Y)
        return self.gas.viscosity

    def thermal_conductivity(self, T, P, Y) -> float:
        self._set_state(T, P, Y)
        return self.gas.thermal_conductivity

    def mix_diff_coeffs(self, T, P, Y) -> np.ndarray:
        self._set_state(T, P, Y)
        return np.array(self.gas.mix_diff_coeffs)

    def multi_diff_coeffs(self, T, P, Y) -> np.ndarray:
        self._set_state(T, P, Y)
        return np.array(self.gas.multi_diff_coeffs)

    def thermal_diff_coeffs(self, T, P, Y) -> np.ndarray:
        self._set_state(T, P, Y)
        return np.array(self.gas.thermal_diff_coeffs)


def cantera_models(mechanism: str, transport_model: str = None
                   ) -> Tuple[CanteraPhase, CanteraKinetics, CanteraTransport]:
    """Phase, kinetics and transport adapters sharing one Solution."""
    if transport_model is None:
        gas = ct.Solution(mechanism)
    else:
        gas = ct.Solution(mechanism, transport_model=transport_model)
    return CanteraPhase(gas), CanteraKinetics(gas), CanteraTransport(gas)
