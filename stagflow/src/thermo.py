"""
Contracts for the thermodynamic, kinetic and transport collaborators.

Every query takes the full point state (T, P, Y) and returns values; no
collaborator keeps a "current point" between calls. Mass fractions are
passed unnormalized.

Units follow the usual combustion conventions:
    molecular weights     [kg/kmol]
    production rates      [kmol/(m³·s)]
    diffusion coefficients [m²/s]
    thermal diffusion     [kg/(m·s)]
"""

import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


@dataclass
class ThermoState:
    """Mixture properties at one point."""
    density: float                  # [kg/m³]
    mean_molecular_weight: float    # [kg/kmol]
    cp_mass: float                  # [J/(kg·K)]


class TransportClosure(Enum):
    MIXTURE_AVERAGED = 'mixture-averaged'
    MULTICOMPONENT = 'multicomponent'


class PhaseModel(ABC):
    """Ideal-gas phase evaluated at an explicit state."""

    @property
    @abstractmethod
    def species_names(self) -> List[str]:
        pass

    @property
    @abstractmethod
    def molecular_weights(self) -> np.ndarray:
        pass

    @property
    def n_species(self) -> int:
        return len(self.species_names)

    @property
    @abstractmethod
    def max_temp(self) -> float:
        """Upper temperature limit of the thermo data [K]."""
        pass

    @property
    def is_ideal_gas(self) -> bool:
        return True

    def species_index(self, name: str) -> Optional[int]:
        """Index of the named species, or None if it is not in the mixture."""
        try:
            return self.species_names.index(name)
        except ValueError:
            return None

    @abstractmethod
    def thermo_state(self, T: float, P: float, Y: np.ndarray) -> ThermoState:
        pass

    @abstractmethod
    def enthalpy_RT_ref(self, T: float) -> np.ndarray:
        """Reference-state species enthalpies h_k/(R T)."""
        pass

    @abstractmethod
    def cp_R_ref(self, T: float) -> np.ndarray:
        """Reference-state species heat capacities cp_k/R."""
        pass

    def normalize(self, Y: np.ndarray) -> np.ndarray:
        """Clip negative mass fractions and rescale to unit sum."""
        Y = np.maximum(np.asarray(Y, dtype=float), 0.0)
        total = Y.sum()
        if total <= 0.0:
            return Y
        return Y / total


class KineticsModel(ABC):

    @abstractmethod
    def net_production_rates(self, T: float, P: float, Y: np.ndarray) -> np.ndarray:
        """Net molar production rate of every species [kmol/(m³·s)]."""
        pass


class TransportModel(ABC):

    @property
    @abstractmethod
    def closure(self) -> TransportClosure:
        pass

    @abstractmethod
    def viscosity(self, T: float, P: float, Y: np.ndarray) -> float:
        pass

    @abstractmethod
    def thermal_conductivity(self, T: float, P: float, Y: np.ndarray) -> float:
        pass

    def mix_diff_coeffs(self, T: float, P: float, Y: np.ndarray) -> np.ndarray:
        """Mixture-averaged diffusion coefficients (n_species,)."""
        raise NotImplementedError(
            f"{type(self).__name__} does not provide mixture-averaged coefficients")

    def multi_diff_coeffs(self, T: float, P: float, Y: np.ndarray) -> np.ndarray:
        """Multicomponent diffusion coefficients D[k, m] (n_species, n_species)."""
        raise NotImplementedError(
            f"{type(self).__name__} does not provide multicomponent coefficients")

    def thermal_diff_coeffs(self, T: float, P: float, Y: np.ndarray) -> np.ndarray:
        """Thermal diffusion coefficients (n_species,)."""
        raise NotImplementedError(
            f"{type(self).__name__} does not provide thermal diffusion coefficients")
