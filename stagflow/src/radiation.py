"""
Optically-thin, gray-gas radiative heat loss.

Model of Y. Liu and B. Rogg, "Modelling of thermally radiating diffusion
flames with detailed chemistry and transport", EUROTHERM Seminars 17,
114-127 (1991). Only CO2 and H2O radiate. Planck mean absorption
coefficients are fifth-order polynomials in 1000/T fitted to RADCAL
(Grosshandler, NIST TN 1402, 1993); coefficients from the TNF workshop
radiation model (sandia.gov/TNF/radiation.html).
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Optional

from .constants import ONE_ATM, STEFAN_BOLTZMANN
from .errors import EmissivityOutOfRange


@dataclass
class PlanckMeanCoefficients:
    """Polynomial fits a_n (1000/T)^n for the Planck mean absorption coefficient."""
    h2o: np.ndarray = field(default_factory=lambda: np.array(
        [-0.23093, -1.12390, 9.41530, -2.99880, 0.51382, -1.86840e-5]))
    co2: np.ndarray = field(default_factory=lambda: np.array(
        [18.741, -121.310, 273.500, -194.050, 56.310, -5.8169]))
    reference_pressure: float = ONE_ATM     # [Pa]
    sigma: float = STEFAN_BOLTZMANN


class RadiationModel:
    """
    Volumetric radiative loss

        q_rad = 2 k_P (2 sigma T⁴ - eps_L sigma T_L⁴ - eps_R sigma T_R⁴)

    where k_P = P sum_i X_i k_i(T) over the radiating species present.
    """

    def __init__(self, co2_index: Optional[int], h2o_index: Optional[int],
                 coefficients: PlanckMeanCoefficients = None):
        self.co2_index = co2_index
        self.h2o_index = h2o_index
        self.coefficients = coefficients if coefficients is not None else PlanckMeanCoefficients()
        self.epsilon_left = 0.0
        self.epsilon_right = 0.0

    def set_boundary_emissivities(self, e_left: float, e_right: float):
        if e_left < 0 or e_left > 1:
            raise EmissivityOutOfRange(
                "The left boundary emissivity must be between 0.0 and 1.0!")
        if e_right < 0 or e_right > 1:
            raise EmissivityOutOfRange(
                "The right boundary emissivity must be between 0.0 and 1.0!")
        self.epsilon_left = e_left
        self.epsilon_right = e_right

    def _polynomial(self, coeffs: np.ndarray, T: np.ndarray) -> np.ndarray:
        theta = 1000.0 / T
        # np.polyval expects the highest power first
        return np.polyval(coeffs[::-1], theta)

    def planck_mean_absorption(self, T: np.ndarray, X: np.ndarray,
                               pressure: float) -> np.ndarray:
        """
        Planck mean absorption coefficient k_P [1/m].

        Args:
            T: Temperatures (n,)
            X: Mole fractions (n_species, n)
            pressure: Pressure [Pa]
        """
        T = np.asarray(T, dtype=float)
        c = self.coefficients
        k_P = np.zeros_like(T)
        if self.h2o_index is not None:
            k_h2o = self._polynomial(c.h2o, T) / c.reference_pressure
            k_P += pressure * X[self.h2o_index] * k_h2o
        if self.co2_index is not None:
            k_co2 = self._polynomial(c.co2, T) / c.reference_pressure
            k_P += pressure * X[self.co2_index] * k_co2
        return k_P

    def compute(self, T: np.ndarray, X: np.ndarray, pressure: float,
                jmin: int, jmax: int, qdot: np.ndarray):
        """
        Fill qdot[j] for jmin <= j < jmax.

        Boundary emission uses the temperatures at the first and last points.
        """
        if jmax <= jmin:
            return
        sigma = self.coefficients.sigma
        boundary_left = self.epsilon_left * sigma * T[0] ** 4
        boundary_right = self.epsilon_right * sigma * T[-1] ** 4

        pts = slice(jmin, jmax)
        k_P = self.planck_mean_absorption(T[pts], X[:, pts], pressure)
        qdot[pts] = 2.0 * k_P * (2.0 * sigma * T[pts] ** 4 - boundary_left - boundary_right)
