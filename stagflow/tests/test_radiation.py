"""
Pytest tests for the optically-thin radiation model.

Tests verify:
1. Loss equals 4 k_P sigma T⁴ with non-emitting boundaries
2. Boundary emission terms
3. Absent radiating species contribute nothing
4. Emissivities outside [0, 1] are rejected
"""

import numpy as np
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from stagflow.src import (RadiationModel, PlanckMeanCoefficients, EmissivityOutOfRange,
                          ConfigErrorKind)
from stagflow.src.constants import ONE_ATM, STEFAN_BOLTZMANN


@pytest.fixture
def model():
    """CO2 at index 0, H2O at index 1."""
    return RadiationModel(co2_index=0, h2o_index=1)


@pytest.fixture
def mixture():
    T = np.array([300.0, 900.0, 1500.0, 2100.0, 600.0])
    X = np.vstack([np.full(5, 0.1), np.full(5, 0.2)])
    return T, X


class TestPlanckMeanAbsorption:
    """Test the polynomial absorption coefficient."""

    def test_unit_theta(self, model):
        # 1000/T = 1 so each fit reduces to the sum of its coefficients
        c = PlanckMeanCoefficients()
        T = np.array([1000.0])
        X = np.array([[0.1], [0.2]])
        k_P = model.planck_mean_absorption(T, X, 2.0 * ONE_ATM)
        expected = 2.0 * (0.1 * c.co2.sum() + 0.2 * c.h2o.sum())
        assert k_P[0] == pytest.approx(expected, rel=1e-12)

    def test_absent_species(self, mixture):
        T, X = mixture
        model = RadiationModel(co2_index=None, h2o_index=None)
        assert np.all(model.planck_mean_absorption(T, X, ONE_ATM) == 0.0)

    def test_single_species(self, mixture):
        T, X = mixture
        both = RadiationModel(0, 1).planck_mean_absorption(T, X, ONE_ATM)
        co2 = RadiationModel(0, None).planck_mean_absorption(T, X, ONE_ATM)
        h2o = RadiationModel(None, 1).planck_mean_absorption(T, X, ONE_ATM)
        assert np.allclose(both, co2 + h2o)

    def test_custom_coefficients(self, mixture):
        T, X = mixture
        coeffs = PlanckMeanCoefficients(h2o=np.array([1.0, 0, 0, 0, 0, 0]),
                                        co2=np.array([0.0, 0, 0, 0, 0, 0]))
        model = RadiationModel(0, 1, coeffs)
        k_P = model.planck_mean_absorption(T, X, ONE_ATM)
        assert np.allclose(k_P, 0.2)


class TestRadiativeLoss:
    """Test the volumetric loss term."""

    def test_zero_emissivity(self, model, mixture):
        T, X = mixture
        qdot = np.zeros(5)
        model.compute(T, X, ONE_ATM, 0, 5, qdot)
        k_P = model.planck_mean_absorption(T, X, ONE_ATM)
        expected = 4.0 * k_P * STEFAN_BOLTZMANN * T ** 4
        assert np.allclose(qdot, expected, rtol=1e-12), \
            f"Expected 4 k_P sigma T^4, got {qdot}"

    def test_boundary_emission(self, model, mixture):
        T, X = mixture
        model.set_boundary_emissivities(1.0, 0.5)
        qdot = np.zeros(5)
        model.compute(T, X, ONE_ATM, 0, 5, qdot)
        k_P = model.planck_mean_absorption(T, X, ONE_ATM)
        s = STEFAN_BOLTZMANN
        expected = 2.0 * k_P * (2.0 * s * T ** 4 - s * T[0] ** 4 - 0.5 * s * T[-1] ** 4)
        assert np.allclose(qdot, expected, rtol=1e-12)

    def test_range_is_half_open(self, model, mixture):
        T, X = mixture
        qdot = np.full(5, -1.0)
        model.compute(T, X, ONE_ATM, 1, 3, qdot)
        assert qdot[0] == -1.0 and qdot[3] == -1.0 and qdot[4] == -1.0
        assert qdot[1] != -1.0 and qdot[2] != -1.0


class TestEmissivityValidation:

    @pytest.mark.parametrize("e_left,e_right", [(-0.1, 0.5), (1.1, 0.5),
                                                (0.5, -0.01), (0.5, 2.0)])
    def test_out_of_range(self, model, e_left, e_right):
        with pytest.raises(EmissivityOutOfRange) as excinfo:
            model.set_boundary_emissivities(e_left, e_right)
        assert excinfo.value.kind == ConfigErrorKind.EMISSIVITY_OUT_OF_RANGE

    def test_rejected_values_not_stored(self, model):
        model.set_boundary_emissivities(0.3, 0.4)
        with pytest.raises(EmissivityOutOfRange):
            model.set_boundary_emissivities(0.9, 1.5)
        assert model.epsilon_left == 0.3 and model.epsilon_right == 0.4

    def test_limits_accepted(self, model):
        model.set_boundary_emissivities(0.0, 1.0)
        assert model.epsilon_right == 1.0
