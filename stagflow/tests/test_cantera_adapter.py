"""
Pytest tests for the Cantera-backed collaborators.

Skipped when cantera is not installed.
"""

import numpy as np
import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

ct = pytest.importorskip("cantera")

from stagflow.src import FlowDomain, TransportClosure, PointStateAccessor
from stagflow.src.cantera_adapter import cantera_models
from stagflow.src.accessor import block_view
from stagflow.src.constants import OFFSET_Y


@pytest.fixture
def models():
    return cantera_models('h2o2.yaml')


@pytest.fixture
def composition(models):
    phase, _, _ = models
    gas = phase.gas
    gas.TPX = 300.0, ct.one_atm, 'H2:2, O2:1, AR:3.76'
    return np.array(gas.Y)


class TestAdapters:

    def test_phase(self, models, composition):
        phase, _, _ = models
        assert phase.is_ideal_gas
        assert phase.n_species == phase.gas.n_species
        assert phase.species_index('H2O') == phase.gas.species_index('H2O')
        assert phase.species_index('CO2') is None

        state = phase.thermo_state(1200.0, ct.one_atm, composition)
        gas = ct.Solution('h2o2.yaml')
        gas.TPY = 1200.0, ct.one_atm, composition
        assert state.density == pytest.approx(gas.density)
        assert state.cp_mass == pytest.approx(gas.cp_mass)

    def test_unnormalized_mass_fractions(self, models, composition):
        phase, _, _ = models
        a = phase.thermo_state(1000.0, ct.one_atm, composition)
        b = phase.thermo_state(1000.0, ct.one_atm, 1.01 * composition)
        assert a.mean_molecular_weight != b.mean_molecular_weight

    def test_transport_closure(self):
        _, _, mix = cantera_models('h2o2.yaml', 'mixture-averaged')
        _, _, multi = cantera_models('h2o2.yaml', 'multicomponent')
        assert mix.closure == TransportClosure.MIXTURE_AVERAGED
        assert multi.closure == TransportClosure.MULTICOMPONENT


class TestDomainWithCantera:
    """Residual evaluation with real property models."""

    @pytest.mark.parametrize("transport_model", ['mixture-averaged', 'multicomponent'])
    def test_evaluate(self, transport_model, composition):
        phase, kinetics, transport = cantera_models('h2o2.yaml', transport_model)
        n = 6
        domain = FlowDomain(phase, n_points=n)
        domain.setup_grid(np.linspace(0.0, 0.02, n))
        domain.set_kinetics(kinetics)
        domain.set_transport(transport)
        domain.solve_energy_eqn()

        x = domain.initial_solution(T=300.0, Y=composition, u=0.5)
        acc = PointStateAccessor(x, domain.n_components, n)
        acc.T[:] = np.linspace(300.0, 1500.0, n)
        acc.Y[:, -1] = composition * 0.9
        acc.Y[phase.species_index('H2O'), -1] += 0.1
        rsd, _ = domain.evaluate_full(x)

        assert np.all(np.isfinite(rsd))
        if transport_model == 'mixture-averaged':
            faces = domain.flux[:, :n - 1]
            assert np.allclose(faces.sum(axis=0), 0.0, atol=1e-12 * np.abs(faces).max())
        R = block_view(rsd, 0, domain.n_components, n)
        assert np.any(R[OFFSET_Y:, 1:-1] != 0.0)
