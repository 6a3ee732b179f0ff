"""
1D Axisymmetric Flame Residual Package
======================================

Residual evaluation for one-dimensional, chemically-reacting, axisymmetric
flow (laminar flames) on a structured grid.

Features:
- Free flames, axisymmetric stagnation flames and porous burners
- Mixture-averaged and multicomponent diffusion with optional Soret term
- Optically-thin CO2/H2O radiation
- Porous solid conduction with two-flux (S2) radiative transfer
- Full and windowed (3-point stencil) evaluation for numerical Jacobians

Solution components per point:
    velocity     - axial velocity u [m/s]
    spread_rate  - radial strain rate V = v/r [1/s]
    T            - temperature [K]
    lambda       - radial pressure gradient eigenvalue [N/m⁴]
    eField       - reserved, held at zero
    <species>    - mass fractions Y_k

Example:
    domain = FlowDomain(phase, n_points=11)
    domain.setup_grid(np.linspace(0.0, 0.02, 11))
    domain.set_transport(transport)
    x = domain.initial_solution(T=300.0, Y=Y0)
    rsd, diag = domain.evaluate_full(x)
"""

from .errors import (ConfigErrorKind, FlowConfigError, InvalidGrid, PhaseTypeUnsupported,
                     EmissivityOutOfRange, IncompatibleTransportClosure, UnknownFlowType,
                     UnknownComponent, StateSizeMismatch)
from .grid import GridState
from .accessor import PointStateAccessor, upwind_derivative
from .thermo import (ThermoState, TransportClosure, PhaseModel, KineticsModel,
                     TransportModel)
from .properties import PropertyUpdater
from .diffusion import DiffusiveFluxModel, MixtureAveragedFlux, MulticomponentFlux
from .radiation import PlanckMeanCoefficients, RadiationModel
from .porous import SolidProperties, SolidSolverConfig, PorousSolidSolver
from .boundary import (FlowVariant, FlowStrategy, StagnationFlowStrategy,
                       FreeFlowStrategy, PorousFlowStrategy)
from .residual import ResidualEvaluator
from .domain import FlowDomain

__all__ = [
    # Errors
    'ConfigErrorKind',
    'FlowConfigError',
    'InvalidGrid',
    'PhaseTypeUnsupported',
    'EmissivityOutOfRange',
    'IncompatibleTransportClosure',
    'UnknownFlowType',
    'UnknownComponent',
    'StateSizeMismatch',

    # Grid and solution access
    'GridState',
    'PointStateAccessor',
    'upwind_derivative',

    # Collaborator contracts
    'ThermoState',
    'TransportClosure',
    'PhaseModel',
    'KineticsModel',
    'TransportModel',

    # Caches and closures
    'PropertyUpdater',
    'DiffusiveFluxModel',
    'MixtureAveragedFlux',
    'MulticomponentFlux',

    # Radiation
    'PlanckMeanCoefficients',
    'RadiationModel',

    # Porous media
    'SolidProperties',
    'SolidSolverConfig',
    'PorousSolidSolver',

    # Flow variants
    'FlowVariant',
    'FlowStrategy',
    'StagnationFlowStrategy',
    'FreeFlowStrategy',
    'PorousFlowStrategy',

    # Residual
    'ResidualEvaluator',
    'FlowDomain',
]

__version__ = '1.0.0'
