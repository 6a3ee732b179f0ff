"""
Stagflow - 1D Axisymmetric Flame Residual Engine
================================================

Re-exports all public components from stagflow.src
"""

from stagflow.src import (
    # Errors
    ConfigErrorKind,
    FlowConfigError,
    InvalidGrid,
    PhaseTypeUnsupported,
    EmissivityOutOfRange,
    IncompatibleTransportClosure,
    UnknownFlowType,
    UnknownComponent,
    StateSizeMismatch,
    # Grid
    GridState,
    # Collaborator contracts
    ThermoState,
    TransportClosure,
    PhaseModel,
    KineticsModel,
    TransportModel,
    # Models
    PlanckMeanCoefficients,
    SolidProperties,
    SolidSolverConfig,
    # Domain
    FlowVariant,
    FlowDomain,
)

__all__ = [
    'ConfigErrorKind',
    'FlowConfigError',
    'InvalidGrid',
    'PhaseTypeUnsupported',
    'EmissivityOutOfRange',
    'IncompatibleTransportClosure',
    'UnknownFlowType',
    'UnknownComponent',
    'StateSizeMismatch',
    'GridState',
    'ThermoState',
    'TransportClosure',
    'PhaseModel',
    'KineticsModel',
    'TransportModel',
    'PlanckMeanCoefficients',
    'SolidProperties',
    'SolidSolverConfig',
    'FlowVariant',
    'FlowDomain',
]
