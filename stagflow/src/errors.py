"""
Configuration errors raised by the flow domain.

Every error carries an explicit ``kind`` so callers can dispatch on it
without matching message text.
"""

from enum import Enum


class ConfigErrorKind(Enum):
    INVALID_GRID = 'invalid_grid'
    PHASE_TYPE_UNSUPPORTED = 'phase_type_unsupported'
    EMISSIVITY_OUT_OF_RANGE = 'emissivity_out_of_range'
    INCOMPATIBLE_TRANSPORT_CLOSURE = 'incompatible_transport_closure'
    UNKNOWN_FLOW_TYPE = 'unknown_flow_type'
    UNKNOWN_COMPONENT = 'unknown_component'
    STATE_SIZE_MISMATCH = 'state_size_mismatch'


class FlowConfigError(ValueError):
    """Base class for rejected domain configurations."""
    kind: ConfigErrorKind = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidGrid(FlowConfigError):
    kind = ConfigErrorKind.INVALID_GRID


class PhaseTypeUnsupported(FlowConfigError):
    kind = ConfigErrorKind.PHASE_TYPE_UNSUPPORTED


class EmissivityOutOfRange(FlowConfigError):
    kind = ConfigErrorKind.EMISSIVITY_OUT_OF_RANGE


class IncompatibleTransportClosure(FlowConfigError):
    kind = ConfigErrorKind.INCOMPATIBLE_TRANSPORT_CLOSURE


class UnknownFlowType(FlowConfigError):
    kind = ConfigErrorKind.UNKNOWN_FLOW_TYPE


class UnknownComponent(FlowConfigError):
    kind = ConfigErrorKind.UNKNOWN_COMPONENT


class StateSizeMismatch(FlowConfigError):
    kind = ConfigErrorKind.STATE_SIZE_MISMATCH
