"""
Test cases for the flame residual engine.

Run tests with pytest:
    pytest stagflow/tests/ -v

Or run individual test files:
    pytest stagflow/tests/test_residual.py -v
    pytest stagflow/tests/test_porous.py -v
"""

from .mocks import (IdealGasMock, ConstantKinetics, MixtureAveragedTransportMock,
                    MulticomponentTransportMock)

__all__ = [
    'IdealGasMock',
    'ConstantKinetics',
    'MixtureAveragedTransportMock',
    'MulticomponentTransportMock',
]
