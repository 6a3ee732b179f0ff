"""
Physical constants and solution-vector layout for the flow domain.

Solution components at each grid point (contiguous per point):
    0  u      - axial velocity [m/s]
    1  V      - radial strain rate (spread rate) [1/s]
    2  T      - temperature [K]
    3  lambda - radial pressure gradient eigenvalue (1/r dP/dr) [N/m^4]
    4  eField - reserved electric-field slot (held at zero)
    5+ Y_k    - species mass fractions
"""

# Offsets of solution components in the per-point block
OFFSET_U = 0
OFFSET_V = 1
OFFSET_T = 2
OFFSET_L = 3
OFFSET_E = 4
OFFSET_Y = 5

# Fixed names for the structural components
COMPONENT_NAMES = ('velocity', 'spread_rate', 'T', 'lambda', 'eField')

GAS_CONSTANT = 8314.46261815324     # Universal gas constant [J/(kmol·K)]
STEFAN_BOLTZMANN = 5.670374419e-8   # [W/(m²·K⁴)]
ONE_ATM = 101325.0                  # [Pa]

# Lower temperature bound reported to the outer solver [K]
T_MIN_BOUND = 200.0

# Mass fraction bounds reported to the outer solver
Y_MIN_BOUND = -1.0e-7
Y_MAX_BOUND = 1.0e5

UNBOUNDED = 1.0e20
