"""
Flow domain: configuration, state flags and residual evaluation entry points.

A FlowDomain owns the grid, the property and flux caches, the radiation
model and (porous variant only) the solid sub-solver. The residual is
assembled by a ResidualEvaluator bound to the domain; variant-specific
rows come from the FlowStrategy selected by the variant tag.

Typical use:

    domain = FlowDomain(phase, n_points=11)
    domain.setup_grid(np.linspace(0.0, 0.02, 11))
    domain.set_transport(transport)
    domain.set_kinetics(kinetics)
    x = domain.initial_solution(T=300.0, Y=Y0)
    rsd, diag = domain.evaluate_full(x, rdt=0.0)
"""

import logging

import numpy as np
from typing import List, Optional, Tuple

from .boundary import FlowVariant, describe_variant, strategy_for, variant_from_description
from .constants import (COMPONENT_NAMES, OFFSET_U, OFFSET_V, OFFSET_T, OFFSET_L,
                        OFFSET_E, OFFSET_Y, ONE_ATM, T_MIN_BOUND, Y_MIN_BOUND,
                        Y_MAX_BOUND, UNBOUNDED)
from .diffusion import MixtureAveragedFlux, flux_model_for
from .errors import (FlowConfigError, IncompatibleTransportClosure, PhaseTypeUnsupported,
                     StateSizeMismatch, UnknownComponent)
from .grid import GridState
from .porous import PorousSolidSolver, SolidProperties, SolidSolverConfig
from .properties import PropertyUpdater
from .radiation import PlanckMeanCoefficients, RadiationModel
from .residual import ResidualEvaluator
from .serialization import dataclass_from_dict
from .thermo import KineticsModel, PhaseModel, TransportModel

logger = logging.getLogger(__name__)

# keys of the per-point solid arrays in exported state
_SOLID_ARRAYS = {
    'Tsolid': 'Tw',
    'Radiation': 'dq',
    'Porosity': 'pore',
    'Diameter': 'diam',
    'SolidConductivity': 'scond',
    'Hconv': 'hconv',
}


class FlowDomain:
    """
    One-dimensional axisymmetric flow domain.

    Solution components per point: velocity, spread_rate, T, lambda,
    eField, then one mass fraction per species.
    """

    def __init__(self, phase: PhaseModel, n_points: int,
                 variant: FlowVariant = FlowVariant.AXISYMMETRIC_STAGNATION,
                 solid_properties: SolidProperties = None,
                 solid_config: SolidSolverConfig = None,
                 radiation_coefficients: PlanckMeanCoefficients = None):
        if not phase.is_ideal_gas:
            raise PhaseTypeUnsupported(
                "Unsupported phase type: need an ideal gas phase model")
        describe_variant(variant)
        # placeholder grid until setup_grid; rejects n_points < 2
        self.grid = GridState(np.linspace(0.0, 1.0, n_points))

        self.phase = phase
        self.n_species = phase.n_species
        self.n_components = OFFSET_Y + self.n_species
        self.n_points = n_points
        self.variant = variant
        self.strategy = strategy_for(variant)

        self.pressure = ONE_ATM
        self.loc = 0
        self.first_point = 0
        self.prev_soln = None
        self.force_full_update = False
        self.needs_jacobian_update = False

        self.props = PropertyUpdater(phase, n_points)
        self.props.viscous = variant != FlowVariant.FREE_FLOW
        self.flux_model = MixtureAveragedFlux()
        self.flux = np.zeros((self.n_species, n_points))

        self.soret_enabled = False
        self.radiation_enabled = False
        self.radiation = RadiationModel(phase.species_index('CO2'),
                                        phase.species_index('H2O'),
                                        radiation_coefficients)
        self.qdot_radiation = np.zeros(n_points)

        self._energy = np.zeros(n_points, dtype=bool)
        self.species_enabled = np.ones(self.n_species, dtype=bool)
        self._fixed_temp = np.zeros(n_points)
        self.zfix = np.zeros(0)
        self.tfix = np.zeros(0)

        # free-flow anchor
        self.z_fixed: Optional[float] = None
        self.t_fixed: Optional[float] = None
        self.fixed_point_velocity = 0.3

        self.left_excess_species = 0
        self.right_excess_species = 0

        self.solid = None
        self._solid_update_requested = False
        if variant == FlowVariant.POROUS_MEDIA:
            self.solid = PorousSolidSolver(n_points, solid_properties, solid_config)

        self.evaluator = ResidualEvaluator(self)

    # --- grid and sizing ---

    @property
    def size(self) -> int:
        """Length of this domain's block in the solution buffer."""
        return self.n_components * self.n_points

    @property
    def last_point(self) -> int:
        return self.first_point + self.n_points - 1

    def set_location(self, first_point: int, loc: int):
        """Place the domain in a multi-domain buffer."""
        self.first_point = first_point
        self.loc = loc

    def setup_grid(self, z):
        """
        Install a new grid. Every per-point cache is reallocated; the solid
        fields of a porous domain are remapped onto the new coordinates.
        """
        grid = GridState(z)
        n = grid.n_points
        if self.solid is not None:
            self.solid.remap(self.grid.z, grid)

        if n != self.n_points:
            self._energy = self._resized(self._energy, n, False)
            self._fixed_temp = self._resized(self._fixed_temp, n, 0.0)
            self.qdot_radiation = np.zeros(n)
            self.flux = np.zeros((self.n_species, n))
            self.props.resize(n)
        self.n_points = n
        self.grid = grid

    @staticmethod
    def _resized(values: np.ndarray, n: int, fill) -> np.ndarray:
        out = np.full(n, fill, dtype=values.dtype)
        m = min(n, values.size)
        out[:m] = values[:m]
        return out

    # --- collaborators ---

    def set_pressure(self, pressure: float):
        self.pressure = pressure

    def set_kinetics(self, kinetics: KineticsModel):
        self.props.kinetics = kinetics

    def set_transport(self, transport: TransportModel):
        """Bind a transport model and select the matching flux closure."""
        self.props.set_transport(transport)
        self.flux_model = flux_model_for(transport.closure)

    @property
    def transport_closure(self):
        if self.props.transport is None:
            return None
        return self.props.transport.closure

    def set_previous_solution(self, x_prev: Optional[np.ndarray]):
        """Previous time level used by the pseudo-transient terms."""
        self.prev_soln = x_prev

    # --- model toggles ---

    def enable_soret(self, enabled: bool = True):
        self.soret_enabled = bool(enabled)

    def enable_radiation(self, enabled: bool = True):
        self.radiation_enabled = bool(enabled)

    def set_boundary_emissivities(self, e_left: float, e_right: float):
        self.radiation.set_boundary_emissivities(e_left, e_right)

    @property
    def left_emissivity(self) -> float:
        return self.radiation.epsilon_left

    @property
    def right_emissivity(self) -> float:
        return self.radiation.epsilon_right

    def set_viscosity_flag(self, enabled: bool):
        self.needs_jacobian_update = True
        self.props.viscous = bool(enabled)

    @property
    def viscosity_enabled(self) -> bool:
        return self.props.viscous

    # --- flow variant ---

    def set_free_flow(self):
        self._set_variant(FlowVariant.FREE_FLOW)
        self.props.viscous = False

    def set_axisymmetric_flow(self):
        self._set_variant(FlowVariant.AXISYMMETRIC_STAGNATION)
        self.props.viscous = True

    def _set_variant(self, variant: FlowVariant):
        if self.solid is not None and variant != FlowVariant.POROUS_MEDIA:
            logger.debug("Dropping porous solid state on switch to %s",
                         describe_variant(variant))
            self.solid = None
        self.variant = variant
        self.strategy = strategy_for(variant)

    @property
    def flow_type(self) -> str:
        return describe_variant(self.variant)

    @property
    def fixed_mdot(self) -> bool:
        """True if the inlet mass flux is imposed rather than solved for."""
        return self.variant != FlowVariant.FREE_FLOW

    # --- energy equation ---

    def solve_energy_eqn(self, j: Optional[int] = None):
        """Enable the energy equation at point j, or everywhere if j is None."""
        changed = False
        if j is None:
            changed = not self._energy.all()
            self._energy[:] = True
        elif not self._energy[j]:
            self._energy[j] = True
            changed = True
        if changed:
            self.needs_jacobian_update = True

    def fix_temperature(self, j: Optional[int] = None):
        """Disable the energy equation at point j, or everywhere if j is None."""
        changed = False
        if j is None:
            changed = self._energy.any()
            self._energy[:] = False
        elif self._energy[j]:
            self._energy[j] = False
            changed = True
        if changed:
            self.needs_jacobian_update = True

    def do_energy(self, j: int) -> bool:
        return bool(self._energy[j])

    @property
    def energy_enabled(self) -> np.ndarray:
        return self._energy.copy()

    def set_temperature(self, j: int, t: float):
        """Pin the temperature at point j."""
        self._fixed_temp[j] = t
        if self._energy[j]:
            self.needs_jacobian_update = True
        self._energy[j] = False

    def T_fixed(self, j: int) -> float:
        return float(self._fixed_temp[j])

    def set_fixed_temp_profile(self, zfix, tfix):
        """
        Temperature profile used where the energy equation is disabled.

        Args:
            zfix: Positions normalized onto [0, 1] of the domain
            tfix: Temperatures at those positions [K]
        """
        zfix = np.asarray(zfix, dtype=float)
        tfix = np.asarray(tfix, dtype=float)
        if zfix.shape != tfix.shape:
            raise StateSizeMismatch(
                f"fixed temperature profile has {zfix.size} positions "
                f"but {tfix.size} temperatures")
        self.zfix = zfix
        self.tfix = tfix

    def set_fixed_point(self, z: float, t: float):
        """Anchor location and temperature of a free flame."""
        self.z_fixed = float(z)
        self.t_fixed = float(t)

    # --- porous solid ---

    def request_solid_update(self):
        """Schedule a solid sub-solve on the next evaluation."""
        self._solid_update_requested = True

    def consume_solid_update(self) -> bool:
        """Return and clear the pending solid sub-solve request."""
        requested = self._solid_update_requested
        self._solid_update_requested = False
        return requested

    @property
    def solid_temperature(self) -> Optional[np.ndarray]:
        if self.solid is None:
            return None
        return self.solid.state.Tw.copy()

    # --- evaluation ---

    def evaluate_full(self, x: np.ndarray, rdt: float = 0.0,
                      rsd: np.ndarray = None,
                      diag: np.ndarray = None) -> Tuple[np.ndarray, np.ndarray]:
        return self.evaluator.evaluate_full(x, rdt, rsd, diag)

    def evaluate_window(self, x: np.ndarray, jg: int,
                        rsd: np.ndarray = None,
                        diag: np.ndarray = None) -> Tuple[np.ndarray, np.ndarray]:
        return self.evaluator.evaluate_window(x, jg, rsd, diag)

    def validate(self) -> List[FlowConfigError]:
        """
        Configuration problems that would make evaluation fail, returned
        rather than raised. An empty list means the domain is ready.
        """
        errors = []
        if self.soret_enabled and not self.props.multicomponent:
            errors.append(IncompatibleTransportClosure(
                "Thermal diffusion (the Soret effect) requires using a "
                "multicomponent transport model."))
        if self.transport_closure is None:
            errors.append(IncompatibleTransportClosure(
                "No transport model has been set."))
        return errors

    def finalize(self, x: np.ndarray):
        """
        Prepare flags and the fixed temperature before a solve.

        Fills the fixed temperature from the current solution, or from the
        fixed temperature profile when energy is disabled at the first
        point. For a free flame whose fixed point is not on the grid, the
        anchor moves to the grid point where the profile crosses t_fixed.
        """
        if self.soret_enabled and not self.props.multicomponent:
            raise IncompatibleTransportClosure(
                "Thermal diffusion (the Soret effect) is enabled, and requires "
                "using a multicomponent transport model.")

        values = self._values(x)
        T = values[OFFSET_T]
        energy_at_inlet = self.do_energy(0)
        if energy_at_inlet or self.zfix.size == 0:
            self._fixed_temp[:] = T
        else:
            self._fixed_temp[:] = np.interp(self.grid.normalized(), self.zfix, self.tfix)

        if energy_at_inlet:
            self.solve_energy_eqn()

        if self.variant == FlowVariant.FREE_FLOW and self.t_fixed is not None:
            z = self.grid.z
            if self.z_fixed is not None and np.any(z == self.z_fixed):
                return
            crossing = (T[:-1] - self.t_fixed) * (T[1:] - self.t_fixed) <= 0.0
            hits = np.nonzero(crossing)[0]
            if hits.size:
                j = hits[0] + 1
                self.t_fixed = float(T[j])
                self.z_fixed = float(z[j])
                logger.debug("Fixed point moved to z = %g m (T = %g K)",
                             self.z_fixed, self.t_fixed)

    # --- components ---

    def component_name(self, n: int) -> str:
        if 0 <= n < OFFSET_Y:
            return COMPONENT_NAMES[n]
        if OFFSET_Y <= n < self.n_components:
            return self.phase.species_names[n - OFFSET_Y]
        raise UnknownComponent(f"Unknown component index {n}")

    def component_index(self, name: str) -> int:
        if name in COMPONENT_NAMES:
            return COMPONENT_NAMES.index(name)
        k = self.phase.species_index(name)
        if k is None:
            raise UnknownComponent(f"No component named '{name}'")
        return OFFSET_Y + k

    def component_active(self, n: int) -> bool:
        """Inactive components are present in the buffer but not physical."""
        self._check_component(n)
        if n in (OFFSET_V, OFFSET_L):
            return self.variant != FlowVariant.FREE_FLOW
        if n == OFFSET_E:
            return False
        return True

    def component_bounds(self, n: int) -> Tuple[float, float]:
        """(lower, upper) bounds of component n for the outer solver."""
        self._check_component(n)
        if n == OFFSET_T:
            return T_MIN_BOUND, 2.0 * self.phase.max_temp
        if n >= OFFSET_Y:
            return Y_MIN_BOUND, Y_MAX_BOUND
        return -UNBOUNDED, UNBOUNDED

    def _check_component(self, n: int):
        if not 0 <= n < self.n_components:
            raise UnknownComponent(f"Unknown component index {n}")

    # --- solution helpers ---

    def _values(self, x: np.ndarray) -> np.ndarray:
        block = x[self.loc:self.loc + self.size]
        return block.reshape(self.n_points, self.n_components).T

    def initial_solution(self, T: float, Y, u: float = 0.0) -> np.ndarray:
        """Solution block holding a uniform state at every point."""
        Y = np.asarray(Y, dtype=float)
        if Y.size != self.n_species:
            raise StateSizeMismatch(
                f"expected {self.n_species} mass fractions, got {Y.size}")
        x = np.zeros(self.size)
        values = x.reshape(self.n_points, self.n_components).T
        values[OFFSET_U] = u
        values[OFFSET_T] = T
        values[OFFSET_Y:] = Y[:, np.newaxis]
        return x

    def reset_bad_values(self, x: np.ndarray):
        """Clip negative mass fractions and renormalize at every point."""
        values = self._values(x)
        for j in range(self.n_points):
            values[OFFSET_Y:, j] = self.phase.normalize(values[OFFSET_Y:, j])

    # --- queries ---

    def density(self, j: int) -> float:
        return float(self.props.rho[j])

    def radiative_heat_loss(self, j: int) -> float:
        return float(self.qdot_radiation[j])

    # --- state export/import ---

    def serialize(self, x: np.ndarray = None) -> dict:
        """Plain-dict snapshot of the grid, flags and (optionally) the solution."""
        state = {
            'type': self.flow_type,
            'pressure': self.pressure,
            'phase': {'species': list(self.phase.species_names)},
            'radiation-enabled': self.radiation_enabled,
            'emissivity-left': self.left_emissivity,
            'emissivity-right': self.right_emissivity,
            'Soret-enabled': self.soret_enabled,
            'viscosity-enabled': self.viscosity_enabled,
            'grid': self.grid.z.tolist(),
            'fixed-temperature': self._fixed_temp.tolist(),
        }
        if self.radiation_enabled:
            state['radiative-heat-loss'] = self.qdot_radiation.tolist()

        if np.all(self._energy == self._energy[0]):
            state['energy-enabled'] = bool(self._energy[0])
        else:
            state['energy-enabled'] = self._energy.tolist()

        if np.all(self.species_enabled == self.species_enabled[0]):
            state['species-enabled'] = bool(self.species_enabled[0])
        else:
            state['species-enabled'] = {
                name: bool(flag)
                for name, flag in zip(self.phase.species_names, self.species_enabled)}

        if self.zfix.size:
            state['fixed-temperature-profile'] = {'z': self.zfix.tolist(),
                                                  'T': self.tfix.tolist()}
        if self.z_fixed is not None:
            state['fixed-point'] = {'location': self.z_fixed,
                                    'temperature': self.t_fixed}

        if x is not None:
            values = self._values(x)
            for n in range(self.n_components):
                if self.component_active(n):
                    state[self.component_name(n)] = values[n].tolist()

        if self.solid is not None:
            solid = {'properties': self.solid.properties.to_dict()}
            for key, attr in _SOLID_ARRAYS.items():
                solid[key] = getattr(self.solid.state, attr).tolist()
            state['porous-solid'] = solid
        return state

    def restore(self, state: dict, x: np.ndarray = None) -> np.ndarray:
        """
        Load a snapshot produced by serialize().

        The grid in the snapshot replaces the current grid. Component data
        is written into x (allocated if None) and x is returned.
        """
        if 'type' in state:
            variant = variant_from_description(state['type'])
            if variant != self.variant and variant != FlowVariant.POROUS_MEDIA:
                self._set_variant(variant)

        self.pressure = float(state.get('pressure', self.pressure))
        if 'grid' in state:
            self.setup_grid(state['grid'])
        n = self.n_points

        if x is None:
            x = np.zeros(self.loc + self.size)
        elif x.size < self.loc + self.size:
            raise StateSizeMismatch(
                f"solution buffer holds {x.size} values, need {self.loc + self.size}")

        values = self._values(x)
        for i in range(self.n_components):
            if not self.component_active(i):
                continue
            name = self.component_name(i)
            if name in state:
                values[i] = self._checked_array(state[name], n, name)
            else:
                logger.warning("Saved state does not contain values for component '%s'",
                               name)

        if 'energy-enabled' in state:
            ee = state['energy-enabled']
            if np.isscalar(ee):
                self._energy[:] = bool(ee)
            else:
                self._energy = self._checked_array(ee, n, 'energy-enabled').astype(bool)
            self.needs_jacobian_update = True

        if 'Soret-enabled' in state:
            self.soret_enabled = bool(state['Soret-enabled'])
        if 'species-enabled' in state:
            self._restore_species_flags(state['species-enabled'])
        else:
            logger.warning("Saved state does not contain species flags; enabling all species")
            self.species_enabled[:] = True
        if 'viscosity-enabled' in state:
            self.props.viscous = bool(state['viscosity-enabled'])

        if 'radiation-enabled' in state:
            self.radiation_enabled = bool(state['radiation-enabled'])
        if 'emissivity-left' in state or 'emissivity-right' in state:
            self.set_boundary_emissivities(
                float(state.get('emissivity-left', self.left_emissivity)),
                float(state.get('emissivity-right', self.right_emissivity)))
        if 'radiative-heat-loss' in state:
            self.qdot_radiation = self._checked_array(
                state['radiative-heat-loss'], n, 'radiative-heat-loss')

        if 'fixed-temperature' in state:
            self._fixed_temp = self._checked_array(
                state['fixed-temperature'], n, 'fixed-temperature')
        if 'fixed-temperature-profile' in state:
            profile = state['fixed-temperature-profile']
            self.set_fixed_temp_profile(profile['z'], profile['T'])
        if 'fixed-point' in state:
            self.set_fixed_point(state['fixed-point']['location'],
                                 state['fixed-point']['temperature'])

        if self.solid is not None and 'porous-solid' in state:
            self._restore_solid(state['porous-solid'], n)
        return x

    @staticmethod
    def _checked_array(data, n: int, name: str) -> np.ndarray:
        values = np.asarray(data, dtype=float)
        if values.size != n:
            raise StateSizeMismatch(
                f"'{name}' has length {values.size}, expected {n}")
        return values.copy()

    def _restore_species_flags(self, se):
        names = self.phase.species_names
        if np.isscalar(se):
            self.species_enabled[:] = bool(se)
        elif isinstance(se, dict):
            missing = [name for name in names if name not in se]
            if missing:
                logger.warning("Saved state does not contain species flags for %s; "
                               "enabling all species", ", ".join(missing))
                self.species_enabled[:] = True
            else:
                self.species_enabled = np.array([bool(se[name]) for name in names])
        elif len(se) != self.n_species:
            logger.warning("Saved species flags have length %d, expected %d; "
                           "enabling all species", len(se), self.n_species)
            self.species_enabled[:] = True
        else:
            self.species_enabled = np.array(se, dtype=bool)

    def _restore_solid(self, solid: dict, n: int):
        if 'properties' in solid:
            self.solid.properties = dataclass_from_dict(SolidProperties,
                                                        solid['properties'])
        s = self.solid.state
        for key, attr in _SOLID_ARRAYS.items():
            if key in solid:
                setattr(s, attr, self._checked_array(solid[key], n, key))
            else:
                logger.warning("Saved porous state does not contain '%s'", key)
