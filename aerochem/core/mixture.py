"""
Mixture: the thermodynamic facade.

A Mixture ties together the species registry, a thermodynamic database, a
state model, the equilibrium solver and (optionally) a reaction mechanism.
It is the single object user code talks to:

    >>> mix = Mixture(MixtureOptions(species=["N2", "N", "N+", "N2+", "e-"]))
    >>> X = mix.equilibrate(8000.0, 101325.0)
    >>> mix.mixture_frozen_cp_mass(), mix.mixture_equilibrium_cp_mass()

Conventions:
    - molecular weights are kg/mol, concentrations mol/m^3
    - species properties are dimensionless (Cp/R, H/RT, S/R, G/RT)
    - the electron, when loaded, is species 0
"""

import logging
from collections.abc import Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from .constants import ELECTRON_ELEMENT, KB, NA, RU
from .equilibrium import EquilibriumSolver
from .kinetics import Kinetics
from .options import MixtureOptions
from .registry import SpeciesRegistry
from .state_models import create_state_model
from .thermo_db import create_thermo_db
from .types import (
    ConfigurationError,
    EnergyComponents,
    EquilibriumResult,
    InvalidStateError,
)
from .validation import ValidationResult

logger = logging.getLogger(__name__)


# Relative temperature perturbation for the equilibrium heat capacity
EQUILIBRIUM_CP_EPS = 1.0e-6


class Mixture:
    """
    Multi-species gas mixture.

    Args:
        options: MixtureOptions, or a sequence of species names
        database: Chemistry database; defaults to the one the options
            point to

    Raises:
        ConfigurationError: For unknown species, thermo database, state
            model or mechanism names, missing thermo data, an invalid default
            composition or a mechanism that fails validation
    """

    def __init__(self, options: MixtureOptions | Sequence[str], database=None):
        if not isinstance(options, MixtureOptions):
            options = MixtureOptions(species=list(options))
        self.options = options
        self.database = database if database is not None else options.load_database()

        self.registry = SpeciesRegistry.load(options.species, self.database)
        self.thermo_db = create_thermo_db(
            options.thermo_db, self.registry.species, self.database
        )
        self.state = create_state_model(options.state_model, self.n_species)

        charge = self.registry.element_index(ELECTRON_ELEMENT)
        self.equilibrium_solver = EquilibriumSolver(
            self.registry.element_matrix, self.registry.species_names, charge
        )
        self._last_equilibrium: EquilibriumResult | None = None

        self._default_composition = np.full(
            self.n_elements, 1.0 / self.n_elements, dtype=np.float64
        )
        if options.default_composition is not None:
            self.set_default_composition(options.default_composition)

        self.kinetics: Kinetics | None = None
        if options.mechanism and options.mechanism != "none":
            record = self.database.lookup_mechanism(options.mechanism)
            self.kinetics = Kinetics(self, record, validate=options.validate_mechanism)

    # =========================================================================
    # Species and Elements
    # =========================================================================

    @property
    def n_species(self) -> int:
        return self.registry.n_species

    @property
    def n_elements(self) -> int:
        return self.registry.n_elements

    @property
    def has_electrons(self) -> bool:
        return self.registry.has_electrons

    @property
    def species_names(self) -> list[str]:
        return self.registry.species_names

    @property
    def element_names(self) -> list[str]:
        return self.registry.element_names

    def species_index(self, name: str) -> int:
        """Index of a species, or -1 if it is not in the mixture."""
        return self.registry.species_index(name)

    def element_index(self, name: str) -> int:
        """Index of an element, or -1 if it is not in the mixture."""
        return self.registry.element_index(name)

    def species_name(self, index: int) -> str:
        return self.registry.species_name(index)

    def element_name(self, index: int) -> str:
        return self.registry.element_name(index)

    @property
    def species_mws(self) -> NDArray[np.float64]:
        """Species molecular weights (kg/mol), read-only."""
        return self.registry.molecular_weights

    def species_mw(self, index: int) -> float:
        if not 0 <= index < self.n_species:
            raise IndexError(f"Species index {index} out of range [0, {self.n_species})")
        return float(self.registry.molecular_weights[index])

    @property
    def element_matrix(self) -> NDArray[np.float64]:
        """(n_species, n_elements) atom counts, read-only."""
        return self.registry.element_matrix

    # =========================================================================
    # Composition
    # =========================================================================

    @property
    def default_composition(self) -> NDArray[np.float64]:
        """Default element mole fractions used by equilibrate()."""
        return self._default_composition.copy()

    def set_default_composition(self, composition: Mapping[str, float] | Sequence[tuple[str, float]]) -> None:
        """
        Replace the default elemental composition.

        Every element of the mixture must appear exactly once; the values
        are normalized to sum to one.

        Raises:
            ConfigurationError: Listing every duplicate, unknown or missing
                element and any negative value or zero sum
        """
        pairs = list(composition.items()) if isinstance(composition, Mapping) else list(composition)
        values = np.zeros(self.n_elements, dtype=np.float64)
        seen = np.zeros(self.n_elements, dtype=np.bool_)
        result = ValidationResult()

        for name, value in pairs:
            index = self.element_index(name)
            if index < 0:
                result.add_error(name, "Element is not in this mixture")
            elif seen[index]:
                result.add_error(name, "Element given more than once")
            else:
                seen[index] = True
                values[index] = float(value)
                if value < 0.0 and name != ELECTRON_ELEMENT:
                    result.add_error(name, f"Negative amount {value}", value=float(value))

        for index in np.nonzero(~seen)[0]:
            result.add_error(self.element_name(int(index)), "Element missing from composition")

        total = values.sum()
        if result.is_valid and not total > 0.0:
            result.add_error("composition", "Element amounts must have a positive sum")

        if not result.is_valid:
            raise ConfigurationError("Invalid default elemental composition", result)

        if abs(total - 1.0) > 1e-12:
            result.add_warning(
                "composition", f"Element amounts sum to {total:g}; normalizing", value=float(total)
            )
        for issue in result.warnings:
            logger.warning("Default elemental composition: %s", issue)
        self._default_composition = values / total

    def _composition_vector(self, composition) -> NDArray[np.float64]:
        """Element composition as a vector; mappings may omit elements."""
        if isinstance(composition, Mapping):
            values = np.zeros(self.n_elements, dtype=np.float64)
            for name, value in composition.items():
                index = self.element_index(name)
                if index < 0:
                    raise ValueError(f"Element '{name}' is not in this mixture")
                values[index] = float(value)
            return values
        return np.asarray(composition, dtype=np.float64)

    def _species_vector(self, values, what: str = "values") -> NDArray[np.float64]:
        v = np.asarray(values, dtype=np.float64)
        if v.shape != (self.n_species,):
            raise ValueError(f"Expected {self.n_species} {what}, got shape {v.shape}")
        return v

    def element_moles(self, species_moles) -> NDArray[np.float64]:
        """Moles of each element contained in the given species moles."""
        return self._species_vector(species_moles, "species moles") @ self.element_matrix

    def element_fractions(self, X=None) -> NDArray[np.float64]:
        """Element mole fractions of a species composition (default: state)."""
        x = self.X if X is None else self._species_vector(X, "mole fractions")
        moles = x @ self.element_matrix
        return moles / moles.sum()

    def convert_x_to_y(self, X) -> NDArray[np.float64]:
        """Mole fractions to mass fractions."""
        w = self._species_vector(X, "mole fractions") * self.species_mws
        return w / w.sum()

    def convert_y_to_x(self, Y) -> NDArray[np.float64]:
        """Mass fractions to mole fractions."""
        n = self._species_vector(Y, "mass fractions") / self.species_mws
        return n / n.sum()

    def convert_x_to_conc(self, X, T: float | None = None, P: float | None = None) -> NDArray[np.float64]:
        """Mole fractions to molar concentrations (mol/m^3) at (T, P)."""
        T = self.T if T is None else T
        P = self.P if P is None else P
        return self._species_vector(X, "mole fractions") * P / (RU * T)

    def convert_conc_to_x(self, conc) -> NDArray[np.float64]:
        c = self._species_vector(conc, "concentrations")
        return c / c.sum()

    # =========================================================================
    # State
    # =========================================================================

    def set_state_TPX(self, T, P: float, X) -> None:
        """
        Set the state from temperature(s), pressure and mole fractions.

        Raises:
            ValueError: Wrong number of temperatures or mole fractions
            InvalidStateError: Non-positive T or P, negative X or zero sum
        """
        self.state.set_state_TPX(T, P, X)

    def set_state_TPY(self, T, P: float, Y) -> None:
        """Set the state from temperature(s), pressure and mass fractions."""
        self.state.set_state_TPX(T, P, self.convert_y_to_x(Y))

    @property
    def T(self) -> float:
        return self.state.T

    @property
    def Tr(self) -> float:
        return self.state.Tr

    @property
    def Tv(self) -> float:
        return self.state.Tv

    @property
    def Te(self) -> float:
        return self.state.Te

    @property
    def Tel(self) -> float:
        return self.state.Tel

    @property
    def P(self) -> float:
        return self.state.P

    @property
    def X(self) -> NDArray[np.float64]:
        return self.state.X.copy()

    @property
    def Y(self) -> NDArray[np.float64]:
        return self.convert_x_to_y(self.state.X)

    @property
    def standard_state_T(self) -> float:
        return self.thermo_db.standard_temperature

    @property
    def standard_state_P(self) -> float:
        return self.thermo_db.standard_pressure

    def mixture_mw(self) -> float:
        """Mean molecular weight of the current state (kg/mol)."""
        return float(self.state.X @ self.species_mws)

    def mixture_mw_mole(self, X) -> float:
        """Mean molecular weight of a given composition (kg/mol)."""
        return float(self._species_vector(X, "mole fractions") @ self.species_mws)

    # =========================================================================
    # Equation of State
    # =========================================================================

    def number_density(self, T: float | None = None, P: float | None = None) -> float:
        """
        Number density (1/m^3).

        With arguments: P / (kB T). Without: the current state, where free
        electrons contribute at Te and heavy particles at T.
        """
        if T is not None or P is not None:
            T = self.T if T is None else T
            P = self.P if P is None else P
            return P / (KB * T)
        xe = self.state.X[0] if self.has_electrons else 0.0
        return self.P / KB * ((1.0 - xe) / self.T + xe / self.Te)

    def pressure(self, T: float, rho: float, Y) -> float:
        """Ideal-gas pressure (Pa) from temperature, density and mass fractions."""
        return float(rho * T * RU * np.sum(self._species_vector(Y, "mass fractions") / self.species_mws))

    def density(self, T: float | None = None, P: float | None = None, X=None) -> float:
        """
        Mass density (kg/m^3).

        With arguments: P * Mw(X) / (RU T). Without: the current state.
        """
        if T is None and P is None and X is None:
            return self.number_density() * self.mixture_mw() / NA
        T = self.T if T is None else T
        P = self.P if P is None else P
        x = self.state.X if X is None else self._species_vector(X, "mole fractions")
        return float(x @ self.species_mws) * P / (RU * T)

    # =========================================================================
    # Species Thermodynamics
    # =========================================================================

    def species_cp_over_r(self) -> NDArray[np.float64]:
        return self.thermo_db.cp(*self.state.temperatures)

    def species_h_over_rt(self, components: bool = False) -> NDArray[np.float64] | EnergyComponents:
        """Species H/RT at the current state, optionally split into modes."""
        return self.thermo_db.enthalpy(*self.state.temperatures, components=components)

    def species_s_over_r(self) -> NDArray[np.float64]:
        """Pure-species S/R at the state temperatures and pressure."""
        return self.thermo_db.entropy(*self.state.temperatures, self.P)

    def species_g_over_rt(self, T: float | None = None, P: float | None = None) -> NDArray[np.float64]:
        """
        Species G/RT.

        Without arguments: at the current state. With (T, P): every energy
        mode at T.
        """
        if T is None and P is None:
            return self.thermo_db.gibbs(*self.state.temperatures, self.P)
        T = self.T if T is None else T
        P = self.P if P is None else P
        return self.thermo_db.gibbs(T, T, T, T, T, P)

    # =========================================================================
    # Mixture Thermodynamics
    # =========================================================================

    def mixture_frozen_cp_mole(self) -> float:
        """Frozen heat capacity (J/(mol K))."""
        return float(self.species_cp_over_r() @ self.state.X) * RU

    def mixture_frozen_cp_mass(self) -> float:
        return self.mixture_frozen_cp_mole() / self.mixture_mw()

    def mixture_frozen_cv_mole(self) -> float:
        return self.mixture_frozen_cp_mole() - RU

    def mixture_frozen_cv_mass(self) -> float:
        return self.mixture_frozen_cv_mole() / self.mixture_mw()

    def mixture_frozen_gamma(self) -> float:
        cp = self.mixture_frozen_cp_mole()
        return cp / (cp - RU)

    def mixture_h_mole(self) -> float:
        """Mixture enthalpy (J/mol)."""
        return float(self.species_h_over_rt() @ self.state.X) * RU * self.T

    def mixture_h_mass(self) -> float:
        return self.mixture_h_mole() / self.mixture_mw()

    def mixture_s_mole(self) -> float:
        """
        Mixture entropy (J/(mol K)), including ideal mixing.

        s = RU sum_i X_i (S_i/R - ln X_i), species at the mixture pressure.
        """
        x = self.state.X
        mixing = -np.sum(x[x > 0.0] * np.log(x[x > 0.0]))
        return (float(self.species_s_over_r() @ x) + float(mixing)) * RU

    def mixture_s_mass(self) -> float:
        return self.mixture_s_mole() / self.mixture_mw()

    def mixture_equilibrium_cp_mole(self, T: float | None = None, P: float | None = None, X=None) -> float:
        """
        Equilibrium heat capacity (J/(mol K)).

        cp_eq = cp_frozen + RU sum_i (H_i/RT) (X_i(T(1+eps)) - X_i(T)) / eps

        The perturbed composition is the equilibrium at T(1+eps) with the
        element fractions of X held fixed. Without arguments the current
        state is used; X is assumed to be an equilibrium composition.
        """
        T = self.T if T is None else float(T)
        P = self.P if P is None else float(P)
        x = self.state.X if X is None else self._species_vector(X, "mole fractions")

        fractions = x @ self.element_matrix
        x_pert = self.equilibrate(
            T * (1.0 + EQUILIBRIUM_CP_EPS), P, fractions, set_state=False
        )

        h = self.thermo_db.enthalpy(T, T, T, T, T)
        cp_frozen = float(self.thermo_db.cp(T, T, T, T, T) @ x) * RU
        return cp_frozen + RU * float(h @ (x_pert - x)) / EQUILIBRIUM_CP_EPS

    def mixture_equilibrium_cp_mass(self, T: float | None = None, P: float | None = None, X=None) -> float:
        x = self.state.X if X is None else X
        return self.mixture_equilibrium_cp_mole(T, P, X) / self.mixture_mw_mole(x)

    def mixture_equilibrium_cv_mole(self, T: float | None = None, P: float | None = None, X=None) -> float:
        return self.mixture_equilibrium_cp_mole(T, P, X) - RU

    def mixture_equilibrium_cv_mass(self, T: float | None = None, P: float | None = None, X=None) -> float:
        x = self.state.X if X is None else X
        return self.mixture_equilibrium_cv_mole(T, P, X) / self.mixture_mw_mole(x)

    def mixture_equilibrium_gamma(self, T: float | None = None, P: float | None = None, X=None) -> float:
        cp = self.mixture_equilibrium_cp_mole(T, P, X)
        return cp / (cp - RU)

    # =========================================================================
    # Equilibrium
    # =========================================================================

    def equilibrate(
        self,
        T: float,
        P: float,
        composition: Mapping[str, float] | Sequence[float] | None = None,
        set_state: bool = True,
    ) -> NDArray[np.float64]:
        """
        Equilibrium mole fractions at (T, P).

        Args:
            T: Temperature (K)
            P: Pressure (Pa)
            composition: Element amounts (vector in element order or a
                name -> amount mapping); the default composition when None
            set_state: Store the result as the mixture state

        Returns:
            Mole fractions in species order, summing to one

        Raises:
            InvalidStateError: Non-positive T or P or infeasible composition
            ConvergenceError: Solver did not converge
        """
        if composition is None:
            composition = self._default_composition
        c = self._composition_vector(composition)

        if not (T > 0.0 and P > 0.0):
            raise InvalidStateError(
                f"Equilibrium requires positive T and P (got T={T} K, P={P} Pa)"
            )
        g = self.species_g_over_rt(T, P)
        result = self.equilibrium_solver.solve(T, P, g, c)
        self._last_equilibrium = result

        if set_state:
            self.state.set_state_TPX(T, P, result.mole_fractions)
        return result.mole_fractions.copy()

    @property
    def last_equilibrium(self) -> EquilibriumResult | None:
        """Full solver output of the most recent equilibrate() call."""
        return self._last_equilibrium

    # =========================================================================
    # Kinetics
    # =========================================================================

    def net_production_rates(self, T: float, conc) -> NDArray[np.float64]:
        """
        Species mass production rates (kg/(m^3 s)); zero without a mechanism.
        """
        if self.kinetics is None:
            self._species_vector(conc, "concentrations")
            return np.zeros(self.n_species, dtype=np.float64)
        return self.kinetics.net_production_rates(T, conc)

    def __repr__(self) -> str:
        return (
            f"Mixture({self.n_species} species, {self.n_elements} elements, "
            f"thermo={self.options.thermo_db}, mechanism={self.options.mechanism})"
        )
