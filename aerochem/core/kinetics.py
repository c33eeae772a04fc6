"""
Finite-rate chemical kinetics.

A Kinetics object owns a reaction mechanism built against one mixture's
species table. The mechanism passes through three states:

    EMPTY --add_reaction--> BUILDING --close_reactions--> CLOSED

Reactions may only be added before closing. Closing optionally validates
the mechanism (every species known, no duplicate reactions, elements and
charge conserved) and sizes the work buffers. Rate queries are only
allowed on a closed mechanism; a mechanism with no reactions is valid and
describes frozen chemistry.

Rate coefficients depend on temperature only and are cached: a query at a
temperature within 1e-6 K of the previous one reuses the stored values.

Units: concentrations mol/m^3, rates of progress mol/(m^3 s), production
rates kg/(m^3 s).
"""

import logging
from enum import Enum, auto

import numpy as np
from numpy.typing import NDArray

from .constants import RU
from .jacobian import JacobianManager
from .reaction import MechanismRecord, RateManager, Reaction
from .stoichiometry import StoichiometryManager, ThirdbodyManager
from .types import ConfigurationError, InvalidStateError
from .validation import ValidationResult

logger = logging.getLogger(__name__)


# Temperatures closer than this (K) share cached rate coefficients
TEMPERATURE_CACHE_TOLERANCE = 1e-6


class MechanismState(Enum):
    """Lifecycle of a reaction mechanism."""
    EMPTY = auto()
    BUILDING = auto()
    CLOSED = auto()


class Kinetics:
    """
    Reaction mechanism and rate evaluation for one mixture.

    Args:
        thermo: Mixture providing the species table and Gibbs energies
        mechanism: Optional mechanism record; its reactions are added and
            the mechanism is closed immediately
        validate: Validate the mechanism when closing it

    Example:
        >>> kin = Kinetics(mix)
        >>> kin.add_reaction(Reaction.from_formula("N2 + M = 2N + M", 7e15, -1.6, 113200))
        >>> kin.close_reactions()
        >>> wdot = kin.net_production_rates(8000.0, conc)
    """

    def __init__(self, thermo, mechanism: MechanismRecord | None = None, validate: bool = True):
        self.thermo = thermo
        self.name = mechanism.name if mechanism is not None else "none"
        self.n_species = thermo.n_species

        self.reactions: list[Reaction] = []
        self.state = MechanismState.EMPTY
        self._unresolved: list[tuple[int, str]] = []

        self._reactants = StoichiometryManager()
        self._rev_prods = StoichiometryManager()
        self._irr_prods = StoichiometryManager()
        self._thirdbodies = ThirdbodyManager(self.n_species)
        self._rates = RateManager()
        self._jacobian = JacobianManager(self.n_species)

        self._T_last = -1.0
        self._lnkf = np.zeros(0, dtype=np.float64)
        self._lnkeq = np.zeros(0, dtype=np.float64)
        self._dnu = np.zeros(0, dtype=np.float64)
        self._reversible = np.zeros(0, dtype=np.bool_)

        if mechanism is not None:
            for reaction in mechanism.reactions():
                self.add_reaction(reaction)
            self.close_reactions(validate)

    @property
    def n_reactions(self) -> int:
        return len(self.reactions)

    # -------------------------------------------------------------------------
    # Mechanism construction
    # -------------------------------------------------------------------------

    def add_reaction(self, reaction: Reaction) -> None:
        """
        Append a reaction and index its species.

        Species unknown to the mixture are remembered and reported when the
        mechanism is closed.

        Raises:
            RuntimeError: If the mechanism is already closed
        """
        if self.state is MechanismState.CLOSED:
            raise RuntimeError(
                f"Cannot add reaction '{reaction.formula}' to a closed mechanism"
            )

        rxn = len(self.reactions)
        self.reactions.append(reaction)
        self.state = MechanismState.BUILDING

        missing = [
            name for name in reaction.species() + list(reaction.efficiencies)
            if self.thermo.species_index(name) < 0
        ]
        if missing:
            for name in dict.fromkeys(missing):
                self._unresolved.append((rxn, name))
            # Keep reaction indices aligned with the rate arrays
            self._rates.add_reaction(reaction.rate)
            return

        index = self.thermo.species_index
        self._reactants.add_reaction(rxn, [index(s) for s in reaction.reactants])
        products = [index(s) for s in reaction.products]
        if reaction.reversible:
            self._rev_prods.add_reaction(rxn, products)
        else:
            self._irr_prods.add_reaction(rxn, products)

        eff_vector = None
        if reaction.third_body:
            efficiencies = [(index(s), e) for s, e in reaction.efficiencies.items()]
            self._thirdbodies.add_reaction(rxn, efficiencies)
            eff_vector = self._thirdbodies.efficiency_vector(rxn)

        self._rates.add_reaction(reaction.rate)
        self._jacobian.add_reaction(
            rxn,
            self._reactants.entries(rxn),
            (self._rev_prods if reaction.reversible else self._irr_prods).entries(rxn),
            reaction.reversible,
            eff_vector,
        )

    def validate_mechanism(self) -> ValidationResult:
        """
        Check the mechanism without raising.

        Reports every unknown species, every pair of duplicate reactions
        (same net stoichiometry up to a positive factor) and every reaction
        that does not conserve an element or charge.
        """
        result = ValidationResult()
        unresolved_rxns = {rxn for rxn, _ in self._unresolved}

        for rxn, name in self._unresolved:
            result.add_error(
                f"Reaction {rxn + 1}",
                f"'{self.reactions[rxn].formula}' uses species '{name}' "
                f"which is not in the mixture",
            )

        resolved = [j for j in range(self.n_reactions) if j not in unresolved_rxns]
        directions = {}
        for j in resolved:
            v = self._net_stoichiometry(j)
            norm = np.linalg.norm(v)
            directions[j] = v / norm if norm > 0.0 else v
        for a, i in enumerate(resolved):
            for j in resolved[a + 1:]:
                if np.allclose(directions[i], directions[j], rtol=0.0, atol=1e-12):
                    result.add_error(
                        f"Reactions {i + 1} and {j + 1}",
                        f"'{self.reactions[i].formula}' and "
                        f"'{self.reactions[j].formula}' are identical",
                    )

        matrix = self.thermo.element_matrix
        names = self.thermo.element_names
        for e in range(matrix.shape[1]):
            delta = np.zeros(self.n_reactions, dtype=np.float64)
            self._accumulate_delta(matrix[:, e], delta)
            for j in resolved:
                if delta[j] != 0.0:
                    what = "charge" if names[e] == "e-" else f"element {names[e]}"
                    result.add_error(
                        f"Reaction {j + 1}",
                        f"'{self.reactions[j].formula}' does not conserve {what}",
                    )

        return result

    def close_reactions(self, validate: bool = True) -> None:
        """
        Finish building the mechanism.

        Args:
            validate: Run validate_mechanism and fail on any error. Unknown
                species always fail, since such reactions cannot be evaluated.

        Raises:
            ConfigurationError: Listing every validation failure
            RuntimeError: If the mechanism is already closed
        """
        if self.state is MechanismState.CLOSED:
            raise RuntimeError("Mechanism is already closed")

        if validate:
            result = self.validate_mechanism()
        else:
            result = ValidationResult()
            for rxn, name in self._unresolved:
                result.add_error(
                    f"Reaction {rxn + 1}",
                    f"'{self.reactions[rxn].formula}' uses unknown species '{name}'",
                )
        if not result.is_valid:
            raise ConfigurationError(
                f"Mechanism '{self.name}' failed validation "
                f"({len(result.errors)} error(s))",
                result,
            )

        nr = self.n_reactions
        self._dnu = np.zeros(nr, dtype=np.float64)
        self._rev_prods.sum_reactions(self._dnu)
        self._irr_prods.sum_reactions(self._dnu)
        reactant_sum = np.zeros(nr, dtype=np.float64)
        self._reactants.sum_reactions(reactant_sum)
        self._dnu -= reactant_sum

        self._reversible = np.array([r.reversible for r in self.reactions], dtype=np.bool_)
        self._lnkf = np.zeros(nr, dtype=np.float64)
        self._lnkeq = np.zeros(nr, dtype=np.float64)
        self._ropf = np.zeros(nr, dtype=np.float64)
        self._ropb = np.zeros(nr, dtype=np.float64)
        self._T_last = -1.0
        self.state = MechanismState.CLOSED

        logger.info(
            "Closed mechanism '%s' with %d reactions (%s)",
            self.name, nr, "validated" if validate else "not validated",
        )

    def _require_closed(self) -> None:
        if self.state is not MechanismState.CLOSED:
            raise RuntimeError("Mechanism must be closed before evaluating rates")

    def _net_stoichiometry(self, rxn: int) -> NDArray[np.float64]:
        v = np.zeros(self.n_species, dtype=np.float64)
        for idx, nu in self._reactants.entries(rxn):
            v[idx] -= nu
        for idx, nu in self._rev_prods.entries(rxn) + self._irr_prods.entries(rxn):
            v[idx] += nu
        return v

    def _accumulate_delta(self, s: NDArray[np.float64], r: NDArray[np.float64]) -> None:
        self._rev_prods.incr_reactions(s, r)
        self._irr_prods.incr_reactions(s, r)
        self._reactants.decr_reactions(s, r)

    def get_reaction_delta(self, s) -> NDArray[np.float64]:
        """
        Change of a per-species quantity across every reaction.

        delta_j = sum over products of s - sum over reactants of s
        """
        s = np.asarray(s, dtype=np.float64)
        if s.shape != (self.n_species,):
            raise ValueError(f"Expected {self.n_species} values, got shape {s.shape}")
        delta = np.zeros(self.n_reactions, dtype=np.float64)
        self._accumulate_delta(s, delta)
        return delta

    # -------------------------------------------------------------------------
    # Rate coefficients
    # -------------------------------------------------------------------------

    def _update_temperature(self, T: float) -> None:
        if not T > 0.0:
            raise InvalidStateError(f"Temperature must be positive (got {T} K)")
        if abs(T - self._T_last) < TEMPERATURE_CACHE_TOLERANCE:
            return

        self._lnkf[:] = self._rates.ln_kf(T)

        P0 = self.thermo.standard_state_P
        g = self.thermo.species_g_over_rt(T, P0)
        self._lnkeq[:] = self._dnu * np.log(P0 / (RU * T))
        self._reactants.incr_reactions(g, self._lnkeq)
        self._rev_prods.decr_reactions(g, self._lnkeq)
        self._irr_prods.decr_reactions(g, self._lnkeq)

        self._T_last = T
        logger.debug("Updated rate coefficients of '%s' at T=%.3f K", self.name, T)

    def forward_rate_coefficients(self, T: float) -> NDArray[np.float64]:
        """k_f in SI units for every reaction."""
        self._require_closed()
        self._update_temperature(T)
        return np.exp(self._lnkf)

    def equilibrium_constants(self, T: float) -> NDArray[np.float64]:
        """Concentration-based equilibrium constants K_c."""
        self._require_closed()
        self._update_temperature(T)
        return np.exp(self._lnkeq)

    def backward_rate_coefficients(self, T: float) -> NDArray[np.float64]:
        """k_b = k_f / K_c for reversible reactions, zero otherwise."""
        self._require_closed()
        self._update_temperature(T)
        kb = np.exp(self._lnkf - self._lnkeq)
        kb[~self._reversible] = 0.0
        return kb

    # -------------------------------------------------------------------------
    # Rates of progress and production
    # -------------------------------------------------------------------------

    def _check_concentrations(self, conc) -> NDArray[np.float64]:
        c = np.asarray(conc, dtype=np.float64)
        if c.shape != (self.n_species,):
            raise ValueError(
                f"Expected {self.n_species} concentrations, got shape {c.shape}"
            )
        if not np.all(np.isfinite(c)):
            raise ValueError("Species concentrations must be finite")
        if np.any(c < 0.0):
            raise ValueError("Species concentrations must be non-negative")
        return c

    def _rates_of_progress(self, T, conc):
        """Fill the forward and backward work buffers, without third bodies."""
        self._require_closed()
        c = self._check_concentrations(conc)
        self._update_temperature(T)

        self._ropf[:] = np.exp(self._lnkf)
        self._reactants.mult_reactions(c, self._ropf)

        self._ropb[:] = np.exp(self._lnkf - self._lnkeq)
        self._ropb[~self._reversible] = 0.0
        self._rev_prods.mult_reactions(c, self._ropb)
        return c

    def forward_rates_of_progress(self, T: float, conc) -> NDArray[np.float64]:
        """Forward rates of progress including the third-body factor."""
        c = self._rates_of_progress(T, conc)
        rop = self._ropf.copy()
        self._thirdbodies.multiply_thirdbodies(c, rop)
        return rop

    def backward_rates_of_progress(self, T: float, conc) -> NDArray[np.float64]:
        """Backward rates of progress including the third-body factor."""
        c = self._rates_of_progress(T, conc)
        rop = self._ropb.copy()
        self._thirdbodies.multiply_thirdbodies(c, rop)
        return rop

    def net_rates_of_progress(self, T: float, conc) -> NDArray[np.float64]:
        """Forward minus backward rates; the third-body factor is applied once."""
        c = self._rates_of_progress(T, conc)
        rop = self._ropf - self._ropb
        self._thirdbodies.multiply_thirdbodies(c, rop)
        return rop

    def net_production_rates(self, T: float, conc) -> NDArray[np.float64]:
        """
        Species mass production rates (kg/(m^3 s)).

        Args:
            T: Temperature (K)
            conc: Species molar concentrations (mol/m^3), non-negative

        Raises:
            InvalidStateError: If T is not positive
            ValueError: If conc has the wrong length or a negative entry
        """
        rop = self.net_rates_of_progress(T, conc)
        wdot = np.zeros(self.n_species, dtype=np.float64)
        self._reactants.decr_species(rop, wdot)
        self._rev_prods.incr_species(rop, wdot)
        self._irr_prods.incr_species(rop, wdot)
        return wdot * self.thermo.species_mws

    # -------------------------------------------------------------------------
    # Jacobians
    # -------------------------------------------------------------------------

    def jacobian(self, T: float, conc) -> NDArray[np.float64]:
        """
        d(mass production of i) / d(concentration of j), kg/(mol s).

        Raises:
            InvalidStateError: If T is not positive
            ValueError: If conc has the wrong length or a negative entry
        """
        self._require_closed()
        c = self._check_concentrations(conc)
        kf = self.forward_rate_coefficients(T)
        kb = self.backward_rate_coefficients(T)
        jac = self._jacobian.compute(kf, kb, c)
        return jac * self.thermo.species_mws[:, np.newaxis]

    def jacobian_rho(self, T: float, conc) -> NDArray[np.float64]:
        """d(mass production of i) / d(partial density of j), 1/s."""
        return self.jacobian(T, conc) / self.thermo.species_mws[np.newaxis, :]
