"""
Reactions, rate laws and mechanism records.

A reaction is written as a formula string:

    "N2 + M = 2N + M"        reversible third-body dissociation
    "N + e- => N+ + 2e-"     irreversible electron-impact ionization

'=' (or '<=>') marks a reversible reaction and '=>' an irreversible one.
'M' on both sides marks a third-body reaction. A leading integer is a
stoichiometric coefficient. Inside a side, '+' separates species unless it
directly follows a name and is itself followed by '+', whitespace or the end
of the side, in which case it is a charge mark ("N2+ + e-", "N++e-").

Rate coefficients follow the modified Arrhenius law

    k_f = A T^n exp(-Ta / T)

stored in SI units (m, mol, s, K). Mechanism files may state A and the
activation energy in other units; a units directive applies to every
reaction that follows it.
"""

import re
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from .constants import CAL_TO_J, KB, NA, QE, RU


# =============================================================================
# Arrhenius Rate Law
# =============================================================================

_LENGTH_TO_M3 = {"m": 1.0, "cm": 1.0e-6}
_QUANTITY_TO_MOL = {"mol": 1.0, "molecule": NA}
_TIME_TO_S = {"s": 1.0}

# Multiplier converting an activation energy to a temperature (K)
_ENERGY_TO_K = {
    "K": 1.0,
    "J/mol": 1.0 / RU,
    "kJ/mol": 1.0e3 / RU,
    "cal/mol": CAL_TO_J / RU,
    "kcal/mol": 1.0e3 * CAL_TO_J / RU,
    "eV": QE / KB,
}


@dataclass(frozen=True)
class ArrheniusUnits:
    """
    Units of the pre-exponential factor and activation energy.

    A is expressed in (length^3 / quantity)^(order-1) / time.

    Attributes:
        length: 'm' or 'cm'
        quantity: 'mol' or 'molecule'
        time: 's'
        energy: 'K', 'J/mol', 'kJ/mol', 'cal/mol', 'kcal/mol' or 'eV'
    """
    length: str = "cm"
    quantity: str = "mol"
    time: str = "s"
    energy: str = "K"

    def __post_init__(self):
        if self.length not in _LENGTH_TO_M3:
            raise ValueError(f"Unknown length unit '{self.length}'")
        if self.quantity not in _QUANTITY_TO_MOL:
            raise ValueError(f"Unknown quantity unit '{self.quantity}'")
        if self.time not in _TIME_TO_S:
            raise ValueError(f"Unknown time unit '{self.time}'")
        if self.energy not in _ENERGY_TO_K:
            raise ValueError(f"Unknown energy unit '{self.energy}'")

    @classmethod
    def parse(cls, A: str = "cm,mol,s", E: str = "K") -> "ArrheniusUnits":
        """
        Build units from the comma-separated form used in mechanism files.

        Example:
            >>> ArrheniusUnits.parse("cm,molecule,s", "kcal/mol")
        """
        parts = [p.strip() for p in A.split(",") if p.strip()]
        length = next((p for p in parts if p in _LENGTH_TO_M3), "cm")
        quantity = next((p for p in parts if p in _QUANTITY_TO_MOL), "mol")
        unknown = [
            p for p in parts
            if p not in _LENGTH_TO_M3 and p not in _QUANTITY_TO_MOL and p not in _TIME_TO_S
        ]
        if unknown:
            raise ValueError(f"Unknown Arrhenius units {unknown} in '{A}'")
        return cls(length=length, quantity=quantity, time="s", energy=E.strip())

    def a_factor(self, order: int) -> float:
        """Multiplier converting A of a reaction of the given order to SI."""
        per_order = _LENGTH_TO_M3[self.length] * _QUANTITY_TO_MOL[self.quantity]
        return per_order ** (order - 1) / _TIME_TO_S[self.time]

    def temperature_factor(self) -> float:
        """Multiplier converting the activation energy to Ta (K)."""
        return _ENERGY_TO_K[self.energy]


SI_UNITS = ArrheniusUnits(length="m", quantity="mol", time="s", energy="K")


@dataclass(frozen=True)
class Arrhenius:
    """
    Modified Arrhenius rate law k = A T^n exp(-Ta/T) in SI units.

    Attributes:
        A: Pre-exponential factor, (m^3/mol)^(order-1) / s
        n: Temperature exponent
        Ta: Activation temperature (K)
    """
    A: float
    n: float = 0.0
    Ta: float = 0.0

    def __post_init__(self):
        if not self.A > 0.0:
            raise ValueError(f"Pre-exponential factor must be positive (got {self.A})")

    @classmethod
    def from_units(
        cls, A: float, n: float, E: float, units: ArrheniusUnits, order: int
    ) -> "Arrhenius":
        return cls(
            A=A * units.a_factor(order),
            n=n,
            Ta=E * units.temperature_factor(),
        )

    @property
    def ln_A(self) -> float:
        return float(np.log(self.A))

    def ln_k(self, T: float) -> float:
        return self.ln_A + self.n * np.log(T) - self.Ta / T

    def k(self, T: float) -> float:
        return float(np.exp(self.ln_k(T)))


# =============================================================================
# Reaction
# =============================================================================

THIRD_BODY = "M"

_COEFFICIENT = re.compile(r"^(\d+)\s*(\S.*)$")


def split_side(side: str) -> list[str]:
    """
    Split one side of a reaction formula into species tokens.

    Coefficients are expanded, so "2N + M" gives ['N', 'N', 'M'].
    """
    tokens: list[str] = []
    current = ""
    n = len(side)
    for k, ch in enumerate(side):
        if ch == "+":
            prev = side[k - 1] if k > 0 else " "
            nxt = side[k + 1] if k + 1 < n else ""
            is_charge = (
                current.strip() != ""
                and not prev.isspace()
                and (nxt == "" or nxt == "+" or nxt.isspace())
            )
            if is_charge:
                current += ch
                continue
            tokens.append(current)
            current = ""
        else:
            current += ch
    tokens.append(current)

    species: list[str] = []
    for token in tokens:
        token = token.strip()
        if not token:
            raise ValueError(f"Empty species in reaction side '{side}'")
        match = _COEFFICIENT.match(token)
        if match:
            count = int(match.group(1))
            name = match.group(2).strip()
        else:
            count = 1
            name = token
        if count < 1:
            raise ValueError(f"Invalid coefficient in '{token}'")
        species.extend([name] * count)
    return species


def parse_reaction_formula(formula: str) -> tuple[list[str], list[str], bool, bool]:
    """
    Parse a reaction formula.

    Returns:
        (reactants, products, reversible, third_body); species lists exclude M

    Raises:
        ValueError: If the formula is malformed
    """
    if "<=>" in formula:
        lhs, rhs = formula.split("<=>", 1)
        reversible = True
    elif "=>" in formula:
        lhs, rhs = formula.split("=>", 1)
        reversible = False
    elif "=" in formula:
        lhs, rhs = formula.split("=", 1)
        reversible = True
    else:
        raise ValueError(f"Reaction '{formula}' has no '=' or '=>'")

    if "=" in rhs:
        raise ValueError(f"Reaction '{formula}' has more than one arrow")

    reactants = split_side(lhs)
    products = split_side(rhs)

    m_left = reactants.count(THIRD_BODY)
    m_right = products.count(THIRD_BODY)
    if m_left > 1 or m_right > 1 or m_left != m_right:
        raise ValueError(
            f"Reaction '{formula}' must have one third body 'M' on each side or none"
        )

    reactants = [s for s in reactants if s != THIRD_BODY]
    products = [s for s in products if s != THIRD_BODY]
    if not reactants or not products:
        raise ValueError(f"Reaction '{formula}' needs reactants and products")

    return reactants, products, reversible, m_left == 1


@dataclass
class Reaction:
    """
    One elementary reaction.

    Attributes:
        formula: Formula string as written
        reactants: Reactant names, repeated per stoichiometric coefficient
        products: Product names, repeated per stoichiometric coefficient
        reversible: Whether the backward rate is computed from equilibrium
        third_body: Whether a collision partner M participates
        efficiencies: Third-body efficiencies by species (default 1)
        rate: Forward rate law in SI units
    """
    formula: str
    reactants: list[str]
    products: list[str]
    reversible: bool
    third_body: bool
    rate: Arrhenius
    efficiencies: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_formula(
        cls,
        formula: str,
        A: float,
        n: float = 0.0,
        E: float = 0.0,
        units: ArrheniusUnits = SI_UNITS,
        efficiencies: dict[str, float] | None = None,
    ) -> "Reaction":
        """
        Parse a formula and convert its rate parameters to SI.

        Raises:
            ValueError: For a malformed formula, efficiencies on a reaction
                without a third body, or a non-positive A
        """
        reactants, products, reversible, third_body = parse_reaction_formula(formula)
        efficiencies = dict(efficiencies or {})
        if efficiencies and not third_body:
            raise ValueError(
                f"Reaction '{formula}' lists efficiencies but has no third body"
            )
        order = len(reactants) + (1 if third_body else 0)
        return cls(
            formula=formula,
            reactants=reactants,
            products=products,
            reversible=reversible,
            third_body=third_body,
            rate=Arrhenius.from_units(A, n, E, units, order),
            efficiencies=efficiencies,
        )

    @property
    def order(self) -> int:
        """Molecularity of the forward reaction, counting M."""
        return len(self.reactants) + (1 if self.third_body else 0)

    def reactant(self, name: str) -> int:
        """Stoichiometric coefficient of ``name`` among the reactants."""
        return self.reactants.count(name)

    def product(self, name: str) -> int:
        return self.products.count(name)

    def species(self) -> list[str]:
        """Every species named in the reaction, efficiencies excluded."""
        return list(dict.fromkeys(self.reactants + self.products))

    def conserves(self, mixture) -> list[str]:
        """
        Elements not balanced between the two sides.

        Args:
            mixture: Mixture providing species indices and the element matrix

        Returns:
            Names of unbalanced elements in mixture order ("e-" for charge);
            empty when the reaction conserves everything

        Raises:
            ValueError: If a species is not in the mixture
        """
        balance = np.zeros(mixture.n_elements, dtype=np.float64)
        matrix = mixture.element_matrix
        for sign, names in ((-1.0, self.reactants), (1.0, self.products)):
            for name in names:
                idx = mixture.species_index(name)
                if idx < 0:
                    raise ValueError(f"Species '{name}' is not in the mixture")
                balance += sign * matrix[idx]
        return [mixture.element_name(e) for e in np.flatnonzero(balance)]

    def __repr__(self) -> str:
        return f"Reaction('{self.formula}')"


# =============================================================================
# Mechanism Records
# =============================================================================

@dataclass(frozen=True)
class ReactionRecord:
    """
    A reaction as stored in a mechanism, with rate parameters in the
    units of the directive in effect.
    """
    formula: str
    A: float
    n: float = 0.0
    E: float = 0.0
    efficiencies: tuple[tuple[str, float], ...] = ()

    def to_reaction(self, units: ArrheniusUnits) -> Reaction:
        return Reaction.from_formula(
            self.formula, self.A, self.n, self.E,
            units=units, efficiencies=dict(self.efficiencies),
        )


@dataclass
class MechanismRecord:
    """
    Named, ordered list of units directives and reactions.

    Each ArrheniusUnits item applies to the reactions after it; reactions
    before the first directive use the default units.
    """
    name: str
    items: list[ArrheniusUnits | ReactionRecord] = field(default_factory=list)

    def reactions(self) -> list[Reaction]:
        """Convert every reaction record to SI in mechanism order."""
        units = ArrheniusUnits()
        out = []
        for item in self.items:
            if isinstance(item, ArrheniusUnits):
                units = item
            else:
                out.append(item.to_reaction(units))
        return out


# =============================================================================
# Vectorized Rate Evaluation
# =============================================================================

class RateManager:
    """Stores Arrhenius parameters of a mechanism as arrays."""

    def __init__(self):
        self._ln_A: list[float] = []
        self._n: list[float] = []
        self._Ta: list[float] = []
        self._arrays: tuple[NDArray[np.float64], ...] | None = None

    def add_reaction(self, rate: Arrhenius) -> None:
        self._ln_A.append(rate.ln_A)
        self._n.append(rate.n)
        self._Ta.append(rate.Ta)
        self._arrays = None

    def __len__(self) -> int:
        return len(self._ln_A)

    def ln_kf(self, T: float) -> NDArray[np.float64]:
        """ln k_f = ln A + n ln T - Ta/T for every reaction."""
        if self._arrays is None:
            self._arrays = (
                np.array(self._ln_A, dtype=np.float64),
                np.array(self._n, dtype=np.float64),
                np.array(self._Ta, dtype=np.float64),
            )
        ln_A, n, Ta = self._arrays
        return ln_A + n * np.log(T) - Ta / T
