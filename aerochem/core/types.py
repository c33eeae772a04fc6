"""
Data types for gas-mixture thermochemistry.

Designed to separate string/metadata handling from numeric computation,
allowing Numba-compiled kernels to work with raw numpy arrays.
"""

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from .constants import ELECTRON_ELEMENT
from .validation import ValidationResult


# =============================================================================
# Elements and Species
# =============================================================================

@dataclass(frozen=True)
class Element:
    """
    Chemical element with atomic properties.

    Charge is tracked as the pseudo-element ``e-`` whose atomic weight is the
    electron mass and whose charge is -1.

    Attributes:
        name: Element symbol (e.g., 'N', 'O', 'e-')
        atomic_weight: Atomic weight in kg/mol
        charge: Elementary charge carried by one atom
    """
    name: str
    atomic_weight: float
    charge: int = 0

    def __repr__(self) -> str:
        return f"Element({self.name}, {self.atomic_weight:.6e} kg/mol)"


@dataclass(frozen=True)
class Species:
    """
    Gas-phase species defined by its elemental composition.

    Attributes:
        name: Species name (e.g., 'N2', 'NO+', 'e-')
        composition: Ordered (element name, atom count) pairs. The electron
            count is +1 for the electron and -1 per unit of positive charge.
        molecular_weight: Molar mass in kg/mol
        phase: Phase indicator ('gas' only for now)
    """
    name: str
    composition: tuple[tuple[str, int], ...]
    molecular_weight: float
    phase: str = "gas"

    @property
    def charge(self) -> int:
        """Net charge in units of the elementary charge."""
        return -self.count(ELECTRON_ELEMENT)

    @property
    def is_electron(self) -> bool:
        return self.name == ELECTRON_ELEMENT

    @property
    def is_ion(self) -> bool:
        return self.charge != 0 and not self.is_electron

    def count(self, element: str) -> int:
        """Number of atoms of ``element`` in this species."""
        for name, n in self.composition:
            if name == element:
                return n
        return 0

    def __repr__(self) -> str:
        return f"Species({self.name}, MW={self.molecular_weight:.6e} kg/mol)"


# =============================================================================
# Per-species Thermodynamic Records
# =============================================================================

@dataclass
class NASA7Data:
    """
    NASA 7-term polynomial thermodynamic data for one species.

    Coefficients a1-a5 define the Cp/R polynomial; a6 and a7 are the
    integration constants for H/RT and S/R.

    Attributes:
        name: Species name
        composition: Element counts read from the thermo card (may be empty)
        phase: Phase indicator ('G' for gas)
        t_low, t_mid, t_high: Fit range and switch temperature (K)
        coeffs_high: High-T coefficients [a1..a7]
        coeffs_low: Low-T coefficients [a1..a7]
    """
    name: str
    composition: dict[str, int] = field(default_factory=dict)
    phase: str = "G"
    t_low: float = 200.0
    t_mid: float = 1000.0
    t_high: float = 6000.0
    coeffs_high: NDArray[np.float64] = field(
        default_factory=lambda: np.zeros(7, dtype=np.float64)
    )
    coeffs_low: NDArray[np.float64] = field(
        default_factory=lambda: np.zeros(7, dtype=np.float64)
    )

    def in_range(self, T: float) -> bool:
        return self.t_low <= T <= self.t_high

    def __repr__(self) -> str:
        return f"NASA7Data(name='{self.name}', T_range=[{self.t_low:.0f}-{self.t_high:.0f}K])"


@dataclass
class RRHOData:
    """
    Rigid-rotor / harmonic-oscillator data for one species.

    Attributes:
        name: Species name
        linearity: 0 for atoms, 1 for linear molecules, 2 for nonlinear ones
        symmetry: Rotational symmetry number
        rotational_temperatures: Characteristic rotational temperatures (K);
            one value for linear molecules, three for nonlinear ones
        vibrational_temperatures: Characteristic vibrational temperatures (K)
        electronic_levels: (degeneracy, characteristic temperature K) pairs
        hf298: Formation enthalpy at 298.15 K (J/mol)
    """
    name: str
    linearity: int = 0
    symmetry: int = 1
    rotational_temperatures: tuple[float, ...] = ()
    vibrational_temperatures: tuple[float, ...] = ()
    electronic_levels: tuple[tuple[int, float], ...] = ((1, 0.0),)
    hf298: float = 0.0


@dataclass
class EnergyComponents:
    """
    Per-species dimensionless enthalpy split into energy modes.

    Every array has one entry per species and is normalized by R*Th.
    Modes a thermo database does not resolve are left as zeros.
    """
    total: NDArray[np.float64]
    translational: NDArray[np.float64]
    rotational: NDArray[np.float64]
    vibrational: NDArray[np.float64]
    electronic: NDArray[np.float64]
    formation: NDArray[np.float64]

    @classmethod
    def zeros(cls, n_species: int) -> "EnergyComponents":
        return cls(*(np.zeros(n_species, dtype=np.float64) for _ in range(6)))


# =============================================================================
# Equilibrium Data Types
# =============================================================================

@dataclass
class EquilibriumResult:
    """
    Final result of an equilibrium calculation.

    Attributes:
        temperature: Equilibrium temperature (K)
        pressure: Equilibrium pressure (Pa)
        species_names: Species names in mixture order
        mole_fractions: Mole fraction of each species (sums to one)
        moles: Species mole numbers for the normalized element composition
        total_moles: Sum of ``moles``
        element_potentials: Dimensionless element potentials (lambda/RT);
            NaN for elements removed because they are absent
        iterations: Total Newton iterations over all total-mole evaluations
        residual: Max absolute element-balance residual at the solution
    """
    temperature: float
    pressure: float
    species_names: list[str]
    mole_fractions: NDArray[np.float64]
    moles: NDArray[np.float64]
    total_moles: float
    element_potentials: NDArray[np.float64] = field(
        default_factory=lambda: np.zeros(0, dtype=np.float64)
    )
    iterations: int = 0
    residual: float = 0.0

    def get_mole_fraction(self, species_name: str) -> float:
        """Get mole fraction for a specific species."""
        try:
            idx = self.species_names.index(species_name)
            return float(self.mole_fractions[idx])
        except ValueError:
            return 0.0

    def __repr__(self) -> str:
        top_species = sorted(
            zip(self.species_names, self.mole_fractions, strict=False),
            key=lambda x: x[1],
            reverse=True
        )[:5]
        species_str = ", ".join(f"{n}:{x:.4f}" for n, x in top_species)
        return (
            f"EquilibriumResult(T={self.temperature:.1f}K, "
            f"P={self.pressure:.1f}Pa, [{species_str}])"
        )


# =============================================================================
# Errors
# =============================================================================

class ConfigurationError(Exception):
    """
    Raised when a mixture, database or mechanism is misconfigured.

    Carries the complete ValidationResult so every problem found by a
    batch check is reported at once.
    """

    def __init__(self, message: str, result: ValidationResult | None = None):
        self.result = result if result is not None else ValidationResult()
        details = str(self.result) if self.result.issues else ""
        super().__init__(f"{message}\n{details}" if details else message)

    @property
    def issues(self):
        return self.result.issues


class CalculationError(Exception):
    """Exception raised when a numerical calculation fails."""
    pass


class ConvergenceError(CalculationError):
    """Exception raised when solver fails to converge."""

    def __init__(self, message: str, last_iterate=None, iterations: int = 0):
        super().__init__(message)
        self.last_iterate = last_iterate
        self.iterations = iterations


class SingularMatrixError(CalculationError):
    """Exception raised when the element/composition system is degenerate."""
    pass


class InvalidStateError(CalculationError):
    """Exception raised for non-physical temperature, pressure or composition."""
    pass
