"""
Species and element registry.

Loads the requested species from a chemistry database and fixes the
ordering every other component relies on:

- species follow database definition order, except that the electron
  (when present) is always index 0;
- elements are only those used by the loaded species, in database
  definition order;
- charge is carried by the pseudo-element ``e-``.
"""

import logging
import re
from collections.abc import Iterable

import numpy as np
from numpy.typing import NDArray

from .constants import ELECTRON_ELEMENT
from .types import ConfigurationError, Element, Species
from .validation import ValidationResult

logger = logging.getLogger(__name__)


# =============================================================================
# Formula Utilities
# =============================================================================

def parse_formula(formula: str) -> dict[str, int]:
    """
    Parse a species formula into element counts.

    Trailing '+'/'-' marks are charges and map onto the ``e-`` element
    (one '-' per electron gained, one '+' per electron lost). The bare
    formula ``e-`` is the electron itself.

    Examples:
        >>> parse_formula("N2+")
        {'N': 2, 'e-': -1}
        >>> parse_formula("e-")
        {'e-': 1}
    """
    if formula in (ELECTRON_ELEMENT, "E-", "E"):
        return {ELECTRON_ELEMENT: 1}

    body = formula.rstrip("+-")
    marks = formula[len(body):]
    charge = marks.count("+") - marks.count("-")

    elements: dict[str, int] = {}
    pattern = r"([A-Z][a-z]?)(\d*)"
    for match in re.finditer(pattern, body):
        element = match.group(1)
        count_str = match.group(2)
        count = int(count_str) if count_str else 1
        elements[element] = elements.get(element, 0) + count
    if charge:
        elements[ELECTRON_ELEMENT] = -charge
    return elements


def molecular_weight(composition: Iterable[tuple[str, int]], elements: dict[str, Element]) -> float:
    """
    Molar mass (kg/mol) from element counts.

    The charge element contributes its (electron) mass with sign, so a
    cation is lighter than its neutral parent by one electron mass.
    """
    return float(sum(elements[name].atomic_weight * n for name, n in composition))


# =============================================================================
# Registry
# =============================================================================

class SpeciesRegistry:
    """
    Ordered species/element tables for one mixture.

    Attributes:
        species: Loaded species in mixture order
        elements: Elements used by the loaded species
        has_electrons: True when the electron is loaded (always at index 0)
    """

    def __init__(self, species: list[Species], elements: list[Element], has_electrons: bool):
        self.species = species
        self.elements = elements
        self.has_electrons = has_electrons
        self._species_index = {s.name: i for i, s in enumerate(species)}
        self._element_index = {e.name: i for i, e in enumerate(elements)}

        self.element_matrix: NDArray[np.float64] = np.zeros(
            (len(species), len(elements)), dtype=np.float64
        )
        for i, sp in enumerate(species):
            for name, n in sp.composition:
                self.element_matrix[i, self._element_index[name]] = n
        self.element_matrix.setflags(write=False)

        self.molecular_weights: NDArray[np.float64] = np.array(
            [s.molecular_weight for s in species], dtype=np.float64
        )
        self.molecular_weights.setflags(write=False)
        self.charges: NDArray[np.float64] = np.array(
            [s.charge for s in species], dtype=np.float64
        )

    @classmethod
    def load(cls, names: Iterable[str], database) -> "SpeciesRegistry":
        """
        Load species by name from a chemistry database.

        Args:
            names: Requested species names (duplicates are ignored)
            database: Provider exposing species_names(), element_names(),
                lookup_species() and lookup_element()

        Raises:
            ConfigurationError: Listing every requested name the database
                does not define
        """
        requested = list(dict.fromkeys(names))
        known = set(database.species_names())

        result = ValidationResult()
        for name in requested:
            if name not in known:
                result.add_error(name, "Species not found in database")
        if not result.is_valid:
            raise ConfigurationError(
                f"{len(result.errors)} requested species not found in database", result
            )
        if not requested:
            result.add_error("species", "At least one species must be requested")
            raise ConfigurationError("Empty species list", result)

        wanted = set(requested)
        species = [
            database.lookup_species(name)
            for name in database.species_names()
            if name in wanted
        ]

        has_electrons = False
        for i, sp in enumerate(species):
            if sp.is_electron:
                species[0], species[i] = species[i], species[0]
                has_electrons = True
                break

        used = {name for sp in species for name, _ in sp.composition}
        elements = [
            database.lookup_element(name)
            for name in database.element_names()
            if name in used
        ]

        logger.info(
            "Loaded %d species and %d elements%s",
            len(species), len(elements), " (ionized)" if has_electrons else "",
        )
        return cls(species, elements, has_electrons)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @property
    def n_species(self) -> int:
        return len(self.species)

    @property
    def n_elements(self) -> int:
        return len(self.elements)

    @property
    def species_names(self) -> list[str]:
        return [s.name for s in self.species]

    @property
    def element_names(self) -> list[str]:
        return [e.name for e in self.elements]

    def species_index(self, name: str) -> int:
        """Index of a species, or -1 if it is not loaded."""
        return self._species_index.get(name, -1)

    def element_index(self, name: str) -> int:
        """Index of an element, or -1 if it is not used."""
        return self._element_index.get(name, -1)

    def species_name(self, index: int) -> str:
        if not 0 <= index < self.n_species:
            raise IndexError(f"Species index {index} out of range [0, {self.n_species})")
        return self.species[index].name

    def element_name(self, index: int) -> str:
        if not 0 <= index < self.n_elements:
            raise IndexError(f"Element index {index} out of range [0, {self.n_elements})")
        return self.elements[index].name
