"""
Chemistry database provider.

Holds element, species, thermodynamic and mechanism records in definition
order and answers lookups by name. A database is built in memory, from the
built-in sample data, or from a data directory laid out as:

    elements.json           [{"name": "N", "atomic_weight": 0.0140067}, ...]
    species.json            [{"name": "N2+", "composition": {"N": 2, "e-": -1}}, ...]
    rrho.json               {"N2": {"linearity": 1, "symmetry": 2, ...}, ...}
    *.thermo, *.dat         NASA-7 thermo cards
    mechanisms/<name>.json  {"units": {...}, "reactions": [...]} items

A species without an explicit composition gets it from its name
(``parse_formula``). NASA-7 cards for species not listed in species.json
define new species from the composition on the card.
"""

import json
import logging
from pathlib import Path
from typing import Any

from ..core.registry import molecular_weight, parse_formula
from ..core.reaction import ArrheniusUnits, MechanismRecord, ReactionRecord
from ..core.types import ConfigurationError, Element, NASA7Data, RRHOData, Species
from ..core.validation import ValidationResult
from .nasa_parser import parse_nasa_file

logger = logging.getLogger(__name__)


RRHO = "RRHO"
NASA7 = "NASA-7"


class ChemistryDatabase:
    """
    Name-indexed chemistry records in definition order.

    Args:
        elements: Elements in database order
        species: Species in database order
        thermo: Backend name -> species name -> thermo record
        mechanisms: Mechanism records by name

    Raises:
        ConfigurationError: For duplicate names or species built from
            unknown elements
    """

    def __init__(
        self,
        elements: list[Element],
        species: list[Species],
        thermo: dict[str, dict[str, Any]] | None = None,
        mechanisms: dict[str, MechanismRecord] | None = None,
    ):
        result = ValidationResult()
        self._elements: dict[str, Element] = {}
        for element in elements:
            if element.name in self._elements:
                result.add_error(element.name, "Element defined more than once")
            self._elements[element.name] = element

        self._species: dict[str, Species] = {}
        for sp in species:
            if sp.name in self._species:
                result.add_error(sp.name, "Species defined more than once")
            unknown = [name for name, _ in sp.composition if name not in self._elements]
            if unknown:
                result.add_error(sp.name, f"Uses undefined element(s) {unknown}")
            self._species[sp.name] = sp

        if not result.is_valid:
            raise ConfigurationError("Invalid chemistry database", result)

        self._thermo: dict[str, dict[str, Any]] = {
            backend: dict(records) for backend, records in (thermo or {}).items()
        }
        self._mechanisms: dict[str, MechanismRecord] = dict(mechanisms or {})

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def element_names(self) -> list[str]:
        return list(self._elements)

    def species_names(self) -> list[str]:
        return list(self._species)

    def mechanism_names(self) -> list[str]:
        return list(self._mechanisms)

    def lookup_element(self, name: str) -> Element:
        try:
            return self._elements[name]
        except KeyError:
            raise KeyError(f"Element '{name}' is not in the database") from None

    def lookup_species(self, name: str) -> Species:
        try:
            return self._species[name]
        except KeyError:
            raise KeyError(f"Species '{name}' is not in the database") from None

    def lookup_thermo(self, backend: str, name: str):
        """Thermo record of a species for one backend, or None."""
        return self._thermo.get(backend, {}).get(name)

    def lookup_mechanism(self, name: str) -> MechanismRecord:
        """
        Raises:
            ConfigurationError: If no mechanism has this name
        """
        try:
            return self._mechanisms[name]
        except KeyError:
            result = ValidationResult()
            result.add_error(
                "mechanism",
                f"Unknown mechanism '{name}'. Available: "
                f"{', '.join(self.mechanism_names()) or 'none'}",
            )
            raise ConfigurationError("Invalid mixture options", result) from None

    def missing_species(self, names) -> list[str]:
        """Every name in ``names`` that the database does not define."""
        return [name for name in names if name not in self._species]

    def add_mechanism(self, mechanism: MechanismRecord) -> None:
        self._mechanisms[mechanism.name] = mechanism

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    def from_records(
        cls,
        elements: list[tuple[str, float, int]],
        species: list[tuple[str, dict[str, int] | None]],
        rrho: dict[str, RRHOData] | None = None,
        nasa7: dict[str, NASA7Data] | None = None,
        mechanisms: dict[str, MechanismRecord] | None = None,
    ) -> "ChemistryDatabase":
        """
        Build a database from plain records.

        Args:
            elements: (name, atomic weight kg/mol, charge) tuples
            species: (name, composition or None) tuples; None parses the name
        """
        element_objs = [Element(name, weight, charge) for name, weight, charge in elements]
        by_name = {e.name: e for e in element_objs}

        species_objs = []
        result = ValidationResult()
        for name, composition in species:
            comp = dict(composition) if composition else parse_formula(name)
            unknown = [e for e in comp if e not in by_name]
            if unknown:
                result.add_error(name, f"Uses undefined element(s) {unknown}")
                continue
            ordered = tuple(comp.items())
            species_objs.append(Species(name, ordered, molecular_weight(ordered, by_name)))
        if not result.is_valid:
            raise ConfigurationError("Invalid chemistry database", result)

        thermo: dict[str, dict[str, Any]] = {}
        if rrho:
            thermo[RRHO] = dict(rrho)
        if nasa7:
            thermo[NASA7] = dict(nasa7)
        return cls(element_objs, species_objs, thermo, mechanisms)

    @classmethod
    def from_directory(cls, path: str | Path) -> "ChemistryDatabase":
        """
        Load a database from a data directory.

        Raises:
            FileNotFoundError: If the directory or elements.json is missing
            ConfigurationError: For duplicate or inconsistent definitions,
                all reported together
        """
        root = Path(path)
        if not root.is_dir():
            raise FileNotFoundError(f"Chemistry data directory not found: {root}")

        elements_file = root / "elements.json"
        if not elements_file.exists():
            raise FileNotFoundError(f"Missing elements file: {elements_file}")
        elements = [
            (e["name"], float(e["atomic_weight"]), int(e.get("charge", 0)))
            for e in _read_json(elements_file)
        ]

        species: list[tuple[str, dict[str, int] | None]] = []
        species_file = root / "species.json"
        if species_file.exists():
            species = [(s["name"], s.get("composition")) for s in _read_json(species_file)]

        result = ValidationResult()
        rrho: dict[str, RRHOData] = {}
        rrho_file = root / "rrho.json"
        if rrho_file.exists():
            for name, data in _read_json(rrho_file).items():
                rrho[name] = _rrho_record(name, data)

        nasa7: dict[str, NASA7Data] = {}
        thermo_files = sorted(root.glob("*.thermo")) + sorted(root.glob("*.dat"))
        listed = {name for name, _ in species}
        for thermo_file in thermo_files:
            for name, record in parse_nasa_file(thermo_file).items():
                if name in nasa7:
                    result.add_error(name, f"NASA-7 data defined again in {thermo_file.name}")
                    continue
                nasa7[name] = record
                if name not in listed and record.composition:
                    species.append((name, record.composition))
                    listed.add(name)

        mechanisms: dict[str, MechanismRecord] = {}
        mech_dir = root / "mechanisms"
        if mech_dir.is_dir():
            for mech_file in sorted(mech_dir.glob("*.json")):
                record = mechanism_from_dict(mech_file.stem, _read_json(mech_file))
                mechanisms[record.name] = record

        seen: set[str] = set()
        for name, _ in species:
            if name in seen:
                result.add_error(name, "Species defined more than once")
            seen.add(name)
        if not result.is_valid:
            raise ConfigurationError(f"Invalid chemistry data in {root}", result)

        database = cls.from_records(elements, species, rrho, nasa7, mechanisms)
        logger.info(
            "Loaded chemistry database from %s: %d elements, %d species, %d mechanisms",
            root, len(elements), len(species), len(mechanisms),
        )
        return database


def _read_json(path: Path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _rrho_record(name: str, data: dict[str, Any]) -> RRHOData:
    return RRHOData(
        name=name,
        linearity=int(data.get("linearity", 0)),
        symmetry=int(data.get("symmetry", 1)),
        rotational_temperatures=tuple(float(t) for t in data.get("rotational_temperatures", ())),
        vibrational_temperatures=tuple(float(t) for t in data.get("vibrational_temperatures", ())),
        electronic_levels=tuple(
            (int(g), float(t)) for g, t in data.get("electronic_levels", [(1, 0.0)])
        ),
        hf298=float(data.get("hf298", 0.0)),
    )


def mechanism_from_dict(name: str, data: dict[str, Any] | list) -> MechanismRecord:
    """
    Build a mechanism record from its JSON form.

    The JSON holds an ordered ``items`` list (or is the list itself). Each
    item is either a units directive ``{"units": {"A": "cm,mol,s", "E": "K"}}``
    or a reaction ``{"formula": ..., "A": ..., "n": ..., "E": ...,
    "efficiencies": {...}}``.
    """
    if isinstance(data, dict):
        name = data.get("name", name)
        raw_items = data.get("items", [])
    else:
        raw_items = data

    items: list[ArrheniusUnits | ReactionRecord] = []
    for item in raw_items:
        if "units" in item:
            units = item["units"]
            items.append(ArrheniusUnits.parse(units.get("A", "cm,mol,s"), units.get("E", "K")))
        else:
            items.append(ReactionRecord(
                formula=item["formula"],
                A=float(item["A"]),
                n=float(item.get("n", 0.0)),
                E=float(item.get("E", 0.0)),
                efficiencies=tuple(
                    (k, float(v)) for k, v in item.get("efficiencies", {}).items()
                ),
            ))
    return MechanismRecord(name=name, items=items)


def sample_database() -> ChemistryDatabase:
    """
    Database built from the bundled air and hydrogen-oxygen data.

    Useful for testing when no data directory is available.
    """
    from ..data import ELEMENT_DATA, MECHANISMS, NASA7_DATA, RRHO_DATA, SPECIES_DATA

    return ChemistryDatabase.from_records(
        ELEMENT_DATA, SPECIES_DATA, RRHO_DATA, NASA7_DATA, MECHANISMS
    )
