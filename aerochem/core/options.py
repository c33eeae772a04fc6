"""
Mixture configuration.

MixtureOptions gathers everything needed to build a Mixture: which species
to load, which thermodynamic database and state model to use, the reaction
mechanism and where the chemistry data lives.

    >>> opts = MixtureOptions(species=["N2", "N"], thermo_db="RRHO")
    >>> opts = MixtureOptions.from_json_file("air5.json")
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from .types import ConfigurationError
from .validation import ValidationResult


@dataclass
class MixtureOptions:
    """
    Mixture construction options.

    Attributes:
        species: Species names to load
        thermo_db: Registered thermodynamic database name
        state_model: Registered state model name
        mechanism: Mechanism name in the database, or "none" for frozen
            chemistry
        validate_mechanism: Validate the mechanism when it is closed
        data_directory: Chemistry data directory; the built-in sample
            database is used when None
        default_composition: Optional element name -> amount mapping
    """
    species: list[str] = field(default_factory=list)
    thermo_db: str = "RRHO"
    state_model: str = "ChemNonEq1T"
    mechanism: str = "none"
    validate_mechanism: bool = True
    data_directory: Path | None = None
    default_composition: dict[str, float] | None = None

    def __post_init__(self):
        if isinstance(self.species, str):
            self.species = self.species.split()
        else:
            self.species = list(self.species)
        if self.data_directory is not None:
            self.data_directory = Path(self.data_directory)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MixtureOptions":
        """
        Build options from a plain mapping.

        Raises:
            ConfigurationError: Listing every unknown key
        """
        known = {f.name for f in fields(cls)}
        result = ValidationResult()
        for key in data:
            if key not in known:
                result.add_error(key, "Unknown mixture option")
        if not result.is_valid:
            raise ConfigurationError("Invalid mixture options", result)
        return cls(**data)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "MixtureOptions":
        """
        Load options from a JSON file.

        A relative ``data_directory`` is resolved against the file location.
        """
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        options = cls.from_dict(data)
        if options.data_directory is not None and not options.data_directory.is_absolute():
            options.data_directory = path.parent / options.data_directory
        return options

    def load_database(self):
        """The chemistry database these options point to."""
        from ..utils.database import ChemistryDatabase, sample_database

        if self.data_directory is None:
            return sample_database()
        return ChemistryDatabase.from_directory(self.data_directory)
