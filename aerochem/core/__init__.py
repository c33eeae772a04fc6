"""Core engine - species tables, thermodynamics, equilibrium and kinetics."""

from .constants import ELECTRON_ELEMENT, ONEATM, RU
from .types import (
    Element,
    Species,
    NASA7Data,
    RRHOData,
    EnergyComponents,
    EquilibriumResult,
    ConfigurationError,
    CalculationError,
    ConvergenceError,
    SingularMatrixError,
    InvalidStateError,
)
from .validation import (
    ValidationResult,
    ValidationIssue,
    ValidationSeverity,
    validate_thermo_state,
)
from .registry import SpeciesRegistry, parse_formula
from .thermo_db import (
    ThermoDB,
    register_thermo_db,
    available_thermo_dbs,
    create_thermo_db,
)
from .state_models import (
    StateModel,
    register_state_model,
    available_state_models,
    create_state_model,
)
from .equilibrium import EquilibriumSolver
from .reaction import (
    Arrhenius,
    ArrheniusUnits,
    Reaction,
    ReactionRecord,
    MechanismRecord,
    SI_UNITS,
)
from .kinetics import Kinetics, MechanismState
from .options import MixtureOptions
from .mixture import Mixture

__all__ = [
    # Constants
    "ELECTRON_ELEMENT",
    "ONEATM",
    "RU",
    # Types
    "Element",
    "Species",
    "NASA7Data",
    "RRHOData",
    "EnergyComponents",
    "EquilibriumResult",
    "ConfigurationError",
    "CalculationError",
    "ConvergenceError",
    "SingularMatrixError",
    "InvalidStateError",
    # Validation
    "ValidationResult",
    "ValidationIssue",
    "ValidationSeverity",
    "validate_thermo_state",
    # Species
    "SpeciesRegistry",
    "parse_formula",
    # Thermodynamics
    "ThermoDB",
    "register_thermo_db",
    "available_thermo_dbs",
    "create_thermo_db",
    "StateModel",
    "register_state_model",
    "available_state_models",
    "create_state_model",
    # Equilibrium
    "EquilibriumSolver",
    # Kinetics
    "Arrhenius",
    "ArrheniusUnits",
    "Reaction",
    "ReactionRecord",
    "MechanismRecord",
    "SI_UNITS",
    "Kinetics",
    "MechanismState",
    # Mixture
    "MixtureOptions",
    "Mixture",
]
