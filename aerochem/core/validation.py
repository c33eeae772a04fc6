"""
Validation framework for mixture and mechanism configuration.

Configuration checks collect every problem they find instead of stopping
at the first one, so a user fixing a mechanism file or species list sees
the complete list of failures in a single error.
"""

import math
from dataclasses import dataclass, field
from enum import Enum


class ValidationSeverity(Enum):
    """Severity level for validation issues."""
    ERROR = "error"      # Cannot proceed
    WARNING = "warning"  # Can proceed but unusual
    INFO = "info"        # Just informational


@dataclass
class ValidationIssue:
    """A single validation issue."""
    severity: ValidationSeverity
    field: str
    message: str
    value: float | None = None
    valid_range: tuple[float, float] | None = None

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.field}: {self.message}"


@dataclass
class ValidationResult:
    """Complete validation result."""
    is_valid: bool = True
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    @property
    def infos(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.INFO]

    def add_error(self, field: str, message: str, value: float | None = None) -> None:
        """Record a fatal issue and mark the result invalid."""
        self.issues.append(ValidationIssue(
            severity=ValidationSeverity.ERROR,
            field=field,
            message=message,
            value=value,
        ))
        self.is_valid = False

    def add_warning(self, field: str, message: str, value: float | None = None) -> None:
        self.issues.append(ValidationIssue(
            severity=ValidationSeverity.WARNING,
            field=field,
            message=message,
            value=value,
        ))

    def __str__(self) -> str:
        if self.is_valid and not self.warnings:
            return "All inputs valid"

        lines = []
        for issue in self.issues:
            lines.append(str(issue))
        return "\n".join(lines)


# =============================================================================
# Validation Functions
# =============================================================================

def validate_thermo_state(
    temperatures: list[float],
    pressure: float,
    mole_fractions: list[float] | None = None,
    n_species: int | None = None,
) -> ValidationResult:
    """
    Validate a thermodynamic state before it is handed to a state model.

    Args:
        temperatures: Characteristic temperatures (K), all must be positive
        pressure: Pressure (Pa), must be positive
        mole_fractions: Optional composition vector
        n_species: Expected composition length

    Returns:
        ValidationResult with one error per offending input
    """
    result = ValidationResult()

    for k, T in enumerate(temperatures):
        if not T > 0.0:
            result.add_error(
                f"Temperature[{k}]",
                f"Temperature must be positive (got {T} K)",
                value=T,
            )

    if not pressure > 0.0:
        result.add_error(
            "Pressure",
            f"Pressure must be positive (got {pressure} Pa)",
            value=pressure,
        )

    if mole_fractions is not None:
        if n_species is not None and len(mole_fractions) != n_species:
            result.add_error(
                "Composition",
                f"Expected {n_species} entries, got {len(mole_fractions)}",
            )
        non_finite = [i for i, x in enumerate(mole_fractions) if not math.isfinite(x)]
        negatives = [i for i, x in enumerate(mole_fractions) if x < 0.0]
        if non_finite:
            result.add_error(
                "Composition",
                f"Non-finite entries at species indices {non_finite}",
            )
        elif negatives:
            result.add_error(
                "Composition",
                f"Negative entries at species indices {negatives}",
            )
        elif sum(mole_fractions) <= 0.0:
            result.add_error("Composition", "Composition must have a positive sum")

    return result
