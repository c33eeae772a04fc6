"""
Thermodynamic state models.

A state model stores the current mixture state (pressure, composition and
the characteristic temperatures of each energy mode) and decides how the
temperatures given by the user map onto those modes.

Models are chosen by name:

- ``ChemNonEq1T``: chemical nonequilibrium, one temperature for all modes
- ``ChemNonEqTTv``: chemical nonequilibrium, translational-rotational T and
  a vibrational-electronic-electron Tv
"""

from collections.abc import Callable, Sequence

import numpy as np
from numpy.typing import NDArray

from .types import ConfigurationError, InvalidStateError
from .validation import ValidationResult, validate_thermo_state


_STATE_MODELS: dict[str, type["StateModel"]] = {}


def register_state_model(name: str) -> Callable[[type["StateModel"]], type["StateModel"]]:
    def decorator(cls: type["StateModel"]) -> type["StateModel"]:
        _STATE_MODELS[name] = cls
        cls.name = name
        return cls
    return decorator


def available_state_models() -> list[str]:
    return sorted(_STATE_MODELS)


def create_state_model(name: str, n_species: int) -> "StateModel":
    """
    Construct a registered state model.

    Raises:
        ConfigurationError: If ``name`` is not registered
    """
    try:
        cls = _STATE_MODELS[name]
    except KeyError:
        result = ValidationResult()
        result.add_error(
            "state_model",
            f"Unknown state model '{name}'. "
            f"Available: {', '.join(available_state_models())}",
        )
        raise ConfigurationError("Invalid mixture options", result) from None
    return cls(n_species)


class StateModel:
    """
    Base state: every mode in equilibrium at a single temperature.

    Attributes:
        T, Tr, Tv, Te, Tel: Characteristic temperatures (K)
        P: Pressure (Pa)
        X: Species mole fractions (normalized to sum to one)
    """

    name: str = ""
    n_temperatures: int = 1

    def __init__(self, n_species: int):
        self.n_species = n_species
        self.T = 300.0
        self.Tr = 300.0
        self.Tv = 300.0
        self.Te = 300.0
        self.Tel = 300.0
        self.P = 101325.0
        self.X: NDArray[np.float64] = np.full(
            n_species, 1.0 / max(n_species, 1), dtype=np.float64
        )

    def set_state_TPX(
        self,
        T: float | Sequence[float],
        P: float,
        X: Sequence[float] | NDArray[np.float64],
    ) -> None:
        """
        Set temperatures, pressure and mole fractions.

        Args:
            T: A scalar, or a sequence with ``n_temperatures`` entries
            P: Pressure (Pa)
            X: Mole fractions; re-normalized to sum to one

        Raises:
            ValueError: If T or X has the wrong number of entries
            InvalidStateError: If a temperature or P is non-positive, or X
                has a negative entry or a zero sum
        """
        temperatures = self._temperature_list(T)
        x = np.asarray(X, dtype=np.float64)
        if x.shape != (self.n_species,):
            raise ValueError(
                f"Expected {self.n_species} mole fractions, got shape {x.shape}"
            )

        result = validate_thermo_state(temperatures, P, list(x))
        if not result.is_valid:
            raise InvalidStateError(str(result))

        self._assign_temperatures(temperatures)
        self.P = float(P)
        self.X = x / x.sum()

    def _temperature_list(self, T: float | Sequence[float]) -> list[float]:
        if np.isscalar(T):
            return [float(T)] * self.n_temperatures
        temperatures = [float(t) for t in T]
        if len(temperatures) != self.n_temperatures:
            raise ValueError(
                f"{self.name} expects {self.n_temperatures} temperature(s), "
                f"got {len(temperatures)}"
            )
        return temperatures

    def _assign_temperatures(self, temperatures: list[float]) -> None:
        T = temperatures[0]
        self.T = self.Tr = self.Tv = self.Te = self.Tel = T

    @property
    def temperatures(self) -> tuple[float, float, float, float, float]:
        """(Th, Te, Tr, Tv, Tel) in the order thermo databases expect."""
        return self.T, self.Te, self.Tr, self.Tv, self.Tel


@register_state_model("ChemNonEq1T")
class ChemNonEq1T(StateModel):
    """Chemical nonequilibrium with a single temperature."""


@register_state_model("ChemNonEqTTv")
class ChemNonEqTTv(StateModel):
    """
    Two-temperature model.

    T drives translation and rotation; Tv drives vibration, electronic
    excitation and the free electrons.
    """

    n_temperatures = 2

    def _assign_temperatures(self, temperatures: list[float]) -> None:
        T, Tv = temperatures
        self.T = self.Tr = T
        self.Tv = self.Te = self.Tel = Tv
