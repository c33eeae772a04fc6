"""
Thermodynamic databases.

A thermodynamic database turns the five characteristic temperatures of a
state (heavy-particle Th, electron Te, rotational Tr, vibrational Tv and
electronic Tel) into dimensionless per-species properties:

    Cp/R, H/(R Th), S/R, G/(R Th) = H/(R Th) - S/R

Implementations are chosen by name from a registry so new models can be
added without touching the mixture:

    >>> db = create_thermo_db("RRHO", species, database)
    >>> db.enthalpy(3000.0, 3000.0, 3000.0, 3000.0, 3000.0)
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

import numpy as np
from numpy.typing import NDArray

from .constants import RU, STANDARD_P, STANDARD_T
from .thermodynamics import (
    nasa7_cp_over_r,
    nasa7_h_over_rt,
    nasa7_s_over_r,
    rrho_properties,
)
from .types import ConfigurationError, EnergyComponents, Species
from .validation import ValidationResult

logger = logging.getLogger(__name__)


_THERMO_DBS: dict[str, type["ThermoDB"]] = {}


def register_thermo_db(name: str) -> Callable[[type["ThermoDB"]], type["ThermoDB"]]:
    """Class decorator registering a ThermoDB implementation under ``name``."""
    def decorator(cls: type["ThermoDB"]) -> type["ThermoDB"]:
        _THERMO_DBS[name] = cls
        cls.name = name
        return cls
    return decorator


def available_thermo_dbs() -> list[str]:
    return sorted(_THERMO_DBS)


def create_thermo_db(name: str, species: Sequence[Species], database) -> "ThermoDB":
    """
    Construct a registered thermodynamic database.

    Raises:
        ConfigurationError: If ``name`` is not registered or any species
            lacks data for the selected model
    """
    try:
        cls = _THERMO_DBS[name]
    except KeyError:
        result = ValidationResult()
        result.add_error(
            "thermo_db",
            f"Unknown thermodynamic database '{name}'. "
            f"Available: {', '.join(available_thermo_dbs())}",
        )
        raise ConfigurationError("Invalid mixture options", result) from None
    return cls(species, database)


class ThermoDB(ABC):
    """
    Abstract per-species thermodynamic model.

    Subclasses load their records in ``__init__`` and evaluate the four
    property functions. All returned arrays follow the mixture species order.
    """

    name: str = ""

    def __init__(self, species: Sequence[Species], database):
        self._species = list(species)
        self._is_electron = np.array([s.is_electron for s in self._species], dtype=np.bool_)
        records = []
        missing = ValidationResult()
        for sp in self._species:
            record = database.lookup_thermo(self.name, sp.name)
            if record is None:
                missing.add_error(sp.name, f"No {self.name} thermodynamic data")
            records.append(record)
        if not missing.is_valid:
            raise ConfigurationError(
                f"Missing {self.name} data for {len(missing.errors)} species", missing
            )
        self._load(records)

    @property
    def n_species(self) -> int:
        return len(self._species)

    @property
    def standard_temperature(self) -> float:
        return STANDARD_T

    @property
    def standard_pressure(self) -> float:
        return STANDARD_P

    @abstractmethod
    def _load(self, records: list) -> None:
        """Pack the per-species records into arrays."""

    @abstractmethod
    def cp(self, Th: float, Te: float, Tr: float, Tv: float, Tel: float) -> NDArray[np.float64]:
        """Species Cp/R."""

    @abstractmethod
    def enthalpy(
        self, Th: float, Te: float, Tr: float, Tv: float, Tel: float,
        components: bool = False,
    ) -> NDArray[np.float64] | EnergyComponents:
        """Species H/(R Th), optionally split into energy modes."""

    @abstractmethod
    def entropy(
        self, Th: float, Te: float, Tr: float, Tv: float, Tel: float, P: float
    ) -> NDArray[np.float64]:
        """Species S/R of the pure species at pressure P."""

    def gibbs(
        self, Th: float, Te: float, Tr: float, Tv: float, Tel: float, P: float
    ) -> NDArray[np.float64]:
        """Species G/(R Th) = H/(R Th) - S/R at pressure P."""
        return self.enthalpy(Th, Te, Tr, Tv, Tel) - self.entropy(Th, Te, Tr, Tv, Tel, P)


# =============================================================================
# RRHO
# =============================================================================

@register_thermo_db("RRHO")
class RRHODB(ThermoDB):
    """
    Rigid-rotor / harmonic-oscillator model with electronic levels.

    Translation is evaluated at Th (Te for the electron), rotation at Tr,
    vibration at Tv and electronic excitation at Tel. The formation
    enthalpy given at 298.15 K is shifted to a 0 K reference so that
    H(298.15 K) reproduces it exactly.
    """

    def _load(self, records: list) -> None:
        n = len(records)
        self._mw = np.array([s.molecular_weight for s in self._species], dtype=np.float64)
        self._linearity = np.array([r.linearity for r in records], dtype=np.int64)
        self._symmetry = np.array([max(r.symmetry, 1) for r in records], dtype=np.float64)

        self._theta_rot = np.ones((n, 3), dtype=np.float64)
        for j, r in enumerate(records):
            for k, theta in enumerate(r.rotational_temperatures[:3]):
                self._theta_rot[j, k] = theta

        vib = [list(r.vibrational_temperatures) for r in records]
        self._vib_offsets = np.zeros(n + 1, dtype=np.int64)
        self._vib_offsets[1:] = np.cumsum([len(v) for v in vib])
        self._vib_theta = np.array([t for v in vib for t in v], dtype=np.float64)

        levels = [list(r.electronic_levels) for r in records]
        self._el_offsets = np.zeros(n + 1, dtype=np.int64)
        self._el_offsets[1:] = np.cumsum([len(v) for v in levels])
        self._el_g = np.array([g for v in levels for g, _ in v], dtype=np.float64)
        self._el_theta = np.array([t for v in levels for _, t in v], dtype=np.float64)

        # Shift Hf(298.15) to the 0 K reference used by the mode sums
        hf298 = np.array([r.hf298 for r in records], dtype=np.float64) / RU
        self._hf0 = np.zeros(n, dtype=np.float64)
        Ts = STANDARD_T
        _, h, _ = self._evaluate(Ts, Ts, Ts, Ts, Ts, STANDARD_P)
        self._hf0 = hf298 - (h[0] - h[5])

    def _evaluate(self, Th, Te, Tr, Tv, Tel, P):
        return rrho_properties(
            float(Th), float(Te), float(Tr), float(Tv), float(Tel), float(P),
            self._mw, self._is_electron, self._linearity, self._symmetry,
            self._theta_rot, self._vib_theta, self._vib_offsets,
            self._el_g, self._el_theta, self._el_offsets, self._hf0,
        )

    def cp(self, Th, Te, Tr, Tv, Tel):
        cp, _, _ = self._evaluate(Th, Te, Tr, Tv, Tel, STANDARD_P)
        return cp

    def enthalpy(self, Th, Te, Tr, Tv, Tel, components=False):
        _, h, _ = self._evaluate(Th, Te, Tr, Tv, Tel, STANDARD_P)
        h = h / Th
        if not components:
            return h[0].copy()
        return EnergyComponents(
            total=h[0].copy(),
            translational=h[1].copy(),
            rotational=h[2].copy(),
            vibrational=h[3].copy(),
            electronic=h[4].copy(),
            formation=h[5].copy(),
        )

    def entropy(self, Th, Te, Tr, Tv, Tel, P):
        _, _, s = self._evaluate(Th, Te, Tr, Tv, Tel, P)
        return s


# =============================================================================
# NASA-7
# =============================================================================

@register_thermo_db("NASA-7")
class NASA7DB(ThermoDB):
    """
    NASA 7-term polynomial model.

    Polynomials carry no mode decomposition, so heavy species are evaluated
    at Th and the electron at Te. Temperatures outside a species' fit range
    are extrapolated; the first occurrence per species is logged.
    """

    def _load(self, records: list) -> None:
        self._coeffs_low = np.array([r.coeffs_low for r in records], dtype=np.float64)
        self._coeffs_high = np.array([r.coeffs_high for r in records], dtype=np.float64)
        self._t_mid = np.array([r.t_mid for r in records], dtype=np.float64)
        self._t_low = np.array([r.t_low for r in records], dtype=np.float64)
        self._t_high = np.array([r.t_high for r in records], dtype=np.float64)
        self._warned: set[int] = set()
        if self.n_species == 0:
            self._coeffs_low = self._coeffs_low.reshape(0, 7)
            self._coeffs_high = self._coeffs_high.reshape(0, 7)

    def _temperatures(self, Th: float, Te: float) -> NDArray[np.float64]:
        T = np.where(self._is_electron, Te, Th).astype(np.float64)
        outside = np.nonzero((T < self._t_low) | (T > self._t_high))[0]
        for j in outside:
            if j not in self._warned:
                self._warned.add(int(j))
                logger.warning(
                    "Temperature %.1f K outside NASA-7 fit range [%.0f, %.0f] K "
                    "for %s; extrapolating",
                    T[j], self._t_low[j], self._t_high[j], self._species[j].name,
                )
        return T

    def cp(self, Th, Te, Tr, Tv, Tel):
        T = self._temperatures(Th, Te)
        return nasa7_cp_over_r(T, self._coeffs_low, self._coeffs_high, self._t_mid)

    def enthalpy(self, Th, Te, Tr, Tv, Tel, components=False):
        T = self._temperatures(Th, Te)
        h = nasa7_h_over_rt(T, self._coeffs_low, self._coeffs_high, self._t_mid) * T / Th
        if not components:
            return h
        parts = EnergyComponents.zeros(self.n_species)
        parts.total = h
        return parts

    def entropy(self, Th, Te, Tr, Tv, Tel, P):
        T = self._temperatures(Th, Te)
        return nasa7_s_over_r(T, float(P), self._coeffs_low, self._coeffs_high, self._t_mid)
