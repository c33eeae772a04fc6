"""
Unit tests for the RRHO and NASA-7 thermodynamic databases.

Reference:
    - NIST Chemistry WebBook (standard entropies and heat capacities)
    - NASA/TP-2002-211556 (NASA Glenn Coefficients)
"""

import logging

import numpy as np
import pytest

from aerochem.core.constants import RU, STANDARD_P, STANDARD_T
from aerochem.core.registry import SpeciesRegistry
from aerochem.core.thermo_db import available_thermo_dbs, create_thermo_db
from aerochem.core.types import ConfigurationError, EnergyComponents
from aerochem.data import RRHO_DATA
from aerochem.utils.database import sample_database


def _temps(T):
    return (T, T, T, T, T)


class TestThermoDBRegistry:

    def test_available(self):
        assert available_thermo_dbs() == ["NASA-7", "RRHO"]

    def test_unknown_database(self):
        db = sample_database()
        species = SpeciesRegistry.load(["N2"], db).species
        with pytest.raises(ConfigurationError) as exc_info:
            create_thermo_db("Shomate", species, db)
        assert "RRHO" in str(exc_info.value)

    def test_missing_data_all_reported(self):
        """NASA-7 data is not bundled for ions or the electron."""
        db = sample_database()
        species = SpeciesRegistry.load(["N", "N+", "e-"], db).species
        with pytest.raises(ConfigurationError) as exc_info:
            create_thermo_db("NASA-7", species, db)

        fields = {issue.field for issue in exc_info.value.issues}
        assert fields == {"N+", "e-"}


class TestRRHO:
    """Test the rigid-rotor / harmonic-oscillator model."""

    @pytest.fixture
    def registry(self):
        return SpeciesRegistry.load(["e-", "N", "N+", "N2", "N2+", "O2", "NO"], sample_database())

    @pytest.fixture
    def thermo(self, registry):
        return create_thermo_db("RRHO", registry.species, sample_database())

    def test_formation_enthalpy_reference(self, thermo, registry):
        """H(298.15 K) reproduces the tabulated formation enthalpy."""
        h = thermo.enthalpy(*_temps(STANDARD_T)) * RU * STANDARD_T
        expected = [RRHO_DATA[name].hf298 for name in registry.species_names]
        np.testing.assert_allclose(h, expected, rtol=1e-10, atol=1e-6)

    def test_atom_heat_capacity(self, thermo, registry):
        """Ground-state atom with no low-lying levels: Cp/R = 5/2."""
        cp = thermo.cp(*_temps(300.0))
        assert cp[registry.species_index("N")] == pytest.approx(2.5, rel=1e-8)

    def test_diatomic_heat_capacity(self, thermo, registry):
        """N2 at 300 K: translation + rotation, vibration nearly frozen."""
        cp = thermo.cp(*_temps(300.0))
        assert 3.5 < cp[registry.species_index("N2")] < 3.51

    def test_vibration_excited_at_high_temperature(self, thermo, registry):
        cp = thermo.cp(*_temps(5000.0))
        assert cp[registry.species_index("N2")] > 4.3

    def test_atomic_nitrogen_standard_entropy(self, thermo, registry):
        """S(N, 298.15 K, 1 atm) = 153.2 J/(mol K)."""
        s = thermo.entropy(*_temps(STANDARD_T), STANDARD_P)
        assert s[registry.species_index("N")] * RU == pytest.approx(153.2, rel=2e-3)

    def test_entropy_pressure_dependence(self, thermo):
        s1 = thermo.entropy(*_temps(4000.0), 1.0e4)
        s2 = thermo.entropy(*_temps(4000.0), 1.0e5)
        np.testing.assert_allclose(s1 - s2, np.log(10.0), rtol=1e-10)

    def test_gibbs_consistency(self, thermo):
        T, P = 6000.0, 5.0e4
        g = thermo.gibbs(*_temps(T), P)
        h = thermo.enthalpy(*_temps(T))
        s = thermo.entropy(*_temps(T), P)
        np.testing.assert_allclose(g, h - s, rtol=1e-12)

    def test_energy_components_sum(self, thermo):
        parts = thermo.enthalpy(3000.0, 9000.0, 3000.0, 5000.0, 5000.0, components=True)

        assert isinstance(parts, EnergyComponents)
        total = (
            parts.translational + parts.rotational + parts.vibrational
            + parts.electronic + parts.formation
        )
        np.testing.assert_allclose(parts.total, total, rtol=1e-12)

    def test_translational_mode_temperatures(self, thermo, registry):
        """Heavy species translate at Th, the electron at Te."""
        Th, Te = 3000.0, 9000.0
        parts = thermo.enthalpy(Th, Te, Th, Th, Th, components=True)

        assert parts.translational[registry.species_index("N2")] == pytest.approx(2.5)
        assert parts.translational[registry.species_index("e-")] == pytest.approx(2.5 * Te / Th)

    def test_vibrational_temperature_only_moves_vibration(self, thermo, registry):
        i = registry.species_index("N2")
        cold = thermo.enthalpy(3000.0, 3000.0, 3000.0, 3000.0, 3000.0, components=True)
        hot = thermo.enthalpy(3000.0, 3000.0, 3000.0, 8000.0, 3000.0, components=True)

        assert hot.vibrational[i] > cold.vibrational[i]
        assert hot.translational[i] == cold.translational[i]
        assert hot.rotational[i] == cold.rotational[i]

    def test_standard_state(self, thermo):
        assert thermo.standard_temperature == STANDARD_T
        assert thermo.standard_pressure == STANDARD_P


class TestNASA7:
    """Test the NASA 7-term polynomial model."""

    @pytest.fixture
    def registry(self):
        return SpeciesRegistry.load(["N", "O", "NO", "N2", "O2"], sample_database())

    @pytest.fixture
    def thermo(self, registry):
        return create_thermo_db("NASA-7", registry.species, sample_database())

    def test_n2_heat_capacity(self, thermo, registry):
        """N2 Cp at 300 K is 29.1 J/(mol K)."""
        cp = thermo.cp(*_temps(300.0))
        assert cp[registry.species_index("N2")] * RU == pytest.approx(29.1, rel=1e-2)

    def test_atomic_nitrogen_formation_enthalpy(self, thermo, registry):
        h = thermo.enthalpy(*_temps(STANDARD_T)) * RU * STANDARD_T
        assert h[registry.species_index("N")] == pytest.approx(472680.0, rel=5e-3)

    def test_reference_elements_near_zero(self, thermo, registry):
        h = thermo.enthalpy(*_temps(STANDARD_T)) * RU * STANDARD_T
        assert abs(h[registry.species_index("N2")]) < 50.0
        assert abs(h[registry.species_index("O2")]) < 50.0

    def test_gibbs_consistency(self, thermo):
        T, P = 2500.0, 2.0e5
        g = thermo.gibbs(*_temps(T), P)
        h = thermo.enthalpy(*_temps(T))
        s = thermo.entropy(*_temps(T), P)
        np.testing.assert_allclose(g, h - s, rtol=1e-12)

    def test_continuity_at_switch_temperature(self, thermo):
        below = thermo.cp(*_temps(999.999))
        above = thermo.cp(*_temps(1000.0))
        np.testing.assert_allclose(below, above, rtol=1e-3)

    def test_components_carry_total_only(self, thermo):
        parts = thermo.enthalpy(*_temps(2000.0), components=True)
        np.testing.assert_allclose(parts.total, thermo.enthalpy(*_temps(2000.0)))
        assert np.all(parts.vibrational == 0.0)

    def test_out_of_range_warns_once_per_species(self, thermo, caplog):
        with caplog.at_level(logging.WARNING, logger="aerochem.core.thermo_db"):
            thermo.cp(*_temps(8000.0))
            thermo.cp(*_temps(9000.0))

        warnings = [r for r in caplog.records if "outside NASA-7 fit range" in r.getMessage()]
        assert len(warnings) == 5
