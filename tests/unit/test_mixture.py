"""
Unit tests for the Mixture facade.
"""

import logging

import numpy as np
import pytest

from aerochem.core.constants import KB, ONEATM, RU, STANDARD_P, STANDARD_T
from aerochem.core.mixture import Mixture
from aerochem.core.options import MixtureOptions
from aerochem.core.types import ConfigurationError, EnergyComponents, InvalidStateError


PLASMA = ["N2", "N", "N+", "N2+", "e-"]
AIR = ["N2", "O2", "NO", "N", "O"]


@pytest.fixture(scope="module")
def plasma():
    return Mixture(PLASMA)


@pytest.fixture
def air():
    return Mixture(AIR)


class TestConstruction:

    def test_species_order(self, plasma):
        assert plasma.species_names == ["e-", "N", "N+", "N2", "N2+"]
        assert plasma.has_electrons
        assert plasma.n_species == 5

    def test_elements(self, plasma):
        assert plasma.element_names == ["e-", "N"]
        assert plasma.n_elements == 2

    def test_lookups(self, plasma):
        assert plasma.species_index("N2+") == 4
        assert plasma.species_index("O2") == -1
        assert plasma.element_index("N") == 1
        assert plasma.species_name(0) == "e-"
        assert plasma.element_name(0) == "e-"

    def test_molecular_weights(self, plasma):
        assert plasma.species_mw(plasma.species_index("N2")) == pytest.approx(0.0280134)
        with pytest.raises(IndexError):
            plasma.species_mw(10)
        with pytest.raises(ValueError):
            plasma.species_mws[0] = 1.0

    def test_missing_species_all_listed(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Mixture(["N2", "CO2", "Xe"])
        message = str(exc_info.value)
        assert "CO2" in message and "Xe" in message

    def test_unknown_thermo_db(self):
        with pytest.raises(ConfigurationError):
            Mixture(MixtureOptions(species=AIR, thermo_db="Shomate"))

    def test_unknown_state_model(self):
        with pytest.raises(ConfigurationError):
            Mixture(MixtureOptions(species=AIR, state_model="ThermoNonEq3T"))

    def test_nasa7_backend(self):
        mix = Mixture(MixtureOptions(species=AIR, thermo_db="NASA-7"))
        assert mix.options.thermo_db == "NASA-7"
        X = mix.equilibrate(3000.0, ONEATM, {"N": 0.79, "O": 0.21})
        assert X.sum() == pytest.approx(1.0)

    def test_standard_state(self, plasma):
        assert plasma.standard_state_T == STANDARD_T
        assert plasma.standard_state_P == STANDARD_P

    def test_repr(self, plasma):
        assert "5 species" in repr(plasma)


class TestDefaultComposition:

    def test_uniform_default(self, plasma):
        np.testing.assert_allclose(plasma.default_composition, [0.5, 0.5])

    def test_set_and_normalize(self, air, caplog):
        with caplog.at_level(logging.WARNING, logger="aerochem.core.mixture"):
            air.set_default_composition({"N": 0.79 * 2, "O": 0.21 * 2})

        np.testing.assert_allclose(air.default_composition, [0.79, 0.21])
        assert any("normalizing" in r.getMessage() for r in caplog.records)

    def test_returned_copy(self, air):
        air.default_composition[0] = 100.0
        assert air.default_composition[0] == pytest.approx(0.5)

    def test_all_errors_listed(self, plasma):
        with pytest.raises(ConfigurationError) as exc_info:
            plasma.set_default_composition([("N", 1.0), ("N", 2.0), ("Xe", 1.0)])

        fields = [issue.field for issue in exc_info.value.issues]
        assert fields == ["N", "Xe", "e-"]

    def test_negative_amount(self, air):
        with pytest.raises(ConfigurationError):
            air.set_default_composition({"N": -1.0, "O": 2.0})

    def test_zero_sum(self, air):
        with pytest.raises(ConfigurationError):
            air.set_default_composition({"N": 0.0, "O": 0.0})

    def test_from_options(self):
        mix = Mixture(MixtureOptions(species=AIR, default_composition={"N": 0.79, "O": 0.21}))
        np.testing.assert_allclose(mix.default_composition, [0.79, 0.21])

    def test_equilibrate_uses_default(self, air):
        air.set_default_composition({"N": 0.5, "O": 0.5})
        air.equilibrate(4000.0, ONEATM)
        np.testing.assert_allclose(air.element_fractions(), [0.5, 0.5], rtol=1e-10)


class TestCompositionConversions:

    @pytest.fixture
    def X(self, plasma):
        return np.array([0.01, 0.6, 0.01, 0.37, 0.01])

    def test_mole_mass_round_trip(self, plasma, X):
        Y = plasma.convert_x_to_y(X)
        assert Y.sum() == pytest.approx(1.0)
        np.testing.assert_allclose(plasma.convert_y_to_x(Y), X, rtol=1e-8)

    def test_electrons_carry_little_mass(self, plasma, X):
        Y = plasma.convert_x_to_y(X)
        assert Y[0] < 1e-6

    def test_concentrations(self, plasma, X):
        T, P = 5000.0, 2.0e4
        conc = plasma.convert_x_to_conc(X, T, P)
        assert conc.sum() == pytest.approx(P / (RU * T))
        np.testing.assert_allclose(plasma.convert_conc_to_x(conc), X, rtol=1e-12)

    def test_element_moles(self, plasma):
        moles = np.array([1.0, 0.0, 1.0, 2.0, 0.0])
        np.testing.assert_allclose(plasma.element_moles(moles), [0.0, 5.0])

    def test_element_fractions(self, plasma):
        X = np.array([0.0, 0.0, 0.0, 1.0, 0.0])
        np.testing.assert_allclose(plasma.element_fractions(X), [0.0, 1.0])

    def test_wrong_length(self, plasma):
        with pytest.raises(ValueError):
            plasma.convert_x_to_y([0.5, 0.5])


class TestState:

    def test_set_state_mole_fractions(self, air):
        air.set_state_TPX(1200.0, 5.0e4, [1.0, 1.0, 0.0, 2.0, 0.0])
        assert air.T == 1200.0
        assert air.P == 5.0e4
        np.testing.assert_allclose(air.X, [0.25, 0.25, 0.0, 0.5, 0.0])

    def test_set_state_mass_fractions(self, air):
        Y = np.array([0.0, 0.0, 0.0, 0.7, 0.3])
        air.set_state_TPY(1200.0, 5.0e4, Y)
        np.testing.assert_allclose(air.Y, Y, rtol=1e-10, atol=1e-15)

    def test_invalid_state(self, air):
        with pytest.raises(InvalidStateError):
            air.set_state_TPX(-1.0, 5.0e4, np.ones(5))

    def test_two_temperature_state(self):
        mix = Mixture(MixtureOptions(species=PLASMA, state_model="ChemNonEqTTv"))
        mix.set_state_TPX([5000.0, 12000.0], 1.0e4, np.ones(5))
        assert (mix.T, mix.Tr, mix.Tv, mix.Te, mix.Tel) == (5000.0, 5000.0, 12000.0, 12000.0, 12000.0)

    def test_mixture_mw(self, air):
        air.set_state_TPX(300.0, ONEATM, [0.0, 0.0, 0.0, 1.0, 0.0])
        assert air.mixture_mw() == pytest.approx(0.0280134)
        assert air.mixture_mw_mole([0.0, 0.0, 0.0, 0.0, 1.0]) == pytest.approx(0.0319988)


class TestEquationOfState:

    def test_ideal_gas_density(self, air):
        X = np.array([0.1, 0.1, 0.0, 0.6, 0.2])
        air.set_state_TPX(2000.0, 3.0e4, X)
        expected = 3.0e4 * air.mixture_mw() / (RU * 2000.0)

        assert air.density() == pytest.approx(expected, rel=1e-12)
        assert air.density(2000.0, 3.0e4, X) == pytest.approx(expected, rel=1e-12)

    def test_pressure_inverts_density(self, air):
        air.set_state_TPX(2000.0, 3.0e4, [0.1, 0.1, 0.0, 0.6, 0.2])
        rho = air.density()
        assert air.pressure(2000.0, rho, air.Y) == pytest.approx(3.0e4, rel=1e-12)

    def test_number_density(self, air):
        assert air.number_density(1000.0, 1.0e5) == pytest.approx(1.0e5 / (KB * 1000.0))

    def test_electron_temperature_in_number_density(self):
        mix = Mixture(MixtureOptions(species=PLASMA, state_model="ChemNonEqTTv"))
        X = np.array([0.1, 0.5, 0.1, 0.3, 0.0])
        mix.set_state_TPX([5000.0, 10000.0], 1.0e4, X)

        expected = 1.0e4 / KB * (0.9 / 5000.0 + 0.1 / 10000.0)
        assert mix.number_density() == pytest.approx(expected, rel=1e-12)


class TestThermodynamicProperties:

    def test_frozen_properties_of_nitrogen(self, air):
        air.set_state_TPX(300.0, ONEATM, [0.0, 0.0, 0.0, 1.0, 0.0])

        assert air.mixture_frozen_cp_mass() == pytest.approx(1039.0, rel=5e-3)
        assert air.mixture_frozen_gamma() == pytest.approx(1.4, abs=2e-3)
        assert air.mixture_frozen_cp_mole() - air.mixture_frozen_cv_mole() == pytest.approx(RU)
        assert air.mixture_frozen_cv_mass() == pytest.approx(
            air.mixture_frozen_cv_mole() / air.mixture_mw()
        )

    def test_enthalpy_is_mole_weighted(self, air):
        X = np.array([0.1, 0.1, 0.1, 0.5, 0.2])
        air.set_state_TPX(3000.0, ONEATM, X)
        h = air.species_h_over_rt() @ X * RU * 3000.0

        assert air.mixture_h_mole() == pytest.approx(h, rel=1e-12)
        assert air.mixture_h_mass() == pytest.approx(h / air.mixture_mw(), rel=1e-12)

    def test_entropy_of_mixing(self, air):
        """An equimolar binary mixture gains R ln 2."""
        X = np.array([0.0, 0.0, 0.0, 0.5, 0.5])
        air.set_state_TPX(1000.0, ONEATM, X)
        pure = air.species_s_over_r() @ X * RU

        assert air.mixture_s_mole() - pure == pytest.approx(RU * np.log(2.0), rel=1e-10)
        assert air.mixture_s_mass() == pytest.approx(air.mixture_s_mole() / air.mixture_mw())

    def test_gibbs_at_state(self, air):
        air.set_state_TPX(2500.0, 2.0e4, np.ones(5))
        np.testing.assert_allclose(
            air.species_g_over_rt(),
            air.species_h_over_rt() - air.species_s_over_r(),
            rtol=1e-12,
        )

    def test_gibbs_at_explicit_state(self, air):
        g1 = air.species_g_over_rt(4000.0, 1.0e4)
        g2 = air.species_g_over_rt(4000.0, 1.0e5)
        np.testing.assert_allclose(g2 - g1, np.log(10.0), rtol=1e-10)

    def test_energy_components(self, air):
        air.set_state_TPX(3000.0, ONEATM, np.ones(5))
        parts = air.species_h_over_rt(components=True)
        assert isinstance(parts, EnergyComponents)
        np.testing.assert_allclose(parts.total, air.species_h_over_rt())


class TestEquilibrate:

    def test_result_sets_state(self, air):
        X = air.equilibrate(4000.0, ONEATM, {"N": 0.79, "O": 0.21})

        assert air.T == 4000.0
        np.testing.assert_allclose(air.X, X)
        assert air.last_equilibrium is not None
        assert air.last_equilibrium.temperature == 4000.0

    def test_state_untouched_when_requested(self, air):
        air.set_state_TPX(300.0, ONEATM, [0.0, 0.0, 0.0, 1.0, 0.0])
        air.equilibrate(4000.0, ONEATM, {"N": 0.79, "O": 0.21}, set_state=False)
        assert air.T == 300.0

    def test_element_fractions_preserved(self, air):
        X = air.equilibrate(6000.0, 1.0e4, [0.79, 0.21])
        np.testing.assert_allclose(air.element_fractions(X), [0.79, 0.21], rtol=1e-10)

    def test_returned_copy(self, air):
        X = air.equilibrate(4000.0, ONEATM, [0.5, 0.5])
        X[0] = 42.0
        assert air.X[0] != 42.0

    @pytest.mark.parametrize("T, P", [(0.0, ONEATM), (-300.0, ONEATM), (3000.0, 0.0)])
    def test_non_positive_state(self, air, T, P):
        with pytest.raises(InvalidStateError):
            air.equilibrate(T, P, [0.5, 0.5])

    def test_unknown_element_in_mapping(self, air):
        with pytest.raises(ValueError):
            air.equilibrate(3000.0, ONEATM, {"Xe": 1.0})

    def test_absent_element(self, air):
        X = air.equilibrate(5000.0, ONEATM, {"N": 1.0})
        for name in ("O2", "NO", "O"):
            assert X[air.species_index(name)] == 0.0

    def test_end_to_end_plasma_with_default_composition(self):
        mix = Mixture(["N2", "N", "e-"])
        assert mix.species_names[0] == "e-"
        assert mix.has_electrons

        X = mix.equilibrate(10000.0, 101325.0)
        assert X[mix.species_index("N")] > 0.0
        assert X[mix.species_index("e-")] > 0.0
        assert X.sum() == pytest.approx(1.0, abs=1e-10)

    @pytest.mark.parametrize("T", [200.0, 300.0, 500.0])
    def test_cold_neutral_plasma(self, plasma, T):
        """Trace ions near exp(-300) still balance the electrons."""
        X = plasma.equilibrate(T, ONEATM, {"N": 1.0, "e-": 0.0}, set_state=False)

        assert X[plasma.species_index("N2")] == pytest.approx(1.0, rel=1e-12)
        electrons = X[plasma.species_index("e-")]
        ions = X[plasma.species_index("N+")] + X[plasma.species_index("N2+")]
        assert electrons > 0.0
        assert electrons == pytest.approx(ions, rel=1e-8)

class TestEquilibriumProperties:

    def test_cp_exceeds_frozen_during_dissociation(self, air):
        air.equilibrate(4000.0, ONEATM, {"N": 0.79, "O": 0.21})
        assert air.mixture_equilibrium_cp_mass() > 1.2 * air.mixture_frozen_cp_mass()

    def test_cp_equals_frozen_when_cold(self, air):
        air.equilibrate(300.0, ONEATM, {"N": 0.79, "O": 0.21})
        assert air.mixture_equilibrium_cp_mole() == pytest.approx(
            air.mixture_frozen_cp_mole(), rel=1e-4
        )

    def test_cold_plasma_cp(self):
        mix = Mixture(PLASMA)
        mix.equilibrate(300.0, ONEATM, {"N": 1.0, "e-": 0.0})
        assert mix.mixture_equilibrium_cp_mole() == pytest.approx(
            mix.mixture_frozen_cp_mole(), rel=1e-6
        )

    def test_explicit_state_matches_current_state(self, air):
        X = air.equilibrate(5000.0, ONEATM, {"N": 0.79, "O": 0.21})
        cp_state = air.mixture_equilibrium_cp_mole()
        air.set_state_TPX(300.0, ONEATM, [0.0, 0.0, 0.0, 1.0, 0.0])
        cp_explicit = air.mixture_equilibrium_cp_mole(5000.0, ONEATM, X)
        assert cp_explicit == pytest.approx(cp_state, rel=1e-6)

    def test_cv_and_gamma(self, air):
        air.equilibrate(5000.0, ONEATM, {"N": 0.79, "O": 0.21})
        cp = air.mixture_equilibrium_cp_mole()

        assert air.mixture_equilibrium_cv_mole() == pytest.approx(cp - RU)
        assert air.mixture_equilibrium_gamma() == pytest.approx(cp / (cp - RU))
        assert air.mixture_equilibrium_cp_mass() == pytest.approx(cp / air.mixture_mw())
        assert air.mixture_equilibrium_cv_mass() == pytest.approx((cp - RU) / air.mixture_mw())

    def test_state_unchanged(self, air):
        X = air.equilibrate(5000.0, ONEATM, {"N": 0.79, "O": 0.21})
        air.mixture_equilibrium_cp_mole()
        assert air.T == 5000.0
        np.testing.assert_allclose(air.X, X, rtol=1e-14)
