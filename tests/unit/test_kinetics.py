"""
Unit tests for mechanism construction, validation and rate evaluation.
"""

import numpy as np
import pytest

from aerochem.core.constants import ONEATM, RU
from aerochem.core.kinetics import Kinetics, MechanismState
from aerochem.core.mixture import Mixture
from aerochem.core.options import MixtureOptions
from aerochem.core.reaction import Reaction
from aerochem.core.types import ConfigurationError, InvalidStateError


AIR5_SPECIES = ["N2", "O2", "NO", "N", "O"]
NITROGEN_PLASMA = ["N2", "N", "N+", "N2+", "e-"]


@pytest.fixture(scope="module")
def air():
    return Mixture(MixtureOptions(species=AIR5_SPECIES, mechanism="air5"))


@pytest.fixture(scope="module")
def frozen_air():
    return Mixture(AIR5_SPECIES)


@pytest.fixture
def air_conc(air):
    X = np.zeros(air.n_species)
    for name, x in [("N2", 0.5), ("O2", 0.2), ("NO", 0.1), ("N", 0.1), ("O", 0.1)]:
        X[air.species_index(name)] = x
    return air.convert_x_to_conc(X, 6000.0, ONEATM)


class TestMechanismLifecycle:

    def test_states(self, frozen_air):
        kin = Kinetics(frozen_air)
        assert kin.state is MechanismState.EMPTY

        kin.add_reaction(Reaction.from_formula("N2 + O = NO + N", 6.4e11, -1.0, 38400.0))
        assert kin.state is MechanismState.BUILDING

        kin.close_reactions()
        assert kin.state is MechanismState.CLOSED

    def test_add_after_close(self, frozen_air):
        kin = Kinetics(frozen_air)
        kin.close_reactions()
        with pytest.raises(RuntimeError):
            kin.add_reaction(Reaction.from_formula("N2 + O = NO + N", 1.0))

    def test_close_twice(self, frozen_air):
        kin = Kinetics(frozen_air)
        kin.close_reactions()
        with pytest.raises(RuntimeError):
            kin.close_reactions()

    def test_rates_require_closed_mechanism(self, frozen_air):
        kin = Kinetics(frozen_air)
        kin.add_reaction(Reaction.from_formula("N2 + O = NO + N", 1.0))
        with pytest.raises(RuntimeError):
            kin.forward_rate_coefficients(3000.0)
        with pytest.raises(RuntimeError):
            kin.net_production_rates(3000.0, np.ones(frozen_air.n_species))

    def test_mechanism_from_mixture_options(self, air):
        assert air.kinetics is not None
        assert air.kinetics.n_reactions == 5
        assert air.kinetics.state is MechanismState.CLOSED

    def test_unknown_mechanism(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Mixture(MixtureOptions(species=AIR5_SPECIES, mechanism="air11"))
        assert "air5" in str(exc_info.value)


class TestMechanismValidation:

    def test_unknown_species_named(self, frozen_air):
        kin = Kinetics(frozen_air)
        kin.add_reaction(Reaction.from_formula("N2 + Ar = NO + N", 1.0))

        with pytest.raises(ConfigurationError) as exc_info:
            kin.close_reactions()
        assert "Ar" in str(exc_info.value)

    def test_unknown_species_fatal_without_validation(self, frozen_air):
        kin = Kinetics(frozen_air)
        kin.add_reaction(Reaction.from_formula("N2 + Ar = NO + N", 1.0))
        with pytest.raises(ConfigurationError):
            kin.close_reactions(validate=False)

    def test_unknown_efficiency_species(self, frozen_air):
        kin = Kinetics(frozen_air)
        kin.add_reaction(
            Reaction.from_formula("N2 + M = 2N + M", 1.0, efficiencies={"Ar": 0.5})
        )
        with pytest.raises(ConfigurationError) as exc_info:
            kin.close_reactions()
        assert "Ar" in str(exc_info.value)

    def test_duplicate_reactions(self, frozen_air):
        kin = Kinetics(frozen_air)
        kin.add_reaction(Reaction.from_formula("N2 + O = NO + N", 1.0))
        kin.add_reaction(Reaction.from_formula("NO + O = O2 + N", 1.0))
        kin.add_reaction(Reaction.from_formula("O + N2 => N + NO", 2.0))

        result = kin.validate_mechanism()
        assert not result.is_valid
        assert [issue.field for issue in result.errors] == ["Reactions 1 and 3"]

    def test_element_violation_names_reaction_and_element(self, frozen_air):
        kin = Kinetics(frozen_air)
        kin.add_reaction(Reaction.from_formula("N2 + O = NO + N", 1.0))
        kin.add_reaction(Reaction.from_formula("N2 + O = NO + O", 1.0))

        with pytest.raises(ConfigurationError) as exc_info:
            kin.close_reactions()

        messages = [str(issue) for issue in exc_info.value.issues]
        assert any("N2 + O = NO + O" in m and "element N" in m for m in messages)
        assert any("element O" in m for m in messages)
        assert all("Reaction 2" in m for m in messages)

    def test_charge_violation(self):
        mix = Mixture(["N", "N+", "e-"])
        kin = Kinetics(mix)
        kin.add_reaction(Reaction.from_formula("N = N+", 1.0))

        result = kin.validate_mechanism()
        assert any("does not conserve charge" in str(i) for i in result.errors)

    def test_violation_allowed_without_validation(self, frozen_air):
        kin = Kinetics(frozen_air)
        kin.add_reaction(Reaction.from_formula("N2 + O = NO + O", 1.0))
        kin.close_reactions(validate=False)
        assert kin.state is MechanismState.CLOSED

    def test_bundled_mechanisms_are_valid(self, air):
        assert air.kinetics.validate_mechanism().is_valid
        plasma = Mixture(MixtureOptions(species=NITROGEN_PLASMA, mechanism="nitrogen5"))
        assert plasma.kinetics.validate_mechanism().is_valid


class TestRateCoefficients:

    def test_backward_from_equilibrium_constant(self, air):
        kin = air.kinetics
        T = 7000.0
        kf = kin.forward_rate_coefficients(T)
        kb = kin.backward_rate_coefficients(T)
        keq = kin.equilibrium_constants(T)
        np.testing.assert_allclose(kf / kb, keq, rtol=1e-12)

    def test_dissociation_equilibrium_constant(self, air):
        """K_c(N2 = 2N) = (P0/RT) exp(g_N2 - 2 g_N) at the standard pressure."""
        T = 7000.0
        g = air.species_g_over_rt(T, ONEATM)
        expected = ONEATM / (RU * T) * np.exp(
            g[air.species_index("N2")] - 2.0 * g[air.species_index("N")]
        )
        assert air.kinetics.equilibrium_constants(T)[0] == pytest.approx(expected, rel=1e-10)

    def test_forward_rate_in_si_units(self, air):
        """7e21 cm^3/(mol s) T^-1.6 exp(-113200/T) in m^3/(mol s)."""
        T = 8000.0
        expected = 7.0e21 * 1e-6 * T ** -1.6 * np.exp(-113200.0 / T)
        assert air.kinetics.forward_rate_coefficients(T)[0] == pytest.approx(expected, rel=1e-12)

    def test_irreversible_has_no_backward_rate(self, frozen_air):
        kin = Kinetics(frozen_air)
        kin.add_reaction(Reaction.from_formula("N2 + O => NO + N", 6.4e11, -1.0, 38400.0))
        kin.add_reaction(Reaction.from_formula("NO + O = O2 + N", 8.4e6, 0.0, 19450.0))
        kin.close_reactions()

        kb = kin.backward_rate_coefficients(5000.0)
        assert kb[0] == 0.0
        assert kb[1] > 0.0

    def test_temperature_cache_reuse(self, air):
        kin = air.kinetics
        k1 = kin.forward_rate_coefficients(5000.0)
        k2 = kin.forward_rate_coefficients(5000.0 + 1e-7)
        np.testing.assert_array_equal(k1, k2)

    def test_temperature_cache_refresh(self, air):
        kin = air.kinetics
        k1 = kin.forward_rate_coefficients(5000.0)
        k2 = kin.forward_rate_coefficients(5001.0)
        assert np.all(k2 > k1)

    def test_non_positive_temperature(self, air):
        with pytest.raises(InvalidStateError):
            air.kinetics.forward_rate_coefficients(0.0)


class TestProductionRates:

    def test_mass_conservation(self, air, air_conc):
        wdot = air.kinetics.net_production_rates(6000.0, air_conc)
        assert abs(wdot.sum()) <= 1e-10 * np.abs(wdot).max()
        assert np.abs(wdot).max() > 0.0

    def test_net_is_forward_minus_backward(self, air, air_conc):
        kin = air.kinetics
        forward = kin.forward_rates_of_progress(6000.0, air_conc)
        backward = kin.backward_rates_of_progress(6000.0, air_conc)
        net = kin.net_rates_of_progress(6000.0, air_conc)
        np.testing.assert_allclose(net, forward - backward, rtol=1e-10, atol=1e-12 * np.abs(forward).max())

    def test_third_body_efficiencies(self, air, air_conc):
        """Atoms are 4.2857 times as efficient for N2 dissociation."""
        kin = air.kinetics
        T = 6000.0
        kf = kin.forward_rate_coefficients(T)
        n, o = air.species_index("N"), air.species_index("O")
        m = air_conc.sum() + 3.2857 * (air_conc[n] + air_conc[o])
        expected = kf[0] * air_conc[air.species_index("N2")] * m

        forward = kin.forward_rates_of_progress(T, air_conc)
        assert forward[0] == pytest.approx(expected, rel=1e-12)

    def test_detailed_balance_at_equilibrium(self, air):
        T, P = 5000.0, ONEATM
        X = air.equilibrate(T, P, {"N": 0.79, "O": 0.21}, set_state=False)
        conc = air.convert_x_to_conc(X, T, P)

        forward = air.kinetics.forward_rates_of_progress(T, conc)
        backward = air.kinetics.backward_rates_of_progress(T, conc)
        np.testing.assert_allclose(forward, backward, rtol=1e-6)

    def test_zero_concentrations_allowed(self, air):
        wdot = air.kinetics.net_production_rates(6000.0, np.zeros(air.n_species))
        np.testing.assert_array_equal(wdot, np.zeros(air.n_species))

    def test_negative_concentration(self, air, air_conc):
        conc = air_conc.copy()
        conc[0] = -1.0
        with pytest.raises(ValueError):
            air.kinetics.net_production_rates(6000.0, conc)

    @pytest.mark.parametrize("bad", [np.nan, np.inf])
    def test_non_finite_concentration(self, air, air_conc, bad):
        conc = air_conc.copy()
        conc[1] = bad
        with pytest.raises(ValueError):
            air.kinetics.net_production_rates(6000.0, conc)
        with pytest.raises(ValueError):
            air.kinetics.jacobian(6000.0, conc)

    def test_wrong_length(self, air):
        with pytest.raises(ValueError):
            air.kinetics.net_production_rates(6000.0, np.ones(3))

    def test_reaction_delta_of_molecular_weights(self, air):
        delta = air.kinetics.get_reaction_delta(air.species_mws)
        np.testing.assert_allclose(delta, 0.0, atol=1e-15)

    def test_ionized_mechanism_conserves_mass_and_charge(self):
        plasma = Mixture(MixtureOptions(species=NITROGEN_PLASMA, mechanism="nitrogen5"))
        X = np.full(plasma.n_species, 0.2)
        conc = plasma.convert_x_to_conc(X, 10000.0, ONEATM)

        wdot = plasma.kinetics.net_production_rates(10000.0, conc)
        molar = wdot / plasma.species_mws
        charges = plasma.registry.charges

        assert abs(wdot.sum()) <= 1e-10 * np.abs(wdot).max()
        assert abs(molar @ charges) <= 1e-10 * np.abs(molar).max()


class TestFrozenMechanism:

    def test_empty_mechanism_gives_zero_rates(self, frozen_air):
        kin = Kinetics(frozen_air)
        kin.close_reactions()
        conc = np.ones(frozen_air.n_species)

        assert kin.n_reactions == 0
        np.testing.assert_array_equal(kin.net_production_rates(3000.0, conc), 0.0)
        np.testing.assert_array_equal(kin.jacobian(3000.0, conc), 0.0)

    def test_mixture_without_mechanism(self, frozen_air):
        wdot = frozen_air.net_production_rates(3000.0, np.ones(frozen_air.n_species))
        np.testing.assert_array_equal(wdot, 0.0)


class TestJacobian:

    def test_matches_finite_differences(self, air, air_conc):
        kin = air.kinetics
        T = 6000.0
        jac = kin.jacobian(T, air_conc)

        fd = np.zeros_like(jac)
        for k in range(air.n_species):
            h = 1e-6 * air_conc[k]
            up, down = air_conc.copy(), air_conc.copy()
            up[k] += h
            down[k] -= h
            fd[:, k] = (
                kin.net_production_rates(T, up) - kin.net_production_rates(T, down)
            ) / (2.0 * h)

        np.testing.assert_allclose(jac, fd, rtol=1e-5, atol=1e-7 * np.abs(jac).max())

    def test_partial_density_form(self, air, air_conc):
        kin = air.kinetics
        jac = kin.jacobian(6000.0, air_conc)
        jac_rho = kin.jacobian_rho(6000.0, air_conc)
        np.testing.assert_allclose(jac_rho, jac / air.species_mws[np.newaxis, :], rtol=1e-14)

    def test_zero_concentration_is_finite(self, air):
        jac = air.kinetics.jacobian(6000.0, np.zeros(air.n_species))
        assert np.all(np.isfinite(jac))
