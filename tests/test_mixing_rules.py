import math

import numpy as np
import pytest

from liqtrans.common.exceptions import ModelError, UsageError
from liqtrans.transport import LiquidMixtureState, LiquidTransportData, TransportProperty, build
from liqtrans.transport.impl.species_props import ConstantProperty
from liqtrans.transport.utils.units import R_UNIVERSAL


def build_state(X=(0.25, 0.75), T=350.0):
    return LiquidMixtureState(
        species_names=["H2O", "EtOH"],
        molecular_weights=[18.0e-3, 46.0e-3],
        temperature=T,
        X=list(X),
    )


def build_rule(model, state, block=(), prop=TransportProperty.VISCOSITY):
    return build(model, prop, state).init(list(block), state)


class _Bundle:
    def __init__(self, records):
        self.species_data = records


@pytest.mark.parametrize(
    "model", ["solvent", "mole_fractions", "mass_fractions", "log_mole_fractions", "mole_fractions_exp_t"]
)
def test_weighted_rules_require_weights(model):
    rule = build_rule(model, build_state())
    with pytest.raises(UsageError):
        rule.mix_values([1.0e-3, 2.0e-3])


def test_mole_fractions_with_single_weight_returns_weighted_value():
    state = build_state()
    rule = build_rule("mole_fractions", state)
    assert rule.mix_values([4.0, 9.0], [1.0, 0.0]) == 4.0 * 0.25


def test_mole_fractions_polynomial_correction():
    state = build_state(X=(0.5, 0.5), T=300.0)
    block = [{"speciesA": "H2O", "speciesB": "EtOH", "Aij": [2.0, 4.0], "Bij": 0.01}]
    rule = build_rule("mole_fractions", state, block)
    # x0 x1 (A0 + A1 x0) + x0 x1 B0 T
    expected = 1.0 * 0.5 + 3.0 * 0.5 + 0.25 * (2.0 + 4.0 * 0.5) + 0.25 * 0.01 * 300.0
    assert rule.mix_values([1.0, 3.0], [1.0, 1.0]) == pytest.approx(expected)


def test_weights_scale_fractions_in_correction_terms():
    state = build_state(X=(0.5, 0.5))
    block = [{"speciesA": "H2O", "speciesB": "EtOH", "Aij": 8.0}]
    rule = build_rule("mole_fractions", state, block)
    # x' = (1.0, 0.5): x'0 x'1 A
    assert rule.mix_values([0.0, 0.0], [2.0, 1.0]) == pytest.approx(1.0 * 0.5 * 8.0)


def test_mass_fractions_use_mass_basis():
    state = build_state(X=(0.5, 0.5))
    rule = build_rule("mass_fractions", state)
    w0, w1 = state.mass_fractions()
    assert w0 == pytest.approx(18.0 / 64.0)
    assert rule.mix_values([2.0, 5.0], [1.0, 1.0]) == pytest.approx(2.0 * w0 + 5.0 * w1)


def test_mass_fractions_correction_uses_weighted_mass_fractions():
    T = 300.0
    state = build_state(X=(0.5, 0.5), T=T)
    block = [{"speciesA": "H2O", "speciesB": "EtOH", "Aij": 4.0, "Bij": 0.02}]
    rule = build_rule("mass_fractions", state, block)
    w0, w1 = state.mass_fractions()
    f0, f1 = w0 * 1.0, w1 * 0.5
    expected = 2.0 * f0 + 5.0 * f1 + f0 * f1 * (4.0 + 0.02 * T)
    assert rule.mix_values([2.0, 5.0], [1.0, 0.5]) == pytest.approx(expected)


def test_log_mixing_without_excess_terms_is_geometric_mean():
    state = build_state(X=(0.3, 0.7))
    rule = build_rule("log_mole_fractions", state)
    p0, p1 = 1.0e-3, 4.0e-3
    assert rule.mix_values([p0, p1], [1.0, 1.0]) == pytest.approx(p0 ** 0.3 * p1 ** 0.7)


def test_log_mixing_excess_enthalpy_and_entropy():
    T = 400.0
    state = build_state(X=(0.5, 0.5), T=T)
    block = [{"speciesA": "H2O", "speciesB": "EtOH", "Hij": 1000.0 * R_UNIVERSAL, "Sij": 2.0 * R_UNIVERSAL}]
    rule = build_rule("log_mole_fractions", state, block)
    ln_mix = 0.5 * math.log(2.0) + 0.5 * math.log(8.0) + 0.25 * 1000.0 / T - 0.25 * 2.0
    assert rule.mix_values([2.0, 8.0], [1.0, 1.0]) == pytest.approx(math.exp(ln_mix))


def test_exp_t_rule():
    T = 320.0
    state = build_state(X=(0.4, 0.6), T=T)
    block = [{"speciesA": "EtOH", "speciesB": "H2O", "Aij": [1.5, 0.5], "Bij": [-0.01]}]
    rule = build_rule("mole_fractions_exp_t", state, block)
    x0, x1 = 0.4, 0.6
    # order 1 has no B entry and reads as exp(0)
    corr = x1 * x0 * 1.5 * math.exp(-0.01 * T) + x1 * x0 * 0.5 * x1
    assert rule.mix_values([1.0, 2.0], [1.0, 1.0]) == pytest.approx(x0 + 2.0 * x1 + corr)


def test_solvent_rule_applies_weights_to_base_term_only():
    state = build_state(X=(0.8, 0.2), T=300.0)
    block = [{"speciesA": "H2O", "speciesB": "EtOH", "Aij": 10.0}]
    rule = build_rule("solvent", state, block)
    # weighted species sum plus correction on the unweighted mole fractions
    assert rule.mix_values([1.0e-3, 5.0e-3], [1.0, 0.0]) == pytest.approx(1.0e-3 + 0.8 * 0.2 * 10.0)


def test_mix_species_uses_handle_values_and_weights():
    state = build_state(X=(0.25, 0.75))
    rule = build_rule("mole_fractions", state)
    handles = [ConstantProperty(state, 0, 1.0, constant=4.0), ConstantProperty(state, 1, 0.0, constant=9.0)]
    assert rule.mix_species(handles) == pytest.approx(1.0)


def test_rules_reread_state_each_call():
    state = build_state(X=(0.5, 0.5), T=300.0)
    block = [{"speciesA": "H2O", "speciesB": "EtOH", "Bij": 1.0}]
    rule = build_rule("mole_fractions", state, block)
    first = rule.mix_values([0.0, 0.0], [1.0, 1.0])
    state.set_temperature(600.0)
    assert rule.mix_values([0.0, 0.0], [1.0, 1.0]) == pytest.approx(2.0 * first)
    state.set_mole_fractions({"H2O": 1.0})
    assert rule.mix_values([3.0, 7.0], [1.0, 1.0]) == pytest.approx(3.0)


def test_scalar_rules_have_no_matrix():
    rule = build_rule("mole_fractions", build_state())
    with pytest.raises(ModelError):
        rule.matrix()


def test_value_length_must_match_species():
    rule = build_rule("mole_fractions", build_state())
    with pytest.raises(ValueError):
        rule.mix_values([1.0, 2.0, 3.0], [1.0, 1.0])


@pytest.mark.parametrize("model", ["pairwise_interaction", "stokes_einstein"])
def test_matrix_rules_refuse_scalar_queries(model):
    state = build_state()
    rule = build_rule(model, state, prop=TransportProperty.SPECIES_DIFFUSIVITY)
    with pytest.raises(ModelError):
        rule.mix_values([1.0, 2.0], [1.0, 1.0])
    with pytest.raises(ModelError):
        rule.mix_values([1.0, 2.0])
    with pytest.raises(ModelError):
        rule.mix_species([ConstantProperty(state, 0), ConstantProperty(state, 1)])


def test_pairwise_interaction_matrix():
    T = 350.0
    state = build_state(T=T)
    block = [{"speciesA": "EtOH", "speciesB": "H2O", "Dij": 2.0e-9, "Eij": 100.0 * R_UNIVERSAL}]
    rule = build_rule("pairwise_interaction", state, block, TransportProperty.SPECIES_DIFFUSIVITY)
    records = [
        LiquidTransportData("H2O", species_diffusivity=ConstantProperty(state, 0, constant=4.0e-9)),
        LiquidTransportData("EtOH"),
    ]
    rule.set_parameters(_Bundle(records))
    mat = rule.matrix()
    expected = math.exp(100.0 / T) / 2.0e-9
    assert mat[0, 1] == pytest.approx(expected)
    assert mat[1, 0] == pytest.approx(expected)
    assert mat[0, 0] == pytest.approx(1.0 / 4.0e-9)
    assert mat[1, 1] == 0.0


def test_pairwise_interaction_missing_pair():
    state = build_state()
    rule = build_rule("pairwise_interaction", state, prop=TransportProperty.SPECIES_DIFFUSIVITY)
    with pytest.raises(ModelError):
        rule.matrix()


def test_stokes_einstein_matrix_is_asymmetric():
    T = 300.0
    state = build_state(T=T)
    rule = build_rule("stokes_einstein", state, prop=TransportProperty.SPECIES_DIFFUSIVITY)
    records = [
        LiquidTransportData(
            "H2O",
            viscosity=ConstantProperty(state, 0, constant=1.0e-3),
            hydrodynamic_radius=ConstantProperty(state, 0, constant=1.0e-10),
        ),
        LiquidTransportData(
            "EtOH",
            viscosity=ConstantProperty(state, 1, constant=1.2e-3),
            hydrodynamic_radius=ConstantProperty(state, 1, constant=2.2e-10),
        ),
    ]
    rule.set_parameters(_Bundle(records))
    mat = rule.matrix()
    assert mat[0, 1] == pytest.approx(6.0 * math.pi * 1.0e-10 * 1.2e-3 / (R_UNIVERSAL * T))
    assert mat[1, 0] == pytest.approx(6.0 * math.pi * 2.2e-10 * 1.0e-3 / (R_UNIVERSAL * T))
    assert not np.isclose(mat[0, 1], mat[1, 0])


def test_solvent_rule_mixes_species_handles():
    state = build_state(X=(0.8, 0.2), T=300.0)
    block = [{"speciesA": "H2O", "speciesB": "EtOH", "Aij": 10.0}]
    rule = build_rule("solvent", state, block)
    handles = [ConstantProperty(state, 0, 1.0, constant=1.0e-3), ConstantProperty(state, 1, 0.0, constant=5.0e-3)]
    assert rule.mix_species(handles) == pytest.approx(1.0e-3 + 0.8 * 0.2 * 10.0)


def test_log_rule_mixes_species_handles():
    state = build_state(X=(0.3, 0.7))
    rule = build_rule("log_mole_fractions", state)
    handles = [ConstantProperty(state, 0, 1.0, constant=1.0e-3), ConstantProperty(state, 1, 1.0, constant=4.0e-3)]
    assert rule.mix_species(handles) == pytest.approx(1.0e-3 ** 0.3 * 4.0e-3 ** 0.7)
