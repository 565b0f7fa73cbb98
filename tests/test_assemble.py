"""Tests for deer_sirs.assemble: validated transmission-rate assembly."""

import numpy as np
import pytest

from deer_sirs.assemble import BETAS, PARAM_FIELDS, Params, ParameterSet, alt_params
from deer_sirs.errors import ConfigurationError

BASE = dict(omega=0.01, gamma=0.2, I_human=0.03)


# ═══════════════════════════════════════════════════════════════════════
# BUILDER
# ═══════════════════════════════════════════════════════════════════════

class TestAltParams:

    def test_pathway_products(self):
        ps = alt_params(
            **BASE, prox_ww=2.0, prox_cc=5.0, prox_cw=0.1, prox_wc=0.4, prox_hw=0.02, prox_hc=0.5,
            p_aero_wild=0.1, p_aero_captive=0.2, p_direct=0.3,
            p_aero_human_wild=0.05, p_aero_human_captive=0.07,
        )
        p = ps.draw(0)
        assert p.beta_aero_ww == pytest.approx(0.2)
        assert p.beta_direct_ww == pytest.approx(0.6)
        assert p.beta_aero_cc == pytest.approx(1.0)
        assert p.beta_direct_cc == pytest.approx(1.5)
        assert p.beta_cw == pytest.approx(0.03)
        assert p.beta_wc == pytest.approx(0.12)
        assert p.beta_hw == pytest.approx(0.001)
        assert p.beta_hc == pytest.approx(0.035)

    def test_absent_pathways_are_explicit_zeros(self):
        ps = alt_params(**BASE, prox_cc=3.0, p_aero_captive=0.1)
        for name in ("prox_ww", "prox_cw", "prox_wc", "prox_hw", "prox_hc", "p_aero_wild", "p_direct"):
            assert name in ps
            assert np.all(ps[name] == 0.0)
        for beta in BETAS:
            assert beta in ps
        assert ps.draw(0).beta_aero_cc == pytest.approx(0.3)

    def test_human_probability_defaults_to_deer_aerosol(self):
        ps = alt_params(**BASE, prox_hw=1.0, prox_hc=1.0, p_aero_wild=0.1, p_aero_captive=0.2)
        np.testing.assert_allclose(ps["p_aero_human_wild"], [0.1])
        np.testing.assert_allclose(ps["p_aero_human_captive"], [0.2])

    @pytest.mark.parametrize("missing", ["omega", "gamma", "I_human"])
    def test_missing_required_symbol_named(self, missing):
        kwargs = dict(BASE)
        del kwargs[missing]
        with pytest.raises(ConfigurationError, match=missing):
            alt_params(**kwargs)

    def test_unknown_symbol(self):
        with pytest.raises(ConfigurationError, match="prox_xx"):
            alt_params(**BASE, prox_xx=1.0)

    @pytest.mark.parametrize("bad", [
        {"prox_ww": -0.1},
        {"p_direct": 1.2},
        {"I_human": 1.5},
        {"gamma": np.nan},
        {"prox_cc": [1.0, np.inf]},
    ])
    def test_invalid_values(self, bad):
        with pytest.raises(ConfigurationError):
            alt_params(**{**BASE, **bad})

    def test_mismatched_lengths(self):
        with pytest.raises(ConfigurationError):
            alt_params(**BASE, prox_ww=[1.0, 2.0], p_aero_wild=[0.1, 0.2, 0.3])

    def test_scalars_broadcast_to_draws(self):
        ps = alt_params(**BASE, prox_ww=[1.0, 2.0, 3.0], p_aero_wild=0.5)
        assert ps.n_draws == 3
        np.testing.assert_allclose(ps["beta_aero_ww"], [0.5, 1.0, 1.5])
        np.testing.assert_allclose(ps["gamma"], [0.2] * 3)

    def test_betas_non_negative_and_zero_with_zero_factor(self):
        rng = np.random.default_rng(3)
        n = 50
        prox = rng.uniform(0, 5, n) * (rng.uniform(size=n) > 0.3)
        prob = rng.uniform(0, 1, n) * (rng.uniform(size=n) > 0.3)
        ps = alt_params(**BASE, prox_ww=prox, p_aero_wild=prob, prox_cc=prox, p_direct=prob)
        for beta in BETAS:
            assert np.all(ps[beta] >= 0)
        zero = (prox == 0) | (prob == 0)
        assert np.all(ps["beta_aero_ww"][zero] == 0)
        assert np.all(ps["beta_direct_cc"][zero] == 0)

    def test_inputs_not_mutated(self):
        prox = np.array([1.0, 2.0])
        alt_params(**BASE, prox_ww=prox, p_aero_wild=0.5)
        np.testing.assert_array_equal(prox, [1.0, 2.0])


# ═══════════════════════════════════════════════════════════════════════
# PARAMETER SET
# ═══════════════════════════════════════════════════════════════════════

class TestParameterSet:

    def test_read_only(self):
        ps = alt_params(**BASE, prox_ww=[1.0, 2.0], p_aero_wild=0.5)
        with pytest.raises(ValueError):
            ps["prox_ww"][0] = 10.0
        with pytest.raises(TypeError):
            ps["prox_ww"] = np.zeros(2)

    def test_draw_returns_params(self):
        ps = alt_params(**BASE, prox_ww=[1.0, 2.0], p_aero_wild=0.5)
        p = ps.draw(1)
        assert isinstance(p, Params)
        assert p.beta_aero_ww == pytest.approx(1.0)
        assert set(PARAM_FIELDS) <= set(ps)
        assert len(list(ps.draws())) == 2

    def test_draw_out_of_range(self):
        with pytest.raises(IndexError):
            alt_params(**BASE).draw(1)

    def test_length_mismatch_rejected(self):
        with pytest.raises(ConfigurationError):
            ParameterSet({"a": np.zeros(2), "b": np.zeros(3)})

    def test_params_frozen(self):
        p = alt_params(**BASE).draw(0)
        with pytest.raises(AttributeError):
            p.gamma = 1.0
