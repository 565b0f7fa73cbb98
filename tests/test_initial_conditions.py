"""Tests for deer_sirs.initial_conditions: "fall" and "steady" starting states."""

import logging

import numpy as np
import pytest

from deer_sirs import initial_conditions as ic_module
from deer_sirs.constants import IDX
from deer_sirs.errors import ConfigurationError
from deer_sirs.initial_conditions import build_y0, make_initial_conditions
from deer_sirs.params_and_ic import IC
from deer_sirs.solve import EquilibriumResult, run_batch

from .helpers import captive_only, state


class TestBuildY0:

    def test_constant_entries(self):
        y0 = build_y0(IC["captive"])
        np.testing.assert_allclose(y0, state(S_captive=0.999, I_captive=0.001))

    def test_plain_numbers_and_missing_zero(self):
        y0 = build_y0({"S_wild": 0.7, "I_wild": 0.1})
        assert y0[IDX["R_wild"]] == 0.0
        assert y0[IDX["S_wild"]] == pytest.approx(0.7)

    @pytest.mark.parametrize("ic", [
        {"S_wild": 0.9, "I_wild": 0.2},
        {"S_captive": 1.0, "R_captive": 0.01},
        {"S_wild": -0.1},
        {"E_wild": 0.1},
        {"S_wild": {"name": "uniform", "args": {"low": 0, "high": 1}}},
    ])
    def test_rejected(self, ic):
        with pytest.raises(ConfigurationError):
            build_y0(ic)


class TestInitialConditions:

    def test_fall_replicates(self):
        out = make_initial_conditions(4, IC["wild"])
        assert out.shape == (4, 8)
        np.testing.assert_array_equal(out, np.tile(build_y0(IC["wild"]), (4, 1)))

    def test_array_input(self):
        y0 = state(S_wild=1.0)
        np.testing.assert_array_equal(make_initial_conditions(2, y0), np.tile(y0, (2, 1)))

    def test_steady_starts_from_endemic_baseline(self):
        params = captive_only(beta=[0.5, 0.05], gamma=0.1, omega=0.01)
        out = make_initial_conditions(2, IC["captive"], mode="steady", params=params)
        # R0 = 5: endemic; I* = (1 - 1/R0) * omega / (gamma + omega)
        assert out[0, IDX["I_captive"]] == pytest.approx(0.8 * 0.01 / 0.11, abs=1e-4)
        # R0 = 0.5: disease-free
        assert out[1, IDX["I_captive"]] < 1e-5
        np.testing.assert_array_equal(out[:, IDX["I_wild_cum"]], 0.0)
        np.testing.assert_array_equal(out[:, IDX["I_captive_cum"]], 0.0)
        np.testing.assert_allclose(out[:, 3:6].sum(axis=1), 1.0, atol=1e-6)

    def test_steady_needs_params(self):
        with pytest.raises(ConfigurationError):
            make_initial_conditions(2, IC["captive"], mode="steady")

    def test_steady_draw_count_mismatch(self):
        params = captive_only(beta=[0.5, 0.4, 0.3])
        with pytest.raises(ConfigurationError):
            make_initial_conditions(2, IC["captive"], mode="steady", params=params)

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError):
            make_initial_conditions(2, IC["captive"], mode="spring")

    def test_steady_solver_settings_validated(self):
        params = captive_only(beta=0.5)
        with pytest.raises(ConfigurationError):
            make_initial_conditions(2, IC["captive"], mode="steady", params=params, t_max=0.0)


# ═══════════════════════════════════════════════════════════════════════
# FAILED PRE-OUTBREAK EQUILIBRIA
# ═══════════════════════════════════════════════════════════════════════

class TestSteadyFailures:

    @pytest.fixture
    def flaky_steady(self, monkeypatch):
        """Equilibrium solve that raises for beta 0.3 and returns NaN for beta 0.05."""
        real = ic_module.run_steady

        def steady(p, y0, **kwargs):
            if p.beta_aero_cc == pytest.approx(0.3):
                raise FloatingPointError("overflow in Jacobian")
            if p.beta_aero_cc == pytest.approx(0.05):
                return EquilibriumResult(
                    state=np.full(8, np.nan), converged=False, residual=float("nan"), t_final=0.0,
                )
            return real(p, y0, **kwargs)

        monkeypatch.setattr(ic_module, "run_steady", steady)

    def test_failed_draws_start_from_seed(self, flaky_steady, caplog):
        params = captive_only(beta=[0.5, 0.3, 0.05])
        seed = build_y0(IC["captive"])
        with caplog.at_level(logging.WARNING, logger="deer_sirs.initial_conditions"):
            out = make_initial_conditions(3, IC["captive"], mode="steady", params=params)
        assert np.all(np.isfinite(out))
        np.testing.assert_array_equal(out[1], seed)
        np.testing.assert_array_equal(out[2], seed)
        assert out[0, IDX["I_captive"]] == pytest.approx(0.8 * 0.01 / 0.11, abs=1e-4)
        assert "solve failed" in caplog.text
        assert "not finite" in caplog.text

    def test_batch_survives_failed_draw(self, flaky_steady, t_eval):
        params = captive_only(beta=[0.5, 0.3, 0.05])
        y0 = make_initial_conditions(3, IC["captive"], mode="steady", params=params)
        records = run_batch(3, y0, params, t_eval, "test")
        assert [r.run_id for r in records] == [1, 2, 3]
        assert all(r.transient_success for r in records)


def test_package_attribute_is_the_module():
    import deer_sirs

    assert deer_sirs.initial_conditions is ic_module
    assert deer_sirs.make_initial_conditions is make_initial_conditions
