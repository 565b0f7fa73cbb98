"""Tests for deer_sirs.infection_prob: aerosol and direct-contact dose-response."""

import numpy as np
import pytest

from deer_sirs.constants import (
    AER_BARN,
    AER_OUTDOOR,
    EXHALATION_RATE,
    EXPOSURE_VOLUME,
    HUMAN_EMISSION,
    INHALATION_RATE,
)
from deer_sirs.errors import ConfigurationError
from deer_sirs.infection_prob import aerosol_prob, direct_contact_prob


# ═══════════════════════════════════════════════════════════════════════
# AEROSOL
# ═══════════════════════════════════════════════════════════════════════

class TestAerosolProb:

    def test_known_value(self):
        dose = 1e4 * EXHALATION_RATE * INHALATION_RATE * 0.5 / (AER_OUTDOOR * EXPOSURE_VOLUME)
        p = aerosol_prob(1e4, 0.5, k=300.0)
        assert float(p) == pytest.approx(1 - np.exp(-dose / 300.0))

    def test_zero_duration_is_exactly_zero(self):
        p = aerosol_prob([1e9, 0.0, 1e3], [0.0, 0.0, 0.0], air_exchange=[0.0, 5.0, 0.0])
        assert np.all(p == 0.0)

    def test_unit_interval(self):
        p = aerosol_prob(np.logspace(0, 12, 25), 10.0, air_exchange=0.5)
        assert np.all((p >= 0) & (p <= 1))
        assert p[-1] == pytest.approx(1.0)

    def test_ventilation_never_increases_probability(self):
        aer = np.linspace(0.5, 50, 100)
        p = aerosol_prob(1e4, 1.0, air_exchange=aer)
        assert np.all(np.diff(p) <= 0)

    def test_barn_riskier_than_outdoors(self):
        assert float(aerosol_prob(5e3, 0.25, air_exchange=AER_BARN)) > float(aerosol_prob(5e3, 0.25))

    def test_increases_with_duration_and_load(self):
        assert np.all(np.diff(aerosol_prob(5e3, [0.1, 0.5, 1.0, 2.0])) > 0)
        assert np.all(np.diff(aerosol_prob([1e2, 1e3, 1e4], 0.5)) > 0)

    def test_human_emission_scales_dose(self):
        deer = aerosol_prob(5e3, 0.5, k=300.0)
        human = aerosol_prob(5e3, 0.5, k=300.0, emission=HUMAN_EMISSION)
        assert float(human) < float(deer)
        assert -np.log1p(-float(human)) == pytest.approx(HUMAN_EMISSION * -np.log1p(-float(deer)))

    @pytest.mark.parametrize("kwargs", [
        {"viral_load": -1.0, "duration": 1.0},
        {"viral_load": 1.0, "duration": -1.0},
        {"viral_load": 1.0, "duration": 1.0, "air_exchange": 0.0},
        {"viral_load": 1.0, "duration": 1.0, "k": 0.0},
        {"viral_load": np.nan, "duration": 1.0},
    ])
    def test_invalid_inputs(self, kwargs):
        with pytest.raises(ConfigurationError):
            aerosol_prob(**kwargs)


# ═══════════════════════════════════════════════════════════════════════
# DIRECT CONTACT
# ═══════════════════════════════════════════════════════════════════════

class TestDirectContactProb:

    def test_known_value(self):
        assert float(direct_contact_prob(1e4, k=1e4, volume=0.1)) == pytest.approx(1 - np.exp(-0.1))

    def test_zero_load(self):
        assert float(direct_contact_prob(0.0)) == 0.0

    def test_unit_interval_and_monotone(self):
        p = direct_contact_prob(np.logspace(0, 10, 30))
        assert np.all((p >= 0) & (p <= 1))
        assert np.all(np.diff(p) >= 0)

    def test_invalid(self):
        with pytest.raises(ConfigurationError):
            direct_contact_prob(-5.0)
        with pytest.raises(ConfigurationError):
            direct_contact_prob(5.0, k=0.0)
        with pytest.raises(ConfigurationError):
            direct_contact_prob(5.0, volume=-0.1)
