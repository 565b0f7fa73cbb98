import numpy as np
import pytest

from deer_sirs.assemble import alt_params

from .helpers import state


@pytest.fixture
def t_eval() -> np.ndarray:
    return np.arange(0, 121, dtype=float)


@pytest.fixture
def seeded_captive() -> np.ndarray:
    return state(S_captive=0.999, I_captive=0.001)


@pytest.fixture
def coupled_params():
    """Both sub-populations, fenceline exchange and human forcing all active."""
    return alt_params(
        omega=[0.005, 0.01, 0.02],
        gamma=[1 / 6, 1 / 5, 1 / 8],
        I_human=[0.02, 0.05, 0.0],
        prox_ww=[1.5, 2.0, 0.5],
        prox_cc=[6.0, 3.0, 10.0],
        prox_cw=[0.02, 0.05, 0.1],
        prox_wc=[0.1, 0.2, 0.3],
        prox_hw=[0.01, 0.02, 0.05],
        prox_hc=[0.5, 1.0, 0.2],
        p_aero_wild=[0.05, 0.1, 0.2],
        p_aero_captive=[0.1, 0.05, 0.02],
        p_direct=[0.1, 0.05, 0.3],
    )
