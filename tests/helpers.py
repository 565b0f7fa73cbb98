"""Shared builders for states and parameter sets used across the test modules."""

import numpy as np

from deer_sirs.assemble import alt_params
from deer_sirs.constants import IDX, N_COMPARTMENTS


def state(**values) -> np.ndarray:
    """8-vector with the named compartments set, the rest zero."""
    y = np.zeros(N_COMPARTMENTS)
    for name, value in values.items():
        y[IDX[name]] = value
    return y


def captive_only(beta, gamma=0.1, omega=0.01):
    """Parameter set where only captive-captive aerosol transmission is active."""
    return alt_params(omega=omega, gamma=gamma, I_human=0.0, prox_cc=1.0, p_aero_captive=beta)
