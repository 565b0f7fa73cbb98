"""
Transmission-rate assembly. This module turns proximity rates and per-event
infection probabilities into the parameter set read by the ODE system.

This module provides:
- A `Params` dataclass, the assembled per-draw parameters (rates per day).
- A `ParameterSet` mapping, the batch form (one array per symbol).
- `alt_params`, the validated builder from named inputs.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Dict, Iterator, Union

import numpy as np

from .errors import ConfigurationError


# --------------------------------------------------------------------------------------
# Parameters
# --------------------------------------------------------------------------------------

@dataclass(frozen=True)
class Params:
    """
    Assembled model parameters for one draw.

    All rates are per day unless otherwise specified.

    Demography-free SIRS:
        omega : float  Waning-immunity rate, R -> S (day^-1)
        gamma : float  Recovery rate, I -> R (day^-1)

    Deer-to-deer transmission (beta = proximity rate x infection probability):
        beta_aero_ww   : float  Wild-wild, aerosol (day^-1)
        beta_direct_ww : float  Wild-wild, direct contact (day^-1)
        beta_aero_cc   : float  Captive-captive, aerosol (day^-1)
        beta_direct_cc : float  Captive-captive, direct contact (day^-1)
        beta_cw        : float  Captive -> wild across the fence, direct contact (day^-1)
        beta_wc        : float  Wild -> captive across the fence, direct contact (day^-1)

    Human spillover:
        I_human  : float  Infectious prevalence among people in contact with deer
        beta_hw  : float  Human -> wild, aerosol (day^-1)
        beta_hc  : float  Human -> captive, aerosol (day^-1)

    Exogenous forcing:
        boost_wild    : float  Constant introduction into I_wild (day^-1)
        boost_captive : float  Constant introduction into I_captive (day^-1)
    """
    omega: float
    gamma: float

    beta_aero_ww: float
    beta_direct_ww: float
    beta_aero_cc: float
    beta_direct_cc: float
    beta_cw: float
    beta_wc: float

    I_human: float
    beta_hw: float
    beta_hc: float

    boost_wild: float = 0.0
    boost_captive: float = 0.0


PARAM_FIELDS = tuple(f.name for f in fields(Params))

# --------------------------------------------------------------------------------------
# Input symbols
# --------------------------------------------------------------------------------------

REQUIRED = ("omega", "gamma", "I_human")
PROXIMITY = ("prox_ww", "prox_cw", "prox_wc", "prox_cc", "prox_hw", "prox_hc")
PROBABILITIES = ("p_aero_wild", "p_aero_captive", "p_direct")
HUMAN_PROBABILITIES = {
    "p_aero_human_wild": "p_aero_wild",
    "p_aero_human_captive": "p_aero_captive",
}
FORCING = ("boost_wild", "boost_captive")
UNIT_INTERVAL = ("I_human",) + PROBABILITIES + tuple(HUMAN_PROBABILITIES)
INPUTS = REQUIRED + PROXIMITY + PROBABILITIES + tuple(HUMAN_PROBABILITIES) + FORCING

BETAS = {
    "beta_aero_ww": ("prox_ww", "p_aero_wild"),
    "beta_direct_ww": ("prox_ww", "p_direct"),
    "beta_aero_cc": ("prox_cc", "p_aero_captive"),
    "beta_direct_cc": ("prox_cc", "p_direct"),
    "beta_cw": ("prox_cw", "p_direct"),
    "beta_wc": ("prox_wc", "p_direct"),
    "beta_hw": ("prox_hw", "p_aero_human_wild"),
    "beta_hc": ("prox_hc", "p_aero_human_captive"),
}


class ParameterSet(Mapping):
    """
    Immutable batch parameter set: symbol -> read-only float array of length n_draws.

    Holds both the assembler inputs and the derived transmission rates.
    """

    def __init__(self, values: Dict[str, np.ndarray]):
        lengths = {len(v) for v in values.values()}
        if len(lengths) != 1:
            raise ConfigurationError("All parameter sequences must have the same length")
        store = {}
        for name, value in values.items():
            arr = np.array(value, dtype=float)
            arr.setflags(write=False)
            store[name] = arr
        self._values = store
        self.n_draws = lengths.pop()

    def __getitem__(self, name: str) -> np.ndarray:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ParameterSet(n_draws={self.n_draws}, symbols={sorted(self._values)})"

    def draw(self, i: int) -> Params:
        """Assembled parameters for draw i (0-based)."""
        if not -self.n_draws <= i < self.n_draws:
            raise IndexError(f"Draw {i} out of range for {self.n_draws} draws")
        return Params(**{name: float(self._values[name][i]) for name in PARAM_FIELDS})

    def draws(self) -> Iterator[Params]:
        for i in range(self.n_draws):
            yield self.draw(i)

    def as_dict(self) -> Dict[str, np.ndarray]:
        return dict(self._values)


def _as_array(name: str, value: Union[float, np.ndarray]) -> np.ndarray:
    try:
        arr = np.atleast_1d(np.asarray(value, dtype=float))
    except (TypeError, ValueError) as err:
        raise ConfigurationError(f"Parameter {name!r} is not numeric") from err
    if arr.ndim != 1:
        raise ConfigurationError(f"Parameter {name!r} must be a scalar or 1-D sequence")
    if np.any(~np.isfinite(arr)):
        raise ConfigurationError(f"Parameter {name!r} contains non-finite values")
    if np.any(arr < 0):
        raise ConfigurationError(f"Parameter {name!r} must be non-negative")
    if name in UNIT_INTERVAL and np.any(arr > 1):
        raise ConfigurationError(f"Parameter {name!r} is a probability and must lie in [0, 1]")
    return arr


def alt_params(**symbols) -> ParameterSet:
    """
    Build the full parameter set for one context, pathway by pathway.

    Every pathway symbol the ODE system reads is present in the result:
    proximity rates and probabilities that are not supplied are set to zero
    (the pathway is absent from the context). The human aerosol probabilities
    default to the deer aerosol probability of the same sub-population.

    Args:
        **symbols: Scalars or 1-D sequences keyed by the names in INPUTS.

    Returns:
        ParameterSet holding the inputs and the assembled beta_* rates.

    Raises:
        ConfigurationError: missing required symbol, unknown symbol, negative
        value, probability above 1, or mismatched sequence lengths.
    """
    unknown = sorted(set(symbols) - set(INPUTS))
    if unknown:
        raise ConfigurationError(f"Unknown parameter symbol(s): {', '.join(unknown)}")
    for name in REQUIRED:
        if name not in symbols:
            raise ConfigurationError(f"Missing required parameter symbol: {name!r}")

    given = {name: _as_array(name, value) for name, value in symbols.items()}
    lengths = {len(v) for v in given.values() if len(v) != 1}
    if len(lengths) > 1:
        raise ConfigurationError(f"Parameter sequences have mismatched lengths: {sorted(lengths)}")
    n = lengths.pop() if lengths else 1

    values = {name: np.broadcast_to(arr, (n,)).copy() for name, arr in given.items()}
    for name in PROXIMITY + PROBABILITIES + FORCING:
        values.setdefault(name, np.zeros(n))
    for human, deer in HUMAN_PROBABILITIES.items():
        values.setdefault(human, values[deer].copy())

    for beta, (rate, prob) in BETAS.items():
        values[beta] = values[rate] * values[prob]

    return ParameterSet(values)


assemble_params = alt_params
