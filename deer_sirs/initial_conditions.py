"""
Initial compartment vectors for a batch of draws.

"fall"   : the given proportions, replicated per draw.
"steady" : each draw is first run to its equilibrium from the given seed, and
           that (endemic or disease-free) state is the starting point; the
           cumulative-incidence accumulators are reset to zero.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Union

import numpy as np

from .assemble import Params, ParameterSet
from .constants import CAPTIVE, COMPARTMENTS, IDX, N_COMPARTMENTS, STEADY_T_MAX, STEADY_TOL, WILD
from .errors import ConfigurationError
from .solve import SOLVER_ERRORS, run_steady

logger = logging.getLogger(__name__)

MODES = ("fall", "steady")


def _value(name: str, entry) -> float:
    if isinstance(entry, Mapping):
        if entry.get("name") != "constant":
            raise ConfigurationError(f"Initial condition {name!r} must be a constant, got {entry.get('name')!r}")
        return float(entry["args"]["value"])
    return float(entry)


def build_y0(ic: Mapping) -> np.ndarray:
    """
    Map ICs to the state order expected by model_ode:
    [S_wild, I_wild, R_wild, S_captive, I_captive, R_captive, I_wild_cum, I_captive_cum]

    Entries are plain numbers or {"name": "constant", "args": {"value": x}}.
    Compartments not given are 0.
    """
    unknown = sorted(set(ic) - set(COMPARTMENTS))
    if unknown:
        raise ConfigurationError(f"Unknown compartment(s): {', '.join(unknown)}")
    y0 = np.zeros(N_COMPARTMENTS, dtype=float)
    for name, entry in ic.items():
        y0[IDX[name]] = _value(name, entry)
    validate_y0(y0)
    return y0


def validate_y0(y0: np.ndarray) -> None:
    if np.any(~np.isfinite(y0)) or np.any(y0 < 0):
        raise ConfigurationError("Initial proportions must be finite and non-negative")
    for label, part in (("wild", WILD), ("captive", CAPTIVE)):
        total = y0[part].sum()
        if total > 1.0 + 1e-9:
            raise ConfigurationError(f"Initial {label} proportions sum to {total:.6g} > 1")


def make_initial_conditions(
    n: int,
    ic: Union[Mapping, np.ndarray],
    mode: str = "fall",
    params: Optional[Union[ParameterSet, Params]] = None,
    t_max: float = STEADY_T_MAX,
    stol: float = STEADY_TOL,
) -> np.ndarray:
    """
    One compartment vector per draw.

    Args:
        n: Number of draws.
        ic: Dict of proportions (see build_y0) or an (8,) array.
        mode: "fall" or "steady".
        params: Required for "steady"; ParameterSet with 1 or n draws.
        t_max, stol: Equilibrium solve settings for "steady".

    A draw whose equilibrium solve raises or ends in a non-finite state starts
    from the seed instead, with a warning; the rest of the batch is unaffected.

    Returns:
        np.ndarray of shape (n, 8).
    """
    if mode not in MODES:
        raise ConfigurationError(f"Unknown initial-condition mode {mode!r}; expected one of {MODES}")
    if int(n) < 1:
        raise ConfigurationError(f"Number of draws must be positive, got {n}")
    n = int(n)

    if isinstance(ic, Mapping):
        y0 = build_y0(ic)
    else:
        y0 = np.asarray(ic, dtype=float)
        if y0.shape != (N_COMPARTMENTS,):
            raise ConfigurationError(f"Initial vector must have {N_COMPARTMENTS} elements")
        validate_y0(y0)

    if mode == "fall":
        return np.tile(y0, (n, 1))

    if params is None:
        raise ConfigurationError("'steady' initial conditions need a parameter set")
    if not t_max > 0 or not stol > 0:
        raise ConfigurationError("t_max and stol must be positive")
    if isinstance(params, Params):
        draws = [params] * n
    elif params.n_draws in (1, n):
        draws = [params.draw(0 if params.n_draws == 1 else i) for i in range(n)]
    else:
        raise ConfigurationError(f"Parameter set has {params.n_draws} draws, expected {n}")

    out = np.empty((n, N_COMPARTMENTS), dtype=float)
    for i, p in enumerate(draws):
        try:
            eq = run_steady(p, y0, t_max=t_max, stol=stol)
        except SOLVER_ERRORS as err:
            logger.warning("Draw %d: pre-outbreak equilibrium solve failed (%s: %s); starting from the seed",
                           i + 1, type(err).__name__, err)
            state = y0.copy()
        else:
            if not np.all(np.isfinite(eq.state)):
                logger.warning("Draw %d: pre-outbreak equilibrium is not finite; starting from the seed", i + 1)
                state = y0.copy()
            else:
                if not eq.converged:
                    logger.warning("Draw %d: pre-outbreak equilibrium not reached (residual %.3g)", i + 1, eq.residual)
                state = np.clip(eq.state, 0.0, None)
        state[IDX["I_wild_cum"]] = 0.0
        state[IDX["I_captive_cum"]] = 0.0
        out[i] = state
    return out
