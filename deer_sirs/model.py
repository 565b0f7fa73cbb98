"""
Two-population SIRS model for wild and captive deer with human spillover. This
file only contains the model structure; batch solving is handled in solve.py.

This module provides:
- A `model_ode` function (right-hand side of the ODE system).
- `simulate` and `results_to_dataframe` helpers for single runs.

Dependencies:
    numpy, pandas, scipy
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

import numpy as np
import pandas as pd
from scipy.integrate import solve_ivp

from .assemble import Params
from .constants import ATOL, COMPARTMENTS, N_COMPARTMENTS, RTOL, TRANSIENT_METHOD
from .errors import ConfigurationError


# --------------------------------------------------------------------------------------
# ODE right-hand side
# --------------------------------------------------------------------------------------

def model_ode(
    t: float,
    y: np.ndarray,
    p: Params,
) -> np.ndarray:
    """
    Right-hand side of the ODE system dy/dt = f(t, y; p).

    State vector y (length 8), all proportions of the sub-population:
        0  S_w    Susceptible wild deer
        1  I_w    Infectious wild deer
        2  R_w    Recovered wild deer
        3  S_c    Susceptible captive deer
        4  I_c    Infectious captive deer
        5  R_c    Recovered captive deer
        6  C_w    Cumulative new infections, wild
        7  C_c    Cumulative new infections, captive

    Coupling:
        lambda_w = (beta_aero_ww + beta_direct_ww) * I_w + beta_cw * I_c + beta_hw * I_human
        lambda_c = (beta_aero_cc + beta_direct_cc) * I_c + beta_wc * I_w + beta_hc * I_human

    Returns:
        dydt: np.ndarray of shape (8,)
    """
    # Unpack state; forces read non-negative values only
    S_w, I_w, R_w, S_c, I_c, R_c = np.maximum(y[:6], 0.0)

    # Forces of infection
    lambda_w = (p.beta_aero_ww + p.beta_direct_ww) * I_w + p.beta_cw * I_c + p.beta_hw * p.I_human
    lambda_c = (p.beta_aero_cc + p.beta_direct_cc) * I_c + p.beta_wc * I_w + p.beta_hc * p.I_human

    # New infections
    wild_infections = lambda_w * S_w
    captive_infections = lambda_c * S_c

    # Recovery and waning
    recovery_w = p.gamma * I_w
    recovery_c = p.gamma * I_c
    waning_w = p.omega * R_w
    waning_c = p.omega * R_c

    # ODEs: wild
    dS_w = -wild_infections + waning_w
    dI_w = wild_infections - recovery_w + p.boost_wild
    dR_w = recovery_w - waning_w

    # ODEs: captive
    dS_c = -captive_infections + waning_c
    dI_c = captive_infections - recovery_c + p.boost_captive
    dR_c = recovery_c - waning_c

    # ODEs: cumulative incidence
    dC_w = wild_infections + p.boost_wild
    dC_c = captive_infections + p.boost_captive

    return np.array([dS_w, dI_w, dR_w, dS_c, dI_c, dR_c, dC_w, dC_c], dtype=float)


# --------------------------------------------------------------------------------------
# Simulation helpers
# --------------------------------------------------------------------------------------

def simulate(
    y0: Iterable[float],
    t_span: Tuple[float, float],
    params: Params,
    t_eval: Optional[np.ndarray] = None,
    rtol: float = RTOL,
    atol: float = ATOL,
    method: str = TRANSIENT_METHOD,
    **kwargs,
):
    """
    Integrate the ODE system.

    Args:
        y0: Initial conditions, iterable of length 8.
        t_span: (t0, tf) in days.
        params: Params dataclass.
        t_eval: Optional array of time points (days) at which to store the solution.
        rtol, atol: Solver tolerances.
        method: Any method accepted by `solve_ivp` (e.g., "LSODA", "BDF").
        **kwargs: Passed through to `solve_ivp` (e.g. events).

    Returns:
        SciPy `OdeResult` as returned by `solve_ivp`.
    """
    y0 = np.asarray(list(y0), dtype=float)
    if y0.shape != (N_COMPARTMENTS,):
        raise ConfigurationError(f"y0 must have {N_COMPARTMENTS} elements, got shape {y0.shape}")

    # Wrap RHS with params closed over
    def rhs(t, y):
        return model_ode(t, y, params)

    sol = solve_ivp(
        rhs,
        t_span=t_span,
        y0=y0,
        t_eval=t_eval,
        method=method,
        rtol=rtol,
        atol=atol,
        vectorized=False,
        **kwargs,
    )
    return sol


def results_to_dataframe(
    sol,
    run_id: int = 1,
    context: Optional[str] = None,
) -> pd.DataFrame:
    """
    Convert a SciPy OdeResult into a tidy DataFrame with totals and prevalences.

    Columns produced:
        Time_day, run_id, Context,
        S_wild, I_wild, R_wild, S_captive, I_captive, R_captive, I_wild_cum, I_captive_cum,
        Total_wild, Total_captive, prevalence_I_wild, prevalence_I_captive

    Args:
        sol: SciPy OdeResult with `t` and `y`.
        run_id: Draw identifier (for stacking runs).
        context: Optional context label stored per row.

    Returns:
        pd.DataFrame
    """
    if sol.t is None or sol.y is None:
        raise ValueError("Invalid OdeResult: missing solution arrays.")
    return trajectory_frame(sol.t, sol.y.T, run_id=run_id, context=context)


def trajectory_frame(
    times: np.ndarray,
    trajectory: np.ndarray,
    run_id: int = 1,
    context: Optional[str] = None,
) -> pd.DataFrame:
    """Tidy frame from a (T,) time array and a (T, 8) trajectory."""
    df = pd.DataFrame(np.asarray(trajectory), columns=list(COMPARTMENTS))
    df.insert(0, "Time_day", np.asarray(times, dtype=float))

    # Totals
    df["Total_wild"] = df["S_wild"] + df["I_wild"] + df["R_wild"]
    df["Total_captive"] = df["S_captive"] + df["I_captive"] + df["R_captive"]

    # Prevalences (guard against empty sub-populations)
    df["prevalence_I_wild"] = np.where(df["Total_wild"] > 0, df["I_wild"] / df["Total_wild"].where(df["Total_wild"] > 0, 1.0), 0.0)
    df["prevalence_I_captive"] = np.where(df["Total_captive"] > 0, df["I_captive"] / df["Total_captive"].where(df["Total_captive"] > 0, 1.0), 0.0)

    # Metadata / identifiers
    df.insert(1, "run_id", int(run_id))
    df.insert(2, "Context", context)
    return df
