"""
Outcome derivation from assembled parameters and draw records.

R0 and FOI are closed-form in the transmission rates; prevalence, persistence
and cumulative incidence are read off the trajectories and equilibria.
`summarize` returns one row per draw for downstream tables and plots.
"""

from __future__ import annotations

import warnings
from typing import Iterable, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .assemble import Params, ParameterSet
from .constants import IDX, PERSISTENCE_THRESHOLD
from .errors import ConfigurationError, NumericalWarning
from .model import trajectory_frame
from .solve import DrawRecord

ParamLike = Union[Params, ParameterSet]


def _get(p: ParamLike, name: str):
    if isinstance(p, Params):
        return getattr(p, name)
    return np.asarray(p[name], dtype=float)


def r0(p: ParamLike):
    """
    Basic reproduction number from deer-to-deer transmission only:

        R0 = (beta_aero_ww + beta_direct_ww + beta_aero_cc + beta_direct_cc) / gamma

    Float for Params, array for a ParameterSet.
    """
    gamma = _get(p, "gamma")
    if np.any(np.asarray(gamma) <= 0):
        raise ConfigurationError("R0 needs a positive recovery rate gamma")
    beta = (
        _get(p, "beta_aero_ww") + _get(p, "beta_direct_ww")
        + _get(p, "beta_aero_cc") + _get(p, "beta_direct_cc")
    )
    return beta / gamma


def foi(p: ParamLike):
    """Force of infection from people: (beta_hw + beta_hc) * I_human."""
    return (_get(p, "beta_hw") + _get(p, "beta_hc")) * _get(p, "I_human")


def infected(record: DrawRecord) -> np.ndarray:
    """I_wild + I_captive at every recorded time."""
    return record.trajectory[:, IDX["I_wild"]] + record.trajectory[:, IDX["I_captive"]]


def prevalence(record: DrawRecord, window: Optional[Tuple[float, float]] = None) -> float:
    """Mean of I_wild + I_captive over the trajectory, or over times within window."""
    values = infected(record)
    if window is not None:
        start, end = window
        if end < start:
            raise ConfigurationError(f"Window end {end} precedes start {start}")
        mask = (record.times >= start) & (record.times <= end)
        if not mask.any():
            raise ConfigurationError(f"No recorded times in window {window}")
        values = values[mask]
    return float(np.mean(values))


def persistence(record: DrawRecord, threshold: float = PERSISTENCE_THRESHOLD) -> bool:
    """True if either sub-population's equilibrium infected fraction exceeds threshold."""
    state = record.equilibrium.state
    return bool(state[IDX["I_wild"]] > threshold or state[IDX["I_captive"]] > threshold)


def cumulative_incidence(record: DrawRecord) -> float:
    """Final cumulative new infections, wild plus captive."""
    last = record.trajectory[-1]
    return float(last[IDX["I_wild_cum"]] + last[IDX["I_captive_cum"]])


def summarize(
    records: Iterable[DrawRecord],
    window: Optional[Tuple[float, float]] = None,
    threshold: float = PERSISTENCE_THRESHOLD,
) -> pd.DataFrame:
    """
    One row per draw.

    Columns:
        run_id, Context, R0, FOI, prevalence, peak_prevalence, cumulative_incidence,
        persistence, converged, transient_success, I_wild_eq, I_captive_eq
    """
    rows = []
    for record in records:
        eq = record.equilibrium.state
        rows.append({
            "run_id": record.run_id,
            "Context": record.context,
            "R0": r0(record.parameters),
            "FOI": foi(record.parameters),
            "prevalence": prevalence(record, window),
            "peak_prevalence": float(np.nanmax(infected(record))),
            "cumulative_incidence": cumulative_incidence(record),
            "persistence": persistence(record, threshold),
            "converged": record.converged,
            "transient_success": record.transient_success,
            "I_wild_eq": float(eq[IDX["I_wild"]]),
            "I_captive_eq": float(eq[IDX["I_captive"]]),
        })

    df = pd.DataFrame(rows)
    if not df.empty and not df["converged"].all():
        warnings.warn(
            f"{(~df['converged']).sum()} of {len(df)} draws have no converged equilibrium; "
            "their persistence values are unreliable",
            NumericalWarning,
            stacklevel=2,
        )
    return df


def trajectories_to_dataframe(records: Iterable[DrawRecord]) -> pd.DataFrame:
    """Long table of all trajectories: run_id, Context, Time_day and the compartments."""
    frames = [trajectory_frame(r.times, r.trajectory, run_id=r.run_id, context=r.context) for r in records]
    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)
