"""
Operational contexts: from elicited inputs to a parameter set and a batch.

context_params draws every elicited input for a context, converts abundance
to proximity rates and viral loads to per-event probabilities, and assembles
the parameter set. run_context then runs the whole batch and summarises it.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .assemble import ParameterSet, alt_params
from .constants import HUMAN_EMISSION, STEADY_T_MAX, STEADY_TOL, T_EVAL
from .contact_rate import proximity_rate
from .elicitation import Source
from .errors import ConfigurationError
from .infection_prob import aerosol_prob, direct_contact_prob
from .initial_conditions import make_initial_conditions
from .outcomes import summarize
from .params_and_ic import CONTEXTS, IC, priors
from .solve import DrawRecord, run_batch

logger = logging.getLogger(__name__)

PREFIX = {"wild": "ww", "captive": "cc"}
HUMAN_PREFIX = {"wild": "hw", "captive": "hc"}


def get_context(context: str) -> Mapping:
    try:
        return CONTEXTS[context]
    except KeyError:
        raise ConfigurationError(f"Unknown context {context!r}; expected one of {sorted(CONTEXTS)}") from None


def context_priors(context: str) -> Dict[str, Mapping]:
    """Default priors with the context's overrides applied."""
    merged = dict(priors)
    merged.update(get_context(context)["priors"])
    return merged


def required_inputs(context: str) -> List[str]:
    """Names the context requests from an elicited-parameter source."""
    ctx = get_context(context)
    names = [
        "infectious_days", "immunity_days",
        "viral_load_deer", "viral_load_human", "viral_load_saliva",
        "dose_response_k", "dose_response_k_fluid",
        "contact_hours_deer", "contact_hours_human",
    ]
    if ctx["introduction"] == "continuous":
        names.append("human_prevalence")
    for pop in ctx["populations"]:
        names += [f"abundance_{pop}", f"human_contacts_{pop}"]
    if ctx["fenceline"]:
        names.append("fenceline_rate")
    return names


def context_params(context: str, source: Source, n: int) -> ParameterSet:
    """
    Assemble the parameter set for n draws of one context.

    Args:
        context: Key of CONTEXTS.
        source: Elicited-parameter source, source(n, name) -> n values.
        n: Number of draws.
    """
    ctx = get_context(context)

    def draw(name: str) -> np.ndarray:
        values = np.asarray(source(n, name), dtype=float)
        if values.shape != (n,):
            raise ConfigurationError(f"Source returned shape {values.shape} for {name!r}, expected ({n},)")
        return values

    infectious_days = draw("infectious_days")
    immunity_days = draw("immunity_days")
    if np.any(infectious_days <= 0) or np.any(immunity_days <= 0):
        raise ConfigurationError("Infectious period and immunity duration must be positive")

    viral_load_deer = draw("viral_load_deer")
    viral_load_human = draw("viral_load_human")
    k = draw("dose_response_k")
    hours_deer = draw("contact_hours_deer")
    hours_human = draw("contact_hours_human")

    symbols = {
        "gamma": 1.0 / infectious_days,
        "omega": 1.0 / immunity_days,
        "I_human": draw("human_prevalence") if ctx["introduction"] == "continuous" else np.zeros(n),
        "p_direct": direct_contact_prob(draw("viral_load_saliva"), k=draw("dose_response_k_fluid")),
    }

    abundance = {}
    for pop in ctx["populations"]:
        abundance[pop] = np.rint(draw(f"abundance_{pop}"))
        aer = ctx["air_exchange"][pop]
        symbols[f"prox_{PREFIX[pop]}"] = proximity_rate(
            n, ctx["habitat"], abundance[pop], ctx["area"][pop],
            season=ctx["season"], attractant=ctx["attractant"][pop],
        )
        symbols[f"p_aero_{pop}"] = aerosol_prob(viral_load_deer, hours_deer, k=k, air_exchange=aer)
        symbols[f"p_aero_human_{pop}"] = aerosol_prob(
            viral_load_human, hours_human, k=k, emission=HUMAN_EMISSION, air_exchange=aer
        )
        symbols[f"prox_{HUMAN_PREFIX[pop]}"] = draw(f"human_contacts_{pop}")

    if ctx["fenceline"]:
        if set(ctx["populations"]) != {"wild", "captive"}:
            raise ConfigurationError(f"Context {context!r} has a fenceline but not both sub-populations")
        # contacts balance across the fence: N_captive * prox_wc == N_wild * prox_cw
        prox_wc = draw("fenceline_rate")
        ratio = np.divide(
            abundance["captive"], abundance["wild"],
            out=np.zeros(n), where=abundance["wild"] > 0,
        )
        symbols["prox_wc"] = prox_wc
        symbols["prox_cw"] = prox_wc * ratio

    return alt_params(**symbols)


def run_context(
    context: str,
    source: Source,
    n: int,
    t_eval: Sequence[float] = T_EVAL,
    mode: str = "fall",
    n_workers: Optional[int] = 1,
    **solver_options,
) -> Tuple[List[DrawRecord], pd.DataFrame]:
    """
    Parameters, initial conditions, batch and summary for one context.

    steady_t_max and steady_tol in solver_options apply to the pre-outbreak
    equilibrium of "steady" mode as well as to the per-draw equilibrium.

    Returns:
        (records, summary) where summary is outcomes.summarize(records).
    """
    ctx = get_context(context)
    params = context_params(context, source, n)
    logger.info("Context %r: %d draws assembled, initial conditions in %r mode", context, n, mode)
    y0 = make_initial_conditions(
        n, IC[ctx["ic"]], mode=mode, params=params,
        t_max=solver_options.get("steady_t_max", STEADY_T_MAX),
        stol=solver_options.get("steady_tol", STEADY_TOL),
    )
    records = run_batch(n, y0, params, t_eval, context, n_workers=n_workers, **solver_options)
    return records, summarize(records)
