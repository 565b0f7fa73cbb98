"""
Elicited-parameter sources.

A source is any callable `source(n, name) -> np.ndarray` returning n draws of
the named parameter, ordered consistently across names within one batch.
Three are provided:

- csv_source: columns of a table of pre-drawn samples (e.g. LHS_Samples.csv).
- distribution_source: independent draws from prior distributions.
- lhs_source: a Latin hypercube design over all priors, mapped through the
  marginal quantile functions.

Randomness always comes from an explicit numpy Generator (or seed); nothing
touches the global NumPy random state.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Union

import numpy as np
import pandas as pd
from scipy import stats
from scipy.stats import qmc

from .errors import ConfigurationError

Source = Callable[[int, str], np.ndarray]
RngLike = Union[None, int, np.random.Generator]


# --------------------------------------------------------------------------------------
# Prior distributions
# --------------------------------------------------------------------------------------

def _pert(low: float, mode: float, high: float):
    if not low <= mode <= high or low == high:
        raise ConfigurationError(f"PERT needs low <= mode <= high and low < high, got {(low, mode, high)}")
    span = high - low
    return stats.beta(1 + 4 * (mode - low) / span, 1 + 4 * (high - mode) / span, loc=low, scale=span)


def _triangular(low: float, mode: float, high: float):
    if not low <= mode <= high or low == high:
        raise ConfigurationError(f"Triangular needs low <= mode <= high and low < high, got {(low, mode, high)}")
    return stats.triang((mode - low) / (high - low), loc=low, scale=high - low)


DISTRIBUTIONS = {
    "uniform": lambda low, high: stats.uniform(loc=low, scale=high - low),
    "normal": lambda mean, sd: stats.norm(loc=mean, scale=sd),
    "lognormal": lambda meanlog, sdlog: stats.lognorm(s=sdlog, scale=np.exp(meanlog)),
    "beta": lambda a, b: stats.beta(a, b),
    "gamma": lambda shape, scale: stats.gamma(shape, scale=scale),
    "triangular": _triangular,
    "pert": _pert,
}


def frozen_prior(name: str, entry: Mapping):
    """
    Frozen scipy distribution for {"name": <dist>, "args": {...}}.

    Returns None for {"name": "constant", ...}.
    """
    dist = entry.get("name")
    args = dict(entry.get("args", {}))
    if dist == "constant":
        if "value" not in args:
            raise ConfigurationError(f"Constant prior for {name!r} needs a 'value'")
        return None
    if dist not in DISTRIBUTIONS:
        raise ConfigurationError(f"Unknown distribution {dist!r} for {name!r}")
    try:
        return DISTRIBUTIONS[dist](**args)
    except TypeError as err:
        raise ConfigurationError(f"Bad arguments for {dist!r} prior of {name!r}: {args}") from err


def _lookup(priors: Mapping, name: str) -> Mapping:
    try:
        return priors[name]
    except KeyError:
        raise ConfigurationError(f"No prior for parameter {name!r}") from None


# --------------------------------------------------------------------------------------
# Sources
# --------------------------------------------------------------------------------------

def csv_source(samples: Union[str, Path, pd.DataFrame]) -> Source:
    """Source backed by a table of samples: draw i of `name` is row i of column `name`."""
    df = samples if isinstance(samples, pd.DataFrame) else pd.read_csv(samples)

    def source(n: int, name: str) -> np.ndarray:
        if name not in df.columns:
            raise ConfigurationError(f"Missing column {name!r} in samples")
        if len(df) < n:
            raise ConfigurationError(f"Samples hold {len(df)} rows, {n} requested")
        return df[name].to_numpy(dtype=float)[:n].copy()

    return source


def distribution_source(priors: Mapping[str, Mapping], rng: RngLike = None) -> Source:
    """
    Independent draws from the priors.

    Each call draws fresh values from the shared generator, so the draws of a
    batch depend on the order in which names are requested; a fixed pipeline
    with a fixed seed is reproducible.
    """
    rng = np.random.default_rng(rng)

    def source(n: int, name: str) -> np.ndarray:
        entry = _lookup(priors, name)
        dist = frozen_prior(name, entry)
        if dist is None:
            return np.full(n, float(entry["args"]["value"]))
        return np.asarray(dist.rvs(size=n, random_state=rng), dtype=float)

    return source


def lhs_source(priors: Mapping[str, Mapping], n: int, rng: RngLike = None) -> Source:
    """
    Latin hypercube design over every non-constant prior, built once for n draws.

    Draws for a name do not depend on the order in which names are requested.
    """
    rng = np.random.default_rng(rng)
    names = sorted(priors)
    marginals: Dict[str, Optional[object]] = {name: frozen_prior(name, priors[name]) for name in names}
    varying = [name for name in names if marginals[name] is not None]

    columns: Dict[str, np.ndarray] = {}
    if varying:
        design = qmc.LatinHypercube(d=len(varying), rng=rng).random(n)
        for j, name in enumerate(varying):
            columns[name] = np.asarray(marginals[name].ppf(design[:, j]), dtype=float)
    for name in names:
        if marginals[name] is None:
            columns[name] = np.full(n, float(priors[name]["args"]["value"]))

    def source(n_req: int, name: str) -> np.ndarray:
        if name not in columns:
            raise ConfigurationError(f"No prior for parameter {name!r}")
        if n_req > n:
            raise ConfigurationError(f"Design holds {n} draws, {n_req} requested")
        return columns[name][:n_req].copy()

    source.design = columns
    return source
