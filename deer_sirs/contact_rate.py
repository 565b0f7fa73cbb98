"""
Deer-to-deer proximity (contact) rates from population density and habitat cover.

The rate surface is a log-log regression fitted to proximity-logger data:

    log(rate) = b0[habitat] + b1 * log(density)

with density in deer km^-2 and rate in proximity events per deer per day.
Seasonal and attractant (baiting / supplemental feeding) effects enter as
multipliers on the fitted rate.
"""

from __future__ import annotations

from typing import Union

import numpy as np

from .constants import COVER_BREAKS, HABITATS, PROX_B0, PROX_B1
from .errors import ConfigurationError

ArrayLike = Union[float, np.ndarray]


def habitat_class(cover: Union[str, float]) -> str:
    """Return the wooded-cover bin for a label or a cover fraction in [0, 1]."""
    if isinstance(cover, str):
        label = cover.strip().lower()
        if label not in HABITATS:
            raise ConfigurationError(f"Unknown habitat class {cover!r}; expected one of {HABITATS}")
        return label
    cover = float(cover)
    if not 0.0 <= cover <= 1.0:
        raise ConfigurationError(f"Wooded-cover fraction must lie in [0, 1], got {cover}")
    if cover < COVER_BREAKS[0]:
        return "low"
    if cover < COVER_BREAKS[1]:
        return "medium"
    return "high"


def density(abundance: ArrayLike, area: float) -> np.ndarray:
    """Deer per km^2."""
    if not area > 0:
        raise ConfigurationError(f"Area must be positive, got {area}")
    abundance = np.asarray(abundance, dtype=float)
    if np.any(abundance < 0) or np.any(~np.isfinite(abundance)):
        raise ConfigurationError("Abundance must be finite and non-negative")
    return abundance / float(area)


def proximity_rate(
    n: int,
    habitat: Union[str, float],
    abundance: ArrayLike,
    area: float,
    season: float = 1.0,
    attractant: float = 1.0,
) -> np.ndarray:
    """
    Proximity events per deer per day, one value per draw.

    Args:
        n: Number of draws.
        habitat: "low", "medium" or "high" wooded cover, or a cover fraction.
        abundance: Deer in the area; scalar or length-n array.
        area: Area in km^2 (must be > 0).
        season: Seasonal multiplier (e.g. higher during rut / winter yarding).
        attractant: Multiplier for baiting or supplemental feeding.

    Returns:
        np.ndarray of shape (n,), non-negative. Zero abundance gives 0.
    """
    if season < 0 or attractant < 0:
        raise ConfigurationError("Seasonal and attractant multipliers must be non-negative")
    b0 = PROX_B0[habitat_class(habitat)]

    d = density(abundance, area)
    try:
        d = np.broadcast_to(d, (n,)).astype(float)
    except ValueError as err:
        raise ConfigurationError(f"Abundance must be a scalar or have {n} values") from err
    rate = np.zeros(n, dtype=float)
    occupied = d > 0
    rate[occupied] = np.exp(b0 + PROX_B1 * np.log(d[occupied]))
    return rate * season * attractant
