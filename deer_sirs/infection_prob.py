"""
Per-event infection probabilities.

Two dose-response models, both of the exponential form p = 1 - exp(-dose / k):

- aerosol_prob: Wells-Riley steady-state dose from an infectious source sharing a
  near-field air volume for `duration` hours, diluted by ventilation.
- direct_contact_prob: instantaneous transfer of a fixed fluid volume (saliva).
"""

from __future__ import annotations

from typing import Union

import numpy as np

from .constants import (
    AER_OUTDOOR,
    AEROSOL_K,
    DIRECT_K,
    EXHALATION_RATE,
    EXPOSURE_VOLUME,
    INHALATION_RATE,
    SALIVA_VOLUME,
)
from .errors import ConfigurationError

ArrayLike = Union[float, np.ndarray]


def _non_negative(name: str, value: ArrayLike) -> np.ndarray:
    arr = np.asarray(value, dtype=float)
    if np.any(np.isnan(arr)) or np.any(arr < 0):
        raise ConfigurationError(f"{name} must be non-negative")
    return arr


def _dose_response(dose: np.ndarray, k: np.ndarray) -> np.ndarray:
    return np.clip(-np.expm1(-dose / k), 0.0, 1.0)


def aerosol_prob(
    viral_load: ArrayLike,
    duration: ArrayLike,
    k: ArrayLike = AEROSOL_K,
    emission: ArrayLike = 1.0,
    air_exchange: ArrayLike = AER_OUTDOOR,
) -> np.ndarray:
    """
    Probability that one proximity event transmits by aerosol.

    dose = emission * viral_load * EXHALATION_RATE * INHALATION_RATE * duration
           / (air_exchange * EXPOSURE_VOLUME)

    Args:
        viral_load: Genome copies per m^3 of exhaled breath from the source.
        duration: Contact duration (h).
        k: Dose-response coefficient (genome copies).
        emission: Source exhalation relative to a deer; 1 for deer, HUMAN_EMISSION for people.
        air_exchange: Air changes per hour; lower for enclosed facilities.

    Returns:
        np.ndarray of probabilities in [0, 1]; exactly 0 wherever duration == 0.
    """
    viral_load = _non_negative("viral_load", viral_load)
    duration = _non_negative("duration", duration)
    emission = _non_negative("emission", emission)
    k = _non_negative("k", k)
    air_exchange = _non_negative("air_exchange", air_exchange)

    viral_load, duration, k, emission, air_exchange = np.broadcast_arrays(
        viral_load, duration, k, emission, air_exchange
    )
    active = duration > 0
    if np.any(air_exchange[active] <= 0):
        raise ConfigurationError("air_exchange must be positive")
    if np.any(k[active] <= 0):
        raise ConfigurationError("Dose-response coefficient k must be positive")

    p = np.zeros(duration.shape, dtype=float)
    dose = (
        emission[active] * viral_load[active] * EXHALATION_RATE * INHALATION_RATE * duration[active]
        / (air_exchange[active] * EXPOSURE_VOLUME)
    )
    p[active] = _dose_response(dose, k[active])
    return p


def direct_contact_prob(
    viral_load: ArrayLike,
    k: ArrayLike = DIRECT_K,
    volume: float = SALIVA_VOLUME,
) -> np.ndarray:
    """
    Probability that one direct (nose-to-nose / fluid) contact transmits.

    Args:
        viral_load: Genome copies per mL of saliva / nasal fluid.
        k: Dose-response coefficient (genome copies).
        volume: Fluid transferred per contact (mL).
    """
    viral_load = _non_negative("viral_load", viral_load)
    k = _non_negative("k", k)
    if volume < 0:
        raise ConfigurationError("volume must be non-negative")
    viral_load, k = np.broadcast_arrays(viral_load, k)
    if np.any(k <= 0):
        raise ConfigurationError("Dose-response coefficient k must be positive")
    return _dose_response(viral_load * float(volume), k)
