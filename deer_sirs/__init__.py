"""
deer_sirs: bottom-up transmission rates and a two-population SIRS projection
engine for SARS-CoV-2 in wild and captive white-tailed deer.

Convention is to use "import deer_sirs as ds", e.g. ds.alt_params(...),
ds.run_batch(...), ds.summarize(...).
"""

__version__ = "0.1.0"

from .errors import ConfigurationError, NumericalWarning
from .constants import COMPARTMENTS, IDX, PERSISTENCE_THRESHOLD
from .contact_rate import density, habitat_class, proximity_rate
from .infection_prob import aerosol_prob, direct_contact_prob
from .assemble import Params, ParameterSet, alt_params, assemble_params
from .model import model_ode, results_to_dataframe, simulate
from .solve import DrawRecord, EquilibriumResult, run_batch, run_one, run_steady
from .initial_conditions import build_y0, make_initial_conditions
from .outcomes import (
    cumulative_incidence,
    foi,
    persistence,
    prevalence,
    r0,
    summarize,
    trajectories_to_dataframe,
)
from .elicitation import csv_source, distribution_source, lhs_source
from .scenarios import context_params, context_priors, run_context
