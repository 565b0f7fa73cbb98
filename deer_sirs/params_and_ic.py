"""

Prior distributions (`priors`), initial conditions (`IC`) and operational
context presets (`CONTEXTS`) for the deer SIRS model.

Priors stand in for the expert-elicitation draws; a table of elicited samples
with the same column names can be used instead (see elicitation.csv_source).
This file is intentionally simple (plain dicts) so other modules can
`import priors, IC, CONTEXTS` without extra types.
"""

import numpy as np

from .constants import AER_BARN, AER_OUTDOOR

# ---------------------------
# Priors (per day unless noted)
# ---------------------------
priors = {
    # Disease natural history
    'infectious_days':   {"name": "pert", "args": {"low": 4, "mode": 6, "high": 10}},       # 1 / gamma
    'immunity_days':     {"name": "pert", "args": {"low": 60, "mode": 180, "high": 365}},   # 1 / omega

    # Shedding
    'viral_load_deer':   {"name": "lognormal", "args": {"meanlog": np.log(5e3), "sdlog": 1.0}},  # copies m^-3 exhaled
    'viral_load_human':  {"name": "lognormal", "args": {"meanlog": np.log(2e3), "sdlog": 1.0}},  # copies m^-3 exhaled
    'viral_load_saliva': {"name": "lognormal", "args": {"meanlog": np.log(1e4), "sdlog": 1.2}},  # copies mL^-1

    # Dose-response
    'dose_response_k':       {"name": "uniform", "args": {"low": 200, "high": 600}},    # copies, aerosol
    'dose_response_k_fluid': {"name": "constant", "args": {"value": 1e4}},              # copies, direct contact

    # Contact durations (h)
    'contact_hours_deer':  {"name": "pert", "args": {"low": 0.05, "mode": 0.25, "high": 1.0}},
    'contact_hours_human': {"name": "pert", "args": {"low": 0.05, "mode": 0.5, "high": 2.0}},

    # People
    'human_prevalence':       {"name": "beta", "args": {"a": 2, "b": 60}},
    'human_contacts_wild':    {"name": "pert", "args": {"low": 0.0, "mode": 0.02, "high": 0.1}},   # deer^-1 day^-1
    'human_contacts_captive': {"name": "pert", "args": {"low": 0.1, "mode": 0.5, "high": 2.0}},    # deer^-1 day^-1

    # Fenceline contacts per captive deer
    'fenceline_rate': {"name": "pert", "args": {"low": 0.0, "mode": 0.1, "high": 0.5}},

    # Abundance (deer); contexts override these
    'abundance_wild':    {"name": "uniform", "args": {"low": 50, "high": 200}},
    'abundance_captive': {"name": "pert", "args": {"low": 50, "mode": 150, "high": 400}},
}

# ---------------------------
# Initial conditions (proportions of each sub-population), state order used by model_ode:
# [S_wild, I_wild, R_wild, S_captive, I_captive, R_captive, I_wild_cum, I_captive_cum]
# ---------------------------
IC = {
    "captive": {
        "S_captive": {"name": "constant", "args": {"value": 0.999}},   # Susceptible captive deer
        "I_captive": {"name": "constant", "args": {"value": 0.001}},   # Infectious captive deer
    },
    "wild": {
        "S_wild": {"name": "constant", "args": {"value": 0.999}},      # Susceptible wild deer
        "I_wild": {"name": "constant", "args": {"value": 0.001}},      # Infectious wild deer
    },
    "both": {
        "S_wild":    {"name": "constant", "args": {"value": 1.0}},     # Wild deer outside the fence
        "S_captive": {"name": "constant", "args": {"value": 0.999}},
        "I_captive": {"name": "constant", "args": {"value": 0.001}},
    },
}

# ---------------------------
# Operational contexts
#   area          : km^2 per sub-population
#   air_exchange  : air changes h^-1 where the aerosol contact happens
#   attractant    : multiplier on proximity rates (baiting / feeding)
#   introduction  : "continuous" human forcing, or "single" spillover (seed only, I_human = 0)
# ---------------------------
CONTEXTS = {
    "Outdoor ranch": {
        "populations": ("wild", "captive"),
        "habitat": "medium",
        "area": {"wild": 10.0, "captive": 2.0},
        "air_exchange": {"wild": AER_OUTDOOR, "captive": AER_OUTDOOR},
        "attractant": {"wild": 1.0, "captive": 1.5},
        "season": 1.0,
        "fenceline": True,
        "introduction": "continuous",
        "ic": "both",
        "priors": {
            'abundance_wild': {"name": "uniform", "args": {"low": 30, "high": 100}},
        },
    },
    "Intensive facility": {
        "populations": ("captive",),
        "habitat": "low",
        "area": {"captive": 0.05},
        "air_exchange": {"captive": AER_BARN},
        "attractant": {"captive": 1.0},
        "season": 1.0,
        "fenceline": False,
        "introduction": "continuous",
        "ic": "captive",
        "priors": {
            'abundance_captive': {"name": "pert", "args": {"low": 50, "mode": 200, "high": 500}},
        },
    },
    "Rural wild": {
        "populations": ("wild",),
        "habitat": "high",
        "area": {"wild": 10.0},
        "air_exchange": {"wild": AER_OUTDOOR},
        "attractant": {"wild": 1.0},
        "season": 1.0,
        "fenceline": False,
        "introduction": "single",
        "ic": "wild",
        "priors": {},
    },
    "Suburban wild": {
        "populations": ("wild",),
        "habitat": "low",
        "area": {"wild": 10.0},
        "air_exchange": {"wild": AER_OUTDOOR},
        "attractant": {"wild": 2.0},
        "season": 1.0,
        "fenceline": False,
        "introduction": "continuous",
        "ic": "wild",
        "priors": {
            'abundance_wild': {"name": "uniform", "args": {"low": 200, "high": 500}},
        },
    },
}
