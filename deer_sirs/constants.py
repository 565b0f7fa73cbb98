"""
MODEL CONSTANTS
===============

Fixed values used throughout the package:

- Compartment order of the state vector
- Proximity-rate regression coefficients (contact-rate model)
- Aerosol and direct-contact dose-response constants
- Solver settings and outcome thresholds

Values are imported by contact_rate, infection_prob, solve and outcomes.
Per-run overrides go through function arguments (or the CLI flags), never by
editing this module at runtime.
"""

import numpy as np

# --------------------------------------------------------------------------------------
# State vector
# --------------------------------------------------------------------------------------

COMPARTMENTS = (
    "S_wild", "I_wild", "R_wild",
    "S_captive", "I_captive", "R_captive",
    "I_wild_cum", "I_captive_cum",
)
IDX = {name: i for i, name in enumerate(COMPARTMENTS)}
N_STATES = 6          # S, I, R for both sub-populations
N_COMPARTMENTS = 8    # plus the two cumulative-incidence accumulators

WILD = slice(0, 3)
CAPTIVE = slice(3, 6)

# --------------------------------------------------------------------------------------
# Contact-rate model: log(rate) = b0[habitat] + b1 * log(density)
# density in deer km^-2, rate in proximity events deer^-1 day^-1
# --------------------------------------------------------------------------------------

HABITATS = ("low", "medium", "high")       # wooded-cover bins
PROX_B0 = {"low": -0.35, "medium": -0.75, "high": -1.15}
PROX_B1 = 0.62
COVER_BREAKS = (1 / 3, 2 / 3)              # fraction wooded -> low / medium / high

# --------------------------------------------------------------------------------------
# Aerosol (Wells-Riley steady state) and direct-contact dose-response
# --------------------------------------------------------------------------------------

DEER_BREATHING_RATE = 1.3      # m^3 h^-1, used for both exhalation and inhalation
EXHALATION_RATE = DEER_BREATHING_RATE
INHALATION_RATE = DEER_BREATHING_RATE
HUMAN_EMISSION = 0.42          # resting human exhalation (0.54 m^3 h^-1) relative to deer
EXPOSURE_VOLUME = 10.0         # m^3, near-field air shared during a proximity event
AER_OUTDOOR = 20.0             # air changes h^-1, unconfined baseline
AER_BARN = 4.0                 # air changes h^-1, naturally ventilated barn
AEROSOL_K = 300.0              # genome copies; dose giving p = 1 - 1/e
DIRECT_K = 1.0e4               # genome copies, fluid route
SALIVA_VOLUME = 0.1            # mL transferred per direct contact

# --------------------------------------------------------------------------------------
# Solver settings
# --------------------------------------------------------------------------------------

TRANSIENT_METHOD = "LSODA"
STEADY_METHOD = "BDF"
RTOL = 1e-8
ATOL = 1e-10
STEADY_T_MAX = 1e5             # days; cap on the equilibrium integration
STEADY_TOL = 1e-8              # max |dy/dt| accepted as steady
MASS_TOL = 1e-6                # allowed drift of S + I + R per sub-population
NEG_TOL = 1e-9                 # undershoot below zero tolerated as solver noise

# --------------------------------------------------------------------------------------
# Outcomes
# --------------------------------------------------------------------------------------

PERSISTENCE_THRESHOLD = 0.001
DEFAULT_DAYS = 120
T_EVAL = np.arange(0, DEFAULT_DAYS + 1, dtype=float)   # daily output
