"""
Batch projection driver.

For every draw of a parameter set this module runs
(a) a transient integration over a fixed daily grid (LSODA, adaptive and
stiffness-switching), and
(b) an equilibrium solve: a stiff implicit integration (BDF) that stops
once max |dy/dt| over the six S/I/R compartments drops below a tolerance.

Draws share no mutable state and can run serially or on a process pool.
Per-draw numerical trouble is recorded as flags on the DrawRecord and
logged; it never aborts the batch.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from multiprocessing import Pool
from typing import List, Optional, Sequence, Union

import numpy as np

from .assemble import Params, ParameterSet
from .constants import (
    ATOL,
    CAPTIVE,
    MASS_TOL,
    N_COMPARTMENTS,
    N_STATES,
    NEG_TOL,
    RTOL,
    STEADY_METHOD,
    STEADY_T_MAX,
    STEADY_TOL,
    TRANSIENT_METHOD,
    WILD,
)
from .errors import ConfigurationError
from .model import model_ode, simulate

logger = logging.getLogger(__name__)

SOLVER_ERRORS = (ValueError, ArithmeticError, np.linalg.LinAlgError)


# --------------------------------------------------------------------------------------
# Records
# --------------------------------------------------------------------------------------

def _frozen(arr) -> np.ndarray:
    arr = np.array(arr, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class EquilibriumResult:
    """
    Outcome of the steady-state solve.

        state     : (8,) compartments at the end of the solve
        converged : residual below tolerance and state finite / non-negative
        residual  : max |dy/dt| over the six S/I/R compartments at `state`
        t_final   : integration time reached (days)
        message   : solver message
    """
    state: np.ndarray
    converged: bool
    residual: float
    t_final: float
    message: str = ""


@dataclass(frozen=True)
class DrawRecord:
    """One Monte-Carlo draw: inputs, transient trajectory and equilibrium."""
    run_id: int
    context: str
    initial: np.ndarray
    parameters: Params
    times: np.ndarray
    trajectory: np.ndarray            # shape (len(times), 8); NaN-padded if the solver stopped early
    equilibrium: EquilibriumResult
    transient_success: bool = True
    transient_message: str = ""

    @property
    def converged(self) -> bool:
        return self.equilibrium.converged


# --------------------------------------------------------------------------------------
# Validation helpers
# --------------------------------------------------------------------------------------

def validate_time_grid(t_eval: Sequence[float]) -> np.ndarray:
    """Return the grid as a float array; it must be non-negative and strictly increasing."""
    t_eval = np.asarray(t_eval, dtype=float)
    if t_eval.ndim != 1 or t_eval.size < 2:
        raise ConfigurationError("Time grid must be 1-D with at least two points")
    if np.any(~np.isfinite(t_eval)) or t_eval[0] < 0:
        raise ConfigurationError("Time grid must be finite and non-negative")
    if np.any(np.diff(t_eval) <= 0):
        raise ConfigurationError("Time grid must be strictly increasing")
    return t_eval


def _initial_matrix(n: int, y0) -> np.ndarray:
    y0 = np.asarray(y0, dtype=float)
    if y0.shape == (N_COMPARTMENTS,):
        y0 = np.tile(y0, (n, 1))
    if y0.shape != (n, N_COMPARTMENTS):
        raise ConfigurationError(
            f"Initial compartments must have shape ({N_COMPARTMENTS},) or ({n}, {N_COMPARTMENTS}), got {y0.shape}"
        )
    if np.any(~np.isfinite(y0)) or np.any(y0 < 0):
        raise ConfigurationError("Initial compartments must be finite and non-negative")
    return y0


def _draw_params(n: int, params: Union[Params, ParameterSet]) -> List[Params]:
    if isinstance(params, Params):
        return [params] * n
    if not isinstance(params, ParameterSet):
        raise ConfigurationError("params must be a ParameterSet (see assemble.alt_params) or Params")
    if params.n_draws == 1:
        return [params.draw(0)] * n
    if params.n_draws != n:
        raise ConfigurationError(f"Parameter set has {params.n_draws} draws, expected {n}")
    return list(params.draws())


# --------------------------------------------------------------------------------------
# Single-draw solves
# --------------------------------------------------------------------------------------

def run_one(
    p: Params,
    y0: np.ndarray,
    t_eval: np.ndarray,
    method: str = TRANSIENT_METHOD,
    rtol: float = RTOL,
    atol: float = ATOL,
):
    """Integrate once over t_eval; returns SciPy OdeResult."""
    return simulate(
        y0,
        t_span=(float(t_eval[0]), float(t_eval[-1])),
        params=p,
        t_eval=t_eval,
        method=method,
        rtol=rtol,
        atol=atol,
    )


def steady_residual(p: Params, y: np.ndarray) -> float:
    """max |dy/dt| over the S/I/R compartments (the accumulators never settle)."""
    return float(np.max(np.abs(model_ode(0.0, y, p)[:N_STATES])))


def run_steady(
    p: Params,
    y0: np.ndarray,
    t_max: float = STEADY_T_MAX,
    stol: float = STEADY_TOL,
    method: str = STEADY_METHOD,
    rtol: float = RTOL,
    atol: float = ATOL,
) -> EquilibriumResult:
    """
    Integrate towards a fixed point with a stiff implicit solver.

    Stops at the first time the residual falls to stol / 2 (terminal event),
    or at t_max. `t_max` is the caller's cap on work for slowly converging draws.
    """
    if not t_max > 0 or not stol > 0:
        raise ConfigurationError("t_max and stol must be positive")

    def steady_event(t, y):
        return steady_residual(p, y) - 0.5 * stol

    steady_event.terminal = True
    steady_event.direction = -1

    sol = simulate(y0, (0.0, float(t_max)), p, method=method, rtol=rtol, atol=atol, events=steady_event)
    state = sol.y[:, -1]
    residual = steady_residual(p, state)
    converged = bool(
        sol.status != -1
        and np.all(np.isfinite(state))
        and np.all(state >= -NEG_TOL)
        and residual <= stol
    )
    return EquilibriumResult(
        state=_frozen(state),
        converged=converged,
        residual=residual,
        t_final=float(sol.t[-1]),
        message=str(sol.message),
    )


def _mass_drift(y0: np.ndarray, trajectory: np.ndarray) -> float:
    drift = 0.0
    for part in (WILD, CAPTIVE):
        totals = np.nansum(trajectory[:, part], axis=1)
        drift = max(drift, float(np.nanmax(np.abs(totals - y0[part].sum()))))
    return drift


def _run_draw(
    run_id: int,
    context: str,
    p: Params,
    y0: np.ndarray,
    t_eval: np.ndarray,
    rtol: float,
    atol: float,
    steady_t_max: float,
    steady_tol: float,
) -> DrawRecord:
    trajectory = np.full((t_eval.size, N_COMPARTMENTS), np.nan)
    try:
        sol = run_one(p, y0, t_eval, rtol=rtol, atol=atol)
        trajectory[: sol.t.size] = sol.y.T
        transient_success, transient_message = bool(sol.success), str(sol.message)
    except SOLVER_ERRORS as err:
        transient_success, transient_message = False, f"{type(err).__name__}: {err}"

    if transient_success:
        if not np.all(np.isfinite(trajectory)):
            transient_success, transient_message = False, "Non-finite compartment values"
        elif np.min(trajectory) < -MASS_TOL:
            transient_success, transient_message = False, f"Negative compartment value {np.min(trajectory):.3g}"
        elif np.min(trajectory) < -NEG_TOL:
            logger.debug("Draw %d: compartment undershoot %.3g", run_id, np.min(trajectory))
    if not transient_success:
        logger.warning("Draw %d (%s): transient solve failed: %s", run_id, context, transient_message)
    elif p.boost_wild == 0 and p.boost_captive == 0:
        drift = _mass_drift(y0, trajectory)
        if drift > MASS_TOL:
            logger.warning("Draw %d (%s): S+I+R drifted by %.3g", run_id, context, drift)

    try:
        equilibrium = run_steady(p, y0, t_max=steady_t_max, stol=steady_tol, rtol=rtol, atol=atol)
    except SOLVER_ERRORS as err:
        equilibrium = EquilibriumResult(
            state=_frozen(np.full(N_COMPARTMENTS, np.nan)),
            converged=False,
            residual=float("nan"),
            t_final=0.0,
            message=f"{type(err).__name__}: {err}",
        )
    if not equilibrium.converged:
        logger.warning(
            "Draw %d (%s): equilibrium not reached (residual %.3g at t=%.0f): %s",
            run_id, context, equilibrium.residual, equilibrium.t_final, equilibrium.message,
        )

    return DrawRecord(
        run_id=run_id,
        context=context,
        initial=_frozen(y0),
        parameters=p,
        times=_frozen(t_eval),
        trajectory=_frozen(trajectory),
        equilibrium=equilibrium,
        transient_success=transient_success,
        transient_message=transient_message,
    )


# --------------------------------------------------------------------------------------
# Batch
# --------------------------------------------------------------------------------------

def run_batch(
    n: int,
    y0,
    params: Union[ParameterSet, Params],
    t_eval: Sequence[float],
    context: str,
    n_workers: Optional[int] = 1,
    rtol: float = RTOL,
    atol: float = ATOL,
    steady_t_max: float = STEADY_T_MAX,
    steady_tol: float = STEADY_TOL,
) -> List[DrawRecord]:
    """
    Run the transient and equilibrium solves for n independent draws.

    Args:
        n: Number of draws.
        y0: Initial compartments, shape (8,) or (n, 8).
        params: ParameterSet with 1 or n draws (or a single Params).
        t_eval: Non-negative, strictly increasing output times (days).
        context: Label stored on every record.
        n_workers: 1 runs serially; >1 (or None for all cores) uses a process pool.
        rtol, atol: Solver tolerances for both solves.
        steady_t_max, steady_tol: Cap and tolerance of the equilibrium solve.

    Returns:
        List of DrawRecord in draw order (run_id 1..n).
    """
    if int(n) < 1:
        raise ConfigurationError(f"Number of draws must be positive, got {n}")
    n = int(n)
    t_eval = validate_time_grid(t_eval)
    y0 = _initial_matrix(n, y0)
    draws = _draw_params(n, params)
    context = str(context)

    tasks = [
        (i + 1, context, draws[i], y0[i].copy(), t_eval, rtol, atol, steady_t_max, steady_tol)
        for i in range(n)
    ]

    logger.info("Running %d draws for context %r", n, context)
    t0 = time.time()
    if n_workers == 1 or n == 1:
        records = [_run_draw(*task) for task in tasks]
    else:
        with Pool(n_workers) as pool:
            records = pool.starmap(_run_draw, tasks)
    elapsed = time.time() - t0

    failed = sum(not r.transient_success for r in records)
    unconverged = sum(not r.converged for r in records)
    logger.info(
        "Context %r: %d draws in %.2fs (%d transient failures, %d unconverged equilibria)",
        context, n, elapsed, failed, unconverged,
    )
    return records
