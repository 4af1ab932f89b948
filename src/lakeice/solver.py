"""Root finding for the subfreezing surface temperature.

Brackets the root of the energy residual below an upper bound by stepping
the lower bound down, then refines it with Brent's method. Failure is
reported with a sentinel temperature rather than an exception, so the melt
step can attach its own diagnostic snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from scipy.optimize import brentq

from .constants import SOLVER_FAILURE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverConfig:
    """Root solver settings.

    Attributes:
        t_step: Amount the lower bound is lowered per bracketing attempt [C].
        max_tries: Maximum number of bracketing attempts.
        max_iter: Maximum number of Brent iterations.
        t_eps: Absolute tolerance on the root [C].
    """

    t_step: float = 10.0
    max_tries: int = 5
    max_iter: int = 1000
    t_eps: float = 1.0e-5


DEFAULT_SOLVER_CONFIG: SolverConfig = SolverConfig()

# Signature shared by all residual functions: (temperature, params) -> (residual, fluxes)
ResidualFunction = Callable[[float, Any], tuple[float, Any]]
RootSolver = Callable[[float, float, ResidualFunction, Any, "SolverConfig"], tuple[float, str]]


def root_brent(
    lower: float,
    upper: float,
    func: ResidualFunction,
    params: Any,
    config: SolverConfig = DEFAULT_SOLVER_CONFIG,
) -> tuple[float, str]:
    """Find the temperature at which func changes sign.

    Args:
        lower: Initial lower bound [C].
        upper: Upper bound [C].
        func: Residual function returning (residual, fluxes).
        params: Parameters passed unchanged to func.
        config: Solver settings.

    Returns:
        Tuple of (root, message):
        - root: Converged temperature [C], or SOLVER_FAILURE
        - message: Empty on success, otherwise the reason for failure
    """

    def residual(t: float) -> float:
        return func(t, params)[0]

    a = lower
    fa = residual(a)
    fb = residual(upper)

    tries = 0
    while fa * fb >= 0.0 and tries < config.max_tries:
        a -= config.t_step
        fa = residual(a)
        tries += 1
        logger.debug("Lowered bracket to %.2f (attempt %d), f(a)=%.4f", a, tries, fa)

    if not fa * fb < 0.0:
        msg = (
            f"Lower and upper bounds do not bracket a root: "
            f"f({a:.4f})={fa:.4f}, f({upper:.4f})={fb:.4f} after {tries} attempts"
        )
        return SOLVER_FAILURE, msg

    try:
        root, result = brentq(
            residual,
            a,
            upper,
            xtol=config.t_eps,
            maxiter=config.max_iter,
            full_output=True,
            disp=False,
        )
    except (ValueError, RuntimeError) as exc:
        return SOLVER_FAILURE, f"Brent iteration failed: {exc}"

    if not result.converged:
        msg = f"Brent iteration did not converge after {result.iterations} iterations ({result.flag})"
        return SOLVER_FAILURE, msg

    return float(root), ""
