# tvmcalc/solver.py
"""Root-finding utilities (Newton-Raphson, finite-difference Newton, secant)."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import DomainError, NonConvergence, SingularDerivative

logger = logging.getLogger(__name__)

Func = Callable[[float], float]

_MAX_HALVINGS = 60


@dataclass(frozen=True)
class SolverConfig:
    """Iteration policy shared by every iterative solve."""

    tolerance: float = 1e-7
    max_iterations: int = 100
    initial_guess: float = 0.1
    derivative_step: float = 1e-6
    min_derivative: float = 1e-12


DEFAULT_CONFIG = SolverConfig()


@dataclass
class RootResult:
    root: float
    iterations: int
    converged: bool
    method: str


def _evaluate(func: Func, x: float, iteration: int) -> float:
    try:
        value = float(func(x))
    except OverflowError as e:
        raise NonConvergence(
            f"overflow evaluating at x={x!r}", last_estimate=x, iterations=iteration
        ) from e
    except DomainError as e:
        raise NonConvergence(
            f"iterate left the domain at x={x!r}: {e}", last_estimate=x, iterations=iteration
        ) from e
    if not math.isfinite(value):
        raise NonConvergence(
            f"value is not finite at x={x!r}",
            last_estimate=x,
            iterations=iteration,
        )
    return value


def _central_difference(func: Func, step: float) -> Func:
    def deriv(x: float) -> float:
        return (func(x + step) - func(x - step)) / (2.0 * step)

    return deriv


def _damp_into_domain(x: float, step: float, lower_bound: float, iteration: int) -> float:
    x_new = x - step
    for _ in range(_MAX_HALVINGS):
        if x_new > lower_bound:
            return x_new
        step /= 2.0
        x_new = x - step
        logger.debug("Newton iter %s: step halved to %s to stay above %s", iteration, step, lower_bound)
    raise NonConvergence(
        f"Newton step could not be kept above {lower_bound} from x={x!r}",
        last_estimate=x,
        iterations=iteration,
    )


def newton(
    f: Func,
    f_derivative: Optional[Func] = None,
    initial_guess: Optional[float] = None,
    *,
    config: Optional[SolverConfig] = None,
    lower_bound: Optional[float] = None,
) -> RootResult:
    """Newton-Raphson root finder.

    Parameters
    ----------
    f:
        Scalar function whose root is wanted.
    f_derivative:
        Exact derivative of ``f``. When omitted, a central finite difference
        with ``config.derivative_step`` is used instead.
    initial_guess:
        Starting point; ``config.initial_guess`` when omitted.
    config:
        Tolerance, iteration cap and derivative guard.
    lower_bound:
        Exclusive lower edge of the domain of ``f``. A step that lands on or
        below it is halved until the iterate is back inside.

    Raises
    ------
    SingularDerivative
        If ``|f'(x)|`` drops below ``config.min_derivative``.
    NonConvergence
        If the iteration cap is reached or an iterate is not finite.
    """
    cfg = config or DEFAULT_CONFIG
    x = float(cfg.initial_guess if initial_guess is None else initial_guess)
    method = "newton"
    deriv = f_derivative
    if deriv is None:
        deriv = _central_difference(f, cfg.derivative_step)
        method = "newton-fd"

    fx = _evaluate(f, x, 0)
    if abs(fx) < cfg.tolerance:
        return RootResult(x, 0, True, method)

    for iteration in range(1, cfg.max_iterations + 1):
        dfx = _evaluate(deriv, x, iteration)
        logger.debug("Newton iter %s: x=%s value=%s deriv=%s", iteration, x, fx, dfx)
        if abs(dfx) < cfg.min_derivative:
            raise SingularDerivative(
                f"derivative vanished at x={x!r} (|f'(x)|={abs(dfx):.3e})",
                last_estimate=x,
                iterations=iteration,
            )
        step = fx / dfx
        x_new = x - step
        damped = lower_bound is not None and x_new <= lower_bound
        if damped:
            x_new = _damp_into_domain(x, step, lower_bound, iteration)
        if not math.isfinite(x_new):
            raise NonConvergence(
                "Newton step produced a non-finite iterate", last_estimate=x, iterations=iteration
            )
        fx_new = _evaluate(f, x_new, iteration)
        # a halved step says nothing about closeness to the root
        if abs(fx_new) < cfg.tolerance or (not damped and abs(x_new - x) < cfg.tolerance):
            return RootResult(x_new, iteration, True, method)
        x, fx = x_new, fx_new

    raise NonConvergence(
        f"Newton failed to converge in {cfg.max_iterations} iterations (last x={x!r})",
        last_estimate=x,
        iterations=cfg.max_iterations,
    )


def secant(
    f: Func,
    x0: float,
    x1: Optional[float] = None,
    *,
    config: Optional[SolverConfig] = None,
) -> RootResult:
    """Secant iteration from two guesses (``x1`` defaults to ``x0 + 0.1``)."""
    cfg = config or DEFAULT_CONFIG
    x_prev = float(x0)
    x = float(x_prev + 0.1 if x1 is None else x1)

    f_prev = _evaluate(f, x_prev, 0)
    if abs(f_prev) < cfg.tolerance:
        return RootResult(x_prev, 0, True, "secant")
    fx = _evaluate(f, x, 0)
    if abs(fx) < cfg.tolerance:
        return RootResult(x, 0, True, "secant")

    for iteration in range(1, cfg.max_iterations + 1):
        logger.debug("Secant iter %s: x=%s value=%s", iteration, x, fx)
        if fx == f_prev:
            raise SingularDerivative(
                f"secant slope vanished between x={x_prev!r} and x={x!r}",
                last_estimate=x,
                iterations=iteration,
            )
        x_new = x - fx * (x - x_prev) / (fx - f_prev)
        if not math.isfinite(x_new):
            raise NonConvergence(
                "secant step produced a non-finite iterate", last_estimate=x, iterations=iteration
            )
        f_new = _evaluate(f, x_new, iteration)
        if abs(x_new - x) < cfg.tolerance or abs(f_new) < cfg.tolerance:
            return RootResult(x_new, iteration, True, "secant")
        x_prev, f_prev, x, fx = x, fx, x_new, f_new

    raise NonConvergence(
        f"secant failed to converge in {cfg.max_iterations} iterations (last x={x!r})",
        last_estimate=x,
        iterations=cfg.max_iterations,
    )


def root(
    f: Func,
    f_derivative: Optional[Func] = None,
    initial_guess: Optional[float] = None,
    *,
    config: Optional[SolverConfig] = None,
    lower_bound: Optional[float] = None,
) -> float:
    """Return ``x`` with ``f(x) ~= 0``; see :func:`newton` for the policy."""
    return newton(f, f_derivative, initial_guess, config=config, lower_bound=lower_bound).root


__all__ = ["SolverConfig", "DEFAULT_CONFIG", "RootResult", "newton", "secant", "root"]
