# tvmcalc/finance/tvm.py
"""
Time value of money for a level, end-of-period annuity.

The five quantities are tied by one equation:

    pv*(1+ir)^n + pmt*((1+ir)^n - 1)/ir + fv = 0      (ir != 0)
    pv + pmt*n + fv = 0                              (ir == 0)

Cash paid out is negative, cash received is positive. pv, pmt, fv and n have
closed forms; ir is found with the Newton solver.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, Optional, Tuple

from ..errors import DomainError, InvalidArgument
from ..solver import SolverConfig, root

# Canonical argument order; tvm() takes these minus the one being solved for.
TVM_VARIABLES: Tuple[str, ...] = ("n", "ir", "pv", "pmt", "fv")


def _growth(ir: float, n: float) -> float:
    if ir <= -1.0:
        raise DomainError(f"interest rate must be > -100%, got {ir}")
    try:
        return (1.0 + ir) ** n
    except OverflowError:
        raise DomainError(f"(1+{ir})^{n} is out of floating-point range") from None


def present_value(n: float, ir: float, pmt: float, fv: float) -> float:
    if ir == 0:
        return -(pmt * n + fv)
    discount = _growth(ir, n)
    return -pmt / ir * (1.0 - 1.0 / discount) - fv / discount


def payment(n: float, ir: float, pv: float, fv: float) -> float:
    if n == 0:
        raise DomainError("payment is undefined over zero periods")
    if ir == 0:
        return -(pv + fv) / n
    discount = _growth(ir, n)
    return (-fv - pv * discount) * ir / (discount - 1.0)


def future_value(n: float, ir: float, pv: float, pmt: float) -> float:
    if ir == 0:
        return -(pv + pmt * n)
    discount = _growth(ir, n)
    return -pmt / ir * (discount - 1.0) - pv * discount


def periods(ir: float, pv: float, pmt: float, fv: float) -> float:
    """Number of periods, n = ln((pmt/ir - fv)/(pmt/ir + pv)) / ln(1+ir)."""
    if ir == 0:
        if pmt == 0:
            raise DomainError("with a zero rate and zero payment the period count is undefined")
        return -(pv + fv) / pmt
    if ir <= -1.0:
        raise DomainError(f"ln(1+ir) needs ir > -100%, got {ir}")
    pmt_r = pmt / ir
    denominator = pmt_r + pv
    if denominator == 0:
        raise DomainError("pmt/ir + pv is zero; the period count is undefined")
    ratio = (pmt_r - fv) / denominator
    if ratio <= 0:
        raise DomainError(f"logarithm argument must be positive, got {ratio}")
    return math.log(ratio) / math.log1p(ir)


def _rate_equation(n: float, pv: float, pmt: float, fv: float) -> Tuple[Callable[[float], float], Callable[[float], float]]:
    def value(r: float) -> float:
        if r == 0:
            return pv + pmt * n + fv
        growth = _growth(r, n)
        return pv * growth + pmt / r * (growth - 1.0) + fv

    def derivative(r: float) -> float:
        if r == 0:
            return pv * n + pmt * n * (n - 1.0) / 2.0
        growth = _growth(r, n)
        growth_prev = growth / (1.0 + r)
        return pv * n * growth_prev + pmt * (n * r * growth_prev - growth + 1.0) / r ** 2

    return value, derivative


def rate(
    n: float,
    pv: float,
    pmt: float,
    fv: float,
    *,
    guess: Optional[float] = None,
    config: Optional[SolverConfig] = None,
) -> float:
    """
    Periodic interest rate solving the TVM equation.

    Uses Newton with the exact derivative, starting from ``guess`` (or the
    configured initial guess). NonConvergence / SingularDerivative propagate.
    """
    value, derivative = _rate_equation(float(n), float(pv), float(pmt), float(fv))
    return root(value, derivative, guess, config=config, lower_bound=-1.0)


_CLOSED_FORMS: Dict[str, Callable[..., float]] = {
    "n": periods,
    "pv": present_value,
    "pmt": payment,
    "fv": future_value,
}


def tvm(find: str, *args: float, config: Optional[SolverConfig] = None) -> float:
    """
    Solve the TVM equation for ``find``.

    ``args`` are the other four quantities in the order n, ir, pv, pmt, fv
    with ``find`` left out, e.g. ``tvm("pv", 10, 0.05, 0, 1000)``.
    """
    if find not in TVM_VARIABLES:
        raise InvalidArgument(f"unknown TVM variable {find!r}; expected one of {TVM_VARIABLES}")
    if len(args) != 4:
        others = [v for v in TVM_VARIABLES if v != find]
        raise InvalidArgument(f"tvm({find!r}, ...) takes 4 values ({', '.join(others)}), got {len(args)}")
    values = [float(a) for a in args]
    if find == "ir":
        return rate(*values, config=config)
    return _CLOSED_FORMS[find](*values)


__all__ = [
    "TVM_VARIABLES",
    "tvm",
    "present_value",
    "payment",
    "future_value",
    "periods",
    "rate",
]
