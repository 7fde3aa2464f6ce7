# tvmcalc/finance/irr.py
"""
NPV / IRR family over a compressed cash-flow stream.

A stream is ``cf0`` at t=0 followed by (amount, frequency) pairs; pair i is a
level annuity of ``amounts[i]`` over ``frequencies[i]`` periods, starting at
the cumulative offset of the pairs before it.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from ..errors import DomainError
from ..solver import SolverConfig, root
from .cashflow import CashFlowStream


def _check_rate(rate: float, name: str = "discount rate") -> float:
    r = float(rate)
    if r <= -1.0:
        raise DomainError(f"{name} must be > -100%, got {r}")
    return r


def _discount(rate: float, periods: float) -> float:
    try:
        return (1.0 + rate) ** -periods
    except OverflowError:
        raise DomainError(f"(1+{rate})^-{periods} is out of floating-point range") from None


# ---------- NPV ----------
def _stream_npv(stream: CashFlowStream, rate: float) -> float:
    r = _check_rate(rate)
    total = stream.cf0
    if r == 0:
        for cf, freq in zip(stream.amounts, stream.frequencies):
            total += cf * freq
        return total

    freq_sum = 0
    for cf, freq in zip(stream.amounts, stream.frequencies):
        annuity = (1.0 - _discount(r, freq)) / r
        total += cf * annuity * _discount(r, freq_sum)
        freq_sum += freq
    return total


def _stream_npv_derivative(stream: CashFlowStream, rate: float) -> float:
    r = _check_rate(rate)
    total = 0.0
    freq_sum = 0
    if r == 0:
        # d/dr of sum_t cf*(1+r)^-t at r=0 is -sum_t t*cf over the pair's periods
        for cf, freq in zip(stream.amounts, stream.frequencies):
            total -= cf * (freq * freq_sum + freq * (freq + 1) / 2.0)
            freq_sum += freq
        return total

    for cf, freq in zip(stream.amounts, stream.frequencies):
        tail = _discount(r, freq)
        annuity = (1.0 - tail) / r
        annuity_prime = (freq * r * tail / (1.0 + r) - (1.0 - tail)) / r ** 2
        offset = _discount(r, freq_sum)
        offset_prime = -freq_sum * offset / (1.0 + r)
        total += cf * (annuity_prime * offset + annuity * offset_prime)
        freq_sum += freq
    return total


def npv(
    cf0: float,
    amounts: Sequence[float],
    frequencies: Sequence[int],
    discount_rate: float,
) -> float:
    """
    Net present value of ``cf0`` plus the annuity pairs at ``discount_rate``:

        cf0 + sum_i cf_i/r * (1 - (1+r)^-freq_i) * (1+r)^-offset_i

    and ``cf0 + sum_i cf_i*freq_i`` when the rate is zero.
    Raises LengthMismatch if the sequences differ in length.
    """
    return _stream_npv(CashFlowStream.of(cf0, amounts, frequencies), discount_rate)


def npv_derivative(
    cf0: float,
    amounts: Sequence[float],
    frequencies: Sequence[int],
    discount_rate: float,
) -> float:
    """d(npv)/d(rate); ``cf0`` does not depend on the rate."""
    return _stream_npv_derivative(CashFlowStream.of(cf0, amounts, frequencies), discount_rate)


# ---------- IRR (periodic) ----------
def irr(
    cf0: float,
    amounts: Sequence[float],
    frequencies: Sequence[int],
    *,
    guess: Optional[float] = None,
    config: Optional[SolverConfig] = None,
) -> float:
    """
    Rate at which npv() is zero, by Newton with the exact NPV derivative.
    Returns a decimal rate (e.g., 0.18 = 18%).
    """
    stream = CashFlowStream.of(cf0, amounts, frequencies)
    return root(
        lambda r: _stream_npv(stream, r),
        lambda r: _stream_npv_derivative(stream, r),
        guess,
        config=config,
        lower_bound=-1.0,
    )


# ---------- MIRR ----------
def mirr(
    cf0: float,
    amounts: Sequence[float],
    frequencies: Sequence[int],
    finance_rate: float,
    reinvest_rate: Optional[float] = None,
) -> float:
    """
    Modified IRR over the expanded per-period flows v_0..v_N:

        (FV of positive flows at reinvest_rate / -PV of negative flows at finance_rate)^(1/N) - 1

    ``reinvest_rate`` defaults to ``finance_rate`` (single WACC).
    """
    stream = CashFlowStream.of(cf0, amounts, frequencies)
    fr = _check_rate(finance_rate, "finance rate")
    rr = _check_rate(finance_rate if reinvest_rate is None else reinvest_rate, "reinvestment rate")
    n = stream.periods
    if n == 0:
        raise DomainError("MIRR needs at least one period after t=0")

    flows = stream.per_period()
    t = np.arange(n + 1)
    negatives = np.where(flows < 0, flows, 0.0)
    positives = np.where(flows > 0, flows, 0.0)
    pv_negative = float(np.sum(negatives / (1.0 + fr) ** t))
    fv_positive = float(np.sum(positives * (1.0 + rr) ** (n - t)))
    if not (np.isfinite(pv_negative) and np.isfinite(fv_positive)):
        raise DomainError(f"MIRR over {n} periods is out of floating-point range")
    if pv_negative == 0 or fv_positive == 0:
        raise DomainError("MIRR needs at least one negative and one positive cash flow")
    return (fv_positive / -pv_negative) ** (1.0 / n) - 1.0


# ---------- Payback ----------
def _payback_period(flows: np.ndarray, fractional: bool) -> float:
    if flows[0] >= 0:
        return 0.0
    cumulative = np.cumsum(flows)
    recovered = np.flatnonzero(cumulative >= 0)
    if recovered.size == 0:
        raise DomainError("cumulative cash flows never recover the initial outlay")
    t = int(recovered[0])
    if not fractional:
        return float(t)
    # flow accrues evenly within period t
    return (t - 1) + float(-cumulative[t - 1] / flows[t])


def payback(
    cf0: float,
    amounts: Sequence[float],
    frequencies: Sequence[int],
    *,
    fractional: bool = True,
) -> float:
    """
    Periods until the cumulative balance first turns non-negative.
    0.0 when there is no initial outlay; DomainError if never recovered.
    """
    stream = CashFlowStream.of(cf0, amounts, frequencies)
    return _payback_period(stream.per_period(), fractional)


def discounted_payback(
    cf0: float,
    amounts: Sequence[float],
    frequencies: Sequence[int],
    rate: float,
    *,
    fractional: bool = True,
) -> float:
    """Payback on flows discounted at ``rate`` (v_t / (1+rate)^t)."""
    stream = CashFlowStream.of(cf0, amounts, frequencies)
    r = _check_rate(rate)
    flows = stream.per_period()
    discounted = flows / (1.0 + r) ** np.arange(flows.size)
    if not np.all(np.isfinite(discounted)):
        raise DomainError(f"discounting {flows.size} periods at {r} is out of floating-point range")
    return _payback_period(discounted, fractional)


__all__ = [
    "npv",
    "npv_derivative",
    "irr",
    "mirr",
    "payback",
    "discounted_payback",
]
