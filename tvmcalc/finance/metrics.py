"""
Cash-flow metrics façade.

Design:
- NPV/IRR implementations live only in tvmcalc.finance.irr (singleton).
- This module must not *define* irr/npv (no 'def irr' / 'def npv' here).
- It re-exports them and bundles them into a per-stream summary.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from ..errors import FinanceError
from ..solver import SolverConfig
from .cashflow import CashFlowStream
from .irr import (
    discounted_payback as discounted_payback,
    irr as irr,
    mirr as mirr,
    npv as npv,
    payback as payback,
)

logger = logging.getLogger(__name__)


def summarize(
    stream: CashFlowStream,
    rate: float,
    *,
    finance_rate: Optional[float] = None,
    reinvest_rate: Optional[float] = None,
    config: Optional[SolverConfig] = None,
) -> Dict[str, Any]:
    """
    All metrics for one stream. ``finance_rate`` defaults to ``rate``.
    A metric that raises a FinanceError is reported as None and its message
    is kept under 'errors'.
    """
    args = (stream.cf0, stream.amounts, stream.frequencies)
    fr = rate if finance_rate is None else finance_rate
    jobs: Dict[str, Callable[[], float]] = {
        "npv": lambda: npv(*args, rate),
        "irr": lambda: irr(*args, config=config),
        "mirr": lambda: mirr(*args, fr, reinvest_rate),
        "payback": lambda: payback(*args),
        "discounted_payback": lambda: discounted_payback(*args, rate),
    }
    out: Dict[str, Any] = {}
    errors: Dict[str, str] = {}
    for name, job in jobs.items():
        try:
            out[name] = job()
        except FinanceError as e:
            logger.info("%s unavailable: %s", name, e)
            out[name] = None
            errors[name] = f"{type(e).__name__}: {e}"
    out["errors"] = errors
    return out


__all__ = ["npv", "irr", "mirr", "payback", "discounted_payback", "summarize"]
