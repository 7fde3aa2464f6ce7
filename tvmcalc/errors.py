# tvmcalc/errors.py
"""
Error taxonomy shared by the solver and the finance formulas.

Every failure is raised to the caller; nothing is coerced to 0.0 or NaN.
"""

from __future__ import annotations

from typing import Optional


class FinanceError(Exception):
    """Base class for every error raised by tvmcalc computations."""


class InvalidArgument(FinanceError, ValueError):
    """Unknown selector, wrong number of arguments, or malformed input."""


class LengthMismatch(FinanceError, ValueError):
    """Cash-flow amounts and frequencies have different lengths."""


class DomainError(FinanceError, ValueError):
    """A formula was evaluated outside its domain (log of <= 0, rate <= -100%, ...)."""


class NonConvergence(FinanceError, ArithmeticError):
    """Iterative solve hit the iteration cap or produced a non-finite value."""

    def __init__(
        self,
        message: str,
        *,
        last_estimate: Optional[float] = None,
        iterations: int = 0,
    ) -> None:
        super().__init__(message)
        self.last_estimate = last_estimate
        self.iterations = iterations


class SingularDerivative(NonConvergence):
    """Derivative (or secant slope) vanished; the caller may retry with another guess."""


__all__ = [
    "FinanceError",
    "InvalidArgument",
    "LengthMismatch",
    "DomainError",
    "NonConvergence",
    "SingularDerivative",
]
