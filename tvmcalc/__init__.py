"""Time value of money, NPV/IRR family and the Newton solver behind them."""

from .errors import (
    DomainError,
    FinanceError,
    InvalidArgument,
    LengthMismatch,
    NonConvergence,
    SingularDerivative,
)
from .finance import CashFlowStream, discounted_payback, irr, mirr, npv, payback, tvm
from .solver import DEFAULT_CONFIG, RootResult, SolverConfig, newton, root, secant

__version__ = "0.1.0"

__all__ = [
    "DomainError",
    "FinanceError",
    "InvalidArgument",
    "LengthMismatch",
    "NonConvergence",
    "SingularDerivative",
    "CashFlowStream",
    "tvm",
    "npv",
    "irr",
    "mirr",
    "payback",
    "discounted_payback",
    "DEFAULT_CONFIG",
    "RootResult",
    "SolverConfig",
    "newton",
    "root",
    "secant",
]
