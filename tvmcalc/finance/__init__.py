from .cashflow import CashFlowStream
from .irr import discounted_payback, irr, mirr, npv, npv_derivative, payback
from .tvm import TVM_VARIABLES, future_value, payment, periods, present_value, rate, tvm

__all__ = [
    "CashFlowStream",
    "TVM_VARIABLES",
    "tvm",
    "present_value",
    "payment",
    "future_value",
    "periods",
    "rate",
    "npv",
    "npv_derivative",
    "irr",
    "mirr",
    "payback",
    "discounted_payback",
]
