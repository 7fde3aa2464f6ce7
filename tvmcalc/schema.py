from __future__ import annotations
from typing import Dict, Any

# Solver settings schema: type, min/max ranges, and description.
SOLVER_SCHEMA: Dict[str, Dict[str, Any]] = {
    "tolerance":       {"type": "float", "min": 1e-15, "max": 1e-2,  "desc": "Step / residual tolerance for convergence"},
    "max_iterations":  {"type": "int",   "min": 1,     "max": 10000, "desc": "Iteration cap before NonConvergence"},
    "initial_guess":   {"type": "float", "min": -0.99, "max": 10.0,  "desc": "Default starting rate for ir / IRR solves"},
    "derivative_step": {"type": "float", "min": 1e-12, "max": 1e-2,  "desc": "h for the central finite difference"},
    "min_derivative":  {"type": "float", "min": 0.0,   "max": 1.0,   "desc": "|f'(x)| below this is treated as singular"},
}
