import importlib
import inspect
from pathlib import Path


def _param_names(fn):
    return [p.name for p in inspect.signature(fn).parameters.values()]


def test_finance_irr_public_api_is_stable():
    """Lock down that IRR/NPV live in finance.irr with a stable entrypoint."""
    m = importlib.import_module("tvmcalc.finance.irr")
    for name in ("npv", "irr", "mirr", "payback", "discounted_payback"):
        assert callable(getattr(m, name, None)), f"Missing or non-callable export: {name}"

    # Keep the positional order stable to avoid accidental API churn.
    assert _param_names(m.npv) == ["cf0", "amounts", "frequencies", "discount_rate"]
    assert _param_names(m.irr)[:3] == ["cf0", "amounts", "frequencies"]

    # Guard against coupling/import creep in the thin math module.
    src = Path(m.__file__).read_text(encoding="utf-8")
    for forbidden in ("import yaml", "from tvmcalc", "from ..config", "from ..cli"):
        assert forbidden not in src, f"Unexpected dependency '{forbidden}' inside finance/irr.py"


def test_solver_has_no_finance_dependency():
    m = importlib.import_module("tvmcalc.solver")
    assert _param_names(m.root)[:3] == ["f", "f_derivative", "initial_guess"]
    src = Path(m.__file__).read_text(encoding="utf-8")
    for forbidden in ("from .finance", "import yaml", "import numpy"):
        assert forbidden not in src, f"Unexpected dependency '{forbidden}' inside solver.py"


def test_tvm_selector_contract():
    t = importlib.import_module("tvmcalc.finance.tvm")
    assert t.TVM_VARIABLES == ("n", "ir", "pv", "pmt", "fv")
    assert _param_names(t.tvm)[:2] == ["find", "args"]


def test_error_taxonomy_is_stable():
    e = importlib.import_module("tvmcalc.errors")
    for name in ("InvalidArgument", "LengthMismatch", "DomainError", "NonConvergence", "SingularDerivative"):
        cls = getattr(e, name)
        assert issubclass(cls, e.FinanceError)
    assert issubclass(e.SingularDerivative, e.NonConvergence)


def test_package_root_reexports():
    pkg = importlib.import_module("tvmcalc")
    for name in ("tvm", "npv", "irr", "root", "CashFlowStream", "SolverConfig"):
        assert hasattr(pkg, name), name
