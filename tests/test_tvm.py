import numpy as np
import numpy_financial as npf
import pytest

from tvmcalc.errors import DomainError, InvalidArgument, NonConvergence, SingularDerivative
from tvmcalc.finance.tvm import (
    _rate_equation,
    future_value,
    payment,
    periods,
    present_value,
    rate,
    tvm,
)

FV_10Y_5PCT = 1000.0 * 1.05 ** 10  # 1628.894626777442


def test_present_value_of_single_sum():
    assert tvm("pv", 10, 0.05, 0, 1000) == pytest.approx(-613.9132535, abs=1e-6)


@pytest.mark.parametrize(
    "n, ir, pv, pmt, fv",
    [
        (10, 0.05, -1000.0, 0.0, None),
        (360, 0.005, 200000.0, None, 0.0),
        (24, 0.0125, -500.0, -100.0, None),
    ],
)
def test_closed_forms_agree_with_numpy_financial(n, ir, pv, pmt, fv):
    if pmt is None:
        pmt = float(npf.pmt(ir, n, pv, 0.0))
        assert tvm("pmt", n, ir, pv, 0.0) == pytest.approx(pmt, rel=1e-10)
    if fv is None:
        fv = float(npf.fv(ir, n, pmt, pv))
        assert tvm("fv", n, ir, pv, pmt) == pytest.approx(fv, rel=1e-10)
    assert tvm("pv", n, ir, pmt, fv) == pytest.approx(float(npf.pv(ir, n, pmt, fv)), rel=1e-10, abs=1e-8)
    assert tvm("n", ir, pv, pmt, fv) == pytest.approx(float(npf.nper(ir, pmt, pv, fv)), rel=1e-9)


def test_round_trip_pv_fv_pmt():
    rng = np.random.default_rng(7)
    for _ in range(25):
        n = int(rng.integers(1, 41))
        ir = float(rng.uniform(0.001, 0.2))
        pv = float(rng.uniform(-10_000, 10_000))
        pmt = float(rng.uniform(-500, 500))
        fv = future_value(n, ir, pv, pmt)

        pv_back = tvm("pv", n, ir, pmt, fv)
        assert pv_back == pytest.approx(pv, rel=1e-9, abs=1e-6)
        assert tvm("fv", n, ir, pv_back, pmt) == pytest.approx(fv, rel=1e-9, abs=1e-6)
        assert tvm("pmt", n, ir, pv, fv) == pytest.approx(pmt, rel=1e-9, abs=1e-6)


def test_periods_then_future_value():
    n = tvm("n", 0.05, -1000, 0, FV_10Y_5PCT)
    assert n == pytest.approx(10.0, abs=1e-9)
    assert tvm("fv", n, 0.05, -1000, 0) == pytest.approx(FV_10Y_5PCT, rel=1e-12)


def test_periods_of_a_loan():
    pmt = payment(60, 0.01, 10_000, 0)
    assert periods(0.01, 10_000, pmt, 0) == pytest.approx(60.0, abs=1e-9)


def test_rate_single_sum():
    assert tvm("ir", 10, -1000, 0, FV_10Y_5PCT) == pytest.approx(0.05, abs=1e-7)


def test_rate_of_a_loan_matches_numpy_financial():
    pmt = payment(60, 0.01, 10_000, 0)
    got = tvm("ir", 60, 10_000, pmt, 0)
    assert got == pytest.approx(0.01, abs=1e-7)
    assert got == pytest.approx(float(npf.rate(60, pmt, 10_000, 0)), abs=1e-7)


def test_rate_with_explicit_guess():
    assert rate(10, -1000, 0, FV_10Y_5PCT, guess=0.02) == pytest.approx(0.05, abs=1e-7)


def test_rate_zero_is_found():
    assert tvm("ir", 10, -1000, 100, 0) == pytest.approx(0.0, abs=1e-6)


def test_rate_derivative_matches_finite_difference():
    value, derivative = _rate_equation(24, -500.0, -100.0, 3200.0)
    h = 1e-6
    for r in (0.0, 0.01, 0.07, -0.2):
        fd = (value(r + h) - value(r - h)) / (2 * h)
        assert derivative(r) == pytest.approx(fd, rel=1e-5, abs=1e-4)


def test_rate_over_zero_periods_is_singular():
    with pytest.raises(SingularDerivative):
        tvm("ir", 0, -1000, 0, 500)
    with pytest.raises(NonConvergence):
        tvm("ir", 0, -1000, 0, 500)


def test_zero_rate_branches():
    assert tvm("pv", 10, 0, -100, 0) == 1000
    assert tvm("fv", 10, 0, -1000, 100) == 0
    assert tvm("pmt", 10, 0, 1000, 0) == -100
    assert tvm("n", 0, -1000, 100, 0) == 10
    assert present_value(10, 0.0, -100, -50) == 1050


def test_domain_errors():
    # (pmt/ir - fv) / (pmt/ir + pv) = -1
    with pytest.raises(DomainError):
        tvm("n", 0.05, 1000, 0, 1000)
    with pytest.raises(DomainError):
        tvm("n", -1.0, -1000, 0, 2000)
    with pytest.raises(DomainError):
        tvm("n", 0, -1000, 0, 2000)
    with pytest.raises(DomainError):
        tvm("pmt", 0, 0.05, 1000, 0)
    with pytest.raises(DomainError):
        tvm("fv", 10, -1.5, 1000, 0)


def test_invalid_selector_and_arity():
    with pytest.raises(InvalidArgument):
        tvm("rate", 10, 0.05, 0, 1000)
    with pytest.raises(InvalidArgument):
        tvm("pv", 10, 0.05, 0)
    # also a ValueError for callers that only know the builtin
    with pytest.raises(ValueError):
        tvm("PV", 10, 0.05, 0, 1000)


def test_overflowing_growth_is_a_domain_error():
    with pytest.raises(DomainError):
        tvm("fv", 2000, 1.0, -1, 0)
    with pytest.raises(DomainError):
        tvm("pmt", 2000, 1.0, 1000, 0)


def test_rate_far_below_zero():
    assert tvm("ir", 2, -1000, 0, 10) == pytest.approx(-0.9, abs=1e-7)
