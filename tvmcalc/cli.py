# tvmcalc/cli.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Tuple

from .config import ConfigError, config_from_env, load_cashflows, load_solver_config
from .errors import FinanceError
from .finance.irr import discounted_payback, irr, mirr, npv, payback
from .finance.cashflow import CashFlowStream
from .finance.metrics import summarize
from .finance.tvm import TVM_VARIABLES, tvm
from .solver import SolverConfig

logger = logging.getLogger(__name__)


def _parse_flow(text: str) -> Tuple[float, int]:
    """AMOUNT or AMOUNT:FREQ, e.g. '300:4'."""
    amount, _, freq = text.partition(":")
    try:
        return float(amount), int(freq) if freq else 1
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected AMOUNT[:FREQ], got {text!r}") from None


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tvmcalc",
        description="Time value of money and cash-flow metrics (NPV, IRR, MIRR, payback).",
    )
    p.add_argument(
        "--config",
        default=None,
        help="YAML solver settings. If omitted, $TVMCALC_CONFIG or the built-in defaults are used.",
    )
    p.add_argument(
        "--format",
        dest="fmt",
        default="text",
        choices=["text", "json"],
        help="Output format (default: text).",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log solver iterations.")

    stream = argparse.ArgumentParser(add_help=False)
    g = stream.add_argument_group("cash flows")
    g.add_argument("--cashflows", default=None, help="YAML file with cf0 and flows.")
    g.add_argument("--cf0", type=float, default=None, help="Initial cash flow at t=0.")
    g.add_argument(
        "--flow",
        action="append",
        type=_parse_flow,
        default=[],
        metavar="AMOUNT[:FREQ]",
        help="Level flow repeated FREQ periods (default 1). Repeat for each pair, in order; write --flow=-500:2 for negative amounts.",
    )

    sub = p.add_subparsers(dest="command", required=True)

    t = sub.add_parser("tvm", help="Solve the TVM equation for one variable.")
    t.add_argument("find", choices=TVM_VARIABLES)
    t.add_argument(
        "values",
        nargs=4,
        type=float,
        metavar="VALUE",
        help="The other four of n, ir, pv, pmt, fv, in that order.",
    )

    n = sub.add_parser("npv", parents=[stream], help="Net present value.")
    n.add_argument("--rate", type=float, required=True, help="Per-period discount rate.")

    i = sub.add_parser("irr", parents=[stream], help="Internal rate of return.")
    i.add_argument("--guess", type=float, default=None, help="Starting rate for Newton.")

    m = sub.add_parser("mirr", parents=[stream], help="Modified internal rate of return.")
    m.add_argument("--finance-rate", type=float, required=True)
    m.add_argument("--reinvest-rate", type=float, default=None, help="Defaults to the finance rate.")

    pb = sub.add_parser("payback", parents=[stream], help="Simple payback period.")
    pb.add_argument("--whole-periods", action="store_true", help="Round up to the recovering period.")

    dp = sub.add_parser("discounted-payback", parents=[stream], help="Discounted payback period.")
    dp.add_argument("--rate", type=float, required=True)
    dp.add_argument("--whole-periods", action="store_true", help="Round up to the recovering period.")

    s = sub.add_parser("summary", parents=[stream], help="All metrics for one stream.")
    s.add_argument("--rate", type=float, required=True)
    s.add_argument("--finance-rate", type=float, default=None, help="Defaults to --rate.")
    s.add_argument("--reinvest-rate", type=float, default=None)
    return p


def _stream_from_args(parser: argparse.ArgumentParser, ns: argparse.Namespace) -> CashFlowStream:
    if ns.cashflows:
        if ns.cf0 is not None or ns.flow:
            parser.error("--cashflows cannot be combined with --cf0/--flow")
        return load_cashflows(ns.cashflows)
    if ns.cf0 is None:
        parser.error("either --cashflows or --cf0 is required")
    return CashFlowStream.of(ns.cf0, [a for a, _ in ns.flow], [f for _, f in ns.flow])


def _run(parser: argparse.ArgumentParser, ns: argparse.Namespace, cfg: SolverConfig) -> Any:
    if ns.command == "tvm":
        return tvm(ns.find, *ns.values, config=cfg)

    st = _stream_from_args(parser, ns)
    args = (st.cf0, st.amounts, st.frequencies)
    if ns.command == "npv":
        return npv(*args, ns.rate)
    if ns.command == "irr":
        return irr(*args, guess=ns.guess, config=cfg)
    if ns.command == "mirr":
        return mirr(*args, ns.finance_rate, ns.reinvest_rate)
    if ns.command == "payback":
        return payback(*args, fractional=not ns.whole_periods)
    if ns.command == "discounted-payback":
        return discounted_payback(*args, ns.rate, fractional=not ns.whole_periods)
    if ns.command == "summary":
        return summarize(
            st,
            ns.rate,
            finance_rate=ns.finance_rate,
            reinvest_rate=ns.reinvest_rate,
            config=cfg,
        )
    parser.error(f"unknown command {ns.command!r}")


def _emit(command: str, result: Any, fmt: str) -> None:
    if fmt == "json":
        payload: Dict[str, Any] = {"command": command}
        if isinstance(result, dict):
            payload.update(result)
        else:
            payload["result"] = result
        print(json.dumps(payload, sort_keys=True))
        return
    if isinstance(result, dict):
        lines: List[str] = []
        for k, v in result.items():
            if k == "errors":
                if v:
                    lines.append("errors:")
                    lines.extend(f"  {name}: {msg}" for name, msg in v.items())
                continue
            lines.append(f"{k}: {'n/a' if v is None else format(v, '.10g')}")
        print("\n".join(lines))
        return
    print(f"{command}: {result:.10g}")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    try:
        ns = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on usage errors, 0 on --help
        return int(e.code) if isinstance(e.code, int) else 2

    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_solver_config(ns.config) if ns.config else config_from_env()
        result = _run(parser, ns, cfg)
    except SystemExit as e:
        return int(e.code) if isinstance(e.code, int) else 2
    except (FinanceError, ConfigError) as e:
        logger.debug("command %s failed", ns.command, exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    _emit(ns.command, result, ns.fmt)
    return 0


__all__ = ["main"]
