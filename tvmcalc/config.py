from __future__ import annotations

from typing import Any, Dict, Mapping, Optional
import dataclasses
import io
import os
import warnings

import yaml

from .finance.cashflow import CashFlowStream
from .schema import SOLVER_SCHEMA
from .solver import DEFAULT_CONFIG, SolverConfig

CONFIG_ENV_VAR = "TVMCALC_CONFIG"


class ConfigError(ValueError):
    """Unreadable YAML or a setting outside the allowed range."""


def _read_text(source: str | os.PathLike | io.StringIO) -> str:
    if hasattr(source, "read"):
        return str(source.read())
    p = os.fspath(source)
    try:
        with open(p, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise ConfigError(f"cannot read {p}: {e}") from e


def _load_mapping(source: str | os.PathLike | io.StringIO) -> Dict[str, Any]:
    text = _read_text(source)
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"expected a YAML mapping at the top level, got {type(data).__name__}")
    return data


def _flatten_grouped(cfg: Dict[str, Any], group: str) -> Dict[str, Any]:
    """
    Lift keys of a shallow group like {'solver': {...}} to the top level.
    Prefers top-level keys if collisions occur.
    """
    flat: Dict[str, Any] = {k: v for k, v in cfg.items() if k != group}
    nested = cfg.get(group)
    if isinstance(nested, dict):
        for k, v in nested.items():
            flat.setdefault(k, v)
    return flat


def _coerce(key: str, value: Any, rule: Mapping[str, Any]) -> Any:
    try:
        if rule.get("type") == "int":
            f = float(value)
            if not f.is_integer():
                raise ValueError(value)
            v: Any = int(f)
        else:
            v = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be a {rule.get('type', 'float')}, got {value!r}") from None
    lo = rule.get("min", float("-inf"))
    hi = rule.get("max", float("inf"))
    if not (lo <= v <= hi):
        raise ConfigError(f"{key} outside allowed range [{lo}, {hi}]: {v}")
    return v


def solver_config_from_dict(data: Mapping[str, Any], *, base: SolverConfig = DEFAULT_CONFIG) -> SolverConfig:
    """Overlay validated settings from ``data`` on ``base``; unknown keys only warn."""
    flat = _flatten_grouped(dict(data), "solver")
    overrides: Dict[str, Any] = {}
    for key, value in flat.items():
        rule = SOLVER_SCHEMA.get(key)
        if rule is None:
            if key != "cashflows":
                warnings.warn(f"ignoring unknown solver setting '{key}'")
            continue
        overrides[key] = _coerce(key, value, rule)
    return dataclasses.replace(base, **overrides)


def load_solver_config(source: str | os.PathLike | io.StringIO) -> SolverConfig:
    """Load solver settings from a YAML path or text stream."""
    return solver_config_from_dict(_load_mapping(source))


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> SolverConfig:
    """Settings from the file named by $TVMCALC_CONFIG, else the defaults."""
    env = os.environ if environ is None else environ
    path = env.get(CONFIG_ENV_VAR)
    if not path:
        return DEFAULT_CONFIG
    return load_solver_config(path)


def load_cashflows(source: str | os.PathLike | io.StringIO) -> CashFlowStream:
    """
    Load a cash-flow stream from YAML, either at the top level or grouped:

        cashflows:
          cf0: -1000
          flows:
            - {amount: 300, frequency: 2}
            - {amount: 400, frequency: 2}
    """
    data = _load_mapping(source)
    doc = data.get("cashflows", data)
    if not isinstance(doc, dict):
        raise ConfigError("'cashflows' must be a mapping")
    return CashFlowStream.from_mapping(doc)


__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigError",
    "solver_config_from_dict",
    "load_solver_config",
    "config_from_env",
    "load_cashflows",
]
