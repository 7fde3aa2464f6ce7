# tvmcalc/finance/cashflow.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Tuple

import numpy as np

from ..errors import InvalidArgument, LengthMismatch


def _as_frequency(value: Any, index: int) -> int:
    if isinstance(value, bool):
        raise InvalidArgument(f"frequency #{index} must be a non-negative integer, got {value!r}")
    try:
        f = float(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"frequency #{index} is not a number: {value!r}") from None
    if not f.is_integer() or f < 0:
        raise InvalidArgument(f"frequency #{index} must be a non-negative integer, got {value!r}")
    return int(f)


@dataclass(frozen=True)
class CashFlowStream:
    """
    Initial flow plus (amount, frequency) pairs.

    Pair i pays ``amounts[i]`` at the end of each of ``frequencies[i]``
    consecutive periods, starting right after the periods used by the
    pairs before it.
    """

    cf0: float
    amounts: Tuple[float, ...] = ()
    frequencies: Tuple[int, ...] = ()

    def __post_init__(self) -> None:
        amounts = tuple(float(a) for a in self.amounts)
        frequencies = tuple(self.frequencies)
        if len(amounts) != len(frequencies):
            raise LengthMismatch(
                f"cash flow amounts ({len(amounts)}) and frequencies ({len(frequencies)}) differ in length"
            )
        object.__setattr__(self, "cf0", float(self.cf0))
        object.__setattr__(self, "amounts", amounts)
        object.__setattr__(
            self, "frequencies", tuple(_as_frequency(f, i) for i, f in enumerate(frequencies))
        )

    @classmethod
    def of(cls, cf0: float, amounts: Iterable[float], frequencies: Iterable[int]) -> "CashFlowStream":
        return cls(cf0, tuple(amounts), tuple(frequencies))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CashFlowStream":
        """
        Build from either
            {cf0: -1000, flows: [{amount: 300, frequency: 4}, ...]}
        or
            {cf0: -1000, amounts: [300, ...], frequencies: [4, ...]}
        A flow without a frequency recurs once.
        """
        if "cf0" not in data:
            raise InvalidArgument("cash flow document is missing 'cf0'")
        flows = data.get("flows")
        if flows is not None:
            amounts: List[float] = []
            frequencies: List[Any] = []
            for i, flow in enumerate(flows):
                if not isinstance(flow, Mapping) or "amount" not in flow:
                    raise InvalidArgument(f"flow #{i} must be a mapping with an 'amount'")
                amounts.append(flow["amount"])
                frequencies.append(flow.get("frequency", 1))
            return cls.of(data["cf0"], amounts, frequencies)
        return cls.of(data["cf0"], data.get("amounts") or [], data.get("frequencies") or [])

    @property
    def periods(self) -> int:
        return sum(self.frequencies)

    def offsets(self) -> List[int]:
        """Number of periods elapsed before each pair starts."""
        out: List[int] = []
        freq_sum = 0
        for freq in self.frequencies:
            out.append(freq_sum)
            freq_sum += freq
        return out

    def per_period(self) -> np.ndarray:
        """Flows at t = 0..periods, with each amount repeated over its frequency."""
        if not self.amounts:
            return np.array([self.cf0], dtype=float)
        repeated = np.repeat(np.asarray(self.amounts, dtype=float), self.frequencies)
        return np.concatenate(([self.cf0], repeated))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cf0": self.cf0,
            "flows": [
                {"amount": a, "frequency": f} for a, f in zip(self.amounts, self.frequencies)
            ],
        }


__all__ = ["CashFlowStream"]
