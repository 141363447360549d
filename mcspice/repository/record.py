# mcspice/repository/record.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Iterable, Mapping

from mcspice.utils.si_prefix import parse_si


@dataclass(frozen=True, slots=True)
class ResultRecord:
    """
    One accepted data line of simulator output.

    values: signal name -> value, in the request's signal order
    """

    time: Decimal
    seed: int
    sweep: int
    values: Mapping[str, Decimal]
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        # 只读视图，防止外部修改
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @classmethod
    def parse(
        cls, line: str, signals: Iterable[str], seed: int, sweep: int
    ) -> "ResultRecord":
        """
        ``<time> <v1> <v2> ...`` → ResultRecord

        Tokens are zipped with signals: extra tokens are dropped, missing
        ones leave the mapping partial. Raises SiPrefixError on a bad token.
        """
        tokens = line.split()
        if not tokens:
            raise ValueError("empty data line")

        time = parse_si(tokens[0])
        values = {name: parse_si(tok) for tok, name in zip(tokens[1:], signals)}
        return cls(time=time, seed=seed, sweep=sweep, values=values)

    def key(self, signal: str) -> str:
        return signal_key(signal, self.time)


def time_text(time: Decimal) -> str:
    """
    Canonical text of a sample time: ``1n``, ``1.0000n`` and ``1e-9``
    all render as ``1E-9``. Used wherever a time is part of a key.
    """
    if time == 0:
        return "0E+0"
    return format(time.normalize(), "E")


def signal_key(signal: str, time: Decimal) -> str:
    """Key of one sampled value inside a (sweep, seed) group."""
    return f"{signal}@{time_text(time)}"
