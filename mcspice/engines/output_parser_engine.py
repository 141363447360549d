# mcspice/engines/output_parser_engine.py
from __future__ import annotations

from enum import Enum
from typing import Callable, Optional, Sequence

from mcspice.engines.base import BaseEngine
from mcspice.repository.record import ResultRecord
from mcspice.utils.si_prefix import try_parse_si


class OutputKind(str, Enum):
    DATA = "data"
    ELSE = "else"


class OutputParserEngine(BaseEngine[str, ResultRecord]):
    """
    HSPICE stdout line classifier（状态机，单次 run 内有效）

    line[0]   action
    -------   ---------------------------------------------
    't'       ignored, state unchanged
    'x'       state -> DATA
    'y'       sweep += 1, on_sweep(), state -> ELSE
    other     DATA: decode as "<time> <v1> <v2> ..."; ELSE: ignored

    In DATA state a line whose first token is not an SI-prefixed decimal
    (column labels, units) is dropped.
    """

    def __init__(
        self,
        signals: Sequence[str],
        seed: int,
        sweep_start: int,
        on_sweep: Optional[Callable[[int], None]] = None,
    ):
        self.signals = tuple(signals)
        self.seed = seed
        self.sweep = sweep_start
        self.kind = OutputKind.ELSE
        self._on_sweep = on_sweep
        self.sweeps_done = 0

    def process(self, line: str) -> Optional[ResultRecord]:
        line = line.rstrip("\r\n")
        if not line:
            return None

        head = line[0]
        if head == "t":
            return None
        if head == "x":
            self.kind = OutputKind.DATA
            return None
        if head == "y":
            self.sweep += 1
            self.sweeps_done += 1
            self.kind = OutputKind.ELSE
            if self._on_sweep is not None:
                self._on_sweep(self.sweep)
            return None

        if self.kind is OutputKind.ELSE:
            return None

        tokens = line.split()
        if not tokens or try_parse_si(tokens[0]) is None:
            return None

        return ResultRecord.parse(line, self.signals, self.seed, self.sweep)
