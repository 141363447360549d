# mcspice/request/range_parameter.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

SWEEP_DEFAULT = "1,5000"
SEED_DEFAULT = "1,2000"


@dataclass(frozen=True, slots=True)
class RangeParameter:
    """
    Inclusive integer range written as ``start,stop`` or ``start,step,stop``.

    Used to fan a request out over seeds and to select sweeps when
    counting stored results.
    """

    start: int
    step: int
    stop: int

    def __post_init__(self):
        if self.step <= 0:
            raise ValueError(f"range step must be positive: {self.step}")
        if self.stop < self.start:
            raise ValueError(f"range stop {self.stop} precedes start {self.start}")

    @classmethod
    def parse(cls, text: str) -> "RangeParameter":
        parts = [p.strip() for p in text.split(",")]
        try:
            values = [int(p) for p in parts]
        except ValueError as e:
            raise ValueError(f"invalid range: {text!r}") from e

        if len(values) == 2:
            return cls(values[0], 1, values[1])
        if len(values) == 3:
            return cls(values[0], values[1], values[2])
        raise ValueError(f"invalid range: {text!r} (expect start,stop or start,step,stop)")

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.stop + 1, self.step))

    def __len__(self) -> int:
        return len(range(self.start, self.stop + 1, self.step))

    def __contains__(self, value: object) -> bool:
        return value in range(self.start, self.stop + 1, self.step)

    def __str__(self) -> str:
        return f"{self.start},{self.step},{self.stop}"
