# mcspice/repository/aggregator.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Mapping, Sequence, Tuple

import pandas as pd

from mcspice import logs
from mcspice.repository.record import ResultRecord

GroupKey = Tuple[int, int]  # (sweep, seed)
ValueSet = Mapping[str, Decimal]  # "<signal>@<time>" -> value
RecordPredicate = Callable[[ResultRecord], bool]


@dataclass(frozen=True)
class CountFilter:
    """
    A named condition over one (sweep, seed) value set.
    The aggregator counts the groups for which it holds.
    """

    name: str
    predicate: Callable[[ValueSet], bool]


def _accept_all(_: ResultRecord) -> bool:
    return True


class ResultAggregator:
    """
    ResultAggregator

    - 按 (sweep, seed) 分组，每组合并为一个 value set
    - 组内 key 必须唯一（同一 signal 同一 time 只能出现一次）
    - 每个 filter 独立计数，顺序与输入一致
    - 不修改输入 records
    """

    @staticmethod
    def to_frame(records: Iterable[ResultRecord]) -> pd.DataFrame:
        rows = [
            {
                "sweep": r.sweep,
                "seed": r.seed,
                "key": r.key(signal),
                "value": value,
            }
            for r in records
            for signal, value in r.values.items()
        ]
        return pd.DataFrame(rows, columns=["sweep", "seed", "key", "value"])

    @classmethod
    def group(
        cls,
        records: Iterable[ResultRecord],
        predicate: RecordPredicate = _accept_all,
    ) -> Dict[GroupKey, Dict[str, Decimal]]:
        selected = [r for r in records if predicate(r)]

        # 组来自 records 本身：只有 time 的记录也占一个组
        groups: Dict[GroupKey, Dict[str, Decimal]] = {
            key: {} for key in sorted({(r.sweep, r.seed) for r in selected})
        }

        df = cls.to_frame(selected)
        if df.empty:
            return groups

        dup = df.duplicated(subset=["sweep", "seed", "key"], keep=False)
        if dup.any():
            first = df[dup].iloc[0]
            raise ValueError(
                f"duplicate key {first['key']!r} in group "
                f"(sweep={first['sweep']}, seed={first['seed']})"
            )

        for (sweep, seed), g in df.groupby(["sweep", "seed"], sort=True):
            groups[(int(sweep), int(seed))].update(zip(g["key"], g["value"]))
        return groups

    @classmethod
    def count(
        cls,
        records: Iterable[ResultRecord],
        predicate: RecordPredicate,
        filters: Sequence[CountFilter],
    ) -> List[Tuple[str, int]]:
        groups = cls.group(records, predicate)
        logs.debug(f"[ResultAggregator] groups={len(groups)} filters={len(filters)}")

        return [
            (f.name, sum(1 for values in groups.values() if f.predicate(values)))
            for f in filters
        ]
