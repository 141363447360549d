# mcspice/repository/base.py
from __future__ import annotations

from typing import List, Protocol, Sequence, Tuple, runtime_checkable

from mcspice.repository.aggregator import CountFilter, RecordPredicate
from mcspice.repository.record import ResultRecord


@runtime_checkable
class ResultRepository(Protocol):
    """
    Storage capability used by runs and by counting.

    Implementations own the storage engine; callers only see these three
    operations.
    """

    def use(self, db: str) -> None:
        ...

    def bulk_upsert(self, records: Sequence[ResultRecord]) -> None:
        ...

    def grouped_count(
        self,
        predicate: RecordPredicate,
        filters: Sequence[CountFilter],
    ) -> List[Tuple[str, int]]:
        ...
