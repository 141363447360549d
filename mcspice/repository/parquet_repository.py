# mcspice/repository/parquet_repository.py
from __future__ import annotations

import threading
import uuid
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pyarrow as pa
import pyarrow.compute as pc
import pyarrow.parquet as pq

from mcspice import logs
from mcspice.repository.aggregator import CountFilter, RecordPredicate, ResultAggregator
from mcspice.repository.record import ResultRecord, time_text

# decimal 以字符串落盘，避免精度丢失
SCHEMA = pa.schema(
    [
        ("id", pa.string()),
        ("seed", pa.int64()),
        ("sweep", pa.int64()),
        ("time", pa.string()),
        ("signal", pa.string()),
        ("value", pa.string()),
    ]
)

UPSERT_KEY = ("sweep", "seed", "time", "signal")


class ParquetResultRepository:
    """
    ParquetResultRepository（单文件 / long format）

    <root>/<db>.parquet
        id | seed | sweep | time | signal | value

    - bulk_upsert: 按 (sweep, seed, time, signal) 去重，后写覆盖
    - grouped_count: 读回 ResultRecord 后交给 ResultAggregator
    - 写入走 tmp → replace，读者不会看到半个文件
    """

    def __init__(self, root: str | Path, db: str = "default"):
        self.root = Path(root)
        self.db = db
        # bulk_upsert 是 read-modify-write，同一进程内串行化
        self._lock = threading.Lock()

    # --------------------------------------------------
    @property
    def path(self) -> Path:
        return self.root / f"{self.db}.parquet"

    def use(self, db: str) -> None:
        self.db = db
        self.root.mkdir(parents=True, exist_ok=True)
        logs.info(f"[ParquetRepository] use db={db} path={self.path}")

    # --------------------------------------------------
    # write
    # --------------------------------------------------
    @staticmethod
    def to_table(records: Sequence[ResultRecord]) -> pa.Table:
        rows: Dict[str, list] = {name: [] for name in SCHEMA.names}
        for r in records:
            for signal, value in r.values.items():
                rows["id"].append(str(r.id))
                rows["seed"].append(r.seed)
                rows["sweep"].append(r.sweep)
                rows["time"].append(time_text(r.time))
                rows["signal"].append(signal)
                rows["value"].append(str(value))
        return pa.table(rows, schema=SCHEMA)

    def _load_table(self) -> pa.Table:
        if not self.path.exists():
            return SCHEMA.empty_table()
        return pq.read_table(self.path)

    def _write_table(self, table: pa.Table) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        pq.write_table(table, tmp, compression="zstd")
        tmp.replace(self.path)

    @logs.catch(msg="bulk upsert failed")
    def bulk_upsert(self, records: Sequence[ResultRecord]) -> None:
        if not records:
            return

        incoming = self.to_table(records)

        with self._lock:
            merged = pa.concat_tables([self._load_table(), incoming])

            # 后写覆盖：倒序后按 key 保留第一次出现
            df = merged.to_pandas()
            df = df.iloc[::-1].drop_duplicates(subset=list(UPSERT_KEY), keep="first").iloc[::-1]
            table = pa.Table.from_pandas(df, schema=SCHEMA, preserve_index=False).replace_schema_metadata(None)

            self._write_table(table)

        logs.info(
            f"[ParquetRepository] {len(records)} records upserted "
            f"(rows={table.num_rows}) db={self.db}"
        )

    def bulk_upsert_range(self, batches: Sequence[Sequence[ResultRecord]]) -> None:
        total = 0
        for records in batches:
            self.bulk_upsert(records)
            total += len(records)
            logs.info(f"[ParquetRepository] {len(records)} records upserted (total: {total})")

    # --------------------------------------------------
    # read
    # --------------------------------------------------
    def load_records(self) -> List[ResultRecord]:
        table = self._load_table()
        if table.num_rows == 0:
            return []

        table = table.sort_by([("sweep", "ascending"), ("seed", "ascending")])
        grouped: Dict[Tuple[str, int, int, str], Dict[str, Decimal]] = {}
        for row in table.to_pylist():
            key = (row["id"], row["seed"], row["sweep"], row["time"])
            grouped.setdefault(key, {})[row["signal"]] = Decimal(row["value"])

        return [
            ResultRecord(
                time=Decimal(time),
                seed=seed,
                sweep=sweep,
                values=values,
                id=uuid.UUID(rid),
            )
            for (rid, seed, sweep, time), values in grouped.items()
        ]

    def count_rows(self, seed: int | None = None) -> int:
        table = self._load_table()
        if seed is not None:
            table = table.filter(pc.equal(table["seed"], seed))
        return table.num_rows

    def grouped_count(
        self,
        predicate: RecordPredicate,
        filters: Sequence[CountFilter],
    ) -> List[Tuple[str, int]]:
        return ResultAggregator.count(self.load_records(), predicate, filters)
