#!filepath: tests/repository/test_parquet_repository.py
from decimal import Decimal

import pyarrow.parquet as pq
import pytest

from mcspice.repository.aggregator import CountFilter
from mcspice.repository.parquet_repository import SCHEMA, ParquetResultRepository
from mcspice.repository.base import ResultRepository
from mcspice.repository.record import ResultRecord
from mcspice.utils.si_prefix import parse_si


def rec(sweep, seed, time, **values) -> ResultRecord:
    return ResultRecord(
        time=Decimal(time),
        seed=seed,
        sweep=sweep,
        values={k: Decimal(v) for k, v in values.items()},
    )


@pytest.fixture
def repo(tmp_path) -> ParquetResultRepository:
    r = ParquetResultRepository(tmp_path / "results")
    r.use("inv")
    return r


def test_use_selects_file(repo, tmp_path):
    assert repo.path == tmp_path / "results" / "inv.parquet"
    assert repo.load_records() == []
    assert repo.count_rows() == 0


def test_bulk_upsert_long_format(repo):
    repo.bulk_upsert([rec(1, 3, "1e-9", A="0.1", B="0.7")])

    table = pq.read_table(repo.path)
    assert table.schema.equals(SCHEMA)
    assert table.num_rows == 2
    assert table.column("signal").to_pylist() == ["A", "B"]
    assert table.column("time").to_pylist() == ["1E-9", "1E-9"]


def test_round_trip_keeps_decimal_text(repo):
    original = rec(2, 5, "1.000000000000000001e-9", OUT="0.123456789012345678901")
    repo.bulk_upsert([original])

    [back] = repo.load_records()
    assert back.id == original.id
    assert back.time == original.time
    assert dict(back.values) == dict(original.values)
    assert (back.seed, back.sweep) == (5, 2)


def test_upsert_replaces_same_key(repo):
    repo.bulk_upsert([rec(1, 1, "1e-9", A="0.1", B="0.2")])
    repo.bulk_upsert([rec(1, 1, "1e-9", A="0.9"), rec(1, 2, "1e-9", A="0.5")])

    assert repo.count_rows() == 3
    assert repo.count_rows(seed=1) == 2

    by_key = {(r.seed, s): v for r in repo.load_records() for s, v in r.values.items()}
    assert by_key[(1, "A")] == Decimal("0.9")
    assert by_key[(1, "B")] == Decimal("0.2")
    assert by_key[(2, "A")] == Decimal("0.5")


def test_empty_upsert_does_nothing(repo):
    repo.bulk_upsert([])
    assert not repo.path.exists()


def test_bulk_upsert_range(repo):
    repo.bulk_upsert_range(
        [
            [rec(1, 1, "1e-9", A="0.1")],
            [rec(1, 2, "1e-9", A="0.2")],
            [rec(1, 3, "1e-9", A="0.3")],
        ]
    )
    assert repo.count_rows() == 3


def test_databases_are_separate(repo):
    repo.bulk_upsert([rec(1, 1, "1e-9", A="0.1")])
    repo.use("other")
    assert repo.count_rows() == 0


def test_grouped_count(repo):
    repo.bulk_upsert(
        [
            rec(1, 1, "2e-9", A="0.8", B="0.0"),
            rec(2, 1, "2e-9", A="0.2", B="0.6"),
            rec(1, 2, "2e-9", A="0.7", B="0.1"),
        ]
    )

    flipped = CountFilter("flipped", lambda v: v["A@2E-9"] > Decimal("0.4"))
    assert repo.grouped_count(lambda r: True, [flipped]) == [("flipped", 2)]
    assert repo.grouped_count(lambda r: r.sweep == 1, [flipped]) == [("flipped", 2)]
    assert repo.grouped_count(lambda r: r.sweep == 2, [flipped]) == [("flipped", 0)]


def test_upsert_key_ignores_time_spelling(repo):
    repo.bulk_upsert([ResultRecord(time=parse_si("1n"), seed=1, sweep=1, values={"A": Decimal("0.1")})])
    repo.bulk_upsert([ResultRecord(time=parse_si("1.0000n"), seed=1, sweep=1, values={"A": Decimal("0.9")})])

    assert repo.count_rows() == 1
    [back] = repo.load_records()
    assert back.time == Decimal("1E-9")
    assert dict(back.values) == {"A": Decimal("0.9")}


def test_satisfies_storage_capability(repo):
    assert isinstance(repo, ResultRepository)
