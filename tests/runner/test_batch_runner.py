#!filepath: tests/runner/test_batch_runner.py
from __future__ import annotations

import io
from pathlib import Path
from typing import List, Optional

import pytest
from rich.console import Console

from mcspice.runner.batch_runner import BatchRunner, sanitize_circuit
from mcspice.runner.cancel import NEVER, CancelToken
from mcspice.utils.errors import (
    Cancelled,
    EmptyContent,
    EnvironmentSetupFailed,
    IncompleteResults,
    InvalidRequest,
    NonZeroExit,
    NotFound,
    RunFailed,
)

BODY = "M1 out in GND! GND! nch\n"


# =============================================================================
# Fakes
# =============================================================================
class FakeHspice:
    """
    伪造仿真器：在 cwd 下写出 n 个 hspice.tr0@<i>，返回 exit_code
    """

    def __init__(self, results: Optional[int] = None, exit_code: int = 0, error: Exception | None = None):
        self.results = results
        self.exit_code = exit_code
        self.error = error
        self.calls: List[dict] = []

    def run(self, command, on_line=None, cwd=None, cancel=NEVER) -> int:
        self.calls.append({"command": list(command), "cwd": Path(cwd), "cancel": cancel})
        if self.error is not None:
            raise self.error

        on_line("****** HSPICE\n")
        for i in range(self.results or 0):
            (Path(cwd) / f"hspice.tr0@{i}").write_text("")
        return self.exit_code


# =============================================================================
# Fixtures
# =============================================================================
@pytest.fixture
def circuit_root(tmp_path: Path) -> Path:
    """
    <root>/inv/HSPICE/nominal/netlist/
        cnl/
        netlist
    """
    d = tmp_path / "circuits" / "inv" / "HSPICE" / "nominal" / "netlist"
    (d / "cnl").mkdir(parents=True)
    (d / "netlist").write_text(BODY, encoding="utf-8")
    return tmp_path / "circuits"


def make_runner(req, circuit_root, **kw) -> BatchRunner:
    kw.setdefault("executor", FakeHspice(results=req.sweep))
    return BatchRunner(req, circuit_root, **kw)


# =============================================================================
# Tests: success path
# =============================================================================
def test_run_success(make_request, circuit_root, tmp_path):
    req = make_request(sweep=3)
    fake = FakeHspice(results=3)
    runner = make_runner(req, circuit_root, executor=fake)

    assert runner.run() == req.group_id

    root = tmp_path / "base" / "inv" / "Vtn_0.1_0.2_0.3" / "Vtp_0.4_0.5_0.6"
    assert runner.sim_dir == root / str(runner.id)
    assert runner.sim_dir.is_dir()
    assert (root / "result").is_dir()

    netlist_dir = root / "netlist"
    assert (netlist_dir / "cnl").is_symlink()
    assert (netlist_dir / "netlist").is_symlink()

    spi = (netlist_dir / f"{runner.id}.spi").read_text(encoding="utf-8")
    assert ".include '/models/ptm.pm'" in spi
    assert BODY.strip() in spi
    assert "monte=3.000000E+0" in spi

    call = fake.calls[0]
    assert call["cwd"] == runner.sim_dir
    assert call["command"][-4:] == ["-i", str(runner.spi_file), "-o", "./hspice"]
    # 命令执行期间不抢占
    assert call["cancel"] is NEVER


def test_nested_target_sanitized(make_request, circuit_root):
    nested = circuit_root / "lib" / "nand" / "HSPICE" / "nominal" / "netlist"
    nested.mkdir(parents=True)
    (nested / "netlist").write_text(BODY)
    (nested / "cnl").mkdir()

    runner = make_runner(make_request(target_circuit="lib/nand"), circuit_root)
    runner.run()

    assert sanitize_circuit("lib/nand") == "lib_nand"
    assert runner.sim_dir.parent.parent.parent.name == "lib_nand"


def test_symlinks_idempotent_across_runs(make_request, circuit_root):
    req = make_request()
    first = make_runner(req, circuit_root)
    first.run()
    link = first.netlist_dir / "netlist"
    target = link.readlink()

    second = make_runner(req, circuit_root)
    second.run()

    assert second.netlist_dir == first.netlist_dir
    assert second.sim_dir != first.sim_dir
    assert link.readlink() == target


def test_run_with_feedback(make_request, circuit_root):
    req = make_request()
    console = Console(file=io.StringIO(), force_terminal=False)
    assert make_runner(req, circuit_root).run_with_feedback(console) == req.group_id


# =============================================================================
# Tests: failures
# =============================================================================
def test_non_zero_exit(make_request, circuit_root):
    runner = make_runner(make_request(), circuit_root, executor=FakeHspice(results=2, exit_code=2))

    with pytest.raises(NonZeroExit) as exc:
        runner.run()
    assert exc.value.exit_code == 2


@pytest.mark.parametrize("sweep, found", [(1, 0), (2, 1), (2, 3), (5, 4), (5, 6)])
def test_incomplete_results(make_request, circuit_root, sweep, found):
    runner = make_runner(make_request(sweep=sweep), circuit_root, executor=FakeHspice(results=found))

    with pytest.raises(IncompleteResults) as exc:
        runner.run()
    assert exc.value.expected == sweep
    assert exc.value.actual == found


def test_other_files_not_counted(make_request, circuit_root):
    class Noisy(FakeHspice):
        def run(self, command, on_line=None, cwd=None, cancel=NEVER):
            (Path(cwd) / "hspice.st0").write_text("")
            (Path(cwd) / "hspice.ic0").write_text("")
            return super().run(command, on_line, cwd, cancel)

    make_runner(make_request(sweep=2), circuit_root, executor=Noisy(results=2)).run()


def test_netlist_body_missing(make_request, circuit_root):
    (circuit_root / "inv" / "HSPICE" / "nominal" / "netlist" / "netlist").unlink()
    fake = FakeHspice(results=2)

    with pytest.raises(NotFound):
        make_runner(make_request(), circuit_root, executor=fake).run()
    assert fake.calls == []


def test_netlist_body_empty(make_request, circuit_root):
    (circuit_root / "inv" / "HSPICE" / "nominal" / "netlist" / "netlist").write_text("\n \n")

    with pytest.raises(EmptyContent):
        make_runner(make_request(), circuit_root).run()


def test_directory_creation_failure(make_request, circuit_root, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    with pytest.raises(EnvironmentSetupFailed):
        make_runner(make_request(base_directory=str(blocker)), circuit_root).run()


def test_missing_batch_fields(make_request, circuit_root):
    with pytest.raises(InvalidRequest) as exc:
        BatchRunner(make_request(model_file_path=None), circuit_root)
    assert exc.value.missing == ["model_file_path"]


def test_unexpected_error_wrapped(make_request, circuit_root):
    error = FileNotFoundError("hspice")
    runner = make_runner(make_request(), circuit_root, executor=FakeHspice(error=error))

    with pytest.raises(RunFailed) as exc:
        runner.run()
    assert exc.value.__cause__ is error
    assert "hspice" in exc.value.cause


# =============================================================================
# Tests: cancellation
# =============================================================================
def test_cancel_before_start(make_request, circuit_root):
    cancel = CancelToken()
    cancel.cancel()
    fake = FakeHspice(results=2)
    runner = make_runner(make_request(), circuit_root, cancel=cancel, executor=fake)

    with pytest.raises(Cancelled):
        runner.run()

    assert not runner.sim_dir.exists()
    assert fake.calls == []


def test_cancel_between_steps(make_request, circuit_root, monkeypatch):
    cancel = CancelToken()
    fake = FakeHspice(results=2)
    runner = make_runner(make_request(), circuit_root, cancel=cancel, executor=fake)

    original = runner.create_directories

    def create_then_cancel():
        original()
        cancel.cancel()

    monkeypatch.setattr(runner, "create_directories", create_then_cancel)

    with pytest.raises(Cancelled):
        runner.run()

    assert runner.sim_dir.is_dir()
    assert not (runner.netlist_dir / "cnl").exists()
    assert fake.calls == []
