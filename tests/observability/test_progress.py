#!filepath: tests/observability/test_progress.py
from unittest.mock import MagicMock

from mcspice.observability.progress import ProgressReporter, SweepProgress


def test_progress_no_crash():
    p = ProgressReporter(enabled=True)
    p.start("seed=1", 100, "sweeps")
    p.update("seed=1", 20, 100, "sweeps")
    p.done("seed=1")


def test_progress_disabled():
    p = ProgressReporter(enabled=False)
    # Should not crash, and should do nothing
    p.start("Task", 10)
    p.update("Task", 3, 10)
    p.done("Task")


def test_sweep_progress_ticks():
    reporter = MagicMock(spec=ProgressReporter)
    sp = SweepProgress(reporter, "seed=3", 2)

    sp.start()
    sp.tick(2)
    sp.tick(3)
    sp.done()

    reporter.start.assert_called_once_with("seed=3", 2, "sweeps")
    assert [c.args for c in reporter.update.call_args_list] == [
        ("seed=3", 1, 2, "sweeps"),
        ("seed=3", 2, 2, "sweeps"),
    ]
    reporter.done.assert_called_once_with("seed=3")


def test_sweep_progress_reporter_failure_ignored():
    reporter = MagicMock(spec=ProgressReporter)
    reporter.update.side_effect = RuntimeError("display gone")

    sp = SweepProgress(reporter, "seed=1", 5)
    sp.tick()
    sp.tick()

    assert sp.current == 2


def test_sweep_progress_without_reporter():
    sp = SweepProgress(None, "seed=1", 5)
    sp.start()
    sp.tick()
    sp.done()
    assert sp.current == 1
