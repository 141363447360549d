#!filepath: mcspice/observability/progress.py
from mcspice import logs


class ProgressReporter:
    """
    最轻量进度系统（不依赖 Rich/TQDM，不影响 pytest）

    fire-and-forget：任何异常都只记日志，不影响 run。
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def start(self, task: str, total: int, unit: str = ""):
        if not self.enabled:
            return
        logs.info(f"[Progress] {task} started total={total} {unit}")

    def update(self, task: str, current: int, total: int, unit: str = ""):
        if not self.enabled:
            return
        logs.info(f"[Progress] {task}: {current}/{total} {unit}")

    def done(self, task: str):
        if not self.enabled:
            return
        logs.info(f"[Progress] {task} done")


class SweepProgress:
    """
    把 ProgressReporter 绑定到一次 run：每个 sweep 结束 tick 一次。
    """

    def __init__(self, reporter: ProgressReporter | None, task: str, total: int):
        self.reporter = reporter
        self.task = task
        self.total = total
        self.current = 0

    def _safe(self, method: str, *args):
        if self.reporter is None:
            return
        try:
            getattr(self.reporter, method)(*args)
        except Exception as e:
            logs.debug(f"[Progress] reporter.{method} failed (ignored): {e}")

    def start(self):
        self._safe("start", self.task, self.total, "sweeps")

    def tick(self, *_):
        self.current += 1
        self._safe("update", self.task, self.current, self.total, "sweeps")

    def done(self):
        self._safe("done", self.task)
