# mcspice/runner/process.py
from __future__ import annotations

import shlex
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence

from mcspice import logs
from mcspice.request.models import SimulationRequest
from mcspice.runner.cancel import NEVER, CancelToken

LineCallback = Callable[[str], None]


def build_command(
    request: SimulationRequest,
    script: str | Path,
    output_prefix: Optional[str] = None,
) -> List[str]:
    """
    <binary> <options...> -i <script>[ -o <output-prefix>]

    An option such as "-mt 4" is split the way a shell would split it.
    """
    cmd = [request.hspice_path]
    for opt in request.hspice_options:
        cmd.extend(shlex.split(opt))
    cmd.extend(["-i", str(script)])
    if output_prefix:
        cmd.extend(["-o", output_prefix])
    return cmd


class CommandExecutor(Protocol):
    """
    进程执行能力（可替换为录制回放实现）
    """

    def run(
        self,
        command: Sequence[str],
        on_line: Optional[LineCallback] = None,
        cwd: str | Path | None = None,
        cancel: CancelToken = NEVER,
    ) -> int:
        ...


class SubprocessExecutor:
    """
    SubprocessExecutor（一次 run 一个子进程）

    职责：
      - 启动子进程，stdout 按行回调
      - 每行前检查 cancel；取消 / 异常时保证子进程被 terminate + wait
      - 返回退出码（是否检查由调用方决定）
    """

    def __init__(
        self,
        merge_stderr: bool = False,
        terminate_timeout: float = 5.0,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ):
        self.merge_stderr = merge_stderr
        self.terminate_timeout = terminate_timeout
        self._popen = popen

    def run(
        self,
        command: Sequence[str],
        on_line: Optional[LineCallback] = None,
        cwd: str | Path | None = None,
        cancel: CancelToken = NEVER,
    ) -> int:
        logs.debug(f"[SubprocessExecutor] exec: {shlex.join(command)} (cwd={cwd})")

        proc = self._popen(
            list(command),
            cwd=str(cwd) if cwd is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if self.merge_stderr else subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
        )

        try:
            while True:
                cancel.raise_if_cancelled()
                line = proc.stdout.readline()
                if not line:
                    break
                if on_line is not None:
                    on_line(line)

            return proc.wait()
        except BaseException:
            self._terminate(proc)
            raise
        finally:
            if proc.stdout is not None:
                proc.stdout.close()

    def _terminate(self, proc: subprocess.Popen) -> None:
        if proc.poll() is not None:
            return

        logs.warning(f"[SubprocessExecutor] terminating pid={proc.pid}")
        proc.terminate()
        try:
            proc.wait(timeout=self.terminate_timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
