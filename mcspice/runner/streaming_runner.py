# mcspice/runner/streaming_runner.py
from __future__ import annotations

import uuid
from pathlib import Path
from typing import List, Optional

from mcspice import logs
from mcspice.engines.output_parser_engine import OutputParserEngine
from mcspice.observability.progress import ProgressReporter, SweepProgress
from mcspice.repository.record import ResultRecord
from mcspice.request.models import SimulationRequest
from mcspice.runner.cancel import NEVER, CancelToken
from mcspice.runner.process import CommandExecutor, SubprocessExecutor, build_command
from mcspice.script.generator import ScriptGenerator, ScriptProfile
from mcspice.utils.errors import EnvironmentSetupFailed, RunFailed, SimulationError
from mcspice.utils.filesystem import FileSystem


class StreamingRunner:
    """
    StreamingRunner（streaming profile）

    流程：
      1. <work_root>/<group_id>/<uuid>.spi 写脚本
      2. cwd=<group dir> 启动仿真器，stdout 逐行进入 OutputParserEngine
      3. EOF 即完成；退出码不检查
      4. 删除临时脚本（失败忽略），返回全部 ResultRecord

    每个 run 只拥有自己的脚本与子进程，不同 group_id 的 run 可并发。
    """

    def __init__(
        self,
        work_root: str | Path,
        executor: Optional[CommandExecutor] = None,
        generator: Optional[ScriptGenerator] = None,
    ):
        self.work_root = Path(work_root)
        self.executor = executor or SubprocessExecutor()
        self.generator = generator or ScriptGenerator()

    def group_dir(self, request: SimulationRequest) -> Path:
        return self.work_root / str(request.group_id)

    def run(
        self,
        request: SimulationRequest,
        cancel: CancelToken = NEVER,
        progress: Optional[ProgressReporter] = None,
    ) -> List[ResultRecord]:
        try:
            return self._run(request, cancel, progress)
        except SimulationError:
            raise
        except Exception as e:
            logs.exception(f"[StreamingRunner] group={request.group_id} unexpected failure")
            raise RunFailed(str(e)) from e

    def _run(
        self,
        request: SimulationRequest,
        cancel: CancelToken,
        progress: Optional[ProgressReporter],
    ) -> List[ResultRecord]:
        cancel.raise_if_cancelled()

        group_dir = self.group_dir(request)
        try:
            FileSystem.ensure_dir(group_dir)
        except OSError as e:
            raise EnvironmentSetupFailed(f"Failed create directory: {group_dir} ({e})") from e

        script = group_dir / f"{uuid.uuid4()}.spi"
        self.generator.generate(request, script, ScriptProfile.STREAMING)

        ticker = SweepProgress(progress, f"seed={request.seed}", request.sweep)
        parser = OutputParserEngine(
            request.signals,
            seed=request.seed,
            sweep_start=request.sweep_start,
            on_sweep=ticker.tick,
        )
        records: List[ResultRecord] = []

        def on_line(line: str) -> None:
            record = parser.process(line)
            if record is not None:
                records.append(record)

        command = build_command(request, script.name)
        logs.info(
            f"[StreamingRunner] start group={request.group_id} seed={request.seed} "
            f"sweep={request.sweep_start}+{request.sweep}"
        )

        ticker.start()
        try:
            # exit code is not inspected in this profile; EOF means done
            self.executor.run(command, on_line=on_line, cwd=group_dir, cancel=cancel)
        finally:
            FileSystem.remove_quietly(script)

        ticker.done()
        logs.info(
            f"[StreamingRunner] done group={request.group_id} seed={request.seed} "
            f"records={len(records)} sweeps={parser.sweeps_done}"
        )
        return records
