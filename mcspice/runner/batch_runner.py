# mcspice/runner/batch_runner.py
from __future__ import annotations

import os
import shlex
import uuid
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console

from mcspice import logs
from mcspice.request.models import SimulationRequest
from mcspice.runner.cancel import NEVER, CancelToken
from mcspice.runner.process import CommandExecutor, SubprocessExecutor, build_command
from mcspice.script.generator import ScriptGenerator, ScriptProfile
from mcspice.utils.errors import (
    EmptyContent,
    EnvironmentSetupFailed,
    IncompleteResults,
    NonZeroExit,
    NotFound,
    RunFailed,
    SimulationError,
)
from mcspice.utils.filesystem import FileSystem

RESULT_PATTERN = "*.tr0@*"
LINK_TARGETS = ("cnl", "netlist")
NETLIST_FILE = "netlist"
OUTPUT_PREFIX = "./hspice"


def sanitize_circuit(name: str) -> str:
    return name.replace("/", "_")


class BatchRunner:
    """
    BatchRunner（batch profile）

    目录结构：
        <base>/<circuit_sanitized>/Vtn_<vtn>/Vtp_<vtp>/
            ├── <run_id>/    仿真目录（cwd，结果文件 *.tr0@*）
            ├── result/
            └── netlist/     cnl / netlist 链接 + <run_id>.spi

    步骤（每步之间检查 cancel，命令执行期间不抢占）：
        mkdir → symlink → 生成脚本 → 执行（非 0 退出码报错）→ 校验结果文件数

    与 streaming profile 不同：这里退出码必须为 0。
    """

    def __init__(
        self,
        request: SimulationRequest,
        circuit_root: str | Path,
        cancel: CancelToken = NEVER,
        executor: Optional[CommandExecutor] = None,
        generator: Optional[ScriptGenerator] = None,
        result_pattern: str = RESULT_PATTERN,
        link_targets: Sequence[str] = LINK_TARGETS,
        netlist_file: str = NETLIST_FILE,
        output_prefix: str = OUTPUT_PREFIX,
    ):
        request.require_batch_fields()

        self.request = request
        self.cancel = cancel
        self.executor = executor or SubprocessExecutor(merge_stderr=True)
        self.generator = generator or ScriptGenerator()
        self.result_pattern = result_pattern
        self.link_targets = tuple(link_targets)
        self.netlist_file = netlist_file
        self.output_prefix = output_prefix
        self.id = uuid.uuid4()

        circuit_root = Path(os.path.expandvars(os.path.expanduser(str(circuit_root))))

        working_root = (
            Path(request.base_directory)
            / sanitize_circuit(request.target_circuit)
            / f"Vtn_{request.vtn}"
            / f"Vtp_{request.vtp}"
        )
        self.sim_dir = working_root / str(self.id)
        self.result_dir = working_root / "result"
        self.netlist_dir = working_root / "netlist"
        self.circuit_dir = circuit_root / request.target_circuit / "HSPICE" / "nominal" / "netlist"
        self.spi_file = self.netlist_dir / f"{self.id}.spi"

    # --------------------------------------------------
    @property
    def command(self) -> List[str]:
        return build_command(self.request, self.spi_file, self.output_prefix)

    # --------------------------------------------------
    def run(self) -> uuid.UUID:
        """
        同步执行，返回 group_id。

        领域错误原样抛出；其他异常只包装一次为 RunFailed。
        """
        try:
            self.build_environment()
            self.cancel.raise_if_cancelled()

            self.execute()
            self.check_result_files()
        except SimulationError:
            raise
        except Exception as e:
            logs.exception(f"[BatchRunner] run={self.id} unexpected failure")
            raise RunFailed(str(e)) from e

        logs.info(f"[BatchRunner] done group={self.request.group_id} run={self.id}")
        return self.request.group_id

    def run_with_feedback(self, console: Optional[Console] = None) -> uuid.UUID:
        """
        与 run 相同，只额外显示一个 spinner。
        """
        console = console or Console()
        with console.status("simulating..."):
            return self.run()

    # --------------------------------------------------
    # steps
    # --------------------------------------------------
    def build_environment(self) -> None:
        self.create_directories()
        self.create_symbolic_links()
        self.create_spi_script()

    def create_directories(self) -> None:
        for d in (self.sim_dir, self.result_dir, self.netlist_dir):
            self.cancel.raise_if_cancelled()
            try:
                FileSystem.ensure_dir(d)
            except OSError as e:
                raise EnvironmentSetupFailed(f"Failed create directory: {d} ({e})") from e

    def create_symbolic_links(self) -> None:
        for target in self.link_targets:
            self.cancel.raise_if_cancelled()

            source = self.circuit_dir / target
            link = self.netlist_dir / target
            try:
                FileSystem.ensure_symlink(source, link)
            except OSError as e:
                raise EnvironmentSetupFailed(
                    f"Failed create symbolic link: {source} ==> {link} ({e})"
                ) from e

    def create_spi_script(self) -> None:
        body_file = self.netlist_dir / self.netlist_file
        if not body_file.is_file():
            raise NotFound(body_file, f"netlist file not found: {body_file}")

        body = FileSystem.read_text(body_file)
        if not body.strip():
            raise EmptyContent(body_file)

        self.generator.generate(
            self.request, self.spi_file, ScriptProfile.BATCH, netlist_body=body
        )

    def execute(self) -> None:
        command = self.command
        logs.info(f"[BatchRunner] exec run={self.id}: {shlex.join(command)}")

        exit_code = self.executor.run(
            command,
            on_line=lambda line: logs.debug(f"[hspice] {line.rstrip()}"),
            cwd=self.sim_dir,
        )
        if exit_code != 0:
            raise NonZeroExit(exit_code, shlex.join(command))

    def check_result_files(self) -> None:
        found = len(FileSystem.glob_files(self.sim_dir, self.result_pattern))
        if found != self.request.sweep:
            raise IncompleteResults(self.request.sweep, found, self.result_pattern)
