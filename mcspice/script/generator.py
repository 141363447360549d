# mcspice/script/generator.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import List, Optional

from mcspice import logs
from mcspice.request.models import SimulationRequest, Transistor
from mcspice.utils.errors import EmptyContent, NotFound
from mcspice.utils.filesystem import FileSystem

TOOL_NAME = "mcspice"
TIMESTAMP_PREFIX = "* Generated at:"


class ScriptProfile(str, Enum):
    """
    STREAMING: netlist included by path, plain decimals, .print output parsed from stdout
    BATCH:     netlist body inlined after the model include, exponential .tran fields,
               results written to per-sweep files
    """

    STREAMING = "streaming"
    BATCH = "batch"


def _agauss(t: Transistor) -> str:
    return f"AGAUSS({t.threshold},{t.sigma},{t.deviation})"


def _exp(value) -> str:
    # 1.000000E-9 style, fixed 6-digit mantissa
    return format(Decimal(value), ".6E")


class ScriptGenerator:
    """
    ScriptGenerator（单实现 / profile 开关）

    section 顺序固定：
      header → .param → .option → .temp → .IC → VDD/VGND
      → .include → .tran → output .option → .print → .end

    profile 只决定指令子集与数值格式。
    除 "* Generated at:" 行外，同一请求 + profile 的输出逐字节一致。
    """

    def render(
        self,
        request: SimulationRequest,
        profile: ScriptProfile = ScriptProfile.STREAMING,
        netlist_body: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> str:
        batch = profile == ScriptProfile.BATCH

        if batch:
            request.require_batch_fields()
            if netlist_body is None or not netlist_body.strip():
                raise EmptyContent("netlist body")
        elif not Path(request.netlist).exists():
            raise NotFound(request.netlist, f"netlist not found: {request.netlist}")

        now = now or datetime.now()
        lines: List[str] = []

        # 1. header
        lines.append("* Generated for: HSPICE")
        lines.append(f"* Generated by: {TOOL_NAME}")
        lines.append(f"* Target: {request.target_circuit if batch else request.netlist}")
        lines.append(f"{TIMESTAMP_PREFIX} {now.isoformat(timespec='seconds')}")

        # 2. statistical parameters
        lines.append(f".param vtn={_agauss(request.vtn)} vtp={_agauss(request.vtp)}")

        # 3. global options
        if batch:
            lines.append(".option MCBRIEF=2")
        lines.append(".option PARHIER=LOCAL")
        lines.append(f".option SEED={request.seed}")
        if batch:
            lines.append(".option ARTIST=2 PSF=2")

        # 4. temperature
        lines.append(f".temp {request.temperature}")

        # 5. initial conditions
        lines.append(f".IC {' '.join(request.ic_commands)}")

        # 6. supply / ground rails
        lines.append(f"VDD VDD! 0 {request.vdd}V")
        lines.append(f"VGND GND! 0 {request.gnd}V")

        # 7. includes
        if batch:
            lines.append(f".include '{request.model_file_path}'")
        for include in request.includes:
            lines.append(f".include '{include}'")
        if batch:
            lines.append(netlist_body.rstrip("\r\n"))
        else:
            lines.append(f".include '{request.netlist}'")

        # 8. transient analysis
        t = request.time
        if batch:
            lines.append(
                f".tran {_exp(t.step)} {_exp(t.stop)} start={_exp(t.start)} "
                f"sweep monte={_exp(request.sweep)} firstrun={_exp(request.sweep_start)}"
            )
        else:
            lines.append(
                f".tran {t.step} {t.stop} start={t.start} uic "
                f"sweep monte={request.sweep} firstrun={request.sweep_start}"
            )

        # 9. output control
        lines.append(".option opfile=1 split_dp=2" if batch else ".option opfile=0")

        # 10. probes
        lines.append(f".print {' '.join(f'V({s})' for s in request.signals)}")

        # 11. terminator
        lines.append(".end")

        return "\n".join(lines) + "\n"

    def generate(
        self,
        request: SimulationRequest,
        target: str | Path,
        profile: ScriptProfile = ScriptProfile.STREAMING,
        netlist_body: Optional[str] = None,
    ) -> Path:
        """
        渲染并写入 target（UTF-8 无 BOM，覆盖已有文件）。
        """
        text = self.render(request, profile, netlist_body)

        target = Path(target)
        FileSystem.safe_write_text(target, text)
        logs.debug(f"[ScriptGenerator] {profile.value} script written: {target}")
        return target
