# mcspice/config/simulator_config.py
from __future__ import annotations

import tempfile
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field


def _default_work_root() -> str:
    return str(Path(tempfile.gettempdir()) / "mcspice")


class SimulatorConfig(BaseModel):
    """
    仿真器相关配置

    - hspice_path / hspice_options: 请求未指定时的默认值
    - work_root: streaming profile 的工作根目录（每个 group 一个子目录）
    - circuit_root: batch profile 的共享电路资源根目录
    """

    hspice_path: str = "hspice"
    hspice_options: List[str] = Field(default_factory=list)
    work_root: str = Field(default_factory=_default_work_root)
    circuit_root: str = "~/circuits"

    # batch profile
    result_pattern: str = "*.tr0@*"
    link_targets: List[str] = Field(default_factory=lambda: ["cnl", "netlist"])
    netlist_file: str = "netlist"
    output_prefix: str = "./hspice"
