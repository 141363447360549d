# mcspice/request/models.py
from __future__ import annotations

import json
import uuid
from decimal import Decimal
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from mcspice.utils.errors import InvalidRequest


class Transistor(BaseModel):
    """
    Statistical model of a transistor threshold voltage.
    Rendered as AGAUSS(threshold, sigma, deviation).
    """

    model_config = ConfigDict(frozen=True)

    threshold: Decimal
    sigma: Decimal
    deviation: Decimal

    def __str__(self) -> str:
        return f"{self.threshold}_{self.sigma}_{self.deviation}"


class TransistorPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    vtn: Transistor
    vtp: Transistor

    def __str__(self) -> str:
        return f"vtn={self.vtn},vtp={self.vtp}"


class TimeRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Decimal
    step: Decimal
    stop: Decimal

    @model_validator(mode="after")
    def _check_range(self) -> "TimeRange":
        if self.step <= 0:
            raise ValueError("time.step must be positive")
        if self.stop < self.start:
            raise ValueError("time.stop must not precede time.start")
        return self


class SimulationRequest(BaseModel):
    """
    SimulationRequest（冻结 / 构造即校验）

    语义：
      - 一次 Monte Carlo 仿真的完整参数
      - 构造后不可变；缺失/非法字段在构造时一次性报出（ValidationError）
      - batch profile 额外需要 base_directory / target_circuit / model_file_path
    """

    model_config = ConfigDict(frozen=True, extra="forbid", protected_namespaces=())

    group_id: uuid.UUID = Field(default_factory=uuid.uuid4)

    # simulator
    hspice_path: str = Field(..., min_length=1)
    hspice_options: Tuple[str, ...] = ()

    # monte carlo
    seed: int = Field(..., ge=1)
    sweep: int = Field(..., ge=1)
    sweep_start: int = Field(1, ge=1)

    # circuit condition
    temperature: Decimal
    transistors: TransistorPair
    time: TimeRange
    ic_commands: Tuple[str, ...] = ()
    netlist: str = Field(..., min_length=1)
    includes: Tuple[str, ...] = ()
    vdd: Decimal
    gnd: Decimal

    # output
    signals: Tuple[str, ...] = Field(..., min_length=1)
    result_file: str = ""
    plot_time_list: Optional[Tuple[Decimal, ...]] = None

    # batch profile only
    base_directory: Optional[str] = None
    target_circuit: Optional[str] = None
    model_file_path: Optional[str] = None

    # --------------------------------------------------
    # batch profile
    # --------------------------------------------------
    BATCH_FIELDS: ClassVar[Tuple[str, ...]] = ("base_directory", "target_circuit", "model_file_path")

    def require_batch_fields(self) -> None:
        missing = [name for name in self.BATCH_FIELDS if not getattr(self, name)]
        if missing:
            raise InvalidRequest(missing)

    @property
    def vtn(self) -> Transistor:
        return self.transistors.vtn

    @property
    def vtp(self) -> Transistor:
        return self.transistors.vtp

    # --------------------------------------------------
    # derived copies
    # --------------------------------------------------
    def with_seed(self, seed: int) -> "SimulationRequest":
        """
        同一定义换一个 seed（fan-out 用）。走完整校验。
        """
        data = self.model_dump()
        data["seed"] = seed
        return SimulationRequest(**data)

    # --------------------------------------------------
    # (de)serialization
    # --------------------------------------------------
    @classmethod
    def from_json(cls, text: str) -> "SimulationRequest":
        return cls.model_validate_json(text)

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], defaults: Optional[Dict[str, Any]] = None
    ) -> "SimulationRequest":
        merged: Dict[str, Any] = dict(defaults or {})
        merged.update(data)
        return cls(**merged)

    @classmethod
    def from_file(
        cls, path: str | Path, defaults: Optional[Dict[str, Any]] = None
    ) -> "SimulationRequest":
        """
        读取 JSON / YAML 请求文件，defaults 在文件字段之下合并。
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Request file not found: {path}")

        text = path.read_text(encoding="utf-8")
        if path.suffix == ".json":
            raw = json.loads(text)
        else:
            raw = yaml.safe_load(text)

        if not isinstance(raw, dict):
            raise ValueError(f"Request file must hold a mapping: {path}")

        return cls.from_dict(raw, defaults)

