#!filepath: mcspice/config/app_config.py
import os
from typing import Any, Dict

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .log_config import LogConfig
from .repository_config import RepositoryConfig
from .simulator_config import SimulatorConfig


def project_root() -> str:
    """
    返回项目根目录（基于当前文件位置推导）:
    mcspice/config/app_config.py → mcspice/config → mcspice → project_root
    """
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "../../"))


class AppConfig(BaseModel):
    log: LogConfig = Field(default_factory=LogConfig)
    simulator: SimulatorConfig = Field(default_factory=SimulatorConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)

    # 合并到每个请求文件之下（请求文件中的字段优先）
    request_defaults: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def load(cls, path: str | None = None) -> "AppConfig":
        """
        加载 YAML 配置 + .env
        - 默认使用 <project_root>/mcspice/config/base.yml
        - JSON 文档同样可读（YAML 是 JSON 的超集）
        - 不依赖当前工作目录
        """
        root = project_root()

        # 1) 先加载 .env（在项目根目录下）
        load_dotenv(os.path.join(root, ".env"))

        # 2) 决定配置文件路径
        if path is None:
            path = os.path.join(root, "mcspice/config/base.yml")

        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")

        # 3) 读取 YAML
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError(f"Config file must hold a mapping: {path}")

        # 4) 环境变量覆盖
        simulator = dict(raw.get("simulator") or {})
        if os.getenv("MCSPICE_HSPICE_PATH"):
            simulator["hspice_path"] = os.getenv("MCSPICE_HSPICE_PATH")
        if os.getenv("MCSPICE_WORK_ROOT"):
            simulator["work_root"] = os.getenv("MCSPICE_WORK_ROOT")
        raw["simulator"] = simulator

        return cls(**raw)
