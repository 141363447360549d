from .app_config import AppConfig
from .log_config import LogConfig
from .repository_config import RepositoryConfig
from .simulator_config import SimulatorConfig

__all__ = ["AppConfig", "LogConfig", "RepositoryConfig", "SimulatorConfig"]
