# mcspice/config/repository_config.py
from pydantic import BaseModel


class RepositoryConfig(BaseModel):
    root: str = "results"
    database: str = "default"
