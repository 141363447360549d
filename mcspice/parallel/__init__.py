from .executor import ParallelExecutor

__all__ = ["ParallelExecutor"]
