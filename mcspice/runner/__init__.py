from .cancel import CancelToken
from .process import CommandExecutor, SubprocessExecutor, build_command
from .streaming_runner import StreamingRunner
from .batch_runner import BatchRunner

__all__ = [
    "CancelToken",
    "CommandExecutor",
    "SubprocessExecutor",
    "build_command",
    "StreamingRunner",
    "BatchRunner",
]
