from .progress import ProgressReporter, SweepProgress

__all__ = ["ProgressReporter", "SweepProgress"]
