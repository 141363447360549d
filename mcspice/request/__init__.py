from .models import SimulationRequest, TimeRange, Transistor, TransistorPair
from .fingerprint import fingerprint
from .range_parameter import RangeParameter

__all__ = [
    "SimulationRequest",
    "TimeRange",
    "Transistor",
    "TransistorPair",
    "fingerprint",
    "RangeParameter",
]
