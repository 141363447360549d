# mcspice/request/fingerprint.py
from __future__ import annotations

import hashlib
from typing import Iterable

from mcspice.request.models import SimulationRequest


def fingerprint_fields(request: SimulationRequest) -> Iterable[str]:
    """
    Fields that identify a logical simulation definition, in hashing order.
    seed / sweep / simulator binary are deliberately absent.
    """
    yield str(request.transistors)
    yield str(request.gnd)
    yield str(request.vdd)
    yield str(request.temperature)
    yield request.netlist
    yield from request.ic_commands
    yield from request.includes


def fingerprint(request: SimulationRequest) -> str:
    """
    SHA-256 over the concatenated fields, as 64 uppercase hex chars.
    Dedup / cache key only.
    """
    payload = "".join(fingerprint_fields(request)).encode("utf-8")
    return hashlib.sha256(payload).hexdigest().upper()
