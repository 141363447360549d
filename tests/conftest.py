# tests/conftest.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict

import pytest
from loguru import logger

from mcspice.request.models import SimulationRequest


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)  # or sys.stderr
    yield


@pytest.fixture
def netlist(tmp_path: Path) -> Path:
    p = tmp_path / "circuit" / "inv.sp"
    p.parent.mkdir(parents=True)
    p.write_text("* inverter\nM1 out in GND! GND! nch\nM2 out in VDD! VDD! pch\n", encoding="utf-8")
    return p


@pytest.fixture
def request_data(tmp_path: Path, netlist: Path) -> Dict[str, Any]:
    return {
        "hspice_path": "/opt/hspice/bin/hspice",
        "hspice_options": ["-mt 4", "-hpp"],
        "seed": 3,
        "sweep": 2,
        "sweep_start": 1,
        "temperature": "25",
        "transistors": {
            "vtn": {"threshold": "0.1", "sigma": "0.2", "deviation": "0.3"},
            "vtp": {"threshold": "0.4", "sigma": "0.5", "deviation": "0.6"},
        },
        "time": {"start": "0", "step": "1e-11", "stop": "2e-8"},
        "ic_commands": ["V(in)=0", "V(out)=0.8"],
        "netlist": str(netlist),
        "includes": [str(tmp_path / "common.inc")],
        "vdd": "0.8",
        "gnd": "0",
        "signals": ["A", "B"],
        "result_file": str(tmp_path / "result.csv"),
        "base_directory": str(tmp_path / "base"),
        "target_circuit": "inv",
        "model_file_path": "/models/ptm.pm",
    }


@pytest.fixture
def make_request(request_data) -> Callable[..., SimulationRequest]:
    def _make(**overrides) -> SimulationRequest:
        data = dict(request_data)
        data.update(overrides)
        return SimulationRequest(**data)

    return _make
