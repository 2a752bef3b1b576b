"""Gate catalog.

One row per gate type: how many control and target wires it has, which
angle (if any) it requires, and which kernel applies it.  The table is
checked at import time to cover every ``GateType``, so a new type cannot be
added without a registry row.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from qlab_engine.errors import UnknownGateType


class GateType(str, Enum):
    X = "X"
    Y = "Y"
    Z = "Z"
    H = "H"
    M = "M"
    RZ = "RZ"
    CX = "CX"
    CZ = "CZ"
    CP = "CP"
    CRZ = "CRZ"
    SWAP = "SWAP"
    CSWAP = "CSWAP"


class GateKind(str, Enum):
    SINGLE = "single"  # 2x2 matrix on one target
    SWAP = "swap"      # exchange of two targets
    MEASURE = "measure"


@dataclass(frozen=True)
class GateSpec:
    controls: int
    targets: int
    param: Optional[str]
    kind: GateKind
    controllable: bool = True


GATE_REGISTRY: dict[GateType, GateSpec] = {
    GateType.X:     GateSpec(0, 1, None,    GateKind.SINGLE),
    GateType.Y:     GateSpec(0, 1, None,    GateKind.SINGLE),
    GateType.Z:     GateSpec(0, 1, None,    GateKind.SINGLE),
    GateType.H:     GateSpec(0, 1, None,    GateKind.SINGLE),
    GateType.M:     GateSpec(0, 1, None,    GateKind.MEASURE, controllable=False),
    GateType.RZ:    GateSpec(0, 1, "theta", GateKind.SINGLE),
    GateType.CX:    GateSpec(1, 1, None,    GateKind.SINGLE),
    GateType.CZ:    GateSpec(1, 1, None,    GateKind.SINGLE),
    GateType.CP:    GateSpec(1, 1, "phi",   GateKind.SINGLE),
    GateType.CRZ:   GateSpec(1, 1, "theta", GateKind.SINGLE),
    GateType.SWAP:  GateSpec(0, 2, None,    GateKind.SWAP),
    GateType.CSWAP: GateSpec(1, 2, None,    GateKind.SWAP),
}

_missing = set(GateType) - set(GATE_REGISTRY)
if _missing:
    raise RuntimeError(f"gate registry incomplete: {sorted(t.value for t in _missing)}")

_ALIASES = {"CNOT": GateType.CX}


def parse_gate_type(name) -> GateType:
    """'CNOT' → GateType.CX, 'H' → GateType.H.  Raises UnknownGateType."""
    if isinstance(name, GateType):
        return name
    if isinstance(name, str):
        key = name.strip().upper()
        if key in _ALIASES:
            return _ALIASES[key]
        try:
            return GateType(key)
        except ValueError:
            pass
    raise UnknownGateType(f"unknown gate type {name!r}")


def gate_spec(gate_type) -> GateSpec:
    gt = gate_type if isinstance(gate_type, GateType) else parse_gate_type(gate_type)
    spec = GATE_REGISTRY.get(gt)
    if spec is None:
        raise UnknownGateType(f"no registry entry for {gt!r}")
    return spec
