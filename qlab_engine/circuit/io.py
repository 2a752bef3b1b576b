"""Circuit description validation and conversion.

The description is the plain structure the editor hands over:

    {"numQubits": 2, "numCols": 5,
     "gates": [{"type": "H", "col": 0, "targets": [0], "controls": [], "params": {}}, ...]}

snake_case ``num_qubits`` / ``num_cols`` are accepted as well.

Endianness convention: LITTLE-ENDIAN.
  qubit 0 = bit 0 (LSB) of the state-vector index.
  |q_{n-1} ... q_1 q_0>  has index  q_0 + 2*q_1 + ... + 2^{n-1}*q_{n-1}.
"""
from __future__ import annotations

from typing import Any

from qlab_engine.circuit.model import Circuit, Gate
from qlab_engine.errors import CircuitFormatError, QLabError

ENDIANNESS = "little"

_TOP_KEYS = {
    "numQubits": "num_qubits", "num_qubits": "num_qubits",
    "numCols": "num_cols", "num_cols": "num_cols",
    "gates": "gates",
}
_GATE_KEYS = frozenset({"type", "col", "targets", "controls", "params", "id"})


def _is_int(v) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


# ── validation ──────────────────────────────────────────────────────
def validate_circuit_dict(d: dict[str, Any]) -> dict:
    """Validate and normalise a circuit description.  Raises CircuitFormatError on bad shape."""
    if not isinstance(d, dict):
        raise CircuitFormatError("circuit must be a dict")
    extra = set(d) - set(_TOP_KEYS)
    if extra:
        raise CircuitFormatError(f"unknown top-level keys: {extra}")
    norm: dict[str, Any] = {}
    for k, v in d.items():
        key = _TOP_KEYS[k]
        if key in norm:
            raise CircuitFormatError(f"duplicate key for {key}")
        norm[key] = v
    missing = {"num_qubits", "gates"} - set(norm)
    if missing:
        raise CircuitFormatError(f"missing required keys: {missing}")

    n = norm["num_qubits"]
    if not _is_int(n) or n < 1:
        raise CircuitFormatError(f"numQubits must be positive int, got {n!r}")
    cols = norm.get("num_cols", 0)
    if not _is_int(cols) or cols < 0:
        raise CircuitFormatError(f"numCols must be non-negative int, got {cols!r}")
    if not isinstance(norm["gates"], list):
        raise CircuitFormatError("gates must be a list")

    return {
        "num_qubits": n,
        "num_cols": cols,
        "gates": [_validate_gate(g, i) for i, g in enumerate(norm["gates"])],
    }


def _validate_gate(g: dict, idx: int) -> dict:
    tag = f"gate[{idx}]"
    if not isinstance(g, dict):
        raise CircuitFormatError(f"{tag}: must be a dict")
    if not {"type", "targets"} <= set(g):
        raise CircuitFormatError(f"{tag}: missing 'type' or 'targets'")
    if set(g) - _GATE_KEYS:
        raise CircuitFormatError(f"{tag}: unknown keys {set(g) - _GATE_KEYS}")

    for key in ("targets", "controls"):
        qs = g.get(key) or []
        if not isinstance(qs, (list, tuple)) or not all(_is_int(q) for q in qs):
            raise CircuitFormatError(f"{tag}: {key} must be list[int]")
    col = g.get("col", 0)
    if not _is_int(col) or col < 0:
        raise CircuitFormatError(f"{tag}: col must be non-negative int, got {col!r}")
    params = g.get("params") or {}
    if not isinstance(params, dict):
        raise CircuitFormatError(f"{tag}: params must be a dict")

    return {
        "type": g["type"],
        "col": col,
        "targets": list(g["targets"]),
        "controls": list(g.get("controls") or []),
        "params": dict(params),
    }


# ── conversion ──────────────────────────────────────────────────────
def circuit_from_dict(d: dict[str, Any]) -> Circuit:
    """Build a Circuit; gate-level errors keep their type and gain the gate index."""
    cd = validate_circuit_dict(d)
    circuit = Circuit(cd["num_qubits"], cd["num_cols"])
    for i, g in enumerate(cd["gates"]):
        try:
            gate = Gate.create(
                g["type"], g["targets"], g["controls"], g["params"], g["col"],
                num_qubits=cd["num_qubits"],
            )
        except QLabError as e:
            raise type(e)(f"gate[{i}]: {e}") from e
        circuit.add_gate(gate)
    return circuit


def circuit_to_dict(circuit: Circuit) -> dict:
    return {
        "numQubits": circuit.num_qubits,
        "numCols": circuit.num_cols,
        "gates": [g.to_dict() for g in circuit.gates],
    }


# ── levelization ────────────────────────────────────────────────────
def columns(circuit: Circuit) -> list[tuple[int, list[Gate]]]:
    """Non-empty columns in execution order: [(col, gates), ...]."""
    return [(c, circuit.get_gates_at_col(c)) for c in circuit.active_columns()]
