"""Column-by-column statevector engine.

Architecture:
  - The caller's vector is copied once into a working array owned by the call.
  - Columns run in ascending order; gates within a column act on disjoint
    qubits, so their order inside the column does not matter.
  - After every non-empty column a Snapshot with a *copy* of the working
    vector is recorded.  Empty columns produce nothing.

Measurement policy: M gates never collapse the state.  In probability mode
the snapshot records (p0, p1) for each measured qubit; in shots mode the gate
is skipped and per-shot outcomes come from ``sampler.sample`` on the final
vector.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

import numpy as np

from qlab_engine.circuit.io import circuit_from_dict, columns
from qlab_engine.circuit.model import Circuit, Gate, InputState
from qlab_engine.circuit.registry import GATE_REGISTRY, GateKind
from qlab_engine.config import DEFAULT_CONFIG, EngineConfig
from qlab_engine.errors import (
    CircuitFormatError,
    ColumnConflict,
    DimensionMismatch,
)
from qlab_engine.kernel import gates as gmod
from qlab_engine.kernel.complex_math import from_pairs, to_pairs
from qlab_engine.kernel.statevector import apply_1q, apply_swap, qubit_probabilities
from qlab_engine.runner.sampler import sample

log = logging.getLogger(__name__)


class SimulationMode(str, Enum):
    PROBABILITY = "probability"
    SHOTS = "shots"


@dataclass(frozen=True)
class Snapshot:
    col: int
    vector: np.ndarray
    measurements: dict[int, tuple[float, float]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"col": self.col, "vector": to_pairs(self.vector)}


@dataclass(frozen=True)
class RunResult:
    trace: list[Snapshot]
    final_vector: np.ndarray
    counts: dict[str, int]
    shots: int


# ── helpers ──────────────────────────────────────────────────────────

def _as_circuit(circuit) -> Circuit:
    if isinstance(circuit, Circuit):
        return circuit
    if isinstance(circuit, dict):
        return circuit_from_dict(circuit)
    raise TypeError(f"expected Circuit or circuit dict, got {type(circuit).__name__}")


def _initial_vector(input_state, n: int) -> np.ndarray:
    if input_state is None:
        psi = np.zeros(1 << n, dtype=np.complex128)
        psi[0] = 1.0
        return psi
    if isinstance(input_state, InputState):
        psi = input_state.to_vector()
    else:
        psi = from_pairs(input_state)
    if len(psi) != 1 << n:
        raise DimensionMismatch(f"input vector length {len(psi)} != 2^{n} = {1 << n}")
    return psi


def _check_circuit(circuit: Circuit, config: EngineConfig) -> None:
    """Reject anything the kernels would mis-simulate, before touching the state.

    Unknown gate types never reach this point: ``Gate`` parses its type on
    construction and raises ``UnknownGateType`` there.
    """
    n = circuit.num_qubits
    if (1 << n) > config.max_dimension:
        raise DimensionMismatch(
            f"{n} qubits exceeds the dense-vector limit of {config.max_qubits}"
        )
    for g in circuit.gates:
        g.validate(n)
        if g.col >= circuit.num_cols:
            raise CircuitFormatError(
                f"gate {g.id}: column {g.col} outside circuit width {circuit.num_cols}"
            )
    for col in circuit.active_columns():
        clash = circuit.column_conflicts(col)
        if clash:
            raise ColumnConflict(f"column {col}: qubits {sorted(clash)} used by more than one gate")


def apply_gate(psi: np.ndarray, gate: Gate) -> None:
    """Apply one unitary gate in place.  M gates are not unitary; see simulate()."""
    kind = GATE_REGISTRY[gate.type].kind
    if kind is GateKind.SINGLE:
        U = gmod.gate_matrix(gate.type.value, gate.angle)
        apply_1q(psi, gate.targets[0], U, gate.controls)
    elif kind is GateKind.SWAP:
        apply_swap(psi, gate.targets[0], gate.targets[1], gate.controls)
    else:
        raise ValueError(f"{gate.type.value} is not a unitary gate")


# ── public API ───────────────────────────────────────────────────────

def simulate(
    circuit: Union[Circuit, dict],
    input_state: Union[InputState, np.ndarray, list, None] = None,
    mode: Union[SimulationMode, str, None] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[Snapshot]:
    """Run ``circuit`` on ``input_state`` and return one Snapshot per non-empty column."""
    mode = SimulationMode(mode if mode is not None else config.default_mode)
    circ = _as_circuit(circuit)
    _check_circuit(circ, config)
    psi = _initial_vector(input_state, circ.num_qubits)

    log.debug(
        "simulate: %d qubits, %d cols, %d gates, mode=%s",
        circ.num_qubits, circ.num_cols, len(circ), mode.value,
    )
    trace: list[Snapshot] = []
    for col, gates in columns(circ):
        measurements: dict[int, tuple[float, float]] = {}
        for g in gates:
            if g.kind is GateKind.MEASURE:
                if mode is SimulationMode.PROBABILITY:
                    measurements[g.targets[0]] = qubit_probabilities(psi, g.targets[0])
                continue
            apply_gate(psi, g)
        trace.append(Snapshot(col, psi.copy(), measurements))
    log.debug("simulate: %d snapshots", len(trace))
    return trace


def final_state(trace: list[Snapshot], circuit, input_state=None) -> np.ndarray:
    """Last snapshot's vector, or the input vector when no column held a gate."""
    if trace:
        return trace[-1].vector.copy()
    return _initial_vector(input_state, _as_circuit(circuit).num_qubits)


def run(
    circuit: Union[Circuit, dict],
    input_state: Union[InputState, np.ndarray, list, None] = None,
    shots: Optional[int] = None,
    seed=None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> RunResult:
    """Shots-mode trace plus a histogram sampled once from the final vector."""
    circ = _as_circuit(circuit)
    shots = config.default_shots if shots is None else shots
    trace = simulate(circ, input_state, SimulationMode.SHOTS, config=config)
    final = final_state(trace, circ, input_state)
    counts = sample(final, shots, seed, config=config)
    log.debug("run: %d shots over %d outcomes", shots, len(counts))
    return RunResult(trace=trace, final_vector=final, counts=counts, shots=shots)
