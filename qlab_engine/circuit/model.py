"""
Circuit model: gates, circuits and the input state.

Gates are immutable values; a Circuit owns an insertion-ordered collection
of them keyed by id.  Execution order is driven by ``col``, never by
insertion order.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

import numpy as np

from qlab_engine.circuit.registry import GateKind, GateType, gate_spec, parse_gate_type
from qlab_engine.config import DEFAULT_CONFIG, EngineConfig
from qlab_engine.errors import (
    CircuitFormatError,
    DimensionMismatch,
    GateShapeError,
    InvalidQubitIndex,
    MissingParameter,
    QubitConflict,
)
from qlab_engine.kernel.complex_math import from_pairs, scale, to_pairs
from qlab_engine.kernel.statevector import norm_squared

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Gate:
    type: GateType
    targets: tuple[int, ...]
    controls: frozenset[int] = frozenset()
    angle: Optional[float] = None
    col: int = 0
    id: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "type", parse_gate_type(self.type))
        object.__setattr__(self, "targets", tuple(self.targets))
        object.__setattr__(self, "controls", frozenset(self.controls))

    @classmethod
    def create(
        cls,
        gate_type,
        targets: Iterable[int],
        controls: Iterable[int] = (),
        params: Optional[dict] = None,
        col: int = 0,
        num_qubits: Optional[int] = None,
    ) -> "Gate":
        """Build and validate a gate.

        ``params`` is the editor's parameter bag, e.g. ``{"theta": 0.5}``; only
        the key named by the registry is read.  When ``num_qubits`` is given
        every index is range-checked against it.
        """
        gt = parse_gate_type(gate_type)
        spec = gate_spec(gt)
        params = dict(params or {})

        angle = None
        if spec.param is not None:
            if params.get(spec.param) is None:
                raise MissingParameter(f"{gt.value} requires param '{spec.param}'")
            angle = params.pop(spec.param)
        if params:
            raise GateShapeError(f"{gt.value}: unexpected params {sorted(params)}")

        gate = cls(type=gt, targets=targets, controls=controls, angle=angle, col=col)
        gate.validate(num_qubits)
        return gate

    def validate(self, num_qubits: Optional[int] = None) -> None:
        spec = gate_spec(self.type)
        for q in (*self.targets, *self.controls):
            if not isinstance(q, (int, np.integer)) or isinstance(q, bool):
                raise InvalidQubitIndex(f"{self.type.value}: qubit index {q!r} is not an int")
            if q < 0 or (num_qubits is not None and q >= num_qubits):
                bound = f"[0, {num_qubits})" if num_qubits is not None else "[0, n)"
                raise InvalidQubitIndex(f"{self.type.value}: qubit {q} out of range {bound}")
        if not isinstance(self.col, (int, np.integer)) or self.col < 0:
            raise CircuitFormatError(f"{self.type.value}: column {self.col!r} must be a non-negative int")
        if len(set(self.targets)) != len(self.targets):
            raise QubitConflict(f"{self.type.value}: repeated target in {list(self.targets)}")
        overlap = set(self.targets) & self.controls
        if overlap:
            raise QubitConflict(f"{self.type.value}: qubits {sorted(overlap)} are both target and control")
        if len(self.targets) != spec.targets:
            raise GateShapeError(
                f"{self.type.value} needs {spec.targets} target(s), got {len(self.targets)}"
            )
        if self.controls and not spec.controllable:
            raise GateShapeError(f"{self.type.value} cannot take controls")
        if spec.param is not None:
            if self.angle is None:
                raise MissingParameter(f"{self.type.value} requires param '{spec.param}'")
            if not isinstance(self.angle, (int, float, np.floating, np.integer)) or not math.isfinite(self.angle):
                raise GateShapeError(f"{self.type.value}: param '{spec.param}' must be a finite real")

    @property
    def kind(self) -> GateKind:
        return gate_spec(self.type).kind

    @property
    def qubits(self) -> frozenset[int]:
        return frozenset(self.targets) | self.controls

    @property
    def params(self) -> dict:
        name = gate_spec(self.type).param
        return {} if name is None else {name: self.angle}

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "col": self.col,
            "targets": list(self.targets),
            "controls": sorted(self.controls),
            "params": self.params,
        }


class Circuit:
    """Gate collection for ``num_qubits`` wires over ``num_cols`` columns."""

    def __init__(self, num_qubits: int, num_cols: int = 0):
        if not isinstance(num_qubits, int) or num_qubits < 1:
            raise ValueError(f"num_qubits must be positive int, got {num_qubits!r}")
        if not isinstance(num_cols, int) or num_cols < 0:
            raise ValueError(f"num_cols must be non-negative int, got {num_cols!r}")
        self.num_qubits = num_qubits
        self.num_cols = num_cols
        self._gates: dict[int, Gate] = {}
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._gates)

    def __repr__(self) -> str:
        return f"Circuit(num_qubits={self.num_qubits}, num_cols={self.num_cols}, gates={len(self)})"

    @property
    def gates(self) -> list[Gate]:
        return list(self._gates.values())

    def add_gate(self, gate: Gate) -> Gate:
        """Validate, assign the next id, store.  Returns the stored gate."""
        gate.validate(self.num_qubits)
        stored = replace(gate, id=self._next_id)
        self._next_id += 1
        self._gates[stored.id] = stored
        self.num_cols = max(self.num_cols, stored.col + 1)
        return stored

    def place(self, gate_type, targets, controls=(), params=None, col: int = 0) -> Gate:
        """Shorthand for ``add_gate(Gate.create(...))``."""
        return self.add_gate(
            Gate.create(gate_type, targets, controls, params, col, num_qubits=self.num_qubits)
        )

    def remove_gate(self, gate_id: int) -> None:
        self._gates.pop(gate_id, None)

    def get_gates_at_col(self, col: int) -> list[Gate]:
        return [g for g in self._gates.values() if g.col == col]

    def active_columns(self) -> list[int]:
        return sorted({g.col for g in self._gates.values()})

    def column_conflicts(self, col: int) -> set[int]:
        """Qubits touched by more than one gate in ``col``."""
        seen: set[int] = set()
        clash: set[int] = set()
        for g in self.get_gates_at_col(col):
            clash |= seen & g.qubits
            seen |= g.qubits
        return clash

    def copy(self) -> "Circuit":
        other = Circuit(self.num_qubits, self.num_cols)
        other._gates = dict(self._gates)
        other._next_id = self._next_id
        return other


# ── input state ─────────────────────────────────────────────────────
_S2 = 1.0 / np.sqrt(2.0)

PRESETS = {
    "0": np.array([1, 0], dtype=np.complex128),
    "1": np.array([0, 1], dtype=np.complex128),
    "+": np.array([_S2, _S2], dtype=np.complex128),
    "-": np.array([_S2, -_S2], dtype=np.complex128),
}


def _preset_key(label: str) -> str:
    """'|+⟩' → '+',  '1' → '1'."""
    return label.strip().lstrip("|").rstrip("⟩>").strip()


class InputState:
    """Initial amplitude vector for a circuit of ``num_qubits`` wires.

    Defaults to |0…0⟩.  ``set_vector`` replaces the amplitudes wholesale and
    never renormalises; use ``norm_squared`` / ``normalized`` to check or fix.
    """

    def __init__(self, num_qubits: int, vector=None, config: EngineConfig = DEFAULT_CONFIG):
        if not isinstance(num_qubits, int) or num_qubits < 1:
            raise ValueError(f"num_qubits must be positive int, got {num_qubits!r}")
        self.num_qubits = num_qubits
        self.config = config
        self._vector = np.zeros(1 << num_qubits, dtype=np.complex128)
        self._vector[0] = 1.0
        if vector is not None:
            self.set_vector(vector)

    @classmethod
    def from_presets(cls, presets: Iterable[str], config: EngineConfig = DEFAULT_CONFIG) -> "InputState":
        """Product state from per-qubit labels, qubit 0 first: ['|1⟩', '|0⟩'] → |01⟩."""
        labels = list(presets)
        if not labels:
            raise ValueError("need at least one qubit preset")
        vec = None
        for label in labels:
            key = _preset_key(label)
            if key not in PRESETS:
                raise ValueError(f"unknown qubit preset {label!r}; expected one of {sorted(PRESETS)}")
            vec = PRESETS[key] if vec is None else np.kron(PRESETS[key], vec)
        return cls(len(labels), vec, config=config)

    def to_vector(self) -> np.ndarray:
        return self._vector.copy()

    def to_pairs(self) -> list[tuple[float, float]]:
        return to_pairs(self._vector)

    def set_vector(self, vec) -> None:
        arr = from_pairs(vec)
        if len(arr) != 1 << self.num_qubits:
            raise DimensionMismatch(
                f"vector length {len(arr)} != 2^{self.num_qubits} = {1 << self.num_qubits}"
            )
        if not np.all(np.isfinite(arr)):
            raise ValueError("amplitudes must be finite")
        self._vector = arr.copy()
        n2 = norm_squared(arr)
        if abs(n2 - 1.0) > self.config.normalization_warn_tol:
            log.warning("input state is not normalized (norm^2 = %.6f)", n2)

    def norm_squared(self) -> float:
        return norm_squared(self._vector)

    def normalized(self) -> "InputState":
        """Copy scaled to unit norm; an all-zero vector becomes |0…0⟩."""
        n2 = self.norm_squared()
        if n2 < 1e-12:
            return InputState(self.num_qubits, config=self.config)
        return InputState(self.num_qubits, scale(self._vector, 1.0 / math.sqrt(n2)), config=self.config)
