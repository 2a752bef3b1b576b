"""Gate construction, circuit bookkeeping and input states."""
import logging

import numpy as np
import pytest

from qlab_engine.circuit.model import Circuit, Gate, InputState
from qlab_engine.circuit.registry import GateType
from qlab_engine.errors import (
    CircuitFormatError, DimensionMismatch, GateShapeError, InvalidQubitIndex,
    MissingParameter, QubitConflict, UnknownGateType,
)

S2 = 1.0 / np.sqrt(2.0)


# ── Gate ─────────────────────────────────────────────────────────────

def test_create_rotation_carries_angle():
    g = Gate.create("CRZ", [1], [0], {"theta": 0.5}, col=2, num_qubits=2)
    assert g.type is GateType.CRZ
    assert g.angle == 0.5
    assert g.params == {"theta": 0.5}
    assert g.controls == frozenset({0})
    assert g.id is None


def test_fixed_gate_has_no_params():
    g = Gate.create("H", [0], params={})
    assert g.angle is None
    assert g.params == {}


def test_target_out_of_range():
    with pytest.raises(InvalidQubitIndex, match="out of range"):
        Gate.create("X", [2], num_qubits=2)


def test_control_out_of_range():
    with pytest.raises(InvalidQubitIndex):
        Gate.create("CX", [0], [5], num_qubits=3)


def test_negative_index_without_qubit_count():
    with pytest.raises(InvalidQubitIndex):
        Gate.create("X", [-1])


def test_target_control_overlap():
    with pytest.raises(QubitConflict, match="both target and control"):
        Gate.create("CX", [1], [1], num_qubits=2)


def test_repeated_swap_target():
    with pytest.raises(QubitConflict):
        Gate.create("SWAP", [1, 1], num_qubits=2)


@pytest.mark.parametrize("gate_type, key", [("RZ", "theta"), ("CRZ", "theta"), ("CP", "phi")])
def test_missing_parameter(gate_type, key):
    controls = [] if gate_type == "RZ" else [0]
    with pytest.raises(MissingParameter, match=key):
        Gate.create(gate_type, [1], controls, {}, num_qubits=2)


def test_wrong_param_name_is_missing():
    with pytest.raises(MissingParameter):
        Gate.create("CP", [1], [0], {"theta": 1.0}, num_qubits=2)


def test_wrong_target_count():
    with pytest.raises(GateShapeError, match="needs 2"):
        Gate.create("SWAP", [0], num_qubits=2)


def test_measure_cannot_be_controlled():
    with pytest.raises(GateShapeError, match="cannot take controls"):
        Gate.create("M", [0], [1], num_qubits=2)


def test_unexpected_params():
    with pytest.raises(GateShapeError, match="unexpected"):
        Gate.create("H", [0], params={"theta": 1.0})


def test_non_finite_angle():
    with pytest.raises(GateShapeError, match="finite"):
        Gate.create("RZ", [0], params={"theta": float("nan")})


def test_negative_column_is_a_format_error():
    with pytest.raises(CircuitFormatError, match="column -1"):
        Gate.create("H", [0], col=-1)
    with pytest.raises(CircuitFormatError):
        Circuit(1).place("X", [0], col=-2)


def test_unknown_type_at_construction():
    with pytest.raises(UnknownGateType):
        Gate.create("FOO", [0])


def test_extra_controls_allowed():
    """The editor may attach more control wires to a controlled gate."""
    g = Gate.create("CX", [2], [0, 1], num_qubits=3)
    assert g.controls == frozenset({0, 1})


# ── Circuit ──────────────────────────────────────────────────────────

def test_add_gate_assigns_monotonic_ids():
    c = Circuit(2)
    a = c.place("H", [0], col=0)
    b = c.place("X", [1], col=0)
    assert (a.id, b.id) == (0, 1)
    c.remove_gate(a.id)
    d = c.place("Z", [0], col=1)
    assert d.id == 2
    assert [g.id for g in c.gates] == [1, 2]


def test_num_cols_grows():
    c = Circuit(2, num_cols=1)
    c.place("H", [0], col=4)
    assert c.num_cols == 5
    c.place("H", [1], col=1)
    assert c.num_cols == 5


def test_add_gate_checks_circuit_width():
    c = Circuit(2)
    with pytest.raises(InvalidQubitIndex):
        c.add_gate(Gate.create("X", [3]))


def test_remove_absent_is_noop():
    c = Circuit(1)
    c.place("X", [0])
    c.remove_gate(99)
    assert len(c) == 1


def test_get_gates_at_col_keeps_insertion_order():
    c = Circuit(3)
    c.place("X", [2], col=1)
    c.place("H", [0], col=0)
    c.place("Z", [0], col=1)
    assert [g.type for g in c.get_gates_at_col(1)] == [GateType.X, GateType.Z]
    assert c.get_gates_at_col(7) == []
    assert c.active_columns() == [0, 1]


def test_column_conflicts():
    c = Circuit(3)
    c.place("CX", [1], [0], col=0)
    c.place("H", [2], col=0)
    assert c.column_conflicts(0) == set()
    c.place("X", [1], col=0)
    assert c.column_conflicts(0) == {1}


def test_copy_is_independent():
    c = Circuit(2)
    c.place("H", [0])
    other = c.copy()
    other.place("X", [1], col=3)
    assert len(c) == 1 and c.num_cols == 1
    assert len(other) == 2 and other.num_cols == 4


def test_bad_circuit_size():
    with pytest.raises(ValueError):
        Circuit(0)


# ── InputState ───────────────────────────────────────────────────────

def test_default_is_all_zero_basis_state():
    s = InputState(3)
    v = s.to_vector()
    assert v.shape == (8,)
    assert v[0] == 1 and np.count_nonzero(v) == 1


def test_to_vector_returns_copy():
    s = InputState(1)
    v = s.to_vector()
    v[0] = 0
    assert s.to_vector()[0] == 1


def test_set_vector_from_pairs():
    s = InputState(1)
    s.set_vector([(0.6, 0.0), (0.0, 0.8)])
    np.testing.assert_allclose(s.to_vector(), [0.6, 0.8j])
    assert s.to_pairs() == [(0.6, 0.0), (0.0, 0.8)]


def test_set_vector_wrong_length():
    with pytest.raises(DimensionMismatch):
        InputState(2).set_vector([1, 0])


def test_set_vector_keeps_unnormalized_and_warns(caplog):
    s = InputState(1)
    with caplog.at_level(logging.WARNING, logger="qlab_engine"):
        s.set_vector([1, 1])
    np.testing.assert_array_equal(s.to_vector(), [1, 1])
    assert s.norm_squared() == pytest.approx(2.0)
    assert "not normalized" in caplog.text


def test_normalized():
    s = InputState(1, [1, 1]).normalized()
    np.testing.assert_allclose(s.to_vector(), [S2, S2])
    zero = InputState(1, [0, 0]).normalized()
    np.testing.assert_array_equal(zero.to_vector(), [1, 0])


def test_presets_qubit_zero_first():
    s = InputState.from_presets(["|1⟩", "|0⟩", "|0⟩"])
    assert s.num_qubits == 3
    v = s.to_vector()
    assert v[1] == 1 and np.count_nonzero(v) == 1


def test_presets_superposition():
    v = InputState.from_presets(["|0⟩", "|+⟩", "|0⟩"]).to_vector()
    np.testing.assert_allclose(v, [S2, 0, S2, 0, 0, 0, 0, 0], atol=1e-15)
    v = InputState.from_presets(["-"]).to_vector()
    np.testing.assert_allclose(v, [S2, -S2])


def test_unknown_preset():
    with pytest.raises(ValueError, match="unknown qubit preset"):
        InputState.from_presets(["|i⟩"])
