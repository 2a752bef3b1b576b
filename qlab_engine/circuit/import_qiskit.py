"""Convert a Qiskit QuantumCircuit to our Circuit (one gate per column)."""
from __future__ import annotations

from qlab_engine.circuit.model import Circuit

SUPPORTED_BASIS = ["h", "x", "y", "z", "rz", "cx", "cz", "cp", "crz", "swap", "cswap"]

# name → (gate type, number of leading control qubits)
_QISKIT_MAP = {
    "h": ("H", 0), "x": ("X", 0), "y": ("Y", 0), "z": ("Z", 0),
    "rz": ("RZ", 0),
    "cx": ("CX", 1), "cnot": ("CX", 1),
    "cz": ("CZ", 1),
    "cp": ("CP", 1),
    "crz": ("CRZ", 1),
    "swap": ("SWAP", 0),
    "cswap": ("CSWAP", 1),
    "measure": ("M", 0),
}

_PARAM_NAME = {"rz": "theta", "crz": "theta", "cp": "phi"}

_SKIP = frozenset({"barrier", "delay", "id"})


def qiskit_to_circuit(qc, include_measurements: bool = True) -> Circuit:
    """Convert a Qiskit QuantumCircuit (already transpiled to SUPPORTED_BASIS)."""
    circuit = Circuit(qc.num_qubits)
    col = 0
    for inst in qc.data:
        op = inst.operation
        name = op.name.lower()
        if name in _SKIP or (name == "measure" and not include_measurements):
            continue
        if name not in _QISKIT_MAP:
            raise ValueError(
                f"Unsupported gate '{name}'. Transpile to basis {SUPPORTED_BASIS} first."
            )
        gate_type, n_ctrl = _QISKIT_MAP[name]
        qubits = [qc.find_bit(q).index for q in inst.qubits]
        params = {}
        if name in _PARAM_NAME:
            params[_PARAM_NAME[name]] = float(op.params[0])
        circuit.place(gate_type, qubits[n_ctrl:], qubits[:n_ctrl], params, col)
        col += 1
    return circuit
