"""Canonical 2×2 gate matrices.

Convention: row/col 0 → target bit clear, row/col 1 → target bit set.
Controlled types reuse the matrix of their uncontrolled counterpart; the
control wires only gate which amplitude pairs the kernel touches.

Rotation phase convention (fixed, used by RZ and CRZ alike):
    RZ(θ) = diag(e^{-iθ/2}, e^{+iθ/2})
so the |1⟩ branch gains e^{iθ} relative to |0⟩, and the controlled form
carries the e^{-iθ/2} phase onto the control-satisfied |0⟩ branch.
P(φ) = diag(1, e^{iφ}) leaves the |0⟩ branch untouched.
"""
from __future__ import annotations

import numpy as np

_S2 = 1.0 / np.sqrt(2.0)


def _mat(*rows):
    return np.array(rows, dtype=np.complex128)


# ── fixed ───────────────────────────────────────────────────────────
def H():
    return _mat([_S2, _S2], [_S2, -_S2])

def X():
    return _mat([0, 1], [1, 0])

def Y():
    return _mat([0, -1j], [1j, 0])

def Z():
    return _mat([1, 0], [0, -1])


# ── parameterised ──────────────────────────────────────────────────
def RZ(theta: float):
    return _mat([np.exp(-0.5j * theta), 0], [0, np.exp(0.5j * theta)])

def P(phi: float):
    return _mat([1, 0], [0, np.exp(1j * phi)])


# ── dispatcher ──────────────────────────────────────────────────────
_FIXED = {"X": X, "Y": Y, "Z": Z, "H": H, "CX": X, "CZ": Z}
_PARAM = {"RZ": RZ, "CRZ": RZ, "CP": P}


def gate_matrix(name: str, angle: float | None = None) -> np.ndarray:
    """Return the 2×2 matrix applied to the target of a single-target gate.

    ``name`` is the gate type name; a ``GateType`` member is read by value.
    """
    name = getattr(name, "value", name)
    if name in _FIXED:
        return _FIXED[name]()
    if name in _PARAM:
        if angle is None:
            raise ValueError(f"{name} needs an angle")
        return _PARAM[name](float(angle))
    raise ValueError(f"unknown gate {name}")
