"""Dense statevector kernels: vectorised numpy, one gate at a time.

Operate in-place on a 1-D complex128 array of length 2^n.
Endianness: little-endian (qubit q ↔ bit q of the index).
"""
from __future__ import annotations

from typing import Iterable

import numpy as np


def control_mask(controls: Iterable[int]) -> int:
    mask = 0
    for c in controls:
        mask |= 1 << c
    return mask


def _pair_bases(N: int, target: int, cmask: int) -> np.ndarray:
    """Indices with the target bit clear and every control bit set."""
    idx = np.arange(N)
    keep = (idx & (1 << target)) == 0
    if cmask:
        keep &= (idx & cmask) == cmask
    return idx[keep]


def apply_1q(psi: np.ndarray, target: int, U: np.ndarray, controls: Iterable[int] = ()) -> None:
    i0 = _pair_bases(len(psi), target, control_mask(controls))
    i1 = i0 | (1 << target)
    a, b = psi[i0].copy(), psi[i1].copy()
    psi[i0] = U[0, 0] * a + U[0, 1] * b
    psi[i1] = U[1, 0] * a + U[1, 1] * b


def apply_swap(psi: np.ndarray, qa: int, qb: int, controls: Iterable[int] = ()) -> None:
    """Exchange the |..1_a..0_b..⟩ and |..0_a..1_b..⟩ amplitudes."""
    ba, bb = 1 << qa, 1 << qb
    cmask = control_mask(controls)
    idx = np.arange(len(psi))
    keep = ((idx & ba) != 0) & ((idx & bb) == 0)
    if cmask:
        keep &= (idx & cmask) == cmask
    i = idx[keep]
    j = i ^ ba ^ bb
    psi[i], psi[j] = psi[j].copy(), psi[i].copy()


def qubit_probabilities(psi: np.ndarray, qubit: int) -> tuple[float, float]:
    """(P(q=0), P(q=1)) without collapsing the state."""
    idx = np.arange(len(psi))
    probs = psi.real ** 2 + psi.imag ** 2
    p0 = float(probs[(idx & (1 << qubit)) == 0].sum())
    return p0, 1.0 - p0


def norm_squared(psi) -> float:
    arr = np.asarray(psi, dtype=np.complex128)
    return float(np.sum(arr.real ** 2 + arr.imag ** 2))
