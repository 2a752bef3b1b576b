"""Scalar complex arithmetic.

Values are Python ``complex`` or numpy complex scalars/arrays; every function
also works element-wise on ndarrays.  The (re, im) pair form only appears at
the boundary (``to_pairs`` / ``from_pairs``).
"""
from __future__ import annotations

from typing import Iterable

import numpy as np


def add(a, b):
    return a + b


def multiply(a, b):
    """(a.re*b.re - a.im*b.im) + i(a.re*b.im + a.im*b.re)."""
    return a * b


def scale(a, k: float):
    return a * k


def magnitude_squared(a):
    return a.real * a.real + a.imag * a.imag


def magnitude(a):
    return np.sqrt(magnitude_squared(a))


# ── boundary conversion ─────────────────────────────────────────────
def to_pairs(vec) -> list[tuple[float, float]]:
    """complex vector → [(re, im), ...]."""
    arr = np.asarray(vec, dtype=np.complex128)
    return [(float(z.real), float(z.imag)) for z in arr]


def from_pairs(values: Iterable) -> np.ndarray:
    """[(re, im), ...] or complex scalars → complex128 ndarray."""
    arr = np.asarray(values if isinstance(values, np.ndarray) else list(values))
    if arr.ndim == 2 and arr.shape[1] == 2 and not np.iscomplexobj(arr):
        return arr[:, 0].astype(np.float64) + 1j * arr[:, 1].astype(np.float64)
    if arr.ndim != 1:
        raise ValueError(f"expected a 1-D vector or (re, im) pairs, got shape {arr.shape}")
    return arr.astype(np.complex128)
