"""Shot sampling from a final amplitude vector.

Draws are inverse-CDF lookups of uniform variates from a numpy Generator,
so a fixed seed always reproduces the same histogram.

Bitstring keys are fixed-width (n characters) with qubit 0 rightmost:
index 1 on 3 qubits → "001".
"""
from __future__ import annotations

import logging
from typing import Iterable, Union

import numpy as np

from qlab_engine.config import DEFAULT_CONFIG, EngineConfig
from qlab_engine.errors import DimensionMismatch
from qlab_engine.kernel.complex_math import from_pairs, magnitude_squared
from qlab_engine.kernel.statevector import norm_squared, qubit_probabilities

log = logging.getLogger(__name__)

SeedLike = Union[int, np.random.Generator, None]


def _num_qubits(N: int) -> int:
    if N < 2 or N & (N - 1):
        raise DimensionMismatch(f"vector length {N} is not a power of two >= 2")
    return N.bit_length() - 1


def format_bitstring(index: int, num_qubits: int) -> str:
    return format(index, f"0{num_qubits}b")


def _as_vector(vector) -> np.ndarray:
    """Complex 1-D vector from amplitudes or (re, im) pairs, list or ndarray.

    ``from_pairs`` rejects every other shape with ValueError.
    """
    return from_pairs(vector)


def probabilities(vector) -> np.ndarray:
    """|a_i|^2 for every basis index."""
    return magnitude_squared(_as_vector(vector))


def qubit_probability(vector, qubit: int) -> tuple[float, float]:
    """(P(q=0), P(q=1)) of a single qubit, normalised by the vector's total."""
    psi = _as_vector(vector)
    n = _num_qubits(len(psi))
    if not 0 <= qubit < n:
        raise ValueError(f"qubit {qubit} out of range [0, {n})")
    total = norm_squared(psi)
    if total <= 0:
        raise ValueError("cannot take probabilities of an all-zero vector")
    p0 = qubit_probabilities(psi, qubit)[0] / total
    return p0, 1.0 - p0


def sample(
    vector,
    shots: int,
    seed: SeedLike = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> dict[str, int]:
    """Histogram of ``shots`` measurements of every qubit: {bitstring: count}."""
    if isinstance(shots, bool) or not isinstance(shots, (int, np.integer)) or shots < 0:
        raise ValueError(f"shots must be a non-negative int, got {shots!r}")
    p = probabilities(vector)
    n = _num_qubits(len(p))
    if shots == 0:
        return {}

    cdf = np.cumsum(p)
    total = cdf[-1]
    if not total > 0:
        raise ValueError("cannot sample from an all-zero vector")
    if abs(total - 1.0) > config.norm_atol:
        log.warning("sampling from an unnormalized vector (norm^2 = %.6f); rescaling", total)
    cdf = cdf / total

    rng = seed if isinstance(seed, np.random.Generator) else np.random.default_rng(seed)
    draws = rng.random(int(shots))
    picks = np.searchsorted(cdf, draws, side="right")
    # cdf[-1] is exactly 1.0 and draws < 1.0, so picks < len(p)
    hist = np.bincount(picks, minlength=len(p))

    return {
        format_bitstring(i, n): int(c)
        for i, c in enumerate(hist)
        if c > 0
    }


def marginal_counts(counts: dict[str, int], qubits: Iterable[int]) -> dict[str, int]:
    """Re-key a histogram onto ``qubits``.

    The result uses the same ordering rule: the lowest listed qubit is the
    rightmost character.  ``marginal_counts({"01": 3, "11": 5}, [0])`` → ``{"1": 8}``.
    """
    keep = sorted(set(qubits))
    if not keep:
        raise ValueError("need at least one qubit")
    out: dict[str, int] = {}
    for bits, c in counts.items():
        n = len(bits)
        if keep[-1] >= n or keep[0] < 0:
            raise ValueError(f"qubits {keep} out of range for {n}-bit key {bits!r}")
        key = "".join(bits[n - 1 - q] for q in reversed(keep))
        out[key] = out.get(key, 0) + c
    return out
