"""The lesson circuits the designer ships, checked against their closed forms."""
import numpy as np
import pytest

from qlab_engine.circuit.model import InputState
from qlab_engine.runner.engine import run, simulate
from qlab_engine.runner.sampler import marginal_counts, qubit_probability
from qlab_engine.tests.fixtures.circuits import (
    hadamard_test, phase_estimation, qft_3q, swap_test,
)


def _p0_measured(trace, qubit=0):
    """P(qubit=0) recorded by the last probability-mode measurement."""
    for snap in reversed(trace):
        if qubit in snap.measurements:
            return snap.measurements[qubit][0]
    raise AssertionError("no measurement recorded")


@pytest.mark.parametrize("theta", [0.0, 0.125, 0.25, 0.5, 0.75, 1.0])
def test_hadamard_test_probability(theta):
    p0 = _p0_measured(simulate(hadamard_test(theta), mode="probability"))
    assert p0 == pytest.approx((1 + np.cos(np.pi * theta)) / 2, abs=1e-12)


def test_hadamard_test_extremes():
    assert abs(_p0_measured(simulate(hadamard_test(0.0))) - 1.0) < 1e-12
    assert abs(_p0_measured(simulate(hadamard_test(1.0)))) < 1e-12


def test_hadamard_test_constructive_sampling():
    result = run(hadamard_test(0.0), shots=1024, seed=0)
    assert result.counts == {"00": 1024}


def test_hadamard_test_balanced_sampling():
    result = run(hadamard_test(0.5), shots=4000, seed=2)
    q0 = marginal_counts(result.counts, [0])
    assert abs(q0["0"] / 4000 - 0.5) < 0.05


@pytest.mark.parametrize("presets, expected", [
    (["|0⟩", "|0⟩", "|0⟩"], 1.0),   # identical states
    (["|0⟩", "|0⟩", "|1⟩"], 0.5),   # orthogonal
    (["|0⟩", "|+⟩", "|0⟩"], 0.75),  # |<+|0>|^2 = 1/2
])
def test_swap_test_overlap(presets, expected):
    trace = simulate(swap_test(), InputState.from_presets(presets))
    assert _p0_measured(trace) == pytest.approx(expected, abs=1e-12)


@pytest.mark.parametrize("presets", [["|0⟩"] * 3, ["|1⟩", "|0⟩", "|0⟩"]])
def test_qft_of_basis_state_is_uniform(presets):
    trace = simulate(qft_3q(), InputState.from_presets(presets))
    final = trace[-1].vector
    np.testing.assert_allclose(np.abs(final) ** 2, np.full(8, 1 / 8), atol=1e-12)
    # three measurements share the last column
    assert sorted(trace[-1].measurements) == [0, 1, 2]


def test_qft_zero_input_matches_hadamard_wall():
    final = simulate(qft_3q())[-1].vector
    np.testing.assert_allclose(final, np.full(8, 1 / np.sqrt(8)), atol=1e-12)


def test_phase_estimation_zero_phase():
    result = run(phase_estimation(0.0), shots=256, seed=4)
    # readout register q0 q1 reads 00, the eigenstate qubit q2 stays |1>
    assert result.counts == {"100": 256}


@pytest.mark.parametrize("theta", [0.25, 0.5, 0.75])
def test_phase_estimation_keeps_eigenstate(theta):
    final = simulate(phase_estimation(theta), mode="shots")[-1].vector
    assert qubit_probability(final, 2) == pytest.approx((0.0, 1.0), abs=1e-12)
