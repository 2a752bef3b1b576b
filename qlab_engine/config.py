"""
Configuration for the statevector engine.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class EngineConfig:
    """Tunables shared by the engine, sampler and input-state helpers."""

    # Tolerances
    norm_atol: float = 1e-9  # sampler rescale warning threshold
    normalization_warn_tol: float = 0.01  # |norm^2 - 1| above this is reported

    # Sampling
    default_shots: int = 1024

    # Dense vector limit: 2**max_qubits complex128 amplitudes
    max_qubits: int = 20

    # Measurement handling when simulate() is called without a mode
    default_mode: str = "probability"

    # Logging (applied by utils.logging_config.setup_logging)
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def max_dimension(self) -> int:
        """Largest amplitude-vector length the engine will allocate."""
        return 1 << self.max_qubits


# Default configuration instance
DEFAULT_CONFIG = EngineConfig()
