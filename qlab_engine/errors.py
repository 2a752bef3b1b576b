"""Error taxonomy.

Every failure is a ``ValueError`` subtype so callers that only care about
"bad input" can catch one class.
"""
from __future__ import annotations


class QLabError(ValueError):
    """Base class for all engine errors."""


# ── raised while building gates ─────────────────────────────────────
class InvalidQubitIndex(QLabError):
    pass


class QubitConflict(QLabError):
    pass


class MissingParameter(QLabError):
    pass


class GateShapeError(QLabError):
    """Target count or control wiring does not fit the gate type."""


# ── raised by simulate / sample ─────────────────────────────────────
class UnknownGateType(QLabError):
    pass


class DimensionMismatch(QLabError):
    pass


class ColumnConflict(QLabError):
    """Two gates in one column touch the same qubit."""


# ── description parsing ─────────────────────────────────────────────
class CircuitFormatError(QLabError):
    pass
